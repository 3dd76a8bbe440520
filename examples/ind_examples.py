"""
Examples of approximate inclusion dependency tests

Demonstrates sketch-backed IND discovery over small in-memory tables
"""
from indsketch import create_tester
from indsketch.core.fingerprint import hash_row
from indsketch.core.monoids import SketchMonoid
from indsketch.core.processor import TableProcessor
from indsketch.models.combinations import ColumnCombination


def example_1_foreign_key():
    """
    Example 1: Is orders.customer_id a foreign key into customers.id?

    Use case: Find candidate foreign keys without materializing value sets
    """
    print("=" * 60)
    print("Example 1: Foreign Key Candidate")
    print("=" * 60)

    customers = [[customer_id, f"customer_{customer_id}"] for customer_id in range(1, 2001)]
    orders = [[order_id, (order_id * 7) % 2000 + 1] for order_id in range(1, 10001)]

    customer_id = ColumnCombination(table=0, columns=[0])
    order_customer = ColumnCombination(table=1, columns=[1])

    processor = TableProcessor(create_tester(), sample_size=200)
    tester = processor.process({0: customers, 1: orders}, [customer_id, order_customer])

    print(f"  orders.customer_id ⊆ customers.id: {tester.is_included_in(order_customer, customer_id)}")
    print(f"  customers.id ⊆ orders.customer_id: {tester.is_included_in(customer_id, order_customer)}")
    print(f"  Estimated distinct customer ids: {tester.cached_cardinality(customer_id)}")
    print()


def example_2_nulls_and_order():
    """
    Example 2: NULLs and column order

    Use case: Composite keys with missing values
    """
    print("=" * 60)
    print("Example 2: Composite Keys with NULLs")
    print("=" * 60)

    addresses = [["Berlin", "10115"], ["Paris", "75001"], ["Rome", None]]
    shipments = [["Berlin", "10115"], ["Rome", None], [None, "75001"]]

    city_zip = ColumnCombination(table=0, columns=[0, 1])
    ship_city_zip = ColumnCombination(table=1, columns=[0, 1])
    ship_zip_city = ColumnCombination(table=1, columns=[1, 0])

    processor = TableProcessor(create_tester(), sample_size=10)
    tester = processor.process(
        {0: addresses, 1: shipments}, [city_zip, ship_city_zip, ship_zip_city]
    )

    print(f"  shipments(city, zip) ⊆ addresses(city, zip): {tester.is_included_in(ship_city_zip, city_zip)}")
    print(f"  shipments(zip, city) ⊆ addresses(city, zip): {tester.is_included_in(ship_zip_city, city_zip)}")
    print()


def example_3_merge_shards():
    """
    Example 3: Compose sketches built over table shards
    """
    print("=" * 60)
    print("Example 3: Shard Sketch Composition")
    print("=" * 60)

    monoid = SketchMonoid(error=0.01)
    shards = []
    for shard in range(4):
        sketch = monoid.zero()
        for user_id in range(shard * 500, shard * 500 + 800):
            sketch.offer_hashed(hash_row([f"user_{user_id}"])[0])
        shards.append(sketch)
        print(f"  Shard {shard}: {sketch.cardinality()} distinct users")

    combined = monoid.sum_shards(shards)
    print(f"\n  All shards: {combined.cardinality()} distinct users (deduplicated)")
    print()


if __name__ == "__main__":
    example_1_foreign_key()
    example_2_nulls_and_order()
    example_3_merge_shards()

    print("=" * 60)
    print("All examples completed!")
    print("=" * 60)
