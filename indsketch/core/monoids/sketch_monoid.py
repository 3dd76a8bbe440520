"""
Cardinality sketch Monoid

Composes sketches built over table shards by independent testers. Merging
is bucket-wise max, so the union's registers dominate every input's.
"""
from typing import List

from indsketch.core.monoid import Monoid
from indsketch.core.sketches.hyperloglog import CardinalitySketch


class SketchMonoid(Monoid[CardinalitySketch]):
    """
    Monoid for CardinalitySketch

    Example usage:
        monoid = SketchMonoid(error=0.01)

        shard1 = monoid.zero()
        shard1.offer_hashed(fingerprint_a)

        shard2 = monoid.zero()
        shard2.offer_hashed(fingerprint_b)

        combined = monoid.plus(shard1, shard2)
    """

    def __init__(self, error: float = 0.01):
        """
        Initialize SketchMonoid

        Args:
            error: Target relative error of the sketches
        """
        self.error = error

    def zero(self) -> CardinalitySketch:
        """Identity element: empty sketch"""
        return CardinalitySketch(self.error)

    def plus(self, a: CardinalitySketch, b: CardinalitySketch) -> CardinalitySketch:
        """
        Combine two sketches

        Raises:
            ValueError: If the sketches have different register counts
        """
        return a + b

    def sum_shards(self, sketches: List[CardinalitySketch]) -> CardinalitySketch:
        """
        Merge the sketches of one combination built over different shards

        Args:
            sketches: Per-shard sketches

        Returns:
            Sketch of the whole combination
        """
        return self.sum(sketches)
