"""
Monoid abstractions inspired by Twitter Algebird, powered by algesnake

A Monoid is an algebraic structure with:
1. An identity element (zero)
2. An associative binary operation (plus)

Sketches built by independent tester instances (one per table shard) are
composed with monoids.
"""
from typing import List, Optional, TypeVar

from algesnake.abstract import Monoid as AlgesnakeMonoid

T = TypeVar('T')


class Monoid(AlgesnakeMonoid[T]):
    """
    Monoid interface on top of algesnake

    Laws that implementations must satisfy:
    1. Identity: plus(zero, x) == x and plus(x, zero) == x
    2. Associativity: plus(plus(a, b), c) == plus(a, plus(b, c))
    """

    def sum_option(self, items: List[Optional[T]]) -> Optional[T]:
        """
        Sum a list of optional elements, skipping None values

        Args:
            items: List of optional elements

        Returns:
            Combined result or None if all inputs are None
        """
        non_none = [item for item in items if item is not None]
        if not non_none:
            return None
        return self.sum(non_none)
