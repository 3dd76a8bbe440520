"""
Monoid implementations for composing sketches

Inspired by Twitter Algebird
"""
from indsketch.core.monoids.sketch_monoid import SketchMonoid

__all__ = [
    'SketchMonoid',
]
