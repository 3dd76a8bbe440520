"""
Tests for sketch composition
"""
import random

import pytest
from indsketch.core.monoids import SketchMonoid
from indsketch.core.tester import registers_dominated


class TestSketchMonoid:
    """Test CardinalitySketch Monoid"""

    def test_zero_element(self):
        """Test identity element"""
        monoid = SketchMonoid(error=0.01)
        zero = monoid.zero()

        assert zero.cardinality() == 0

    def test_identity(self):
        """plus(zero, x) has the registers of x"""
        monoid = SketchMonoid(error=0.05)
        sketch = monoid.zero()
        for value in range(100):
            sketch.offer_hashed(value * 0x9E3779B97F4A7C15)

        merged = monoid.plus(monoid.zero(), sketch)

        assert list(merged.registers) == list(sketch.registers)

    def test_sum_shards(self):
        """Shard sketches of one combination add up to the whole"""
        rnd = random.Random(21)
        monoid = SketchMonoid(error=0.01)
        fingerprints = [rnd.getrandbits(64) for _ in range(3000)]

        shards = [monoid.zero() for _ in range(3)]
        for i, fingerprint in enumerate(fingerprints):
            shards[i % 3].offer_hashed(fingerprint)

        combined = monoid.sum_shards(shards)

        assert abs(combined.cardinality() - 3000) <= 120
        assert all(registers_dominated(shard, combined) for shard in shards)

    def test_sum_option(self):
        """None entries are skipped"""
        monoid = SketchMonoid(error=0.05)
        sketch = monoid.zero()
        sketch.offer_hashed(12345)

        assert monoid.sum_option([None, None]) is None
        assert monoid.sum_option([None, sketch]).cardinality() == 1

    def test_size_mismatch(self):
        """Sketches of different sizes cannot be combined"""
        with pytest.raises(ValueError):
            SketchMonoid(error=0.01).plus(SketchMonoid(error=0.1).zero(), SketchMonoid(error=0.01).zero())


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
