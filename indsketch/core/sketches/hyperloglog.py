"""
HyperLogLog implementation for cardinality estimation
Distinct-count tracking over pre-hashed 64-bit fingerprints
"""
import math

from indsketch.core.sketches.register_set import REGISTER_MAX, RegisterSet

HASH_BITS = 64
HASH_MASK = (1 << HASH_BITS) - 1
TWO_POW_64 = float(1 << HASH_BITS)


def log2m_for_error(error: float) -> int:
    """
    Smallest precision p with 2^p >= (1.04 / error)^2, at least 4

    Never fewer than 16 registers (alpha is defined from m = 16 up), so
    errors above ~0.26 all get the 16-register sketch.

    Args:
        error: Target relative standard error (0 < error < 1)
    """
    if not 0 < error < 1:
        raise ValueError("Relative error must be between 0 and 1")

    needed = math.ceil((1.04 / error) ** 2)
    return max(4, (needed - 1).bit_length())


class CardinalitySketch:
    """
    HyperLogLog probabilistic data structure for cardinality estimation.

    Space: m registers of 5 bits, m = 2^p with p sized from the target error
    Error: ~1.04/sqrt(m)

    Use case: Count distinct fingerprints of a column combination without
    materializing its value set. Values arrive already hashed; the sketch
    never hashes again.
    """

    def __init__(self, error: float = 0.01):
        """
        Initialize CardinalitySketch

        Args:
            error: Target relative error; 0.01 gives 16384 registers
        """
        self.error = error
        self.log2m = log2m_for_error(error)
        self.m = 1 << self.log2m  # 2^log2m buckets
        self.registers = RegisterSet(self.m)
        self.alpha = self._get_alpha()

    def _get_alpha(self) -> float:
        """Get alpha constant for bias correction"""
        if self.m >= 128:
            return 0.7213 / (1 + 1.079 / self.m)
        elif self.m >= 64:
            return 0.709
        elif self.m >= 32:
            return 0.697
        else:
            return 0.673

    def offer_hashed(self, hash_value: int) -> bool:
        """
        Add an already hashed 64-bit value

        Args:
            hash_value: Unsigned 64-bit fingerprint

        Returns:
            True if a register changed
        """
        # Low log2m bits pick the bucket, rank = leading zeros of the rest + 1
        bucket, rank = self._locate(hash_value)
        return self.registers.set_if_greater(bucket, rank)

    def _locate(self, hash_value: int):
        hash_value &= HASH_MASK
        bucket = hash_value & (self.m - 1)
        w = hash_value >> self.log2m
        return bucket, (HASH_BITS - self.log2m) - w.bit_length() + 1

    def might_contain(self, hash_value: int) -> bool:
        """
        False only if hash_value was certainly never offered

        An offered value leaves its bucket at least at its own rank.
        """
        bucket, rank = self._locate(hash_value)
        return self.registers.get(bucket) >= min(rank, REGISTER_MAX)

    def cardinality(self) -> int:
        """
        Estimate the cardinality (distinct count)

        Returns:
            Estimated number of distinct fingerprints offered
        """
        total = 0.0
        zeros = 0
        for value in self.registers:
            total += math.ldexp(1.0, -value)
            if value == 0:
                zeros += 1

        # Calculate raw estimate
        raw_estimate = self.alpha * self.m * self.m / total

        if raw_estimate <= 2.5 * self.m and zeros != 0:
            # Small range correction (linear counting)
            return int(round(self.m * math.log(self.m / zeros)))

        if raw_estimate <= TWO_POW_64 / 30:
            # No correction needed
            return int(round(raw_estimate))

        # Large range correction
        return int(round(-TWO_POW_64 * math.log(1 - raw_estimate / TWO_POW_64)))

    def is_empty(self) -> bool:
        """True if nothing was ever offered"""
        return not any(self.registers.read_only_words())

    def merge(self, other: 'CardinalitySketch') -> 'CardinalitySketch':
        """
        Merge two sketches (union operation)

        Args:
            other: Another sketch with the same register count

        Returns:
            New sketch with merged registers
        """
        if self.m != other.m:
            raise ValueError(f"Cannot merge sketches with different sizes: {self.m} vs {other.m}")

        merged = CardinalitySketch(self.error)
        merged.registers = self.registers.merge(other.registers)
        return merged

    def __len__(self) -> int:
        """Return estimated cardinality"""
        return self.cardinality()

    def __add__(self, other: 'CardinalitySketch') -> 'CardinalitySketch':
        """Support + operator for merging"""
        return self.merge(other)

    def __repr__(self) -> str:
        return f"CardinalitySketch(error={self.error}, m={self.m})"

    def to_bytes(self) -> bytes:
        """Serialize to bytes for storage"""
        return self.registers.to_bytes()

    @classmethod
    def from_bytes(cls, data: bytes, error: float = 0.01) -> 'CardinalitySketch':
        """Deserialize from bytes"""
        sketch = cls(error)
        sketch.registers = RegisterSet.from_bytes(data, sketch.m)
        return sketch
