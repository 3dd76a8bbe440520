"""
Packed register storage for HyperLogLog sketches
Fixed-width saturating counters, several per machine word
"""
from array import array
from typing import Iterator, Optional

REGISTER_SIZE = 5  # bits per register
WORD_SIZE = 32  # bits per packed word
REGISTERS_PER_WORD = WORD_SIZE // REGISTER_SIZE
REGISTER_MAX = (1 << REGISTER_SIZE) - 1

# Bit offset of each register slot inside a word
REGISTER_SHIFTS = tuple(slot * REGISTER_SIZE for slot in range(REGISTERS_PER_WORD))


class RegisterSet:
    """
    Array of 5-bit saturating counters packed into 32-bit words.

    Six registers share one word; the top two bits of every word stay zero.
    Writes above REGISTER_MAX saturate instead of overflowing into the
    neighbouring register.

    Use case: HyperLogLog bucket maxima, compared word-by-word without
    unpacking into a scalar array.
    """

    def __init__(self, count: int, words: Optional[array] = None):
        """
        Initialize RegisterSet

        Args:
            count: Number of registers
            words: Optional packed words to adopt (must match count)
        """
        if count <= 0:
            raise ValueError("Register count must be positive")

        self.count = count
        size = self.word_count(count)
        if words is None:
            self._words = array("I", [0]) * size
        else:
            if len(words) != size:
                raise ValueError(f"Expected {size} words for {count} registers, got {len(words)}")
            self._words = array("I", words)

    @staticmethod
    def word_count(count: int) -> int:
        """Number of packed words needed for count registers"""
        return (count + REGISTERS_PER_WORD - 1) // REGISTERS_PER_WORD

    def _locate(self, position: int):
        if not 0 <= position < self.count:
            raise IndexError(f"Register {position} out of range [0, {self.count})")
        return position // REGISTERS_PER_WORD, (position % REGISTERS_PER_WORD) * REGISTER_SIZE

    def get(self, position: int) -> int:
        """Read the register at position"""
        word, shift = self._locate(position)
        return (self._words[word] >> shift) & REGISTER_MAX

    def set(self, position: int, value: int) -> None:
        """
        Write a register, saturating at REGISTER_MAX

        Args:
            position: Register index
            value: New value (clamped to REGISTER_MAX)
        """
        if value < 0:
            raise ValueError("Register values cannot be negative")

        word, shift = self._locate(position)
        value = min(value, REGISTER_MAX)
        cleared = self._words[word] & ~(REGISTER_MAX << shift)
        self._words[word] = cleared | (value << shift)

    def set_if_greater(self, position: int, value: int) -> bool:
        """
        Max-update a register

        Returns:
            True if the stored value changed
        """
        value = min(value, REGISTER_MAX)
        if value <= self.get(position):
            return False
        self.set(position, value)
        return True

    def read_only_words(self) -> memoryview:
        """Read-only view over the packed words (no copy)"""
        return memoryview(self._words).toreadonly()

    def __iter__(self) -> Iterator[int]:
        """Iterate register values in position order"""
        remaining = self.count
        for word in self._words:
            for shift in REGISTER_SHIFTS[:min(remaining, REGISTERS_PER_WORD)]:
                yield (word >> shift) & REGISTER_MAX
            remaining -= REGISTERS_PER_WORD

    def __len__(self) -> int:
        return self.count

    def __eq__(self, other) -> bool:
        if not isinstance(other, RegisterSet):
            return NotImplemented
        return self.count == other.count and self._words == other._words

    def merge(self, other: 'RegisterSet') -> 'RegisterSet':
        """
        Register-wise maximum of two sets (HyperLogLog union)

        Raises:
            ValueError: If the sets have different sizes
        """
        if self.count != other.count:
            raise ValueError("Cannot merge register sets of different sizes")

        merged = RegisterSet(self.count)
        for i, (a_word, b_word) in enumerate(zip(self._words, other._words)):
            if a_word == b_word:
                merged._words[i] = a_word
                continue
            word = 0
            for shift in REGISTER_SHIFTS:
                mask = REGISTER_MAX << shift
                word |= max(a_word & mask, b_word & mask)
            merged._words[i] = word
        return merged

    def copy(self) -> 'RegisterSet':
        return RegisterSet(self.count, self._words)

    def to_bytes(self) -> bytes:
        """Serialize packed words to bytes for storage"""
        return self._words.tobytes()

    @classmethod
    def from_bytes(cls, data: bytes, count: int) -> 'RegisterSet':
        """Deserialize from bytes"""
        words = array("I")
        words.frombytes(data)
        return cls(count, words)
