"""
Sample-based inverted index for inclusion tests

Follows the inverted-index IND test of De Marchi et al.: every fingerprint
drawn from the table samples maps to the set of column combinations that
produced it. A combination A can only be included in B if B appears next to
A under every sampled fingerprint of A.

Combination sets are stored as int bitsets keyed by combination handle.
"""
from typing import Dict, Iterable, Mapping, Optional, Set, Tuple
import logging

from indsketch.core.sketches.hyperloglog import CardinalitySketch
from indsketch.models.combinations import CombinationSummary

logger = logging.getLogger(__name__)


def _iter_bits(bits: int) -> Iterable[int]:
    """Yield the positions of the set bits"""
    while bits:
        low = bits & -bits
        yield low.bit_length() - 1
        bits ^= low


class SampledInvertedIndex:
    """
    Inverted index over sampled fingerprints.

    Small combinations also keep their fingerprints that the sample does not
    cover, up to the promotion threshold. Everything else falls through to
    the caller's cardinality sketch.
    """

    def __init__(self, promotion_threshold: int = 0):
        """
        Initialize SampledInvertedIndex

        Args:
            promotion_threshold: Uncovered distinct fingerprints a small
                combination may hold before update() rejects them
        """
        if promotion_threshold < 0:
            raise ValueError("Promotion threshold cannot be negative")

        self.promotion_threshold = promotion_threshold
        self.max_index = -1
        self._combinations_by_fingerprint: Dict[int, int] = {}
        self._uncovered: Dict[int, Set[int]] = {}
        self._references: Optional[Dict[int, int]] = None
        self._big: Dict[int, CardinalitySketch] = {}

    def set_max_index(self, max_index: int) -> None:
        """Highest combination handle in use"""
        self.max_index = max_index

    def initialize(self, sampled: Iterable[Tuple[int, int]]) -> None:
        """
        Seed the index from the table samples

        Args:
            sampled: (handle, fingerprint) pairs for every non-NULL
                fingerprint of every sampled row
        """
        self._combinations_by_fingerprint.clear()
        self._uncovered.clear()
        self._references = None
        self._big.clear()

        for handle, fingerprint in sampled:
            self._check_handle(handle)
            combinations = self._combinations_by_fingerprint.get(fingerprint, 0)
            self._combinations_by_fingerprint[fingerprint] = combinations | (1 << handle)

        logger.debug(f"Seeded inverted index with {len(self)} sampled fingerprints")

    def _check_handle(self, handle: int) -> None:
        if not 0 <= handle <= self.max_index:
            raise IndexError(f"Combination handle {handle} out of range [0, {self.max_index}]")

    def __len__(self) -> int:
        """Number of distinct sampled fingerprints"""
        return len(self._combinations_by_fingerprint)

    def covers(self, fingerprint: int) -> bool:
        """True if the fingerprint was drawn in the sample"""
        return fingerprint in self._combinations_by_fingerprint

    def update(self, handle: int, summary: CombinationSummary, fingerprint: int) -> bool:
        """
        Record a streamed fingerprint if the index can hold it

        Args:
            handle: Combination handle
            summary: Current summary of the combination
            fingerprint: Non-NULL fingerprint of the streamed row

        Returns:
            True if the index recorded it; False if the caller must offer
            it to the combination's sketch instead
        """
        combinations = self._combinations_by_fingerprint.get(fingerprint)
        if combinations is not None:
            self._combinations_by_fingerprint[fingerprint] = combinations | (1 << handle)
            return True

        if summary.is_big:
            return False

        uncovered = self._uncovered.setdefault(handle, set())
        if fingerprint in uncovered:
            return True
        if len(uncovered) < self.promotion_threshold:
            uncovered.add(fingerprint)
            return True
        return False

    def uncovered(self, handle: int) -> Set[int]:
        """Uncovered fingerprints held for a small combination"""
        return self._uncovered.get(handle, set())

    def release_uncovered(self, handle: int) -> Set[int]:
        """Hand over and forget a combination's uncovered fingerprints (on promotion)"""
        return self._uncovered.pop(handle, set())

    def finalize_insertion(self, summaries_by_table: Mapping[int, Mapping[int, CombinationSummary]]) -> None:
        """
        Compact the fingerprint sets into per-combination references

        After this, references[a] holds every combination that shares all of
        a's sampled fingerprints.

        Args:
            summaries_by_table: table id -> handle -> summary
        """
        everything = (1 << (self.max_index + 1)) - 1
        references = {}
        big = {}
        for summaries in summaries_by_table.values():
            for handle, summary in summaries.items():
                references[handle] = everything
                if summary.is_big:
                    big[handle] = summary.sketch

        for combinations in self._combinations_by_fingerprint.values():
            for handle in _iter_bits(combinations):
                if handle in references:
                    references[handle] &= combinations

        self._references = references
        self._big = big
        logger.info(
            f"Finalized inverted index: {len(references)} combinations, "
            f"{len(big)} sketch-backed, {len(self)} sampled fingerprints"
        )

    def is_included_in(self, a: int, b: int) -> bool:
        """
        Sample-based inclusion test for a ⊆ b

        Never misses a counterexample present in the sample; may report
        inclusion when the sample is too small to witness one.
        """
        if self._references is None:
            raise RuntimeError("Inverted index has not been finalized")

        references = self._references.get(a)
        if references is None or b not in self._references:
            return False
        if not (references >> b) & 1:
            return False

        a_sketch = self._big.get(a)
        b_sketch = self._big.get(b)
        if a_sketch is not None:
            # More uncovered values than b could ever hold
            return b_sketch is not None

        uncovered = self.uncovered(a)
        if b_sketch is None:
            return uncovered <= self.uncovered(b)
        return all(b_sketch.might_contain(fingerprint) for fingerprint in uncovered)
