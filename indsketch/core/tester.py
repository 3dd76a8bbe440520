"""
Approximate inclusion dependency tester

Decides A ⊆ B for column combinations (possibly across tables) from a row
sample plus one streaming pass per table, mixing a sampled inverted index
with HyperLogLog sketches.

Lifecycle:
    register -> seed -> start_table / insert_row ... -> finalize -> is_included_in

Queries on combinations that are not tracked (never registered, or left out
of the latest registration) return False. That is a conservative default
for a pruning search, not a proof of non-inclusion.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
import logging

from indsketch.core.fingerprint import combine
from indsketch.core.inverted_index import SampledInvertedIndex
from indsketch.core.sketches.hyperloglog import CardinalitySketch, log2m_for_error
from indsketch.core.sketches.register_set import REGISTER_MAX, REGISTER_SHIFTS
from indsketch.models.combinations import (
    SMALL,
    BigSummary,
    ColumnCombination,
    CombinationSummary,
)

logger = logging.getLogger(__name__)


class LifecycleError(RuntimeError):
    """An operation was called out of lifecycle order"""


class TesterState(str, Enum):
    """Lifecycle states of an InclusionTester"""

    __test__ = False

    UNCONFIGURED = "unconfigured"
    REGISTERED = "registered"
    SEEDED = "seeded"
    INGESTING = "ingesting"
    FINALIZED = "finalized"


@dataclass(frozen=True)
class TableCursor:
    """
    Ingestion context for one table

    Returned by start_table() and passed to every insert_row() call. It goes
    stale as soon as another table is started or the tester is finalized.
    """

    table: int
    generation: int
    entries: Tuple[Tuple[int, Tuple[int, ...]], ...]  # (handle, columns)


def registers_dominated(a: CardinalitySketch, b: CardinalitySketch) -> bool:
    """
    True if every register of a is <= the same register of b

    One violating bucket proves a is not included in b. Walks the packed
    words of both sketches in lockstep.
    """
    if a.m != b.m:
        raise ValueError(f"Cannot compare sketches with different sizes: {a.m} vs {b.m}")

    for a_word, b_word in zip(a.registers.read_only_words(), b.registers.read_only_words()):
        if a_word == b_word:
            continue
        for shift in REGISTER_SHIFTS:
            mask = REGISTER_MAX << shift
            if a_word & mask > b_word & mask:
                return False
    return True


class InclusionTester:
    """
    IND test that combines HyperLogLog sketches with a sample-based
    inverted index.

    Each tracked combination starts small (all evidence in the inverted
    index) and is promoted to a sketch-backed summary once it sees more
    distinct fingerprints outside the sample than the promotion threshold.
    Promotion never reverts.

    Not thread-safe while ingesting. After finalize() the tester is
    read-only and queries have no side effects.
    """

    def __init__(self, error: float = 0.01, promotion_threshold: int = 0):
        """
        Initialize InclusionTester

        Args:
            error: Target relative error of every cardinality sketch
            promotion_threshold: Distinct fingerprints outside the sample a
                combination may see before it gets a sketch
        """
        log2m_for_error(error)
        if promotion_threshold < 0:
            raise ValueError("Promotion threshold cannot be negative")

        self.error = error
        self.promotion_threshold = promotion_threshold
        self.state = TesterState.UNCONFIGURED
        self._reset()

    @classmethod
    def from_settings(cls, settings) -> 'InclusionTester':
        """Build a tester from application settings"""
        return cls(error=settings.HLL_ERROR_RATE, promotion_threshold=settings.PROMOTION_THRESHOLD)

    def _reset(self) -> None:
        self._combinations: List[ColumnCombination] = []
        self._handles: Dict[ColumnCombination, int] = {}
        self._summaries: Dict[int, Dict[int, CombinationSummary]] = {}
        self._cardinalities: Dict[int, int] = {}
        self._index = SampledInvertedIndex(self.promotion_threshold)
        self._cursor: Optional[TableCursor] = None
        self._generation = 0

    def _require(self, *states: TesterState) -> None:
        if self.state not in states:
            expected = ", ".join(state.value for state in states)
            raise LifecycleError(f"Tester is {self.state.value}, expected one of: {expected}")

    # =====================
    # Registration and seeding
    # =====================

    def register(self, combinations: Iterable[ColumnCombination]) -> List[int]:
        """
        Track a new batch of column combinations

        Clears everything tracked before. Handles are assigned densely in
        input order; duplicates keep their first handle.

        Args:
            combinations: Column combinations to track

        Returns:
            Sorted ids of the tables holding at least one combination
        """
        self._reset()

        for combination in combinations:
            if combination in self._handles:
                continue
            handle = len(self._combinations)
            self._handles[combination] = handle
            self._combinations.append(combination)
            self._summaries.setdefault(combination.table, {})[handle] = SMALL

        self._index.set_max_index(len(self._combinations) - 1)
        self.state = TesterState.REGISTERED

        active_tables = sorted(self._summaries)
        logger.info(
            f"Registered {len(self._combinations)} combinations over {len(active_tables)} tables"
        )
        return active_tables

    def seed(self, samples_by_table: Mapping[int, Sequence[Sequence[int]]]) -> None:
        """
        Seed the inverted index from per-table row samples

        Args:
            samples_by_table: table id -> sampled rows of cell hashes;
                tables without tracked combinations are ignored
        """
        self._require(TesterState.REGISTERED)
        self._index.initialize(self._sampled_fingerprints(samples_by_table))
        self.state = TesterState.SEEDED

    def _sampled_fingerprints(self, samples_by_table):
        for table, rows in samples_by_table.items():
            summaries = self._summaries.get(table)
            if summaries is None:
                continue
            columns_by_handle = [(handle, self._combinations[handle].columns) for handle in summaries]
            for row in rows:
                for handle, columns in columns_by_handle:
                    fingerprint = combine(row, columns)
                    if fingerprint is not None:
                        yield handle, fingerprint

    # =====================
    # Ingestion
    # =====================

    def start_table(self, table: int) -> TableCursor:
        """
        Declare the table whose rows are streamed next

        Args:
            table: Table id with at least one tracked combination

        Returns:
            Cursor to pass to insert_row()
        """
        self._require(TesterState.SEEDED, TesterState.INGESTING)
        summaries = self._summaries.get(table)
        if summaries is None:
            raise ValueError(f"Table {table} has no tracked combinations")

        self._generation += 1
        self._cursor = TableCursor(
            table=table,
            generation=self._generation,
            entries=tuple((handle, self._combinations[handle].columns) for handle in summaries),
        )
        self.state = TesterState.INGESTING
        logger.debug(f"Streaming table {table} ({len(summaries)} combinations)")
        return self._cursor

    def insert_row(self, cursor: TableCursor, row: Sequence[int], row_count: Optional[int] = None) -> None:
        """
        Ingest one row of cell hashes

        Each non-NULL fingerprint goes either to the inverted index or to the
        combination's sketch, never both.

        Args:
            cursor: Cursor of the active table
            row: Cell hashes of the row
            row_count: Caller's row counter (bookkeeping only)
        """
        if cursor is not self._cursor or self.state is not TesterState.INGESTING:
            raise LifecycleError("Cursor is stale; call start_table() first")

        summaries = self._summaries[cursor.table]
        for handle, columns in cursor.entries:
            fingerprint = combine(row, columns)
            if fingerprint is None:
                continue

            summary = summaries[handle]
            if self._index.update(handle, summary, fingerprint):
                continue
            if not summary.is_big:
                summary = self._promote(cursor.table, handle)
            summary.sketch.offer_hashed(fingerprint)

    def _promote(self, table: int, handle: int) -> BigSummary:
        """Swap a small summary for a sketch-backed one"""
        sketch = CardinalitySketch(self.error)
        for fingerprint in self._index.release_uncovered(handle):
            sketch.offer_hashed(fingerprint)

        summary = BigSummary(sketch)
        self._summaries[table][handle] = summary
        logger.debug(f"Promoted {self._combinations[handle]} to a cardinality sketch")
        return summary

    def finalize(self) -> None:
        """
        Freeze all summaries

        Caches the cardinality of every sketch-backed combination once and
        compacts the inverted index.
        """
        self._require(TesterState.SEEDED, TesterState.INGESTING)
        self._cursor = None

        for summaries in self._summaries.values():
            for handle, summary in summaries.items():
                if summary.is_big and handle not in self._cardinalities:
                    self._cardinalities[handle] = summary.sketch.cardinality()

        self._index.finalize_insertion(self._summaries)
        self.state = TesterState.FINALIZED
        logger.info(
            f"Finalized {len(self._combinations)} combinations "
            f"({len(self._cardinalities)} sketch-backed)"
        )

    # =====================
    # Queries
    # =====================

    def is_included_in(self, a: ColumnCombination, b: ColumnCombination) -> bool:
        """
        Approximate test whether every value of a also occurs in b

        Returns:
            False if a or b is not tracked, or if inclusion is disproved;
            True otherwise (may be a false positive)
        """
        self._require(TesterState.FINALIZED)

        handle_a = self._handles.get(a)
        handle_b = self._handles.get(b)
        if handle_a is None or handle_b is None:
            return False

        summary_a = self._summaries[a.table][handle_a]
        summary_b = self._summaries[b.table][handle_b]

        if summary_a.is_big and summary_b.is_big:
            if self._cardinalities[handle_a] > self._cardinalities[handle_b]:
                return False
            return (
                self._index.is_included_in(handle_a, handle_b)
                and registers_dominated(summary_a.sketch, summary_b.sketch)
            )

        return self._index.is_included_in(handle_a, handle_b)

    # =====================
    # Introspection
    # =====================

    @property
    def combinations(self) -> List[ColumnCombination]:
        """Tracked combinations in handle order"""
        return list(self._combinations)

    @property
    def active_tables(self) -> List[int]:
        return sorted(self._summaries)

    def handle_of(self, combination: ColumnCombination) -> Optional[int]:
        return self._handles.get(combination)

    def summary_of(self, combination: ColumnCombination) -> Optional[CombinationSummary]:
        """Current summary, or None if the combination is not tracked"""
        handle = self._handles.get(combination)
        if handle is None:
            return None
        return self._summaries[combination.table][handle]

    def cached_cardinality(self, combination: ColumnCombination) -> Optional[int]:
        """Frozen cardinality estimate, or None before finalize / for small summaries"""
        handle = self._handles.get(combination)
        if handle is None:
            return None
        return self._cardinalities.get(handle)

    def __repr__(self) -> str:
        return f"InclusionTester(error={self.error})"
