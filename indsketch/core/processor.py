"""
Table processing engine
Drives an InclusionTester over in-memory tables of raw values
"""
from typing import Any, Dict, Iterable, List, Mapping, Sequence
import logging

from indsketch.core.fingerprint import hash_row
from indsketch.core.tester import InclusionTester
from indsketch.models.combinations import ColumnCombination
from indsketch.utils.sampling import reservoir_sample

logger = logging.getLogger(__name__)

Table = Sequence[Sequence[Any]]


class TableProcessor:
    """
    Run the full tester lifecycle over raw tables

    Hashes every cell, samples each table, seeds the tester, streams the
    tables one after another and finalizes.
    """

    def __init__(self, tester: InclusionTester, sample_size: int = 500, seed: int = 42):
        """
        Initialize table processor

        Args:
            tester: Tester to drive (re-registered on every run)
            sample_size: Rows sampled per table
            seed: Base seed for sampling; each table offsets it by its id
        """
        if sample_size < 0:
            raise ValueError("Sample size cannot be negative")

        self.tester = tester
        self.sample_size = sample_size
        self.seed = seed

    @classmethod
    def from_settings(cls, settings) -> 'TableProcessor':
        """Build a processor and its tester from application settings"""
        return cls(
            InclusionTester.from_settings(settings),
            sample_size=settings.SAMPLE_SIZE,
            seed=settings.SAMPLE_SEED,
        )

    def process(
        self, tables: Mapping[int, Table], combinations: Iterable[ColumnCombination]
    ) -> InclusionTester:
        """
        Register, sample, stream and finalize

        Args:
            tables: table id -> rows of raw values (None = NULL)
            combinations: Column combinations to track

        Returns:
            The finalized tester
        """
        try:
            active_tables = self.tester.register(combinations)
            missing = [table for table in active_tables if table not in tables]
            if missing:
                raise ValueError(f"No rows given for tables {missing}")

            self.tester.seed(self.sample(tables, active_tables))

            for table in active_tables:
                rows = self._stream_table(table, tables[table])
                logger.info(f"Streamed {rows} rows of table {table}")

            self.tester.finalize()

        except Exception as e:
            logger.error(f"Error processing tables: {e}", exc_info=True)
            raise

        return self.tester

    def sample(self, tables: Mapping[int, Table], active_tables: List[int]) -> Dict[int, List[List[int]]]:
        """
        Draw the hashed row sample of every active table

        Returns:
            table id -> sampled rows of cell hashes
        """
        samples = {}
        for table in active_tables:
            rows = reservoir_sample(tables[table], self.sample_size, seed=self.seed + table)
            samples[table] = [hash_row(row) for row in rows]
            logger.debug(f"Sampled {len(rows)} rows of table {table}")
        return samples

    def _stream_table(self, table: int, rows: Table) -> int:
        cursor = self.tester.start_table(table)
        row_count = 0
        for row_count, row in enumerate(rows, start=1):
            self.tester.insert_row(cursor, hash_row(row), row_count)
        return row_count
