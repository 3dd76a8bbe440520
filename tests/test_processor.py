"""
Tests for the table processing engine
"""
import pytest
from indsketch.config import Settings
from indsketch.core.processor import TableProcessor
from indsketch.core.tester import InclusionTester, TesterState
from indsketch.utils.sampling import reservoir_sample
from tests.helpers import cc


@pytest.fixture
def tables():
    return {
        0: [[i, f"name_{i}"] for i in range(1, 6)],
        1: [[i, None if i % 2 else f"name_{i}"] for i in range(1, 101)],
    }


class TestTableProcessor:
    """Test end-to-end processing of raw tables"""

    def test_process(self, tables):
        """Registers, samples, streams and finalizes in one call"""
        processor = TableProcessor(InclusionTester(error=0.01), sample_size=3)
        ids = cc(0, 0)
        ref_ids = cc(1, 0)

        tester = processor.process(tables, [ids, ref_ids])

        assert tester.state == TesterState.FINALIZED
        assert tester.is_included_in(ids, ref_ids)
        assert not tester.is_included_in(ref_ids, ids)

    def test_nulls_are_not_values(self, tables):
        """Names that are NULL on one side do not count as missing values"""
        processor = TableProcessor(InclusionTester(error=0.01), sample_size=10)
        names = cc(0, 1)
        ref_names = cc(1, 1)

        tester = processor.process(tables, [names, ref_names])

        # name_1, name_3 and name_5 only appear as NULL in table 1
        assert not tester.is_included_in(names, ref_names)

    def test_sample(self, tables):
        """Samples are hashed and capped at the sample size"""
        processor = TableProcessor(InclusionTester(), sample_size=4, seed=1)

        samples = processor.sample(tables, [0, 1])

        assert [len(samples[0]), len(samples[1])] == [4, 4]
        assert all(len(row) == 2 for row in samples[1])
        assert all(isinstance(value, int) for row in samples[0] for value in row)

    def test_missing_table(self, tables):
        """Every active table needs rows"""
        processor = TableProcessor(InclusionTester())
        with pytest.raises(ValueError):
            processor.process(tables, [cc(7, 0)])

    def test_from_settings(self):
        """Processor and tester follow the settings"""
        settings = Settings(HLL_ERROR_RATE=0.05, PROMOTION_THRESHOLD=4, SAMPLE_SIZE=9, SAMPLE_SEED=3)

        processor = TableProcessor.from_settings(settings)

        assert processor.sample_size == 9
        assert processor.seed == 3
        assert processor.tester.error == 0.05
        assert processor.tester.promotion_threshold == 4


class TestReservoirSample:
    """Test reservoir sampling"""

    def test_fewer_items_than_k(self):
        assert reservoir_sample(range(3), 10) == [0, 1, 2]

    def test_sample_size(self):
        sample = reservoir_sample(range(1000), 25, seed=9)

        assert len(sample) == 25
        assert len(set(sample)) == 25
        assert all(0 <= item < 1000 for item in sample)

    def test_reproducible(self):
        assert reservoir_sample(range(1000), 10, seed=4) == reservoir_sample(range(1000), 10, seed=4)

    def test_empty_sample(self):
        assert reservoir_sample(range(10), 0) == []
        with pytest.raises(ValueError):
            reservoir_sample(range(10), -1)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
