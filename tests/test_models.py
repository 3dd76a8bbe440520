"""
Tests for combination models and settings
"""
import logging

import pytest
from pydantic import ValidationError
from indsketch import create_tester
from indsketch.config import Settings
from indsketch.core.sketches.hyperloglog import CardinalitySketch
from indsketch.core.tester import TesterState
from indsketch.models.combinations import (
    SMALL,
    BigSummary,
    ColumnCombination,
    SummaryKind,
)


class TestColumnCombination:
    """Test ColumnCombination validation and identity"""

    def test_identity(self):
        """Combinations are hashable values"""
        a = ColumnCombination(table=1, columns=[2, 0])
        b = ColumnCombination(table=1, columns=(2, 0))

        assert a == b
        assert hash(a) == hash(b)
        assert a.columns == (2, 0)
        assert str(a) == "1[2,0]"

    def test_order_matters(self):
        assert ColumnCombination(table=0, columns=[0, 1]) != ColumnCombination(table=0, columns=[1, 0])

    @pytest.mark.parametrize("columns", [[], [-1], [1, 1]])
    def test_invalid_columns(self, columns):
        with pytest.raises(ValidationError):
            ColumnCombination(table=0, columns=columns)

    def test_invalid_table(self):
        with pytest.raises(ValidationError):
            ColumnCombination(table=-1, columns=[0])

    def test_immutable(self):
        combination = ColumnCombination(table=0, columns=[0])
        with pytest.raises(ValidationError):
            combination.table = 3


class TestSummaries:
    """Test the small/big summary variants"""

    def test_variants(self):
        sketch = CardinalitySketch(0.1)
        big = BigSummary(sketch)

        assert SMALL.kind == SummaryKind.SMALL
        assert not SMALL.is_big
        assert big.kind == SummaryKind.BIG
        assert big.is_big
        assert big.sketch is sketch


class TestSettings:
    """Test configuration loading"""

    def test_defaults(self, monkeypatch):
        for name in ("HLL_ERROR_RATE", "PROMOTION_THRESHOLD", "SAMPLE_SIZE", "DEBUG", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)

        assert settings.HLL_ERROR_RATE == 0.01
        assert settings.PROMOTION_THRESHOLD == 0
        assert settings.SAMPLE_SIZE == 500
        assert settings.get_log_level() == "INFO"

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("HLL_ERROR_RATE", "0.02")
        monkeypatch.setenv("DEBUG", "true")
        settings = Settings(_env_file=None)

        assert settings.HLL_ERROR_RATE == 0.02
        assert settings.get_log_level() == "DEBUG"

    @pytest.mark.parametrize(
        "overrides",
        [{"HLL_ERROR_RATE": 0}, {"HLL_ERROR_RATE": 1.5}, {"PROMOTION_THRESHOLD": -1}, {"SAMPLE_SIZE": -5}],
    )
    def test_validation(self, overrides):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **overrides)

    def test_create_tester(self, caplog):
        settings = Settings(_env_file=None, HLL_ERROR_RATE=0.05, PROMOTION_THRESHOLD=2)

        with caplog.at_level(logging.DEBUG):
            tester = create_tester(settings)

        assert tester.error == 0.05
        assert tester.promotion_threshold == 2
        assert tester.state == TesterState.UNCONFIGURED
        assert repr(tester) == "InclusionTester(error=0.05)"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
