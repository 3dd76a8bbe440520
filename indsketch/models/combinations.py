"""
Column combination and summary models
"""
from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from pydantic import BaseModel, Field, validator

from indsketch.core.sketches.hyperloglog import CardinalitySketch


class ColumnCombination(BaseModel):
    """Ordered columns of one table, fingerprinted jointly"""

    table: int = Field(..., ge=0, description="Table id")
    columns: Tuple[int, ...] = Field(..., description="Column positions in declared order")

    @validator("columns")
    def check_columns(cls, v):
        """Columns must be non-empty, non-negative and unique"""
        if not v:
            raise ValueError("A column combination needs at least one column")
        if any(column < 0 for column in v):
            raise ValueError("Column positions cannot be negative")
        if len(set(v)) != len(v):
            raise ValueError("Column positions must be unique")
        return v

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "table": 0,
                "columns": [2, 0],
            }
        }

    def __str__(self) -> str:
        columns = ",".join(str(column) for column in self.columns)
        return f"{self.table}[{columns}]"


class SummaryKind(str, Enum):
    """Representation of a combination's distinct values"""

    SMALL = "small"
    BIG = "big"


@dataclass(frozen=True)
class SmallSummary:
    """All evidence lives in the sampled inverted index"""

    kind = SummaryKind.SMALL

    @property
    def is_big(self) -> bool:
        return False


@dataclass(frozen=True)
class BigSummary:
    """Evidence outside the sample lives in a cardinality sketch"""

    sketch: CardinalitySketch
    kind = SummaryKind.BIG

    @property
    def is_big(self) -> bool:
        return True


CombinationSummary = Union[SmallSummary, BigSummary]

# Every small summary is interchangeable
SMALL = SmallSummary()
