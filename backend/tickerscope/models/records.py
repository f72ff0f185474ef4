from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Tuple
from pydantic import BaseModel, Field, ConfigDict


class InstrumentKind(str, Enum):
    STOCK = "stock"
    ETF = "etf"


class InstrumentRecord(BaseModel):
    # catalog files use "tag" for the tag list; accept either spelling
    symbol: str
    name: str = ""
    tags: List[str] = Field(default_factory=list, alias="tag")
    description1: str = ""
    description2: str = ""
    kind: InstrumentKind = InstrumentKind.STOCK
    value: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class MatchCategory(str, Enum):
    STOCK_SYMBOL = "stock_symbol"
    ETF_SYMBOL = "etf_symbol"
    STOCK_NAME = "stock_name"
    ETF_NAME = "etf_name"
    STOCK_TAG = "stock_tag"
    ETF_TAG = "etf_tag"
    STOCK_DESCRIPTION = "stock_description"
    ETF_DESCRIPTION = "etf_description"

    @property
    def kind(self) -> InstrumentKind:
        return InstrumentKind.STOCK if self.value.startswith("stock_") else InstrumentKind.ETF

    @property
    def field(self) -> str:
        return self.value.split("_", 1)[1]

    @property
    def priority(self) -> int:
        return _PRIORITY[self]

    @property
    def label(self) -> str:
        kind = "Stock" if self.kind is InstrumentKind.STOCK else "ETF"
        return f"{kind} {self.field.capitalize()} Matches"


# tie-break only; stock tags outrank ETF tags
_PRIORITY: Dict[MatchCategory, int] = {
    MatchCategory.STOCK_SYMBOL: 1000,
    MatchCategory.ETF_SYMBOL: 1000,
    MatchCategory.STOCK_TAG: 800,
    MatchCategory.ETF_TAG: 700,
    MatchCategory.STOCK_NAME: 500,
    MatchCategory.ETF_NAME: 500,
    MatchCategory.STOCK_DESCRIPTION: 300,
    MatchCategory.ETF_DESCRIPTION: 300,
}


class ScoredResult(BaseModel):
    record: InstrumentRecord
    score: int

    model_config = ConfigDict(frozen=True)


class GroupedResult(BaseModel):
    category: MatchCategory
    results: List[ScoredResult]
    highest_score: int

    model_config = ConfigDict(frozen=True)


class EnrichedResult(BaseModel):
    record: InstrumentRecord
    score: int
    market_cap: Optional[str] = None
    pe_ratio: str = "--"
    compare: Optional[str] = None
    volume: Optional[str] = None


class RelatedInstrument(BaseModel):
    symbol: str
    kind: InstrumentKind
    total_weight: float
    comparison_value: str
    all_tags: List[str]
    market_cap: Optional[float] = None
    matched_tags: List[Tuple[str, float]] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class MarketData(BaseModel):
    """Externally supplied enrichment, keyed by uppercased symbol."""
    market_cap: Dict[str, float] = Field(default_factory=dict)
    pe_ratio: Dict[str, Optional[float]] = Field(default_factory=dict)
    compare: Dict[str, str] = Field(default_factory=dict)
    volume: Dict[str, int] = Field(default_factory=dict)


# weight -> tags sharing that weight
TagWeightTable = Dict[float, List[str]]
