from __future__ import annotations

from typing import Iterable, List, Optional

from tickerscope.models.records import EnrichedResult, MarketData, ScoredResult


def format_market_cap(cap: Optional[float]) -> Optional[str]:
    if cap is None:
        return None
    return f"{cap / 1_000_000_000:.1f}B"


def format_pe(pe: Optional[float]) -> str:
    return "--" if pe is None else f"{pe:.2f}"


def format_volume(volume: Optional[int]) -> Optional[str]:
    if volume is None:
        return None
    return f"{int(volume):,}"


def enrich_result(result: ScoredResult, market: MarketData) -> EnrichedResult:
    sym = result.record.symbol.upper()
    return EnrichedResult(
        record=result.record,
        score=result.score,
        market_cap=format_market_cap(market.market_cap.get(sym)),
        pe_ratio=format_pe(market.pe_ratio.get(sym)),
        compare=market.compare.get(sym),
        volume=format_volume(market.volume.get(sym)),
    )


def enrich_results(results: Iterable[ScoredResult], market: Optional[MarketData]) -> List[EnrichedResult]:
    """
    Attach externally supplied market data to scored results.
    Nothing is derived from the catalog; missing symbols get empty fields.
    """
    market = market or MarketData()
    return [enrich_result(r, market) for r in results]
