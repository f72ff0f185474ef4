# backend/tickerscope/services/catalog.py
from __future__ import annotations

import math
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from loguru import logger

from tickerscope.models.records import InstrumentKind, InstrumentRecord, TagWeightTable

DEFAULT_TAG_WEIGHT = 1.0


def invert_tag_weights(table: Optional[Mapping]) -> Dict[str, float]:
    """
    weight -> [tags]  ==>  lowercased tag -> weight.
    Keys that are not numbers and non-list values are skipped; a tag listed
    under several weights keeps the highest one.
    """
    out: Dict[str, float] = {}
    for raw_weight, tags in (table or {}).items():
        try:
            weight = float(raw_weight)
        except (TypeError, ValueError):
            logger.warning(f"Skipping tag-weight group with non-numeric key {raw_weight!r}")
            continue
        if not isinstance(tags, (list, tuple, set, frozenset)):
            logger.warning(f"Skipping tag-weight group {raw_weight!r}: expected a list of tags")
            continue
        for t in tags:
            if not isinstance(t, str) or not t.strip():
                continue
            key = t.strip().lower()
            if key not in out or weight > out[key]:
                out[key] = weight
    return out


class CatalogIndex:
    """
    Immutable snapshot of the stock/ETF catalog plus the auxiliary maps the
    search and similarity paths read. No matching logic lives here.
    """

    def __init__(
        self,
        stocks: Tuple[InstrumentRecord, ...],
        etfs: Tuple[InstrumentRecord, ...],
        tag_weights: Mapping[str, float],
        market_caps: Mapping[str, float],
        comparisons: Mapping[str, str],
        groups: Mapping[str, str],
    ):
        self._by_kind = MappingProxyType({InstrumentKind.STOCK: stocks, InstrumentKind.ETF: etfs})
        self._tag_weights = MappingProxyType(dict(tag_weights))
        self._market_caps = MappingProxyType(dict(market_caps))
        self._comparisons = MappingProxyType(dict(comparisons))
        self._groups = MappingProxyType(dict(groups))

        # first occurrence wins: stocks are indexed before ETFs
        by_symbol: Dict[str, InstrumentRecord] = {}
        for r in stocks + etfs:
            by_symbol.setdefault(r.symbol.upper(), r)
        self._by_symbol = MappingProxyType(by_symbol)

    def __len__(self) -> int:
        return sum(len(v) for v in self._by_kind.values())

    def records(self, kind: InstrumentKind) -> Tuple[InstrumentRecord, ...]:
        return self._by_kind[kind]

    def all_records(self) -> Tuple[InstrumentRecord, ...]:
        return self._by_kind[InstrumentKind.STOCK] + self._by_kind[InstrumentKind.ETF]

    def find(self, symbol: str) -> Optional[InstrumentRecord]:
        return self._by_symbol.get((symbol or "").strip().upper())

    def tag_weight(self, tag: str) -> float:
        return self._tag_weights.get((tag or "").strip().lower(), DEFAULT_TAG_WEIGHT)

    def market_cap(self, symbol: str) -> Optional[float]:
        return self._market_caps.get((symbol or "").upper())

    def comparison(self, symbol: str) -> Optional[str]:
        return self._comparisons.get((symbol or "").upper())

    def group_for(self, symbol: str) -> Optional[str]:
        """Sector/group label containing `symbol`, if any."""
        return self._groups.get((symbol or "").upper())


def _coerce(records: Iterable, kind: InstrumentKind) -> Tuple[InstrumentRecord, ...]:
    out: List[InstrumentRecord] = []
    for r in records or ():
        if isinstance(r, InstrumentRecord):
            out.append(r if r.kind is kind else r.model_copy(update={"kind": kind}))
        else:
            out.append(InstrumentRecord.model_validate({**dict(r), "kind": kind}))
    return tuple(out)


def build_catalog(
    stocks: Iterable,
    etfs: Iterable,
    tag_weights: Optional[TagWeightTable] = None,
    market_cap_by_symbol: Optional[Mapping[str, float]] = None,
    comparison_by_symbol: Optional[Mapping[str, str]] = None,
    groups: Optional[Mapping[str, Iterable[str]]] = None,
) -> CatalogIndex:
    """Build an immutable CatalogIndex. Records may be models or plain dicts."""
    stock_rows = _coerce(stocks, InstrumentKind.STOCK)
    etf_rows = _coerce(etfs, InstrumentKind.ETF)

    caps: Dict[str, float] = {}
    for k, v in (market_cap_by_symbol or {}).items():
        if v is None or not math.isfinite(float(v)):
            continue
        caps[str(k).upper()] = float(v)
    comps = {str(k).upper(): str(v) for k, v in (comparison_by_symbol or {}).items() if v is not None}

    group_of: Dict[str, str] = {}
    for group, symbols in (groups or {}).items():
        for s in symbols or ():
            group_of.setdefault(str(s).upper(), group)

    weights = invert_tag_weights(tag_weights)
    index = CatalogIndex(stock_rows, etf_rows, weights, caps, comps, group_of)
    logger.info(
        f"Catalog built: {len(stock_rows)} stocks, {len(etf_rows)} ETFs, "
        f"{len(weights)} weighted tags, {len(caps)} market caps, {len(comps)} comparisons"
    )
    return index
