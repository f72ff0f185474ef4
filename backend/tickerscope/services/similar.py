# backend/tickerscope/services/similar.py
from __future__ import annotations

import time
from typing import Dict, List, Optional, Set, Tuple

from loguru import logger

from tickerscope.core.errors import CatalogUnavailableError, NotFoundError
from tickerscope.core.settings import settings
from tickerscope.models.records import InstrumentRecord, RelatedInstrument
from tickerscope.services.catalog import CatalogIndex

MatchedTag = Tuple[str, float]   # (candidate tag as written, contributed weight)

# partial (substring) matches never contribute more than this
PARTIAL_WEIGHT_CAP = 1.0

def target_tag_weights(record: InstrumentRecord, catalog: CatalogIndex) -> Dict[str, float]:
    """Lowercased tag -> resolved weight, in the target's tag order."""
    out: Dict[str, float] = {}
    for tag in record.tags:
        key = tag.lower()
        if key not in out:
            out[key] = catalog.tag_weight(tag)
    return out

def match_tags(candidate_tags: List[str], target: Dict[str, float]) -> List[MatchedTag]:
    """
    Two passes over the candidate's tags:
      exact   - lowercase tag is a target key      -> full weight
      partial - tag contains / is contained in an unused target tag (not equal)
                -> min(weight, 1.0), first unused target tag in target order
    Each target tag is consumed at most once.
    """
    matched: List[MatchedTag] = []
    used: Set[str] = set()

    for tag in candidate_tags:
        t = tag.lower()
        if t in target and t not in used:
            matched.append((tag, target[t]))
            used.add(t)

    for tag in candidate_tags:
        t = tag.lower()
        if t in used:
            continue
        for target_tag, weight in target.items():
            if target_tag in used or t == target_tag:
                continue
            if target_tag in t or t in target_tag:
                matched.append((tag, min(weight, PARTIAL_WEIGHT_CAP)))
                used.add(target_tag)
                break

    return matched

def _has_comparison(value: Optional[str]) -> bool:
    return bool(value and value.strip())

def _sort_key(item: RelatedInstrument):
    mc = item.market_cap if item.market_cap is not None else float("-inf")
    return (-item.total_weight, -mc, item.symbol)

def find_similar(
    target_symbol: str,
    catalog: Optional[CatalogIndex],
    limit: Optional[int] = None,
) -> List[RelatedInstrument]:
    """
    Instruments sharing weighted tags with `target_symbol`, best first.

    Raises NotFoundError when the symbol is not in the catalog. A found target
    with nothing related returns [].
    """
    if catalog is None:
        raise CatalogUnavailableError()
    if limit is None:
        limit = settings.similar_limit

    target = catalog.find(target_symbol)
    if target is None:
        logger.info(f"Similar lookup: '{target_symbol}' not in catalog")
        raise NotFoundError(target_symbol)

    t0 = time.time()
    target_sym = target.symbol.upper()
    weights = target_tag_weights(target, catalog)
    if not weights:
        logger.info(f"Similar '{target_sym}': target has no tags")
        return []

    related: List[RelatedInstrument] = []
    skipped_no_compare = 0
    for record in catalog.all_records():
        if record.symbol.upper() == target_sym:
            continue
        matched = match_tags(record.tags, weights)
        if not matched:
            continue
        compare = catalog.comparison(record.symbol)
        if not _has_comparison(compare):
            skipped_no_compare += 1
            continue
        related.append(RelatedInstrument(
            symbol=record.symbol,
            kind=record.kind,
            total_weight=sum(w for _, w in matched),
            comparison_value=compare,
            all_tags=list(record.tags),
            market_cap=catalog.market_cap(record.symbol),
            matched_tags=matched,
        ))

    related.sort(key=_sort_key)
    out = related[: max(0, limit)]

    latency_ms = int((time.time() - t0) * 1000)
    logger.info(f"Similar '{target_sym}' -> {len(out)} of {len(related)} related "
                f"(skipped {skipped_no_compare} without comparison) in {latency_ms}ms")
    return out
