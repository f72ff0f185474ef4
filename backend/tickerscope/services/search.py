# backend/tickerscope/services/search.py
from __future__ import annotations

import threading
import time
from typing import List, Optional, Sequence, Tuple

from loguru import logger

from tickerscope.core.errors import CatalogUnavailableError, SearchCancelledError
from tickerscope.models.records import GroupedResult, InstrumentRecord, MatchCategory, ScoredResult
from tickerscope.services.catalog import CatalogIndex
from tickerscope.services.normalize import query_keywords
from tickerscope.services.scoring import score_keyword

def _check_cancel(cancel: Optional[threading.Event]) -> None:
    if cancel is not None and cancel.is_set():
        raise SearchCancelledError("search cancelled")

def search_category(
    records: Sequence[InstrumentRecord],
    keywords: Sequence[str],
    category: MatchCategory,
    *,
    max_distance: Optional[int] = None,
    cancel: Optional[threading.Event] = None,
) -> List[ScoredResult]:
    """
    Records where *every* keyword matched in this category, scored by the
    sum of per-keyword scores, best first (stable on catalog order).
    """
    scored: List[ScoredResult] = []
    for record in records:
        _check_cancel(cancel)
        total = 0
        for kw in keywords:
            matched, s = score_keyword(record, kw, category, max_distance)
            if not matched:
                break
            total += s
        else:
            scored.append(ScoredResult(record=record, score=total))
    scored.sort(key=lambda r: r.score, reverse=True)
    return scored

def rank_groups(groups: List[GroupedResult]) -> List[GroupedResult]:
    """highest_score desc, then category priority desc; stable otherwise."""
    return sorted(groups, key=lambda g: (-g.highest_score, -g.category.priority))

def search(
    query: str,
    catalog: Optional[CatalogIndex],
    history=None,
    *,
    max_distance: Optional[int] = None,
    cancel: Optional[threading.Event] = None,
) -> List[GroupedResult]:
    """
    Free-text search across all eight match categories.

    Empty / whitespace-only queries return [] without touching history.
    `history`, when given, receives the raw query after a non-empty search.
    """
    keywords: Tuple[str, ...] = query_keywords(query)
    if not keywords:
        return []
    if catalog is None:
        raise CatalogUnavailableError()

    t0 = time.time()
    groups: List[GroupedResult] = []
    for category in MatchCategory:
        _check_cancel(cancel)
        matches = search_category(catalog.records(category.kind), keywords, category,
                                  max_distance=max_distance, cancel=cancel)
        logger.debug(f"category={category.value} matches={len(matches)}")
        if not matches:
            continue
        groups.append(GroupedResult(
            category=category,
            results=matches,
            highest_score=max(m.score for m in matches),
        ))

    ranked = rank_groups(groups)

    if history is not None:
        history.record(query)

    latency_ms = int((time.time() - t0) * 1000)
    logger.info(f"Search '{query}' -> {len(ranked)} groups, "
                f"{sum(len(g.results) for g in ranked)} results in {latency_ms}ms")
    return ranked
