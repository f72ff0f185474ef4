# backend/tickerscope/services/scoring.py
from __future__ import annotations

from typing import Tuple

from tickerscope.core.settings import settings
from tickerscope.models.records import InstrumentRecord, MatchCategory
from tickerscope.services.fuzzy import fuzzy_match
from tickerscope.services.normalize import fold, primary_segment, words

Score = Tuple[bool, int]   # (matched, 0..4)

NO_MATCH: Score = (False, 0)

def _ladder(text: str, keyword: str, max_distance: int) -> int:
    """exact 3 / substring 2 / fuzzy 1 / none 0 (both sides lowercased)."""
    if keyword == text:
        return 3
    if keyword in text:
        return 2
    if fuzzy_match(text, keyword, max_distance):
        return 1
    return 0

def score_symbol(record: InstrumentRecord, keyword: str, max_distance: int = 1) -> Score:
    s = _ladder(fold(record.symbol), keyword, max_distance)
    return (s > 0, s)

def score_name(record: InstrumentRecord, keyword: str, max_distance: int = 1) -> Score:
    """
    Ladder over the name:
      4  keyword is the full name
      3  keyword is a whole word of the primary segment (before the first comma)
      2  keyword is a substring of the primary segment
      1  keyword is a substring of the full name, or fuzzy-matches it
    """
    full = fold(record.name)
    if not full:
        return NO_MATCH
    if keyword == full:
        return (True, 4)
    primary = primary_segment(record.name)
    if keyword in words(primary):
        return (True, 3)
    if keyword in primary:
        return (True, 2)
    if keyword in full or fuzzy_match(full, keyword, max_distance):
        return (True, 1)
    return NO_MATCH

def score_tags(record: InstrumentRecord, keyword: str, max_distance: int = 1) -> Score:
    best = 0
    for tag in record.tags:
        best = max(best, _ladder(fold(tag), keyword, max_distance))
        if best == 3:
            break
    return (best > 0, best)

def score_description(record: InstrumentRecord, keyword: str, max_distance: int = 1) -> Score:
    d1, d2 = fold(record.description1), fold(record.description2)
    if keyword in words(d1) or keyword in words(d2):
        return (True, 2)
    if keyword in d1 or keyword in d2:
        return (True, 1)
    return NO_MATCH

_SCORERS = {
    "symbol": score_symbol,
    "name": score_name,
    "tag": score_tags,
    "description": score_description,
}

def score_keyword(record: InstrumentRecord, keyword: str, category: MatchCategory,
                  max_distance: int | None = None) -> Score:
    """
    Score one lowercased keyword against one record for one category.
    A record of the other kind never matches the category.
    """
    if record.kind is not category.kind or not keyword:
        return NO_MATCH
    if max_distance is None:
        max_distance = settings.fuzzy_max_distance
    return _SCORERS[category.field](record, keyword, max_distance)
