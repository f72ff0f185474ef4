import re
from functools import lru_cache
from typing import Optional, Tuple

_WS_RE = re.compile(r"\s+")

@lru_cache(maxsize=16384)
def fold(text: Optional[str]) -> str:
    """Lowercased form used for every comparison; None collapses to ''."""
    return (text or "").lower()

@lru_cache(maxsize=16384)
def words(text: Optional[str]) -> Tuple[str, ...]:
    """Whitespace-delimited lowercase words (empty tokens dropped)."""
    return tuple(w for w in _WS_RE.split(fold(text)) if w)

@lru_cache(maxsize=16384)
def primary_segment(name: Optional[str]) -> str:
    """
    Lowercased part of a name before the first comma.
    "Apple Inc., Common Stock" -> "apple inc."
    """
    s = fold(name)
    return s.split(",", 1)[0].strip()

def query_keywords(query: Optional[str]) -> Tuple[str, ...]:
    # not cached: queries are one-shot and unbounded
    return tuple(w for w in _WS_RE.split((query or "").lower()) if w)
