from __future__ import annotations

from functools import lru_cache

from tickerscope.services.normalize import words

@lru_cache(maxsize=65536)
def levenshtein(a: str, b: str) -> int:
    """Edit distance with unit-cost insert/delete/substitute (full DP matrix)."""
    n, m = len(a), len(b)
    if n == 0:
        return m
    if m == 0:
        return n

    matrix = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n + 1):
        matrix[i][0] = i
    for j in range(m + 1):
        matrix[0][j] = j

    for i in range(1, n + 1):
        for j in range(1, m + 1):
            if a[i - 1] == b[j - 1]:
                matrix[i][j] = matrix[i - 1][j - 1]
            else:
                matrix[i][j] = min(
                    matrix[i - 1][j] + 1,      # delete
                    matrix[i][j - 1] + 1,      # insert
                    matrix[i - 1][j - 1] + 1,  # substitute
                )
    return matrix[n][m]

@lru_cache(maxsize=65536)
def fuzzy_match(text: str, keyword: str, max_distance: int = 1) -> bool:
    """
    True if any word of `text` is within `max_distance` edits of `keyword`.
    Single-character keywords fall back to substring containment.
    Callers pass both sides already lowercased.
    """
    if len(keyword) <= 1:
        return keyword in text
    return any(levenshtein(w, keyword) <= max_distance for w in words(text))
