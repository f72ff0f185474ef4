from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Callable, List, Optional

from loguru import logger

HISTORY_KEY = "stockSearchHistory"
DEFAULT_LIMIT = 10

LoadFn = Callable[[], List[str]]
SaveFn = Callable[[List[str]], None]


class JsonHistoryState:
    """
    Single-key JSON state file: {"stockSearchHistory": [...]}.
    Other keys in the file are preserved on write.
    """
    def __init__(self, path: str, key: str = HISTORY_KEY):
        self.path = Path(path)
        self.key = key
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read history state {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        tmp = self.path.with_suffix(".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)
        tmp.replace(self.path)

    def load(self) -> List[str]:
        raw = self._read().get(self.key)
        if not isinstance(raw, list):
            return []
        return [str(x) for x in raw if isinstance(x, str)]

    def save(self, entries: List[str]) -> None:
        data = self._read()
        data[self.key] = list(entries)
        self._write(data)


class SearchHistory:
    """Bounded, case-insensitively deduplicated, most-recent-first query list."""

    def __init__(self, load: Optional[LoadFn] = None, save: Optional[SaveFn] = None,
                 limit: int = DEFAULT_LIMIT):
        self.limit = max(1, limit)
        self._save = save
        self._lock = threading.Lock()
        self._entries: List[str] = []
        if load is not None:
            self._entries = self._normalize(load() or [])

    def _normalize(self, entries: List[str]) -> List[str]:
        # persisted state may predate the current rules
        out: List[str] = []
        seen = set()
        for e in entries:
            t = (e or "").strip()
            if not t or t.lower() in seen:
                continue
            seen.add(t.lower())
            out.append(t)
        return out[: self.limit]

    def _persist(self) -> None:
        if self._save is not None:
            self._save(list(self._entries))

    def record(self, query: str) -> None:
        term = (query or "").strip()
        if not term:
            return
        with self._lock:
            key = term.lower()
            self._entries = [e for e in self._entries if e.lower() != key]
            self._entries.insert(0, term)
            del self._entries[self.limit:]
            self._persist()

    def remove(self, query: str) -> bool:
        key = (query or "").lower()
        with self._lock:
            kept = [e for e in self._entries if e.lower() != key]
            if len(kept) == len(self._entries):
                return False
            self._entries = kept
            self._persist()
            return True

    def entries(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @classmethod
    def from_json_file(cls, path: str, limit: int = DEFAULT_LIMIT) -> "SearchHistory":
        state = JsonHistoryState(path)
        return cls(load=state.load, save=state.save, limit=limit)
