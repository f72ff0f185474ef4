# backend/tickerscope/services/dispatch.py
from __future__ import annotations

import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Iterable, List, Optional

from loguru import logger

from tickerscope.models.records import GroupedResult

SearchFn = Callable[..., List[GroupedResult]]   # (query, *, cancel=Event) -> groups

def new_request_id() -> str:
    return str(uuid.uuid4())

class SearchTicket:
    """Handle for one in-flight search; correlate results by request_id."""
    def __init__(self, request_id: str, query: str, future: Future, cancel_event: threading.Event):
        self.request_id = request_id
        self.query = query
        self.future = future
        self.cancel_event = cancel_event

    def cancel(self) -> None:
        # running searches stop at their next checkpoint; queued ones never start
        self.cancel_event.set()
        self.future.cancel()

    def result(self, timeout: Optional[float] = None) -> List[GroupedResult]:
        return self.future.result(timeout=timeout)


class SearchDispatcher:
    """
    Runs searches on a worker pool so callers never block on ranking.
    Completion order is not submission order.
    """
    def __init__(self, search_fn: SearchFn, max_workers: int = 4):
        self._search_fn = search_fn
        self._pool = ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="tickerscope-search")

    def submit(self, query: str) -> SearchTicket:
        rid = new_request_id()
        cancel = threading.Event()
        fut = self._pool.submit(self._search_fn, query, cancel=cancel)
        logger.debug(f"submitted search request_id={rid} query='{query}'")
        return SearchTicket(request_id=rid, query=query, future=fut, cancel_event=cancel)

    def search_many(self, queries: Iterable[str]) -> Dict[str, List[GroupedResult]]:
        """Resolve a batch; results keyed by query (duplicates collapsed)."""
        unique = list(dict.fromkeys(q for q in queries if q and q.strip()))
        out: Dict[str, List[GroupedResult]] = {}
        tickets = {self.submit(q).future: q for q in unique}
        for f in as_completed(tickets):
            q = tickets[f]
            try:
                out[q] = f.result()
            except Exception as e:
                logger.error(f"search error for '{q}': {e}")
                raise
        return out

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> "SearchDispatcher":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
