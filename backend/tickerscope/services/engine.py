# backend/tickerscope/services/engine.py
from __future__ import annotations

import threading
from typing import List, Optional

from loguru import logger

from tickerscope.core.errors import CatalogUnavailableError
from tickerscope.core.settings import Settings, settings as default_settings
from tickerscope.models.records import EnrichedResult, GroupedResult, MarketData, RelatedInstrument
from tickerscope.services.catalog import CatalogIndex, build_catalog
from tickerscope.services.dispatch import SearchDispatcher, SearchTicket
from tickerscope.services.enrich import enrich_results
from tickerscope.services.history import SearchHistory
from tickerscope.services.loaders import (
    load_compare,
    load_descriptions,
    load_groups,
    load_market_caps,
    load_tag_weights,
    load_volumes,
)
from tickerscope.services.search import search
from tickerscope.services.similar import find_similar


class SymbolSearchEngine:
    """
    Owns one catalog snapshot, the market-data maps, the search history and a
    worker pool. Search and similar lookups raise CatalogUnavailableError
    until load() (or set_catalog()) has run.
    """

    def __init__(self, cfg: Optional[Settings] = None, history: Optional[SearchHistory] = None):
        self.cfg = cfg or default_settings
        self.history = history if history is not None else SearchHistory.from_json_file(
            self.cfg.history_path, limit=self.cfg.history_limit)
        self.market = MarketData()
        self._catalog: Optional[CatalogIndex] = None
        self._lock = threading.Lock()
        self._dispatcher: Optional[SearchDispatcher] = None

    # ---- lifecycle ----
    @property
    def catalog(self) -> Optional[CatalogIndex]:
        return self._catalog

    @property
    def is_loaded(self) -> bool:
        return self._catalog is not None

    def set_catalog(self, catalog: CatalogIndex, market: Optional[MarketData] = None) -> None:
        with self._lock:
            self._catalog = catalog
            if market is not None:
                self.market = market

    def load(self) -> CatalogIndex:
        """Read every configured input file and swap in a fresh catalog."""
        c = self.cfg
        stocks, etfs = load_descriptions(c.data_path(c.description_file))
        weights = load_tag_weights(c.data_path(c.tags_weight_file))
        compare = load_compare(c.data_path(c.compare_file))
        caps, pes = load_market_caps(c.data_path(c.marketcap_file))
        volumes = load_volumes(c.data_path(c.volume_file))
        groups = load_groups(c.data_path(c.sectors_file))

        catalog = build_catalog(stocks, etfs, weights, caps, compare, groups)
        self.set_catalog(catalog, MarketData(market_cap=caps, pe_ratio=pes, compare=compare, volume=volumes))
        logger.info(f"Engine loaded from {c.data_dir} (env={c.env})")
        return catalog

    def _require_catalog(self) -> CatalogIndex:
        catalog = self._catalog
        if catalog is None:
            raise CatalogUnavailableError()
        return catalog

    # ---- queries ----
    def search(self, query: str, cancel: Optional[threading.Event] = None) -> List[GroupedResult]:
        return search(query, self._catalog, self.history,
                      max_distance=self.cfg.fuzzy_max_distance, cancel=cancel)

    def find_similar(self, symbol: str) -> List[RelatedInstrument]:
        return find_similar(symbol, self._require_catalog(), limit=self.cfg.similar_limit)

    def group_for(self, symbol: str) -> Optional[str]:
        return self._require_catalog().group_for(symbol)

    def enrich(self, group: GroupedResult) -> List[EnrichedResult]:
        return enrich_results(group.results, self.market)

    # ---- async ----
    @property
    def dispatcher(self) -> SearchDispatcher:
        with self._lock:
            if self._dispatcher is None:
                self._dispatcher = SearchDispatcher(self.search, max_workers=self.cfg.search_max_workers)
            return self._dispatcher

    def submit_search(self, query: str) -> SearchTicket:
        return self.dispatcher.submit(query)

    def close(self) -> None:
        with self._lock:
            if self._dispatcher is not None:
                self._dispatcher.shutdown()
                self._dispatcher = None
