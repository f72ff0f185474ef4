from __future__ import annotations

import json

import pytest
from tickerscope.core.errors import CatalogUnavailableError, NotFoundError
from tickerscope.core.settings import Settings
from tickerscope.models.records import MatchCategory
from tickerscope.services.engine import SymbolSearchEngine
from tickerscope.services.history import SearchHistory


@pytest.fixture
def data_dir(tmp_path):
    (tmp_path / "description.json").write_text(json.dumps({
        "stocks": [
            {"symbol": "XOM", "name": "Exxon Mobil Corporation", "tag": ["Energy", "Oil"],
             "description1": "integrated oil and gas", "description2": ""},
            {"symbol": "CVX", "name": "Chevron Corporation", "tag": ["Energy", "Oil"],
             "description1": "oil major", "description2": ""},
        ],
        "etfs": [
            {"symbol": "XLE", "name": "Energy Select Sector SPDR Fund", "tag": ["Energy"],
             "description1": "", "description2": ""},
        ],
    }), encoding="utf-8")
    (tmp_path / "tags_weight.json").write_text(json.dumps({"1.0": ["Energy", "Oil"]}), encoding="utf-8")
    (tmp_path / "Compare_All.txt").write_text("XOM: +0.3%\nCVX: +0.1%\nXLE: -0.2%\n", encoding="utf-8")
    (tmp_path / "marketcap_pe.txt").write_text("XOM: 450000000000, 14.2\nCVX: 300000000000, --\n", encoding="utf-8")
    (tmp_path / "volume.txt").write_text("XOM: 15000000\n", encoding="utf-8")
    (tmp_path / "Sectors_All.json").write_text(json.dumps({"Energy": ["XOM", "CVX"]}), encoding="utf-8")
    return tmp_path


@pytest.fixture
def engine(data_dir):
    cfg = Settings(data_dir=str(data_dir), history_path=str(data_dir / "history.json"))
    eng = SymbolSearchEngine(cfg)
    yield eng
    eng.close()


def test_queries_fail_until_loaded(engine) -> None:
    assert not engine.is_loaded
    with pytest.raises(CatalogUnavailableError):
        engine.search("oil")
    with pytest.raises(CatalogUnavailableError):
        engine.find_similar("XOM")
    assert engine.history.entries() == []


def test_search_after_load_records_history(engine, data_dir) -> None:
    engine.load()
    groups = engine.search("Oil")
    assert groups[0].category is MatchCategory.STOCK_TAG
    assert engine.history.entries() == ["Oil"]

    reloaded = SearchHistory.from_json_file(str(data_dir / "history.json"))
    assert reloaded.entries() == ["Oil"]


def test_find_similar_and_groups(engine) -> None:
    engine.load()
    related = engine.find_similar("xom")
    assert [r.symbol for r in related] == ["CVX", "XLE"]
    assert related[0].market_cap == 3.0e11
    assert engine.group_for("cvx") == "Energy"
    assert engine.group_for("XLE") is None
    with pytest.raises(NotFoundError):
        engine.find_similar("AAPL")


def test_enrich_uses_market_data(engine) -> None:
    engine.load()
    (tags,) = [g for g in engine.search("oil") if g.category is MatchCategory.STOCK_TAG]
    enriched = {e.record.symbol: e for e in engine.enrich(tags)}
    assert enriched["XOM"].market_cap == "450.0B"
    assert enriched["XOM"].pe_ratio == "14.20"
    assert enriched["XOM"].compare == "+0.3%"
    assert enriched["XOM"].volume == "15,000,000"
    assert enriched["CVX"].pe_ratio == "--"
    assert enriched["CVX"].volume is None


def test_submitted_search_matches_direct_search(engine) -> None:
    engine.load()
    ticket = engine.submit_search("energy")
    other = engine.submit_search("oil")
    assert ticket.request_id != other.request_id
    assert ticket.result(timeout=10) == engine.search("energy")
    assert other.result(timeout=10) == engine.search("oil")


def test_search_many_keys_results_by_query(engine) -> None:
    engine.load()
    out = engine.dispatcher.search_many(["oil", "energy", "oil", "  "])
    assert set(out) == {"oil", "energy"}
    assert out["oil"] == engine.search("oil")
