from __future__ import annotations

import pytest
from tickerscope.core.errors import CatalogUnavailableError, NotFoundError
from tickerscope.models.records import InstrumentKind, InstrumentRecord
from tickerscope.services.catalog import build_catalog
from tickerscope.services.similar import find_similar, match_tags


def _stock(symbol: str, tags) -> InstrumentRecord:
    return InstrumentRecord(symbol=symbol, name=symbol, tags=list(tags))


def _compare_all(*symbols: str) -> dict:
    return {s: "+0.1%" for s in symbols}


def test_end_to_end_energy_peers() -> None:
    catalog = build_catalog(
        [_stock("XOM", ["Energy", "Oil"]), _stock("CVX", ["Energy", "Oil"])], [],
        tag_weights={1.0: ["Energy", "Oil"]},
        comparison_by_symbol=_compare_all("XOM", "CVX"),
    )
    related = find_similar("XOM", catalog)
    assert [r.symbol for r in related] == ["CVX"]
    assert related[0].total_weight == pytest.approx(2.0)


def test_target_is_never_in_its_own_results(catalog) -> None:
    for sym in ("AAPL", "aapl"):
        symbols = [r.symbol.upper() for r in find_similar(sym, catalog)]
        assert "AAPL" not in symbols
        assert symbols == ["QQQ"]


def test_target_tag_is_consumed_once() -> None:
    catalog = build_catalog(
        [_stock("TGT", ["EV", "Auto"]), _stock("CAND", ["EV", "Automotive"])], [],
        tag_weights={2.0: ["EV"]},
        comparison_by_symbol=_compare_all("TGT", "CAND"),
    )
    (cand,) = find_similar("TGT", catalog)
    assert cand.total_weight == pytest.approx(3.0)
    assert cand.matched_tags == [("EV", 2.0), ("Automotive", 1.0)]


def test_partial_match_caps_weight_at_one() -> None:
    assert match_tags(["EV Charging"], {"ev": 2.0}) == [("EV Charging", 1.0)]
    assert match_tags(["Auto Parts"], {"auto": 0.5}) == [("Auto Parts", 0.5)]


def test_partial_match_uses_each_target_tag_once() -> None:
    assert match_tags(["Automotive", "Autos"], {"auto": 1.0}) == [("Automotive", 1.0)]


def test_market_cap_breaks_weight_ties(catalog) -> None:
    related = find_similar("XOM", catalog)
    assert [(r.symbol, r.total_weight) for r in related] == [
        ("CVX", pytest.approx(2.5)),
        ("XLE", pytest.approx(2.5)),
        ("TSLA", pytest.approx(1.0)),
    ]


def test_unknown_market_cap_sorts_last_then_symbol() -> None:
    catalog = build_catalog(
        [_stock("TGT", ["Oil"]), _stock("BBB", ["Oil"]), _stock("AAA", ["Oil"]), _stock("CCC", ["Oil"])], [],
        market_cap_by_symbol={"CCC": 1.0e9},
        comparison_by_symbol=_compare_all("BBB", "AAA", "CCC"),
    )
    assert [r.symbol for r in find_similar("TGT", catalog)] == ["CCC", "AAA", "BBB"]


def test_blank_comparison_is_excluded() -> None:
    catalog = build_catalog(
        [_stock("TGT", ["Oil"]), _stock("AAA", ["Oil"]), _stock("BBB", ["Oil"]), _stock("CCC", ["Oil"])], [],
        comparison_by_symbol={"AAA": "+1%", "BBB": "   "},
    )
    assert [r.symbol for r in find_similar("TGT", catalog)] == ["AAA"]


def test_results_are_truncated() -> None:
    peers = [_stock(f"P{i:03d}", ["Oil"]) for i in range(60)]
    catalog = build_catalog([_stock("TGT", ["Oil"]), *peers], [],
                            comparison_by_symbol=_compare_all(*(p.symbol for p in peers)))
    assert len(find_similar("TGT", catalog)) == 50
    assert len(find_similar("TGT", catalog, limit=5)) == 5


def test_unknown_symbol_raises_not_found(catalog) -> None:
    with pytest.raises(NotFoundError):
        find_similar("NOPE", catalog)
    with pytest.raises(LookupError):
        find_similar("", catalog)


def test_found_target_without_tags_is_empty(catalog) -> None:
    assert find_similar("NOTAG", catalog) == []


def test_unloaded_catalog_raises() -> None:
    with pytest.raises(CatalogUnavailableError):
        find_similar("AAPL", None)


def test_non_finite_market_cap_counts_as_unknown() -> None:
    catalog = build_catalog(
        [_stock("TGT", ["Oil"]), _stock("AAA", ["Oil"]), _stock("BBB", ["Oil"]), _stock("CCC", ["Oil"])], [],
        market_cap_by_symbol={"AAA": float("nan"), "BBB": 5.0e9, "CCC": float("inf")},
        comparison_by_symbol=_compare_all("AAA", "BBB", "CCC"),
    )
    assert catalog.market_cap("AAA") is None
    assert catalog.market_cap("CCC") is None
    assert [r.symbol for r in find_similar("TGT", catalog)] == ["BBB", "AAA", "CCC"]


def test_etf_target_excludes_itself() -> None:
    catalog = build_catalog(
        [InstrumentRecord(symbol="AAA", name="AAA", tags=["Oil"])],
        [
            InstrumentRecord(symbol="XLE", name="XLE", tags=["Oil", "Energy"]),
            InstrumentRecord(symbol="XLF", name="XLF", tags=["Energy"]),
        ],
        comparison_by_symbol=_compare_all("AAA", "XLE", "XLF"),
    )
    related = find_similar("xle", catalog)
    assert [(r.symbol, r.kind) for r in related] == [
        ("AAA", InstrumentKind.STOCK),
        ("XLF", InstrumentKind.ETF),
    ]


def test_symbol_listed_as_stock_and_etf_is_excluded_in_both() -> None:
    catalog = build_catalog(
        [_stock("DUP", ["Oil"]), _stock("AAA", ["Oil"])],
        [InstrumentRecord(symbol="DUP", name="DUP fund", tags=["Oil"]),
         InstrumentRecord(symbol="FND", name="FND", tags=["Oil"])],
        comparison_by_symbol=_compare_all("DUP", "AAA", "FND"),
    )
    assert [r.symbol for r in find_similar("dup", catalog)] == ["AAA", "FND"]
