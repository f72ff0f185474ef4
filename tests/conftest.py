"""Shared fixtures: a small in-memory catalog."""

from __future__ import annotations

import pytest
from tickerscope.models.records import InstrumentKind, InstrumentRecord
from tickerscope.services.catalog import build_catalog


def stock(symbol, name="", tags=(), d1="", d2=""):
    return InstrumentRecord(symbol=symbol, name=name, tags=list(tags), description1=d1,
                            description2=d2, kind=InstrumentKind.STOCK)


def etf(symbol, name="", tags=(), d1="", d2=""):
    return InstrumentRecord(symbol=symbol, name=name, tags=list(tags), description1=d1,
                            description2=d2, kind=InstrumentKind.ETF)


STOCKS = [
    stock("AAPL", "Apple Inc., Common Stock", ["Technology", "Consumer Electronics"],
          "designs smartphones and computers", "iphone maker"),
    stock("TSLA", "Tesla Inc.", ["EV", "Automotive", "Energy"], "electric vehicles", "solar and storage"),
    stock("XOM", "Exxon Mobil Corporation", ["Energy", "Oil"], "integrated oil and gas", ""),
    stock("CVX", "Chevron Corporation", ["Energy", "Oil"], "oil major", ""),
    stock("F", "Ford Motor Company", ["Auto", "Automotive"], "cars and trucks", ""),
    stock("NOTAG", "Quiet Holdings", [], "", ""),
]

ETFS = [
    etf("XLE", "Energy Select Sector SPDR Fund", ["Energy", "Oil", "Sector"], "tracks energy stocks", ""),
    etf("QQQ", "Invesco QQQ Trust", ["Technology", "Nasdaq"], "tracks the nasdaq 100", ""),
]

COMPARE = {"AAPL": "+1.2%", "TSLA": "-0.5%", "XOM": "+0.3%", "CVX": "+0.1%", "F": "-1.0%",
           "XLE": "+0.4%", "QQQ": "+0.9%"}
CAPS = {"AAPL": 3.0e12, "TSLA": 8.0e11, "XOM": 4.5e11, "CVX": 3.0e11, "F": 5.0e10, "XLE": 3.5e10}
WEIGHTS = {2.0: ["EV"], 1.5: ["Oil"], 1.0: ["Energy", "Automotive"]}
GROUPS = {"Energy": ["XOM", "CVX", "XLE"], "Technology": ["AAPL", "QQQ"]}


@pytest.fixture
def catalog():
    return build_catalog(STOCKS, ETFS, WEIGHTS, CAPS, COMPARE, GROUPS)
