# backend/tickerscope/services/loaders.py
from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
from loguru import logger

from tickerscope.models.records import InstrumentKind, InstrumentRecord, TagWeightTable

# ---------- helpers ----------
def _exists(path: Path, what: str) -> bool:
    if path.exists():
        return True
    logger.info(f"{what} not found at {path} (optional).")
    return False

def _read_json(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except Exception as e:
        logger.exception(f"Failed to read {path}: {e}")
        raise

def _read_pairs(path: Path) -> pd.DataFrame:
    """
    Lines of the form "SYMBOL: rest" -> DataFrame[symbol, rest].
    Split happens at the first colon only; symbols are uppercased.
    """
    try:
        text = path.read_text(encoding="utf-8-sig")
    except Exception as e:
        logger.exception(f"Failed to read {path}: {e}")
        raise

    lines = pd.Series(text.splitlines(), dtype="object")
    parts = lines.str.split(":", n=1, expand=True)
    if parts.empty or parts.shape[1] < 2:
        return pd.DataFrame(columns=["symbol", "rest"])

    df = parts.iloc[:, :2].copy()
    df.columns = ["symbol", "rest"]
    df = df.replace({np.nan: None}).dropna()
    df["symbol"] = df["symbol"].str.strip().str.upper()
    df["rest"] = df["rest"].str.strip()
    df = df[df["symbol"] != ""]

    dropped = len(lines) - len(df)
    if dropped:
        logger.debug(f"{path.name}: ignored {dropped} malformed/blank lines")
    return df.reset_index(drop=True)

# ---------- catalog ----------
def _records(rows: Any, kind: InstrumentKind, source: str) -> List[InstrumentRecord]:
    out: List[InstrumentRecord] = []
    if not isinstance(rows, list):
        logger.warning(f"{source}: expected a list of {kind.value} rows, got {type(rows).__name__}")
        return out
    for i, r in enumerate(rows):
        if not isinstance(r, dict) or not str(r.get("symbol") or "").strip():
            logger.warning(f"{source}: skipping {kind.value} row {i} without a symbol")
            continue
        tags = r.get("tag", r.get("tags")) or []
        out.append(InstrumentRecord(
            symbol=str(r["symbol"]).strip(),
            name=str(r.get("name") or ""),
            tags=[str(t) for t in tags if t is not None],
            description1=str(r.get("description1") or ""),
            description2=str(r.get("description2") or ""),
            kind=kind,
            value=(str(r["value"]) if r.get("value") is not None else None),
        ))
    return out

def load_descriptions(path: Path) -> Tuple[List[InstrumentRecord], List[InstrumentRecord]]:
    """description.json -> (stocks, etfs)."""
    path = Path(path)
    if not _exists(path, "Catalog description file"):
        return [], []
    raw = _read_json(path)
    if not isinstance(raw, dict):
        logger.warning(f"{path}: expected an object with 'stocks' and 'etfs'")
        return [], []
    stocks = _records(raw.get("stocks", []), InstrumentKind.STOCK, path.name)
    etfs = _records(raw.get("etfs", []), InstrumentKind.ETF, path.name)
    logger.info(f"Loaded catalog {path}: {len(stocks)} stocks, {len(etfs)} ETFs")
    return stocks, etfs

def load_tag_weights(path: Path) -> TagWeightTable:
    """tags_weight.json: {"2.0": ["EV", ...], ...}. Bad groups are skipped."""
    path = Path(path)
    if not _exists(path, "Tag weight file"):
        return {}
    raw = _read_json(path)
    table: TagWeightTable = {}
    if not isinstance(raw, dict):
        logger.warning(f"{path}: expected an object of weight -> tags")
        return table
    for k, v in raw.items():
        try:
            w = float(k)
        except (TypeError, ValueError):
            logger.warning(f"{path.name}: ignoring non-numeric weight {k!r}")
            continue
        if not isinstance(v, list):
            logger.warning(f"{path.name}: ignoring weight {k!r}, tags are not a list")
            continue
        table.setdefault(w, []).extend(str(t) for t in v if t is not None)
    logger.info(f"Loaded tag weights {path}: {sum(len(v) for v in table.values())} tags in {len(table)} groups")
    return table

def load_groups(path: Path) -> Dict[str, List[str]]:
    """Sectors_All.json: {group: [symbols]}."""
    path = Path(path)
    if not _exists(path, "Sector groups file"):
        return {}
    raw = _read_json(path)
    if not isinstance(raw, dict):
        logger.warning(f"{path}: expected an object of group -> symbols")
        return {}
    return {str(g): [str(s) for s in (syms or []) if s] for g, syms in raw.items() if isinstance(syms, list)}

# ---------- market data ----------
def load_compare(path: Path) -> Dict[str, str]:
    """Compare_All.txt: "SYMBOL: value" -> {SYMBOL: value}."""
    path = Path(path)
    if not _exists(path, "Compare file"):
        return {}
    df = _read_pairs(path)
    out = dict(zip(df["symbol"], df["rest"]))
    logger.info(f"Loaded {len(out)} comparison values from {path}")
    return out

def _to_float(s: Optional[str]) -> Optional[float]:
    s = (s or "").strip()
    if not s or s == "--":
        return None
    try:
        value = float(s.replace(",", ""))
    except ValueError:
        return None
    # "nan" and "inf" parse as floats but are not usable figures
    return value if math.isfinite(value) else None

def load_market_caps(path: Path) -> Tuple[Dict[str, float], Dict[str, Optional[float]]]:
    """marketcap_pe.txt: "SYMBOL: cap, pe[, ...]"; pe "--" means unknown."""
    path = Path(path)
    if not _exists(path, "Market cap file"):
        return {}, {}
    df = _read_pairs(path)
    vals = df["rest"].str.split(",", expand=True)
    caps: Dict[str, float] = {}
    pes: Dict[str, Optional[float]] = {}
    if vals.shape[1] < 2:
        logger.warning(f"{path}: no 'cap, pe' rows found")
        return caps, pes
    vals = vals.replace({np.nan: None})
    for sym, cap_s, pe_s in zip(df["symbol"], vals[0], vals[1]):
        cap = _to_float(cap_s)
        if cap is None or pe_s is None:
            continue
        caps[sym] = cap
        pes[sym] = _to_float(pe_s)
    logger.info(f"Loaded {len(caps)} market caps from {path}")
    return caps, pes

def load_volumes(path: Path) -> Dict[str, int]:
    """"SYMBOL: volume" lines."""
    path = Path(path)
    if not _exists(path, "Volume file"):
        return {}
    df = _read_pairs(path)
    nums = pd.to_numeric(df["rest"].str.replace(",", ""), errors="coerce")
    out = {s: int(v) for s, v in zip(df["symbol"], nums) if not pd.isna(v)}
    logger.info(f"Loaded {len(out)} volumes from {path}")
    return out
