from io import BytesIO
from typing import List, Dict, Any, Iterable
import pandas as pd

from tickerscope.models.records import GroupedResult, RelatedInstrument

def _to_csv(rows: List[Dict[str, Any]], preferred: List[str]) -> bytes:
    df = pd.DataFrame(rows, columns=preferred if not rows else None)
    cols = [c for c in preferred if c in df.columns] + [c for c in df.columns if c not in preferred]
    df = df[cols]
    bio = BytesIO()
    df.to_csv(bio, index=False)
    return bio.getvalue()

def grouped_to_csv_bytes(groups: Iterable[GroupedResult]) -> bytes:
    # one row per (category, result); group order and in-group order preserved
    preferred = ["Category", "CategoryScore", "Symbol", "Name", "Kind", "Score", "Tags"]
    rows: List[Dict[str, Any]] = []
    for g in groups:
        for r in g.results:
            rows.append({
                "Category": g.category.label,
                "CategoryScore": g.highest_score,
                "Symbol": r.record.symbol,
                "Name": r.record.name,
                "Kind": r.record.kind.value,
                "Score": r.score,
                "Tags": ", ".join(r.record.tags),
            })
    return _to_csv(rows, preferred)

def related_to_csv_bytes(related: Iterable[RelatedInstrument]) -> bytes:
    preferred = ["Symbol", "Kind", "TotalWeight", "Compare", "MarketCap", "MatchedTags", "Tags"]
    rows = [{
        "Symbol": r.symbol,
        "Kind": r.kind.value,
        "TotalWeight": round(r.total_weight, 2),
        "Compare": r.comparison_value,
        "MarketCap": r.market_cap,
        "MatchedTags": "; ".join(f"{t}:{w:.2f}" for t, w in r.matched_tags),
        "Tags": ", ".join(r.all_tags),
    } for r in related]
    return _to_csv(rows, preferred)
