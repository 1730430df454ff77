# gpi/aggregate.py
import numpy as np
import pandas as pd
from sklearn.preprocessing import MinMaxScaler

from gpi.names import norm_key

# Aggregations never filter; the controller hands in the active record set.


def year_sort_key(year):
    """Chronological order for year strings; non-numeric years go last."""
    try:
        return (0, int(str(year).strip()), "")
    except ValueError:
        return (1, 0, str(year))

def year_values(records: pd.DataFrame) -> list:
    return sorted(records["year"].unique(), key=year_sort_key)

def with_keys(records: pd.DataFrame) -> pd.DataFrame:
    work = records.copy()
    work["key"] = work["country"].map(norm_key)
    work["_pos"] = np.arange(len(work))
    ranks = {y: i for i, y in enumerate(year_values(records))}
    work["_year_rank"] = work["year"].map(ranks).astype(int) if len(work) else pd.Series(dtype=int)
    return work

def _public(work: pd.DataFrame) -> pd.DataFrame:
    return work.drop(columns=["_pos", "_year_rank"]).reset_index(drop=True)

def latest_by_country(records: pd.DataFrame) -> pd.DataFrame:
    """One row per country key: its record with the latest year.

    Two records for the same key and year: the later one in the data wins.
    Rows come back sorted by key.
    """
    work = with_keys(records).sort_values(["_year_rank", "_pos"])
    latest = work.groupby("key", sort=True).tail(1).sort_values("key")
    return _public(latest)

def latest_scores(records: pd.DataFrame) -> dict:
    latest = latest_by_country(records)
    return dict(zip(latest["key"], latest["score"]))

def top_n(records: pd.DataFrame, n: int, field: str = "score") -> pd.DataFrame:
    """The n highest records by field, descending.

    Ties break on country key ascending, then on input order.
    """
    if field not in ("score", "year"):
        raise ValueError(f"Cannot rank by {field!r}")
    work = with_keys(records)
    sort_col = "_year_rank" if field == "year" else field
    work = work.sort_values([sort_col, "key", "_pos"], ascending=[False, True, True])
    return _public(work.head(max(int(n), 0)))

def group_by_country(records: pd.DataFrame) -> dict:
    """{key: frame of (year, score)} in data order, keys in first-seen order."""
    work = with_keys(records)
    groups = {}
    for key, g in work.groupby("key", sort=False):
        groups[key] = g[["year", "score"]].reset_index(drop=True)
    return groups

def best_by_country(records: pd.DataFrame) -> pd.DataFrame:
    work = with_keys(records).sort_values(["score", "key", "_pos"], ascending=[False, True, True])
    return _public(work.drop_duplicates("key", keep="first"))

def history(records: pd.DataFrame, key: str) -> pd.DataFrame:
    """All records of one country, oldest year first."""
    work = with_keys(records)
    work = work[work["key"] == key].sort_values(["_year_rank", "_pos"])
    return _public(work)

def scale_scores(scores: pd.Series) -> pd.Series:
    """Min-max scale to 0..1; a single distinct value maps to 0.5."""
    scores = pd.Series(scores, dtype=float)
    if scores.empty:
        return scores
    if scores.nunique(dropna=True) <= 1:
        return pd.Series(0.5, index=scores.index)
    scaler = MinMaxScaler()
    vals = scaler.fit_transform(scores.to_numpy().reshape(-1, 1))
    return pd.Series(vals.ravel(), index=scores.index)
