# gpi/data.py
import io, json, logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import NamedTuple

import numpy as np
import pandas as pd
import requests

from gpi.config import COLUMNS, DATA_FILES, ERROR_TEXT, FETCH_TIMEOUT, NO_DATA_TEXT
from gpi.errors import DataUnavailable

logger = logging.getLogger(__name__)

RECORD_COLUMNS = ["country", "score", "year"]


class NormalizeResult(NamedTuple):
    records: pd.DataFrame
    dropped: int


class Sources(NamedTuple):
    records: pd.DataFrame
    geojson: dict
    dropped: int


def ensure_columns(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = [str(c).strip() for c in df.columns]
    # drop duplicate-named columns, keep the first
    df = df.loc[:, ~df.columns.duplicated()]
    return df

def empty_records() -> pd.DataFrame:
    return pd.DataFrame({"country": pd.Series(dtype=object),
                         "score": pd.Series(dtype=float),
                         "year": pd.Series(dtype=object)})

def _clean_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if np.isnan(value):
            return ""
        if value.is_integer():
            value = int(value)
    return str(value).strip()

def normalize_records(raw) -> NormalizeResult:
    """Turn raw rows ({Country, GPI, Year} mappings or a DataFrame) into records.

    Rows missing a country, score or year, or whose score is not a finite
    number, are dropped and counted. Input order is preserved.
    """
    df = raw if isinstance(raw, pd.DataFrame) else pd.DataFrame(list(raw))
    if df.empty:
        return NormalizeResult(empty_records(), 0)
    df = ensure_columns(df)

    missing = [c for c in COLUMNS.values() if c not in df.columns]
    if missing:
        logger.warning("Score data is missing columns %s", missing)
        return NormalizeResult(empty_records(), len(df))

    country = df[COLUMNS["country"]].map(_clean_text)
    year = df[COLUMNS["year"]].map(_clean_text)
    score = pd.to_numeric(df[COLUMNS["score"]].map(_clean_text), errors="coerce").astype(float)

    keep = (country != "") & (year != "") & np.isfinite(score)
    records = pd.DataFrame({
        "country": country[keep].astype(object),
        "score": score[keep],
        "year": year[keep].astype(object),
    }).reset_index(drop=True)

    dropped = int((~keep).sum())
    if dropped:
        logger.info("Dropped %d of %d rows with missing or non-numeric fields", dropped, len(df))
    return NormalizeResult(records, dropped)

def is_url(src) -> bool:
    return str(src).startswith(("http://", "https://"))

def read_text(src, timeout=FETCH_TIMEOUT) -> str:
    if is_url(src):
        response = requests.get(src, timeout=timeout)
        response.raise_for_status()
        return response.text
    return Path(src).read_text(encoding="utf-8")

def load_scores(src=None) -> NormalizeResult:
    src = src or DATA_FILES["scores"]
    raw = pd.read_csv(io.StringIO(read_text(src)), dtype=str, keep_default_na=False)
    return normalize_records(raw)

def load_boundaries(src=None) -> dict:
    src = src or DATA_FILES["boundaries"]
    geojson = json.loads(read_text(src))
    if not isinstance(geojson, dict) or not isinstance(geojson.get("features"), list):
        raise ValueError(f"{src} is not a GeoJSON FeatureCollection")
    return geojson

def load_sources(scores_src=None, boundaries_src=None) -> Sources:
    """Read the score CSV and the boundary GeoJSON concurrently.

    Raises DataUnavailable if either read fails or no valid records remain.
    """
    with ThreadPoolExecutor(max_workers=2) as pool:
        scores_job = pool.submit(load_scores, scores_src)
        boundaries_job = pool.submit(load_boundaries, boundaries_src)
        try:
            result = scores_job.result()
            geojson = boundaries_job.result()
        except (OSError, ValueError, requests.RequestException) as e:
            logger.exception("Failed to load dashboard data")
            raise DataUnavailable(ERROR_TEXT) from e

    if result.records.empty:
        logger.error("No valid score records after normalization (%d rows dropped)", result.dropped)
        raise DataUnavailable(NO_DATA_TEXT)

    logger.info("Loaded %d records and %d boundary features",
                len(result.records), len(geojson["features"]))
    return Sources(result.records, geojson, result.dropped)
