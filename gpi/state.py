# gpi/state.py
"""
View state for the dashboard and the transitions that change it.

The controller owns a single ViewState. Each transition returns an Update
naming the views (table, chart, map) that must redraw, together with the
data each of them needs. Renderers only ever see those slices.
"""
import logging
from dataclasses import dataclass
from typing import FrozenSet, Optional

import pandas as pd

from gpi.aggregate import best_by_country, history, latest_scores, top_n, year_sort_key, year_values
from gpi.config import ALL_YEARS, BAR_TOP_N, TREND_TOP_N
from gpi.names import Reconciler, norm_key

logger = logging.getLogger(__name__)

VIEWS = frozenset({"table", "chart", "map"})
SORT_FIELDS = ("country", "score", "year")
SORT_DIRECTIONS = ("asc", "desc")
SORT_DEFAULT = ("score", "desc")


@dataclass
class ViewState:
    selected_year: str = ALL_YEARS
    search_query: str = ""
    selected_country: Optional[str] = None


@dataclass
class ChartSpec:
    kind: str  # country | trend | bar
    mark: str  # bar | line
    data: pd.DataFrame
    title: str


@dataclass
class MapSlice:
    scores: dict
    selected: Optional[str]
    year: str


@dataclass
class Update:
    views: FrozenSet[str]
    table: Optional[pd.DataFrame] = None
    chart: Optional[ChartSpec] = None
    map: Optional[MapSlice] = None


def sort_rows(rows: pd.DataFrame, field: str, direction: str = "desc") -> pd.DataFrame:
    if field not in SORT_FIELDS:
        raise ValueError(f"Cannot sort by {field!r}")
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f"Unknown sort direction {direction!r}")
    ascending = direction == "asc"
    if field == "country":
        key = lambda s: s.str.lower()
    elif field == "year":
        ranks = {y: i for i, y in enumerate(sorted(rows["year"].unique(), key=year_sort_key))}
        key = lambda s: s.map(ranks)
    else:
        key = None
    return rows.sort_values(field, ascending=ascending, kind="mergesort", key=key).reset_index(drop=True)


class Controller:
    ACTIONS = frozenset({"set_year", "set_search", "select_country", "sort", "reset"})

    def __init__(self, records: pd.DataFrame, reconciler: Optional[Reconciler] = None):
        self.records = records.reset_index(drop=True)
        self.reconciler = reconciler or Reconciler()
        self.years = year_values(self.records)
        self.keys = set(self.records["country"].map(norm_key))
        self.state = ViewState()
        self._refresh_rows()

    # ---------- derived data ----------
    def _refresh_rows(self):
        # new rows come back in data order, so any table sort is dropped
        self._rows = self.table_rows()
        self.sort_order = None

    def filtered(self) -> pd.DataFrame:
        year = self.state.selected_year
        if year == ALL_YEARS:
            return self.records
        return self.records[self.records["year"] == year].reset_index(drop=True)

    def table_rows(self) -> pd.DataFrame:
        rows = self.filtered()
        query = self.state.search_query.lower()
        if query:
            rows = rows[rows["country"].str.lower().str.contains(query, regex=False)]
        return rows.reset_index(drop=True)

    def chart_spec(self) -> ChartSpec:
        year = self.state.selected_year
        key = self.state.selected_country
        if key is not None:
            hist = history(self.records, key)
            mark = "bar" if len(hist) == 1 else "line"
            name = hist["country"].iloc[-1]
            return ChartSpec("country", mark, hist, f"{name} — GPI by year")

        if year == ALL_YEARS and len(self.years) > 1:
            best = best_by_country(self.records).head(TREND_TOP_N)
            data = pd.concat([history(self.records, k) for k in best["key"]], ignore_index=True)
            return ChartSpec("trend", "line", data, f"Top {TREND_TOP_N} countries by best GPI — over time")

        rows = top_n(self.filtered(), BAR_TOP_N)
        suffix = "" if year == ALL_YEARS else f" — {year}"
        return ChartSpec("bar", "bar", rows, f"Top {BAR_TOP_N} countries by GPI{suffix}")

    def map_slice(self) -> MapSlice:
        return MapSlice(latest_scores(self.filtered()), self.state.selected_country,
                        self.state.selected_year)

    def map_regions(self, features, scores=None) -> list:
        """Join boundary features to the active scores; keys are matched against every country."""
        scores = self.map_slice().scores if scores is None else scores
        return self.reconciler.join(features, scores, keys=self.keys)

    def _update(self, views) -> Update:
        views = frozenset(views)
        return Update(
            views,
            table=self._rows if "table" in views else None,
            chart=self.chart_spec() if "chart" in views else None,
            map=self.map_slice() if "map" in views else None,
        )

    # ---------- transitions ----------
    def render_all(self) -> Update:
        return self._update(VIEWS)

    def set_year(self, year) -> Update:
        year = str(year).strip()
        if year.lower() == ALL_YEARS:
            year = ALL_YEARS
        elif year not in self.years:
            raise ValueError(f"No records for year {year!r}")
        self.state.selected_year = year
        self.state.selected_country = None
        self._refresh_rows()
        return self._update(VIEWS)

    def set_search(self, query) -> Update:
        self.state.search_query = query or ""
        self._refresh_rows()
        return self._update({"table"})

    def select_country(self, name) -> Update:
        key = self.reconciler.resolve_selection(name, self.keys)
        if key is None and norm_key(name):
            logger.info("No records for %r; showing the aggregate chart", name)
        self.state.selected_country = key
        return self._update({"chart", "map"})

    def sort(self, field, direction="desc") -> Update:
        self._rows = sort_rows(self._rows, field, direction)
        self.sort_order = (field, direction)
        return self._update({"table"})

    def reset(self) -> Update:
        self.state = ViewState()
        self._refresh_rows()
        return self.render_all()

    def dispatch(self, action: str, payload: Optional[dict] = None) -> Update:
        """Apply a named user action, e.g. dispatch("set_year", {"year": "2023"})."""
        if action not in self.ACTIONS:
            raise KeyError(f"Unknown action {action!r}")
        logger.debug("dispatch %s %s", action, payload)
        return getattr(self, action)(**(payload or {}))
