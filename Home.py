# Home.py
import logging

import streamlit as st

from gpi.charts import chart_figure, error_frame, map_figure, table_frame
from gpi.config import ALL_YEARS, DATA_FILES, configure_logging
from gpi.data import load_sources
from gpi.errors import DataUnavailable
from gpi.state import SORT_DEFAULT, SORT_FIELDS, Controller

configure_logging()
logger = logging.getLogger("gpi.home")

st.set_page_config(page_title="Global Peace Index", layout="wide")
st.title("Global Peace Index Dashboard")


@st.cache_data(show_spinner="Loading data…")
def load():
    return load_sources()

try:
    sources = load()
except DataUnavailable as e:
    st.subheader("Countries")
    st.dataframe(error_frame(str(e)), hide_index=True, use_container_width=True)
    st.stop()

if "controller" not in st.session_state:
    ctl = Controller(sources.records)
    st.session_state["controller"] = ctl
    first = ctl.render_all()
    st.session_state["slices"] = {"table": first.table, "chart": first.chart, "map": first.map}
ctl = st.session_state["controller"]
slices = st.session_state["slices"]


def apply(action, **payload):
    update = ctl.dispatch(action, payload)
    for view in update.views:
        slices[view] = getattr(update, view)

def sync_sort_widgets():
    st.session_state["sort_field"], st.session_state["sort_dir"] = ctl.sort_order or SORT_DEFAULT

def on_year():
    st.session_state["country"] = ""
    apply("set_year", year=st.session_state["year"])
    sync_sort_widgets()

def on_search():
    apply("set_search", query=st.session_state["search"])
    sync_sort_widgets()

def on_sort():
    apply("sort", field=st.session_state["sort_field"], direction=st.session_state["sort_dir"])

def on_country():
    apply("select_country", name=st.session_state["country"])

def on_map_select():
    points = st.session_state["map"].selection.points
    name = points[0].get("location") if points else None
    apply("select_country", name=name)

def on_reset():
    st.session_state["year"] = ALL_YEARS
    st.session_state["search"] = ""
    st.session_state["country"] = ""
    apply("reset")
    sync_sort_widgets()


# ---------- Sidebar filters ----------
st.sidebar.header("Filters")
st.sidebar.selectbox("Year", [ALL_YEARS] + ctl.years, key="year", on_change=on_year)
st.sidebar.text_input("Search country", key="search", on_change=on_search)
countries = [""] + sorted(ctl.records["country"].unique(), key=str.lower)
st.sidebar.selectbox("Country", countries, key="country", on_change=on_country,
                     format_func=lambda c: c or "— none —")
st.sidebar.button("Clear filters", on_click=on_reset)

st.sidebar.header("Data sources")
for k, v in DATA_FILES.items():
    st.sidebar.write(f"*{k}* → {v}")
if sources.dropped:
    st.sidebar.caption(f"{sources.dropped} rows skipped (missing or non-numeric fields).")

# ---------- Table + chart ----------
left, right = st.columns([2, 3])
with left:
    st.subheader("Countries")
    c1, c2, c3 = st.columns([2, 2, 1])
    if "sort_field" not in st.session_state:
        sync_sort_widgets()
    c1.selectbox("Sort by", SORT_FIELDS, key="sort_field")
    c2.radio("Order", ["desc", "asc"], horizontal=True, key="sort_dir")
    c3.button("Sort", on_click=on_sort)
    st.dataframe(table_frame(slices["table"]), hide_index=True, use_container_width=True, height=480)

with right:
    st.plotly_chart(chart_figure(slices["chart"]), use_container_width=True)

# ---------- Map ----------
st.markdown("---")
m = slices["map"]
joined = ctl.map_regions(sources.geojson["features"], m.scores)
fig = map_figure(sources.geojson, joined, m.selected, m.year, ctl.reconciler.name_key)
st.plotly_chart(fig, use_container_width=True, key="map", on_select=on_map_select, selection_mode="points")
st.caption("Click a country on the map to see its GPI history. Grey regions have no data.")
