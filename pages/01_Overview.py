# pages/01_Overview.py
import streamlit as st

from gpi.aggregate import latest_by_country, top_n, year_values
from gpi.charts import table_frame
from gpi.config import configure_logging
from gpi.data import load_sources
from gpi.errors import DataUnavailable
from gpi.names import Reconciler

configure_logging()


@st.cache_data(show_spinner="Loading data…")
def load():
    return load_sources()

# ---------- UI ----------
st.title("Overview")
st.caption("Quick KPIs and how well the score data lines up with the world map.")

try:
    sources = load()
except DataUnavailable as e:
    st.warning(str(e))
    st.stop()

df = sources.records
years = year_values(df)

# KPIs
c1, c2, c3, c4 = st.columns(4)
c1.metric("Countries", f"{df['country'].str.lower().nunique():,}")
c2.metric("Years", f"{len(years)}")
c3.metric("Latest year", years[-1] if years else "—")
c4.metric("Rows skipped", f"{sources.dropped:,}")

st.markdown("---")

# Name matching between the CSV and the boundary file
latest = latest_by_country(df)
no_data, no_shape = Reconciler().unmatched(sources.geojson["features"], latest["key"])
a, b = st.columns(2)
with a:
    st.markdown(f"*Map regions without data* ({len(no_data)})")
    st.dataframe({"Region": no_data}, use_container_width=True, height=260)
with b:
    st.markdown(f"*Countries not found on the map* ({len(no_shape)})")
    if no_shape:
        st.dataframe({"Country": no_shape}, use_container_width=True, height=260)
    else:
        st.success("Every country in the data has a map region.")

with st.expander("Preview (top 25 by latest score)"):
    st.dataframe(table_frame(top_n(latest, 25)), hide_index=True, use_container_width=True)

with st.expander("Raw data preview"):
    st.dataframe(df.head(30), use_container_width=True)
