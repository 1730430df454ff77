# gpi/charts.py
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from gpi.aggregate import scale_scores, year_sort_key
from gpi.config import ALL_YEARS, BOUNDARY_NAME_KEY, NO_DATA_TEXT, SCORE_AXIS_MAX
from gpi.names import FeatureScore

BAR_COLOR = "rgba(54, 162, 235, 0.6)"
NO_DATA_COLOR = "#d9d9d9"
HIGHLIGHT_COLOR = "crimson"
TABLE_COLUMNS = ["Country", "GPI", "Year"]


def placeholder_frame(message: str) -> pd.DataFrame:
    return pd.DataFrame([[message, "", ""]], columns=TABLE_COLUMNS)

def table_frame(rows: pd.DataFrame) -> pd.DataFrame:
    if rows is None or rows.empty:
        return placeholder_frame(NO_DATA_TEXT)
    return pd.DataFrame({
        "Country": rows["country"].tolist(),
        "GPI": [f"{v:.1f}" for v in rows["score"]],
        "Year": rows["year"].tolist(),
    })

def error_frame(message: str) -> pd.DataFrame:
    return placeholder_frame(message)

def _score_range(data: pd.DataFrame):
    top = data["score"].max() if not data.empty else 0
    return [0, max(SCORE_AXIS_MAX, float(top))]

def chart_figure(spec) -> go.Figure:
    """Plotly figure for a ChartSpec (country history, multi-country trend or top-N bar)."""
    data = spec.data
    years = sorted(data["year"].unique(), key=year_sort_key) if not data.empty else []

    if spec.kind == "trend":
        fig = px.line(data, x="year", y="score", color="country", markers=True,
                      category_orders={"year": years}, title=spec.title)
    elif spec.kind == "country" and spec.mark == "line":
        fig = px.line(data, x="year", y="score", markers=True,
                      category_orders={"year": years}, title=spec.title)
    elif spec.kind == "country":
        fig = px.bar(data, x="year", y="score", title=spec.title)
        fig.update_traces(marker_color=BAR_COLOR)
    else:
        fig = px.bar(data, x="country", y="score", title=spec.title)
        fig.update_traces(marker_color=BAR_COLOR)
        fig.update_layout(showlegend=False)

    fig.update_yaxes(range=_score_range(data), title="GPI Score")
    fig.update_xaxes(type="category")
    return fig

def map_figure(geojson: dict, joined, selected_key=None, year=ALL_YEARS,
               name_key=BOUNDARY_NAME_KEY) -> go.Figure:
    """Choropleth of latest scores; regions without a score get a grey "No data" layer."""
    frame = pd.DataFrame(list(joined), columns=list(FeatureScore._fields))
    frame = frame[frame["name"] != ""].copy()
    has_score = frame["score"].notna()
    frame["scaled"] = 0.0
    if has_score.any():
        frame.loc[has_score, "scaled"] = scale_scores(frame.loc[has_score, "score"]).to_numpy()
    scored = frame[has_score]
    missing = frame[~has_score]
    common = dict(geojson=geojson, featureidkey=f"properties.{name_key}")
    grey = [[0, NO_DATA_COLOR], [1, NO_DATA_COLOR]]

    fig = go.Figure()
    if not missing.empty:
        fig.add_trace(go.Choropleth(
            locations=missing["name"], z=[0] * len(missing),
            colorscale=grey, showscale=False,
            hovertemplate="%{location}<br>No data<extra></extra>",
            name="No data", **common,
        ))
    if not scored.empty:
        fig.add_trace(go.Choropleth(
            locations=scored["name"], z=scored["scaled"], customdata=scored["score"],
            colorscale="Viridis", zmin=0, zmax=1, colorbar_title="Score (0–1)",
            hovertemplate="%{location}<br>GPI: %{customdata:.1f}<extra></extra>",
            name="GPI", **common,
        ))

    # selected region is outlined whether or not it has a score in this view
    picked = frame[frame["key"] == selected_key] if selected_key else frame.iloc[0:0]
    if not picked.empty:
        scored_pick = picked["score"].notna().all()
        fig.add_trace(go.Choropleth(
            locations=picked["name"], z=picked["scaled"], customdata=picked["score"],
            colorscale="Viridis" if scored_pick else grey, zmin=0, zmax=1, showscale=False,
            marker_line_color=HIGHLIGHT_COLOR, marker_line_width=3,
            hovertemplate=("%{location}<br>GPI: %{customdata:.1f}<extra></extra>" if scored_pick
                           else "%{location}<br>No data<extra></extra>"),
            name="Selected", **common,
        ))

    label = "all years" if year == ALL_YEARS else year
    fig.update_geos(showframe=False, showcoastlines=False, projection_type="natural earth")
    fig.update_layout(title=f"Latest GPI — {label}", margin=dict(l=0, r=0, t=40, b=0))
    return fig
