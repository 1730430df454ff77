import json

import pytest

from gpi.data import normalize_records
from gpi.state import Controller

ROWS = [
    {"Country": "USA", "GPI": "85.2", "Year": "2023"},
    {"Country": "USA", "GPI": "84.1", "Year": "2022"},
    {"Country": "Mali", "GPI": "not_a_number", "Year": "2023"},
    {"Country": "Russia", "GPI": "61.2", "Year": "2023"},
    {"Country": "Russia", "GPI": "63.5", "Year": "2022"},
    {"Country": "Peru", "GPI": "80.0", "Year": "2023"},
    {"Country": "Peru", "GPI": "79.5", "Year": "2022"},
    {"Country": "Norway", "GPI": "90.0", "Year": "2023"},
    {"Country": "Norway", "GPI": "89.0", "Year": "2022"},
    {"Country": "Chad", "GPI": "55.0", "Year": "2023"},
]

GEO_NAMES = ["United States of America", "Russian Federation", "Peru", "Norway", "Chad", "Atlantis"]


def feature(name):
    return {"type": "Feature", "properties": {"NAME": name, "ADMIN": name},
            "geometry": {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 0]]]}}


@pytest.fixture
def rows():
    return [dict(r) for r in ROWS]


@pytest.fixture
def records(rows):
    return normalize_records(rows).records


@pytest.fixture
def geojson():
    return {"type": "FeatureCollection", "features": [feature(n) for n in GEO_NAMES]}


@pytest.fixture
def controller(records):
    return Controller(records)


@pytest.fixture
def source_files(tmp_path, geojson):
    csv_path = tmp_path / "data.csv"
    lines = ["Country,GPI,Year"] + [f"{r['Country']},{r['GPI']},{r['Year']}" for r in ROWS]
    csv_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    geo_path = tmp_path / "world.geojson"
    geo_path.write_text(json.dumps(geojson), encoding="utf-8")
    return csv_path, geo_path
