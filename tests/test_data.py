import pytest
import requests

import gpi.data
from gpi.config import ERROR_TEXT, NO_DATA_TEXT
from gpi.data import load_boundaries, load_scores, load_sources, normalize_records
from gpi.errors import DataUnavailable


def test_drops_non_numeric_score(rows):
    result = normalize_records(rows[:3])
    assert len(result.records) == 2
    assert result.dropped == 1
    assert list(result.records["country"]) == ["USA", "USA"]
    assert list(result.records["score"]) == [85.2, 84.1]


def test_row_count_minus_invalid(rows):
    result = normalize_records(rows)
    assert len(result.records) == len(rows) - 1
    assert len(result.records) + result.dropped == len(rows)


def test_trims_and_converts():
    result = normalize_records([{"Country": "  Norway ", "GPI": " 90.5", "Year": " 2021 "}])
    rec = result.records.iloc[0]
    assert rec["country"] == "Norway"
    assert rec["score"] == 90.5
    assert rec["year"] == "2021"


def test_missing_fields_dropped():
    raw = [
        {"Country": "A", "GPI": "1", "Year": "2020"},
        {"Country": "", "GPI": "1", "Year": "2020"},
        {"Country": "B", "GPI": None, "Year": "2020"},
        {"Country": "C", "GPI": "2"},
        {"Country": "D", "GPI": "inf", "Year": "2020"},
        {"Country": "E", "GPI": "   ", "Year": "2020"},
    ]
    result = normalize_records(raw)
    assert list(result.records["country"]) == ["A"]
    assert result.dropped == 5


def test_numeric_year_becomes_plain_string():
    result = normalize_records([{"Country": "A", "GPI": 3, "Year": 2023},
                                {"Country": "B", "GPI": 4, "Year": None}])
    assert list(result.records["year"]) == ["2023"]


def test_missing_column_drops_everything():
    result = normalize_records([{"Country": "A", "Score": "1", "Year": "2020"}])
    assert result.records.empty
    assert result.dropped == 1
    assert list(result.records.columns) == ["country", "score", "year"]


def test_preserves_input_order(rows):
    result = normalize_records(rows)
    assert list(result.records["country"])[:4] == ["USA", "USA", "Russia", "Russia"]


def test_load_scores_from_file(source_files):
    csv_path, _ = source_files
    result = load_scores(csv_path)
    assert len(result.records) == 9
    assert result.dropped == 1


def test_load_boundaries_rejects_non_feature_collection(tmp_path):
    path = tmp_path / "bad.geojson"
    path.write_text('{"type": "Feature"}', encoding="utf-8")
    with pytest.raises(ValueError):
        load_boundaries(path)


def test_load_sources(source_files):
    csv_path, geo_path = source_files
    sources = load_sources(csv_path, geo_path)
    assert len(sources.records) == 9
    assert sources.dropped == 1
    assert len(sources.geojson["features"]) == 6


def test_load_sources_missing_file(tmp_path, source_files):
    _, geo_path = source_files
    with pytest.raises(DataUnavailable) as exc:
        load_sources(tmp_path / "nope.csv", geo_path)
    assert str(exc.value) == ERROR_TEXT


def test_load_sources_without_valid_rows(tmp_path, source_files):
    _, geo_path = source_files
    csv_path = tmp_path / "empty.csv"
    csv_path.write_text("Country,GPI,Year\nMali,n/a,2023\n", encoding="utf-8")
    with pytest.raises(DataUnavailable) as exc:
        load_sources(csv_path, geo_path)
    assert str(exc.value) == NO_DATA_TEXT


class FakeResponse:
    def __init__(self, text, status=200):
        self.text = text
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def test_load_sources_over_http(monkeypatch, source_files):
    csv_path, geo_path = source_files
    bodies = {
        "https://example.org/data.csv": csv_path.read_text(encoding="utf-8"),
        "https://example.org/world.geojson": geo_path.read_text(encoding="utf-8"),
    }
    monkeypatch.setattr(gpi.data.requests, "get", lambda url, timeout: FakeResponse(bodies[url]))
    sources = load_sources("https://example.org/data.csv", "https://example.org/world.geojson")
    assert len(sources.records) == 9


def test_failed_fetch_is_data_unavailable(monkeypatch, source_files):
    csv_path, _ = source_files

    def boom(url, timeout):
        raise requests.ConnectionError("unreachable")

    monkeypatch.setattr(gpi.data.requests, "get", boom)
    with pytest.raises(DataUnavailable):
        load_sources(csv_path, "https://example.org/world.geojson")


def test_http_error_is_data_unavailable(monkeypatch, source_files):
    _, geo_path = source_files
    monkeypatch.setattr(gpi.data.requests, "get", lambda url, timeout: FakeResponse("", status=404))
    with pytest.raises(DataUnavailable):
        load_sources("https://example.org/data.csv", geo_path)
