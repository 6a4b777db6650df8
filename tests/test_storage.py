"""Tests for the JSON chart history store."""

import json

import pytest

from chartflow.models import ChartStyle, ChartType, Dataset, SavedChartRecord
from chartflow.storage import STORAGE_KEY, ChartStore


def _record(chart_id: str, title: str = "Chart", ms: int = 1) -> SavedChartRecord:
    return SavedChartRecord(
        id=chart_id,
        title=title,
        dataset=Dataset(title, ["Month", "Sales"], [{"Month": "Jan", "Sales": 1}]),
        chart_type=ChartType.LINE,
        style=ChartStyle(("#111", "#222"), show_grid=False),
        last_modified=ms,
    )


@pytest.fixture
def store(tmp_path) -> ChartStore:
    return ChartStore(tmp_path / "charts.json")


def test_missing_file_is_empty(store) -> None:
    assert store.list() == []


def test_round_trip(store) -> None:
    record = _record("a")
    store.upsert(record)
    assert store.list() == [record]
    assert store.get("a") == record
    assert store.get("zzz") is None


def test_serialized_shape(store) -> None:
    store.upsert(_record("a", ms=42))
    raw = json.loads(store.path.read_text())
    item = raw[STORAGE_KEY][0]
    assert set(item) == {"id", "title", "data", "type", "styles", "lastModified"}
    assert item["styles"] == {"colorPalette": ["#111", "#222"], "showGrid": False, "showLegend": True}
    assert item["data"]["columns"] == ["Month", "Sales"]
    assert item["lastModified"] == 42


def test_new_records_go_first_and_updates_stay_in_place(store) -> None:
    store.upsert(_record("a"))
    store.upsert(_record("b"))
    store.upsert(_record("c"))
    assert [r.id for r in store.list()] == ["c", "b", "a"]

    store.upsert(_record("b", title="Renamed", ms=9))
    records = store.list()
    assert [r.id for r in records] == ["c", "b", "a"]
    assert records[1].title == "Renamed"


def test_delete_returns_remaining(store) -> None:
    store.upsert(_record("a"))
    store.upsert(_record("b"))
    assert [r.id for r in store.delete("a")] == ["b"]
    assert [r.id for r in store.delete("missing")] == ["b"]


def test_clear(store) -> None:
    store.upsert(_record("a"))
    store.clear()
    assert store.list() == []
    store.clear()


@pytest.mark.parametrize("content", ["{not json", "[1, 2]", '{"chartflow_history": "oops"}', "\xff\xfe"])
def test_corrupt_storage_degrades_to_empty(store, content) -> None:
    """Unreadable history reads as empty rather than raising."""

    store.path.write_text(content, encoding="latin-1")
    assert store.list() == []


def test_malformed_records_are_skipped(store) -> None:
    good = _record("a").to_dict()
    store.path.write_text(json.dumps({STORAGE_KEY: [good, {"id": "broken"}, {**good, "id": "b", "type": "sankey"}]}))
    assert [r.id for r in store.list()] == ["a"]


def test_writes_leave_no_temp_files(store) -> None:
    store.upsert(_record("a"))
    store.upsert(_record("b"))
    assert [p.name for p in store.path.parent.iterdir()] == ["charts.json"]


def test_other_keys_are_preserved(store) -> None:
    store.path.write_text(json.dumps({"other": 1}))
    store.upsert(_record("a"))
    assert json.loads(store.path.read_text())["other"] == 1


@pytest.mark.parametrize(
    "broken",
    [
        {"data": None},
        {"data": []},
        {"data": "oops"},
        {"styles": None},
        {"styles": ["#111"]},
        {"data": {"title": "t", "columns": ["A"], "data": [5]}},
    ],
)
def test_records_with_wrongly_typed_fields_are_skipped(store, broken) -> None:
    """A record whose nested fields are not objects is skipped, and the store stays usable."""

    good = _record("a").to_dict()
    store.path.write_text(json.dumps({STORAGE_KEY: [{**good, "id": "x", **broken}, good, "junk", None]}))

    assert [r.id for r in store.list()] == ["a"]
    assert store.get("x") is None
    store.upsert(_record("b"))
    assert [r.id for r in store.list()] == ["b", "a"]
    assert [r.id for r in store.delete("a")] == ["b"]
