"""Tests for the chartflow command line."""

import json

import pytest

from chartflow.cli import main
from chartflow.storage import ChartStore


@pytest.fixture(autouse=True)
def _env(monkeypatch, tmp_path):
    monkeypatch.setenv("CHARTFLOW_HOME", str(tmp_path / "home"))
    monkeypatch.setenv("CHARTFLOW_EXPORT_SETTLE", "0")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)


def test_render_csv_file(tmp_path, capsys) -> None:
    csv = tmp_path / "quarterly_sales.csv"
    csv.write_text("Quarter,Sales\nQ1,10\nQ2,12\n")
    out = tmp_path / "out"

    assert main(["render", str(csv), "-t", "line", "-f", "svg", "-o", str(out)]) == 0

    path = out / "quarterly-sales.svg"
    assert path.exists()
    assert capsys.readouterr().out.strip() == str(path)


def test_render_sample_and_save(tmp_path) -> None:
    out = tmp_path / "out"
    assert main(["render", "--sample", "simple", "-o", str(out), "--save", "--palette", "ocean"]) == 0
    assert (out / "monthly-sales-report.png").exists()

    records = ChartStore(tmp_path / "home" / "charts.json").list()
    assert [r.title for r in records] == ["Monthly Sales Report"]
    assert records[0].style.color_palette[0] == "#0077b6"


def test_history_commands(tmp_path, capsys) -> None:
    main(["render", "--sample", "complex", "-o", str(tmp_path / "out"), "--save", "--title", "Year"])
    capsys.readouterr()

    assert main(["history", "list"]) == 0
    listing = capsys.readouterr().out
    assert "Year" in listing
    chart_id = listing.split()[0]

    assert main(["history", "delete", chart_id]) == 0
    assert "0 saved chart(s) left" in capsys.readouterr().out
    assert main(["history", "clear"]) == 0


def test_analyze_falls_back_to_csv(tmp_path, capsys) -> None:
    """Without an API key, analyze reads the input as CSV."""

    text = tmp_path / "notes.txt"
    text.write_text("Item,Count\napples,3\npears,5\n")
    assert main(["analyze", str(text)]) == 0
    out = capsys.readouterr().out
    assert "Item,Count\napples,3\npears,5" in out


def test_errors_are_reported(tmp_path, capsys) -> None:
    bad = tmp_path / "bad.csv"
    bad.write_text("only a header\n")
    assert main(["render", str(bad)]) == 1
    assert "chartflow error" in capsys.readouterr().err

    assert main(["render"]) == 1
    assert main(["render", str(tmp_path / "missing.csv")]) == 1
    assert main(["render", "--sample", "simple", "--colors", "#111,nope", "-o", str(tmp_path)]) == 1


def test_custom_colors(tmp_path) -> None:
    assert main(["render", "--sample", "simple", "--colors", "#111111,#222222", "-o", str(tmp_path), "--save"]) == 0
    raw = json.loads((tmp_path / "home" / "charts.json").read_text())
    assert raw["chartflow_history"][0]["styles"]["colorPalette"] == ["#111111", "#222222"]
