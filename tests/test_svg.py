"""Tests for SVG style inlining and legend surgery."""

import xml.etree.ElementTree as ET

from chartflow.svg import (
    LEGEND_GROUP_ID,
    NS,
    append_legend,
    find_legends,
    inline_styles,
    parse_declarations,
    remove_legends,
    resize,
    to_bytes,
    view_box,
)

DOC = """\
<svg xmlns="http://www.w3.org/2000/svg" width="200pt" height="100pt" viewBox="0 0 200 100">
  <defs><style type="text/css">*{stroke-linecap: butt} .hot{fill: #f00}</style></defs>
  <g id="axes_1" fill="#00f" font-size="10px">
    <rect class="hot" width="10" height="10"/>
    <path d="M 0 0 L 1 1" style="stroke: #000"/>
    <text>hello</text>
  </g>
  <g id="legend_1"><rect width="5" height="5"/></g>
</svg>"""


def _doc() -> ET.Element:
    return ET.fromstring(DOC)


def test_parse_declarations() -> None:
    assert parse_declarations("fill: #fff; stroke:none;") == {"fill": "#fff", "stroke": "none"}
    assert parse_declarations(None) == {}


def test_inline_styles_resolves_cascade() -> None:
    root = _doc()
    inline_styles(root)
    rect, path, text = list(root.find(f"{NS}g"))
    assert parse_declarations(rect.get("style"))["fill"] == "#f00"
    assert parse_declarations(path.get("style")) == {
        "fill": "#00f",
        "font-size": "10px",
        "stroke-linecap": "butt",
        "stroke": "#000",
    }
    assert parse_declarations(text.get("style"))["font-size"] == "10px"
    assert root.find(f".//{NS}style") is None


def test_find_and_remove_legends() -> None:
    root = _doc()
    assert len(find_legends(root)) == 1
    assert remove_legends(root) == 1
    assert find_legends(root) == []


def test_resize_keeps_units() -> None:
    root = _doc()
    resize(root, 300, 150)
    assert root.get("viewBox") == "0 0 300 150"
    assert root.get("width") == "300pt"
    assert root.get("height") == "150pt"


def test_append_legend_grows_canvas() -> None:
    root = _doc()
    group = append_legend(root, [("Sales", "#111"), ("Cost", "#222")], text_color="#000", background="#fff")
    assert group.get("id") == LEGEND_GROUP_ID
    x, y, w, h = view_box(root)
    assert h > 100
    assert w >= 200
    assert [t.text for t in group.iter(f"{NS}text")] == ["Sales", "Cost"]


def test_append_legend_widens_for_long_labels() -> None:
    root = _doc()
    labels = [(f"A very long series name {i}", "#111") for i in range(5)]
    append_legend(root, labels, text_color="#000", background="#fff")
    assert view_box(root)[2] > 200


def test_append_legend_without_entries() -> None:
    root = _doc()
    assert append_legend(root, [], text_color="#000", background="#fff") is None
    assert view_box(root) == [0, 0, 200, 100]


def test_to_bytes_has_declaration() -> None:
    content = to_bytes(_doc())
    assert content.startswith(b"<?xml version='1.0' encoding='utf-8'?>")
    assert b'xmlns="http://www.w3.org/2000/svg"' in content
