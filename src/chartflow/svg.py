"""SVG tree surgery for standalone exports.

Works on ElementTree roots as written by matplotlib's SVG backend: inline
the cascade onto every element, find or drop legend groups, and append a
legend strip below the existing drawing, growing the viewBox to fit.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from typing import Iterable

from .theme import LEGEND

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
NS = f"{{{SVG_NS}}}"

ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", XLINK_NS)

# Properties that cascade from parent to child in SVG
INHERITED = (
    "fill", "fill-opacity", "fill-rule",
    "stroke", "stroke-width", "stroke-opacity", "stroke-linecap",
    "stroke-linejoin", "stroke-dasharray", "stroke-miterlimit",
    "font", "font-family", "font-size", "font-weight", "font-style",
    "text-anchor", "color", "visibility",
)

DRAWABLE = {"path", "rect", "circle", "ellipse", "line", "polyline", "polygon", "text", "tspan", "use"}

LEGEND_GROUP_ID = "chart-legend"


def local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_declarations(text: str | None) -> dict[str, str]:
    """Parse 'fill: #fff; stroke: none' into an ordered dict."""
    decls: dict[str, str] = {}
    for part in (text or "").split(";"):
        if ":" not in part:
            continue
        name, value = part.split(":", 1)
        if name.strip():
            decls[name.strip()] = value.strip()
    return decls


def format_declarations(decls: dict[str, str]) -> str:
    return "; ".join(f"{k}: {v}" for k, v in decls.items())


def parse_css(css: str) -> list[tuple[str, dict[str, str]]]:
    """Split a stylesheet into (selector, declarations) pairs, one per selector."""
    css = re.sub(r"/\*.*?\*/", "", css, flags=re.S)
    rules = []
    for selectors, body in re.findall(r"([^{}]+)\{([^}]*)\}", css):
        decls = parse_declarations(body)
        for selector in selectors.split(","):
            if selector.strip():
                rules.append((selector.strip(), decls))
    return rules


def _matches(el: ET.Element, selector: str) -> bool:
    if selector == "*":
        return True
    if selector.startswith("#"):
        return el.get("id") == selector[1:]
    if selector.startswith("."):
        return selector[1:] in (el.get("class") or "").split()
    return local_name(el.tag) == selector


def inline_styles(root: ET.Element) -> None:
    """Write every drawable element's effective style onto its own style attribute.

    Effective style = inherited values, then presentation attributes, then
    matching stylesheet rules, then the element's own style attribute.
    Stylesheet elements are removed afterwards.
    """
    rules: list[tuple[str, dict[str, str]]] = []
    for style_el in root.iter(f"{NS}style"):
        rules.extend(parse_css(style_el.text or ""))

    def walk(el: ET.Element, inherited: dict[str, str]) -> None:
        own: dict[str, str] = {}
        for prop in INHERITED:
            if el.get(prop) is not None:
                own[prop] = el.get(prop)
        for selector, decls in rules:
            if _matches(el, selector):
                own.update(decls)
        own.update(parse_declarations(el.get("style")))

        effective = {**inherited, **own}
        if local_name(el.tag) in DRAWABLE and effective:
            el.set("style", format_declarations(effective))

        passed = {k: v for k, v in effective.items() if k in INHERITED}
        for child in el:
            walk(child, passed)

    walk(root, {})

    for parent in list(root.iter()):
        for child in list(parent):
            if child.tag == f"{NS}style":
                parent.remove(child)


def find_legends(root: ET.Element) -> list[tuple[ET.Element, ET.Element]]:
    """Return (parent, group) pairs for every legend group in the tree."""
    found = []
    for parent in root.iter():
        for child in parent:
            gid = child.get("id") or ""
            if gid == LEGEND_GROUP_ID or gid.startswith("legend_"):
                found.append((parent, child))
    return found


def remove_legends(root: ET.Element) -> int:
    legends = find_legends(root)
    for parent, group in legends:
        parent.remove(group)
    return len(legends)


def _fmt(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return text if text not in ("", "-0") else "0"


def _split_length(value: str) -> tuple[float, str]:
    m = re.match(r"\s*([\d.eE+-]+)\s*([a-z%]*)", value)
    if not m:
        raise ValueError(f"Cannot parse length: {value}")
    return float(m.group(1)), m.group(2)


def view_box(root: ET.Element) -> list[float]:
    """Return [x, y, w, h], falling back to width/height when viewBox is absent."""
    vb = root.get("viewBox")
    if vb:
        parts = [float(p) for p in vb.replace(",", " ").split()]
        if len(parts) == 4:
            return parts
    if root.get("width") is None or root.get("height") is None:
        raise ValueError("SVG root has neither viewBox nor width/height")
    return [0.0, 0.0, _split_length(root.get("width"))[0], _split_length(root.get("height"))[0]]


def resize(root: ET.Element, width: float, height: float) -> None:
    """Set the viewBox size and scale width/height attributes to match."""
    x, y, old_w, old_h = view_box(root)
    for attr, old, new in (("width", old_w, width), ("height", old_h, height)):
        if root.get(attr) is not None:
            value, unit = _split_length(root.get(attr))
            ratio = value / old if old else 1.0
            root.set(attr, f"{_fmt(new * ratio)}{unit}")
    root.set("viewBox", " ".join(_fmt(v) for v in (x, y, width, height)))


def legend_item_width(label: str) -> float:
    """Horizontal space one entry takes, proportional to its label length."""
    font = LEGEND["font_size"]
    return LEGEND["swatch"] + LEGEND["gap"] + len(label) * font * LEGEND["char_width"] + LEGEND["spacing"]


def append_legend(
    root: ET.Element,
    entries: Iterable[tuple[str, str]],
    *,
    text_color: str,
    background: str,
) -> ET.Element | None:
    """Append a one-row legend of (label, color) entries below the drawing.

    Grows the viewBox (and width when the row is wider than the drawing) so
    nothing is clipped. Returns the legend group, or None for no entries.
    """
    entries = list(entries)
    if not entries:
        return None
    x0, y0, width, height = view_box(root)
    pad, swatch, font = LEGEND["padding"], LEGEND["swatch"], LEGEND["font_size"]

    row_width = pad + sum(legend_item_width(label) for label, _ in entries)
    new_width = max(width, row_width)
    extra = LEGEND["row_height"] + pad
    top = y0 + height

    group = ET.SubElement(root, f"{NS}g", {"id": LEGEND_GROUP_ID})
    ET.SubElement(group, f"{NS}rect", {
        "x": _fmt(x0), "y": _fmt(top), "width": _fmt(new_width), "height": _fmt(extra),
        "style": f"fill: {background}; stroke: none",
    })

    x = x0 + pad
    swatch_y = top + (extra - swatch) / 2
    for label, color in entries:
        ET.SubElement(group, f"{NS}rect", {
            "x": _fmt(x), "y": _fmt(swatch_y), "width": _fmt(swatch), "height": _fmt(swatch),
            "rx": "2", "style": f"fill: {color}; stroke: none",
        })
        text = ET.SubElement(group, f"{NS}text", {
            "x": _fmt(x + swatch + LEGEND["gap"]),
            "y": _fmt(swatch_y + swatch - 2),
            "style": f"fill: {text_color}; font-size: {_fmt(font)}px; font-family: sans-serif",
        })
        text.text = label
        x += legend_item_width(label)

    resize(root, new_width, height + extra)
    return group


def to_bytes(root: ET.Element) -> bytes:
    """Serialize as a standalone UTF-8 document with an XML declaration."""
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)
