"""Capture a rendered figure into a PNG or a self-contained SVG document."""

from __future__ import annotations

import asyncio
import copy
import io
import logging
import os
import re
import tempfile
import xml.etree.ElementTree as ET
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, Protocol

import matplotlib.pyplot as plt
from matplotlib.colors import to_hex, to_rgb

from . import svg
from .columns import classify
from .errors import ExportError
from .models import ChartStyle, ChartType, Dataset
from .projection import legend_entries
from .theme import LAYOUT, THEMES

logger = logging.getLogger(__name__)


class ExportFormat(str, Enum):
    PNG = "png"
    SVG = "svg"

    @classmethod
    def _missing_(cls, value: object) -> ExportFormat | None:
        aliases = {"png": cls.PNG, "svg": cls.SVG, "raster": cls.PNG, "vector": cls.SVG}
        return aliases.get(str(value).lower())

    @property
    def media_type(self) -> str:
        return "image/png" if self is ExportFormat.PNG else "image/svg+xml"


@dataclass(frozen=True)
class Artifact:
    content: bytes
    filename: str
    media_type: str

    def write(self, directory: str | Path) -> Path:
        """Write atomically: temp file + rename, so no half-written file survives."""
        dest = Path(directory)
        dest.mkdir(parents=True, exist_ok=True)
        path = dest / self.filename
        fd, tmp_path = tempfile.mkstemp(dir=dest, suffix=".part")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(self.content)
            os.replace(tmp_path, path)
        except Exception:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        return path


def export_filename(title: str, fmt: ExportFormat) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (title or "").lower()).strip("-")
    return f"{slug or 'chart'}.{ExportFormat(fmt).value}"


class Capture(Protocol):
    """The graphics-specific half of exporting."""

    def capture_raster(self, node: Any, scale: float, *, show_legend: bool = True) -> bytes: ...

    def capture_vector_root(self, node: Any) -> ET.Element | None: ...

    def capture_background(self, node: Any) -> str: ...


@contextmanager
def _legends_hidden(fig: plt.Figure, hide: bool) -> Iterator[None]:
    legends = [ax.get_legend() for ax in fig.axes if ax.get_legend() is not None] if hide else []
    for legend in legends:
        legend.set_visible(False)
    try:
        yield
    finally:
        for legend in legends:
            legend.set_visible(True)


class FigureCapture:
    """Capture matplotlib figures."""

    def _figure(self, node: Any) -> plt.Figure:
        if node is None:
            raise ExportError("Nothing to export: no rendered chart")
        if not isinstance(node, plt.Figure):
            raise ExportError(f"Cannot capture {type(node).__name__}; expected a matplotlib Figure")
        return node

    def capture_raster(self, node: Any, scale: float, *, show_legend: bool = True) -> bytes:
        fig = self._figure(node)
        buf = io.BytesIO()
        with _legends_hidden(fig, hide=not show_legend):
            fig.savefig(
                buf,
                format="png",
                dpi=fig.dpi * scale,
                facecolor=fig.get_facecolor(),
                edgecolor="none",
            )
        return buf.getvalue()

    def capture_vector_root(self, node: Any) -> ET.Element | None:
        fig = self._figure(node)
        buf = io.BytesIO()
        with plt.rc_context({"svg.fonttype": "none", "svg.hashsalt": "chartflow"}):
            fig.savefig(buf, format="svg", facecolor=fig.get_facecolor(), metadata={"Date": None})
        root = ET.fromstring(buf.getvalue())
        return root if root.tag == f"{svg.NS}svg" else None

    def capture_background(self, node: Any) -> str:
        return to_hex(self._figure(node).get_facecolor(), keep_alpha=False)


def _text_color(background: str) -> str:
    r, g, b = to_rgb(background)
    luminance = 0.2126 * r + 0.7152 * g + 0.0722 * b
    return THEMES["dark" if luminance < 0.5 else "light"]["text"]


def _vector(
    node: Any,
    dataset: Dataset,
    style: ChartStyle,
    chart_type: ChartType,
    capture: Capture,
) -> bytes:
    root = capture.capture_vector_root(node)
    if root is None:
        raise ExportError("SVG element not found in the rendered chart")
    doc = copy.deepcopy(root)
    svg.inline_styles(doc)

    if not style.show_legend:
        svg.remove_legends(doc)
    elif not svg.find_legends(doc):
        entries = legend_entries(chart_type, dataset, classify(dataset), style)
        background = capture.capture_background(node)
        svg.append_legend(
            doc,
            [(e.label, e.color) for e in entries],
            text_color=_text_color(background),
            background=background,
        )
    return svg.to_bytes(doc)


def export_artifact(
    node: Any,
    fmt: ExportFormat | str,
    dataset: Dataset,
    style: ChartStyle,
    chart_type: ChartType,
    capture: Capture | None = None,
) -> Artifact:
    """Build a complete artifact or raise ExportError; never returns partial output."""
    capture = capture or FigureCapture()
    try:
        fmt = ExportFormat(fmt)
        chart_type = ChartType(chart_type)
        if node is None:
            raise ExportError("Nothing to export: no rendered chart")
        if fmt is ExportFormat.PNG:
            content = capture.capture_raster(node, LAYOUT["raster_scale"], show_legend=style.show_legend)
        else:
            content = _vector(node, dataset, style, chart_type, capture)
    except ExportError:
        raise
    except Exception as exc:
        raise ExportError(f"Export failed: {exc}") from exc
    if not content:
        raise ExportError("Export produced no output")
    return Artifact(content, export_filename(dataset.title, fmt), fmt.media_type)


class Exporter:
    """Runs exports one at a time, after a short settle delay."""

    def __init__(self, capture: Capture | None = None, settle_delay: float = 0.1) -> None:
        self._capture = capture or FigureCapture()
        self._settle_delay = settle_delay
        self._lock = asyncio.Lock()

    async def export(
        self,
        node: Any,
        fmt: ExportFormat | str,
        dataset: Dataset,
        style: ChartStyle,
        chart_type: ChartType,
    ) -> Artifact:
        async with self._lock:
            await asyncio.sleep(self._settle_delay)
            try:
                artifact = export_artifact(node, fmt, dataset, style, chart_type, self._capture)
            except ExportError as exc:
                logger.error("Export failed: %s", exc)
                raise
        logger.info("Exported %s (%d bytes)", artifact.filename, len(artifact.content))
        return artifact
