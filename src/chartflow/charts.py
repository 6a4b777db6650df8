"""Chart renderers and the dispatch table: (chart type, shaped data, style) -> Figure."""

from __future__ import annotations

import math
from typing import Callable

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import Patch, Rectangle

from .columns import classify
from .models import ChartStyle, ChartType, Dataset, to_number_or_nan
from .projection import (
    BubbleData,
    CategoricalData,
    Empty,
    Legend,
    ProportionData,
    ShapedData,
    TreemapData,
    Unsupported,
    project,
)
from .style import applied
from .svg import LEGEND_GROUP_ID
from .theme import DEFAULT_THEME, LAYOUT

# The exporter finds the native legend by this id
LEGEND_ID = LEGEND_GROUP_ID
MESSAGE_ID = "chart-message"


def figure(
    figsize: tuple[float, float] | None = None,
    *,
    polar: bool = False,
) -> tuple[plt.Figure, plt.Axes]:
    """Create a (fig, ax) pair under the active style."""
    fig, ax = plt.subplots(figsize=figsize, subplot_kw={"polar": True} if polar else None)
    return fig, ax


def close(fig: plt.Figure) -> None:
    plt.close(fig)


def _legend(ax: plt.Axes, legend: Legend, style: ChartStyle, **kwargs) -> None:
    if not style.show_legend or not legend:
        return
    handles = [Patch(facecolor=entry.color, edgecolor="none") for entry in legend]
    leg = ax.legend(handles, [entry.label for entry in legend], **kwargs)
    leg.set_gid(LEGEND_ID)


def _category_axis(ax: plt.Axes, data: CategoricalData) -> np.ndarray:
    x = np.arange(len(data.rows))
    ax.set_xticks(x)
    ax.set_xticklabels(data.categories)
    ax.set_xlabel(data.label_column)
    return x


def _bar(ax: plt.Axes, data: CategoricalData, style: ChartStyle) -> None:
    x = _category_axis(ax, data)
    n = max(len(data.series), 1)
    width = LAYOUT["bar_width"] / n
    offsets = np.linspace(-(n - 1) / 2 * width, (n - 1) / 2 * width, n)
    for offset, series in zip(offsets, data.series):
        y = [to_number_or_nan(v) for v in data.values(series.name)]
        ax.bar(x + offset, y, width=width, color=series.color, label=series.name)
    ax.grid(style.show_grid)
    _legend(ax, data.legend, style, loc="best")


def _line(ax: plt.Axes, data: CategoricalData, style: ChartStyle) -> None:
    x = _category_axis(ax, data)
    for series in data.series:
        y = [to_number_or_nan(v) for v in data.values(series.name)]
        ax.plot(x, y, color=series.color, marker="o", label=series.name)
    ax.grid(style.show_grid)
    _legend(ax, data.legend, style, loc="best")


def _area(ax: plt.Axes, data: CategoricalData, style: ChartStyle) -> None:
    x = _category_axis(ax, data)
    for series in data.series:
        y = np.ma.masked_invalid([to_number_or_nan(v) for v in data.values(series.name)])
        ax.fill_between(x, 0, y, color=series.color, alpha=LAYOUT["area_alpha"], linewidth=0)
        ax.plot(x, y, color=series.color, label=series.name)
    ax.grid(style.show_grid)
    _legend(ax, data.legend, style, loc="best")


def _radar(ax: plt.Axes, data: CategoricalData, style: ChartStyle) -> None:
    n = len(data.rows)
    angles = [i / n * 2 * math.pi for i in range(n)]
    loop = angles + angles[:1]
    for series in data.series:
        values = [to_number_or_nan(v) for v in data.values(series.name)]
        values = [0.0 if math.isnan(v) else v for v in values]
        values += values[:1]
        ax.plot(loop, values, color=series.color, label=series.name)
        ax.fill(loop, values, color=series.color, alpha=LAYOUT["area_alpha"])
    ax.set_xticks(angles)
    ax.set_xticklabels(data.categories)
    ax.grid(style.show_grid)
    _legend(ax, data.legend, style, loc="upper left", bbox_to_anchor=(1.05, 1.0))


def _percent_labels(data: ProportionData) -> list[str]:
    total = sum(max(s.value, 0.0) for s in data.slices)
    return [f"{s.name} {max(s.value, 0.0) / total * 100:.0f}%" for s in data.slices]


def _pie(ax: plt.Axes, data: ProportionData, style: ChartStyle, *, donut: bool = False) -> None:
    if sum(max(s.value, 0.0) for s in data.slices) <= 0:
        _message(ax, "Nothing to plot: all values are zero")
        return
    wedgeprops = {"edgecolor": ax.get_facecolor(), "linewidth": 1}
    if donut:
        wedgeprops["width"] = LAYOUT["donut_width"]
    ax.pie(
        [max(s.value, 0.0) for s in data.slices],
        labels=_percent_labels(data),
        colors=[s.color for s in data.slices],
        startangle=90,
        counterclock=False,
        wedgeprops=wedgeprops,
    )
    ax.set_aspect("equal")
    _legend(ax, data.legend, style, loc="upper left", bbox_to_anchor=(1.0, 1.0))


def _donut(ax: plt.Axes, data: ProportionData, style: ChartStyle) -> None:
    _pie(ax, data, style, donut=True)


def _bubble_areas(sizes: list[float]) -> list[float]:
    lo, hi = LAYOUT["bubble_sizes"]
    largest = max(sizes, default=0.0)
    if largest <= 0:
        return [lo] * len(sizes)
    return [lo + max(s, 0.0) / largest * (hi - lo) for s in sizes]


def _bubble(ax: plt.Axes, data: BubbleData, style: ChartStyle) -> None:
    if data.categorical_x:
        x = np.arange(len(data.points))
        ax.set_xticks(x)
        ax.set_xticklabels([str(p.x) for p in data.points])
    else:
        x = [p.x for p in data.points]
    ax.scatter(
        x,
        [p.y for p in data.points],
        s=_bubble_areas([p.size for p in data.points]),
        color=data.color,
        alpha=0.7,
        edgecolors=data.color,
    )
    ax.set_xlabel(data.x_column)
    ax.set_ylabel(data.y_column)
    ax.grid(style.show_grid)
    _legend(ax, data.legend, style, loc="best")


def squarify(sizes: list[float], x: float, y: float, width: float, height: float) -> list[tuple[float, float, float, float]]:
    """Squarified treemap layout. Rects come back in input order.

    Nodes too small to get any space after rounding come back as zero-size rects.
    """
    total = sum(sizes)
    if not sizes or total <= 0:
        return []
    scale = width * height / total
    order = sorted(range(len(sizes)), key=lambda i: -sizes[i])
    areas = [sizes[i] * scale for i in order]
    placed: list[tuple[float, float, float, float]] = []

    def worst(row: list[float], side: float) -> float:
        s = sum(row)
        return max(max(side * side * r / (s * s), (s * s) / (side * side * r)) for r in row)

    # Below this the leftover strip is too thin to lay out; remaining nodes get empty rects
    epsilon = min(width, height) * 1e-9

    i = 0
    while i < len(areas):
        side = min(width, height)
        if side <= epsilon or areas[i] <= 0:
            placed.extend((x, y, 0.0, 0.0) for _ in areas[i:])
            break
        row = [areas[i]]
        i += 1
        while i < len(areas) and areas[i] > 0 and worst(row + [areas[i]], side) <= worst(row, side):
            row.append(areas[i])
            i += 1
        thickness = sum(row) / side
        offset = 0.0
        for area in row:
            length = area / thickness
            if width >= height:
                placed.append((x, y + offset, thickness, length))
            else:
                placed.append((x + offset, y, length, thickness))
            offset += length
        if width >= height:
            x += thickness
            width -= thickness
        else:
            y += thickness
            height -= thickness

    rects: list[tuple[float, float, float, float]] = [(0.0, 0.0, 0.0, 0.0)] * len(sizes)
    for idx, rect in zip(order, placed):
        rects[idx] = rect
    return rects


def _treemap(ax: plt.Axes, data: TreemapData, style: ChartStyle) -> None:
    if not data.nodes:
        _message(ax, "Nothing to plot: no positive sizes")
        return
    edge = ax.get_facecolor()
    rects = squarify([n.size for n in data.nodes], 0, 0, 100, 100)
    for node, (x, y, w, h) in zip(data.nodes, rects):
        ax.add_patch(Rectangle((x, y), w, h, facecolor=node.color, edgecolor=edge, linewidth=2))
        if w > 8 and h > 6:
            ax.text(x + w / 2, y + h / 2, node.name, ha="center", va="center", color="white", fontweight="bold")
    ax.set_xlim(0, 100)
    ax.set_ylim(0, 100)
    ax.axis("off")
    _legend(ax, data.legend, style, loc="upper left", bbox_to_anchor=(1.0, 1.0))


def _message(ax: plt.Axes, text: str) -> None:
    ax.axis("off")
    ax.text(0.5, 0.5, text, ha="center", va="center", transform=ax.transAxes, gid=MESSAGE_ID)


def _unsupported(ax: plt.Axes, data: Unsupported, style: ChartStyle) -> None:
    _message(ax, data.message)


Renderer = Callable[[plt.Axes, ShapedData, ChartStyle], None]

_RENDERERS: dict[ChartType, Renderer] = {
    ChartType.BAR: _bar,
    ChartType.LINE: _line,
    ChartType.AREA: _area,
    ChartType.PIE: _pie,
    ChartType.DONUT: _donut,
    ChartType.BUBBLE: _bubble,
    ChartType.RADAR: _radar,
    ChartType.TREEMAP: _treemap,
    ChartType.HEATMAP: _unsupported,
}
assert set(_RENDERERS) == set(ChartType), "every chart type needs a renderer"


def render(
    chart_type: ChartType,
    shaped: ShapedData,
    style: ChartStyle,
    *,
    title: str | None = None,
    theme: str = DEFAULT_THEME,
    figsize: tuple[float, float] | None = None,
) -> plt.Figure:
    """Draw shaped data. Empty and unsupported inputs draw a visible message."""
    chart_type = ChartType(chart_type)
    with applied(style, theme):
        if isinstance(shaped, (Empty, Unsupported)):
            fig, ax = figure(figsize)
            _message(ax, shaped.message)
        else:
            fig, ax = figure(figsize, polar=chart_type is ChartType.RADAR)
            _RENDERERS[chart_type](ax, shaped, style)
        if title:
            ax.set_title(title)
        fig.tight_layout()
    return fig


def render_chart(
    dataset: Dataset,
    chart_type: ChartType,
    style: ChartStyle,
    *,
    theme: str = DEFAULT_THEME,
    figsize: tuple[float, float] | None = None,
) -> plt.Figure:
    """Classify, project and render a dataset in one step."""
    shaped = project(dataset, classify(dataset), chart_type, style)
    return render(chart_type, shaped, style, title=dataset.title, theme=theme, figsize=figsize)
