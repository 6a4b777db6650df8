"""Project a classified dataset into the shape each chart type draws."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .columns import ColumnRoles
from .models import ChartStyle, ChartType, Dataset, Row, label_text, to_number

CATEGORICAL = frozenset({ChartType.BAR, ChartType.LINE, ChartType.AREA, ChartType.RADAR})
PROPORTION = frozenset({ChartType.PIE, ChartType.DONUT})
BUBBLE = frozenset({ChartType.BUBBLE})
HIERARCHICAL = frozenset({ChartType.TREEMAP})
UNSUPPORTED = frozenset({ChartType.HEATMAP})

_FAMILIES = (CATEGORICAL, PROPORTION, BUBBLE, HIERARCHICAL, UNSUPPORTED)
assert frozenset().union(*_FAMILIES) == frozenset(ChartType), "every chart type needs a family"
assert sum(map(len, _FAMILIES)) == len(ChartType), "chart type families overlap"


@dataclass(frozen=True)
class LegendEntry:
    label: str
    color: str


Legend = tuple[LegendEntry, ...]


@dataclass(frozen=True)
class Series:
    name: str
    color: str


@dataclass(frozen=True)
class CategoricalData:
    label_column: str
    rows: tuple[Row, ...]
    series: tuple[Series, ...]
    legend: Legend = ()

    @property
    def categories(self) -> list[str]:
        return [label_text(row.get(self.label_column)) for row in self.rows]

    def values(self, column: str) -> list:
        return [row.get(column) for row in self.rows]


@dataclass(frozen=True)
class Slice:
    name: str
    value: float
    color: str


@dataclass(frozen=True)
class ProportionData:
    value_column: str | None
    slices: tuple[Slice, ...]
    legend: Legend = ()

    @property
    def total(self) -> float:
        return sum(s.value for s in self.slices)


@dataclass(frozen=True)
class BubblePoint:
    label: str
    x: object
    y: float
    size: float


@dataclass(frozen=True)
class BubbleData:
    x_column: str
    y_column: str
    size_column: str
    points: tuple[BubblePoint, ...]
    color: str
    # x falls back to the label column when there are no numeric columns
    categorical_x: bool = False
    legend: Legend = ()


@dataclass(frozen=True)
class TreemapNode:
    name: str
    size: float
    color: str


@dataclass(frozen=True)
class TreemapData:
    size_column: str | None
    nodes: tuple[TreemapNode, ...]
    legend: Legend = ()


@dataclass(frozen=True)
class Unsupported:
    chart_type: ChartType

    @property
    def message(self) -> str:
        return f"{self.chart_type.value.capitalize()} charts are not supported yet"


@dataclass(frozen=True)
class Empty:
    message: str = "No data available"


ShapedData = Union[CategoricalData, ProportionData, BubbleData, TreemapData, Unsupported, Empty]


def project(dataset: Dataset, roles: ColumnRoles, chart_type: ChartType, style: ChartStyle) -> ShapedData:
    """Shape the dataset for one chart type. Never raises for thin data."""
    chart_type = ChartType(chart_type)
    if chart_type in UNSUPPORTED:
        return Unsupported(chart_type)
    if dataset.is_empty:
        return Empty()
    legend = tuple(legend_entries(chart_type, dataset, roles, style))
    if chart_type in CATEGORICAL:
        return _categorical(dataset, roles, style, legend)
    if chart_type in PROPORTION:
        return _proportion(dataset, roles, style, legend)
    if chart_type in BUBBLE:
        return _bubble(dataset, roles, style, legend)
    if chart_type in HIERARCHICAL:
        return _treemap(dataset, roles, style, legend)
    raise AssertionError(f"unhandled chart type {chart_type}")


def _categorical(dataset: Dataset, roles: ColumnRoles, style: ChartStyle, legend: Legend) -> CategoricalData:
    series = tuple(Series(col, style.color_at(i)) for i, col in enumerate(roles.numeric_columns))
    return CategoricalData(roles.label_column, tuple(dataset.rows), series, legend)


def _first_numeric(roles: ColumnRoles) -> str | None:
    return roles.numeric_columns[0] if roles.numeric_columns else None


def _proportion(dataset: Dataset, roles: ColumnRoles, style: ChartStyle, legend: Legend) -> ProportionData:
    column = _first_numeric(roles)
    slices = tuple(
        Slice(
            name=label_text(row.get(roles.label_column)),
            value=to_number(row.get(column)) if column else 0.0,
            color=style.color_at(i),
        )
        for i, row in enumerate(dataset.rows)
    )
    return ProportionData(column, slices, legend)


def bubble_columns(roles: ColumnRoles) -> tuple[str, str, str]:
    """Pick (x, y, size) columns, reusing columns when fewer than three exist."""
    numeric = roles.numeric_columns
    x = numeric[0] if numeric else roles.label_column
    y = numeric[1] if len(numeric) > 1 else (numeric[0] if numeric else roles.label_column)
    size = numeric[2] if len(numeric) > 2 else (numeric[0] if numeric else roles.label_column)
    return x, y, size


def _bubble(dataset: Dataset, roles: ColumnRoles, style: ChartStyle, legend: Legend) -> BubbleData:
    x_col, y_col, size_col = bubble_columns(roles)
    categorical_x = not roles.numeric_columns
    points = tuple(
        BubblePoint(
            label=label_text(row.get(roles.label_column)),
            x=label_text(row.get(x_col)) if categorical_x else to_number(row.get(x_col)),
            y=to_number(row.get(y_col)),
            size=to_number(row.get(size_col)),
        )
        for row in dataset.rows
    )
    return BubbleData(x_col, y_col, size_col, points, style.color_at(0), categorical_x, legend)


def _treemap(dataset: Dataset, roles: ColumnRoles, style: ChartStyle, legend: Legend) -> TreemapData:
    column = _first_numeric(roles)
    nodes = []
    for i, row in enumerate(dataset.rows):
        size = to_number(row.get(column)) if column else 0.0
        if size <= 0:
            continue
        nodes.append(TreemapNode(label_text(row.get(roles.label_column)), size, style.color_at(i)))
    return TreemapData(column, tuple(nodes), legend)


def legend_entries(chart_type: ChartType, dataset: Dataset, roles: ColumnRoles, style: ChartStyle) -> list[LegendEntry]:
    """Legend contents, colored exactly as the projection colors them.

    Proportion charts list one entry per row label. Bubble charts draw a
    single series, so they get one entry named after the size column. Every
    other chart lists one entry per numeric series.
    """
    if dataset.is_empty or ChartType(chart_type) in UNSUPPORTED:
        return []
    if ChartType(chart_type) in BUBBLE:
        if not roles.numeric_columns:
            return []
        return [LegendEntry(bubble_columns(roles)[2], style.color_at(0))]
    if ChartType(chart_type) in PROPORTION:
        return [
            LegendEntry(label_text(row.get(roles.label_column)), style.color_at(i))
            for i, row in enumerate(dataset.rows)
        ]
    return [LegendEntry(col, style.color_at(i)) for i, col in enumerate(roles.numeric_columns)]
