"""Core data types: datasets, chart types, styles and saved chart records."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Union

Value = Union[int, float, str, None]
Row = dict[str, Value]


class ChartType(str, Enum):
    BAR = "bar"
    LINE = "line"
    AREA = "area"
    PIE = "pie"
    DONUT = "donut"
    BUBBLE = "bubble"
    RADAR = "radar"
    TREEMAP = "treemap"
    # Declared but not implemented; renders a visible "unsupported" message
    HEATMAP = "heatmap"


def is_numeric(value: Any) -> bool:
    """True for int/float values. bool is textual-ish and never counts."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_number(value: Any) -> float:
    """Coerce a cell to a finite float. Anything unusable becomes 0."""
    if is_numeric(value):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def to_number_or_nan(value: Any) -> float:
    """Like to_number() but leaves gaps as NaN so matplotlib skips them."""
    if is_numeric(value):
        return float(value)
    return math.nan


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise TypeError(f"{what} must be an object, got {type(data).__name__}")
    return data


def label_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass
class Dataset:
    title: str
    columns: list[str]
    rows: list[Row] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(set(self.columns)) != len(self.columns):
            raise ValueError(f"Duplicate column names: {self.columns}")
        # Every row carries every declared column
        self.rows = [{col: row.get(col) for col in self.columns} for row in self.rows]

    @property
    def is_empty(self) -> bool:
        return not self.rows or not self.columns

    def column_values(self, column: str) -> list[Value]:
        return [row.get(column) for row in self.rows]

    @classmethod
    def from_records(
        cls,
        title: str,
        records: Iterable[Mapping[str, Value]],
        columns: Iterable[str] | None = None,
    ) -> Dataset:
        """Build a dataset, inferring column order from the first record if needed."""
        rows = [dict(r) for r in records]
        if columns is None:
            columns = list(rows[0].keys()) if rows else []
        return cls(title=title, columns=list(columns), rows=rows)

    def to_dict(self) -> dict:
        return {"title": self.title, "columns": list(self.columns), "data": [dict(r) for r in self.rows]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Dataset:
        data = _require_mapping(data, "dataset")
        return cls(
            title=data.get("title", ""),
            columns=list(data.get("columns", [])),
            rows=[dict(r) for r in data.get("data", [])],
        )


@dataclass(frozen=True)
class ChartStyle:
    color_palette: tuple[str, ...]
    show_grid: bool = True
    show_legend: bool = True

    def __post_init__(self) -> None:
        if not self.color_palette:
            raise ValueError("color_palette must contain at least one color")
        object.__setattr__(self, "color_palette", tuple(self.color_palette))

    def color_at(self, index: int) -> str:
        """Palette wraparound: position i gets palette[i mod k]."""
        return self.color_palette[index % len(self.color_palette)]

    def replace(self, **changes: Any) -> ChartStyle:
        values = {
            "color_palette": self.color_palette,
            "show_grid": self.show_grid,
            "show_legend": self.show_legend,
        }
        values.update(changes)
        return ChartStyle(**values)

    def to_dict(self) -> dict:
        return {
            "colorPalette": list(self.color_palette),
            "showGrid": self.show_grid,
            "showLegend": self.show_legend,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ChartStyle:
        data = _require_mapping(data, "styles")
        return cls(
            color_palette=tuple(data["colorPalette"]),
            show_grid=bool(data.get("showGrid", True)),
            show_legend=bool(data.get("showLegend", True)),
        )


@dataclass(frozen=True)
class SavedChartRecord:
    id: str
    title: str
    dataset: Dataset
    chart_type: ChartType
    style: ChartStyle
    last_modified: int  # epoch milliseconds

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "data": self.dataset.to_dict(),
            "type": self.chart_type.value,
            "styles": self.style.to_dict(),
            "lastModified": self.last_modified,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SavedChartRecord:
        data = _require_mapping(data, "saved chart")
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            dataset=Dataset.from_dict(data["data"]),
            chart_type=ChartType(data["type"]),
            style=ChartStyle.from_dict(data["styles"]),
            last_modified=int(data.get("lastModified", 0)),
        )
