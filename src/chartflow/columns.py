"""Infer which column labels the categories and which columns are numeric series."""

from __future__ import annotations

from dataclasses import dataclass

from .models import Dataset, is_numeric


@dataclass(frozen=True)
class ColumnRoles:
    label_column: str
    numeric_columns: tuple[str, ...]

    @property
    def is_empty(self) -> bool:
        return not self.numeric_columns


def classify(dataset: Dataset) -> ColumnRoles:
    """Classify columns by sniffing the first row only.

    Later rows are never re-checked: a column whose first value is a number
    is a series even if row 2 holds text, and vice versa.
    """
    if not dataset.rows:
        return ColumnRoles(dataset.columns[0] if dataset.columns else "", ())

    first = dataset.rows[0]
    numeric = tuple(col for col in dataset.columns if is_numeric(first.get(col)))
    label = next(
        (col for col in dataset.columns if isinstance(first.get(col), str)),
        dataset.columns[0] if dataset.columns else "",
    )
    return ColumnRoles(label, numeric)
