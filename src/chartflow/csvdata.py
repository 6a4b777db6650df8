"""The simple comma-separated format used for manual data entry.

Not RFC 4180: no quoting, no escaped commas. Headers on the first line,
values positionally mapped on the rest.
"""

from __future__ import annotations

import math

from .errors import CsvFormatError
from .models import Dataset, Row, Value, label_text


def parse_value(text: str | None) -> Value:
    """A value is numeric only if the whole trimmed text parses as a float."""
    if text is None:
        return None
    text = text.strip()
    try:
        number = float(text)
    except ValueError:
        return text
    if not math.isfinite(number):
        return text
    return int(number) if number.is_integer() and "." not in text and "e" not in text.lower() else number


def parse_csv(text: str, title: str = "") -> Dataset:
    lines = [line for line in text.strip().splitlines() if line.strip()]
    if len(lines) < 2:
        raise CsvFormatError("Invalid CSV format: need a header line and at least one data row")

    headers = [h.strip() for h in lines[0].split(",")]
    if len(set(headers)) != len(headers):
        raise CsvFormatError(f"Invalid CSV format: duplicate column names in {headers}")

    rows: list[Row] = []
    for line in lines[1:]:
        values = line.split(",")
        rows.append({
            header: parse_value(values[i]) if i < len(values) else None
            for i, header in enumerate(headers)
        })
    return Dataset(title=title, columns=headers, rows=rows)


def to_csv(dataset: Dataset) -> str:
    """Inverse of parse_csv for the data editor."""
    lines = [",".join(dataset.columns)]
    for row in dataset.rows:
        lines.append(",".join(label_text(row.get(col)) for col in dataset.columns))
    return "\n".join(lines)
