"""chartflow: tabular data to styled, exportable charts."""

from .analysis import AnalysisResult, Recommendation, analyze_text, parse_analysis, top_recommendation
from .autosave import AutosaveScheduler
from .charts import render, render_chart
from .columns import ColumnRoles, classify
from .config import Settings
from .csvdata import parse_csv, to_csv
from .errors import (
    AnalysisError,
    ChartflowError,
    CsvFormatError,
    ExportError,
    InputShapeError,
    PaletteError,
)
from .export import Artifact, Exporter, ExportFormat, export_artifact
from .models import ChartStyle, ChartType, Dataset, SavedChartRecord
from .palettes import Palette, PaletteRegistry, resolve_palette
from .projection import legend_entries, project
from .samples import load_sample
from .session import ChartSession
from .storage import ChartStore

__all__ = [
    "classify",
    "project",
    "legend_entries",
    "render",
    "render_chart",
    "export_artifact",
    "parse_csv",
    "to_csv",
    "load_sample",
    "analyze_text",
    "parse_analysis",
    "top_recommendation",
    "resolve_palette",
    "AnalysisResult",
    "Artifact",
    "AutosaveScheduler",
    "ChartSession",
    "ChartStore",
    "ChartStyle",
    "ChartType",
    "ColumnRoles",
    "Dataset",
    "Exporter",
    "ExportFormat",
    "Palette",
    "PaletteRegistry",
    "Recommendation",
    "SavedChartRecord",
    "Settings",
    "AnalysisError",
    "ChartflowError",
    "CsvFormatError",
    "ExportError",
    "InputShapeError",
    "PaletteError",
]
