"""One chart being edited: data, chart type, palette and toggles, with autosave."""

from __future__ import annotations

import time
import uuid
from typing import Callable, Iterable

import matplotlib.pyplot as plt

from .autosave import AutosaveScheduler
from .charts import close, render_chart
from .config import Settings
from .export import Artifact, Exporter, ExportFormat
from .models import ChartStyle, ChartType, Dataset, SavedChartRecord
from .palettes import Palette, PaletteRegistry
from .storage import ChartStore


def _now_ms() -> int:
    return int(time.time() * 1000)


class ChartSession:
    """Holds the editable state of one chart.

    The id is minted once and stays stable. Chart type and style survive
    dataset replacement. Every change invalidates the preview and, when a
    store is attached, schedules a coalesced autosave of the full record.

    Scheduled saves are written by whoever drives the scheduler: run
    `run_autosave()` as a task on the host event loop, or call `flush()`.
    `close()` always flushes.
    """

    def __init__(
        self,
        dataset: Dataset,
        chart_type: ChartType = ChartType.BAR,
        *,
        store: ChartStore | None = None,
        palettes: PaletteRegistry | None = None,
        settings: Settings | None = None,
        show_grid: bool = True,
        show_legend: bool = True,
        chart_id: str | None = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self.settings = settings or Settings()
        self.id = chart_id or uuid.uuid4().hex
        self.palettes = palettes or PaletteRegistry()
        self._dataset = dataset
        self._chart_type = ChartType(chart_type)
        self._show_grid = show_grid
        self._show_legend = show_legend
        self._clock = clock
        self._figure: plt.Figure | None = None
        self._exporter = Exporter(settle_delay=self.settings.export_settle)
        self._autosave = (
            AutosaveScheduler(store.upsert, delay=self.settings.autosave_delay) if store is not None else None
        )

    @classmethod
    def from_record(cls, record: SavedChartRecord, **kwargs) -> ChartSession:
        """Reopen a saved chart. Unknown colors come back as a new custom palette."""
        session = cls(
            record.dataset,
            record.chart_type,
            show_grid=record.style.show_grid,
            show_legend=record.style.show_legend,
            chart_id=record.id,
            **kwargs,
        )
        match = session.palettes.find(record.style.color_palette)
        if match is not None:
            session.palettes.select(match)
        else:
            session.palettes.create(record.style.color_palette)
        return session

    @property
    def dataset(self) -> Dataset:
        return self._dataset

    @property
    def chart_type(self) -> ChartType:
        return self._chart_type

    @property
    def style(self) -> ChartStyle:
        return ChartStyle(self.palettes.colors(), self._show_grid, self._show_legend)

    @property
    def autosave(self) -> AutosaveScheduler | None:
        return self._autosave

    def snapshot(self) -> SavedChartRecord:
        return SavedChartRecord(
            id=self.id,
            title=self._dataset.title,
            dataset=self._dataset,
            chart_type=self._chart_type,
            style=self.style,
            last_modified=self._clock(),
        )

    def _changed(self) -> None:
        if self._figure is not None:
            close(self._figure)
            self._figure = None
        if self._autosave is not None:
            self._autosave.schedule(self.snapshot())

    # Edits

    def replace_dataset(self, dataset: Dataset) -> None:
        self._dataset = dataset
        self._changed()

    def set_title(self, title: str) -> None:
        self.replace_dataset(Dataset(title, self._dataset.columns, self._dataset.rows))

    def set_chart_type(self, chart_type: ChartType) -> None:
        self._chart_type = ChartType(chart_type)
        self._changed()

    def set_style(self, *, show_grid: bool | None = None, show_legend: bool | None = None) -> None:
        if show_grid is not None:
            self._show_grid = show_grid
        if show_legend is not None:
            self._show_legend = show_legend
        self._changed()

    def select_palette(self, palette_id: str) -> None:
        self.palettes.select(palette_id)
        self._changed()

    def create_palette(self, colors: Iterable[str]) -> Palette:
        palette = self.palettes.create(colors)
        self._changed()
        return palette

    def update_palette(self, palette_id: str, colors: Iterable[str]) -> Palette:
        palette = self.palettes.update(palette_id, colors)
        self._changed()
        return palette

    def delete_palette(self, palette_id: str) -> None:
        self.palettes.delete(palette_id)
        self._changed()

    # Output

    def render(self) -> plt.Figure:
        """The laid-out preview figure, rebuilt after any change."""
        if self._figure is None:
            self._figure = render_chart(self._dataset, self._chart_type, self.style, theme=self.settings.theme)
        return self._figure

    async def export(self, fmt: ExportFormat | str) -> Artifact:
        return await self._exporter.export(self.render(), fmt, self._dataset, self.style, self._chart_type)

    async def run_autosave(self, interval: float = 0.1) -> None:
        """Write scheduled saves as they come due, until cancelled."""
        if self._autosave is not None:
            await self._autosave.run(interval)

    def flush(self) -> bool:
        """Write any pending autosave immediately."""
        return self._autosave.flush() if self._autosave is not None else False

    def close(self) -> None:
        self.flush()
        if self._figure is not None:
            close(self._figure)
            self._figure = None
