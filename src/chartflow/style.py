"""Translate a ChartStyle and a background theme into matplotlib rcParams."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import matplotlib as mpl
import matplotlib.pyplot as plt

from .models import ChartStyle
from .theme import DEFAULT_THEME, FONTS, LAYOUT, THEMES


def theme_colors(theme: str = DEFAULT_THEME) -> dict[str, str]:
    try:
        return THEMES[theme]
    except KeyError:
        raise ValueError(f"Unknown theme {theme!r}; expected one of {sorted(THEMES)}") from None


def rc_params(style: ChartStyle, theme: str = DEFAULT_THEME) -> dict:
    """Build the rcParams dict for one render."""
    colors = theme_colors(theme)
    return {
        # Figure
        "figure.figsize": LAYOUT["figsize"],
        "figure.dpi": LAYOUT["dpi"],
        "figure.facecolor": colors["bg"],
        "figure.edgecolor": "none",
        "savefig.facecolor": colors["bg"],
        "savefig.edgecolor": "none",

        # Axes
        "axes.facecolor": colors["bg"],
        "axes.edgecolor": colors["muted"],
        "axes.linewidth": LAYOUT["spine_width"],
        "axes.titlesize": LAYOUT["title_size"],
        "axes.titleweight": "bold",
        "axes.titlecolor": colors["text"],
        "axes.titlepad": 16,
        "axes.labelsize": LAYOUT["label_size"],
        "axes.labelcolor": colors["text"],
        "axes.prop_cycle": mpl.cycler(color=list(style.color_palette)),
        "axes.spines.top": False,
        "axes.spines.right": False,
        "axes.grid": style.show_grid,
        "axes.axisbelow": True,

        # Grid: dashed
        "grid.color": colors["grid"],
        "grid.alpha": LAYOUT["grid_alpha"],
        "grid.linewidth": 0.8,
        "grid.linestyle": "--",

        # Ticks
        "xtick.labelsize": LAYOUT["tick_size"],
        "ytick.labelsize": LAYOUT["tick_size"],
        "xtick.color": colors["muted"],
        "ytick.color": colors["muted"],
        "xtick.labelcolor": colors["text"],
        "ytick.labelcolor": colors["text"],

        # Lines
        "lines.linewidth": LAYOUT["line_width"],
        "lines.markersize": 6,

        # Legend
        "legend.frameon": True,
        "legend.facecolor": colors["surface"],
        "legend.edgecolor": colors["border"],
        "legend.framealpha": LAYOUT["legend_alpha"],
        "legend.fontsize": LAYOUT["tick_size"],
        "legend.labelcolor": colors["text"],

        # Font
        "font.family": "sans-serif",
        "font.sans-serif": FONTS["sans"],
        "font.size": LAYOUT["tick_size"],
        "text.color": colors["text"],

        # Keep text as <text> in SVG output and make ids reproducible
        "svg.fonttype": "none",
        "svg.hashsalt": "chartflow",
    }


@contextmanager
def applied(style: ChartStyle, theme: str = DEFAULT_THEME) -> Iterator[None]:
    """Apply the chart style for the duration of a render, then restore."""
    with plt.rc_context(rc_params(style, theme)):
        yield
