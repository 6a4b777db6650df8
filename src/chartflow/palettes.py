"""Named palettes: immutable built-ins plus a mutable registry of custom palettes."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Sequence

from matplotlib.colors import is_color_like

from .errors import PaletteError
from .theme import BUILTIN_PALETTES, DEFAULT_CUSTOM_COLORS, DEFAULT_PALETTE_ID

logger = logging.getLogger(__name__)

BUILTINS: Mapping[str, tuple[str, ...]] = MappingProxyType(dict(BUILTIN_PALETTES))


@dataclass(frozen=True)
class Palette:
    id: str
    colors: tuple[str, ...]

    def to_dict(self) -> dict:
        return {"id": self.id, "colors": list(self.colors)}

    @classmethod
    def from_dict(cls, data: Mapping) -> Palette:
        return cls(id=data["id"], colors=tuple(data["colors"]))


def validate_colors(colors: Iterable[str]) -> tuple[str, ...]:
    colors = tuple(colors)
    if not colors:
        raise PaletteError("A palette needs at least one color")
    bad = [c for c in colors if not is_color_like(c)]
    if bad:
        raise PaletteError(f"Invalid colors: {', '.join(map(repr, bad))}")
    return colors


def resolve_palette(
    selection: str | None,
    builtins: Mapping[str, Sequence[str]],
    custom: Mapping[str, Palette],
) -> tuple[str, ...]:
    """Return the colors for a palette id.

    Custom palettes win over built-ins with the same id. Unknown or deleted
    ids fall back to the default built-in.
    """
    if selection in custom:
        return custom[selection].colors
    if selection in builtins:
        return tuple(builtins[selection])
    return tuple(builtins[DEFAULT_PALETTE_ID])


def _millis() -> int:
    return int(time.time() * 1000)


class PaletteRegistry:
    """Custom palettes keyed by id, plus the current selection."""

    def __init__(
        self,
        builtins: Mapping[str, Sequence[str]] = BUILTINS,
        custom: Iterable[Palette] = (),
        selected: str = DEFAULT_PALETTE_ID,
        clock: Callable[[], int] = _millis,
    ) -> None:
        self._builtins = builtins
        self._custom: dict[str, Palette] = {p.id: p for p in custom}
        self._clock = clock
        self._selected = DEFAULT_PALETTE_ID
        self.select(selected)

    @property
    def selected(self) -> str:
        return self._selected

    @property
    def custom(self) -> list[Palette]:
        return list(self._custom.values())

    def names(self) -> list[str]:
        """All selectable ids: built-ins first, then custom palettes in creation order."""
        return [*self._builtins, *self._custom]

    def colors(self) -> tuple[str, ...]:
        return resolve_palette(self._selected, self._builtins, self._custom)

    def find(self, colors: Iterable[str]) -> str | None:
        """Id of the first palette with exactly these colors."""
        colors = tuple(colors)
        return next((pid for pid in self.names() if resolve_palette(pid, self._builtins, self._custom) == colors), None)

    def select(self, palette_id: str) -> tuple[str, ...]:
        if palette_id in self._custom or palette_id in self._builtins:
            self._selected = palette_id
        else:
            logger.debug("Unknown palette %r, selecting %r", palette_id, DEFAULT_PALETTE_ID)
            self._selected = DEFAULT_PALETTE_ID
        return self.colors()

    def _new_id(self) -> str:
        base = f"custom-{self._clock()}"
        palette_id, n = base, 1
        while palette_id in self._custom or palette_id in self._builtins:
            palette_id = f"{base}-{n}"
            n += 1
        return palette_id

    def create(self, colors: Iterable[str] = DEFAULT_CUSTOM_COLORS) -> Palette:
        """Add a custom palette and select it."""
        palette = Palette(self._new_id(), validate_colors(colors))
        self._custom[palette.id] = palette
        self._selected = palette.id
        return palette

    def update(self, palette_id: str, colors: Iterable[str]) -> Palette:
        """Replace a custom palette's colors in place. The id never changes."""
        if palette_id not in self._custom:
            raise PaletteError(f"No custom palette with id {palette_id!r}")
        palette = Palette(palette_id, validate_colors(colors))
        self._custom[palette_id] = palette
        self._selected = palette_id
        return palette

    def delete(self, palette_id: str) -> None:
        if palette_id not in self._custom:
            raise PaletteError(f"No custom palette with id {palette_id!r}")
        del self._custom[palette_id]
        if self._selected == palette_id:
            self._selected = DEFAULT_PALETTE_ID
