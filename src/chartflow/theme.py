"""Pure data: palettes, theme colors, fonts and layout constants.

No library imports. Everything here is plain dicts and tuples so any
consumer (matplotlib renderers, the SVG legend writer) can use it.
"""

# Built-in palettes, keyed by name. Never mutated at runtime.
BUILTIN_PALETTES = {
    "default": ("#ED2A66", "#FF8A00", "#C6283D", "#FF6B9D", "#FFB347"),
    "ocean": ("#0077b6", "#00b4d8", "#90e0ef", "#caf0f8", "#03045e"),
    "sunset": ("#FF2D6D", "#FF8A00", "#FFB347", "#FF6B9D", "#C6283D"),
    "forest": ("#2d6a4f", "#40916c", "#52b788", "#74c69d", "#95d5b2"),
    "monochrome": ("#450C23", "#6B1A3A", "#8B2A4A", "#AB3A5A", "#CB4A6A"),
}

DEFAULT_PALETTE_ID = "default"

# Starting colors offered when a new custom palette is created
DEFAULT_CUSTOM_COLORS = BUILTIN_PALETTES["default"]

# Background themes. Only the surface colors change; series colors come
# from the palette.
THEMES = {
    "light": {
        "bg": "#FFFFFF",
        "text": "#111111",
        "muted": "#888888",
        "grid": "#E5E5E5",
        "surface": "#FFFFFF",
        "border": "#E5E5E5",
    },
    "dark": {
        "bg": "#1A1A2E",
        "text": "#FFFFFF",
        "muted": "#888888",
        "grid": "#333333",
        "surface": "#1A1A2E",
        "border": "#333333",
    },
}

DEFAULT_THEME = "light"

FONTS = {
    "sans": [
        "Helvetica Neue", "Helvetica", "Arial",
        "Segoe UI", "Roboto", "DejaVu Sans", "sans-serif",
    ],
}

LAYOUT = {
    "figsize": (8.5, 5.0),
    "dpi": 80,
    "title_size": 14,
    "label_size": 11,
    "tick_size": 9,
    "line_width": 2.0,
    "spine_width": 0.8,
    "grid_alpha": 0.8,
    "legend_alpha": 0.9,
    "area_alpha": 0.3,
    "bar_width": 0.8,
    "donut_width": 0.4,
    "bubble_sizes": (40.0, 1200.0),  # marker area range in pt^2
    "raster_scale": 2,
}

# Synthesized SVG legend geometry, in SVG user units
LEGEND = {
    "swatch": 12.0,
    "gap": 6.0,
    "spacing": 18.0,
    "font_size": 12.0,
    "char_width": 0.6,  # average glyph width as a fraction of font size
    "padding": 16.0,
    "row_height": 28.0,
}
