"""Runtime settings, read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .theme import DEFAULT_THEME, THEMES

PLACEHOLDER_API_KEY = "your_openai_api_key_here"
DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o-mini"


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "")
    if not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    api_key: str = ""
    api_url: str = DEFAULT_API_URL
    model: str = DEFAULT_MODEL
    timeout: float = 30.0
    home: Path = Path.home() / ".chartflow"
    autosave_delay: float = 1.0  # seconds of quiet before a write
    export_settle: float = 0.1  # seconds to wait before capturing
    theme: str = DEFAULT_THEME

    @property
    def api_configured(self) -> bool:
        return bool(self.api_key) and self.api_key != PLACEHOLDER_API_KEY

    @property
    def storage_path(self) -> Path:
        return self.home / "charts.json"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if env is None else env
        theme = env.get("CHARTFLOW_THEME", DEFAULT_THEME)
        if theme not in THEMES:
            raise ValueError(f"CHARTFLOW_THEME must be one of {sorted(THEMES)}, got {theme!r}")
        return cls(
            api_key=env.get("OPENAI_API_KEY", "").strip(),
            api_url=env.get("CHARTFLOW_API_URL", DEFAULT_API_URL),
            model=env.get("CHARTFLOW_MODEL", DEFAULT_MODEL),
            timeout=_float(env, "CHARTFLOW_TIMEOUT", 30.0),
            home=Path(env.get("CHARTFLOW_HOME", Path.home() / ".chartflow")).expanduser(),
            autosave_delay=_float(env, "CHARTFLOW_AUTOSAVE_DELAY", 1.0),
            export_settle=_float(env, "CHARTFLOW_EXPORT_SETTLE", 0.1),
            theme=theme,
        )
