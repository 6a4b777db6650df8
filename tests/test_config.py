"""Tests for environment-driven settings."""

from pathlib import Path

import pytest

from chartflow.config import DEFAULT_MODEL, PLACEHOLDER_API_KEY, Settings


def test_defaults_from_empty_env() -> None:
    settings = Settings.from_env({})
    assert settings.api_key == ""
    assert not settings.api_configured
    assert settings.model == DEFAULT_MODEL
    assert settings.autosave_delay == 1.0
    assert settings.theme == "light"


def test_env_overrides(tmp_path) -> None:
    settings = Settings.from_env({
        "OPENAI_API_KEY": " sk-abc ",
        "CHARTFLOW_MODEL": "gpt-4o",
        "CHARTFLOW_TIMEOUT": "5",
        "CHARTFLOW_HOME": str(tmp_path),
        "CHARTFLOW_AUTOSAVE_DELAY": "0.25",
        "CHARTFLOW_THEME": "dark",
    })
    assert settings.api_key == "sk-abc"
    assert settings.api_configured
    assert settings.model == "gpt-4o"
    assert settings.timeout == 5.0
    assert settings.storage_path == Path(tmp_path) / "charts.json"
    assert settings.autosave_delay == 0.25
    assert settings.theme == "dark"


def test_placeholder_key_is_not_configured() -> None:
    assert not Settings.from_env({"OPENAI_API_KEY": PLACEHOLDER_API_KEY}).api_configured


@pytest.mark.parametrize(
    "env",
    [{"CHARTFLOW_TIMEOUT": "soon"}, {"CHARTFLOW_THEME": "sepia"}],
)
def test_invalid_values(env) -> None:
    with pytest.raises(ValueError):
        Settings.from_env(env)
