"""Configuration loading from the environment and YAML files."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from models.errors import ConfigurationError
from styleme_app.config import AppConfig

_KEYS = (
    "APP_ENV",
    "APP_CONFIG_PATH",
    "WEATHER_PROVIDER",
    "OPENWEATHER_API_KEY",
    "FALLBACK_CITY",
    "SUGGESTION_LATENCY_SECONDS",
    "LOCATION_TIMEOUT_SECONDS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_without_environment() -> None:
    config = AppConfig.from_env()

    assert config.weather_provider == "wttr"
    assert config.fallback_city == "London"
    assert config.location_timeout_seconds == 10.0
    assert config.location_max_age_seconds == 300.0
    assert config.suggestion_latency_seconds == 0.0
    assert config.environment is None


def test_yaml_file_values_are_loaded(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_file = tmp_path / "staging.yaml"
    config_file.write_text(
        "# staging\nweather_provider: openweather\nfallback_city: \"Berlin\"\nsuggestion_latency_seconds: 1\n"
    )
    monkeypatch.setenv("APP_CONFIG_PATH", str(config_file))

    config = AppConfig.from_env()

    assert config.weather_provider == "openweather"
    assert config.fallback_city == "Berlin"
    assert config.suggestion_latency_seconds == 1.0


def test_environment_variables_override_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "dev.yaml").write_text("fallback_city: Berlin\n")
    monkeypatch.setenv("STYLEME_CONFIG_DIR", str(tmp_path))
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("FALLBACK_CITY", "Madrid")
    monkeypatch.setenv("OPENWEATHER_API_KEY", "secret")

    config = AppConfig.from_env()

    assert config.environment == "dev"
    assert config.fallback_city == "Madrid"
    assert config.weather_api_key == "secret"


def test_unknown_provider_is_a_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WEATHER_PROVIDER", "accuweather")

    with pytest.raises(ConfigurationError):
        AppConfig.from_env()


def test_non_numeric_timeout_is_a_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOCATION_TIMEOUT_SECONDS", "soon")

    with pytest.raises(ConfigurationError):
        AppConfig.from_env()
