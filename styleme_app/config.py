"""Configuration helpers for the StyleMe wardrobe planner."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional

from models.errors import ConfigurationError

DEFAULT_FALLBACK_CITY = "London"
DEFAULT_IP_GEOLOCATION_URL = "https://ipapi.co/json/"
WEATHER_PROVIDERS = ("wttr", "openweather")


@dataclass
class AppConfig:
    """Configuration values for the StyleMe app.

    Every value can be overridden through the environment so the same build runs
    locally, in tests and behind an ASGI server without code changes.
    """

    weather_provider: str = "wttr"
    weather_api_key: Optional[str] = None
    fallback_city: str = DEFAULT_FALLBACK_CITY
    ip_geolocation_url: str = DEFAULT_IP_GEOLOCATION_URL
    location_timeout_seconds: float = 10.0
    location_max_age_seconds: float = 300.0
    http_timeout_seconds: float = 10.0
    wardrobe_db_path: str = "data/wardrobe.db"
    calendar_db_path: str = "data/calendar.db"
    suggestion_latency_seconds: float = 0.0
    log_level: str = "INFO"
    environment: str | None = None

    def __post_init__(self) -> None:
        self.weather_provider = self.weather_provider.strip().lower()
        if self.weather_provider not in WEATHER_PROVIDERS:
            raise ConfigurationError(
                f"Unsupported weather provider '{self.weather_provider}'. Allowed: {list(WEATHER_PROVIDERS)}"
            )

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default and is merged with environment variables so that secrets such as
        the OpenWeather key can be injected by the runtime environment.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("STYLEME_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            return os.getenv(env_key, yaml_config.get(key, default))

        def get_float(key: str, default: float) -> float:
            raw = get_value(key)
            if raw in (None, ""):
                return default
            try:
                return float(raw)
            except ValueError as exc:
                raise ConfigurationError(f"Config value '{key}' must be numeric, got '{raw}'") from exc

        return cls(
            weather_provider=str(get_value("weather_provider", "wttr") or "wttr"),
            weather_api_key=get_value("openweather_api_key"),
            fallback_city=str(get_value("fallback_city", DEFAULT_FALLBACK_CITY) or DEFAULT_FALLBACK_CITY),
            ip_geolocation_url=str(
                get_value("ip_geolocation_url", DEFAULT_IP_GEOLOCATION_URL) or DEFAULT_IP_GEOLOCATION_URL
            ),
            location_timeout_seconds=get_float("location_timeout_seconds", 10.0),
            location_max_age_seconds=get_float("location_max_age_seconds", 300.0),
            http_timeout_seconds=get_float("http_timeout_seconds", 10.0),
            wardrobe_db_path=str(get_value("wardrobe_db_path", "data/wardrobe.db")),
            calendar_db_path=str(get_value("calendar_db_path", "data/calendar.db")),
            suggestion_latency_seconds=get_float("suggestion_latency_seconds", 0.0),
            log_level=str(get_value("log_level", "INFO") or "INFO"),
            environment=env_name,
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal YAML/INI-style config without external dependencies."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config
