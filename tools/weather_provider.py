"""Weather provider abstractions and implementations.

Each provider turns its own JSON envelope into a canonical
:class:`~models.weather.WeatherReading` through one explicit parse step. The
parse step validates the envelope structure with pydantic and raises
:class:`~models.errors.ProviderError`, naming the offending fields, when the
envelope is malformed or the provider embedded an error. Individual numeric
fields are read best-effort through a mapping table: a value that is absent or
does not parse as a finite number is replaced by the table default (``0``
for temperature like fields, ``1013`` for pressure) instead of failing the whole reading.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from typing import Any, Dict, List, NamedTuple, Sequence, Tuple

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from models.errors import ConfigurationError, ProviderError
from models.weather import ConditionKind, Coordinate, WeatherCondition, WeatherReading
from tools.observability import instrument_tool


LOGGER = logging.getLogger(__name__)

NEUTRAL_PRESSURE_HPA = 1013.0
KMH_TO_MS = 1 / 3.6


class FieldRule(NamedTuple):
    """One row of a best-effort mapping table."""

    field: str
    path: Tuple[Any, ...]
    default: float
    scale: float = 1.0


_WTTR_FIELDS: Sequence[FieldRule] = (
    FieldRule("temperature", ("current_condition", 0, "temp_C"), 0.0),
    FieldRule("feels_like", ("current_condition", 0, "FeelsLikeC"), 0.0),
    FieldRule("humidity", ("current_condition", 0, "humidity"), 0.0),
    FieldRule("wind_speed", ("current_condition", 0, "windspeedKmph"), 0.0, KMH_TO_MS),
    FieldRule("pressure", ("current_condition", 0, "pressure"), NEUTRAL_PRESSURE_HPA),
    FieldRule("temp_min", ("weather", 0, "mintempC"), 0.0),
    FieldRule("temp_max", ("weather", 0, "maxtempC"), 0.0),
)

_OPENWEATHER_FIELDS: Sequence[FieldRule] = (
    FieldRule("temperature", ("main", "temp"), 0.0),
    FieldRule("feels_like", ("main", "feels_like"), 0.0),
    FieldRule("humidity", ("main", "humidity"), 0.0),
    FieldRule("wind_speed", ("wind", "speed"), 0.0),
    FieldRule("pressure", ("main", "pressure"), NEUTRAL_PRESSURE_HPA),
    FieldRule("temp_min", ("main", "temp_min"), 0.0),
    FieldRule("temp_max", ("main", "temp_max"), 0.0),
)

# World Weather Online condition codes used by wttr.in.
_WWO_CODES: Dict[ConditionKind, Tuple[int, ...]] = {
    ConditionKind.CLEAR: (113,),
    ConditionKind.CLOUDS: (116, 119, 122),
    ConditionKind.MIST: (143, 248, 260),
    ConditionKind.DRIZZLE: (185, 263, 266, 281, 284),
    ConditionKind.RAIN: (176, 293, 296, 299, 302, 305, 308, 311, 314, 353, 356, 359),
    ConditionKind.SNOW: (
        179, 182, 227, 230, 317, 320, 323, 326, 329, 332, 335, 338, 350, 362, 365, 368, 371, 374, 377,
    ),
    ConditionKind.THUNDERSTORM: (200, 386, 389, 392, 395),
}
_WWO_LOOKUP: Dict[int, ConditionKind] = {code: kind for kind, codes in _WWO_CODES.items() for code in codes}

_MIST_LIKE = {"mist", "smoke", "haze", "dust", "fog", "sand", "ash", "squall", "tornado"}

_TEXT_RULES: Sequence[Tuple[ConditionKind, Tuple[str, ...]]] = (
    (ConditionKind.THUNDERSTORM, ("thunder",)),
    (ConditionKind.SNOW, ("snow", "sleet", "blizzard", "ice")),
    (ConditionKind.DRIZZLE, ("drizzle",)),
    (ConditionKind.RAIN, ("rain", "shower")),
    (ConditionKind.MIST, tuple(_MIST_LIKE)),
    (ConditionKind.CLOUDS, ("cloud", "overcast")),
    (ConditionKind.CLEAR, ("clear", "sun")),
)


def classify_condition_text(text: str) -> ConditionKind:
    """Classify free-text conditions when a provider code is unknown."""

    lowered = (text or "").lower()
    for kind, keywords in _TEXT_RULES:
        if any(keyword in lowered for keyword in keywords):
            return kind
    return ConditionKind.UNKNOWN


def _dig(payload: Any, path: Sequence[Any]) -> Any:
    current = payload
    for step in path:
        try:
            current = current[step]
        except (KeyError, IndexError, TypeError):
            return None
    return current


def _parse_float(raw: Any) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def _best_effort_float(raw: Any, default: float) -> float:
    value = _parse_float(raw)
    return default if value is None else value


def apply_field_rules(payload: Any, rules: Sequence[FieldRule]) -> Dict[str, float]:
    """Read numeric fields through a mapping table, substituting defaults."""

    values: Dict[str, float] = {}
    defaulted: List[str] = []
    for rule in rules:
        parsed = _parse_float(_dig(payload, rule.path))
        if parsed is None:
            defaulted.append(rule.field)
            values[rule.field] = rule.default
        else:
            values[rule.field] = parsed * rule.scale
    values["humidity"] = min(max(values.get("humidity", 0.0), 0.0), 100.0)
    values["wind_speed"] = max(values.get("wind_speed", 0.0), 0.0)
    if defaulted:
        LOGGER.debug("Defaulted weather fields", extra={"fields": defaulted})
    return values


class _WttrEnvelope(BaseModel):
    model_config = ConfigDict(extra="allow")

    current_condition: List[Dict[str, Any]] = Field(min_length=1)
    nearest_area: List[Dict[str, Any]] = []
    weather: List[Dict[str, Any]] = []


class _OpenWeatherEnvelope(BaseModel):
    model_config = ConfigDict(extra="allow")

    main: Dict[str, Any]
    weather: List[Dict[str, Any]] = []
    wind: Dict[str, Any] = {}
    name: str = ""
    sys: Dict[str, Any] = {}


def _envelope_problems(exc: ValidationError) -> str:
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ())) or "payload"
        problems.append(f"{location}: {err.get('msg')}")
    return "; ".join(problems)


def _wttr_embedded_error(payload: Dict[str, Any]) -> str | None:
    errors = _dig(payload, ("data", "error")) or payload.get("error")
    if not errors:
        return None
    if isinstance(errors, list):
        return "; ".join(str(entry.get("msg", entry)) if isinstance(entry, dict) else str(entry) for entry in errors)
    return str(errors)


def parse_wttr_payload(payload: Any, query: str = "") -> WeatherReading:
    """Map a wttr.in ``format=j1`` envelope into a :class:`WeatherReading`."""

    if not isinstance(payload, dict):
        raise ProviderError("weather payload is not a JSON object", provider="wttr")
    embedded = _wttr_embedded_error(payload)
    if embedded:
        raise ProviderError(f"provider reported an error: {embedded}", provider="wttr")
    try:
        envelope = _WttrEnvelope.model_validate(payload)
    except ValidationError as exc:
        raise ProviderError(f"weather payload envelope is invalid: {_envelope_problems(exc)}", provider="wttr") from exc

    values = apply_field_rules(payload, _WTTR_FIELDS)
    current = envelope.current_condition[0]
    description = str(_dig(current, ("weatherDesc", 0, "value")) or "").strip()
    raw_code = current.get("weatherCode")
    code = int(_best_effort_float(raw_code, -1))
    kind = _WWO_LOOKUP.get(code) or classify_condition_text(description)
    area = envelope.nearest_area[0] if envelope.nearest_area else {}
    location_name = str(_dig(area, ("areaName", 0, "value")) or query or "Unknown location")
    country = _dig(area, ("country", 0, "value"))

    return WeatherReading(
        location_name=location_name,
        country=str(country) if country else None,
        condition=WeatherCondition(
            kind=kind,
            description=description or kind.value,
            icon=str(raw_code or ""),
        ),
        wind_direction=current.get("winddir16Point"),
        **values,
    )


def parse_openweather_payload(payload: Any) -> WeatherReading:
    """Map an OpenWeather ``/data/2.5/weather`` envelope into a :class:`WeatherReading`."""

    if not isinstance(payload, dict):
        raise ProviderError("weather payload is not a JSON object", provider="openweather")
    cod = payload.get("cod")
    if cod is not None and str(cod) != "200":
        raise ProviderError(
            f"provider reported an error: {payload.get('message', 'unknown error')}",
            provider="openweather",
            status_code=int(_best_effort_float(cod, 0)) or None,
        )
    try:
        envelope = _OpenWeatherEnvelope.model_validate(payload)
    except ValidationError as exc:
        raise ProviderError(
            f"weather payload envelope is invalid: {_envelope_problems(exc)}", provider="openweather"
        ) from exc

    values = apply_field_rules(payload, _OPENWEATHER_FIELDS)
    primary = envelope.weather[0] if envelope.weather else {}
    main = str(primary.get("main") or "").strip().lower()
    description = str(primary.get("description") or main).strip()
    if main in {kind.value for kind in ConditionKind}:
        kind = ConditionKind(main)
    elif main in _MIST_LIKE:
        kind = ConditionKind.MIST
    else:
        kind = classify_condition_text(description)

    degrees = _dig(payload, ("wind", "deg"))
    return WeatherReading(
        location_name=envelope.name or "Unknown location",
        country=envelope.sys.get("country") or None,
        condition=WeatherCondition(kind=kind, description=description or kind.value, icon=str(primary.get("icon") or "")),
        wind_direction=str(degrees) if degrees is not None else None,
        **values,
    )


class WeatherProvider(ABC):
    """Abstract current-weather provider."""

    name = "weather"

    def __init__(self, timeout_seconds: float = 10.0) -> None:
        self.timeout_seconds = timeout_seconds

    @abstractmethod
    def fetch_weather(self, coordinate: Coordinate) -> WeatherReading:
        """Return current weather at ``coordinate``."""

    @abstractmethod
    def fetch_weather_by_city(self, city: str) -> WeatherReading:
        """Return current weather for a place name."""

    def _get_json(self, url: str, params: Dict[str, Any] | None = None) -> Any:
        try:
            response = requests.get(url, params=params, timeout=self.timeout_seconds)
        except requests.RequestException as exc:
            raise ProviderError(f"{self.name} unreachable: {exc}", provider=self.name) from exc
        if response.status_code == 401:
            raise ConfigurationError(f"{self.name} rejected the configured credentials")
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise ProviderError(
                f"{self.name} responded with HTTP {response.status_code}",
                provider=self.name,
                status_code=response.status_code,
            ) from exc
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(f"{self.name} returned malformed JSON", provider=self.name) from exc


class WttrWeatherProvider(WeatherProvider):
    """Keyless provider speaking the wttr.in JSON format."""

    name = "wttr"

    def __init__(self, base_url: str = "https://wttr.in", timeout_seconds: float = 10.0) -> None:
        super().__init__(timeout_seconds=timeout_seconds)
        self.base_url = base_url.rstrip("/")

    def _fetch(self, query: str) -> WeatherReading:
        LOGGER.info("Fetching current weather", extra={"provider": self.name})
        payload = self._get_json(f"{self.base_url}/{query}", params={"format": "j1"})
        return parse_wttr_payload(payload, query=query)

    @instrument_tool("fetch_weather")
    def fetch_weather(self, coordinate: Coordinate) -> WeatherReading:
        return self._fetch(coordinate.as_query())

    @instrument_tool("fetch_weather_by_city")
    def fetch_weather_by_city(self, city: str) -> WeatherReading:
        if not city or not city.strip():
            raise ValueError("city is required for weather lookups")
        return self._fetch(city.strip())


class OpenWeatherProvider(WeatherProvider):
    """OpenWeather current-weather provider; requires an API key."""

    name = "openweather"

    def __init__(
        self,
        api_key: str | None = None,
        timeout_seconds: float = 10.0,
        units: str = "metric",
        base_url: str = "https://api.openweathermap.org/data/2.5",
    ) -> None:
        super().__init__(timeout_seconds=timeout_seconds)
        self.api_key = api_key
        self.units = units
        self.base_url = base_url.rstrip("/")

    def _fetch(self, params: Dict[str, Any]) -> WeatherReading:
        if not self.api_key:
            raise ConfigurationError("OPENWEATHER_API_KEY is required for the openweather provider")
        LOGGER.info("Fetching current weather", extra={"provider": self.name})
        payload = self._get_json(
            f"{self.base_url}/weather",
            params={**params, "appid": self.api_key, "units": self.units},
        )
        return parse_openweather_payload(payload)

    @instrument_tool("fetch_weather")
    def fetch_weather(self, coordinate: Coordinate) -> WeatherReading:
        return self._fetch({"lat": coordinate.latitude, "lon": coordinate.longitude})

    @instrument_tool("fetch_weather_by_city")
    def fetch_weather_by_city(self, city: str) -> WeatherReading:
        if not city or not city.strip():
            raise ValueError("city is required for weather lookups")
        return self._fetch({"q": city.strip()})


class MockWeatherProvider(WeatherProvider):
    """Offline deterministic provider for tests.

    ``failures`` are raised, in order, before the fixed reading is returned.
    Every call is recorded in ``calls`` as ``("coordinate"|"city", argument)``.
    """

    name = "mock"

    def __init__(self, reading: WeatherReading | None = None, failures: List[Exception] | None = None) -> None:
        super().__init__()
        self.reading = reading or WeatherReading(
            location_name="Testville",
            temperature=18.0,
            feels_like=17.0,
            humidity=50.0,
            temp_min=14.0,
            temp_max=21.0,
            wind_speed=3.0,
            condition=WeatherCondition(kind=ConditionKind.CLEAR, description="clear sky", icon="01d"),
        )
        self.failures = list(failures or [])
        self.calls: List[Tuple[str, object]] = []

    def _next(self) -> WeatherReading:
        if self.failures:
            raise self.failures.pop(0)
        return self.reading

    def fetch_weather(self, coordinate: Coordinate) -> WeatherReading:
        self.calls.append(("coordinate", coordinate))
        return self._next()

    def fetch_weather_by_city(self, city: str) -> WeatherReading:
        if not city or not city.strip():
            raise ValueError("city is required for weather lookups")
        self.calls.append(("city", city))
        return self._next()


def build_weather_provider(provider: str, api_key: str | None = None, timeout_seconds: float = 10.0) -> WeatherProvider:
    """Instantiate the configured provider."""

    if provider == "wttr":
        return WttrWeatherProvider(timeout_seconds=timeout_seconds)
    if provider == "openweather":
        return OpenWeatherProvider(api_key=api_key, timeout_seconds=timeout_seconds)
    raise ConfigurationError(f"Unsupported weather provider '{provider}'")


__all__ = [
    "FieldRule",
    "WeatherProvider",
    "WttrWeatherProvider",
    "OpenWeatherProvider",
    "MockWeatherProvider",
    "apply_field_rules",
    "build_weather_provider",
    "classify_condition_text",
    "parse_openweather_payload",
    "parse_wttr_payload",
]
