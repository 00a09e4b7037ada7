"""Error taxonomy shared by the weather pipeline, providers and the HTTP layer."""

from __future__ import annotations

from typing import List


class StyleMeError(Exception):
    """Base class for StyleMe failures."""

    retryable: bool = False


class LocationUnavailable(StyleMeError):
    """No sensor fix and the IP-geolocation fallback also failed."""

    retryable = True


class ProviderError(StyleMeError):
    """A remote provider failed: transport, HTTP status, envelope or embedded error."""

    retryable = True

    def __init__(self, message: str, provider: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class ConfigurationError(StyleMeError):
    """Missing or invalid configuration such as provider credentials. Never retried."""

    retryable = False


class WeatherUnavailable(StyleMeError):
    """Terminal failure of the acquisition pipeline after its single fallback retry."""

    retryable = True

    def __init__(self, message: str, causes: List[StyleMeError] | None = None) -> None:
        super().__init__(message)
        self.causes = list(causes or [])


__all__ = [
    "StyleMeError",
    "LocationUnavailable",
    "ProviderError",
    "ConfigurationError",
    "WeatherUnavailable",
]
