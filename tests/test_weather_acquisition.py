"""Acquisition state machine: fallback chain and single automatic retry."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from logic.weather_acquisition import (
    AcquisitionEvent,
    AcquisitionState,
    InvalidTransition,
    WeatherAcquisition,
    transition,
)
from models.errors import ConfigurationError, LocationUnavailable, ProviderError, WeatherUnavailable
from models.weather import Coordinate, Provenance, ReportedPosition
from tools.location_provider import IpGeolocationClient, LocationResolver, ReportedPositionSensor
from tools.weather_provider import MockWeatherProvider

OSLO = Coordinate(latitude=59.91, longitude=10.75)
PARIS = Coordinate(latitude=48.85, longitude=2.35)


class _FixedIpClient(IpGeolocationClient):
    def __init__(self, coordinate: Coordinate | None) -> None:
        super().__init__()
        self.coordinate = coordinate

    def lookup(self) -> Coordinate:
        if self.coordinate is None:
            raise LocationUnavailable("lookup failed")
        return self.coordinate


def _acquisition(provider: MockWeatherProvider, ip_coordinate: Coordinate | None = PARIS) -> WeatherAcquisition:
    resolver = LocationResolver(ip_client=_FixedIpClient(ip_coordinate), timeout_seconds=1.0)
    return WeatherAcquisition(resolver=resolver, provider=provider, fallback_city="London")


def _fresh_sensor() -> ReportedPositionSensor:
    return ReportedPositionSensor(ReportedPosition(coordinate=OSLO))


def test_transition_table_happy_path() -> None:
    state = transition(AcquisitionState.INIT, AcquisitionEvent.START, 1)
    assert state is AcquisitionState.RESOLVING_PRECISE
    state = transition(state, AcquisitionEvent.LOCATED, 1)
    assert state is AcquisitionState.FETCHING
    assert transition(state, AcquisitionEvent.FETCHED, 1) is AcquisitionState.SUCCEEDED


def test_transition_into_fallback_requires_retry_budget() -> None:
    assert transition(AcquisitionState.FETCHING, AcquisitionEvent.FETCH_FAILED, 1) is AcquisitionState.FALLBACK
    assert transition(AcquisitionState.FETCHING, AcquisitionEvent.FETCH_FAILED, 0) is AcquisitionState.FAILED
    assert transition(AcquisitionState.FALLBACK, AcquisitionEvent.FETCH_FAILED, 0) is AcquisitionState.FAILED


def test_transition_rejects_unknown_pairs() -> None:
    with pytest.raises(InvalidTransition):
        transition(AcquisitionState.SUCCEEDED, AcquisitionEvent.START, 1)


def test_precise_location_success() -> None:
    provider = MockWeatherProvider()

    result = _acquisition(provider).acquire(_fresh_sensor())

    assert result.succeeded
    assert result.provenance is Provenance.PRECISE
    assert provider.calls == [("coordinate", OSLO)]
    assert result.weather_calls == 1
    assert result.history == [
        AcquisitionState.INIT,
        AcquisitionState.RESOLVING_PRECISE,
        AcquisitionState.FETCHING,
        AcquisitionState.SUCCEEDED,
    ]


def test_missing_sensor_uses_ip_location() -> None:
    provider = MockWeatherProvider()

    result = _acquisition(provider).acquire(ReportedPositionSensor(None))

    assert result.succeeded
    assert result.provenance is Provenance.APPROXIMATE
    assert provider.calls == [("coordinate", PARIS)]
    assert AcquisitionState.RESOLVING_APPROXIMATE in result.history


def test_no_location_at_all_goes_straight_to_fallback_city() -> None:
    provider = MockWeatherProvider()

    result = _acquisition(provider, ip_coordinate=None).acquire(ReportedPositionSensor(None))

    assert result.succeeded
    assert result.provenance is Provenance.FALLBACK
    assert provider.calls == [("city", "London")]
    assert len(result.errors) == 2


def test_primary_fetch_failure_retries_once_with_fallback_city() -> None:
    provider = MockWeatherProvider(failures=[ProviderError("HTTP 500")])

    result = _acquisition(provider).acquire(_fresh_sensor())

    assert result.succeeded
    assert result.provenance is Provenance.FALLBACK
    assert provider.calls == [("coordinate", OSLO), ("city", "London")]
    assert result.weather_calls == 2


def test_two_failures_end_in_failed_without_third_call() -> None:
    provider = MockWeatherProvider(failures=[ProviderError("HTTP 500"), ProviderError("HTTP 502")])

    result = _acquisition(provider).acquire(_fresh_sensor())

    assert result.state is AcquisitionState.FAILED
    assert result.retryable
    assert result.reading is None
    assert result.weather_calls == 2
    assert len(provider.calls) == 2
    with pytest.raises(WeatherUnavailable) as exc_info:
        result.raise_for_failure()
    assert len(exc_info.value.causes) == 2


def test_manual_retry_starts_a_fresh_run() -> None:
    provider = MockWeatherProvider(failures=[ProviderError("a"), ProviderError("b")])
    acquisition = _acquisition(provider)

    first = acquisition.acquire(_fresh_sensor())
    second = acquisition.acquire(_fresh_sensor())

    assert first.state is AcquisitionState.FAILED
    assert second.succeeded
    assert second.provenance is Provenance.PRECISE
    assert second.history[0] is AcquisitionState.INIT


class _EmptyResolver(LocationResolver):
    def resolve_precise(self, sensor):  # type: ignore[override]
        return None


def test_fetching_without_a_resolved_location_is_rejected() -> None:
    provider = MockWeatherProvider()
    resolver = _EmptyResolver(ip_client=_FixedIpClient(PARIS), timeout_seconds=1.0)
    acquisition = WeatherAcquisition(resolver=resolver, provider=provider, fallback_city="London")

    with pytest.raises(InvalidTransition, match="resolved location"):
        acquisition.acquire(_fresh_sensor())

    assert provider.calls == []


def test_configuration_errors_are_not_retried() -> None:
    provider = MockWeatherProvider(failures=[ConfigurationError("missing key")])

    with pytest.raises(ConfigurationError):
        _acquisition(provider).acquire(_fresh_sensor())

    assert len(provider.calls) == 1


def test_debug_summary_lists_history_and_errors() -> None:
    provider = MockWeatherProvider(failures=[ProviderError("HTTP 500")])

    summary = _acquisition(provider).acquire(_fresh_sensor()).debug_summary()

    assert summary["state"] == "succeeded"
    assert summary["provenance"] == "fallback"
    assert summary["history"][-2:] == ["fallback", "succeeded"]
    assert summary["errors"] == ["ProviderError: HTTP 500"]
