"""Sensor fixes, IP geolocation and provenance tagging."""

from __future__ import annotations

import sys
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest
import requests

sys.path.append(str(Path(__file__).resolve().parents[1]))

from models.errors import LocationUnavailable
from models.weather import Coordinate, Provenance, ReportedPosition
from tools import location_provider
from tools.location_provider import (
    IpGeolocationClient,
    LocationResolver,
    LocationSensor,
    ReportedPositionSensor,
    read_sensor_with_timeout,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
OSLO = Coordinate(latitude=59.91, longitude=10.75)
PARIS = Coordinate(latitude=48.85, longitude=2.35)


class _FixedIpClient(IpGeolocationClient):
    def __init__(self, coordinate: Coordinate | None = None) -> None:
        super().__init__()
        self.coordinate = coordinate
        self.lookups = 0

    def lookup(self) -> Coordinate:
        self.lookups += 1
        if self.coordinate is None:
            raise LocationUnavailable("lookup failed")
        return self.coordinate


class _HangingSensor(LocationSensor):
    def __init__(self) -> None:
        self.release = threading.Event()

    def read_position(self, *, high_accuracy: bool, timeout_seconds: float, maximum_age_seconds: float) -> Coordinate:
        self.release.wait(5)
        return OSLO


class _JsonResponse:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def json(self) -> Any:
        return self.payload


def _sensor(age_seconds: float | None) -> ReportedPositionSensor:
    if age_seconds is None:
        return ReportedPositionSensor(None, clock=lambda: NOW)
    position = ReportedPosition(coordinate=OSLO, captured_at=NOW - timedelta(seconds=age_seconds))
    return ReportedPositionSensor(position, clock=lambda: NOW)


def test_reported_position_sensor_returns_fresh_fix() -> None:
    coordinate = _sensor(30).read_position(high_accuracy=True, timeout_seconds=10, maximum_age_seconds=300)

    assert coordinate == OSLO


def test_reported_position_sensor_rejects_stale_fix() -> None:
    with pytest.raises(LocationUnavailable, match="stale"):
        _sensor(301).read_position(high_accuracy=True, timeout_seconds=10, maximum_age_seconds=300)


def test_reported_position_sensor_without_fix_is_unavailable() -> None:
    with pytest.raises(LocationUnavailable):
        _sensor(None).read_position(high_accuracy=True, timeout_seconds=10, maximum_age_seconds=300)


def test_naive_capture_time_is_treated_as_utc() -> None:
    position = ReportedPosition(coordinate=OSLO, captured_at=(NOW - timedelta(seconds=10)).replace(tzinfo=None))
    sensor = ReportedPositionSensor(position, clock=lambda: NOW)

    assert sensor.read_position(high_accuracy=True, timeout_seconds=10, maximum_age_seconds=300) == OSLO


def test_read_sensor_with_timeout_gives_up() -> None:
    sensor = _HangingSensor()
    try:
        with pytest.raises(LocationUnavailable, match="timed out"):
            read_sensor_with_timeout(sensor, timeout_seconds=0.05, maximum_age_seconds=300)
    finally:
        sensor.release.set()


def test_resolver_prefers_sensor_and_tags_precise() -> None:
    ip_client = _FixedIpClient(PARIS)
    resolver = LocationResolver(ip_client=ip_client)

    resolved = resolver.resolve(_sensor(5))

    assert resolved.coordinate == OSLO
    assert resolved.provenance is Provenance.PRECISE
    assert ip_client.lookups == 0


def test_resolver_falls_back_to_ip_and_tags_approximate() -> None:
    ip_client = _FixedIpClient(PARIS)
    resolver = LocationResolver(ip_client=ip_client)

    resolved = resolver.resolve(_sensor(None))

    assert resolved.coordinate == PARIS
    assert resolved.provenance is Provenance.APPROXIMATE
    assert ip_client.lookups == 1


def test_resolver_propagates_when_both_sources_fail() -> None:
    resolver = LocationResolver(ip_client=_FixedIpClient(None))

    with pytest.raises(LocationUnavailable):
        resolver.resolve(_sensor(None))


def test_ip_client_parses_ipapi_payload(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        location_provider.requests,
        "get",
        lambda *_, **__: _JsonResponse({"city": "Paris", "latitude": 48.85, "longitude": 2.35}),
    )

    assert IpGeolocationClient().lookup() == PARIS


def test_ip_client_accepts_lat_lon_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        location_provider.requests,
        "get",
        lambda *_, **__: _JsonResponse({"status": "success", "lat": 48.85, "lon": 2.35}),
    )

    assert IpGeolocationClient(url="http://ip-api.example/json").lookup() == PARIS


@pytest.mark.parametrize(
    "payload",
    [
        {"error": True, "reason": "RateLimited"},
        {"status": "fail", "message": "reserved range"},
        {"latitude": None, "longitude": 2.35},
        ["not", "an", "object"],
    ],
)
def test_ip_client_rejects_unusable_payloads(monkeypatch: pytest.MonkeyPatch, payload: Any) -> None:
    monkeypatch.setattr(location_provider.requests, "get", lambda *_, **__: _JsonResponse(payload))

    with pytest.raises(LocationUnavailable):
        IpGeolocationClient().lookup()


def test_ip_client_wraps_transport_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_get(*_: Any, **__: Any) -> _JsonResponse:
        raise requests.Timeout("slow")

    monkeypatch.setattr(location_provider.requests, "get", fake_get)

    with pytest.raises(LocationUnavailable, match="IP geolocation failed"):
        IpGeolocationClient().lookup()
