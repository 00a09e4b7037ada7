"""Location resolution: client-reported sensor fix first, IP geolocation second."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from datetime import datetime, timezone
from typing import Any, Callable, Dict

import requests

from models.errors import LocationUnavailable
from models.weather import Coordinate, Provenance, ReportedPosition, ResolvedLocation
from tools.observability import instrument_tool


LOGGER = logging.getLogger(__name__)


class LocationSensor(ABC):
    """Platform location sensor interface."""

    @abstractmethod
    def read_position(
        self, *, high_accuracy: bool, timeout_seconds: float, maximum_age_seconds: float
    ) -> Coordinate:
        """Return the current coordinate or raise :class:`LocationUnavailable`."""


class ReportedPositionSensor(LocationSensor):
    """Sensor backed by a fix the client captured and sent along with the request.

    A missing fix behaves like an absent sensor or a denied permission, and a
    fix older than ``maximum_age_seconds`` is rejected as stale.
    """

    def __init__(
        self,
        position: ReportedPosition | None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.position = position
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def read_position(
        self, *, high_accuracy: bool, timeout_seconds: float, maximum_age_seconds: float
    ) -> Coordinate:
        if self.position is None:
            raise LocationUnavailable("no position reported by the client")
        if high_accuracy and not self.position.high_accuracy:
            LOGGER.info("Client fix was not taken with high accuracy; accepting it anyway")
        captured_at = self.position.captured_at
        if captured_at.tzinfo is None:
            captured_at = captured_at.replace(tzinfo=timezone.utc)
        age_seconds = (self.clock() - captured_at).total_seconds()
        if age_seconds > maximum_age_seconds:
            raise LocationUnavailable(f"reported position is stale ({age_seconds:.0f}s old)")
        return self.position.coordinate


class IpGeolocationClient:
    """Approximate location lookup against a public IP-geolocation endpoint."""

    def __init__(self, url: str = "https://ipapi.co/json/", timeout_seconds: float = 10.0) -> None:
        self.url = url
        self.timeout_seconds = timeout_seconds

    @staticmethod
    def _extract_coordinate(payload: Dict[str, Any]) -> Coordinate:
        if payload.get("error") or payload.get("status") == "fail":
            raise LocationUnavailable(f"IP geolocation refused: {payload.get('reason') or payload.get('message')}")
        latitude = payload.get("latitude", payload.get("lat"))
        longitude = payload.get("longitude", payload.get("lon"))
        try:
            return Coordinate(latitude=float(latitude), longitude=float(longitude))
        except (TypeError, ValueError) as exc:
            raise LocationUnavailable("IP geolocation response has no usable coordinates") from exc

    @instrument_tool("lookup_ip_location")
    def lookup(self) -> Coordinate:
        try:
            response = requests.get(self.url, timeout=self.timeout_seconds)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise LocationUnavailable(f"IP geolocation failed: {exc}") from exc
        if not isinstance(payload, dict):
            raise LocationUnavailable("IP geolocation returned a non-object payload")
        return self._extract_coordinate(payload)


def read_sensor_with_timeout(
    sensor: LocationSensor,
    *,
    timeout_seconds: float,
    maximum_age_seconds: float,
    high_accuracy: bool = True,
) -> Coordinate:
    """Query the sensor, giving up once ``timeout_seconds`` have elapsed."""

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="location-sensor")
    future = executor.submit(
        sensor.read_position,
        high_accuracy=high_accuracy,
        timeout_seconds=timeout_seconds,
        maximum_age_seconds=maximum_age_seconds,
    )
    try:
        return future.result(timeout=timeout_seconds)
    except FutureTimeout as exc:
        future.cancel()
        raise LocationUnavailable(f"location sensor timed out after {timeout_seconds}s") from exc
    finally:
        executor.shutdown(wait=False)


class LocationResolver:
    """Resolve a coordinate tagged with its provenance."""

    def __init__(
        self,
        ip_client: IpGeolocationClient,
        timeout_seconds: float = 10.0,
        maximum_age_seconds: float = 300.0,
    ) -> None:
        self.ip_client = ip_client
        self.timeout_seconds = timeout_seconds
        self.maximum_age_seconds = maximum_age_seconds

    def resolve_precise(self, sensor: LocationSensor) -> ResolvedLocation:
        coordinate = read_sensor_with_timeout(
            sensor,
            timeout_seconds=self.timeout_seconds,
            maximum_age_seconds=self.maximum_age_seconds,
        )
        return ResolvedLocation(coordinate=coordinate, provenance=Provenance.PRECISE)

    def resolve_approximate(self) -> ResolvedLocation:
        return ResolvedLocation(coordinate=self.ip_client.lookup(), provenance=Provenance.APPROXIMATE)

    def resolve(self, sensor: LocationSensor) -> ResolvedLocation:
        """Sensor first, IP lookup on any sensor failure."""

        try:
            return self.resolve_precise(sensor)
        except LocationUnavailable as exc:
            LOGGER.info("Location sensor unavailable, falling back to IP lookup", extra={"reason": str(exc)})
        return self.resolve_approximate()


__all__ = [
    "LocationSensor",
    "ReportedPositionSensor",
    "IpGeolocationClient",
    "LocationResolver",
    "read_sensor_with_timeout",
]
