"""Weather acquisition as an explicit state machine.

``Init -> ResolvingPrecise -> ResolvingApproximate -> Fetching -> Succeeded``
with exactly one automatic retry: any failure on the primary path moves to
``Fallback``, which fetches weather for the configured default city. A
failure there, or a failure once the retry budget is spent, ends in
``Failed``. Configuration errors are not retried and propagate to the caller.
A manual retry is simply a new :meth:`WeatherAcquisition.acquire` call, which
starts again from ``Init``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from models.errors import LocationUnavailable, ProviderError, StyleMeError, WeatherUnavailable
from models.weather import Provenance, ResolvedLocation, WeatherReading
from styleme_app.logging_config import get_logger, log_event
from tools.location_provider import LocationResolver, LocationSensor
from tools.weather_provider import WeatherProvider

LOGGER = get_logger(__name__)

MAX_AUTOMATIC_RETRIES = 1


class AcquisitionState(str, Enum):
    INIT = "init"
    RESOLVING_PRECISE = "resolving_precise"
    RESOLVING_APPROXIMATE = "resolving_approximate"
    FETCHING = "fetching"
    FALLBACK = "fallback"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class AcquisitionEvent(str, Enum):
    START = "start"
    LOCATED = "located"
    LOCATION_FAILED = "location_failed"
    FETCHED = "fetched"
    FETCH_FAILED = "fetch_failed"


TERMINAL_STATES = frozenset({AcquisitionState.SUCCEEDED, AcquisitionState.FAILED})

_TRANSITIONS: Dict[Tuple[AcquisitionState, AcquisitionEvent], AcquisitionState] = {
    (AcquisitionState.INIT, AcquisitionEvent.START): AcquisitionState.RESOLVING_PRECISE,
    (AcquisitionState.RESOLVING_PRECISE, AcquisitionEvent.LOCATED): AcquisitionState.FETCHING,
    (AcquisitionState.RESOLVING_PRECISE, AcquisitionEvent.LOCATION_FAILED): AcquisitionState.RESOLVING_APPROXIMATE,
    (AcquisitionState.RESOLVING_APPROXIMATE, AcquisitionEvent.LOCATED): AcquisitionState.FETCHING,
    (AcquisitionState.RESOLVING_APPROXIMATE, AcquisitionEvent.LOCATION_FAILED): AcquisitionState.FALLBACK,
    (AcquisitionState.FETCHING, AcquisitionEvent.FETCHED): AcquisitionState.SUCCEEDED,
    (AcquisitionState.FETCHING, AcquisitionEvent.FETCH_FAILED): AcquisitionState.FALLBACK,
    (AcquisitionState.FALLBACK, AcquisitionEvent.FETCHED): AcquisitionState.SUCCEEDED,
    (AcquisitionState.FALLBACK, AcquisitionEvent.FETCH_FAILED): AcquisitionState.FAILED,
}


class InvalidTransition(ValueError):
    """Raised when an event is not accepted in the current state."""


def transition(
    state: AcquisitionState, event: AcquisitionEvent, retries_remaining: int
) -> AcquisitionState:
    """Pure transition function.

    Moving into ``FALLBACK`` consumes one retry; with no retries left the
    machine goes straight to ``FAILED``.
    """

    target = _TRANSITIONS.get((state, event))
    if target is None:
        raise InvalidTransition(f"event {event.value} is not valid in state {state.value}")
    if target is AcquisitionState.FALLBACK and retries_remaining <= 0:
        return AcquisitionState.FAILED
    return target


@dataclass
class AcquisitionResult:
    """Outcome of one acquisition run."""

    state: AcquisitionState
    reading: Optional[WeatherReading] = None
    provenance: Optional[Provenance] = None
    location: Optional[ResolvedLocation] = None
    errors: List[StyleMeError] = field(default_factory=list)
    history: List[AcquisitionState] = field(default_factory=list)
    weather_calls: int = 0

    @property
    def succeeded(self) -> bool:
        return self.state is AcquisitionState.SUCCEEDED

    @property
    def retryable(self) -> bool:
        return self.state is AcquisitionState.FAILED

    def raise_for_failure(self) -> WeatherReading:
        """Return the reading or raise :class:`WeatherUnavailable`."""

        if self.succeeded and self.reading is not None:
            return self.reading
        reasons = "; ".join(str(error) for error in self.errors) or "unknown failure"
        raise WeatherUnavailable(f"Weather unavailable after fallback: {reasons}", causes=self.errors)

    def debug_summary(self) -> Dict[str, object]:
        return {
            "state": self.state.value,
            "history": [state.value for state in self.history],
            "provenance": self.provenance.value if self.provenance else None,
            "weather_calls": self.weather_calls,
            "errors": [f"{type(error).__name__}: {error}" for error in self.errors],
        }


class WeatherAcquisition:
    """Drives the acquisition state machine against real collaborators."""

    def __init__(
        self,
        resolver: LocationResolver,
        provider: WeatherProvider,
        fallback_city: str,
        max_retries: int = MAX_AUTOMATIC_RETRIES,
    ) -> None:
        self.resolver = resolver
        self.provider = provider
        self.fallback_city = fallback_city
        self.max_retries = max_retries

    def acquire(self, sensor: LocationSensor) -> AcquisitionResult:
        result = AcquisitionResult(state=AcquisitionState.INIT, history=[AcquisitionState.INIT])
        retries_remaining = self.max_retries

        def step(event: AcquisitionEvent) -> None:
            nonlocal retries_remaining
            previous = result.state
            result.state = transition(previous, event, retries_remaining)
            if result.state is AcquisitionState.FALLBACK:
                retries_remaining -= 1
            result.history.append(result.state)
            log_event(
                LOGGER,
                logging.DEBUG,
                "acquisition_transition",
                from_state=previous.value,
                trigger=event.value,
                to_state=result.state.value,
            )

        step(AcquisitionEvent.START)
        while result.state not in TERMINAL_STATES:
            if result.state is AcquisitionState.RESOLVING_PRECISE:
                try:
                    result.location = self.resolver.resolve_precise(sensor)
                except LocationUnavailable as exc:
                    result.errors.append(exc)
                    step(AcquisitionEvent.LOCATION_FAILED)
                else:
                    step(AcquisitionEvent.LOCATED)
            elif result.state is AcquisitionState.RESOLVING_APPROXIMATE:
                try:
                    result.location = self.resolver.resolve_approximate()
                except LocationUnavailable as exc:
                    result.errors.append(exc)
                    step(AcquisitionEvent.LOCATION_FAILED)
                else:
                    step(AcquisitionEvent.LOCATED)
            elif result.state is AcquisitionState.FETCHING:
                if result.location is None:
                    raise InvalidTransition("fetching requires a resolved location")
                self._fetch(result, step, result.location)
            elif result.state is AcquisitionState.FALLBACK:
                self._fetch(result, step, None)

        log_event(
            LOGGER,
            logging.INFO if result.succeeded else logging.WARNING,
            "weather_acquisition_finished",
            **result.debug_summary(),
        )
        return result

    def _fetch(self, result: AcquisitionResult, step, location: Optional[ResolvedLocation]) -> None:
        """Fetch for ``location``, or for the fallback city when there is none."""

        result.weather_calls += 1
        try:
            if location is None:
                provenance = Provenance.FALLBACK
                reading = self.provider.fetch_weather_by_city(self.fallback_city)
            else:
                provenance = location.provenance
                reading = self.provider.fetch_weather(location.coordinate)
        except ProviderError as exc:
            result.errors.append(exc)
            step(AcquisitionEvent.FETCH_FAILED)
            return
        result.reading = reading
        result.provenance = provenance
        step(AcquisitionEvent.FETCHED)


__all__ = [
    "AcquisitionEvent",
    "AcquisitionResult",
    "AcquisitionState",
    "InvalidTransition",
    "MAX_AUTOMATIC_RETRIES",
    "TERMINAL_STATES",
    "WeatherAcquisition",
    "transition",
]
