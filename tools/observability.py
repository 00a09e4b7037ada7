"""Call logging for provider and storage tools.

``instrument_tool`` wraps the calls StyleMe makes to collaborators (weather and
location providers, the wardrobe and calendar stores) so each one leaves a
started/completed/failed trail under the active correlation id.
"""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Any, Callable, Dict, ParamSpec, TypeVar

from pydantic import BaseModel, ValidationError

from styleme_app.logging_config import (
    ensure_correlation_id,
    get_logger,
    log_event,
    redact_for_log,
)

LOGGER = get_logger(__name__)
P = ParamSpec("P")
R = TypeVar("R")

_LOGGED_ARGUMENTS = 6


def _argument_summary(kwargs: Dict[str, Any]) -> Dict[str, Any]:
    names = list(kwargs)
    summary: Dict[str, Any] = {name: kwargs[name] for name in names[:_LOGGED_ARGUMENTS]}
    if len(names) > _LOGGED_ARGUMENTS:
        summary["truncated"] = True
    return redact_for_log(summary)


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def instrument_tool(
    tool_name: str,
    input_model: type[BaseModel] | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Log each call to ``tool_name`` and, given ``input_model``, coerce its keyword arguments.

    Validation failures and exceptions raised by the tool are logged and
    re-raised unchanged.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            correlation_id = ensure_correlation_id()
            started = time.perf_counter()

            if input_model is not None:
                try:
                    kwargs = input_model.model_validate(kwargs).model_dump()
                except ValidationError as exc:
                    log_event(
                        LOGGER,
                        logging.WARNING,
                        "tool_validation_failed",
                        tool=tool_name,
                        correlation_id=correlation_id,
                        errors=exc.errors(),
                    )
                    raise

            log_event(
                LOGGER,
                logging.INFO,
                "tool_call_started",
                tool=tool_name,
                correlation_id=correlation_id,
                kwargs=_argument_summary(kwargs),
            )
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "tool_call_failed",
                    tool=tool_name,
                    correlation_id=correlation_id,
                    duration_ms=_elapsed_ms(started),
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                raise
            log_event(
                LOGGER,
                logging.INFO,
                "tool_call_completed",
                tool=tool_name,
                correlation_id=correlation_id,
                duration_ms=_elapsed_ms(started),
            )
            return result

        return wrapper

    return decorator


__all__ = ["instrument_tool"]
