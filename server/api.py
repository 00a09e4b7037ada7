"""FastAPI server exposing weather, suggestion, wardrobe and calendar endpoints."""

from __future__ import annotations

import os
from datetime import date
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from styleme_app.app import StyleMeApp
from styleme_app.logging_config import get_logger
from logic.validation import (
    CalendarEventCreate,
    ErrorResponse,
    SuggestionRequest,
    WardrobeItemCreate,
    WeatherRequest,
)
from models.errors import ConfigurationError, WeatherUnavailable

LOGGER = get_logger(__name__)


def _weather_payload(response: dict) -> dict:
    payload = {key: value for key, value in response.items() if key != "reading"}
    reading = response.get("reading")
    if reading is not None:
        payload["reading"] = reading.to_dict()
    return payload


def _error_body(message: str, retryable: bool, details: list | None = None) -> dict:
    body = ErrorResponse(message=message, retryable=retryable, details=details or []).model_dump()
    return {"status": "error", **body}


def create_app(styleme_app: StyleMeApp | None = None) -> FastAPI:
    """Build the API around a wired StyleMeApp (one is created from env if omitted)."""

    service = styleme_app or StyleMeApp()
    app = FastAPI(title="StyleMe", version="0.1.0")
    app.state.styleme = service

    @app.exception_handler(WeatherUnavailable)
    async def _weather_unavailable(_: Request, exc: WeatherUnavailable) -> JSONResponse:
        return JSONResponse(status_code=503, content=_error_body(str(exc), retryable=True))

    @app.exception_handler(ConfigurationError)
    async def _configuration_error(_: Request, exc: ConfigurationError) -> JSONResponse:
        LOGGER.error("Configuration error while serving request: %s", exc)
        return JSONResponse(status_code=500, content=_error_body(str(exc), retryable=False))

    @app.exception_handler(RequestValidationError)
    async def _validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        details = [{"loc": list(err.get("loc", [])), "msg": err.get("msg")} for err in exc.errors()]
        return JSONResponse(
            status_code=422, content=_error_body("Invalid request payload", retryable=False, details=details)
        )

    @app.get("/healthz")
    def healthcheck() -> dict:
        """Lightweight readiness probe."""

        return {
            "status": "ok",
            "service": "styleme",
            "environment": service.config.environment or "local",
            "weather_provider": service.config.weather_provider,
        }

    @app.post("/weather/current")
    def current_weather(request: WeatherRequest) -> dict:
        """Run the location fallback chain and return weather or a retryable error."""

        position = request.position.to_position() if request.position else None
        response = service.weather_agent.get_current_weather(position)
        if response["status"] != "ok":
            raise WeatherUnavailable(str(response.get("message")))
        return _weather_payload(response)

    @app.get("/weather/city/{name}")
    def city_weather(name: str) -> dict:
        try:
            response = service.weather_agent.get_weather_for_city(name)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        if response["status"] != "ok":
            raise WeatherUnavailable(str(response.get("message")))
        return _weather_payload(response)

    @app.post("/suggestions")
    def suggestions(request: SuggestionRequest) -> dict:
        """Recompute suggestions for the current weather, occasion and wardrobe."""

        result = service.plan_outfit(
            position=request.position.to_position() if request.position else None,
            city=request.city,
            occasion=request.occasion,
            target_date=request.target_date,
            use_wardrobe=request.use_wardrobe,
            seed=request.seed,
        )
        return {
            "status": result["status"],
            "weather": _weather_payload(result["weather"]),
            "occasion": result["occasion"],
            "suggestion": result["suggestion"].to_dict(),
            "user_facing_rationale": result["user_facing_rationale"],
        }

    @app.get("/wardrobe/items")
    def list_wardrobe_items(category: Optional[str] = None) -> dict:
        return {"items": service.wardrobe_tools.list_wardrobe_items(category=category)}

    @app.post("/wardrobe/items", status_code=201)
    def create_wardrobe_item(request: WardrobeItemCreate) -> dict:
        try:
            item = service.wardrobe_tools.add_wardrobe_item(item_data=request.model_dump())
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return {"item": item}

    @app.get("/wardrobe/items/{item_id}")
    def get_wardrobe_item(item_id: str) -> dict:
        item = service.wardrobe_tools.get_wardrobe_item(item_id)
        if item is None:
            raise HTTPException(status_code=404, detail=f"Wardrobe item '{item_id}' not found")
        return {"item": item}

    @app.post("/wardrobe/items/{item_id}/favorite")
    def toggle_favorite(item_id: str) -> dict:
        item = service.wardrobe_tools.toggle_favorite(item_id)
        if item is None:
            raise HTTPException(status_code=404, detail=f"Wardrobe item '{item_id}' not found")
        return {"item": item}

    @app.get("/calendar/events")
    def list_calendar_events(start: date, end: Optional[date] = None) -> dict:
        try:
            events = service.calendar_agent.list_events(start, end)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return {"events": [event.to_dict() for event in events]}

    @app.post("/calendar/events", status_code=201)
    def create_calendar_event(request: CalendarEventCreate) -> dict:
        try:
            event = service.calendar_agent.add_event(request.model_dump())
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return {"event": event.to_dict()}

    @app.delete("/calendar/events/{event_id}")
    def delete_calendar_event(event_id: str) -> dict:
        if not service.calendar_agent.delete_event(event_id):
            raise HTTPException(status_code=404, detail=f"Calendar event '{event_id}' not found")
        return {"status": "deleted", "event_id": event_id}

    return app


def get_app() -> FastAPI:
    """Application factory for ASGI servers."""

    return create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:get_app", factory=True, host="0.0.0.0", port=int(os.getenv("PORT", "8080")), reload=False)
