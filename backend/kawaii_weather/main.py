from __future__ import annotations

from datetime import datetime, timezone

import httpx
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from kawaii_weather.config import configure_logging, get_settings
from kawaii_weather.errors import CityNotFoundError, ForecastDecodeError, UnknownCityError
from kawaii_weather.schemas import AddCityRequest, MoveCityRequest, UnitPreferencesUpdate
from kawaii_weather.services.cities import KeyValueStore
from kawaii_weather.services.dashboard import WeatherDashboard
from kawaii_weather.services.presenter import (
    build_city_response,
    build_location_response,
    build_weather_response,
)
from kawaii_weather.services.weather_client import WeatherClient
from kawaii_weather.services.weather_codes import describe_code


settings = get_settings()
configure_logging(settings.log_level)

weather_client = WeatherClient(settings=settings)
dashboard = WeatherDashboard(
    client=weather_client,
    store=KeyValueStore(settings.store_path),
    settings=settings,
)

app = FastAPI(title=settings.app_name, version=settings.app_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.frontend_origins),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("shutdown")
async def shutdown_event() -> None:
    await weather_client.close()


@app.get("/api/health")
async def health() -> dict:
    return {
        "status": "ok",
        "service": settings.app_name,
        "timestamp_utc": datetime.now(tz=timezone.utc).isoformat(),
    }


@app.get("/api/geocode")
async def geocode(query: str = Query(min_length=2, max_length=80)) -> dict:
    try:
        results = await dashboard.client.geocode(query)
    except httpx.HTTPError as exc:
        raise HTTPException(status_code=502, detail=f"Geocoding provider error: {exc}") from exc
    return {"results": results}


@app.get("/api/weather")
async def weather(
    latitude: float = Query(ge=-90, le=90),
    longitude: float = Query(ge=-180, le=180),
) -> dict:
    try:
        snapshot = await dashboard.client.fetch_weather_snapshot(latitude=latitude, longitude=longitude)
    except httpx.HTTPError as exc:
        raise HTTPException(status_code=502, detail=f"Weather provider error: {exc}") from exc
    except ForecastDecodeError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return build_weather_response(snapshot, dashboard.unit_preferences())


@app.get("/api/location/weather")
async def location_weather(
    latitude: float = Query(ge=-90, le=90),
    longitude: float = Query(ge=-180, le=180),
) -> dict:
    try:
        location = await dashboard.location_weather(latitude=latitude, longitude=longitude)
    except httpx.HTTPError as exc:
        raise HTTPException(status_code=502, detail=f"Weather provider error: {exc}") from exc
    except ForecastDecodeError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return build_location_response(location, dashboard.unit_preferences())


@app.get("/api/cities")
async def list_cities() -> dict:
    entries = await dashboard.load_saved_cities()
    units = dashboard.unit_preferences()
    return {"cities": [build_city_response(entry, units) for entry in entries]}


@app.get("/api/cities/saved")
def list_saved_cities() -> dict:
    return {"cities": [city.model_dump() for city in dashboard.saved_cities()]}


@app.post("/api/cities")
async def add_city(payload: AddCityRequest) -> dict:
    try:
        entry = await dashboard.add_city(payload.query)
    except ForecastDecodeError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except CityNotFoundError as exc:
        raise HTTPException(status_code=404, detail="No matching city found.") from exc
    except httpx.HTTPError as exc:
        raise HTTPException(status_code=502, detail=f"City search provider error: {exc}") from exc
    return build_city_response(entry, dashboard.unit_preferences())


@app.delete("/api/cities/{key}")
def delete_city(key: str) -> dict:
    try:
        cities = dashboard.remove_city(key)
    except UnknownCityError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"cities": [city.model_dump() for city in cities]}


@app.post("/api/cities/{key}/move")
def move_city(key: str, payload: MoveCityRequest) -> dict:
    try:
        cities = dashboard.move_city(key, payload.target_index, insert_after=payload.insert_after)
    except UnknownCityError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"cities": [city.model_dump() for city in cities]}


@app.get("/api/settings/units")
def get_units() -> dict:
    return _serialize_units()


@app.put("/api/settings/units")
def update_units(payload: UnitPreferencesUpdate) -> dict:
    dashboard.update_unit_preferences(
        temperature_unit=payload.temperature_unit,
        precipitation_unit=payload.precipitation_unit,
    )
    return _serialize_units()


@app.get("/api/weather-codes/{code}")
async def weather_code(code: int, night: bool = False) -> dict:
    return describe_code(code, is_night=night)


def _serialize_units() -> dict:
    units = dashboard.unit_preferences()
    return {
        "temperature_unit": units.temperature_unit.value,
        "temperature_label": units.temperature_unit.label,
        "precipitation_unit": units.precipitation_unit.value,
        "precipitation_label": units.precipitation_unit.label,
        "precipitation_symbol": units.precipitation_unit.symbol,
    }
