from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Settings:
    app_name: str = "Kawaii Weather API"
    app_version: str = "1.0.0"
    open_meteo_base_url: str = "https://api.open-meteo.com/v1"
    open_meteo_geo_url: str = "https://geocoding-api.open-meteo.com/v1/search"
    open_meteo_reverse_geo_url: str = "https://geocoding-api.open-meteo.com/v1/reverse"
    forecast_days: int = 8
    hourly_window_size: int = 6
    api_cache_ttl_seconds: int = 600
    api_retry_attempts: int = 2
    request_timeout_seconds: float = 12.0
    store_path: str = str((Path(__file__).resolve().parents[1] / "data" / "kawaii.db").as_posix())
    location_refetch_distance_m: float = 1000.0
    default_region: str = "US"
    log_level: str = "INFO"
    frontend_origins: tuple[str, ...] = ("http://localhost:5173", "http://127.0.0.1:5173")


def get_settings() -> Settings:
    origins_raw = os.getenv("FRONTEND_ORIGINS", "").strip()
    cache_ttl_raw = os.getenv("API_CACHE_TTL_SECONDS", "").strip()
    retry_attempts_raw = os.getenv("API_RETRY_ATTEMPTS", "").strip()
    forecast_days_raw = os.getenv("FORECAST_DAYS", "").strip()
    window_size_raw = os.getenv("HOURLY_WINDOW_SIZE", "").strip()
    store_path_raw = os.getenv("KAWAII_STORE_PATH", "").strip()
    refetch_distance_raw = os.getenv("LOCATION_REFETCH_DISTANCE_M", "").strip()
    region_raw = os.getenv("DEFAULT_REGION", "").strip()
    log_level_raw = os.getenv("LOG_LEVEL", "").strip()

    parsed_origins = tuple(item.strip() for item in origins_raw.split(",") if item.strip())

    try:
        cache_ttl_seconds = int(cache_ttl_raw) if cache_ttl_raw else 600
    except ValueError:
        cache_ttl_seconds = 600

    try:
        retry_attempts = int(retry_attempts_raw) if retry_attempts_raw else 2
    except ValueError:
        retry_attempts = 2

    try:
        forecast_days = int(forecast_days_raw) if forecast_days_raw else 8
    except ValueError:
        forecast_days = 8

    try:
        hourly_window_size = int(window_size_raw) if window_size_raw else 6
    except ValueError:
        hourly_window_size = 6

    try:
        refetch_distance_m = float(refetch_distance_raw) if refetch_distance_raw else 1000.0
    except ValueError:
        refetch_distance_m = 1000.0

    return Settings(
        frontend_origins=parsed_origins or Settings.frontend_origins,
        api_cache_ttl_seconds=max(60, cache_ttl_seconds),
        api_retry_attempts=max(0, retry_attempts),
        # Open-Meteo serves at most 16 forecast days.
        forecast_days=min(16, max(1, forecast_days)),
        hourly_window_size=max(1, hourly_window_size),
        store_path=store_path_raw or Settings.store_path,
        location_refetch_distance_m=max(0.0, refetch_distance_m),
        default_region=(region_raw or Settings.default_region).upper(),
        log_level=(log_level_raw or Settings.log_level).upper(),
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
