from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from time import monotonic
from typing import Any

import httpx

from kawaii_weather.config import Settings
from kawaii_weather.schemas import Coordinates, WeatherSnapshot
from kawaii_weather.services.snapshot import build_snapshot, decode_forecast


logger = logging.getLogger(__name__)

RETRYABLE_HTTP_STATUS = {408, 429, 500, 502, 503, 504}
NOMINATIM_GEOCODE_URL = "https://nominatim.openstreetmap.org/search"
NOMINATIM_REVERSE_URL = "https://nominatim.openstreetmap.org/reverse"

HOURLY_FIELDS = "temperature_2m,precipitation,precipitation_probability,weathercode"
DAILY_FIELDS = (
    "precipitation_sum,weathercode,temperature_2m_max,temperature_2m_min,"
    "precipitation_probability_max,sunrise,sunset"
)


@dataclass
class WeatherClient:
    settings: Settings
    _cache: dict[str, tuple[float, Any]] = field(default_factory=dict, init=False)
    _client: httpx.AsyncClient = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._client = httpx.AsyncClient(timeout=self.settings.request_timeout_seconds)

    async def close(self) -> None:
        await self._client.aclose()

    async def geocode(self, query: str) -> list[dict]:
        query = query.strip()
        if not query:
            return []

        payload = await self._get_json(
            url=self.settings.open_meteo_geo_url,
            params={"name": query, "count": 5, "language": "en", "format": "json"},
            cache_key=f"geo:{query.lower()}",
            cache_ttl_seconds=3600,
        )
        results = payload.get("results", []) if isinstance(payload, dict) else []
        places = [_place_from_open_meteo(item) for item in results if isinstance(item, dict)]
        places = [place for place in places if place is not None]
        if places:
            return places
        logger.debug("No Open-Meteo geocoding match for %r, trying Nominatim", query)
        return await self._geocode_fallback(query)

    async def reverse_geocode(self, latitude: float, longitude: float) -> dict | None:
        try:
            payload = await self._get_json(
                url=self.settings.open_meteo_reverse_geo_url,
                params={
                    "latitude": round(latitude, 6),
                    "longitude": round(longitude, 6),
                    "count": 1,
                    "language": "en",
                    "format": "json",
                },
                cache_key=f"reverse-geo:{round(latitude, 5)}:{round(longitude, 5)}",
                cache_ttl_seconds=3600,
                retry_attempts=1,
            )
            results = payload.get("results", []) if isinstance(payload, dict) else []
            if results and isinstance(results[0], dict):
                place = _place_from_open_meteo(results[0])
                if place is not None:
                    return place
        except httpx.HTTPError as exc:
            logger.warning("Open-Meteo reverse geocoding failed: %s", exc)

        return await self._reverse_geocode_fallback(latitude=latitude, longitude=longitude)

    async def fetch_forecast(self, latitude: float, longitude: float) -> dict:
        params: dict[str, Any] = {
            "latitude": latitude,
            "longitude": longitude,
            "current_weather": "true",
            "hourly": HOURLY_FIELDS,
            "daily": DAILY_FIELDS,
            "forecast_days": self.settings.forecast_days,
            "timezone": "auto",
        }
        return await self._get_json(
            url=f"{self.settings.open_meteo_base_url}/forecast",
            params=params,
            cache_key=f"forecast:{round(latitude, 4)}:{round(longitude, 4)}",
            cache_ttl_seconds=self.settings.api_cache_ttl_seconds,
        )

    async def fetch_weather_snapshot(self, latitude: float, longitude: float) -> WeatherSnapshot:
        payload = await self.fetch_forecast(latitude=latitude, longitude=longitude)
        return build_snapshot(decode_forecast(payload), window_size=self.settings.hourly_window_size)

    async def fetch_snapshots(self, locations: list[Coordinates]) -> list[WeatherSnapshot | None]:
        """Fetch every location concurrently; failed fetches come back as ``None``."""
        tasks = [
            self.fetch_weather_snapshot(latitude=location.latitude, longitude=location.longitude)
            for location in locations
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        snapshots: list[WeatherSnapshot | None] = []
        for location, result in zip(locations, results):
            if isinstance(result, Exception):
                logger.warning("Skipping forecast for %s: %s", location.name or "location", result)
                snapshots.append(None)
                continue
            snapshots.append(result)
        return snapshots

    async def _geocode_fallback(self, query: str) -> list[dict]:
        try:
            payload = await self._get_json(
                url=NOMINATIM_GEOCODE_URL,
                params={"q": query, "format": "jsonv2", "limit": 5, "addressdetails": 1},
                headers={"User-Agent": f"{self.settings.app_name}/{self.settings.app_version}"},
                cache_key=f"geo-fallback:{query.lower()}",
                cache_ttl_seconds=3600,
                retry_attempts=1,
            )
        except httpx.HTTPError as exc:
            logger.warning("Nominatim geocoding failed: %s", exc)
            return []

        if not isinstance(payload, list):
            return []

        places: list[dict] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            try:
                latitude = float(item.get("lat"))
                longitude = float(item.get("lon"))
            except (TypeError, ValueError):
                continue
            places.append(_place_from_nominatim(item, latitude=latitude, longitude=longitude))
        return places

    async def _reverse_geocode_fallback(self, *, latitude: float, longitude: float) -> dict | None:
        try:
            payload = await self._get_json(
                url=NOMINATIM_REVERSE_URL,
                params={
                    "lat": round(latitude, 6),
                    "lon": round(longitude, 6),
                    "format": "jsonv2",
                    "addressdetails": 1,
                },
                headers={"User-Agent": f"{self.settings.app_name}/{self.settings.app_version}"},
                cache_key=f"reverse-geo-fallback:{round(latitude, 5)}:{round(longitude, 5)}",
                cache_ttl_seconds=3600,
                retry_attempts=1,
            )
        except httpx.HTTPError as exc:
            logger.warning("Nominatim reverse geocoding failed: %s", exc)
            return None

        if not isinstance(payload, dict):
            return None
        return _place_from_nominatim(payload, latitude=latitude, longitude=longitude)

    async def _get_json(
        self,
        *,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        cache_key: str | None = None,
        cache_ttl_seconds: int = 0,
        retry_attempts: int | None = None,
    ) -> Any:
        if cache_key and cache_ttl_seconds > 0:
            cached = self._cache_get(cache_key)
            if cached is not None:
                logger.debug("Cache hit for %s", cache_key)
                return cached

        attempts = self.settings.api_retry_attempts if retry_attempts is None else max(0, retry_attempts)
        for attempt in range(attempts + 1):
            try:
                response = await self._client.get(url, params=params, headers=headers)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status_code = exc.response.status_code
                if status_code not in RETRYABLE_HTTP_STATUS or attempt >= attempts:
                    raise
                logger.info("Retrying %s after HTTP %s (attempt %d)", url, status_code, attempt + 1)
            except httpx.RequestError as exc:
                if attempt >= attempts:
                    raise
                logger.info("Retrying %s after %s (attempt %d)", url, exc.__class__.__name__, attempt + 1)
            else:
                try:
                    payload = response.json()
                except ValueError as exc:
                    raise httpx.DecodingError(f"Invalid JSON from {url}", request=response.request) from exc
                if cache_key and cache_ttl_seconds > 0:
                    self._cache_set(cache_key, payload, ttl_seconds=cache_ttl_seconds)
                return payload
            await asyncio.sleep(0.35 * (attempt + 1))

        raise RuntimeError("Failed to fetch upstream JSON payload.")

    def _cache_get(self, key: str) -> Any | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        expires_at, payload = entry
        if monotonic() >= expires_at:
            self._cache.pop(key, None)
            return None
        return payload

    def _cache_set(self, key: str, payload: Any, *, ttl_seconds: int) -> None:
        now = monotonic()
        expired = [cached_key for cached_key, (expires_at, _) in self._cache.items() if now >= expires_at]
        for cached_key in expired:
            del self._cache[cached_key]
        self._cache[key] = (now + max(1, ttl_seconds), payload)


def _place_from_open_meteo(item: dict) -> dict | None:
    latitude = _as_float(item.get("latitude"))
    longitude = _as_float(item.get("longitude"))
    if latitude is None or longitude is None:
        return None

    # PPL* feature codes are populated places, i.e. the locality itself.
    feature_code = str(item.get("feature_code") or "")
    return {
        "name": item.get("name"),
        "locality": item.get("name") if feature_code.startswith("PPL") else None,
        "admin2": item.get("admin2"),
        "admin1": item.get("admin1"),
        "country": item.get("country"),
        "latitude": latitude,
        "longitude": longitude,
        "timezone": item.get("timezone", "auto"),
    }


def _place_from_nominatim(item: dict, *, latitude: float, longitude: float) -> dict:
    address = item.get("address", {}) if isinstance(item.get("address"), dict) else {}
    return {
        "name": item.get("name") or item.get("display_name"),
        "locality": address.get("city") or address.get("town") or address.get("village"),
        "admin2": address.get("county"),
        "admin1": address.get("state") or address.get("region"),
        "country": address.get("country"),
        "latitude": latitude,
        "longitude": longitude,
        "timezone": "auto",
    }


def _as_float(value: object) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
