from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from time import monotonic

from kawaii_weather.config import Settings
from kawaii_weather.errors import CityNotFoundError
from kawaii_weather.schemas import (
    CityWeatherEntry,
    Coordinates,
    LocationWeather,
    StoredCity,
    UnitPreferences,
)
from kawaii_weather.services.cities import (
    CityStore,
    KeyValueStore,
    display_name_for,
    image_name_for_city,
    location_name_for,
    stored_city_from,
)
from kawaii_weather.services.units import (
    PrecipitationUnit,
    TemperatureUnit,
    default_units,
    parse_precipitation_unit,
    parse_temperature_unit,
)
from kawaii_weather.services.weather_client import WeatherClient


logger = logging.getLogger(__name__)

TEMPERATURE_UNIT_KEY = "temperatureUnit"
PRECIPITATION_UNIT_KEY = "precipitationUnit"
EARTH_RADIUS_M = 6_371_000.0


def distance_m(lat_a: float, lon_a: float, lat_b: float, lon_b: float) -> float:
    phi_a = math.radians(lat_a)
    phi_b = math.radians(lat_b)
    d_phi = math.radians(lat_b - lat_a)
    d_lambda = math.radians(lon_b - lon_a)
    h = math.sin(d_phi / 2) ** 2 + math.cos(phi_a) * math.cos(phi_b) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


@dataclass
class WeatherDashboard:
    client: WeatherClient
    store: KeyValueStore
    settings: Settings
    _location: LocationWeather | None = field(default=None, init=False)
    _location_fetched_at: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        self.cities = CityStore(self.store)

    async def add_city(self, query: str) -> CityWeatherEntry:
        trimmed = query.strip()
        if not trimmed:
            raise ValueError("City name must not be empty.")

        places = await self.client.geocode(trimmed)
        if not places:
            raise CityNotFoundError(trimmed)

        place = places[0]
        display_name = display_name_for(place, trimmed)
        snapshot = await self.client.fetch_weather_snapshot(
            latitude=place["latitude"],
            longitude=place["longitude"],
        )
        city = stored_city_from(display_name, latitude=place["latitude"], longitude=place["longitude"])
        self.cities.upsert(city)
        logger.info("Saved city %s (%s)", city.name, city.normalized_key)
        return CityWeatherEntry(city=city, weather=snapshot)

    def saved_cities(self) -> list[StoredCity]:
        return self.cities.load()

    async def load_saved_cities(self) -> list[CityWeatherEntry]:
        stored = self.cities.load()
        if not stored:
            return []

        snapshots = await self.client.fetch_snapshots(
            [Coordinates(name=city.name, latitude=city.latitude, longitude=city.longitude) for city in stored]
        )
        return [
            CityWeatherEntry(city=city, weather=snapshot)
            for city, snapshot in zip(stored, snapshots)
            if snapshot is not None
        ]

    def remove_city(self, key: str) -> list[StoredCity]:
        return self.cities.remove(key)

    def move_city(self, key: str, target_index: int, *, insert_after: bool = False) -> list[StoredCity]:
        return self.cities.move(key, target_index, insert_after=insert_after)

    async def location_weather(self, latitude: float, longitude: float) -> LocationWeather:
        if self._location is not None:
            moved = distance_m(self._location.latitude, self._location.longitude, latitude, longitude)
            age = monotonic() - self._location_fetched_at
            if moved < self.settings.location_refetch_distance_m and age < self.settings.api_cache_ttl_seconds:
                logger.debug("Location moved %.0f m; reusing last forecast", moved)
                return self._location

        snapshot = await self.client.fetch_weather_snapshot(latitude=latitude, longitude=longitude)
        place = await self.client.reverse_geocode(latitude=latitude, longitude=longitude)
        name = location_name_for(place)
        self._location = LocationWeather(
            name=name,
            image_name=image_name_for_city(name),
            latitude=latitude,
            longitude=longitude,
            weather=snapshot,
        )
        self._location_fetched_at = monotonic()
        return self._location

    def unit_preferences(self) -> UnitPreferences:
        region = self.settings.default_region
        default_temperature, default_precipitation = default_units(region)

        raw_temperature = self.store.get(TEMPERATURE_UNIT_KEY)
        if raw_temperature is None:
            self.store.set(TEMPERATURE_UNIT_KEY, default_temperature.value)
            raw_temperature = default_temperature.value

        raw_precipitation = self.store.get(PRECIPITATION_UNIT_KEY)
        if raw_precipitation is None:
            self.store.set(PRECIPITATION_UNIT_KEY, default_precipitation.value)
            raw_precipitation = default_precipitation.value

        return UnitPreferences(
            temperature_unit=parse_temperature_unit(raw_temperature, region=region),
            precipitation_unit=parse_precipitation_unit(raw_precipitation, region=region),
        )

    def update_unit_preferences(
        self,
        *,
        temperature_unit: TemperatureUnit | None = None,
        precipitation_unit: PrecipitationUnit | None = None,
    ) -> UnitPreferences:
        if temperature_unit is not None:
            self.store.set(TEMPERATURE_UNIT_KEY, temperature_unit.value)
        if precipitation_unit is not None:
            self.store.set(PRECIPITATION_UNIT_KEY, precipitation_unit.value)
        return self.unit_preferences()
