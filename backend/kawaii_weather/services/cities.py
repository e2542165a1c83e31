from __future__ import annotations

import json
import logging
import re
import sqlite3
import unicodedata
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from kawaii_weather.errors import UnknownCityError
from kawaii_weather.schemas import StoredCity


logger = logging.getLogger(__name__)

CITIES_KEY = "customCitiesData"
CURRENT_LOCATION_NAME = "Current Location"

KEY_VALUE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS key_value (
    key TEXT PRIMARY KEY,
    value_json TEXT NOT NULL,
    updated_at_utc TEXT NOT NULL
);
"""

_NON_ALPHANUMERIC = re.compile(r"[\W_]+")

# Letters with a stroke carry no combining mark under NFKD.
_STROKE_LETTERS = str.maketrans(
    {"ø": "o", "Ø": "O", "ł": "l", "Ł": "L", "đ": "d", "Đ": "D", "ħ": "h", "Ħ": "H"}
)


def fold_city_name(name: str) -> str:
    decomposed = unicodedata.normalize("NFKD", name)
    without_marks = "".join(char for char in decomposed if not unicodedata.combining(char))
    return without_marks.translate(_STROKE_LETTERS).casefold()


def normalized_city_key(name: str) -> str:
    """Identity used to deduplicate and persist cities: folded, trimmed display name."""
    return fold_city_name(name).strip()


def image_name_for_city(name: str) -> str | None:
    parts = [part for part in _NON_ALPHANUMERIC.split(fold_city_name(name)) if part]
    if not parts:
        return None
    return "_".join(parts)


def display_name_for(place: dict, fallback: str) -> str:
    for field in ("locality", "admin2", "admin1", "name"):
        candidate = place.get(field)
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return fallback.strip()


def location_name_for(place: dict | None) -> str:
    if not place:
        return CURRENT_LOCATION_NAME
    for field in ("locality", "admin2", "admin1"):
        candidate = place.get(field)
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return CURRENT_LOCATION_NAME


def stored_city_from(name: str, *, latitude: float, longitude: float) -> StoredCity:
    return StoredCity(
        name=name,
        normalized_key=normalized_city_key(name),
        image_name=image_name_for_city(name),
        latitude=latitude,
        longitude=longitude,
    )


def upsert_city(cities: list[StoredCity], city: StoredCity) -> list[StoredCity]:
    updated = list(cities)
    for idx, existing in enumerate(updated):
        if existing.normalized_key == city.normalized_key:
            updated[idx] = city
            return updated
    updated.append(city)
    return updated


def remove_city(cities: list[StoredCity], key: str) -> list[StoredCity]:
    idx = _index_of(cities, key)
    return cities[:idx] + cities[idx + 1 :]


def move_city(cities: list[StoredCity], key: str, target_index: int, *, insert_after: bool) -> list[StoredCity]:
    """
    Move a city next to the card at ``target_index``.

    The destination is clamped to the list bounds; dropping a card onto its own
    slot, or the slot right after it, leaves the order unchanged.
    """
    from_idx = _index_of(cities, key)
    destination = target_index + 1 if insert_after else target_index
    clamped = max(0, min(destination, len(cities)))
    if clamped in (from_idx, from_idx + 1):
        return list(cities)

    moved = list(cities)
    city = moved.pop(from_idx)
    moved.insert(clamped - 1 if from_idx < clamped else clamped, city)
    return moved


def _index_of(cities: list[StoredCity], key: str) -> int:
    lookup = normalized_city_key(key)
    for idx, city in enumerate(cities):
        if city.normalized_key == lookup:
            return idx
    raise UnknownCityError(key)


@dataclass
class KeyValueStore:
    path: str

    def __post_init__(self) -> None:
        self._db_path = Path(self.path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        with sqlite3.connect(self._db_path) as conn:
            conn.execute(KEY_VALUE_TABLE_SQL)
            conn.commit()

    def get(self, key: str, default: Any = None) -> Any:
        with sqlite3.connect(self._db_path) as conn:
            row = conn.execute("SELECT value_json FROM key_value WHERE key = ?", (key,)).fetchone()
        if row is None:
            return default
        try:
            return json.loads(row[0])
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable value stored under %r", key)
            return default

    def set(self, key: str, value: Any) -> None:
        with sqlite3.connect(self._db_path) as conn:
            conn.execute(
                """
                INSERT INTO key_value (key, value_json, updated_at_utc) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value_json = excluded.value_json,
                    updated_at_utc = excluded.updated_at_utc
                """,
                (key, json.dumps(value), datetime.now(tz=timezone.utc).isoformat()),
            )
            conn.commit()

    def delete(self, key: str) -> None:
        with sqlite3.connect(self._db_path) as conn:
            conn.execute("DELETE FROM key_value WHERE key = ?", (key,))
            conn.commit()


@dataclass
class CityStore:
    store: KeyValueStore

    def load(self) -> list[StoredCity]:
        raw = self.store.get(CITIES_KEY, default=[])
        if not isinstance(raw, list):
            logger.warning("Saved city list has unexpected type %s; starting empty", type(raw).__name__)
            return []
        try:
            return [StoredCity.model_validate(item) for item in raw]
        except ValidationError:
            logger.warning("Saved city list is corrupt; starting empty")
            return []

    def save(self, cities: list[StoredCity]) -> None:
        self.store.set(CITIES_KEY, [city.model_dump() for city in cities])

    def upsert(self, city: StoredCity) -> list[StoredCity]:
        cities = upsert_city(self.load(), city)
        self.save(cities)
        return cities

    def remove(self, key: str) -> list[StoredCity]:
        cities = remove_city(self.load(), key)
        self.save(cities)
        return cities

    def move(self, key: str, target_index: int, *, insert_after: bool = False) -> list[StoredCity]:
        cities = move_city(self.load(), key, target_index, insert_after=insert_after)
        self.save(cities)
        return cities
