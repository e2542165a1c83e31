import pytest

from kawaii_weather.errors import UnknownCityError
from kawaii_weather.services.cities import (
    CITIES_KEY,
    CityStore,
    KeyValueStore,
    display_name_for,
    image_name_for_city,
    location_name_for,
    move_city,
    normalized_city_key,
    stored_city_from,
)


def _city(name: str):
    return stored_city_from(name, latitude=1.0, longitude=2.0)


def _names(cities) -> list[str]:
    return [city.name for city in cities]


def test_normalized_city_key_folds_case_and_diacritics() -> None:
    assert normalized_city_key("  Zürich ") == "zurich"
    assert normalized_city_key("ZURICH") == normalized_city_key("zürich")
    assert normalized_city_key("São Paulo") == "sao paulo"
    assert normalized_city_key("Kraków") != normalized_city_key("Krakow West")


def test_image_name_for_city() -> None:
    assert image_name_for_city("São Paulo") == "sao_paulo"
    assert image_name_for_city("Saint-Étienne") == "saint_etienne"
    assert image_name_for_city("  New   York ") == "new_york"
    assert image_name_for_city("!!!") is None


def test_display_name_prefers_locality_then_admin_areas() -> None:
    assert display_name_for({"locality": "Munich", "admin1": "Bavaria", "name": "Marienplatz"}, "q") == "Munich"
    assert display_name_for({"locality": None, "admin2": "", "admin1": "Bavaria", "name": "x"}, "q") == "Bavaria"
    assert display_name_for({"name": "Somewhere"}, "q") == "Somewhere"
    assert display_name_for({}, "  Typed Query ") == "Typed Query"


def test_location_name_falls_back_to_current_location() -> None:
    assert location_name_for(None) == "Current Location"
    assert location_name_for({"name": "Unnamed Road"}) == "Current Location"
    assert location_name_for({"admin2": "Landkreis München"}) == "Landkreis München"


def test_move_city_reorders_with_original_drop_rules() -> None:
    cities = [_city(name) for name in ("A", "B", "C", "D")]

    assert _names(move_city(cities, "a", 2, insert_after=False)) == ["B", "A", "C", "D"]
    assert _names(move_city(cities, "a", 2, insert_after=True)) == ["B", "C", "A", "D"]
    assert _names(move_city(cities, "d", 0, insert_after=False)) == ["D", "A", "B", "C"]
    assert _names(move_city(cities, "b", 10, insert_after=False)) == ["A", "C", "D", "B"]
    # Dropping onto its own slot or the slot right after it is a no-op.
    assert _names(move_city(cities, "a", 0, insert_after=False)) == ["A", "B", "C", "D"]
    assert _names(move_city(cities, "a", 0, insert_after=True)) == ["A", "B", "C", "D"]
    assert _names(cities) == ["A", "B", "C", "D"]


def test_move_city_rejects_unknown_key() -> None:
    with pytest.raises(UnknownCityError):
        move_city([_city("A")], "z", 0, insert_after=False)


def test_city_store_deduplicates_by_folded_name(tmp_path) -> None:
    store = CityStore(KeyValueStore(str(tmp_path / "kv.db")))

    store.upsert(_city("Zürich"))
    store.upsert(_city("Berlin"))
    cities = store.upsert(stored_city_from("zurich", latitude=47.37, longitude=8.54))

    assert _names(cities) == ["zurich", "Berlin"]
    reloaded = store.load()
    assert _names(reloaded) == ["zurich", "Berlin"]
    assert reloaded[0].latitude == 47.37


def test_city_store_remove_and_move_persist(tmp_path) -> None:
    store = CityStore(KeyValueStore(str(tmp_path / "kv.db")))
    for name in ("Oslo", "Bergen", "Tromsø"):
        store.upsert(_city(name))

    store.move("TROMSO", 0)
    assert _names(store.load()) == ["Tromsø", "Oslo", "Bergen"]

    store.remove("oslo")
    assert _names(store.load()) == ["Tromsø", "Bergen"]

    with pytest.raises(UnknownCityError):
        store.remove("oslo")


def test_city_store_ignores_corrupt_blob(tmp_path) -> None:
    kv = KeyValueStore(str(tmp_path / "kv.db"))
    store = CityStore(kv)

    kv.set(CITIES_KEY, {"not": "a list"})
    assert store.load() == []

    kv.set(CITIES_KEY, [{"name": "Missing coordinates"}])
    assert store.load() == []


def test_key_value_store_round_trip(tmp_path) -> None:
    kv = KeyValueStore(str(tmp_path / "nested" / "kv.db"))

    assert kv.get("temperatureUnit") is None
    assert kv.get("temperatureUnit", default="celsius") == "celsius"
    kv.set("temperatureUnit", "fahrenheit")
    kv.set("temperatureUnit", "celsius")
    assert kv.get("temperatureUnit") == "celsius"
    kv.delete("temperatureUnit")
    assert kv.get("temperatureUnit") is None
