from __future__ import annotations

from datetime import date, datetime

from kawaii_weather.schemas import (
    CityWeatherEntry,
    DailyForecast,
    HourlyForecast,
    LocationWeather,
    UnitPreferences,
    WeatherSnapshot,
)
from kawaii_weather.services.snapshot import is_night_time, today_overview_code
from kawaii_weather.services.weather_codes import description_for, icon_name_for, symbol_for


def build_weather_response(snapshot: WeatherSnapshot, units: UnitPreferences) -> dict:
    current = snapshot.current
    temperature_unit = units.temperature_unit
    precipitation_unit = units.precipitation_unit
    today = _local_date(current.time)

    overview_code = current.weathercode
    if snapshot.daily_forecasts:
        overview_code = today_overview_code(snapshot.daily_forecasts[0], current, snapshot.hourly_forecasts)

    today_sum = snapshot.today_precipitation_sum
    return {
        "timezone": snapshot.timezone,
        "is_after_sunset": snapshot.is_after_sunset,
        "units": {
            "temperature": temperature_unit.value,
            "precipitation": precipitation_unit.value,
        },
        "current": {
            "time": current.time,
            "temperature": current.temperature,
            "temperature_display": temperature_unit.formatted(current.temperature),
            "weathercode": current.weathercode,
            "weather": description_for(current.weathercode),
            "icon": icon_name_for(current.weathercode),
            "symbol": symbol_for(current.weathercode, is_night=snapshot.is_after_sunset),
            "windspeed": current.windspeed,
            "winddirection": current.winddirection,
        },
        "today": {
            "overview_code": overview_code,
            "overview": description_for(overview_code),
            "precipitation_sum": today_sum,
            "precipitation_label": (
                precipitation_unit.formatted_label(today_sum) if today_sum is not None else None
            ),
            "next_hour_precipitation": snapshot.next_hour_precipitation,
        },
        "hourly": [_hourly_row(item, units) for item in snapshot.hourly_forecasts],
        "daily": [_daily_row(item, units, today=today) for item in snapshot.daily_forecasts],
        "all_hourly": [item.model_dump() for item in snapshot.all_hourly_forecasts],
    }


def build_city_response(entry: CityWeatherEntry, units: UnitPreferences) -> dict:
    return {
        "city": entry.city.model_dump(),
        "weather": build_weather_response(entry.weather, units),
    }


def build_location_response(location: LocationWeather, units: UnitPreferences) -> dict:
    return {
        "name": location.name,
        "image_name": location.image_name,
        "latitude": location.latitude,
        "longitude": location.longitude,
        "weather": build_weather_response(location.weather, units),
    }


def _hourly_row(forecast: HourlyForecast, units: UnitPreferences) -> dict:
    precipitation = forecast.precipitation
    probability = forecast.precipitation_probability
    return {
        "time": forecast.time,
        "label": _hour_label(forecast.time),
        "temperature": forecast.temperature,
        "temperature_display": units.temperature_unit.formatted_value(forecast.temperature),
        "weathercode": forecast.weathercode,
        "symbol": symbol_for(forecast.weathercode, is_night=is_night_time(forecast.time)),
        "precipitation": precipitation,
        "precipitation_display": (
            units.precipitation_unit.formatted_amount(precipitation)
            if precipitation is not None and precipitation > 0
            else None
        ),
        "precipitation_probability": probability,
        "probability_display": f"{probability:.0f}%" if probability is not None and probability > 0 else None,
    }


def _daily_row(forecast: DailyForecast, units: UnitPreferences, *, today: date | None) -> dict:
    temperature_unit = units.temperature_unit
    precipitation_sum = forecast.precipitation_sum
    return {
        "date": forecast.date,
        "label": _day_label(forecast.date, today=today),
        "weathercode": forecast.weathercode,
        "weather": description_for(forecast.weathercode),
        "icon": icon_name_for(forecast.weathercode),
        "temperature_max": forecast.temperature_max,
        "temperature_min": forecast.temperature_min,
        "temperature_max_display": temperature_unit.formatted_value(forecast.temperature_max),
        "temperature_min_display": temperature_unit.formatted_value(forecast.temperature_min),
        "precipitation_sum": precipitation_sum,
        "precipitation_display": (
            units.precipitation_unit.formatted_amount(precipitation_sum) if precipitation_sum is not None else None
        ),
        "precipitation_probability_max": forecast.precipitation_probability_max,
    }


def _local_date(stamp: str) -> date | None:
    try:
        return datetime.fromisoformat(stamp).date()
    except ValueError:
        return None


def _day_label(stamp: str, *, today: date | None) -> str:
    try:
        parsed = date.fromisoformat(stamp)
    except ValueError:
        return stamp
    if today is not None and parsed == today:
        return "Today"
    return parsed.strftime("%a")


def _hour_label(stamp: str) -> str:
    try:
        return datetime.fromisoformat(stamp).strftime("%H:%M")
    except ValueError:
        return stamp[-5:]
