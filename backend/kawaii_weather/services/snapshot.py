from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Sequence, TypeVar

from pydantic import ValidationError

from kawaii_weather.errors import ForecastDecodeError
from kawaii_weather.schemas import (
    CurrentWeather,
    DailyForecast,
    DailyWeather,
    HourlyForecast,
    HourlyWeather,
    OpenMeteoResponse,
    WeatherSnapshot,
)
from kawaii_weather.services.weather_codes import is_wet_weather_code


T = TypeVar("T")

DEFAULT_WINDOW_SIZE = 6
LIKELY_PRECIPITATION_MM = 0.1
LIKELY_PRECIPITATION_PROBABILITY = 40.0
NIGHT_START_HOUR = 19
NIGHT_END_HOUR = 6


def decode_forecast(payload: object) -> OpenMeteoResponse:
    try:
        return OpenMeteoResponse.model_validate(payload)
    except ValidationError as exc:
        raise ForecastDecodeError(
            f"Unexpected forecast payload ({exc.error_count()} invalid field(s))."
        ) from exc


def build_snapshot(response: OpenMeteoResponse, *, window_size: int = DEFAULT_WINDOW_SIZE) -> WeatherSnapshot:
    """
    Derive the display snapshot from a decoded forecast response.

    Every derived series is cut to the shortest raw array it reads from, so a
    partial upstream payload yields shorter lists instead of an IndexError.
    """
    current = response.current_weather
    all_hourly = hourly_forecasts(response.hourly)
    return WeatherSnapshot(
        current=current,
        next_hour_precipitation=next_hour_precipitation(response.hourly, current.time),
        today_precipitation_sum=_value_at(response.daily.precipitation_sum, 0),
        daily_forecasts=daily_forecasts(response.daily),
        hourly_forecasts=upcoming_hourly_forecasts(
            all_hourly,
            times=response.hourly.time,
            current_time=current.time,
            window_size=window_size,
        ),
        all_hourly_forecasts=all_hourly,
        is_after_sunset=is_after_sunset(response.daily, current.time),
        timezone=response.timezone,
    )


def next_hour_precipitation(hourly: HourlyWeather, current_time: str) -> float | None:
    try:
        current_idx = hourly.time.index(current_time)
    except ValueError:
        return _value_at(hourly.precipitation, 0)
    return _value_at(hourly.precipitation, current_idx + 1)


def daily_forecasts(daily: DailyWeather) -> list[DailyForecast]:
    count = min(
        len(daily.time),
        len(daily.weathercode),
        len(daily.temperature_max),
        len(daily.temperature_min),
        len(daily.precipitation_sum),
    )
    return [
        DailyForecast(
            date=daily.time[idx],
            weathercode=daily.weathercode[idx],
            temperature_max=daily.temperature_max[idx],
            temperature_min=daily.temperature_min[idx],
            precipitation_sum=daily.precipitation_sum[idx],
            precipitation_probability_max=_value_at(daily.precipitation_probability_max, idx),
        )
        for idx in range(count)
    ]


def hourly_forecasts(hourly: HourlyWeather) -> list[HourlyForecast]:
    count = min(
        len(hourly.time),
        len(hourly.temperature),
        len(hourly.precipitation),
        len(hourly.weathercode),
    )
    return [
        HourlyForecast(
            time=hourly.time[idx],
            temperature=hourly.temperature[idx],
            weathercode=hourly.weathercode[idx],
            precipitation=hourly.precipitation[idx],
            precipitation_probability=_value_at(hourly.precipitation_probability, idx),
        )
        for idx in range(count)
    ]


def upcoming_hourly_forecasts(
    forecasts: list[HourlyForecast],
    *,
    times: list[str],
    current_time: str,
    window_size: int = DEFAULT_WINDOW_SIZE,
) -> list[HourlyForecast]:
    start_idx = _window_start(times, current_time)
    if start_idx >= len(forecasts):
        return []
    return forecasts[start_idx : start_idx + max(0, window_size)]


def is_after_sunset(daily: DailyWeather, current_time: str) -> bool:
    if not daily.sunset:
        return False

    current = _parse_local_time(current_time)
    if current is None:
        return False

    today = current.date().isoformat()
    day_idx = daily.time.index(today) if today in daily.time else 0
    sunset = _parse_local_time(_value_at(daily.sunset, day_idx))
    if sunset is None:
        return False
    return current >= sunset


def dominant_weather_code(hourly: Sequence[HourlyForecast]) -> int | None:
    if not hourly:
        return None
    counts = Counter(forecast.weathercode for forecast in hourly)
    # Highest count wins; equal counts go to the lowest code.
    return min(counts.items(), key=lambda item: (-item[1], item[0]))[0]


def is_precipitation_likely(hourly: Sequence[HourlyForecast]) -> bool:
    for forecast in hourly:
        if forecast.precipitation is not None and forecast.precipitation > LIKELY_PRECIPITATION_MM:
            return True
        probability = forecast.precipitation_probability
        if probability is not None and probability >= LIKELY_PRECIPITATION_PROBABILITY:
            return True
    return False


def today_overview_code(
    forecast: DailyForecast,
    current: CurrentWeather,
    hourly: Sequence[HourlyForecast],
) -> int:
    if not hourly:
        return forecast.weathercode

    if is_precipitation_likely(hourly):
        dominant = dominant_weather_code(hourly)
    else:
        dry_hours = [entry for entry in hourly if not is_wet_weather_code(entry.weathercode)]
        dominant = dominant_weather_code(dry_hours or hourly)
    return current.weathercode if dominant is None else dominant


def is_night_time(stamp: str) -> bool:
    parsed = _parse_local_time(stamp)
    if parsed is None:
        return False
    return parsed.hour < NIGHT_END_HOUR or parsed.hour >= NIGHT_START_HOUR


def _window_start(times: list[str], current_time: str) -> int:
    if current_time in times:
        return times.index(current_time)

    current = _parse_local_time(current_time)
    if current is None:
        return 0

    hour_start = current.replace(minute=0, second=0, microsecond=0)
    for idx, stamp in enumerate(times):
        parsed = _parse_local_time(stamp)
        if parsed is not None and parsed >= hour_start:
            return idx
    return 0


def _parse_local_time(value: object) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    # Open-Meteo stamps are local wall-clock times when timezone=auto.
    return parsed.replace(tzinfo=None)


def _value_at(values: Sequence[T] | None, idx: int) -> T | None:
    if values is None or idx < 0 or idx >= len(values):
        return None
    return values[idx]
