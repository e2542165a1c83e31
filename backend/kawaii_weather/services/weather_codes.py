from __future__ import annotations


WEATHER_CODE_LABELS = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Cloudy",
    45: "Fog",
    48: "Fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    56: "Light freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    66: "Light freezing rain",
    67: "Heavy freezing rain",
    71: "Slight snow fall",
    73: "Moderate snow fall",
    75: "Heavy snow fall",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}

# Icon names from the Weather Icons font set.
WEATHER_CODE_ICONS = {
    0: "wi-day-sunny",
    1: "wi-day-cloudy",
    2: "wi-day-cloudy",
    3: "wi-cloudy",
    45: "wi-fog",
    48: "wi-fog",
    51: "wi-sprinkle",
    53: "wi-sprinkle",
    55: "wi-raindrops",
    56: "wi-rain-mix",
    57: "wi-rain-mix",
    61: "wi-rain",
    63: "wi-rain",
    65: "wi-rain-wind",
    66: "wi-rain-mix",
    67: "wi-rain-mix",
    71: "wi-snow",
    73: "wi-snow",
    75: "wi-snow-wind",
    77: "wi-snowflake-cold",
    80: "wi-showers",
    81: "wi-showers",
    82: "wi-showers",
    85: "wi-snow",
    86: "wi-snow",
    95: "wi-thunderstorm",
    96: "wi-storm-showers",
    99: "wi-storm-showers",
}

DAY_SYMBOLS = {
    0: "sun.max.fill",
    1: "cloud.sun.fill",
    2: "cloud.sun.fill",
    3: "cloud.fill",
    45: "cloud.fog.fill",
    48: "cloud.fog.fill",
    51: "cloud.drizzle.fill",
    53: "cloud.drizzle.fill",
    55: "cloud.heavyrain.fill",
    56: "cloud.sleet.fill",
    57: "cloud.sleet.fill",
    61: "cloud.rain.fill",
    63: "cloud.rain.fill",
    65: "cloud.heavyrain.fill",
    66: "cloud.sleet.fill",
    67: "cloud.sleet.fill",
    71: "cloud.snow.fill",
    73: "cloud.snow.fill",
    75: "snowflake",
    77: "snowflake",
    80: "cloud.rain.fill",
    81: "cloud.rain.fill",
    82: "cloud.heavyrain.fill",
    85: "cloud.snow.fill",
    86: "cloud.snow.fill",
    95: "cloud.bolt.rain.fill",
    96: "cloud.bolt.rain.fill",
    99: "cloud.bolt.rain.fill",
}

# Only the clear and partly cloudy codes differ from the day set.
NIGHT_SYMBOLS = {
    **DAY_SYMBOLS,
    0: "moon.stars.fill",
    1: "cloud.moon.fill",
    2: "cloud.moon.fill",
}

WET_WEATHER_CODES = frozenset(
    {51, 53, 55, 56, 57, 61, 63, 65, 66, 67, 80, 81, 82, 85, 86, 95, 96, 99}
)


def description_for(code: int | None) -> str:
    if code is None:
        return "Unknown"
    return WEATHER_CODE_LABELS.get(code, "Unknown")


def icon_name_for(code: int | None) -> str:
    if code is None:
        return "wi-na"
    return WEATHER_CODE_ICONS.get(code, "wi-na")


def symbol_name_for(code: int | None) -> str:
    if code is None:
        return "cloud.fill"
    return DAY_SYMBOLS.get(code, "cloud.fill")


def night_symbol_name_for(code: int | None) -> str | None:
    if code is None:
        return None
    return NIGHT_SYMBOLS.get(code)


def symbol_for(code: int | None, *, is_night: bool = False) -> str:
    if is_night:
        night_symbol = night_symbol_name_for(code)
        if night_symbol is not None:
            return night_symbol
    return symbol_name_for(code)


def is_wet_weather_code(code: int) -> bool:
    return code in WET_WEATHER_CODES


def describe_code(code: int, *, is_night: bool = False) -> dict:
    return {
        "code": code,
        "description": description_for(code),
        "icon": icon_name_for(code),
        "symbol": symbol_for(code, is_night=is_night),
        "is_wet": is_wet_weather_code(code),
    }
