from kawaii_weather.schemas import UnitPreferences
from kawaii_weather.services.presenter import build_weather_response
from kawaii_weather.services.snapshot import build_snapshot, decode_forecast
from kawaii_weather.services.units import PrecipitationUnit, TemperatureUnit


METRIC = UnitPreferences(
    temperature_unit=TemperatureUnit.CELSIUS,
    precipitation_unit=PrecipitationUnit.MILLIMETERS,
)


def test_build_weather_response_shapes_hourly_and_daily_rows(forecast_payload) -> None:
    response = build_weather_response(build_snapshot(decode_forecast(forecast_payload)), METRIC)

    hourly = response["hourly"]
    assert [row["label"] for row in hourly] == ["09:00", "10:00", "11:00", "12:00", "13:00", "14:00"]
    assert hourly[0]["temperature_display"] == "9°C"
    assert hourly[0]["precipitation_display"] is None
    assert hourly[1]["precipitation_display"] == "0.4 mm"
    assert hourly[1]["probability_display"] == "20%"

    daily = response["daily"]
    assert daily[0]["label"] == "Today"
    assert daily[1]["label"] == "Sat"
    assert daily[2]["weather"] == "Slight rain"
    assert daily[2]["precipitation_display"] == "3.4 mm"

    # 0.4 mm at 10:00 makes rain likely; codes 1, 2 and 3 tie and the lowest wins.
    assert response["today"]["overview_code"] == 1
    assert response["today"]["overview"] == "Mainly clear"


def test_build_weather_response_uses_night_symbols_after_sunset(forecast_payload) -> None:
    forecast_payload["current_weather"]["time"] = "2026-02-20T18:00"
    forecast_payload["current_weather"]["weathercode"] = 0

    response = build_weather_response(build_snapshot(decode_forecast(forecast_payload)), METRIC)

    assert response["is_after_sunset"] is True
    assert response["current"]["symbol"] == "moon.stars.fill"
    assert response["hourly"][0]["symbol"] == "sun.max.fill"
