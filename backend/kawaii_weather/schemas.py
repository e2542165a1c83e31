from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from kawaii_weather.services.units import PrecipitationUnit, TemperatureUnit


class Coordinates(BaseModel):
    name: str | None = Field(default=None, description="City or place name.")
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class CurrentWeather(BaseModel):
    model_config = ConfigDict(extra="ignore")

    temperature: float
    windspeed: float
    winddirection: float
    weathercode: int
    time: str


class HourlyWeather(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    time: list[str]
    precipitation: list[float]
    temperature: list[float] = Field(alias="temperature_2m")
    weathercode: list[int]
    precipitation_probability: list[float | None] | None = None


class DailyWeather(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    time: list[str]
    precipitation_sum: list[float]
    weathercode: list[int]
    temperature_max: list[float] = Field(alias="temperature_2m_max")
    temperature_min: list[float] = Field(alias="temperature_2m_min")
    precipitation_probability_max: list[float | None] | None = None
    sunrise: list[str] | None = None
    sunset: list[str] | None = None


class OpenMeteoResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    current_weather: CurrentWeather
    hourly: HourlyWeather
    daily: DailyWeather
    timezone: str | None = None
    utc_offset_seconds: int | None = None


class HourlyForecast(BaseModel):
    time: str
    temperature: float
    weathercode: int
    precipitation: float | None = None
    precipitation_probability: float | None = None


class DailyForecast(BaseModel):
    date: str
    weathercode: int
    temperature_max: float
    temperature_min: float
    precipitation_sum: float | None = None
    precipitation_probability_max: float | None = None


class WeatherSnapshot(BaseModel):
    current: CurrentWeather
    next_hour_precipitation: float | None = None
    today_precipitation_sum: float | None = None
    daily_forecasts: list[DailyForecast] = Field(default_factory=list)
    hourly_forecasts: list[HourlyForecast] = Field(default_factory=list)
    all_hourly_forecasts: list[HourlyForecast] = Field(default_factory=list)
    is_after_sunset: bool = False
    timezone: str | None = None


class StoredCity(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    normalized_key: str
    image_name: str | None = None
    latitude: float
    longitude: float


class CityWeatherEntry(BaseModel):
    city: StoredCity
    weather: WeatherSnapshot


class LocationWeather(BaseModel):
    name: str
    image_name: str | None = None
    latitude: float
    longitude: float
    weather: WeatherSnapshot


class AddCityRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    query: str = Field(min_length=1, max_length=80, description="City or region text to geocode.")


class MoveCityRequest(BaseModel):
    target_index: int = Field(ge=0)
    insert_after: bool = False


class UnitPreferences(BaseModel):
    temperature_unit: TemperatureUnit
    precipitation_unit: PrecipitationUnit


class UnitPreferencesUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    temperature_unit: TemperatureUnit | None = None
    precipitation_unit: PrecipitationUnit | None = None
