from __future__ import annotations

from enum import Enum


MILLIMETERS_PER_INCH = 25.4

# Regions that still default to Fahrenheit and inches.
IMPERIAL_REGIONS = frozenset({"US", "LR", "MM"})


class TemperatureUnit(str, Enum):
    CELSIUS = "celsius"
    FAHRENHEIT = "fahrenheit"

    @property
    def label(self) -> str:
        return "Celsius" if self is TemperatureUnit.CELSIUS else "Fahrenheit"

    @property
    def symbol(self) -> str:
        return "°C" if self is TemperatureUnit.CELSIUS else "°F"

    def convert(self, celsius: float) -> float:
        if self is TemperatureUnit.FAHRENHEIT:
            return (celsius * 9 / 5) + 32
        return celsius

    def formatted(self, celsius: float) -> str:
        return f"{self.convert(celsius):.0f}°"

    def formatted_value(self, celsius: float) -> str:
        return f"{self.convert(celsius):.0f}{self.symbol}"


class PrecipitationUnit(str, Enum):
    MILLIMETERS = "millimeters"
    INCHES = "inches"

    @property
    def label(self) -> str:
        return "Millimeters" if self is PrecipitationUnit.MILLIMETERS else "Inches"

    @property
    def symbol(self) -> str:
        return "mm" if self is PrecipitationUnit.MILLIMETERS else "in"

    def convert(self, millimeters: float) -> float:
        if self is PrecipitationUnit.INCHES:
            return millimeters / MILLIMETERS_PER_INCH
        return millimeters

    def formatted_amount(self, millimeters: float) -> str:
        return f"{self.convert(millimeters):.1f} {self.symbol}"

    def formatted_label(self, millimeters: float) -> str:
        return f"Today {self.formatted_amount(millimeters)}"


def uses_metric_system(region: str | None) -> bool:
    if not region:
        return True
    return region.strip().upper() not in IMPERIAL_REGIONS


def default_units(region: str | None) -> tuple[TemperatureUnit, PrecipitationUnit]:
    if uses_metric_system(region):
        return TemperatureUnit.CELSIUS, PrecipitationUnit.MILLIMETERS
    return TemperatureUnit.FAHRENHEIT, PrecipitationUnit.INCHES


def parse_temperature_unit(raw: object, *, region: str | None) -> TemperatureUnit:
    try:
        return TemperatureUnit(raw)
    except ValueError:
        return default_units(region)[0]


def parse_precipitation_unit(raw: object, *, region: str | None) -> PrecipitationUnit:
    try:
        return PrecipitationUnit(raw)
    except ValueError:
        return default_units(region)[1]
