from __future__ import annotations


class ForecastDecodeError(ValueError):
    """Raised when an upstream forecast payload does not match the expected shape."""


class CityNotFoundError(LookupError):
    def __init__(self, query: str) -> None:
        super().__init__(f"No matching city found for {query!r}.")
        self.query = query


class UnknownCityError(LookupError):
    def __init__(self, key: str) -> None:
        super().__init__(f"City {key!r} is not in the saved list.")
        self.key = key
