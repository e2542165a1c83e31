import os
import tempfile
from pathlib import Path

import pytest

# Keep the module-level store in main.py out of the source tree.
os.environ.setdefault("KAWAII_STORE_PATH", str(Path(tempfile.mkdtemp()) / "kawaii-test.db"))


HOURS = list(range(7, 19))


@pytest.fixture
def forecast_payload() -> dict:
    return {
        "timezone": "Europe/Berlin",
        "utc_offset_seconds": 3600,
        "current_weather": {
            "time": "2026-02-20T09:15",
            "temperature": 6.0,
            "windspeed": 13.0,
            "winddirection": 250.0,
            "weathercode": 2,
        },
        "hourly": {
            "time": [f"2026-02-20T{hour:02d}:00" for hour in HOURS],
            "temperature_2m": [float(hour) for hour in HOURS],
            "precipitation": [0.0, 0.0, 0.0, 0.4, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0],
            "precipitation_probability": [10, 10, 10, 20, 10, 10, 10, 10, 10, 10, 10, 10],
            "weathercode": [2, 2, 2, 3, 3, 2, 1, 1, 1, 0, 0, 0],
        },
        "daily": {
            "time": ["2026-02-20", "2026-02-21", "2026-02-22"],
            "precipitation_sum": [1.2, 0.0, 3.4],
            "weathercode": [2, 3, 61],
            "temperature_2m_max": [9.0, 8.0, 7.0],
            "temperature_2m_min": [3.0, 2.0, 1.0],
            "precipitation_probability_max": [30, 10, 80],
            "sunrise": ["2026-02-20T07:10", "2026-02-21T07:08", "2026-02-22T07:06"],
            "sunset": ["2026-02-20T17:35", "2026-02-21T17:37", "2026-02-22T17:39"],
        },
    }
