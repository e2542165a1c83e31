from kawaii_weather.config import Settings, get_settings


def test_get_settings_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("FRONTEND_ORIGINS", "https://kawaii.example, http://localhost:3000")
    monkeypatch.setenv("API_CACHE_TTL_SECONDS", "5")
    monkeypatch.setenv("FORECAST_DAYS", "40")
    monkeypatch.setenv("HOURLY_WINDOW_SIZE", "12")
    monkeypatch.setenv("DEFAULT_REGION", "de")
    monkeypatch.setenv("KAWAII_STORE_PATH", "/tmp/kawaii-settings.db")

    settings = get_settings()

    assert settings.frontend_origins == ("https://kawaii.example", "http://localhost:3000")
    assert settings.api_cache_ttl_seconds == 60
    assert settings.forecast_days == 16
    assert settings.hourly_window_size == 12
    assert settings.default_region == "DE"
    assert settings.store_path == "/tmp/kawaii-settings.db"


def test_get_settings_ignores_invalid_numbers(monkeypatch) -> None:
    monkeypatch.setenv("API_RETRY_ATTEMPTS", "many")
    monkeypatch.setenv("LOCATION_REFETCH_DISTANCE_M", "far")
    monkeypatch.setenv("HOURLY_WINDOW_SIZE", "-3")

    settings = get_settings()

    assert settings.api_retry_attempts == Settings.api_retry_attempts
    assert settings.location_refetch_distance_m == 1000.0
    assert settings.hourly_window_size == 1
