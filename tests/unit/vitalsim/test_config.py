"""
Tests for configuration management in `vitalsim/config.py`.

Covers:
- Environment parsing and debug defaults
- Logging level coercion to the expected Literal
- API reload boolean parsing and the PORT fallback
- Allowed origins parsing
- Simulation and storage settings from the environment
- get_config cache behavior
- AppConfig validation (debug only allowed in development)
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from vitalsim.config import (
    APIConfig,
    AppConfig,
    LoggingConfig,
    SimulationConfig,
    StorageConfig,
    get_config,
    load_config_from_env,
)

ENV_VARS = [
    "ENVIRONMENT",
    "SIMULATION_SEED",
    "SIMULATION_TIMEZONE",
    "WALK_REFLECT_AT_BOUNDS",
    "DATA_FILE",
    "STORAGE_FLUSH_EVERY",
    "STORAGE_MAX_RECORDS",
    "API_HOST",
    "API_PORT",
    "PORT",
    "API_RELOAD",
    "API_ALLOWED_ORIGINS",
    "APP_URL",
    "KEEPALIVE_INTERVAL_SECONDS",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Start every test from an empty environment and a cold config cache."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_config.cache_clear()
    yield
    get_config.cache_clear()


def test_load_config_dev_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "development")

    config = load_config_from_env()

    assert config.environment == "development"
    assert config.debug is True
    assert config.api.reload is True  # defaults to debug
    assert config.api.port == 3000
    assert config.api.keepalive_url is None
    assert config.logging.format == "console"
    assert config.simulation.random_seed is None
    assert config.simulation.reflect_at_bounds is True
    assert config.storage.data_file == "./sensor_data.json"


def test_production_uses_json_logs(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "prod")

    config = load_config_from_env()

    assert config.environment == "production"
    assert config.debug is False
    assert config.api.reload is False
    assert config.logging.format == "json"


def test_api_reload_boolean_parsing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "development")

    # Explicit false should override debug default
    monkeypatch.setenv("API_RELOAD", "false")
    config = load_config_from_env()
    assert config.api.reload is False

    # Truthy values
    monkeypatch.setenv("API_RELOAD", "1")
    config = load_config_from_env()
    assert config.api.reload is True


def test_port_falls_back_to_platform_port(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "8080")
    assert load_config_from_env().api.port == 8080

    monkeypatch.setenv("API_PORT", "9000")
    assert load_config_from_env().api.port == 9000


def test_allowed_origins_parsing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("API_ALLOWED_ORIGINS", "http://a.example,http://b.example")

    config = load_config_from_env()

    assert config.api.allowed_origins == ["http://a.example", "http://b.example"]


def test_logging_level_literal_coercion(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "staging")

    # Unknown level should coerce to INFO
    monkeypatch.setenv("LOG_LEVEL", "unknown")
    config = load_config_from_env()
    assert config.logging.level == "INFO"

    # Known level should pass through
    monkeypatch.setenv("LOG_LEVEL", "error")
    config = load_config_from_env()
    assert config.logging.level == "ERROR"


def test_simulation_and_storage_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SIMULATION_SEED", "42")
    monkeypatch.setenv("SIMULATION_TIMEZONE", "Asia/Kolkata")
    monkeypatch.setenv("WALK_REFLECT_AT_BOUNDS", "off")
    monkeypatch.setenv("DATA_FILE", "/tmp/readings.json")
    monkeypatch.setenv("STORAGE_FLUSH_EVERY", "3")
    monkeypatch.setenv("STORAGE_MAX_RECORDS", "500")
    monkeypatch.setenv("APP_URL", "https://vitals.example/health")
    monkeypatch.setenv("KEEPALIVE_INTERVAL_SECONDS", "60")

    config = load_config_from_env()

    assert config.simulation.random_seed == 42
    assert config.simulation.timezone == "Asia/Kolkata"
    assert config.simulation.reflect_at_bounds is False
    assert config.storage.data_file == "/tmp/readings.json"
    assert config.storage.flush_every == 3
    assert config.storage.max_records == 500
    assert config.api.keepalive_url == "https://vitals.example/health"
    assert config.api.keepalive_interval_seconds == 60.0


def test_unknown_timezone_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown timezone"):
        SimulationConfig(timezone="Mars/Olympus_Mons")


def test_storage_limits_must_be_positive() -> None:
    with pytest.raises(ValueError):
        StorageConfig(flush_every=0)


def test_get_config_cache(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "development")

    # First call populates cache
    c1 = get_config()
    c2 = get_config()
    assert c1 is c2  # same object due to lru_cache


def test_app_config_debug_only_in_dev_validation() -> None:
    with pytest.raises(ValueError, match="debug mode is only allowed"):
        AppConfig(
            environment="production",
            debug=True,
            api=APIConfig(),
            logging=LoggingConfig(),
        )
