"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
- Deterministic simulation only when a seed is configured
"""

import os
from functools import lru_cache
from typing import Literal, cast
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

# Load environment variables from .env file
load_dotenv()


class SimulationConfig(BaseModel):
    """Synthesis engine settings."""

    random_seed: int | None = Field(
        default=None, description="Seed for the random source; unset means nondeterministic"
    )
    timezone: str | None = Field(
        default=None, description="IANA zone used for time-of-day regimes (default: host local)"
    )
    reflect_at_bounds: bool = Field(
        default=True, description="Step inward when a forced walk step clamps onto its start"
    )

    @field_validator("timezone")
    def validate_timezone(cls, v: str | None) -> str | None:
        if v is None:
            return v
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v


class StorageConfig(BaseModel):
    """History store persistence."""

    data_file: str = Field(default="./sensor_data.json", description="JSON file backing the store")
    flush_every: int = Field(default=10, gt=0, description="Save after this many appends")
    max_records: int = Field(
        default=10000, gt=0, description="Oldest records are dropped beyond this"
    )


class APIConfig(BaseModel):
    """API server configuration."""

    host: str = Field(default="0.0.0.0", description="API server host")
    port: int = Field(default=3000, gt=0, lt=65536, description="API server port")
    reload: bool = Field(default=False, description="Enable auto-reload for development")

    allowed_origins: list[str] = Field(
        default_factory=lambda: ["*"], description="Allowed origins for CORS"
    )

    # Keep-alive ping for hosts that idle sleeping apps
    keepalive_url: str | None = Field(default=None, description="URL pinged periodically")
    keepalive_interval_seconds: float = Field(
        default=720.0, gt=0.0, description="Interval between keep-alive pings"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        v = val.strip().upper()
        return cast(
            Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
        )

    def _parse_bool(val: str | None, default: bool) -> bool:
        if val is None:
            return default
        return val.strip().lower() in {"1", "true", "yes", "on"}

    def _optional(val: str | None) -> str | None:
        if val is None or not val.strip():
            return None
        return val.strip()

    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    seed = _optional(os.getenv("SIMULATION_SEED"))
    simulation_config = SimulationConfig(
        random_seed=int(seed) if seed is not None else None,
        timezone=_optional(os.getenv("SIMULATION_TIMEZONE")),
        reflect_at_bounds=_parse_bool(os.getenv("WALK_REFLECT_AT_BOUNDS"), True),
    )

    storage_config = StorageConfig(
        data_file=os.getenv("DATA_FILE", "./sensor_data.json"),
        flush_every=int(os.getenv("STORAGE_FLUSH_EVERY", "10")),
        max_records=int(os.getenv("STORAGE_MAX_RECORDS", "10000")),
    )

    api_config = APIConfig(
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=int(os.getenv("API_PORT") or os.getenv("PORT") or "3000"),
        reload=_parse_bool(os.getenv("API_RELOAD"), debug),
        allowed_origins=os.getenv("API_ALLOWED_ORIGINS", "*").split(","),
        keepalive_url=_optional(os.getenv("APP_URL")),
        keepalive_interval_seconds=float(os.getenv("KEEPALIVE_INTERVAL_SECONDS", "720")),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        simulation=simulation_config,
        storage=storage_config,
        api=api_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def validate_config() -> None:
    """Validate configuration at startup."""
    try:
        config = get_config()
        print(f"✅ Configuration loaded for {config.environment} environment")

        if config.simulation.random_seed is not None:
            print(f"✅ Deterministic simulation (seed={config.simulation.random_seed})")

    except Exception as e:
        print(f"❌ Configuration validation failed: {e}")
        raise


def print_config_summary() -> None:
    """Print configuration summary for debugging."""
    config = get_config()

    print("\n🔧 CONFIGURATION SUMMARY")
    print(f"Environment: {config.environment}")
    print(f"Debug Mode: {config.debug}")
    print(f"Log Level: {config.logging.level}")

    print("\n🎲 SIMULATION CONFIGURATION")
    print(f"Seed: {config.simulation.random_seed}")
    print(f"Timezone: {config.simulation.timezone or 'host local'}")
    print(f"Reflect At Bounds: {config.simulation.reflect_at_bounds}")

    print("\n💾 STORAGE CONFIGURATION")
    print(f"Data File: {config.storage.data_file}")
    print(f"Flush Every: {config.storage.flush_every} appends")
    print(f"Max Records: {config.storage.max_records}")

    print("\n🌐 API CONFIGURATION")
    print(f"Host: {config.api.host}:{config.api.port}")
    print(f"Reload: {config.api.reload}")
    print(f"Keep-alive: {config.api.keepalive_url or 'disabled'}")


if __name__ == "__main__":
    validate_config()
    print_config_summary()
