"""Core configuration module for the joke-mesh services.

Loads settings from environment variables using Pydantic Settings. The
variable names are unprefixed (PORT, OTEL_EXPORTER_OTLP_ENDPOINT,
JOKES_SERVICE_URL, ...) so the same manifests drive every service.

Patterns applied:
- pydantic-settings BaseSettings (Pydantic v2 split)
- One Settings subclass per service, overriding only its defaults
- @field_validator + @classmethod (Pydantic v2 pattern)
- @lru_cache for singleton pattern
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from jokemesh.core.constants import (
    ANALYTICS_SERVICE,
    DEFAULT_ANALYTICS_ADDRESS,
    DEFAULT_ANALYTICS_PORT,
    DEFAULT_ENVIRONMENT,
    DEFAULT_GATEWAY_PORT,
    DEFAULT_HOST,
    DEFAULT_JOKES_ADDRESS,
    DEFAULT_JOKES_PORT,
    DEFAULT_OTLP_ENDPOINT,
    DEFAULT_USER_ADDRESS,
    DEFAULT_USER_PORT,
    GATEWAY_SERVICE,
    JOKES_SERVICE,
    SERVICE_VERSION,
    USER_SERVICE,
)


class Settings(BaseSettings):
    """Settings shared by every service.

    Attributes:
        service_name: Service identifier used in logs, spans and metrics.
        service_version: Reported as the service.version resource attribute.
        port: HTTP port (1-65535).
        host: Bind address. Default: 0.0.0.0.
        environment: Reported as the environment resource attribute.
        log_level: Logging verbosity. Default: INFO.
        otel_exporter_otlp_endpoint: OTLP/gRPC collector address.
        otel_exporter: Where telemetry goes: otlp, console or none.
    """

    # =========================================================================
    # Core Settings
    # =========================================================================
    service_name: str = Field(
        default=GATEWAY_SERVICE,
        description="Service name for identification",
    )
    service_version: str = Field(
        default=SERVICE_VERSION,
        description="Service version reported to the collector",
    )
    port: int = Field(
        default=DEFAULT_GATEWAY_PORT,
        ge=1,
        le=65535,
        description="HTTP server port",
    )
    host: str = Field(
        default=DEFAULT_HOST,
        description="HTTP server bind address",
    )
    environment: str = Field(
        default=DEFAULT_ENVIRONMENT,
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # =========================================================================
    # Telemetry
    # =========================================================================
    otel_exporter_otlp_endpoint: str = Field(
        default=DEFAULT_OTLP_ENDPOINT,
        description="OTLP/gRPC collector endpoint (plaintext)",
    )
    otel_exporter: Literal["otlp", "console", "none"] = Field(
        default="otlp",
        description="Telemetry exporter: otlp, console or none",
    )

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level to uppercase.

        Raises:
            ValueError: If log level is not valid.
        """
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        normalized = v.upper()
        if normalized not in valid_levels:
            msg = f"log_level must be one of {valid_levels}, got '{v}'"
            raise ValueError(msg)
        return normalized


class GatewaySettings(Settings):
    """API gateway settings: where each backend lives."""

    service_name: str = GATEWAY_SERVICE
    port: int = Field(default=DEFAULT_GATEWAY_PORT, ge=1, le=65535)

    jokes_service_url: str = Field(
        default=DEFAULT_JOKES_ADDRESS,
        description="Jokes service base address (host[:port] or URL)",
    )
    user_service_url: str = Field(
        default=DEFAULT_USER_ADDRESS,
        description="User service base address (host[:port] or URL)",
    )
    analytics_service_url: str = Field(
        default=DEFAULT_ANALYTICS_ADDRESS,
        description="Analytics service base address (host[:port] or URL)",
    )


class JokesSettings(Settings):
    """Jokes service settings."""

    service_name: str = JOKES_SERVICE
    port: int = Field(default=DEFAULT_JOKES_PORT, ge=1, le=65535)

    analytics_service_url: str = Field(
        default=DEFAULT_ANALYTICS_ADDRESS,
        description="Analytics service base address (host[:port] or URL)",
    )
    simulate_latency: bool = Field(
        default=True,
        description="Sleep 0-49 ms per joke to simulate processing cost",
    )


class AnalyticsSettings(Settings):
    """Analytics service settings."""

    service_name: str = ANALYTICS_SERVICE
    port: int = Field(default=DEFAULT_ANALYTICS_PORT, ge=1, le=65535)


class UserSettings(Settings):
    """User service settings."""

    service_name: str = USER_SERVICE
    port: int = Field(default=DEFAULT_USER_PORT, ge=1, le=65535)


@lru_cache
def get_gateway_settings() -> GatewaySettings:
    """Get singleton GatewaySettings instance."""
    return GatewaySettings()


@lru_cache
def get_jokes_settings() -> JokesSettings:
    """Get singleton JokesSettings instance."""
    return JokesSettings()


@lru_cache
def get_analytics_settings() -> AnalyticsSettings:
    """Get singleton AnalyticsSettings instance."""
    return AnalyticsSettings()


@lru_cache
def get_user_settings() -> UserSettings:
    """Get singleton UserSettings instance."""
    return UserSettings()
