"""Configuration and environment handling for SteamCity."""

import logging
import os

from pydantic import BaseModel, Field

__all__ = [
    "DashboardSettings",
    "VALID_PERIODS",
    "get_settings",
    "reset_settings",
]

VALID_PERIODS = ("24h", "7d", "30d", "all")

_LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class DashboardSettings(BaseModel):
    """Dashboard configuration.

    Covers the API endpoint the dashboard reads from, the default
    measurement period shown in charts, and navigation behaviour.

    All settings can be customized via environment variables.
    """

    api_url: str = Field(
        default="http://localhost:3000/api",
        description="Base URL of the SteamCity REST API",
    )

    api_timeout: float = Field(
        default=30.0,
        description="Timeout for API requests in seconds",
    )

    default_period: str = Field(
        default="24h",
        description="Measurement period used when the address carries none",
    )

    dedupe_history: bool = Field(
        default=False,
        description="Skip history entries for navigations to the current route",
    )

    log_level: str = Field(
        default="INFO",
        description="Log level name",
    )

    @property
    def log_level_value(self) -> int:
        """Numeric logging level for ``log_level``."""
        return _LOG_LEVELS.get(self.log_level.upper(), logging.INFO)

    @classmethod
    def from_env(cls) -> "DashboardSettings":
        """Create DashboardSettings from environment variables.

        Environment variables:
        - STEAMCITY_API_URL: Base URL of the API (default: http://localhost:3000/api)
        - STEAMCITY_API_TIMEOUT: Request timeout in seconds (default: 30)
        - STEAMCITY_DEFAULT_PERIOD: 24h, 7d, 30d or all (default: 24h)
        - STEAMCITY_DEDUPE_HISTORY: "1" to skip duplicate history entries
        - STEAMCITY_LOG_LEVEL: DEBUG, INFO, WARNING or ERROR (default: INFO)
        """
        defaults = cls.model_fields

        api_url = os.environ.get("STEAMCITY_API_URL") or defaults["api_url"].default

        try:
            api_timeout = float(os.environ.get("STEAMCITY_API_TIMEOUT", defaults["api_timeout"].default))
        except ValueError:
            api_timeout = defaults["api_timeout"].default

        default_period = os.environ.get("STEAMCITY_DEFAULT_PERIOD", defaults["default_period"].default)
        if default_period not in VALID_PERIODS:
            default_period = defaults["default_period"].default

        log_level = os.environ.get("STEAMCITY_LOG_LEVEL", defaults["log_level"].default).upper()
        if log_level not in _LOG_LEVELS:
            log_level = defaults["log_level"].default

        return cls(
            api_url=api_url.rstrip("/"),
            api_timeout=api_timeout,
            default_period=default_period,
            dedupe_history=os.environ.get("STEAMCITY_DEDUPE_HISTORY") == "1",
            log_level=log_level,
        )


# Global settings instance
_settings: DashboardSettings | None = None


def get_settings() -> DashboardSettings:
    """Get dashboard settings.

    Returns cached instance if already initialized.
    """
    global _settings
    if _settings is None:
        _settings = DashboardSettings.from_env()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
