"""Environment-driven configuration for the OpenWeatherMap bridge."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openweathermap.org/data/2.5"
DEFAULT_UNITS = "metric"
DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_MAX_RETRIES = 3
SUPPORTED_UNITS = ("metric", "imperial", "kelvin")


def env(name: str, default: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Fetch an environment variable, treating empty values as unset."""

    source = os.environ if environ is None else environ
    value = source.get(name)
    if value is None or value == "":
        return default
    return value


def _env_int(name: str, default: int, environ: Optional[Mapping[str, str]]) -> int:
    raw = env(name, environ=environ)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %s", name, raw, default)
        return default


@dataclass(frozen=True)
class WeatherApiConfig:
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    units: str = DEFAULT_UNITS
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    max_retries: int = DEFAULT_MAX_RETRIES

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "WeatherApiConfig":
        units = (env("OPENWEATHERMAP_UNITS", DEFAULT_UNITS, environ) or DEFAULT_UNITS).lower()
        if units not in SUPPORTED_UNITS:
            logger.warning("Unsupported OPENWEATHERMAP_UNITS=%r, falling back to %s", units, DEFAULT_UNITS)
            units = DEFAULT_UNITS
        return cls(
            api_key=env("OPENWEATHERMAP_API_KEY", "", environ) or "",
            base_url=(env("OPENWEATHERMAP_BASE_URL", DEFAULT_BASE_URL, environ) or DEFAULT_BASE_URL).rstrip("/"),
            units=units,
            timeout_seconds=_env_int("OPENWEATHERMAP_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS, environ),
            max_retries=_env_int("OPENWEATHERMAP_MAX_RETRIES", DEFAULT_MAX_RETRIES, environ),
        )


__all__ = ["WeatherApiConfig", "SUPPORTED_UNITS", "env"]
