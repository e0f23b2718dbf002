"""Weather provider integrations."""
from __future__ import annotations

from .base import (
    ConfigurationError,
    FormatError,
    ProviderError,
    QuotaExceeded,
    RequestTimeoutError,
    TransportError,
    ValidationError,
    WeatherError,
)
from .openweather import OpenWeatherMapProvider

__all__ = [
    "ConfigurationError",
    "FormatError",
    "OpenWeatherMapProvider",
    "ProviderError",
    "QuotaExceeded",
    "RequestTimeoutError",
    "TransportError",
    "ValidationError",
    "WeatherError",
]
