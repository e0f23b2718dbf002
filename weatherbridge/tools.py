"""Tool operations exposed to the host, plus the explicit tool registry.

Each operation returns text. Failures never escape: they are logged and
rendered as an error line instead.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, TypeVar

from .formatting import format_alerts, format_current_weather, format_error, format_forecast
from .providers.base import RequestTimeoutError, ValidationError
from .providers.openweather import OpenWeatherMapProvider


logger = logging.getLogger(__name__)

T = TypeVar("T")


class WeatherTools:
    """The three weather operations, bound to one provider client."""

    def __init__(self, provider: OpenWeatherMapProvider) -> None:
        self.provider = provider

    @property
    def units(self) -> str:
        return self.provider.config.units

    async def get_current_weather(self, city: str, country_code: Optional[str] = None) -> str:
        """Gets current weather conditions for the specified city."""
        logger.info("Getting current weather for %s, %s", city, country_code or "N/A")
        try:
            weather = await self._run("current weather", self.provider.get_current_weather, city, country_code)
            return format_current_weather(weather, self.units)
        except Exception as exc:  # noqa: BLE001 - every failure becomes text
            return self._failure("current weather", city, exc)

    async def get_weather_forecast(self, city: str, country_code: Optional[str] = None, days: int = 3) -> str:
        """Gets weather forecast for the specified city (1-5 days, default 3)."""
        logger.info("Getting %s-day forecast for %s, %s", days, city, country_code or "N/A")
        try:
            day_count = _coerce_days(days)
            forecast = await self._run("forecast", self.provider.get_weather_forecast, city, country_code, day_count)
            return format_forecast(forecast, day_count, self.units)
        except Exception as exc:  # noqa: BLE001 - every failure becomes text
            return self._failure("forecast", city, exc)

    async def get_weather_alerts(self, city: str, country_code: Optional[str] = None) -> str:
        """Gets weather alerts and warnings for the specified city."""
        logger.info("Getting weather alerts for %s, %s", city, country_code or "N/A")
        try:
            alerts = await self._run("weather alerts", self.provider.get_weather_alerts, city, country_code)
            return format_alerts(alerts, city)
        except Exception as exc:  # noqa: BLE001 - every failure becomes text
            return self._failure("weather alerts", city, exc)

    async def _run(self, operation: str, func: Callable[..., T], city: str, *args: Any) -> T:
        """Run a blocking provider call on a worker thread.

        Cancelling the awaiting task stops the provider before its next
        request and is reported as a timeout, like any other timed-out call.
        """
        cancel_event = threading.Event()
        try:
            return await asyncio.to_thread(func, city, *args, cancel_event=cancel_event)
        except asyncio.CancelledError:
            cancel_event.set()
            raise RequestTimeoutError(f"Request timeout while fetching {operation} for {city}") from None

    def _failure(self, operation: str, city: str, exc: Exception) -> str:
        kind = getattr(exc, "kind", type(exc).__name__)
        logger.error("Error getting %s for %s (%s)", operation, city, kind, exc_info=exc)
        return format_error(exc)


def _coerce_days(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("days must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError("days must be an integer") from exc


# --------------------------------------------------------------------------- #
#  Registry
# --------------------------------------------------------------------------- #
@dataclass(frozen=True)
class Tool:
    """A named operation the host can invoke.

    The host derives the argument schema from ``func``'s signature.
    """

    name: str
    description: str
    func: Callable[..., Awaitable[str]]


def build_registry(tools: WeatherTools) -> Dict[str, Tool]:
    registry = [
        Tool(
            name="get_current_weather",
            description="Gets current weather conditions for the specified city.",
            func=tools.get_current_weather,
        ),
        Tool(
            name="get_weather_forecast",
            description="Gets weather forecast for the specified city. Days must be between 1 and 5 (default 3).",
            func=tools.get_weather_forecast,
        ),
        Tool(
            name="get_weather_alerts",
            description="Gets weather alerts and warnings for the specified city.",
            func=tools.get_weather_alerts,
        ),
    ]
    return {tool.name: tool for tool in registry}


async def dispatch(registry: Mapping[str, Tool], name: str, arguments: Optional[Mapping[str, Any]] = None) -> str:
    """Invoke the named tool with keyword arguments and return its text."""
    tool = registry.get(name)
    if tool is None:
        logger.warning("Unknown tool requested: %s", name)
        return format_error(f"Unknown tool '{name}'")
    try:
        return await tool.func(**dict(arguments or {}))
    except TypeError as exc:
        logger.error("Bad arguments for %s: %s", name, exc)
        return format_error(f"Invalid arguments for {name}: {exc}")


__all__ = ["Tool", "WeatherTools", "build_registry", "dispatch"]
