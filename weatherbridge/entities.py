from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lon: float


@dataclass(frozen=True)
class Condition:
    """One entry of the provider's ``weather`` array."""

    main: str
    description: str


@dataclass(frozen=True)
class TemperatureBlock:
    """The provider's ``main`` block.

    Temperatures are in the configured unit system, pressure in hPa and
    humidity in percent.
    """

    temp: Optional[float] = None
    feels_like: Optional[float] = None
    temp_min: Optional[float] = None
    temp_max: Optional[float] = None
    humidity: Optional[float] = None
    pressure: Optional[float] = None


@dataclass(frozen=True)
class Wind:
    speed: Optional[float] = None
    deg: Optional[float] = None
    gust: Optional[float] = None


@dataclass(frozen=True)
class CurrentWeatherResult:
    name: str
    country: Optional[str]
    coord: Optional[Coordinates]
    conditions: List[Condition] = field(default_factory=list)
    main: Optional[TemperatureBlock] = None
    wind: Optional[Wind] = None
    clouds: Optional[int] = None
    visibility: Optional[int] = None
    sunrise: Optional[int] = None
    sunset: Optional[int] = None
    dt: Optional[int] = None

    @property
    def condition(self) -> Optional[Condition]:
        return self.conditions[0] if self.conditions else None


@dataclass(frozen=True)
class ForecastEntry:
    dt_txt: str
    main: Optional[TemperatureBlock] = None
    conditions: List[Condition] = field(default_factory=list)
    pop: float = 0.0
    dt: Optional[int] = None

    @property
    def humidity(self) -> Optional[float]:
        return self.main.humidity if self.main else None


@dataclass(frozen=True)
class ForecastResult:
    name: Optional[str]
    country: Optional[str]
    entries: List[ForecastEntry] = field(default_factory=list)


@dataclass(frozen=True)
class Alert:
    sender_name: str
    event: str
    start: int
    end: int
    description: str = ""
    tags: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class AlertsResult:
    lat: float
    lon: float
    alerts: List[Alert] = field(default_factory=list)


def build_location_query(city: str, country_code: Optional[str] = None) -> str:
    """Return the provider's ``q`` value: ``city`` or ``city,country``."""
    if country_code is None or not country_code.strip():
        return city
    return f"{city},{country_code}"


__all__ = [
    "Alert",
    "AlertsResult",
    "Condition",
    "Coordinates",
    "CurrentWeatherResult",
    "ForecastEntry",
    "ForecastResult",
    "TemperatureBlock",
    "Wind",
    "build_location_query",
]
