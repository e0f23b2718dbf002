"""Render provider results as human-readable text.

Every function here is pure: no I/O, no failure modes. Missing optional
fields drop their line instead of raising.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Dict, List, Optional, Set, Tuple

from .entities import AlertsResult, CurrentWeatherResult, ForecastEntry, ForecastResult


ERROR_MARKER = "❌ Error:"
RULE = "─────────────────────────────────────"
DOUBLE_RULE = "═══════════════════════════════════════════════"


@dataclass(frozen=True)
class UnitLabels:
    temperature: str
    speed: str


UNIT_LABELS: Dict[str, UnitLabels] = {
    "metric": UnitLabels(temperature="°C", speed="m/s"),
    "imperial": UnitLabels(temperature="°F", speed="mph"),
    "kelvin": UnitLabels(temperature="K", speed="m/s"),
}


def unit_labels(units: str) -> UnitLabels:
    return UNIT_LABELS.get(units, UNIT_LABELS["metric"])


def format_error(message: object) -> str:
    return f"{ERROR_MARKER} {message}"


# Current weather ----------------------------------------------------
def format_current_weather(weather: CurrentWeatherResult, units: str = "metric") -> str:
    labels = unit_labels(units)
    deg = labels.temperature
    lines = [f"🌤️ Current Weather for {weather.name}, {weather.country or ''}", RULE]

    condition = weather.condition
    if condition is not None:
        lines.append(f"☁️ Condition: {condition.main} - {condition.description}")

    main = weather.main
    if main is not None:
        if main.temp is not None:
            feels = f" (feels like {main.feels_like:.1f}{deg})" if main.feels_like is not None else ""
            lines.append(f"🌡️ Temperature: {main.temp:.1f}{deg}{feels}")
        if main.temp_min is not None and main.temp_max is not None:
            lines.append(f"📊 Range: {main.temp_min:.1f}{deg} - {main.temp_max:.1f}{deg}")
        if main.humidity is not None:
            lines.append(f"💧 Humidity: {main.humidity:.0f}%")
        if main.pressure is not None:
            lines.append(f"🎈 Pressure: {main.pressure:.0f} hPa")

    wind = weather.wind
    if wind is not None and wind.speed is not None:
        direction = f" at {wind.deg:.0f}°" if wind.deg is not None else ""
        lines.append(f"💨 Wind: {wind.speed:g} {labels.speed}{direction}")
        if wind.gust is not None:
            lines.append(f"   Gusts: {wind.gust:.1f} {labels.speed}")

    if weather.clouds is not None:
        lines.append(f"☁️ Cloud Cover: {weather.clouds}%")
    if weather.visibility is not None:
        lines.append(f"👁️ Visibility: {weather.visibility / 1000.0:.1f} km")
    if weather.sunrise is not None:
        lines.append(f"🌅 Sunrise: {_utc(weather.sunrise):%H:%M}")
    if weather.sunset is not None:
        lines.append(f"🌇 Sunset: {_utc(weather.sunset):%H:%M}")
    if weather.dt is not None:
        lines.append(f"📅 Last updated: {_utc(weather.dt):%Y-%m-%d %H:%M} UTC")

    return _join(lines)


# Forecast -----------------------------------------------------------
_Sample = Tuple[datetime, ForecastEntry]

ROLES: List[Tuple[str, str, Callable[[int], bool]]] = [
    ("🌅", "Morning", lambda hour: hour <= 12),
    ("☀️", "Afternoon", lambda hour: 12 <= hour <= 18),
    ("🌙", "Evening", lambda hour: hour >= 18),
]


def group_by_day(entries: List[ForecastEntry], days: int) -> Dict[date, List[_Sample]]:
    """Group entries by calendar date, keeping the first ``days`` dates seen.

    Each group is sorted by timestamp. Entries whose timestamp is empty or
    unparseable are skipped.
    """
    groups: Dict[date, List[_Sample]] = {}
    for entry in entries:
        stamp = _parse_timestamp(entry.dt_txt)
        if stamp is None:
            continue
        day = stamp.date()
        if day not in groups:
            if len(groups) >= days:
                continue
            groups[day] = []
        groups[day].append((stamp, entry))
    for samples in groups.values():
        samples.sort(key=lambda sample: sample[0])
    return groups


def select_roles(samples: List[_Sample]) -> Dict[str, Optional[ForecastEntry]]:
    """Pick the morning, afternoon and evening entries of one day.

    Selectors run in that order and an entry claimed by one is not offered
    to the next, so the hour 12 and hour 18 boundaries go to the earlier role.
    """
    claimed: Set[int] = set()
    picks: Dict[str, Optional[ForecastEntry]] = {}
    for _, role, matches in ROLES:
        picks[role] = None
        for index, (stamp, entry) in enumerate(samples):
            if index not in claimed and matches(stamp.hour):
                claimed.add(index)
                picks[role] = entry
                break
    return picks


def format_forecast(forecast: ForecastResult, days: int, units: str = "metric") -> str:
    deg = unit_labels(units).temperature
    lines = [f"🔮 {days}-Day Weather Forecast for {forecast.name or ''}, {forecast.country or ''}", DOUBLE_RULE]

    for day, samples in group_by_day(forecast.entries, days).items():
        entries = [entry for _, entry in samples]
        lines.append("")
        lines.append(f"📅 {day:%A, %B %d}")
        lines.append(RULE)

        lows = [e.main.temp_min for e in entries if e.main is not None and e.main.temp_min is not None]
        highs = [e.main.temp_max for e in entries if e.main is not None and e.main.temp_max is not None]
        if lows and highs:
            lines.append(f"🌡️ Temperature: {min(lows):.1f}{deg} - {max(highs):.1f}{deg}")

        picks = select_roles(samples)
        for icon, role, _ in ROLES:
            entry = picks[role]
            if entry is None or not entry.conditions:
                continue
            temp = entry.main.temp if entry.main is not None else None
            reading = f" ({temp:.1f}{deg})" if temp is not None else ""
            lines.append(f"{icon} {role}: {entry.conditions[0].description}{reading}")

        humidities = [e.main.humidity for e in entries if e.main is not None and e.main.humidity is not None]
        if humidities:
            lines.append(f"💧 Humidity: {sum(humidities) / len(humidities):.0f}%")
        lines.append(f"🌧️ Precipitation chance: {max(e.pop for e in entries) * 100:.0f}%")

    return _join(lines)


# Alerts -------------------------------------------------------------
def format_alerts(alerts: AlertsResult, city: str) -> str:
    lines = [f"🚨 Weather Alerts for {city}", "═══════════════════════════════════"]
    coordinates = f"📍 Coordinates: {alerts.lat:.4f}, {alerts.lon:.4f}"

    if not alerts.alerts:
        lines.append("✅ No active weather alerts at this time.")
        lines.append(coordinates)
        return _join(lines)

    lines.append(f"⚠️ {len(alerts.alerts)} active alert(s) found:")
    lines.append(coordinates)
    for number, alert in enumerate(alerts.alerts, start=1):
        lines.append("")
        lines.append(f"🚨 Alert #{number}: {alert.event}")
        lines.append(RULE)
        lines.append(f"📢 Issued by: {alert.sender_name}")
        lines.append(f"🕐 Valid from: {_utc(alert.start):%Y-%m-%d %H:%M} UTC")
        lines.append(f"🕐 Valid until: {_utc(alert.end):%Y-%m-%d %H:%M} UTC")
        if alert.tags:
            lines.append(f"🏷️ Tags: {', '.join(alert.tags)}")
        if alert.description:
            lines.append("📋 Description:")
            lines.append(f"   {alert.description}")

    return _join(lines)


# Helpers ------------------------------------------------------------
def _utc(seconds: int) -> datetime:
    return datetime.fromtimestamp(int(seconds), tz=timezone.utc)


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def _join(lines: List[str]) -> str:
    return "\n".join(lines) + "\n"


__all__ = [
    "ERROR_MARKER",
    "format_alerts",
    "format_current_weather",
    "format_error",
    "format_forecast",
    "group_by_day",
    "select_roles",
    "unit_labels",
]
