"""OpenWeatherMap provider: current weather, 5-day forecast and one-call alerts."""
from __future__ import annotations

import logging
import threading
from typing import Any, List, Optional

import requests
from requests import Response

from .base import (
    ConfigurationError,
    FormatError,
    RequestConfig,
    ValidationError,
    WeatherProvider,
)
from ..config import WeatherApiConfig
from ..entities import (
    Alert,
    AlertsResult,
    Condition,
    Coordinates,
    CurrentWeatherResult,
    ForecastEntry,
    ForecastResult,
    TemperatureBlock,
    Wind,
    build_location_query,
)


# The forecast endpoint returns one sample every three hours.
SAMPLES_PER_DAY = 8
MIN_FORECAST_DAYS = 1
MAX_FORECAST_DAYS = 5
ALERTS_EXCLUDE = "minutely,hourly,daily,current"
INVALID_FORMAT = "Invalid response format from weather service"


class OpenWeatherMapProvider(WeatherProvider):
    """Integration with the OpenWeatherMap current, forecast and one-call endpoints."""

    name = "openweathermap"

    def __init__(
        self,
        config: WeatherApiConfig,
        session: Optional[requests.Session] = None,
        **kwargs,
    ) -> None:
        kwargs.setdefault(
            "request_config",
            RequestConfig(timeout=float(config.timeout_seconds), retries=config.max_retries),
        )
        super().__init__(session=session, **kwargs)
        self.config = config
        self._log = logging.getLogger(self.__class__.__name__)

    # Public API ---------------------------------------------------------
    def get_current_weather(
        self,
        city: str,
        country_code: Optional[str] = None,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> CurrentWeatherResult:
        self._validate_api_key()
        _validate_city(city)

        location = build_location_query(city, country_code)
        self._log.info("Fetching current weather for %s", location)
        params = {"q": location, "appid": self.config.api_key, "units": self.config.units}
        response = self._request(
            "GET",
            self._url("weather"),
            subject=f"weather data for {location}",
            cancel_event=cancel_event,
            params=params,
        )
        data = self._json(response, location)
        if not isinstance(data, dict):
            raise FormatError("Failed to deserialize weather response")

        result = _parse_current(data)
        self._log.info("Successfully retrieved current weather for %s", result.name)
        return result

    def get_weather_forecast(
        self,
        city: str,
        country_code: Optional[str] = None,
        days: int = 3,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> ForecastResult:
        self._validate_api_key()
        _validate_city(city)
        if days < MIN_FORECAST_DAYS or days > MAX_FORECAST_DAYS:
            raise ValidationError(f"Days must be between {MIN_FORECAST_DAYS} and {MAX_FORECAST_DAYS}")

        location = build_location_query(city, country_code)
        self._log.info("Fetching %s-day weather forecast for %s", days, location)
        params = {
            "q": location,
            "appid": self.config.api_key,
            "units": self.config.units,
            "cnt": days * SAMPLES_PER_DAY,
        }
        response = self._request(
            "GET",
            self._url("forecast"),
            subject=f"forecast data for {location}",
            cancel_event=cancel_event,
            params=params,
        )
        data = self._json(response, location)
        if not isinstance(data, dict):
            raise FormatError("Failed to deserialize forecast response")

        result = _parse_forecast(data)
        self._log.info("Successfully retrieved %s-day forecast for %s", days, result.name)
        return result

    def get_weather_alerts(
        self,
        city: str,
        country_code: Optional[str] = None,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> AlertsResult:
        self._validate_api_key()
        _validate_city(city)

        current = self.get_current_weather(city, country_code, cancel_event=cancel_event)
        if current.coord is None:
            raise FormatError(f"Unable to get coordinates for {city}")

        lat, lon = current.coord.lat, current.coord.lon
        self._log.info("Fetching weather alerts for %s at coordinates (%s, %s)", city, lat, lon)
        params = {"lat": lat, "lon": lon, "appid": self.config.api_key, "exclude": ALERTS_EXCLUDE}
        response = self._request(
            "GET",
            self._url("onecall"),
            subject=f"weather alerts for {city}",
            cancel_event=cancel_event,
            params=params,
        )
        data = self._json(response, city)
        if isinstance(data, dict):
            result = _parse_alerts(data, lat, lon)
        else:
            result = AlertsResult(lat=lat, lon=lon, alerts=[])

        self._log.info(
            "Successfully retrieved weather alerts for %s - %s alerts found", city, len(result.alerts)
        )
        return result

    # Helpers ------------------------------------------------------------
    def _validate_api_key(self) -> None:
        if not self.config.has_api_key:
            raise ConfigurationError(
                "OpenWeatherMap API key is not configured. "
                "Please set the OPENWEATHERMAP_API_KEY environment variable."
            )

    def _url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/{path}"

    def _json(self, response: Response, location: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            self._log.error("JSON parsing error while processing response for %s", location, exc_info=exc)
            raise FormatError(INVALID_FORMAT) from exc


def _validate_city(city: Any) -> None:
    if not isinstance(city, str) or not city.strip():
        raise ValidationError("city must be a non-empty string")


def _parse_current(data: dict) -> CurrentWeatherResult:
    sys_block = _block(data, "sys")
    clouds = _block(data, "clouds")
    coord = _block(data, "coord")
    coordinates = None
    lat = _safe_float(coord.get("lat"))
    lon = _safe_float(coord.get("lon"))
    if lat is not None and lon is not None:
        coordinates = Coordinates(lat=lat, lon=lon)

    wind = None
    if "wind" in data and isinstance(data["wind"], dict):
        wind_block = data["wind"]
        wind = Wind(
            speed=_safe_float(wind_block.get("speed")),
            deg=_safe_float(wind_block.get("deg")),
            gust=_safe_float(wind_block.get("gust")),
        )

    return CurrentWeatherResult(
        name=data.get("name") or "",
        country=sys_block.get("country"),
        coord=coordinates,
        conditions=_parse_conditions(data.get("weather")),
        main=_parse_main(data.get("main")),
        wind=wind,
        clouds=_safe_int(clouds.get("all")),
        visibility=_safe_int(data.get("visibility")),
        sunrise=_safe_int(sys_block.get("sunrise")),
        sunset=_safe_int(sys_block.get("sunset")),
        dt=_safe_int(data.get("dt")),
    )


def _parse_forecast(data: dict) -> ForecastResult:
    city = _block(data, "city")
    entries: List[ForecastEntry] = []
    for item in data.get("list") or []:
        if not isinstance(item, dict):
            continue
        entries.append(
            ForecastEntry(
                dt_txt=str(item.get("dt_txt") or ""),
                main=_parse_main(item.get("main")),
                conditions=_parse_conditions(item.get("weather")),
                pop=_safe_float(item.get("pop")) or 0.0,
                dt=_safe_int(item.get("dt")),
            )
        )
    return ForecastResult(name=city.get("name"), country=city.get("country"), entries=entries)


def _parse_alerts(data: dict, lat: float, lon: float) -> AlertsResult:
    alerts: List[Alert] = []
    for item in data.get("alerts") or []:
        if not isinstance(item, dict):
            continue
        alerts.append(
            Alert(
                sender_name=item.get("sender_name") or "",
                event=item.get("event") or "",
                start=_safe_int(item.get("start")) or 0,
                end=_safe_int(item.get("end")) or 0,
                description=item.get("description") or "",
                tags=[str(tag) for tag in item.get("tags") or []],
            )
        )
    payload_lat = _safe_float(data.get("lat"))
    payload_lon = _safe_float(data.get("lon"))
    return AlertsResult(
        lat=payload_lat if payload_lat is not None else lat,
        lon=payload_lon if payload_lon is not None else lon,
        alerts=alerts,
    )


def _parse_main(value: Any) -> Optional[TemperatureBlock]:
    if not isinstance(value, dict):
        return None
    return TemperatureBlock(
        temp=_safe_float(value.get("temp")),
        feels_like=_safe_float(value.get("feels_like")),
        temp_min=_safe_float(value.get("temp_min")),
        temp_max=_safe_float(value.get("temp_max")),
        humidity=_safe_float(value.get("humidity")),
        pressure=_safe_float(value.get("pressure")),
    )


def _parse_conditions(value: Any) -> List[Condition]:
    conditions: List[Condition] = []
    for item in value or []:
        if isinstance(item, dict):
            conditions.append(Condition(main=item.get("main") or "", description=item.get("description") or ""))
    return conditions


def _block(data: dict, key: str) -> dict:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _safe_float(value: Optional[object]) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _safe_int(value: Optional[object]) -> Optional[int]:
    number = _safe_float(value)
    return None if number is None else int(number)


__all__ = ["OpenWeatherMapProvider", "SAMPLES_PER_DAY"]
