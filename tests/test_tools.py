from __future__ import annotations

import asyncio
import threading

import pytest
import requests

from weatherbridge.config import WeatherApiConfig
from weatherbridge.providers.openweather import OpenWeatherMapProvider
from weatherbridge.tools import WeatherTools, build_registry, dispatch

from payloads import (
    BASE_URL,
    FORECAST_URL,
    ONECALL_URL,
    WEATHER_URL,
    current_payload,
    forecast_item,
    forecast_payload,
)


@pytest.fixture
def tools(provider) -> WeatherTools:
    return WeatherTools(provider)


def run(coro):
    return asyncio.run(coro)


def test_current_weather_returns_report(requests_mock, tools):
    requests_mock.get(WEATHER_URL, json=current_payload())

    text = run(tools.get_current_weather("London", "GB"))

    assert text.startswith("🌤️ Current Weather for London, GB")
    assert "☁️ Condition: Rain - light rain" in text


def test_forecast_returns_daily_sections(requests_mock, tools):
    items = [forecast_item(f"2024-01-01 {hour:02d}:00:00", temp=float(hour)) for hour in range(0, 24, 3)]
    items += [forecast_item(f"2024-01-02 {hour:02d}:00:00") for hour in range(0, 24, 3)]
    requests_mock.get(FORECAST_URL, json=forecast_payload(items))

    text = run(tools.get_weather_forecast("London", days=2))

    assert text.startswith("🔮 2-Day Weather Forecast for London, GB")
    assert "📅 Monday, January 01" in text
    assert "📅 Tuesday, January 02" in text
    assert "🌅 Morning: clear sky (0.0°C)" in text
    assert "☀️ Afternoon: clear sky (12.0°C)" in text
    assert "🌙 Evening: clear sky (18.0°C)" in text


def test_forecast_accepts_string_days(requests_mock, tools):
    requests_mock.get(FORECAST_URL, json=forecast_payload([forecast_item("2024-01-01 00:00:00")]))

    run(tools.get_weather_forecast("London", days="4"))

    assert requests_mock.last_request.qs["cnt"] == ["32"]


@pytest.mark.parametrize("days", [0, 6, "many", None])
def test_forecast_invalid_days_become_error_text(requests_mock, tools, days):
    text = run(tools.get_weather_forecast("London", days=days))

    assert text.startswith("❌ Error:")
    assert requests_mock.call_count == 0


def test_alerts_with_no_alerts_is_success(requests_mock, tools):
    requests_mock.get(WEATHER_URL, json=current_payload())
    requests_mock.get(ONECALL_URL, json={"lat": 51.5085, "lon": -0.1257})

    text = run(tools.get_weather_alerts("London"))

    assert "✅ No active weather alerts at this time." in text
    assert "📍 Coordinates: 51.5085, -0.1257" in text
    assert "❌" not in text


@pytest.mark.parametrize(
    "status, message",
    [
        (401, "❌ Error: Invalid API key"),
        (404, "❌ Error: Location not found"),
        (429, "❌ Error: API rate limit exceeded"),
        (502, "❌ Error: API request failed with status 502"),
    ],
)
def test_provider_errors_become_text(requests_mock, tools, status, message):
    requests_mock.get(WEATHER_URL, status_code=status, text="nope")

    assert run(tools.get_current_weather("London")) == message


def test_transport_errors_become_text(requests_mock, tools):
    requests_mock.get(WEATHER_URL, exc=requests.exceptions.ConnectionError("refused"))

    text = run(tools.get_weather_alerts("London"))

    assert text == "❌ Error: Failed to fetch weather data for London"


def test_cancelled_call_becomes_timeout_text(requests_mock, tools):
    entered = threading.Event()
    release = threading.Event()

    def stalled(request, context):
        entered.set()
        release.wait(5)
        return current_payload()

    requests_mock.get(WEATHER_URL, json=stalled)
    requests_mock.get(ONECALL_URL, json={"alerts": []})

    async def cancel_in_flight():
        task = asyncio.create_task(tools.get_weather_alerts("London"))
        try:
            await asyncio.to_thread(entered.wait, 5)
            task.cancel()
            return await task
        finally:
            release.set()

    text = run(cancel_in_flight())

    assert text == "❌ Error: Request timeout while fetching weather alerts for London"
    # The one-call request is never issued once the operation is cancelled.
    assert requests_mock.call_count == 1


def test_missing_api_key_fails_every_operation_without_requests(requests_mock):
    tools = WeatherTools(OpenWeatherMapProvider(WeatherApiConfig(api_key="", base_url=BASE_URL)))

    texts = [
        run(tools.get_current_weather("London")),
        run(tools.get_weather_forecast("London")),
        run(tools.get_weather_alerts("London")),
    ]

    assert all(text.startswith("❌ Error: OpenWeatherMap API key is not configured") for text in texts)
    assert requests_mock.call_count == 0


def test_failure_does_not_affect_next_call(requests_mock, tools):
    requests_mock.get(WEATHER_URL, [{"status_code": 500, "text": "boom"}, {"json": current_payload()}])

    first = run(tools.get_current_weather("London"))
    second = run(tools.get_current_weather("London"))

    assert first.startswith("❌ Error:")
    assert second.startswith("🌤️ Current Weather")


def test_registry_names(tools):
    registry = build_registry(tools)

    assert sorted(registry) == ["get_current_weather", "get_weather_alerts", "get_weather_forecast"]
    assert registry["get_weather_forecast"].func == tools.get_weather_forecast


def test_dispatch_invokes_named_tool(requests_mock, tools):
    requests_mock.get(WEATHER_URL, json=current_payload())
    registry = build_registry(tools)

    text = run(dispatch(registry, "get_current_weather", {"city": "London", "country_code": "GB"}))

    assert text.startswith("🌤️ Current Weather for London, GB")


def test_dispatch_unknown_tool(tools):
    text = run(dispatch(build_registry(tools), "get_tides", {"city": "London"}))

    assert text == "❌ Error: Unknown tool 'get_tides'"


def test_dispatch_bad_arguments(requests_mock, tools):
    text = run(dispatch(build_registry(tools), "get_current_weather", {"town": "London"}))

    assert text.startswith("❌ Error: Invalid arguments for get_current_weather")
    assert requests_mock.call_count == 0
