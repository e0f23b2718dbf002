from __future__ import annotations

import pytest

from requests_mock import Mocker

from weatherbridge.config import WeatherApiConfig
from weatherbridge.providers.openweather import OpenWeatherMapProvider

from payloads import BASE_URL


@pytest.fixture
def requests_mock():
    with Mocker() as mock:
        yield mock


@pytest.fixture
def config() -> WeatherApiConfig:
    return WeatherApiConfig(api_key="test-key", base_url=BASE_URL, timeout_seconds=5)


@pytest.fixture
def provider(config: WeatherApiConfig) -> OpenWeatherMapProvider:
    return OpenWeatherMapProvider(config)
