from __future__ import annotations


BASE_URL = "https://owm.test/data/2.5"
WEATHER_URL = f"{BASE_URL}/weather"
FORECAST_URL = f"{BASE_URL}/forecast"
ONECALL_URL = f"{BASE_URL}/onecall"


def current_payload(**overrides) -> dict:
    payload = {
        "coord": {"lon": -0.1257, "lat": 51.5085},
        "weather": [{"id": 500, "main": "Rain", "description": "light rain", "icon": "10d"}],
        "main": {
            "temp": 11.24,
            "feels_like": 10.51,
            "temp_min": 9.87,
            "temp_max": 12.35,
            "pressure": 1012,
            "humidity": 81,
        },
        "visibility": 10000,
        "wind": {"speed": 4.63, "deg": 240, "gust": 8.1},
        "clouds": {"all": 75},
        "dt": 1700000000,
        "sys": {"country": "GB", "sunrise": 1699945680, "sunset": 1699978320},
        "name": "London",
        "cod": 200,
    }
    payload.update(overrides)
    return payload


def forecast_item(dt_txt: str, *, temp: float = 10.0, temp_min=None, temp_max=None, humidity: float = 70,
                  pop: float = 0.0, description: str = "clear sky") -> dict:
    return {
        "dt_txt": dt_txt,
        "main": {
            "temp": temp,
            "temp_min": temp if temp_min is None else temp_min,
            "temp_max": temp if temp_max is None else temp_max,
            "humidity": humidity,
        },
        "weather": [{"main": "Clear", "description": description}],
        "pop": pop,
    }


def forecast_payload(items: list) -> dict:
    return {"cod": "200", "cnt": len(items), "list": items, "city": {"name": "London", "country": "GB"}}
