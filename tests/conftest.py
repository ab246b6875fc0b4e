from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from artisanmap.models import LocationRecord
from artisanmap.settings import Settings


@pytest.fixture()
def records() -> list[LocationRecord]:
    return [
        LocationRecord("a-1", "Sualkuchi Silk", "Weaving", "Kamrup", 26.17, 91.57),
        LocationRecord("a-2", "Sarthebari Bell Metal", "Metalcraft", "Barpeta", 26.37, 91.17),
        LocationRecord("a-3", "Majuli Masks", "Mask Making", "Majuli", 26.95, 94.17),
    ]


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        backend_url="https://backend.test",
        backend_key="anon-key",
        locations_rpc="get_artisan_locations",
        weather_url="https://weather.test/v1/forecast",
        max_concurrency=None,
        log_level="DEBUG",
    )


@pytest.fixture()
def mock_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    def make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return make


@pytest.fixture()
def open_meteo_body() -> Callable[[float | None, float | None], dict]:
    def build(temperature: float | None, precipitation: float | None) -> dict:
        return {
            "latitude": 26.0,
            "longitude": 92.5,
            "current": {
                "time": "2024-06-01T12:00",
                "interval": 900,
                "temperature_2m": temperature,
                "precipitation": precipitation,
            },
        }

    return build
