from __future__ import annotations

import asyncio

import httpx
import pytest

from artisanmap.errors import WeatherLookupError
from artisanmap.models import LocationRecord, WeatherSample
from artisanmap.weather import OpenMeteoClient, enrich_locations, parse_current


def _sample(temp: float) -> WeatherSample:
    return WeatherSample(temperature_c=temp, precipitation_mm=0.0, observed_at="2024-06-01T12:00")


def test_enrichment_keeps_length_and_order_despite_completion_order(records) -> None:
    # First record finishes last
    delays = {26.17: 0.03, 26.37: 0.0, 26.95: 0.01}

    async def lookup(lat, lon):
        await asyncio.sleep(delays[lat])
        return _sample(lat)

    pairs = asyncio.run(enrich_locations(records, lookup))

    assert [r.id for r, _ in pairs] == ["a-1", "a-2", "a-3"]
    assert [s.temperature_c for _, s in pairs] == [26.17, 26.37, 26.95]


def test_failed_lookup_degrades_only_that_record(records) -> None:
    async def lookup(lat, lon):
        if lat == 26.37:
            raise WeatherLookupError("boom")
        return _sample(lat)

    pairs = asyncio.run(enrich_locations(records, lookup))

    samples = [s for _, s in pairs]
    assert samples[1] == WeatherSample(None, None, None)
    assert samples[0] == _sample(26.17)
    assert samples[2] == _sample(26.95)


def test_unexpected_exception_is_also_isolated(records) -> None:
    async def lookup(lat, lon):
        if lat == 26.17:
            raise KeyError("temperature_2m")
        return _sample(lat)

    pairs = asyncio.run(enrich_locations(records, lookup))

    assert pairs[0][1] == WeatherSample.unavailable()
    assert all(s.is_available for _, s in pairs[1:])


def test_empty_input_issues_no_lookups() -> None:
    calls = []

    async def lookup(lat, lon):
        calls.append((lat, lon))
        return _sample(0.0)

    assert asyncio.run(enrich_locations([], lookup)) == []
    assert calls == []


def test_coordinates_are_passed_through_unvalidated() -> None:
    seen = []
    bad = [
        LocationRecord("x", "Nowhere", "", "", None, None),
        LocationRecord("y", "Off the map", "", "", 123.0, -500.0),
    ]

    async def lookup(lat, lon):
        seen.append((lat, lon))
        raise WeatherLookupError("invalid coordinates")

    pairs = asyncio.run(enrich_locations(bad, lookup))

    assert seen == [(None, None), (123.0, -500.0)]
    assert [s for _, s in pairs] == [WeatherSample.unavailable()] * 2


def test_lookups_run_concurrently(records) -> None:
    in_flight = 0
    peak = 0

    async def lookup(lat, lon):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return _sample(lat)

    asyncio.run(enrich_locations(records, lookup))

    assert peak == len(records)


def test_max_concurrency_caps_in_flight_lookups() -> None:
    many = [LocationRecord(str(i), f"n{i}", "", "", 26.0, 92.0 + i / 100) for i in range(10)]
    in_flight = 0
    peak = 0

    async def lookup(lat, lon):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.005)
        in_flight -= 1
        return _sample(lat)

    pairs = asyncio.run(enrich_locations(many, lookup, max_concurrency=3))

    assert peak <= 3
    assert [r.id for r, _ in pairs] == [str(i) for i in range(10)]


def test_cancelling_enrichment_cancels_inflight_lookups(records) -> None:
    cancelled = []

    async def lookup(lat, lon):
        try:
            await asyncio.sleep(3600)
        except asyncio.CancelledError:
            cancelled.append(lat)
            raise
        return _sample(lat)

    async def scenario():
        task = asyncio.create_task(enrich_locations(records, lookup))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert sorted(cancelled) == [26.17, 26.37, 26.95]


def test_open_meteo_client_parses_current_conditions(mock_client, open_meteo_body) -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=open_meteo_body(24.3, 1.2))

    async def scenario():
        async with mock_client(handler) as client:
            return await OpenMeteoClient(client, "https://weather.test/v1/forecast").current(26.17, 91.57)

    sample = asyncio.run(scenario())

    assert sample == WeatherSample(24.3, 1.2, "2024-06-01T12:00")
    params = requests[0].url.params
    assert params["latitude"] == "26.17"
    assert params["longitude"] == "91.57"
    assert params["current"] == "temperature_2m,precipitation"


def test_open_meteo_client_raises_on_error_status(mock_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": True, "reason": "Latitude must be in range"})

    async def scenario():
        async with mock_client(handler) as client:
            await OpenMeteoClient(client).current(123.0, 0.0)

    with pytest.raises(WeatherLookupError):
        asyncio.run(scenario())


def test_open_meteo_client_raises_on_non_json_body(mock_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    async def scenario():
        async with mock_client(handler) as client:
            await OpenMeteoClient(client).current(26.0, 92.0)

    with pytest.raises(WeatherLookupError):
        asyncio.run(scenario())


def test_open_meteo_client_raises_on_transport_error(mock_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async def scenario():
        async with mock_client(handler) as client:
            await OpenMeteoClient(client).current(26.0, 92.0)

    with pytest.raises(WeatherLookupError):
        asyncio.run(scenario())


def test_parse_current_keeps_zero_and_null_readings_distinct(open_meteo_body) -> None:
    sample = parse_current(open_meteo_body(0.0, None))

    assert sample.temperature_c == 0.0
    assert sample.precipitation_mm is None
    assert sample.is_available


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"current": None},
        [],
        {"current": {"temperature_2m": "warm", "precipitation": 0.0}},
    ],
)
def test_parse_current_rejects_malformed_payloads(payload) -> None:
    with pytest.raises(WeatherLookupError):
        parse_current(payload)
