"""Weather enrichment: one current-conditions lookup per location, fanned out concurrently."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

import httpx

from artisanmap.errors import WeatherLookupError
from artisanmap.models import LocationRecord, WeatherSample
from artisanmap.settings import OPEN_METEO_URL

logger = logging.getLogger(__name__)

WeatherLookup = Callable[[float | None, float | None], Awaitable[WeatherSample]]


def _reading(current: dict[str, Any], key: str) -> float | None:
    value = current.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise WeatherLookupError(f"non-numeric {key}: {value!r}")
    return float(value)


def parse_current(payload: Any) -> WeatherSample:
    """Extract a WeatherSample from an Open-Meteo ``current`` response body.

    Raises:
        WeatherLookupError: If the ``current`` block is missing or malformed.
    """
    current = payload.get("current") if isinstance(payload, dict) else None
    if not isinstance(current, dict):
        raise WeatherLookupError("response has no 'current' block")
    observed_at = current.get("time")
    return WeatherSample(
        temperature_c=_reading(current, "temperature_2m"),
        precipitation_mm=_reading(current, "precipitation"),
        observed_at=None if observed_at is None else str(observed_at),
    )


class OpenMeteoClient:
    """Current temperature + precipitation from Open-Meteo (no API key needed)."""

    def __init__(self, client: httpx.AsyncClient, base_url: str = OPEN_METEO_URL) -> None:
        self._client = client
        self._base_url = base_url

    async def current(self, latitude: float | None, longitude: float | None) -> WeatherSample:
        """Look up current conditions at a coordinate.

        Coordinates are sent as given; an invalid coordinate is rejected by
        the service and surfaces as WeatherLookupError.

        Raises:
            WeatherLookupError: On transport error, non-2xx status, or malformed body.
        """
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": "temperature_2m,precipitation",
            "timezone": "UTC",
        }
        try:
            resp = await self._client.get(self._base_url, params=params)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPError as exc:
            raise WeatherLookupError(f"weather request failed: {exc}") from exc
        except ValueError as exc:
            raise WeatherLookupError(f"weather response is not JSON: {exc}") from exc
        return parse_current(payload)


async def _lookup_or_unavailable(
    record: LocationRecord,
    lookup: WeatherLookup,
    semaphore: asyncio.Semaphore | None,
) -> WeatherSample:
    try:
        if semaphore is None:
            return await lookup(record.latitude, record.longitude)
        async with semaphore:
            return await lookup(record.latitude, record.longitude)
    except Exception as exc:  # noqa: BLE001 - one failed lookup must not affect the others
        logger.warning(
            "Weather lookup failed for location %s (%s, %s): %s",
            record.id,
            record.latitude,
            record.longitude,
            exc,
        )
        return WeatherSample.unavailable()


async def enrich_locations(
    records: Sequence[LocationRecord],
    lookup: WeatherLookup,
    max_concurrency: int | None = None,
) -> list[tuple[LocationRecord, WeatherSample]]:
    """Attach current weather to every record.

    All lookups run concurrently and this returns only once every one of
    them has settled. Output is index-aligned with ``records`` regardless of
    completion order. A failed lookup yields ``WeatherSample.unavailable()``
    for that record only. Cancelling the caller cancels all in-flight lookups.

    Args:
        records: Locations to enrich, in display order.
        lookup: Coroutine function ``(latitude, longitude) -> WeatherSample``.
        max_concurrency: Optional cap on in-flight lookups. None = no cap.

    Returns:
        ``(record, sample)`` pairs, same length and order as ``records``.
    """
    if not records:
        return []
    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None
    samples = await asyncio.gather(
        *(_lookup_or_unavailable(r, lookup, semaphore) for r in records)
    )
    failed = sum(1 for s in samples if not s.is_available)
    if failed:
        logger.info("Weather unavailable for %d of %d locations", failed, len(records))
    return list(zip(records, samples))
