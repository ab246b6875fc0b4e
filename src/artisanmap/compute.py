"""Fetch-cycle computation layer: location fetch, weather enrichment, and feature assembly."""

import asyncio
import logging
from collections.abc import Iterable, Sequence

import httpx

from artisanmap.errors import LocationSourceError
from artisanmap.models import (
    EnrichedFeature,
    FeedData,
    FeedSummary,
    LocationRecord,
    WeatherSample,
)
from artisanmap.settings import Settings
from artisanmap.sources import LocationSource, RpcLocationSource
from artisanmap.weather import OpenMeteoClient, WeatherLookup, enrich_locations

logger = logging.getLogger(__name__)


def assemble_features(
    pairs: Sequence[tuple[LocationRecord, WeatherSample]],
) -> tuple[EnrichedFeature, ...]:
    """Turn enriched pairs into renderable features with ordinals 1..N.

    One feature per input pair, in input order. Nothing is filtered,
    merged or deduplicated.
    """
    return tuple(
        EnrichedFeature(object_id=i, location=record, weather=sample)
        for i, (record, sample) in enumerate(pairs, start=1)
    )


def _mean(values: Iterable[float | None]) -> float | None:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return sum(present) / len(present)


def summarize(features: Sequence[EnrichedFeature]) -> FeedSummary:
    """Compute the summary panel values.

    Each mean only covers features whose reading is non-null; a mean with
    no contributing readings is None (unavailable), never zero.
    """
    return FeedSummary(
        artisan_count=len(features),
        mean_temperature_c=_mean(f.weather.temperature_c for f in features),
        mean_precipitation_mm=_mean(f.weather.precipitation_mm for f in features),
    )


class LocationWeatherFeed:
    """Owns the collaborators of one session and runs fetch cycles on demand.

    Use as an async context manager (or call ``aclose``) so the HTTP client
    is released when the session ends.
    """

    def __init__(
        self,
        source: LocationSource,
        lookup: WeatherLookup,
        max_concurrency: int | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._source = source
        self._lookup = lookup
        self._max_concurrency = max_concurrency
        self._client = client

    async def refresh(self) -> FeedData:
        """Run one complete fetch cycle and return freshly assembled features.

        A location source failure or an empty result aborts the cycle and
        yields ``FeedData.empty()``; no weather lookups are issued then.
        """
        try:
            records = await self._source.fetch()
        except LocationSourceError as exc:
            logger.error("Location fetch failed, nothing to render: %s", exc)
            return FeedData.empty()
        if not records:
            logger.warning("Location source returned no records")
            return FeedData.empty()

        pairs = await enrich_locations(records, self._lookup, self._max_concurrency)
        features = assemble_features(pairs)
        summary = summarize(features)
        logger.info("Fetch cycle complete: %d features", summary.artisan_count)
        return FeedData(features=features, summary=summary)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def __aenter__(self) -> "LocationWeatherFeed":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def build_feed(
    settings: Settings,
    source: LocationSource | None = None,
    client: httpx.AsyncClient | None = None,
) -> LocationWeatherFeed:
    """Wire the HTTP implementations described by ``settings``.

    Args:
        settings: Runtime configuration.
        source: Optional location source overriding the RPC backend.
        client: HTTP client to use; a new one is created if None.

    Returns:
        A feed owning the HTTP client (closed by ``aclose``).

    Raises:
        LocationSourceError: If no source is given and no backend URL is configured.
    """
    if source is None and not settings.backend_url:
        raise LocationSourceError("ARTISANMAP_BACKEND_URL is not set")
    if client is None:
        client = httpx.AsyncClient()
    if source is None:
        source = RpcLocationSource(
            settings.backend_url, settings.locations_rpc, settings.backend_key, client
        )
    weather = OpenMeteoClient(client, settings.weather_url)
    return LocationWeatherFeed(
        source, weather.current, settings.max_concurrency, client=client
    )


async def _run_once(settings: Settings, source: LocationSource | None) -> FeedData:
    async with build_feed(settings, source) as feed:
        return await feed.refresh()


def run(settings: Settings, source: LocationSource | None = None) -> FeedData:
    """Top-level entry point: one synchronous fetch cycle.

    Args:
        settings: Runtime configuration.
        source: Optional location source overriding the RPC backend.

    Returns:
        Fully assembled FeedData (empty if the cycle was aborted).
    """
    try:
        return asyncio.run(_run_once(settings, source))
    except LocationSourceError as exc:
        logger.error("Feed not configured: %s", exc)
        return FeedData.empty()
