"""Location sources. Where artisan records come from."""

import json
import logging
from pathlib import Path
from typing import Any, Protocol

import httpx

from artisanmap.errors import LocationSourceError
from artisanmap.models import LocationRecord

logger = logging.getLogger(__name__)


class LocationSource(Protocol):
    """Anything that can supply the current list of artisan locations."""

    async def fetch(self) -> list[LocationRecord]:
        """Return all location records. Raises LocationSourceError on failure."""
        ...


def _parse_rows(rows: Any) -> list[LocationRecord]:
    if not isinstance(rows, list):
        raise LocationSourceError(
            f"expected a list of rows, got {type(rows).__name__}"
        )
    try:
        return [LocationRecord.from_row(row) for row in rows]
    except (AttributeError, TypeError, ValueError) as exc:
        raise LocationSourceError(f"malformed location row: {exc}") from exc


class RpcLocationSource:
    """Calls a PostgREST/Supabase remote procedure that returns location rows.

    The procedure is invoked as ``POST {base_url}/rest/v1/rpc/{function}``
    with an empty JSON body. Rows must carry ``id``, ``name``, ``category``,
    ``cluster``, ``latitude`` and ``longitude``.
    """

    def __init__(
        self,
        base_url: str,
        function: str,
        api_key: str,
        client: httpx.AsyncClient,
    ) -> None:
        self._url = f"{base_url.rstrip('/')}/rest/v1/rpc/{function}"
        self._headers = {"apikey": api_key, "Authorization": f"Bearer {api_key}"}
        self._client = client

    async def fetch(self) -> list[LocationRecord]:
        try:
            resp = await self._client.post(self._url, headers=self._headers, json={})
            resp.raise_for_status()
            rows = resp.json()
        except httpx.HTTPError as exc:
            raise LocationSourceError(f"location RPC failed: {exc}") from exc
        except ValueError as exc:  # body is not JSON
            raise LocationSourceError(f"location RPC returned invalid JSON: {exc}") from exc
        records = _parse_rows(rows)
        logger.debug("Location RPC returned %d rows", len(records))
        return records


class StaticLocationSource:
    """A fixed list of records. Used for offline exports and tests."""

    def __init__(self, records: list[LocationRecord]) -> None:
        self._records = list(records)

    @classmethod
    def from_json_file(cls, path: Path) -> "StaticLocationSource":
        """Load rows (same shape as the RPC response) from a JSON file.

        Raises:
            LocationSourceError: If the file cannot be read or parsed.
        """
        try:
            rows = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise LocationSourceError(f"cannot load locations from {path}: {exc}") from exc
        return cls(_parse_rows(rows))

    async def fetch(self) -> list[LocationRecord]:
        return list(self._records)
