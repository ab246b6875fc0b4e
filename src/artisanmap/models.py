"""Data model definitions. Explicit boundaries between fetch, enrich, and render layers."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal


def _optional_float(value: Any) -> float | None:
    """Coerce a backend value to float. None, blanks and non-numeric values become None."""
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class LocationRecord:
    """A single artisan location as returned by the backend. Not validated."""

    id: str  # Opaque backend identity
    name: str  # Display name
    category: str  # Craft category label ("Weaving", "Pottery", etc.)
    cluster: str  # Cluster/group label assigned by the backend
    latitude: float | None  # Decimal degrees, passed to the weather lookup as-is
    longitude: float | None  # Decimal degrees, passed to the weather lookup as-is

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "LocationRecord":
        """Build a record from one backend row.

        Missing text fields become empty strings. Numeric strings are coerced
        to float; a missing or unreadable coordinate becomes None and is left
        for the weather lookup of that record to fail on.
        """
        return cls(
            id="" if row.get("id") is None else str(row["id"]),
            name=str(row.get("name") or ""),
            category=str(row.get("category") or ""),
            cluster=str(row.get("cluster") or ""),
            latitude=_optional_float(row.get("latitude")),
            longitude=_optional_float(row.get("longitude")),
        )


@dataclass(frozen=True)
class WeatherSample:
    """Current weather at a location. All-None means the lookup failed."""

    temperature_c: float | None  # Air temperature at 2 m (°C)
    precipitation_mm: float | None  # Precipitation (mm)
    observed_at: str | None  # Observation time as reported by the service (ISO 8601)

    @classmethod
    def unavailable(cls) -> "WeatherSample":
        return cls(temperature_c=None, precipitation_mm=None, observed_at=None)

    @property
    def is_available(self) -> bool:
        return (
            self.temperature_c is not None
            or self.precipitation_mm is not None
            or self.observed_at is not None
        )


@dataclass(frozen=True)
class EnrichedFeature:
    """A renderable point: location + weather + ordinal key for the map widget."""

    object_id: int  # 1..N within one fetch cycle; not a persistent key
    location: LocationRecord
    weather: WeatherSample

    @property
    def has_coordinates(self) -> bool:
        return self.location.latitude is not None and self.location.longitude is not None


@dataclass(frozen=True)
class FeedSummary:
    """Values shown in the summary panel."""

    artisan_count: int
    mean_temperature_c: float | None  # None = no feature had a temperature
    mean_precipitation_mm: float | None  # None = no feature had a precipitation reading


@dataclass(frozen=True)
class FeedData:
    """The sole input to renderers. One fully assembled fetch cycle."""

    features: tuple[EnrichedFeature, ...]
    summary: FeedSummary

    @classmethod
    def empty(cls) -> "FeedData":
        return cls(
            features=(),
            summary=FeedSummary(
                artisan_count=0, mean_temperature_c=None, mean_precipitation_mm=None
            ),
        )


class PresentationMode(str, Enum):
    """Visualization style applied to the same feature set."""

    CLUSTER = "cluster"
    HEATMAP = "heatmap"


@dataclass(frozen=True)
class ClusterConfig:
    """Point markers aggregated into count clusters."""

    marker_radius_px: int
    marker_color: str
    cluster_radius_px: int
    mode: Literal[PresentationMode.CLUSTER] = PresentationMode.CLUSTER


@dataclass(frozen=True)
class HeatmapConfig:
    """Point density surface, no clustering."""

    color_ramp: tuple[tuple[float, str], ...]  # (stop in 0..1, CSS color), ascending stops
    radius_px: int
    blur_px: int
    mode: Literal[PresentationMode.HEATMAP] = PresentationMode.HEATMAP


RenderConfig = ClusterConfig | HeatmapConfig


def format_mean(value: float | None, unit: str) -> str:
    """Format a summary mean to one decimal place, or "N/A" when unavailable."""
    if value is None:
        return "N/A"
    return f"{value:.1f} {unit}"
