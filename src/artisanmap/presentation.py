"""Presentation mode controller. Maps a mode to its declarative render configuration."""

from artisanmap.models import ClusterConfig, HeatmapConfig, PresentationMode, RenderConfig

INITIAL_MODE = PresentationMode.CLUSTER

CLUSTER_CONFIG = ClusterConfig(
    marker_radius_px=6,
    marker_color="#e2711d",
    cluster_radius_px=60,
)

# Transparent at zero density, then cool to hot
HEATMAP_CONFIG = HeatmapConfig(
    color_ramp=(
        (0.0, "rgba(63, 40, 102, 0)"),
        (0.2, "#472b77"),
        (0.4, "#7b3294"),
        (0.6, "#c2a5cf"),
        (0.8, "#f4a582"),
        (1.0, "#ca0020"),
    ),
    radius_px=25,
    blur_px=15,
)

_CONFIGS: dict[PresentationMode, RenderConfig] = {
    PresentationMode.CLUSTER: CLUSTER_CONFIG,
    PresentationMode.HEATMAP: HEATMAP_CONFIG,
}


def configure_presentation(mode: PresentationMode) -> RenderConfig:
    """Return the render configuration for ``mode``.

    Pure: the same mode always yields the same (frozen) object, whatever
    mode was active before. Never touches the feature set.
    """
    return _CONFIGS[mode]


def toggle(mode: PresentationMode) -> PresentationMode:
    """Return the other mode."""
    if mode is PresentationMode.CLUSTER:
        return PresentationMode.HEATMAP
    return PresentationMode.CLUSTER


def parse_mode(value: str) -> PresentationMode:
    """Resolve a UI/CLI value ("cluster", "Heatmap", ...) to a PresentationMode.

    Raises:
        ValueError: If the value names no known mode.
    """
    try:
        return PresentationMode(value.strip().lower())
    except ValueError:
        choices = ", ".join(m.value for m in PresentationMode)
        raise ValueError(f"unknown mode {value!r} (expected one of: {choices})") from None
