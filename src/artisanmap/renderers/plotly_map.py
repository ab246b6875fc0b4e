"""Plotly interactive map renderer.

Uses MapLibre-backed ``Scattermap`` (with built-in point clustering) and
``Densitymap`` traces. Requires plotly >= 5.24.
"""

import plotly.graph_objects as go

from artisanmap.i18n import t
from artisanmap.models import (
    ClusterConfig,
    EnrichedFeature,
    FeedData,
    HeatmapConfig,
    RenderConfig,
    format_mean,
)
from artisanmap.settings import DEFAULT_CENTER, DEFAULT_ZOOM

_MAP_STYLE = "open-street-map"


def _hover_rows(features: list[EnrichedFeature]) -> list[list[str]]:
    return [
        [
            f.location.name,
            f.location.category or "N/A",
            f.location.cluster or "N/A",
            format_mean(f.weather.temperature_c, "°C"),
            format_mean(f.weather.precipitation_mm, "mm"),
        ]
        for f in features
    ]


def _cluster_trace(features: list[EnrichedFeature], config: ClusterConfig, lang: str) -> go.Scattermap:
    hovertemplate = (
        "<b>%{customdata[0]}</b><br>"
        f"{t('popup_category', lang)}: %{{customdata[1]}}<br>"
        f"{t('popup_cluster', lang)}: %{{customdata[2]}}<br>"
        f"{t('popup_temperature', lang)}: %{{customdata[3]}}<br>"
        f"{t('popup_precipitation', lang)}: %{{customdata[4]}}"
        "<extra></extra>"
    )
    return go.Scattermap(
        lat=[f.location.latitude for f in features],
        lon=[f.location.longitude for f in features],
        ids=[str(f.object_id) for f in features],
        mode="markers",
        marker=dict(size=config.marker_radius_px * 2, color=config.marker_color),
        customdata=_hover_rows(features),
        hovertemplate=hovertemplate,
        # Plotly exposes the cluster bubble size, not the aggregation radius
        cluster=dict(enabled=True, size=config.cluster_radius_px // 2, color=config.marker_color),
        name="artisans",
    )


def _heatmap_trace(features: list[EnrichedFeature], config: HeatmapConfig) -> go.Densitymap:
    return go.Densitymap(
        lat=[f.location.latitude for f in features],
        lon=[f.location.longitude for f in features],
        radius=config.radius_px,
        colorscale=[[stop, color] for stop, color in config.color_ramp],
        showscale=False,
        hoverinfo="skip",
        name="artisan density",
    )


def render_plotly_map(
    feed: FeedData,
    config: RenderConfig,
    center: tuple[float, float] = DEFAULT_CENTER,
    zoom: int = DEFAULT_ZOOM,
    lang: str = "en",
) -> go.Figure:
    """Render FeedData as a Plotly map figure.

    Args:
        feed: Assembled features and summary for one fetch cycle.
        config: Cluster or heatmap render configuration.
        center: Initial (lat, lng) of the view.
        zoom: Initial zoom level.
        lang: Language code for hover and summary labels.

    Returns:
        Plotly Figure object with exactly one data trace.
    """
    placeable = [f for f in feed.features if f.has_coordinates]

    if isinstance(config, ClusterConfig):
        trace = _cluster_trace(placeable, config, lang)
    elif isinstance(config, HeatmapConfig):
        trace = _heatmap_trace(placeable, config)
    else:
        raise TypeError(f"unsupported render config: {config!r}")

    s = feed.summary
    summary_text = (
        f"<b>{t('summary_title', lang)}</b><br>"
        f"{t('summary_artisans', lang)}: {s.artisan_count}<br>"
        f"{t('summary_avg_temp', lang)}: {format_mean(s.mean_temperature_c, '°C')}<br>"
        f"{t('summary_avg_precip', lang)}: {format_mean(s.mean_precipitation_mm, 'mm')}"
    )

    fig = go.Figure(data=[trace])
    fig.update_layout(
        map=dict(style=_MAP_STYLE, center=dict(lat=center[0], lon=center[1]), zoom=zoom),
        margin=dict(l=0, r=0, t=0, b=0),
        showlegend=False,
        annotations=[
            dict(
                text=summary_text,
                xref="paper",
                yref="paper",
                x=0.99,
                y=0.99,
                xanchor="right",
                yanchor="top",
                align="left",
                showarrow=False,
                bgcolor="rgba(255,255,255,0.9)",
                borderpad=6,
            )
        ],
    )
    return fig
