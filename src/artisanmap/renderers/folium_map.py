"""Folium (Leaflet) map renderer.

Produces a ``folium.Map`` or a self-contained HTML page for embedding via
st.components.v1.html(). Clustering and heat interpolation are done by the
Leaflet.markercluster and Leaflet.heat plugins in the browser; this module
only translates FeedData + RenderConfig into plugin layers.
"""

import html
import json

import folium
from branca.element import MacroElement
from folium.plugins import HeatMap, MarkerCluster
from jinja2 import Template

from artisanmap.i18n import t
from artisanmap.models import (
    ClusterConfig,
    EnrichedFeature,
    FeedData,
    HeatmapConfig,
    RenderConfig,
    format_mean,
)
from artisanmap.settings import DEFAULT_CENTER, DEFAULT_TILES, DEFAULT_ZOOM


class ClusterCountPopup(MacroElement):
    """Shows a count popup for a marker cluster.

    The popup opens on hover or on a first click/tap. A second click on
    the same cluster zooms into its bounds.
    """

    def __init__(self, fmap: folium.Map, cluster: MarkerCluster, label: str) -> None:
        super().__init__()
        self._name = "ClusterCountPopup"
        self.map_name = fmap.get_name()
        self.cluster_name = cluster.get_name()
        self.label_js = json.dumps(label)  # "... {count}"
        self._template = Template(
            """
            {% macro script(this, kwargs) %}
            (function () {
                var label = {{ this.label_js }};
                var popup = L.popup({closeButton: false, autoPan: false});
                var shownFor = null;
                var shownBy = null;
                function show(layer, by) {
                    popup.setLatLng(layer.getLatLng())
                        .setContent(label.replace('{count}', layer.getChildCount()))
                        .openOn({{ this.map_name }});
                    shownFor = layer;
                    shownBy = by;
                }
                function hide() {
                    {{ this.map_name }}.closePopup(popup);
                    shownFor = null;
                    shownBy = null;
                }
                {{ this.cluster_name }}.on('clustermouseover', function (e) {
                    if (shownFor !== e.layer) { show(e.layer, 'hover'); }
                });
                {{ this.cluster_name }}.on('clustermouseout', function (e) {
                    if (shownBy === 'hover') { hide(); }
                });
                {{ this.cluster_name }}.on('clusterclick', function (e) {
                    if (shownFor === e.layer && shownBy === 'click') {
                        hide();
                        e.layer.zoomToBounds({padding: [20, 20]});
                    } else {
                        show(e.layer, 'click');
                    }
                });
            })();
            {% endmacro %}
            """
        )


def _popup_html(feature: EnrichedFeature, lang: str) -> str:
    loc = feature.location
    wx = feature.weather
    rows = [
        (t("popup_category", lang), loc.category or "N/A"),
        (t("popup_cluster", lang), loc.cluster or "N/A"),
        (t("popup_temperature", lang), format_mean(wx.temperature_c, "°C")),
        (t("popup_precipitation", lang), format_mean(wx.precipitation_mm, "mm")),
        (t("popup_observed", lang), wx.observed_at or "N/A"),
    ]
    body = "".join(
        f"<tr><th style='text-align:left;padding-right:8px'>{html.escape(label)}</th>"
        f"<td>{html.escape(value)}</td></tr>"
        for label, value in rows
    )
    return f"<b>{html.escape(loc.name)}</b><table>{body}</table>"


def _summary_html(feed: FeedData, lang: str) -> str:
    s = feed.summary
    return (
        "<div id='artisan-summary' style='position: fixed; top: 12px; right: 12px;"
        " z-index: 9999; background: rgba(255, 255, 255, 0.92); padding: 10px 14px;"
        " border-radius: 8px; box-shadow: 0 2px 8px rgba(0, 0, 0, 0.25);"
        " font: 13px/1.5 sans-serif; color: #222;'>"
        f"<div style='font-weight: 600; margin-bottom: 4px;'>{html.escape(t('summary_title', lang))}</div>"
        f"<div>{html.escape(t('summary_artisans', lang))}: {s.artisan_count}</div>"
        f"<div>{html.escape(t('summary_avg_temp', lang))}: {format_mean(s.mean_temperature_c, '°C')}</div>"
        f"<div>{html.escape(t('summary_avg_precip', lang))}: {format_mean(s.mean_precipitation_mm, 'mm')}</div>"
        "</div>"
    )


def _add_cluster_layer(
    fmap: folium.Map,
    features: list[EnrichedFeature],
    config: ClusterConfig,
    lang: str,
) -> None:
    cluster = MarkerCluster(
        name="artisans",
        options={
            "maxClusterRadius": config.cluster_radius_px,
            "zoomToBoundsOnClick": False,
        },
    ).add_to(fmap)
    for f in features:
        folium.CircleMarker(
            location=[f.location.latitude, f.location.longitude],
            radius=config.marker_radius_px,
            color="#ffffff",
            weight=1,
            fill=True,
            fill_color=config.marker_color,
            fill_opacity=0.9,
            tooltip=f.location.name or None,
            popup=folium.Popup(_popup_html(f, lang), max_width=280),
        ).add_to(cluster)
    fmap.add_child(ClusterCountPopup(fmap, cluster, t("cluster_popup", lang)))


def _add_heatmap_layer(
    fmap: folium.Map,
    features: list[EnrichedFeature],
    config: HeatmapConfig,
) -> None:
    points = [[f.location.latitude, f.location.longitude] for f in features]
    if not points:
        return
    HeatMap(
        points,
        name="artisan density",
        radius=config.radius_px,
        blur=config.blur_px,
        gradient={stop: color for stop, color in config.color_ramp},
    ).add_to(fmap)


def build_folium_map(
    feed: FeedData,
    config: RenderConfig,
    center: tuple[float, float] = DEFAULT_CENTER,
    zoom: int = DEFAULT_ZOOM,
    tiles: str = DEFAULT_TILES,
    lang: str = "en",
) -> folium.Map:
    """Render FeedData as a Leaflet map in the style described by ``config``.

    Features without both coordinates are left off the map but still
    count in the summary panel.

    Args:
        feed: Assembled features and summary for one fetch cycle.
        config: Cluster or heatmap render configuration.
        center: Initial (lat, lng) of the view.
        zoom: Initial zoom level.
        tiles: Basemap name understood by folium/xyzservices.
        lang: Language code for popup and panel labels.

    Returns:
        folium.Map object.
    """
    fmap = folium.Map(location=list(center), zoom_start=zoom, tiles=tiles)
    placeable = [f for f in feed.features if f.has_coordinates]

    if isinstance(config, ClusterConfig):
        _add_cluster_layer(fmap, placeable, config, lang)
    elif isinstance(config, HeatmapConfig):
        _add_heatmap_layer(fmap, placeable, config)
    else:
        raise TypeError(f"unsupported render config: {config!r}")

    fmap.get_root().html.add_child(folium.Element(_summary_html(feed, lang)))
    return fmap


def render_map_html(
    feed: FeedData,
    config: RenderConfig,
    center: tuple[float, float] = DEFAULT_CENTER,
    zoom: int = DEFAULT_ZOOM,
    tiles: str = DEFAULT_TILES,
    lang: str = "en",
) -> str:
    """Return a self-contained HTML page suitable for st.components.v1.html()."""
    fmap = build_folium_map(feed, config, center=center, zoom=zoom, tiles=tiles, lang=lang)
    return fmap.get_root().render()
