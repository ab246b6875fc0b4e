"""CLI entry point: run one fetch cycle and save the map as standalone HTML.

    uv run artisanmap-export --mode heatmap --output results/heatmap.html
    uv run artisanmap-export --locations sample.json --renderer plotly
"""

import argparse
import logging
from pathlib import Path

from artisanmap.compute import run
from artisanmap.errors import LocationSourceError
from artisanmap.models import FeedData, RenderConfig
from artisanmap.presentation import INITIAL_MODE, configure_presentation, parse_mode
from artisanmap.renderers.folium_map import build_folium_map
from artisanmap.renderers.plotly_map import render_plotly_map
from artisanmap.settings import configure_logging, load_settings
from artisanmap.sources import StaticLocationSource

logger = logging.getLogger(__name__)

_ROOT = Path(__file__).parent.parent.parent


def save_map(
    feed: FeedData,
    config: RenderConfig,
    output_path: Path | None = None,
    renderer: str = "folium",
) -> Path:
    """Save a rendered map as an HTML file.

    Args:
        feed: Assembled features for one fetch cycle.
        config: Render configuration for the chosen mode.
        output_path: Destination path. Auto-generated under results/ if None.
        renderer: "folium" or "plotly".

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        output_path = _ROOT / "results" / f"artisan_map__{config.mode.value}__{renderer}.html"
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if renderer == "folium":
        build_folium_map(feed, config).save(str(output_path))
    elif renderer == "plotly":
        render_plotly_map(feed, config).write_html(str(output_path), include_plotlyjs="cdn")
    else:
        raise ValueError(f"unknown renderer: {renderer!r}")
    return output_path


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="artisanmap-export",
        description="Fetch artisan locations, attach current weather, and save the map as HTML.",
    )
    parser.add_argument(
        "--mode", default=INITIAL_MODE.value, help="cluster (default) or heatmap"
    )
    parser.add_argument(
        "--renderer", choices=("folium", "plotly"), default="folium"
    )
    parser.add_argument(
        "--locations",
        type=Path,
        help="JSON file of location rows to use instead of the backend RPC",
    )
    parser.add_argument("--output", type=Path, help="output HTML path")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        mode = parse_mode(args.mode)
    except ValueError as exc:
        parser.error(str(exc))

    settings = load_settings()
    configure_logging(settings.log_level)

    source = None
    if args.locations is not None:
        try:
            source = StaticLocationSource.from_json_file(args.locations)
        except LocationSourceError as exc:
            logger.error("%s", exc)
            return 1

    feed = run(settings, source=source)
    path = save_map(feed, configure_presentation(mode), args.output, args.renderer)
    print(f"Saved: {path} ({feed.summary.artisan_count} artisans)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
