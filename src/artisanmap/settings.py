"""Environment-driven configuration and logging setup."""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"
DEFAULT_LOCATIONS_RPC = "get_artisan_locations"
DEFAULT_MAX_CONCURRENCY = 16

# Initial map view: Assam, India
DEFAULT_CENTER = (26.0, 92.5)
DEFAULT_ZOOM = 7
DEFAULT_TILES = "OpenTopoMap"

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_log_handler: logging.Handler | None = None


@dataclass(frozen=True)
class Settings:
    """Runtime configuration. Built once at start-up."""

    backend_url: str  # Base URL of the RPC backend ("https://xyz.supabase.co")
    backend_key: str  # API key sent as apikey + bearer token
    locations_rpc: str  # Remote procedure returning location rows
    weather_url: str  # Current-weather endpoint
    max_concurrency: int | None  # Cap on in-flight weather lookups; None = unbounded
    log_level: str


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def load_settings() -> Settings:
    """Read Settings from the environment, after loading a .env file if present.

    Returns:
        Settings populated from ``ARTISANMAP_*`` variables.

    Raises:
        ValueError: If a numeric variable is malformed or negative.
    """
    load_dotenv()
    max_concurrency = _env_int("ARTISANMAP_MAX_CONCURRENCY", DEFAULT_MAX_CONCURRENCY)
    if max_concurrency < 0:
        raise ValueError("ARTISANMAP_MAX_CONCURRENCY must be >= 0")
    return Settings(
        backend_url=os.environ.get("ARTISANMAP_BACKEND_URL", "").rstrip("/"),
        backend_key=os.environ.get("ARTISANMAP_BACKEND_KEY", ""),
        locations_rpc=os.environ.get("ARTISANMAP_LOCATIONS_RPC") or DEFAULT_LOCATIONS_RPC,
        weather_url=os.environ.get("ARTISANMAP_WEATHER_URL") or OPEN_METEO_URL,
        max_concurrency=max_concurrency or None,  # 0 disables the cap
        log_level=os.environ.get("ARTISANMAP_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the root logger.

    Safe to call on every Streamlit rerun: a second call only updates the level.
    """
    global _log_handler
    root = logging.getLogger()
    root.setLevel(level)
    if _log_handler is None:
        _log_handler = logging.StreamHandler()
        _log_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    if _log_handler not in root.handlers:
        root.addHandler(_log_handler)
