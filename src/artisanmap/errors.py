"""Exception hierarchy. Two recovery tiers: cycle abort and per-record degradation."""


class ArtisanMapError(Exception):
    """Base class for errors raised by artisanmap."""


class LocationSourceError(ArtisanMapError):
    """The backend could not supply location records. Aborts the fetch cycle."""


class WeatherLookupError(ArtisanMapError):
    """A single weather lookup failed. Degrades that record to a null sample."""
