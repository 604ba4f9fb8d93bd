"""Timezone region lookup from coordinates.

This module provides stable import surfaces while avoiding heavy imports at
package import time. The default lookup service is built lazily from the
configured GeoJSON data on the first call.
"""

__all__ = [
    "tz_from_coords",
    "resolve_coords",
]


def resolve_coords(lat: float, lon: float):
    """Return the full resolution (Zone, Ambiguous or NoMatch) for ``(lat, lon)``."""
    from .service import default_service  # pylint: disable=import-outside-toplevel

    return default_service().resolve(lat, lon)


def tz_from_coords(lat: float, lon: float) -> str | None:
    """Return the zone id for ``(lat, lon)``, or None if no single zone contains it."""
    from .resolver import Zone  # pylint: disable=import-outside-toplevel

    resolution = resolve_coords(lat, lon)
    return resolution.zone_id if isinstance(resolution, Zone) else None
