"""Read timezone polygons from GeoJSON.

The expected layout is the ``combined.geojson`` release asset of
timezone-boundary-builder: a FeatureCollection whose features carry the IANA
name in the ``tzid`` property. A single Feature is accepted as well.
"""

import json
import logging
import typing as t
from pathlib import Path

from tzlocate.errors import DataLoadError
from tzlocate.geo.regions import RegionStore
from tzlocate.utils.trace_utils import str_exc

logger = logging.getLogger(__name__)


def _read_json(path: Path) -> t.Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DataLoadError(f"Failed to read GeoJSON file '{path}': {str_exc(e)}") from e


def _features(data: t.Any, path: Path) -> list[dict]:
    if not isinstance(data, dict):
        raise DataLoadError(f"'{path}' is not a GeoJSON object")
    kind = data.get("type")
    if kind == "FeatureCollection":
        features = data.get("features")
        if not isinstance(features, list):
            raise DataLoadError(f"'{path}' FeatureCollection has no features list")
        return features
    if kind == "Feature":
        return [data]
    raise DataLoadError(f"'{path}' has GeoJSON type {kind!r}, expected FeatureCollection or Feature")


def iter_geojson_regions(path: str | Path, zone_property: str = "tzid") -> t.Iterator[tuple[t.Any, str | None]]:
    """Yield ``(geometry_mapping, zone_id)`` for every feature in ``path``.

    A feature without ``zone_property`` yields ``zone_id=None``; the region store
    decides whether that aborts the load.
    """
    path = Path(path)
    features = _features(_read_json(path), path)
    logger.info("Loading %d features from %s", len(features), path)
    for feature in features:
        if not isinstance(feature, dict):
            raise DataLoadError(f"'{path}' contains a non-object feature: {feature!r}")
        properties = feature.get("properties") or {}
        yield feature.get("geometry"), properties.get(zone_property)


def load_store(path: str | Path, zone_property: str = "tzid", on_error: str = "raise") -> RegionStore:
    return RegionStore.from_pairs(iter_geojson_regions(path, zone_property), on_error=on_error)
