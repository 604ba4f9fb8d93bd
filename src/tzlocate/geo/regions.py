"""Region records and the store that owns them.

A region is one polygon (possibly multi-part, possibly holed) tagged with a
timezone identifier. The store computes each region's envelope on admission
and is frozen once an index is built over it.
"""

import logging
import math
import typing as t
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import reduce

from shapely.errors import GEOSException
from shapely.geometry import MultiPolygon, Point, Polygon, shape
from shapely.geometry.base import BaseGeometry
from shapely.prepared import PreparedGeometry, prep

from tzlocate.errors import GeometryDefectError, RegionLoadError, StoreFrozenError
from tzlocate.geo.envelope import Envelope
from tzlocate.utils.trace_utils import str_exc

logger = logging.getLogger(__name__)

Coord = tuple[float, float]
Ring = tuple[Coord, ...]

ON_ERROR_CHOICES = ("raise", "skip")


@dataclass(frozen=True, eq=False)
class Region:
    """Immutable region record. ``envelope`` always contains every ring coordinate."""

    handle: int
    zone_id: str
    rings: tuple[Ring, ...]
    envelope: Envelope
    shape: BaseGeometry | None = field(default=None, repr=False)
    prepared: PreparedGeometry | None = field(default=None, repr=False)
    defect: str | None = None

    def covers_point(self, point: Point) -> bool:
        """Closed containment test: points on an edge or vertex are inside.

        Raises GeometryDefectError if the rings never formed a usable polygon.
        """
        if self.prepared is None:
            raise GeometryDefectError(self.defect or "region has no exact geometry")
        return self.prepared.covers(point)


def _coord(value, where: str) -> Coord:
    try:
        x, y = float(value[0]), float(value[1])
    except (TypeError, ValueError, IndexError) as e:
        raise RegionLoadError(f"Invalid coordinate {value!r} in {where}: {str_exc(e)}") from e
    if not (math.isfinite(x) and math.isfinite(y)):
        raise RegionLoadError(f"Non-finite coordinate {value!r} in {where}")
    return x, y


def _ring(values, where: str) -> Ring:
    if isinstance(values, (str, bytes)):
        raise RegionLoadError(f"Invalid ring {values!r} in {where}")
    try:
        return tuple(_coord(value, where) for value in values)
    except TypeError as e:
        raise RegionLoadError(f"Invalid ring {values!r} in {where}: {str_exc(e)}") from e


def _polygon_rings(polygon: Polygon) -> list[Ring]:
    rings = [_ring(polygon.exterior.coords, "polygon exterior")]
    rings.extend(_ring(interior.coords, "polygon interior") for interior in polygon.interiors)
    return rings


def _rings_of_shapely(geom: BaseGeometry) -> list[Ring]:
    if isinstance(geom, Polygon):
        return [] if geom.is_empty else _polygon_rings(geom)
    if isinstance(geom, MultiPolygon):
        return [ring for part in geom.geoms for ring in _polygon_rings(part)]
    raise RegionLoadError(f"Unsupported geometry type {geom.geom_type!r}, expected Polygon or MultiPolygon")


def _rings_of_geojson(geometry: Mapping) -> list[Ring]:
    geom_type = geometry.get("type")
    coords = geometry.get("coordinates")
    if coords is None:
        raise RegionLoadError(f"GeoJSON geometry without coordinates: type={geom_type!r}")
    if geom_type == "Polygon":
        return [_ring(ring, "GeoJSON Polygon") for ring in coords]
    if geom_type == "MultiPolygon":
        return [_ring(ring, "GeoJSON MultiPolygon") for part in coords for ring in part]
    raise RegionLoadError(f"Unsupported GeoJSON geometry type {geom_type!r}, expected Polygon or MultiPolygon")


def _even_odd_shape(rings: t.Sequence[Ring]) -> BaseGeometry:
    """Combine bare rings under the even-odd rule (holes cut, disjoint parts added)."""
    polygons = [Polygon(ring) for ring in _check_rings(rings)]
    if len(polygons) == 1:
        return polygons[0]
    return reduce(lambda acc, poly: acc.symmetric_difference(poly), polygons)


def _check_rings(rings: t.Sequence[Ring]) -> t.Sequence[Ring]:
    for i, ring in enumerate(rings):
        if len(set(ring)) < 3:
            raise GeometryDefectError(f"ring {i} has fewer than 3 distinct points")
    return rings


def _check_shape(geom: BaseGeometry, rings: t.Sequence[Ring]) -> BaseGeometry:
    _check_rings(rings)
    return geom


def normalize_geometry(geometry) -> tuple[tuple[Ring, ...], t.Callable[[], BaseGeometry]]:
    """Split accepted geometry input into its rings and a deferred exact-shape builder.

    Accepted inputs: a shapely Polygon/MultiPolygon, a GeoJSON geometry mapping,
    or a sequence of coordinate rings.
    """
    if isinstance(geometry, BaseGeometry):
        rings = _rings_of_shapely(geometry)
        return tuple(rings), lambda: _check_shape(geometry, rings)
    if isinstance(geometry, Mapping):
        try:
            rings = _rings_of_geojson(geometry)
        except TypeError as e:
            raise RegionLoadError(f"Malformed GeoJSON coordinates: {str_exc(e)}") from e
        return tuple(rings), lambda: _check_shape(shape(geometry), rings)
    if geometry is None or isinstance(geometry, (str, bytes)):
        raise RegionLoadError(f"Invalid geometry {geometry!r}")
    try:
        rings = [_ring(ring, "ring sequence") for ring in geometry]
    except TypeError as e:
        raise RegionLoadError(f"Invalid geometry {geometry!r}: {str_exc(e)}") from e
    return tuple(rings), lambda: _even_odd_shape(rings)


class RegionStore:
    """Owner of all regions; handles are dense indices in insertion order."""

    def __init__(self):
        self._regions: list[Region] = []
        self._frozen = False

    @classmethod
    def from_pairs(cls, pairs: t.Iterable[tuple[t.Any, str | None]], on_error: str = "raise") -> "RegionStore":
        """Admit every ``(geometry, zone_id)`` pair.

        ``on_error="raise"`` propagates the first RegionLoadError, ``"skip"`` logs and
        continues with the next pair.
        """
        if on_error not in ON_ERROR_CHOICES:
            raise ValueError(f"on_error must be one of {ON_ERROR_CHOICES}, got {on_error!r}")
        store = cls()
        skipped = 0
        for i, (geometry, zone_id) in enumerate(pairs):
            try:
                store.add(geometry, zone_id)
            except RegionLoadError as e:
                if on_error == "raise":
                    raise RegionLoadError(f"Region #{i} ({zone_id!r}) rejected: {e}") from e
                skipped += 1
                logger.warning("Skipping region #%d (%r): %s", i, zone_id, e)
        if skipped:
            logger.warning("Skipped %d of %d regions", skipped, skipped + len(store))
        return store

    def add(self, geometry, zone_id: str | None) -> int:
        """Admit one region and return its handle.

        Raises RegionLoadError for a missing zone id or a geometry without a valid
        envelope. Rings that cannot form a polygon are admitted with ``defect`` set.
        """
        if self._frozen:
            raise StoreFrozenError("Region store is frozen; build a new store to change regions")
        if not isinstance(zone_id, str) or not zone_id.strip():
            raise RegionLoadError(f"Missing zone id: {zone_id!r}")

        rings, build_shape = normalize_geometry(geometry)
        envelope = Envelope.of_points(coord for ring in rings for coord in ring)
        if envelope is None:
            raise RegionLoadError(f"Geometry for {zone_id!r} has no coordinates")
        if not envelope.is_valid:
            raise RegionLoadError(f"Malformed envelope for {zone_id!r}: {envelope}")

        exact = prepared = defect = None
        try:
            exact = build_shape()
            prepared = prep(exact)
        except (GeometryDefectError, GEOSException, ValueError) as e:
            defect = str_exc(e)
            logger.warning("Region %r has defective geometry: %s", zone_id, defect)

        handle = len(self._regions)
        self._regions.append(
            Region(
                handle=handle,
                zone_id=zone_id,
                rings=rings,
                envelope=envelope,
                shape=exact,
                prepared=prepared,
                defect=defect,
            )
        )
        return handle

    def get(self, handle: int) -> Region:
        if not 0 <= handle < len(self._regions):
            raise KeyError(f"Unknown region handle {handle!r}")
        return self._regions[handle]

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def envelopes(self) -> list[tuple[Envelope, int]]:
        return [(region.envelope, region.handle) for region in self._regions]

    def defective(self) -> list[Region]:
        return [region for region in self._regions if region.defect is not None]

    def zone_ids(self) -> set[str]:
        return {region.zone_id for region in self._regions}

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self) -> t.Iterator[Region]:
        return iter(self._regions)
