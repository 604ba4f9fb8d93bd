"""Resolve a coordinate to the timezone region(s) whose polygon contains it.

Two stages: the envelope index proposes candidates, then each candidate's
exact geometry is tested with closed containment (edges and vertices count as
inside). Several matching zones are reported as :class:`Ambiguous` by default
instead of silently keeping the first one seen.
"""

import enum
import logging
import math
import typing as t
from dataclasses import dataclass, field

from shapely.errors import GEOSException
from shapely.geometry import Point

from tzlocate.errors import AmbiguousMatchError, ConfigError, GeometryDefectError
from tzlocate.geo.regions import Region, RegionStore
from tzlocate.utils.trace_utils import str_exc

logger = logging.getLogger(__name__)


class AmbiguityPolicy(enum.Enum):
    """What to do when more than one zone's polygon contains the point."""

    REPORT = "report"
    FIRST = "first"
    RAISE = "raise"

    @classmethod
    def parse(cls, value: "AmbiguityPolicy | str") -> "AmbiguityPolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as e:
            choices = ", ".join(p.value for p in cls)
            raise ConfigError(f"Unknown ambiguity policy {value!r}, expected one of: {choices}") from e


@dataclass(frozen=True)
class ContainmentFault:
    """A candidate whose exact containment test could not be evaluated."""

    handle: int
    zone_id: str
    reason: str


@dataclass(frozen=True)
class Resolution:
    """Base class of resolution outcomes. ``faults`` is not part of equality."""

    faults: tuple[ContainmentFault, ...] = field(default=(), compare=False, kw_only=True)

    @property
    def zone_ids(self) -> frozenset[str]:
        return frozenset()

    @property
    def is_match(self) -> bool:
        return bool(self.zone_ids)


@dataclass(frozen=True)
class Zone(Resolution):
    zone_id: str

    @property
    def zone_ids(self) -> frozenset[str]:
        return frozenset((self.zone_id,))


@dataclass(frozen=True)
class Ambiguous(Resolution):
    ids: frozenset[str]

    def __post_init__(self):
        object.__setattr__(self, "ids", frozenset(self.ids))

    @property
    def zone_ids(self) -> frozenset[str]:
        return self.ids


@dataclass(frozen=True)
class NoMatch(Resolution):
    pass


class SpatialIndex(t.Protocol):
    def query(self, x: float, y: float) -> list[int]: ...


class Resolver:
    """Read-only query object over a frozen store and an index built from it."""

    def __init__(
        self,
        store: RegionStore,
        index: SpatialIndex,
        policy: AmbiguityPolicy | str = AmbiguityPolicy.REPORT,
    ):
        self.store = store
        self.index = index
        self.policy = AmbiguityPolicy.parse(policy)
        store.freeze()

    def resolve(self, latitude: float, longitude: float) -> Resolution:
        """Resolve a (latitude, longitude) pair; polygons are stored as (lon, lat)."""
        return self.resolve_xy(longitude, latitude)

    def candidates(self, latitude: float, longitude: float) -> list[Region]:
        """Regions whose envelope contains the point, in handle order (envelope stage only)."""
        x, y = _checked(longitude, latitude)
        return [self.store.get(handle) for handle in sorted(self.index.query(x, y))]

    def resolve_xy(self, x: float, y: float) -> Resolution:
        x, y = _checked(x, y)
        handles = sorted(self.index.query(x, y))
        logger.debug("(%s, %s): %d candidate(s)", x, y, len(handles))
        if not handles:
            return NoMatch()

        point = Point(x, y)
        matches: list[Region] = []
        faults: list[ContainmentFault] = []
        for handle in handles:
            region = self.store.get(handle)
            reason = region.defect
            if reason is None:
                try:
                    if region.covers_point(point):
                        matches.append(region)
                    continue
                except (GeometryDefectError, GEOSException, ValueError) as e:
                    reason = str_exc(e)
            logger.warning("Skipping candidate %d (%s) at (%s, %s): %s", handle, region.zone_id, x, y, reason)
            faults.append(ContainmentFault(handle, region.zone_id, reason))
        return self._decide(matches, tuple(faults), x, y)

    def _decide(self, matches: list[Region], faults: tuple[ContainmentFault, ...], x: float, y: float) -> Resolution:
        if not matches:
            return NoMatch(faults=faults)
        zone_ids = {region.zone_id for region in matches}
        if len(zone_ids) == 1:
            return Zone(matches[0].zone_id, faults=faults)
        if self.policy is AmbiguityPolicy.FIRST:
            return Zone(matches[0].zone_id, faults=faults)
        if self.policy is AmbiguityPolicy.RAISE:
            raise AmbiguousMatchError(zone_ids, x, y)
        return Ambiguous(frozenset(zone_ids), faults=faults)


def _checked(x: float, y: float) -> tuple[float, float]:
    x, y = float(x), float(y)
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ValueError(f"Query coordinate must be finite, got ({x}, {y})")
    return x, y
