"""Build-once lookup service with atomic replacement of the region data.

A :class:`LookupService` holds one immutable (store, index, resolver) snapshot.
``reload`` builds a complete new snapshot before publishing it with a single
attribute assignment, so concurrent queries see either the old data or the
new data, never a mix.
"""

import logging
import typing as t
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from tzlocate.config import get_config
from tzlocate.errors import ConfigError
from tzlocate.geo.loaders import iter_geojson_regions
from tzlocate.geo.regions import Region, RegionStore
from tzlocate.geo.resolver import AmbiguityPolicy, Resolution, Resolver
from tzlocate.geo.rtree_index import RtreeIndex
from tzlocate.geo.strtree import DEFAULT_NODE_CAPACITY, STRtree
from tzlocate.utils.fs_utils import project_root

logger = logging.getLogger(__name__)

BACKENDS = {
    "str": STRtree,
    "rtree": RtreeIndex,
}


def build_index(store: RegionStore, backend: str = "str", node_capacity: int = DEFAULT_NODE_CAPACITY):
    """Freeze ``store`` and bulk-load an envelope index over it."""
    try:
        index_cls = BACKENDS[backend]
    except KeyError as e:
        raise ConfigError(f"Unknown index backend {backend!r}, expected one of: {', '.join(BACKENDS)}") from e
    store.freeze()
    return index_cls.build(store.envelopes(), node_capacity=node_capacity)


def build_resolver(
    pairs: t.Iterable[tuple[t.Any, str | None]],
    *,
    backend: str = "str",
    node_capacity: int = DEFAULT_NODE_CAPACITY,
    policy: AmbiguityPolicy | str = AmbiguityPolicy.REPORT,
    on_error: str = "raise",
) -> Resolver:
    """Admit ``(geometry, zone_id)`` pairs, build the index, and return a resolver."""
    store = RegionStore.from_pairs(pairs, on_error=on_error)
    return Resolver(store, build_index(store, backend, node_capacity), policy)


@dataclass(frozen=True)
class Snapshot:
    store: RegionStore
    index: t.Any
    resolver: Resolver


class LookupService:
    """Swappable holder of the current resolver."""

    def __init__(self, resolver: Resolver, **settings):
        """``settings`` are the ``build_resolver`` keywords reused by ``reload``."""
        self._settings = settings
        self._snapshot = Snapshot(resolver.store, resolver.index, resolver)

    @classmethod
    def from_pairs(cls, pairs: t.Iterable[tuple[t.Any, str | None]], **kwargs) -> "LookupService":
        settings = {key: value for key, value in kwargs.items() if key != "policy"}
        return cls(build_resolver(pairs, **kwargs), **settings)

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def resolver(self) -> Resolver:
        return self._snapshot.resolver

    def resolve(self, latitude: float, longitude: float) -> Resolution:
        return self._snapshot.resolver.resolve(latitude, longitude)

    def candidates(self, latitude: float, longitude: float) -> list[Region]:
        return self._snapshot.resolver.candidates(latitude, longitude)

    def reload(self, pairs: t.Iterable[tuple[t.Any, str | None]], **kwargs) -> Snapshot:
        """Build a new snapshot out-of-band and publish it. Returns the previous snapshot.

        Backend, node capacity, error handling and policy carry over from the
        current service unless overridden. A failing build leaves the current
        snapshot in place.
        """
        kwargs = {**self._settings, "policy": self._snapshot.resolver.policy, **kwargs}
        resolver = build_resolver(pairs, **kwargs)
        previous = self._snapshot
        self._settings = {key: value for key, value in kwargs.items() if key != "policy"}
        self._snapshot = Snapshot(resolver.store, resolver.index, resolver)
        logger.info("Reloaded lookup service: %d -> %d regions", len(previous.store), len(resolver.store))
        return previous


def data_path(path: str | Path | None = None) -> Path:
    """Resolve the GeoJSON data path; relative config values are taken from the project root."""
    if path is None:
        path = get_config("data.geojson", None)
        if not path:
            raise ConfigError("No region data configured (data.geojson)")
        path = Path(path)
        return path if path.is_absolute() else Path(project_root(path))
    return Path(path)


def service_from_geojson(
    path: str | Path | None = None,
    *,
    policy: AmbiguityPolicy | str | None = None,
) -> LookupService:
    """Build a service from a GeoJSON file using configured index and load settings."""
    path = data_path(path)
    return LookupService.from_pairs(
        iter_geojson_regions(path, zone_property=get_config("data.zone_property", "tzid")),
        backend=get_config("index.backend", "str"),
        node_capacity=int(get_config("index.node_capacity", DEFAULT_NODE_CAPACITY)),
        policy=policy if policy is not None else get_config("resolver.ambiguity", AmbiguityPolicy.REPORT.value),
        on_error=get_config("data.on_error", "raise"),
    )


@lru_cache(maxsize=1)
def default_service() -> LookupService:
    """Process-wide service over the configured data, built on first use."""
    return service_from_geojson()
