"""Envelope index backed by libspatialindex through the ``rtree`` package.

Drop-in alternative to :class:`tzlocate.geo.strtree.STRtree`, selected with
``index.backend: rtree``. Entries are fed through the bulk-loading stream
interface, which packs the tree in one pass.
"""

import logging
import typing as t

from rtree import index

from tzlocate.geo.envelope import Envelope

logger = logging.getLogger(__name__)


class RtreeIndex:
    """Static envelope index with the same query surface as ``STRtree``."""

    def __init__(self, idx: index.Index, size: int):
        self._idx = idx
        self._size = size

    @classmethod
    def build(cls, entries: t.Iterable[tuple[Envelope, int]], node_capacity: int | None = None) -> "RtreeIndex":
        items = []
        seen: set[int] = set()
        for envelope, handle in entries:
            if not envelope.is_valid:
                raise ValueError(f"Malformed envelope for handle {handle!r}: {envelope}")
            if handle in seen:
                raise ValueError(f"Duplicate handle {handle!r}")
            seen.add(handle)
            items.append((handle, envelope.bounds, None))

        props = index.Property()
        if node_capacity is not None:
            props.leaf_capacity = node_capacity
            props.index_capacity = node_capacity
        # libspatialindex rejects an empty bulk-load stream
        idx = index.Index(iter(items), properties=props) if items else index.Index(properties=props)
        logger.debug("Built rtree index: %d entries", len(items))
        return cls(idx, len(items))

    def query(self, x: float, y: float) -> list[int]:
        if not self._size:
            return []
        return list(self._idx.intersection((x, y, x, y)))

    def query_point(self, coordinate: t.Sequence[float]) -> list[int]:
        x, y = coordinate
        return self.query(x, y)

    def query_envelope(self, envelope: Envelope) -> list[int]:
        if not self._size:
            return []
        return list(self._idx.intersection(envelope.bounds))

    @property
    def envelope(self) -> Envelope | None:
        return Envelope.of_bounds(self._idx.bounds) if self._size else None

    def __len__(self) -> int:
        return self._size
