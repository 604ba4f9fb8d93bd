"""Axis-aligned bounding boxes.

Coordinates follow GeoJSON order: ``x`` is longitude, ``y`` is latitude.
"""

import math
import typing as t
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Envelope:
    """Closed axis-aligned box ``[min_x, max_x] x [min_y, max_y]``."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def of_point(cls, x: float, y: float) -> "Envelope":
        return cls(x, y, x, y)

    @classmethod
    def of_points(cls, points: t.Iterable[tuple[float, float]]) -> "Envelope | None":
        """Return the envelope of ``points``, or None if there are none."""
        min_x = min_y = math.inf
        max_x = max_y = -math.inf
        seen = False
        for x, y in points:
            seen = True
            if x < min_x:
                min_x = x
            if x > max_x:
                max_x = x
            if y < min_y:
                min_y = y
            if y > max_y:
                max_y = y
        return cls(min_x, min_y, max_x, max_y) if seen else None

    @classmethod
    def of_bounds(cls, bounds: t.Sequence[float]) -> "Envelope":
        """Build from a shapely/rtree style ``(minx, miny, maxx, maxy)`` tuple."""
        min_x, min_y, max_x, max_y = bounds
        return cls(float(min_x), float(min_y), float(max_x), float(max_y))

    @classmethod
    def union_all(cls, envelopes: t.Iterable["Envelope"]) -> "Envelope":
        it = iter(envelopes)
        first = next(it)
        min_x, min_y, max_x, max_y = first.min_x, first.min_y, first.max_x, first.max_y
        for env in it:
            min_x = min(min_x, env.min_x)
            min_y = min(min_y, env.min_y)
            max_x = max(max_x, env.max_x)
            max_y = max(max_y, env.max_y)
        return cls(min_x, min_y, max_x, max_y)

    @property
    def is_valid(self) -> bool:
        """True if all bounds are finite and ``min <= max`` on both axes."""
        finite = all(math.isfinite(v) for v in self.bounds)
        return finite and self.min_x <= self.max_x and self.min_y <= self.max_y

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)

    @property
    def center(self) -> tuple[float, float]:
        return ((self.min_x + self.max_x) / 2.0, (self.min_y + self.max_y) / 2.0)

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def area(self) -> float:
        return self.width * self.height

    def contains_point(self, x: float, y: float) -> bool:
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def contains(self, other: "Envelope") -> bool:
        return (
            self.min_x <= other.min_x
            and other.max_x <= self.max_x
            and self.min_y <= other.min_y
            and other.max_y <= self.max_y
        )

    def intersects(self, other: "Envelope") -> bool:
        return not (
            other.min_x > self.max_x or other.max_x < self.min_x or other.min_y > self.max_y or other.max_y < self.min_y
        )

    def union(self, other: "Envelope") -> "Envelope":
        return Envelope(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )
