"""Geometry value types."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Point:
    """A planar coordinate.

    Units are whatever the producer used (typically metres in a projected
    CRS); all lengths and distances are expressed in the same units.
    """

    x: float
    y: float

    def distance_to(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounding box."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def of_segment(cls, a: Point, b: Point) -> BoundingBox:
        return cls(min(a.x, b.x), min(a.y, b.y), max(a.x, b.x), max(a.y, b.y))

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def distance_to(self, x: float, y: float) -> float:
        """Distance from ``(x, y)`` to the box; 0 when inside."""
        dx = max(self.min_x - x, 0.0, x - self.max_x)
        dy = max(self.min_y - y, 0.0, y - self.max_y)
        return math.hypot(dx, dy)

    def farthest_distance_to(self, x: float, y: float) -> float:
        """Distance from ``(x, y)`` to the farthest corner of the box."""
        dx = max(abs(x - self.min_x), abs(x - self.max_x))
        dy = max(abs(y - self.min_y), abs(y - self.max_y))
        return math.hypot(dx, dy)

    def expanded(self, margin: float) -> BoundingBox:
        return BoundingBox(
            self.min_x - margin,
            self.min_y - margin,
            self.max_x + margin,
            self.max_y + margin,
        )

    def union(self, other: BoundingBox) -> BoundingBox:
        return BoundingBox(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )


@dataclass(frozen=True)
class CurveProjection:
    """A point projected onto a curve."""

    curve_position: float
    """Arc length from the curve start to the projected point."""

    distance: float
    """Euclidean distance between the query point and the projected point."""

    offset: float
    """Signed lateral distance: positive left of the direction of travel."""

    point: Point
    """The projected point on the curve."""
