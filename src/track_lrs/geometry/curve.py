"""Polyline curves parameterized by arc length.

A curve position is the distance travelled along the polyline from its first
vertex, in ``[0, length]``.  Positions are never clamped silently: anything
outside the range raises :class:`~track_lrs.errors.OutOfRange`, except for a
relative float tolerance at both ends which snaps to the end point.
"""

from __future__ import annotations

import bisect
import math
from collections.abc import Iterable, Sequence

from track_lrs.errors import OutOfRange
from track_lrs.geometry.models import BoundingBox, CurveProjection, Point
from track_lrs.geometry.spatial_index import SegmentGrid

_POSITION_TOLERANCE = 1e-9

PointLike = Point | Sequence[float]


def as_point(value: PointLike) -> Point:
    """Coerce a :class:`Point` or an ``(x, y)`` pair to :class:`Point`."""
    if isinstance(value, Point):
        return value
    x, y = value
    return Point(float(x), float(y))


def _cross(ax: float, ay: float, bx: float, by: float) -> float:
    return ax * by - ay * bx


def _project_on_segment(
    px: float, py: float, a: Point, b: Point
) -> tuple[float, float, float]:
    """Clamped perpendicular foot of ``(px, py)`` on segment *a*-*b*.

    Returns ``(t, qx, qy)`` where ``t`` in ``[0, 1]`` is the fraction along
    the segment and ``(qx, qy)`` the foot.
    """
    vx, vy = b.x - a.x, b.y - a.y
    vv = vx * vx + vy * vy
    if vv <= 0.0:
        return 0.0, a.x, a.y
    t = ((px - a.x) * vx + (py - a.y) * vy) / vv
    if t <= 0.0:
        return 0.0, a.x, a.y
    if t >= 1.0:
        return 1.0, b.x, b.y
    return t, a.x + vx * t, a.y + vy * t


class Curve:
    """An immutable polyline with arc-length parameterization.

    Length and cumulative vertex distances are computed once.  The spatial
    index used by :meth:`project` is built at construction as well, so a
    curve can be shared read-only between any number of threads.

    Args:
        points: At least two vertices, not all identical.  Consecutive
            duplicates are allowed and form zero-length segments.
        cell_size: Optional grid cell size for the spatial index.

    Raises:
        ValueError: If the geometry is invalid or a coordinate is not finite.
    """

    def __init__(self, points: Iterable[PointLike], cell_size: float | None = None) -> None:
        pts = tuple(as_point(p) for p in points)
        if len(pts) < 2:
            raise ValueError("A curve needs at least two points")
        for p in pts:
            if not (math.isfinite(p.x) and math.isfinite(p.y)):
                raise ValueError(f"Curve coordinates must be finite, got {p}")
        if all(p == pts[0] for p in pts[1:]):
            raise ValueError("A curve needs at least two distinct points")

        cumulative = [0.0]
        for a, b in zip(pts, pts[1:]):
            cumulative.append(cumulative[-1] + a.distance_to(b))

        self._points = pts
        self._cumulative: tuple[float, ...] = tuple(cumulative)
        self._length = cumulative[-1]
        self._tolerance = _POSITION_TOLERANCE * max(1.0, self._length)
        self._index = SegmentGrid(
            [BoundingBox.of_segment(a, b) for a, b in zip(pts, pts[1:])],
            cell_size=cell_size,
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def length(self) -> float:
        """Total Euclidean arc length."""
        return self._length

    @property
    def points(self) -> tuple[Point, ...]:
        """The original vertices."""
        return self._points

    @property
    def segment_count(self) -> int:
        return len(self._points) - 1

    def vertex_position(self, index: int) -> float:
        """Curve position of vertex *index*."""
        return self._cumulative[index]

    def bbox(self, margin: float = 0.0) -> BoundingBox:
        """Bounding box of the curve, grown by *margin* on every side."""
        return self._index.bounds.expanded(margin)

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        return f"Curve(points={len(self._points)}, length={self._length:.3f})"

    # ------------------------------------------------------------------
    # Position -> geometry
    # ------------------------------------------------------------------

    def point_at(self, curve_position: float) -> Point:
        """Return the point at *curve_position* by linear interpolation.

        Raises:
            OutOfRange: If the position lies outside ``[0, length]``.
        """
        pos = self._checked(curve_position)
        if pos >= self._length:
            return self._points[-1]
        i = bisect.bisect_right(self._cumulative, pos) - 1
        a, b = self._points[i], self._points[i + 1]
        t = (pos - self._cumulative[i]) / (self._cumulative[i + 1] - self._cumulative[i])
        if t == 0.0:
            return a
        return Point(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)

    def fraction(self, curve_position: float) -> float:
        """*curve_position* as a fraction of the length, in ``[0, 1]``.

        Raises:
            OutOfRange: If the position lies outside ``[0, length]``.
        """
        return self._checked(curve_position) / self._length

    def sub_curve(self, start: float, end: float) -> list[Point]:
        """Return the polyline between two curve positions.

        The result starts and ends with the interpolated points at *start* and
        *end* and contains every original vertex strictly between them.  When
        ``start > end`` the same path is returned in reverse order.

        Raises:
            OutOfRange: If either position lies outside ``[0, length]``.
        """
        if start > end:
            return list(reversed(self.sub_curve(end, start)))
        lo = self._checked(start)
        hi = self._checked(end)
        first = bisect.bisect_right(self._cumulative, lo)
        last = bisect.bisect_left(self._cumulative, hi)
        return [self.point_at(lo), *self._points[first:last], self.point_at(hi)]

    def normal(self, curve_position: float) -> tuple[Point, Point]:
        """Unit normal at *curve_position*, pointing left of the direction of travel.

        Returns ``(start, end)`` where ``start`` lies on the curve.

        Raises:
            OutOfRange: If the position lies outside ``[0, length]``.
        """
        pos = self._checked(curve_position)
        a, b = self._segment_at(pos)
        seg_len = a.distance_to(b)
        nx, ny = -(b.y - a.y) / seg_len, (b.x - a.x) / seg_len
        start = self.point_at(pos)
        return start, Point(start.x + nx, start.y + ny)

    # ------------------------------------------------------------------
    # Geometry -> position
    # ------------------------------------------------------------------

    def project(self, point: PointLike) -> CurveProjection:
        """Project *point* onto the nearest location of the curve.

        Candidate segments come from the spatial index; the result is the
        same as :meth:`project_full_scan`.  Ties on distance go to the
        smaller curve position.

        Raises:
            ValueError: If the point has non-finite coordinates.
        """
        p = self._finite(point)
        found, radius = self._index.expanding_candidates(p.x, p.y)
        best = self._nearest(p, sorted(found))
        if best.distance > radius:
            best = self._nearest(p, sorted(self._index.candidates(p.x, p.y, best.distance)))
        return best

    def project_full_scan(self, point: PointLike) -> CurveProjection:
        """Reference projection over every segment, without the index."""
        p = self._finite(point)
        return self._nearest(p, range(self.segment_count))

    def signed_offset(self, point: PointLike, curve_position: float) -> float:
        """Lateral distance from the curve at *curve_position* to *point*.

        Positive on the left of the direction of travel, negative on the right.
        """
        p = as_point(point)
        pos = self._checked(curve_position)
        a, b = self._segment_at(pos)
        q = self.point_at(pos)
        side = _cross(b.x - a.x, b.y - a.y, p.x - q.x, p.y - q.y)
        return math.copysign(p.distance_to(q), side) if side else 0.0

    def intersect_segment(self, start: PointLike, end: PointLike) -> Point | None:
        """First point, in curve order, where segment *start*-*end* crosses the curve.

        Collinear overlaps are ignored.  Returns ``None`` when nothing crosses.
        """
        s, e = as_point(start), as_point(end)
        rx, ry = e.x - s.x, e.y - s.y
        for a, b in zip(self._points, self._points[1:]):
            qx, qy = b.x - a.x, b.y - a.y
            denom = _cross(rx, ry, qx, qy)
            if denom == 0.0:
                continue
            wx, wy = a.x - s.x, a.y - s.y
            t = _cross(wx, wy, qx, qy) / denom
            u = _cross(wx, wy, rx, ry) / denom
            if 0.0 <= t <= 1.0 and 0.0 <= u <= 1.0:
                return Point(a.x + qx * u, a.y + qy * u)
        return None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _checked(self, curve_position: float) -> float:
        pos = float(curve_position)
        if math.isnan(pos):
            raise OutOfRange(pos, 0.0, self._length)
        if pos < 0.0:
            if pos < -self._tolerance:
                raise OutOfRange(pos, 0.0, self._length)
            return 0.0
        if pos > self._length:
            if pos > self._length + self._tolerance:
                raise OutOfRange(pos, 0.0, self._length)
            return self._length
        return pos

    def _segment_at(self, pos: float) -> tuple[Point, Point]:
        """Non-degenerate segment containing *pos* (the last one at the end)."""
        i = bisect.bisect_right(self._cumulative, pos) - 1
        i = min(i, self.segment_count - 1)
        while i > 0 and self._cumulative[i + 1] == self._cumulative[i]:
            i -= 1
        while self._cumulative[i + 1] == self._cumulative[i]:
            i += 1
        return self._points[i], self._points[i + 1]

    @staticmethod
    def _finite(point: PointLike) -> Point:
        p = as_point(point)
        if not (math.isfinite(p.x) and math.isfinite(p.y)):
            raise ValueError(f"Query point must be finite, got {p}")
        return p

    def _nearest(self, p: Point, segment_ids: Iterable[int]) -> CurveProjection:
        best: tuple[float, float] | None = None
        best_sid = 0
        best_foot = (0.0, 0.0)
        for sid in segment_ids:
            a, b = self._points[sid], self._points[sid + 1]
            t, qx, qy = _project_on_segment(p.x, p.y, a, b)
            dist = math.hypot(p.x - qx, p.y - qy)
            pos = self._cumulative[sid] + t * (self._cumulative[sid + 1] - self._cumulative[sid])
            if best is None or (dist, pos) < best:
                best = (dist, pos)
                best_sid = sid
                best_foot = (qx, qy)
        if best is None:
            raise ValueError("No candidate segment to project on")
        dist, pos = best
        a, b = self._points[best_sid], self._points[best_sid + 1]
        side = _cross(b.x - a.x, b.y - a.y, p.x - best_foot[0], p.y - best_foot[1])
        offset = math.copysign(dist, side) if side else 0.0
        return CurveProjection(
            curve_position=pos,
            distance=dist,
            offset=offset,
            point=Point(*best_foot),
        )
