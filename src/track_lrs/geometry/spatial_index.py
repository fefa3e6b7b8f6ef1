"""Uniform grid over curve segments for nearest-segment queries.

Each segment is registered in every grid cell its bounding box touches.  A
query visits only the cells overlapping the search disk and keeps the
segments whose bounding box intersects that disk.  Segments whose box would
span too many cells are kept in a short side list and tested on every query
instead of being smeared across the grid.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from track_lrs.geometry.models import BoundingBox

# A segment touching more cells than this lives in the side list.
_MAX_CELLS_PER_SEGMENT = 64

# Slack added to the search radius so that float rounding in the box test
# never drops a segment that the exact distance would keep.
_RADIUS_EPS = 1e-9


class SegmentGrid:
    """Spatial index over the segment bounding boxes of one curve.

    Args:
        boxes: One bounding box per segment, in segment order.  Segment ids
            are the positions in this sequence.
        cell_size: Grid cell size.  Defaults to the mean segment extent.

    Raises:
        ValueError: If *boxes* is empty.
    """

    def __init__(self, boxes: Sequence[BoundingBox], cell_size: float | None = None) -> None:
        if not boxes:
            raise ValueError("SegmentGrid needs at least one segment")
        self._boxes: tuple[BoundingBox, ...] = tuple(boxes)

        bounds = self._boxes[0]
        for box in self._boxes[1:]:
            bounds = bounds.union(box)
        self.bounds = bounds

        if cell_size is None:
            extents = [max(b.width, b.height) for b in self._boxes]
            cell_size = sum(extents) / len(extents)
        if not math.isfinite(cell_size) or cell_size <= 0.0:
            cell_size = max(bounds.width, bounds.height, 1.0)
        self.cell_size = cell_size

        self._nx = int(bounds.width // cell_size) + 1
        self._ny = int(bounds.height // cell_size) + 1
        self._cells: dict[tuple[int, int], list[int]] = {}
        self._oversized: list[int] = []

        for sid, box in enumerate(self._boxes):
            ix0, iy0, ix1, iy1 = self._cell_range(box.min_x, box.min_y, box.max_x, box.max_y)
            if (ix1 - ix0 + 1) * (iy1 - iy0 + 1) > _MAX_CELLS_PER_SEGMENT:
                self._oversized.append(sid)
                continue
            for ix in range(ix0, ix1 + 1):
                for iy in range(iy0, iy1 + 1):
                    self._cells.setdefault((ix, iy), []).append(sid)

    def __len__(self) -> int:
        return len(self._boxes)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def candidates(self, x: float, y: float, radius: float) -> set[int]:
        """Return ids of segments whose bounding box intersects the disk.

        The disk is centred on ``(x, y)`` with the given *radius*.  When the
        disk covers the whole grid every segment is returned without
        visiting cells.
        """
        limit = radius + _RADIUS_EPS * max(1.0, radius)
        if self.bounds.farthest_distance_to(x, y) <= limit:
            return set(range(len(self._boxes)))

        found: set[int] = set()
        ix0, iy0, ix1, iy1 = self._cell_range(x - limit, y - limit, x + limit, y + limit)
        for ix in range(ix0, ix1 + 1):
            for iy in range(iy0, iy1 + 1):
                for sid in self._cells.get((ix, iy), ()):
                    if sid not in found and self._boxes[sid].distance_to(x, y) <= limit:
                        found.add(sid)
        for sid in self._oversized:
            if self._boxes[sid].distance_to(x, y) <= limit:
                found.add(sid)
        return found

    def expanding_candidates(self, x: float, y: float) -> tuple[set[int], float]:
        """Return the first non-empty candidate set and the radius that found it.

        The radius starts at one cell and doubles until something is found.
        It always terminates: once the disk covers the grid every segment is
        a candidate.
        """
        radius = self.cell_size
        while True:
            found = self.candidates(x, y, radius)
            if found:
                return found, radius
            radius *= 2.0

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _cell_range(
        self, x0: float, y0: float, x1: float, y1: float
    ) -> tuple[int, int, int, int]:
        """Cell index range covering the rectangle, clamped to the grid."""
        cs = self.cell_size
        ix0 = self._clamp(math.floor((x0 - self.bounds.min_x) / cs), self._nx)
        iy0 = self._clamp(math.floor((y0 - self.bounds.min_y) / cs), self._ny)
        ix1 = self._clamp(math.floor((x1 - self.bounds.min_x) / cs), self._nx)
        iy1 = self._clamp(math.floor((y1 - self.bounds.min_y) / cs), self._ny)
        return ix0, iy0, ix1, iy1

    @staticmethod
    def _clamp(index: int, count: int) -> int:
        return min(max(index, 0), count - 1)
