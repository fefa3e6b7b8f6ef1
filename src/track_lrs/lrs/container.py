"""Lrs: every LRM and curve of one payload, and the public query surface.

An :class:`Lrs` is built once by :func:`load` and never mutated, so it can be
shared between threads without locking.  Curves live in an arena indexed by
integer; each LRM refers to its curve by index, and several LRMs may share
one curve.

Boundary policy: measures that resolve outside ``[0, length]`` raise
:class:`~track_lrs.errors.OutOfRange`.  Nothing is clamped silently.
"""

from __future__ import annotations

from track_lrs.codec.reader import AnchorView, DecodedPayload, LrmView, as_byte_view, decode
from track_lrs.errors import UnknownLrm
from track_lrs.geometry.curve import Curve, PointLike, as_point
from track_lrs.geometry.models import Point
from track_lrs.lrs.models import Projection
from track_lrs.scale.mapping import LrmScale
from track_lrs.scale.models import LrmScaleMeasure


def load(data: object, copy: bool = False) -> Lrs:
    """Parse an LRS payload.

    Parameters
    ----------
    data:
        Any bytes-like object (``bytes``, ``bytearray``, ``memoryview``,
        ``mmap``).  By default the result borrows from it: the buffer stays
        exported for as long as the :class:`Lrs` lives, so resizing a
        ``bytearray`` or closing an ``mmap`` underneath it raises
        ``BufferError``.
    copy:
        Take an owned copy of the payload instead of borrowing.

    Raises
    ------
    MalformedData
        If the payload is not a valid version-1 LRS payload.
    """
    view = as_byte_view(data)
    if copy:
        owned = memoryview(bytes(view))
        view.release()
        view = owned
    return Lrs(decode(view))


class Lrs:
    """A loaded Linear Referencing System.

    Use :func:`load` rather than building one directly.
    """

    def __init__(self, payload: DecodedPayload) -> None:
        self._payload = payload
        self._curves = payload.curves
        self._lrms = payload.lrms
        self._scales = payload.scales
        self._handles: dict[str, int] = {
            scale.lrm_id: i for i, scale in enumerate(self._scales)
        }

    def __repr__(self) -> str:
        return f"Lrs(lrms={len(self._lrms)}, curves={len(self._curves)})"

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def metadata(self) -> dict[str, str]:
        """Payload-level key/value metadata."""
        return self._payload.reader.properties(self._payload.header.metadata, "metadata")

    @property
    def curves(self) -> tuple[Curve, ...]:
        """The curve arena, in payload order."""
        return self._curves

    def lrm_count(self) -> int:
        return len(self._lrms)

    def lrm_ids(self) -> list[str]:
        """LRM ids in payload order."""
        return [scale.lrm_id for scale in self._scales]

    def find_lrm(self, lrm_id: str) -> int | None:
        """Payload index of *lrm_id*, or ``None``."""
        return self._handles.get(lrm_id)

    def lrm(self, lrm_id: str) -> LrmView:
        return self._lrms[self._handle(lrm_id)]

    def scale(self, lrm_id: str) -> LrmScale[AnchorView]:
        return self._scales[self._handle(lrm_id)]

    def curve(self, lrm_id: str) -> Curve:
        return self._curves[self._lrms[self._handle(lrm_id)].curve_index]

    def anchors(self, lrm_id: str) -> tuple[AnchorView, ...]:
        """Anchors of *lrm_id* sorted by curve position."""
        return self.scale(lrm_id).anchors

    def anchor_properties(self, lrm_id: str, anchor_index: int) -> dict[str, str]:
        """Properties of anchor number *anchor_index* of *lrm_id*.

        Raises:
            UnknownLrm: If *lrm_id* is not loaded.
            IndexError: If the LRM has no anchor at that index.
        """
        return self._anchor(lrm_id, anchor_index).properties

    def anchor_point(self, lrm_id: str, anchor_index: int) -> Point:
        """Where anchor number *anchor_index* of *lrm_id* sits on its curve."""
        anchor = self._anchor(lrm_id, anchor_index)
        return self.curve(lrm_id).point_at(anchor.curve_position)

    def lrm_properties(self, lrm_id: str) -> dict[str, str]:
        return self.lrm(lrm_id).properties

    def geometry(self, lrm_id: str) -> list[Point]:
        """Raw vertices of the curve of *lrm_id*, for rendering."""
        return list(self.curve(lrm_id).points)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def lookup(self, point: PointLike, lrm_id: str) -> list[Projection]:
        """Project *point* on the curve of *lrm_id*.

        Returns a list holding exactly one :class:`Projection`.

        Raises:
            UnknownLrm: If *lrm_id* is not loaded.
        """
        return [self._project(self._handle(lrm_id), as_point(point))]

    def lookup_all(
        self, point: PointLike, max_distance: float | None = None
    ) -> list[Projection]:
        """Project *point* on every LRM, nearest first.

        Ties keep payload order.  With *max_distance*, projections farther
        than that are dropped.
        """
        p = as_point(point)
        projections = [self._project(i, p) for i in range(len(self._lrms))]
        if max_distance is not None:
            projections = [pr for pr in projections if pr.distance <= max_distance]
        return sorted(projections, key=lambda pr: pr.distance)

    def resolve(self, lrm_id: str, measure: LrmScaleMeasure) -> Point:
        """Point designated by *measure* on the curve of *lrm_id*.

        Raises:
            UnknownLrm: If *lrm_id* is not loaded.
            UnknownAnchor: If the measure names an anchor the LRM lacks.
            OutOfRange: If the measure falls off the curve.
        """
        handle = self._handle(lrm_id)
        position = self._scales[handle].measure_to_position(measure)
        return self._curves[self._lrms[handle].curve_index].point_at(position)

    def resolve_range(
        self, lrm_id: str, start: LrmScaleMeasure, end: LrmScaleMeasure
    ) -> list[Point]:
        """Polyline between two measures, reversed when *start* lies after *end*.

        Raises:
            UnknownLrm: If *lrm_id* is not loaded.
            UnknownAnchor: If a measure names an anchor the LRM lacks.
            OutOfRange: If either measure falls off the curve.
        """
        handle = self._handle(lrm_id)
        scale = self._scales[handle]
        curve = self._curves[self._lrms[handle].curve_index]
        return curve.sub_curve(
            scale.measure_to_position(start), scale.measure_to_position(end)
        )

    def locate_point(self, lrm_id: str, measure: LrmScaleMeasure) -> float:
        """Normalized position of *measure* along the curve, in ``[0, 1]``.

        Raises:
            OutOfRange: If the measure falls off the curve.
        """
        curve = self.curve(lrm_id)
        position = self.scale(lrm_id).measure_to_position(measure)
        return curve.fraction(position)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _handle(self, lrm_id: str) -> int:
        try:
            return self._handles[lrm_id]
        except KeyError:
            raise UnknownLrm(lrm_id) from None

    def _anchor(self, lrm_id: str, anchor_index: int) -> AnchorView:
        anchors = self.anchors(lrm_id)
        if not 0 <= anchor_index < len(anchors):
            raise IndexError(
                f"LRM {lrm_id!r} has {len(anchors)} anchors, no index {anchor_index}"
            )
        return anchors[anchor_index]

    def _project(self, handle: int, point: Point) -> Projection:
        curve = self._curves[self._lrms[handle].curve_index]
        scale = self._scales[handle]
        hit = curve.project(point)
        return Projection(
            lrm_id=scale.lrm_id,
            point=hit.point,
            measure=scale.position_to_measure(hit.curve_position),
            distance=hit.distance,
            curve_position=hit.curve_position,
            offset=hit.offset,
        )

