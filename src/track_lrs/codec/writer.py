"""LrsBuilder: assembles curves, LRMs and anchors into a version-1 payload.

The builder writes what it is given.  Ordering and range rules are enforced
on the reading side by :func:`track_lrs.load`, which is the single validator
of the format; the builder only rejects references it cannot encode.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from track_lrs.codec.format import (
    ANCHOR_RECORD,
    CURVE_ENTRY,
    FORMAT_VERSION,
    HEADER,
    HEADER_SIZE,
    LRM_ENTRY,
    MAGIC,
    NO_PROPERTIES,
    POINT,
    PROPERTY_ENTRY,
    U32,
)
from track_lrs.geometry.curve import PointLike, as_point
from track_lrs.geometry.models import Point
from track_lrs.scale.models import Anchor


@dataclass
class _PendingLrm:
    lrm_id: str
    curve_index: int
    anchors: list[Anchor]
    properties: dict[str, str] = field(default_factory=dict)


class _Heap:
    """Append-only area for strings and property lists."""

    def __init__(self, base: int) -> None:
        self._base = base
        self._data = bytearray()

    def string(self, value: str) -> int:
        encoded = value.encode("utf-8")
        offset = self._base + len(self._data)
        self._data += U32.pack(len(encoded))
        self._data += encoded
        return offset

    def properties(self, values: Mapping[str, str]) -> int:
        if not values:
            return NO_PROPERTIES
        pairs = [(self.string(str(k)), self.string(str(v))) for k, v in values.items()]
        offset = self._base + len(self._data)
        self._data += U32.pack(len(pairs))
        for key_off, value_off in pairs:
            self._data += PROPERTY_ENTRY.pack(key_off, value_off)
        return offset

    def getvalue(self) -> bytes:
        return bytes(self._data)


class LrsBuilder:
    """Build an LRS payload in memory.

    Example::

        builder = LrsBuilder()
        curve = builder.add_curve([(0, 0), (0, 10), (0, 20)])
        builder.add_lrm("line-1", curve, [Anchor("A", 0, 0), Anchor("B", 20, 2000)])
        payload = builder.to_bytes()
    """

    def __init__(self) -> None:
        self._curves: list[list[Point]] = []
        self._lrms: list[_PendingLrm] = []
        self._metadata: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def add_curve(self, points: Iterable[PointLike]) -> int:
        """Register a curve and return its index in the curve arena."""
        self._curves.append([as_point(p) for p in points])
        return len(self._curves) - 1

    def add_lrm(
        self,
        lrm_id: str,
        curve_index: int,
        anchors: Iterable[Anchor],
        properties: Mapping[str, str] | None = None,
    ) -> int:
        """Register an LRM over curve *curve_index* and return its index.

        Raises:
            IndexError: If *curve_index* does not name a registered curve.
        """
        if not 0 <= curve_index < len(self._curves):
            raise IndexError(
                f"Curve index {curve_index} out of range ({len(self._curves)} curves)"
            )
        self._lrms.append(
            _PendingLrm(lrm_id, curve_index, list(anchors), dict(properties or {}))
        )
        return len(self._lrms) - 1

    def set_metadata(self, key: str, value: str) -> None:
        self._metadata[key] = value

    def to_bytes(self) -> bytes:
        """Serialize everything registered so far."""
        curve_table = HEADER_SIZE
        lrm_table = curve_table + len(self._curves) * CURVE_ENTRY.size
        anchors_start = lrm_table + len(self._lrms) * LRM_ENTRY.size
        anchor_count = sum(len(lrm.anchors) for lrm in self._lrms)
        points_start = anchors_start + anchor_count * ANCHOR_RECORD.size
        heap = _Heap(points_start + sum(len(c) for c in self._curves) * POINT.size)

        curve_entries = bytearray()
        points = bytearray()
        for curve in self._curves:
            curve_entries += CURVE_ENTRY.pack(points_start + len(points), len(curve))
            for p in curve:
                points += POINT.pack(p.x, p.y)

        lrm_entries = bytearray()
        anchor_records = bytearray()
        for lrm in self._lrms:
            lrm_entries += LRM_ENTRY.pack(
                heap.string(lrm.lrm_id),
                lrm.curve_index,
                len(lrm.anchors),
                anchors_start + len(anchor_records),
                heap.properties(lrm.properties),
            )
            for anchor in lrm.anchors:
                anchor_records += ANCHOR_RECORD.pack(
                    heap.string(anchor.name),
                    heap.properties(anchor.properties),
                    float(anchor.curve_position),
                    float(anchor.scale_position),
                )

        metadata = heap.properties(self._metadata)
        body = bytes(curve_entries + lrm_entries + anchor_records + points) + heap.getvalue()
        total = HEADER_SIZE + len(body)
        header = HEADER.pack(
            MAGIC,
            FORMAT_VERSION,
            0,
            len(self._curves),
            curve_table,
            len(self._lrms),
            lrm_table,
            metadata,
            total,
        )
        return header + body
