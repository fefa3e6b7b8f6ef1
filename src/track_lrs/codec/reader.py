"""Zero-copy decoding of LRS payloads.

The reader keeps a :class:`memoryview` on the caller's buffer and reads
numbers and strings in place with :func:`struct.unpack_from`.  LRM and anchor
*views* hold nothing but offsets; their fields are decoded on access.

:func:`decode` walks the whole payload once up front so that every offset,
string and ordering constraint is checked before an LRS is handed out.  A
payload that passes :func:`decode` never raises on later view access.
"""

from __future__ import annotations

import math
import struct
from collections.abc import Iterator
from dataclasses import dataclass

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
from track_lrs.errors import MalformedData
from track_lrs.geometry.curve import Curve
from track_lrs.geometry.models import Point
from track_lrs.scale.mapping import LrmScale
from track_lrs.scale.models import Anchor

# ---------------------------------------------------------------------------
# Low-level reads
# ---------------------------------------------------------------------------


class PayloadReader:
    """Bounds-checked reads over a borrowed byte buffer.

    Parameters
    ----------
    buffer:
        A one-dimensional, byte-formatted :class:`memoryview`.
    """

    def __init__(self, buffer: memoryview) -> None:
        self._buf = buffer

    @property
    def buffer(self) -> memoryview:
        return self._buf

    def __len__(self) -> int:
        return len(self._buf)

    def require(self, offset: int, size: int, what: str) -> None:
        """Raise :class:`MalformedData` unless ``[offset, offset + size)`` is in the buffer."""
        if offset < HEADER_SIZE or size < 0 or offset + size > len(self._buf):
            raise MalformedData(
                f"{what} out of bounds: {size} bytes at offset {offset} "
                f"in a {len(self._buf)}-byte payload",
                offset,
            )

    def unpack(self, layout: struct.Struct, offset: int, what: str) -> tuple:
        self.require(offset, layout.size, what)
        return layout.unpack_from(self._buf, offset)

    def string(self, offset: int, what: str = "string") -> str:
        (size,) = self.unpack(U32, offset, what)
        start = offset + U32.size
        self.require(start, size, what)
        try:
            return str(self._buf[start : start + size], "utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedData(f"{what} is not valid UTF-8: {exc.reason}", offset) from exc

    def properties(self, offset: int, what: str = "property list") -> dict[str, str]:
        """Decode a property list into an insertion-ordered dict."""
        if offset == NO_PROPERTIES:
            return {}
        (count,) = self.unpack(U32, offset, what)
        start = offset + U32.size
        self.require(start, count * PROPERTY_ENTRY.size, what)
        result: dict[str, str] = {}
        for i in range(count):
            key_off, value_off = PROPERTY_ENTRY.unpack_from(self._buf, start + i * PROPERTY_ENTRY.size)
            result[self.string(key_off, f"{what} key")] = self.string(value_off, f"{what} value")
        return result

    def points(self, offset: int, count: int) -> Iterator[Point]:
        self.require(offset, count * POINT.size, "curve points")
        for x, y in POINT.iter_unpack(self._buf[offset : offset + count * POINT.size]):
            yield Point(x, y)


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


class AnchorView:
    """Read-only anchor decoded on access from its 24-byte record."""

    __slots__ = ("_reader", "_offset")

    def __init__(self, reader: PayloadReader, offset: int) -> None:
        self._reader = reader
        self._offset = offset

    def _record(self) -> tuple[int, int, float, float]:
        return ANCHOR_RECORD.unpack_from(self._reader.buffer, self._offset)

    @property
    def name(self) -> str:
        return self._reader.string(self._record()[0], "anchor name")

    @property
    def curve_position(self) -> float:
        return self._record()[2]

    @property
    def scale_position(self) -> float:
        return self._record()[3]

    @property
    def properties(self) -> dict[str, str]:
        return self._reader.properties(self._record()[1], "anchor properties")

    def to_anchor(self) -> Anchor:
        """Owned copy, independent of the payload buffer."""
        return Anchor(self.name, self.curve_position, self.scale_position, self.properties)

    def __repr__(self) -> str:
        return (
            f"AnchorView(name={self.name!r}, curve_position={self.curve_position!r}, "
            f"scale_position={self.scale_position!r})"
        )


class LrmView:
    """Read-only LRM decoded on access from its LRM table entry."""

    __slots__ = ("_reader", "_offset")

    def __init__(self, reader: PayloadReader, offset: int) -> None:
        self._reader = reader
        self._offset = offset

    def _entry(self) -> tuple[int, int, int, int, int]:
        return LRM_ENTRY.unpack_from(self._reader.buffer, self._offset)

    @property
    def id(self) -> str:
        return self._reader.string(self._entry()[0], "LRM id")

    @property
    def curve_index(self) -> int:
        return self._entry()[1]

    @property
    def anchor_count(self) -> int:
        return self._entry()[2]

    @property
    def anchors(self) -> tuple[AnchorView, ...]:
        _, _, count, start, _ = self._entry()
        return tuple(
            AnchorView(self._reader, start + i * ANCHOR_RECORD.size) for i in range(count)
        )

    @property
    def properties(self) -> dict[str, str]:
        return self._reader.properties(self._entry()[4], "LRM properties")

    def __repr__(self) -> str:
        return f"LrmView(id={self.id!r}, curve_index={self.curve_index}, anchors={self.anchor_count})"


# ---------------------------------------------------------------------------
# Whole-payload decoding
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Header:
    version: int
    curve_count: int
    curve_table: int
    lrm_count: int
    lrm_table: int
    metadata: int
    total_size: int


@dataclass(frozen=True)
class DecodedPayload:
    """Everything :func:`decode` extracts from one payload."""

    reader: PayloadReader
    header: Header
    curves: tuple[Curve, ...]
    lrms: tuple[LrmView, ...]
    scales: tuple[LrmScale[AnchorView], ...]


def as_byte_view(data: object) -> memoryview:
    """Return a flat unsigned-byte :class:`memoryview` over *data*.

    Raises:
        MalformedData: If *data* does not support the buffer protocol or is
            not contiguous.
    """
    try:
        view = memoryview(data)  # type: ignore[arg-type]
    except TypeError as exc:
        raise MalformedData(f"Payload must be bytes-like, got {type(data).__name__}") from exc
    if view.format != "B" or view.ndim != 1:
        try:
            view = view.cast("B")
        except TypeError as exc:
            raise MalformedData("Payload buffer must be C-contiguous") from exc
    return view


def read_header(reader: PayloadReader) -> Header:
    if len(reader) < HEADER_SIZE:
        raise MalformedData(f"Payload too short for a header: {len(reader)} bytes")
    magic, version, _flags, *rest = HEADER.unpack_from(reader.buffer, 0)
    if magic != MAGIC:
        raise MalformedData(f"Bad magic {magic!r}, expected {MAGIC!r}", 0)
    if version != FORMAT_VERSION:
        raise MalformedData(
            f"Unsupported format version {version}, expected {FORMAT_VERSION}", 4
        )
    header = Header(version, *rest)
    if header.total_size != len(reader):
        raise MalformedData(
            f"Header declares {header.total_size} bytes but payload has {len(reader)}", 28
        )
    return header


def _decode_curve(reader: PayloadReader, header: Header, index: int) -> Curve:
    entry_off = header.curve_table + index * CURVE_ENTRY.size
    points_off, count = reader.unpack(CURVE_ENTRY, entry_off, f"curve {index} entry")
    try:
        return Curve(reader.points(points_off, count))
    except ValueError as exc:
        raise MalformedData(f"Curve {index} is invalid: {exc}", points_off) from exc


def _decode_lrm(
    reader: PayloadReader, header: Header, index: int, curves: tuple[Curve, ...]
) -> tuple[LrmView, LrmScale[AnchorView]]:
    entry_off = header.lrm_table + index * LRM_ENTRY.size
    id_off, curve_index, anchor_count, anchors_off, props_off = reader.unpack(
        LRM_ENTRY, entry_off, f"LRM {index} entry"
    )
    lrm_id = reader.string(id_off, f"LRM {index} id")
    if curve_index >= len(curves):
        raise MalformedData(
            f"LRM {lrm_id!r} references curve {curve_index}, payload has {len(curves)}",
            entry_off,
        )
    curve = curves[curve_index]
    reader.properties(props_off, f"LRM {lrm_id!r} properties")

    if anchor_count:
        reader.require(anchors_off, anchor_count * ANCHOR_RECORD.size, f"LRM {lrm_id!r} anchors")
    view = LrmView(reader, entry_off)
    anchors = view.anchors
    for i, anchor in enumerate(anchors):
        name_off, anchor_props_off, curve_pos, scale_pos = ANCHOR_RECORD.unpack_from(
            reader.buffer, anchors_off + i * ANCHOR_RECORD.size
        )
        reader.string(name_off, f"LRM {lrm_id!r} anchor {i} name")
        reader.properties(anchor_props_off, f"LRM {lrm_id!r} anchor {i} properties")
        if not math.isfinite(scale_pos):
            raise MalformedData(f"LRM {lrm_id!r} anchor {i} has a non-finite scale position")
        if not 0.0 <= curve_pos <= curve.length:
            raise MalformedData(
                f"LRM {lrm_id!r} anchor {anchor.name!r} curve_position {curve_pos!r} "
                f"is outside the curve [0, {curve.length!r}]"
            )

    try:
        scale = LrmScale(lrm_id, anchors)
    except ValueError as exc:
        raise MalformedData(str(exc), anchors_off) from exc
    return view, scale


def decode(buffer: memoryview) -> DecodedPayload:
    """Validate *buffer* and build the curves, LRM views and scales it describes.

    Raises:
        MalformedData: On any structural or semantic violation; nothing is
            returned in that case.
    """
    reader = PayloadReader(buffer)
    header = read_header(reader)

    curves = tuple(_decode_curve(reader, header, i) for i in range(header.curve_count))

    lrms: list[LrmView] = []
    scales: list[LrmScale[AnchorView]] = []
    seen_ids: set[str] = set()
    for i in range(header.lrm_count):
        view, scale = _decode_lrm(reader, header, i, curves)
        if scale.lrm_id in seen_ids:
            raise MalformedData(f"Duplicate LRM id {scale.lrm_id!r}")
        seen_ids.add(scale.lrm_id)
        lrms.append(view)
        scales.append(scale)

    reader.properties(header.metadata, "metadata")
    return DecodedPayload(reader, header, curves, tuple(lrms), tuple(scales))
