"""On-wire layout of an LRS payload, format version 1.

All integers are little-endian, all offsets absolute from the start of the
buffer.  A property-list offset of 0 means "no properties" (offset 0 is
inside the header, so it can never point at real data).

::

    header        32 bytes  magic, version, flags, table offsets, total size
    curve table   8 bytes   per curve:  points offset, point count
    LRM table     20 bytes  per LRM:    id, curve index, anchor count,
                                        anchors offset, properties offset
    anchors       24 bytes  per anchor: name, properties offset,
                                        curve position (f64), scale position (f64)
    points        16 bytes  per point:  x (f64), y (f64)
    heap                    strings (u32 length + UTF-8) and property lists
                            (u32 count + count * (key offset, value offset))
"""

from __future__ import annotations

import struct

MAGIC = b"LRSB"
FORMAT_VERSION = 1

# ---------------------------------------------------------------------------
# Header (32 bytes)
# ---------------------------------------------------------------------------

# magic, version, flags (reserved), curve count, curve table offset,
# LRM count, LRM table offset, metadata property list offset, total size
HEADER = struct.Struct("<4sHHIIIIII")
HEADER_SIZE = HEADER.size

# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

CURVE_ENTRY = struct.Struct("<II")        # points offset, point count
LRM_ENTRY = struct.Struct("<IIIII")       # id, curve index, anchor count, anchors, properties
ANCHOR_RECORD = struct.Struct("<IIdd")    # name, properties, curve pos, scale pos
POINT = struct.Struct("<dd")              # x, y
U32 = struct.Struct("<I")
PROPERTY_ENTRY = struct.Struct("<II")     # key offset, value offset

NO_PROPERTIES = 0
