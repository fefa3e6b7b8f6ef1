"""Linear referencing for railway and road tracks.

Public API
----------
load            - parse a binary LRS payload into an :class:`Lrs`
Lrs             - lookup / resolve / resolve_range and read-only accessors
LrsBuilder      - write a binary LRS payload
Anchor          - named reference point of a scale
LrmScaleMeasure - anchor-relative measure such as ``"10+120"``
Point           - planar coordinate
Projection      - result of a lookup
"""

from track_lrs.codec.writer import LrsBuilder
from track_lrs.errors import LrsError, MalformedData, OutOfRange, UnknownAnchor, UnknownLrm
from track_lrs.geometry.models import Point
from track_lrs.lrs.container import Lrs, load
from track_lrs.lrs.models import Projection
from track_lrs.scale.models import Anchor, LrmScaleMeasure

__version__ = "0.1.0"

__all__ = [
    "Anchor",
    "LrmScaleMeasure",
    "Lrs",
    "LrsBuilder",
    "LrsError",
    "MalformedData",
    "OutOfRange",
    "Point",
    "Projection",
    "UnknownAnchor",
    "UnknownLrm",
    "load",
]
