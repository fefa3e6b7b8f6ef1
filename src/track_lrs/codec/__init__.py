"""Binary LRS payload format: zero-copy reader and builder.

Public API
----------
LrsBuilder   - assembles curves, LRMs and anchors into a payload
decode       - validates a payload and returns its curves, views and scales
LrmView      - lazy, read-only view of one LRM in a payload
AnchorView   - lazy, read-only view of one anchor in a payload
FORMAT_VERSION - version written and accepted by this package
"""

from track_lrs.codec.format import FORMAT_VERSION, MAGIC
from track_lrs.codec.reader import AnchorView, DecodedPayload, LrmView, as_byte_view, decode
from track_lrs.codec.writer import LrsBuilder

__all__ = [
    "FORMAT_VERSION",
    "MAGIC",
    "AnchorView",
    "DecodedPayload",
    "LrmView",
    "LrsBuilder",
    "as_byte_view",
    "decode",
]
