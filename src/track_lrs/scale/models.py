"""Scale data structures: anchors and anchor-relative measures."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

_MEASURE_RE = re.compile(r"^(?P<anchor>.+?)(?P<sign>[+-])(?P<offset>\d+(?:\.\d*)?)$")


class AnchorLike(Protocol):
    """Anything exposing the three anchor fields the scale mapping needs."""

    @property
    def name(self) -> str: ...

    @property
    def curve_position(self) -> float: ...

    @property
    def scale_position(self) -> float: ...


@dataclass(frozen=True)
class Anchor:
    """A named reference point tying a curve position to a scale position."""

    name: str
    """Unique within its LRM (e.g. a kilometre post label such as ``"10"``)."""

    curve_position: float
    """Arc length along the curve, in ``[0, length]``."""

    scale_position: float
    """Value of the scale at this anchor."""

    properties: Mapping[str, str] = field(default_factory=dict)
    """Free-form key/value attributes, in insertion order."""


@dataclass(frozen=True)
class LrmScaleMeasure:
    """A location expressed relative to a named anchor.

    ``LrmScaleMeasure("10", 120.0)`` is the human form ``"10+120"``.  Offsets
    are in curve length units and may be negative (``"10-050"``).
    """

    anchor_name: str
    scale_offset: float = 0.0

    @classmethod
    def parse(cls, text: str) -> LrmScaleMeasure:
        """Parse the ``"<anchor>+<offset>"`` / ``"<anchor>-<offset>"`` form.

        A bare anchor name means offset 0.  The offset is split off at the
        last sign followed only by digits, so an anchor whose name ends in
        ``-<digits>`` (``"PK-12"``) must be written with an explicit offset:
        ``"PK-12+000"``.  :meth:`__str__` always writes one.

        Raises:
            ValueError: If *text* is empty.
        """
        text = text.strip()
        if not text:
            raise ValueError("Empty measure")
        match = _MEASURE_RE.match(text)
        if match is None:
            return cls(text, 0.0)
        offset = float(match["offset"])
        if match["sign"] == "-":
            offset = -offset
        return cls(match["anchor"], offset)

    def __str__(self) -> str:
        # Micro-unit resolution, integer part padded to three digits.
        digits = f"{abs(self.scale_offset):.6f}".rstrip("0").rstrip(".")
        whole, _, frac = digits.partition(".")
        text = whole.zfill(3) + (f".{frac}" if frac else "")
        sign = "-" if self.scale_offset < 0 and frac + whole.strip("0") else "+"
        return f"{self.anchor_name}{sign}{text}"
