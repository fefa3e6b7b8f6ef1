"""Query result types."""

from __future__ import annotations

from dataclasses import dataclass

from track_lrs.geometry.models import Point
from track_lrs.scale.models import LrmScaleMeasure


@dataclass(frozen=True)
class Projection:
    """Nearest location on an LRM's curve for a query point.

    ``distance`` is always ``abs(offset)``; the sign of ``offset`` tells on
    which side of the track the query point lies.
    """

    lrm_id: str
    """LRM whose curve was searched."""

    point: Point
    """Projected point on the curve."""

    measure: LrmScaleMeasure
    """Projected point expressed on the LRM scale."""

    distance: float
    """Distance from the query point to ``point``."""

    curve_position: float
    """Arc length of ``point`` along the curve."""

    offset: float = 0.0
    """Signed lateral distance: positive left of the curve direction."""
