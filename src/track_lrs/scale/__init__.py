"""Anchors, scale measures and the measure/position mapping of one LRM."""

from track_lrs.scale.mapping import LrmScale
from track_lrs.scale.models import Anchor, AnchorLike, LrmScaleMeasure

__all__ = ["Anchor", "AnchorLike", "LrmScale", "LrmScaleMeasure"]
