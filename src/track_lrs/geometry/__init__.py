"""Planar curves, projection and the segment spatial index."""

from track_lrs.geometry.curve import Curve, as_point
from track_lrs.geometry.models import BoundingBox, CurveProjection, Point
from track_lrs.geometry.spatial_index import SegmentGrid

__all__ = ["BoundingBox", "Curve", "CurveProjection", "Point", "SegmentGrid", "as_point"]
