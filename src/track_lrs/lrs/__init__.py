"""LRS container: loading a payload and querying it."""

from track_lrs.lrs.container import Lrs, load
from track_lrs.lrs.models import Projection

__all__ = ["Lrs", "Projection", "load"]
