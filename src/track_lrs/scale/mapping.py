"""Piecewise anchor-relative mapping between curve positions and scale measures.

Each anchor is the local origin of the stretch of curve that follows it, up
to the next anchor.  A measure ``anchor + offset`` moves ``offset`` length
units away from the anchor, in the direction where the scale increases
locally.  Scales may jump or run backwards between anchors; there is no
single global formula, only a sorted sequence searched with :mod:`bisect`.
"""

from __future__ import annotations

import bisect
from collections.abc import Iterator, Sequence
from typing import Generic, TypeVar

from track_lrs.errors import UnknownAnchor
from track_lrs.scale.models import AnchorLike, LrmScaleMeasure

A = TypeVar("A", bound=AnchorLike)


def _directions(curve_positions: Sequence[float], scale_positions: Sequence[float]) -> list[int]:
    """Local scale direction (+1 / -1) at every anchor.

    Compared with the next anchor, or the previous one for the last anchor.
    A lone anchor or a flat step counts as increasing.
    """
    n = len(curve_positions)
    directions: list[int] = []
    for i in range(n):
        j = i + 1 if i + 1 < n else i - 1
        if j < 0:
            directions.append(1)
            continue
        d_scale = scale_positions[j] - scale_positions[i]
        d_curve = curve_positions[j] - curve_positions[i]
        directions.append(-1 if d_scale * d_curve < 0 else 1)
    return directions


class LrmScale(Generic[A]):
    """The scale of one LRM: its anchors sorted by curve position.

    Args:
        lrm_id: Id of the owning LRM, used in error messages.
        anchors: Anchors sorted by strictly ascending ``curve_position`` with
            unique names.  Works with :class:`~track_lrs.scale.models.Anchor`
            as well as the zero-copy anchor views of the codec.

    Raises:
        ValueError: If there is no anchor, if anchors are out of order or
            share a curve position, or if a name is repeated.
    """

    def __init__(self, lrm_id: str, anchors: Sequence[A]) -> None:
        if not anchors:
            raise ValueError(f"LRM {lrm_id!r} has no anchor")
        self.lrm_id = lrm_id
        self._anchors: tuple[A, ...] = tuple(anchors)
        self._curve_positions = tuple(float(a.curve_position) for a in self._anchors)
        scale_positions = tuple(float(a.scale_position) for a in self._anchors)

        for i in range(1, len(self._curve_positions)):
            if self._curve_positions[i] <= self._curve_positions[i - 1]:
                same = self._curve_positions[i] == self._curve_positions[i - 1]
                kind = "duplicate" if same else "unsorted"
                raise ValueError(
                    f"LRM {lrm_id!r}: {kind} anchor curve_position "
                    f"{self._curve_positions[i]!r} at index {i}"
                )

        self._by_name: dict[str, int] = {}
        for i, anchor in enumerate(self._anchors):
            if anchor.name in self._by_name:
                raise ValueError(f"LRM {lrm_id!r}: duplicate anchor name {anchor.name!r}")
            self._by_name[anchor.name] = i

        self._directions = _directions(self._curve_positions, scale_positions)

    # ------------------------------------------------------------------
    # Anchor access
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._anchors)

    def __iter__(self) -> Iterator[A]:
        return iter(self._anchors)

    def __getitem__(self, index: int) -> A:
        return self._anchors[index]

    @property
    def anchors(self) -> tuple[A, ...]:
        return self._anchors

    def anchor_index(self, name: str) -> int:
        """Index of the anchor called *name*.

        Raises:
            UnknownAnchor: If the LRM has no such anchor.
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownAnchor(name, self.lrm_id) from None

    def anchor(self, name: str) -> A:
        return self._anchors[self.anchor_index(name)]

    def direction(self, index: int) -> int:
        """``+1`` if the scale increases with curve position at anchor *index*, else ``-1``."""
        return self._directions[index]

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def measure_to_position(self, measure: LrmScaleMeasure) -> float:
        """Curve position designated by *measure*.

        The result is not clamped; it may fall outside the curve.

        Raises:
            UnknownAnchor: If ``measure.anchor_name`` is not an anchor of this LRM.
        """
        i = self.anchor_index(measure.anchor_name)
        return self._curve_positions[i] + self._directions[i] * float(measure.scale_offset)

    def position_to_measure(self, curve_position: float) -> LrmScaleMeasure:
        """Express *curve_position* relative to its lower bracketing anchor.

        Between two anchors the reference is the anchor before the position,
        so offsets are non-negative on an increasing scale.  Before the first
        anchor the first one is used with a negative offset; past the last
        anchor the offset exceeds the last span.  Use
        :meth:`is_extrapolated` to tell those cases apart.
        """
        i = bisect.bisect_right(self._curve_positions, curve_position) - 1
        if i < 0:
            i = 0
        offset = self._directions[i] * (curve_position - self._curve_positions[i])
        return LrmScaleMeasure(self._anchors[i].name, offset + 0.0)

    def is_extrapolated(self, curve_position: float) -> bool:
        """True when *curve_position* lies before the first or after the last anchor."""
        return (
            curve_position < self._curve_positions[0]
            or curve_position > self._curve_positions[-1]
        )
