"""Error taxonomy shared by every layer of the engine.

Each error carries the identifier or bound that caused it so callers can act
on it without parsing the message.
"""

from __future__ import annotations


class LrsError(Exception):
    """Base class for all linear-referencing errors."""


class MalformedData(LrsError):
    """Raised when a binary payload cannot be parsed or violates the schema.

    Attributes:
        offset: Byte offset where the problem was detected, if known.
    """

    def __init__(self, message: str, offset: int | None = None) -> None:
        if offset is not None:
            message = f"{message} (at byte {offset})"
        super().__init__(message)
        self.offset = offset


class UnknownLrm(LrsError, KeyError):
    """Raised when an LRM id is not present in the loaded LRS."""

    def __init__(self, lrm_id: str) -> None:
        super().__init__(f"Unknown LRM: {lrm_id!r}")
        self.lrm_id = lrm_id

    def __str__(self) -> str:
        return self.args[0]


class UnknownAnchor(LrsError, KeyError):
    """Raised when a measure refers to an anchor its LRM does not have."""

    def __init__(self, anchor_name: str, lrm_id: str | None = None) -> None:
        where = f" in LRM {lrm_id!r}" if lrm_id is not None else ""
        super().__init__(f"Unknown anchor: {anchor_name!r}{where}")
        self.anchor_name = anchor_name
        self.lrm_id = lrm_id

    def __str__(self) -> str:
        return self.args[0]


class OutOfRange(LrsError, ValueError):
    """Raised when a curve position falls outside ``[lower, upper]``.

    Attributes:
        position: The offending curve position.
        lower: Lower bound (always ``0.0`` for curves).
        upper: Upper bound (the curve length).
    """

    def __init__(self, position: float, lower: float, upper: float) -> None:
        bound = "below" if position < lower else "above"
        super().__init__(
            f"Curve position {position!r} is {bound} the curve range [{lower!r}, {upper!r}]"
        )
        self.position = position
        self.lower = lower
        self.upper = upper
