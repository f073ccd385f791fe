"""
Error types raised while parsing reports and resolving hex positions.

Every error carries the report context it was raised in (turn, unit,
line, step, clause). Inner layers fill in what they know; outer layers
call ``add_context`` to supply the rest as the error propagates, so the
message that finally reaches the user points at the exact report text.
"""

from __future__ import annotations

from typing import Any

_CONTEXT_FIELDS = ("turn_id", "unit_id", "line_no", "step_no", "clause")


class MappingError(Exception):
    """Base class for all report-mapping failures."""

    def __init__(
        self,
        message: str,
        *,
        turn_id: str = "",
        unit_id: str = "",
        line_no: int = 0,
        step_no: int = 0,
        clause: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.turn_id = turn_id
        self.unit_id = unit_id
        self.line_no = line_no
        self.step_no = step_no
        self.clause = clause

    def add_context(self, **context: Any) -> MappingError:
        """Fill in context fields that are still empty; returns ``self``."""
        for name, value in context.items():
            if name not in _CONTEXT_FIELDS:
                raise TypeError(f"unknown error context field: {name}")
            if value and not getattr(self, name):
                setattr(self, name, value)
        return self

    def context(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in _CONTEXT_FIELDS}

    def to_dict(self) -> dict[str, Any]:
        return {"error": type(self).__name__, "message": self.message, **self.context()}

    def __str__(self) -> str:
        parts = []
        if self.turn_id:
            parts.append(f"turn {self.turn_id}")
        if self.unit_id:
            parts.append(f"unit {self.unit_id}")
        if self.line_no:
            parts.append(f"line {self.line_no}")
        if self.step_no:
            parts.append(f"step {self.step_no}")
        text = self.message
        if parts:
            text = f"{': '.join(parts)}: {text}"
        if self.clause:
            text = f"{text}: {self.clause!r}"
        return text


class GrammarError(MappingError):
    """Report text that does not match the movement grammar."""


class InvariantViolation(MappingError):
    """Text that parsed but contradicts itself or the map built so far."""


class ContinuityError(MappingError):
    """Positions that cannot be reconciled across steps, units or turns."""


class ObscuredLocationError(ContinuityError):
    """A hidden (``##``) location could not be derived from known data."""


class LocationMismatchError(ContinuityError):
    """Two sources disagree about where a unit is."""


class UnresolvedFollowError(ContinuityError):
    """A follow chain never reached a unit with a known location."""


class FinalDestinationMismatch(ContinuityError):
    """The walked ending hex disagrees with the report's current hex."""


class InvalidGridCoordinates(MappingError, ValueError):
    """Grid text that is not of the form ``"XX CCRR"``."""

    def __init__(self, text: str, reason: str = "invalid grid coordinates") -> None:
        super().__init__(reason, clause=text)
        self.text = text
