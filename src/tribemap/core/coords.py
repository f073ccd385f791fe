"""
Coordinate model for the TribeNet map.

The game prints locations as grid text, ``"OO 1615"``: two letters naming
a big-map grid (row letter, then column letter) followed by the column
and row inside that grid. Each grid is 30 columns by 21 rows. This module
flattens grid text onto one infinite plane of (column, row) pairs so that
moves never need to know about grid boundaries.

Hexes are flat-topped. Moving NE, SE, SW or NW changes the row by an
amount that depends on whether the current column is even or odd; the
two offset tables below encode that.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from tribemap.core.enums import DIRECTIONS, Direction
from tribemap.core.errors import InvalidGridCoordinates

GRID_COLUMNS = 30
GRID_ROWS = 21

OBSCURED_PREFIX = "##"
NOT_AVAILABLE = "N/A"

# Offsets as (d_column, d_row), indexed [column parity][direction index].
# Direction index follows DIRECTIONS: N, NE, SE, S, SW, NW.
OFFSET_VECTORS = np.array(
    [
        # even column
        [(0, -1), (1, -1), (1, 0), (0, 1), (-1, 0), (-1, -1)],
        # odd column
        [(0, -1), (1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0)],
    ],
    dtype=np.int64,
)

_DIRECTION_INDEX: dict[Direction, int] = {d: i for i, d in enumerate(DIRECTIONS)}


@dataclass(frozen=True, order=True)
class MapCoordinate:
    """A hex on the flattened map.

    Attributes:
        column: Zero-based column across all big-map grids.
        row: Zero-based row across all big-map grids.
    """

    column: int
    row: int

    def add(self, direction: Direction) -> MapCoordinate:
        """Return the neighboring hex in ``direction``.

        Raises:
            ValueError: If ``direction`` is ``Direction.UNKNOWN``.
        """
        if direction is Direction.UNKNOWN:
            raise ValueError("cannot move in an unknown direction")
        d_col, d_row = OFFSET_VECTORS[self.column % 2, _DIRECTION_INDEX[direction]]
        return MapCoordinate(self.column + int(d_col), self.row + int(d_row))

    def neighbors(self) -> dict[Direction, MapCoordinate]:
        """All six neighbors keyed by direction."""
        vectors = OFFSET_VECTORS[self.column % 2]
        origin = np.array([self.column, self.row], dtype=np.int64)
        coords = vectors + origin
        return {
            direction: MapCoordinate(int(col), int(row))
            for direction, (col, row) in zip(DIRECTIONS, coords)
        }

    def grid_id(self) -> str:
        """The two-letter big-map grid, e.g. ``"OO"``."""
        return chr(ord("A") + self.row // GRID_ROWS) + chr(ord("A") + self.column // GRID_COLUMNS)

    def grid_column_row(self) -> tuple[int, int]:
        """One-based (column, row) inside the big-map grid."""
        return self.column % GRID_COLUMNS + 1, self.row % GRID_ROWS + 1

    def to_grid_text(self) -> str:
        col, row = self.grid_column_row()
        return f"{self.grid_id()} {col:02d}{row:02d}"

    def to_dict(self) -> dict[str, Any]:
        return {"column": self.column, "row": self.row, "grid": self.to_grid_text()}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> MapCoordinate:
        return cls(column=int(d["column"]), row=int(d["row"]))

    def __str__(self) -> str:
        return f"({self.column}, {self.row})"


def parse_grid(text: str) -> MapCoordinate:
    """Convert grid text such as ``"OO 1615"`` to a map coordinate.

    Raises:
        InvalidGridCoordinates: For ``"N/A"``, obscured (``"##"``) grids, and
            anything that is not two letters, a space and four digits with
            the column in 1..30 and the row in 1..21.
    """
    if text == NOT_AVAILABLE:
        raise InvalidGridCoordinates(text, "location is not available")
    if text.startswith(OBSCURED_PREFIX):
        raise InvalidGridCoordinates(text, "grid is obscured")
    if len(text) != 7 or text[2] != " ":
        raise InvalidGridCoordinates(text)
    big_row, big_col, digits = text[0], text[1], text[3:]
    if not ("A" <= big_row <= "Z" and "A" <= big_col <= "Z"):
        raise InvalidGridCoordinates(text, "grid letters must be A-Z")
    if not (digits.isascii() and digits.isdigit()):
        raise InvalidGridCoordinates(text, "grid column and row must be digits")
    grid_col, grid_row = int(digits[:2]), int(digits[2:])
    if not 1 <= grid_col <= GRID_COLUMNS:
        raise InvalidGridCoordinates(text, "grid column out of range")
    if not 1 <= grid_row <= GRID_ROWS:
        raise InvalidGridCoordinates(text, "grid row out of range")
    return MapCoordinate(
        column=(ord(big_col) - ord("A")) * GRID_COLUMNS + grid_col - 1,
        row=(ord(big_row) - ord("A")) * GRID_ROWS + grid_row - 1,
    )


def is_obscured(text: str) -> bool:
    return text.startswith(OBSCURED_PREFIX)


def is_known(text: str) -> bool:
    """True when ``text`` names a real grid (not empty, ``N/A`` or ``##``)."""
    return bool(text) and text != NOT_AVAILABLE and not is_obscured(text)


def same_digits(a: str, b: str) -> bool:
    """Compare the ``CCRR`` part of two grid texts, ignoring the grid letters."""
    return len(a) == 7 and len(b) == 7 and a[3:] == b[3:]


def with_grid(grid_id: str, text: str) -> str:
    """Replace the grid letters of ``text`` (``"## 1108"`` -> ``"OO 1108"``)."""
    return grid_id + text[2:]


def move(text: str, direction: Direction) -> str:
    """Grid text of the hex next to ``text`` in ``direction``."""
    return parse_grid(text).add(direction).to_grid_text()
