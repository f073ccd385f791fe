"""Split one step of a movement line into merged clauses."""

from __future__ import annotations

import re
from enum import Enum

from tribemap.core.enums import Direction, Terrain

EDGE_PREFIXES = ("Ford ", "Pass ", "River ", "Stone Road ")
PATROL_PREFIX = "Patrolled and found "


class ClauseKind(str, Enum):
    """How a raw clause takes part in merging."""

    FIND_ITEM = "find_item"
    QUANTITY_ITEM = "quantity_item"
    EDGE = "edge"
    NEIGHBOR = "neighbor"
    PATROL = "patrol"
    UNIT_ID = "unit_id"
    DIRECTION = "direction"
    OTHER = "other"


# Clauses that absorb the clauses following them, and what they absorb.
_ABSORBS: dict[ClauseKind, frozenset[ClauseKind]] = {
    ClauseKind.FIND_ITEM: frozenset({ClauseKind.QUANTITY_ITEM}),
    ClauseKind.QUANTITY_ITEM: frozenset({ClauseKind.QUANTITY_ITEM}),
    ClauseKind.EDGE: frozenset({ClauseKind.DIRECTION}),
    ClauseKind.NEIGHBOR: frozenset({ClauseKind.DIRECTION}),
    ClauseKind.PATROL: frozenset({ClauseKind.UNIT_ID}),
    ClauseKind.UNIT_ID: frozenset({ClauseKind.UNIT_ID}),
}


class ClauseTokenizer:
    """Comma splitter that re-joins clauses the report writer split apart.

    The report generator separates list items with the same comma it uses
    between clauses, so ``"O SW, NW, S"`` arrives as three clauses that
    belong together. A second pass classifies each clause and folds the
    continuation clauses back into the clause that started the list.
    """

    def __init__(self) -> None:
        self._find_item = re.compile(r"^Find [0-9]+ [a-zA-Z][a-zA-Z ]+$")
        self._quantity_item = re.compile(r"^[0-9]+ [a-zA-Z][a-zA-Z ]+$")
        self._unit_ids = re.compile(r"^[0-9]{4}(?:[cefg][0-9])?(?: [0-9]{4}(?:[cefg][0-9])?)*$")
        self._neighbor = re.compile(r"^([A-Za-z]+)((?: (?:NE|SE|SW|NW|N|S))+)$")

    def split(self, text: str) -> list[str]:
        """First pass: split on commas, trim, and drop empty clauses."""
        return [clause.strip() for clause in text.split(",") if clause.strip()]

    def classify(self, clause: str) -> ClauseKind:
        if Direction.from_code(clause) is not None:
            return ClauseKind.DIRECTION
        if self._unit_ids.match(clause):
            return ClauseKind.UNIT_ID
        if clause.startswith(PATROL_PREFIX):
            return ClauseKind.PATROL
        if clause.startswith(EDGE_PREFIXES):
            return ClauseKind.EDGE
        if self._find_item.match(clause):
            return ClauseKind.FIND_ITEM
        if self._quantity_item.match(clause):
            return ClauseKind.QUANTITY_ITEM
        m = self._neighbor.match(clause)
        if m and Terrain.from_code(m.group(1)) is not None:
            return ClauseKind.NEIGHBOR
        return ClauseKind.OTHER

    def tokenize(self, text: str) -> list[str]:
        """Split ``text`` into clauses and merge list continuations.

        Merged clauses are joined with a single space:
        ``"River S, SE"`` becomes ``["River S SE"]``.
        """
        clauses = self.split(text)
        merged: list[str] = []
        i = 0
        while i < len(clauses):
            current = clauses[i]
            absorbs = _ABSORBS.get(self.classify(current))
            i += 1
            if absorbs:
                while i < len(clauses) and self.classify(clauses[i]) in absorbs:
                    current = f"{current} {clauses[i]}"
                    i += 1
            merged.append(current)
        return merged
