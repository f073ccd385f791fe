"""
Grammar for the clauses of a movement step.

``StepGrammar`` turns one merged clause (see ``ClauseTokenizer``) into one
typed step token. The patterns are compiled once when the grammar is
built; callers construct a single grammar and pass it to whatever needs
it.

Clause forms, in the order they are tried::

    NW-GH [settlement name]                    DirectionTerrain
    No Ford on River to NW of HEX              BlockedBy
    No River Adjacent to Hex to NE of HEX      MissingEdge
    Not enough M.P's to move to N into SWAMP   Exhausted
    Can't Move on Ocean to N of HEX            ProhibitedFrom
    River S SE / Ford N / Stone Road NE        EdgeList
    O NW N / Lcm NE                            NeighborList
    Nothing of interest found                  FoundNothing
    Find Iron Ore / Iron Ore                   ResourceFound
    Find 2 Horses 3 Goats                      FoundItems
    [Patrolled and found] 1190 0138c2          FoundUnits
    Did Not Return                             Vanished
    Sight Land - N/N / N/N Sight Land          CrowsNest
    PRAIRIE                                    StatusTerrain
"""

from __future__ import annotations

import logging
import re

from tribemap.core.enums import CompassPoint, Direction, Edge, Resource, Sighted, Terrain
from tribemap.core.errors import GrammarError
from tribemap.core.models import (
    BlockedBy,
    CrowsNest,
    DirectionTerrain,
    EdgeList,
    EdgeObservation,
    Exhausted,
    FoundItem,
    FoundItems,
    FoundNothing,
    FoundUnits,
    MissingEdge,
    Neighbor,
    NeighborList,
    ProhibitedFrom,
    ResourceFound,
    Settlement,
    StatusTerrain,
    StepToken,
    Vanished,
)

logger = logging.getLogger(__name__)

_DIR = r"(?:NE|SE|SW|NW|N|S)"
_UNIT = r"[0-9]{4}(?:[cefg][0-9])?"


class StepGrammar:
    """Parser for single step clauses."""

    def __init__(self) -> None:
        self._direction_terrain = re.compile(rf"^({_DIR})-([A-Za-z]+)(?: +(.+))?$")
        self._blocked = re.compile(rf"^No (Ford) on (River) to ({_DIR}) of HEX$", re.IGNORECASE)
        self._missing_edge = re.compile(
            rf"^No River Adjacent to Hex to ({_DIR}) of HEX$", re.IGNORECASE,
        )
        self._exhausted = re.compile(
            rf"^Not enough M\.P's to move to ({_DIR}) into (.+)$", re.IGNORECASE,
        )
        self._prohibited = re.compile(
            rf"^Can't Move on (.+?) to ({_DIR}) of HEX$", re.IGNORECASE,
        )
        self._edges = re.compile(rf"^(Ford|Pass|River|Stone Road)((?: {_DIR})+)$")
        self._neighbors = re.compile(rf"^([A-Za-z]+)((?: {_DIR})+)$")
        self._nothing = re.compile(r"^Nothing of interest found$", re.IGNORECASE)
        self._find = re.compile(r"^Find (.+)$")
        self._items = re.compile(r"^(?:[0-9]+ [A-Za-z][A-Za-z ]*?)(?: [0-9]+ [A-Za-z][A-Za-z ]*?)*$")
        self._item = re.compile(r"([0-9]+) ([A-Za-z][A-Za-z ]*?)(?= [0-9]|$)")
        self._units = re.compile(rf"^(Patrolled and found )?({_UNIT}(?: {_UNIT})*)$")
        self._vanished = re.compile(r"^Did Not Return$", re.IGNORECASE)
        self._sight_before = re.compile(r"^Sight (Land|Water) - ([A-Z]{1,2}/[A-Z]{1,2})$")
        self._sight_after = re.compile(r"^([A-Z]{1,2}/[A-Z]{1,2}) Sight (Land|Water)$")
        self._deck = re.compile(rf"^({_DIR}) ([A-Za-z]+)$")

    # ---- Entry points ----

    def parse_clause(self, clause: str, *, allow_settlement: bool = False) -> StepToken:
        """Parse one merged clause into a step token.

        Args:
            clause: Clause text as produced by the tokenizer.
            allow_settlement: Accept an otherwise unrecognized clause that
                starts with an uppercase letter as a settlement name. The
                assembler sets this once a result-defining token has been
                seen and no settlement is recorded yet.

        Raises:
            GrammarError: If the clause matches no known form.
        """
        clause = clause.strip()
        for parser in (
            self._parse_direction_terrain,
            self._parse_blocked,
            self._parse_missing_edge,
            self._parse_exhausted,
            self._parse_prohibited,
            self._parse_edges,
            self._parse_neighbors,
            self._parse_found_nothing,
            self._parse_found,
            self._parse_found_units,
            self._parse_vanished,
            self.parse_crows_nest,
            self._parse_status_terrain,
        ):
            token = parser(clause)
            if token is not None:
                return token
        if allow_settlement and clause[:1].isupper():
            logger.debug("treating clause %r as a settlement name", clause)
            return Settlement(name=clause)
        raise GrammarError("unrecognized clause", clause=clause)

    def parse_status_terrain(self, clause: str) -> StatusTerrain:
        """Parse the first clause of a status line, a long terrain name.

        Raises:
            GrammarError: If the clause is not a known terrain name.
        """
        token = self._parse_status_terrain(clause.strip())
        if token is None:
            raise GrammarError("status line must start with a terrain name", clause=clause)
        return token

    def parse_deck_observation(self, clause: str) -> Neighbor:
        """Parse an inner fleet-ring observation such as ``"NE O"``.

        Raises:
            GrammarError: If the clause is not a direction and terrain code.
        """
        m = self._deck.match(clause.strip())
        if m:
            terrain = Terrain.from_code(m.group(2))
            if terrain is not None:
                return Neighbor(direction=Direction(m.group(1)), terrain=terrain)
        raise GrammarError("expected direction and terrain code", clause=clause)

    def parse_crows_nest(self, clause: str) -> CrowsNest | None:
        """Parse an outer fleet-ring sighting; None if it is not one."""
        m = self._sight_before.match(clause)
        if m:
            sighted, point = m.group(1), m.group(2)
        else:
            m = self._sight_after.match(clause)
            if not m:
                return None
            point, sighted = m.group(1), m.group(2)
        compass = CompassPoint.from_text(point)
        if compass is None:
            raise GrammarError("unknown compass point", clause=clause)
        return CrowsNest(point=compass, sighted=Sighted(sighted))

    def parse_direction(self, text: str) -> Direction:
        direction = Direction.from_code(text)
        if direction is None:
            raise GrammarError("expected direction", clause=text)
        return direction

    # ---- Clause forms ----

    def _parse_direction_terrain(self, clause: str) -> DirectionTerrain | None:
        m = self._direction_terrain.match(clause)
        if not m:
            return None
        terrain = Terrain.from_code(m.group(2))
        if terrain is None:
            raise GrammarError("unknown terrain code", clause=clause)
        return DirectionTerrain(
            direction=Direction(m.group(1)),
            terrain=terrain,
            settlement=(m.group(3) or "").strip(),
        )

    def _parse_blocked(self, clause: str) -> BlockedBy | None:
        m = self._blocked.match(clause)
        if not m:
            return None
        return BlockedBy(direction=Direction(m.group(3).upper()), edge=Edge.RIVER)

    def _parse_missing_edge(self, clause: str) -> MissingEdge | None:
        m = self._missing_edge.match(clause)
        if not m:
            return None
        return MissingEdge(direction=Direction(m.group(1).upper()))

    def _parse_exhausted(self, clause: str) -> Exhausted | None:
        m = self._exhausted.match(clause)
        if not m:
            return None
        terrain = Terrain.from_long_name(m.group(2))
        if terrain is None:
            raise GrammarError("unknown terrain name", clause=clause)
        return Exhausted(direction=Direction(m.group(1).upper()), terrain=terrain)

    def _parse_prohibited(self, clause: str) -> ProhibitedFrom | None:
        m = self._prohibited.match(clause)
        if not m:
            return None
        terrain = Terrain.from_long_name(m.group(1))
        if terrain is None:
            raise GrammarError("unknown terrain name", clause=clause)
        return ProhibitedFrom(direction=Direction(m.group(2).upper()), terrain=terrain)

    def _parse_edges(self, clause: str) -> EdgeList | None:
        m = self._edges.match(clause)
        if not m:
            return None
        edge = Edge(m.group(1))
        return EdgeList(edges=tuple(
            EdgeObservation(direction=Direction(code), edge=edge) for code in m.group(2).split()
        ))

    def _parse_neighbors(self, clause: str) -> NeighborList | None:
        m = self._neighbors.match(clause)
        if not m:
            return None
        terrain = Terrain.from_code(m.group(1))
        if terrain is None:
            return None
        return NeighborList(neighbors=tuple(
            Neighbor(direction=Direction(code), terrain=terrain) for code in m.group(2).split()
        ))

    def _parse_found_nothing(self, clause: str) -> FoundNothing | None:
        return FoundNothing() if self._nothing.match(clause) else None

    def _parse_found(self, clause: str) -> ResourceFound | FoundItems | None:
        m = self._find.match(clause)
        body = m.group(1) if m else clause
        resource = Resource.from_name(body)
        if resource is not None:
            return ResourceFound(resource=resource)
        if self._items.match(body):
            return FoundItems(items=tuple(
                FoundItem(quantity=int(qty), item=item.strip())
                for qty, item in self._item.findall(body)
            ))
        if m:
            raise GrammarError("unknown find", clause=clause)
        return None

    def _parse_found_units(self, clause: str) -> FoundUnits | None:
        m = self._units.match(clause)
        if not m:
            return None
        return FoundUnits(unit_ids=tuple(m.group(2).split()), patrolled=m.group(1) is not None)

    def _parse_vanished(self, clause: str) -> Vanished | None:
        return Vanished() if self._vanished.match(clause) else None

    def _parse_status_terrain(self, clause: str) -> StatusTerrain | None:
        terrain = Terrain.from_long_name(clause)
        if terrain is None:
            return None
        return StatusTerrain(terrain=terrain)
