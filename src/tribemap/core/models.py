"""
Data model for parsed movement reports.

Three layers live here:

* step tokens: the typed result of parsing one clause of a step. Each
  token class carries a ``kind`` that consumers dispatch on.
* ``Step`` and ``MovementResult``: what a unit did during one turn.
* unit-id helpers (parent ids, unit kinds).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Union

from tribemap.core.enums import (
    CompassPoint,
    Direction,
    Edge,
    MovementType,
    Resource,
    Sighted,
    StepResult,
    Terrain,
    WindStrength,
)

# ---------------------------------------------------------------------------
# Unit ids
# ---------------------------------------------------------------------------

def parent_id(unit_id: str) -> str:
    """Id of the unit that owns ``unit_id``.

    A tribe's parent is its clan (``"1138"`` -> ``"0138"``); the clan is
    its own parent. Couriers, elements, fleets and garrisons belong to the
    tribe in their first four characters. Scouts belong to the unit that
    sent them.
    """
    if len(unit_id) == 4:
        return "0" + unit_id[1:]
    if "s" in unit_id[4:]:
        return unit_id[: unit_id.index("s", 4)]
    return unit_id[:4]


def is_clan(unit_id: str) -> bool:
    return len(unit_id) == 4 and unit_id[0] == "0"


def scout_id(unit_id: str, scout_no: int) -> str:
    return f"{unit_id}s{scout_no}"


# ---------------------------------------------------------------------------
# Step tokens
# ---------------------------------------------------------------------------


class TokenKind(str, Enum):
    DIRECTION_TERRAIN = "direction_terrain"
    EDGES = "edges"
    NEIGHBORS = "neighbors"
    BLOCKED_BY = "blocked_by"
    MISSING_EDGE = "missing_edge"
    EXHAUSTED = "exhausted"
    PROHIBITED_FROM = "prohibited_from"
    RESOURCE = "resource"
    FOUND_ITEMS = "found_items"
    FOUND_NOTHING = "found_nothing"
    FOUND_UNITS = "found_units"
    VANISHED = "vanished"
    STATUS_TERRAIN = "status_terrain"
    CROWS_NEST = "crows_nest"
    SETTLEMENT = "settlement"


@dataclass(frozen=True)
class DirectionTerrain:
    """A successful move: ``"NW-GH"``, optionally followed by a settlement name."""

    kind: ClassVar[TokenKind] = TokenKind.DIRECTION_TERRAIN
    direction: Direction
    terrain: Terrain
    settlement: str = ""


@dataclass(frozen=True)
class EdgeObservation:
    direction: Direction
    edge: Edge

    def to_dict(self) -> dict[str, str]:
        return {"direction": self.direction.value, "edge": self.edge.value}


@dataclass(frozen=True)
class EdgeList:
    """``"River S SE"``: one edge kind on one or more sides of the hex."""

    kind: ClassVar[TokenKind] = TokenKind.EDGES
    edges: tuple[EdgeObservation, ...]


@dataclass(frozen=True)
class Neighbor:
    direction: Direction
    terrain: Terrain

    def to_dict(self) -> dict[str, str]:
        return {"direction": self.direction.value, "terrain": self.terrain.value}


@dataclass(frozen=True)
class NeighborList:
    """``"O NW N"``: the terrain of one or more adjacent hexes."""

    kind: ClassVar[TokenKind] = TokenKind.NEIGHBORS
    neighbors: tuple[Neighbor, ...]


@dataclass(frozen=True)
class BlockedBy:
    kind: ClassVar[TokenKind] = TokenKind.BLOCKED_BY
    direction: Direction
    edge: Edge

    def to_dict(self) -> dict[str, str]:
        return {"direction": self.direction.value, "edge": self.edge.value}


@dataclass(frozen=True)
class MissingEdge:
    """``"No River Adjacent to Hex to NE of HEX"``: no river on that side to move along."""

    kind: ClassVar[TokenKind] = TokenKind.MISSING_EDGE
    direction: Direction

    def to_dict(self) -> dict[str, str]:
        return {"direction": self.direction.value}


@dataclass(frozen=True)
class Exhausted:
    kind: ClassVar[TokenKind] = TokenKind.EXHAUSTED
    direction: Direction
    terrain: Terrain

    def to_dict(self) -> dict[str, str]:
        return {"direction": self.direction.value, "terrain": self.terrain.value}


@dataclass(frozen=True)
class ProhibitedFrom:
    kind: ClassVar[TokenKind] = TokenKind.PROHIBITED_FROM
    direction: Direction
    terrain: Terrain

    def to_dict(self) -> dict[str, str]:
        return {"direction": self.direction.value, "terrain": self.terrain.value}


@dataclass(frozen=True)
class ResourceFound:
    kind: ClassVar[TokenKind] = TokenKind.RESOURCE
    resource: Resource


@dataclass(frozen=True)
class FoundItem:
    quantity: int
    item: str

    def to_dict(self) -> dict[str, Any]:
        return {"quantity": self.quantity, "item": self.item}


@dataclass(frozen=True)
class FoundItems:
    kind: ClassVar[TokenKind] = TokenKind.FOUND_ITEMS
    items: tuple[FoundItem, ...]


@dataclass(frozen=True)
class FoundNothing:
    kind: ClassVar[TokenKind] = TokenKind.FOUND_NOTHING


@dataclass(frozen=True)
class FoundUnits:
    kind: ClassVar[TokenKind] = TokenKind.FOUND_UNITS
    unit_ids: tuple[str, ...]
    patrolled: bool = False


@dataclass(frozen=True)
class Vanished:
    kind: ClassVar[TokenKind] = TokenKind.VANISHED


@dataclass(frozen=True)
class StatusTerrain:
    kind: ClassVar[TokenKind] = TokenKind.STATUS_TERRAIN
    terrain: Terrain


@dataclass(frozen=True)
class CrowsNest:
    """A fleet lookout sighting on the outer ring: ``"Sight Land - N/N"``."""

    kind: ClassVar[TokenKind] = TokenKind.CROWS_NEST
    point: CompassPoint
    sighted: Sighted

    def to_dict(self) -> dict[str, str]:
        return {"point": self.point.value, "sighted": self.sighted.value}


@dataclass(frozen=True)
class Settlement:
    kind: ClassVar[TokenKind] = TokenKind.SETTLEMENT
    name: str


StepToken = Union[
    DirectionTerrain,
    EdgeList,
    NeighborList,
    BlockedBy,
    MissingEdge,
    Exhausted,
    ProhibitedFrom,
    ResourceFound,
    FoundItems,
    FoundNothing,
    FoundUnits,
    Vanished,
    StatusTerrain,
    CrowsNest,
    Settlement,
]


# ---------------------------------------------------------------------------
# Steps and movement results
# ---------------------------------------------------------------------------


@dataclass
class Step:
    """One step of a unit's movement, or its status line.

    Attributes:
        turn_id: Turn the step was reported in (``"0900-01"``).
        unit_id: Unit that took the step.
        line_no: Line of the report the step came from.
        step_no: One-based position of the step on its line.
        attempted: Direction the unit tried to move. ``UNKNOWN`` for steps
            that never attempt a move (status, stayed, follows, vanished).
        result: Outcome of the step.
        terrain: Terrain of the hex the step observed (destination of a
            successful or failed move, or the current hex on status lines).
        grid_hex: Grid text of the hex the unit is in after the step,
            filled in by the walk engine.
        text: Raw step text.
    """

    turn_id: str
    unit_id: str
    line_no: int = 0
    step_no: int = 0
    attempted: Direction = Direction.UNKNOWN
    result: StepResult = StepResult.STAYED_IN_PLACE
    terrain: Terrain = Terrain.BLANK
    blocked_by: BlockedBy | None = None
    exhausted: Exhausted | None = None
    prohibited_from: ProhibitedFrom | None = None
    edges: list[EdgeObservation] = field(default_factory=list)
    neighbors: list[Neighbor] = field(default_factory=list)
    resources: list[Resource] = field(default_factory=list)
    settlement: Settlement | None = None
    found_units: list[str] = field(default_factory=list)
    found_items: list[FoundItem] = field(default_factory=list)
    crows_nest: list[CrowsNest] = field(default_factory=list)
    follows: str = ""
    goes_to: str = ""
    grid_hex: str = ""
    text: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "turn_id": self.turn_id,
            "unit_id": self.unit_id,
            "line_no": self.line_no,
            "step_no": self.step_no,
            "attempted": self.attempted.value,
            "result": self.result.value,
            "terrain": self.terrain.value,
            "blocked_by": self.blocked_by.to_dict() if self.blocked_by else None,
            "exhausted": self.exhausted.to_dict() if self.exhausted else None,
            "prohibited_from": self.prohibited_from.to_dict() if self.prohibited_from else None,
            "edges": [e.to_dict() for e in self.edges],
            "neighbors": [n.to_dict() for n in self.neighbors],
            "resources": [r.value for r in self.resources],
            "settlement": self.settlement.name if self.settlement else None,
            "found_units": list(self.found_units),
            "found_items": [i.to_dict() for i in self.found_items],
            "crows_nest": [c.to_dict() for c in self.crows_nest],
            "follows": self.follows,
            "goes_to": self.goes_to,
            "grid_hex": self.grid_hex,
        }


@dataclass
class ScoutReport:
    """The steps of one scout sent out by a unit."""

    scout_no: int
    line_no: int
    steps: list[Step] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "scout_no": self.scout_no,
            "line_no": self.line_no,
            "steps": [s.to_dict() for s in self.steps],
        }


@dataclass(frozen=True)
class Winds:
    strength: WindStrength
    from_direction: Direction

    def to_dict(self) -> dict[str, str]:
        return {"strength": self.strength.value, "from": self.from_direction.value}


@dataclass
class MovementResult:
    """Everything one unit reported for one turn.

    ``starting_coords`` and ``ending_coords`` start out as the report's
    previous and current hex (possibly ``"##"`` obscured or ``"N/A"``) and
    are replaced by resolved grid text during the walk. ``reported_ending``
    keeps the report's original current hex for the final-destination
    check.
    """

    turn_id: str
    unit_id: str
    movement_type: MovementType = MovementType.STATUS
    line_no: int = 0
    starting_coords: str = ""
    ending_coords: str = ""
    reported_ending: str = ""
    steps: list[Step] = field(default_factory=list)
    scout_reports: list[ScoutReport] = field(default_factory=list)
    status_step: Step | None = None
    follows: str = ""
    goes_to: str = ""
    follower_links: list[str] = field(default_factory=list)
    winds: Winds | None = None

    @property
    def parent_id(self) -> str:
        return parent_id(self.unit_id)

    def all_steps(self) -> list[Step]:
        """Movement steps followed by the status step, if any."""
        steps = list(self.steps)
        if self.status_step is not None:
            steps.append(self.status_step)
        return steps

    def to_dict(self) -> dict[str, Any]:
        return {
            "turn_id": self.turn_id,
            "unit_id": self.unit_id,
            "movement_type": self.movement_type.value,
            "line_no": self.line_no,
            "starting_coords": self.starting_coords,
            "ending_coords": self.ending_coords,
            "reported_ending": self.reported_ending,
            "steps": [s.to_dict() for s in self.steps],
            "scout_reports": [s.to_dict() for s in self.scout_reports],
            "status_step": self.status_step.to_dict() if self.status_step else None,
            "follows": self.follows,
            "goes_to": self.goes_to,
            "follower_links": list(self.follower_links),
            "winds": self.winds.to_dict() if self.winds else None,
        }


@dataclass
class Turn:
    """All movement results reported for one turn, keyed by unit id."""

    id: str
    movements: dict[str, MovementResult] = field(default_factory=dict)

    def ordered_units(self) -> list[MovementResult]:
        """Movements sorted by unit id; parents sort before their children."""
        return [self.movements[uid] for uid in sorted(self.movements)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "movements": {uid: m.to_dict() for uid, m in sorted(self.movements.items())},
        }
