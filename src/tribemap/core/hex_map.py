"""
Sparse hex map built up from walked movement reports.

A ``Hex`` is created the first time any report refers to it and is never
deleted; later observations only add to it. Terrain is the one fact that
must not change: a second, different terrain for the same hex means the
walk placed a unit in the wrong hex, and is reported as an
``InvariantViolation``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

import numpy as np

from tribemap.core.coords import MapCoordinate
from tribemap.core.enums import Direction, Edge, Resource, Sighted, Terrain
from tribemap.core.errors import InvariantViolation


@dataclass
class Hex:
    """What is known about one map hex.

    Attributes:
        location: Position on the flattened map.
        terrain: Observed terrain, ``BLANK`` until someone reports it.
        settlement: Settlement name, if one was reported here.
        edges: Edge features per side of the hex.
        neighbor_terrain: Terrain reported for adjacent hexes, by side.
        resources: Resources found in the hex.
        encounters: Units seen in the hex, per turn.
        sighted: Crow's-nest sighting for hexes nobody has visited.
        created: Turn the hex was first referenced.
        updated: Last turn anything about the hex changed.
        visited: Last turn a unit stood in the hex.
        scouted: Last turn a scout passed through the hex.
        is_origin: Whether the hex is the clan's starting hex.
    """

    location: MapCoordinate
    terrain: Terrain = Terrain.BLANK
    settlement: str = ""
    edges: dict[Direction, list[Edge]] = field(default_factory=dict)
    neighbor_terrain: dict[Direction, Terrain] = field(default_factory=dict)
    resources: list[Resource] = field(default_factory=list)
    encounters: dict[str, list[str]] = field(default_factory=dict)
    sighted: Sighted | None = None
    created: str = ""
    updated: str = ""
    visited: str = ""
    scouted: str = ""
    is_origin: bool = False

    @property
    def grid_text(self) -> str:
        return self.location.to_grid_text()

    def add_edge(self, direction: Direction, edge: Edge) -> None:
        edges = self.edges.setdefault(direction, [])
        if edge not in edges:
            edges.append(edge)

    def add_resource(self, resource: Resource) -> None:
        if resource not in self.resources:
            self.resources.append(resource)

    def add_encounters(self, turn_id: str, unit_ids: list[str]) -> None:
        seen = self.encounters.setdefault(turn_id, [])
        for unit_id in unit_ids:
            if unit_id not in seen:
                seen.append(unit_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "grid": self.grid_text,
            "column": self.location.column,
            "row": self.location.row,
            "terrain": self.terrain.value,
            "settlement": self.settlement,
            "edges": {d.value: [e.value for e in edges] for d, edges in self.edges.items()},
            "neighbor_terrain": {d.value: t.value for d, t in self.neighbor_terrain.items()},
            "resources": [r.value for r in self.resources],
            "encounters": {turn: list(units) for turn, units in self.encounters.items()},
            "sighted": self.sighted.value if self.sighted else None,
            "created": self.created,
            "updated": self.updated,
            "visited": self.visited,
            "scouted": self.scouted,
            "is_origin": self.is_origin,
        }


class HexMap:
    """Hexes keyed by grid text (``"OO 1615"``).

    Attributes:
        hexes: Mapping from grid text to Hex.
    """

    def __init__(self) -> None:
        self.hexes: dict[str, Hex] = {}

    def __len__(self) -> int:
        return len(self.hexes)

    def __contains__(self, grid_text: object) -> bool:
        return grid_text in self.hexes

    def __iter__(self) -> Iterator[Hex]:
        """Iterate hexes in column, then row order."""
        return iter(sorted(self.hexes.values(), key=lambda h: (h.location.column, h.location.row)))

    def get(self, grid_text: str) -> Hex | None:
        return self.hexes.get(grid_text)

    def fetch(self, location: MapCoordinate, turn_id: str) -> Hex:
        """Return the hex at ``location``, creating it on first reference."""
        key = location.to_grid_text()
        hx = self.hexes.get(key)
        if hx is None:
            hx = Hex(location=location, created=turn_id, updated=turn_id)
            self.hexes[key] = hx
        return hx

    # ---- Observations ----

    def observe_terrain(
        self, location: MapCoordinate, terrain: Terrain, turn_id: str, unit_id: str = "",
    ) -> Hex:
        """Record ``terrain`` for the hex at ``location``.

        Raises:
            InvariantViolation: If the hex already has a different terrain.
        """
        hx = self.fetch(location, turn_id)
        if terrain is Terrain.BLANK or hx.terrain is terrain:
            return hx
        if hx.terrain is not Terrain.BLANK:
            raise InvariantViolation(
                f"hex {hx.grid_text}: terrain {terrain.value} contradicts "
                f"{hx.terrain.value} recorded in turn {hx.updated}",
                turn_id=turn_id,
                unit_id=unit_id,
            )
        hx.terrain = terrain
        hx.sighted = None
        hx.updated = turn_id
        return hx

    def observe_neighbor(
        self,
        location: MapCoordinate,
        direction: Direction,
        terrain: Terrain,
        turn_id: str,
        unit_id: str = "",
    ) -> Hex:
        """Record a neighbor's terrain on both the observer and the neighbor."""
        hx = self.fetch(location, turn_id)
        previous = hx.neighbor_terrain.get(direction)
        if previous is not None and previous is not terrain:
            raise InvariantViolation(
                f"hex {hx.grid_text}: neighbor {direction.value} terrain {terrain.value} "
                f"contradicts {previous.value}",
                turn_id=turn_id,
                unit_id=unit_id,
            )
        hx.neighbor_terrain[direction] = terrain
        hx.updated = turn_id
        self.observe_terrain(location.add(direction), terrain, turn_id, unit_id)
        return hx

    def observe_sighting(self, location: MapCoordinate, sighted: Sighted, turn_id: str) -> Hex:
        """Mark a crow's-nest sighting; ignored once the terrain is known."""
        hx = self.fetch(location, turn_id)
        if hx.terrain is Terrain.BLANK:
            hx.sighted = sighted
            hx.updated = turn_id
        return hx

    def visit(self, location: MapCoordinate, turn_id: str, *, scout: bool = False) -> Hex:
        hx = self.fetch(location, turn_id)
        if scout:
            hx.scouted = turn_id
        else:
            hx.visited = turn_id
        hx.updated = turn_id
        return hx

    # ---- Queries ----

    def bounds(self) -> tuple[MapCoordinate, MapCoordinate] | None:
        """Upper-left and lower-right corners of the mapped area."""
        if not self.hexes:
            return None
        points = np.array(
            [(h.location.column, h.location.row) for h in self.hexes.values()],
            dtype=np.int64,
        )
        lo = points.min(axis=0)
        hi = points.max(axis=0)
        return MapCoordinate(int(lo[0]), int(lo[1])), MapCoordinate(int(hi[0]), int(hi[1]))

    def origin(self) -> Hex | None:
        for hx in self.hexes.values():
            if hx.is_origin:
                return hx
        return None

    def to_dict(self) -> dict[str, Any]:
        return {"hexes": [hx.to_dict() for hx in self]}
