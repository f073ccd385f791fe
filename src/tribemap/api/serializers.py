"""
Serializers for converting mapping results to JSON-safe dicts.
"""

from __future__ import annotations

from typing import Any

from tribemap.api.sessions import MappingSession, session_summary
from tribemap.core.errors import MappingError
from tribemap.core.hex_map import Hex, HexMap
from tribemap.core.models import MovementResult, Turn


def serialize_session(session: MappingSession) -> dict[str, Any]:
    return {
        **session_summary(session),
        "config": session.config.to_dict(),
        "reports": list(session.pipeline.report_ids),
        "failures": [f.to_dict() for f in session.pipeline.failures],
    }


def serialize_hex_summary(hx: Hex) -> dict[str, Any]:
    """Lightweight hex summary for list views."""
    return {
        "grid": hx.grid_text,
        "column": hx.location.column,
        "row": hx.location.row,
        "terrain": hx.terrain.value,
        "settlement": hx.settlement,
        "visited": hx.visited,
        "is_origin": hx.is_origin,
    }


def serialize_hex_detail(hx: Hex) -> dict[str, Any]:
    return hx.to_dict()


def serialize_map_bounds(hex_map: HexMap) -> dict[str, str] | None:
    bounds = hex_map.bounds()
    if bounds is None:
        return None
    upper_left, lower_right = bounds
    return {"upper_left": upper_left.to_grid_text(), "lower_right": lower_right.to_grid_text()}


def serialize_movement_summary(movement: MovementResult) -> dict[str, Any]:
    return {
        "unit_id": movement.unit_id,
        "movement_type": movement.movement_type.value,
        "starting_coords": movement.starting_coords,
        "ending_coords": movement.ending_coords,
        "step_count": len(movement.steps),
        "scout_count": len(movement.scout_reports),
        "follows": movement.follows or None,
        "follower_links": list(movement.follower_links),
    }


def serialize_turn(turn: Turn, detail: bool = False) -> dict[str, Any]:
    movements = turn.ordered_units()
    return {
        "id": turn.id,
        "units": [
            m.to_dict() if detail else serialize_movement_summary(m) for m in movements
        ],
    }


def serialize_error(exc: MappingError) -> dict[str, Any]:
    return exc.to_dict()
