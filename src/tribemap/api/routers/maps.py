"""Hex map endpoints: walk a session, list hexes, hex detail, turn detail."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request

from tribemap.api.schemas import WalkResponse
from tribemap.api.serializers import (
    serialize_error,
    serialize_hex_detail,
    serialize_hex_summary,
    serialize_map_bounds,
    serialize_turn,
)
from tribemap.core.errors import ContinuityError, InvariantViolation

router = APIRouter()


def _get_result(request: Request, session_id: str):
    mgr = request.app.state.session_manager
    try:
        return mgr.get_result(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc))


@router.post("/{session_id}/walk", response_model=WalkResponse)
def walk_session(session_id: str, request: Request):
    """Resolve every uploaded report onto a fresh hex map."""
    mgr = request.app.state.session_manager
    try:
        session = mgr.walk(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except ContinuityError as exc:
        raise HTTPException(status_code=409, detail=serialize_error(exc))
    except InvariantViolation as exc:
        raise HTTPException(status_code=400, detail=serialize_error(exc))

    result = session.result
    origin = result.hex_map.origin()
    return {
        "session_id": session.id,
        "turn_ids": [t.id for t in result.turns],
        "hex_count": len(result.hex_map),
        "origin": origin.grid_text if origin else None,
        "bounds": serialize_map_bounds(result.hex_map),
    }


@router.get("/{session_id}/hexes")
def list_hexes(
    session_id: str,
    request: Request,
    terrain: str | None = None,
    visited_only: bool = False,
) -> dict[str, Any]:
    result = _get_result(request, session_id)
    hexes = [
        serialize_hex_summary(hx)
        for hx in result.hex_map
        if (terrain is None or hx.terrain.value == terrain)
        and (not visited_only or hx.visited)
    ]
    return {"count": len(hexes), "hexes": hexes}


@router.get("/{session_id}/hexes/{grid}")
def get_hex(session_id: str, grid: str, request: Request) -> dict[str, Any]:
    """Hex detail by grid text, e.g. ``OO 1615`` (URL-encoded space)."""
    result = _get_result(request, session_id)
    hx = result.hex_map.get(grid)
    if hx is None:
        raise HTTPException(status_code=404, detail=f"Hex '{grid}' not found")
    return serialize_hex_detail(hx)


@router.get("/{session_id}/turns/{turn_id}")
def get_turn(session_id: str, turn_id: str, request: Request, detail: bool = False) -> dict[str, Any]:
    result = _get_result(request, session_id)
    for turn in result.turns:
        if turn.id == turn_id:
            return serialize_turn(turn, detail=detail)
    raise HTTPException(status_code=404, detail=f"Turn '{turn_id}' not found")
