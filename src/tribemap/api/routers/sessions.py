"""Mapping session management endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from tribemap.api.schemas import CreateSessionRequest, SessionResponse, SessionSummary
from tribemap.api.serializers import serialize_session
from tribemap.core.config import MapperConfig

router = APIRouter()


@router.post("", response_model=SessionResponse)
def create_session(req: CreateSessionRequest, request: Request):
    mgr = request.app.state.session_manager

    config = None
    if req.config:
        try:
            config = MapperConfig.from_dict(req.config)
        except (TypeError, ValueError) as exc:
            raise HTTPException(status_code=400, detail=f"Invalid config: {exc}")

    session = mgr.create_session(config=config, name=req.name)
    return serialize_session(session)


@router.get("", response_model=list[SessionSummary])
def list_sessions(request: Request):
    mgr = request.app.state.session_manager
    return mgr.list_sessions()


@router.get("/{session_id}", response_model=SessionResponse)
def get_session(session_id: str, request: Request):
    mgr = request.app.state.session_manager
    try:
        session = mgr.get_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return serialize_session(session)


@router.delete("/{session_id}")
def delete_session(session_id: str, request: Request):
    mgr = request.app.state.session_manager
    try:
        mgr.delete_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return {"deleted": True}
