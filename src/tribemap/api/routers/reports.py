"""Turn report upload endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request

from tribemap.api.schemas import UploadReportRequest, UploadReportResponse
from tribemap.api.serializers import serialize_error, serialize_turn
from tribemap.core.errors import GrammarError, InvariantViolation

router = APIRouter()


@router.post("/{session_id}", response_model=UploadReportResponse)
def upload_report(session_id: str, req: UploadReportRequest, request: Request):
    """Parse one turn report into the session.

    Parse failures return 400 with the turn, unit, line and clause that
    failed; the report is also listed under the session's failures.
    """
    mgr = request.app.state.session_manager
    try:
        turn = mgr.add_report(session_id, req.report_id, req.text)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    except (GrammarError, InvariantViolation) as exc:
        raise HTTPException(status_code=400, detail=serialize_error(exc))
    return {
        "report_id": req.report_id,
        "turn_id": turn.id,
        "units": sorted(turn.movements),
    }


@router.get("/{session_id}")
def list_reports(session_id: str, request: Request) -> dict[str, Any]:
    """Parsed reports, failures, and the turns they contributed to."""
    mgr = request.app.state.session_manager
    try:
        session = mgr.get_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    pipeline = session.pipeline
    return {
        "reports": list(session.pipeline.report_ids),
        "failures": [f.to_dict() for f in pipeline.failures],
        "turns": [serialize_turn(pipeline.turns[t]) for t in sorted(pipeline.turns)],
    }
