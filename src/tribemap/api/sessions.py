"""
Session manager for mapping runs.

Each session wraps a ``MapPipeline``: reports are uploaded one at a time,
then the session is walked to produce the hex map. Sessions live in
memory only.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Any

from tribemap.core.config import MapperConfig
from tribemap.core.models import Turn
from tribemap.engine.pipeline import MappingResult, MapPipeline

logger = logging.getLogger(__name__)


@dataclass
class MappingSession:
    """A set of uploaded reports and, once walked, their resolved map."""

    id: str
    name: str
    config: MapperConfig
    pipeline: MapPipeline
    status: str = "created"  # created | parsed | mapped
    result: MappingResult | None = None


class SessionManager:
    """Manages multiple in-memory mapping sessions."""

    def __init__(self, default_origin_grid: str | None = None) -> None:
        self.sessions: dict[str, MappingSession] = {}
        self.default_origin_grid = default_origin_grid
        self._lock = threading.Lock()

    def create_session(
        self,
        config: MapperConfig | None = None,
        name: str | None = None,
    ) -> MappingSession:
        """Create a new mapping session."""
        if config is None:
            config = MapperConfig()
            if self.default_origin_grid:
                config.origin_grid = self.default_origin_grid

        session_id = uuid.uuid4().hex[:8]
        session = MappingSession(
            id=session_id,
            name=name or config.clan_id or session_id,
            config=config,
            pipeline=MapPipeline(config),
        )
        self.sessions[session_id] = session
        logger.info("created mapping session %s", session_id)
        return session

    def get_session(self, session_id: str) -> MappingSession:
        """Get a session by ID.

        Raises KeyError if not found.
        """
        if session_id in self.sessions:
            return self.sessions[session_id]
        raise KeyError(f"Session '{session_id}' not found")

    def delete_session(self, session_id: str) -> None:
        if session_id not in self.sessions:
            raise KeyError(f"Session '{session_id}' not found")
        del self.sessions[session_id]

    def list_sessions(self) -> list[dict[str, Any]]:
        return [session_summary(s) for s in self.sessions.values()]

    def add_report(self, session_id: str, report_id: str, text: str) -> Turn:
        """Parse a report into the session.

        Raises:
            KeyError: Unknown session.
            GrammarError, InvariantViolation: The report did not parse; it
                is also recorded in the session's failures.
        """
        session = self.get_session(session_id)
        with self._lock:
            pipeline = session.pipeline
            failures_before = len(pipeline.failures)
            turn = pipeline.add_report(report_id, text)
            if turn is None:
                raise pipeline.failures[failures_before].error
            session.status = "parsed"
            session.result = None
        return turn

    def walk(self, session_id: str) -> MappingSession:
        """Resolve all uploaded reports onto a hex map.

        Raises:
            KeyError: Unknown session.
            ValueError: No reports uploaded yet.
            ContinuityError, InvariantViolation: The reports do not reconcile.
        """
        session = self.get_session(session_id)
        with self._lock:
            if not session.pipeline.turns:
                raise ValueError(f"Session '{session_id}' has no parsed reports")
            session.result = session.pipeline.run()
            session.status = "mapped"
        return session

    def get_result(self, session_id: str) -> MappingResult:
        """Resolved map for a session.

        Raises KeyError if unknown, ValueError if not yet walked.
        """
        session = self.get_session(session_id)
        if session.result is None:
            raise ValueError(f"Session '{session_id}' has not been walked")
        return session.result


def session_summary(session: MappingSession) -> dict[str, Any]:
    return {
        "id": session.id,
        "name": session.name,
        "status": session.status,
        "report_count": len(session.pipeline.report_ids),
        "turn_count": len(session.pipeline.turns),
        "failure_count": len(session.pipeline.failures),
        "hex_count": len(session.result.hex_map) if session.result else 0,
    }
