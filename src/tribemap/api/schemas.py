"""
Pydantic models for API request/response validation.
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from typing import Any


# === Sessions ===

class CreateSessionRequest(BaseModel):
    config: dict[str, Any] | None = None
    name: str | None = None


class SessionSummary(BaseModel):
    id: str
    name: str
    status: str
    report_count: int
    turn_count: int
    failure_count: int
    hex_count: int


class SessionResponse(SessionSummary):
    config: dict[str, Any]
    reports: list[str]
    failures: list[dict[str, Any]]


# === Reports ===

class UploadReportRequest(BaseModel):
    report_id: str = Field(min_length=1)
    text: str = Field(min_length=1)


class UploadReportResponse(BaseModel):
    report_id: str
    turn_id: str
    units: list[str]


# === Maps ===

class WalkResponse(BaseModel):
    session_id: str
    turn_ids: list[str]
    hex_count: int
    origin: str | None
    bounds: dict[str, str] | None
