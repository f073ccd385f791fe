"""
FastAPI application factory for the tribemap API.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tribemap.api.sessions import SessionManager
from tribemap.api.routers import sessions, reports, maps

# Load .env: project root first, then CWD
_project_root = Path(__file__).resolve().parents[3]  # src/tribemap/api/app.py -> project root
load_dotenv(_project_root / ".env")
load_dotenv(Path.cwd() / ".env")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="tribemap API",
        description="REST API for mapping TribeNet turn reports onto the hex map",
        version="0.1.0",
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    origin_grid = os.environ.get("TRIBEMAP_ORIGIN_GRID") or None
    application.state.session_manager = SessionManager(default_origin_grid=origin_grid)

    application.include_router(sessions.router, prefix="/api/sessions", tags=["sessions"])
    application.include_router(reports.router, prefix="/api/reports", tags=["reports"])
    application.include_router(maps.router, prefix="/api/maps", tags=["maps"])

    @application.get("/api/health")
    def health_check():
        return {"status": "ok"}

    return application


app = create_app()
