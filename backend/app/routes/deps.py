# backend/app/routes/deps.py
"""Request-scoped accessors for the objects create_app() puts on app.state."""

from __future__ import annotations

import secrets
from pathlib import Path
from typing import Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates

from app.content.blogs import BlogStore
from app.content.jobs import JobStore
from app.core.config import Settings
from app.db.base import Backend, Record
from app.db.storage import UploadStore
from app.services.sheets import SheetsService
from app.services.sync_client import SpreadsheetSyncClient

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

# key in the signed session cookie that names the visitor's auth session
SESSION_KEY = "sid"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_backend(request: Request) -> Backend:
    return request.app.state.backend


def get_blogs(request: Request) -> BlogStore:
    return request.app.state.blogs


def get_jobs(request: Request) -> JobStore:
    return request.app.state.jobs


def get_uploads(request: Request) -> UploadStore:
    return request.app.state.uploads


def get_sync_client(request: Request) -> SpreadsheetSyncClient:
    return request.app.state.sync_client


def get_sheets(request: Request) -> SheetsService:
    return request.app.state.sheets


# -------- visitor session ----------------------------------------------------

def session_id(request: Request) -> Optional[str]:
    return request.session.get(SESSION_KEY)


def ensure_session_id(request: Request) -> str:
    sid = request.session.get(SESSION_KEY)
    if not sid:
        sid = secrets.token_urlsafe(24)
        request.session[SESSION_KEY] = sid
    return sid


def current_user(request: Request) -> Optional[Record]:
    """The user signed in from this browser, or None."""
    sid = session_id(request)
    return request.app.state.backend.auth.current_user(sid) if sid else None
