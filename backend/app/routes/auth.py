# backend/app/routes/auth.py
"""
Email/password sign-in, sign-up, sign-out and the (unavailable) OAuth hook.
State changes reach the rest of the app through the auth observer; the HTTP
answer to a successful transition is a 303 redirect.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from app.core.utils import format_error_message, iso_now, log_error
from app.db.base import SIGNED_IN, Backend, Record, Table
from .deps import ensure_session_id, get_backend, session_id, templates

logger = logging.getLogger(__name__)

router = APIRouter()


def profile_upserter(backend: Backend) -> Callable[[str, Optional[Record]], None]:
    """Observer that keeps the `users` profile row current after each sign-in."""

    def _on_change(event: str, session: Optional[Record]) -> None:
        if event != SIGNED_IN or not session:
            return
        user = session["user"]
        meta = user.get("user_metadata") or {}
        res = backend.tables.upsert(Table.USERS, {
            "id": user["id"],
            "email": user["email"],
            "full_name": meta.get("full_name") or meta.get("name"),
            "avatar_url": meta.get("avatar_url"),
            "updated_at": iso_now(),
        })
        if not res.ok:
            log_error("Error upserting user profile", res.error, logger)

    return _on_change


def _login_page(request: Request, error: str = "", mode: str = "login", email: str = "", status_code: int = 200):
    return templates.TemplateResponse(
        request,
        "login.html",
        {"error": error, "mode": mode, "email": email},
        status_code=status_code,
    )


@router.get("/login", response_class=HTMLResponse)
def login_form(request: Request, mode: str = "login"):
    return _login_page(request, mode="signup" if mode == "signup" else "login")


@router.post("/login", response_class=HTMLResponse)
def login_submit(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    mode: str = Form("login"),
    full_name: str = Form(""),
    backend: Backend = Depends(get_backend),
):
    if mode == "signup":
        if not full_name.strip():
            return _login_page(request, "Full name is required", mode, email, 400)
        res = backend.auth.sign_up(
            email, password, {"data": {"full_name": full_name.strip()}}, session_id=ensure_session_id(request)
        )
    else:
        res = backend.auth.sign_in_with_password(email, password, session_id=ensure_session_id(request))
    if not res.ok:
        return _login_page(request, format_error_message(res.error), mode, email, 400)
    logger.info("Signed in: %s", email)
    return RedirectResponse(url="/", status_code=303)


@router.get("/auth/oauth/{provider}", response_class=HTMLResponse)
def oauth_start(request: Request, provider: str, backend: Backend = Depends(get_backend)):
    res = backend.auth.sign_in_with_oauth(provider)
    if not res.ok:
        return _login_page(request, format_error_message(res.error), status_code=400)
    return RedirectResponse(url=(res.data or {}).get("url") or "/", status_code=303)


@router.post("/logout")
def logout(request: Request, backend: Backend = Depends(get_backend)):
    sid = session_id(request)
    if sid:
        backend.auth.sign_out(sid)
    request.session.clear()
    return RedirectResponse(url="/", status_code=303)


__all__ = ["router", "profile_upserter"]
