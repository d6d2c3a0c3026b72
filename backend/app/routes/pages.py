# backend/app/routes/pages.py
"""
Public pages and their form posts (contact, get-started, careers, blog,
newsletter). A failed submission re-renders the page with the entered values
so nothing has to be typed again.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import HTMLResponse
from starlette.concurrency import run_in_threadpool

from app.content.blogs import BlogStore, ContentError
from app.content.jobs import JobStore
from app.db.base import Backend
from app.db.storage import UploadError, UploadStore
from app.forms.controllers import (
    SubmissionError,
    SubmissionResult,
    submit_application,
    submit_contact,
    submit_get_started,
    submit_resume,
    subscribe_newsletter,
)
from app.forms.schemas import FormValidationError
from app.services.sync_client import SpreadsheetSyncClient
from .deps import current_user, get_backend, get_blogs, get_jobs, get_sync_client, get_uploads, templates

logger = logging.getLogger(__name__)

router = APIRouter()


def _render(request: Request, name: str, context: Dict[str, Any], status_code: int = 200):
    backend: Backend = request.app.state.backend
    base = {
        "user": current_user(request),
        "demo": backend.demo,
        "values": {},
        "error": "",
        "notice": "",
    }
    base.update(context)
    return templates.TemplateResponse(request, name, base, status_code=status_code)


def _text_fields(form) -> Dict[str, str]:
    return {k: v for k, v in form.items() if isinstance(v, str)}


async def _submit(
    request: Request,
    template: str,
    context: Dict[str, Any],
    values: Dict[str, str],
    action: Callable[[], SubmissionResult],
):
    """Run one controller off the event loop and turn its outcome into a page."""
    try:
        result = await run_in_threadpool(action)
    except FormValidationError as e:
        return _render(request, template, {**context, "error": str(e), "values": values}, 400)
    except UploadError as e:
        logger.warning("Upload failed: %s", e)
        return _render(request, template, {**context, "error": str(e), "values": values}, e.status_code)
    except SubmissionError as e:
        return _render(request, template, {**context, "error": str(e), "values": values}, 500)
    return _render(request, template, {**context, "notice": result.message})


# -------- Home / newsletter --------------------------------------------------

@router.get("/", response_class=HTMLResponse)
def home(request: Request, blogs: BlogStore = Depends(get_blogs)):
    return _render(request, "home.html", {"featured": blogs.list(published=True, featured=True, limit=3)})


@router.post("/newsletter", response_class=HTMLResponse)
async def newsletter(
    request: Request,
    tasks: BackgroundTasks,
    backend: Backend = Depends(get_backend),
    blogs: BlogStore = Depends(get_blogs),
    sync: SpreadsheetSyncClient = Depends(get_sync_client),
):
    values = _text_fields(await request.form())
    context = {"posts": blogs.list(published=True)}
    return await _submit(request, "blogs.html", context, values,
                         lambda: subscribe_newsletter(backend, values, sync, tasks))


# -------- Contact ------------------------------------------------------------

@router.get("/contact", response_class=HTMLResponse)
def contact_page(request: Request):
    return _render(request, "contact.html", {})


@router.post("/contact", response_class=HTMLResponse)
async def contact_submit(
    request: Request,
    tasks: BackgroundTasks,
    backend: Backend = Depends(get_backend),
    sync: SpreadsheetSyncClient = Depends(get_sync_client),
):
    values = _text_fields(await request.form())
    return await _submit(request, "contact.html", {}, values, lambda: submit_contact(backend, values, sync, tasks))


# -------- Get started --------------------------------------------------------

@router.get("/get-started", response_class=HTMLResponse)
def get_started_page(request: Request):
    return _render(request, "get_started.html", {})


@router.post("/get-started", response_class=HTMLResponse)
async def get_started_submit(
    request: Request,
    tasks: BackgroundTasks,
    backend: Backend = Depends(get_backend),
    sync: SpreadsheetSyncClient = Depends(get_sync_client),
):
    values = _text_fields(await request.form())
    return await _submit(request, "get_started.html", {}, values,
                         lambda: submit_get_started(backend, values, sync, tasks))


# -------- Careers ------------------------------------------------------------

@router.get("/careers", response_class=HTMLResponse)
def careers_page(request: Request, jobs: JobStore = Depends(get_jobs)):
    return _render(request, "careers.html", {"jobs": jobs.list(status="active")})


@router.post("/careers/apply", response_class=HTMLResponse)
async def careers_apply(
    request: Request,
    tasks: BackgroundTasks,
    backend: Backend = Depends(get_backend),
    jobs: JobStore = Depends(get_jobs),
    uploads: UploadStore = Depends(get_uploads),
    sync: SpreadsheetSyncClient = Depends(get_sync_client),
):
    form = await request.form()
    values = _text_fields(form)
    resume: Optional[Any] = form.get("resume")
    user = current_user(request)
    context = {"jobs": jobs.list(status="active")}
    return await _submit(request, "careers.html", context, values,
                         lambda: submit_application(backend, uploads, values, resume, sync, tasks, user=user))


@router.post("/careers/resume", response_class=HTMLResponse)
async def careers_resume(
    request: Request,
    tasks: BackgroundTasks,
    backend: Backend = Depends(get_backend),
    jobs: JobStore = Depends(get_jobs),
    uploads: UploadStore = Depends(get_uploads),
    sync: SpreadsheetSyncClient = Depends(get_sync_client),
):
    form = await request.form()
    values = _text_fields(form)
    resume: Optional[Any] = form.get("resume")
    context = {"jobs": jobs.list(status="active")}
    return await _submit(request, "careers.html", context, values,
                         lambda: submit_resume(backend, uploads, values, resume, sync, tasks))


# -------- Blog ---------------------------------------------------------------

@router.get("/blog", response_class=HTMLResponse)
def blog_index(request: Request, tag: Optional[str] = None, blogs: BlogStore = Depends(get_blogs)):
    return _render(request, "blogs.html", {"posts": blogs.list(published=True, tag=tag), "tag": tag})


@router.get("/blog/{post_id}", response_class=HTMLResponse)
def blog_post(request: Request, post_id: str, blogs: BlogStore = Depends(get_blogs)):
    try:
        post = blogs.get(post_id)
    except ContentError:
        post = None
    if post is None or not post.published:
        return _render(request, "blogs.html", {"posts": [], "error": "Blog post not found"}, 404)
    return _render(request, "blog_post.html", {"post": post})


__all__ = ["router"]
