# backend/app/routes/admin.py
"""
Password-gated admin dashboard.

The gate is a shared password and a plain `admin_session` cookie; it keeps
casual visitors out of the UI and nothing more.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response as HTTPResponse

from app.admin.dashboard import (
    ADMIN_COOKIE,
    APPLICATION_STATUSES,
    TABS,
    check_password,
    export_all,
    export_tab,
    filter_records,
    load_dashboard,
    update_application_status,
)
from app.content.blogs import BlogStore, ContentError
from app.content.jobs import JOB_STATUSES, JOB_TYPES, JobStore
from app.core.config import Settings
from app.core.utils import format_error_message
from app.db.base import Backend
from app.services.export import ExportArtifact
from .deps import get_backend, get_blogs, get_jobs, get_settings, templates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin")

NO_DATA = "No data to export"


def _authed(request: Request) -> bool:
    return request.cookies.get(ADMIN_COOKIE) == "1"


def _to_admin(tab: str = "applications", **params: str) -> RedirectResponse:
    query = {"tab": tab, **{k: v for k, v in params.items() if v}}
    return RedirectResponse(url=f"/admin?{urlencode(query)}", status_code=303)


def _download(artifact: ExportArtifact) -> HTTPResponse:
    return HTTPResponse(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )


def _csv_list(raw: Optional[str]) -> list:
    return [s.strip() for s in (raw or "").split(",") if s.strip()]


# -------- Gate ---------------------------------------------------------------

@router.post("/login", response_class=HTMLResponse)
def admin_login(request: Request, password: str = Form(""), settings: Settings = Depends(get_settings)):
    if not check_password(password, settings.admin_password):
        logger.warning("Admin login rejected")
        return templates.TemplateResponse(
            request, "admin_login.html", {"error": "Invalid password. Please try again."}, status_code=401
        )
    resp = _to_admin()
    resp.set_cookie(ADMIN_COOKIE, "1", httponly=True, samesite="lax")
    return resp


@router.post("/logout")
def admin_logout():
    resp = RedirectResponse(url="/admin", status_code=303)
    resp.delete_cookie(ADMIN_COOKIE)
    return resp


# -------- Dashboard ----------------------------------------------------------

@router.get("", response_class=HTMLResponse)
def dashboard(
    request: Request,
    tab: str = "applications",
    q: str = "",
    status: str = "",
    notice: str = "",
    backend: Backend = Depends(get_backend),
    blogs: BlogStore = Depends(get_blogs),
    jobs: JobStore = Depends(get_jobs),
):
    if not _authed(request):
        return templates.TemplateResponse(request, "admin_login.html", {"error": ""})
    if tab not in TABS:
        tab = "applications"
    data = load_dashboard(backend, blogs, jobs)
    return templates.TemplateResponse(
        request,
        "admin.html",
        {
            "tab": tab,
            "tabs": TABS,
            "q": q,
            "status": status,
            "notice": notice,
            "errors": data.errors,
            "stats": data.stats(),
            "rows": filter_records(tab, data.records(tab), q, status),
            "statuses": APPLICATION_STATUSES,
            "job_statuses": JOB_STATUSES,
        },
    )


@router.post("/applications/{application_id}/status")
def set_application_status(
    request: Request,
    application_id: str,
    status: str = Form(...),
    backend: Backend = Depends(get_backend),
):
    if not _authed(request):
        return RedirectResponse(url="/admin", status_code=303)
    res = update_application_status(backend, application_id, status)
    notice = "" if res.ok else format_error_message(res.error)
    return _to_admin("applications", notice=notice)


# -------- Exports ------------------------------------------------------------

@router.get("/export/all.xlsx")
def export_everything(
    request: Request,
    q: str = "",
    status: str = "",
    backend: Backend = Depends(get_backend),
    blogs: BlogStore = Depends(get_blogs),
    jobs: JobStore = Depends(get_jobs),
):
    if not _authed(request):
        return RedirectResponse(url="/admin", status_code=303)
    artifact = export_all(load_dashboard(backend, blogs, jobs), q, status)
    if artifact is None:
        return _to_admin(notice=NO_DATA)
    logger.info("Exported %s", artifact.filename)
    return _download(artifact)


@router.get("/export/{tab}.{fmt}")
def export_view(
    request: Request,
    tab: str,
    fmt: str,
    q: str = "",
    status: str = "",
    backend: Backend = Depends(get_backend),
    blogs: BlogStore = Depends(get_blogs),
    jobs: JobStore = Depends(get_jobs),
):
    if not _authed(request):
        return RedirectResponse(url="/admin", status_code=303)
    if tab not in TABS or fmt not in ("csv", "xlsx"):
        return _to_admin(notice="Unknown export")
    artifact = export_tab(load_dashboard(backend, blogs, jobs), tab, fmt, q, status)
    if artifact is None:
        return _to_admin(tab, q=q, status=status, notice=NO_DATA)
    logger.info("Exported %s", artifact.filename)
    return _download(artifact)


# -------- Blog editor --------------------------------------------------------

def _blog_payload(form: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "title": form.get("title"),
        "excerpt": form.get("excerpt"),
        "content": form.get("content"),
        "author": form.get("author"),
        "publishDate": form.get("publishDate"),
        "readTime": form.get("readTime"),
        "image": form.get("image"),
        "tags": _csv_list(form.get("tags")),
        "featured": form.get("featured") == "on",
        "published": form.get("published") == "on",
    }


@router.get("/blogs/new", response_class=HTMLResponse)
def new_blog(request: Request):
    if not _authed(request):
        return RedirectResponse(url="/admin", status_code=303)
    return templates.TemplateResponse(request, "admin_blog_form.html", {"post": None, "error": ""})


@router.get("/blogs/{post_id}/edit", response_class=HTMLResponse)
def edit_blog(request: Request, post_id: str, blogs: BlogStore = Depends(get_blogs)):
    if not _authed(request):
        return RedirectResponse(url="/admin", status_code=303)
    try:
        post = blogs.get(post_id)
    except ContentError as e:
        return _to_admin("blogs", notice=str(e))
    return templates.TemplateResponse(request, "admin_blog_form.html", {"post": post, "error": ""})


@router.post("/blogs", response_class=HTMLResponse)
async def save_new_blog(request: Request, blogs: BlogStore = Depends(get_blogs)):
    if not _authed(request):
        return RedirectResponse(url="/admin", status_code=303)
    payload = _blog_payload(dict(await request.form()))
    try:
        blogs.create(payload)
    except ContentError as e:
        return templates.TemplateResponse(
            request, "admin_blog_form.html", {"post": payload, "error": str(e)}, status_code=e.status_code
        )
    return _to_admin("blogs", notice="Blog post saved")


@router.post("/blogs/{post_id}", response_class=HTMLResponse)
async def save_blog(request: Request, post_id: str, blogs: BlogStore = Depends(get_blogs)):
    if not _authed(request):
        return RedirectResponse(url="/admin", status_code=303)
    payload = _blog_payload(dict(await request.form()))
    try:
        blogs.update(post_id, payload)
    except ContentError as e:
        return templates.TemplateResponse(
            request, "admin_blog_form.html", {"post": {**payload, "id": post_id}, "error": str(e)},
            status_code=e.status_code,
        )
    return _to_admin("blogs", notice="Blog post saved")


@router.post("/blogs/{post_id}/delete")
def remove_blog(request: Request, post_id: str, blogs: BlogStore = Depends(get_blogs)):
    if not _authed(request):
        return RedirectResponse(url="/admin", status_code=303)
    try:
        blogs.delete(post_id)
    except ContentError as e:
        return _to_admin("blogs", notice=str(e))
    return _to_admin("blogs", notice="Blog post deleted")


# -------- Job editor ---------------------------------------------------------

def _job_payload(form: Dict[str, Any]) -> Dict[str, Any]:
    payload = {k: form.get(k) or None for k in (
        "title", "department", "location", "type", "description", "requirements",
        "responsibilities", "benefits", "salary_range", "experience_level",
        "application_deadline", "status",
    )}
    payload["skills_required"] = _csv_list(form.get("skills_required"))
    return payload


def _job_form(request: Request, job: Any, error: str = "", status_code: int = 200):
    return templates.TemplateResponse(
        request,
        "admin_job_form.html",
        {"job": job, "error": error, "job_types": JOB_TYPES, "job_statuses": JOB_STATUSES},
        status_code=status_code,
    )


@router.get("/jobs/new", response_class=HTMLResponse)
def new_job(request: Request):
    if not _authed(request):
        return RedirectResponse(url="/admin", status_code=303)
    return _job_form(request, None)


@router.get("/jobs/{job_id}/edit", response_class=HTMLResponse)
def edit_job(request: Request, job_id: str, jobs: JobStore = Depends(get_jobs)):
    if not _authed(request):
        return RedirectResponse(url="/admin", status_code=303)
    try:
        job = jobs.get(job_id)
    except ContentError as e:
        return _to_admin("jobs", notice=str(e))
    return _job_form(request, job)


@router.post("/jobs", response_class=HTMLResponse)
async def save_new_job(request: Request, jobs: JobStore = Depends(get_jobs)):
    if not _authed(request):
        return RedirectResponse(url="/admin", status_code=303)
    payload = _job_payload(dict(await request.form()))
    try:
        jobs.create(payload)
    except ContentError as e:
        return _job_form(request, payload, str(e), e.status_code)
    return _to_admin("jobs", notice="Job posting saved")


@router.post("/jobs/{job_id}", response_class=HTMLResponse)
async def save_job(request: Request, job_id: str, jobs: JobStore = Depends(get_jobs)):
    if not _authed(request):
        return RedirectResponse(url="/admin", status_code=303)
    payload = _job_payload(dict(await request.form()))
    try:
        jobs.update(job_id, payload)
    except ContentError as e:
        return _job_form(request, {**payload, "id": job_id}, str(e), e.status_code)
    return _to_admin("jobs", notice="Job posting saved")


@router.post("/jobs/{job_id}/status")
def set_job_status(request: Request, job_id: str, status: str = Form(...), jobs: JobStore = Depends(get_jobs)):
    if not _authed(request):
        return RedirectResponse(url="/admin", status_code=303)
    try:
        jobs.set_status(job_id, status)
    except ContentError as e:
        return _to_admin("jobs", notice=str(e))
    return _to_admin("jobs")


@router.post("/jobs/{job_id}/delete")
def remove_job(request: Request, job_id: str, jobs: JobStore = Depends(get_jobs)):
    if not _authed(request):
        return RedirectResponse(url="/admin", status_code=303)
    try:
        jobs.delete(job_id)
    except ContentError as e:
        return _to_admin("jobs", notice=str(e))
    return _to_admin("jobs", notice="Job posting deleted")


__all__ = ["router"]
