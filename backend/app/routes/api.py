# backend/app/routes/api.py
"""
JSON API for blog posts and job postings.
Envelope: {"success": true, "data": ..., "total"?: n} or {"success": false, "error": "..."}.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from app.content.blogs import BlogStore, ContentError
from app.content.jobs import JobStore
from .deps import get_blogs, get_jobs

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _fail(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _flag(value: Optional[str]) -> Optional[bool]:
    return None if value is None else value == "true"


def _limit(value: Optional[str]) -> Optional[int]:
    return int(value) if value and value.isdigit() else None


# -------- Blogs --------------------------------------------------------------

@router.get("/blogs")
def list_blogs(
    published: Optional[str] = None,
    featured: Optional[str] = None,
    limit: Optional[str] = None,
    blogs: BlogStore = Depends(get_blogs),
):
    posts = blogs.list(published=_flag(published), featured=_flag(featured), limit=_limit(limit))
    return {"success": True, "data": [p.model_dump() for p in posts], "total": len(posts)}


@router.get("/blogs/tag/{tag}")
def blogs_by_tag(
    tag: str,
    published: Optional[str] = None,
    limit: Optional[str] = None,
    blogs: BlogStore = Depends(get_blogs),
):
    posts = blogs.list(published=_flag(published), limit=_limit(limit), tag=tag)
    return {"success": True, "data": [p.model_dump() for p in posts], "total": len(posts)}


@router.get("/blogs/{post_id}")
def get_blog(post_id: str, blogs: BlogStore = Depends(get_blogs)):
    try:
        return {"success": True, "data": blogs.get(post_id).model_dump()}
    except ContentError as e:
        return _fail(str(e), e.status_code)


@router.post("/blogs", status_code=201)
def create_blog(payload: Dict[str, Any] = Body(...), blogs: BlogStore = Depends(get_blogs)):
    try:
        post = blogs.create(payload)
    except ContentError as e:
        return _fail(str(e), e.status_code)
    logger.info("Blog post created: %s", post.id)
    return {"success": True, "data": post.model_dump()}


@router.put("/blogs/{post_id}")
def update_blog(post_id: str, payload: Dict[str, Any] = Body(...), blogs: BlogStore = Depends(get_blogs)):
    try:
        return {"success": True, "data": blogs.update(post_id, payload).model_dump()}
    except ContentError as e:
        return _fail(str(e), e.status_code)


@router.delete("/blogs/{post_id}")
def delete_blog(post_id: str, blogs: BlogStore = Depends(get_blogs)):
    try:
        return {"success": True, "data": blogs.delete(post_id).model_dump()}
    except ContentError as e:
        return _fail(str(e), e.status_code)


# -------- Jobs ---------------------------------------------------------------

@router.get("/jobs")
def list_jobs(
    status: Optional[str] = None,
    department: Optional[str] = None,
    location: Optional[str] = None,
    type: Optional[str] = None,
    limit: Optional[str] = None,
    jobs: JobStore = Depends(get_jobs),
):
    found = jobs.list(status=status, department=department, location=location, type=type, limit=_limit(limit))
    return {"success": True, "data": [j.model_dump() for j in found], "total": len(found)}


@router.get("/jobs/{job_id}")
def get_job(job_id: str, jobs: JobStore = Depends(get_jobs)):
    try:
        return {"success": True, "data": jobs.get(job_id).model_dump()}
    except ContentError as e:
        return _fail(str(e), e.status_code)


@router.post("/jobs", status_code=201)
def create_job(payload: Dict[str, Any] = Body(...), jobs: JobStore = Depends(get_jobs)):
    try:
        job = jobs.create(payload)
    except ContentError as e:
        return _fail(str(e), e.status_code)
    logger.info("Job posting created: %s", job.id)
    return {"success": True, "data": job.model_dump()}


@router.put("/jobs/{job_id}")
def update_job(job_id: str, payload: Dict[str, Any] = Body(...), jobs: JobStore = Depends(get_jobs)):
    try:
        return {"success": True, "data": jobs.update(job_id, payload).model_dump()}
    except ContentError as e:
        return _fail(str(e), e.status_code)


@router.patch("/jobs/{job_id}/status")
def update_job_status(job_id: str, payload: Dict[str, Any] = Body(...), jobs: JobStore = Depends(get_jobs)):
    try:
        return {"success": True, "data": jobs.set_status(job_id, payload.get("status")).model_dump()}
    except ContentError as e:
        return _fail(str(e), e.status_code)


@router.delete("/jobs/{job_id}")
def delete_job(job_id: str, jobs: JobStore = Depends(get_jobs)):
    try:
        return {"success": True, "data": jobs.delete(job_id).model_dump()}
    except ContentError as e:
        return _fail(str(e), e.status_code)


__all__ = ["router"]
