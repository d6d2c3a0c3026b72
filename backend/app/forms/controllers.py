# backend/app/forms/controllers.py
"""
Submission flow shared by every public form:

  validate -> (upload file) -> insert through the backend -> schedule sync -> result

Validation and upload failures abort before anything is written. A failed
insert raises SubmissionError with a readable message. The spreadsheet sync
is scheduled on FastAPI BackgroundTasks and can only log.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from fastapi import BackgroundTasks

from app.core.utils import format_error_message, iso_now, log_error
from app.db.base import Backend, Record, Table
from app.db.storage import UploadStore
from app.services.sync_client import SpreadsheetSyncClient
from .schemas import ApplicationForm, ContactForm, GetStartedForm, NewsletterForm, ResumeForm

logger = logging.getLogger(__name__)

ALREADY_SUBSCRIBED = "You are already subscribed to our newsletter!"


class SubmissionError(Exception):
    """The primary write failed; the form should be shown again with its values."""


@dataclass
class SubmissionResult:
    message: str
    record: Record
    duplicate: bool = False


def _has_file(upload: Any) -> bool:
    return upload is not None and bool(getattr(upload, "filename", None))


def _insert(backend: Backend, table: Table, record: Mapping[str, Any], prefix: str = "") -> Record:
    res = backend.tables.insert(table, [record])
    if not res.ok:
        log_error(f"Insert into {table.value} failed", res.error, logger)
        raise SubmissionError(f"{prefix}{format_error_message(res.error)}")
    return (res.data or [{}])[0]


def _schedule(
    tasks: Optional[BackgroundTasks],
    sync: Optional[SpreadsheetSyncClient],
    method: str,
    payload: Dict[str, Any],
) -> None:
    if sync is None:
        return
    fn: Callable[[Mapping[str, Any]], bool] = getattr(sync, method)
    if tasks is None:
        fn(payload)
    else:
        tasks.add_task(fn, payload)


def _sync_payload(record: Mapping[str, Any], saved: Mapping[str, Any], date_field: str = "created_at") -> Dict[str, Any]:
    payload = dict(record)
    payload[date_field] = saved.get(date_field) or iso_now()
    return payload


def submit_contact(
    backend: Backend,
    raw: Mapping[str, Any],
    sync: Optional[SpreadsheetSyncClient] = None,
    tasks: Optional[BackgroundTasks] = None,
) -> SubmissionResult:
    form = ContactForm.parse(raw)
    record = form.to_record()
    saved = _insert(backend, Table.CONTACTS, record)
    _schedule(tasks, sync, "sync_contact", _sync_payload(record, saved))
    return SubmissionResult("Your message has been sent successfully. We'll get back to you soon.", saved)


def submit_application(
    backend: Backend,
    uploads: UploadStore,
    raw: Mapping[str, Any],
    resume: Any = None,
    sync: Optional[SpreadsheetSyncClient] = None,
    tasks: Optional[BackgroundTasks] = None,
    user: Optional[Mapping[str, Any]] = None,
) -> SubmissionResult:
    """`user` is the applicant's signed-in account, if any; its id is stored on the row."""
    form = ApplicationForm.parse(raw)
    resume_url = None
    if _has_file(resume):
        resume_url = uploads.save_resume(resume.filename, resume.content_type, resume.file).url

    record = form.to_record()
    record.update(
        user_id=(user or {}).get("id"),
        resume_url=resume_url,
        status="pending",
    )
    saved = _insert(backend, Table.JOB_APPLICATIONS, record, prefix="Failed to submit application: ")
    _schedule(tasks, sync, "sync_job_application", _sync_payload(record, saved))
    return SubmissionResult(
        f"Thank you for applying for the {form.position} position. "
        "We'll review your application and get back to you soon.",
        saved,
    )


def submit_get_started(
    backend: Backend,
    raw: Mapping[str, Any],
    sync: Optional[SpreadsheetSyncClient] = None,
    tasks: Optional[BackgroundTasks] = None,
) -> SubmissionResult:
    form = GetStartedForm.parse(raw)
    record = form.to_record()
    saved = _insert(backend, Table.GET_STARTED_REQUESTS, record)
    _schedule(tasks, sync, "sync_get_started_request", _sync_payload(record, saved))
    return SubmissionResult("Thank you for your interest! We'll get back to you within 24 hours.", saved)


def submit_resume(
    backend: Backend,
    uploads: UploadStore,
    raw: Mapping[str, Any],
    resume: Any = None,
    sync: Optional[SpreadsheetSyncClient] = None,
    tasks: Optional[BackgroundTasks] = None,
) -> SubmissionResult:
    form = ResumeForm.parse(raw)
    record = form.to_record()
    record["resume_url"] = None
    if _has_file(resume):
        record["resume_url"] = uploads.save_resume(resume.filename, resume.content_type, resume.file).url

    saved = _insert(backend, Table.RESUME_UPLOADS, record, prefix="Failed to submit resume: ")
    _schedule(tasks, sync, "sync_resume_upload", _sync_payload(record, saved))
    return SubmissionResult(
        "Thank you for submitting your resume. We'll review it and get back to you for suitable opportunities.",
        saved,
    )


def _is_duplicate(error: Optional[Mapping[str, Any]]) -> bool:
    if not error:
        return False
    message = format_error_message(error).lower()
    return "duplicate" in message or "unique" in message or error.get("code") == "23505"


def subscribe_newsletter(
    backend: Backend,
    raw: Mapping[str, Any],
    sync: Optional[SpreadsheetSyncClient] = None,
    tasks: Optional[BackgroundTasks] = None,
) -> SubmissionResult:
    form = NewsletterForm.parse(raw)
    record = {"email": form.email}
    res = backend.tables.insert(Table.NEWSLETTER_SUBSCRIBERS, [record])
    if not res.ok:
        if _is_duplicate(res.error):
            logger.info("Newsletter email already subscribed: %s", form.email)
            return SubmissionResult(ALREADY_SUBSCRIBED, record, duplicate=True)
        log_error("Newsletter subscription error", res.error, logger)
        raise SubmissionError(f"Subscription failed: {format_error_message(res.error)}")

    saved = (res.data or [{}])[0]
    _schedule(tasks, sync, "sync_newsletter_subscription", _sync_payload(record, saved, "subscribed_at"))
    return SubmissionResult("Successfully subscribed! Thank you for joining our newsletter.", saved)


__all__ = [
    "SubmissionError", "SubmissionResult", "ALREADY_SUBSCRIBED",
    "submit_contact", "submit_application", "submit_get_started",
    "submit_resume", "subscribe_newsletter",
]
