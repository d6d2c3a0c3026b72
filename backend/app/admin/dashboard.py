# backend/app/admin/dashboard.py
"""
Admin dashboard data: password gate, record loading, per-tab search,
stats, application status updates and export dispatch.

Everything here reads through the same Backend / content stores the public
site writes to, so the dashboard works the same in demo and SQL mode.
"""

from __future__ import annotations

import hmac
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence

from app.content.blogs import BlogStore
from app.content.jobs import JobStore
from app.core.utils import log_error
from app.db.base import Backend, Record, Response, Table
from app.services.export import ExportArtifact, export_all_to_excel, export_to_csv, export_to_excel

logger = logging.getLogger(__name__)

ADMIN_COOKIE = "admin_session"
APPLICATION_STATUSES = ("pending", "reviewing", "approved", "rejected")

TABS = ("applications", "contacts", "resumes", "getstarted", "newsletter", "blogs", "jobs")

# tab -> fields matched by the search box
SEARCH_FIELDS: Dict[str, tuple] = {
    "applications": ("full_name", "email", "position"),
    "contacts": ("name", "email", "company"),
    "resumes": ("file_name", "applicant_name", "position"),
    "getstarted": ("first_name", "last_name", "email", "company"),
    "newsletter": ("email",),
    "blogs": ("title", "author", "tags"),
    "jobs": ("title", "department", "location", "skills_required"),
}

EXPORT_FILENAMES = {
    "applications": "job_applications",
    "contacts": "contact_messages",
    "resumes": "resume_uploads",
    "getstarted": "get_started_requests",
    "newsletter": "newsletter_subscribers",
    "blogs": "blog_posts",
    "jobs": "job_postings",
}


def check_password(candidate: Optional[str], expected: str) -> bool:
    return hmac.compare_digest((candidate or "").encode(), expected.encode())


@dataclass
class DashboardData:
    applications: List[Record] = field(default_factory=list)
    contacts: List[Record] = field(default_factory=list)
    resume_uploads: List[Record] = field(default_factory=list)
    get_started: List[Record] = field(default_factory=list)
    newsletter: List[Record] = field(default_factory=list)
    blogs: List[Record] = field(default_factory=list)
    jobs: List[Record] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def resumes(self) -> List[Record]:
        return combine_resumes(self.applications, self.resume_uploads)

    def records(self, tab: str) -> List[Record]:
        return {
            "applications": self.applications,
            "contacts": self.contacts,
            "resumes": self.resumes,
            "getstarted": self.get_started,
            "newsletter": self.newsletter,
            "blogs": self.blogs,
            "jobs": self.jobs,
        }[tab]

    def stats(self) -> Dict[str, int]:
        return {
            "applications": len(self.applications),
            "pending_applications": sum(1 for a in self.applications if a.get("status") == "pending"),
            "contacts": len(self.contacts),
            "resumes": len(self.resumes),
            "get_started": len(self.get_started),
            "newsletter": len(self.newsletter),
            "active_subscribers": sum(1 for n in self.newsletter if n.get("is_active", True)),
            "blogs": len(self.blogs),
            "jobs": len(self.jobs),
            "active_jobs": sum(1 for j in self.jobs if j.get("status") == "active"),
        }


def _resume_file_name(full_name: Optional[str]) -> str:
    return "Resume_" + re.sub(r"\s+", "_", full_name or "") + ".pdf"


def combine_resumes(applications: Sequence[Mapping[str, Any]], uploads: Sequence[Mapping[str, Any]]) -> List[Record]:
    """Resumes attached to applications first, then direct uploads; entries without a file are skipped."""
    out: List[Record] = []
    for app in applications:
        if app.get("resume_url"):
            out.append({
                "id": app.get("id"),
                "file_name": _resume_file_name(app.get("full_name")),
                "file_url": app["resume_url"],
                "uploaded_at": app.get("created_at"),
                "applicant_name": app.get("full_name"),
                "position": app.get("position"),
                "source": "job_application",
            })
    for up in uploads:
        if up.get("resume_url"):
            out.append({
                "id": up.get("id"),
                "file_name": _resume_file_name(up.get("full_name")),
                "file_url": up["resume_url"],
                "uploaded_at": up.get("created_at"),
                "applicant_name": up.get("full_name"),
                "position": up.get("position_interested") or "General Application",
                "source": "direct_upload",
            })
    return out


def _rows(res: Response, what: str, errors: List[str]) -> List[Record]:
    if not res.ok:
        log_error(f"Error fetching {what}", res.error, logger)
        errors.append(f"Could not load {what}")
        return []
    return list(res.data or [])


def load_dashboard(backend: Backend, blogs: BlogStore, jobs: JobStore) -> DashboardData:
    tables = backend.tables
    errors: List[str] = []
    data = DashboardData(
        applications=_rows(tables.list_ordered_by_created_at_desc(Table.JOB_APPLICATIONS), "job applications", errors),
        contacts=_rows(tables.list_ordered_by_created_at_desc(Table.CONTACTS), "contacts", errors),
        resume_uploads=_rows(tables.list_ordered_by_created_at_desc(Table.RESUME_UPLOADS), "resume uploads", errors),
        get_started=_rows(tables.list_ordered_by_created_at_desc(Table.GET_STARTED_REQUESTS), "get started requests", errors),
        newsletter=_rows(tables.list_ordered_by_created_at_desc(Table.NEWSLETTER_SUBSCRIBERS), "newsletter subscribers", errors),
        blogs=[p.model_dump() for p in blogs.list()],
        jobs=[j.model_dump() for j in jobs.list()],
        errors=errors,
    )
    logger.info("Dashboard loaded: %s", data.stats())
    return data


def _matches(value: Any, needle: str) -> bool:
    if isinstance(value, (list, tuple)):
        return any(_matches(v, needle) for v in value)
    return value is not None and needle in str(value).lower()


def filter_records(tab: str, records: Sequence[Mapping[str, Any]], query: str = "", status: str = "") -> List[Record]:
    needle = (query or "").strip().lower()
    fields = SEARCH_FIELDS[tab]
    out = []
    for rec in records:
        if needle and not any(_matches(rec.get(f), needle) for f in fields):
            continue
        if tab == "applications" and status and rec.get("status") != status:
            continue
        out.append(dict(rec))
    return out


def update_application_status(backend: Backend, application_id: str, status: str) -> Response:
    if status not in APPLICATION_STATUSES:
        return Response.fail(f"Invalid status '{status}'")
    res = backend.tables.update_by_id(Table.JOB_APPLICATIONS, application_id, {"status": status})
    if not res.ok:
        log_error("Error updating status", res.error, logger)
    return res


def export_tab(
    data: DashboardData, tab: str, fmt: str, query: str = "", status: str = "", today: Optional[date] = None
) -> Optional[ExportArtifact]:
    rows = filter_records(tab, data.records(tab), query, status)
    exporter = export_to_excel if fmt == "xlsx" else export_to_csv
    return exporter(rows, EXPORT_FILENAMES[tab], today=today)


def export_all(data: DashboardData, query: str = "", status: str = "", today: Optional[date] = None) -> Optional[ExportArtifact]:
    return export_all_to_excel(
        {
            "applications": filter_records("applications", data.applications, query, status),
            "contacts": filter_records("contacts", data.contacts, query),
            "resumes": filter_records("resumes", data.resumes, query),
            "get_started": filter_records("getstarted", data.get_started, query),
            "newsletter": filter_records("newsletter", data.newsletter, query),
        },
        today=today,
    )


__all__ = [
    "ADMIN_COOKIE", "APPLICATION_STATUSES", "TABS", "SEARCH_FIELDS", "EXPORT_FILENAMES",
    "DashboardData", "check_password", "combine_resumes", "load_dashboard",
    "filter_records", "update_application_status", "export_tab", "export_all",
]
