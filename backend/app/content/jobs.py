# backend/app/content/jobs.py
"""
Job postings, kept in memory per app instance and seeded with open roles.
Backs /api/jobs, the careers page and the admin job editor.
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from app.core.utils import epoch_ms, iso_now, today_stamp
from .blogs import ContentError

JOB_STATUSES = ("active", "inactive", "closed")
JOB_TYPES = ("Full-time", "Part-time", "Contract", "Internship")


class JobPosting(BaseModel):
    id: str
    title: str
    department: str
    location: str
    type: str
    description: str
    requirements: str = ""
    responsibilities: str = ""
    benefits: str = ""
    salary_range: Optional[str] = None
    experience_level: str = ""
    skills_required: List[str] = Field(default_factory=list)
    status: str = "active"
    posted_date: str
    application_deadline: Optional[str] = None
    created_at: str
    updated_at: str


SEED_JOBS: List[Dict[str, Any]] = [
    {
        "id": "1",
        "title": "Senior VLSI Design Engineer",
        "department": "Engineering",
        "location": "Bangalore, India",
        "type": "Full-time",
        "description": "Lead VLSI design projects for next-generation semiconductor solutions.",
        "requirements": "- Bachelor's/Master's degree in Electronics/VLSI Engineering\n"
                        "- 5+ years of experience in VLSI design\n"
                        "- Proficiency in Verilog/SystemVerilog",
        "responsibilities": "- Design and develop complex VLSI circuits\n"
                            "- Optimize designs for power, performance, and area",
        "benefits": "- Competitive salary and benefits\n- Flexible working hours",
        "salary_range": "₹15-25 LPA",
        "experience_level": "5+ years",
        "skills_required": ["VLSI Design", "Verilog", "SystemVerilog", "Synopsys", "Cadence"],
        "status": "active",
        "posted_date": "2024-12-20",
        "application_deadline": "2025-01-31",
        "created_at": "2024-12-20T10:00:00.000Z",
        "updated_at": "2024-12-20T10:00:00.000Z",
    },
    {
        "id": "2",
        "title": "Design Verification Engineer",
        "department": "Semiconductors Development",
        "location": "Hyderabad, India",
        "type": "Full-time",
        "description": "Build verification plans and UVM testbenches for complex SoCs.",
        "requirements": "- 3+ years of verification experience\n- Strong knowledge of SystemVerilog/UVM",
        "responsibilities": "- Develop comprehensive verification plans\n- Debug and analyze design issues",
        "benefits": "- Competitive compensation\n- Learning and development programs",
        "salary_range": "₹8-15 LPA",
        "experience_level": "3+ years",
        "skills_required": ["SystemVerilog", "UVM", "Verification", "Python", "Perl"],
        "status": "active",
        "posted_date": "2024-12-18",
        "application_deadline": "2025-01-30",
        "created_at": "2024-12-18T10:00:00.000Z",
        "updated_at": "2024-12-18T10:00:00.000Z",
    },
    {
        "id": "5",
        "title": "RTL Design Engineer",
        "department": "Infrastructure",
        "location": "Remote",
        "type": "Full-time",
        "description": "Hands-on experience in Linting, CDC analysis of reports, and fixing violations.",
        "requirements": "- 2+ years of RTL design experience\n- Experience with CDC analysis and linting tools",
        "responsibilities": "- Design and develop RTL modules\n- Perform linting and CDC analysis",
        "benefits": "- Remote work opportunity\n- Professional development budget",
        "salary_range": "₹6-12 LPA",
        "experience_level": "2+ years",
        "skills_required": ["RTL Design", "Verilog", "SystemVerilog", "CDC", "Linting"],
        "status": "active",
        "posted_date": "2024-12-10",
        "application_deadline": "2025-02-28",
        "created_at": "2024-12-10T10:00:00.000Z",
        "updated_at": "2024-12-10T10:00:00.000Z",
    },
    {
        "id": "6",
        "title": "DFT Engineer",
        "department": "Design",
        "location": "Pune, India",
        "type": "Full-time",
        "description": "Proficient in Scan, specializing in ATPG and Pattern verification at Block and Full chip level.",
        "requirements": "- 4+ years of DFT experience\n- Expertise in scan design and ATPG",
        "responsibilities": "- Implement DFT features in complex designs\n- Generate and verify test patterns",
        "benefits": "- Competitive compensation and benefits\n- Technical training and certifications",
        "salary_range": "₹12-20 LPA",
        "experience_level": "4+ years",
        "skills_required": ["DFT", "Scan Design", "ATPG", "Pattern Verification", "DFT Compiler"],
        "status": "active",
        "posted_date": "2024-12-08",
        "application_deadline": "2025-01-15",
        "created_at": "2024-12-08T10:00:00.000Z",
        "updated_at": "2024-12-08T10:00:00.000Z",
    },
]

REQUIRED = ("title", "department", "location", "type", "description")


class JobStore:
    def __init__(self, seed: Optional[List[Mapping[str, Any]]] = None) -> None:
        self._lock = threading.Lock()
        self._jobs: List[JobPosting] = [JobPosting(**copy.deepcopy(dict(j))) for j in (SEED_JOBS if seed is None else seed)]

    def list(
        self,
        status: Optional[str] = None,
        department: Optional[str] = None,
        location: Optional[str] = None,
        type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[JobPosting]:
        jobs = list(self._jobs)
        if status:
            jobs = [j for j in jobs if j.status == status]
        if department:
            jobs = [j for j in jobs if department.lower() in j.department.lower()]
        if location:
            jobs = [j for j in jobs if location.lower() in j.location.lower()]
        if type:
            jobs = [j for j in jobs if j.type == type]
        jobs.sort(key=lambda j: j.posted_date, reverse=True)
        return jobs[:limit] if limit else jobs

    def get(self, job_id: str) -> JobPosting:
        for j in self._jobs:
            if j.id == job_id:
                return j
        raise ContentError("Job posting not found", status_code=404)

    @staticmethod
    def _validate(payload: Mapping[str, Any]) -> None:
        if not all(payload.get(k) for k in REQUIRED):
            raise ContentError("Missing required fields: title, department, location, type, description")
        status = payload.get("status")
        if status is not None and status not in JOB_STATUSES:
            raise ContentError("Invalid status. Must be 'active', 'inactive', or 'closed'")

    @staticmethod
    def _fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "title": payload["title"],
            "department": payload["department"],
            "location": payload["location"],
            "type": payload["type"],
            "description": payload["description"],
            "requirements": payload.get("requirements") or "",
            "responsibilities": payload.get("responsibilities") or "",
            "benefits": payload.get("benefits") or "",
            "salary_range": payload.get("salary_range"),
            "experience_level": payload.get("experience_level") or "",
            "skills_required": list(payload.get("skills_required") or []),
            "application_deadline": payload.get("application_deadline"),
        }

    def create(self, payload: Mapping[str, Any]) -> JobPosting:
        self._validate(payload)
        now = iso_now()
        job = JobPosting(
            id=str(epoch_ms()),
            status=payload.get("status") or "active",
            posted_date=payload.get("posted_date") or today_stamp(),
            created_at=now,
            updated_at=now,
            **self._fields(payload),
        )
        with self._lock:
            self._jobs.append(job)
        return job

    def update(self, job_id: str, payload: Mapping[str, Any]) -> JobPosting:
        current = self.get(job_id)
        self._validate(payload)
        changes = self._fields(payload)
        changes.update(
            status=payload.get("status") if payload.get("status") is not None else current.status,
            posted_date=payload.get("posted_date") or current.posted_date,
            updated_at=iso_now(),
        )
        updated = current.model_copy(update=changes)
        with self._lock:
            self._jobs = [updated if j.id == job_id else j for j in self._jobs]
        return updated

    def set_status(self, job_id: str, status: Optional[str]) -> JobPosting:
        if status not in JOB_STATUSES:
            raise ContentError("Invalid status. Must be 'active', 'inactive', or 'closed'")
        current = self.get(job_id)
        updated = current.model_copy(update={"status": status, "updated_at": iso_now()})
        with self._lock:
            self._jobs = [updated if j.id == job_id else j for j in self._jobs]
        return updated

    def delete(self, job_id: str) -> JobPosting:
        job = self.get(job_id)
        with self._lock:
            self._jobs = [j for j in self._jobs if j.id != job_id]
        return job


__all__ = ["JobPosting", "JobStore", "JOB_STATUSES", "JOB_TYPES"]
