# backend/app/routes/sync.py
"""
Server side of the spreadsheet mirror: /api/sync/<endpoint> appends one row
to the matching worksheet. Missing required fields -> 400. An unconfigured
or failing sheet is not an error: the response says `synced: false`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Tuple

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from app.core.utils import iso_now
from app.services.sheets import SheetsService
from .deps import get_sheets

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sync")

# endpoint -> (sheet key, required fields, label used in messages, date field)
ENDPOINTS: Dict[str, Tuple[str, Tuple[str, ...], str, str]] = {
    "contact": ("contacts", ("name", "email", "message"), "Contact", "created_at"),
    "job-application": ("job_applications", ("full_name", "email", "position"), "Job application", "created_at"),
    "get-started": ("get_started_requests", ("first_name", "last_name", "email"), "Get started request", "created_at"),
    "resume-upload": ("resume_uploads", ("full_name", "email"), "Resume upload", "created_at"),
    "newsletter": ("newsletter", ("email",), "Newsletter subscription", "subscribed_at"),
}


def _missing(required: Tuple[str, ...]) -> str:
    if len(required) == 1:
        return f"Missing required field: {required[0]}"
    return "Missing required fields: " + ", ".join(required)


def sync_payload(endpoint: str, payload: Mapping[str, Any], sheets: SheetsService) -> JSONResponse | Dict[str, Any]:
    sheet, required, label, date_field = ENDPOINTS[endpoint]
    if any(not payload.get(f) for f in required):
        return JSONResponse(status_code=400, content={"success": False, "error": _missing(required)})

    record = dict(payload)
    record[date_field] = record.get(date_field) or iso_now()
    if endpoint == "job-application":
        record["status"] = record.get("status") or "pending"
    try:
        synced = sheets.sync_record(sheet, record, date_field)
    except Exception as e:
        logger.error("Error syncing %s: %s", label.lower(), e)
        return JSONResponse(status_code=500, content={"success": False, "error": f"Failed to sync {label.lower()}"})
    return {
        "success": True,
        "synced": synced,
        "message": f"{label} synced to Google Sheets" if synced else "Sync attempted but may have failed",
    }


@router.post("/contact")
def sync_contact(payload: Dict[str, Any] = Body(...), sheets: SheetsService = Depends(get_sheets)):
    return sync_payload("contact", payload, sheets)


@router.post("/job-application")
def sync_job_application(payload: Dict[str, Any] = Body(...), sheets: SheetsService = Depends(get_sheets)):
    return sync_payload("job-application", payload, sheets)


@router.post("/get-started")
def sync_get_started(payload: Dict[str, Any] = Body(...), sheets: SheetsService = Depends(get_sheets)):
    return sync_payload("get-started", payload, sheets)


@router.post("/resume-upload")
def sync_resume_upload(payload: Dict[str, Any] = Body(...), sheets: SheetsService = Depends(get_sheets)):
    return sync_payload("resume-upload", payload, sheets)


@router.post("/newsletter")
def sync_newsletter(payload: Dict[str, Any] = Body(...), sheets: SheetsService = Depends(get_sheets)):
    return sync_payload("newsletter", payload, sheets)


@router.get("/status")
def sync_status(sheets: SheetsService = Depends(get_sheets)):
    configured = sheets.is_configured()
    return {
        "success": True,
        "data": {
            "configured": configured,
            "message": "Google Sheets integration is configured and ready"
            if configured
            else "Google Sheets integration is not configured. Check service account file and spreadsheet ID.",
        },
    }


__all__ = ["router", "ENDPOINTS", "sync_payload"]
