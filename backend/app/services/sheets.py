# backend/app/services/sheets.py
"""
Server-side spreadsheet writer behind /api/sync/*.

Appends one row per submission to a Google Sheet through a service account
(gspread). Disabled (every append returns False) when the sheet id or the
credentials file is missing; worksheets and their header rows are created on
first use.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import gspread

from app.core.config import SHEET_NAMES, Settings
from app.core.utils import parse_iso

logger = logging.getLogger(__name__)

# sheet key -> (header row, record fields written after the date column)
SHEET_LAYOUTS: Dict[str, tuple] = {
    "contacts": (
        ["Date", "Name", "Email", "Phone", "Company", "Message"],
        ["name", "email", "phone", "company", "message"],
    ),
    "job_applications": (
        ["Date", "Full Name", "Email", "Phone", "Position", "Experience", "Cover Letter", "Resume URL", "Status"],
        ["full_name", "email", "phone", "position", "experience", "cover_letter", "resume_url", "status"],
    ),
    "get_started_requests": (
        ["Date", "First Name", "Last Name", "Email", "Company", "Phone", "Job Title", "Message"],
        ["first_name", "last_name", "email", "company", "phone", "job_title", "message"],
    ),
    "resume_uploads": (
        ["Date", "Full Name", "Email", "Phone", "Location", "Position Interested", "Experience Level",
         "Skills", "Cover Letter", "LinkedIn URL", "Portfolio URL", "Resume URL"],
        ["full_name", "email", "phone", "location", "position_interested", "experience_level",
         "skills", "cover_letter", "linkedin_url", "portfolio_url", "resume_url"],
    ),
    "newsletter": (["Date", "Email"], ["email"]),
}


def format_date(value: Any) -> str:
    dt = parse_iso(value)
    return dt.strftime("%Y-%m-%d %H:%M:%S") if dt else str(value or "")


def build_row(sheet: str, record: Mapping[str, Any], date_field: str = "created_at") -> List[str]:
    _, fields = SHEET_LAYOUTS[sheet]
    return [format_date(record.get(date_field))] + [str(record.get(f) or "") for f in fields]


def open_spreadsheet(settings: Settings) -> Optional[gspread.Spreadsheet]:
    if not Path(settings.service_account_path).is_file():
        logger.warning("Service account file not found; spreadsheet sync disabled.")
        return None
    if not settings.google_sheets_id:
        logger.warning("GOOGLE_SHEETS_ID not set; spreadsheet sync disabled.")
        return None
    try:
        client = gspread.service_account(filename=settings.service_account_path)
        return client.open_by_key(settings.google_sheets_id)
    except Exception as e:
        logger.error("Failed to initialize spreadsheet sync: %s", e)
        return None


class SheetsService:
    def __init__(
        self,
        settings: Settings,
        opener: Callable[[Settings], Optional[Any]] = open_spreadsheet,
    ) -> None:
        self.spreadsheet = opener(settings)
        self._ready: Dict[str, Any] = {}
        if self.spreadsheet is not None:
            logger.info("Spreadsheet sync initialized with service account authentication")

    def is_configured(self) -> bool:
        return self.spreadsheet is not None

    def _worksheet(self, sheet: str):
        if sheet in self._ready:
            return self._ready[sheet]
        title = SHEET_NAMES[sheet]
        headers, _ = SHEET_LAYOUTS[sheet]
        try:
            ws = self.spreadsheet.worksheet(title)
            if not ws.row_values(1):
                ws.update(range_name="A1", values=[headers])
                logger.info("Added headers to sheet: %s", title)
        except gspread.exceptions.WorksheetNotFound:
            ws = self.spreadsheet.add_worksheet(title=title, rows=1000, cols=max(26, len(headers)))
            ws.update(range_name="A1", values=[headers])
            logger.info("Created sheet with headers: %s", title)
        self._ready[sheet] = ws
        return ws

    def append(self, sheet: str, rows: Sequence[Sequence[str]]) -> bool:
        if not self.is_configured():
            logger.warning("Spreadsheet sync not configured. Skipping %s sync.", sheet)
            return False
        try:
            self._worksheet(sheet).append_rows([list(r) for r in rows], value_input_option="RAW")
        except Exception as e:
            logger.error("Error syncing to spreadsheet (%s): %s", sheet, e)
            return False
        logger.info("Synced to spreadsheet: %s", SHEET_NAMES[sheet])
        return True

    def sync_record(self, sheet: str, record: Mapping[str, Any], date_field: str = "created_at") -> bool:
        return self.append(sheet, [build_row(sheet, record, date_field)])


__all__ = ["SheetsService", "SHEET_LAYOUTS", "build_row", "open_spreadsheet"]
