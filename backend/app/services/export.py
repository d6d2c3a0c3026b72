# backend/app/services/export.py
"""
Turn record sets into downloadable CSV / XLSX files.

Records are schema-less mappings (field name -> printable value). Every
export returns an ExportArtifact, or None when there is nothing to export;
empty sets never produce an empty file.
"""

from __future__ import annotations

import io
import json
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from app.core.utils import today_stamp

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

MIN_COLUMN_WIDTH = 10
MAX_COLUMN_WIDTH = 50

# sheet title per record set, in workbook order
ALL_FORMS_SHEETS = (
    ("applications", "Job Applications"),
    ("contacts", "Contact Messages"),
    ("resumes", "Resume Uploads"),
    ("get_started", "Get Started Requests"),
    ("newsletter", "Newsletter Subscribers"),
)


@dataclass
class ExportArtifact:
    filename: str
    content: bytes
    media_type: str


def stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(stringify(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, default=str)
    return str(value)


def csv_field(value: Any) -> str:
    v = stringify(value)
    if any(ch in v for ch in (",", '"', "\n", "\r")):
        v = '"' + v.replace('"', '""') + '"'
    return v


def to_csv(data: Sequence[Mapping[str, Any]]) -> str:
    headers = list(data[0].keys())
    lines = [",".join(headers)]
    for row in data:
        lines.append(",".join(csv_field(row.get(h)) for h in headers))
    return "\n".join(lines)


def export_to_csv(
    data: Sequence[Mapping[str, Any]], filename: str, today: Optional[date] = None
) -> Optional[ExportArtifact]:
    if not data:
        return None
    return ExportArtifact(
        filename=f"{filename}_{today_stamp(today)}.csv",
        content=to_csv(data).encode("utf-8"),
        media_type=CSV_MEDIA_TYPE,
    )

# -------- Excel --------------------------------------------------------------

def column_width(values: Iterable[Any]) -> int:
    """Longest rendered value (at least MIN_COLUMN_WIDTH) plus 2, capped at MAX_COLUMN_WIDTH."""
    longest = MIN_COLUMN_WIDTH
    for v in values:
        text = stringify(v)
        if text:
            longest = max(longest, len(text))
    return min(longest + 2, MAX_COLUMN_WIDTH)


def _headers(data: Sequence[Mapping[str, Any]]) -> List[str]:
    seen: Dict[str, None] = {}
    for row in data:
        for key in row.keys():
            seen.setdefault(key, None)
    return list(seen)


def _cell_value(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float)):
        return value
    return stringify(value)


def fill_sheet(ws: Worksheet, data: Sequence[Mapping[str, Any]], autosize: bool = True) -> None:
    headers = _headers(data)
    ws.append(headers)
    for row in data:
        ws.append([_cell_value(row.get(h)) for h in headers])
    if autosize:
        for idx, header in enumerate(headers, start=1):
            width = column_width([header] + [row.get(header) for row in data])
            ws.column_dimensions[get_column_letter(idx)].width = width


def _workbook_bytes(wb: Workbook) -> bytes:
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def export_to_excel(
    data: Sequence[Mapping[str, Any]], filename: str, today: Optional[date] = None
) -> Optional[ExportArtifact]:
    if not data:
        return None
    wb = Workbook()
    ws = wb.active
    ws.title = "Data"
    fill_sheet(ws, data)
    return ExportArtifact(
        filename=f"{filename}_{today_stamp(today)}.xlsx",
        content=_workbook_bytes(wb),
        media_type=XLSX_MEDIA_TYPE,
    )


def export_all_to_excel(
    record_sets: Mapping[str, Sequence[Mapping[str, Any]]], today: Optional[date] = None
) -> Optional[ExportArtifact]:
    """One sheet per non-empty record set, see ALL_FORMS_SHEETS for names/order."""
    wb = Workbook()
    wb.remove(wb.active)
    for key, title in ALL_FORMS_SHEETS:
        data = record_sets.get(key) or []
        if data:
            fill_sheet(wb.create_sheet(title), data)
    if not wb.worksheets:
        return None
    return ExportArtifact(
        filename=f"All_Forms_{today_stamp(today)}.xlsx",
        content=_workbook_bytes(wb),
        media_type=XLSX_MEDIA_TYPE,
    )


__all__ = [
    "ExportArtifact", "export_to_csv", "export_to_excel", "export_all_to_excel",
    "column_width", "csv_field", "to_csv", "ALL_FORMS_SHEETS",
]
