# backend/app/core/utils.py
"""
Generic helpers used across the app.

Includes:
- error formatting (never show raw object dumps to users)
- time helpers (UTC ISO timestamps, export date stamps)
- small string utils (base36 ids, read-time estimates)
"""

from __future__ import annotations

import json
import logging
import math
import random
import string
import time
from datetime import date, datetime, timezone
from typing import Any, Optional

# -------- Error formatting ---------------------------------------------------

def format_error_message(error: Any) -> str:
    """
    Normalize heterogeneous error shapes into a readable message.
    Exceptions → their message; mappings/objects with a `message` → that;
    other objects → JSON; anything else → str().
    """
    if error is None or error == "" or error is False:
        return "Unknown error"
    if isinstance(error, BaseException):
        return str(error) or error.__class__.__name__
    if isinstance(error, dict):
        if error.get("message"):
            return str(error["message"])
        try:
            return json.dumps(error, default=str)
        except (TypeError, ValueError):
            return "Unknown object error"
    msg = getattr(error, "message", None)
    if msg:
        return str(msg)
    if isinstance(error, (list, tuple)):
        try:
            return json.dumps(error, default=str)
        except (TypeError, ValueError):
            return "Unknown object error"
    return str(error)


def log_error(context: str, error: Any, logger: Optional[logging.Logger] = None) -> None:
    (logger or logging.getLogger("app")).error("%s: %s", context, format_error_message(error))

# -------- Time ---------------------------------------------------------------

def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def iso_now() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    return now_utc().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def today_stamp(today: Optional[date] = None) -> str:
    return (today or now_utc().date()).isoformat()


def epoch_ms() -> int:
    return int(time.time() * 1000)


def parse_iso(value: Any) -> Optional[datetime]:
    """Best-effort parse of stored timestamps; accepts datetimes and ISO strings."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)

# -------- Strings ------------------------------------------------------------

_B36 = string.digits + string.ascii_lowercase


def random_base36(n: int = 9) -> str:
    return "".join(random.choice(_B36) for _ in range(n))


def read_time(content: str, words_per_minute: int = 200) -> str:
    words = len((content or "").split())
    return f"{max(1, math.ceil(words / words_per_minute))} min read"


__all__ = [
    # errors
    "format_error_message", "log_error",
    # time
    "now_utc", "iso_now", "today_stamp", "epoch_ms", "parse_iso",
    # strings
    "random_base36", "read_time",
]
