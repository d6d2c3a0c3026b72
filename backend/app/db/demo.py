# backend/app/db/demo.py
"""
In-memory stand-in for the real backend, used when no DATABASE_URL is set.

Deliberately narrow: only `contacts` and `job_applications` are persisted and
only `job_applications` can be updated. It exists so the site stays usable
without credentials, not to be feature-complete. Records live only as long
as the demo Backend instance; nothing is written to disk.
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from app.core.utils import epoch_ms, iso_now, parse_iso, random_base36
from .base import (
    AuthProvider,
    Backend,
    Record,
    Response,
    StorageBucket,
    Table,
    TableRepository,
)

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

INVALID_LOGIN = "Invalid email or password (Demo Mode - Try creating an account first)"
USER_EXISTS = "User already exists (Demo Mode)"
RECORD_NOT_FOUND = "Record not found"

PERSISTED_TABLES = (Table.CONTACTS, Table.JOB_APPLICATIONS)
UPDATABLE_TABLES = (Table.JOB_APPLICATIONS,)


class DemoAuth(AuthProvider):
    def __init__(self) -> None:
        super().__init__()
        self.users: Dict[str, Record] = {}

    def sign_in_with_password(self, email: str, password: str, session_id: Optional[str] = None) -> Response:
        user = self.users.get(email)
        if user and user["password"] == password:
            return self._start_session(user, session_id)
        return Response.fail(INVALID_LOGIN, data={"user": None, "session": None})

    def sign_up(
        self,
        email: str,
        password: str,
        options: Optional[Mapping[str, Any]] = None,
        session_id: Optional[str] = None,
    ) -> Response:
        if email in self.users:
            return Response.fail(USER_EXISTS, data={"user": None, "session": None})
        user = {
            "id": f"demo-{epoch_ms()}",
            "email": email,
            "password": password,
            "user_metadata": dict((options or {}).get("data") or {}),
            "created_at": iso_now(),
        }
        self.users[email] = user
        return self._start_session(user, session_id)

    def reset(self) -> None:
        self.users.clear()
        self.clear_sessions()
        self.events.clear()


class DemoTables(TableRepository):
    def __init__(self) -> None:
        self.rows: Dict[Table, List[Record]] = {t: [] for t in PERSISTED_TABLES}

    def insert(self, table: Table, rows: Sequence[Mapping[str, Any]]) -> Response:
        table = Table(table)
        created: List[Record] = []
        for row in rows:
            record = dict(row)
            record["id"] = f"demo-{epoch_ms()}-{random_base36(9)}"
            record["created_at"] = iso_now()
            created.append(record)
            if table in self.rows:
                self.rows[table].append(record)
        if table not in self.rows:
            logger.warning("Demo mode: insert into %r accepted but not stored", table.value)
        return Response(data=created)

    def list_ordered(self, table: Table, column: str, ascending: bool = True) -> Response:
        data = [dict(r) for r in self.rows.get(Table(table), [])]
        if column == "created_at" and ascending is False:
            data.sort(key=lambda r: parse_iso(r.get("created_at")) or _EPOCH, reverse=True)
        return Response(data=data)

    def update_by_id(self, table: Table, record_id: str, patch: Mapping[str, Any]) -> Response:
        table = Table(table)
        if table in UPDATABLE_TABLES:
            for record in self.rows[table]:
                if record.get("id") == record_id:
                    record.update(patch)
                    return Response(data=[dict(record)])
        return Response.fail(RECORD_NOT_FOUND)

    def upsert(self, table: Table, data: Mapping[str, Any]) -> Response:
        return Response(data=[copy.copy(dict(data))])

    def reset(self) -> None:
        for rows in self.rows.values():
            rows.clear()


class DemoStorage(StorageBucket):
    PUBLIC_BASE = "https://demo-storage.example.com"

    def upload(self, path: str, filename: str, content: bytes = b"") -> Response:
        return Response(data={"path": f"demo-storage/{filename}-{epoch_ms()}"})

    def get_public_url(self, path: str) -> Response:
        return Response(data={"publicUrl": f"{self.PUBLIC_BASE}/{path}"})


def create_demo_backend() -> Backend:
    """Fresh, isolated demo backend. Call `.close()` to drop its state."""
    auth = DemoAuth()
    tables = DemoTables()
    backend = Backend(auth=auth, tables=tables, storage=DemoStorage(), demo=True)
    backend._closers.extend([auth.reset, tables.reset])
    return backend


__all__ = [
    "DemoAuth", "DemoTables", "DemoStorage", "create_demo_backend",
    "INVALID_LOGIN", "USER_EXISTS", "RECORD_NOT_FOUND",
]
