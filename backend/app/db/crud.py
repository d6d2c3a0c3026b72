# backend/app/db/crud.py
"""
SQL-backed implementations of the table repository and auth provider.
Usage:
    db = connect(settings.database_url)
    db.ensure_tables()
    tables = SqlTables(db)
    tables.insert(Table.CONTACTS, [payload])

Expected failures (unknown id, duplicate email) come back as Response.error
instead of raising, same shape as the demo backend.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import os
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import asc, desc, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.utils import format_error_message
from .base import AuthProvider, Record, Response, Table, TableRepository
from .models import MODELS, UserProfile
from .session import Database

logger = logging.getLogger(__name__)

# backend-assigned columns; caller values are ignored on insert
SERVER_COLUMNS = {"id", "created_at", "updated_at", "subscribed_at"}
PRIVATE_COLUMNS = {"password_hash"}
UNIQUE_VIOLATION = "23505"


def _public(record: Record) -> Record:
    return {k: v for k, v in record.items() if k not in PRIVATE_COLUMNS}


def _columns(table: Table) -> set:
    return {c.name for c in MODELS[table].__table__.columns}  # type: ignore[attr-defined]


def _db_error(e: Exception) -> Response:
    if isinstance(e, IntegrityError):
        return Response.fail(
            f"duplicate key value violates unique constraint: {format_error_message(e.orig)}",
            code=UNIQUE_VIOLATION,
        )
    return Response.fail(format_error_message(e))


# ----------------- Tables -----------------

class SqlTables(TableRepository):
    def __init__(self, db: Database) -> None:
        self.db = db

    def insert(self, table: Table, rows: Sequence[Mapping[str, Any]]) -> Response:
        table = Table(table)
        model = MODELS[table]
        allowed = _columns(table) - SERVER_COLUMNS - PRIVATE_COLUMNS
        try:
            with self.db.session_scope() as s:
                objs = []
                for row in rows:
                    dropped = set(row) - allowed - SERVER_COLUMNS
                    if dropped:
                        logger.debug("Ignoring unknown columns for %s: %s", table.value, sorted(dropped))
                    objs.append(model(**{k: v for k, v in row.items() if k in allowed}))
                s.add_all(objs)
                s.flush()
                created = [_public(o.to_record()) for o in objs]
        except SQLAlchemyError as e:
            return _db_error(e)
        return Response(data=created)

    def list_ordered(self, table: Table, column: str, ascending: bool = True) -> Response:
        table = Table(table)
        model = MODELS[table]
        if column not in _columns(table):
            return Response.fail(f"column {table.value}.{column} does not exist")
        order = asc if ascending else desc
        try:
            with self.db.session_scope() as s:
                rows = s.execute(select(model).order_by(order(getattr(model, column)))).scalars().all()
                data = [_public(r.to_record()) for r in rows]
        except SQLAlchemyError as e:
            return _db_error(e)
        return Response(data=data)

    def update_by_id(self, table: Table, record_id: str, patch: Mapping[str, Any]) -> Response:
        table = Table(table)
        allowed = _columns(table) - SERVER_COLUMNS - PRIVATE_COLUMNS
        try:
            with self.db.session_scope() as s:
                obj = s.get(MODELS[table], record_id)
                if obj is None:
                    return Response.fail("Record not found")
                for k, v in patch.items():
                    if k in allowed:
                        setattr(obj, k, v)
                s.flush()
                data = [_public(obj.to_record())]
        except SQLAlchemyError as e:
            return _db_error(e)
        return Response(data=data)

    def upsert(self, table: Table, data: Mapping[str, Any]) -> Response:
        table = Table(table)
        model = MODELS[table]
        allowed = (_columns(table) - PRIVATE_COLUMNS) - {"created_at", "updated_at", "subscribed_at"}
        values = {k: v for k, v in data.items() if k in allowed}
        try:
            with self.db.session_scope() as s:
                obj = s.get(model, values["id"]) if values.get("id") else None
                if obj is None:
                    obj = model(**values)
                    s.add(obj)
                else:
                    for k, v in values.items():
                        setattr(obj, k, v)
                s.flush()
                out = [_public(obj.to_record())]
        except SQLAlchemyError as e:
            return _db_error(e)
        return Response(data=out)


# ----------------- Auth -----------------

_PBKDF2_ROUNDS = 200_000


def hash_password(password: str, salt: Optional[bytes] = None) -> str:
    salt = salt or os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PBKDF2_ROUNDS)
    return f"{salt.hex()}${digest.hex()}"


def verify_password(password: str, stored: Optional[str]) -> bool:
    if not stored or "$" not in stored:
        return False
    salt_hex, digest_hex = stored.split("$", 1)
    candidate = hash_password(password, bytes.fromhex(salt_hex)).split("$", 1)[1]
    return hmac.compare_digest(candidate, digest_hex)


class SqlAuth(AuthProvider):
    """
    Email/password accounts stored in the `users` table.
    Sessions are held in memory per session id, same as the demo provider.
    """

    def __init__(self, db: Database) -> None:
        super().__init__()
        self.db = db

    @staticmethod
    def _as_user(row: UserProfile) -> Record:
        rec = row.to_record()
        rec["user_metadata"] = {"full_name": rec.get("full_name"), "avatar_url": rec.get("avatar_url")}
        return rec

    def sign_in_with_password(self, email: str, password: str, session_id: Optional[str] = None) -> Response:
        try:
            with self.db.session_scope() as s:
                row = s.execute(select(UserProfile).where(UserProfile.email == email)).scalars().first()
                user = self._as_user(row) if row and verify_password(password, row.password_hash) else None
        except SQLAlchemyError as e:
            return _db_error(e)
        if user is None:
            return Response.fail("Invalid email or password", data={"user": None, "session": None})
        return self._start_session(user, session_id)

    def sign_up(
        self,
        email: str,
        password: str,
        options: Optional[Mapping[str, Any]] = None,
        session_id: Optional[str] = None,
    ) -> Response:
        meta: Dict[str, Any] = dict((options or {}).get("data") or {})
        try:
            with self.db.session_scope() as s:
                exists = s.execute(select(UserProfile.id).where(UserProfile.email == email)).first()
                if exists:
                    return Response.fail("User already registered", data={"user": None, "session": None})
                row = UserProfile(
                    email=email,
                    full_name=meta.get("full_name") or meta.get("name"),
                    avatar_url=meta.get("avatar_url"),
                    password_hash=hash_password(password),
                )
                s.add(row)
                s.flush()
                user = self._as_user(row)
        except SQLAlchemyError as e:
            return _db_error(e)
        return self._start_session(user, session_id)

    def sign_in_with_oauth(self, provider: str) -> Response:
        return Response.fail(
            f"OAuth provider '{provider}' is not configured. Use email signup/login instead.",
            data={"url": None, "provider": None},
        )


__all__ = ["SqlTables", "SqlAuth", "hash_password", "verify_password", "UNIQUE_VIOLATION"]
