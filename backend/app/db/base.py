# backend/app/db/base.py
"""
Backend-agnostic data access contract.

Both the in-memory demo backend and the SQLAlchemy backend implement these
interfaces, so callers (form controllers, admin dashboard) never need to know
which one they are talking to. Every operation returns a `Response` carrying
either `data` or an `error` mapping with at least a `message` key; none of
them raise for expected failures.
"""

from __future__ import annotations

import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class Table(str, enum.Enum):
    CONTACTS = "contacts"
    JOB_APPLICATIONS = "job_applications"
    GET_STARTED_REQUESTS = "get_started_requests"
    RESUME_UPLOADS = "resume_uploads"
    NEWSLETTER_SUBSCRIBERS = "newsletter_subscribers"
    USERS = "users"

    @property
    def order_column(self) -> str:
        return "subscribed_at" if self is Table.NEWSLETTER_SUBSCRIBERS else "created_at"


@dataclass
class Response:
    data: Any = None
    error: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def fail(cls, message: str, data: Any = None, **extra: Any) -> "Response":
        return cls(data=data, error={"message": message, **extra})


# ----------------- Auth events (observer) -----------------

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

AuthCallback = Callable[[str, Optional[Record]], None]

# never leaves the provider
PRIVATE_USER_FIELDS = {"password", "password_hash"}


class Subscription:
    def __init__(self, events: "AuthEvents", callback: AuthCallback) -> None:
        self._events = events
        self._callback = callback

    def unsubscribe(self) -> None:
        self._events.discard(self._callback)


class AuthEvents:
    """Publishes auth transitions to subscribers; replaces reload-as-notification."""

    def __init__(self) -> None:
        self._callbacks: List[AuthCallback] = []

    def subscribe(self, callback: AuthCallback) -> Subscription:
        self._callbacks.append(callback)
        return Subscription(self, callback)

    def discard(self, callback: AuthCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def emit(self, event: str, session: Optional[Record]) -> None:
        for cb in list(self._callbacks):
            try:
                cb(event, session)
            except Exception as e:
                logger.warning("Auth state change callback error: %s", e)

    def clear(self) -> None:
        self._callbacks.clear()


# ----------------- Interfaces -----------------

class TableRepository(ABC):
    @abstractmethod
    def insert(self, table: Table, rows: Sequence[Mapping[str, Any]]) -> Response:
        ...

    @abstractmethod
    def list_ordered(self, table: Table, column: str, ascending: bool = True) -> Response:
        ...

    @abstractmethod
    def update_by_id(self, table: Table, record_id: str, patch: Mapping[str, Any]) -> Response:
        ...

    @abstractmethod
    def upsert(self, table: Table, data: Mapping[str, Any]) -> Response:
        ...

    def list_ordered_by_created_at_desc(self, table: Table) -> Response:
        return self.list_ordered(table, table.order_column, ascending=False)


class AuthProvider(ABC):
    """
    Signed-in users are tracked per session id. The web layer passes the
    visitor's cookie session id; `None` is the single local session used by
    scripts and tests that drive the provider directly.
    """

    def __init__(self) -> None:
        self.events = AuthEvents()
        self._sessions: Dict[Optional[str], Record] = {}

    def current_user(self, session_id: Optional[str] = None) -> Optional[Record]:
        user = self._sessions.get(session_id)
        return dict(user) if user else None

    def get_session(self, session_id: Optional[str] = None) -> Response:
        user = self.current_user(session_id)
        return Response(data={"session": {"user": user} if user else None})

    def _start_session(self, user: Mapping[str, Any], session_id: Optional[str]) -> Response:
        public = {k: v for k, v in user.items() if k not in PRIVATE_USER_FIELDS}
        self._sessions[session_id] = public
        self.events.emit(SIGNED_IN, {"user": dict(public)})
        return Response(data={"user": dict(public), "session": {"user": dict(public)}})

    def sign_out(self, session_id: Optional[str] = None) -> Response:
        self._sessions.pop(session_id, None)
        self.events.emit(SIGNED_OUT, None)
        return Response()

    def clear_sessions(self) -> None:
        self._sessions.clear()

    @abstractmethod
    def sign_in_with_password(self, email: str, password: str, session_id: Optional[str] = None) -> Response:
        ...

    @abstractmethod
    def sign_up(
        self,
        email: str,
        password: str,
        options: Optional[Mapping[str, Any]] = None,
        session_id: Optional[str] = None,
    ) -> Response:
        ...

    def sign_in_with_oauth(self, provider: str) -> Response:
        return Response.fail(
            "OAuth not available in demo mode. Use email signup/login instead.",
            data={"url": None, "provider": None},
        )

    def on_auth_state_change(self, callback: AuthCallback) -> Subscription:
        """Deliver the local session's state once, then every later transition."""
        user = self.current_user()
        try:
            callback(SIGNED_IN if user else SIGNED_OUT, {"user": user} if user else None)
        except Exception as e:
            logger.warning("Auth state change callback error: %s", e)
        return self.events.subscribe(callback)


class StorageBucket(ABC):
    @abstractmethod
    def upload(self, path: str, filename: str, content: bytes = b"") -> Response:
        ...

    @abstractmethod
    def get_public_url(self, path: str) -> Response:
        ...


@dataclass
class Backend:
    auth: AuthProvider
    tables: TableRepository
    storage: StorageBucket
    demo: bool = False
    _closers: List[Callable[[], None]] = field(default_factory=list, repr=False)

    def close(self) -> None:
        for closer in self._closers:
            closer()
        self._closers.clear()


__all__ = [
    "Record", "Table", "Response",
    "SIGNED_IN", "SIGNED_OUT", "PRIVATE_USER_FIELDS", "AuthEvents", "Subscription",
    "TableRepository", "AuthProvider", "StorageBucket", "Backend",
]
