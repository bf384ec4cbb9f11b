"""
Session storage keyed by the opaque id carried in the session cookie.

The authentication middleware receives a SessionStore explicitly; nothing
in the pipeline reaches for ambient session state.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Optional, Protocol

from sqlalchemy.orm import Session

from hrms.core.config import settings
from hrms.core.security import new_session_id
from hrms.core.time import utcnow
from hrms.models.sessions import UserSession

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    @property
    def backend_name(self) -> str:
        ...

    def get(self, session_id: str) -> Optional[dict[str, Any]]:
        ...

    def set(self, session_id: str, value: dict[str, Any]) -> None:
        ...

    def destroy(self, session_id: str) -> None:
        ...

    def create(self, value: dict[str, Any]) -> str:
        ...


@dataclass
class _SessionEntry:
    expires_at: float | None
    value: dict[str, Any]


class InMemorySessionStore:
    def __init__(self, ttl_seconds: Optional[int] = None) -> None:
        self._ttl = settings.SESSION_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._store: dict[str, _SessionEntry] = {}
        self._lock = threading.Lock()

    @property
    def backend_name(self) -> str:
        return "memory"

    def _expiry(self) -> float | None:
        return time.monotonic() + self._ttl if self._ttl and self._ttl > 0 else None

    def get(self, session_id: str) -> Optional[dict[str, Any]]:
        if not session_id:
            return None
        with self._lock:
            entry = self._store.get(session_id)
            if entry is None:
                return None
            if entry.expires_at is not None and time.monotonic() > entry.expires_at:
                self._store.pop(session_id, None)
                return None
            return dict(entry.value)

    def set(self, session_id: str, value: dict[str, Any]) -> None:
        with self._lock:
            self._store[session_id] = _SessionEntry(expires_at=self._expiry(), value=dict(value))

    def destroy(self, session_id: str) -> None:
        with self._lock:
            self._store.pop(session_id, None)

    def create(self, value: dict[str, Any]) -> str:
        self.purge_expired()
        session_id = new_session_id()
        self.set(session_id, value)
        return session_id

    def purge_expired(self) -> int:
        now = time.monotonic()
        with self._lock:
            expired = [
                session_id
                for session_id, entry in self._store.items()
                if entry.expires_at is not None and now > entry.expires_at
            ]
            for session_id in expired:
                del self._store[session_id]
        if expired:
            logger.info("sessions.purged", extra={"count": len(expired)})
        return len(expired)

    def count(self) -> int:
        with self._lock:
            return len(self._store)


class SqlSessionStore:
    """Sessions persisted in the user_sessions table, one short DB session per call."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        ttl_seconds: Optional[int] = None,
    ) -> None:
        self._session_factory = session_factory
        self._ttl = settings.SESSION_TTL_SECONDS if ttl_seconds is None else ttl_seconds

    @property
    def backend_name(self) -> str:
        return "database"

    def _expiry(self):
        if not self._ttl or self._ttl <= 0:
            return None
        return utcnow() + timedelta(seconds=self._ttl)

    def get(self, session_id: str) -> Optional[dict[str, Any]]:
        if not session_id:
            return None
        with self._session_factory() as db:
            row = db.get(UserSession, session_id)
            if row is None:
                return None
            if row.expires_at is not None and row.expires_at < utcnow():
                db.delete(row)
                db.commit()
                return None
            return dict(row.payload or {})

    def set(self, session_id: str, value: dict[str, Any]) -> None:
        with self._session_factory() as db:
            row = db.get(UserSession, session_id)
            if row is None:
                row = UserSession(id=session_id)
                db.add(row)
            row.payload = dict(value)
            row.expires_at = self._expiry()
            db.commit()

    def destroy(self, session_id: str) -> None:
        with self._session_factory() as db:
            db.query(UserSession).filter(UserSession.id == session_id).delete()
            db.commit()

    def create(self, value: dict[str, Any]) -> str:
        self.purge_expired()
        session_id = new_session_id()
        self.set(session_id, value)
        return session_id

    def purge_expired(self) -> int:
        with self._session_factory() as db:
            deleted = (
                db.query(UserSession)
                .filter(UserSession.expires_at.is_not(None), UserSession.expires_at < utcnow())
                .delete(synchronize_session=False)
            )
            db.commit()
        if deleted:
            logger.info("sessions.purged", extra={"count": deleted})
        return deleted


def build_session_store(session_factory: Callable[[], Session]) -> SessionStore:
    if settings.SESSION_BACKEND == "database":
        return SqlSessionStore(session_factory)
    return InMemorySessionStore()
