# sessions.py
"""
Server-side session state.

Session records live in a SessionStore keyed by session id; the client
only holds the id, signed with SESSION_SECRET, in a cookie. The store is
a FastAPI dependency (get_session_store) so tests can swap in their own.
"""

import hashlib
import hmac
import logging
import os
import secrets
import threading
import time
from typing import Dict, Optional

from fastapi import Depends, Request, Response
from pydantic import BaseModel

logger = logging.getLogger(__name__)

SESSION_SECRET      = os.getenv("SESSION_SECRET", "secret")
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "ats_session")
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", "86400"))


class SessionUser(BaseModel):
    id: int
    username: str


class SessionData(BaseModel):
    session_id: str
    user: Optional[SessionUser] = None
    demo_use_count: int = 0
    expires_at: float = 0.0

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


# ─── Stores ───────────────────────────────────────────────────────────────────

class SessionStore:
    """Key-value interface for session records."""

    def get(self, session_id: str) -> Optional[SessionData]:
        raise NotImplementedError

    def save(self, session: SessionData) -> None:
        raise NotImplementedError

    def delete(self, session_id: str) -> None:
        raise NotImplementedError


class InMemorySessionStore(SessionStore):
    """Process-local store. Expired records are dropped on read and swept on every save."""

    def __init__(self, ttl_seconds: int = SESSION_TTL_SECONDS, clock=time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._records: Dict[str, SessionData] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> Optional[SessionData]:
        with self._lock:
            record = self._records.get(session_id)
            if record is None:
                return None
            if record.expires_at <= self._clock():
                del self._records[session_id]
                return None
            return record.model_copy(deep=True)

    def save(self, session: SessionData) -> None:
        now = self._clock()
        session.expires_at = now + self.ttl_seconds
        with self._lock:
            expired = [sid for sid, record in self._records.items() if record.expires_at <= now]
            for sid in expired:
                del self._records[sid]
            self._records[session.session_id] = session.model_copy(deep=True)

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._records.pop(session_id, None)


_store = InMemorySessionStore()


def get_session_store() -> SessionStore:
    return _store


# ─── Cookie signing ───────────────────────────────────────────────────────────

def _signature(session_id: str) -> str:
    return hmac.new(SESSION_SECRET.encode(), session_id.encode(), hashlib.sha256).hexdigest()


def sign_session_id(session_id: str) -> str:
    return f"{session_id}.{_signature(session_id)}"


def unsign_session_id(cookie_value: Optional[str]) -> Optional[str]:
    if not cookie_value or "." not in cookie_value:
        return None
    session_id, signature = cookie_value.rsplit(".", 1)
    if not hmac.compare_digest(signature, _signature(session_id)):
        logger.warning("Rejected session cookie with bad signature")
        return None
    return session_id


# ─── Dependency ───────────────────────────────────────────────────────────────

def _new_session(request: Request, store: SessionStore, **fields) -> SessionData:
    session = SessionData(session_id=secrets.token_urlsafe(32), **fields)
    request.state.issued_session = session
    request.state.session_store = store
    return session


def get_session(
    request: Request,
    store: SessionStore = Depends(get_session_store),
) -> SessionData:
    """
    Load the caller's session, creating one on first contact.

    A new session is not stored until something saves it (a demo use, a
    login); only then does session_cookie_middleware hand out a cookie.
    """
    session_id = unsign_session_id(request.cookies.get(SESSION_COOKIE_NAME))
    session = store.get(session_id) if session_id else None
    if session is None:
        session = _new_session(request, store)
    return session


def rotate_session(request: Request, store: SessionStore, session: SessionData,
                   user: SessionUser) -> SessionData:
    """Replace the session with a fresh id bound to user; demo count restarts at 0."""
    store.delete(session.session_id)
    session = _new_session(request, store, user=user, demo_use_count=0)
    store.save(session)
    return session


def destroy_session(request: Request, store: SessionStore, session: SessionData) -> None:
    store.delete(session.session_id)
    request.state.issued_session = None
    request.state.session_destroyed = True


async def session_cookie_middleware(request: Request, call_next):
    response: Response = await call_next(request)
    if getattr(request.state, "session_destroyed", False):
        response.delete_cookie(SESSION_COOKIE_NAME)
        return response
    issued = getattr(request.state, "issued_session", None)
    store = getattr(request.state, "session_store", None)
    if issued is not None and store.get(issued.session_id) is not None:
        response.set_cookie(
            SESSION_COOKIE_NAME,
            sign_session_id(issued.session_id),
            max_age=SESSION_TTL_SECONDS,
            httponly=True,
            samesite="lax",
        )
    return response
