# auth_api.py
"""
Username/Password Authentication API for the Resume ATS Analyzer
"""

import base64
import binascii
import hashlib
import hmac
import json
import logging
import os
import secrets

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from database import get_db, get_user_by_username, create_user
from errors import ValidationError, NotFoundError, InvalidCredentialsError
from models import Credentials, ApiResponse
from sessions import (SessionData, SessionStore, SessionUser, get_session,
                      get_session_store, rotate_session, destroy_session)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

HASH_ALGORITHM = "pbkdf2_sha256"
HASH_ITERATIONS = int(os.getenv("PASSWORD_HASH_ITERATIONS", "260000"))


# ─── Helpers ──────────────────────────────────────────────────────────────────

def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def hash_password(password: str, salt: bytes = None, iterations: int = None) -> str:
    """Salted PBKDF2 hash, stored as algorithm$iterations$salt$digest."""
    salt = salt or secrets.token_bytes(16)
    iterations = iterations or HASH_ITERATIONS
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, iterations)
    return f"{HASH_ALGORITHM}${iterations}${_b64(salt)}${_b64(digest)}"


def verify_password(password: str, hashed: str) -> bool:
    try:
        algorithm, iterations, salt, expected = hashed.split("$")
        if algorithm != HASH_ALGORITHM:
            return False
        candidate = hash_password(password, base64.b64decode(salt, validate=True), int(iterations))
    except (ValueError, binascii.Error):
        logger.warning("Unreadable password hash in user store")
        return False
    return hmac.compare_digest(candidate.rsplit("$", 1)[1], expected)


async def read_credentials(request: Request) -> Credentials:
    """Accept credentials as a JSON body or as a submitted form."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            body = {}
    else:
        body = dict(await request.form())
    if not isinstance(body, dict):
        body = {}

    credentials = Credentials(
        username=str(body.get("username") or ""),
        password=str(body.get("password") or ""),
    )
    if not credentials.username or not credentials.password:
        raise ValidationError()
    return credentials


# ─── Endpoints ────────────────────────────────────────────────────────────────

@router.post("/register", response_model=ApiResponse, response_model_exclude_none=True)
async def register(request: Request, db: Session = Depends(get_db)):
    credentials = await read_credentials(request)
    create_user(db, credentials.username, hash_password(credentials.password))
    logger.info("Registered user %r", credentials.username)
    return ApiResponse(success=True)


@router.post("/login", response_model=ApiResponse, response_model_exclude_none=True)
async def login(
    request: Request,
    db: Session = Depends(get_db),
    session: SessionData = Depends(get_session),
    store: SessionStore = Depends(get_session_store),
):
    credentials = await read_credentials(request)

    user = get_user_by_username(db, credentials.username)
    if not user:
        raise NotFoundError()
    if not verify_password(credentials.password, user.password_hash):
        raise InvalidCredentialsError()

    rotate_session(request, store, session, SessionUser(id=user.id, username=user.username))
    logger.info("User %r logged in", user.username)
    return ApiResponse(success=True)


@router.get("/logout")
async def logout(
    request: Request,
    session: SessionData = Depends(get_session),
    store: SessionStore = Depends(get_session_store),
):
    destroy_session(request, store, session)
    return RedirectResponse("/login.html", status_code=302)
