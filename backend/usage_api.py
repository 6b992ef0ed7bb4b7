# usage_api.py
"""
Access gate for analysis requests and the demo-status endpoint.

Logged-in sessions analyse without limit. Anonymous sessions get
DEMO_LIMIT analyses; each admitted request uses one up front, whether or
not the analysis later succeeds.
"""

import logging
import os
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from errors import AuthenticationRequiredError, QuotaExceededError
from sessions import SessionData, SessionStore, get_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["usage"])

DEMO_LIMIT    = int(os.getenv("DEMO_LIMIT", "3"))
REQUIRE_LOGIN = os.getenv("REQUIRE_LOGIN", "false").lower() in ("1", "true", "yes")


# ═══════════════════════════════════════════════════════════════════════════════
# Gate
# ═══════════════════════════════════════════════════════════════════════════════

def remaining_tries(session: SessionData) -> Optional[int]:
    """None for logged-in sessions, otherwise the demo analyses left."""
    if session.is_authenticated:
        return None
    return max(0, DEMO_LIMIT - session.demo_use_count)


def admit_analysis(session: SessionData, store: SessionStore) -> Optional[int]:
    """
    Admit or reject one analysis request.

    Returns remaining demo tries after admission (None when logged in).
    Raises AuthenticationRequiredError in login-required mode and
    QuotaExceededError once the demo allowance is spent.
    """
    if session.is_authenticated:
        return None

    if REQUIRE_LOGIN:
        raise AuthenticationRequiredError()

    if session.demo_use_count >= DEMO_LIMIT:
        logger.info("Demo limit reached for session %s…", session.session_id[:8])
        raise QuotaExceededError()

    session.demo_use_count += 1
    store.save(session)
    logger.info("Demo use %d/%d admitted", session.demo_use_count, DEMO_LIMIT)
    return remaining_tries(session)


# ═══════════════════════════════════════════════════════════════════════════════
# Request/Response Models
# ═══════════════════════════════════════════════════════════════════════════════

class DemoStatusResponse(BaseModel):
    isDemo: bool
    remainingTries: Optional[int] = None


# ═══════════════════════════════════════════════════════════════════════════════
# API Endpoints
# ═══════════════════════════════════════════════════════════════════════════════

@router.get("/demo-status", response_model=DemoStatusResponse)
async def demo_status(session: SessionData = Depends(get_session)):
    """
    Tell the front end whether this is a demo session and how many
    analyses it has left.

    Usage from frontend:
        const status = await fetch('/demo-status').then(r => r.json());
    """
    tries = remaining_tries(session)
    if REQUIRE_LOGIN and not session.is_authenticated:
        tries = 0
    return DemoStatusResponse(isDemo=not session.is_authenticated, remainingTries=tries)
