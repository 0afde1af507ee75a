"""
REST API routes — protected profile, session check/logout, status.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, Response

from auth.dependencies import (
    get_current_user,
    get_session_id,
    get_session_manager,
    get_session_principal,
    get_settings,
)
from auth.models import Principal, PublicUser
from auth.routes import clear_session_cookie
from auth.sessions import SessionManager
from config.settings import Settings
from database.session import check_connection

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/user/profile")
async def user_profile(
    request: Request,
    user: PublicUser = Depends(get_current_user),
) -> Dict[str, Any]:
    """Token-protected route; session state is not consulted."""
    return {
        "msg": "Protected route accessed successfully!",
        "user": user.to_dict(),
        "sessionId": get_session_id(request),
    }


@router.get("/session/check")
async def session_check(
    request: Request,
    principal: Optional[Principal] = Depends(get_session_principal),
) -> Dict[str, Any]:
    """Cookie-only check; reports ``authenticated: false`` instead of failing."""
    if principal is None:
        return {"authenticated": False, "sessionId": get_session_id(request)}
    return {
        "authenticated": True,
        "userId": principal.user_id,
        "sessionId": principal.session_id,
    }


@router.post("/session/logout")
async def session_logout(
    request: Request,
    response: Response,
    sessions: SessionManager = Depends(get_session_manager),
    settings: Settings = Depends(get_settings),
) -> Dict[str, str]:
    """
    Destroy the server-side session and clear its cookie.

    Tokens cannot be revoked; the client is expected to discard its copy.
    """
    await sessions.destroy(get_session_id(request))
    clear_session_cookie(response, settings)
    return {"msg": "Logout successful"}


@router.get("/status")
async def server_status(
    request: Request,
    principal: Optional[Principal] = Depends(get_session_principal),
) -> Dict[str, str]:
    database = await check_connection(request.app.state.engine)
    return {
        "message": "Server status",
        "database": database,
        "session": "active" if principal is not None else "none",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
