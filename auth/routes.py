"""
Auth API routes — register, login.

Route prefix: /auth
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, ConfigDict, Field

from auth.dependencies import get_auth_service, get_settings
from auth.models import AuthResult
from auth.service import AuthService
from config.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


# ── Request schemas ────────────────────────────────────────────────────
# Fields are optional so that missing values reach the service and come
# back as the same ``{"msg": ...}`` 422 as empty ones.


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = Field(default=None, alias="confirmPassword")


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


# ── Helpers ────────────────────────────────────────────────────────────


def set_session_cookie(response: Response, settings: Settings, session_id: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )


def _respond(result: AuthResult, response: Response, settings: Settings) -> Dict[str, Any]:
    if result.session_id:
        set_session_cookie(response, settings, result.session_id)
    else:
        # drop any cookie left over from an earlier session
        clear_session_cookie(response, settings)
    return result.to_dict()


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    req: RegisterRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """Register a new user and sign them in."""
    result = await service.register(req.name, req.email, req.password, req.confirm_password)
    return _respond(result, response, settings)


@router.post("/login")
async def login(
    req: LoginRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """Login with email + password."""
    result = await service.login(req.email, req.password)
    return _respond(result, response, settings)
