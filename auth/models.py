"""
Value types passed between the auth components and the HTTP layer.

``PublicUser`` is built field-by-field from a ``User`` row, so the password
hash is never part of it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Literal, Optional

from database.models import User


@dataclass(frozen=True)
class PublicUser:
    id: str
    name: str
    email: str

    @classmethod
    def from_row(cls, user: User) -> "PublicUser":
        return cls(id=str(user.user_id), name=user.name, email=user.email)

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name, "email": self.email}


@dataclass(frozen=True)
class AuthResult:
    msg: str
    token: str
    session_id: Optional[str]
    user: PublicUser

    def to_dict(self) -> Dict[str, Any]:
        return {
            "msg": self.msg,
            "token": self.token,
            "sessionId": self.session_id,
            "user": self.user.to_dict(),
        }


@dataclass(frozen=True)
class SessionRecord:
    session_id: str
    user_id: str
    user_email: str
    created_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class Principal:
    """An authenticated identity and the mechanism that established it."""

    user_id: str
    source: Literal["token", "session"]
    session_id: Optional[str] = None
