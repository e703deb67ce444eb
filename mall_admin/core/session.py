"""
Admin session cookie.

The cookie carries {userId, email, fullName, expiresAt} signed with the
session secret. A session is valid only while expiresAt (epoch milliseconds)
is strictly in the future; expired, tampered or malformed cookies are treated
exactly like a missing cookie.
"""

import logging
import time
from typing import Optional

from fastapi import Response
from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mall_admin.config.settings import settings

logger = logging.getLogger(__name__)


class SessionData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    email: str
    full_name: Optional[str] = Field(default=None, alias="fullName")
    expires_at: int = Field(alias="expiresAt")

    def is_expired(self, now_ms: Optional[int] = None) -> bool:
        now_ms = now_ms if now_ms is not None else _now_ms()
        return self.expires_at <= now_ms


def _now_ms() -> int:
    return int(time.time() * 1000)


def create_session(user_id: str, email: str, full_name: Optional[str] = None, now_ms: Optional[int] = None) -> SessionData:
    now_ms = now_ms if now_ms is not None else _now_ms()
    return SessionData(
        user_id=user_id,
        email=email,
        full_name=full_name,
        expires_at=now_ms + settings.session_max_age_seconds * 1000,
    )


def encode_session(session: SessionData) -> str:
    return jwt.encode(
        session.model_dump(by_alias=True),
        settings.session_secret,
        algorithm=settings.session_algorithm,
    )


def read_session(token: Optional[str], now_ms: Optional[int] = None) -> Optional[SessionData]:
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.session_secret, algorithms=[settings.session_algorithm])
        session = SessionData.model_validate(payload)
    except (JWTError, ValidationError) as e:
        logger.debug(f"Ignoring invalid session cookie: {e}")
        return None
    if session.is_expired(now_ms):
        return None
    return session


def set_session_cookie(response: Response, session: SessionData) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=encode_session(session),
        max_age=settings.session_max_age_seconds,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.session_cookie_name, path="/")
