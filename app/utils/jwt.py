# app/utils/jwt.py
from datetime import datetime, timedelta
from typing import Optional, Tuple

from jose import jwt, JWTError

from app.core.config import settings


def _create_token(*, subject: str, kind: str, expires_delta: timedelta) -> str:
    now = datetime.utcnow()
    payload = {
        "sub": subject,  # user email
        "typ": kind,  # "access" | "refresh"
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def create_access_refresh(subject: str) -> Tuple[str, str]:
    access_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    refresh_delta = timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES)

    access_token = _create_token(subject=subject, kind="access", expires_delta=access_delta)
    refresh_token = _create_token(subject=subject, kind="refresh", expires_delta=refresh_delta)
    return access_token, refresh_token


def decode_token(raw_token: str) -> Optional[dict]:
    try:
        return jwt.decode(raw_token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except JWTError:
        return None
