# app/api/routes_auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from app.api.deps import get_db, current_user, load_user_by_email, _extract_bearer
from app.core.config import settings
from app.core.rbac import iter_user_perm_keys
from app.core.security import verify_password
from app.models.user import User
from app.schemas.auth import LoginIn, MeOut, TokenOut
from app.utils.jwt import create_access_refresh, decode_token

logger = logging.getLogger(__name__)

router = APIRouter()

REFRESH_COOKIE = "refresh_token"


def _set_refresh_cookie(response: Response, refresh: str) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE,
        value=refresh,
        httponly=True,
        secure=not settings.is_development,
        samesite="lax",
        max_age=settings.REFRESH_TOKEN_EXPIRE_MINUTES * 60,
        path="/",
    )


@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn, response: Response, db: Session = Depends(get_db)):
    email = (payload.email or "").strip().lower()
    user = load_user_by_email(db, email)
    if not user or not verify_password(payload.password, user.password_hash):
        logger.info("Failed login for %s", email)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User inactive")

    access, refresh = create_access_refresh(user.email)
    _set_refresh_cookie(response, refresh)
    return TokenOut(access_token=access, refresh_token=refresh)


@router.post("/refresh", response_model=TokenOut)
def refresh_token(request: Request, response: Response, db: Session = Depends(get_db)):
    """
    New access + refresh pair from a refresh token (HttpOnly cookie, or
    Authorization: Bearer <refresh>). Access tokens are rejected here.
    """
    raw = request.cookies.get(REFRESH_COOKIE) or _extract_bearer(request.headers.get("Authorization"))
    if not raw:
        raise HTTPException(status_code=401, detail="Missing refresh token")

    payload = decode_token(raw)
    if not payload or payload.get("typ") != "refresh":
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    email = payload.get("sub")
    user = load_user_by_email(db, email) if email else None
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User inactive")

    access, new_refresh = create_access_refresh(user.email)
    _set_refresh_cookie(response, new_refresh)
    return TokenOut(access_token=access, refresh_token=new_refresh)


@router.get("/me", response_model=MeOut)
def me(user: User = Depends(current_user)):
    return MeOut(
        id=user.id,
        name=user.name,
        email=user.email,
        is_admin=bool(user.is_admin),
        roles=sorted(r.name for r in user.roles),
        permissions=sorted(iter_user_perm_keys(user)),
    )
