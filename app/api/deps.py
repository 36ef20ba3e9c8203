# app/api/deps.py
from functools import lru_cache

import redis
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.order_status import Caller
from app.services.auth_service import AuthService
from app.services.notification_service import NotificationService
from app.services.otp_store import OtpStore, SessionStore
from app.utils.settings import REDIS_URL


@lru_cache
def get_redis() -> redis.Redis:
    return redis.Redis.from_url(REDIS_URL, decode_responses=True)


def get_otp_store(client: redis.Redis = Depends(get_redis)) -> OtpStore:
    return OtpStore(client)


def get_session_store(client: redis.Redis = Depends(get_redis)) -> SessionStore:
    return SessionStore(client)


def get_notifier() -> NotificationService:
    return NotificationService()


def get_auth_service(
    db: Session = Depends(get_db),
    otp_store: OtpStore = Depends(get_otp_store),
    session_store: SessionStore = Depends(get_session_store),
) -> AuthService:
    return AuthService(db, otp_store, session_store)


def get_token(authorization: str | None = Header(None)) -> str:
    """Token z naglowka Authorization: Bearer <token>."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Access denied. No token provided.")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Invalid authorization header")
    return token.strip()


def get_caller(
    token: str = Depends(get_token),
    auth: AuthService = Depends(get_auth_service),
) -> Caller:
    """Zweryfikowany wywolujacy na podstawie tokenu sesji."""
    caller = auth.get_caller(token)
    if not caller:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return caller
