"""
Bearer-token authentication.

Access tokens are HS256 JWTs issued by ``create_access_token``; the
``sub`` claim carries the user id. Tokens are read from the
``Authorization: Bearer`` header or, for browser clients, the
``auth-token`` cookie. In development the fixed ``DEV_AUTH_TOKEN`` logs in
a local dev user so the API can be exercised without the OAuth flow.
"""

import logging
from datetime import datetime, timedelta, UTC
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from pingtopass.core.config import settings
from pingtopass.core.errors import AuthenticationError, PermissionDeniedError
from pingtopass.crud.crud_user import user as crud_user
from pingtopass.db.database import get_db
from pingtopass.models.user import User
from pingtopass.schemas.user import UserCreate

logger = logging.getLogger(__name__)

AUTH_COOKIE_NAME = "auth-token"
DEV_USER_EMAIL = "dev@pingtopass.local"

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(user: User, expires_minutes: Optional[int] = None) -> str:
    now = datetime.now(UTC)
    expires = now + timedelta(minutes=expires_minutes or settings.JWT_EXPIRE_MINUTES)
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "iat": now,
        "exp": expires,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry, raising AuthenticationError on failure."""
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Session expired. Please log in again.")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid authentication token")


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(AUTH_COOKIE_NAME)


def _dev_user(db: Session) -> User:
    dev = crud_user.get_by_email(db, email=DEV_USER_EMAIL)
    if dev is None:
        dev = crud_user.upsert_login(
            db,
            obj_in=UserCreate(email=DEV_USER_EMAIL, name="Dev User", provider="email", role="admin"),
        )
    return dev


def require_auth(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """FastAPI dependency returning the authenticated user."""
    token = _extract_token(request, credentials)
    if not token:
        raise AuthenticationError()

    if settings.APP_ENV == "development" and token == settings.DEV_AUTH_TOKEN:
        user = _dev_user(db)
    else:
        payload = decode_access_token(token)
        try:
            user_id = int(payload.get("sub", ""))
        except ValueError:
            raise AuthenticationError("Invalid authentication token")
        user = crud_user.get(db, obj_id=user_id)
        if user is None or not user.is_active:
            logger.warning("Token for unknown or disabled user %s", user_id)
            raise AuthenticationError("User not found or disabled")

    request.state.user_id = user.id
    return user


def require_admin(user: User = Depends(require_auth)) -> User:
    if not user.is_admin:
        raise PermissionDeniedError("Admin access required")
    return user
