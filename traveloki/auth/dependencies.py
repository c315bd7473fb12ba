from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .models import Identity
from .tokens import resolve_token

security = HTTPBearer(auto_error=False)


def bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    if credentials is None:
        return None
    return (credentials.credentials or "").strip() or None


def get_current_user(
    request: Request,
    token: str | None = Depends(bearer_token),
) -> Identity | None:
    """Return the caller from the bearer token or the session, or ``None``."""
    if token:
        return resolve_token(token)
    raw = request.session.get("user")
    return Identity(**raw) if raw else None


def require_user(user: Identity | None = Depends(get_current_user)) -> Identity:
    """Raise 401 if no user is logged in."""
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_admin(user: Identity | None = Depends(get_current_user)) -> Identity:
    """Raise 401 if not logged in, 403 if not admin."""
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
