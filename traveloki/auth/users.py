from __future__ import annotations

import threading
from typing import Any

import bcrypt

from ..errors import ValidationError
from .models import Identity, Role

_users: dict[str, dict[str, Any]] = {}
_lock = threading.Lock()


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _seed_users() -> None:
    """Pre-seed demo users on import."""
    _users["user"] = {
        "password_hash": _hash_password("user123"),
        "role": Role.user,
        "email": "user@traveloki.local",
        "full_name": "Demo User",
    }
    _users["admin"] = {
        "password_hash": _hash_password("admin123"),
        "role": Role.admin,
        "email": "admin@traveloki.local",
        "full_name": "Demo Admin",
    }


def _identity(username: str, record: dict[str, Any]) -> Identity:
    return Identity(
        username=username,
        role=record["role"],
        email=record.get("email"),
        full_name=record.get("full_name"),
    )


def authenticate(login: str, password: str) -> Identity | None:
    """Verify credentials by username or email. Returns ``None`` on mismatch."""
    with _lock:
        username = login if login in _users else next(
            (name for name, rec in _users.items() if rec.get("email") == login), None
        )
        record = _users.get(username) if username else None
    if record and _verify_password(password, record["password_hash"]):
        return _identity(username, record)
    return None


def register(username: str, email: str, password: str, full_name: str = "") -> Identity:
    """Create a regular user account. Registration never grants admin."""
    username = username.strip()
    email = email.strip().lower()
    if len(username) < 3:
        raise ValidationError("Username must be at least 3 characters")
    if "@" not in email:
        raise ValidationError("Email address is invalid")

    record = {
        "password_hash": _hash_password(password),
        "role": Role.user,
        "email": email,
        "full_name": full_name.strip(),
    }
    with _lock:
        if username in _users:
            raise ValidationError(f"Username '{username}' is already taken")
        if any(rec.get("email") == email for rec in _users.values()):
            raise ValidationError(f"Email '{email}' is already registered")
        _users[username] = record
    return _identity(username, record)


_seed_users()
