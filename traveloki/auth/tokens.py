"""Opaque bearer tokens issued at login and registration."""
from __future__ import annotations

import secrets
import threading

from .models import Identity

_tokens: dict[str, Identity] = {}
_lock = threading.Lock()


def issue_token(identity: Identity) -> str:
    token = secrets.token_urlsafe(32)
    with _lock:
        _tokens[token] = identity
    return token


def resolve_token(token: str) -> Identity | None:
    with _lock:
        return _tokens.get(token)


def revoke_token(token: str) -> None:
    with _lock:
        _tokens.pop(token, None)
