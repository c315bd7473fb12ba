from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class Session:
    """Login state persisted between runs of a client."""

    token: str | None = None
    user: dict[str, Any] = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def is_admin(self) -> bool:
        return self.user.get("role") == "admin"

    @classmethod
    def load(cls, path: Path) -> Session:
        """Read a stored session; a missing or unreadable file gives an empty one."""
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return cls()
        if not isinstance(raw, dict) or not raw.get("token"):
            return cls()
        return cls(token=raw["token"], user=raw.get("user") or {})

    def store(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps({"token": self.token, "user": self.user}), encoding="utf-8")

    def clear(self, path: Path | None = None) -> None:
        self.token = None
        self.user = {}
        if path is not None:
            path.unlink(missing_ok=True)
