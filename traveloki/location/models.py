from __future__ import annotations

import time
from dataclasses import dataclass, field

from ..errors import ValidationError


@dataclass(frozen=True)
class Position:
    lat: float
    lng: float
    timestamp: float = field(default_factory=time.time)
    accuracy: float | None = None

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise ValidationError(f"Latitude must be between -90 and 90, got {self.lat}")
        if not -180.0 <= self.lng <= 180.0:
            raise ValidationError(f"Longitude must be between -180 and 180, got {self.lng}")


@dataclass(frozen=True)
class LocationFailure:
    """A failure reported by the position source in place of a fix."""

    reason: str
    code: str = "unavailable"
