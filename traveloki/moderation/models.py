from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class RecommendationState(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    address: str = ""
    lat: float
    lng: float
    category: str
    submitted_by: str
    state: RecommendationState = RecommendationState.pending
    created_at: datetime = Field(default_factory=datetime.now)
    resolved_at: datetime | None = None
    resolved_by: str | None = None
    attraction_id: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.state is RecommendationState.pending


class ApproveRequest(BaseModel):
    category_id: int | None = None
    category: str | None = None
    confirmed: bool = True


class ConfirmRequest(BaseModel):
    confirmed: bool = True
