"""
Moderation state machine for user-submitted recommendations.

A recommendation is created ``pending`` and moves to ``approved`` or
``rejected`` exactly once. Approval materialises an Attraction in the
directory. Every transition runs under one lock, so two concurrent
moderation calls on the same id cannot both succeed.
"""
from __future__ import annotations

import logging
import math
import threading
import uuid
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..analytics.store import record_event
from ..attractions.categories import (
    DEFAULT_CATEGORY_CONFIG,
    CategoryConfig,
    category_for_id,
    parse_category,
    resolve_category_id,
)
from ..attractions.directory import DirectoryStore, get_directory, new_attraction_id
from ..attractions.models import Attraction, AttractionIn
from ..auth.models import Identity
from ..errors import InvalidTransition, NotFound, Unauthorized, ValidationError
from .models import Recommendation, RecommendationState

logger = logging.getLogger(__name__)


def _require_identity(actor: Identity | None) -> Identity:
    if actor is None:
        raise Unauthorized("Not authenticated")
    return actor


def _require_admin(actor: Identity | None) -> Identity:
    actor = _require_identity(actor)
    if not actor.is_admin:
        raise Unauthorized("Admin access required", authenticated=True)
    return actor


def _require_confirmed(confirmed: bool, action: str) -> None:
    if confirmed is not True:
        raise ValidationError(f"{action} requires explicit confirmation")


def validate_payload(payload: AttractionIn | Mapping[str, Any]) -> AttractionIn:
    """Check a submission before any state is touched.

    Raises ``ValidationError`` for empty name/description or coordinates that
    are missing, non-finite or out of range.
    """
    if not isinstance(payload, AttractionIn):
        try:
            payload = AttractionIn.model_validate(dict(payload))
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid attraction payload: {exc.errors()[0]['msg']}") from exc

    if not payload.name.strip():
        raise ValidationError("Name is required")
    if not payload.description.strip():
        raise ValidationError("Description is required")
    if not (math.isfinite(payload.lat) and math.isfinite(payload.lng)):
        raise ValidationError("Coordinates must be finite numbers")
    if not -90.0 <= payload.lat <= 90.0 or not -180.0 <= payload.lng <= 180.0:
        raise ValidationError(f"Coordinates out of range: ({payload.lat}, {payload.lng})")

    return payload.model_copy(update={
        "name": payload.name.strip(),
        "description": payload.description.strip(),
        "address": payload.address.strip(),
    })


class ModerationWorkflow:
    def __init__(
        self,
        directory: DirectoryStore,
        category_config: CategoryConfig = DEFAULT_CATEGORY_CONFIG,
    ) -> None:
        self._directory = directory
        self._category_config = category_config
        self._lock = threading.Lock()
        # Insertion-ordered; resolved records stay for lookups but leave the queue.
        self._records: dict[str, Recommendation] = {}

    # ── User operations ─────────────────────────────────────────────────

    def submit(self, payload: AttractionIn | Mapping[str, Any], submitter: Identity | None) -> Recommendation:
        submitter = _require_identity(submitter)
        data = validate_payload(payload)

        recommendation = Recommendation(
            id=uuid.uuid4().hex[:12],
            name=data.name,
            description=data.description,
            address=data.address,
            lat=data.lat,
            lng=data.lng,
            category=data.category.strip() or "food",
            submitted_by=submitter.username,
        )
        with self._lock:
            self._records[recommendation.id] = recommendation

        logger.info("Recommendation %s submitted by %s", recommendation.id, submitter.username)
        record_event("submission", {"recommendation_id": recommendation.id, "category": recommendation.category})
        return recommendation

    # ── Admin operations ────────────────────────────────────────────────

    def list_pending(self, actor: Identity | None) -> list[Recommendation]:
        _require_admin(actor)
        with self._lock:
            return [r for r in self._records.values() if r.is_pending]

    def get(self, recommendation_id: str) -> Recommendation:
        with self._lock:
            record = self._records.get(recommendation_id)
        if record is None:
            raise NotFound(f"Recommendation '{recommendation_id}' not found")
        return record

    def _pending_record(self, recommendation_id: str, action: str) -> Recommendation:
        """Fetch a record that must still be pending. Caller holds the lock."""
        record = self._records.get(recommendation_id)
        if record is None:
            raise NotFound(f"Recommendation '{recommendation_id}' not found")
        if not record.is_pending:
            logger.warning(
                "Refused to %s recommendation %s: already %s",
                action, recommendation_id, record.state.value,
            )
            raise InvalidTransition(
                f"Recommendation '{recommendation_id}' is already {record.state.value}"
            )
        return record

    def approve(
        self,
        recommendation_id: str,
        category_name: str | None,
        actor: Identity | None,
        *,
        confirmed: bool,
        category_id: int | None = None,
    ) -> Attraction:
        """Publish a pending recommendation under the resolved category.

        An explicit ``category_id`` wins and must be a configured id.
        Otherwise ``category_name`` goes through ``resolve_category_id``, so
        unknown names land in the fallback category, and ``None`` keeps the
        submitted category.
        """
        actor = _require_admin(actor)
        _require_confirmed(confirmed, "Approval")

        with self._lock:
            record = self._pending_record(recommendation_id, "approve")
            if category_id is None:
                name = category_name if category_name is not None else record.category
                category_id = resolve_category_id(name, self._category_config)
            category = category_for_id(category_id, self._category_config)

            attraction = self._directory.insert(Attraction(
                id=new_attraction_id(),
                name=record.name,
                description=record.description,
                address=record.address,
                lat=record.lat,
                lng=record.lng,
                category=category,
            ))
            self._records[recommendation_id] = record.model_copy(update={
                "state": RecommendationState.approved,
                "resolved_at": datetime.now(),
                "resolved_by": actor.username,
                "attraction_id": attraction.id,
            })

        logger.info(
            "Recommendation %s approved by %s as %s (category id %d)",
            recommendation_id, actor.username, attraction.id, category_id,
        )
        record_event("approval", {"recommendation_id": recommendation_id, "category": category.value})
        return attraction

    def reject(self, recommendation_id: str, actor: Identity | None, *, confirmed: bool) -> None:
        actor = _require_admin(actor)
        _require_confirmed(confirmed, "Rejection")

        with self._lock:
            record = self._pending_record(recommendation_id, "reject")
            self._records[recommendation_id] = record.model_copy(update={
                "state": RecommendationState.rejected,
                "resolved_at": datetime.now(),
                "resolved_by": actor.username,
            })

        logger.info("Recommendation %s rejected by %s", recommendation_id, actor.username)
        record_event("rejection", {"recommendation_id": recommendation_id})

    def create_direct(self, payload: AttractionIn | Mapping[str, Any], actor: Identity | None) -> Attraction:
        """Publish an attraction without going through the pending queue."""
        actor = _require_admin(actor)
        data = validate_payload(payload)
        category = parse_category(data.category)

        attraction = self._directory.insert(Attraction(
            id=new_attraction_id(),
            name=data.name,
            description=data.description,
            address=data.address,
            lat=data.lat,
            lng=data.lng,
            category=category,
            rating=data.rating,
            image=data.image,
        ))
        logger.info("Attraction %s created directly by %s", attraction.id, actor.username)
        record_event("direct_create", {"attraction_id": attraction.id, "category": category.value})
        return attraction

    def delete_published(self, attraction_id: str, actor: Identity | None, *, confirmed: bool) -> None:
        actor = _require_admin(actor)
        _require_confirmed(confirmed, "Deletion")

        attraction = self._directory.delete(attraction_id)
        logger.info("Attraction %s (%s) deleted by %s", attraction.id, attraction.name, actor.username)
        record_event("deletion", {"attraction_id": attraction.id, "category": attraction.category.value})


_workflow: ModerationWorkflow | None = None


def get_workflow() -> ModerationWorkflow:
    """Return the process-wide workflow bound to the shared directory."""
    global _workflow
    if _workflow is None:
        _workflow = ModerationWorkflow(get_directory())
    return _workflow


def reset_workflow() -> None:
    global _workflow
    _workflow = None
