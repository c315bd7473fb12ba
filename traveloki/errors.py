"""
Error taxonomy shared by the search engine, the moderation workflow and the
location tracker.

Every condition is local and recoverable by the caller; the HTTP layer maps
each class to a status code in ``app.py``.
"""
from __future__ import annotations


class TravelokiError(Exception):
    """Base class for all domain errors."""

    status_code = 400

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class ValidationError(TravelokiError):
    """Malformed coordinates or empty required text. Nothing was changed."""

    status_code = 422


class InvalidTransition(TravelokiError):
    """Moderation action on a recommendation that is no longer pending."""

    status_code = 409


class Unauthorized(TravelokiError):
    """Administrator action without an administrator identity."""

    status_code = 403

    def __init__(self, message: str = "", authenticated: bool = False) -> None:
        super().__init__(message)
        self.authenticated = authenticated
        if not authenticated:
            self.status_code = 401


class NotFound(TravelokiError):
    status_code = 404


class LocationUnavailable(TravelokiError):
    """The position source reported a failure (denied, timeout, unsupported)."""

    status_code = 503


class NoLocation(TravelokiError):
    """On-demand centering requested before any fix was received."""

    status_code = 409
