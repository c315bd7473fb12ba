from __future__ import annotations

import logging
from typing import Any

import httpx

from .. import errors
from ..attractions.categories import resolve_category_id
from ..config import DEFAULT_CLIENT_CONFIG, ClientConfig
from .session import Session

logger = logging.getLogger(__name__)

_STATUS_ERRORS: dict[int, type[errors.TravelokiError]] = {
    401: errors.Unauthorized,
    403: errors.Unauthorized,
    404: errors.NotFound,
    409: errors.InvalidTransition,
    422: errors.ValidationError,
    503: errors.LocationUnavailable,
}


def _raise_for_error(response: httpx.Response) -> None:
    """Turn an error response into the matching domain exception."""
    if response.is_success:
        return
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    message = body.get("message") or body.get("detail") or response.reason_phrase
    if not isinstance(message, str):
        message = str(message)

    error_cls = getattr(errors, str(body.get("error", "")), None)
    if not (isinstance(error_cls, type) and issubclass(error_cls, errors.TravelokiError)):
        error_cls = _STATUS_ERRORS.get(response.status_code)
    if error_cls is None:
        response.raise_for_status()

    if error_cls is errors.Unauthorized:
        raise errors.Unauthorized(message, authenticated=response.status_code == 403)
    raise error_cls(message)


class TravelokiClient:
    """Typed wrapper over the REST API.

    Pass ``http`` to reuse an existing ``httpx.Client`` (for example
    FastAPI's ``TestClient``); otherwise one is built from ``config``.
    """

    def __init__(
        self,
        http: httpx.Client | None = None,
        session: Session | None = None,
        config: ClientConfig = DEFAULT_CLIENT_CONFIG,
    ) -> None:
        self._config = config
        self._http = http or httpx.Client(base_url=config.base_url, timeout=config.timeout)
        self.session = session if session is not None else Session()

    @classmethod
    def resume(cls, config: ClientConfig = DEFAULT_CLIENT_CONFIG) -> TravelokiClient:
        """Build a client around the session stored at ``config.session_path``."""
        return cls(session=Session.load(config.session_path), config=config)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> TravelokiClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _headers(self) -> dict[str, str]:
        if self.session.token:
            return {"Authorization": f"Bearer {self.session.token}"}
        return {}

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        response = self._http.request(method, path, headers=self._headers(), **kwargs)
        _raise_for_error(response)
        return response.json()

    # ── Auth ────────────────────────────────────────────────────────────

    def login(self, username: str, password: str, persist: bool = False) -> dict[str, Any]:
        body = self._request("POST", "/auth/login", json={"username": username, "password": password})
        return self._start_session(body, persist)

    def register(
        self,
        username: str,
        email: str,
        password: str,
        full_name: str = "",
        persist: bool = False,
    ) -> dict[str, Any]:
        body = self._request("POST", "/auth/register", json={
            "username": username,
            "email": email,
            "password": password,
            "full_name": full_name,
        })
        return self._start_session(body, persist)

    def _start_session(self, body: dict[str, Any], persist: bool) -> dict[str, Any]:
        data = body["data"]
        self.session = Session(token=data["token"], user=data["user"])
        if persist:
            self.session.store(self._config.session_path)
        logger.info("Logged in as %s", data["user"].get("username"))
        return data["user"]

    def logout(self, persist: bool = False) -> None:
        self._request("POST", "/auth/logout")
        self.session.clear(self._config.session_path if persist else None)

    # ── Public ──────────────────────────────────────────────────────────

    def get_categories(self) -> list[dict[str, Any]]:
        return self._request("GET", "/categories")["data"]

    def get_attractions(self, area: str = "medan") -> dict[str, list[dict[str, Any]]]:
        return self._request("GET", f"/attractions/{area}")["data"]

    def search(self, query: str, categories: list[str] | None = None) -> dict[str, Any]:
        """Text search. Returns the whole response so the caller sees activations."""
        params: dict[str, Any] = {"q": query}
        if categories is not None:
            params["categories"] = categories
        return self._request("GET", "/attractions/search", params=params)

    def nearest(self, lat: float, lng: float, categories: list[str] | None = None) -> dict[str, Any]:
        params: dict[str, Any] = {"lat": lat, "lng": lng}
        if categories is not None:
            params["categories"] = categories
        return self._request("GET", "/attractions/nearest", params=params)["data"]

    def nearby(self, lat: float, lng: float, radius: float = 5) -> list[dict[str, Any]]:
        params = {"lat": lat, "lng": lng, "radius": radius}
        return self._request("GET", "/attractions/nearby", params=params)["data"]

    # ── User ────────────────────────────────────────────────────────────

    def submit_recommendation(self, data: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/attractions/recommend", json=data)["data"]

    # ── Admin ───────────────────────────────────────────────────────────

    def pending_recommendations(self) -> list[dict[str, Any]]:
        return self._request("GET", "/attractions/recommendations/pending")["data"]

    def approve_recommendation(self, recommendation_id: str, category: str | int) -> dict[str, Any]:
        """Approve under a category name (resolved with fallback) or a raw id."""
        category_id = resolve_category_id(category) if isinstance(category, str) else category
        return self._request(
            "POST",
            f"/attractions/recommendations/{recommendation_id}/approve",
            json={"category_id": category_id},
        )["data"]

    def reject_recommendation(self, recommendation_id: str) -> str:
        return self._request(
            "POST", f"/attractions/recommendations/{recommendation_id}/reject",
        )["message"]

    def create_attraction(self, data: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/attractions", json=data)["data"]

    def delete_attraction(self, attraction_id: str) -> str:
        return self._request("DELETE", f"/attractions/{attraction_id}")["message"]
