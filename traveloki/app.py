from __future__ import annotations

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events, record_event
from .attractions.categories import describe_categories
from .attractions.directory import get_directory
from .attractions.models import ActiveCategorySet, AttractionIn
from .attractions.search import nearest_to, search_by_text, within_radius
from .auth.dependencies import bearer_token, require_admin, require_user
from .auth.models import Identity, LoginRequest, RegisterRequest
from .auth.tokens import issue_token, revoke_token
from .auth.users import authenticate, register
from .config import DEFAULT_APP_CONFIG
from .errors import NotFound, TravelokiError
from .location.models import Position
from .moderation.models import ApproveRequest, ConfirmRequest
from .moderation.workflow import get_workflow

app = FastAPI(title="Traveloki API", version="1.0.0")
app.add_middleware(SessionMiddleware, secret_key=DEFAULT_APP_CONFIG.session_secret)


@app.exception_handler(TravelokiError)
def handle_domain_error(request: Request, exc: TravelokiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "error": type(exc).__name__, "message": exc.message},
    )


def _active_set(categories: list[str] | None) -> ActiveCategorySet:
    """No ``categories`` parameter means every category is active."""
    if categories is None:
        return ActiveCategorySet.all_on()
    return ActiveCategorySet.from_names(categories)


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/categories")
def categories() -> dict:
    return {"status": "success", "data": describe_categories()}


@app.get("/attractions/search")
def search(
    q: str = "",
    categories: list[str] | None = Query(default=None),
) -> dict:
    active = _active_set(categories)
    query = q.strip()
    if not query:
        return {"status": "success", "data": None, "message": "Empty query"}

    outcome = search_by_text(query, active, get_directory())
    record_event("search", {
        "query": query.lower(),
        "found": outcome is not None,
        "category": outcome.category.value if outcome else None,
        "activated": outcome.activated if outcome else False,
    })
    if outcome is None:
        raise NotFound(
            f'"{query}" not found. Try searching for food places, attractions, or hotels!'
        )

    return {
        "status": "success",
        "data": outcome.attraction,
        "category": outcome.category.value,
        "activated": outcome.activated,
        "active_categories": outcome.active.as_dict(),
    }


@app.get("/attractions/nearest")
def nearest(
    lat: float,
    lng: float,
    categories: list[str] | None = Query(default=None),
) -> dict:
    position = Position(lat=lat, lng=lng)
    attraction = nearest_to(position, _active_set(categories), get_directory())
    record_event("nearest", {"found": attraction is not None})
    if attraction is None:
        raise NotFound("No nearby places found for the active categories.")
    return {"status": "success", "data": attraction}


@app.get("/attractions/nearby")
def nearby(
    lat: float,
    lng: float,
    radius: float = DEFAULT_APP_CONFIG.default_radius_km,
    categories: list[str] | None = Query(default=None),
) -> dict:
    position = Position(lat=lat, lng=lng)
    results = within_radius(position, radius, _active_set(categories), get_directory())
    record_event("nearby", {"radius_km": radius, "results": len(results)})
    return {
        "status": "success",
        "data": [
            {**r.attraction.model_dump(mode="json"), "distance_m": round(r.distance_m, 1)}
            for r in results
        ],
    }


# ── Auth endpoints ───────────────────────────────────────────────────────


def _login_response(request: Request, user: Identity, message: str) -> dict:
    request.session["user"] = user.model_dump(mode="json")
    return {
        "status": "success",
        "message": message,
        "data": {"user": user, "token": issue_token(user)},
    }


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.login, body.password) if body.login else None
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return _login_response(request, user, "Login successful")


@app.post("/auth/register")
def register_user(body: RegisterRequest, request: Request) -> dict:
    user = register(body.username, body.email, body.password, body.full_name)
    return _login_response(request, user, "Registration successful")


@app.post("/auth/logout")
def logout(request: Request, token: str | None = Depends(bearer_token)) -> dict:
    if token:
        revoke_token(token)
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: Identity = Depends(require_user)) -> Identity:
    return user


# ── User endpoints ───────────────────────────────────────────────────────


@app.post("/attractions/recommend", status_code=201)
def recommend(body: AttractionIn, user: Identity = Depends(require_user)) -> dict:
    recommendation = get_workflow().submit(body, user)
    return {
        "status": "success",
        "message": "Recommendation submitted and awaiting review",
        "data": recommendation,
    }


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/attractions/recommendations/pending")
def pending(user: Identity = Depends(require_admin)) -> dict:
    return {"status": "success", "data": get_workflow().list_pending(user)}


@app.post("/attractions/recommendations/{recommendation_id}/approve")
def approve(
    recommendation_id: str,
    body: ApproveRequest | None = None,
    user: Identity = Depends(require_admin),
) -> dict:
    body = body or ApproveRequest()
    attraction = get_workflow().approve(
        recommendation_id,
        body.category,
        user,
        confirmed=body.confirmed,
        category_id=body.category_id,
    )
    return {"status": "success", "message": "Recommendation approved", "data": attraction}


@app.post("/attractions/recommendations/{recommendation_id}/reject")
def reject(
    recommendation_id: str,
    body: ConfirmRequest | None = None,
    user: Identity = Depends(require_admin),
) -> dict:
    body = body or ConfirmRequest()
    get_workflow().reject(recommendation_id, user, confirmed=body.confirmed)
    return {"status": "success", "message": "Recommendation rejected"}


@app.post("/attractions", status_code=201)
def create_attraction(body: AttractionIn, user: Identity = Depends(require_admin)) -> dict:
    attraction = get_workflow().create_direct(body, user)
    return {"status": "success", "message": "Attraction created", "data": attraction}


@app.delete("/attractions/{attraction_id}")
def delete_attraction(
    attraction_id: str,
    confirmed: bool = True,
    user: Identity = Depends(require_admin),
) -> dict:
    get_workflow().delete_published(attraction_id, user, confirmed=confirmed)
    return {"status": "success", "message": "Attraction deleted"}


@app.get("/analytics")
def analytics(user: Identity = Depends(require_admin)) -> dict:
    return compute_analytics(get_events())


# Catch-all area listing; registered last so the fixed paths above win.
@app.get("/attractions/{area}")
def list_attractions(area: str) -> dict:
    if area.strip().lower() != DEFAULT_APP_CONFIG.area:
        raise NotFound(f"Unknown area '{area}'")
    return {"status": "success", "data": get_directory().snapshot()}
