from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from traveloki.app import app

client = TestClient(app)

SUBMISSION = {
    "name": "Kopi Apek",
    "description": "Old-school coffee shop since 1938",
    "address": "Jl. Hindu No. 37",
    "lat": 3.5889,
    "lng": 98.6801,
    "category": "Fun",
}


def _login_user(c):
    c.post("/auth/login", json={"username": "user", "password": "user123"})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


def _names(listing: dict, category: str) -> list[str]:
    return [a["name"] for a in listing[category]]


# ── Listing & categories ─────────────────────────────────────────────────


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_categories():
    body = client.get("/categories").json()
    assert [(c["name"], c["id"]) for c in body["data"]] == [("food", 1), ("fun", 2), ("hotels", 3)]


def test_list_attractions_shape():
    resp = client.get("/attractions/medan")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert set(data) == {"food", "fun", "hotels"}
    assert "Istana Maimun" in _names(data, "fun")


def test_list_attractions_area_is_case_insensitive():
    assert client.get("/attractions/Medan").status_code == 200


def test_list_unknown_area():
    resp = client.get("/attractions/jakarta")
    assert resp.status_code == 404
    assert resp.json()["error"] == "NotFound"


# ── Search ───────────────────────────────────────────────────────────────


def test_search_returns_first_match():
    resp = client.get("/attractions/search", params={"q": "hotel"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["data"]["name"] == "Hotel Grand Aston"
    assert body["category"] == "hotels"
    assert body["activated"] is False


def test_search_activates_hidden_category():
    resp = client.get("/attractions/search", params={"q": "maimun", "categories": ["food"]})
    body = resp.json()
    assert body["category"] == "fun"
    assert body["activated"] is True
    assert body["active_categories"] == {"food": True, "fun": True, "hotels": False}


def test_search_blank_query_is_a_no_op():
    resp = client.get("/attractions/search", params={"q": "   "})
    assert resp.status_code == 200
    assert resp.json()["data"] is None


def test_search_not_found():
    resp = client.get("/attractions/search", params={"q": "pizza hut"})
    assert resp.status_code == 404
    assert "not found" in resp.json()["message"]


def test_search_unknown_category_filter():
    resp = client.get("/attractions/search", params={"q": "mie", "categories": ["museum"]})
    assert resp.status_code == 422


# ── Proximity ────────────────────────────────────────────────────────────


def test_nearest():
    resp = client.get("/attractions/nearest", params={"lat": 3.5752, "lng": 98.6837})
    assert resp.status_code == 200
    assert resp.json()["data"]["name"] == "Istana Maimun"


def test_nearest_limited_to_active_categories():
    resp = client.get("/attractions/nearest", params={
        "lat": 3.5752, "lng": 98.6837, "categories": ["hotels"],
    })
    assert resp.json()["data"]["category"] == "hotels"


def test_nearest_rejects_bad_coordinates():
    resp = client.get("/attractions/nearest", params={"lat": 123, "lng": 98.6})
    assert resp.status_code == 422


def test_nearby_sorted_with_distances():
    resp = client.get("/attractions/nearby", params={"lat": 3.5900, "lng": 98.6780, "radius": 1})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data
    distances = [a["distance_m"] for a in data]
    assert distances == sorted(distances)
    assert all(d <= 1000 for d in distances)


@pytest.mark.parametrize("radius", ["0", "nan"])
def test_nearby_rejects_bad_radius(radius):
    resp = client.get("/attractions/nearby", params={"lat": 3.59, "lng": 98.67, "radius": radius})
    assert resp.status_code == 422
    assert resp.json()["error"] == "ValidationError"


# ── Moderation flow ──────────────────────────────────────────────────────


def test_submit_approve_flow():
    user = TestClient(app)
    _login_user(user)
    resp = user.post("/attractions/recommend", json=SUBMISSION)
    assert resp.status_code == 201
    rec = resp.json()["data"]
    assert rec["state"] == "pending"
    assert rec["submitted_by"] == "user"

    admin = TestClient(app)
    _login_admin(admin)
    pending = admin.get("/attractions/recommendations/pending").json()["data"]
    assert [p["id"] for p in pending] == [rec["id"]]

    resp = admin.post(f"/attractions/recommendations/{rec['id']}/approve", json={"category_id": 2})
    assert resp.status_code == 200
    published = resp.json()["data"]
    assert published["category"] == "fun"

    listing = client.get("/attractions/medan").json()["data"]
    assert "Kopi Apek" in _names(listing, "fun")
    assert admin.get("/attractions/recommendations/pending").json()["data"] == []

    again = admin.post(f"/attractions/recommendations/{rec['id']}/approve", json={"category_id": 2})
    assert again.status_code == 409
    assert again.json()["error"] == "InvalidTransition"
    listing = client.get("/attractions/medan").json()["data"]
    assert _names(listing, "fun").count("Kopi Apek") == 1


def test_approve_by_category_name_and_default():
    user = TestClient(app)
    _login_user(user)
    first = user.post("/attractions/recommend", json=SUBMISSION).json()["data"]
    second = user.post("/attractions/recommend", json={**SUBMISSION, "category": "hotels"}).json()["data"]

    admin = TestClient(app)
    _login_admin(admin)
    by_name = admin.post(f"/attractions/recommendations/{first['id']}/approve", json={"category": "FOOD"})
    assert by_name.json()["data"]["category"] == "food"
    no_body = admin.post(f"/attractions/recommendations/{second['id']}/approve")
    assert no_body.json()["data"]["category"] == "hotels"


def test_approve_unknown_category_id():
    user = TestClient(app)
    _login_user(user)
    rec = user.post("/attractions/recommend", json=SUBMISSION).json()["data"]
    admin = TestClient(app)
    _login_admin(admin)
    resp = admin.post(f"/attractions/recommendations/{rec['id']}/approve", json={"category_id": 9})
    assert resp.status_code == 404


def test_reject_then_approve():
    user = TestClient(app)
    _login_user(user)
    rec = user.post("/attractions/recommend", json=SUBMISSION).json()["data"]

    admin = TestClient(app)
    _login_admin(admin)
    resp = admin.post(f"/attractions/recommendations/{rec['id']}/reject")
    assert resp.status_code == 200
    assert admin.post(f"/attractions/recommendations/{rec['id']}/approve").status_code == 409
    listing = client.get("/attractions/medan").json()["data"]
    assert "Kopi Apek" not in _names(listing, "fun")


def test_approve_resolved_recommendation_checks_state_first():
    user = TestClient(app)
    _login_user(user)
    rec = user.post("/attractions/recommend", json=SUBMISSION).json()["data"]
    admin = TestClient(app)
    _login_admin(admin)
    assert admin.post(f"/attractions/recommendations/{rec['id']}/reject").status_code == 200

    resp = admin.post(f"/attractions/recommendations/{rec['id']}/approve", json={"category_id": 99})
    assert resp.status_code == 409
    assert resp.json()["error"] == "InvalidTransition"


def test_unconfirmed_approve_with_unknown_category_id():
    user = TestClient(app)
    _login_user(user)
    rec = user.post("/attractions/recommend", json=SUBMISSION).json()["data"]
    admin = TestClient(app)
    _login_admin(admin)
    resp = admin.post(
        f"/attractions/recommendations/{rec['id']}/approve",
        json={"category_id": 99, "confirmed": False},
    )
    assert resp.status_code == 422
    assert len(admin.get("/attractions/recommendations/pending").json()["data"]) == 1


def test_unconfirmed_reject_is_refused():
    user = TestClient(app)
    _login_user(user)
    rec = user.post("/attractions/recommend", json=SUBMISSION).json()["data"]
    admin = TestClient(app)
    _login_admin(admin)
    resp = admin.post(f"/attractions/recommendations/{rec['id']}/reject", json={"confirmed": False})
    assert resp.status_code == 422
    assert len(admin.get("/attractions/recommendations/pending").json()["data"]) == 1


def test_approve_unknown_recommendation():
    admin = TestClient(app)
    _login_admin(admin)
    assert admin.post("/attractions/recommendations/nope/approve").status_code == 404


def test_submit_validation():
    user = TestClient(app)
    _login_user(user)
    assert user.post("/attractions/recommend", json={**SUBMISSION, "lat": 100}).status_code == 422
    assert user.post("/attractions/recommend", json={**SUBMISSION, "name": "  "}).status_code == 422


def test_create_and_delete_directly():
    admin = TestClient(app)
    _login_admin(admin)
    resp = admin.post("/attractions", json={**SUBMISSION, "category": "food"})
    assert resp.status_code == 201
    created = resp.json()["data"]
    assert "Kopi Apek" in _names(client.get("/attractions/medan").json()["data"], "food")

    resp = admin.delete(f"/attractions/{created['id']}")
    assert resp.status_code == 200
    assert "Kopi Apek" not in _names(client.get("/attractions/medan").json()["data"], "food")
    assert admin.delete(f"/attractions/{created['id']}").status_code == 404


def test_delete_unconfirmed():
    admin = TestClient(app)
    _login_admin(admin)
    resp = admin.delete("/attractions/f1", params={"confirmed": "false"})
    assert resp.status_code == 422
    assert "Mie Aceh Titi Bobrok" in _names(client.get("/attractions/medan").json()["data"], "food")
