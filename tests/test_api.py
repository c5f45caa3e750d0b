from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from weddingrsvp import api, database, utils
from weddingrsvp.models import Invite


@pytest.fixture()
def client(monkeypatch):
    """FastAPI test client with the scheduler disabled."""

    monkeypatch.setattr(api, "start_scheduler", lambda: None)
    monkeypatch.setattr(api, "stop_scheduler", lambda: None)
    with TestClient(api.app) as test_client:
        yield test_client


def _login(client, password: str) -> str:
    response = client.post("/api/v1/admin/login", json={"password": password})
    assert response.status_code == 200
    return response.json()["token"]


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _create_smiths(client, token: str):
    return client.post(
        "/api/v1/admin/invites",
        headers=_auth(token),
        json={
            "name": "smiths",
            "guests": ["Amy", "Bob"],
            "ask_for_plus_one": False,
            "ask_for_kids": False,
            "max_number_of_kids": 0,
            "ask_for_accommodation": True,
        },
    )


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_login_and_validate_session(client, admin_password):
    login = client.post("/api/v1/admin/login", json={"password": admin_password})
    assert login.status_code == 200
    body = login.json()
    assert len(body["token"]) == 64
    assert body["expires_at"] > utils.now_ms()

    valid = client.get("/api/v1/admin/session", headers=_auth(body["token"]))
    assert valid.json() == {"valid": True}
    unknown = client.get("/api/v1/admin/session", headers=_auth("nope"))
    assert unknown.json() == {"valid": False}
    missing = client.get("/api/v1/admin/session")
    assert missing.json() == {"valid": False}


def test_login_with_wrong_password(client):
    response = client.post("/api/v1/admin/login", json={"password": "wrong"})
    assert response.status_code == 401
    assert response.json() == {
        "error": "AuthenticationError",
        "message": "Invalid password",
    }
    assert "token" not in response.json()


def test_login_without_configured_password(client, monkeypatch):
    monkeypatch.delenv("WEDDINGRSVP_ADMIN_PASSWORD", raising=False)
    response = client.post("/api/v1/admin/login", json={"password": "anything"})
    assert response.status_code == 500
    assert response.json()["error"] == "ConfigurationError"


def test_invite_then_guest_submission_scenario(client, admin_password):
    token = _login(client, admin_password)
    created = _create_smiths(client, token)
    assert created.status_code == 201

    lookup = client.get("/api/v1/rsvps/smiths").json()["rsvp"]
    assert lookup["guests"] == [
        {"name": "Amy", "meal_choice": ""},
        {"name": "Bob", "meal_choice": ""},
    ]
    assert lookup["attending"] is None
    assert lookup["submitted"] is False
    assert lookup["party"]["kind"] == "group"

    submitted = client.post(
        "/api/v1/rsvps",
        json={
            "name": "smiths",
            "attending": True,
            "plus_one": False,
            "accommodation": True,
            "guests": [
                {"name": "Amy", "meal_choice": "fish"},
                {"name": "Bob", "meal_choice": "vegetarian"},
            ],
        },
    )
    assert submitted.status_code == 200
    assert submitted.json()["created"] is False
    assert submitted.json()["id"] == created.json()["id"]

    after = client.get("/api/v1/rsvps/smiths").json()["rsvp"]
    assert [g["meal_choice"] for g in after["guests"]] == ["fish", "vegetarian"]
    assert after["submitted"] is True
    assert after["is_predefined"] is True


def test_self_registration_scenario(client):
    response = client.post(
        "/api/v1/rsvps",
        json={
            "name": "jdoe",
            "attending": True,
            "plus_one": False,
            "meal_choice": "fish",
            "accommodation": False,
        },
    )
    assert response.status_code == 201
    rsvp = response.json()["rsvp"]
    assert rsvp["ask_for_plus_one"] is True
    assert rsvp["ask_for_kids"] is False
    assert rsvp["max_number_of_kids"] == 0
    assert rsvp["ask_for_accommodation"] is True
    assert rsvp["is_predefined"] is False
    assert rsvp["party"] == {
        "kind": "single",
        "meal_choice": "fish",
        "plus_one": False,
        "plus_one_name": "",
        "plus_one_meal_choice": "",
    }


def test_each_request_gets_its_own_session():
    first = api.get_db()
    second = api.get_db()
    try:
        assert next(first) is not next(second)
    finally:
        first.close()
        second.close()


def test_get_unknown_rsvp_returns_null(client):
    response = client.get("/api/v1/rsvps/nobody")
    assert response.status_code == 200
    assert response.json() == {"rsvp": None}


def test_submit_validation_error(client):
    response = client.post(
        "/api/v1/rsvps",
        json={
            "name": "jdoe",
            "attending": True,
            "plus_one": False,
            "accommodation": False,
        },
    )
    assert response.status_code == 400
    assert response.json() == {
        "error": "ValidationError",
        "message": "Meal preference is required",
    }
    session = database.SessionLocal()
    assert session.query(Invite).count() == 0
    session.close()


def test_submit_requires_attending_key(client):
    response = client.post(
        "/api/v1/rsvps",
        json={"name": "jdoe", "plus_one": False, "accommodation": False},
    )
    assert response.status_code == 422


def test_admin_routes_require_token(client):
    assert client.get("/api/v1/admin/rsvps").status_code == 401
    assert client.get("/api/v1/admin/summary").status_code == 401
    denied = _create_smiths(client, "not-a-token")
    assert denied.status_code == 401
    assert denied.headers["www-authenticate"] == "Bearer"
    assert client.delete("/api/v1/admin/invites/smiths").status_code == 401
    session = database.SessionLocal()
    assert session.query(Invite).count() == 0
    session.close()


def test_get_all_with_expired_token_returns_no_data(client, admin_password, monkeypatch):
    token = _login(client, admin_password)
    _create_smiths(client, token)
    later = utils.now_ms() + 25 * 60 * 60 * 1000
    monkeypatch.setattr(utils, "now_ms", lambda: later)

    response = client.get("/api/v1/admin/rsvps", headers=_auth(token))
    assert response.status_code == 401
    assert response.json()["error"] == "AuthenticationError"
    assert "rsvps" not in response.json()


def test_admin_lists_rsvps_with_summary(client, admin_password):
    token = _login(client, admin_password)
    _create_smiths(client, token)
    client.post(
        "/api/v1/rsvps",
        json={
            "name": "jdoe",
            "attending": True,
            "plus_one": True,
            "plus_one_name": "Pat",
            "plus_one_meal_choice": "beef",
            "meal_choice": "fish",
            "accommodation": True,
        },
    )
    response = client.get("/api/v1/admin/rsvps", headers=_auth(token))
    assert response.status_code == 200
    body = response.json()
    assert [r["name"] for r in body["rsvps"]] == ["smiths", "jdoe"]
    assert body["summary"]["attending"] == 1
    assert body["summary"]["awaiting"] == 1
    assert body["summary"]["total_guests"] == 2
    assert body["summary"]["meal_counts"] == {"beef": 1, "fish": 1}

    summary = client.get("/api/v1/admin/summary", headers=_auth(token))
    assert summary.json() == body["summary"]


def test_duplicate_invite_conflicts(client, admin_password):
    token = _login(client, admin_password)
    assert _create_smiths(client, token).status_code == 201
    duplicate = _create_smiths(client, token)
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "ConflictError"
    listing = client.get("/api/v1/admin/rsvps", headers=_auth(token)).json()
    assert len(listing["rsvps"]) == 1


def test_create_invite_without_guests(client, admin_password):
    token = _login(client, admin_password)
    response = client.post(
        "/api/v1/admin/invites",
        headers=_auth(token),
        json={
            "name": "empty",
            "guests": [],
            "ask_for_plus_one": False,
            "ask_for_kids": False,
            "ask_for_accommodation": False,
        },
    )
    assert response.status_code == 400
    assert response.json()["message"] == "At least one guest is required"
    assert client.get("/api/v1/rsvps/empty").json() == {"rsvp": None}


def test_update_invite_toggles(client, admin_password):
    token = _login(client, admin_password)
    _create_smiths(client, token)
    response = client.patch(
        "/api/v1/admin/invites/smiths",
        headers=_auth(token),
        json={
            "ask_for_plus_one": True,
            "ask_for_kids": True,
            "max_number_of_kids": 3,
            "ask_for_accommodation": False,
        },
    )
    assert response.status_code == 200
    rsvp = response.json()["rsvp"]
    assert rsvp["ask_for_kids"] is True
    assert rsvp["max_number_of_kids"] == 3
    assert rsvp["ask_for_accommodation"] is False
    assert rsvp["guests"][0]["name"] == "Amy"

    missing = client.patch(
        "/api/v1/admin/invites/ghosts",
        headers=_auth(token),
        json={
            "ask_for_plus_one": True,
            "ask_for_kids": False,
            "max_number_of_kids": 0,
            "ask_for_accommodation": False,
        },
    )
    assert missing.status_code == 404


def test_delete_invite(client, admin_password):
    token = _login(client, admin_password)
    _create_smiths(client, token)
    response = client.delete("/api/v1/admin/invites/smiths", headers=_auth(token))
    assert response.status_code == 204
    assert client.get("/api/v1/rsvps/smiths").json() == {"rsvp": None}
    again = client.delete("/api/v1/admin/invites/smiths", headers=_auth(token))
    assert again.status_code == 404
