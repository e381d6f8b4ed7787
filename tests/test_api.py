"""HTTP surface: /users (result envelope) and /auth (federated flow)."""

import pytest

from socialride.core.config import Settings, get_settings
from socialride.main import app

API = "/api/v1"


def register(client, username="kaba", password="correct-horse", **fields):
    body = {"username": username, "password": password, "first_name": "Kaba", **fields}
    return client.post(f"{API}/users/register", json=body)


def login(client, username="kaba", password="correct-horse"):
    return client.post(
        f"{API}/users/authenticate",
        json={"username": username, "password": password},
    )


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def rider_token(client) -> str:
    register(client)
    return login(client).json()["data"]["token"]


@pytest.fixture
def admin_token(client) -> str:
    register(client, username="kabamaru")
    return login(client, username="kabamaru").json()["data"]["token"]


# -------- Registration / availability --------


def test_register_returns_envelope(client):
    r = register(client, email="kaba@example.com")

    assert r.status_code == 200
    body = r.json()
    assert body["error"] == {"error_code": 0, "message": ""}
    assert body["data"]["first_name"] == "Kaba"
    assert body["data"]["email"] == "kaba@example.com"
    assert "password" not in body["data"]


def test_availability(client):
    r = client.get(f"{API}/users/availability", params={"username": "kaba"})
    assert r.status_code == 200
    assert r.json()["error"]["error_code"] == 0

    register(client)

    r = client.get(f"{API}/users/availability", params={"username": "Kaba"})
    assert r.status_code == 409
    assert r.json()["error"]["error_code"] == 10


def test_register_duplicate_username(client):
    assert register(client).status_code == 200

    r = register(client, password="another-pass")

    assert r.status_code == 409
    assert r.json() == {
        "data": {},
        "error": {"error_code": 10, "message": "Username 'kaba' already exists."},
    }


def test_register_short_password_is_rejected(client):
    r = register(client, password="short")

    assert r.status_code == 422
    assert r.json()["data"] == {}
    assert r.json()["error"]["error_code"] == 13
    assert "password" in r.json()["error"]["message"]


# -------- Legacy login --------


def test_authenticate_success(client):
    user_id = register(client).json()["data"]["id"]

    r = login(client)

    assert r.status_code == 200
    data = r.json()["data"]
    assert data["id"] == user_id
    assert data["username"] == "kaba"
    assert data["token"]


def test_authenticate_failures_are_uniform(client):
    register(client)

    wrong_password = login(client, password="wrong-horse")
    unknown_user = login(client, username="nobody")

    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json()
    assert wrong_password.json()["error"] == {
        "error_code": 11,
        "message": "Username or password is incorrect",
    }


# -------- Protected routes --------


def test_me_requires_token(client):
    r = client.get(f"{API}/users/me")

    assert r.status_code == 401
    assert r.headers["www-authenticate"] == "Bearer"
    assert r.json()["error"]["error_code"] == 11


def test_me_with_token(client, rider_token):
    r = client.get(f"{API}/users/me", headers=bearer(rider_token))

    assert r.status_code == 200
    assert r.json()["data"]["first_name"] == "Kaba"


def test_me_with_garbage_token(client):
    r = client.get(f"{API}/users/me", headers=bearer("garbage"))

    assert r.status_code == 401
    assert r.json()["error"]["message"] == "Invalid or expired token"


def test_list_users_is_admin_only(client, rider_token, admin_token):
    denied = client.get(f"{API}/users", headers=bearer(rider_token))
    allowed = client.get(f"{API}/users", headers=bearer(admin_token))

    assert denied.status_code == 403
    assert allowed.status_code == 200
    assert len(allowed.json()["data"]) == 2


def test_vehicle_shows_on_user_detail(client, rider_token):
    me = client.get(f"{API}/users/me", headers=bearer(rider_token)).json()["data"]

    r = client.post(
        f"{API}/users/me/vehicles",
        json={"make": "Toyota", "model": "Yaris", "plate": " ikx-1234 ", "seats": 4},
        headers=bearer(rider_token),
    )
    assert r.status_code == 200
    assert r.json()["data"]["plate"] == "IKX-1234"

    detail = client.get(f"{API}/users/{me['id']}", headers=bearer(rider_token)).json()["data"]
    assert [v["model"] for v in detail["vehicles"]] == ["Yaris"]


def test_admin_replace_user(client, rider_token, admin_token):
    me = client.get(f"{API}/users/me", headers=bearer(rider_token)).json()["data"]
    body = {
        "first_name": "Kostas",
        "last_name": "",
        "driver_rate": 4.8,
        "is_driver": True,
        "password": "reset-by-admin",
    }

    assert (
        client.put(f"{API}/users/{me['id']}", json=body, headers=bearer(rider_token)).status_code
        == 403
    )
    r = client.put(f"{API}/users/{me['id']}", json=body, headers=bearer(admin_token))

    assert r.status_code == 200
    data = r.json()["data"]
    assert data["first_name"] == "Kostas"
    assert data["last_name"] == ""
    assert data["is_driver"] is True
    assert login(client, password="reset-by-admin").status_code == 200


def test_admin_delete_user(client, rider_token, admin_token):
    me = client.get(f"{API}/users/me", headers=bearer(rider_token)).json()["data"]

    r = client.delete(f"{API}/users/{me['id']}", headers=bearer(admin_token))
    assert r.status_code == 200
    assert r.json()["data"] == {"message": "User deleted successfully"}

    missing = client.get(f"{API}/users/{me['id']}", headers=bearer(admin_token))
    assert missing.status_code == 404
    assert missing.json()["error"]["error_code"] == 15

    again = client.delete(f"{API}/users/{me['id']}", headers=bearer(admin_token))
    assert again.status_code == 404
    assert again.json()["error"]["error_code"] == 17

    # the deleted user's credential is gone too
    assert login(client).status_code == 401


# -------- Federated flow --------


def federated_login(client, **identity):
    return client.post(f"{API}/auth/federated", json={"id": "google-123", **identity})


def test_federated_login_and_refresh(client):
    r = federated_login(client, first_name="Ada", email="a@x.com")
    assert r.status_code == 200
    pair = r.json()
    assert pair["token_type"] == "bearer"
    assert pair["expires_in"] == 3600

    me = client.get(f"{API}/users/me", headers=bearer(pair["access_token"]))
    assert me.json()["data"]["email"] == "a@x.com"

    refreshed = client.post(f"{API}/auth/refresh", headers=bearer(pair["refresh_token"]))
    assert refreshed.status_code == 200
    new_access = refreshed.json()["access_token"]
    assert client.get(f"{API}/users/me", headers=bearer(new_access)).status_code == 200


def test_federated_login_merges_fields(client):
    federated_login(client, first_name="Ada", email="a@x.com")
    pair = federated_login(client, email="", avatar="https://cdn.example.com/ada.png").json()

    data = client.get(f"{API}/users/me", headers=bearer(pair["access_token"])).json()["data"]
    assert data["first_name"] == "Ada"
    assert data["email"] == "a@x.com"
    assert data["avatar"] == "https://cdn.example.com/ada.png"


def test_refresh_token_cannot_be_used_as_access_token(client):
    pair = federated_login(client).json()

    r = client.get(f"{API}/users/me", headers=bearer(pair["refresh_token"]))

    assert r.status_code == 403


def test_access_token_cannot_be_refreshed(client):
    pair = federated_login(client).json()

    r = client.post(f"{API}/auth/refresh", headers=bearer(pair["access_token"]))

    assert r.status_code == 403
    assert r.json()["error"]["error_code"] == 11


def test_refresh_without_token(client):
    assert client.post(f"{API}/auth/refresh").status_code == 401


def test_federated_admin_subject_gets_admin_access(client):
    pair = federated_login(client, id="google-admin-1").json()

    assert client.get(f"{API}/users", headers=bearer(pair["access_token"])).status_code == 200
    assert client.get(f"{API}/users", headers=bearer(pair["refresh_token"])).status_code == 403


def test_federation_key_is_enforced_when_configured(client):
    app.dependency_overrides[get_settings] = lambda: Settings(FEDERATION_API_KEY="gateway-key")

    missing = federated_login(client)
    wrong = client.post(
        f"{API}/auth/federated",
        json={"id": "google-123"},
        headers={"X-Federation-Key": "nope"},
    )
    ok = client.post(
        f"{API}/auth/federated",
        json={"id": "google-123"},
        headers={"X-Federation-Key": "gateway-key"},
    )

    assert missing.status_code == 401
    assert wrong.status_code == 401
    assert ok.status_code == 200


def test_availability_of_blank_username_is_rejected(client):
    r = client.get(f"{API}/users/availability", params={"username": "   "})

    assert r.status_code == 422
    assert r.json()["error"] == {"error_code": 10, "message": "Username cannot be empty"}


def test_register_username_too_short_after_trimming(client):
    r = register(client, username="ab ")

    assert r.status_code == 422
    assert r.json()["error"]["error_code"] == 13
    assert login(client, username="ab").status_code == 401


def test_validation_errors_outside_register_use_generic_code(client):
    r = client.post(f"{API}/users/authenticate", json={"username": "kaba"})

    assert r.status_code == 422
    assert r.json()["error"]["error_code"] == 12


def test_federated_login_with_empty_birth_date_keeps_stored_date(client):
    first = federated_login(client, birth_date="1990-01-02")
    assert first.status_code == 200

    r = federated_login(client, birth_date="")

    assert r.status_code == 200
    me = client.get(f"{API}/users/me", headers=bearer(r.json()["access_token"]))
    assert me.json()["data"]["birth_date"] == "1990-01-02"
