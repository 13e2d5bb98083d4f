from __future__ import annotations


def test_me_provisions_a_guest_once(client, fake_backend):
    first = client.get("/api/users/me/")
    second = client.get("/api/users/me/")

    assert first.status_code == 200
    assert first.json()["full_name"] == "Guest"
    assert first.json()["balance"] == "0.00"
    assert second.json() == first.json()
    assert len(fake_backend.profiles) == 1


def test_me_never_fails_when_the_backend_is_down(client, fake_backend):
    fake_backend.down = True

    resp = client.get("/api/users/me/")

    assert resp.status_code == 200
    assert resp.json()["user_id"] == "GUEST"


def test_register_login_logout(client, fake_backend):
    resp = client.post(
        "/api/users/register/",
        {"email": "karim@example.com", "password": "secret123", "full_name": "Karim"},
        format="json",
    )
    assert resp.status_code == 201
    assert resp.json()["full_name"] == "Karim"

    assert client.post("/api/users/logout/").status_code == 204

    resp = client.post("/api/users/login/", {"email": "karim@example.com", "password": "secret123"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["email"] == "karim@example.com"

    resp = client.post("/api/users/refresh/")
    assert resp.status_code == 200
    assert resp.json()["full_name"] == "Karim"


def test_register_validation_and_duplicates(client, fake_backend):
    assert client.post("/api/users/register/", {"email": "bad", "password": "x"}, format="json").status_code == 400

    body = {"email": "karim@example.com", "password": "secret123"}
    client.post("/api/users/register/", body, format="json")
    resp = client.post("/api/users/register/", body, format="json")

    assert resp.status_code == 400
    assert resp.json() == {"error": "User already registered"}


def test_login_with_bad_credentials_is_401(client, fake_backend):
    resp = client.post("/api/users/login/", {"email": "who@example.com", "password": "nope"}, format="json")

    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid login credentials"}


def test_refresh_without_a_session(client, fake_backend):
    resp = client.post("/api/users/refresh/")

    assert resp.status_code == 400
    assert resp.json() == {"error": "No session to refresh"}


def test_profile_outage_is_not_remembered(client, fake_backend):
    client.get("/api/users/me/")
    fake_backend.profiles_down = True
    assert client.get("/api/users/me/").json()["user_id"] == "GUEST"

    fake_backend.profiles_down = False
    resp = client.get("/api/users/me/")

    assert resp.json()["user_id"] == fake_backend.profiles[0]["user_id"]


def test_me_shows_a_balance_credited_by_the_operator(client, fake_backend):
    client.get("/api/users/me/")
    fake_backend.profiles[0]["balance"] = 300

    assert client.get("/api/users/me/").json()["balance"] == "300.00"
