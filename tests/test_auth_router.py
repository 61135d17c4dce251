API = "/api/v1"


def _register(client, email="reader@example.com", username="reader", password="password123"):
    return client.post(
        f"{API}/auth/register",
        json={"email": email, "username": username, "password": password},
    )


def test_register_and_login(client):
    res = _register(client)
    assert res.status_code == 201
    user = res.json()["data"]["user"]
    assert user["email"] == "reader@example.com"
    assert user["balance"] == 0
    assert "password_hash" not in user

    res = client.post(
        f"{API}/auth/login", json={"email": "Reader@Example.com", "password": "password123"}
    )
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    token = body["data"]["access_token"]

    me = client.get(f"{API}/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["data"]["user"]["username"] == "reader"
    assert me.json()["data"]["user"]["last_login_at"] is not None


def test_register_duplicate_email(client):
    _register(client)
    res = _register(client, username="someone-else")
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "CONFLICT_001"


def test_register_short_password(client):
    res = _register(client, password="short")
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_001"


def test_login_wrong_password(client):
    _register(client)
    res = client.post(f"{API}/auth/login", json={"email": "reader@example.com", "password": "nope"})
    assert res.status_code == 401
    assert res.json()["success"] is False


def test_blocked_user_cannot_login(client, make_user):
    make_user(username="banned", is_blocked=True)
    res = client.post(
        f"{API}/auth/login", json={"email": "banned@example.com", "password": "password123"}
    )
    assert res.status_code == 403


def test_protected_route_requires_token(client):
    res = client.get(f"{API}/users/me")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "AUTH_001"


def test_invalid_token_rejected(client):
    res = client.get(f"{API}/users/me", headers={"Authorization": "Bearer not-a-token"})
    assert res.status_code == 401


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"
