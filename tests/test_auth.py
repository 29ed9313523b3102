from datetime import timedelta

import pytest

import auth
from errors import Unauthorized


def test_register_hides_password_and_returns_token(client, db):
    resp = client.post("/api/auth/register", json={
        "name": "Ram Thapa",
        "email": "Ram@Example.com",
        "password": "secret123",
        "location": "Pokhara",
    })
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["token"]
    assert body["user"]["email"] == "ram@example.com"
    assert body["user"]["location"] == "Pokhara"
    assert "password" not in body["user"]

    stored = db["user"].find_one({"email": "ram@example.com"})
    assert stored["password"] != "secret123"


def test_register_duplicate_email_conflicts(client, user_token):
    resp = client.post("/api/auth/register", json={
        "name": "Sita Again",
        "email": "sita@example.com",
        "password": "another1",
    })
    assert resp.status_code == 409
    assert resp.json()["message"] == "User already exists with this email"


def test_register_validation_errors_use_envelope(client):
    resp = client.post("/api/auth/register", json={"name": "S", "email": "nope", "password": "123"})
    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert "password" in resp.json()["message"]


def test_login_and_me(client, user_token):
    resp = client.post("/api/auth/login", json={"email": "sita@example.com", "password": "secret123"})
    assert resp.status_code == 200
    token = resp.json()["token"]

    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.json()["user"]["name"] == "Sita Sharma"


def test_login_wrong_password(client, user_token):
    resp = client.post("/api/auth/login", json={"email": "sita@example.com", "password": "wrong"})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Invalid credentials"}


def test_update_profile(client, user_headers):
    resp = client.put("/api/auth/profile", json={
        "phone": "9811111111",
        "avatar": "https://cdn.example.com/a.png",
    }, headers=user_headers)
    user = resp.json()["user"]
    assert user["phone"] == "9811111111"
    assert user["avatar"] == "https://cdn.example.com/a.png"
    assert user["name"] == "Sita Sharma"


def test_update_profile_email_taken(client, user_headers):
    client.post("/api/auth/register", json={"name": "Hari", "email": "hari@example.com", "password": "secret123"})
    resp = client.put("/api/auth/profile", json={"email": "hari@example.com"}, headers=user_headers)
    assert resp.status_code == 409


def test_rejects_garbage_and_expired_tokens(client, user_token):
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401

    user_id = client.get("/api/auth/me", headers={"Authorization": f"Bearer {user_token}"}).json()["user"]["id"]
    expired = auth.create_access_token(user_id, auth.USER_ROLE, timedelta(minutes=-1))
    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {expired}"})
    assert resp.status_code == 401


def test_token_for_deleted_user(client, db, user_headers):
    db["user"].delete_many({})
    resp = client.get("/api/auth/me", headers=user_headers)
    assert resp.status_code == 401
    assert resp.json()["message"] == "User not found"


def test_decode_rejects_wrong_role():
    token = auth.create_access_token("652f0c2b9d1e8a0012345678", auth.ADMIN_ROLE)
    assert auth.decode_access_token(token, auth.ADMIN_ROLE) == "652f0c2b9d1e8a0012345678"
    with pytest.raises(Unauthorized):
        auth.decode_access_token(token, auth.USER_ROLE)
    with pytest.raises(Unauthorized):
        auth.decode_access_token(None, auth.USER_ROLE)


def test_admin_login_and_me(client, admin_headers):
    resp = client.get("/api/admin/me", headers=admin_headers)
    assert resp.json()["admin"]["username"] == "admin"

    resp = client.post("/api/admin/login", json={"username": "admin", "password": "nope"})
    assert resp.status_code == 401


def test_update_profile_rejects_short_name(client, user_headers):
    resp = client.put("/api/auth/profile", json={"name": "A"}, headers=user_headers)
    assert resp.status_code == 400

    resp = client.get("/api/auth/me", headers=user_headers)
    assert resp.json()["user"]["name"] == "Sita Sharma"
