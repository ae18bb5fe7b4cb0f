from datetime import timedelta

from scrs.core.security import create_access_token


def test_register_creates_student(client):
    response = client.post("/api/v1/auth/register", json={
        "username": "freshman",
        "email": "freshman@uni.example.com",
        "password": "fresh123",
        "full_name": "Fresh Man",
    })
    assert response.status_code == 201
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["role"] == "STUDENT"
    assert body["user"]["full_name"] == "Fresh Man"

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["username"] == "freshman"


def test_register_duplicates(client):
    response = client.post("/api/v1/auth/register", json={
        "username": "student", "email": "unique@uni.example.com", "password": "secret1",
    })
    assert response.status_code == 409

    response = client.post("/api/v1/auth/register", json={
        "username": "unique", "email": "student@uni.example.com", "password": "secret1",
    })
    assert response.status_code == 409


def test_register_validation(client):
    response = client.post("/api/v1/auth/register", json={
        "username": "ab", "email": "not-an-email", "password": "1",
    })
    assert response.status_code == 422


def test_login_success_by_username_and_email(client):
    for identifier in ("student", "student@uni.example.com"):
        response = client.post("/api/v1/auth/login", json={"identifier": identifier, "password": "student123"})
        assert response.status_code == 200
        assert response.json()["user"]["username"] == "student"


def test_login_legacy_field(client):
    response = client.post("/api/v1/auth/login", json={"usernameOrEmail": "staff", "password": "staff123"})
    assert response.status_code == 200


def test_login_bad_password(client):
    response = client.post("/api/v1/auth/login", json={"identifier": "student", "password": "nope"})
    assert response.status_code == 401


def test_login_inactive_user(client, admin_token):
    client.post("/api/v1/auth/register", json={
        "username": "dropout", "email": "dropout@uni.example.com", "password": "dropout1",
    })
    users = client.get(
        "/api/v1/admin/users?search=dropout",
        headers={"Authorization": f"Bearer {admin_token}"}
    ).json()["content"]
    user_id = users[0]["id"]
    response = client.put(
        f"/api/v1/users/{user_id}/deactivate",
        headers={"Authorization": f"Bearer {admin_token}"}
    )
    assert response.status_code == 200

    response = client.post("/api/v1/auth/login", json={"identifier": "dropout", "password": "dropout1"})
    assert response.status_code == 403


def test_me_requires_token(client):
    assert client.get("/api/v1/auth/me").status_code == 401
    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_expired_token_rejected(client):
    token = create_access_token({"sub": "1"}, expires_delta=timedelta(minutes=-1))
    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_validate_token(client, student_token):
    response = client.get("/api/v1/auth/validate", headers={"Authorization": f"Bearer {student_token}"})
    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is True
    assert body["username"] == "student"
    assert body["role"] == "STUDENT"

    response = client.get("/api/v1/auth/validate", headers={"Authorization": "Bearer broken"})
    assert response.status_code == 401


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert client.get("/").status_code == 200
