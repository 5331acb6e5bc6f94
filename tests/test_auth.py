from fastapi.testclient import TestClient

from helpers import login_headers, signup


def test_signup_student(client: TestClient):
    response = signup(client, "student1@example.com", "STUDENT", program="CS")
    assert response.status_code == 201
    assert response.json() == {"message": "User created successfully"}


def test_signup_teacher_creates_profile(client: TestClient):
    signup(client, "teacher1@example.com", "TEACHER", bio="Loves graphs")
    headers = login_headers(client, "teacher1@example.com")

    response = client.get("/api/auth/me", headers=headers)
    assert response.status_code == 200
    data = response.json()
    assert data["role"] == "TEACHER"
    assert data["teacherProfile"]["bio"] == "Loves graphs"
    assert data["teacherProfile"]["subscriptionPlan"] == "FREE"
    assert data["studentProfile"] is None
    assert "passwordHash" not in data


def test_signup_duplicate_email(client: TestClient):
    signup(client, "dup@example.com")
    response = signup(client, "DUP@example.com")
    assert response.status_code == 409
    assert response.json() == {"error": "User already exists"}


def test_signup_missing_fields(client: TestClient):
    response = client.post("/api/auth/signup", json={"email": "x@example.com"})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}


def test_signup_unknown_role(client: TestClient):
    response = signup(client, "admin@example.com", "ADMIN")
    assert response.status_code == 400
    assert response.json()["error"] == "Role must be TEACHER or STUDENT"


def test_login_sets_cookie(client: TestClient):
    signup(client, "cookie@example.com")
    response = client.post(
        "/api/auth/login", data={"email": "cookie@example.com", "password": "password123"}
    )
    assert response.status_code == 200
    assert response.json()["tokenType"] == "bearer"
    assert "curricula_session" in response.cookies

    # Cookie 单独即可认证
    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["email"] == "cookie@example.com"


def test_login_invalid_password(client: TestClient):
    signup(client, "user2@example.com")
    response = client.post(
        "/api/auth/login", data={"email": "user2@example.com", "password": "wrong"}
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email or password"}


def test_logout_clears_cookie(client: TestClient):
    signup(client, "bye@example.com")
    client.post("/api/auth/login", data={"email": "bye@example.com", "password": "password123"})
    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


def test_me_requires_auth(client: TestClient):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_tampered_token_rejected(client: TestClient):
    headers = {"Authorization": "Bearer abc.def"}
    assert client.get("/api/auth/me", headers=headers).status_code == 401
