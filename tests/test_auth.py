from fastapi import status
from tests.conf_tests import client, clear_db, test_user_data, test_db, test_user, auth_headers


def test_register(test_user_data):
    response = client.post("/auth/register", json=test_user_data)
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["email"] == test_user_data["email"]
    assert data["role"] == "Student"
    assert "password" not in data and "hashed_password" not in data


def test_register_duplicate_email(test_user_data):
    client.post("/auth/register", json=test_user_data)
    response = client.post("/auth/register", json=test_user_data)
    assert response.status_code == status.HTTP_409_CONFLICT


def test_register_malformed_email(test_user_data):
    for email in ["@@@", "no-at-sign", "user@"]:
        response = client.post("/auth/register", json={**test_user_data, "email": email})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_register_lowercases_email(test_user_data):
    response = client.post("/auth/register", json={**test_user_data, "email": "Jane.Doe@Example.com"})
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["email"] == "jane.doe@example.com"


def test_register_admin_is_refused(test_user_data):
    response = client.post("/auth/register", json={**test_user_data, "role": "Admin"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_login_after_register(test_user_data):
    client.post("/auth/register", json={**test_user_data, "role": "Lecturer"})
    response = client.post(
        "/auth/login",
        data={"username": test_user_data["email"], "password": test_user_data["password"]},
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["token_type"] == "bearer"


def test_login_wrong_password(test_user):
    response = client.post("/auth/login", data={"username": test_user.email, "password": "wrong"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_invalid_token():
    response = client.get("/bookings/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_valid_token(auth_headers):
    response = client.get("/bookings/me", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == []
