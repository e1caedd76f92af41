"""
Tests for session handling and the auth endpoints.

Run with: python -m pytest tests/test_auth.py
"""

from fastapi.testclient import TestClient

from main import app
from server.auth import (
    COOKIE_NAME,
    create_session,
    delete_session,
    get_current_user_email,
    get_session_from_cookie,
    user_sessions,
)

client = TestClient(app)


def test_create_and_read_session():
    token = create_session({"email": "rider@example.com", "name": "Rider"})

    session = get_session_from_cookie(token)

    assert session is not None
    assert session["user"]["email"] == "rider@example.com"
    assert get_current_user_email(token) == "rider@example.com"


def test_invalid_or_missing_cookie():
    assert get_session_from_cookie(None) is None
    assert get_session_from_cookie("tampered.cookie.value") is None
    assert get_current_user_email(None) is None
    assert get_current_user_email("tampered.cookie.value") is None


def test_delete_session():
    token = create_session({"email": "gone@example.com"})
    count = len(user_sessions)

    delete_session(token)

    assert len(user_sessions) == count - 1
    assert get_session_from_cookie(token) is None
    # Deleting twice or deleting garbage is harmless
    delete_session(token)
    delete_session("garbage")
    delete_session(None)


def test_me_anonymous():
    response = client.get("/auth/me")
    assert response.status_code == 200
    assert response.json() == {"authenticated": False, "user": None}


def test_me_signed_in():
    client.cookies.set(COOKIE_NAME, create_session({"email": "me@example.com"}))
    try:
        response = client.get("/auth/me")
    finally:
        client.cookies.clear()

    assert response.json() == {"authenticated": True, "user": {"email": "me@example.com"}}


def test_logout_clears_session():
    token = create_session({"email": "bye@example.com"})
    client.cookies.set(COOKIE_NAME, token)
    try:
        response = client.post("/auth/logout")
    finally:
        client.cookies.clear()

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert get_session_from_cookie(token) is None


def test_login_requires_configuration():
    response = client.get("/auth/login", follow_redirects=False)
    assert response.status_code == 500
    assert "not configured" in response.json()["detail"]
