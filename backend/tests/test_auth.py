from __future__ import annotations
import httpx
from httpx import AsyncClient
from sqlalchemy import select
import pytest
from gridrr_admin.db import SessionLocal
from gridrr_admin.main import app
from gridrr_admin.models.user import User
from gridrr_admin.security import make_verify_token
from conftest import STAFF_EMAIL, STAFF_PASSWORD


@pytest.mark.asyncio
async def test_signup_requires_email_verification(client):
    r = await client.post("/signup", json={"email": "New.Person@Example.com", "password": "supersecret", "name": "New"})
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["redirect_to"] == "/verify-email"
    assert "verify" in body["message"].lower()
    assert "gridrr-session" not in client.cookies

    # unconfirmed accounts cannot sign in yet
    r = await client.post("/signin", json={"email": "new.person@example.com", "password": "supersecret"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Email not confirmed"

    async with SessionLocal() as session:
        user = await session.scalar(select(User).where(User.email == "new.person@example.com"))
    assert user is not None and user.name == "New"

    r = await client.get("/auth/callback", params={"token": make_verify_token(str(user.id))})
    assert r.status_code == 303
    assert r.headers["location"] == "/dashboard"
    me = await client.get("/auth/me")
    assert me.status_code == 200
    assert me.json()["email"] == "new.person@example.com"


@pytest.mark.asyncio
async def test_duplicate_signup(client, staff_user):
    r = await client.post("/signup", json={"email": STAFF_EMAIL, "password": "another-pass"})
    assert r.status_code == 409
    assert "registered" in r.json()["detail"].lower()


@pytest.mark.asyncio
async def test_bad_verification_token(client):
    r = await client.get("/auth/callback", params={"token": "nope"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_signin_wrong_password(client, staff_user):
    r = await client.post("/signin", json={"email": STAFF_EMAIL, "password": "wrong-password"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid login credentials"


@pytest.mark.asyncio
async def test_signin_normalises_email_and_honours_redirect(client, staff_user):
    r = await client.post(
        "/signin",
        json={"email": f"  {STAFF_EMAIL.upper()} ", "password": STAFF_PASSWORD, "redirectedFrom": "/submissions"},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["redirect_to"] == "/submissions"
    assert body["user"]["email"] == STAFF_EMAIL


@pytest.mark.asyncio
async def test_signin_ignores_offsite_redirect(client, staff_user):
    r = await client.post(
        "/signin", json={"email": STAFF_EMAIL, "password": STAFF_PASSWORD, "redirectedFrom": "//evil.example"}
    )
    assert r.status_code == 200
    assert r.json()["redirect_to"] == "/dashboard"


@pytest.mark.asyncio
async def test_signout_ends_session(auth_client):
    # keep the cookie around to prove the server-side session is gone too
    token = auth_client.cookies.get("gridrr-session")
    r = await auth_client.post("/signout")
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert r.headers["Refresh"] == "0.1; url=/signin"

    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as other:
        other.cookies.set("gridrr-session", token)
        r = await other.get("/dashboard")
        assert r.status_code == 307
        assert (await other.get("/auth/me")).status_code == 401
