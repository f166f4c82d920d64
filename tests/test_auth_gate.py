"""Authentication gate tests — token transport and rejection paths.

Learn: The gate reads the x-access-token header first and falls back to
a `token` field in a JSON body. Missing token → 403, anything that fails
verification → 401.
"""

import time

import pytest
from sqlalchemy import select, update

from docman.auth.dependencies import CurrentIdentity, scrub_claims
from docman.auth.tokens import issue_token
from docman.db.models import Role, User
from docman.errors import AuthenticationFailedError

DAY = 86400


def _snapshot(user_id, username="jsnow", **extra) -> dict:
    return {"id": str(user_id), "username": username, **extra}


@pytest.mark.asyncio
async def test_no_token(client, seed):
    r = await client.get(f"/api/users/{seed['users']['jsnow']}")
    assert r.status_code == 403
    assert r.json() == {"error": "No token provided."}


@pytest.mark.asyncio
async def test_garbage_token(client, seed):
    r = await client.get(
        f"/api/users/{seed['users']['jsnow']}",
        headers={"x-access-token": "this.is.garbage"},
    )
    assert r.status_code == 401
    assert r.json() == {"error": "Failed to authenticate token."}


@pytest.mark.asyncio
async def test_token_signed_with_other_secret(client, seed):
    user_id = seed["users"]["jsnow"]
    token = issue_token(_snapshot(user_id), "not-the-server-secret", DAY)
    r = await client.get(f"/api/users/{user_id}", headers={"x-access-token": token})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_expired_token(client, seed, settings):
    user_id = seed["users"]["jsnow"]
    token = issue_token(
        _snapshot(user_id), settings.jwt_secret, DAY, now=time.time() - DAY - 5
    )
    r = await client.get(f"/api/users/{user_id}", headers={"x-access-token": token})
    assert r.status_code == 401
    assert r.json()["error"] == "Failed to authenticate token."


@pytest.mark.asyncio
async def test_token_in_body(client, login, seed):
    token = await login("jsnow")
    r = await client.put(
        f"/api/users/{seed['users']['jsnow']}",
        json={"token": token, "firstname": "Aegon"},
    )
    assert r.status_code == 200
    assert r.json()["name"]["first"] == "Aegon"


@pytest.mark.asyncio
async def test_logout_with_token_in_body(client, login):
    token = await login("nstark")
    r = await client.post("/api/users/logout", json={"token": token})
    assert r.status_code == 200
    assert r.json()["message"] == "Successfully logged out"


@pytest.mark.asyncio
async def test_header_checked_before_body(client, login, seed):
    token = await login("jsnow")
    r = await client.put(
        f"/api/users/{seed['users']['jsnow']}",
        json={"token": "garbage", "lastname": "Targaryen"},
        headers={"x-access-token": token},
    )
    assert r.status_code == 200
    assert r.json()["name"]["last"] == "Targaryen"


@pytest.mark.asyncio
async def test_non_json_body_without_header(client, seed):
    r = await client.post(
        "/api/users/logout",
        content=b"token=abc",
        headers={"content-type": "application/x-www-form-urlencoded"},
    )
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_secret_fields_in_claims_are_ignored(client, seed, settings):
    user_id = seed["users"]["jsnow"]
    token = issue_token(
        _snapshot(user_id, password="youKnowNothing"), settings.jwt_secret, DAY
    )
    r = await client.get(f"/api/users/{user_id}", headers={"x-access-token": token})
    assert r.status_code == 200
    assert "password" not in r.json()


@pytest.mark.asyncio
async def test_policy_uses_current_role_not_token_snapshot(client, login, database, seed):
    """Demoting the admin takes effect immediately, even with an old token."""
    token = await login("cersei")
    assert (await client.get("/api/users", headers={"x-access-token": token})).status_code == 200

    async with database.session_factory() as session:
        viewer_id = (
            await session.execute(select(Role.id).where(Role.title == "viewer"))
        ).scalar_one()
        await session.execute(
            update(User).where(User.username == "cersei").values(role_id=viewer_id)
        )
        await session.commit()

    r = await client.get("/api/users", headers={"x-access-token": token})
    assert r.status_code == 403


def test_scrub_claims_drops_credentials():
    claims = {"id": "x", "username": "u", "password": "p", "password_hash": "$2b$..."}
    assert scrub_claims(claims) == {"id": "x", "username": "u"}


def test_identity_from_claims_requires_valid_id():
    with pytest.raises(AuthenticationFailedError):
        CurrentIdentity.from_claims({"id": "not-a-uuid"})
    with pytest.raises(AuthenticationFailedError):
        CurrentIdentity.from_claims({"username": "u"})
