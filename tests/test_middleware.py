"""Tests for security middleware — headers, request IDs, error bodies."""

import pytest
from sqlalchemy import text


@pytest.mark.asyncio
async def test_security_headers_on_health(client):
    r = await client.get("/api/health")
    assert r.status_code == 200
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["X-XSS-Protection"] == "1; mode=block"
    assert r.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
    assert r.headers["Cache-Control"] == "no-store"


@pytest.mark.asyncio
async def test_security_headers_on_error_responses(client):
    r = await client.get("/api/users")
    assert r.status_code == 403
    assert r.headers["X-Frame-Options"] == "DENY"


@pytest.mark.asyncio
async def test_request_id_generated(client):
    """Each request gets a unique X-Request-ID header."""
    r1 = await client.get("/api/health")
    r2 = await client.get("/api/health")
    assert "X-Request-ID" in r1.headers
    assert "X-Request-ID" in r2.headers
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_propagated(client):
    """Incoming X-Request-ID is propagated through the response."""
    custom_id = "test-trace-12345"
    r = await client.get("/api/health", headers={"X-Request-ID": custom_id})
    assert r.headers["X-Request-ID"] == custom_id


@pytest.mark.asyncio
async def test_no_hsts_on_http(client):
    """HSTS header is NOT set on HTTP connections (only HTTPS)."""
    r = await client.get("/api/health")
    assert "Strict-Transport-Security" not in r.headers


@pytest.mark.asyncio
async def test_malformed_json_is_structured_400(client):
    r = await client.post(
        "/api/users",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )
    assert r.status_code == 400
    assert "error" in r.json()


@pytest.mark.asyncio
async def test_store_failure_is_generic_500(client, database):
    """A broken store gives a bare 500; the SQL error stays in the logs."""
    async with database.engine.begin() as conn:
        await conn.execute(text("DROP TABLE users"))

    r = await client.post(
        "/api/users/login", json={"username": "jsnow", "password": "youKnowNothing"}
    )
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error"}
    assert "users" not in r.text
    assert "SELECT" not in r.text.upper()
