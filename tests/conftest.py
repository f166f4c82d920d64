"""Test fixtures — a fresh in-memory database per test.

Learn: Each test gets its own engine on `sqlite+aiosqlite:///:memory:`.
StaticPool keeps a single connection alive, so every session (the seed
session, the per-request sessions the app opens, and verification
sessions in tests) sees the same in-memory database. When the test ends
the engine is disposed and the data is gone.

The app is built with create_app(settings, database), the same factory
production uses, so the real auth gate runs on every request.
"""

from datetime import timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from docman.auth.password import hash_password
from docman.config import Settings
from docman.db.engine import Database
from docman.db.models import Document, Role, User, utcnow
from docman.main import create_app

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
TEST_SECRET = "test-secret-not-for-production"

# username → (password, role title, first, last, email)
SEED_USERS = {
    "jsnow": ("youKnowNothing", "viewer", "John", "Snow", "jsnow@winterfell.org"),
    "nstark": ("winterIsComing", "staff", "Ned", "Stark", "nstark@winterfell.org"),
    "cersei": ("hearMeRoar", "admin", "Cersei", "Lannister", "cersei@kingslanding.org"),
}


@pytest.fixture()
def settings():
    return Settings(
        database_url=TEST_DB_URL,
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        create_tables=False,
    )


@pytest_asyncio.fixture()
async def database():
    db = Database(
        TEST_DB_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await db.create_all()
    try:
        yield db
    finally:
        await db.dispose()


@pytest_asyncio.fixture()
async def seed(database):
    """Roles viewer/staff/admin, three users, three documents for jsnow.

    Returns {"roles": {title: id}, "users": {username: id}, "documents": [ids]}.
    """
    base = utcnow() - timedelta(hours=1)
    async with database.session_factory() as session:
        roles = {
            "viewer": Role(title="viewer", access_level=0),
            "staff": Role(title="staff", access_level=1),
            "admin": Role(title="admin", access_level=2),
        }
        session.add_all(roles.values())
        await session.flush()

        users = {}
        for i, (username, (password, role, first, last, email)) in enumerate(
            SEED_USERS.items()
        ):
            users[username] = User(
                username=username,
                email=email,
                first_name=first,
                last_name=last,
                password_hash=hash_password(password, rounds=4),
                role_id=roles[role].id,
                created_at=base + timedelta(seconds=i),
            )
        session.add_all(users.values())
        await session.flush()

        owner = users["jsnow"]
        docs = [
            Document(
                owner_id=owner.id,
                role_id=owner.role_id,
                title=f"Doc{i}",
                content=f"{i}Doc",
                date_created=base + timedelta(days=i),
            )
            for i in range(1, 4)
        ]
        session.add_all(docs)
        await session.commit()

        return {
            "roles": {title: role.id for title, role in roles.items()},
            "users": {name: user.id for name, user in users.items()},
            "documents": [doc.id for doc in docs],
        }


@pytest_asyncio.fixture()
async def client(settings, database, seed):
    """HTTP client against the in-process app, with seeded data."""
    app = create_app(settings=settings, database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def login(client):
    """Log a seeded (or freshly created) user in and return the token."""

    async def _login(username: str, password: str | None = None) -> str:
        if password is None:
            password = SEED_USERS[username][0]
        r = await client.post(
            "/api/users/login",
            json={"username": username, "password": password},
        )
        assert r.status_code == 200, r.text
        return r.json()["token"]

    return _login
