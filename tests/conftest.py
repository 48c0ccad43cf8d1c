"""
Shared fixtures.

The environment is configured before any ``app`` import so the engine binds
to a throwaway sqlite file and rate limiting stays out of the way.
"""
import itertools
import os
import tempfile
from dataclasses import dataclass

_DB_DIR = tempfile.mkdtemp(prefix="studybuddy-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["RATE_LIMIT_ENABLED"] = "0"

import httpx  # noqa: E402
import pytest  # noqa: E402

from app.core.database.engine import AsyncSessionLocal, reset_db  # noqa: E402
from app.features.channels.models import ChannelMessage, ChannelUser  # noqa: E402
from app.features.permissions.definitions import Role  # noqa: E402
from app.main import app  # noqa: E402


_counter = itertools.count(1)


@dataclass
class TestUser:
    __test__ = False

    id: str
    token: str

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture
async def database():
    await reset_db()
    yield


@pytest.fixture
async def client(database):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_user(client):
    async def _make_user(name: str | None = None) -> TestUser:
        n = next(_counter)
        res = await client.post("/users/", json={
            "email": f"user{n}@studybuddy.dev",
            "name": name or f"User {n}",
        })
        assert res.status_code == 201, res.text
        body = res.json()
        return TestUser(id=body["user"]["id"], token=body["access_token"])

    return _make_user


@pytest.fixture
def make_channel(client):
    async def _make_channel(creator: TestUser, name: str = "Linear algebra") -> str:
        res = await client.post("/channels", json={"name": name}, headers=creator.headers)
        assert res.status_code == 201, res.text
        return res.json()["data"]["id"]

    return _make_channel


@pytest.fixture
def add_member(database):
    """Insert a membership directly, for roles the API never hands out."""
    async def _add_member(channel_id: str, user: TestUser, role: Role) -> None:
        async with AsyncSessionLocal() as db:
            db.add(ChannelUser(channel_id=channel_id, user_id=user.id, role=role))
            await db.commit()

    return _add_member


@pytest.fixture
def add_message(database):
    """Insert a message directly, bypassing the post rule."""
    async def _add_message(channel_id: str, sender: TestUser, content: str = "hello") -> str:
        async with AsyncSessionLocal() as db:
            message = ChannelMessage(channel_id=channel_id, sender_id=sender.id, content=content)
            db.add(message)
            await db.commit()
            return message.id

    return _add_message
