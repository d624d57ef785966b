"""
Tests for the request-scoped session: these go through the real get_db
(no dependency override) against the application's own engine.
"""

import asyncio
import json

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from eventaro.main import app
from eventaro.db.base import Base
from eventaro.db.session import AsyncSessionLocal, engine
from eventaro.models.user import User


@pytest_asyncio.fixture
async def app_database():
    """Create the schema on the application engine; drop it afterwards."""
    app.dependency_overrides.clear()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


def _registration(email: str) -> dict:
    return {"fullName": "Session Tester", "email": email, "password": "securepassword123"}


async def _user_exists(email: str) -> bool:
    async with AsyncSessionLocal() as session:
        result = await session.execute(select(User.id).where(User.email == email))
        return result.scalar_one_or_none() is not None


async def _call_asgi(method: str, path: str, body: dict, timeline: list) -> None:
    """Drive the ASGI app directly, noting when the response goes out."""
    payload = json.dumps(body).encode()
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "query_string": b"",
        "root_path": "",
        "headers": [
            (b"host", b"test"),
            (b"content-type", b"application/json"),
            (b"content-length", str(len(payload)).encode()),
        ],
        "client": ("127.0.0.1", 50000),
        "server": ("test", 80),
    }
    request_sent = False
    response_complete = asyncio.Event()

    async def receive():
        nonlocal request_sent
        if not request_sent:
            request_sent = True
            return {"type": "http.request", "body": payload, "more_body": False}
        await response_complete.wait()
        return {"type": "http.disconnect"}

    async def send(message):
        if message["type"] == "http.response.start":
            timeline.append(f"status_{message['status']}")
        elif message["type"] == "http.response.body" and not message.get("more_body", False):
            timeline.append("response_sent")
            response_complete.set()

    await app(scope, receive, send)


@pytest.mark.asyncio
async def test_commit_happens_before_response(app_database, monkeypatch):
    timeline = []
    original_commit = AsyncSession.commit

    async def recording_commit(self):
        timeline.append("commit")
        await original_commit(self)

    monkeypatch.setattr(AsyncSession, "commit", recording_commit)

    await _call_asgi("POST", "/auth/register", _registration("ordered@example.com"), timeline)

    assert "status_201" in timeline
    assert timeline.index("commit") < timeline.index("status_201")
    assert timeline.index("commit") < timeline.index("response_sent")
    assert await _user_exists("ordered@example.com")


@pytest.mark.asyncio
async def test_failed_commit_is_reported_to_client(app_database, monkeypatch):
    """A commit failure must not be answered with a success status."""

    async def failing_commit(self):
        raise OperationalError("COMMIT", {}, Exception("could not serialize access"))

    monkeypatch.setattr(AsyncSession, "commit", failing_commit)

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/auth/register", json=_registration("lost@example.com"))

    monkeypatch.undo()
    assert response.status_code == 500
    assert not await _user_exists("lost@example.com")
