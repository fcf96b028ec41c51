"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.datastructures import Headers

from sse_session.main import app
from sse_session.models import SessionOptions
from sse_session.session import Session


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# In-memory transport for driving Session directly
# ---------------------------------------------------------------------------


class FakeRequest:
    """Request stand-in with case-insensitive headers."""

    def __init__(self, headers: dict[str, str] | None = None):
        self.headers = Headers(headers or {})


class FakeResponse:
    """Records everything a Session does to its response."""

    def __init__(self):
        self.status_code = 200
        self.headers: dict[str, str] = {}
        self.flushed = False
        self.chunks: list[str] = []
        self._close_callbacks = []

    def set_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    def flush_headers(self) -> None:
        self.flushed = True

    def write(self, chunk: str) -> None:
        self.chunks.append(chunk)

    def on_close(self, callback) -> None:
        self._close_callbacks.append(callback)

    def close(self) -> None:
        for callback in self._close_callbacks:
            callback()

    @property
    def body(self) -> str:
        return "".join(self.chunks)


@pytest.fixture
def fake_request() -> FakeRequest:
    return FakeRequest()


@pytest.fixture
def fake_response() -> FakeResponse:
    return FakeResponse()


@pytest.fixture
def make_session(fake_request, fake_response):
    """Build a Session over the fake request/response pair.

    Usage:
        async def test_x(make_session, fake_response):
            session = await make_session(retry=None)
    """

    async def _make(request: FakeRequest | None = None, connect: bool = True, **options) -> Session:
        session = Session(request or fake_request, fake_response, SessionOptions(**options))
        if connect:
            await asyncio.wait_for(session.connected.wait(), timeout=1)
        return session

    return _make


def parse_sse_events(raw: str) -> list[dict]:
    """Parse raw SSE text into a list of dispatched events.

    Each event is a dict of the fields seen before its blank line
    (``event``, ``data``, ``id``, ``retry``); comment lines are skipped.
    """
    events = []
    current: dict[str, str] = {}

    for line in raw.split("\n"):
        if line == "":
            if current:
                events.append(current)
            current = {}
            continue
        name, _, value = line.partition(":")
        if name:
            current[name] = value

    return events
