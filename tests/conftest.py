"""Pytest configuration and fixtures."""

import asyncio
import os
from typing import Any, Callable, Optional, Union

import httpx
import pytest
import pytest_asyncio

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DEBUG"] = "true"

from walletgate.config import Settings
from walletgate.gateway.service import Gateway
from walletgate.store.base import MemoryBackend

TEST_HOST = "https://api.test"

Handler = Union[Any, Callable[[httpx.Request], httpx.Response]]


class StubBackend:
    """Serves canned responses per URL path and records every request.

    A response is either a JSON-compatible value (served with status 200)
    or a callable taking the request and returning an ``httpx.Response``.
    Unknown paths answer 404.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responses: dict[str, Handler] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.responses.get(request.url.path)
        if handler is None:
            return httpx.Response(404, json={"error": "not found"})
        if callable(handler):
            return handler(request)
        return httpx.Response(200, json=handler)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def requests_to(self, path: str, host: Optional[str] = None) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if r.url.path == path and (host is None or r.url.host == host)
        ]

    def last(self, path: str) -> httpx.Request:
        matching = self.requests_to(path)
        assert matching, f"no request to {path}"
        return matching[-1]


class FakeClock:
    """Deterministic clock for the rate limiter."""

    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.now += max(seconds, 0.0)
        await asyncio.sleep(0)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        openapi_host=TEST_HOST,
        database_url="sqlite+aiosqlite:///:memory:",
    )


@pytest.fixture
def stub() -> StubBackend:
    return StubBackend()


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest_asyncio.fixture
async def gateway(backend, settings, stub):
    """Initialized gateway whose discovery falls back to the template."""
    gw = Gateway(backend=backend, settings=settings, http_transport=stub.transport)
    await gw.init()
    yield gw
    await gw.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
