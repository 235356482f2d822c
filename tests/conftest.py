"""Shared test fixtures — the app wired to a fake upstream API."""
from __future__ import annotations

from typing import Any

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.api.deps import get_upstream_client
from src.api.main import app
from src.auth import create_token
from src.middleware.metrics import metrics
from src.upstream.client import UpstreamClient, UpstreamCredential

TEST_CREDENTIAL = UpstreamCredential(
    api_key="test-key-0123456789",
    base_url="https://upstream.test/v1/networks/",
    affiliate_base_url="https://upstream.test/v1/affiliates/",
)
NO_KEY_CREDENTIAL = UpstreamCredential(
    api_key=None,
    base_url=TEST_CREDENTIAL.base_url,
    affiliate_base_url=TEST_CREDENTIAL.affiliate_base_url,
)


class FakeUpstream:
    """Canned upstream responses keyed by (method, endpoint); records every request.

    ``endpoint`` is the path below the scope base, e.g. "offerstable" or
    "reporting/conversions". Unregistered endpoints answer 404.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], Any] = {}
        self.calls: list[httpx.Request] = []

    def on(self, method: str, endpoint: str, json: Any = None, status: int = 200, exc: Exception | None = None):
        self.routes[(method.upper(), endpoint)] = exc if exc is not None else (status, json)
        return self

    @staticmethod
    def endpoint_of(request: httpx.Request) -> str:
        # /v1/networks/reporting/conversions -> reporting/conversions
        return request.url.path.split("/v1/", 1)[-1].split("/", 1)[-1]

    def calls_to(self, endpoint: str) -> list[httpx.Request]:
        return [c for c in self.calls if self.endpoint_of(c) == endpoint]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        route = self.routes.get((request.method, self.endpoint_of(request)))
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        if isinstance(route, Exception):
            raise route
        status, body = route
        return httpx.Response(status, json=body)


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset()
    yield


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest_asyncio.fixture
async def upstream_client(upstream):
    client = UpstreamClient(TEST_CREDENTIAL, transport=httpx.MockTransport(upstream.handler))
    yield client
    await client.close()


@pytest_asyncio.fixture
async def no_key_client(upstream):
    client = UpstreamClient(NO_KEY_CREDENTIAL, transport=httpx.MockTransport(upstream.handler))
    yield client
    await client.close()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_token('user-1')}"}


def _api_client(upstream_client: UpstreamClient, headers: dict[str, str] | None = None) -> AsyncClient:
    app.dependency_overrides[get_upstream_client] = lambda: upstream_client
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test", headers=headers or {})


@pytest_asyncio.fixture
async def client(upstream_client, auth_headers):
    """Authenticated API client backed by the fake upstream (API key configured)."""
    async with _api_client(upstream_client, auth_headers) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def mock_mode_client(no_key_client, auth_headers):
    """Authenticated API client with no API key configured."""
    async with _api_client(no_key_client, auth_headers) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def anon_client(upstream_client):
    """API client without a bearer token."""
    async with _api_client(upstream_client) as ac:
        yield ac
    app.dependency_overrides.clear()
