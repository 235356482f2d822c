"""Tests for the upstream API client — headers, scopes and typed failures."""
from __future__ import annotations

import json

import httpx
import pytest

from src.middleware.metrics import metrics
from src.upstream.client import API_KEY_HEADER, Scope, UpstreamClient
from tests.conftest import TEST_CREDENTIAL
from src.upstream.errors import (
    MissingCredentialsError,
    UpstreamError,
    UpstreamHTTPError,
    UpstreamResponseError,
    UpstreamTransportError,
)


class TestRequests:
    """Successful calls."""

    @pytest.mark.asyncio
    async def test_get_sends_api_key_header(self, upstream, upstream_client):
        upstream.on("GET", "advertisers", json={"advertisers": []})
        data = await upstream_client.request("advertisers")
        assert data == {"advertisers": []}
        sent = upstream.calls[0]
        assert sent.headers[API_KEY_HEADER] == "test-key-0123456789"
        assert sent.headers["content-type"] == "application/json"
        assert sent.content == b""

    @pytest.mark.asyncio
    async def test_post_serializes_body(self, upstream, upstream_client):
        upstream.on("POST", "offerstable", json={"offers": []})
        await upstream_client.request("offerstable", "POST", {"filters": {"offer_status": "active"}})
        assert json.loads(upstream.calls[0].content) == {"filters": {"offer_status": "active"}}

    @pytest.mark.asyncio
    async def test_query_string_preserved(self, upstream, upstream_client):
        upstream.on("POST", "offerstable", json={"offers": []})
        await upstream_client.request("offerstable?page=2&relationship=visibility,ruleset,urls", "POST", {})
        url = upstream.calls[0].url
        assert url.params["page"] == "2"
        assert url.params["relationship"] == "visibility,ruleset,urls"

    @pytest.mark.asyncio
    async def test_affiliate_scope_uses_affiliate_base(self, upstream, upstream_client):
        upstream.on("GET", "offersrunnable", json={"offers": []})
        await upstream_client.request("offersrunnable", scope=Scope.AFFILIATE)
        assert upstream.calls[0].url.path == "/v1/affiliates/offersrunnable"

    @pytest.mark.asyncio
    async def test_success_is_counted(self, upstream, upstream_client):
        upstream.on("GET", "advertisers", json={"advertisers": []})
        await upstream_client.request("advertisers")
        assert metrics.upstream_calls[("advertisers", "ok")] == 1


class TestFailures:
    """Every failure is an UpstreamError subclass."""

    @pytest.mark.asyncio
    async def test_non_2xx_raises_http_error(self, upstream, upstream_client):
        upstream.on("POST", "dealstable", json={"error": "boom"}, status=502)
        with pytest.raises(UpstreamHTTPError) as info:
            await upstream_client.request("dealstable", "POST", {})
        assert info.value.status_code == 502
        assert str(info.value) == "Upstream API error: 502 Bad Gateway"
        assert metrics.upstream_calls[("dealstable", "http_502")] == 1

    @pytest.mark.asyncio
    async def test_network_failure_raises_transport_error(self, upstream, upstream_client):
        upstream.on("POST", "affiliatestable", exc=httpx.ConnectError("connection refused"))
        with pytest.raises(UpstreamTransportError):
            await upstream_client.request("affiliatestable", "POST", {})

    @pytest.mark.asyncio
    async def test_timeout_raises_transport_error(self, upstream, upstream_client):
        upstream.on("GET", "couponcodes", exc=httpx.ReadTimeout("timed out"))
        with pytest.raises(UpstreamError):
            await upstream_client.request("couponcodes")

    @pytest.mark.asyncio
    async def test_invalid_json_raises_response_error(self):
        def handler(request):
            return httpx.Response(200, content=b"<html>maintenance</html>")

        client = UpstreamClient(TEST_CREDENTIAL, transport=httpx.MockTransport(handler))
        try:
            with pytest.raises(UpstreamResponseError):
                await client.request("advertisers")
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_missing_key_raises_before_io(self, upstream, no_key_client):
        with pytest.raises(MissingCredentialsError):
            await no_key_client.request("offerstable", "POST", {})
        assert upstream.calls == []
