"""Affiliate network API client — one pooled httpx client, typed failures, no retries."""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from src.middleware.metrics import _endpoint_label, metrics
from src.upstream.errors import (
    MissingCredentialsError,
    UpstreamHTTPError,
    UpstreamResponseError,
    UpstreamTransportError,
)

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Eflow-API-Key"


class Scope(str, enum.Enum):
    """Which side of the network API an endpoint lives on."""
    NETWORK = "network"
    AFFILIATE = "affiliate"


@dataclass(frozen=True)
class UpstreamCredential:
    """API key plus base URLs. Built once at startup, read-only afterwards."""
    api_key: Optional[str]
    base_url: str
    affiliate_base_url: str

    @classmethod
    def from_settings(cls, settings) -> "UpstreamCredential":
        return cls(
            api_key=settings.EF_API_KEY or None,
            base_url=settings.EF_API_URL,
            affiliate_base_url=settings.EF_URL_AFFILIATE,
        )

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    @property
    def key_prefix(self) -> str:
        return f"{self.api_key[:8]}..." if self.api_key else "Not set"

    def base_for(self, scope: Scope) -> str:
        base = self.affiliate_base_url if scope == Scope.AFFILIATE else self.base_url
        return base if base.endswith("/") else base + "/"


class UpstreamClient:
    """Thin JSON-over-HTTP wrapper around the affiliate network API.

    Every failure surfaces as an ``UpstreamError`` subclass; callers decide
    whether to fall back to mock data.
    """

    def __init__(
        self,
        credential: UpstreamCredential,
        timeout: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.credential = credential
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def has_credentials(self) -> bool:
        return self.credential.has_api_key

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        scope: Scope = Scope.NETWORK,
    ) -> Any:
        """Call ``endpoint`` (relative to the scope's base URL) and return parsed JSON."""
        if not self.has_credentials:
            raise MissingCredentialsError(endpoint)

        url = self.credential.base_for(scope) + endpoint.lstrip("/")
        headers = {
            API_KEY_HEADER: self.credential.api_key,
            "Content-Type": "application/json",
        }
        method = method.upper()
        label = _endpoint_label(endpoint)

        try:
            if method == "POST":
                resp = await self.client.request(method, url, headers=headers, json=body)
            else:
                resp = await self.client.request(method, url, headers=headers)
        except httpx.HTTPError as e:
            metrics.record_upstream(label, "transport_error")
            logger.warning("Upstream %s %s failed: %s", method, label, e)
            raise UpstreamTransportError(f"Upstream request failed: {e}", endpoint) from e

        if not resp.is_success:
            metrics.record_upstream(label, f"http_{resp.status_code}")
            logger.warning("Upstream %s %s returned %s", method, label, resp.status_code)
            raise UpstreamHTTPError(resp.status_code, resp.reason_phrase, endpoint)

        try:
            data = resp.json()
        except ValueError as e:
            metrics.record_upstream(label, "invalid_json")
            raise UpstreamResponseError("Upstream returned a non-JSON body", endpoint) from e

        metrics.record_upstream(label, "ok")
        return data

    async def close(self):
        await self.client.aclose()
