"""Typed failures raised by the upstream client."""
from __future__ import annotations


class UpstreamError(Exception):
    """Base class: any failure talking to the affiliate network API."""

    def __init__(self, message: str, endpoint: str = ""):
        super().__init__(message)
        self.endpoint = endpoint


class MissingCredentialsError(UpstreamError):
    """No API key configured. Raised before any network I/O."""

    def __init__(self, endpoint: str = ""):
        super().__init__("Affiliate network API key not configured", endpoint)


class UpstreamHTTPError(UpstreamError):
    """Upstream answered with a non-2xx status."""

    def __init__(self, status_code: int, reason: str, endpoint: str = ""):
        super().__init__(f"Upstream API error: {status_code} {reason}".rstrip(), endpoint)
        self.status_code = status_code
        self.reason = reason


class UpstreamTransportError(UpstreamError):
    """Timeout, DNS failure, refused connection and the like."""


class UpstreamResponseError(UpstreamError):
    """2xx response whose body is not JSON."""
