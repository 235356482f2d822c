"""Tests for bearer-token verification."""
import time

import pytest

from config.settings import settings
from src.auth import _sign, create_token, verify_token


def test_roundtrip():
    payload = verify_token(create_token("user-7"))
    assert payload["sub"] == "user-7"
    assert payload["type"] == "access"


def test_expired_token_rejected():
    assert verify_token(create_token("user-7", ttl=-10)) is None


def test_tampered_payload_rejected():
    header, body, sig = create_token("user-7").split(".")
    forged = _sign({"sub": "admin", "exp": time.time() + 60, "type": "access"}).split(".")[1]
    assert verify_token(f"{header}.{forged}.{sig}") is None


def test_other_secret_rejected(monkeypatch):
    token = create_token("user-7")
    monkeypatch.setattr(settings, "JWT_SECRET", "rotated")
    assert verify_token(token) is None


@pytest.mark.parametrize("token", ["", "abc", "a.b", "a.b.c", "...."])
def test_garbage_rejected(token):
    assert verify_token(token) is None


@pytest.mark.asyncio
async def test_non_access_token_is_401(anon_client):
    token = _sign({"sub": "user-7", "exp": time.time() + 60, "type": "refresh"})
    resp = await anon_client.get("/api/v1/offers", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_valid_token_reaches_route(mock_mode_client):
    resp = await mock_mode_client.get("/api/v1/upstream/status")
    assert resp.status_code == 200
