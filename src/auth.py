"""Caller authentication — HMAC-signed bearer tokens, no PyJWT dependency.

Tokens are issued by the dashboard's sign-in front end (or ``create_token``
for scripts/tests); this service only verifies them.
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time
import uuid
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config.settings import settings

_JWT_ALGO = "HS256"
_ACCESS_TTL = 3600 * 12  # 12 hours

ANONYMOUS = "anonymous"


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode()


def _b64url_decode(s: str) -> bytes:
    s += "=" * (-len(s) % 4)
    return base64.urlsafe_b64decode(s)


def _signature(sig_input: bytes) -> bytes:
    return hmac.new(settings.JWT_SECRET.encode(), sig_input, hashlib.sha256).digest()


def _sign(payload: dict) -> str:
    header = _b64url(json.dumps({"alg": _JWT_ALGO, "typ": "JWT"}).encode())
    body = _b64url(json.dumps(payload).encode())
    return f"{header}.{body}.{_b64url(_signature(f'{header}.{body}'.encode()))}"


def verify_token(token: str) -> Optional[dict]:
    """Payload of a valid, unexpired token, else None."""
    parts = token.split(".")
    if len(parts) != 3:
        return None
    try:
        actual = _b64url_decode(parts[2])
        if not hmac.compare_digest(_signature(f"{parts[0]}.{parts[1]}".encode()), actual):
            return None
        payload = json.loads(_b64url_decode(parts[1]))
    except (ValueError, TypeError):
        return None
    if not isinstance(payload, dict) or payload.get("exp", 0) < time.time():
        return None
    return payload


def create_token(user_id: str, ttl: int = _ACCESS_TTL) -> str:
    now = int(time.time())
    return _sign({"sub": user_id, "iat": now, "exp": now + ttl, "type": "access", "jti": uuid.uuid4().hex[:8]})


# ---- FastAPI dependency ----

_bearer = HTTPBearer(auto_error=False)


async def get_caller_id(creds: Optional[HTTPAuthorizationCredentials] = Depends(_bearer)) -> Optional[str]:
    if not creds:
        return None
    payload = verify_token(creds.credentials)
    if not payload or payload.get("type") != "access" or not payload.get("sub"):
        return None
    return str(payload["sub"])


async def require_caller(caller_id: Optional[str] = Depends(get_caller_id)) -> str:
    """Caller identity, or 401. Disabled (anonymous) when REQUIRE_AUTH is off."""
    if caller_id:
        return caller_id
    if not settings.REQUIRE_AUTH:
        return ANONYMOUS
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
