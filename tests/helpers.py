"""Helpers shared by the test-suite."""

from __future__ import annotations

import base64
import json
import time
from typing import Any

from sanviplex.config import AUTH_STORAGE_KEY, USER_STORAGE_KEY

BASE_URL = "https://api.sanviplex.test/api"


def _segment(data: dict[str, Any]) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def make_jwt(expires_in: float, **claims: Any) -> str:
    """Build an unsigned JWT whose ``exp`` lies ``expires_in`` seconds from now."""

    payload = {"exp": int(time.time() + expires_in), "token_type": "access"}
    payload.update(claims)
    return f"{_segment({'alg': 'HS256', 'typ': 'JWT'})}.{_segment(payload)}.signature"


def url(path: str) -> str:
    return f"{BASE_URL}/{path.lstrip('/')}"


def user_payload(**overrides: Any) -> dict[str, Any]:
    user = {
        "id": "42",
        "email": "a@b.com",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email_verified": True,
    }
    user.update(overrides)
    return user


def stored_keys(store: Any) -> list[str]:
    """Session records currently present, read through the store protocol."""

    return [key for key in (AUTH_STORAGE_KEY, USER_STORAGE_KEY) if store.get(key) is not None]
