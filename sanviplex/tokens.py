from __future__ import annotations

import base64
import json
import time
from typing import Any, Dict, Optional


def parse_jwt_claims(token: Optional[str]) -> Dict[str, Any] | None:
    if not isinstance(token, str) or not token or token.count(".") != 2:
        return None
    try:
        _, payload, _ = token.split(".")
        padded = payload + "=" * (-len(payload) % 4)
        data = base64.urlsafe_b64decode(padded.encode())
        claims = json.loads(data.decode())
    except Exception:
        return None
    return claims if isinstance(claims, dict) else None


def token_expires_at(token: Optional[str]) -> Optional[float]:
    claims = parse_jwt_claims(token) or {}
    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return None
    return float(exp)


def is_token_expiring(token: Optional[str], threshold_seconds: float, now: Optional[float] = None) -> bool:
    """Return True when ``token`` has less than ``threshold_seconds`` of validity left.

    Tokens whose expiry cannot be decoded count as expired.
    """
    expires_at = token_expires_at(token)
    if expires_at is None:
        return True
    current = time.time() if now is None else now
    return expires_at * 1000 - current * 1000 < threshold_seconds * 1000
