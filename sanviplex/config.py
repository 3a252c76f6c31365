from __future__ import annotations

import os
from dataclasses import dataclass


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


API_BASE_URL_DEFAULT = os.getenv("SANVIPLEX_API_BASE_URL") or "http://127.0.0.1:8000/api"

# Seconds of remaining validity below which an access token counts as expiring.
TOKEN_REFRESH_THRESHOLD = _env_float("SANVIPLEX_TOKEN_REFRESH_THRESHOLD", 5 * 60)
REQUEST_TIMEOUT = _env_float("SANVIPLEX_REQUEST_TIMEOUT", 10)

AUTH_STORAGE_KEY = "sanviplex_auth"
USER_STORAGE_KEY = "sanviplex_user"
SESSION_FILENAME = "session.json"

MUTATING_METHODS = ("POST", "PUT", "PATCH", "DELETE")


@dataclass
class ClientConfig:
    base_url: str = API_BASE_URL_DEFAULT
    refresh_threshold: float = TOKEN_REFRESH_THRESHOLD
    timeout: float = REQUEST_TIMEOUT

    def url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
