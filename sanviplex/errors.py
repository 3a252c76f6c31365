from __future__ import annotations

from typing import Any, Dict, Optional

import requests


NETWORK_ERROR_MESSAGE = "Network error. Please check your connection."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"
REFRESH_FAILED_MESSAGE = "Token refresh failed"


class ApiError(Exception):
    """Normalized failure surfaced by the API client.

    ``field`` is set for validation errors naming an input, ``code`` for
    plain HTTP status failures.
    """

    def __init__(self, message: str, field: Optional[str] = None, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.code = code

    def to_dict(self) -> Dict[str, str]:
        out = {"message": self.message}
        if self.field is not None:
            out["field"] = self.field
        if self.code is not None:
            out["code"] = self.code
        return out

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_dict()!r})"


class SessionExpired(ApiError):
    """Refreshing the access token failed; the stored session has been cleared."""

    def __init__(self, message: str = REFRESH_FAILED_MESSAGE) -> None:
        super().__init__(message)


def error_from_response(response: requests.Response) -> ApiError:
    try:
        data: Any = response.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        detail = data.get("detail")
        if detail:
            return ApiError(str(detail))
        for key, value in data.items():
            if isinstance(value, list) and value:
                return ApiError(str(value[0]), field=key)

    return ApiError(f"Server error: {response.status_code}", code=str(response.status_code))


def normalize_error(exc: BaseException) -> ApiError:
    if isinstance(exc, ApiError):
        return exc
    if isinstance(exc, requests.RequestException):
        response = getattr(exc, "response", None)
        if response is not None:
            return error_from_response(response)
        return ApiError(NETWORK_ERROR_MESSAGE)
    message = str(exc) if str(exc) else UNEXPECTED_ERROR_MESSAGE
    return ApiError(message)
