from __future__ import annotations

import json
import threading
from concurrent.futures import Future
from typing import Any, Callable, Dict, Mapping, Optional

import requests

from .config import AUTH_STORAGE_KEY, MUTATING_METHODS, USER_STORAGE_KEY, ClientConfig
from .errors import ApiError, SessionExpired, error_from_response, normalize_error
from .models import (
    Authenticated,
    LoginOutcome,
    MessageResult,
    TokenPair,
    UserProfile,
    VerificationRequired,
)
from .store import MemorySessionStore, SessionStore
from .tokens import is_token_expiring
from .utils import eprint, now_millis


_BASE_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class ApiClient:
    """HTTP client for the storefront backend that keeps a bearer session alive.

    Every request resolves a usable access token first, refreshing it when it
    is about to expire, and a 401 triggers one refresh followed by one retry.
    Concurrent refreshes collapse into a single call to the refresh endpoint.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        store: Optional[SessionStore] = None,
        session: Optional[requests.Session] = None,
        on_session_expired: Optional[Callable[[], None]] = None,
        verbose: bool = False,
    ) -> None:
        self.config = config or ClientConfig()
        self.store: SessionStore = store if store is not None else MemorySessionStore()
        self.session = session or requests.Session()
        self.on_session_expired = on_session_expired
        self.verbose = verbose
        self._store_lock = threading.RLock()
        self._refresh_lock = threading.Lock()
        self._refresh_future: Optional[Future] = None

    def _vlog(self, *args: Any) -> None:
        if self.verbose:
            eprint(*args)

    # Token storage

    def store_tokens(self, tokens: TokenPair) -> None:
        with self._store_lock:
            self.store.set(AUTH_STORAGE_KEY, json.dumps(tokens.to_dict()))

    def clear_tokens(self) -> None:
        with self._store_lock:
            self.store.remove(AUTH_STORAGE_KEY)
            self.store.remove(USER_STORAGE_KEY)

    def get_tokens(self) -> Optional[TokenPair]:
        raw = self.store.get(AUTH_STORAGE_KEY)
        if not raw:
            return None
        try:
            tokens = TokenPair.from_dict(json.loads(raw))
        except ValueError as exc:
            eprint(f"ERROR: unable to read stored tokens: {exc}")
            tokens = None
        if tokens is None:
            self.clear_tokens()
        return tokens

    def _update_stored_access_token(self, access: str, refresh_token: str) -> bool:
        with self._store_lock:
            tokens = self.get_tokens()
            if tokens is None or tokens.refresh != refresh_token:
                # Signed out or signed in again while the refresh was in flight.
                return False
            self.store_tokens(TokenPair(access=access, refresh=refresh_token))
            return True

    def is_authenticated(self) -> bool:
        tokens = self.get_tokens()
        if tokens is None:
            return False
        return not is_token_expiring(tokens.access, self.config.refresh_threshold)

    # User profile storage

    def get_stored_user(self) -> Optional[UserProfile]:
        raw = self.store.get(USER_STORAGE_KEY)
        if not raw:
            return None
        try:
            user = UserProfile.from_dict(json.loads(raw))
        except ValueError:
            user = None
        if user is None:
            eprint("ERROR: stored user profile is unreadable, discarding it")
            self.store.remove(USER_STORAGE_KEY)
        return user

    def _store_user(self, user: UserProfile) -> None:
        self.store.set(USER_STORAGE_KEY, json.dumps(user.to_dict()))

    def restore_session(self) -> Optional[UserProfile]:
        user = self.get_stored_user()
        if user is not None and self.is_authenticated():
            return user
        self.clear_tokens()
        return None

    def logout(self) -> None:
        self.clear_tokens()

    # Refresh

    def refresh_access_token(self, stale_token: Optional[str] = None) -> str:
        """Return a fresh access token, sharing one refresh call between threads.

        ``stale_token`` is the token the caller found unusable. If another
        thread already replaced it with a valid token, that token is returned
        without contacting the server.
        """
        with self._refresh_lock:
            pending = self._refresh_future
            owner = pending is None
            if owner:
                if stale_token is not None:
                    current = self.get_tokens()
                    if current is None:
                        # An earlier refresh already ended this session.
                        raise SessionExpired()
                    if current.access != stale_token and not is_token_expiring(
                        current.access, self.config.refresh_threshold
                    ):
                        return current.access
                pending = Future()
                self._refresh_future = pending

        if not owner:
            return pending.result()

        try:
            access = self._perform_token_refresh()
        except Exception as exc:
            pending.set_exception(exc)
            raise
        else:
            pending.set_result(access)
            return access
        finally:
            if not pending.done():
                pending.set_exception(SessionExpired())
            with self._refresh_lock:
                self._refresh_future = None

    def _perform_token_refresh(self) -> str:
        tokens = self.get_tokens()
        if tokens is None:
            eprint("ERROR: no refresh token available")
            self._handle_auth_failure()
            raise SessionExpired()

        refresh_token = tokens.refresh
        access = self._request_new_access_token(refresh_token)
        if access is None:
            self._handle_auth_failure(refresh_token)
            raise SessionExpired()

        if not self._update_stored_access_token(access, refresh_token):
            eprint("Session changed during token refresh, keeping the newer session")
            current = self.get_tokens()
            if current is None:
                raise SessionExpired()
            return current.access
        self._vlog("Access token refreshed")
        return access

    def _request_new_access_token(self, refresh_token: str) -> Optional[str]:
        headers = dict(_BASE_HEADERS)
        headers["X-Requested-With"] = "XMLHttpRequest"
        try:
            resp = self.session.post(
                self.config.url("/token/refresh/"),
                json={"refresh": refresh_token},
                headers=headers,
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            eprint(f"ERROR: failed to refresh access token: {exc}")
            return None

        if resp.status_code >= 400:
            eprint(f"ERROR: refresh token request returned status {resp.status_code}")
            return None

        try:
            data = resp.json()
        except ValueError as exc:
            eprint(f"ERROR: unable to parse refresh token response: {exc}")
            return None

        access = data.get("access") if isinstance(data, dict) else None
        if not isinstance(access, str) or not access:
            eprint("ERROR: refresh token response missing access token")
            return None
        return access

    def _handle_auth_failure(self, refresh_token: Optional[str] = None) -> None:
        with self._store_lock:
            current = self.get_tokens()
            if refresh_token is not None and current is not None and current.refresh != refresh_token:
                eprint("Session changed during token refresh, keeping the newer session")
                return
            self.clear_tokens()
        if self.on_session_expired is None:
            return
        try:
            self.on_session_expired()
        except Exception as exc:
            eprint(f"ERROR: session expiry handler failed: {exc}")

    def _resolve_access_token(self) -> Optional[str]:
        tokens = self.get_tokens()
        if tokens is None:
            return None
        if not is_token_expiring(tokens.access, self.config.refresh_threshold):
            return tokens.access
        try:
            return self.refresh_access_token(stale_token=tokens.access)
        except SessionExpired as exc:
            eprint(f"ERROR: {exc.message}")
            return None

    # Request pipeline

    def _send(
        self,
        method: str,
        path: str,
        token: Optional[str],
        data: Any,
        params: Optional[Mapping[str, Any]],
        headers: Optional[Mapping[str, str]],
    ) -> requests.Response:
        request_headers: Dict[str, str] = dict(_BASE_HEADERS)
        if headers:
            request_headers.update(headers)
        if token:
            request_headers["Authorization"] = f"Bearer {token}"
        if method in MUTATING_METHODS:
            request_headers["X-Requested-With"] = "XMLHttpRequest"
        request_headers["X-Request-Time"] = str(now_millis())

        self._vlog(f"{method} {path}")
        return self.session.request(
            method,
            self.config.url(path),
            json=data,
            params=params,
            headers=request_headers,
            timeout=self.config.timeout,
        )

    def request(
        self,
        method: str,
        path: str,
        data: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        method = method.upper()
        try:
            token = self._resolve_access_token()
            resp = self._send(method, path, token, data, params, headers)
            if resp.status_code == 401 and self.get_tokens() is not None:
                self._vlog(f"{method} {path} returned 401, refreshing and retrying once")
                token = self.refresh_access_token(stale_token=token)
                resp = self._send(method, path, token, data, params, headers)
        except ApiError:
            raise
        except Exception as exc:
            raise normalize_error(exc) from exc

        if resp.status_code >= 400:
            raise error_from_response(resp)
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return resp.text

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None, headers: Optional[Mapping[str, str]] = None) -> Any:
        return self.request("GET", path, params=params, headers=headers)

    def post(self, path: str, data: Any = None, params: Optional[Mapping[str, Any]] = None, headers: Optional[Mapping[str, str]] = None) -> Any:
        return self.request("POST", path, data=data, params=params, headers=headers)

    def put(self, path: str, data: Any = None, params: Optional[Mapping[str, Any]] = None, headers: Optional[Mapping[str, str]] = None) -> Any:
        return self.request("PUT", path, data=data, params=params, headers=headers)

    def patch(self, path: str, data: Any = None, params: Optional[Mapping[str, Any]] = None, headers: Optional[Mapping[str, str]] = None) -> Any:
        return self.request("PATCH", path, data=data, params=params, headers=headers)

    def delete(self, path: str, params: Optional[Mapping[str, Any]] = None, headers: Optional[Mapping[str, str]] = None) -> Any:
        return self.request("DELETE", path, params=params, headers=headers)

    # Account endpoints

    def _complete_login(self, data: Any, email: str) -> LoginOutcome:
        data = data if isinstance(data, dict) else {}
        if data.get("requires_verification") or data.get("requiresVerification"):
            return VerificationRequired(
                email=str(data.get("email") or email),
                message=str(data.get("message") or ""),
            )

        tokens = TokenPair.from_dict(data)
        if tokens is None:
            raise ApiError("Authentication response did not include tokens")
        user = UserProfile.from_dict(data.get("user")) or UserProfile(id="", email=email)

        self.store_tokens(tokens)
        self._store_user(user)
        return Authenticated(tokens=tokens, user=user)

    def login(self, email: str, password: str) -> LoginOutcome:
        self._vlog(f"Logging in user: {email}")
        data = self.post("/login/", {"email": email, "password": password})
        return self._complete_login(data, email)

    def signup(
        self,
        email: str,
        first_name: str,
        last_name: str,
        password: str,
        confirm_password: Optional[str] = None,
    ) -> MessageResult:
        self._vlog(f"Signing up user: {email} against {self.config.base_url}")
        data = self.post(
            "/signup/",
            {
                "email": email,
                "first_name": first_name,
                "last_name": last_name,
                "password": password,
                "confirm_password": password if confirm_password is None else confirm_password,
            },
        )
        return MessageResult.from_dict(data)

    def send_otp(self, email: str) -> MessageResult:
        self._vlog(f"Sending OTP to: {email}")
        data = self.post("/send-otp/", {"email": email})
        return MessageResult.from_dict(data)

    def verify_otp(self, email: str, otp: str) -> Authenticated:
        data = self.post("/verify-otp/", {"email": email, "otp": otp})
        outcome = self._complete_login(data, email)
        if isinstance(outcome, VerificationRequired):
            raise ApiError(outcome.message or "Email verification required")
        return outcome

    def update_user_profile(
        self,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> UserProfile:
        payload = {
            key: value
            for key, value in (("first_name", first_name), ("last_name", last_name), ("email", email))
            if value is not None
        }
        data = self.put("/auth/profile/", payload)
        user = UserProfile.from_dict(data.get("user") if isinstance(data, dict) else None)
        if user is None:
            raise ApiError("Profile response did not include a user")
        stored = self.get_stored_user()
        if stored is not None:
            user.preferences = dict(stored.preferences)
        self._store_user(user)
        return user

    def update_preferences(self, **preferences: Any) -> UserProfile:
        user = self.get_stored_user()
        if user is None:
            raise ApiError("No user logged in")
        user.preferences.update(preferences)
        self._store_user(user)
        return user
