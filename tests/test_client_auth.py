"""Tests for session storage and the account endpoints of ``ApiClient``."""

from __future__ import annotations

import json

import pytest
import responses

from sanviplex.config import AUTH_STORAGE_KEY, USER_STORAGE_KEY
from sanviplex.errors import ApiError
from sanviplex.models import Authenticated, TokenPair, VerificationRequired

from tests.helpers import make_jwt, stored_keys, url, user_payload


def test_store_tokens_persists_pair_as_one_record(client, store) -> None:
    client.store_tokens(TokenPair(access="a", refresh="r"))

    assert json.loads(store.get(AUTH_STORAGE_KEY)) == {"access": "a", "refresh": "r"}
    assert client.get_tokens() == TokenPair(access="a", refresh="r")


def test_clear_tokens_removes_everything_and_is_idempotent(client, store) -> None:
    client.store_tokens(TokenPair(access="a", refresh="r"))
    store.set(USER_STORAGE_KEY, json.dumps(user_payload()))

    client.clear_tokens()
    client.clear_tokens()

    assert client.get_tokens() is None
    assert stored_keys(store) == []


def test_corrupt_token_record_is_discarded(client, store) -> None:
    store.set(AUTH_STORAGE_KEY, "{broken")

    assert client.get_tokens() is None
    assert store.get(AUTH_STORAGE_KEY) is None


def test_is_authenticated_uses_lookahead(client) -> None:
    assert client.is_authenticated() is False

    client.store_tokens(TokenPair(access=make_jwt(6 * 60), refresh="r"))
    assert client.is_authenticated() is True

    client.store_tokens(TokenPair(access=make_jwt(4 * 60), refresh="r"))
    assert client.is_authenticated() is False

    client.store_tokens(TokenPair(access="A1", refresh="r"))
    assert client.is_authenticated() is False


@responses.activate
def test_login_happy_path(client) -> None:
    """A successful login stores both tokens and the profile."""

    # Arrange
    access = make_jwt(3600)
    responses.add(
        responses.POST,
        url("/login/"),
        json={"access": access, "refresh": "R1", "user": user_payload()},
        status=200,
    )

    # Act
    outcome = client.login("a@b.com", "secret123")

    # Assert
    assert isinstance(outcome, Authenticated)
    assert outcome.tokens == TokenPair(access=access, refresh="R1")
    assert outcome.user.full_name == "Ada Lovelace"
    assert client.is_authenticated() is True
    assert client.get_stored_user().email == "a@b.com"
    body = json.loads(responses.calls[0].request.body)
    assert body == {"email": "a@b.com", "password": "secret123"}


@responses.activate
def test_login_requiring_verification_stores_nothing(client, store) -> None:
    responses.add(
        responses.POST,
        url("/login/"),
        json={"message": "Verify your email", "email": "a@b.com", "requires_verification": True},
        status=200,
    )

    outcome = client.login("a@b.com", "secret123")

    assert outcome == VerificationRequired(email="a@b.com", message="Verify your email")
    assert stored_keys(store) == []
    assert client.is_authenticated() is False


@responses.activate
def test_login_field_error(client) -> None:
    responses.add(responses.POST, url("/login/"), json={"email": ["Enter a valid email."]}, status=400)

    with pytest.raises(ApiError) as exc_info:
        client.login("nope", "secret123")

    assert exc_info.value.to_dict() == {"field": "email", "message": "Enter a valid email."}


@responses.activate
def test_login_bad_credentials_without_session_does_not_refresh(client, expired) -> None:
    responses.add(responses.POST, url("/login/"), json={"detail": "Invalid credentials"}, status=401)

    with pytest.raises(ApiError) as exc_info:
        client.login("a@b.com", "wrong")

    assert exc_info.value.to_dict() == {"message": "Invalid credentials"}
    assert len(responses.calls) == 1
    assert expired.calls == 0


@responses.activate
def test_login_response_without_tokens_is_an_error(client, store) -> None:
    responses.add(responses.POST, url("/login/"), json={"user": user_payload()}, status=200)

    with pytest.raises(ApiError):
        client.login("a@b.com", "secret123")

    assert stored_keys(store) == []


@responses.activate
def test_signup_does_not_authenticate(client, store) -> None:
    responses.add(
        responses.POST,
        url("/signup/"),
        json={"message": "Account created", "email": "a@b.com"},
        status=201,
    )

    result = client.signup("a@b.com", "Ada", "Lovelace", "Secret123")

    assert result.message == "Account created"
    assert result.email == "a@b.com"
    assert stored_keys(store) == []
    body = json.loads(responses.calls[0].request.body)
    assert body == {
        "email": "a@b.com",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "password": "Secret123",
        "confirm_password": "Secret123",
    }


@responses.activate
def test_send_and_verify_otp(client) -> None:
    access = make_jwt(3600)
    responses.add(responses.POST, url("/send-otp/"), json={"message": "Code sent", "email": "a@b.com"})
    responses.add(
        responses.POST,
        url("/verify-otp/"),
        json={"access": access, "refresh": "R1", "user": user_payload()},
    )

    sent = client.send_otp("a@b.com")
    outcome = client.verify_otp("a@b.com", "123456")

    assert sent.message == "Code sent"
    assert outcome.tokens.access == access
    assert client.is_authenticated() is True
    assert json.loads(responses.calls[1].request.body) == {"email": "a@b.com", "otp": "123456"}


@responses.activate
def test_verify_otp_rejected(client) -> None:
    responses.add(responses.POST, url("/verify-otp/"), json={"otp": ["Invalid or expired code."]}, status=400)

    with pytest.raises(ApiError) as exc_info:
        client.verify_otp("a@b.com", "000000")

    assert exc_info.value.field == "otp"
    assert client.get_tokens() is None


@responses.activate
def test_update_user_profile_keeps_preferences(client) -> None:
    access = make_jwt(3600)
    responses.add(responses.POST, url("/login/"), json={"access": access, "refresh": "R1", "user": user_payload()})
    responses.add(
        responses.PUT,
        url("/auth/profile/"),
        json={"user": user_payload(first_name="Augusta")},
    )
    client.login("a@b.com", "secret123")
    client.update_preferences(theme="light")

    user = client.update_user_profile(first_name="Augusta")

    assert user.full_name == "Augusta Lovelace"
    assert user.preferences["theme"] == "light"
    assert client.get_stored_user().first_name == "Augusta"
    request = responses.calls[1].request
    assert json.loads(request.body) == {"first_name": "Augusta"}
    assert request.headers["Authorization"] == f"Bearer {access}"


def test_update_preferences_requires_user(client) -> None:
    with pytest.raises(ApiError):
        client.update_preferences(theme="light")


def test_restore_session(client, store) -> None:
    client.store_tokens(TokenPair(access=make_jwt(3600), refresh="r"))
    store.set(USER_STORAGE_KEY, json.dumps(user_payload()))

    user = client.restore_session()

    assert user is not None
    assert user.email == "a@b.com"
    assert user.preferences["language"] == "en"


def test_restore_session_clears_stale_state(client, store) -> None:
    client.store_tokens(TokenPair(access=make_jwt(60), refresh="r"))
    store.set(USER_STORAGE_KEY, json.dumps(user_payload()))

    assert client.restore_session() is None
    assert stored_keys(store) == []


def test_logout(client, store) -> None:
    client.store_tokens(TokenPair(access=make_jwt(3600), refresh="r"))

    client.logout()

    assert client.is_authenticated() is False
    assert stored_keys(store) == []
