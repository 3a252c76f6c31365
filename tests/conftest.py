"""Global pytest fixtures for the sanviplex test-suite."""

from __future__ import annotations

import pytest

from sanviplex.client import ApiClient
from sanviplex.config import ClientConfig
from sanviplex.store import MemorySessionStore

from tests.helpers import BASE_URL


class ExpiryRecorder:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> None:
        self.calls += 1


@pytest.fixture()
def store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture()
def expired() -> ExpiryRecorder:
    return ExpiryRecorder()


@pytest.fixture()
def client(store: MemorySessionStore, expired: ExpiryRecorder) -> ApiClient:
    """Client wired to an in-memory store and a recording expiry handler."""

    return ApiClient(
        config=ClientConfig(base_url=BASE_URL, refresh_threshold=300, timeout=10),
        store=store,
        on_session_expired=expired,
    )
