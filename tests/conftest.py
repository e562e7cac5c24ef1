"""Pytest fixtures for gctalk tests."""

from datetime import datetime, timedelta, timezone

import pytest

from gctalk.auth.context import AuthContext
from gctalk.auth.session import Identity
from gctalk.backend.memory import InMemoryBackend
from gctalk.config.settings import Settings
from gctalk.feed.loader import FeedLoader
from gctalk.notifications import Notifier

START = datetime(2026, 3, 2, 12, 0, 0, tzinfo=timezone.utc)


class StepClock:
    """Clock that advances one minute on every reading."""

    def __init__(self, start: datetime = START) -> None:
        self.current = start

    def __call__(self) -> datetime:
        moment = self.current
        self.current += timedelta(minutes=1)
        return moment


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings configured for testing."""
    return Settings(
        environment="development",
        log_level="DEBUG",
        supabase_url="https://gctalk-test.supabase.co",
        supabase_anon_key="anon-test-key",
        session_file=tmp_path / "session.json",
    )


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def backend(clock) -> InMemoryBackend:
    """In-memory backend with deterministic timestamps and no session."""
    return InMemoryBackend(clock=clock)


@pytest.fixture
def ana(backend) -> Identity:
    return backend.add_user("ana@gc.edu.br", "senha-ana", "Ana Silva", "9A", user_id="user-ana")


@pytest.fixture
def bruno(backend) -> Identity:
    return backend.add_user("bruno@gc.edu.br", "senha-bruno", "Bruno Costa", "2B", user_id="user-bruno")


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def auth(backend) -> AuthContext:
    return AuthContext(backend)


@pytest.fixture
def redirects() -> list[str]:
    return []


@pytest.fixture
def loader(backend, auth, notifier, redirects) -> FeedLoader:
    return FeedLoader(backend, auth, notifier, redirects.append)
