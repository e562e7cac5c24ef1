"""Tests for session records and their file store."""

import stat

from gctalk.auth.session import Identity, Session
from gctalk.auth.store import SessionStore


def make_session(expires_at=2_000_000_000):
    return Session(
        access_token="access-1",
        refresh_token="refresh-1",
        expires_at=expires_at,
        identity=Identity(id="user-ana", email="ana@gc.edu.br"),
    )


class TestSession:
    def test_is_expired(self):
        session = make_session(expires_at=1000)
        assert session.is_expired(now=995)
        assert not session.is_expired(now=980)
        assert not session.is_expired(now=995, leeway=0)

    def test_from_token_response_with_expires_in(self):
        session = Session.from_token_response(
            {
                "access_token": "a",
                "refresh_token": "r",
                "expires_in": 3600,
                "user": {"id": "user-ana", "email": "ana@gc.edu.br"},
            }
        )
        assert session.identity == Identity(id="user-ana", email="ana@gc.edu.br")
        assert not session.is_expired()

    def test_dict_round_trip(self):
        session = make_session()
        assert Session.from_dict(session.to_dict()) == session


class TestSessionStore:
    """Tests for SessionStore."""

    def test_save_and_load(self, tmp_path):
        store = SessionStore(tmp_path / "nested" / "session.json")
        store.save(make_session())

        assert store.load() == make_session()
        assert stat.S_IMODE(store.path.stat().st_mode) == 0o600

    def test_missing_file(self, tmp_path):
        assert SessionStore(tmp_path / "session.json").load() is None

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("{not json", encoding="utf-8")
        assert SessionStore(path).load() is None

    def test_incomplete_file(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text('{"access_token": "a"}', encoding="utf-8")
        assert SessionStore(path).load() is None

    def test_clear(self, tmp_path):
        store = SessionStore(tmp_path / "session.json")
        store.clear()
        store.save(make_session())
        store.clear()
        assert not store.path.exists()
