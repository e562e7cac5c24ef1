"""Tests for the in-memory backend."""

from datetime import datetime, timezone

import pytest

from gctalk.auth.session import Identity
from gctalk.backend.base import AuthenticationError, BackendError
from gctalk.backend.memory import InMemoryBackend
from gctalk.feed.schemas import NewComment, NewFeedback


class TestContract:
    """Tests for the contract operations."""

    @pytest.mark.asyncio
    async def test_feed_newest_first_with_joins(self, backend, ana, bruno):
        backend.start_session(ana)
        await backend.insert_feedback(NewFeedback("user-ana", "geral", "Primeiro", "a"))
        await backend.insert_feedback(NewFeedback("user-ana", "materias", "Segundo", "b"))
        feed = await backend.fetch_feed()

        backend.start_session(bruno)
        await backend.insert_comment(NewComment("user-bruno", feed[1].id, "Um"))
        await backend.insert_comment(NewComment("user-bruno", feed[1].id, "Dois"))

        feed = await backend.fetch_feed()
        assert [f.title for f in feed] == ["Segundo", "Primeiro"]
        assert feed[0].author.class_name == "9A"
        assert [c.content for c in feed[1].comments] == ["Um", "Dois"]
        assert feed[1].comments[0].author.full_name == "Bruno Costa"

    @pytest.mark.asyncio
    async def test_insert_requires_session(self, backend, ana):
        with pytest.raises(AuthenticationError):
            await backend.insert_feedback(NewFeedback("user-ana", "geral", "x", "y"))

    @pytest.mark.asyncio
    async def test_insert_for_another_user_is_refused(self, backend, ana, bruno):
        backend.start_session(bruno)
        with pytest.raises(BackendError) as exc_info:
            await backend.insert_feedback(NewFeedback("user-ana", "geral", "x", "y"))
        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_comment_on_missing_feedback(self, backend, ana):
        backend.start_session(ana)
        with pytest.raises(BackendError) as exc_info:
            await backend.insert_comment(NewComment("user-ana", "fb-missing", "Oi"))
        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_sign_in(self, backend, ana):
        session = await backend.sign_in_with_password("ana@gc.edu.br", "senha-ana")
        assert session.identity == ana
        assert await backend.get_user() == ana

        with pytest.raises(AuthenticationError):
            await backend.sign_in_with_password("ana@gc.edu.br", "errada")

    @pytest.mark.asyncio
    async def test_unknown_author_profile(self, backend):
        backend.store_raw_feedback(Identity(id="ghost"), "geral", "Sem perfil", "x")
        feed = await backend.fetch_feed()
        assert feed[0].author.full_name == ""


class TestFailureInjection:
    @pytest.mark.asyncio
    async def test_fail_and_recover(self, backend):
        backend.fail("fetch_feed")
        with pytest.raises(BackendError):
            await backend.fetch_feed()

        backend.recover("fetch_feed")
        assert await backend.fetch_feed() == []
        assert backend.calls == ["fetch_feed", "fetch_feed"]

    @pytest.mark.asyncio
    async def test_custom_error(self, backend):
        backend.fail("get_user", AuthenticationError("expired", status_code=401))
        with pytest.raises(AuthenticationError):
            await backend.get_user()

    def test_unknown_operation(self, backend):
        with pytest.raises(ValueError, match="Unknown operation"):
            backend.fail("drop_table")

    @pytest.mark.asyncio
    async def test_rejected_token_ends_session(self, backend, ana):
        backend.start_session(ana)
        backend.fail("get_user", AuthenticationError("revoked", status_code=401))

        with pytest.raises(AuthenticationError):
            await backend.get_user()

        assert await backend.get_session() is None

    @pytest.mark.asyncio
    async def test_rejected_logout_still_signs_out(self, backend, ana):
        backend.start_session(ana)
        backend.fail("sign_out", AuthenticationError("revoked", status_code=401))

        await backend.sign_out()

        assert await backend.get_session() is None


class TestSampleData:
    @pytest.mark.asyncio
    async def test_seeded_backend(self):
        backend = InMemoryBackend.with_sample_data()

        session = await backend.get_session()
        feed = await backend.fetch_feed()

        assert session is not None
        assert len(feed) == 3
        assert sum(len(f.comments) for f in feed) == 2

    def test_timestamps_never_tie(self):
        frozen = datetime(2026, 3, 2, tzinfo=timezone.utc)
        backend = InMemoryBackend(clock=lambda: frozen)
        ana = backend.add_user("ana@gc.edu.br", "x", "Ana Silva", "9A")

        first = backend.store_raw_feedback(ana, "geral", "a", "a")
        second = backend.store_raw_feedback(ana, "geral", "b", "b")

        rows = backend._feedback
        assert rows[second].created_at > rows[first].created_at
