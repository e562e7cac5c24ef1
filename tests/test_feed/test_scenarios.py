"""End-to-end flows through the loader and writers on the in-memory backend."""

import pytest

from gctalk.feed.render import category_badge, render_feed
from gctalk.feed.schemas import Profile
from gctalk.feed.writers import Commenter, Composer, WriteOutcome


@pytest.mark.asyncio
async def test_new_feedback_appears_first(backend, ana, auth, notifier, loader):
    backend.start_session(ana)
    backend.store_raw_feedback(ana, "professores", "Antigo", "Texto antigo")
    await loader.mount()

    composer = Composer(backend, auth, notifier, on_feedback_added=loader.load)
    outcome = await composer.submit("geral", "Festa ótima", "Gostei muito")

    assert outcome is WriteOutcome.SUBMITTED
    first = loader.feedbacks[0]
    assert first.title == "Festa ótima"
    assert first.author == Profile(full_name="Ana Silva", class_name="9A")
    assert first.comments == []
    assert [f.title for f in loader.feedbacks] == ["Festa ótima", "Antigo"]


@pytest.mark.asyncio
async def test_comment_from_another_user(backend, ana, bruno, auth, notifier, loader):
    backend.start_session(ana)
    await loader.mount()
    composer = Composer(backend, auth, notifier, on_feedback_added=loader.load)
    await composer.submit("geral", "Festa ótima", "Gostei muito")
    feedback_id = loader.feedbacks[0].id

    backend.start_session(bruno)
    await auth.load_session()
    assert loader.user == bruno

    commenter = Commenter(feedback_id, backend, auth, notifier, on_comment_added=loader.load)
    assert await commenter.submit("Concordo!") is WriteOutcome.SUBMITTED

    comments = loader.feedbacks[0].comments
    assert len(comments) == 1
    assert comments[0].content == "Concordo!"
    assert comments[0].author.full_name == "Bruno Costa"


@pytest.mark.asyncio
async def test_unauthenticated_visitor_never_queries(backend, loader, redirects):
    await loader.mount()

    assert redirects == ["/auth"]
    assert backend.calls == ["get_session"]


@pytest.mark.asyncio
async def test_stray_category_still_renders(backend, ana, loader):
    backend.start_session(ana)
    backend.store_raw_feedback(ana, "esportes", "Futsal", "Mais campeonatos")

    assert await loader.mount() is True

    entry = loader.feedbacks[0]
    assert entry.category == "esportes"
    assert category_badge(entry.category) == ("", None)
    assert "Futsal" in render_feed(loader.feedbacks)


@pytest.mark.asyncio
async def test_order_holds_across_inserts(backend, ana, auth, notifier, loader):
    backend.start_session(ana)
    await loader.mount()
    composer = Composer(backend, auth, notifier, on_feedback_added=loader.load)

    for n in range(5):
        await composer.submit("materias", f"Entrada {n}", "Texto")

    stamps = [f.created_at for f in loader.feedbacks]
    assert stamps == sorted(stamps, reverse=True)
    assert loader.feedbacks[0].title == "Entrada 4"


@pytest.mark.asyncio
async def test_reload_is_idempotent(backend, ana, loader):
    backend.start_session(ana)
    backend.store_raw_feedback(ana, "geral", "Festa", "Boa")
    await loader.mount()
    first = loader.feedbacks

    await loader.load()

    assert loader.feedbacks == first
