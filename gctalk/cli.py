"""
Command-line interface for gctalk.

Drives the same loader and writers the web view uses, against the hosted
backend or (with --mock) an in-memory backend seeded with sample data.

Usage:
    gctalk login                      # Sign in and keep the session
    gctalk feed --comments            # Show the feed, newest first
    gctalk post -c geral -t ... -b ...
    gctalk comment FEEDBACK_ID "Concordo!"
    gctalk logout
"""

import asyncio
import sys
from dataclasses import dataclass, field

import click
import structlog

from gctalk.auth.context import AuthContext
from gctalk.auth.store import SessionStore
from gctalk.backend.base import BackendClient, BackendError
from gctalk.config.settings import get_settings
from gctalk.feed import messages
from gctalk.feed.config import FeedConfig
from gctalk.feed.loader import FeedLoader
from gctalk.feed.render import render_feed, render_feedback
from gctalk.feed.schemas import Category
from gctalk.feed.writers import Commenter, Composer, WriteOutcome
from gctalk.notifications import Notifier, Toast, ToastLevel
from gctalk.observability.logging import bind_context, setup_logging

logger = structlog.get_logger(__name__)


def _build_backend(mock: bool) -> BackendClient:
    """Backend for this invocation."""
    if mock:
        from gctalk.backend.memory import InMemoryBackend

        logger.info("Using in-memory backend with sample data")
        return InMemoryBackend.with_sample_data()

    from gctalk.backend.supabase import SupabaseBackend

    settings = get_settings()
    if not settings.backend_configured:
        raise click.ClickException(
            "SUPABASE_ANON_KEY is not set (use --mock to try the sample feed)"
        )
    logger.debug("Using hosted backend", url=settings.rest_base_url)
    return SupabaseBackend(settings=settings, store=SessionStore(settings.session_file))


def _echo_toast(toast: Toast) -> None:
    color = "green" if toast.level is ToastLevel.SUCCESS else "red"
    click.echo(click.style(toast.message, fg=color))


@dataclass
class _View:
    """Everything one command needs: auth context, toasts, loader."""

    backend: BackendClient
    config: FeedConfig = field(default_factory=FeedConfig)
    redirects: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.auth = AuthContext(self.backend)
        self.notifier = Notifier(sink=_echo_toast)
        self.loader = FeedLoader(
            self.backend, self.auth, self.notifier, self._redirect, self.config
        )

    def _redirect(self, route: str) -> None:
        self.redirects.append(route)
        click.echo("Faça login para continuar: gctalk login")


def _run(coro) -> None:
    """Run a command coroutine and exit with its status code."""
    code = asyncio.run(coro)
    if code:
        sys.exit(code)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--mock", is_flag=True, help="Use an in-memory backend with sample data")
@click.pass_context
def main(ctx: click.Context, debug: bool, mock: bool) -> None:
    """GCTalk - feedback do ano letivo da comunidade escolar."""
    setup_logging("DEBUG" if debug else None)
    ctx.ensure_object(dict)
    ctx.obj["mock"] = mock
    bind_context(command=ctx.invoked_subcommand)


@main.command()
@click.option("--email", prompt=True, help="Account email")
@click.option("--password", prompt=True, hide_input=True, help="Account password")
@click.pass_context
def login(ctx: click.Context, email: str, password: str) -> None:
    """Sign in and keep the session for later commands."""

    async def run() -> int:
        async with _build_backend(ctx.obj["mock"]) as backend:
            view = _View(backend)
            try:
                session = await view.auth.sign_in(email, password)
            except BackendError:
                view.notifier.error(messages.SIGN_IN_FAILED)
                return 1
            view.notifier.success(messages.SIGNED_IN)
            click.echo(f"Sessão ativa para {session.identity.email or session.identity.id}")
            return 0

    _run(run())


@main.command()
@click.pass_context
def logout(ctx: click.Context) -> None:
    """End the current session."""

    async def run() -> int:
        async with _build_backend(ctx.obj["mock"]) as backend:
            view = _View(backend)
            await view.auth.load_session()
            return 0 if await view.loader.sign_out() else 1

    _run(run())


@main.command()
@click.option(
    "--comments/--no-comments",
    default=None,
    help="Show comment threads (default from FEED_SHOW_COMMENTS)",
)
@click.pass_context
def feed(ctx: click.Context, comments: bool | None) -> None:
    """Show the feed, newest first."""

    async def run() -> int:
        async with _build_backend(ctx.obj["mock"]) as backend:
            view = _View(backend)
            show_comments = view.config.show_comments if comments is None else comments
            async with view.loader as loader:
                if loader.is_loading:
                    return 1
                click.echo(render_feed(loader.feedbacks, show_comments=show_comments, styled=True))
                return 1 if view.notifier.toasts else 0

    _run(run())


@main.command()
@click.option(
    "--category",
    "-c",
    type=click.Choice([c.value for c in Category]),
    prompt=True,
    help="Feedback category",
)
@click.option("--title", "-t", prompt=True, help="Feedback title")
@click.option("--content", "-b", prompt=True, help="Feedback text")
@click.pass_context
def post(ctx: click.Context, category: str, title: str, content: str) -> None:
    """Publish a new feedback entry."""

    async def run() -> int:
        async with _build_backend(ctx.obj["mock"]) as backend:
            view = _View(backend)
            async with view.loader as loader:
                if loader.is_loading:
                    return 1
                composer = Composer(
                    backend, view.auth, view.notifier, on_feedback_added=loader.load
                )
                composer.open()
                outcome = await composer.submit(category, title, content)
                if outcome is WriteOutcome.INVALID:
                    click.echo("Preencha categoria, título e conteúdo.")
                if outcome is not WriteOutcome.SUBMITTED:
                    return 1
                if loader.feedbacks:
                    click.echo(render_feedback(loader.feedbacks[0], styled=True))
                return 0

    _run(run())


@main.command()
@click.argument("feedback_id")
@click.argument("content")
@click.pass_context
def comment(ctx: click.Context, feedback_id: str, content: str) -> None:
    """Comment on a feedback entry."""

    async def run() -> int:
        async with _build_backend(ctx.obj["mock"]) as backend:
            view = _View(backend)
            async with view.loader as loader:
                if loader.is_loading:
                    return 1
                commenter = Commenter(
                    feedback_id, backend, view.auth, view.notifier, on_comment_added=loader.load
                )
                outcome = await commenter.submit(content)
                if outcome is WriteOutcome.SKIPPED:
                    click.echo("Comentário vazio, nada foi enviado.")
                    return 0
                if outcome is not WriteOutcome.SUBMITTED:
                    return 1
                for entry in loader.feedbacks:
                    if entry.id == feedback_id:
                        click.echo(render_feedback(entry, show_comments=True, styled=True))
                return 0

    _run(run())


@main.command()
def categories() -> None:
    """List feedback categories."""
    for category in Category:
        click.echo(f"{category.value:<12} {click.style(category.label, fg=category.color)}")

