"""Feed loader: session gate, joined feed query, wholesale refresh.

The loader is the only thing that mutates the held feed. Writers never
patch it; they call ``load`` again after a successful insert.
"""

import logging
from collections.abc import Callable
from types import TracebackType

from gctalk.auth.context import AuthContext, Subscription
from gctalk.auth.session import AuthEvent, Identity, Session
from gctalk.backend.base import BackendClient, BackendError
from gctalk.feed import messages
from gctalk.feed.config import FeedConfig
from gctalk.feed.schemas import Feedback
from gctalk.notifications import Notifier

logger = logging.getLogger(__name__)

Redirect = Callable[[str], None]


class FeedLoader:
    """
    Holds the feed for one view and keeps it in sync with the backend.

    Usage:
        async with FeedLoader(backend, auth, notifier, redirect) as loader:
            render(loader.feedbacks)
    """

    def __init__(
        self,
        backend: BackendClient,
        auth: AuthContext,
        notifier: Notifier,
        redirect: Redirect,
        config: FeedConfig | None = None,
    ) -> None:
        self._backend = backend
        self._auth = auth
        self._notifier = notifier
        self._redirect = redirect
        self._config = config or FeedConfig()

        self._feedbacks: list[Feedback] = []
        self._subscription: Subscription | None = None
        self._torn_down = False

        self.user: Identity | None = None
        self.is_loading = True

    @property
    def feedbacks(self) -> list[Feedback]:
        return list(self._feedbacks)

    @property
    def mounted(self) -> bool:
        return self._subscription is not None and self._subscription.active

    async def __aenter__(self) -> "FeedLoader":
        await self.mount()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.unmount()

    async def mount(self) -> bool:
        """
        Gate on the session, subscribe to auth changes, and load the feed.

        Returns:
            True if a session exists and the initial load ran; False if
            the user was redirected to sign in.
        """
        self._torn_down = False
        if self._subscription is None or not self._subscription.active:
            self._subscription = self._auth.subscribe(self._on_auth_change)

        try:
            session = await self._auth.load_session()
        except BackendError as e:
            logger.error("Failed to read session: %s", e, exc_info=True)
            self._notifier.error(messages.LOAD_FAILED)
            return False

        if session is None:
            self._redirect(self._config.sign_in_route)
            return False

        self.user = session.identity
        await self.load()
        self.is_loading = False
        return True

    async def load(self) -> bool:
        """
        Fetch the whole feed and replace the held list.

        On failure the previous feed is kept and one error toast is shown.

        Returns:
            True if the feed was replaced.
        """
        try:
            feedbacks = await self._backend.fetch_feed()
        except BackendError as e:
            logger.error("Failed to load feed: %s", e, exc_info=True)
            self._notifier.error(messages.LOAD_FAILED)
            return False

        if self._torn_down:
            logger.debug("Discarding feed that arrived after teardown")
            return False

        self._feedbacks = feedbacks
        logger.info("Feed loaded (%d entries)", len(feedbacks))
        return True

    def unmount(self) -> None:
        """Release the auth subscription. Safe to call more than once."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self._torn_down = True

    async def sign_out(self) -> bool:
        """
        End the session and leave the feed.

        Returns:
            True if the backend accepted the sign-out.
        """
        try:
            await self._auth.sign_out()
        except BackendError as e:
            logger.error("Sign-out failed: %s", e, exc_info=True)
            self._notifier.error(messages.SIGN_OUT_FAILED)
            return False

        self._notifier.success(messages.SIGNED_OUT)
        # The SIGNED_OUT listener already redirected while mounted
        if not self.mounted:
            self._redirect(self._config.sign_in_route)
        return True

    def _on_auth_change(self, event: AuthEvent, session: Session | None) -> None:
        self.user = session.identity if session else None
        # mount() handles the initial gate itself
        if session is None and event is not AuthEvent.INITIAL_SESSION:
            logger.info("Session ended (%s), leaving feed", event.value)
            self._redirect(self._config.sign_in_route)
