"""Explicit authentication context.

One ``AuthContext`` is built per running view and handed to the feed
loader and the writers. It owns the current session, resolves the
identity writes are attributed to, and fans session changes out to
subscribers.

Lifecycle:
    1. ``subscribe(listener)`` returns a ``Subscription``
    2. ``load_session()`` / ``sign_in()`` / ``sign_out()`` emit events
    3. ``Subscription.unsubscribe()`` on teardown
"""

import logging
from collections.abc import Callable
from types import TracebackType

from gctalk.auth.session import AuthEvent, Identity, Session
from gctalk.backend.base import AuthenticationError, BackendClient, BackendError

logger = logging.getLogger(__name__)

AuthListener = Callable[[AuthEvent, Session | None], None]


class Subscription:
    """Handle for one registered listener. Cancelling twice is harmless."""

    def __init__(self, context: "AuthContext", key: int) -> None:
        self._context = context
        self._key = key
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if self._active:
            self._context._remove_listener(self._key)
            self._active = False

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.unsubscribe()


class AuthContext:
    """Session state and change notifications for one view."""

    def __init__(self, backend: BackendClient) -> None:
        self._backend = backend
        self._session: Session | None = None
        self._loaded = False
        self._listeners: dict[int, AuthListener] = {}
        self._next_key = 0

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def listener_count(self) -> int:
        """Number of live subscriptions."""
        return len(self._listeners)

    def current_identity(self) -> Identity | None:
        """Identity of the held session, without asking the backend."""
        return self._session.identity if self._session else None

    def subscribe(self, listener: AuthListener) -> Subscription:
        """Register a listener for session changes."""
        key = self._next_key
        self._next_key += 1
        self._listeners[key] = listener
        return Subscription(self, key)

    async def load_session(self) -> Session | None:
        """
        Read the session from the backend and record it.

        The first call emits ``INITIAL_SESSION``; later calls emit only
        when the session changed.

        Raises:
            BackendError: If the backend could not be reached.
        """
        session = await self._backend.get_session()

        if not self._loaded:
            self._loaded = True
            self._set_session(session, AuthEvent.INITIAL_SESSION)
        elif session != self._session:
            self._set_session(session, _change_event(self._session, session))

        return session

    async def resolve_identity(self) -> Identity | None:
        """
        Identity for a write, validated by the backend.

        A rejected token while a session is held counts as losing the
        session and is announced as ``SIGNED_OUT``.
        """
        try:
            return await self._backend.get_user()
        except AuthenticationError as e:
            logger.info("Session rejected by backend: %s", e)
            if self._session is not None:
                self._set_session(None, AuthEvent.SIGNED_OUT)
            return None
        except BackendError as e:
            logger.warning("Could not verify session: %s", e)
            return None

    async def sign_in(self, email: str, password: str) -> Session:
        """
        Sign in with email and password.

        Raises:
            AuthenticationError: If the credentials are rejected.
            BackendError: On other backend failures.
        """
        session = await self._backend.sign_in_with_password(email, password)
        self._loaded = True
        self._set_session(session, AuthEvent.SIGNED_IN)
        return session

    async def sign_out(self) -> None:
        """
        End the session.

        Raises:
            BackendError: If the backend failed; the session is kept.
        """
        await self._backend.sign_out()
        self._set_session(None, AuthEvent.SIGNED_OUT)

    def _set_session(self, session: Session | None, event: AuthEvent) -> None:
        self._session = session
        logger.debug("Auth event %s (listeners=%d)", event.value, len(self._listeners))
        for listener in list(self._listeners.values()):
            try:
                listener(event, session)
            except Exception:
                logger.exception("Auth listener failed on %s", event.value)

    def _remove_listener(self, key: int) -> None:
        self._listeners.pop(key, None)


def _change_event(previous: Session | None, current: Session | None) -> AuthEvent:
    if current is None:
        return AuthEvent.SIGNED_OUT
    if previous is not None and previous.identity == current.identity:
        return AuthEvent.TOKEN_REFRESHED
    return AuthEvent.SIGNED_IN
