"""Feed writers: new feedback (Composer) and new comment (Commenter).

Both share one state machine, IDLE → SUBMITTING → IDLE:

- A submit while SUBMITTING is a no-op, so each writer has at most one
  request in flight. Separate writers are independent.
- The identity is resolved through the auth context at write time and is
  the only source of the record's author.
- Backend failures become one error toast and leave the input as typed.
- Success clears the input and awaits the reload callback.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from gctalk.auth.context import AuthContext
from gctalk.auth.session import Identity
from gctalk.backend.base import BackendClient, BackendError
from gctalk.feed import messages
from gctalk.feed.schemas import Category, NewComment, NewFeedback
from gctalk.notifications import Notifier

logger = logging.getLogger(__name__)

ReloadCallback = Callable[[], Awaitable[Any]]


class WriterState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"


class WriteOutcome(str, Enum):
    """Result of one submit call."""

    SUBMITTED = "submitted"
    FAILED = "failed"
    UNAUTHENTICATED = "unauthenticated"
    INVALID = "invalid"
    SKIPPED = "skipped"


class _Writer(ABC):
    """Single-in-flight write with identity resolution and toasts."""

    login_required_message = messages.LOGIN_REQUIRED
    success_message = ""
    failure_message = ""

    def __init__(
        self,
        backend: BackendClient,
        auth: AuthContext,
        notifier: Notifier,
        on_success: ReloadCallback | None = None,
    ) -> None:
        self._backend = backend
        self._auth = auth
        self._notifier = notifier
        self._on_success = on_success
        self._state = WriterState.IDLE

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state is WriterState.SUBMITTING

    async def _submit(self, write: Callable[[Identity], Awaitable[None]]) -> WriteOutcome:
        self._state = WriterState.SUBMITTING
        try:
            identity = await self._auth.resolve_identity()
            if identity is None:
                self._notifier.error(self.login_required_message)
                return WriteOutcome.UNAUTHENTICATED

            try:
                await write(identity)
            except BackendError as e:
                logger.error("%s write failed: %s", type(self).__name__, e, exc_info=True)
                self._notifier.error(self.failure_message)
                return WriteOutcome.FAILED

            self._notifier.success(self.success_message)
            self._reset_input()
            if self._on_success is not None:
                await self._on_success()
            return WriteOutcome.SUBMITTED
        finally:
            self._state = WriterState.IDLE

    @abstractmethod
    def _reset_input(self) -> None:
        """Clear the inputs after a successful write."""


class Composer(_Writer):
    """
    Form for publishing a new feedback entry.

    Attributes:
        category: Selected category value ("" until chosen).
        title: Title input.
        content: Body input.
        is_open: Whether the form is shown.
    """

    success_message = messages.FEEDBACK_PUBLISHED
    failure_message = messages.FEEDBACK_FAILED

    def __init__(
        self,
        backend: BackendClient,
        auth: AuthContext,
        notifier: Notifier,
        on_feedback_added: ReloadCallback | None = None,
    ) -> None:
        super().__init__(backend, auth, notifier, on_feedback_added)
        self.category = ""
        self.title = ""
        self.content = ""
        self.is_open = False

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    @property
    def is_complete(self) -> bool:
        """Whether every required field holds a usable value."""
        return (
            Category.parse(self.category) is not None
            and bool(self.title.strip())
            and bool(self.content.strip())
        )

    async def submit(
        self,
        category: str | None = None,
        title: str | None = None,
        content: str | None = None,
    ) -> WriteOutcome:
        """
        Publish the form. Arguments, when given, replace the inputs first.

        Returns:
            INVALID without contacting the backend if a field is missing.
        """
        if self.busy:
            return WriteOutcome.SKIPPED

        if category is not None:
            self.category = category
        if title is not None:
            self.title = title
        if content is not None:
            self.content = content

        if not self.is_complete:
            logger.debug("Feedback form incomplete, not submitting")
            return WriteOutcome.INVALID

        category_value, title_value, content_value = self.category, self.title, self.content

        async def write(identity: Identity) -> None:
            await self._backend.insert_feedback(
                NewFeedback(
                    author_id=identity.id,
                    category=category_value,
                    title=title_value,
                    content=content_value,
                )
            )

        return await self._submit(write)

    def _reset_input(self) -> None:
        self.is_open = False
        self.category = ""
        self.title = ""
        self.content = ""


class Commenter(_Writer):
    """Comment box bound to one feedback entry."""

    login_required_message = messages.LOGIN_REQUIRED_TO_COMMENT
    success_message = messages.COMMENT_SENT
    failure_message = messages.COMMENT_FAILED

    def __init__(
        self,
        feedback_id: str,
        backend: BackendClient,
        auth: AuthContext,
        notifier: Notifier,
        on_comment_added: ReloadCallback | None = None,
    ) -> None:
        if not feedback_id:
            raise ValueError("feedback_id is required")
        super().__init__(backend, auth, notifier, on_comment_added)
        self.feedback_id = feedback_id
        self.content = ""

    async def submit(self, content: str | None = None) -> WriteOutcome:
        """
        Send the comment. Blank or whitespace-only content is ignored.
        """
        if self.busy:
            return WriteOutcome.SKIPPED

        if content is not None:
            self.content = content

        if not self.content.strip():
            return WriteOutcome.SKIPPED

        text = self.content

        async def write(identity: Identity) -> None:
            await self._backend.insert_comment(
                NewComment(author_id=identity.id, feedback_id=self.feedback_id, content=text)
            )

        return await self._submit(write)

    def _reset_input(self) -> None:
        self.content = ""
