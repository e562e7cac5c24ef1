"""
Backend collaborator interface.

The hosted service owns identity and the three record kinds (profiles,
feedback, comments). Every implementation must honour the same contract:

- reads return fully joined ``Feedback`` entries, newest first
- writes are attributed to the authenticated caller
- every failure surfaces as ``BackendError`` (``AuthenticationError``
  when credentials or tokens are rejected)
"""

from abc import ABC, abstractmethod
from types import TracebackType

from gctalk.auth.session import Identity, Session
from gctalk.feed.schemas import Feedback, NewComment, NewFeedback


class BackendError(Exception):
    """Raised when the hosted backend rejects or fails a request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(BackendError):
    """Raised when credentials or the session token are rejected."""


class BackendClient(ABC):
    """
    Abstract client for the hosted auth + table service.

    Implementations are async context managers so transport resources
    are acquired and released around their use.
    """

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Release transport resources. No-op by default."""

    @abstractmethod
    async def get_session(self) -> Session | None:
        """Return the current session, or None when signed out."""

    @abstractmethod
    async def get_user(self) -> Identity | None:
        """
        Validate the current session with the service.

        Returns:
            The authenticated identity, or None when there is no session.

        Raises:
            AuthenticationError: If the service rejects the session token.
        """

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> Session:
        """Exchange credentials for a new session."""

    @abstractmethod
    async def sign_out(self) -> None:
        """End the current session."""

    @abstractmethod
    async def fetch_feed(self) -> list[Feedback]:
        """
        Fetch every feedback entry with its author and comments.

        Returns:
            Feedback ordered by created_at descending.
        """

    @abstractmethod
    async def insert_feedback(self, feedback: NewFeedback) -> None:
        """Insert one feedback record."""

    @abstractmethod
    async def insert_comment(self, comment: NewComment) -> None:
        """Insert one comment record."""
