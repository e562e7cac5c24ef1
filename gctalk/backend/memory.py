"""
In-process backend for testing and development.

Keeps users, profiles, feedback and comments in dictionaries and answers
the same contract as the hosted service, including the row-level rule
that writes must be attributed to the signed-in user. Useful for:
- Exercising the feed without credentials (``gctalk --mock``)
- Tests that need real ordering and joins
- Injecting backend failures per operation
"""

import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from gctalk.auth.session import Identity, Session
from gctalk.backend.base import AuthenticationError, BackendClient, BackendError
from gctalk.feed.schemas import Comment, Feedback, NewComment, NewFeedback, Profile

logger = logging.getLogger(__name__)

SESSION_TTL_SECONDS = 3600

SAMPLE_USERS = [
    ("ana@gc.edu.br", "Ana Silva", "9A"),
    ("bruno@gc.edu.br", "Bruno Costa", "2B"),
    ("carla@gc.edu.br", "Carla Souza", "3A"),
]

SAMPLE_FEEDBACK = [
    ("professores", "Aulas de história", "As aulas de história ficaram muito mais dinâmicas este ano."),
    ("atividades", "Feira de ciências", "A feira de ciências foi o ponto alto do semestre."),
    ("geral", "Festa junina", "Organização excelente, só faltou mais espaço para as barracas."),
]

SAMPLE_COMMENTS = [
    (0, 1, "Concordo, os debates ajudaram muito."),
    (1, 2, "Queremos mais projetos assim!"),
]


@dataclass
class _User:
    identity: Identity
    password: str
    profile: Profile


@dataclass
class _FeedbackRow:
    id: str
    user_id: str
    category: str
    title: str
    content: str
    created_at: datetime


@dataclass
class _CommentRow:
    id: str
    feedback_id: str
    user_id: str
    content: str
    created_at: datetime


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _Clock:
    """Strictly increasing timestamps so inserts never tie."""

    now: Callable[[], datetime] = _utc_now
    _last: datetime | None = field(default=None, repr=False)

    def __call__(self) -> datetime:
        moment = self.now()
        if self._last is not None and moment <= self._last:
            moment = self._last + timedelta(microseconds=1)
        self._last = moment
        return moment


class InMemoryBackend(BackendClient):
    """
    ``BackendClient`` backed by process memory.

    Attributes:
        calls: Names of the contract operations invoked, in order.
    """

    OPERATIONS = frozenset({
        "get_session",
        "get_user",
        "sign_in_with_password",
        "sign_out",
        "fetch_feed",
        "insert_feedback",
        "insert_comment",
    })

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = _Clock(now=clock or _utc_now)
        self._users: dict[str, _User] = {}
        self._feedback: dict[str, _FeedbackRow] = {}
        self._comments: list[_CommentRow] = []
        self._session: Session | None = None
        self._failures: dict[str, BackendError] = {}
        self.calls: list[str] = []

    # ── Test and demo helpers ───────────────────────────

    def add_user(
        self,
        email: str,
        password: str,
        full_name: str,
        class_name: str,
        user_id: str | None = None,
    ) -> Identity:
        """Register a user together with their profile row."""
        identity = Identity(id=user_id or str(uuid.uuid4()), email=email)
        self._users[email] = _User(
            identity=identity,
            password=password,
            profile=Profile(full_name=full_name, class_name=class_name),
        )
        return identity

    def start_session(self, identity: Identity) -> Session:
        """Sign ``identity`` in without a password round trip."""
        self._session = self._new_session(identity)
        return self._session

    def end_session(self) -> None:
        """Drop the session as if it expired on the service side."""
        self._session = None

    def fail(self, operation: str, error: BackendError | None = None) -> None:
        """Make every later call to ``operation`` raise until ``recover``."""
        if operation not in self.OPERATIONS:
            raise ValueError(f"Unknown operation {operation!r}")
        self._failures[operation] = error or BackendError(f"{operation} unavailable", status_code=503)

    def recover(self, operation: str | None = None) -> None:
        """Clear injected failures for one operation, or all of them."""
        if operation is None:
            self._failures.clear()
        else:
            self._failures.pop(operation, None)

    def store_raw_feedback(
        self,
        author: Identity,
        category: str,
        title: str,
        content: str,
    ) -> str:
        """Store a row without category validation, as another client might."""
        row = _FeedbackRow(
            id=str(uuid.uuid4()),
            user_id=author.id,
            category=category,
            title=title,
            content=content,
            created_at=self._clock(),
        )
        self._feedback[row.id] = row
        return row.id

    @classmethod
    def with_sample_data(cls, password: str = "gctalk") -> "InMemoryBackend":
        """A backend seeded with users, feedback and comments, first user signed in."""
        backend = cls()
        identities = [
            backend.add_user(email, password, name, class_name)
            for email, name, class_name in SAMPLE_USERS
        ]
        feedback_ids = [
            backend.store_raw_feedback(identities[i % len(identities)], category, title, content)
            for i, (category, title, content) in enumerate(SAMPLE_FEEDBACK)
        ]
        for feedback_index, user_index, content in SAMPLE_COMMENTS:
            backend._comments.append(
                _CommentRow(
                    id=str(uuid.uuid4()),
                    feedback_id=feedback_ids[feedback_index],
                    user_id=identities[user_index].id,
                    content=content,
                    created_at=backend._clock(),
                )
            )
        backend.start_session(identities[0])
        return backend

    # ── Contract ────────────────────────────────────────

    async def get_session(self) -> Session | None:
        self._enter("get_session")
        return self._session

    async def get_user(self) -> Identity | None:
        try:
            self._enter("get_user")
        except AuthenticationError:
            self._session = None
            raise
        if self._session is None:
            return None
        return self._session.identity

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        self._enter("sign_in_with_password")
        user = self._users.get(email)
        if user is None or user.password != password:
            raise AuthenticationError("Invalid login credentials", status_code=400)
        self._session = self._new_session(user.identity)
        logger.info("Signed in as %s", user.identity.id)
        return self._session

    async def sign_out(self) -> None:
        try:
            self._enter("sign_out")
        except AuthenticationError:
            logger.info("Logout rejected, dropping session")
        self._session = None

    async def fetch_feed(self) -> list[Feedback]:
        self._enter("fetch_feed")
        comments_by_feedback: dict[str, list[Comment]] = {}
        for row in self._comments:
            comments_by_feedback.setdefault(row.feedback_id, []).append(
                Comment(
                    id=row.id,
                    content=row.content,
                    created_at=row.created_at,
                    author=self._profile(row.user_id),
                )
            )

        rows = sorted(self._feedback.values(), key=lambda r: r.created_at, reverse=True)
        return [
            Feedback(
                id=row.id,
                title=row.title,
                content=row.content,
                category=row.category,
                created_at=row.created_at,
                author=self._profile(row.user_id),
                comments=comments_by_feedback.get(row.id, []),
            )
            for row in rows
        ]

    async def insert_feedback(self, feedback: NewFeedback) -> None:
        self._enter("insert_feedback")
        self._check_author(feedback.author_id)
        self.store_raw_feedback(
            Identity(id=feedback.author_id),
            feedback.category,
            feedback.title,
            feedback.content,
        )

    async def insert_comment(self, comment: NewComment) -> None:
        self._enter("insert_comment")
        self._check_author(comment.author_id)
        if comment.feedback_id not in self._feedback:
            raise BackendError(
                f"Feedback {comment.feedback_id!r} does not exist", status_code=409
            )
        self._comments.append(
            _CommentRow(
                id=str(uuid.uuid4()),
                feedback_id=comment.feedback_id,
                user_id=comment.author_id,
                content=comment.content,
                created_at=self._clock(),
            )
        )

    # ── Internals ───────────────────────────────────────

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        error = self._failures.get(operation)
        if error is not None:
            raise error

    def _check_author(self, author_id: str) -> None:
        if self._session is None:
            raise AuthenticationError("Not authenticated", status_code=401)
        if self._session.identity.id != author_id:
            raise BackendError("Row violates row-level security policy", status_code=403)

    def _profile(self, user_id: str) -> Profile:
        for user in self._users.values():
            if user.identity.id == user_id:
                return user.profile
        return Profile()

    def _new_session(self, identity: Identity) -> Session:
        return Session(
            access_token=uuid.uuid4().hex,
            refresh_token=uuid.uuid4().hex,
            expires_at=int(time.time()) + SESSION_TTL_SECONDS,
            identity=identity,
        )
