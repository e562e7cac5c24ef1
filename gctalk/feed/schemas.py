"""Schema definitions for feed records.

Maps to the hosted ``profiles``, ``feedback`` and ``comments`` tables.
Read-side dataclasses (``Profile``, ``Comment``, ``Feedback``) are built
from the joined rows the feed query returns; write-side payloads
(``NewFeedback``, ``NewComment``) validate before anything is sent.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class Category(str, Enum):
    """Fixed classification of a feedback entry.

    Each member carries its display label and badge color.
    """

    PROFESSORES = ("professores", "Professores", "blue")
    MATERIAS = ("materias", "Matérias", "magenta")
    ATIVIDADES = ("atividades", "Atividades", "green")
    GERAL = ("geral", "Geral", "yellow")

    def __new__(cls, value: str, label: str, color: str) -> "Category":
        member = str.__new__(cls, value)
        member._value_ = value
        member.label = label
        member.color = color
        return member

    @classmethod
    def parse(cls, value: str | None) -> "Category | None":
        """Return the member for a stored value, or None if unknown."""
        try:
            return cls(value)
        except ValueError:
            return None


VALID_CATEGORIES: frozenset[str] = frozenset(c.value for c in Category)


def parse_timestamp(value: Any) -> datetime:
    """Parse a timestamptz value as returned by the REST layer."""
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str):
        # Older interpreters reject the "Z" suffix
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise ValueError(f"Invalid timestamp {value!r}")
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


@dataclass(frozen=True)
class Profile:
    """Display identity of an author.

    Attributes:
        full_name: Name shown on cards and comments.
        class_name: Cohort label (the ``class`` column).
    """

    full_name: str = ""
    class_name: str = ""

    @classmethod
    def from_row(cls, row: dict[str, Any] | None) -> "Profile":
        # A missing join renders as an anonymous author
        if not row:
            return cls()
        return cls(
            full_name=row.get("full_name") or "",
            class_name=row.get("class") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return {"full_name": self.full_name, "class": self.class_name}


@dataclass
class Comment:
    """A comment on a feedback entry."""

    id: str
    content: str
    created_at: datetime
    author: Profile = field(default_factory=Profile)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Comment":
        return cls(
            id=str(row["id"]),
            content=row["content"],
            created_at=parse_timestamp(row["created_at"]),
            author=Profile.from_row(row.get("profiles")),
        )


@dataclass
class Feedback:
    """A feedback entry with its author and comments, as shown in the feed.

    Attributes:
        id: Row identifier.
        title: Short headline.
        content: Free text body.
        category: Stored category value. Kept raw so rows written by other
            clients with an unknown value still load.
        created_at: When the entry was created.
        author: Author profile.
        comments: Comments in the order the query returned them.
    """

    id: str
    title: str
    content: str
    category: str
    created_at: datetime
    author: Profile = field(default_factory=Profile)
    comments: list[Comment] = field(default_factory=list)

    @property
    def category_member(self) -> Category | None:
        return Category.parse(self.category)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Feedback":
        """Build a Feedback from one joined row of the feed query."""
        return cls(
            id=str(row["id"]),
            title=row["title"],
            content=row["content"],
            category=row.get("category") or "",
            created_at=parse_timestamp(row["created_at"]),
            author=Profile.from_row(row.get("profiles")),
            comments=[Comment.from_row(c) for c in row.get("comments") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "category": self.category,
            "created_at": self.created_at.isoformat(),
            "profiles": self.author.to_dict(),
            "comments": [
                {
                    "id": c.id,
                    "content": c.content,
                    "created_at": c.created_at.isoformat(),
                    "profiles": c.author.to_dict(),
                }
                for c in self.comments
            ],
        }


@dataclass(frozen=True)
class NewFeedback:
    """Insert payload for the ``feedback`` table."""

    author_id: str
    category: str
    title: str
    content: str

    def __post_init__(self) -> None:
        if self.category not in VALID_CATEGORIES:
            raise ValueError(
                f"Invalid category {self.category!r}. "
                f"Must be one of: {sorted(VALID_CATEGORIES)}"
            )
        if not self.author_id:
            raise ValueError("author_id is required")

    def to_row(self) -> dict[str, Any]:
        return {
            "user_id": self.author_id,
            "category": self.category,
            "title": self.title,
            "content": self.content,
        }


@dataclass(frozen=True)
class NewComment:
    """Insert payload for the ``comments`` table."""

    author_id: str
    feedback_id: str
    content: str

    def __post_init__(self) -> None:
        if not self.author_id:
            raise ValueError("author_id is required")
        if not self.feedback_id:
            raise ValueError("feedback_id is required")

    def to_row(self) -> dict[str, Any]:
        return {
            "feedback_id": self.feedback_id,
            "user_id": self.author_id,
            "content": self.content,
        }
