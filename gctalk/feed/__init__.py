"""Feedback feed: records, loader, writers, and text rendering.

Components:
- Category / Feedback / Comment / Profile: feed records (schemas)
- NewFeedback / NewComment: validated write payloads (schemas)
- FeedConfig: Pydantic settings for the view
- FeedLoader: session gate and wholesale feed refresh (loader)
- Composer / Commenter: single-in-flight writers (writers)

Only the schemas and config are re-exported here; the loader and the
writers depend on the backend package, which itself imports the schemas.
"""

from gctalk.feed.config import FeedConfig
from gctalk.feed.schemas import (
    VALID_CATEGORIES,
    Category,
    Comment,
    Feedback,
    NewComment,
    NewFeedback,
    Profile,
)

__all__ = [
    "Category",
    "Comment",
    "Feedback",
    "FeedConfig",
    "NewComment",
    "NewFeedback",
    "Profile",
    "VALID_CATEGORIES",
]
