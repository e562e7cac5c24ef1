"""Feed view configuration.

All settings can be overridden via ``FEED_*`` environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeedConfig(BaseSettings):
    """Configuration for the feed view."""

    model_config = SettingsConfigDict(
        env_prefix="FEED_",
        case_sensitive=False,
        extra="ignore",
    )

    sign_in_route: str = Field(
        default="/auth",
        min_length=1,
        description="Where the view sends users without a session",
    )
    show_comments: bool = Field(
        default=False,
        description="Expand comment threads when rendering cards",
    )
