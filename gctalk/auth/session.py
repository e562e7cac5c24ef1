"""Session and identity records shared by the backend and the auth context."""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any


class AuthEvent(str, Enum):
    """Kinds of session change delivered to subscribers."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


@dataclass(frozen=True)
class Identity:
    """The authenticated user that writes are attributed to."""

    id: str
    email: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Identity":
        return cls(id=str(data["id"]), email=data.get("email"))

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "email": self.email}


@dataclass(frozen=True)
class Session:
    """Proof that requests come from a specific identity.

    Attributes:
        access_token: Bearer token sent with every request.
        refresh_token: Token exchanged for a new session once expired.
        expires_at: Unix timestamp after which the access token is stale.
        identity: The signed-in user.
    """

    access_token: str
    refresh_token: str
    expires_at: int
    identity: Identity

    def is_expired(self, now: float | None = None, leeway: int = 10) -> bool:
        """Whether the access token is stale (with a few seconds of leeway)."""
        now = time.time() if now is None else now
        return self.expires_at - leeway <= now

    @classmethod
    def from_token_response(cls, data: dict[str, Any]) -> "Session":
        """Build a session from the auth service's token payload."""
        expires_at = data.get("expires_at")
        if expires_at is None:
            expires_at = int(time.time()) + int(data.get("expires_in", 3600))
        return cls(
            access_token=data["access_token"],
            refresh_token=data["refresh_token"],
            expires_at=int(expires_at),
            identity=Identity.from_dict(data["user"]),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Session":
        return cls(
            access_token=data["access_token"],
            refresh_token=data["refresh_token"],
            expires_at=int(data["expires_at"]),
            identity=Identity.from_dict(data["user"]),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at,
            "user": self.identity.to_dict(),
        }
