"""Authentication context and session persistence.

Components:
- Identity / Session: records describing the signed-in user
- AuthContext: explicit session holder with a cancellable change stream
- SessionStore: JSON file persistence between CLI runs
"""

from gctalk.auth.session import AuthEvent, Identity, Session
from gctalk.auth.store import SessionStore

__all__ = [
    "AuthEvent",
    "Identity",
    "Session",
    "SessionStore",
]
