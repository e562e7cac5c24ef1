"""Backend collaborator: hosted auth + tables.

Components:
- BackendClient: abstract contract used by the feed and the writers
- SupabaseBackend: REST client for the hosted service
- InMemoryBackend: process-local implementation for tests and --mock
- BackendError / AuthenticationError: failure taxonomy
"""

from gctalk.backend.base import AuthenticationError, BackendClient, BackendError
from gctalk.backend.memory import InMemoryBackend
from gctalk.backend.supabase import SupabaseBackend

__all__ = [
    "AuthenticationError",
    "BackendClient",
    "BackendError",
    "InMemoryBackend",
    "SupabaseBackend",
]
