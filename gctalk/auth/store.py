"""File-backed persistence for the signed-in session.

Keeps the session between CLI invocations, the way a browser client
keeps it in local storage.
"""

import json
import logging
from pathlib import Path

from gctalk.auth.session import Session

logger = logging.getLogger(__name__)


class SessionStore:
    """Reads and writes one session as JSON at ``path``."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Session | None:
        """Return the stored session, or None if absent or unreadable."""
        if not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return Session.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self._path, e)
            return None

    def save(self, session: Session) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(session.to_dict()), encoding="utf-8")
        # Tokens are credentials
        self._path.chmod(0o600)

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
