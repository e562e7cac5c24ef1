"""
Transient user notifications (toasts).

The feed and the writers report every outcome the user should see
through a ``Notifier``. Toasts are recorded in order, logged, and passed
to an optional sink (the CLI prints them).
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

import structlog

logger = structlog.get_logger(__name__)


class ToastLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Toast:
    """One transient notification."""

    level: ToastLevel
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


ToastSink = Callable[[Toast], None]


class Notifier:
    """Collects toasts and forwards them to a sink."""

    def __init__(self, sink: ToastSink | None = None) -> None:
        self._sink = sink
        self._toasts: list[Toast] = []

    @property
    def toasts(self) -> list[Toast]:
        return list(self._toasts)

    @property
    def messages(self) -> list[str]:
        return [t.message for t in self._toasts]

    def success(self, message: str) -> Toast:
        return self._push(ToastLevel.SUCCESS, message)

    def error(self, message: str) -> Toast:
        return self._push(ToastLevel.ERROR, message)

    def clear(self) -> None:
        self._toasts.clear()

    def _push(self, level: ToastLevel, message: str) -> Toast:
        toast = Toast(level=level, message=message)
        self._toasts.append(toast)
        logger.info("Toast shown", toast_level=level.value, toast=message)
        if self._sink is not None:
            self._sink(toast)
        return toast
