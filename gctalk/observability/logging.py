"""
Logging for the gctalk CLI.

Command output (the feed, toasts) goes to stdout; log lines go to stderr
so they never mix with what a user pipes or reads. Production runs emit
one JSON object per line.
"""

import logging
import sys

import structlog
from structlog.types import Processor

from gctalk.config.settings import get_settings

_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


def _renderer(production: bool) -> list[Processor]:
    if production:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def setup_logging(level: str | None = None) -> None:
    """
    Configure structlog and stdlib logging for one CLI run.

    Args:
        level: Overrides LOG_LEVEL (``--debug`` passes "DEBUG").
    """
    settings = get_settings()
    level = level or settings.log_level

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            *_renderer(settings.is_production),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=getattr(logging, level))
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**kwargs) -> None:
    """Attach fields (e.g. the running command) to every later log line."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
