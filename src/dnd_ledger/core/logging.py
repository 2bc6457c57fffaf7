"""Structured logging for the D&D 5E character ledger.

The ledger logs through structlog. Library code only asks for loggers;
an application embedding the ledger calls ``configure_logging`` once,
usually with its ``Settings``, to choose level, renderer and log file.

Example:
    >>> from dnd_ledger.core.logging import configure_logging, get_logger
    >>> configure_logging()  # level, JSON and log file from settings
    >>> logger = get_logger(__name__)
    >>> logger.info("Snapshot composed", character_id="c-1", total_level=5)
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.types import Processor

from dnd_ledger.core.config import Settings, get_settings


if TYPE_CHECKING:
    from pathlib import Path

    from structlog.types import EventDict, WrappedLogger


STDLIB_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class LedgerContext:
    """Processor stamping every entry with the package and its version."""

    def __init__(self, version: str) -> None:
        self.version = version

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app", "dnd_ledger")
        event_dict.setdefault("version", self.version)
        return event_dict


def configure_logging(
    settings: Settings | None = None,
    *,
    level: str | None = None,
    json_format: bool | None = None,
    log_file: str | Path | None = None,
) -> None:
    """Configure structlog and the root stdlib logger.

    Keyword arguments override the matching settings field.

    Args:
        settings: Application settings; loaded with ``get_settings`` if omitted.
        level: Logging level name, e.g. ``"DEBUG"``.
        json_format: Render JSON lines instead of console output.
        log_file: Mirror stdlib records (sqlite3 and other libraries) to this file.
    """
    settings = settings or get_settings()
    level = level or settings.log_level
    json_format = settings.json_logs if json_format is None else json_format
    log_file = log_file or settings.log_file
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    processors: list[Processor] = [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        LedgerContext(settings.app_version),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_format:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=settings.debug))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format=STDLIB_FORMAT, level=numeric_level, stream=sys.stdout, force=True)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(STDLIB_FORMAT))
        logging.getLogger().addHandler(file_handler)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structlog logger, typically with ``__name__``."""
    return structlog.get_logger(name)


__all__ = [
    "LedgerContext",
    "configure_logging",
    "get_logger",
]
