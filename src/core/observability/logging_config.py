"""
Logging configuration — central setup for the build CLI.

Called once at startup by main.py.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

The console format grows with verbosity; the optional file sink
(THEMEBUILD_LOG_FILE / THEMEBUILD_LOG_FILE_LEVEL) always gets full detail.

In watch mode many generations share one log, so every line above
WARNING verbosity carries the generation it belongs to (``g3``).  The
pipeline publishes it through ``set_generation()``; ``g0`` is "before the
first generation" (asset copy, startup).
"""

from __future__ import annotations

import contextvars
import logging
import sys

_generation: contextvars.ContextVar[int] = contextvars.ContextVar("generation", default=0)

_DETAIL = "%(asctime)s g%(generation)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"

# (format, datefmt) for the console, keyed by the most verbose level it covers
_CONSOLE_FORMATS: dict[int, tuple[str, str | None]] = {
    logging.DEBUG: (_DETAIL, "%H:%M:%S"),
    logging.INFO: ("%(asctime)s g%(generation)s [%(name)s] %(message)s", "%H:%M:%S"),
    logging.CRITICAL: ("%(message)s", None),
}
_FILE_FORMAT = (_DETAIL, "%Y-%m-%d %H:%M:%S")

# Chatter about subprocess transports at DEBUG
_NOISY_LOGGERS = ("asyncio",)


def set_generation(generation: int) -> None:
    """Tag subsequent log records (in this context) with ``generation``."""
    _generation.set(generation)


class GenerationFilter(logging.Filter):
    """Attach the current build generation to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.generation = _generation.get()
        return True


def _console_format(level: int) -> tuple[str, str | None]:
    for ceiling in sorted(_CONSOLE_FORMATS):
        if level <= ceiling:
            return _CONSOLE_FORMATS[ceiling]
    return _CONSOLE_FORMATS[logging.CRITICAL]


def _handler(handler: logging.Handler, level: int, fmt: tuple[str, str | None]) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt[0], datefmt=fmt[1]))
    handler.addFilter(GenerationFilter())
    return handler


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to WARNING.
        log_file: Optional path to a log file.
        log_file_level: Level for the log file; defaults to ``level``.
        quiet_third_party: Keep noisy loggers at WARNING unless the
            console is at DEBUG.
    """
    console_level = _parse_level(level)
    handlers = [_handler(logging.StreamHandler(sys.stderr), console_level, _console_format(console_level))]

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handlers.append(_handler(logging.FileHandler(log_file, encoding="utf-8"), file_level, _FILE_FORMAT))

    root = logging.getLogger()
    root.handlers[:] = handlers
    # The root must let through whatever the most verbose sink wants
    root.setLevel(min(h.level for h in handlers))

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Level name → numeric constant, WARNING when unknown."""
    numeric = logging.getLevelName(level.upper()) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING
