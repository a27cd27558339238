from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

_LOGGING_CONFIGURED = False
_STDERR_HANDLER: logging.Handler | None = None


def _make_handler(filename: str | Path | None) -> logging.Handler:
    if filename:
        return logging.FileHandler(os.path.abspath(filename), encoding="utf-8")  # noqa: PTH100
    return logging.StreamHandler(sys.stderr)


def setup_logging(filename: str | Path | None = None, level: int = logging.INFO) -> structlog.BoundLogger:
    """Set up structured logging for codefence.

    The module-level logger is created at import time with a stderr handler.
    Calling again with a filename (``--log-file``) swaps that stderr handler
    for a file handler; calling with a level adjusts the threshold of the
    root logger.

    Args:
        filename: Optional path to a log file. If None, logs go to stderr.
        level: Minimum stdlib level to emit.

    Returns:
        A structlog logger named "codefence".
    """
    global _LOGGING_CONFIGURED, _STDERR_HANDLER  # noqa: PLW0603
    root = logging.getLogger()
    if not _LOGGING_CONFIGURED:
        handler = _make_handler(filename)
        if not filename:
            _STDERR_HANDLER = handler
        logging.basicConfig(level=level, handlers=[handler], format="%(message)s")
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_CONFIGURED = True
    else:
        root.setLevel(level)
        target = os.path.abspath(filename) if filename else None  # noqa: PTH100
        if target and all(getattr(h, "baseFilename", None) != target for h in root.handlers):
            root.addHandler(_make_handler(target))
        if target and _STDERR_HANDLER in root.handlers:
            root.removeHandler(_STDERR_HANDLER)

    return structlog.get_logger("codefence")


logger = setup_logging()
