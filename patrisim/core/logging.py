"""Logging configuration for patrisim.

Structured logging with structlog on top of the standard library. Console
output for interactive runs, JSON lines for batch runs.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

from patrisim.core.settings import get_settings

LOG_DIR = Path(__file__).parent.parent.parent / "logs"
LOG_FILE = LOG_DIR / "patrisim.log"

_configured: bool = False


def configure_logging(
    level: str | None = None,
    json_output: bool | None = None,
) -> structlog.BoundLogger:
    """Configure structured logging once for the process.

    Args:
        level: Log level name. Defaults to env LOGLEVEL, then the settings.
        json_output: Render JSON lines instead of the console format.
            Defaults to the settings.

    Returns:
        Root structlog logger.
    """
    global _configured

    if _configured:
        return structlog.get_logger()

    settings = get_settings()
    if json_output is None:
        json_output = settings.json_logs
    log_level = (level or os.environ.get("LOGLEVEL") or settings.log_level).upper()
    numeric_level = getattr(logging, log_level, logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    # no log file under pytest
    if not os.environ.get("PYTEST_CURRENT_TEST"):
        try:
            LOG_DIR.mkdir(exist_ok=True)
            handlers.append(
                logging.handlers.RotatingFileHandler(
                    str(LOG_FILE), maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
                )
            )
        except OSError:
            sys.stderr.write(f"patrisim: cannot write log file in {LOG_DIR}\n")

    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        handlers=handlers,
        force=True,
    )

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _configured = True
    return structlog.get_logger()


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger, configuring logging lazily on first use.

    Args:
        name: Optional logger name (usually the module name).
    """
    if not _configured:
        configure_logging()

    logger = structlog.get_logger()
    if name:
        return logger.bind(logger_name=name)
    return logger


def bind_simulation_year(year: int) -> None:
    """Attach the simulated year to every log event of the current context."""
    structlog.contextvars.bind_contextvars(year=year)


def clear_simulation_context() -> None:
    """Remove the simulated year, leaving anything else the caller bound."""
    structlog.contextvars.unbind_contextvars("year")
