"""
Logging configuration.

Provides a single entry point for configuring structured logging with
structlog. Configuration is read from arguments or from settings:
- BINRUNNER_LOG_LEVEL: DEBUG | INFO | WARNING | ERROR (default: INFO)
- BINRUNNER_LOG_FORMAT: json | console (default: console)

This is the runner's own diagnostic channel. Messages meant for the task
operator travel through a ``TaskLog`` (see ``binrunner.task.task_log``).

Usage:
    from binrunner.core.logging import configure_logging, get_logger
    configure_logging()

    log = get_logger(__name__)
    log.debug("cycle_started", script="backup.sh")
"""

import logging
import sys
from typing import Any, Literal

import structlog
from structlog.types import Processor

from binrunner.core.settings import get_settings

# Track if logging has been configured
_configured = False


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None,
    format: Literal["json", "console"] | None = None,
    force: bool = False,
) -> None:
    """
    Configure structured logging for the application.

    Should be called once at startup. Subsequent calls are no-ops unless
    force=True.

    Args:
        level: Log level (overrides BINRUNNER_LOG_LEVEL)
        format: Output format (overrides BINRUNNER_LOG_FORMAT)
        force: Reconfigure even if already configured
    """
    global _configured

    if _configured and not force:
        return

    settings = get_settings()
    log_level = (level or settings.log_level).upper()
    log_format = (format or settings.log_format).lower()

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        # UTC ISO-8601 timestamps
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
        structlog.processors.StackInfoRenderer(),
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Configure stdlib logging to match
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level),
        force=True,
    )
    logging.getLogger("binrunner").setLevel(getattr(logging, log_level))

    _configured = True


def get_logger(name: str | None = None) -> Any:
    """
    Get a structured logger.

    Args:
        name: Logger name (typically __name__)
    """
    return structlog.get_logger(name)


def is_debug_enabled() -> bool:
    """Check if DEBUG level logging is enabled."""
    return logging.getLogger("binrunner").isEnabledFor(logging.DEBUG)


def is_configured() -> bool:
    """Check if logging has been configured."""
    return _configured
