"""
Task log - where operator-facing task messages go.

A task plugin reports to whoever hosts it. Inside the database that is the
host's ``TaskHelper`` (which writes to the server log). Outside of it there
is no helper, and messages become timestamped lines on standard output.

The choice is made once, by :func:`task_log_for`, when the runner is
initialized. Call sites just call ``task_log.write(level, message)``.

Variants:
    HostTaskLog        -> TaskHelper.log_debug/log_info/log_warning/log_error
    ConsoleTaskLog     -> "yyyy-MM-dd HH:mm:ss:message" on a text stream
    StructlogTaskHelper -> a TaskHelper backed by structlog, used by the
                          local host in place of the database's helper
"""

from __future__ import annotations

import sys
import threading
from datetime import datetime
from enum import Enum
from typing import Any, Protocol, TextIO

from binrunner.core.logging import get_logger
from binrunner.task.protocol import TaskHelper

logger = get_logger(__name__)

CONSOLE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class MessageType(str, Enum):
    """Severity of a task message."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class TaskLog(Protocol):
    """Sink for operator-facing task messages. Must never raise."""

    def write(self, level: MessageType, message: str) -> None: ...


class ConsoleTaskLog:
    """Writes ``<timestamp>:<message>`` lines to a text stream.

    The stream defaults to whatever ``sys.stdout`` is at write time.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._lock = threading.Lock()

    def write(self, level: MessageType, message: str) -> None:
        stream = self._stream or sys.stdout
        line = f"{datetime.now().strftime(CONSOLE_TIMESTAMP_FORMAT)}:{message}"
        try:
            with self._lock:
                print(line, file=stream, flush=True)
        except (OSError, ValueError) as e:
            # Closed or broken stream; the message is dropped, not raised
            logger.warning("task_console_write_failed", level=level.value, error=str(e))


class HostTaskLog:
    """Routes each severity to the matching host helper method."""

    def __init__(self, helper: TaskHelper, fallback: ConsoleTaskLog | None = None) -> None:
        self._helper = helper
        self._fallback = fallback or ConsoleTaskLog()
        self._methods = {
            MessageType.DEBUG: helper.log_debug,
            MessageType.INFO: helper.log_info,
            MessageType.WARNING: helper.log_warning,
            MessageType.ERROR: helper.log_error,
        }

    @property
    def helper(self) -> TaskHelper:
        return self._helper

    def write(self, level: MessageType, message: str) -> None:
        try:
            self._methods[level](message)
        except Exception as e:
            # Keep the message rather than lose it along with the helper
            logger.warning("task_helper_failed", level=level.value, error=str(e))
            self._fallback.write(level, message)


class StructlogTaskHelper:
    """TaskHelper implementation that logs through structlog.

    Example:
        >>> helper = StructlogTaskHelper(task="nightly-backup")
        >>> helper.log_info("BinCommandRunner started")
    """

    def __init__(self, name: str = "binrunner.task", **bound: Any) -> None:
        self._log = get_logger(name).bind(**bound)

    def log_debug(self, message: str) -> None:
        self._log.debug(message)

    def log_info(self, message: str) -> None:
        self._log.info(message)

    def log_warning(self, message: str) -> None:
        self._log.warning(message)

    def log_error(self, message: str) -> None:
        self._log.error(message)


def task_log_for(helper: TaskHelper | None, stream: TextIO | None = None) -> TaskLog:
    """Pick the task log for a (possibly absent) host helper."""
    console = ConsoleTaskLog(stream)
    if helper is None:
        return console
    return HostTaskLog(helper, fallback=console)
