"""
Structured error types for binrunner.

Every failure the script runner can meet inside a cycle is represented by a
typed error carrying a category and context. The runner raises these inside
its cycle handler and converts them into task log entries, so none of them
ever reaches the host scheduler.

Manifesto:
    - **Typed errors:** Each failure mode of a cycle has its own class
    - **Rich context:** Errors carry the script path, exit code or host status
    - **Error chaining:** Wrapped OS errors are preserved as ``cause``
    - **Absorbed locally:** The cycle handler never lets one escape

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                      BinRunnerError                          │
        │          (category, retryable, context, cause)               │
        ├─────────────────────────────────────────────────────────────┤
        │  RemoteCallError       ScriptUnusableError                   │
        │  (REMOTE_CALL)         (SCRIPT)                              │
        │                                                              │
        │  ScriptExecutionError  ConfigError                           │
        │  (PROCESS)             (CONFIG)                              │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = ScriptUnusableError("/home/volt/bin/missing.sh")
    >>> error.category
    <ErrorCategory.SCRIPT: 'SCRIPT'>
    >>> error.to_dict()["context"]["path"]
    '/home/volt/bin/missing.sh'

Tags:
    error-handling, exception-hierarchy, error-context, binrunner

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Error categories used for classification in structured logs.

    Attributes:
        REMOTE_CALL: The host's no-op procedure call did not succeed
        SCRIPT: The script could not be located or read
        PROCESS: Spawning or waiting on the child process failed
        CONFIG: Missing or invalid settings
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    REMOTE_CALL = "REMOTE_CALL"
    SCRIPT = "SCRIPT"
    PROCESS = "PROCESS"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


class BinRunnerError(Exception):
    """
    Base exception for all binrunner errors.

    Subclasses set ``default_category`` and ``default_retryable``. Context is
    a plain dict of metadata, added at creation or later with
    :meth:`with_context`.

    Examples:
        >>> error = BinRunnerError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(script="backup.sh").context["script"]
        'backup.sh'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    # Every cycle is retried identically by the next schedule
    default_retryable: bool = True

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context: dict[str, Any] = dict(context or {})
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> BinRunnerError:
        """Add context to this error (fluent API)."""
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if self.context:
            result["context"] = dict(self.context)
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class RemoteCallError(BinRunnerError):
    """The no-op procedure call reported a non-success status.

    The message is the host's status string, unchanged.
    """

    default_category = ErrorCategory.REMOTE_CALL

    def __init__(self, status: int, status_string: str, **kwargs: Any):
        self.status = status
        self.status_string = status_string
        super().__init__(status_string, **kwargs)
        self.context.setdefault("status", status)


class ScriptUnusableError(BinRunnerError):
    """Resolved script path is missing or not readable."""

    default_category = ErrorCategory.SCRIPT

    def __init__(self, path: str, message: str | None = None, **kwargs: Any):
        self.path = path
        super().__init__(message or f"File '{path}' not usable", **kwargs)
        self.context.setdefault("path", path)


class ScriptExecutionError(BinRunnerError):
    """Spawning, draining or waiting on the child process failed."""

    default_category = ErrorCategory.PROCESS


class ConfigError(BinRunnerError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, BinRunnerError):
        return error.category
    if isinstance(error, (FileNotFoundError, PermissionError, IsADirectoryError)):
        return ErrorCategory.SCRIPT
    if isinstance(error, (OSError, InterruptedError)):
        return ErrorCategory.PROCESS
    if isinstance(error, (ValueError, TypeError)):
        return ErrorCategory.CONFIG
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "BinRunnerError",
    "RemoteCallError",
    "ScriptUnusableError",
    "ScriptExecutionError",
    "ConfigError",
    "categorize_error",
]
