"""Core primitives for binrunner: errors, settings and logging."""

from binrunner.core.errors import (
    BinRunnerError,
    ConfigError,
    ErrorCategory,
    RemoteCallError,
    ScriptExecutionError,
    ScriptUnusableError,
    categorize_error,
)
from binrunner.core.logging import configure_logging, get_logger
from binrunner.core.settings import RunnerSettings, clear_settings_cache, get_settings

__all__ = [
    "BinRunnerError",
    "ConfigError",
    "ErrorCategory",
    "RemoteCallError",
    "ScriptExecutionError",
    "ScriptUnusableError",
    "categorize_error",
    "configure_logging",
    "get_logger",
    "RunnerSettings",
    "clear_settings_cache",
    "get_settings",
]
