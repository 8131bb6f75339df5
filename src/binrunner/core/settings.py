"""
Centralized settings for binrunner.

Manifesto:
    The runner's configuration proper (interval, script name, log handle) is
    handed over by the host at ``initialize`` time and never changes. What
    remains are deployment defaults: where the scripts live, what counts as
    a slow run, how to log. Those are read once from ``BINRUNNER_*``
    environment variables or a ``.env`` file and cached.

Examples:
    >>> from binrunner.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.slow_run_threshold_ms
    10000

Tags:
    binrunner, configuration, settings, pydantic, caching

Doc-Types:
    api-reference
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RunnerSettings(BaseSettings):
    """binrunner configuration.

    All fields can be set via ``BINRUNNER_*`` environment variables (e.g.
    ``BINRUNNER_SLOW_RUN_THRESHOLD_MS=30000``) or through a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="BINRUNNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Schedule ─────────────────────────────────────────────────
    interval_ms: int = Field(default=120000, description="Delay between cycles (ms)")
    script_name: str | None = Field(default=None, description="Script file name inside bin_dir")

    # ── Scripts ──────────────────────────────────────────────────
    bin_dir: Path | None = Field(
        default=None,
        description="Directory holding the scripts (default: <home>/bin)",
    )
    slow_run_threshold_ms: int = Field(default=10000)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    def resolve_bin_dir(self) -> Path:
        """Directory the script name is joined onto."""
        if self.bin_dir is not None:
            return self.bin_dir
        return Path.home() / "bin"


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, RunnerSettings] = {}


def get_settings(*, _force_reload: bool = False) -> RunnerSettings:
    """Load, validate, and cache a :class:`RunnerSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = RunnerSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()
