"""Recurring shell-script runner - a task plugin for the host scheduler.

Registered with the database as a task, e.g.::

    CREATE TASK nightly_backup FROM CLASS binrunner.BinCommandRunner
        WITH (30000, 'backup.sh') ON ERROR LOG;

the host builds a ``BinCommandRunner()``, calls ``initialize(helper, 30000,
"backup.sh")`` and then keeps asking it for the next action.

Cycle:

    .. code-block:: text

        ┌──────────────────────── every interval_ms ────────────────────────┐
        │                                                                   │
        │  host: wait delay ─► call @Ping ─► on_cycle_complete(result)      │
        │                                         │                         │
        │        status != SUCCESS ◄──────────────┤                         │
        │        (log error)                      ▼                         │
        │                         <bin_dir>/<script_name> usable?           │
        │                          no: log error   yes: sh -c <path>        │
        │                                               │ stdout ─► drain   │
        │                                               ▼                   │
        │                              exit != 0: log error                 │
        │                              took > 10s: log warning              │
        │                                                                   │
        │  always ─► get_next_action() (same delay, same callback)          │
        └───────────────────────────────────────────────────────────────────┘

``@Ping`` is called only because the host needs *some* procedure call to
hang the callback on; its result is used for nothing but the status check.
"""

from __future__ import annotations

import os
import shlex
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from binrunner.core.errors import (
    BinRunnerError,
    ConfigError,
    RemoteCallError,
    ScriptExecutionError,
    ScriptUnusableError,
    categorize_error,
)
from binrunner.core.logging import get_logger
from binrunner.core.settings import RunnerSettings, get_settings
from binrunner.task.protocol import (
    PING_PROCEDURE,
    ActionResult,
    ScheduledAction,
    TaskHelper,
    TimeUnit,
)
from binrunner.task.stream_consumer import LineSink, StreamConsumer, print_line
from binrunner.task.task_log import ConsoleTaskLog, MessageType, TaskLog, task_log_for

logger = get_logger(__name__)


@dataclass(frozen=True)
class RunnerConfig:
    """Task parameters, fixed for the plugin's lifetime."""

    interval_ms: int
    script_name: str
    task_log: TaskLog


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of one script run."""

    exit_code: int
    duration_ms: int

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


class BinCommandRunner:
    """Runs ``<home>/bin/<script_name>`` every ``interval_ms``.

    Every outcome (host call failure, missing script, non-zero exit, slow
    run, unexpected exception) ends up as a task log message, and every
    cycle ends by scheduling the next one with the same delay.

    Example:
        >>> runner = BinCommandRunner()
        >>> runner.initialize(helper, 30000, "backup.sh")
        >>> action = runner.get_first_scheduled_action()
        >>> action.delay, action.procedure
        (30000, '@Ping')
    """

    NAME = "BinCommandRunner"

    def __init__(
        self,
        *,
        settings: RunnerSettings | None = None,
        output_sink: LineSink = print_line,
        console_stream: TextIO | None = None,
    ) -> None:
        """Create an uninitialized runner.

        The host calls this with no arguments; the keywords exist for
        embedding and tests.

        Args:
            settings: Deployment defaults (bin dir, slow-run threshold).
            output_sink: Receives each line the script prints.
            console_stream: Stream for task messages when there is no host
                helper (default: stdout).
        """
        self._settings = settings or get_settings()
        self._output_sink = output_sink
        self._console_stream = console_stream
        self._config: RunnerConfig | None = None
        self._task_log: TaskLog = ConsoleTaskLog(console_stream)
        logger.debug("runner_created")

    # ------------------------------------------------------------------
    # Host contract
    # ------------------------------------------------------------------

    def initialize(self, helper: TaskHelper | None, interval_ms: int, script_name: str) -> None:
        """Store the task parameters. Called once by the host.

        Args:
            helper: Host helper giving access to the server log, or None.
            interval_ms: Delay between cycles in milliseconds.
            script_name: Script file name inside the bin directory.
        """
        if self._config is not None:
            raise ConfigError(f"{self.NAME} is already initialized")

        task_log = task_log_for(helper, self._console_stream)
        self._config = RunnerConfig(
            interval_ms=interval_ms,
            script_name=script_name,
            task_log=task_log,
        )
        self._task_log = task_log

        self.log(
            MessageType.INFO,
            f"{self.NAME} started with delay/execname of {interval_ms}/{script_name}",
        )

    def get_first_scheduled_action(self) -> ScheduledAction:
        return self.get_next_action()

    def get_next_action(self) -> ScheduledAction:
        """Ping after the configured delay, then come back to us."""
        return ScheduledAction.procedure_call(
            self.config.interval_ms,
            TimeUnit.MILLISECONDS,
            self.on_cycle_complete,
            PING_PROCEDURE,
        )

    def on_cycle_complete(self, result: ActionResult) -> ScheduledAction:
        """Run the script once the ping completes, then re-arm."""
        logger.debug("cycle_started", script=self.config.script_name, status=result.status)
        try:
            if not result.succeeded:
                raise RemoteCallError(result.status, result.status_string)

            script = self.resolve_script()
            outcome = self.run_script(script)
            self._report(script, outcome)
        except BinRunnerError as e:
            logger.debug("cycle_failed", **e.to_dict())
            self.log(MessageType.ERROR, f"{self.NAME}: {e.message}")
        except Exception as e:
            logger.debug("cycle_failed", category=categorize_error(e).value, error=str(e))
            self.log(MessageType.ERROR, f"{self.NAME}: {e}")

        return self.get_next_action()

    # ------------------------------------------------------------------
    # Script execution
    # ------------------------------------------------------------------

    def resolve_script(self) -> Path:
        """Absolute script path, or ScriptUnusableError if it can't be read."""
        script = (self._settings.resolve_bin_dir() / self.config.script_name).absolute()
        if not (script.exists() and os.access(script, os.R_OK)):
            raise ScriptUnusableError(str(script))
        return script

    def run_script(self, script: Path) -> ExecutionResult:
        """Run ``sh -c <script>``, draining stdout, and wait for it to exit."""
        started = time.monotonic()
        try:
            process = subprocess.Popen(
                ["sh", "-c", shlex.quote(str(script))],
                stdout=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise ScriptExecutionError(str(e), cause=e).with_context(path=str(script)) from e

        try:
            StreamConsumer(process.stdout, self._output_sink).start()
        except Exception as e:
            # Nobody would read the pipe; don't leave the child behind
            process.kill()
            process.wait()
            process.stdout.close()
            raise ScriptExecutionError(str(e), cause=e).with_context(path=str(script)) from e

        exit_code = process.wait()

        outcome = ExecutionResult(
            exit_code=exit_code,
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        logger.debug(
            "script_finished",
            path=str(script),
            exit_code=outcome.exit_code,
            duration_ms=outcome.duration_ms,
        )
        return outcome

    def _report(self, script: Path, outcome: ExecutionResult) -> None:
        if not outcome.succeeded:
            self.log(
                MessageType.ERROR,
                f"{self.NAME}: File '{script}' got exit code of {outcome.exit_code}",
            )

        if outcome.duration_ms > self._settings.slow_run_threshold_ms:
            self.log(
                MessageType.WARNING,
                f"{self.NAME}: File '{script}' took {outcome.duration_ms} ms to run",
            )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def log(self, level: MessageType, message: str) -> None:
        """Write a task message to the host log or the console. Never raises."""
        try:
            self._task_log.write(level, message)
        except Exception as e:
            logger.warning("task_log_write_failed", level=level.value, error=str(e))

    @property
    def config(self) -> RunnerConfig:
        if self._config is None:
            raise ConfigError(f"{self.NAME} has not been initialized")
        return self._config

    @property
    def interval_ms(self) -> int:
        """Delay in ms between cycles."""
        return self.config.interval_ms
