"""Local stand-in for the database task host.

Drives an ``ActionScheduler`` the way the database would, so a task plugin
can run (and be tested end to end) without a server.

┌──────────────────────────────────────────────────────────────────────────────┐
│  LOCAL TASK HOST                                                              │
│                                                                               │
│   start(scheduler, *task_args)                                               │
│      │  scheduler.initialize(StructlogTaskHelper(), *task_args)              │
│      │  action = scheduler.get_first_scheduled_action()                      │
│      ▼                                                                        │
│   ┌─────────────────────────────────────────────────────────┐                │
│   │              Daemon Thread (loop)                       │                │
│   │                                                         │                │
│   │   while not stop_event.wait(action.delay_ms / 1000):    │                │
│   │       response = procedures[action.procedure](*params)  │                │
│   │       action = action.callback(ActionResult(...))       │                │
│   │       if action is None: break                          │                │
│   └─────────────────────────────────────────────────────────┘                │
│                                                                               │
│   stop()  ─►  stop_event.set(); thread.join(timeout=5.0)                     │
│                                                                               │
│  Like the real host: one action live at a time, a callback runs at most     │
│  once, never two callbacks of one plugin at the same time.                  │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from binrunner.core.errors import ConfigError
from binrunner.core.logging import configure_logging, get_logger
from binrunner.core.settings import get_settings
from binrunner.task.protocol import (
    PING_PROCEDURE,
    ActionResult,
    ActionScheduler,
    ClientResponse,
    ClientStatus,
    ScheduledAction,
    TaskHelper,
)
from binrunner.task.task_log import StructlogTaskHelper

logger = get_logger(__name__)

Procedure = Callable[..., ClientResponse]


def ping() -> ClientResponse:
    return ClientResponse(status=ClientStatus.SUCCESS)


class LocalTaskHost:
    """Threading-based host for a single task plugin.

    Example:
        >>> host = LocalTaskHost()
        >>> host.start(BinCommandRunner(), 30000, "backup.sh")
        >>> # ... later ...
        >>> host.stop()
    """

    name = "local"

    def __init__(self, helper: TaskHelper | None = None) -> None:
        self._helper = helper
        self._procedures: dict[str, Procedure] = {PING_PROCEDURE: ping}
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._action_count = 0
        self._last_action: datetime | None = None
        self._interval_ms: float | None = None
        self._started = False
        self._lock = threading.Lock()

    def procedure(self, name: str) -> Callable[[Procedure], Procedure]:
        """Register a stub procedure under ``name``.

        Example:
            >>> @host.procedure("@SystemInformation")
            ... def sysinfo():
            ...     return ClientResponse(ClientStatus.SUCCESS)
        """

        def register(fn: Procedure) -> Procedure:
            self._procedures[name] = fn
            return fn

        return register

    def start(self, scheduler: ActionScheduler, *task_args: Any) -> None:
        """Initialize the plugin and start driving it on a daemon thread.

        Args:
            scheduler: A freshly constructed task plugin.
            *task_args: Task parameters passed to ``initialize`` after the helper.
                Without them, ``interval_ms`` and ``script_name`` come from
                settings (``BINRUNNER_INTERVAL_MS``, ``BINRUNNER_SCRIPT_NAME``).
        """
        configure_logging()

        if self._started:
            logger.warning("local_host_already_started")
            return

        if not isinstance(scheduler, ActionScheduler):
            raise ConfigError(f"{type(scheduler).__name__} is not an ActionScheduler")

        if not task_args:
            settings = get_settings()
            if settings.script_name is None:
                raise ConfigError("No task arguments given and BINRUNNER_SCRIPT_NAME is not set")
            task_args = (settings.interval_ms, settings.script_name)

        helper = self._helper or StructlogTaskHelper(task=type(scheduler).__name__)
        scheduler.initialize(helper, *task_args)
        first = scheduler.get_first_scheduled_action()
        self._interval_ms = first.delay_ms
        self._stop_event.clear()

        self._thread = threading.Thread(
            target=self._loop, args=(first,), daemon=True, name="binrunner-host",
        )
        self._thread.start()
        self._started = True

    def _loop(self, action: ScheduledAction | None) -> None:
        logger.info("local_host_started", interval_ms=self._interval_ms)
        while action is not None and not self._stop_event.wait(action.delay_ms / 1000):
            with self._lock:
                self._action_count += 1
                self._last_action = datetime.now(UTC)

            result = self.call_procedure(action.procedure, *action.params)
            try:
                action = action.callback(result)
            except Exception as e:
                logger.exception("task_callback_failed", error=str(e))
                break

            if action is None:
                logger.warning("task_returned_no_action")

        logger.info("local_host_stopped", action_count=self._action_count)

    def call_procedure(self, name: str, *params: Any) -> ActionResult:
        """Invoke a registered procedure the way the host would."""
        fn = self._procedures.get(name)
        if fn is None:
            response = ClientResponse(
                status=ClientStatus.UNEXPECTED_FAILURE,
                status_string=f"Procedure {name} was not found",
            )
        else:
            try:
                response = fn(*params)
            except Exception as e:
                response = ClientResponse(
                    status=ClientStatus.UNEXPECTED_FAILURE,
                    status_string=f"Procedure {name} failed: {e}",
                )
        return ActionResult(response=response, procedure=name, params=tuple(params))

    def stop(self) -> None:
        """Stop the loop, waiting up to 5 seconds for a running callback."""
        if not self._started:
            return

        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=5.0)
            if self._thread.is_alive():
                logger.warning("local_host_thread_did_not_stop")

        self._started = False

    def health(self) -> dict[str, Any]:
        return {
            "healthy": self.is_running,
            "host": self.name,
            "action_count": self._action_count,
            "last_action": self._last_action.isoformat() if self._last_action else None,
            "interval_ms": self._interval_ms,
        }

    @property
    def is_running(self) -> bool:
        return self._started and self._thread is not None and self._thread.is_alive()

    @property
    def action_count(self) -> int:
        return self._action_count

    @property
    def last_action(self) -> datetime | None:
        return self._last_action
