"""Host task-scheduler contract.

┌──────────────────────────────────────────────────────────────────────────────┐
│  HOST TASK CONTRACT                                                           │
│                                                                               │
│  The database host owns the timer. A task plugin only describes WHAT to do   │
│  next and WHEN; the host does it and reports back.                           │
│                                                                               │
│   ┌──────────────┐  get_first_scheduled_action()  ┌──────────────────┐       │
│   │   Host       │ ─────────────────────────────► │  ActionScheduler │       │
│   │  scheduler   │ ◄───────────────────────────── │  (plugin)        │       │
│   │              │        ScheduledAction          │                  │       │
│   │  wait delay  │                                 │                  │       │
│   │  call proc   │      callback(ActionResult)     │                  │       │
│   │              │ ─────────────────────────────► │                  │       │
│   │              │ ◄───────────────────────────── │                  │       │
│   └──────────────┘     next ScheduledAction        └──────────────────┘       │
│                                                                               │
│  The host invokes a callback at most once per action and never runs two      │
│  callbacks of the same plugin concurrently.                                  │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Protocol, runtime_checkable

PING_PROCEDURE = "@Ping"


class ClientStatus(IntEnum):
    """Status codes a host reports for a procedure call."""

    SUCCESS = 1
    USER_ABORT = -1
    GRACEFUL_FAILURE = -2
    UNEXPECTED_FAILURE = -3
    CONNECTION_LOST = -4
    SERVER_UNAVAILABLE = -5
    RESPONSE_UNKNOWN = -9


class TimeUnit(Enum):
    """Unit a ScheduledAction delay is expressed in."""

    MILLISECONDS = 1
    SECONDS = 1000
    MINUTES = 60 * 1000
    HOURS = 60 * 60 * 1000

    def to_millis(self, amount: int | float) -> float:
        return amount * self.value


@dataclass(frozen=True)
class ClientResponse:
    """Response to a procedure call as delivered by the host."""

    status: int
    status_string: str = ""


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a ScheduledAction, handed to its callback."""

    response: ClientResponse
    procedure: str | None = None
    params: tuple[Any, ...] = ()

    @property
    def status(self) -> int:
        return self.response.status

    @property
    def status_string(self) -> str:
        return self.response.status_string

    @property
    def succeeded(self) -> bool:
        return self.response.status == ClientStatus.SUCCESS


ActionCallback = Callable[[ActionResult], "ScheduledAction | None"]


@dataclass(frozen=True)
class ScheduledAction:
    """What the host should do after how long, and what to call when done.

    Example:
        >>> action = ScheduledAction.procedure_call(
        ...     30000, TimeUnit.MILLISECONDS, my_callback, "@Ping"
        ... )
        >>> action.delay_ms
        30000
    """

    delay: int
    time_unit: TimeUnit
    callback: ActionCallback
    procedure: str
    params: tuple[Any, ...] = field(default_factory=tuple)

    @classmethod
    def procedure_call(
        cls,
        delay: int,
        time_unit: TimeUnit,
        callback: ActionCallback,
        procedure: str,
        *params: Any,
    ) -> ScheduledAction:
        """Schedule a procedure call and a callback for its result."""
        return cls(
            delay=delay,
            time_unit=time_unit,
            callback=callback,
            procedure=procedure,
            params=tuple(params),
        )

    @property
    def delay_ms(self) -> float:
        return self.time_unit.to_millis(self.delay)


@runtime_checkable
class TaskHelper(Protocol):
    """Logging facilities the host hands to a task plugin."""

    def log_debug(self, message: str) -> None: ...

    def log_info(self, message: str) -> None: ...

    def log_warning(self, message: str) -> None: ...

    def log_error(self, message: str) -> None: ...


@runtime_checkable
class ActionScheduler(Protocol):
    """A task plugin the host can drive.

    The host builds it with no arguments, calls ``initialize`` once with its
    helper and the task parameters, then asks for the first action.
    """

    def initialize(self, helper: TaskHelper | None, *args: Any) -> None: ...

    def get_first_scheduled_action(self) -> ScheduledAction: ...
