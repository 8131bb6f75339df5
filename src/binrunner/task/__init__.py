"""Task plugin side of binrunner.

- protocol: the host's scheduling contract (ScheduledAction, ActionResult, ...)
- runner: BinCommandRunner, the recurring script task
- task_log: host-backed and console task message sinks
- stream_consumer: background drain for child process output
- local_host: a threading host for running tasks outside the database
"""

from binrunner.task.local_host import LocalTaskHost
from binrunner.task.protocol import (
    PING_PROCEDURE,
    ActionResult,
    ActionScheduler,
    ClientResponse,
    ClientStatus,
    ScheduledAction,
    TaskHelper,
    TimeUnit,
)
from binrunner.task.runner import BinCommandRunner, ExecutionResult, RunnerConfig
from binrunner.task.stream_consumer import StreamConsumer
from binrunner.task.task_log import (
    ConsoleTaskLog,
    HostTaskLog,
    MessageType,
    StructlogTaskHelper,
    TaskLog,
    task_log_for,
)

__all__ = [
    "PING_PROCEDURE",
    "ActionResult",
    "ActionScheduler",
    "ClientResponse",
    "ClientStatus",
    "ScheduledAction",
    "TaskHelper",
    "TimeUnit",
    "BinCommandRunner",
    "ExecutionResult",
    "RunnerConfig",
    "LocalTaskHost",
    "StreamConsumer",
    "ConsoleTaskLog",
    "HostTaskLog",
    "MessageType",
    "StructlogTaskHelper",
    "TaskLog",
    "task_log_for",
]
