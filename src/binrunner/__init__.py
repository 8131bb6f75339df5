"""
binrunner - Recurring shell-script task for a database task scheduler.

The package is split into:
- binrunner.core: Errors, settings and structured logging
- binrunner.task: Host task contract, the script runner and a local host
"""

__version__ = "0.1.0"

from binrunner.task.runner import BinCommandRunner, ExecutionResult

__all__ = ["BinCommandRunner", "ExecutionResult", "__version__"]
