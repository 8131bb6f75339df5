"""Background drain for a child process's output stream.

A child that writes more than the pipe buffer holds blocks until someone
reads. ``StreamConsumer`` reads the stream on its own daemon thread, line by
line until EOF, and hands every line to a sink. Nobody waits for it: the
thread may outlive the cycle that started it, and a failure while reading is
logged here and goes no further.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import IO

from binrunner.core.logging import get_logger

logger = get_logger(__name__)

LineSink = Callable[[str], None]


def print_line(line: str) -> None:
    """Default sink: the process's standard output."""
    print(line, flush=True)


class StreamConsumer:
    """Forwards lines from a text stream to a sink on a daemon thread.

    Example:
        >>> proc = subprocess.Popen(cmd, stdout=subprocess.PIPE, text=True)
        >>> StreamConsumer(proc.stdout, print_line).start()
        >>> proc.wait()
    """

    def __init__(self, stream: IO[str], sink: LineSink = print_line, name: str = "binrunner-drain") -> None:
        self._stream = stream
        self._sink = sink
        self._name = name
        self._thread: threading.Thread | None = None

    def start(self) -> threading.Thread:
        """Start draining and return the (daemon) thread doing it."""
        self._thread = threading.Thread(target=self.run, daemon=True, name=self._name)
        self._thread.start()
        return self._thread

    def run(self) -> None:
        """Read until EOF. Runs on the drain thread."""
        try:
            for line in self._stream:
                self._sink(line.rstrip("\r\n"))
        except Exception as e:
            logger.warning("stream_drain_failed", thread=self._name, error=str(e))
        finally:
            try:
                self._stream.close()
            except OSError:
                pass

    @property
    def thread(self) -> threading.Thread | None:
        return self._thread
