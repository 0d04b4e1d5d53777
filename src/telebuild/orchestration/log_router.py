"""
Log routing for the orchestration module.

This module consumes the build tool's standard output line by line and
dispatches every line to the console, to the session log file, or to both,
according to the configured LogBehaviour.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import IO, Optional, TextIO

from ..models.build import LogBehaviour
from ..validation import SessionIOError

logger = logging.getLogger(__name__)


async def read_chunk(stream: asyncio.StreamReader) -> bytes:
    """
    Read the next line from a stream, or b"" at end-of-stream.

    A line longer than the stream's buffer limit is returned in pieces of
    at most the buffered size; the pieces carry no added newline, so
    writing them in order reproduces the original line.
    """
    try:
        return await stream.readuntil(b"\n")
    except asyncio.IncompleteReadError as e:
        return e.partial
    except asyncio.LimitOverrunError as e:
        return await stream.read(max(e.consumed, 1))


class LogRouter:
    """
    Routes captured output per LogBehaviour.

    The log file is opened once, truncating earlier content, and stays open
    until routing ends. Lines are written in the order they were read and
    flushed one at a time.
    """

    def __init__(self, behaviour: LogBehaviour, log_path: Path,
                 console: Optional[TextIO] = None):
        self.behaviour = behaviour
        self.log_path = Path(log_path)
        self._console = console
        self._log_file: Optional[IO[str]] = None
        self.lines_routed = 0

    @property
    def console(self) -> TextIO:
        return self._console if self._console is not None else sys.stdout

    @property
    def is_open(self) -> bool:
        return self._log_file is not None and not self._log_file.closed

    def open(self) -> None:
        """
        Create the log file if the behaviour persists output.

        Raises:
            SessionIOError: If the log file cannot be created
        """
        if not self.behaviour.writes_file or self.is_open:
            return
        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            self._log_file = open(self.log_path, "w", encoding="utf-8")
        except OSError as e:
            raise SessionIOError(f"Cannot create log file {self.log_path}: {e}", path=self.log_path) from e
        logger.info(f"Build log: {self.log_path}")

    def close(self) -> None:
        if self._log_file is None:
            return
        try:
            self._log_file.close()
        except OSError as e:
            logger.warning(f"Failed to close log file {self.log_path}: {e}")
        finally:
            self._log_file = None

    def dispatch(self, line: str) -> None:
        """Send one line to the destinations selected by the behaviour."""
        if self.behaviour.echoes_to_console:
            self.console.write(line)
            self.console.flush()
        if self.behaviour.writes_file:
            if self._log_file is None:
                self.open()
            try:
                self._log_file.write(line)
                self._log_file.flush()
            except OSError as e:
                raise SessionIOError(f"Cannot write log file {self.log_path}: {e}", path=self.log_path) from e
        self.lines_routed += 1

    async def route(self, stream: asyncio.StreamReader) -> int:
        """
        Read the stream until end-of-stream, dispatching every line.

        The log file is closed when the loop ends, including when the
        routing task is cancelled.

        Returns:
            Number of lines routed
        """
        try:
            while True:
                raw = await read_chunk(stream)
                if not raw:
                    break
                self.dispatch(raw.decode("utf-8", errors="replace"))
        finally:
            self.close()
        logger.debug(f"Routed {self.lines_routed} lines from build tool output")
        return self.lines_routed

    def __enter__(self) -> "LogRouter":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


async def drain_to_logger(stream: asyncio.StreamReader, prefix: str = "build tool stderr") -> int:
    """Read a stream to end-of-stream, forwarding each line to the application logger."""
    count = 0
    while True:
        raw = await read_chunk(stream)
        if not raw:
            break
        logger.info(f"[{prefix}] {raw.decode('utf-8', errors='replace').rstrip()}")
        count += 1
    return count
