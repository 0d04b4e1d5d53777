"""
Cooperative cancellation for build sessions.

A CancellationToken belongs to exactly one session. The supervisor races
draining the build tool's output against the token; whichever finishes
first decides the outcome.
"""

import asyncio
import logging
from typing import Optional

from ..validation import BuildCancelledError
from .log_router import LogRouter, drain_to_logger
from .process_manager import ProcessManager

logger = logging.getLogger(__name__)


class CancellationToken:
    """
    Per-session interrupt signal.

    Whatever the surrounding system uses to stop a build (a signal handler,
    an API call, a timeout) calls cancel() on the token of that session
    only. cancel() must run on the event loop thread; other threads use
    cancel_threadsafe().
    """

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancellation requested") -> None:
        if self._event.is_set():
            return
        self.reason = reason
        self._event.set()

    def cancel_threadsafe(self, loop: asyncio.AbstractEventLoop,
                          reason: str = "cancellation requested") -> None:
        loop.call_soon_threadsafe(self.cancel, reason)

    async def wait(self) -> None:
        await self._event.wait()


class CancellationSupervisor:
    """
    Races output draining against a session's cancellation token.

    If the drain (all output routed, process exited) completes first its
    exit code is returned. If the token fires first the build tool is
    terminated and reaped, and BuildCancelledError is raised; the partial
    log stays on disk. When both are complete by the time the race is
    inspected, the finished drain wins.
    """

    def __init__(self, token: CancellationToken, process_manager: ProcessManager):
        self.token = token
        self.process_manager = process_manager

    async def supervise(self, process: asyncio.subprocess.Process, router: LogRouter) -> int:
        """
        Supervise a running build tool until it exits or the session is cancelled.

        Returns:
            The build tool's exit code

        Raises:
            BuildCancelledError: If the token fired first
        """
        drain_task = asyncio.create_task(
            self._drain_and_wait(process, router), name=f"drain-{process.pid}"
        )
        cancel_task = asyncio.create_task(self.token.wait(), name=f"interrupt-{process.pid}")

        try:
            done, _ = await asyncio.wait(
                [drain_task, cancel_task],
                return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            await self._cancel_pending(drain_task, cancel_task)

        if drain_task in done:
            return drain_task.result()

        logger.warning(f"Build cancelled ({self.token.reason}); terminating build tool PID {process.pid}")
        exit_code = await self.process_manager.terminate_process_tree(process)
        raise BuildCancelledError(
            f"Build cancelled: {self.token.reason} (build tool exit code {exit_code})",
            log_path=router.log_path if router.behaviour.writes_file else None,
        )

    async def _drain_and_wait(self, process: asyncio.subprocess.Process, router: LogRouter) -> int:
        await asyncio.gather(
            router.route(process.stdout),
            drain_to_logger(process.stderr),
        )
        exit_code = await process.wait()
        logger.info(f"Build tool exit code: {exit_code}")
        return exit_code

    @staticmethod
    async def _cancel_pending(*tasks: asyncio.Task) -> None:
        for task in tasks:
            if task.done():
                continue
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
