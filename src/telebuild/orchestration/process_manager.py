"""
Process management for the orchestration module.

This module terminates the build tool together with every process it
started, escalating from SIGTERM through SIGINT to SIGKILL, and reaps the
build tool so it never lingers as a zombie.
"""

import asyncio
import logging
import os
import signal
from typing import List, Optional

import psutil

from .shared_state import TimeoutConstants

logger = logging.getLogger(__name__)


class ProcessManager:
    """
    Termination of a build tool process and its descendants.

    The build tool is a child of this process and is awaited through
    asyncio; its descendants are not our children, so they are tracked
    and waited for with psutil.
    """

    PHASES = [
        {
            "name": "graceful",
            "signal": signal.SIGTERM,
            "timeout": TimeoutConstants.TERMINATION_GRACEFUL_TIMEOUT,
        },
        {
            "name": "interrupt",
            "signal": signal.SIGINT,
            "timeout": TimeoutConstants.TERMINATION_INTERRUPT_TIMEOUT,
        },
        {
            "name": "force_kill",
            "signal": getattr(signal, "SIGKILL", signal.SIGTERM),
            "timeout": TimeoutConstants.TERMINATION_FORCE_TIMEOUT,
        },
    ]

    async def terminate_process_tree(
        self,
        process: asyncio.subprocess.Process,
        name: str = "build process",
    ) -> Optional[int]:
        """
        Terminate a process and its descendants, then reap it.

        Returns:
            The exit code of the terminated process
        """
        if process.returncode is not None:
            logger.debug(f"{name} (PID: {process.pid}) already exited with {process.returncode}")
            return process.returncode

        logger.info(f"Starting termination of {name} (PID: {process.pid}) and its process tree")

        # Snapshot first: descendants are reparented once the parent dies.
        descendants = self._get_process_children(process.pid)

        for phase in self.PHASES:
            if process.returncode is not None:
                break

            logger.info(f"Phase {phase['name']}: signalling {name} and {len(descendants)} descendants")
            self._signal_process(process, phase["signal"])
            self._apply_termination_signal(descendants, phase["signal"])

            try:
                await asyncio.wait_for(process.wait(), timeout=phase["timeout"])
                logger.info(f"{name} terminated in phase {phase['name']}")
                break
            except asyncio.TimeoutError:
                logger.warning(f"Phase {phase['name']}: {name} still running")

        loop = asyncio.get_running_loop()
        remaining = await loop.run_in_executor(
            None, self._wait_for_termination, descendants, TimeoutConstants.DESCENDANT_WAIT_TIMEOUT
        )
        if remaining:
            logger.warning(f"Force killing {len(remaining)} remaining descendants of {name}")
            self._apply_termination_signal(remaining, self.PHASES[-1]["signal"])

        self._cleanup_process_group(process.pid, name)

        # Reap the build tool; after SIGKILL this returns promptly.
        exit_code = await process.wait()
        logger.info(f"Termination completed for {name} (PID: {process.pid}), exit code {exit_code}")
        return exit_code

    def _signal_process(self, process: asyncio.subprocess.Process, sig: int) -> None:
        try:
            process.send_signal(sig)
            logger.debug(f"Sent {signal.Signals(sig).name} to PID {process.pid}")
        except ProcessLookupError:
            pass

    def _is_process_alive(self, process: psutil.Process) -> bool:
        """Safely check if a process is still alive and not a zombie."""
        try:
            if not process.is_running():
                return False
            return process.status() not in [psutil.STATUS_ZOMBIE, psutil.STATUS_DEAD]
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return False

    def _get_process_children(self, pid: int) -> List[psutil.Process]:
        """Safely get all descendants of a process, handling race conditions."""
        try:
            return [
                child for child in psutil.Process(pid).children(recursive=True)
                if self._is_process_alive(child)
            ]
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return []

    def _apply_termination_signal(self, processes: List[psutil.Process], sig: int) -> None:
        for process in processes:
            try:
                if self._is_process_alive(process):
                    process.send_signal(sig)
            except psutil.NoSuchProcess:
                continue
            except psutil.AccessDenied:
                logger.warning(f"Access denied sending {signal.Signals(sig).name} to PID {process.pid}")

    def _wait_for_termination(self, processes: List[psutil.Process], timeout: float) -> List[psutil.Process]:
        """Wait for processes to terminate and return any that are still alive."""
        if not processes:
            return []
        _, still_alive = psutil.wait_procs(processes, timeout=timeout)
        return [p for p in still_alive if self._is_process_alive(p)]

    def _cleanup_process_group(self, pid: int, name: str) -> None:
        """Kill whatever is left in the process group the build tool led."""
        if not hasattr(os, "killpg"):
            return
        try:
            os.killpg(pid, signal.SIGKILL)
            logger.debug(f"Sent SIGKILL to process group {pid} for {name}")
        except ProcessLookupError:
            pass
        except PermissionError:
            logger.debug(f"No permission to kill process group {pid}")
