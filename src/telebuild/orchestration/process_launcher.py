"""
Build tool invocation for the orchestration module.

This module assembles the exact command line and environment for the
build tool and spawns it with all three standard streams piped.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from ..models.build import BuildRequest
from ..models.session import BuildSession
from ..validation import SpawnError

logger = logging.getLogger(__name__)

SESSION_ROOT_ENV = "TELEBUILD_SESSION_ROOT"
SESSION_ID_ENV = "TELEBUILD_SESSION_ID"

# Upper bound for a single line of build tool output
STREAM_LIMIT = 1024 * 1024


class ProcessLauncher:
    """
    Builds the invocation of the build tool and starts it.

    The tool runs unattended and single-shot, writes its own log to stdout
    (`-logFile -`) so this process is its first consumer, and learns its
    session root from `-sessionroot`.
    """

    def __init__(self, bin_path: Path, env: Optional[Mapping[str, str]] = None):
        self.bin_path = Path(bin_path)
        self.env = dict(env or {})

    def build_command(self, request: BuildRequest, session: BuildSession) -> List[str]:
        """Return the argument vector for one session."""
        return [
            str(self.bin_path),
            "-batchmode",
            "-quit",
            "-projectPath", str(request.workspace),
            "-executeMethod", request.build_entry,
            "-buildTarget", request.platform.build_target,
            "-logFile", "-",
            # Relative, so the tool resolves it against whichever checkout it opened.
            "-sessionroot", session.relative_root.as_posix(),
        ]

    def build_environment(self, session: BuildSession) -> Dict[str, str]:
        """Return the child environment: parent environment, configured extras, session location."""
        env = os.environ.copy()
        env.update(self.env)
        env[SESSION_ROOT_ENV] = str(session.root)
        env[SESSION_ID_ENV] = session.session_id
        return env

    def check_binary(self) -> None:
        """
        Raises:
            SpawnError: If the binary is missing or not executable
        """
        if not self.bin_path.is_file():
            raise SpawnError(f"Build tool binary not found: {self.bin_path}", binary=self.bin_path)
        if not os.access(self.bin_path, os.X_OK):
            raise SpawnError(f"Build tool binary is not executable: {self.bin_path}", binary=self.bin_path)

    async def spawn(self, request: BuildRequest, session: BuildSession) -> asyncio.subprocess.Process:
        """
        Start the build tool for a session.

        The child gets its own process group so it can be terminated
        together with everything it starts. Its stdin is closed right away.

        Raises:
            SpawnError: If the binary is invalid or the OS refuses to create the process
        """
        self.check_binary()
        command = self.build_command(request, session)
        logger.info(f"Starting build tool: {' '.join(command)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=session.project_path,
                env=self.build_environment(session),
                start_new_session=True,
                limit=STREAM_LIMIT,
            )
        except OSError as e:
            raise SpawnError(f"Failed to start build tool {self.bin_path}: {e}", binary=self.bin_path) from e

        if process.stdin is not None:
            process.stdin.close()

        logger.info(f"Build tool started with PID {process.pid} for session {session.session_id}")
        return process
