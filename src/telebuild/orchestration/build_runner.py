"""
BuildRunner for the orchestration module.

This module contains the BuildRunner class that drives one build session
through its state machine by delegating each step to a specialized
component: settings writer, process launcher, log router, cancellation
supervisor and output loader.
"""

import asyncio
import logging
from typing import Optional, TextIO

from ..models.build import BuildRequest, BuildResult, BuildSettings
from ..models.session import BuildSession, SessionState
from ..validation import (
    BuildCancelledError,
    ErrorSeverity,
    OutputLoadError,
    ProcessExitError,
    TelebuildError,
    handle_error,
    validate_path_exists,
)
from .cancellation import CancellationSupervisor, CancellationToken
from .log_router import LogRouter
from .output_loader import OutputLoader
from .process_launcher import ProcessLauncher
from .process_manager import ProcessManager
from .settings_writer import SettingsWriter
from .shared_state import BuildRunnerConfig

logger = logging.getLogger(__name__)


class BuildRunner:
    """
    Runs build sessions.

    One runner can run any number of sessions, concurrently or not; each
    session has its own root, child process, log file and cancellation
    token. Nothing is retried: a failed or cancelled session is final and
    the caller starts a new one to try again.
    """

    def __init__(self, config: BuildRunnerConfig, console: Optional[TextIO] = None):
        """
        Args:
            config: Engine-wide configuration
            console: Stream receiving echoed build output (defaults to stdout)
        """
        self.config = config
        self.console = console

        self.settings_writer = SettingsWriter()
        self.launcher = ProcessLauncher(config.bin_path, config.env)
        self.process_manager = ProcessManager()
        self.output_loader = OutputLoader()

    def create_session(self, request: BuildRequest) -> BuildSession:
        """Mint a new session for a request."""
        session = BuildSession.create(
            project_path=request.project_path,
            root_base=self.config.session_root_base,
            log_subdir=self.config.log_subdir,
        )
        logger.info(f"Session {session.session_id} root: {session.root}")
        return session

    async def run(self, request: BuildRequest,
                  token: Optional[CancellationToken] = None) -> BuildResult:
        """
        Run a build request in a new session.

        Raises:
            TelebuildError: The typed failure the session ended in
        """
        session = self.create_session(request)
        return await self.run_session(session, request, token)

    async def run_session(
        self,
        session: BuildSession,
        request: BuildRequest,
        token: Optional[CancellationToken] = None,
    ) -> BuildResult:
        """
        Drive a freshly created session to a terminal state.

        Whatever way this coroutine ends, the build tool is not left
        running and the log file is closed.

        Raises:
            ConfigurationError: A required value is missing; nothing was spawned
            SessionIOError: The session directory, settings or log file could not be created
            SpawnError: The build tool could not be started
            BuildCancelledError: The token fired; the build tool was terminated
            ProcessExitError: The build tool exited with a non-zero code
            OutputLoadError: The completion report is missing or malformed
            TelebuildError: Any other failure, chained to the original exception
        """
        if session.state is not SessionState.CREATED:
            raise RuntimeError(f"Session {session.session_id} was already run ({session.state.value})")

        token = token or CancellationToken()
        router = LogRouter(self.config.log_behaviour, session.log_path, console=self.console)

        try:
            validate_path_exists(request.project_path, must_be_dir=True, field_name="project_path")
            settings = BuildSettings(
                platform=request.platform,
                secret=request.secret,
                destination=self.config.destination_for(request.platform),
            )

            await self.settings_writer.write_async(session, settings)
            session.transition(SessionState.SETTINGS_WRITTEN)

            router.open()
            session.process = await self.launcher.spawn(request, session)
            session.transition(SessionState.SPAWNED)

            supervisor = CancellationSupervisor(token, self.process_manager)
            session.transition(SessionState.RUNNING)
            exit_code = await supervisor.supervise(session.process, router)
            session.exit_code = exit_code
            session.transition(SessionState.COMPLETED)

            if exit_code != 0:
                raise self._exit_failure(session, request, exit_code)

            result = self.output_loader.load(session, exit_code, request.platform)
            session.transition(SessionState.OUTPUT_LOADED)
            logger.info(f"Session {session.session_id} completed successfully")
            return result

        except BuildCancelledError as e:
            session.failure = e
            session.transition(SessionState.CANCELLED)
            logger.warning(f"Session {session.session_id} cancelled")
            raise
        except TelebuildError as e:
            session.fail(e)
            handle_error(
                error=e,
                context=f"build session {session.session_id}",
                severity=ErrorSeverity.ERROR,
                reraise=True,
                logger=logger
            )
            raise
        except asyncio.CancelledError:
            self._record_abandoned(session)
            raise
        except Exception as e:
            error = TelebuildError(f"Unexpected failure in build session {session.session_id}: {e!r}")
            if not session.is_terminal:
                session.fail(error)
            logger.error(str(error), exc_info=True)
            raise error from e
        finally:
            if session.process is not None and session.process.returncode is None:
                await self.process_manager.terminate_process_tree(session.process)
            router.close()

    def _exit_failure(self, session: BuildSession, request: BuildRequest,
                      exit_code: int) -> ProcessExitError:
        """Build the failure for a non-zero exit, naming the reported artifact when there is one."""
        artifact_path = None
        try:
            artifact_path = self.output_loader.load(session, exit_code, request.platform).artifact_path
        except OutputLoadError as e:
            logger.debug(f"No usable completion report after failed build: {e}")

        return ProcessExitError(
            f"Build tool exited with code {exit_code}",
            exit_code=exit_code,
            log_path=session.log_path if self.config.log_behaviour.writes_file else None,
            artifact_path=artifact_path,
        )

    @staticmethod
    def _record_abandoned(session: BuildSession) -> None:
        """Record the outcome when the caller cancels the session's task itself."""
        if session.is_terminal:
            return
        error = BuildCancelledError("Session task was cancelled by its caller")
        if session.state is SessionState.RUNNING:
            session.failure = error
            session.transition(SessionState.CANCELLED)
        else:
            session.fail(error)


def run_build(config: BuildRunnerConfig, request: BuildRequest,
              console: Optional[TextIO] = None) -> BuildResult:
    """Run one build request to completion from synchronous code."""
    return asyncio.run(BuildRunner(config, console=console).run(request))
