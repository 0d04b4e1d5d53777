"""
Signal handling for the orchestration module.

SIGINT and SIGTERM are one of the external mechanisms that can cancel
sessions. The handler keeps a registry of the cancellation tokens of the
sessions it is responsible for and cancels each of them when a signal
arrives; sessions that are not registered are unaffected.
"""

import asyncio
import logging
import signal
import threading
from typing import Dict, Iterable, Optional

from .cancellation import CancellationToken

logger = logging.getLogger(__name__)


class SignalHandler:
    """
    Installs event loop signal handlers that cancel registered sessions.

    Usable as a context manager inside a running event loop:

        with SignalHandler() as handler:
            handler.register_session(session.session_id, token)
            await runner.run_session(session, request, token)
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None,
                 signals: Iterable[int] = (signal.SIGINT, signal.SIGTERM)):
        self._loop = loop
        self._signals = tuple(signals)
        self._tokens: Dict[str, CancellationToken] = {}
        self._lock = threading.Lock()
        self._signal_handlers_set = False
        self.signals_received = 0

    def setup_signal_handlers(self) -> None:
        """Route the configured signals to this handler."""
        loop = self._loop or asyncio.get_running_loop()
        try:
            for sig in self._signals:
                loop.add_signal_handler(sig, self._handle_signal, sig)
            self._loop = loop
            self._signal_handlers_set = True
            logger.debug("Signal handlers set up for build sessions")
        except (NotImplementedError, RuntimeError, ValueError) as e:
            logger.warning(f"Failed to set up signal handlers: {e}")

    def cleanup_signal_handlers(self) -> None:
        """Restore default signal handling."""
        if not self._signal_handlers_set:
            return
        try:
            for sig in self._signals:
                self._loop.remove_signal_handler(sig)
            logger.debug("Signal handlers removed")
        except (NotImplementedError, RuntimeError, ValueError) as e:
            logger.warning(f"Failed to restore signal handlers: {e}")
        finally:
            self._signal_handlers_set = False

    def register_session(self, session_id: str, token: CancellationToken) -> None:
        with self._lock:
            self._tokens[session_id] = token
            logger.debug(f"Registered session {session_id} for signal handling")

    def unregister_session(self, session_id: str) -> None:
        with self._lock:
            if self._tokens.pop(session_id, None) is not None:
                logger.debug(f"Unregistered session {session_id} from signal handling")

    @property
    def registered_sessions(self) -> list:
        with self._lock:
            return list(self._tokens)

    def _handle_signal(self, signum: int) -> None:
        """Cancel every registered session."""
        self.signals_received += 1
        name = signal.Signals(signum).name
        if self.signals_received > 1:
            logger.warning(f"{name} received again. Shutdown already in progress, please be patient.")
            return

        logger.warning(f"{name} received. Cancelling active build sessions.")
        with self._lock:
            tokens = list(self._tokens.items())
        for session_id, token in tokens:
            logger.info(f"Requesting cancellation of session {session_id}")
            token.cancel(f"{name} received")

    def __enter__(self) -> "SignalHandler":
        self.setup_signal_handlers()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.cleanup_signal_handlers()
        with self._lock:
            self._tokens.clear()
