"""
Settings file handling for the orchestration module.

The build tool reads `settings.json` from its session root on startup, so
the file must be complete before the process is spawned.
"""

import asyncio
import json
import logging
from pathlib import Path

from ..models.build import BuildSettings
from ..models.session import BuildSession
from ..validation import SessionIOError

logger = logging.getLogger(__name__)


class SettingsWriter:
    """Creates the session directory tree and writes the settings file into it."""

    def write(self, session: BuildSession, settings: BuildSettings) -> Path:
        """
        Create the session root and log directory, then write the settings file.

        Args:
            session: Session whose root receives the file
            settings: Settings to serialize

        Returns:
            Path of the written settings file

        Raises:
            SessionIOError: If a directory or the file cannot be created
        """
        try:
            session.log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SessionIOError(
                f"Cannot create session directory {session.log_dir}: {e}",
                path=session.log_dir,
            ) from e

        path = session.settings_path
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(settings.to_dict(), f)
        except OSError as e:
            raise SessionIOError(f"Cannot write settings file {path}: {e}", path=path) from e

        logger.info(f"Build settings written to {path}")
        return path

    async def write_async(self, session: BuildSession, settings: BuildSettings) -> Path:
        """Write the settings file without blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.write, session, settings)


def read_settings(path: Path) -> BuildSettings:
    """Read a settings file back into a BuildSettings record."""
    with open(path, "r", encoding="utf-8") as f:
        return BuildSettings.from_dict(json.load(f))
