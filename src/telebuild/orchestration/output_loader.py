"""
Completion report loading for the orchestration module.

After a clean exit the build tool leaves `output.json` in the session root.
The report and the exit code are independent success signals; a missing or
malformed report fails the session even when the exit code is zero.
"""

import json
import logging
from typing import Optional

from ..models.build import BuildOutput, BuildPlatform, BuildResult
from ..models.session import BuildSession
from ..validation import OutputLoadError

logger = logging.getLogger(__name__)


class OutputLoader:
    """Reads the completion report and resolves it into a BuildResult."""

    def read_output(self, session: BuildSession, exit_code: Optional[int] = None) -> BuildOutput:
        """
        Read and parse the completion report of a session.

        Raises:
            OutputLoadError: If the report is missing or malformed
        """
        path = session.output_path
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise OutputLoadError(
                f"Completion report not found: {path}", output_path=path, exit_code=exit_code
            ) from e
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise OutputLoadError(
                f"Cannot read completion report {path}: {e}", output_path=path, exit_code=exit_code
            ) from e

        try:
            return BuildOutput.from_dict(data)
        except ValueError as e:
            raise OutputLoadError(
                f"Malformed completion report {path}: {e}", output_path=path, exit_code=exit_code
            ) from e

    def load(
        self,
        session: BuildSession,
        exit_code: int,
        expected_platform: Optional[BuildPlatform] = None,
    ) -> BuildResult:
        """
        Load the completion report and build the result for the caller.

        The reported artifact path is relative to the session root and is
        returned as an absolute path under it.

        Raises:
            OutputLoadError: If the report is missing or malformed
        """
        output = self.read_output(session, exit_code=exit_code)

        if expected_platform is not None and output.platform != expected_platform:
            logger.warning(
                f"Build tool reported platform {output.platform.value}, "
                f"requested {expected_platform.value}"
            )

        result = BuildResult(
            log_path=session.log_path,
            artifact_path=session.root / output.artifact_path,
            platform=output.platform,
            exit_code=exit_code,
        )
        logger.info(f"Build artifact: {result.artifact_path}")
        return result
