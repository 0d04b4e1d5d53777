"""
Project discovery utilities.

Projects are the immediate subdirectories of the configured projects root;
this listing is what operators choose from when starting a build.
"""

import logging
from pathlib import Path
from typing import List, Union

from ..validation import ConfigurationError

logger = logging.getLogger(__name__)


def list_projects(projects_root: Union[str, Path]) -> List[Path]:
    """List buildable project directories.

    Hidden directories (names starting with a dot) are skipped. The result
    is sorted by directory name.

    Args:
        projects_root: Directory containing one subdirectory per project.

    Returns:
        Sorted list of project directory paths.

    Raises:
        ConfigurationError: If the projects root is missing or not a directory.
    """
    root = Path(projects_root)
    if not root.is_dir():
        raise ConfigurationError(
            f"Projects root is not a directory: {root}",
            field_name="paths.projects_root",
            value=str(root),
        )

    projects = sorted(
        (entry for entry in root.iterdir() if entry.is_dir() and not entry.name.startswith(".")),
        key=lambda p: p.name,
    )
    logger.debug(f"Found {len(projects)} projects under {root}")
    return projects


def project_names(projects_root: Union[str, Path]) -> List[str]:
    """Return the names of the projects under the projects root."""
    return [p.name for p in list_projects(projects_root)]
