"""
System interaction utilities.

- Project discovery under the configured projects root
"""

from .projects import list_projects, project_names

__all__ = [
    "list_projects",
    "project_names",
]
