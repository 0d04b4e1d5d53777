"""
Command-line interface for the telebuild package.
"""

from .main import main_cli

__all__ = [
    "main_cli",
]
