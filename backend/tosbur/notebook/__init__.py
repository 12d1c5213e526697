"""
Notebook module - Jupyter servers running in Docker containers
"""

from tosbur.notebook.launcher import NotebookLauncher, NotebookSession

__all__ = [
    "NotebookLauncher",
    "NotebookSession",
]
