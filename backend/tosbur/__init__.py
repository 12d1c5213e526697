"""
Tosbur

Desktop companion backend that runs Jupyter notebook servers inside Docker
containers and hands their URLs to an embedded browser pane.
"""

__version__ = "0.3.0"
__author__ = "Tosbur contributors"
__license__ = "MIT"

from tosbur.docker.client import DockerClient
from tosbur.docker.models import ContainerHandle, ContainerPhase, ContainerSpec
from tosbur.notebook.launcher import NotebookLauncher

__all__ = [
    "DockerClient",
    "ContainerSpec",
    "ContainerHandle",
    "ContainerPhase",
    "NotebookLauncher",
]
