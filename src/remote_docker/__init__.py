"""
Remote Docker

Manage Docker containers on a remote host over SSH.

Author: Remote Docker Project
License: MIT
"""

from .config import Config, SSHSettings, ClientSettings, load_config
from .docker_interface import (
    DockerManager,
    DockerManagerError,
    SSHConnectionError,
    DockerCommandError,
    DockerTimeoutError,
    ContainerInfo,
)
from .utils.logger import configure_logging, setup_logging, get_logger

__all__ = [
    'Config',
    'SSHSettings',
    'ClientSettings',
    'load_config',
    'DockerManager',
    'DockerManagerError',
    'SSHConnectionError',
    'DockerCommandError',
    'DockerTimeoutError',
    'ContainerInfo',
    'configure_logging',
    'setup_logging',
    'get_logger'
]

__version__ = "0.1.0"
