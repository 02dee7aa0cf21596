"""
Docker Interface Module

Docker container lifecycle commands executed on a remote host over SSH.

Author: Remote Docker Project
License: MIT
"""

from .docker_manager import DockerManager, LogFollower
from .exceptions import DockerManagerError, SSHConnectionError, DockerCommandError, DockerTimeoutError
from .models import CommandResult, ContainerInfo, ContainerPaths, ContainerConfig
from .ssh_session import SSHSession, run_command, stream_command

__all__ = [
    'DockerManager',
    'LogFollower',
    'DockerManagerError',
    'SSHConnectionError',
    'DockerCommandError',
    'DockerTimeoutError',
    'CommandResult',
    'ContainerInfo',
    'ContainerPaths',
    'ContainerConfig',
    'SSHSession',
    'run_command',
    'stream_command'
]
