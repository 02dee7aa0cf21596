"""
Docker Interface Exceptions

Errors raised by the SSH transport and by failing remote docker commands.
Argument problems are reported with the built-in TypeError / ValueError.

Author: Remote Docker Project
License: MIT
"""

from typing import Any, Dict, Optional, TYPE_CHECKING

from ..utils.logger import get_logger

if TYPE_CHECKING:
    from .models import CommandResult

logger = get_logger(__name__)


class DockerManagerError(Exception):
    """Base error for the remote Docker client, with optional context."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)
        logger.error(f"{message} | context={self.context}")


class SSHConnectionError(DockerManagerError):
    """SSH connect, authentication or channel failure."""

    def __init__(self, host: str, port: int, reason: str):
        self.host = host
        self.port = port
        self.reason = reason
        super().__init__(
            f"SSH connection to {host}:{port} failed: {reason}",
            context={"host": host, "port": port}
        )


class DockerCommandError(DockerManagerError):
    """The remote docker command exited with a failure."""

    def __init__(self, result: "CommandResult", message: Optional[str] = None):
        self.result = result
        detail = result.stderr.strip() or result.stdout.strip()
        super().__init__(
            message or f"Command failed with exit code {result.exit_code}: {detail[:200]}",
            context={"command": result.command, "exit_code": result.exit_code}
        )


class DockerTimeoutError(DockerManagerError):
    """The remote command did not finish in time."""

    def __init__(self, command: str, timeout: float):
        self.command = command
        self.timeout = timeout
        super().__init__(
            f"Command timed out after {timeout}s",
            context={"command": command}
        )
