"""
Configuration Schema and Models

Pydantic models for the SSH connection, client behaviour and logging
settings. Validation happens at construction, so a bad connection setup
fails before any network traffic.

Author: Remote Docker Project
License: MIT
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, StrictInt, StrictStr, validator


class LogLevel(str, Enum):
    """Logging level options."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class HostKeyPolicy(str, Enum):
    """What to do with a remote host key missing from known_hosts."""
    AUTO_ADD = "auto_add"
    REJECT = "reject"


class SSHSettings(BaseModel):
    """Connection parameters for the remote Docker host."""

    host: StrictStr = Field(
        description="SSH host running the Docker daemon"
    )
    port: StrictInt = Field(
        description="SSH port"
    )
    username: StrictStr = Field(
        description="SSH username"
    )
    password: StrictStr = Field(
        repr=False,
        description="SSH password"
    )
    connect_timeout: float = Field(
        default=10.0,
        description="Timeout for establishing the SSH connection (seconds)"
    )
    known_hosts_policy: HostKeyPolicy = Field(
        default=HostKeyPolicy.AUTO_ADD,
        validate_default=True,
        description="Policy for unknown host keys"
    )

    class Config:
        """Pydantic configuration."""
        frozen = True
        use_enum_values = True

    @validator("host", "username")
    def validate_not_blank(cls, v):
        """Reject empty host and username."""
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @validator("port")
    def validate_port(cls, v):
        """Ensure port is in the TCP range."""
        if not 0 < v < 65536:
            raise ValueError(f"port must be between 1 and 65535: {v}")
        return v

    @validator("connect_timeout")
    def validate_connect_timeout(cls, v):
        """Ensure connect timeout is positive."""
        if v <= 0:
            raise ValueError(f"connect_timeout must be positive: {v}")
        return v


class ClientSettings(BaseModel):
    """Behaviour of the DockerManager client."""

    command_timeout: Optional[float] = Field(
        default=None,
        description="Timeout for a single remote command (None = wait forever)"
    )
    cache_full_ids: bool = Field(
        default=True,
        description="Remember short ID to full ID resolutions per client"
    )

    @validator("command_timeout")
    def validate_command_timeout(cls, v):
        """Ensure command timeout is positive when set."""
        if v is not None and v <= 0:
            raise ValueError(f"command_timeout must be positive: {v}")
        return v


class LoggingSettings(BaseModel):
    """Logging configuration."""

    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        validate_default=True,
        description="Logging level"
    )
    log_to_file: bool = Field(
        default=False,
        description="Enable logging to file"
    )
    log_file_path: str = Field(
        default="logs/remote_docker.log",
        description="Log file location"
    )
    log_rotation_size: int = Field(
        default=10485760,  # 10MB
        description="Log file size before rotation (bytes)"
    )
    log_retention_count: int = Field(
        default=5,
        description="Number of rotated log files to keep"
    )
    json_format: bool = Field(
        default=False,
        description="Emit logs as JSON"
    )

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class Config(BaseModel):
    """
    Root configuration model.

    Loaded from config.yaml and overridden by environment variables, see
    ``ConfigLoader``.
    """

    ssh: SSHSettings
    client: ClientSettings = Field(default_factory=ClientSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
