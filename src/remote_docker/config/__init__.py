"""
Remote Docker Configuration Module

Connection, client and logging settings, loaded from YAML with
environment variable overrides.

Author: Remote Docker Project
License: MIT
"""

from .schema import Config, SSHSettings, ClientSettings, LoggingSettings, HostKeyPolicy, LogLevel
from .config_loader import ConfigLoader, load_config

__all__ = [
    'Config',
    'SSHSettings',
    'ClientSettings',
    'LoggingSettings',
    'HostKeyPolicy',
    'LogLevel',
    'ConfigLoader',
    'load_config'
]
