"""
Configuration Loader

Loads configuration from a YAML file, merges environment variables (and a
``.env`` file) on top, and validates the result.

Author: Remote Docker Project
License: MIT
"""

import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dotenv import load_dotenv

from .schema import Config


class ConfigLoader:
    """
    Configuration loader and manager.

    Environment variables override values from the YAML file, which lets
    credentials stay out of the file entirely.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration loader.

        Args:
            config_path: Path to the configuration file. If None, uses
                CONFIG_PATH or ``config.yaml`` in the working directory.
        """
        # Load environment variables from .env if present
        load_dotenv()

        self.config_path = config_path or os.getenv("CONFIG_PATH", "config.yaml")
        self._config: Optional[Config] = None

    def load(self) -> Config:
        """
        Load and validate configuration.

        Returns:
            Validated Config object

        Raises:
            ValueError: If YAML parsing or validation fails
        """
        config_data = self._load_yaml()
        config_data = self._merge_env_vars(config_data)

        self._config = Config(**config_data)
        return self._config

    def _load_yaml(self) -> Dict[str, Any]:
        """
        Load YAML configuration file.

        Returns:
            Dictionary with configuration data (empty if the file is missing)
        """
        config_file = Path(self.config_path)

        if not config_file.exists():
            return self._create_default_config()

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML config: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {config_file}")
        return data

    def _create_default_config(self) -> Dict[str, Any]:
        """
        Default configuration structure.

        The ssh section has no defaults and must come from the environment.
        """
        return {
            "client": {
                "command_timeout": None,
                "cache_full_ids": True
            },
            "logging": {
                "log_level": "INFO",
                "log_to_file": False,
                "json_format": False
            }
        }

    def _merge_env_vars(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge environment variables into configuration.

        Naming convention: DOCKER_SSH_* for the connection, DOCKER_* for the
        client and LOG_* for logging.

        Args:
            config_data: Configuration dictionary from file

        Returns:
            Merged configuration dictionary
        """
        # SSH settings
        if os.getenv("DOCKER_SSH_HOST"):
            config_data.setdefault("ssh", {})["host"] = os.getenv("DOCKER_SSH_HOST")
        if os.getenv("DOCKER_SSH_PORT"):
            config_data.setdefault("ssh", {})["port"] = self._to_int("DOCKER_SSH_PORT")
        if os.getenv("DOCKER_SSH_USERNAME"):
            config_data.setdefault("ssh", {})["username"] = os.getenv("DOCKER_SSH_USERNAME")
        if os.getenv("DOCKER_SSH_PASSWORD"):
            config_data.setdefault("ssh", {})["password"] = os.getenv("DOCKER_SSH_PASSWORD")
        if os.getenv("DOCKER_SSH_CONNECT_TIMEOUT"):
            config_data.setdefault("ssh", {})["connect_timeout"] = float(os.getenv("DOCKER_SSH_CONNECT_TIMEOUT"))

        # Client settings
        if os.getenv("DOCKER_COMMAND_TIMEOUT"):
            config_data.setdefault("client", {})["command_timeout"] = float(os.getenv("DOCKER_COMMAND_TIMEOUT"))
        if os.getenv("DOCKER_CACHE_FULL_IDS"):
            config_data.setdefault("client", {})["cache_full_ids"] = os.getenv("DOCKER_CACHE_FULL_IDS").lower() == "true"

        # Logging
        if os.getenv("LOG_LEVEL"):
            config_data.setdefault("logging", {})["log_level"] = os.getenv("LOG_LEVEL").upper()
        if os.getenv("LOG_TO_FILE"):
            config_data.setdefault("logging", {})["log_to_file"] = os.getenv("LOG_TO_FILE").lower() == "true"
        if os.getenv("LOG_FILE_PATH"):
            config_data.setdefault("logging", {})["log_file_path"] = os.getenv("LOG_FILE_PATH")
        if os.getenv("LOG_JSON"):
            config_data.setdefault("logging", {})["json_format"] = os.getenv("LOG_JSON").lower() == "true"

        return config_data

    @staticmethod
    def _to_int(name: str) -> int:
        """Read an integer environment variable."""
        value = os.getenv(name)
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"{name} must be an integer: {value!r}")

    def save(self, config: Config, path: Optional[str] = None) -> None:
        """
        Save configuration to YAML file.

        The SSH password is never written; supply it through
        DOCKER_SSH_PASSWORD instead.

        Args:
            config: Config object to save
            path: Path to save to (uses default if None)
        """
        save_path = Path(path or self.config_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = config.dict()
        config_dict.get("ssh", {}).pop("password", None)

        with open(save_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)

    def reload(self) -> Config:
        """
        Reload configuration from file.

        Returns:
            Reloaded Config object
        """
        return self.load()

    @property
    def config(self) -> Optional[Config]:
        """Get the current configuration object."""
        return self._config


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Convenience function to load configuration.

    Args:
        config_path: Optional path to config file

    Returns:
        Loaded and validated Config object
    """
    loader = ConfigLoader(config_path)
    return loader.load()
