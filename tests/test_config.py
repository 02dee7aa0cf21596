"""
Unit Tests for Configuration Module

Tests settings validation, configuration loading, environment variable
merging and error handling.

Author: Remote Docker Project
License: MIT
"""

import pytest
import yaml
from pydantic import ValidationError

from remote_docker.config.config_loader import ConfigLoader, load_config
from remote_docker.config.schema import ClientSettings, Config, HostKeyPolicy, SSHSettings


ENV_VARS = [
    "CONFIG_PATH",
    "DOCKER_SSH_HOST",
    "DOCKER_SSH_PORT",
    "DOCKER_SSH_USERNAME",
    "DOCKER_SSH_PASSWORD",
    "DOCKER_SSH_CONNECT_TIMEOUT",
    "DOCKER_COMMAND_TIMEOUT",
    "DOCKER_CACHE_FULL_IDS",
    "LOG_LEVEL",
    "LOG_TO_FILE",
    "LOG_FILE_PATH",
    "LOG_JSON",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of the tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def ssh_data():
    return {
        "host": "docker.example.org",
        "port": 22,
        "username": "deploy",
        "password": "secret"
    }


class TestSSHSettings:
    """Test suite for SSH connection settings."""

    def test_valid_settings(self, ssh_data):
        settings = SSHSettings(**ssh_data)

        assert settings.host == "docker.example.org"
        assert settings.port == 22
        assert settings.connect_timeout == 10.0
        assert settings.known_hosts_policy == HostKeyPolicy.AUTO_ADD

    @pytest.mark.parametrize("missing", ["host", "port", "username", "password"])
    def test_missing_field(self, ssh_data, missing):
        del ssh_data[missing]
        with pytest.raises(ValueError):
            SSHSettings(**ssh_data)

    @pytest.mark.parametrize("field,value", [
        ("host", 1234),
        ("port", "22"),
        ("port", True),
        ("username", None),
        ("password", 42),
    ])
    def test_wrong_type(self, ssh_data, field, value):
        ssh_data[field] = value
        with pytest.raises(ValidationError):
            SSHSettings(**ssh_data)

    def test_port_range(self, ssh_data):
        ssh_data["port"] = 70000
        with pytest.raises(ValueError, match="port"):
            SSHSettings(**ssh_data)

    def test_blank_host(self, ssh_data):
        ssh_data["host"] = "   "
        with pytest.raises(ValueError):
            SSHSettings(**ssh_data)

    def test_settings_are_immutable(self, ssh_data):
        settings = SSHSettings(**ssh_data)
        with pytest.raises(ValidationError):
            settings.host = "other"

    def test_password_not_in_repr(self, ssh_data):
        assert "secret" not in repr(SSHSettings(**ssh_data))


class TestClientSettings:
    """Test suite for client settings."""

    def test_defaults(self):
        settings = ClientSettings()
        assert settings.command_timeout is None
        assert settings.cache_full_ids is True

    def test_negative_timeout(self):
        with pytest.raises(ValueError):
            ClientSettings(command_timeout=-1)


class TestConfigLoader:
    """Test suite for ConfigLoader class."""

    def test_create_default_config(self):
        loader = ConfigLoader()
        default_config = loader._create_default_config()

        assert "ssh" not in default_config
        assert default_config["client"]["cache_full_ids"] is True
        assert default_config["logging"]["log_level"] == "INFO"

    def test_missing_file_requires_ssh_from_env(self, tmp_path):
        loader = ConfigLoader(str(tmp_path / "missing.yaml"))

        with pytest.raises(ValueError):
            loader.load()

    def test_missing_file_with_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DOCKER_SSH_HOST", "10.0.0.5")
        monkeypatch.setenv("DOCKER_SSH_PORT", "2222")
        monkeypatch.setenv("DOCKER_SSH_USERNAME", "ops")
        monkeypatch.setenv("DOCKER_SSH_PASSWORD", "pw")

        config = ConfigLoader(str(tmp_path / "missing.yaml")).load()

        assert isinstance(config, Config)
        assert config.ssh.host == "10.0.0.5"
        assert config.ssh.port == 2222
        assert config.client.command_timeout is None

    def test_load_yaml_file(self, tmp_path, ssh_data):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({
            "ssh": ssh_data,
            "client": {"command_timeout": 30, "cache_full_ids": False},
            "logging": {"log_level": "DEBUG"}
        }))

        config = load_config(str(config_path))

        assert config.ssh.username == "deploy"
        assert config.client.command_timeout == 30
        assert config.client.cache_full_ids is False
        assert config.logging.log_level == "DEBUG"

    def test_env_overrides_file(self, tmp_path, ssh_data, monkeypatch):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({"ssh": ssh_data}))
        monkeypatch.setenv("DOCKER_SSH_PASSWORD", "from-env")
        monkeypatch.setenv("DOCKER_CACHE_FULL_IDS", "false")
        monkeypatch.setenv("LOG_JSON", "true")

        config = load_config(str(config_path))

        assert config.ssh.password == "from-env"
        assert config.client.cache_full_ids is False
        assert config.logging.json_format is True

    def test_config_path_from_env(self, tmp_path, ssh_data, monkeypatch):
        config_path = tmp_path / "other.yaml"
        config_path.write_text(yaml.safe_dump({"ssh": ssh_data}))
        monkeypatch.setenv("CONFIG_PATH", str(config_path))

        config = ConfigLoader().load()

        assert config.ssh.host == "docker.example.org"

    def test_invalid_port_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DOCKER_SSH_PORT", "twenty-two")

        with pytest.raises(ValueError, match="DOCKER_SSH_PORT"):
            ConfigLoader(str(tmp_path / "missing.yaml")).load()

    def test_invalid_yaml(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("ssh: [unclosed")

        with pytest.raises(ValueError, match="YAML"):
            ConfigLoader(str(config_path)).load()

    def test_non_mapping_yaml(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("- just\n- a list\n")

        with pytest.raises(ValueError, match="mapping"):
            ConfigLoader(str(config_path)).load()

    def test_save_omits_password(self, tmp_path, ssh_data):
        loader = ConfigLoader(str(tmp_path / "config.yaml"))
        config = Config(ssh=ssh_data)

        loader.save(config)

        saved = yaml.safe_load((tmp_path / "config.yaml").read_text())
        assert saved["ssh"]["host"] == "docker.example.org"
        assert "password" not in saved["ssh"]
        assert saved["ssh"]["known_hosts_policy"] == "auto_add"
