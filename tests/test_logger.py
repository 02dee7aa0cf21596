"""
Unit Tests for logging setup

Author: Remote Docker Project
License: MIT
"""

import json
import logging
from logging.handlers import RotatingFileHandler

import pytest
from pythonjsonlogger import jsonlogger

from remote_docker.config.schema import LoggingSettings
from remote_docker.utils.logger import configure_logging, get_logger, setup_logging


@pytest.fixture(autouse=True)
def reset_namespace_logger():
    yield
    logger = logging.getLogger("remote_docker")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()


def test_get_logger_namespacing():
    assert get_logger("remote_docker.docker_interface.ssh_session").name == \
        "remote_docker.docker_interface.ssh_session"
    assert get_logger("tools").name == "remote_docker.tools"


def test_console_only():
    logger = setup_logging("DEBUG")

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert logger.propagate is False


def test_file_logging(tmp_path):
    log_file = tmp_path / "logs" / "client.log"

    setup_logging("INFO", log_to_file=True, log_file_path=str(log_file))
    get_logger("tests").info("container started")

    assert "container started" in log_file.read_text()
    # Colors are only applied on the console
    assert "\033[" not in log_file.read_text()


def test_json_file_logging(tmp_path):
    log_file = tmp_path / "client.log"

    setup_logging("INFO", log_to_file=True, log_file_path=str(log_file), json_format=True)
    get_logger("tests").warning("stream stopped")

    lines = [json.loads(line) for line in log_file.read_text().splitlines()]
    assert lines[-1]["message"] == "stream stopped"
    assert lines[-1]["levelname"] == "WARNING"


def test_file_logging_requires_path():
    with pytest.raises(ValueError):
        setup_logging(log_to_file=True)


def test_configure_from_settings(tmp_path):
    log_file = tmp_path / "remote.log"
    settings = LoggingSettings(
        log_level="WARNING",
        log_to_file=True,
        log_file_path=str(log_file),
        log_rotation_size=2048,
        log_retention_count=2
    )

    logger = configure_logging(settings)
    get_logger("tests").info("hidden")
    get_logger("tests").error("ssh session closed")

    assert logger.level == logging.WARNING
    file_handler = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)][0]
    assert file_handler.maxBytes == 2048
    assert file_handler.backupCount == 2
    content = log_file.read_text()
    assert "ssh session closed" in content
    assert "hidden" not in content


def test_configure_replaces_handlers():
    configure_logging(LoggingSettings())
    logger = configure_logging(LoggingSettings(json_format=True))

    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, jsonlogger.JsonFormatter)


def test_unknown_level():
    with pytest.raises(ValueError):
        setup_logging("LOUD")
