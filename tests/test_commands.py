"""
Unit Tests for Docker CLI Argument Builders

Author: Remote Docker Project
License: MIT
"""

import pytest

from remote_docker.docker_interface.commands import (
    format_command,
    is_not_found,
    is_hex_short_id,
    is_short_id,
    logs_options,
    mapping_options,
    rm_options,
    split_command,
    start_options,
    time_options,
    validate_additional_args,
    validate_container_id,
    validate_delay,
    validate_short_id,
)


class TestFormatCommand:

    def test_quotes_template(self):
        assert format_command(["docker", "inspect", "--format", "{{.Id}}", "abc"]) == \
            "docker inspect --format '{{.Id}}' abc"

    def test_quotes_shell_metacharacters(self):
        command = format_command(["docker", "rename", "web", "x; rm -rf /"])
        assert command == "docker rename web 'x; rm -rf /'"


class TestContainerIds:

    def test_short_id(self):
        assert is_short_id("3f4e8a1b2c9d")
        assert not is_short_id("3f4e8a1b2c9")
        assert not is_short_id("web")

    def test_hex_short_id(self):
        assert is_hex_short_id("3f4e8a1b2c9d")
        assert not is_hex_short_id("web-frontend")
        assert not is_hex_short_id("3F4E8A1B2C9D")
        assert not is_hex_short_id("3f4e8a1b2c9d" + "0")

    def test_validate_container_id(self):
        assert validate_container_id(" web ") == "web"
        with pytest.raises(TypeError):
            validate_container_id(None)
        with pytest.raises(ValueError):
            validate_container_id("  ")

    def test_validate_short_id(self):
        assert validate_short_id("3f4e8a1b2c9d") == "3f4e8a1b2c9d"
        with pytest.raises(TypeError, match="string"):
            validate_short_id(123456789012)
        with pytest.raises(TypeError, match="12 chars"):
            validate_short_id("3f4e8a1b")

    def test_not_found(self):
        assert is_not_found("Error response from daemon: No such container: web")
        assert is_not_found("Error: No such object: web")
        assert not is_not_found("web")


class TestStartOptions:

    def test_defaults(self):
        assert start_options() == []

    def test_all_options(self):
        options = start_options(
            checkpoint="cp1",
            checkpoint_dir="/var/cp",
            attach=True,
            detach_keys="ctrl-x",
            interactive=True
        )
        assert options == [
            "--attach",
            "--checkpoint", "cp1",
            "--checkpoint-dir", "/var/cp",
            "--detach-keys", "ctrl-x",
            "--interactive",
        ]

    def test_checkpoint_requires_dir(self):
        with pytest.raises(ValueError, match="checkpoint"):
            start_options(checkpoint="cp1")

    def test_attach_must_be_bool(self):
        with pytest.raises(TypeError):
            start_options(attach="yes")


class TestDelay:

    @pytest.mark.parametrize("delay,expected", [
        (False, []),
        (None, []),
        (0, ["--time", "0"]),
        (10, ["--time", "10"]),
        (5.0, ["--time", "5"]),
    ])
    def test_time_options(self, delay, expected):
        assert time_options(delay) == expected

    @pytest.mark.parametrize("delay", [True, "10", [10], {}])
    def test_rejects_non_numbers(self, delay):
        with pytest.raises(TypeError):
            validate_delay(delay)

    @pytest.mark.parametrize("delay", [-1, 2.5])
    def test_rejects_bad_numbers(self, delay):
        with pytest.raises(ValueError):
            validate_delay(delay)


class TestRmOptions:

    def test_flags(self):
        assert rm_options(force=True, link=True, volume=True) == ["--force", "--link", "--volumes"]
        assert rm_options() == []

    def test_string_booleans(self):
        assert rm_options(link="true", volume="no") == ["--link"]

    def test_force_must_be_bool(self):
        with pytest.raises(TypeError):
            rm_options(force="true")

    @pytest.mark.parametrize("field", ["link", "volume"])
    def test_link_volume_types(self, field):
        with pytest.raises(TypeError):
            rm_options(**{field: 1})
        with pytest.raises(ValueError):
            rm_options(**{field: "maybe"})


class TestLogsOptions:

    def test_follow_tail_timestamps(self):
        assert logs_options(follow=True, tail=100, timestamps=True, since="10m") == [
            "--follow", "--tail", "100", "--timestamps", "--since", "10m"
        ]

    def test_tail_all(self):
        assert logs_options(tail="all") == ["--tail", "all"]

    @pytest.mark.parametrize("tail,error", [(-5, ValueError), ("last", ValueError), (True, TypeError), (1.5, TypeError)])
    def test_bad_tail(self, tail, error):
        with pytest.raises(error):
            logs_options(tail=tail)


class TestMappingOptions:

    def test_conversion_rules(self):
        options = mapping_options({
            "name": "web",
            "detach": True,
            "privileged": False,
            "hostname": None,
            "publish": ["80:80", "443:443"],
            "memory_swap": "1g",
            "e": "A=1",
        })
        assert options == [
            "--name", "web",
            "--detach",
            "--publish", "80:80",
            "--publish", "443:443",
            "--memory-swap", "1g",
            "-e", "A=1",
        ]

    def test_none_is_empty(self):
        assert mapping_options(None) == []

    def test_requires_mapping(self):
        with pytest.raises(TypeError, match="settings"):
            mapping_options(["--name", "web"])


class TestCommandSplitting:

    def test_string_is_split(self):
        assert split_command("sh -c 'echo hi'") == ["sh", "-c", "echo hi"]

    def test_list_is_kept(self):
        assert split_command(["echo", "a b"]) == ["echo", "a b"]

    def test_invalid(self):
        with pytest.raises(ValueError):
            split_command("  ")
        with pytest.raises(TypeError):
            split_command(42)
        with pytest.raises(TypeError):
            split_command(["echo", 1])

    def test_additional_args(self):
        assert validate_additional_args(None) == []
        assert validate_additional_args(("-l",)) == ["-l"]
        with pytest.raises(TypeError):
            validate_additional_args("-l")
