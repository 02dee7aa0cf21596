"""
Docker CLI Arguments

Validation of user-supplied arguments and construction of the option lists
for each docker subcommand. Builders return plain argument lists; quoting
for the remote shell happens once, in ``format_command``.

All validation runs before any network traffic.

Author: Remote Docker Project
License: MIT
"""

import re
import shlex
from typing import Any, List, Mapping, Optional, Sequence, Union

SHORT_ID_LENGTH = 12

SHORT_ID_PATTERN = re.compile(r"[0-9a-f]{12}")

NOT_FOUND_MARKERS = ("No such container", "No such object")

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


def format_command(argv: Sequence[str]) -> str:
    """Join arguments into a shell-safe command line."""
    return " ".join(shlex.quote(str(arg)) for arg in argv)


def validate_container_id(container_id: Any) -> str:
    """
    Check a container ID or name.

    Raises:
        TypeError: Not a string
        ValueError: Empty string
    """
    if not isinstance(container_id, str):
        raise TypeError('The container ID must be a string')
    container_id = container_id.strip()
    if not container_id:
        raise ValueError('The container ID must not be empty')
    return container_id


def is_short_id(container_id: str) -> bool:
    """Short IDs are exactly 12 characters long."""
    return len(container_id) == SHORT_ID_LENGTH


def is_hex_short_id(container_id: str) -> bool:
    """True for a real short ID, as opposed to a 12 character name."""
    return SHORT_ID_PATTERN.fullmatch(container_id) is not None


def validate_short_id(short_id: Any) -> str:
    """Check that ``short_id`` is a 12 character string."""
    if not isinstance(short_id, str):
        raise TypeError('The ID must be a string')
    if not is_short_id(short_id):
        raise TypeError(f'The ID must be a short ID ({SHORT_ID_LENGTH} chars)')
    return short_id


def is_not_found(output: str) -> bool:
    return any(marker in output for marker in NOT_FOUND_MARKERS)


def _optional_str(name: str, value: Any) -> Optional[str]:
    """False and None mean "not set"; anything else must be a string."""
    if value is None or value is False:
        return None
    if not isinstance(value, str):
        raise TypeError(f'The "{name}" argument must be a string')
    return value


def _require_bool(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f'The "{name}" argument must be a boolean')
    return value


def _bool_or_str(name: str, value: Any) -> bool:
    """Accept a boolean or its textual form ("true", "no", ...)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise ValueError(f'The "{name}" argument is not a valid boolean string: {value!r}')
    raise TypeError(f'The "{name}" argument must be a boolean or a string')


def validate_delay(delay: Any) -> Optional[int]:
    """
    Check a stop/restart grace period.

    ``False`` and ``None`` mean "use the daemon default".

    Raises:
        TypeError: Neither False nor a number
        ValueError: Negative or fractional number of seconds
    """
    if delay is None or delay is False:
        return None
    if isinstance(delay, bool) or not isinstance(delay, (int, float)):
        raise TypeError('The "delay" argument must be a numeric integer')
    if delay < 0:
        raise ValueError(f'The "delay" argument must not be negative: {delay}')
    if isinstance(delay, float):
        if not delay.is_integer():
            raise ValueError(f'The "delay" argument must be a whole number of seconds: {delay}')
        delay = int(delay)
    return delay


def start_options(
    checkpoint: Any = False,
    checkpoint_dir: Any = False,
    attach: Any = False,
    detach_keys: Any = False,
    interactive: Any = False
) -> List[str]:
    """Options for ``docker start``."""
    checkpoint = _optional_str("checkpoint", checkpoint)
    checkpoint_dir = _optional_str("checkpoint_dir", checkpoint_dir)
    detach_keys = _optional_str("detach_keys", detach_keys)
    attach = _require_bool("attach", attach)
    interactive = _require_bool("interactive", interactive)

    if checkpoint and not checkpoint_dir:
        raise ValueError('Fill in the checkpoint path with the "checkpoint_dir" argument')

    options = []
    if attach:
        options.append("--attach")
    if checkpoint:
        options.extend(["--checkpoint", checkpoint])
    if checkpoint_dir:
        options.extend(["--checkpoint-dir", checkpoint_dir])
    if detach_keys:
        options.extend(["--detach-keys", detach_keys])
    if interactive:
        options.append("--interactive")
    return options


def time_options(delay: Any = False) -> List[str]:
    """Options for ``docker stop`` and ``docker restart``."""
    seconds = validate_delay(delay)
    if seconds is None:
        return []
    return ["--time", str(seconds)]


def rm_options(force: Any = False, link: Any = False, volume: Any = False) -> List[str]:
    """Options for ``docker rm``."""
    if not isinstance(force, bool):
        raise TypeError('The "force" argument must be a boolean')
    link = _bool_or_str("link", link)
    volume = _bool_or_str("volume", volume)

    options = []
    if force:
        options.append("--force")
    if link:
        options.append("--link")
    if volume:
        options.append("--volumes")
    return options


def logs_options(
    follow: bool = False,
    tail: Union[int, str, None] = None,
    timestamps: Any = False,
    since: Optional[str] = None
) -> List[str]:
    """Options for ``docker logs``."""
    timestamps = _require_bool("timestamps", timestamps)
    since = _optional_str("since", since)

    options = []
    if follow:
        options.append("--follow")
    if tail is not None:
        if isinstance(tail, bool) or not isinstance(tail, (int, str)):
            raise TypeError('The "tail" argument must be an integer or "all"')
        if isinstance(tail, int) and tail < 0:
            raise ValueError(f'The "tail" argument must not be negative: {tail}')
        if isinstance(tail, str) and tail != "all":
            raise ValueError(f'The "tail" argument must be an integer or "all": {tail!r}')
        options.extend(["--tail", str(tail)])
    if timestamps:
        options.append("--timestamps")
    if since:
        options.extend(["--since", since])
    return options


def _flag_name(key: str) -> str:
    name = key.replace("_", "-")
    return f"-{name}" if len(name) == 1 else f"--{name}"


def mapping_options(settings: Optional[Mapping[str, Any]], name: str = "settings") -> List[str]:
    """
    Turn a mapping into CLI flags.

    ``True`` gives a bare flag, ``False``/``None`` drop the flag, a list or
    tuple repeats the flag once per value and anything else becomes
    ``--key value``. Underscores in keys become dashes.
    """
    if settings is None:
        return []
    if not isinstance(settings, Mapping):
        raise TypeError(f'The {name} argument must be a mapping')

    options = []
    for key, value in settings.items():
        if not isinstance(key, str) or not key:
            raise TypeError(f'Keys of the {name} argument must be non-empty strings')
        flag = _flag_name(key)
        if value is True:
            options.append(flag)
        elif value is False or value is None:
            continue
        elif isinstance(value, (list, tuple)):
            for item in value:
                options.extend([flag, str(item)])
        else:
            options.extend([flag, str(value)])
    return options


def split_command(command: Any, name: str = "command") -> List[str]:
    """Accept a command as a shell-like string or a list of arguments."""
    if isinstance(command, str):
        if not command.strip():
            raise ValueError(f'The "{name}" argument must not be empty')
        return shlex.split(command)
    if isinstance(command, (list, tuple)):
        if not command:
            raise ValueError(f'The "{name}" argument must not be empty')
        if not all(isinstance(part, str) for part in command):
            raise TypeError(f'The "{name}" argument must only contain strings')
        return list(command)
    raise TypeError(f'The "{name}" argument must be a string or a list of strings')


def validate_additional_args(additional_args: Any) -> List[str]:
    """Check extra arguments passed through to the remote command."""
    if additional_args is None:
        return []
    if not isinstance(additional_args, (list, tuple)):
        raise TypeError('Additional arguments must be a list')
    if not all(isinstance(arg, str) for arg in additional_args):
        raise TypeError('Additional arguments must only contain strings')
    return list(additional_args)


def validate_new_name(new_name: Any) -> str:
    if not isinstance(new_name, str):
        raise TypeError('The "new_name" argument must be a string')
    if not new_name.strip():
        raise ValueError('The "new_name" argument must not be empty')
    return new_name.strip()


def validate_image(image: Any) -> str:
    if not isinstance(image, str):
        raise TypeError('The "image" argument must be a string')
    if not image.strip():
        raise ValueError('The "image" argument must not be empty')
    return image.strip()
