"""
Docker Manager

Container lifecycle commands for a remote Docker host reached over SSH.

Each public method validates its arguments, resolves a short container ID
to the full ID when needed, opens one SSH session, runs a single
``docker ...`` command line and interprets the result:

- ``None`` when the container does not exist
- ``True`` for lifecycle commands that succeeded (start, stop, ...)
- ``ContainerInfo`` for inspect
- the trimmed output for everything else

Author: Remote Docker Project
License: MIT
"""

import json
import threading
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Union

from ..config.schema import ClientSettings, Config, SSHSettings
from ..utils.logger import configure_logging, get_logger
from .commands import (
    format_command,
    is_hex_short_id,
    is_not_found,
    is_short_id,
    logs_options,
    mapping_options,
    rm_options,
    split_command,
    start_options,
    time_options,
    validate_additional_args,
    validate_container_id,
    validate_image,
    validate_new_name,
    validate_short_id,
)
from .exceptions import DockerCommandError
from .models import CommandResult, ContainerInfo
from .ssh_session import run_command, stream_command

logger = get_logger(__name__)

# Commands whose only useful outcome is success or failure
LIFECYCLE_COMMANDS = frozenset({"start", "stop", "restart", "pause", "unpause", "rename", "rm"})

CommandOutcome = Union[None, bool, str, ContainerInfo]


class DockerManager:
    """
    Remote Docker command client.

    Example:
        ```python
        manager = DockerManager({
            "host": "docker.example.org",
            "port": 22,
            "username": "deploy",
            "password": "secret",
        })

        manager.restart("3f4e8a1b2c9d", delay=5)
        info = manager.get_infos("3f4e8a1b2c9d")
        print(info.status if info else "not found")
        ```
    """

    def __init__(
        self,
        ssh_settings: Union[SSHSettings, Mapping[str, Any]],
        client_settings: Union[ClientSettings, Mapping[str, Any], None] = None
    ):
        """
        Initialize the client. No connection is made here.

        Args:
            ssh_settings: host (str), port (int), username (str), password (str)
            client_settings: Optional client behaviour settings

        Raises:
            TypeError: ssh_settings is not a mapping
            ValueError: A connection parameter is missing or has the wrong type
        """
        if isinstance(ssh_settings, SSHSettings):
            self.ssh_settings = ssh_settings
        elif isinstance(ssh_settings, Mapping):
            self.ssh_settings = SSHSettings(**ssh_settings)
        else:
            raise TypeError('SSH parameters must be a mapping')

        if client_settings is None:
            self.client_settings = ClientSettings()
        elif isinstance(client_settings, ClientSettings):
            self.client_settings = client_settings
        elif isinstance(client_settings, Mapping):
            self.client_settings = ClientSettings(**client_settings)
        else:
            raise TypeError('Client settings must be a mapping')

        self._full_ids: Dict[str, str] = {}
        self._full_ids_lock = threading.Lock()

        logger.info(
            f"DockerManager initialized for {self.ssh_settings.username}@"
            f"{self.ssh_settings.host}:{self.ssh_settings.port}"
        )

    @classmethod
    def from_config(cls, config: Config, apply_logging: bool = True) -> "DockerManager":
        """
        Create a client from a loaded configuration.

        Args:
            config: Loaded configuration
            apply_logging: Also apply the ``logging`` section
        """
        if apply_logging:
            configure_logging(config.logging)
        return cls(config.ssh, config.client)

    # ------------------------------------------------------------------
    # ID resolution
    # ------------------------------------------------------------------

    def get_full_id(self, short_id: str) -> Optional[str]:
        """
        Resolve a 12 character short ID to the full container ID.

        Args:
            short_id: Short container ID

        Returns:
            Full ID, or None if no such container exists

        Raises:
            TypeError: short_id is not a 12 character string
        """
        validate_short_id(short_id)
        return self._resolve_container_id(short_id)

    def _resolve_container_id(self, container_id: str) -> Optional[str]:
        if not is_short_id(container_id):
            return container_id

        # Names can be reused, so only real short IDs are cached
        cacheable = self.client_settings.cache_full_ids and is_hex_short_id(container_id)

        if cacheable:
            with self._full_ids_lock:
                cached = self._full_ids.get(container_id)
            if cached:
                logger.debug(f"Using cached full ID for {container_id}")
                return cached

        result = self._run(format_command(["docker", "inspect", "--format", "{{.Id}}", container_id]))
        if is_not_found(result.output):
            logger.info(f"No such container: {container_id}")
            return None
        if not result.success:
            raise DockerCommandError(result)

        full_id = result.stdout.strip() or None
        if full_id and cacheable:
            with self._full_ids_lock:
                self._full_ids[container_id] = full_id
        return full_id

    def clear_id_cache(self) -> None:
        """Forget all short ID resolutions."""
        with self._full_ids_lock:
            self._full_ids.clear()

    def _forget_container(self, container_id: str) -> None:
        """Drop cache entries keyed by or resolving to ``container_id``."""
        with self._full_ids_lock:
            for short_id, full_id in list(self._full_ids.items()):
                if container_id in (short_id, full_id):
                    del self._full_ids[short_id]

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _run(self, command: str) -> CommandResult:
        return run_command(self.ssh_settings, command, timeout=self.client_settings.command_timeout)

    def execute_docker_command(
        self,
        subcommand: str,
        container_id: Optional[str] = None,
        options: Optional[Sequence[str]] = None,
        args: Optional[Sequence[str]] = None,
        streaming: bool = False,
        callback: Optional[Callable[[str], None]] = None,
        stop_event: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
        merge_stderr: bool = False
    ) -> CommandOutcome:
        """
        Run ``docker <subcommand> <options> <container_id> <args>`` remotely.

        Args:
            subcommand: Docker subcommand (start, inspect, logs, ...)
            container_id: Target container, resolved first if it is a short ID
            options: Flags placed before the container ID
            args: Arguments placed after the container ID
            streaming: Forward output chunks to ``callback`` while running
            callback: Chunk consumer for streaming mode
            stop_event: Stops a streaming command when set
            timeout: Streaming duration limit in seconds
            merge_stderr: Redirect the remote stderr into stdout

        Returns:
            None, True, ContainerInfo or the trimmed output (see module doc)

        Raises:
            DockerCommandError: The command failed
            SSHConnectionError: The SSH connection failed
            DockerTimeoutError: A buffered command exceeded command_timeout
        """
        if not isinstance(subcommand, str) or not subcommand.strip():
            raise TypeError('The docker subcommand must be a non-empty string')
        options = validate_additional_args(options)
        args = validate_additional_args(args)
        if streaming and not callable(callback):
            raise TypeError('Callback must be a function')

        argv = ["docker", subcommand, *options]
        if container_id is not None:
            resolved = self._resolve_container_id(validate_container_id(container_id))
            if resolved is None:
                return None
            argv.append(resolved)
        argv.extend(args)

        command = format_command(argv)
        if merge_stderr:
            command += " 2>&1"

        if streaming:
            result = stream_command(
                self.ssh_settings,
                command,
                callback,
                stop_event=stop_event,
                timeout=timeout
            )
        else:
            result = self._run(command)

        return self._interpret(subcommand, result)

    def _interpret(self, subcommand: str, result: CommandResult) -> CommandOutcome:
        if is_not_found(result.output):
            logger.info(f"No such container for: {result.command}")
            return None

        if not result.success and not result.interrupted:
            raise DockerCommandError(result)

        if subcommand == "inspect":
            return self._parse_inspect(result)

        if subcommand in LIFECYCLE_COMMANDS:
            return True

        return result.stdout.strip()

    @staticmethod
    def _parse_inspect(result: CommandResult) -> Optional[ContainerInfo]:
        try:
            documents = json.loads(result.stdout.strip())
        except json.JSONDecodeError as e:
            raise DockerCommandError(result, f"Invalid inspect output: {e}") from e

        if isinstance(documents, dict):
            documents = [documents]
        if not isinstance(documents, list):
            raise DockerCommandError(result, "Inspect output is not a JSON array")
        if not documents:
            return None
        return ContainerInfo.from_inspect(documents[0])

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(
        self,
        container_id: str,
        checkpoint: Union[str, bool] = False,
        checkpoint_dir: Union[str, bool] = False,
        attach: bool = False,
        detach_keys: Union[str, bool] = False,
        interactive: bool = False
    ) -> Optional[bool]:
        """
        Start a stopped container.

        Args:
            container_id: Container ID or name
            checkpoint: Restore from this checkpoint (requires checkpoint_dir)
            checkpoint_dir: Custom checkpoint storage directory
            attach: Attach stdout/stderr
            detach_keys: Key sequence for detaching
            interactive: Attach stdin

        Returns:
            True on success, None if the container does not exist
        """
        container_id = validate_container_id(container_id)
        options = start_options(checkpoint, checkpoint_dir, attach, detach_keys, interactive)
        if checkpoint or checkpoint_dir:
            logger.warning("Checkpoints are experimental and need an experimental Docker daemon")

        logger.info(f"Starting container {container_id}")
        return self.execute_docker_command("start", container_id, options=options)

    def stop(self, container_id: str, delay: Union[int, bool, None] = False) -> Optional[bool]:
        """
        Stop a running container.

        Args:
            container_id: Container ID or name
            delay: Seconds to wait before killing, False for the daemon default
        """
        container_id = validate_container_id(container_id)
        options = time_options(delay)
        logger.info(f"Stopping container {container_id}")
        return self.execute_docker_command("stop", container_id, options=options)

    def rename(self, container_id: str, new_name: str) -> Optional[bool]:
        """Rename a container."""
        container_id = validate_container_id(container_id)
        new_name = validate_new_name(new_name)
        logger.info(f"Renaming container {container_id} to {new_name}")
        renamed = self.execute_docker_command("rename", container_id, args=[new_name])
        if renamed:
            self._forget_container(container_id)
        return renamed

    def suspend(self, container_id: str) -> Optional[bool]:
        """Pause all processes in a container."""
        container_id = validate_container_id(container_id)
        logger.info(f"Pausing container {container_id}")
        return self.execute_docker_command("pause", container_id)

    pause = suspend

    def unpause(self, container_id: str) -> Optional[bool]:
        """Resume a paused container."""
        container_id = validate_container_id(container_id)
        logger.info(f"Unpausing container {container_id}")
        return self.execute_docker_command("unpause", container_id)

    def restart(self, container_id: str, delay: Union[int, bool, None] = False) -> Optional[bool]:
        """
        Restart a container.

        Args:
            container_id: Container ID or name
            delay: Seconds to wait before killing, False for the daemon default
        """
        container_id = validate_container_id(container_id)
        options = time_options(delay)
        logger.info(f"Restarting container {container_id}")
        return self.execute_docker_command("restart", container_id, options=options)

    def get_infos(self, container_id: str) -> Optional[ContainerInfo]:
        """
        Inspect a container.

        Returns:
            ContainerInfo, or None if the container does not exist
        """
        container_id = validate_container_id(container_id)
        return self.execute_docker_command("inspect", container_id)

    inspect = get_infos

    def delete(
        self,
        container_id: str,
        force: bool = False,
        link: Union[bool, str] = False,
        volume: Union[bool, str] = False
    ) -> Optional[bool]:
        """
        Remove a container.

        Args:
            container_id: Container ID or name
            force: Kill a running container first
            link: Remove the specified link instead of the container
            volume: Also remove anonymous volumes

        ``link`` and ``volume`` also accept "true"/"false" style strings.
        """
        container_id = validate_container_id(container_id)
        options = rm_options(force, link, volume)
        logger.info(f"Removing container {container_id}")
        removed = self.execute_docker_command("rm", container_id, options=options)
        if removed:
            self._forget_container(container_id)
        return removed

    # ------------------------------------------------------------------
    # Logs
    # ------------------------------------------------------------------

    def log(
        self,
        container_id: str,
        stream: bool = False,
        callback: Optional[Callable[[str], None]] = None,
        tail: Union[int, str, None] = None,
        timestamps: bool = False,
        since: Optional[str] = None,
        timeout: Optional[float] = None,
        stop_event: Optional[threading.Event] = None
    ) -> Optional[str]:
        """
        Fetch container logs.

        With ``stream=True`` the logs are followed: every chunk is passed to
        ``callback`` as it arrives and the call blocks until the container
        stops logging, ``stop_event`` is set or ``timeout`` seconds pass.
        Without streaming, ``callback`` is not used.

        Returns:
            All log text received, or None if the container does not exist

        Raises:
            TypeError: stream is not a bool, or streaming without a callable callback
        """
        container_id = validate_container_id(container_id)
        if not isinstance(stream, bool):
            raise TypeError('The "stream" argument must be a boolean')
        if callback is not None and not callable(callback):
            raise TypeError('Callback must be a function')
        if stream and callback is None:
            raise TypeError('Callback must be a function')
        if stop_event is not None and not isinstance(stop_event, threading.Event):
            raise TypeError('The "stop_event" argument must be a threading.Event')
        if timeout is not None and (isinstance(timeout, bool) or not isinstance(timeout, (int, float))):
            raise TypeError('The "timeout" argument must be a number of seconds')

        options = logs_options(follow=stream, tail=tail, timestamps=timestamps, since=since)
        return self.execute_docker_command(
            "logs",
            container_id,
            options=options,
            streaming=stream,
            callback=callback,
            stop_event=stop_event,
            timeout=timeout,
            merge_stderr=True
        )

    def follow_logs(
        self,
        container_id: str,
        callback: Callable[[str], None],
        tail: Union[int, str, None] = None,
        timestamps: bool = False,
        timeout: Optional[float] = None
    ) -> "LogFollower":
        """
        Follow logs on a background thread.

        Returns:
            A started LogFollower; call ``stop()`` to end the stream
        """
        if not callable(callback):
            raise TypeError('Callback must be a function')
        validate_container_id(container_id)
        logs_options(follow=True, tail=tail, timestamps=timestamps)

        follower = LogFollower(self, container_id, callback, tail=tail, timestamps=timestamps, timeout=timeout)
        follower.start()
        return follower

    # ------------------------------------------------------------------
    # Create / exec
    # ------------------------------------------------------------------

    def create(
        self,
        image: str,
        settings: Optional[Mapping[str, Any]] = None,
        command: Union[str, Sequence[str], None] = None
    ) -> Optional[str]:
        """
        Create a container without starting it.

        Settings keys map to ``docker create`` flags: ``True`` gives a bare
        flag, ``False``/``None`` omit it and lists repeat it.

        Example:
            ```python
            manager.create("nginx:alpine", {"name": "web", "publish": ["80:80"], "rm": True})
            ```

        Returns:
            Full ID of the new container
        """
        options = mapping_options(settings, "settings")
        image = validate_image(image)
        trailing = split_command(command) if command is not None else []

        logger.info(f"Creating container from {image}")
        output = self.execute_docker_command("create", options=options, args=[image, *trailing])
        if not output:
            return output
        # Image pull progress may precede the ID
        return output.splitlines()[-1].strip()

    def exec(
        self,
        container_id: str,
        command: Union[str, Sequence[str]],
        additional_args: Optional[Sequence[str]] = None,
        options: Optional[Mapping[str, Any]] = None
    ) -> Optional[str]:
        """
        Run a command inside a running container.

        Args:
            container_id: Container ID or name
            command: Command line (split like a shell would) or argument list
            additional_args: Extra arguments appended to the command
            options: ``docker exec`` flags, e.g. {"user": "root", "env": ["A=1"]}

        Returns:
            Trimmed command output, or None if the container does not exist
        """
        container_id = validate_container_id(container_id)
        argv = split_command(command) + validate_additional_args(additional_args)
        exec_options = mapping_options(options, "options")

        logger.info(f"Executing in container {container_id}: {' '.join(argv)}")
        return self.execute_docker_command("exec", container_id, options=exec_options, args=argv)


class LogFollower(threading.Thread):
    """Background thread running ``DockerManager.log`` in streaming mode."""

    def __init__(
        self,
        manager: DockerManager,
        container_id: str,
        callback: Callable[[str], None],
        tail: Union[int, str, None] = None,
        timestamps: bool = False,
        timeout: Optional[float] = None
    ):
        super().__init__(name=f"docker-logs-{container_id}", daemon=True)
        self.manager = manager
        self.container_id = container_id
        self.callback = callback
        self.tail = tail
        self.timestamps = timestamps
        self.timeout = timeout
        self.stop_event = threading.Event()
        self.result: Optional[str] = None
        self.error: Optional[BaseException] = None

    def run(self) -> None:
        try:
            self.result = self.manager.log(
                self.container_id,
                stream=True,
                callback=self.callback,
                tail=self.tail,
                timestamps=self.timestamps,
                timeout=self.timeout,
                stop_event=self.stop_event
            )
        except Exception as e:
            logger.error(f"Log stream for {self.container_id} failed: {e}")
            self.error = e

    def stop(self, wait: bool = True, timeout: Optional[float] = None) -> None:
        """Ask the stream to end, optionally waiting for the thread."""
        self.stop_event.set()
        if wait:
            self.join(timeout)
