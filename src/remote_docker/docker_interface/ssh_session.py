"""
SSH Session for Remote Docker Commands
======================================

Runs one command on the remote Docker host over a dedicated SSH
connection. Each DockerManager call opens its own session, executes a
single command and closes the connection again, so concurrent calls never
share a channel.

Two execution styles are supported:
- Buffered: wait for the command to finish and return all output
- Streaming: forward output chunks to a callback while the command runs,
  until it exits, a stop event is set or a deadline passes

Author: Remote Docker Project
License: MIT
"""

import codecs
import socket
import threading
import time
from typing import Callable, Optional, Tuple

import paramiko
from paramiko import SSHClient, AutoAddPolicy, RejectPolicy

from ..config.schema import HostKeyPolicy, SSHSettings
from ..utils.logger import get_logger
from .exceptions import DockerTimeoutError, SSHConnectionError
from .models import CommandResult

logger = get_logger(__name__)

CHUNK_SIZE = 4096


class SSHSession:
    """
    Single-use SSH session to the Docker host.

    Example:
        ```python
        with SSHSession(settings) as session:
            result = session.run("docker ps --quiet")
        ```
    """

    def __init__(self, settings: SSHSettings, poll_interval: float = 0.1):
        """
        Initialize SSH session.

        Args:
            settings: Connection parameters
            poll_interval: Sleep between channel polls while streaming (seconds)
        """
        self.settings = settings
        self.poll_interval = poll_interval
        self._client: Optional[SSHClient] = None

    @property
    def is_connected(self) -> bool:
        if self._client is None:
            return False
        transport = self._client.get_transport()
        return bool(transport and transport.is_active())

    def connect(self) -> None:
        """
        Open the SSH connection.

        Raises:
            SSHConnectionError: Connection or authentication failed
        """
        client = SSHClient()
        if self.settings.known_hosts_policy == HostKeyPolicy.REJECT:
            client.load_system_host_keys()
            client.set_missing_host_key_policy(RejectPolicy())
        else:
            client.set_missing_host_key_policy(AutoAddPolicy())

        logger.debug(f"Connecting to {self.settings.username}@{self.settings.host}:{self.settings.port}")
        try:
            client.connect(
                hostname=self.settings.host,
                port=self.settings.port,
                username=self.settings.username,
                password=self.settings.password,
                timeout=self.settings.connect_timeout,
                look_for_keys=False,
                allow_agent=False
            )
        except (paramiko.SSHException, socket.error) as e:
            client.close()
            raise SSHConnectionError(self.settings.host, self.settings.port, str(e)) from e

        self._client = client

    def close(self) -> None:
        """Close the connection if open."""
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.debug(f"Closed connection to {self.settings.host}:{self.settings.port}")

    def __enter__(self) -> "SSHSession":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _require_client(self) -> SSHClient:
        if self._client is None:
            raise SSHConnectionError(self.settings.host, self.settings.port, "session is not connected")
        return self._client

    def _exec(self, command: str, timeout: Optional[float]):
        client = self._require_client()
        try:
            return client.exec_command(command, timeout=timeout)
        except paramiko.SSHException as e:
            raise SSHConnectionError(self.settings.host, self.settings.port, str(e)) from e

    def _collect(
        self,
        channel,
        on_chunk: Optional[Callable[[str], None]] = None,
        stop_event: Optional[threading.Event] = None,
        deadline: Optional[float] = None
    ) -> Tuple[str, str, Optional[str]]:
        """
        Read stdout and stderr from a channel until the command exits.

        Returns:
            Tuple of (stdout, stderr, stop_reason). ``stop_reason`` is None
            when the command exited, otherwise "stopped" or "deadline".
        """
        decoders = {
            'stdout': codecs.getincrementaldecoder('utf-8')(errors='replace'),
            'stderr': codecs.getincrementaldecoder('utf-8')(errors='replace'),
        }
        parts = {'stdout': [], 'stderr': []}

        def emit(stream_name: str, text: str) -> None:
            if text:
                parts[stream_name].append(text)
                if on_chunk is not None:
                    on_chunk(text)

        def read_available() -> bool:
            received = False
            if channel.recv_ready():
                emit('stdout', decoders['stdout'].decode(channel.recv(CHUNK_SIZE)))
                received = True
            if channel.recv_stderr_ready():
                emit('stderr', decoders['stderr'].decode(channel.recv_stderr(CHUNK_SIZE)))
                received = True
            return received

        stop_reason = None
        while True:
            if read_available():
                continue
            if channel.exit_status_ready():
                break
            if stop_event is not None and stop_event.is_set():
                stop_reason = "stopped"
                break
            if deadline is not None and time.monotonic() >= deadline:
                stop_reason = "deadline"
                break
            time.sleep(self.poll_interval)

        if stop_reason is None:
            # The last output can arrive together with the exit status
            while read_available():
                pass

        for stream_name, decoder in decoders.items():
            emit(stream_name, decoder.decode(b'', final=True))

        return "".join(parts['stdout']), "".join(parts['stderr']), stop_reason

    def run(self, command: str, timeout: Optional[float] = None) -> CommandResult:
        """
        Execute a command and wait for it to finish.

        Args:
            command: Shell command line
            timeout: Limit for the whole command in seconds (None = wait forever)

        Returns:
            CommandResult with the complete output

        Raises:
            SSHConnectionError: The channel could not be opened
            DockerTimeoutError: The command did not exit within the timeout
        """
        logger.info(f"Executing on {self.settings.host}:{self.settings.port}: {command}")
        start_time = time.monotonic()
        deadline = start_time + timeout if timeout is not None else None

        _, stdout, _ = self._exec(command, timeout)
        channel = stdout.channel

        stdout_data, stderr_data, stop_reason = self._collect(channel, deadline=deadline)
        if stop_reason is not None:
            channel.close()
            raise DockerTimeoutError(command, timeout)
        exit_code = channel.recv_exit_status()

        execution_time = time.monotonic() - start_time
        if exit_code == 0:
            logger.info(f"Command completed in {execution_time:.2f}s: {len(stdout_data)} bytes output")
        else:
            logger.warning(f"Command exited with code {exit_code}: {stderr_data.strip()[:200]}")

        return CommandResult(
            command=command,
            exit_code=exit_code,
            stdout=stdout_data,
            stderr=stderr_data,
            execution_time=execution_time
        )

    def stream(
        self,
        command: str,
        on_chunk: Callable[[str], None],
        stop_event: Optional[threading.Event] = None,
        timeout: Optional[float] = None
    ) -> CommandResult:
        """
        Execute a command and forward its output as it arrives.

        Stdout and stderr chunks are both passed to ``on_chunk``. The call
        returns when the command exits, ``stop_event`` is set or ``timeout``
        seconds have passed; in the last two cases the channel is closed,
        ``exit_code`` is -1 and ``interrupted`` is set on the result.

        Args:
            command: Shell command line
            on_chunk: Called with each decoded chunk
            stop_event: Set from another thread to stop streaming
            timeout: Maximum streaming duration in seconds

        Returns:
            CommandResult with everything received
        """
        logger.info(f"Streaming on {self.settings.host}:{self.settings.port}: {command}")
        start_time = time.monotonic()
        deadline = start_time + timeout if timeout is not None else None

        _, stdout, _ = self._exec(command, None)
        channel = stdout.channel

        stdout_data, stderr_data, stop_reason = self._collect(
            channel,
            on_chunk=on_chunk,
            stop_event=stop_event,
            deadline=deadline
        )

        if stop_reason == "stopped":
            logger.info("Streaming stopped by caller")
        elif stop_reason == "deadline":
            logger.info(f"Streaming stopped after {timeout}s")

        if stop_reason is not None:
            channel.close()
            exit_code = -1
        else:
            exit_code = channel.recv_exit_status()

        execution_time = time.monotonic() - start_time
        logger.debug(f"Stream finished in {execution_time:.2f}s (exit_code={exit_code})")

        return CommandResult(
            command=command,
            exit_code=exit_code,
            stdout=stdout_data,
            stderr=stderr_data,
            execution_time=execution_time,
            interrupted=stop_reason is not None
        )


def run_command(
    settings: SSHSettings,
    command: str,
    timeout: Optional[float] = None
) -> CommandResult:
    """
    Open a session, run one command and close the session.

    Args:
        settings: Connection parameters
        command: Shell command line
        timeout: Command timeout in seconds

    Returns:
        CommandResult
    """
    with SSHSession(settings) as session:
        return session.run(command, timeout=timeout)


def stream_command(
    settings: SSHSettings,
    command: str,
    on_chunk: Callable[[str], None],
    stop_event: Optional[threading.Event] = None,
    timeout: Optional[float] = None
) -> CommandResult:
    """Open a session, stream one command and close the session."""
    with SSHSession(settings) as session:
        return session.stream(command, on_chunk, stop_event=stop_event, timeout=timeout)
