"""
Docker Interface Models

Result of a remote command execution, and the projection of
``docker inspect`` output into a container state record.

Author: Remote Docker Project
License: MIT
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class CommandResult:
    """Result of command execution."""
    command: str
    exit_code: int
    stdout: str
    stderr: str
    execution_time: float
    interrupted: bool = False

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr."""
        return self.stdout + self.stderr


@dataclass
class ContainerPaths:
    """Filesystem paths and mounts of a container."""
    path: Optional[str] = None
    resolv_conf: Optional[str] = None
    hostname: Optional[str] = None
    log: Optional[str] = None
    binds: Optional[List[str]] = None
    masked_paths: Optional[List[str]] = None
    readonly_paths: Optional[List[str]] = None
    mounts: Optional[List[Dict[str, Any]]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Path": self.path,
            "ResolveConf": self.resolv_conf,
            "Hostname": self.hostname,
            "Log": self.log,
            "HostConfig": self.binds,
            "MaskedPaths": self.masked_paths,
            "ReadonlyPaths": self.readonly_paths,
            "Mounts": self.mounts,
        }


@dataclass
class ContainerConfig:
    """Subset of the container configuration."""
    host_config: Optional[Dict[str, Any]] = None
    platform: Optional[str] = None
    hostname: Optional[str] = None
    domainname: Optional[str] = None
    user: Optional[str] = None
    attach_stdin: Optional[bool] = None
    attach_stdout: Optional[bool] = None
    attach_stderr: Optional[bool] = None
    exposed_ports: Optional[Dict[str, Any]] = None
    tty: Optional[bool] = None
    open_stdin: Optional[bool] = None
    stdin_once: Optional[bool] = None
    env: Optional[List[str]] = None
    cmd: Optional[List[str]] = None
    healthcheck: Optional[Dict[str, Any]] = None
    image: Optional[str] = None
    volumes: Optional[Dict[str, Any]] = None
    working_dir: Optional[str] = None
    entrypoint: Optional[List[str]] = None
    labels: Optional[Dict[str, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "HostConfig": self.host_config,
            "Platform": self.platform,
            "Hostname": self.hostname,
            "Domainname": self.domainname,
            "User": self.user,
            "AttachStdin": self.attach_stdin,
            "AttachStdout": self.attach_stdout,
            "AttachStderr": self.attach_stderr,
            "OpensPorts": self.exposed_ports,
            "TTY": self.tty,
            "OpenStdin": self.open_stdin,
            "StdinOnce": self.stdin_once,
            "VarEnv": self.env,
            "CMD": self.cmd,
            "HealthCheck": self.healthcheck,
            "Image": self.image,
            "Volumes": self.volumes,
            "WorkDir": self.working_dir,
            "EntryPoint": self.entrypoint,
            "Labels": self.labels,
        }


@dataclass
class ContainerInfo:
    """
    Container state as reported by ``docker inspect``.

    Only a fixed subset of the inspect document is projected into fields;
    the complete parsed document stays available in ``raw``.
    """
    docker_id: str
    created_at: Optional[str] = None
    status: Optional[str] = None
    running: Optional[bool] = None
    paused: Optional[bool] = None
    restarting: Optional[bool] = None
    is_dead: Optional[bool] = None
    pid: Optional[int] = None
    exit_code: Optional[int] = None
    error: Optional[str] = None
    started_at: Optional[str] = None
    finished_at: Optional[str] = None
    image: Optional[str] = None
    restart_count: Optional[int] = None
    paths: ContainerPaths = field(default_factory=ContainerPaths)
    network: Optional[Dict[str, Any]] = None
    config: ContainerConfig = field(default_factory=ContainerConfig)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_inspect(cls, data: Dict[str, Any]) -> "ContainerInfo":
        """
        Build from one element of the ``docker inspect`` JSON array.

        Absent sections (State, Config, HostConfig) leave the dependent
        fields as None.
        """
        state = data.get("State") or {}
        host_config = data.get("HostConfig")
        config = data.get("Config") or {}

        # Docker uses "Healthcheck"; older clients used "HealthCheck"
        healthcheck = config.get("Healthcheck", config.get("HealthCheck"))

        return cls(
            docker_id=data.get("Id"),
            created_at=data.get("Created"),
            status=state.get("Status"),
            running=state.get("Running"),
            paused=state.get("Paused"),
            restarting=state.get("Restarting"),
            is_dead=state.get("Dead"),
            pid=state.get("Pid"),
            exit_code=state.get("ExitCode"),
            error=state.get("Error"),
            started_at=state.get("StartedAt"),
            finished_at=state.get("FinishedAt"),
            image=data.get("Image"),
            restart_count=data.get("RestartCount"),
            paths=ContainerPaths(
                path=data.get("Path"),
                resolv_conf=data.get("ResolvConfPath"),
                hostname=data.get("HostnamePath"),
                log=data.get("LogPath"),
                binds=(host_config or {}).get("Binds"),
                masked_paths=data.get("MaskedPaths", (host_config or {}).get("MaskedPaths")),
                readonly_paths=data.get("ReadonlyPaths", (host_config or {}).get("ReadonlyPaths")),
                mounts=data.get("Mounts"),
            ),
            network=data.get("NetworkSettings"),
            config=ContainerConfig(
                host_config=host_config,
                platform=data.get("Platform"),
                hostname=config.get("Hostname"),
                domainname=config.get("Domainname"),
                user=config.get("User"),
                attach_stdin=config.get("AttachStdin"),
                attach_stdout=config.get("AttachStdout"),
                attach_stderr=config.get("AttachStderr"),
                exposed_ports=config.get("ExposedPorts"),
                tty=config.get("Tty"),
                open_stdin=config.get("OpenStdin"),
                stdin_once=config.get("StdinOnce"),
                env=config.get("Env"),
                cmd=config.get("Cmd"),
                healthcheck=healthcheck,
                image=config.get("Image"),
                volumes=config.get("Volumes"),
                working_dir=config.get("WorkingDir"),
                entrypoint=config.get("Entrypoint"),
                labels=config.get("Labels"),
            ),
            raw=data,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the key names of the inspect projection."""
        return {
            "DockerID": self.docker_id,
            "CreatedAt": self.created_at,
            "Status": self.status,
            "Running": self.running,
            "Paused": self.paused,
            "Restarting": self.restarting,
            "IsDead": self.is_dead,
            "Pid": self.pid,
            "ExitCode": self.exit_code,
            "Error": self.error,
            "StartAt": self.started_at,
            "StopAt": self.finished_at,
            "Image": self.image,
            "RestartedCount": self.restart_count,
            "Paths": self.paths.to_dict(),
            "Network": self.network,
            "Config": self.config.to_dict(),
            "FullDatas": self.raw,
        }
