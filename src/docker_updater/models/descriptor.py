"""Container descriptor built from docker inspect data."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

COMPOSE_LABEL_PREFIX = "com.docker.compose."
COMPOSE_PROJECT_LABEL = "com.docker.compose.project"
COMPOSE_WORKING_DIR_LABEL = "com.docker.compose.project.working_dir"
COMPOSE_CONFIG_FILES_LABEL = "com.docker.compose.project.config_files"


class RestartPolicy(BaseModel):
    """Restart policy name and retry budget."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    max_retry: int = 0


class PortBinding(BaseModel):
    """One published port: host address and port bound to a container port."""

    model_config = ConfigDict(frozen=True)

    container_port: str  # e.g. "80/tcp"
    host_ip: str = ""
    host_port: str = ""


class MountPoint(BaseModel):
    """A bind mount, named volume or tmpfs attached to the container."""

    model_config = ConfigDict(frozen=True)

    type: str
    source: str = ""
    destination: str
    read_only: bool = False
    tmpfs_options: str = ""


class DeviceMapping(BaseModel):
    """Host device exposed inside the container."""

    model_config = ConfigDict(frozen=True)

    path_on_host: str
    path_in_container: str
    cgroup_permissions: str = "rwm"


class ContainerDescriptor(BaseModel):
    """Full runtime configuration of one container at inspection time."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    image_ref: str = Field(min_length=1)
    image_id: str = Field(min_length=1)

    hostname: str = ""
    user: str = ""
    working_dir: str = ""
    network_mode: str = "bridge"
    restart_policy: RestartPolicy = RestartPolicy()
    privileged: bool = False
    cap_add: List[str] = Field(default_factory=list)
    cap_drop: List[str] = Field(default_factory=list)
    extra_hosts: List[str] = Field(default_factory=list)
    ports: List[PortBinding] = Field(default_factory=list)
    mounts: List[MountPoint] = Field(default_factory=list)
    devices: List[DeviceMapping] = Field(default_factory=list)
    shm_size: int = 0
    env: List[str] = Field(default_factory=list)
    labels: Dict[str, str] = Field(default_factory=dict)
    entrypoint: Optional[List[str]] = None
    cmd: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.lstrip("/")

    @property
    def compose_project(self) -> Optional[str]:
        """Compose project label, if the container belongs to one."""
        return self.labels.get(COMPOSE_PROJECT_LABEL) or None

    @classmethod
    def from_inspect(cls, attrs: Dict[str, Any]) -> "ContainerDescriptor":
        """
        Build a descriptor from a ``docker inspect`` payload.

        Args:
            attrs: Inspect payload of a single container

        Returns:
            Validated descriptor

        Raises:
            pydantic.ValidationError: If a field has the wrong shape
            TypeError, AttributeError: If a section is not a mapping/list
        """
        config = attrs.get("Config") or {}
        host_config = attrs.get("HostConfig") or {}
        restart = host_config.get("RestartPolicy") or {}

        return cls(
            id=attrs.get("Id") or "",
            name=attrs.get("Name") or "",
            image_ref=config.get("Image") or "",
            image_id=attrs.get("Image") or "",
            hostname=config.get("Hostname") or "",
            user=config.get("User") or "",
            working_dir=config.get("WorkingDir") or "",
            network_mode=host_config.get("NetworkMode") or "bridge",
            restart_policy=RestartPolicy(
                name=restart.get("Name") or "",
                max_retry=restart.get("MaximumRetryCount") or 0,
            ),
            privileged=bool(host_config.get("Privileged")),
            cap_add=host_config.get("CapAdd") or [],
            cap_drop=host_config.get("CapDrop") or [],
            extra_hosts=host_config.get("ExtraHosts") or [],
            ports=_parse_ports(host_config.get("PortBindings") or {}),
            mounts=_parse_mounts(attrs.get("Mounts") or [], host_config),
            devices=[
                DeviceMapping(
                    path_on_host=device.get("PathOnHost") or "",
                    path_in_container=device.get("PathInContainer") or "",
                    cgroup_permissions=device.get("CgroupPermissions") or "rwm",
                )
                for device in host_config.get("Devices") or []
            ],
            shm_size=host_config.get("ShmSize") or 0,
            env=config.get("Env") or [],
            labels=config.get("Labels") or {},
            entrypoint=config.get("Entrypoint") or None,
            cmd=config.get("Cmd") or [],
        )


def _parse_ports(port_bindings: Dict[str, Any]) -> List[PortBinding]:
    ports = []
    for container_port, bindings in port_bindings.items():
        for binding in bindings or []:
            ports.append(
                PortBinding(
                    container_port=container_port,
                    host_ip=binding.get("HostIp") or "",
                    host_port=binding.get("HostPort") or "",
                )
            )
    return ports


def _tmpfs_options(destination: str, host_config: Dict[str, Any]) -> str:
    """Recover tmpfs size/mode options, which the Mounts section does not carry."""
    tmpfs = host_config.get("Tmpfs") or {}
    if destination in tmpfs:
        return tmpfs[destination] or ""

    for mount in host_config.get("Mounts") or []:
        if mount.get("Type") == "tmpfs" and mount.get("Target") == destination:
            options = mount.get("TmpfsOptions") or {}
            parts = []
            if options.get("SizeBytes"):
                parts.append(f"size={options['SizeBytes']}")
            if options.get("Mode"):
                parts.append(f"mode={options['Mode']:o}")
            return ",".join(parts)
    return ""


def _parse_mounts(mounts: List[Dict[str, Any]], host_config: Dict[str, Any]) -> List[MountPoint]:
    parsed = []
    for mount in mounts:
        mount_type = mount.get("Type") or ""
        destination = mount.get("Destination") or ""
        if mount_type == "volume":
            source = mount.get("Name") or ""
        else:
            source = mount.get("Source") or ""
        parsed.append(
            MountPoint(
                type=mount_type,
                source=source,
                destination=destination,
                read_only=not mount.get("RW", True),
                tmpfs_options=(
                    _tmpfs_options(destination, host_config) if mount_type == "tmpfs" else ""
                ),
            )
        )

    # --tmpfs mounts only show up in HostConfig.Tmpfs
    seen = {mount.destination for mount in parsed}
    for destination, options in (host_config.get("Tmpfs") or {}).items():
        if destination not in seen:
            parsed.append(
                MountPoint(type="tmpfs", destination=destination, tmpfs_options=options or "")
            )
    return parsed
