"""Launch spec synthesis from a container descriptor."""

from typing import List

from docker_updater.models import (
    COMPOSE_LABEL_PREFIX,
    ArgKind,
    ContainerDescriptor,
    LaunchArg,
    LaunchSpec,
    MountPoint,
    PortBinding,
)
from docker_updater.utils import get_logger

logger = get_logger(__name__)


def _restart_args(descriptor: ContainerDescriptor) -> List[LaunchArg]:
    policy = descriptor.restart_policy
    # "no" is the runtime default
    if not policy.name or policy.name == "no":
        return []
    if policy.name == "on-failure" and policy.max_retry > 0:
        value = f"on-failure:{policy.max_retry}"
        return [LaunchArg(ArgKind.RESTART, value, (policy.name, policy.max_retry))]
    return [LaunchArg(ArgKind.RESTART, policy.name, (policy.name, 0))]


def _publish_value(port: PortBinding) -> str:
    parts = []
    if port.host_ip:
        parts.append(port.host_ip)
    if port.host_port:
        parts.append(port.host_port)
    parts.append(port.container_port)
    return ":".join(parts)


def _mount_arg(mount: MountPoint) -> LaunchArg | None:
    if mount.type in ("bind", "volume"):
        value = f"{mount.source}:{mount.destination}"
        if mount.read_only:
            value += ":ro"
        return LaunchArg(ArgKind.VOLUME, value, (mount.source, mount.destination, mount.read_only))
    if mount.type == "tmpfs":
        value = mount.destination
        if mount.tmpfs_options:
            value += f":{mount.tmpfs_options}"
        return LaunchArg(ArgKind.TMPFS, value, (mount.destination, mount.tmpfs_options))

    logger.debug(
        "Dropping mount of unsupported type",
        extra={"type": mount.type, "destination": mount.destination},
    )
    return None


def synthesize(descriptor: ContainerDescriptor) -> LaunchSpec:
    """
    Build the launch spec reproducing a container.

    Pure function: no runtime calls, no file access. Arguments are grouped as
    identity/network/restart, then security and host integration, then
    resources and environment, then image, entrypoint override and command.
    List facets yield one argument per element and nothing when empty.

    Args:
        descriptor: Inspected container

    Returns:
        Ordered launch spec
    """
    args: List[LaunchArg] = [LaunchArg(ArgKind.NAME, descriptor.name)]

    # Identity, network, restart
    if descriptor.hostname:
        args.append(LaunchArg(ArgKind.HOSTNAME, descriptor.hostname))
    if descriptor.user:
        args.append(LaunchArg(ArgKind.USER, descriptor.user))
    if descriptor.working_dir:
        args.append(LaunchArg(ArgKind.WORKDIR, descriptor.working_dir))
    if descriptor.network_mode and descriptor.network_mode != "default":
        args.append(LaunchArg(ArgKind.NETWORK, descriptor.network_mode))
    args.extend(_restart_args(descriptor))

    # Security and host integration
    if descriptor.privileged:
        args.append(LaunchArg(ArgKind.PRIVILEGED))
    args.extend(LaunchArg(ArgKind.CAP_ADD, cap) for cap in descriptor.cap_add)
    args.extend(LaunchArg(ArgKind.CAP_DROP, cap) for cap in descriptor.cap_drop)
    args.extend(LaunchArg(ArgKind.ADD_HOST, host) for host in descriptor.extra_hosts)

    # Resources and environment
    args.extend(
        LaunchArg(
            ArgKind.PUBLISH,
            _publish_value(port),
            (port.container_port, port.host_ip, port.host_port),
        )
        for port in descriptor.ports
    )
    for mount in descriptor.mounts:
        mount_arg = _mount_arg(mount)
        if mount_arg is not None:
            args.append(mount_arg)
    args.extend(
        LaunchArg(
            ArgKind.DEVICE,
            f"{device.path_on_host}:{device.path_in_container}:{device.cgroup_permissions}",
        )
        for device in descriptor.devices
    )
    if descriptor.shm_size > 0:
        args.append(LaunchArg(ArgKind.SHM_SIZE, str(descriptor.shm_size)))
    args.extend(LaunchArg(ArgKind.ENV, entry) for entry in descriptor.env)
    args.extend(
        LaunchArg(ArgKind.LABEL, f"{key}={value}", (key, value))
        for key, value in descriptor.labels.items()
        # Compose labels would make compose adopt the recreated container
        if not key.startswith(COMPOSE_LABEL_PREFIX)
    )

    # Image, entrypoint override, command
    args.append(LaunchArg(ArgKind.IMAGE, descriptor.image_ref))
    if descriptor.entrypoint:
        args.append(
            LaunchArg(
                ArgKind.ENTRYPOINT,
                " ".join(descriptor.entrypoint),
                tuple(descriptor.entrypoint),
            )
        )
    args.extend(LaunchArg(ArgKind.COMMAND, part) for part in descriptor.cmd)

    return LaunchSpec(name=descriptor.name, image=descriptor.image_ref, args=tuple(args))
