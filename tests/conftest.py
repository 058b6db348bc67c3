"""Test configuration and fixtures."""

import copy
from unittest.mock import MagicMock

import pytest

from docker_updater.config import Settings
from docker_updater.utils.dry_run import MutationGuard

OLD_IMAGE_ID = "sha256:" + "a" * 64
NEW_IMAGE_ID = "sha256:" + "b" * 64

BASE_INSPECT = {
    "Id": "c0ffee" * 10 + "abcd",
    "Name": "/web",
    "Image": OLD_IMAGE_ID,
    "Config": {
        "Hostname": "web-host",
        "User": "app",
        "WorkingDir": "/srv",
        "Image": "nginx:1.25",
        "Env": [
            "PATH=/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin",
            "GREETING=hello world",
            "QUERY=a=b;c='d'",
        ],
        "Labels": {
            "maintainer": "ops team",
            "com.docker.compose.service": "web",
        },
        "Entrypoint": ["/docker-entrypoint.sh"],
        "Cmd": ["nginx", "-g", "daemon off;"],
    },
    "HostConfig": {
        "NetworkMode": "bridge",
        "RestartPolicy": {"Name": "unless-stopped", "MaximumRetryCount": 0},
        "Privileged": False,
        "CapAdd": ["NET_ADMIN"],
        "CapDrop": ["MKNOD"],
        "ExtraHosts": ["db.local:10.0.0.5"],
        "PortBindings": {
            "80/tcp": [{"HostIp": "", "HostPort": "8080"}],
            "443/tcp": [{"HostIp": "127.0.0.1", "HostPort": "8443"}],
        },
        "Devices": [
            {
                "PathOnHost": "/dev/fuse",
                "PathInContainer": "/dev/fuse",
                "CgroupPermissions": "rwm",
            }
        ],
        "ShmSize": 67108864,
        "Tmpfs": {"/run": "size=64m"},
    },
    "Mounts": [
        {
            "Type": "bind",
            "Source": "/srv/web/html",
            "Destination": "/usr/share/nginx/html",
            "RW": False,
        },
        {
            "Type": "volume",
            "Name": "web-cache",
            "Source": "/var/lib/docker/volumes/web-cache/_data",
            "Destination": "/var/cache/nginx",
            "RW": True,
        },
        {"Type": "npipe", "Source": "\\\\.\\pipe\\x", "Destination": "/pipe", "RW": True},
    ],
}


@pytest.fixture
def inspect_factory():
    """Build docker inspect payloads, deep-merging section overrides."""

    def factory(**overrides):
        attrs = copy.deepcopy(BASE_INSPECT)
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(attrs.get(key), dict):
                attrs[key].update(value)
            else:
                attrs[key] = value
        return attrs

    return factory


@pytest.fixture
def inspect_attrs(inspect_factory):
    """Default inspect payload of a standalone nginx container."""
    return inspect_factory()


@pytest.fixture
def settings(tmp_path):
    """Settings isolated to a temporary directory."""
    return Settings(
        backup_dir=tmp_path / "backups",
        log_file="",
        lock_dir=tmp_path / "lock",
        lock_fallback_dir=tmp_path,
    )


@pytest.fixture
def mock_docker_client():
    """Create mock Docker client."""
    client = MagicMock()
    return client


@pytest.fixture
def guard():
    """Mutation guard that executes operations."""
    return MutationGuard(dry_run=False)


@pytest.fixture
def dry_run_guard():
    """Mutation guard in dry-run mode."""
    return MutationGuard(dry_run=True)
