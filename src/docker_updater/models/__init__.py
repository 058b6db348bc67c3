"""Data models for docker-updater."""

from .compose import ComposeProject
from .descriptor import (
    COMPOSE_CONFIG_FILES_LABEL,
    COMPOSE_LABEL_PREFIX,
    COMPOSE_PROJECT_LABEL,
    COMPOSE_WORKING_DIR_LABEL,
    ContainerDescriptor,
    DeviceMapping,
    MountPoint,
    PortBinding,
    RestartPolicy,
)
from .launch_spec import ArgKind, LaunchArg, LaunchSpec
from .outcome import EntityKind, Outcome, OutcomeStatus, RunReport

__all__ = [
    "ArgKind",
    "COMPOSE_CONFIG_FILES_LABEL",
    "COMPOSE_LABEL_PREFIX",
    "COMPOSE_PROJECT_LABEL",
    "COMPOSE_WORKING_DIR_LABEL",
    "ComposeProject",
    "ContainerDescriptor",
    "DeviceMapping",
    "EntityKind",
    "LaunchArg",
    "LaunchSpec",
    "MountPoint",
    "Outcome",
    "OutcomeStatus",
    "PortBinding",
    "RestartPolicy",
    "RunReport",
]
