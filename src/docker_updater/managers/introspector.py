"""Runtime introspection of running containers and compose projects."""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from docker import DockerClient
from docker.errors import NotFound
from pydantic import ValidationError

from docker_updater.models import (
    COMPOSE_CONFIG_FILES_LABEL,
    COMPOSE_PROJECT_LABEL,
    COMPOSE_WORKING_DIR_LABEL,
    ComposeProject,
    ContainerDescriptor,
)
from docker_updater.utils import get_logger
from docker_updater.utils.docker_client import DOCKER_ERRORS
from docker_updater.utils.exceptions import (
    ContainerNotFoundError,
    DockerAPIError,
    InspectParseError,
)
from docker_updater.utils.filters import split_names

logger = get_logger(__name__)


def is_compose_managed(labels: Optional[Mapping[str, str]]) -> bool:
    """Check whether container labels mark it as a compose project member."""
    return bool((labels or {}).get(COMPOSE_PROJECT_LABEL))


@dataclass(frozen=True)
class RunningContainer:
    """Lightweight listing entry for a running container."""

    id: str
    name: str
    labels: Mapping[str, str] = field(default_factory=dict)


class RuntimeIntrospector:
    """Read-only queries against the container runtime."""

    def __init__(self, docker_client: DockerClient) -> None:
        """Initialize runtime introspector."""
        self.docker_client = docker_client

    def describe(self, container_id: str) -> ContainerDescriptor:
        """
        Inspect a container and build its descriptor.

        Args:
            container_id: Container ID or name

        Returns:
            Fully populated descriptor

        Raises:
            ContainerNotFoundError: If the container does not exist
            InspectParseError: If the inspect payload is malformed
            DockerAPIError: If the inspect call fails
        """
        try:
            attrs = self.docker_client.api.inspect_container(container_id)
        except NotFound as e:
            raise ContainerNotFoundError(container_id, e) from e
        except DOCKER_ERRORS as e:
            raise DockerAPIError(f"Failed to inspect {container_id}: {e}", e) from e

        if not isinstance(attrs, dict):
            raise InspectParseError(container_id, "inspect result is not an object")

        try:
            return ContainerDescriptor.from_inspect(attrs)
        except ValidationError as e:
            raise InspectParseError(container_id, f"{e.error_count()} invalid field(s)") from e
        except (AttributeError, TypeError, ValueError) as e:
            raise InspectParseError(container_id, str(e)) from e

    def list_running(self) -> List[RunningContainer]:
        """
        List running containers in discovery order.

        Raises:
            DockerAPIError: If the listing fails
        """
        try:
            containers = self.docker_client.containers.list()
        except DOCKER_ERRORS as e:
            raise DockerAPIError(f"Failed to list containers: {e}", e) from e

        return [
            RunningContainer(id=container.id, name=container.name, labels=container.labels or {})
            for container in containers
        ]

    def list_projects(self, running: Optional[List[RunningContainer]] = None) -> List[ComposeProject]:
        """
        Group running containers into compose projects by label.

        The view is rebuilt on every call. Containers without a project label
        belong to the standalone path and are left out, as are projects whose
        working directory label is empty.

        Args:
            running: Listing to group; queried when not given

        Returns:
            Projects in first-seen order with their member container IDs
        """
        if running is None:
            running = self.list_running()

        members: Dict[str, List[str]] = {}
        details: Dict[str, tuple] = {}

        for container in running:
            labels = container.labels
            project = labels.get(COMPOSE_PROJECT_LABEL) or ""
            working_dir = labels.get(COMPOSE_WORKING_DIR_LABEL) or ""
            if not project or not working_dir:
                continue

            members.setdefault(project, []).append(container.id)
            if project not in details:
                config_files = tuple(split_names(labels.get(COMPOSE_CONFIG_FILES_LABEL)))
                details[project] = (working_dir, config_files)

        projects = [
            ComposeProject(
                name=name,
                working_dir=details[name][0],
                config_files=details[name][1],
                container_ids=tuple(ids),
            )
            for name, ids in members.items()
        ]
        logger.debug("Discovered compose projects", extra={"count": len(projects)})
        return projects
