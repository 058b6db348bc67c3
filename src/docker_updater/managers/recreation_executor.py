"""Recreation of standalone containers whose image changed."""

from docker import DockerClient
from docker.errors import ImageNotFound
from docker.utils import parse_repository_tag

from docker_updater.config import Settings
from docker_updater.managers.backup_store import BackupStore
from docker_updater.managers.introspector import RuntimeIntrospector
from docker_updater.managers.synthesizer import synthesize
from docker_updater.models import EntityKind, LaunchSpec, Outcome
from docker_updater.utils import OK, get_logger
from docker_updater.utils.docker_client import DOCKER_ERRORS
from docker_updater.utils.dry_run import MutationGuard
from docker_updater.utils.exceptions import (
    BackupWriteError,
    ContainerNotFoundError,
    DockerAPIError,
    ImageNotFoundError,
    InspectParseError,
)

logger = get_logger(__name__)


class RecreationExecutor:
    """Detects image drift for one container and swaps it for a fresh instance."""

    def __init__(
        self,
        settings: Settings,
        docker_client: DockerClient,
        guard: MutationGuard,
        introspector: RuntimeIntrospector | None = None,
        backup_store: BackupStore | None = None,
    ) -> None:
        """Initialize recreation executor."""
        self.settings = settings
        self.docker_client = docker_client
        self.guard = guard
        self.introspector = introspector or RuntimeIntrospector(docker_client)
        self.backup_store = backup_store or BackupStore(settings.backup_dir)

    def reconcile(self, container_id: str) -> Outcome:
        """
        Bring one container up to date with its image reference.

        Never raises: every failure is reported through the returned outcome.

        Args:
            container_id: ID or name of a running container

        Returns:
            Unchanged, Recreated, Skipped (compose managed) or Failed outcome
        """
        try:
            descriptor = self.introspector.describe(container_id)
        except InspectParseError as e:
            logger.warning(
                "Failed to parse inspect JSON for %s; skipping",
                container_id,
                extra={"container": container_id, "error": e.reason},
            )
            return Outcome.failed(EntityKind.CONTAINER, container_id, str(e))
        except (ContainerNotFoundError, DockerAPIError) as e:
            logger.warning(
                "Cannot inspect %s: %s",
                container_id,
                e,
                extra={"container": container_id, "error": str(e)},
            )
            return Outcome.failed(EntityKind.CONTAINER, container_id, str(e))

        name = descriptor.name
        if descriptor.compose_project:
            return Outcome.skipped(
                EntityKind.CONTAINER,
                name,
                f"managed by compose project '{descriptor.compose_project}'",
            )

        image_ref = descriptor.image_ref
        logger.info(
            "Checking %s (%s)", name, image_ref, extra={"container": name, "image": image_ref}
        )

        self._pull(image_ref)

        try:
            latest_id = self._resolve_image_id(image_ref)
        except (ImageNotFoundError, DockerAPIError) as e:
            logger.warning(
                "%s", e, extra={"container": name, "image": image_ref, "error": str(e)}
            )
            return Outcome.failed(EntityKind.CONTAINER, name, str(e))

        if descriptor.image_id == latest_id:
            logger.info("Up-to-date: %s", name, extra={"container": name, "image_id": latest_id})
            return Outcome.unchanged(EntityKind.CONTAINER, name)

        logger.info(
            "Updating container: %s (image changed)",
            name,
            extra={
                "container": name,
                "current_image_id": descriptor.image_id,
                "latest_image_id": latest_id,
            },
        )
        spec = synthesize(descriptor)

        try:
            backup_file = self.backup_store.write(spec)
        except BackupWriteError as e:
            logger.error(
                "%s; leaving %s untouched", e, name, extra={"container": name, "error": str(e)}
            )
            return Outcome.failed(EntityKind.CONTAINER, name, str(e))

        self._stop(name)
        self._remove(name)

        try:
            self._create(spec)
        except DOCKER_ERRORS as e:
            logger.error(
                "Failed to recreate %s: %s. Replay manually with %s",
                name,
                e,
                backup_file,
                extra={"container": name, "backup_file": str(backup_file), "error": str(e)},
            )
            return Outcome.failed(EntityKind.CONTAINER, name, str(e), str(backup_file))

        if self.guard.dry_run:
            logger.info(
                "[DRY-RUN] Would run: %s",
                backup_file,
                extra={"container": name, "backup_file": str(backup_file)},
            )
            return Outcome.recreated(name, str(backup_file), reason="dry-run")

        logger.log(
            OK,
            "Container refreshed: %s",
            name,
            extra={"container": name, "backup_file": str(backup_file)},
        )
        return Outcome.recreated(name, str(backup_file))

    def _pull(self, image_ref: str) -> None:
        """Pull the image; failures are logged and the local image is used."""
        if self.settings.pull_all_platforms:
            repository, _ = parse_repository_tag(image_ref)
            action = f"docker pull --all-tags {repository}"
            args, kwargs = (repository,), {"all_tags": True}
        else:
            action = f"docker pull {image_ref}"
            args, kwargs = (image_ref,), {}

        try:
            self.guard.execute(action, self.docker_client.images.pull, *args, **kwargs)
        except DOCKER_ERRORS as e:
            logger.warning(
                "Failed to pull %s", image_ref, extra={"image": image_ref, "error": str(e)}
            )

    def _resolve_image_id(self, image_ref: str) -> str:
        """
        Resolve the content-addressed ID of the local image for a reference.

        Raises:
            ImageNotFoundError: If no local image matches the reference
            DockerAPIError: If the lookup fails
        """
        try:
            image = self.docker_client.images.get(image_ref)
        except ImageNotFound as e:
            raise ImageNotFoundError(image_ref, e) from e
        except DOCKER_ERRORS as e:
            raise DockerAPIError(f"Failed to resolve image {image_ref}: {e}", e) from e

        if not image.id:
            raise ImageNotFoundError(image_ref)
        return image.id

    def _stop(self, name: str) -> None:
        timeout = self.settings.stop_timeout
        try:
            self.guard.execute(
                f"docker stop --time {timeout} {name}",
                self.docker_client.api.stop,
                name,
                timeout=timeout,
            )
        except DOCKER_ERRORS as e:
            logger.warning("Failed to stop %s", name, extra={"container": name, "error": str(e)})

    def _remove(self, name: str) -> None:
        try:
            self.guard.execute(
                f"docker rm {name}", self.docker_client.api.remove_container, name
            )
        except DOCKER_ERRORS as e:
            logger.warning(
                "Failed to remove %s", name, extra={"container": name, "error": str(e)}
            )

    def _create(self, spec: LaunchSpec) -> None:
        self.guard.execute(
            spec.command_line(),
            self.docker_client.containers.run,
            detach=True,
            **spec.to_create_kwargs(),
        )
