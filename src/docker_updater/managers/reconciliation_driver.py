"""Top-level reconciliation run over compose projects and standalone containers."""

from typing import List, Optional

from docker import DockerClient

from docker_updater.config import Settings
from docker_updater.managers.compose_refresher import ComposeRefresher
from docker_updater.managers.introspector import (
    RunningContainer,
    RuntimeIntrospector,
    is_compose_managed,
)
from docker_updater.managers.recreation_executor import RecreationExecutor
from docker_updater.models import EntityKind, Outcome, OutcomeStatus, RunReport
from docker_updater.utils import OK, get_logger
from docker_updater.utils.docker_client import DOCKER_ERRORS
from docker_updater.utils.dry_run import MutationGuard
from docker_updater.utils.exceptions import DockerAPIError

logger = get_logger(__name__)


class ReconciliationDriver:
    """Runs every eligible entity through its reconciler exactly once, in discovery order."""

    def __init__(
        self,
        settings: Settings,
        docker_client: DockerClient,
        guard: Optional[MutationGuard] = None,
        introspector: Optional[RuntimeIntrospector] = None,
        executor: Optional[RecreationExecutor] = None,
        refresher: Optional[ComposeRefresher] = None,
    ) -> None:
        """Initialize reconciliation driver."""
        self.settings = settings
        self.docker_client = docker_client
        self.guard = guard or MutationGuard(dry_run=settings.dry_run)
        self.introspector = introspector or RuntimeIntrospector(docker_client)
        self.executor = executor or RecreationExecutor(
            settings, docker_client, self.guard, introspector=self.introspector
        )
        self.refresher = refresher or ComposeRefresher(settings, self.guard)
        self.container_filter = settings.container_filter

    def run(self) -> RunReport:
        """
        Perform one full run.

        Returns:
            Report with one outcome per discovered project and container
        """
        report = RunReport()
        self._log_filters()

        if not self.settings.standalone_only:
            self.update_compose_projects(report)
        if not self.settings.compose_only:
            self.update_standalone_containers(report)
        if self.settings.prune_unused_images:
            self.prune_images(report)

        logger.info(
            "Run summary",
            extra={
                "projects": report.counts(EntityKind.PROJECT),
                "containers": report.counts(EntityKind.CONTAINER),
            },
        )
        self.finish(report)
        return report

    def _log_filters(self) -> None:
        for kind, name_filter in (
            ("container", self.container_filter),
            ("project", self.settings.project_filter),
        ):
            if name_filter.active:
                logger.info(
                    "Active %s filter",
                    kind,
                    extra={
                        "filter": kind,
                        "only": list(name_filter.only),
                        "exclude": list(name_filter.exclude),
                    },
                )

    def _list_running(self) -> Optional[List[RunningContainer]]:
        try:
            return self.introspector.list_running()
        except DockerAPIError as e:
            logger.error("%s", e, extra={"error": str(e)})
            return None

    def update_compose_projects(self, report: RunReport) -> None:
        """Refresh every compose project found among running containers."""
        if not self.refresher.is_available():
            logger.warning("docker compose not available; skipping Compose projects")
            return

        running = self._list_running()
        if running is None:
            return

        projects = self.introspector.list_projects(running)
        if not projects:
            logger.info("No Compose projects detected")
            return

        for project in projects:
            try:
                outcome = self.refresher.reconcile(project)
            except Exception as e:
                logger.exception(
                    "Failed to process Compose project %s",
                    project.name,
                    extra={"project": project.name, "error": str(e)},
                )
                outcome = Outcome.failed(EntityKind.PROJECT, project.name, str(e))
            report.add(outcome)

    def update_standalone_containers(self, report: RunReport) -> None:
        """Recreate running standalone containers whose image changed."""
        running = self._list_running()
        if running is None:
            return
        if not running:
            logger.info("No running containers")
            return

        processed = 0
        for container in running:
            # Compose members are refreshed through their project
            if is_compose_managed(container.labels):
                continue

            if not self.container_filter.allows(container.name):
                logger.info(
                    "Skipping (filtered): %s",
                    container.name,
                    extra={"container": container.name},
                )
                report.add(Outcome.skipped(EntityKind.CONTAINER, container.name, "filtered"))
                continue

            try:
                outcome = self.executor.reconcile(container.id)
            except Exception as e:
                logger.exception(
                    "Unexpected error while processing %s",
                    container.name,
                    extra={"container": container.name, "error": str(e)},
                )
                outcome = Outcome.failed(EntityKind.CONTAINER, container.name, str(e))
            report.add(outcome)
            if outcome.status is OutcomeStatus.FAILED:
                logger.warning(
                    "Failed to process %s", container.name, extra={"container": container.name}
                )
            processed += 1

        logger.info(
            "Standalone containers processed: %d", processed, extra={"processed": processed}
        )

    def prune_images(self, report: RunReport) -> None:
        """Remove dangling images; failures are only logged."""
        logger.info("Pruning dangling images")
        try:
            self.guard.execute(
                "docker image prune -f",
                self.docker_client.images.prune,
                filters={"dangling": True},
            )
        except DOCKER_ERRORS as e:
            logger.warning("Failed to prune images", extra={"error": str(e)})
            return
        report.pruned = not self.guard.dry_run

    def finish(self, report: RunReport) -> None:
        """Log the closing line of a run."""
        if report.failures:
            failed = [outcome.name for outcome in report.failures]
            logger.warning(
                "Completed with %d failure(s): %s",
                len(failed),
                ", ".join(failed),
                extra={"failed": failed},
            )
        logger.log(OK, "All done")
