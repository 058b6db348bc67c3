"""Refresh of compose projects: pull, then re-apply with orphan removal."""

import os
import subprocess
from pathlib import Path
from typing import Callable, Dict, List, Optional

from dotenv import dotenv_values

from docker_updater.config import Settings
from docker_updater.models import ComposeProject, EntityKind, Outcome
from docker_updater.utils import OK, get_logger
from docker_updater.utils.commands import (
    CommandResult,
    command_exists,
    format_command,
    run_command,
)
from docker_updater.utils.dry_run import MutationGuard
from docker_updater.utils.exceptions import ComposeError

logger = get_logger(__name__)

COMPOSE_COMMAND = ["docker", "compose"]
ENV_FILE_NAME = ".env"
VERSION_CHECK_TIMEOUT = 30


class ComposeRefresher:
    """Re-applies the declared state of compose projects found on the host."""

    def __init__(
        self,
        settings: Settings,
        guard: MutationGuard,
        runner: Callable[..., CommandResult] = run_command,
    ) -> None:
        """Initialize compose refresher."""
        self.settings = settings
        self.guard = guard
        self.project_filter = settings.project_filter
        self._run = runner

    def is_available(self) -> bool:
        """Check that the docker compose plugin can be invoked."""
        if not command_exists("docker"):
            return False
        try:
            self._run([*COMPOSE_COMMAND, "version"], timeout=VERSION_CHECK_TIMEOUT)
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError):
            return False
        return True

    def resolve_working_dir(self, project: ComposeProject) -> Optional[Path]:
        """
        Find the directory to run compose in.

        The recorded working directory wins. If it no longer exists, the
        parent of the first absolute, existing config file is used instead.

        Returns:
            Directory path, or None when neither is usable
        """
        if project.working_dir and Path(project.working_dir).is_dir():
            return Path(project.working_dir)

        for config_file in project.config_files:
            path = Path(config_file)
            if path.is_absolute() and path.is_file() and path.parent.is_dir():
                logger.info(
                    "Working dir missing; using config dir for '%s': %s",
                    project.name,
                    path.parent,
                    extra={"project": project.name, "run_dir": str(path.parent)},
                )
                return path.parent
        return None

    def load_environment(self, run_dir: Path) -> Dict[str, str]:
        """
        Build the child environment, adding variables from ``<run_dir>/.env``.

        An unreadable or malformed file is logged and otherwise ignored.
        """
        env = dict(os.environ)
        env_file = run_dir / ENV_FILE_NAME
        if not env_file.is_file():
            return env

        try:
            values = dotenv_values(env_file)
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.warning(
                "Ignoring unreadable env file %s",
                env_file,
                extra={"env_file": str(env_file), "error": str(e)},
            )
            return env

        env.update({key: value for key, value in values.items() if value is not None})
        return env

    def compose_command(self, project: ComposeProject, *subcommand: str) -> List[str]:
        """Compose command line, scoped to the project's config files when recorded."""
        cmd = list(COMPOSE_COMMAND)
        for config_file in project.config_files:
            cmd.extend(["-f", config_file])
        cmd.extend(subcommand)
        return cmd

    def reconcile(self, project: ComposeProject) -> Outcome:
        """
        Pull and re-apply one compose project.

        Never raises: a failing project is reported as Failed and the caller
        moves on to the next one.

        Args:
            project: Project discovered from container labels

        Returns:
            Updated, Skipped or Failed outcome
        """
        if self.settings.standalone_only:
            return Outcome.skipped(EntityKind.PROJECT, project.name, "standalone-only mode")

        if not self.project_filter.allows(project.name):
            logger.info(
                "Skipping Compose project (filtered): %s",
                project.name,
                extra={"project": project.name},
            )
            return Outcome.skipped(EntityKind.PROJECT, project.name, "filtered")

        run_dir = self.resolve_working_dir(project)
        if run_dir is None:
            logger.warning(
                "Working dir for project '%s' not found: %s",
                project.name,
                project.working_dir,
                extra={"project": project.name, "working_dir": project.working_dir},
            )
            return Outcome.skipped(
                EntityKind.PROJECT, project.name, f"working dir not found: {project.working_dir}"
            )

        logger.info(
            "Updating Compose project '%s' in %s",
            project.name,
            run_dir,
            extra={"project": project.name, "run_dir": str(run_dir)},
        )
        env = self.load_environment(run_dir)

        try:
            self._compose(project, run_dir, env, "pull")
            self._compose(project, run_dir, env, "up", "-d", "--remove-orphans")
        except ComposeError as e:
            logger.error("%s", e, extra={"project": project.name, "error": str(e)})
            return Outcome.failed(EntityKind.PROJECT, project.name, str(e))

        logger.log(
            OK,
            "Compose project '%s' updated",
            project.name,
            extra={"project": project.name},
        )
        return Outcome.updated(project.name, reason="dry-run" if self.guard.dry_run else None)

    def _compose(
        self, project: ComposeProject, run_dir: Path, env: Dict[str, str], *subcommand: str
    ) -> None:
        cmd = self.compose_command(project, *subcommand)
        action = f"(cd {run_dir} && {format_command(cmd)})"
        try:
            self.guard.execute(
                action,
                self._run,
                cmd,
                cwd=run_dir,
                env=env,
                timeout=self.settings.compose_timeout,
            )
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip() or f"exit status {e.returncode}"
            raise ComposeError(project.name, f"'{' '.join(subcommand)}' failed: {detail}") from e
        except subprocess.TimeoutExpired as e:
            raise ComposeError(
                project.name, f"'{' '.join(subcommand)}' timed out after {e.timeout}s"
            ) from e
        except OSError as e:
            raise ComposeError(project.name, f"cannot run docker compose: {e}") from e
