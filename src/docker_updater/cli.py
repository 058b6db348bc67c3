"""Command-line entry point for docker-updater."""

from pathlib import Path
from typing import Any, Optional

import typer

from docker_updater import __version__
from docker_updater.config import Settings, find_config_file, load_settings
from docker_updater.managers import BackupStore, ReconciliationDriver
from docker_updater.utils import get_logger, setup_logging
from docker_updater.utils.commands import command_exists
from docker_updater.utils.docker_client import DockerClientManager
from docker_updater.utils.dry_run import MutationGuard
from docker_updater.utils.exceptions import (
    ConfigurationError,
    DockerUpdaterError,
    LockContendedError,
    LockFileError,
    MissingDependencyError,
)
from docker_updater.utils.lock import RunLock, resolve_lock_path

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2

app = typer.Typer(
    name="docker-updater",
    help="Update Docker images and gracefully refresh containers and Compose projects.",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def _check_dependencies(settings: Settings) -> None:
    """Compose-only runs cannot do anything without the docker CLI."""
    if settings.compose_only and not command_exists("docker"):
        raise MissingDependencyError("docker")


def execute(settings: Settings, config_file: Optional[Path] = None) -> int:
    """
    Run one update pass with resolved settings.

    Nothing is logged or created before the run lock is held, so a contended
    run leaves a single warning behind.

    Args:
        settings: Resolved configuration
        config_file: Config file the settings were loaded from, for logging

    Returns:
        Process exit status
    """
    try:
        with RunLock(resolve_lock_path(settings.lock_dir, settings.lock_fallback_dir)):
            return _execute_locked(settings, config_file)
    except LockContendedError:
        logger.warning("Another docker-updater is already running. Exiting.")
        return EXIT_OK
    except LockFileError as e:
        logger.error("%s", e, extra={"lock_file": e.lock_file})
        return EXIT_FAILURE


def _execute_locked(settings: Settings, config_file: Optional[Path]) -> int:
    if config_file is not None:
        logger.info("Loaded config: %s", config_file, extra={"config_file": str(config_file)})

    try:
        BackupStore(settings.backup_dir).ensure_dir()
    except OSError as e:
        logger.warning(
            "Cannot create backup dir %s: %s",
            settings.backup_dir,
            e,
            extra={"backup_dir": str(settings.backup_dir), "error": str(e)},
        )

    client_manager = DockerClientManager(settings)
    try:
        _check_dependencies(settings)
        docker_client = client_manager.get_client()

        logger.info("Starting docker-updater v%s", __version__, extra={"version": __version__})
        if settings.dry_run:
            logger.info("Dry run: no changes will be made")

        driver = ReconciliationDriver(
            settings, docker_client, guard=MutationGuard(dry_run=settings.dry_run)
        )
        driver.run()
        return EXIT_OK

    except DockerUpdaterError as e:
        logger.error("%s", e, extra={"error": str(e)})
        return EXIT_FAILURE
    finally:
        client_manager.close()


def run(config_file: Optional[Path] = None, **overrides: Any) -> int:
    """
    Resolve configuration, set up logging and run.

    Args:
        config_file: Explicit config file, or None to search the defaults
        **overrides: Flag values; None means "not given on the command line"

    Returns:
        Process exit status
    """
    try:
        settings = load_settings(config_file, **overrides)
    except ConfigurationError as e:
        setup_logging()
        logger.error("%s", e, extra={"error": str(e)})
        return EXIT_CONFIG_ERROR

    setup_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file or None,
    )
    return execute(settings, config_file or find_config_file())


@app.command()
def main(
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Show actions without executing"
    ),
    no_prune: bool = typer.Option(
        False, "--no-prune", help="Do not prune dangling images after update"
    ),
    only: Optional[str] = typer.Option(
        None, "--only", help="Space/comma-separated list of container names to update only"
    ),
    exclude: Optional[str] = typer.Option(
        None, "--exclude", help="Space/comma-separated list of container names to skip"
    ),
    compose_only: bool = typer.Option(
        False, "--compose-only", help="Only update docker compose projects"
    ),
    standalone_only: bool = typer.Option(
        False, "--standalone-only", help="Only update standalone (non-compose) containers"
    ),
    only_projects: Optional[str] = typer.Option(
        None,
        "--only-projects",
        help="Space/comma-separated list of compose project names to update only",
    ),
    exclude_projects: Optional[str] = typer.Option(
        None,
        "--exclude-projects",
        help="Space/comma-separated list of compose project names to skip",
    ),
    log_file: Optional[str] = typer.Option(
        None, "--log-file", help="Write logs to PATH (default: /var/log/docker-updater.log)"
    ),
    stop_timeout: Optional[int] = typer.Option(
        None, "--stop-timeout", min=0, help="Timeout for docker stop (default: 30)"
    ),
    pull_all_platforms: bool = typer.Option(
        False, "--pull-all-platforms", help="Pull all tags of each image repository"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)"
    ),
    log_format: Optional[str] = typer.Option(
        None, "--log-format", help="Log format (text or json)"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Config file (default: /etc/docker-updater.conf)"
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Print version",
    ),
):
    """Update Docker containers and Compose projects."""
    # Boolean flags only ever switch a setting on (or prune off); when absent
    # the environment and config file decide
    status = run(
        config_file=config,
        dry_run=True if dry_run else None,
        prune_unused_images=False if no_prune else None,
        only_containers=only,
        exclude_containers=exclude,
        compose_only=True if compose_only else None,
        standalone_only=True if standalone_only else None,
        only_projects=only_projects,
        exclude_projects=exclude_projects,
        log_file=log_file,
        stop_timeout=stop_timeout,
        pull_all_platforms=True if pull_all_platforms else None,
        log_level=log_level,
        log_format=log_format,
    )
    raise typer.Exit(status)
