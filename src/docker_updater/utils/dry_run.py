"""Dry-run aware execution of mutating operations."""

from typing import Any, Callable, List, TypeVar

from docker_updater.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class MutationGuard:
    """
    Gate for every operation that changes host state.

    In dry-run mode the operation is not executed: its description is logged
    with a ``[DRY-RUN]`` prefix and kept in ``recorded``. Read-only queries
    never go through the guard so dry-run output reflects real state.
    """

    def __init__(self, dry_run: bool = False) -> None:
        """Initialize mutation guard."""
        self.dry_run = dry_run
        self.recorded: List[str] = []

    def execute(self, action: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> T | None:
        """
        Run ``func`` unless in dry-run mode.

        Args:
            action: Human readable command line describing the operation
            func: Callable performing the operation
            *args: Positional arguments for ``func``
            **kwargs: Keyword arguments for ``func``

        Returns:
            Result of ``func``, or None in dry-run mode
        """
        if self.dry_run:
            self.recorded.append(action)
            logger.info("[DRY-RUN] %s", action, extra={"action": action})
            return None

        logger.debug("Executing", extra={"action": action})
        return func(*args, **kwargs)
