"""Backup records written before a container is recreated."""

from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from docker_updater.models import LaunchSpec
from docker_updater.utils import get_logger
from docker_updater.utils.exceptions import BackupWriteError

logger = get_logger(__name__)

BACKUP_SUFFIX = ".run.sh"


class BackupStore:
    """Append-only directory of recreation scripts, one per recreation event."""

    def __init__(self, backup_dir: Path, clock: Callable[[], datetime] = datetime.now) -> None:
        """Initialize backup store."""
        self.backup_dir = Path(backup_dir)
        self._clock = clock

    def ensure_dir(self) -> None:
        """Create the backup directory if needed."""
        self.backup_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, name: str, when: datetime) -> Path:
        """
        Pick a file name keyed by container name and timestamp.

        A numeric suffix is added if a record for the same second already
        exists, so records never overwrite each other.
        """
        stem = f"{name}_{when:%Y%m%d%H%M%S}"
        candidate = self.backup_dir / f"{stem}{BACKUP_SUFFIX}"
        counter = 1
        while candidate.exists():
            candidate = self.backup_dir / f"{stem}-{counter}{BACKUP_SUFFIX}"
            counter += 1
        return candidate

    def write(self, spec: LaunchSpec, when: Optional[datetime] = None) -> Path:
        """
        Persist a launch spec as an executable script.

        Args:
            spec: Launch spec to save
            when: Timestamp for the file name, defaults to now

        Returns:
            Path of the written record

        Raises:
            BackupWriteError: If the record cannot be written
        """
        when = when or self._clock()
        path = self.backup_dir / f"{spec.name}_{when:%Y%m%d%H%M%S}{BACKUP_SUFFIX}"
        try:
            self.ensure_dir()
            path = self.path_for(spec.name, when)
            # "x" refuses to clobber a record created in between
            with open(path, "x", encoding="utf-8") as handle:
                handle.write(spec.render_script(when))
            path.chmod(0o755)
        except OSError as e:
            raise BackupWriteError(str(path), e) from e

        logger.info("Saved recreate command: %s", path, extra={"backup_file": str(path)})
        return path
