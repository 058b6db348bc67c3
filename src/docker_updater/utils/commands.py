"""Subprocess helpers for the docker CLI."""

import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional

from docker_updater.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CommandResult:
    """Result from running a command."""

    returncode: int
    stdout: str = ""
    stderr: str = ""


def format_command(cmd: List[str]) -> str:
    """Render a command line with shell quoting."""
    return shlex.join(cmd)


def command_exists(name: str) -> bool:
    """Check whether an executable is on PATH."""
    return shutil.which(name) is not None


def run_command(
    cmd: List[str],
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    timeout: Optional[int] = None,
    check: bool = True,
) -> CommandResult:
    """
    Run a command and capture its output.

    Raises:
        subprocess.CalledProcessError: If ``check`` and the command failed
        subprocess.TimeoutExpired: If the command ran past ``timeout``
        FileNotFoundError: If the executable does not exist
    """
    logger.debug("Running command: %s", format_command(cmd), extra={"cmd": list(cmd)})

    completed = subprocess.run(
        cmd,
        cwd=cwd,
        env=dict(env) if env is not None else None,
        capture_output=True,
        text=True,
        timeout=timeout,
    )

    result = CommandResult(
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )

    if check and completed.returncode != 0:
        raise subprocess.CalledProcessError(
            completed.returncode, cmd, output=result.stdout, stderr=result.stderr
        )

    return result
