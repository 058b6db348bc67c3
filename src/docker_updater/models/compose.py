"""Compose project view derived from running containers."""

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class ComposeProject:
    """A compose project as recorded in its members' labels."""

    name: str
    working_dir: str
    config_files: Tuple[str, ...] = ()
    container_ids: Tuple[str, ...] = field(default_factory=tuple)
