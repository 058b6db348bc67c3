"""Name filters for containers and compose projects."""

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Union

_SEPARATORS = re.compile(r"[,;\s]+")

NameList = Union[str, Iterable[str], None]


def split_names(raw: NameList) -> List[str]:
    """
    Split a comma, semicolon or whitespace separated list of names.

    Args:
        raw: Raw list string, an iterable of names, or None

    Returns:
        Names in their original order, empty tokens dropped
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        return [token for token in _SEPARATORS.split(raw) if token]

    names: List[str] = []
    for item in raw:
        names.extend(split_names(item))
    return names


def include(name: str, only: NameList = None, exclude: NameList = None) -> bool:
    """
    Decide whether ``name`` passes an only/exclude pair.

    Matching is exact and case-sensitive. With both lists empty every name
    is included.
    """
    only_names = split_names(only)
    if only_names and name not in only_names:
        return False
    exclude_names = split_names(exclude)
    if exclude_names and name in exclude_names:
        return False
    return True


@dataclass(frozen=True)
class NameFilter:
    """Resolved only/exclude pair applied to one kind of entity."""

    only: tuple = field(default_factory=tuple)
    exclude: tuple = field(default_factory=tuple)

    @classmethod
    def from_lists(cls, only: NameList = None, exclude: NameList = None) -> "NameFilter":
        return cls(only=tuple(split_names(only)), exclude=tuple(split_names(exclude)))

    @property
    def active(self) -> bool:
        return bool(self.only or self.exclude)

    def allows(self, name: str) -> bool:
        return include(name, self.only, self.exclude)
