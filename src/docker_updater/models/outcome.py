"""Per-entity reconciliation outcomes."""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class EntityKind(str, Enum):
    """Kind of entity an outcome refers to."""

    CONTAINER = "container"
    PROJECT = "project"


class OutcomeStatus(str, Enum):
    """Result of reconciling one entity."""

    UNCHANGED = "unchanged"
    RECREATED = "recreated"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class Outcome:
    """Tagged result of one reconciliation step; never raised, always returned."""

    kind: EntityKind
    name: str
    status: OutcomeStatus
    reason: Optional[str] = None
    backup_file: Optional[str] = None

    @classmethod
    def unchanged(cls, kind: EntityKind, name: str) -> "Outcome":
        return cls(kind, name, OutcomeStatus.UNCHANGED)

    @classmethod
    def recreated(
        cls, name: str, backup_file: Optional[str] = None, reason: Optional[str] = None
    ) -> "Outcome":
        return cls(EntityKind.CONTAINER, name, OutcomeStatus.RECREATED, reason, backup_file)

    @classmethod
    def updated(cls, name: str, reason: Optional[str] = None) -> "Outcome":
        return cls(EntityKind.PROJECT, name, OutcomeStatus.UPDATED, reason)

    @classmethod
    def skipped(cls, kind: EntityKind, name: str, reason: str) -> "Outcome":
        return cls(kind, name, OutcomeStatus.SKIPPED, reason)

    @classmethod
    def failed(
        cls, kind: EntityKind, name: str, reason: str, backup_file: Optional[str] = None
    ) -> "Outcome":
        return cls(kind, name, OutcomeStatus.FAILED, reason, backup_file)

    @property
    def ok(self) -> bool:
        return self.status is not OutcomeStatus.FAILED


@dataclass
class RunReport:
    """Outcomes of one run, in processing order."""

    outcomes: List[Outcome] = field(default_factory=list)
    pruned: bool = False

    def add(self, outcome: Outcome) -> Outcome:
        self.outcomes.append(outcome)
        return outcome

    def of_kind(self, kind: EntityKind) -> List[Outcome]:
        return [outcome for outcome in self.outcomes if outcome.kind is kind]

    def counts(self, kind: Optional[EntityKind] = None) -> Dict[str, int]:
        """Number of outcomes per status, optionally for one entity kind."""
        outcomes = self.outcomes if kind is None else self.of_kind(kind)
        counter = Counter(outcome.status.value for outcome in outcomes)
        return {status.value: counter.get(status.value, 0) for status in OutcomeStatus}

    @property
    def failures(self) -> List[Outcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]
