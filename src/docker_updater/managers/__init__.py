"""Manager modules for reconciliation logic."""

from .backup_store import BackupStore
from .compose_refresher import ComposeRefresher
from .introspector import RunningContainer, RuntimeIntrospector, is_compose_managed
from .reconciliation_driver import ReconciliationDriver
from .recreation_executor import RecreationExecutor
from .synthesizer import synthesize

__all__ = [
    "BackupStore",
    "ComposeRefresher",
    "ReconciliationDriver",
    "RecreationExecutor",
    "RunningContainer",
    "RuntimeIntrospector",
    "is_compose_managed",
    "synthesize",
]
