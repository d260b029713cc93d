"""Sync engine for pyneocities - one-way local to site mirroring."""

from .engine import SyncEngine, SyncStats
from .reconciler import Reconciler, ReconcileResult
from .scanner import DirectoryScanner, LocalFile
from .state import (
    Snapshot,
    SyncStateManager,
    fetch_remote_state,
    format_state,
    parse_state,
)

__all__ = [
    "SyncEngine",
    "SyncStats",
    "Reconciler",
    "ReconcileResult",
    "DirectoryScanner",
    "LocalFile",
    "Snapshot",
    "SyncStateManager",
    "fetch_remote_state",
    "format_state",
    "parse_state",
]
