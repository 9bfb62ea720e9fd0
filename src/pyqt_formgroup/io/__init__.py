"""Snapshot persistence backends."""

from .base import Snapshot, SnapshotSink
from .json_store import JsonSnapshotStore

__all__ = [
    "Snapshot",
    "SnapshotSink",
    "JsonSnapshotStore",
]
