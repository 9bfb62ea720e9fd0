"""Protocols for snapshot store backends."""

from typing import Protocol, Any, Dict, List


Snapshot = Dict[str, List[Dict[str, Any]]]


class SnapshotSink(Protocol):
    """Protocol for stores holding one full snapshot of every group's state."""

    def write_snapshot(self, data: Snapshot) -> None:
        ...

    def read_snapshot(self) -> Snapshot:
        ...
