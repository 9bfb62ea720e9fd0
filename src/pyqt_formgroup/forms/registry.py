"""
Component registry and update cycle.

Owns the mapping from group key to an ordered list of FormInstance, the
group key allocator, and the total flush/reload/re-render cycle that keeps
in-memory state, rendered nodes and the snapshot file value-equal.

Design:
- One registry per engine; nothing is stored at module level
- Group order and instance order are significant and mirrored in snapshots
- Every update is total: all groups are flushed, reloaded and re-rendered
- Failures are fatal; a cycle either completes for every instance or
  re-renders nothing
"""

import logging
import threading
from typing import Any, Container, Dict, List, Mapping, Optional

from pyqt_formgroup.exceptions import (
    DuplicateKeyError, FormGroupError, SnapshotInconsistencyError, TypeKeyError
)
from pyqt_formgroup.forms.constants import CONSTANTS
from pyqt_formgroup.forms.instance import EventHandler, FormInstance
from pyqt_formgroup.io.base import Snapshot, SnapshotSink

logger = logging.getLogger(__name__)


class GroupKeyAllocator:
    """
    Monotonic group key source producing group0, group1, ...

    The counter never goes back, even when a group is emptied. Keys that
    are already taken (explicitly named groups) are skipped.
    """

    def __init__(self, prefix: str = CONSTANTS.GROUP_KEY_PREFIX):
        self.prefix = prefix
        self._counter = 0

    @property
    def counter(self) -> int:
        return self._counter

    def next_key(self, taken: Container[str] = ()) -> str:
        while True:
            key = f"{self.prefix}{self._counter}"
            self._counter += 1
            if key not in taken:
                return key
            logger.debug(f"Skipping synthesized key '{key}' (already used)")


class ComponentRegistry:
    """
    Registry of form instances grouped by key.

    Example:
        registry = ComponentRegistry(JsonSnapshotStore("state.json"))
        key = registry.allocate_group_key()
        instance = registry.register_instance(key, {}, {"value": "a"}, {}, node)
        registry.get_snapshot(key)  # [{"value": "a"}]

    Thread Safety:
        Update cycles are serialized by a re-entrant lock, so a handler
        calling set_state from inside a cycle does not deadlock.
    """

    def __init__(self, store: SnapshotSink):
        self._store = store
        self._groups: Dict[str, List[FormInstance]] = {}
        self._allocator = GroupKeyAllocator()
        self.lock = threading.RLock()

    def __contains__(self, group_key: object) -> bool:
        return group_key in self._groups

    def __len__(self) -> int:
        return sum(len(instances) for instances in self._groups.values())

    def group_keys(self) -> List[str]:
        return list(self._groups)

    def instances(self, group_key: str) -> List[FormInstance]:
        """Instances of a group in registry order ([] for an unknown key)."""
        return list(self._groups.get(group_key, []))

    def allocate_group_key(self, requested: Any = None) -> str:
        """
        Validate a requested group key or synthesize one.

        Args:
            requested: Caller-chosen key; None or "" selects a synthesized key.

        Returns:
            The key the group will use.

        Raises:
            TypeKeyError: If requested is not a string.
            DuplicateKeyError: If requested names an existing group.
        """
        if requested is None or requested == "":
            key = self._allocator.next_key(self._groups)
            logger.debug(f"Allocated group key '{key}'")
            return key
        if not isinstance(requested, str):
            raise TypeKeyError(f"{{group_key}} must be of type str, got {type(requested).__name__}.")
        if requested in self._groups:
            raise DuplicateKeyError(f"{{group_key}} '{requested}' already exists.")
        return requested

    def register_instance(self, group_key: str, properties: Optional[Mapping[str, Any]],
                          state: Mapping[str, Any], event_bindings: Optional[Mapping[str, EventHandler]],
                          view_node: Any) -> FormInstance:
        """
        Create an instance, append it to its group and run the update cycle.

        Args:
            group_key: Group to append to (created if absent)
            properties: Immutable properties of the instance
            state: Initial state (must hold "value")
            event_bindings: Event type -> handler(event, instance)
            view_node: Node owned by the new instance

        Returns:
            The registered FormInstance.

        Raises:
            EventHandlerTypeError: If a binding is not callable (nothing is registered).
            StoreError: If the update cycle fails (the instance is rolled back).
        """
        FormInstance.validate_event_bindings(event_bindings)

        with self.lock:
            instance = FormInstance(self, group_key, properties, state, event_bindings, view_node)
            created = group_key not in self._groups
            group = self._groups.setdefault(group_key, [])
            group.append(instance)
            instance.bind_events()
            try:
                self.update()
            except FormGroupError:
                group.remove(instance)
                instance.unbind_events()
                if created:
                    del self._groups[group_key]
                raise

        logger.debug(f"Registered {instance!r} at index {len(group) - 1}")
        return instance

    def remove_instance(self, group_key: str, index: int) -> FormInstance:
        """
        Remove the instance at a registry index without running an update.

        The group itself is kept, even when emptied.

        Raises:
            KeyError: If the group does not exist.
            IndexError: If index is out of range.
        """
        with self.lock:
            group = self._groups[group_key]
            if not 0 <= index < len(group):
                raise IndexError(f"No instance at index {index} of group '{group_key}' (size {len(group)})")
            instance = group.pop(index)
            instance.unbind_events()
        logger.debug(f"Removed {instance!r} from index {index}")
        return instance

    def insert_instance(self, group_key: str, index: int, instance: FormInstance) -> None:
        """
        Put a removed instance back at a registry index and rebind its events.

        No update runs; used to undo remove_instance() when the cycle that
        followed it failed.
        """
        with self.lock:
            self._groups.setdefault(group_key, []).insert(index, instance)
            instance.bind_events()
        logger.debug(f"Restored {instance!r} at index {index}")

    def snapshot(self) -> Snapshot:
        """Copy every instance's state, in registry order."""
        return {
            key: [dict(instance.state) for instance in instances]
            for key, instances in self._groups.items()
        }

    def flush(self) -> None:
        """Write the full in-memory snapshot through the store."""
        self._store.write_snapshot(self.snapshot())

    def reload(self) -> Snapshot:
        """Read the snapshot back and check it covers every instance."""
        data = self._store.read_snapshot()
        for key, instances in self._groups.items():
            records = data.get(key)
            if not isinstance(records, list):
                raise SnapshotInconsistencyError(f"Group '{key}' is missing from the reloaded snapshot.")
            if len(records) < len(instances):
                raise SnapshotInconsistencyError(
                    f"Group '{key}' has {len(records)} record(s) in the reloaded snapshot, "
                    f"expected {len(instances)}."
                )
            for index, record in enumerate(records[:len(instances)]):
                if not isinstance(record, dict):
                    raise SnapshotInconsistencyError(f"Record {index} of group '{key}' is not an object.")
        return data

    def update(self) -> None:
        """
        Run the full update cycle: flush, reload, re-apply and re-render.

        Raises:
            StoreError: If flushing or reloading fails; nothing is re-rendered.
        """
        with self.lock:
            self.flush()
            data = self.reload()
            for key, instances in self._groups.items():
                for index, instance in enumerate(instances):
                    instance.state = dict(data[key][index])
                    instance.render()
        logger.debug(f"Update cycle completed for {len(self)} instance(s) in {len(self._groups)} group(s)")

    def get_snapshot(self, group_key: Optional[str] = None) -> Any:
        """
        Read the snapshot fresh from the store.

        Args:
            group_key: Limit the result to one group.

        Returns:
            The full snapshot, or one group's record list (None if the
            group is not in the store).
        """
        data = self._store.read_snapshot()
        if group_key is None:
            return data
        return data.get(group_key)
