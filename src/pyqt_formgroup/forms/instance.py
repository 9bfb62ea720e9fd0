"""
Form instance lifecycle.

A FormInstance couples one view node to immutable properties, mutable state
and event bindings. Every state change goes through set_state(), which runs
the owning registry's update cycle (flush, reload, re-render everything).
"""

import logging
import uuid
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, TYPE_CHECKING

from pyqt_formgroup.exceptions import ConfigShapeError, EventHandlerTypeError, FormGroupError
from pyqt_formgroup.forms.constants import CONSTANTS
from pyqt_formgroup.forms.options import is_valid_value
from pyqt_formgroup.protocols.view_protocols import ViewEvent
from pyqt_formgroup.services.signal_service import SignalService

if TYPE_CHECKING:
    from pyqt_formgroup.forms.registry import ComponentRegistry

logger = logging.getLogger(__name__)

EventHandler = Callable[[ViewEvent, "FormInstance"], None]


def coerce_state(new_state: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy a state mapping, forcing a valid "value" entry."""
    if not isinstance(new_state, Mapping):
        raise ConfigShapeError(f"State must be a mapping, got {type(new_state).__name__}.")
    state = dict(new_state)
    if not is_valid_value(state.get(CONSTANTS.VALUE_ATTR)):
        state[CONSTANTS.VALUE_ATTR] = CONSTANTS.EMPTY_VALUE
    return state


class FormInstance:
    """
    One interactive element with bound properties, state and event bindings.

    Attributes:
        instance_id: Stable opaque identifier assigned at creation
        group_key: Key of the owning group
        properties: Read-only attributes set at creation
        state: Current state; always holds "value"
        event_bindings: Read-only mapping of event type to handler
        view_node: The node this instance renders into (never shared)
    """

    def __init__(self, registry: "ComponentRegistry", group_key: str,
                 properties: Optional[Mapping[str, Any]], state: Mapping[str, Any],
                 event_bindings: Optional[Mapping[str, EventHandler]], view_node: Any):
        self.instance_id = uuid.uuid4().hex
        self.group_key = group_key
        self.properties = MappingProxyType(dict(properties or {}))
        self.state: Dict[str, Any] = coerce_state(state)
        self.event_bindings = MappingProxyType(dict(event_bindings or {}))
        self.view_node = view_node
        self._registry = registry
        self._bound: List[Tuple[str, Callable[[ViewEvent], None]]] = []

    def __repr__(self) -> str:
        return f"FormInstance(group_key={self.group_key!r}, id={self.instance_id[:8]}, state={self.state!r})"

    @staticmethod
    def validate_event_bindings(event_bindings: Optional[Mapping[str, Any]]) -> None:
        """
        Check every binding is callable.

        Raises:
            EventHandlerTypeError: On the first non-callable handler.
        """
        for event_type, handler in (event_bindings or {}).items():
            if not callable(handler):
                raise EventHandlerTypeError(
                    f"Event handler for '{event_type}' must be callable, got {type(handler).__name__}."
                )

    def bind_events(self) -> None:
        """Attach every binding to the view node as handler(event, instance)."""
        for event_type, handler in self.event_bindings.items():
            def listener(event: ViewEvent, handler=handler) -> None:
                handler(event, self)
            self.view_node.add_event_listener(event_type, listener)
            self._bound.append((event_type, listener))

    def unbind_events(self) -> None:
        """Detach the listeners attached by bind_events()."""
        for event_type, listener in self._bound:
            self.view_node.remove_event_listener(event_type, listener)
        self._bound.clear()

    def set_state(self, new_state: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Replace this instance's state and run the full update cycle.

        Args:
            new_state: New state mapping; copied, never kept by reference.

        Returns:
            A copy of the state as read back from the store.

        Raises:
            StoreError: If the flush or reload fails. The previous state is
                restored and no node is re-rendered.
        """
        with self._registry.lock:
            previous = self.state
            self.state = coerce_state(new_state)
            try:
                self._registry.update()
            except FormGroupError:
                self.state = previous
                raise
            return dict(self.state)

    def render(self) -> Any:
        """Reflect every state key onto the view node, signals blocked."""
        with SignalService.block_signals(self.view_node):
            for name, value in self.state.items():
                self.view_node.set_attribute(name, value)
        return self.view_node
