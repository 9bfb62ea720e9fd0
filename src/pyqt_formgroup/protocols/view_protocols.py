"""
View node ABC contracts for pyqt-formgroup.

The engine never touches a toolkit directly. It talks to view nodes and a
view factory through these contracts, so the rendering layer can be swapped
without changing the synchronization core.

Design Philosophy:
- Explicit inheritance over duck typing
- Fail-loud over fail-silent
- Multiple inheritance for composable capabilities
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional


@dataclass
class ViewEvent:
    """An event delivered to a listener.

    Attributes:
        type: Event type name ("input", "change", "focus", "blur", "click")
        target: The view node the event originated from
        data: Optional payload (e.g. the edited text)
    """
    type: str
    target: Any
    data: Any = None


EventListener = Callable[[ViewEvent], None]


class AttributeReflecting(ABC):
    """
    ABC for nodes that reflect named attributes onto their rendering.

    Instances render by setting one attribute per state key.
    """

    @abstractmethod
    def set_attribute(self, name: str, value: Any) -> None:
        """
        Reflect an attribute onto the node.

        Args:
            name: Attribute name (e.g. "value", "placeholder", "class")
            value: Attribute value
        """
        pass

    @abstractmethod
    def get_attribute(self, name: str, default: Any = None) -> Any:
        """
        Return the last value set for an attribute.

        Args:
            name: Attribute name
            default: Returned when the attribute was never set
        """
        pass

    @abstractmethod
    def attributes(self) -> Dict[str, Any]:
        """Return a copy of every attribute currently reflected."""
        pass


class EventEmitting(ABC):
    """
    ABC for nodes that deliver named events to listeners.

    Programmatic attribute updates must never emit events; only user
    interaction (or an explicit emit_event) does.
    """

    @abstractmethod
    def add_event_listener(self, event_type: str, listener: EventListener) -> None:
        """Attach a listener for an event type."""
        pass

    @abstractmethod
    def remove_event_listener(self, event_type: str, listener: EventListener) -> None:
        """Detach a listener. Unknown listeners are ignored."""
        pass

    @abstractmethod
    def emit_event(self, event_type: str, data: Any = None) -> None:
        """Deliver an event to every listener attached for its type, in attach order."""
        pass


class Focusable(ABC):
    """ABC for nodes that can take keyboard focus."""

    @abstractmethod
    def focus(self) -> None:
        """Give the node keyboard focus."""
        pass


class NodeContainer(ABC):
    """
    ABC for nodes holding an ordered list of child nodes.

    Child order is the visual order; removable groups rely on it.
    """

    @abstractmethod
    def append_child(self, child: Any) -> None:
        pass

    @abstractmethod
    def insert_child(self, index: int, child: Any) -> None:
        """Attach a child at a position in visual order (moving it if already attached)."""
        pass

    @abstractmethod
    def remove_child(self, child: Any) -> None:
        """Detach a child. Raises ValueError if it is not a child of this node."""
        pass

    @abstractmethod
    def child_nodes(self) -> List[Any]:
        """Children in visual order."""
        pass

    @abstractmethod
    def index_of(self, child: Any) -> int:
        """Position of child in visual order, or -1."""
        pass

    def contains(self, child: Any) -> bool:
        return self.index_of(child) != -1

    def child_count(self) -> int:
        return len(self.child_nodes())


class ViewFactory(ABC):
    """
    ABC for the rendering primitives the engine consumes.

    Each create_* call returns a new node; nodes are never shared.
    """

    @abstractmethod
    def create_group_wrapper(self, class_string: str) -> NodeContainer:
        """Create the root container of a group."""
        pass

    @abstractmethod
    def create_heading(self, text: str, class_string: str) -> AttributeReflecting:
        pass

    @abstractmethod
    def create_description(self, text: str, class_string: str) -> AttributeReflecting:
        pass

    @abstractmethod
    def create_component_wrapper(self, class_string: str) -> NodeContainer:
        """Create the container holding one instance's input (and its controls)."""
        pass

    @abstractmethod
    def create_container(self, class_string: Optional[str] = None) -> NodeContainer:
        """Create a plain vertical container (used for removable lists)."""
        pass

    @abstractmethod
    def create_input(self, attributes: Mapping[str, Any]) -> AttributeReflecting:
        """
        Create an input node with its initial attributes reflected.

        Args:
            attributes: Attributes to reflect; "type" selects the node kind.

        Returns:
            A node implementing AttributeReflecting, EventEmitting and Focusable.
        """
        pass
