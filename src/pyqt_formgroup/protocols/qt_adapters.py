"""
PyQt6 adapters implementing the view node ABCs.

Normalizes Qt's widget APIs to attribute reflection and named events:
- "value" -> QLineEdit.setText() / QPushButton.setText() / QLabel.setText()
- "placeholder" -> QLineEdit.setPlaceholderText()
- "class" -> dynamic "class" property (for stylesheet selectors)
- textEdited / editingFinished / focus in / focus out / clicked -> events

Mirrors the widget adapter pattern: one adapter per Qt widget, all exposing
the same interface via ABCs.
"""

import logging
from abc import ABCMeta
from typing import Any, Dict, List, Mapping, Optional, Type

from PyQt6.QtCore import Qt, QObject
from PyQt6.QtGui import QFont
from PyQt6.QtWidgets import (
    QHBoxLayout, QLabel, QLineEdit, QPushButton, QVBoxLayout, QWidget
)

from .view_protocols import (
    AttributeReflecting, EventEmitting, EventListener, Focusable,
    NodeContainer, ViewEvent, ViewFactory
)

logger = logging.getLogger(__name__)

# PyQt-specific metaclass that combines ABCMeta with Qt's metaclass
_QtMetaclass = type(QObject)


class PyQtWidgetMeta(_QtMetaclass, ABCMeta):
    """Metaclass for PyQt widgets that need ABC support."""
    pass


FALSE_STRINGS = frozenset({"false", "0", "no", "off", ""})


def is_truthy_attribute(value: Any) -> bool:
    """Interpret a boolean-like attribute value ("disabled", "readonly", ...)."""
    if isinstance(value, str):
        return value.strip().lower() not in FALSE_STRINGS
    return bool(value)


class NodeMixin:
    """
    Shared attribute and listener bookkeeping for Qt adapters.

    Subclasses call _init_node() from __init__ and implement _reflect() for
    widget-specific attributes.
    """

    def _init_node(self) -> None:
        self._attributes: Dict[str, Any] = {}
        self._listeners: Dict[str, List[EventListener]] = {}

    # AttributeReflecting

    def set_attribute(self, name: str, value: Any) -> None:
        self._attributes[name] = value
        if not self._reflect(name, value):
            self._reflect_common(name, value)

    def get_attribute(self, name: str, default: Any = None) -> Any:
        return self._attributes.get(name, default)

    def attributes(self) -> Dict[str, Any]:
        return dict(self._attributes)

    def _reflect(self, name: str, value: Any) -> bool:
        """Widget-specific reflection. Return True when handled."""
        return False

    def _reflect_common(self, name: str, value: Any) -> None:
        if name == "class":
            self.setProperty("class", "" if value is None else str(value))
            # Re-evaluate stylesheet selectors depending on the property
            self.style().unpolish(self)
            self.style().polish(self)
        elif name == "id":
            self.setObjectName(str(value))
        elif name == "title":
            self.setToolTip(str(value))
        elif name == "disabled":
            self.setEnabled(not is_truthy_attribute(value))
        elif name == "hidden":
            self.setVisible(not is_truthy_attribute(value))
        else:
            self.setProperty(name, value)

    # EventEmitting

    def add_event_listener(self, event_type: str, listener: EventListener) -> None:
        self._listeners.setdefault(event_type, []).append(listener)

    def remove_event_listener(self, event_type: str, listener: EventListener) -> None:
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    def emit_event(self, event_type: str, data: Any = None) -> None:
        event = ViewEvent(type=event_type, target=self, data=data)
        # Copy: listeners may detach during dispatch
        for listener in list(self._listeners.get(event_type, [])):
            listener(event)

    # Focusable

    def focus(self) -> None:
        self.setFocus(Qt.FocusReason.OtherFocusReason)


class InputNodeAdapter(NodeMixin, QLineEdit, AttributeReflecting, EventEmitting,
                       Focusable, metaclass=PyQtWidgetMeta):
    """
    Adapter for QLineEdit implementing the view node ABCs.

    Events:
    - "input": user edit (textEdited, never emitted by setText)
    - "change": editing finished (return pressed or focus lost)
    - "focus" / "blur": focus in / focus out
    """

    _node_type = "text"

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._init_node()
        self.textEdited.connect(lambda text: self.emit_event("input", text))
        self.editingFinished.connect(lambda: self.emit_event("change", self.text()))

    def _reflect(self, name: str, value: Any) -> bool:
        if name == "value":
            text = "" if value is None else str(value)
            # setText moves the cursor; skip it when nothing changed
            if self.text() != text:
                self.setText(text)
        elif name == "placeholder":
            self.setPlaceholderText(str(value))
        elif name == "type":
            mode = QLineEdit.EchoMode.Password if value == "password" else QLineEdit.EchoMode.Normal
            self.setEchoMode(mode)
            self.setProperty("type", str(value))
        elif name == "readonly":
            self.setReadOnly(is_truthy_attribute(value))
        elif name == "maxlength":
            self.setMaxLength(int(value))
        else:
            return False
        return True

    def focusInEvent(self, event):
        super().focusInEvent(event)
        self.emit_event("focus")

    def focusOutEvent(self, event):
        super().focusOutEvent(event)
        self.emit_event("blur", self.text())


class ButtonNodeAdapter(NodeMixin, QPushButton, AttributeReflecting, EventEmitting,
                        Focusable, metaclass=PyQtWidgetMeta):
    """
    Adapter for QPushButton implementing the view node ABCs.

    The "value" attribute is the button label; "click" fires on clicked.
    """

    _node_type = "button"

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._init_node()
        self.clicked.connect(lambda checked=False: self.emit_event("click"))

    def _reflect(self, name: str, value: Any) -> bool:
        if name == "value":
            self.setText("" if value is None else str(value))
        elif name == "type":
            self.setProperty("type", str(value))
        else:
            return False
        return True

    def focusInEvent(self, event):
        super().focusInEvent(event)
        self.emit_event("focus")

    def focusOutEvent(self, event):
        super().focusOutEvent(event)
        self.emit_event("blur")


class LabelNodeAdapter(NodeMixin, QLabel, AttributeReflecting, metaclass=PyQtWidgetMeta):
    """Adapter for QLabel used by headings and descriptions."""

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._init_node()

    def _reflect(self, name: str, value: Any) -> bool:
        if name in ("text", "value"):
            self.setText("" if value is None else str(value))
            return True
        return False


class ContainerNodeAdapter(NodeMixin, QWidget, AttributeReflecting, NodeContainer,
                           metaclass=PyQtWidgetMeta):
    """
    QWidget with a box layout whose child order is the visual order.

    Detached children are unparented but not deleted, so a control can be
    re-appended later.
    """

    def __init__(self, horizontal: bool = False, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._init_node()
        self._children: List[QWidget] = []
        layout = QHBoxLayout(self) if horizontal else QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

    def append_child(self, child: QWidget) -> None:
        if self.contains(child):
            self.remove_child(child)
        self.layout().addWidget(child)
        self._children.append(child)
        child.show()

    def insert_child(self, index: int, child: QWidget) -> None:
        if self.contains(child):
            self.remove_child(child)
        index = max(0, min(index, len(self._children)))
        self.layout().insertWidget(index, child)
        self._children.insert(index, child)
        child.show()

    def remove_child(self, child: QWidget) -> None:
        index = self.index_of(child)
        if index == -1:
            raise ValueError(f"{type(child).__name__} is not a child of this container")
        del self._children[index]
        self.layout().removeWidget(child)
        child.setParent(None)

    def child_nodes(self) -> List[QWidget]:
        return list(self._children)

    def index_of(self, child: Any) -> int:
        for i, existing in enumerate(self._children):
            if existing is child:
                return i
        return -1


class QtViewFactory(ViewFactory):
    """
    View factory producing PyQt6 adapters.

    Input nodes are dispatched on their "type" attribute through
    INPUT_NODE_TYPES; unknown types fall back to a line edit.

    Example:
        factory = QtViewFactory()
        node = factory.create_input({"type": "text", "placeholder": "Name"})
    """

    def __init__(self):
        self.input_node_types: Dict[str, Type] = {
            "text": InputNodeAdapter,
            "password": InputNodeAdapter,
            "button": ButtonNodeAdapter,
            "submit": ButtonNodeAdapter,
            "reset": ButtonNodeAdapter,
        }

    def register_input_type(self, input_type: str, node_class: Type) -> None:
        """
        Register a node class for an input type.

        Args:
            input_type: Value of the "type" attribute
            node_class: Class implementing AttributeReflecting, EventEmitting
                and Focusable, constructible without arguments
        """
        if input_type in self.input_node_types:
            logger.warning(f"Overwriting node class for input type '{input_type}'")
        self.input_node_types[input_type] = node_class

    def create_group_wrapper(self, class_string: str) -> ContainerNodeAdapter:
        return self._with_class(ContainerNodeAdapter(), class_string)

    def create_heading(self, text: str, class_string: str) -> LabelNodeAdapter:
        label = LabelNodeAdapter()
        font = QFont(label.font())
        font.setBold(True)
        label.setFont(font)
        label.set_attribute("text", text)
        return self._with_class(label, class_string)

    def create_description(self, text: str, class_string: str) -> LabelNodeAdapter:
        label = LabelNodeAdapter()
        label.setWordWrap(True)
        label.set_attribute("text", text)
        return self._with_class(label, class_string)

    def create_component_wrapper(self, class_string: str) -> ContainerNodeAdapter:
        return self._with_class(ContainerNodeAdapter(horizontal=True), class_string)

    def create_container(self, class_string: Optional[str] = None) -> ContainerNodeAdapter:
        return self._with_class(ContainerNodeAdapter(), class_string)

    def create_input(self, attributes: Mapping[str, Any]) -> AttributeReflecting:
        input_type = str(attributes.get("type", "text"))
        node_class = self.input_node_types.get(input_type, InputNodeAdapter)
        node = node_class()
        for name, value in attributes.items():
            node.set_attribute(name, value)
        logger.debug(f"Created {node_class.__name__} for input type '{input_type}'")
        return node

    @staticmethod
    def _with_class(node, class_string: Optional[str]):
        if class_string:
            node.set_attribute("class", class_string)
        return node
