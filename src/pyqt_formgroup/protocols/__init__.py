"""
View protocol definitions, PyQt6 adapters and configuration.

ABC-based view node contracts that keep the synchronization core free of
toolkit calls, plus the PyQt6 implementation of them.
"""

from .view_protocols import (
    ViewEvent,
    EventListener,
    AttributeReflecting,
    EventEmitting,
    Focusable,
    NodeContainer,
    ViewFactory,
)
from .qt_adapters import (
    InputNodeAdapter,
    ButtonNodeAdapter,
    LabelNodeAdapter,
    ContainerNodeAdapter,
    QtViewFactory,
    PyQtWidgetMeta,
)
from .form_config import (
    FormGroupConfig,
    StoreOptions,
    CssHooks,
    set_form_config,
    get_form_config,
)

__all__ = [
    "ViewEvent",
    "EventListener",
    "AttributeReflecting",
    "EventEmitting",
    "Focusable",
    "NodeContainer",
    "ViewFactory",
    "InputNodeAdapter",
    "ButtonNodeAdapter",
    "LabelNodeAdapter",
    "ContainerNodeAdapter",
    "QtViewFactory",
    "PyQtWidgetMeta",
    "FormGroupConfig",
    "StoreOptions",
    "CssHooks",
    "set_form_config",
    "get_form_config",
]
