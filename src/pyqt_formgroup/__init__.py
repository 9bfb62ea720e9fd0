"""
pyqt-formgroup: store-backed form groups for PyQt6.

Form components whose state is mirrored to a JSON snapshot file on every
change, with every live component re-synchronized from the file after each
write.

Architecture:
- IO: JSON snapshot store (full snapshot per write, atomic replace)
- Protocols: view node ABCs and their PyQt6 adapters
- Forms: option normalizer, component registry, instance lifecycle,
  removable group manager and the engine tying them together

Key Features:
- Write-then-read-back update cycle keeping file, state and widgets equal
- Single, fixed-size and resizable (add/remove) input groups
- Explicit (event, instance) handler signature
- Fail-loud error taxonomy, no silent defaults
"""

__version__ = "0.1.0"

from .exceptions import (
    FormGroupError,
    ConfigShapeError,
    ShapeError,
    DuplicateKeyError,
    TypeKeyError,
    EventHandlerTypeError,
    StoreError,
    SnapshotInconsistencyError,
    RegistryOrderError,
)
from .forms import FormGroupEngine, FormInstance, create

__all__ = [
    "__version__",
    "FormGroupEngine",
    "FormInstance",
    "create",
    "FormGroupError",
    "ConfigShapeError",
    "ShapeError",
    "DuplicateKeyError",
    "TypeKeyError",
    "EventHandlerTypeError",
    "StoreError",
    "SnapshotInconsistencyError",
    "RegistryOrderError",
]
