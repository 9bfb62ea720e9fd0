"""
Exception taxonomy for pyqt-formgroup.

Every failure is fatal and surfaces to the caller of the public operation
that triggered it (engine construction, a group builder, or set_state).
Nothing is retried, nothing is logged-and-continued.
"""


class FormGroupError(Exception):
    """Base class for all pyqt-formgroup errors."""


class ConfigShapeError(FormGroupError, ValueError):
    """Raised when group options are missing, malformed, or of the wrong shape."""


# Short name used by callers that only care about option shape.
ShapeError = ConfigShapeError


class DuplicateKeyError(FormGroupError, ValueError):
    """Raised when a requested group key already names an existing group."""


class TypeKeyError(FormGroupError, TypeError):
    """Raised when a requested group key is not a string."""


class EventHandlerTypeError(FormGroupError, TypeError):
    """Raised when an event binding is not callable."""


class StoreError(FormGroupError):
    """Raised when the snapshot store cannot be written, read, or parsed."""


class SnapshotInconsistencyError(StoreError):
    """Raised when a reloaded snapshot does not cover every registered instance."""


class RegistryOrderError(FormGroupError):
    """Raised when a visual list and its registry group are no longer in lockstep."""
