"""
Form group builders, registry and update cycle.
"""

from .options import GroupOptions, normalize_options, normalize_state
from .instance import FormInstance
from .registry import ComponentRegistry, GroupKeyAllocator
from .removable_group import RemovableGroupManager
from .engine import FormGroupEngine, create

__all__ = [
    "GroupOptions",
    "normalize_options",
    "normalize_state",
    "FormInstance",
    "ComponentRegistry",
    "GroupKeyAllocator",
    "RemovableGroupManager",
    "FormGroupEngine",
    "create",
]
