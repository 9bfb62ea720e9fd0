"""
Form group constants for eliminating magic strings throughout the builders.

Centralizes option keys, attribute names and key patterns used by the
normalizer, registry and group builders.
"""

from dataclasses import dataclass
from typing import FrozenSet


@dataclass(frozen=True)
class FormGroupConstants:
    """
    Centralized constants for form group implementations.

    Categories:
    - Option keys
    - Attribute names
    - Group key synthesis
    """

    # Option keys
    GROUP_KEY: str = "group_key"
    STATE: str = "state"
    PROPS: str = "props"
    EVENTS: str = "events"
    MAX: str = "max"
    HEADING: str = "heading"
    DESCRIPTION: str = "description"
    GROUP_CLASS: str = "group_class"
    HEADING_CLASS: str = "heading_class"
    DESCRIPTION_CLASS: str = "description_class"
    COMPONENT_CLASS: str = "component_class"
    ADD_NEW_BUTTON: str = "add_new_button"
    REMOVE_BUTTON: str = "remove_button"
    PASS_THROUGH_KEYS: FrozenSet[str] = frozenset({
        "heading", "description", "group_class", "heading_class",
        "description_class", "component_class", "add_new_button", "remove_button",
    })

    # Attribute names
    VALUE_ATTR: str = "value"
    TYPE_ATTR: str = "type"
    CLASS_ATTR: str = "class"
    PRIVATE_PREFIX: str = "_"
    BUTTON_TYPE: str = "button"
    EMPTY_VALUE: str = ""

    # Events used by removable groups
    CLICK_EVENT: str = "click"
    BLUR_EVENT: str = "blur"

    # Group key synthesis
    GROUP_KEY_PREFIX: str = "group"


CONSTANTS = FormGroupConstants()
