"""
Group option normalization.

Single entry point turning caller-supplied options into a typed GroupOptions
record before any registry or lifecycle operation runs.

Canonical form:
- state: non-empty list of dicts, each with a str or numeric "value"
- props, events: lists of dicts (a single dict becomes a one-element list)
- max: positive int
- group_key: allocated or validated last, so a shape failure never
  consumes a synthesized key or creates a group
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from pyqt_formgroup.exceptions import ConfigShapeError
from pyqt_formgroup.forms.constants import CONSTANTS
from pyqt_formgroup.protocols.form_config import get_form_config

logger = logging.getLogger(__name__)

StateRecord = Dict[str, Any]


@dataclass
class GroupOptions:
    """
    Canonical options for one group builder call.

    Attributes:
        group_key: Unique key of the group
        state: Initial state records, one per instance
        props: Immutable properties per instance position
        events: Event bindings per instance position
        max: Instance cap for removable groups
        heading: Optional heading text
        description: Optional description text
        group_class: Extra classes for the group wrapper
        heading_class: Extra classes for the heading
        description_class: Extra classes for the description
        component_class: Extra classes for each component wrapper
        add_new_button: Attribute overrides for the add control
        remove_button: Attribute overrides for each remove control
        extra: Unrecognized options, passed through untouched
    """
    group_key: str
    state: List[StateRecord]
    props: List[Dict[str, Any]] = field(default_factory=list)
    events: List[Dict[str, Any]] = field(default_factory=list)
    max: int = field(default_factory=lambda: get_form_config().default_max)
    heading: Optional[str] = None
    description: Optional[str] = None
    group_class: Optional[str] = None
    heading_class: Optional[str] = None
    description_class: Optional[str] = None
    component_class: Optional[str] = None
    add_new_button: Dict[str, Any] = field(default_factory=dict)
    remove_button: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    def props_at(self, index: int) -> Dict[str, Any]:
        """Props for an instance position ({} past the end)."""
        return self.props[index] if index < len(self.props) else {}

    def events_at(self, index: int) -> Dict[str, Any]:
        """Event bindings for an instance position ({} past the end)."""
        return self.events[index] if index < len(self.events) else {}

    def state_at(self, index: int) -> StateRecord:
        """State for an instance position ({"value": ""} past the end)."""
        if index < len(self.state):
            return dict(self.state[index])
        return {CONSTANTS.VALUE_ATTR: CONSTANTS.EMPTY_VALUE}


def is_valid_value(value: Any) -> bool:
    """Return True for strings and non-NaN numbers (bools excluded)."""
    if isinstance(value, str):
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return not math.isnan(value)
    return False


def normalize_state_record(state: Any) -> StateRecord:
    """
    Normalize one state entry to a {"value": ...} record.

    Args:
        state: A bare value or a mapping with a "value" key.

    Returns:
        A new dict. Invalid values are coerced to {"value": ""}.

    Raises:
        ConfigShapeError: If a mapping has no "value" key.
    """
    if isinstance(state, Mapping):
        if CONSTANTS.VALUE_ATTR not in state:
            raise ConfigShapeError("{state} object must include {value} key.")
        if is_valid_value(state[CONSTANTS.VALUE_ATTR]):
            return dict(state)
        logger.debug(f"Coercing invalid state value {state[CONSTANTS.VALUE_ATTR]!r} to ''")
        return {CONSTANTS.VALUE_ATTR: CONSTANTS.EMPTY_VALUE}
    if is_valid_value(state):
        return {CONSTANTS.VALUE_ATTR: state}
    logger.debug(f"Coercing invalid state {state!r} to ''")
    return {CONSTANTS.VALUE_ATTR: CONSTANTS.EMPTY_VALUE}


def normalize_state(state: Any) -> List[StateRecord]:
    """Normalize a state option (scalar, record, or sequence of either)."""
    if state is None:
        raise ConfigShapeError("{state} property must exist in options.")
    if isinstance(state, (list, tuple)):
        if not state:
            raise ConfigShapeError("{state} is an empty sequence.")
        return [normalize_state_record(s) for s in state]
    return [normalize_state_record(state)]


def normalize_records(key: str, value: Any) -> List[Dict[str, Any]]:
    """
    Normalize a props/events option to a list of dicts.

    Raises:
        ConfigShapeError: On an empty sequence or a non-mapping entry.
    """
    if value is None:
        return []

    def _checked(entry: Any) -> Dict[str, Any]:
        if not isinstance(entry, Mapping):
            raise ConfigShapeError(f"{{{key}}} must be a mapping, got {type(entry).__name__}.")
        return dict(entry)

    if isinstance(value, (list, tuple)):
        if not value:
            raise ConfigShapeError(f"{{{key}}} is an empty sequence.")
        return [_checked(entry) for entry in value]
    return [_checked(value)]


def normalize_max(value: Any) -> int:
    """Resolve the removable group cap; None, 0 and "" select the configured default."""
    if value is None or (not isinstance(value, bool) and value in (0, "")):
        return get_form_config().default_max
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ConfigShapeError(f"{{max}} must be a positive integer, got {value!r}.")
    try:
        resolved = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigShapeError(f"{{max}} must be a number, got {value!r}.") from e
    if resolved < 1:
        raise ConfigShapeError(f"{{max}} must be at least 1, got {resolved}.")
    return resolved


def _optional_mapping(key: str, value: Any) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigShapeError(f"{{{key}}} must be a mapping, got {type(value).__name__}.")
    return dict(value)


def merge_options(options: Optional[Mapping[str, Any]], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge a positional options mapping with keyword overrides."""
    if options is not None and not isinstance(options, Mapping):
        raise ConfigShapeError(f"Options must be a mapping, got {type(options).__name__}.")
    merged = dict(options or {})
    merged.update(overrides)
    return merged


def normalize_options(options: Any, allocate_key: Callable[[Any], str],
                      resizable: bool = False) -> GroupOptions:
    """
    Validate options and produce their canonical form.

    Args:
        options: Caller-supplied option mapping.
        allocate_key: Registry callback resolving the requested group key
            (None when absent) to the key the group will use.
        resizable: True for removable groups. Only they read ``max``;
            other builders ignore it and keep the configured default.

    Returns:
        GroupOptions ready for the group builders.

    Raises:
        ConfigShapeError: If options are missing, empty or malformed.
        DuplicateKeyError: If group_key names an existing group.
        TypeKeyError: If group_key is not a string.
    """
    if not isinstance(options, Mapping) or not options:
        raise ConfigShapeError("Method requires exactly one non-empty options mapping.")

    state = normalize_state(options.get(CONSTANTS.STATE))
    props = normalize_records(CONSTANTS.PROPS, options.get(CONSTANTS.PROPS))
    events = normalize_records(CONSTANTS.EVENTS, options.get(CONSTANTS.EVENTS))
    max_count = normalize_max(options.get(CONSTANTS.MAX)) if resizable else get_form_config().default_max
    add_new_button = _optional_mapping(CONSTANTS.ADD_NEW_BUTTON, options.get(CONSTANTS.ADD_NEW_BUTTON))
    remove_button = _optional_mapping(CONSTANTS.REMOVE_BUTTON, options.get(CONSTANTS.REMOVE_BUTTON))

    known = {CONSTANTS.GROUP_KEY, CONSTANTS.STATE, CONSTANTS.PROPS, CONSTANTS.EVENTS, CONSTANTS.MAX}
    known |= CONSTANTS.PASS_THROUGH_KEYS
    extra = {k: v for k, v in options.items() if k not in known}

    # Last: the allocator must not advance for rejected options
    group_key = allocate_key(options.get(CONSTANTS.GROUP_KEY))

    return GroupOptions(
        group_key=group_key,
        state=state,
        props=props,
        events=events,
        max=max_count,
        heading=options.get(CONSTANTS.HEADING),
        description=options.get(CONSTANTS.DESCRIPTION),
        group_class=options.get(CONSTANTS.GROUP_CLASS),
        heading_class=options.get(CONSTANTS.HEADING_CLASS),
        description_class=options.get(CONSTANTS.DESCRIPTION_CLASS),
        component_class=options.get(CONSTANTS.COMPONENT_CLASS),
        add_new_button=add_new_button,
        remove_button=remove_button,
        extra=extra,
    )
