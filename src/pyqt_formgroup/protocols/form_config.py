"""Configuration classes for form group generation.

Provides process-wide defaults and the per-engine store and CSS options.
Only defaults live at module level; registry state is always engine-owned.
"""

from typing import Any, Mapping, Optional, Union
from dataclasses import dataclass, fields


@dataclass
class FormGroupConfig:
    """Default configuration for form group generation.

    Applications can subclass this or call set_form_config() to change the
    defaults used when an engine or group does not specify them.

    Attributes:
        default_encoding: Text encoding for the snapshot file
        default_indent_width: JSON indentation width (0 = compact)
        default_max: Maximum instance count for removable groups
        add_new_label: Default label of the removable group's add control
        remove_label: Default label of each instance's remove control
        default_input_type: Input type used when props do not set one
    """

    default_encoding: str = "utf-8"
    default_indent_width: int = 0
    default_max: int = 10
    add_new_label: str = "Add New"
    remove_label: str = "x"
    default_input_type: str = "text"


# Global config instance (set by application)
_form_config: Optional[FormGroupConfig] = None


def set_form_config(config: FormGroupConfig) -> None:
    """Set the global form group configuration.

    Args:
        config: FormGroupConfig instance
    """
    global _form_config
    _form_config = config


def get_form_config() -> FormGroupConfig:
    """Get the current form group configuration.

    Returns:
        Current FormGroupConfig or default if not set
    """
    if _form_config is None:
        return FormGroupConfig()
    return _form_config


@dataclass
class StoreOptions:
    """Snapshot file options.

    Attributes:
        encoding: Text encoding for writing and reading the snapshot
        indent_width: JSON indentation width; 0 writes compact JSON
    """

    encoding: Optional[str] = None
    indent_width: Optional[int] = None

    def __post_init__(self):
        config = get_form_config()
        # Falsy values fall back to the defaults
        self.encoding = self.encoding or config.default_encoding
        self.indent_width = self.indent_width or config.default_indent_width

    @classmethod
    def from_mapping(cls, options: Union['StoreOptions', Mapping[str, Any], None]) -> 'StoreOptions':
        """Build StoreOptions from an instance, a mapping, or None."""
        if isinstance(options, cls):
            return options
        if options is None:
            return cls()
        return cls(encoding=options.get("encoding"), indent_width=options.get("indent_width"))


@dataclass
class CssHooks:
    """Default class strings applied to every group an engine builds.

    Attributes:
        form_group: Group wrapper classes
        form_group_heading: Heading classes
        form_group_description: Description classes
        form_group_component: Component wrapper classes
        form_group_input: Input classes
    """

    form_group: str = ""
    form_group_heading: str = ""
    form_group_description: str = ""
    form_group_component: str = ""
    form_group_input: str = ""

    @classmethod
    def from_mapping(cls, css: Union['CssHooks', Mapping[str, Any], None]) -> 'CssHooks':
        """Build CssHooks from an instance, a mapping, or None. Unknown keys are ignored."""
        if isinstance(css, cls):
            return css
        if css is None:
            return cls()
        known = {f.name for f in fields(cls)}
        return cls(**{k: v or "" for k, v in css.items() if k in known})
