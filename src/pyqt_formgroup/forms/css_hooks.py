"""CSS class-string composition."""

from typing import Optional


def compose_class_string(default: Optional[str], override: Optional[str]) -> str:
    """
    Join an engine-wide class string with a per-call one.

    Args:
        default: Class string from the engine's CssHooks
        override: Class string passed with a group or its props

    Returns:
        "default override" when both are set, whichever is set otherwise,
        or "" when neither is.
    """
    return " ".join(part for part in (default, override) if part)
