"""
Signal blocking for programmatic widget updates.

Re-renders driven by the update cycle must not re-enter event handlers, so
every attribute reflection runs with the node's Qt signals blocked.
"""

from contextlib import contextmanager
from typing import Any
import logging

from PyQt6.QtCore import QObject

logger = logging.getLogger(__name__)


class SignalService:
    """
    Context managers for widget signal blocking.

    Examples:
        with SignalService.block_signals(line_edit):
            line_edit.setText("value")

        # Non-Qt nodes pass through untouched:
        with SignalService.block_signals(custom_node):
            custom_node.set_attribute("value", 1)
    """

    @staticmethod
    @contextmanager
    def block_signals(*nodes: Any):
        """Context manager for blocking signals on every QObject among nodes."""
        blocked = [n for n in nodes if isinstance(n, QObject)]
        previous = [n.blockSignals(True) for n in blocked]
        try:
            yield
        finally:
            for node, was_blocked in zip(blocked, previous):
                node.blockSignals(was_blocked)
