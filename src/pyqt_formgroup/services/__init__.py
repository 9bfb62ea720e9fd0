"""Reusable service layer."""

from .signal_service import SignalService

__all__ = [
    "SignalService",
]
