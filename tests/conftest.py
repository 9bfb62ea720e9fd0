"""pytest configuration and fixtures for pyqt-formgroup tests."""

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication


@pytest.fixture(scope="session")
def qapp():
    """Create QApplication instance for tests."""
    app = QApplication.instance() or QApplication([])
    yield app
    # Don't quit - may cause issues with other tests


@pytest.fixture
def store_path(tmp_path):
    """Path of a fresh snapshot file."""
    return tmp_path / "form_state.json"


@pytest.fixture
def engine(qapp, store_path):
    """Engine backed by a fresh snapshot file."""
    from pyqt_formgroup import create

    return create(store_path)
