"""
JSON snapshot store.

Persists one full snapshot ``{group_key: [state, ...]}`` to a text file and
reads it back. Each call replaces or reads the whole file; there is no
incremental update and no fallback when the file is missing or corrupt.
"""

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

from pyqt_formgroup.exceptions import StoreError
from pyqt_formgroup.io.base import Snapshot

logger = logging.getLogger(__name__)


def _new_file_mode() -> int:
    """Mode open() would give a new file under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


class JsonSnapshotStore:
    """
    File-backed snapshot store using JSON text.

    The store probes its path at construction by writing an empty snapshot,
    so an unwritable path fails before any component exists.

    Thread Safety:
        A store instance is scoped to a single engine. Do NOT point two
        engines at the same path.
    """

    def __init__(self, path: Union[str, Path], encoding: str = "utf-8", indent_width: int = 0):
        """
        Initialize the store and probe the path.

        Args:
            path: File to hold the snapshot. Created or truncated.
            encoding: Text encoding used for both writing and reading.
            indent_width: JSON indentation width; 0 writes compact JSON.

        Raises:
            StoreError: If the path cannot be written.
        """
        if path is None or str(path) == "":
            raise StoreError("A snapshot path must be provided.")

        self.path = Path(path)
        self.encoding = encoding
        self.indent_width = indent_width

        # Path probe
        self.write_snapshot({})
        logger.debug(f"JsonSnapshotStore initialized at {self.path} (encoding={encoding}, indent={indent_width})")

    @property
    def _indent(self) -> Optional[int]:
        return self.indent_width if self.indent_width else None

    def dumps(self, data: Any) -> str:
        """Serialize data with the configured indentation."""
        return json.dumps(data, indent=self._indent)

    def write_snapshot(self, data: Snapshot) -> None:
        """
        Serialize and write a snapshot, replacing the file's contents.

        An existing file keeps its permission bits and a symlinked path
        keeps its link; a new file gets the umask-derived default mode.

        Args:
            data: Mapping of group key to list of state records.

        Raises:
            StoreError: On any serialization, encoding, or I/O failure.
        """
        temp_path = None
        try:
            payload = self.dumps(data).encode(self.encoding)
            # Replace the symlink's target, not the link itself
            target = Path(os.path.realpath(self.path))
            # Write beside the target then swap, so a failed write never
            # leaves a truncated snapshot behind
            fd, temp_path = tempfile.mkstemp(
                dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, 'wb') as f:
                f.write(payload)
            if target.exists():
                shutil.copymode(target, temp_path)
            else:
                os.chmod(temp_path, _new_file_mode())
            os.replace(temp_path, target)
            temp_path = None
        except (OSError, TypeError, ValueError, LookupError) as e:
            logger.error(f"Failed to write snapshot to {self.path}: {e}", exc_info=True)
            raise StoreError(f"Failed to write snapshot to {self.path}: {e}") from e
        finally:
            if temp_path is not None and os.path.exists(temp_path):
                os.unlink(temp_path)

        logger.debug(f"Wrote snapshot with {len(data)} group(s) to {self.path}")

    def read_snapshot(self) -> Snapshot:
        """
        Read and parse the snapshot file.

        Returns:
            Mapping of group key to list of state records.

        Raises:
            StoreError: If the file is missing, unreadable, not valid JSON,
                or does not hold a JSON object.
        """
        try:
            with open(self.path, 'r', encoding=self.encoding) as f:
                data = json.load(f)
        except (OSError, ValueError, LookupError) as e:
            logger.error(f"Failed to read snapshot from {self.path}: {e}", exc_info=True)
            raise StoreError(f"Failed to read snapshot from {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StoreError(
                f"Snapshot at {self.path} must hold a JSON object, got {type(data).__name__}"
            )
        return data
