"""Durable key-value storage backed by JSON files."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

from .exceptions import PersistenceError

logger = logging.getLogger(__name__)


class LocalStorage:
    """
    Client-local key-value storage.

    Each key is stored as ``<storage_dir>/<key>.json`` holding a serialized
    ordered sequence of records.
    """

    def __init__(self, storage_dir: Union[str, Path]) -> None:
        """
        Initialize the storage.

        Args:
            storage_dir: Directory for snapshot files. Created lazily on first write.
        """
        self.storage_dir = Path(storage_dir).expanduser()

    def _path(self, key: str) -> Path:
        return self.storage_dir / f"{key}.json"

    def get(self, key: str) -> Optional[Any]:
        """
        Read the value stored under a key.

        Returns:
            The decoded value, or None if nothing is stored

        Raises:
            PersistenceError: If the file exists but cannot be read or decoded
        """
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, "r") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Could not read '{key}' from {path}: {e}", key=key) from e

    def set(self, key: str, value: Any) -> None:
        """
        Write a value under a key, replacing any previous value.

        Raises:
            PersistenceError: If the value cannot be serialized or written
        """
        path = self._path(key)
        tmp_path = None
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            # The previous snapshot stays in place until the new one is complete
            with tempfile.NamedTemporaryFile(
                "w", dir=self.storage_dir, prefix=f".{key}.", suffix=".tmp", delete=False
            ) as f:
                tmp_path = f.name
                json.dump(value, f, default=str)
            # Set restrictive permissions on snapshot file
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise PersistenceError(f"Could not write '{key}' to {path}: {e}", key=key) from e
        logger.debug(f"Saved '{key}' to {path}")

    def remove(self, key: str) -> None:
        """Delete a key. Missing keys are ignored."""
        path = self._path(key)
        if not path.exists():
            return
        try:
            os.remove(path)
        except OSError as e:
            raise PersistenceError(f"Could not delete '{key}' at {path}: {e}", key=key) from e
        logger.debug(f"Removed '{key}'")

    def __contains__(self, key: str) -> bool:
        return self._path(key).exists()
