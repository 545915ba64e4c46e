"""
On-disk JSON snapshots of computed reports.

One file per report type, holding the full payload including its
lastUpdated stamp.
"""
import json
import logging
import os
import tempfile
from typing import Any, Dict, Optional

from select_start.services.errors import PersistenceWarning

# Set up logging
logger = logging.getLogger(__name__)


class SnapshotStore:
    """Reads and writes report snapshots under a cache directory."""

    def __init__(self, directory: str):
        self.directory = directory

    def path_for(self, name: str) -> str:
        return os.path.join(self.directory, f"{name}.json")

    def save(self, name: str, payload: Dict[str, Any]) -> str:
        """
        Write a snapshot, replacing any previous one atomically

        Args:
            name: Stable snapshot name, e.g. 'monthly-leaderboard'
            payload: JSON-serialisable report

        Returns:
            Path of the written file

        Raises:
            PersistenceWarning: the snapshot could not be written
        """
        path = self.path_for(name)
        try:
            os.makedirs(self.directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=f".{name}-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceWarning(f"Could not write snapshot {path}: {e}") from e
        return path

    def load(self, name: str) -> Optional[Dict[str, Any]]:
        """
        Read a snapshot

        Returns:
            The stored payload, or None when no snapshot exists

        Raises:
            PersistenceWarning: the file exists but cannot be read or parsed
        """
        path = self.path_for(name)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceWarning(f"Could not read snapshot {path}: {e}") from e
        if not isinstance(payload, dict):
            raise PersistenceWarning(f"Snapshot {path} does not hold a JSON object")
        return payload
