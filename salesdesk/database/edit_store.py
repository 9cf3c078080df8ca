"""
Flat-file storage for email edit history.
The whole history is a single JSON array that is read, mutated in memory and
rewritten on every save. There is no locking; concurrent writers race and the
last writer wins.
"""
import os
import json
import logging
from typing import List, Dict, Any

from salesdesk.models.edit import EditRecord

logger = logging.getLogger(__name__)

DEFAULT_MAX_EDITS = 100


class EditStore:
    """JSON-file backed list of EditRecord entries, capped FIFO."""

    def __init__(self, file_path: str, max_edits: int = DEFAULT_MAX_EDITS):
        """
        Initialize the store.

        Args:
            file_path: Path of the JSON history file
            max_edits: Maximum number of records kept; the oldest are evicted first
        """
        self.file_path = file_path
        self.max_edits = max_edits

    @property
    def data_dir(self) -> str:
        return os.path.dirname(os.path.abspath(self.file_path))

    def ensure_data_dir(self):
        """Create the data directory if it does not exist yet."""
        os.makedirs(self.data_dir, exist_ok=True)

    def load_raw(self) -> List[Dict[str, Any]]:
        """
        Load the stored history as plain dictionaries.

        Returns:
            List of stored records, or an empty list when the file is missing or unreadable
        """
        if not os.path.exists(self.file_path):
            return []

        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Error reading email edits from {self.file_path}: {e}")
            return []

        if not isinstance(data, list):
            logger.error(f"Email edits file {self.file_path} does not contain a list, ignoring it")
            return []

        return [item for item in data if isinstance(item, dict)]

    def load(self) -> List[EditRecord]:
        """Load the stored history as EditRecord objects, oldest first."""
        return [EditRecord.from_dict(item) for item in self.load_raw()]

    def save_raw(self, edits: List[Dict[str, Any]]) -> bool:
        """
        Rewrite the whole history file.

        Write failures are logged and reported only through the return value.

        Args:
            edits: Records to persist

        Returns:
            True if the file was written
        """
        try:
            self.ensure_data_dir()
            with open(self.file_path, 'w', encoding='utf-8') as f:
                json.dump(edits, f, indent=2, ensure_ascii=False)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving email edits to {self.file_path}: {e}")
            return False

    def append(self, record: EditRecord) -> List[Dict[str, Any]]:
        """
        Append a record, evicting the oldest entries beyond the cap.

        Args:
            record: New edit record

        Returns:
            The history as it was written
        """
        edits = self.load_raw()
        edits.append(record.to_dict())
        if len(edits) > self.max_edits:
            evicted = len(edits) - self.max_edits
            edits = edits[evicted:]
            logger.info(f"Evicted {evicted} oldest email edit(s)")

        self.save_raw(edits)
        return edits
