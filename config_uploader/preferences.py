#!/usr/bin/env python3
"""
Preference Store for the config uploader
Remembers the last successful selection in a small JSON file
"""

import os
import json
import tempfile
from pathlib import Path
from typing import Optional, Union

from .exceptions import PreferenceCorrupt
from .models import StoredSelection
from .log_manager import get_logger


class PreferenceStore:
    """Reads and atomically rewrites the stored selection file"""

    def __init__(self, path: Union[str, Path]):
        """
        Initialize preference store

        Args:
            path: JSON file location (usually <project>/.azure-config.json)
        """
        self.path = Path(path)
        self.logger = get_logger('PreferenceStore', component='manager')

    def read(self) -> Optional[StoredSelection]:
        """
        Load the stored selection

        Returns:
            StoredSelection, or None when the file is missing or unreadable
        """
        if not self.path.exists():
            return None
        try:
            return self._parse(self.path.read_bytes())
        except (OSError, PreferenceCorrupt) as e:
            # Treated as "no stored preference"; the operator is not told
            self.logger.warning(f"Ignoring stored selection {self.path}: {e}")
            return None

    @staticmethod
    def _parse(raw: bytes) -> StoredSelection:
        try:
            # UnicodeDecodeError is a ValueError
            data = json.loads(raw.decode('utf-8'))
            if not isinstance(data, dict):
                raise TypeError("expected a JSON object")
            return StoredSelection.from_dict(data)
        except (ValueError, KeyError, TypeError) as e:
            raise PreferenceCorrupt(f"Corrupt preference file: {e}") from e

    def write(self, selection: StoredSelection) -> None:
        """
        Overwrite the stored selection atomically

        Writes a temporary file next to the target and renames it, so a
        reader never sees a half-written file.

        Args:
            selection: Selection to persist
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                mode='w',
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix='.tmp',
                delete=False,
                encoding='utf-8'
            ) as tmp_file:
                tmp_path = tmp_file.name
                json.dump(selection.to_dict(), tmp_file, indent=2)
                tmp_file.write("\n")

            os.replace(tmp_path, self.path)
            tmp_path = None
            self.logger.info(f"Saved selection {selection.app_name}/{selection.environment} to {self.path}")
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
