"""Key-value backends for the durable state snapshot."""

# Winter Olympics Scoreboard
# Copyright (C) 2025  Winter Olympics Scoreboard developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import os
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

try:
    from PyQt6.QtCore import QSettings

    QT_AVAILABLE = True
except ImportError:
    QT_AVAILABLE = False

from winterolympics.constants import SNAPSHOT_FILE_EXTENSION
from winterolympics.exceptions import (
    EnvironmentUnavailableException,
    FileLoadException,
    FileSaveException,
)
from winterolympics.utils import setup_logger

logger = setup_logger(__name__)


class SnapshotStore(ABC):
    """A string key-value store holding serialized snapshots."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored text for ``key``, or None if absent.

        Raises:
            FileLoadException: If the backend exists but cannot be read
        """

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``.

        Raises:
            FileSaveException: If the value could not be persisted
        """

    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""


class MemoryStore(SnapshotStore):
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore(SnapshotStore):
    """One ``<key>.json`` file per key inside a directory.

    Writes go to a temporary file first and are moved into place with
    ``os.replace``, so a crash never leaves a half-written snapshot.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory).expanduser()

    def path_for(self, key: str) -> Path:
        safe_key = re.sub(r"[^A-Za-z0-9._-]", "_", key)
        return self.directory / f"{safe_key}{SNAPSHOT_FILE_EXTENSION}"

    def get(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise FileLoadException(f"Could not read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, path)
        except OSError as e:
            self._discard(tmp_path)
            raise FileSaveException(f"Could not write {path}: {e}") from e
        logger.debug(f"Saved snapshot to {path}")

    @staticmethod
    def _discard(tmp_path: Path) -> None:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove temporary file {tmp_path}: {e}")

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        if path.exists():
            path.unlink()


class QSettingsStore(SnapshotStore):
    """Desktop key-value storage through Qt's ``QSettings`` (INI format)."""

    def __init__(self, path: Union[str, Path]):
        if not QT_AVAILABLE:
            raise EnvironmentUnavailableException(
                "Qt settings storage requires PyQt6. Install the 'qt' extra or "
                "use the json storage backend."
            )
        self.path = Path(path).expanduser()
        self.settings = QSettings(str(self.path), QSettings.Format.IniFormat)

    def get(self, key: str) -> Optional[str]:
        value = self.settings.value(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        self.settings.setValue(key, value)
        self.settings.sync()
        if self.settings.status() != QSettings.Status.NoError:
            raise FileSaveException(f"Could not write settings file {self.path}")

    def delete(self, key: str) -> None:
        self.settings.remove(key)
        self.settings.sync()
