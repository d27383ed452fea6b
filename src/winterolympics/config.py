"""Application configuration.

Settings come from environment variables, falling back to defaults:

- ``WINTEROLYMPICS_HOME``: data directory (default ``~/.winterolympics``)
- ``WINTEROLYMPICS_STORAGE``: snapshot backend, ``json``, ``qsettings`` or
  ``memory`` (default ``json``)
- ``WINTEROLYMPICS_LOG_LEVEL``: logging level (default ``INFO``)
"""

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

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from winterolympics.exceptions import InvalidConfigurationException
from winterolympics.storage.store import (
    JsonFileStore,
    MemoryStore,
    QSettingsStore,
    SnapshotStore,
)
from winterolympics.utils import setup_logger

logger = setup_logger(__name__)

ENV_HOME = "WINTEROLYMPICS_HOME"
ENV_STORAGE = "WINTEROLYMPICS_STORAGE"
ENV_LOG_LEVEL = "WINTEROLYMPICS_LOG_LEVEL"

STORAGE_JSON = "json"
STORAGE_QSETTINGS = "qsettings"
STORAGE_MEMORY = "memory"
STORAGE_BACKENDS = (STORAGE_JSON, STORAGE_QSETTINGS, STORAGE_MEMORY)

DEFAULT_DATA_DIR = Path.home() / ".winterolympics"
DEFAULT_LOG_LEVEL = "INFO"
QSETTINGS_FILENAME = "settings.ini"


def _validate_log_level(level: str) -> str:
    level = (level or "").strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise InvalidConfigurationException(f"Unknown log level: {level!r}")
    return level


def _validate_backend(backend: str) -> str:
    backend = (backend or "").strip().lower()
    if backend not in STORAGE_BACKENDS:
        raise InvalidConfigurationException(
            f"Unknown storage backend {backend!r}; expected one of {', '.join(STORAGE_BACKENDS)}"
        )
    return backend


@dataclass
class AppConfig:
    """Runtime configuration.

    Attributes
    ----------
    data_dir : Path
        Directory holding the state snapshot.
    storage_backend : str
        One of ``json``, ``qsettings`` or ``memory``.
    log_level : str
        Level name for the package loggers.
    """

    data_dir: Path = field(default_factory=lambda: DEFAULT_DATA_DIR)
    storage_backend: str = STORAGE_JSON
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self):
        self.data_dir = Path(self.data_dir).expanduser()
        self.storage_backend = _validate_backend(self.storage_backend)
        self.log_level = _validate_log_level(self.log_level)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """Build configuration from environment variables.

        Raises:
            InvalidConfigurationException: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ
        return cls(
            data_dir=Path(env.get(ENV_HOME) or DEFAULT_DATA_DIR),
            storage_backend=env.get(ENV_STORAGE) or STORAGE_JSON,
            log_level=env.get(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data_dir": str(self.data_dir),
            "storage_backend": self.storage_backend,
            "log_level": self.log_level,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        return cls(
            data_dir=Path(data.get("data_dir") or DEFAULT_DATA_DIR),
            storage_backend=data.get("storage_backend") or STORAGE_JSON,
            log_level=data.get("log_level") or DEFAULT_LOG_LEVEL,
        )


def build_store(config: AppConfig) -> SnapshotStore:
    """Create the snapshot store selected by ``config``."""
    if config.storage_backend == STORAGE_MEMORY:
        return MemoryStore()
    if config.storage_backend == STORAGE_QSETTINGS:
        return QSettingsStore(config.data_dir / QSETTINGS_FILENAME)
    logger.debug(f"Using JSON snapshot store in {config.data_dir}")
    return JsonFileStore(config.data_dir)
