"""Durable storage of the tournament state snapshot."""

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

import json

from winterolympics.constants import STORAGE_KEY
from winterolympics.exceptions import FileLoadException, SnapshotVersionException
from winterolympics.models.tournament import TournamentState
from winterolympics.storage.migrations import migrate
from winterolympics.storage.store import (
    JsonFileStore,
    MemoryStore,
    QSettingsStore,
    SnapshotStore,
)
from winterolympics.utils import setup_logger

logger = setup_logger(__name__)


def load_state(store: SnapshotStore, key: str = STORAGE_KEY) -> TournamentState:
    """Load the saved state, falling back to a fresh one.

    A missing, unreadable, corrupt or too-new snapshot is logged and yields
    the default state; it is never an error for the caller. Dangling team
    references in the loaded state are pruned.
    """
    try:
        raw_text = store.get(key)
    except FileLoadException as e:
        logger.warning(f"Could not read saved state, starting fresh: {e}")
        return TournamentState()

    if not raw_text:
        return TournamentState()

    try:
        raw = json.loads(raw_text)
        if not isinstance(raw, dict):
            raise ValueError("snapshot is not a JSON object")
        state = TournamentState.from_dict(migrate(raw))
    except SnapshotVersionException as e:
        logger.warning(f"Ignoring saved state: {e}")
        return TournamentState()
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning(f"Saved state is corrupt, starting fresh: {e}")
        return TournamentState()

    state.prune_dangling_references()
    logger.debug(f"Loaded state with {len(state.teams)} team(s)")
    return state


def save_state(store: SnapshotStore, state: TournamentState, key: str = STORAGE_KEY) -> None:
    """Serialize the state and write it to the store.

    Raises:
        FileSaveException: If the store could not persist the snapshot
    """
    store.set(key, json.dumps(state.to_dict(), indent=4))


__all__ = [
    "JsonFileStore",
    "MemoryStore",
    "QSettingsStore",
    "SnapshotStore",
    "load_state",
    "save_state",
]
