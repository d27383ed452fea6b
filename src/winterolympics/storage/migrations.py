"""Snapshot schema migrations.

Every historical snapshot version has one function that lifts it to the next
version. :func:`migrate` applies them in sequence until the snapshot is at
:data:`SNAPSHOT_VERSION`.

Version history:

- 0: the browser-era layout. No ``formatVersion`` key, camelCase match keys
  (``aTeamId``, ``bTeamId``, ``winnerTeamId``), empty strings for unset
  teams, and events or settings that may be missing entirely.
- 1: ``formatVersion`` present, snake_case match keys, every event present.
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

from typing import Any, Callable, Dict

from winterolympics.constants import (
    ALL_EVENT_SLOTS,
    BRACKET_EVENT_SLOTS,
    DEFAULT_SETTINGS,
    SNAPSHOT_VERSION,
)
from winterolympics.exceptions import SnapshotVersionException
from winterolympics.utils import setup_logger

logger = setup_logger(__name__)

Snapshot = Dict[str, Any]


def snapshot_version(raw: Snapshot) -> int:
    """Version of a raw snapshot; snapshots without the key are version 0."""
    try:
        return int(raw.get("formatVersion", 0))
    except (TypeError, ValueError):
        return 0


def _legacy_match(match: Dict[str, Any]) -> Dict[str, Any]:
    def pick(*keys):
        for key in keys:
            value = match.get(key)
            if value not in (None, ""):
                return str(value)
        return None

    return {
        "id": pick("id"),
        "a_team_id": pick("a_team_id", "aTeamId"),
        "b_team_id": pick("b_team_id", "bTeamId"),
        "winner_team_id": pick("winner_team_id", "winnerTeamId"),
    }


def migrate_v0_to_v1(raw: Snapshot) -> Snapshot:
    """Fill missing events and settings and rename match keys."""
    raw_events = raw.get("events") if isinstance(raw.get("events"), dict) else {}
    events: Dict[str, Any] = {}
    for slot in ALL_EVENT_SLOTS:
        event = raw_events.get(str(slot)) or raw_events.get(slot) or {}
        if not isinstance(event, dict):
            event = {}
        if slot in BRACKET_EVENT_SLOTS:
            matches = event.get("matches") if isinstance(event.get("matches"), list) else []
            events[str(slot)] = {
                "matches": [_legacy_match(m) for m in matches if isinstance(m, dict)]
            }
        else:
            times = event.get("times") if isinstance(event.get("times"), dict) else {}
            events[str(slot)] = {"times": dict(times)}

    settings = dict(DEFAULT_SETTINGS)
    if isinstance(raw.get("settings"), dict):
        settings.update(raw["settings"])

    teams = []
    for team in raw.get("teams") or []:
        if not isinstance(team, dict):
            continue
        members = team.get("members")
        teams.append(
            {
                "id": team.get("id"),
                "name": team.get("name"),
                "members": members if isinstance(members, list) else [],
            }
        )

    return {"formatVersion": 1, "teams": teams, "events": events, "settings": settings}


# Version N -> function producing version N + 1
MIGRATIONS: Dict[int, Callable[[Snapshot], Snapshot]] = {
    0: migrate_v0_to_v1,
}


def migrate(raw: Snapshot) -> Snapshot:
    """Bring a raw snapshot up to the current version.

    Args:
        raw: Parsed snapshot JSON

    Returns:
        Snapshot dictionary at :data:`SNAPSHOT_VERSION`

    Raises:
        SnapshotVersionException: If the snapshot is newer than supported
    """
    version = snapshot_version(raw)
    if version > SNAPSHOT_VERSION:
        raise SnapshotVersionException(
            f"Snapshot version {version} is newer than supported version {SNAPSHOT_VERSION}"
        )

    while version < SNAPSHOT_VERSION:
        step = MIGRATIONS.get(version)
        if step is None:
            raise SnapshotVersionException(f"No migration from snapshot version {version}")
        raw = step(raw)
        logger.info(f"Migrated snapshot from version {version} to {version + 1}")
        version += 1

    return raw
