"""TournamentState data class: the full scoreboard state."""

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

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from winterolympics.constants import (
    ALL_EVENT_SLOTS,
    BRACKET_EVENT_SLOTS,
    DEFAULT_SETTINGS,
    SETTING_ACTIVE_VIEW,
    SNAPSHOT_VERSION,
    TIMED_EVENT_SLOTS,
    VALID_VIEWS,
    VIEW_TEAMS,
)
from winterolympics.exceptions import InvalidEventException
from winterolympics.models.tournament.event import (
    BracketEvent,
    Event,
    TimedEvent,
    empty_event,
)
from winterolympics.models.tournament.team import Team
from winterolympics.type_hints import Settings
from winterolympics.utils import setup_logger

logger = setup_logger(__name__)


def default_events() -> Dict[int, Event]:
    """Five empty events, one per slot."""
    return {slot: empty_event(slot) for slot in ALL_EVENT_SLOTS}


def normalize_view(view: Any) -> str:
    """Map anything but a known view name to the teams view."""
    return view if view in VALID_VIEWS else VIEW_TEAMS


@dataclass
class TournamentState:
    """Container for all scoreboard data.

    Attributes
    ----------
    teams : list of Team
        Teams in insertion order (the fallback display order).
    events : dict
        Event slot -> BracketEvent or TimedEvent. Always holds all five slots.
    settings : dict
        Free-form string settings (scoring mode, active view, ...).
    format_version : int
        Snapshot schema version this state was written with.
    """

    teams: List[Team] = field(default_factory=list)
    events: Dict[int, Event] = field(default_factory=default_events)
    settings: Settings = field(default_factory=lambda: dict(DEFAULT_SETTINGS))
    format_version: int = SNAPSHOT_VERSION

    # ========== Lookups ==========

    def teams_by_id(self) -> Dict[str, Team]:
        return {team.id: team for team in self.teams}

    def get_team(self, team_id: str) -> Optional[Team]:
        for team in self.teams:
            if team.id == team_id:
                return team
        return None

    def bracket(self, slot: int) -> BracketEvent:
        event = self.events.get(slot)
        if not isinstance(event, BracketEvent):
            raise InvalidEventException(f"Event {slot} is not a match event")
        return event

    def timed(self, slot: int = TIMED_EVENT_SLOTS[0]) -> TimedEvent:
        event = self.events.get(slot)
        if not isinstance(event, TimedEvent):
            raise InvalidEventException(f"Event {slot} is not a timed event")
        return event

    def bracket_events(self) -> List[BracketEvent]:
        return [self.bracket(slot) for slot in BRACKET_EVENT_SLOTS]

    def copy(self) -> "TournamentState":
        return copy.deepcopy(self)

    @property
    def active_view(self) -> str:
        return normalize_view(self.settings.get(SETTING_ACTIVE_VIEW))

    @active_view.setter
    def active_view(self, view: str) -> None:
        self.settings[SETTING_ACTIVE_VIEW] = normalize_view(view)

    # ========== Invariants ==========

    def prune_dangling_references(self) -> int:
        """Drop matches and times that reference unknown teams.

        A match with an unknown side is removed entirely; a match whose only
        problem is an unknown or inconsistent winner keeps its sides and loses
        the winner.

        Returns:
            Number of references removed or cleared
        """
        known = {team.id for team in self.teams}
        removed = 0

        for event in self.bracket_events():
            kept = []
            for match in event.matches:
                sides = [s for s in (match.a_team_id, match.b_team_id) if s]
                if any(side not in known for side in sides):
                    removed += 1
                    continue
                if match.winner_team_id and (
                    match.winner_team_id not in known or not match.winner_is_valid()
                ):
                    match.winner_team_id = None
                    removed += 1
                kept.append(match)
            event.matches = kept

        for slot in TIMED_EVENT_SLOTS:
            times = self.timed(slot).times
            for team_id in [t for t in times if t not in known]:
                del times[team_id]
                removed += 1

        if removed:
            logger.warning(f"Dropped {removed} reference(s) to unknown teams")
        return removed

    # ========== Serialization ==========

    def to_dict(self) -> Dict[str, Any]:
        """Serialize state to the snapshot dictionary."""
        return {
            "formatVersion": self.format_version,
            "teams": [t.to_dict() for t in self.teams],
            "events": {str(slot): self.events[slot].to_dict() for slot in ALL_EVENT_SLOTS},
            "settings": dict(self.settings),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TournamentState":
        """Deserialize state from a current-version snapshot dictionary.

        Older snapshots must be passed through
        :func:`winterolympics.storage.migrations.migrate` first.
        """
        raw_events = data.get("events") or {}
        events: Dict[int, Event] = {}
        for slot in ALL_EVENT_SLOTS:
            raw = raw_events.get(str(slot)) or raw_events.get(slot) or {}
            if slot in BRACKET_EVENT_SLOTS:
                events[slot] = BracketEvent.from_dict(slot, raw)
            else:
                events[slot] = TimedEvent.from_dict(slot, raw)

        settings = dict(DEFAULT_SETTINGS)
        settings.update(
            {str(k): "" if v is None else str(v) for k, v in (data.get("settings") or {}).items()}
        )
        settings[SETTING_ACTIVE_VIEW] = normalize_view(settings.get(SETTING_ACTIVE_VIEW))

        teams = [Team.from_dict(t) for t in data.get("teams", [])]
        return cls(
            teams=[t for t in teams if t.name],
            events=events,
            settings=settings,
            format_version=int(data.get("formatVersion", SNAPSHOT_VERSION)),
        )
