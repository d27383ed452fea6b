"""Event data classes: bracket events hold matches, timed events hold times."""

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

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from winterolympics.constants import BRACKET_EVENT_SLOTS, EVENT_NAMES
from winterolympics.models.tournament.match import Match
from winterolympics.type_hints import Times
from winterolympics.utils import parse_maybe_number


class EventKind(Enum):
    """How an event is scored."""

    BRACKET = "bracket"
    TIMED = "timed"


def event_kind(slot: int) -> EventKind:
    return EventKind.BRACKET if slot in BRACKET_EVENT_SLOTS else EventKind.TIMED


@dataclass
class BracketEvent:
    """An event decided by head-to-head matches.

    Attributes
    ----------
    slot : int
        Event slot (1, 2, 3 or 5).
    matches : list of Match
        Matches in display order.
    """

    slot: int
    matches: List[Match] = field(default_factory=list)

    kind = EventKind.BRACKET

    @property
    def name(self) -> str:
        return EVENT_NAMES[self.slot]

    def get_match(self, match_id: str) -> Optional[Match]:
        for match in self.matches:
            if match.id == match_id:
                return match
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize event to dictionary."""
        return {"matches": [m.to_dict() for m in self.matches]}

    @classmethod
    def from_dict(cls, slot: int, data: Dict[str, Any]) -> "BracketEvent":
        """Deserialize event from dictionary."""
        return cls(
            slot=slot,
            matches=[Match.from_dict(m) for m in data.get("matches", [])],
        )


@dataclass
class TimedEvent:
    """An event ranked by elapsed time, lower is better.

    Attributes
    ----------
    slot : int
        Event slot (4).
    times : dict
        Team id -> seconds. Teams without a recorded time are absent.
    """

    slot: int
    times: Times = field(default_factory=dict)

    kind = EventKind.TIMED

    @property
    def name(self) -> str:
        return EVENT_NAMES[self.slot]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize event to dictionary."""
        return {"times": dict(self.times)}

    @classmethod
    def from_dict(cls, slot: int, data: Dict[str, Any]) -> "TimedEvent":
        """Deserialize event from dictionary, skipping unparseable times."""
        times: Dict[str, float] = {}
        for team_id, raw in (data.get("times") or {}).items():
            seconds = parse_maybe_number(raw)
            if seconds is not None and seconds >= 0:
                times[str(team_id)] = seconds
        return cls(slot=slot, times=times)


Event = Union[BracketEvent, TimedEvent]


def empty_event(slot: int) -> Event:
    """Create an empty event of the right kind for the slot."""
    if event_kind(slot) is EventKind.BRACKET:
        return BracketEvent(slot=slot)
    return TimedEvent(slot=slot)
