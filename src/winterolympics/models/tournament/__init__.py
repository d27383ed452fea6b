"""Tournament data models."""

from winterolympics.models.tournament.event import (
    BracketEvent,
    Event,
    EventKind,
    TimedEvent,
    empty_event,
    event_kind,
)
from winterolympics.models.tournament.match import Match
from winterolympics.models.tournament.team import Team
from winterolympics.models.tournament.tournament_state import (
    TournamentState,
    default_events,
)

__all__ = [
    "BracketEvent",
    "Event",
    "EventKind",
    "Match",
    "Team",
    "TimedEvent",
    "TournamentState",
    "default_events",
    "empty_event",
    "event_kind",
]
