"""Controllers operating on the tournament state."""

from winterolympics.controllers.matchups import ByeNotice, MatchupGenerator
from winterolympics.controllers.scoring import (
    ScoreCalculator,
    StandingRow,
    TeamPoints,
    compute_points,
    standings,
    timed_ranking,
)
from winterolympics.controllers.tournament import Tournament

__all__ = [
    "ByeNotice",
    "MatchupGenerator",
    "ScoreCalculator",
    "StandingRow",
    "TeamPoints",
    "Tournament",
    "compute_points",
    "standings",
    "timed_ranking",
]
