"""Points calculation for all five events.

Scoring is a pure function of the tournament state: nothing here mutates the
state and the same state always yields the same points.
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

import math
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from winterolympics.constants import (
    ALL_EVENT_SLOTS,
    MATCH_WIN_POINTS,
    TIMED_EVENT_SLOTS,
    TIMED_RANK_POINTS,
)
from winterolympics.models.tournament import BracketEvent, Team, TimedEvent, TournamentState


@dataclass
class TeamPoints:
    """Points of one team.

    Attributes
    ----------
    by_event : dict
        Event slot -> points in that event (all five slots present).
    """

    by_event: Dict[int, int] = field(default_factory=lambda: {slot: 0 for slot in ALL_EVENT_SLOTS})

    @property
    def total(self) -> int:
        return sum(self.by_event.values())

    def __getitem__(self, slot: int) -> int:
        return self.by_event[slot]

    def to_dict(self) -> Dict[str, int]:
        data = {str(slot): points for slot, points in self.by_event.items()}
        data["total"] = self.total
        return data


@dataclass
class StandingRow:
    """One line of the points table."""

    rank: int
    team: Team
    points: TeamPoints


class ScoreCalculator:
    """Computes event points from a tournament state.

    - Bracket events: 3 points to the winner of each decided match.
    - Timed event: the four fastest teams get 5, 3, 2 and 1 points. Equal
      times are ordered by team name (case-insensitive), then team id.
    """

    def __init__(
        self,
        match_win_points: int = MATCH_WIN_POINTS,
        timed_rank_points: Tuple[int, ...] = TIMED_RANK_POINTS,
    ):
        self.match_win_points = match_win_points
        self.timed_rank_points = timed_rank_points

    def compute(self, state: TournamentState) -> Dict[str, TeamPoints]:
        """Calculate points for every team.

        Args:
            state: Tournament state to score

        Returns:
            Team id -> TeamPoints, for every team in ``state.teams``
        """
        points = {team.id: TeamPoints() for team in state.teams}

        for event in state.events.values():
            if isinstance(event, BracketEvent):
                self._score_bracket(event, points)
            elif isinstance(event, TimedEvent):
                self._score_timed(event, state, points)

        return points

    def _score_bracket(self, event: BracketEvent, points: Dict[str, TeamPoints]) -> None:
        for match in event.matches:
            if not match.is_decided:
                continue
            team_points = points.get(match.winner_team_id)
            if team_points is None:
                continue  # dangling reference
            team_points.by_event[event.slot] += self.match_win_points

    def timed_ranking(self, event: TimedEvent, state: TournamentState) -> List[Tuple[str, float]]:
        """Teams with a valid time, fastest first.

        Returns:
            List of (team id, seconds)
        """
        teams = state.teams_by_id()
        entries = [
            (team_id, seconds)
            for team_id, seconds in event.times.items()
            if team_id in teams and isinstance(seconds, (int, float)) and math.isfinite(seconds)
        ]
        entries.sort(key=lambda e: (e[1], teams[e[0]].name.lower(), e[0]))
        return entries

    def _score_timed(
        self, event: TimedEvent, state: TournamentState, points: Dict[str, TeamPoints]
    ) -> None:
        ranking = self.timed_ranking(event, state)
        for (team_id, _seconds), award in zip(ranking, self.timed_rank_points):
            points[team_id].by_event[event.slot] += award

    def standings(self, state: TournamentState) -> List[StandingRow]:
        """Teams ordered by total points, then name.

        Teams with equal totals share a rank (competition ranking: 1, 1, 3).
        """
        points = self.compute(state)
        ordered = sorted(state.teams, key=lambda t: (-points[t.id].total, t.name.lower()))

        rows: List[StandingRow] = []
        for index, team in enumerate(ordered):
            if rows and points[team.id].total == rows[-1].points.total:
                rank = rows[-1].rank
            else:
                rank = index + 1
            rows.append(StandingRow(rank=rank, team=team, points=points[team.id]))
        return rows


_default_calculator = ScoreCalculator()


def compute_points(state: TournamentState) -> Dict[str, TeamPoints]:
    """Points per team for all events (see :class:`ScoreCalculator`)."""
    return _default_calculator.compute(state)


def standings(state: TournamentState) -> List[StandingRow]:
    """Points table rows ordered by total, then name."""
    return _default_calculator.standings(state)


def timed_ranking(state: TournamentState, slot: int = TIMED_EVENT_SLOTS[0]) -> List[Tuple[str, float]]:
    """Fastest-first (team id, seconds) for the timed event."""
    return _default_calculator.timed_ranking(state.timed(slot), state)
