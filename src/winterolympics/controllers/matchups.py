"""Random matchup generation for the bracket events.

Each bracket event gets its own independent shuffle, so a team usually meets
different opponents in different events.
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

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from winterolympics.constants import BRACKET_EVENT_SLOTS, MIN_TEAMS_FOR_MATCHUPS
from winterolympics.exceptions import NotEnoughTeamsException
from winterolympics.models.tournament import Match, Team
from winterolympics.utils import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class ByeNotice:
    """A team left unpaired in one bracket event.

    Attributes
    ----------
    slot : int
        Bracket event slot.
    team_id : str
        Team that sits out.
    message : str
        Human-readable notice, e.g. ``Event 1: Red gets a bye``.
    """

    slot: int
    team_id: str
    message: str


class MatchupGenerator:
    """Creates fresh random pairings for every bracket event.

    This class is responsible for:
    - Shuffling the team list once per event
    - Pairing consecutive teams into undecided matches
    - Reporting the odd team out as a bye
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        slots: Sequence[int] = BRACKET_EVENT_SLOTS,
    ):
        self.rng = rng or random.Random()
        self.slots = tuple(slots)

    def pair_event(self, slot: int, teams: Sequence[Team]) -> Tuple[List[Match], Optional[ByeNotice]]:
        """Shuffle and pair teams for one event.

        Returns:
            (matches, bye notice or None)
        """
        team_ids = [team.id for team in teams]
        self.rng.shuffle(team_ids)

        matches = [
            Match.create(slot, team_ids[i], team_ids[i + 1])
            for i in range(0, len(team_ids) - 1, 2)
        ]

        bye = None
        if len(team_ids) % 2 == 1:
            bye_id = team_ids[-1]
            name = next((t.name for t in teams if t.id == bye_id), "Unknown team")
            bye = ByeNotice(slot=slot, team_id=bye_id, message=f"Event {slot}: {name} gets a bye")
        return matches, bye

    def generate(self, teams: Sequence[Team]) -> Tuple[Dict[int, List[Match]], List[ByeNotice]]:
        """Pair teams for every bracket event.

        Args:
            teams: Registered teams

        Returns:
            (slot -> new match list, bye notices in slot order)

        Raises:
            NotEnoughTeamsException: If fewer than two teams are registered
        """
        if len(teams) < MIN_TEAMS_FOR_MATCHUPS:
            raise NotEnoughTeamsException(
                f"Need at least {MIN_TEAMS_FOR_MATCHUPS} teams to create matchups."
            )

        pairings: Dict[int, List[Match]] = {}
        byes: List[ByeNotice] = []
        for slot in self.slots:
            matches, bye = self.pair_event(slot, teams)
            pairings[slot] = matches
            if bye:
                byes.append(bye)

        logger.info(
            f"Generated matchups for events {', '.join(str(s) for s in self.slots)}: "
            f"{sum(len(m) for m in pairings.values())} match(es), {len(byes)} bye(s)"
        )
        return pairings, byes
