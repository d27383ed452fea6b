"""The Tournament container: every state mutation goes through here.

Each operation checks its preconditions first and raises an
:class:`OperationRefusedException` subclass without touching the state when
one fails. Successful operations are written to the snapshot store right away.
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
from typing import Any, Dict, Iterable, List, Optional

from winterolympics.constants import (
    MIN_TEAMS_FOR_MATCHUPS,
    SETTING_ACTIVE_VIEW,
    TIMED_EVENT_SLOTS,
    VALID_VIEWS,
)
from winterolympics.controllers.matchups import ByeNotice, MatchupGenerator
from winterolympics.controllers.scoring import StandingRow, TeamPoints, compute_points, standings
from winterolympics.exceptions import (
    FileSaveException,
    InvalidWinnerException,
    MatchNotFoundException,
    NotEnoughTeamsException,
    OperationRefusedException,
    TeamNotFoundException,
)
from winterolympics.formats.roster import RosterImport, import_roster, unique_name
from winterolympics.models.tournament import Match, Team, TournamentState
from winterolympics.storage import load_state, save_state
from winterolympics.storage.store import MemoryStore, SnapshotStore
from winterolympics.type_hints import Rows
from winterolympics.utils import setup_logger
from winterolympics.utils.validation import (
    clean_members,
    validate_bracket_slot,
    validate_match_side,
    validate_seconds_strict,
    validate_team_name_strict,
)

logger = setup_logger(__name__)


class Tournament:
    """Owns the live tournament state and its persistence.

    Attributes:
        state: The current TournamentState. Read freely; mutate only through
            the methods of this class.
        store: Snapshot store the state is autosaved to.
    """

    def __init__(
        self,
        store: Optional[SnapshotStore] = None,
        state: Optional[TournamentState] = None,
    ):
        self.store = store if store is not None else MemoryStore()
        self.state = state if state is not None else TournamentState()

    @classmethod
    def open(cls, store: SnapshotStore) -> "Tournament":
        """Create a tournament from the state saved in ``store``."""
        return cls(store=store, state=load_state(store))

    # ========== Persistence ==========

    def _commit(self, action: str) -> None:
        logger.info(action)
        try:
            save_state(self.store, self.state)
        except FileSaveException:
            logger.exception(f"Autosave failed after: {action}")
            raise

    # ========== Lookups ==========

    def get_team(self, team_id: str) -> Team:
        """Return a team by id.

        Raises:
            TeamNotFoundException: If no team has that id
        """
        team = self.state.get_team(team_id)
        if team is None:
            raise TeamNotFoundException(f"Team not found: {team_id}")
        return team

    def find_team(self, name_or_id: str) -> Team:
        """Return a team by id or by case-insensitive name.

        Raises:
            TeamNotFoundException: If nothing matches
        """
        key = (name_or_id or "").strip()
        team = self.state.get_team(key)
        if team is not None:
            return team
        for team in self.state.teams:
            if team.name.lower() == key.lower():
                return team
        raise TeamNotFoundException(f"Team not found: {name_or_id}")

    def get_match(self, slot: Any, match_id: str) -> Match:
        """Return a match of a bracket event.

        Raises:
            InvalidEventException: If ``slot`` is not a bracket event
            MatchNotFoundException: If the event has no such match
        """
        event = self.state.bracket(validate_bracket_slot(slot))
        match = event.get_match(match_id)
        if match is None:
            raise MatchNotFoundException(f"Match {match_id} not found in event {event.slot}")
        return match

    def points(self) -> Dict[str, TeamPoints]:
        return compute_points(self.state)

    def standings(self) -> List[StandingRow]:
        return standings(self.state)

    # ========== Teams ==========

    def _unique_name(self, name: str, exclude_id: Optional[str] = None) -> str:
        taken = [t.name for t in self.state.teams if t.id != exclude_id]
        return unique_name(name, taken)

    def add_team(self, name: str, members: Optional[Iterable[str]] = None) -> Team:
        """Register a new team.

        The name is trimmed and suffixed with `` (n)`` if already taken.
        Members are trimmed, blanks dropped and at most four kept.

        Raises:
            InvalidTeamNameException: If the name is blank
        """
        clean_name = validate_team_name_strict(name)
        team = Team.create(self._unique_name(clean_name), list(members or []))
        self.state.teams.append(team)
        self._commit(f"Added team {team.name!r}")
        return team

    def remove_team(self, team_id: str) -> Team:
        """Remove a team with every match it plays in and its time."""
        team = self.get_team(team_id)
        self.state.teams = [t for t in self.state.teams if t.id != team_id]
        for event in self.state.bracket_events():
            event.matches = [m for m in event.matches if not m.involves(team_id)]
        for slot in TIMED_EVENT_SLOTS:
            self.state.timed(slot).times.pop(team_id, None)
        self._commit(f"Removed team {team.name!r}")
        return team

    def rename_team(self, team_id: str, name: str) -> Team:
        """Rename a team, keeping names unique among the other teams."""
        clean_name = validate_team_name_strict(name)
        team = self.get_team(team_id)
        old_name = team.name
        team.name = self._unique_name(clean_name, exclude_id=team_id)
        self._commit(f"Renamed team {old_name!r} to {team.name!r}")
        return team

    def set_members(self, team_id: str, members: Optional[Iterable[str]]) -> Team:
        team = self.get_team(team_id)
        team.members = clean_members(members)
        self._commit(f"Updated members of {team.name!r}")
        return team

    # ========== Bracket events ==========

    def add_match(self, slot: Any) -> Match:
        """Append an empty match to a bracket event.

        Raises:
            NotEnoughTeamsException: With fewer than two teams registered
        """
        slot = validate_bracket_slot(slot)
        if len(self.state.teams) < MIN_TEAMS_FOR_MATCHUPS:
            raise NotEnoughTeamsException(
                f"Need at least {MIN_TEAMS_FOR_MATCHUPS} teams to add a match."
            )
        match = Match.create(slot)
        self.state.bracket(slot).matches.append(match)
        self._commit(f"Added match {match.id} to event {slot}")
        return match

    def remove_match(self, slot: Any, match_id: str) -> Match:
        match = self.get_match(slot, match_id)
        event = self.state.bracket(validate_bracket_slot(slot))
        event.matches = [m for m in event.matches if m.id != match_id]
        self._commit(f"Removed match {match_id} from event {event.slot}")
        return match

    def set_match_side(
        self, slot: Any, match_id: str, side: str, team_id: Optional[str]
    ) -> Match:
        """Put a team (or nobody) on side A or B of a match.

        The winner is cleared when it no longer matches either side or when
        both sides now hold the same team.

        Raises:
            InvalidMatchSideException: If ``side`` is not 'a' or 'b'
            TeamNotFoundException: If ``team_id`` is not a registered team
        """
        side = validate_match_side(side)
        team_id = team_id or None
        if team_id is not None:
            self.get_team(team_id)
        match = self.get_match(slot, match_id)

        if match.set_side(side, team_id):
            logger.debug(f"Cleared winner of match {match_id}")
        self._commit(f"Set side {side.upper()} of match {match_id} to {team_id}")
        return match

    def set_winner(self, slot: Any, match_id: str, team_id: Optional[str]) -> Match:
        """Record (or clear, with None) the winner of a match.

        Raises:
            InvalidWinnerException: If ``team_id`` is not one of the two sides
        """
        match = self.get_match(slot, match_id)
        team_id = team_id or None
        if team_id is not None:
            if not match.involves(team_id) or match.a_team_id == match.b_team_id:
                raise InvalidWinnerException(
                    f"Winner must be one of the two teams in match {match_id}"
                )
        match.winner_team_id = team_id
        self._commit(f"Set winner of match {match_id} to {team_id}")
        return match

    def generate_random_matchups(self, rng: Optional[random.Random] = None) -> List[ByeNotice]:
        """Replace the matches of every bracket event with random pairings.

        Returns:
            Bye notices for events where one team was left out

        Raises:
            NotEnoughTeamsException: With fewer than two teams (nothing changes)
        """
        pairings, byes = MatchupGenerator(rng).generate(self.state.teams)
        for slot, matches in pairings.items():
            self.state.bracket(slot).matches = matches
        self._commit("Created random matchups")
        return byes

    # ========== Timed event ==========

    def set_time(self, team_id: str, seconds: Any, slot: int = TIMED_EVENT_SLOTS[0]) -> Optional[float]:
        """Record a team's time; None or blank removes it.

        Returns:
            The stored seconds, or None if the time was removed

        Raises:
            InvalidTimeException: If the time is not a finite non-negative number
        """
        team = self.get_team(team_id)
        times = self.state.timed(slot).times

        if seconds is None or (isinstance(seconds, str) and not seconds.strip()):
            times.pop(team_id, None)
            self._commit(f"Cleared time of {team.name!r}")
            return None

        value = validate_seconds_strict(seconds)
        times[team_id] = value
        self._commit(f"Set time of {team.name!r} to {value}")
        return value

    def clear_times(self, slot: int = TIMED_EVENT_SLOTS[0]) -> None:
        self.state.timed(slot).times.clear()
        self._commit(f"Cleared all times of event {slot}")

    # ========== Whole-state operations ==========

    def reset(self) -> None:
        """Start over with no teams and no results."""
        self.state = TournamentState()
        self._commit("Reset tournament")

    def load_roster(self, records: Rows, rng: Optional[random.Random] = None) -> RosterImport:
        """Replace all teams with an imported roster.

        Events are reset, since old results refer to the old team ids.
        Settings are kept.
        """
        result = import_roster(records, rng)
        self.state = TournamentState(
            teams=result.teams, settings=dict(self.state.settings)
        )
        self._commit(f"Imported {len(result.teams)} team(s) from roster")
        return result

    def load_results(self, state: TournamentState) -> int:
        """Replace the live state with decoded results.

        Returns:
            Number of dangling team references that were dropped
        """
        loaded = state.copy()
        loaded.active_view = loaded.active_view  # normalize
        dropped = loaded.prune_dangling_references()
        self.state = loaded
        self._commit(f"Loaded results with {len(loaded.teams)} team(s)")
        return dropped

    def prune_dangling_references(self) -> int:
        removed = self.state.prune_dangling_references()
        if removed:
            self._commit(f"Pruned {removed} dangling reference(s)")
        return removed

    # ========== Settings ==========

    def set_setting(self, key: str, value: Any) -> None:
        key = (key or "").strip()
        if not key:
            raise OperationRefusedException("Setting key cannot be empty.")
        value = "" if value is None else str(value)
        if key == SETTING_ACTIVE_VIEW:
            self.state.active_view = value
        else:
            self.state.settings[key] = value
        self._commit(f"Set setting {key}={self.state.settings[key]!r}")

    def set_active_view(self, view: str) -> None:
        if view not in VALID_VIEWS:
            raise OperationRefusedException(
                f"Unknown view {view!r}; expected one of {', '.join(VALID_VIEWS)}"
            )
        self.set_setting(SETTING_ACTIVE_VIEW, view)
