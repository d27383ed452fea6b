import json
import random

import pytest

from winterolympics.constants import BRACKET_EVENT_SLOTS, STORAGE_KEY
from winterolympics.controllers.tournament import Tournament
from winterolympics.exceptions import (
    FileSaveException,
    InvalidEventException,
    InvalidMatchSideException,
    InvalidTeamNameException,
    InvalidTimeException,
    InvalidWinnerException,
    MatchNotFoundException,
    NotEnoughTeamsException,
    OperationRefusedException,
    TeamNotFoundException,
)
from winterolympics.formats.csv_parser import parse_csv
from winterolympics.models.tournament import Match, Team, TournamentState
from winterolympics.storage.store import MemoryStore


def _ids(tournament):
    return {t.name: t.id for t in tournament.state.teams}


# ========== Teams ==========


def test_add_team_trims_and_limits_members(tournament):
    team = tournament.add_team("  Red  ", [" Ann ", "", "Bob", "Cat", "Dan", "Eve"])
    assert team.name == "Red"
    assert team.members == ["Ann", "Bob", "Cat", "Dan"]


def test_add_team_makes_names_unique(tournament):
    tournament.add_team("Red")
    second = tournament.add_team("red")
    assert second.name == "Red (2)"


def test_blank_team_name_is_refused(tournament):
    with pytest.raises(InvalidTeamNameException):
        tournament.add_team("   ")
    assert tournament.state.teams == []
    assert isinstance(InvalidTeamNameException("x"), OperationRefusedException)


def test_every_mutation_is_autosaved(tournament, store):
    tournament.add_team("Red", ["Ann"])
    saved = json.loads(store.get(STORAGE_KEY))
    assert saved["teams"][0]["name"] == "Red"
    assert saved["teams"][0]["members"] == ["Ann"]


def test_remove_team_removes_its_matches_and_time(five_teams):
    ids = _ids(five_teams)
    five_teams.generate_random_matchups(random.Random(5))
    five_teams.set_time(ids["Alpha"], 12.0)
    five_teams.set_time(ids["Bravo"], 13.0)

    five_teams.remove_team(ids["Alpha"])

    state = five_teams.state
    assert ids["Alpha"] not in {t.id for t in state.teams}
    for event in state.bracket_events():
        assert all(not m.involves(ids["Alpha"]) for m in event.matches)
    assert ids["Alpha"] not in state.timed().times
    assert ids["Bravo"] in state.timed().times


def test_remove_unknown_team_is_refused(tournament):
    with pytest.raises(TeamNotFoundException):
        tournament.remove_team("nope")


def test_rename_team_checks_other_names(five_teams):
    ids = _ids(five_teams)
    assert five_teams.rename_team(ids["Alpha"], "alpha").name == "alpha"
    assert five_teams.rename_team(ids["Alpha"], "Bravo").name == "Bravo (2)"
    with pytest.raises(InvalidTeamNameException):
        five_teams.rename_team(ids["Alpha"], "")


def test_set_members(five_teams):
    team_id = _ids(five_teams)["Echo"]
    assert five_teams.set_members(team_id, ["x", " ", "y"]).members == ["x", "y"]


def test_find_team_by_name_or_id(five_teams):
    team = five_teams.find_team("charlie")
    assert team.name == "Charlie"
    assert five_teams.find_team(team.id) is team


# ========== Matches ==========


def test_add_match_needs_two_teams(tournament):
    tournament.add_team("Solo")
    with pytest.raises(NotEnoughTeamsException):
        tournament.add_match(1)
    tournament.add_team("Duo")
    match = tournament.add_match(1)
    assert tournament.state.bracket(1).matches == [match]


def test_add_match_to_timed_event_is_refused(five_teams):
    with pytest.raises(InvalidEventException):
        five_teams.add_match(4)


def test_set_winner_must_be_a_side(five_teams):
    ids = _ids(five_teams)
    match = five_teams.add_match(2)
    five_teams.set_match_side(2, match.id, "a", ids["Alpha"])
    five_teams.set_match_side(2, match.id, "B", ids["Bravo"])

    with pytest.raises(InvalidWinnerException):
        five_teams.set_winner(2, match.id, ids["Charlie"])
    assert match.winner_team_id is None

    five_teams.set_winner(2, match.id, ids["Bravo"])
    assert match.winner_team_id == ids["Bravo"]
    five_teams.set_winner(2, match.id, None)
    assert match.winner_team_id is None


def test_changing_a_side_clears_a_stale_winner(five_teams):
    ids = _ids(five_teams)
    match = five_teams.add_match(1)
    five_teams.set_match_side(1, match.id, "a", ids["Alpha"])
    five_teams.set_match_side(1, match.id, "b", ids["Bravo"])
    five_teams.set_winner(1, match.id, ids["Alpha"])

    five_teams.set_match_side(1, match.id, "a", ids["Charlie"])

    assert match.winner_team_id is None


def test_same_team_on_both_sides_clears_winner(five_teams):
    ids = _ids(five_teams)
    match = five_teams.add_match(1)
    five_teams.set_match_side(1, match.id, "a", ids["Alpha"])
    five_teams.set_match_side(1, match.id, "b", ids["Bravo"])
    five_teams.set_winner(1, match.id, ids["Bravo"])

    five_teams.set_match_side(1, match.id, "a", ids["Bravo"])

    assert match.winner_team_id is None
    with pytest.raises(InvalidWinnerException):
        five_teams.set_winner(1, match.id, ids["Bravo"])


def test_set_match_side_validation(five_teams):
    match = five_teams.add_match(3)
    with pytest.raises(InvalidMatchSideException):
        five_teams.set_match_side(3, match.id, "c", None)
    with pytest.raises(TeamNotFoundException):
        five_teams.set_match_side(3, match.id, "a", "ghost")
    with pytest.raises(MatchNotFoundException):
        five_teams.set_match_side(3, "missing", "a", None)


def test_remove_match(five_teams):
    match = five_teams.add_match(5)
    five_teams.remove_match(5, match.id)
    assert five_teams.state.bracket(5).matches == []


# ========== Matchups ==========


def test_random_matchups_with_five_teams(five_teams):
    byes = five_teams.generate_random_matchups(random.Random(11))
    team_ids = {t.id for t in five_teams.state.teams}

    assert [b.slot for b in byes] == list(BRACKET_EVENT_SLOTS)
    for bye in byes:
        assert bye.team_id in team_ids
        name = five_teams.get_team(bye.team_id).name
        assert bye.message == f"Event {bye.slot}: {name} gets a bye"

    for slot in BRACKET_EVENT_SLOTS:
        matches = five_teams.state.bracket(slot).matches
        assert len(matches) == 2
        seen = [tid for m in matches for tid in (m.a_team_id, m.b_team_id)]
        assert len(set(seen)) == 4
        assert all(m.winner_team_id is None for m in matches)
        bye = next(b for b in byes if b.slot == slot)
        assert bye.team_id not in seen


def test_random_matchups_replace_existing_matches(five_teams):
    five_teams.add_match(1)
    five_teams.add_match(1)
    five_teams.add_match(1)
    five_teams.generate_random_matchups()
    assert len(five_teams.state.bracket(1).matches) == 2


def test_random_matchups_even_team_count_has_no_byes(tournament):
    for name in "ABCD":
        tournament.add_team(name)
    assert tournament.generate_random_matchups(random.Random(0)) == []


def test_random_matchups_refused_with_one_team(tournament):
    tournament.add_team("Solo")
    before = tournament.state.copy()
    with pytest.raises(NotEnoughTeamsException):
        tournament.generate_random_matchups()
    assert tournament.state == before


# ========== Times ==========


def test_set_time_parses_comma_decimals(five_teams):
    team_id = _ids(five_teams)["Alpha"]
    assert five_teams.set_time(team_id, "12,5") == 12.5
    assert five_teams.state.timed().times[team_id] == 12.5


def test_set_time_none_or_blank_removes(five_teams):
    team_id = _ids(five_teams)["Alpha"]
    five_teams.set_time(team_id, 10)
    assert five_teams.set_time(team_id, "  ") is None
    assert team_id not in five_teams.state.timed().times


@pytest.mark.parametrize("bad", ["abc", -1, float("inf"), float("nan"), "-0,5"])
def test_invalid_times_are_refused(five_teams, bad):
    team_id = _ids(five_teams)["Alpha"]
    five_teams.set_time(team_id, 9.0)
    with pytest.raises(InvalidTimeException):
        five_teams.set_time(team_id, bad)
    assert five_teams.state.timed().times[team_id] == 9.0


def test_clear_times(five_teams):
    for team in five_teams.state.teams:
        five_teams.set_time(team.id, 10)
    five_teams.clear_times()
    assert five_teams.state.timed().times == {}


# ========== Whole state ==========


def test_reset(five_teams):
    five_teams.generate_random_matchups()
    five_teams.reset()
    assert five_teams.state == TournamentState()


def test_load_roster_replaces_teams_and_resets_events(five_teams):
    five_teams.generate_random_matchups()
    five_teams.set_active_view("points")

    result = five_teams.load_roster(parse_csv("Team,Member 1\nRed,Ann\nBlue,Bob\n"))

    assert [t.name for t in five_teams.state.teams] == ["Red", "Blue"]
    assert result.teams == five_teams.state.teams
    assert all(not e.matches for e in five_teams.state.bracket_events())
    assert five_teams.state.settings["activeView"] == "points"


def test_load_results_prunes_dangling_references(tournament):
    state = TournamentState(teams=[Team("a", "A"), Team("b", "B")])
    state.bracket(1).matches.extend(
        [Match("m1", "a", "b", "a"), Match("m2", "a", "ghost", None), Match("m3", "a", "b", "ghost")]
    )
    state.timed().times.update({"a": 1.0, "ghost": 2.0})

    dropped = tournament.load_results(state)

    assert dropped == 3
    matches = tournament.state.bracket(1).matches
    assert [m.id for m in matches] == ["m1", "m3"]
    assert matches[1].winner_team_id is None
    assert tournament.state.timed().times == {"a": 1.0}
    # the decoded state itself is not modified
    assert len(state.bracket(1).matches) == 3


def test_load_results_replaces_settings(tournament):
    tournament.set_active_view("events")
    state = TournamentState(teams=[Team("a", "A")])
    state.settings["activeView"] = "points"
    state.settings["scoringMode"] = "custom"

    tournament.load_results(state)

    assert tournament.state.settings["activeView"] == "points"
    assert tournament.state.settings["scoringMode"] == "custom"


def test_load_results_normalizes_unknown_view(tournament):
    state = TournamentState()
    state.settings["activeView"] = "bogus"

    tournament.load_results(state)

    assert tournament.state.active_view == "teams"
    assert tournament.state.settings["activeView"] == "teams"


def test_settings(tournament):
    tournament.set_setting("scoringMode", "fast")
    assert tournament.state.settings["scoringMode"] == "fast"
    with pytest.raises(OperationRefusedException):
        tournament.set_active_view("nowhere")
    with pytest.raises(OperationRefusedException):
        tournament.set_setting(" ", "x")


def test_unknown_active_view_reads_back_as_teams(tournament, store):
    tournament.set_active_view("points")
    tournament.set_setting("activeView", "bogus")

    assert tournament.state.settings["activeView"] == "teams"
    reopened = Tournament.open(store)
    assert reopened.state.active_view == "teams"


def test_open_restores_saved_state(store):
    first = Tournament(store=store)
    first.add_team("Red")
    first.add_team("Blue")

    reopened = Tournament.open(store)

    assert [t.name for t in reopened.state.teams] == ["Red", "Blue"]


class _FailingStore(MemoryStore):
    def set(self, key, value):
        raise FileSaveException("disk full")


def test_autosave_failure_is_raised_after_mutation():
    tournament = Tournament(store=_FailingStore())
    with pytest.raises(FileSaveException):
        tournament.add_team("Red")
    assert [t.name for t in tournament.state.teams] == ["Red"]
