import math
from datetime import date, datetime

import pytest

from winterolympics.exceptions import InvalidEventException, InvalidMatchSideException
from winterolympics.formats.workbook import cell_to_text
from winterolympics.models.results import (
    MatchRecord,
    SettingRecord,
    TeamRecord,
    TimeRecord,
    record_from_row,
)
from winterolympics.models.tournament import BracketEvent, Match, Team, TimedEvent, TournamentState
from winterolympics.utils import format_seconds, new_id, normalize_header, parse_maybe_number
from winterolympics.utils.validation import (
    clean_members,
    validate_bracket_slot,
    validate_match_side,
    validate_seconds,
    validate_team_name,
)


# ========== Match ==========


def test_match_decided_only_with_valid_winner():
    assert Match("m", "a", "b", "a").is_decided
    assert not Match("m", "a", "b", None).is_decided
    assert not Match("m", "a", None, "a").is_decided
    assert not Match("m", "a", "a", "a").is_decided
    assert not Match("m", "a", "b", "c").is_decided


def test_set_side_reports_cleared_winner():
    match = Match("m", "a", "b", "a")
    assert match.set_side("b", "c") is False
    assert match.winner_team_id == "a"
    assert match.set_side("a", "d") is True
    assert match.winner_team_id is None


def test_match_from_dict_turns_blank_ids_into_none():
    match = Match.from_dict({"id": "m", "a_team_id": "", "b_team_id": " t2 ", "winner_team_id": None})
    assert match == Match("m", None, "t2", None)


# ========== State ==========


def test_state_always_has_five_events():
    state = TournamentState()
    assert sorted(state.events) == [1, 2, 3, 4, 5]
    assert isinstance(state.events[4], TimedEvent)
    assert all(isinstance(state.events[s], BracketEvent) for s in (1, 2, 3, 5))
    with pytest.raises(InvalidEventException):
        state.bracket(4)
    with pytest.raises(InvalidEventException):
        state.timed(1)


def test_state_dict_round_trip():
    state = TournamentState(teams=[Team("t1", "Red", ["Ann"])])
    state.bracket(2).matches.append(Match("m", "t1", None, None))
    state.timed().times["t1"] = 3.5

    data = state.to_dict()

    assert data["formatVersion"] == 1
    assert set(data["events"]) == {"1", "2", "3", "4", "5"}
    assert TournamentState.from_dict(data) == state


def test_copy_is_independent():
    state = TournamentState(teams=[Team("t1", "Red")])
    clone = state.copy()
    clone.teams[0].name = "Blue"
    assert state.teams[0].name == "Red"


def test_prune_keeps_valid_references():
    state = TournamentState(teams=[Team("a", "A"), Team("b", "B")])
    state.bracket(1).matches.append(Match("m1", "a", None, None))
    state.bracket(2).matches.append(Match("m2", "a", "b", "b"))
    assert state.prune_dangling_references() == 0
    assert len(state.bracket(1).matches) == 1


# ========== Records ==========


def test_team_record_from_row():
    record = TeamRecord.from_row(
        {"TeamId": "", "TeamName": " Red ", "Member1": "Ann", "Member2": "", "Member3": "Bob"}
    )
    assert record.team_name == "Red"
    assert record.team_id.startswith("team_")
    assert record.members == ("Ann", "Bob")
    assert TeamRecord.from_row({"TeamId": "t1", "TeamName": ""}) is None


def test_time_record_rejects_bad_values():
    assert TimeRecord.from_row({"TeamId": "t1", "Seconds": "1,25"}).seconds == 1.25
    assert TimeRecord.from_row({"TeamId": "t1", "Seconds": "-1"}) is None
    assert TimeRecord.from_row({"TeamId": "t1", "Seconds": "Infinity"}) is None
    assert TimeRecord.from_row({"TeamId": "", "Seconds": "1"}) is None


def test_record_from_row_dispatch():
    assert isinstance(record_from_row({"RecordType": "E5_MATCH"}), MatchRecord)
    assert record_from_row({"RecordType": "e5_match"}).slot == 5
    assert isinstance(record_from_row({"RecordType": "setting", "Key": "k", "Value": ""}), SettingRecord)
    assert record_from_row({"RecordType": "e4_match"}) is None
    assert record_from_row({"RecordType": ""}) is None


def test_match_record_row_uses_group_id():
    row = MatchRecord(3, "m1", "a", None, None).to_row()
    assert (row["RecordType"], row["Event"], row["GroupId"]) == ("e3_match", "3", "m1")
    assert row["BTeamId"] == ""


# ========== Utilities ==========


@pytest.mark.parametrize(
    "value, expected",
    [
        ("12,5", 12.5),
        (" 7 ", 7.0),
        (3, 3.0),
        ("1,5,0", None),
        ("", None),
        (None, None),
        (True, None),
        ("nan", None),
        (float("inf"), None),
    ],
)
def test_parse_maybe_number(value, expected):
    assert parse_maybe_number(value) == expected


def test_format_seconds():
    assert format_seconds(10.0) == "10"
    assert format_seconds(12.3) == "12.3"
    assert format_seconds(0.1 + 0.2) == repr(0.1 + 0.2)


def test_new_ids_are_unique_and_prefixed():
    ids = {new_id("team") for _ in range(100)}
    assert len(ids) == 100
    assert all(i.startswith("team_") for i in ids)


def test_normalize_header():
    assert normalize_header("  Team \t Member   1 ") == "team member 1"
    assert normalize_header(None) == ""


def test_cell_to_text():
    assert cell_to_text(None) == ""
    assert cell_to_text(12.0) == "12"
    assert cell_to_text(12.5) == "12.5"
    assert cell_to_text(True) == "TRUE"
    assert cell_to_text(date(2026, 2, 12)) == "2026-02-12"
    assert cell_to_text(datetime(2026, 2, 12, 19, 30)) == "2026-02-12T19:30:00"


def test_validation_helpers():
    assert validate_team_name("  Red ").sanitized_value == "Red"
    assert not validate_team_name(" ")
    assert clean_members([" a ", None, "", "b", "c", "d", "e"]) == ["a", "b", "c", "d"]
    assert validate_seconds("0").sanitized_value == 0.0
    assert not validate_seconds(math.nan)
    assert validate_match_side(" A ") == "a"
    with pytest.raises(InvalidMatchSideException):
        validate_match_side(None)
    assert validate_bracket_slot("5") == 5
    with pytest.raises(InvalidEventException):
        validate_bracket_slot(4)
    with pytest.raises(InvalidEventException):
        validate_bracket_slot("six")


def test_event_display_names():
    state = TournamentState()
    assert state.timed().name == "Biathlon"
    assert [e.name for e in state.bracket_events()] == ["Bobsled", "Ice hockey", "Curling", "Skijump"]
