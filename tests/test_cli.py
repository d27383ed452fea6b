import pytest

from winterolympics import cli
from winterolympics.controllers.tournament import Tournament
from winterolympics.exceptions import EnvironmentUnavailableException
from winterolympics.storage.store import JsonFileStore


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    monkeypatch.setenv("WINTEROLYMPICS_HOME", str(tmp_path / "home"))
    monkeypatch.setenv("WINTEROLYMPICS_STORAGE", "json")
    monkeypatch.setenv("WINTEROLYMPICS_LOG_LEVEL", "WARNING")
    return tmp_path / "home"


def test_commands_share_the_saved_state(isolated_home, capsys):
    assert cli.main(["add-team", "Red", "Ann", "Bob"]) == 0
    assert cli.main(["add-team", "Blue"]) == 0
    assert cli.main(["time", "red", "12,5"]) == 0
    assert cli.main(["points"]) == 0

    out = capsys.readouterr().out
    assert "Time of Red: 12.5 s" in out
    assert "Red" in out.splitlines()[-2]

    reopened = Tournament.open(JsonFileStore(isolated_home))
    assert [t.name for t in reopened.state.teams] == ["Red", "Blue"]


def test_refused_operation_exits_with_one(capsys):
    assert cli.main(["remove-team", "Nobody"]) == 1
    assert "Team not found" in capsys.readouterr().err


def test_matchups_and_winner(capsys):
    tournament = Tournament()
    for name in ("A", "B", "C"):
        tournament.add_team(name)

    assert cli.main(["matchups", "--seed", "3"], tournament=tournament) == 0
    out = capsys.readouterr().out
    assert "gets a bye" in out

    match = tournament.state.bracket(1).matches[0]
    winner = tournament.get_team(match.a_team_id).name
    assert cli.main(["winner", "1", match.id, winner], tournament=tournament) == 0
    assert match.winner_team_id == match.a_team_id

    assert cli.main(["winner", "4", match.id, winner], tournament=tournament) == 1


def test_roster_import_save_and_load(tmp_path, capsys):
    roster = tmp_path / "roster.csv"
    roster.write_text("Team,Member 1\nRed,Ann\nBlue,Bob\n", encoding="utf-8")
    saved = tmp_path / "saved.csv"

    assert cli.main(["import-roster", str(roster)]) == 0
    assert cli.main(["matchups", "--seed", "1"]) == 0
    assert cli.main(["save", "--output", str(saved)]) == 0
    assert cli.main(["reset"]) == 0
    assert cli.main(["load", str(saved)]) == 0

    out = capsys.readouterr().out
    assert 'Imported 2 team(s) from "roster.csv".' in out
    assert 'Loaded saved results from "saved.csv".' in out
    assert "Exported at" in out


def test_loading_a_roster_as_results_fails(tmp_path, capsys):
    roster = tmp_path / "roster.csv"
    roster.write_text("Team\nRed\n", encoding="utf-8")

    assert cli.main(["load", str(roster)]) == 1
    assert "Save (.csv)" in capsys.readouterr().err


def test_invalid_configuration_exits_with_one(monkeypatch, capsys):
    monkeypatch.setenv("WINTEROLYMPICS_STORAGE", "sqlite")
    assert cli.main(["show"]) == 1
    assert "sqlite" in capsys.readouterr().err


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 0
    assert "usage" in capsys.readouterr().out


def test_shell_line_runs_a_command(capsys):
    tournament = Tournament()
    parser = cli.create_parser()

    assert cli.run_line(tournament, parser, 'add-team "Ice Queens" Ann') == 0
    assert cli.run_line(tournament, parser, "bogus") == 1
    assert cli.run_line(tournament, parser, "") == 0

    assert [t.name for t in tournament.state.teams] == ["Ice Queens"]
    assert tournament.state.teams[0].members == ["Ann"]


def test_shell_without_prompt_toolkit(monkeypatch):
    monkeypatch.setattr(cli, "PROMPT_TOOLKIT_AVAILABLE", False)
    with pytest.raises(EnvironmentUnavailableException):
        cli.cmd_shell(Tournament(), None)


def test_completer_lists_commands():
    pytest.importorskip("prompt_toolkit")
    completer = cli.create_completer()
    assert "matchups" in completer.words
    assert "exit" in completer.words


def test_load_reads_a_results_csv_once(tmp_path, monkeypatch, capsys):
    tournament = Tournament()
    red = tournament.add_team("Red")
    tournament.add_team("Blue")
    tournament.set_time(red.id, 10)
    saved = tmp_path / "saved.csv"
    assert cli.main(["save", "--output", str(saved)], tournament=tournament) == 0

    calls = []
    read_csv_file = cli.read_csv_file

    def counting_read(path):
        calls.append(path)
        return read_csv_file(path)

    monkeypatch.setattr(cli, "read_csv_file", counting_read)
    fresh = Tournament()

    assert cli.main(["load", str(saved)], tournament=fresh) == 0
    assert len(calls) == 1
    assert [t.name for t in fresh.state.teams] == ["Red", "Blue"]
    assert list(fresh.state.timed().times.values()) == [10.0]
    assert "Exported at" in capsys.readouterr().out
