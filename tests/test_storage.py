import json

import pytest

from winterolympics.constants import STORAGE_KEY
from winterolympics.exceptions import (
    EnvironmentUnavailableException,
    FileSaveException,
    SnapshotVersionException,
)
from winterolympics.models.tournament import Match, Team, TournamentState
from winterolympics.storage import load_state, save_state
from winterolympics.storage import store as store_module
from winterolympics.storage.migrations import migrate, snapshot_version
from winterolympics.storage.store import JsonFileStore, MemoryStore, QSettingsStore

LEGACY_SNAPSHOT = {
    "teams": [
        {"id": "t1", "name": "Red", "members": ["Ann", " ", "Bob"]},
        {"id": "t2", "name": "Blue"},
    ],
    "events": {
        "1": {"matches": [{"id": "m1", "aTeamId": "t1", "bTeamId": "t2", "winnerTeamId": "t2"}]},
        "2": {"matches": [{"id": "m2", "aTeamId": "t1", "bTeamId": "", "winnerTeamId": ""}]},
        "4": {"times": {"t1": 12.5, "t2": "9,75"}},
    },
    "settings": {"activeView": "points"},
}


def test_missing_snapshot_gives_default_state():
    assert load_state(MemoryStore()) == TournamentState()


def test_corrupt_snapshot_gives_default_state():
    store = MemoryStore({STORAGE_KEY: "{not json"})
    assert load_state(store) == TournamentState()

    store = MemoryStore({STORAGE_KEY: "[1, 2, 3]"})
    assert load_state(store) == TournamentState()


def test_save_and_load_round_trip():
    state = TournamentState(teams=[Team("t1", "Red", ["Ann"]), Team("t2", "Blue")])
    state.bracket(3).matches.append(Match("m1", "t1", "t2", "t1"))
    state.timed().times["t2"] = 42.0
    state.settings["scoringMode"] = "custom"
    store = MemoryStore()

    save_state(store, state)

    assert json.loads(store.get(STORAGE_KEY))["formatVersion"] == 1
    assert load_state(store) == state


def test_legacy_snapshot_is_migrated():
    store = MemoryStore({STORAGE_KEY: json.dumps(LEGACY_SNAPSHOT)})

    state = load_state(store)

    assert [t.name for t in state.teams] == ["Red", "Blue"]
    assert state.teams[0].members == ["Ann", "Bob"]
    assert state.bracket(1).matches == [Match("m1", "t1", "t2", "t2")]
    assert state.bracket(2).matches == [Match("m2", "t1", None, None)]
    assert state.bracket(3).matches == []
    assert state.bracket(5).matches == []
    assert state.timed().times == {"t1": 12.5, "t2": 9.75}
    assert state.settings == {"scoringMode": "default", "activeView": "points"}


def test_legacy_snapshot_with_missing_event_shapes():
    raw = {"teams": [], "events": {"1": {}, "4": {"foo": 1}, "5": None}}
    migrated = migrate(raw)

    assert migrated["formatVersion"] == 1
    assert migrated["events"]["1"] == {"matches": []}
    assert migrated["events"]["3"] == {"matches": []}
    assert migrated["events"]["4"] == {"times": {}}
    assert migrated["events"]["5"] == {"matches": []}


def test_snapshot_version():
    assert snapshot_version({}) == 0
    assert snapshot_version({"formatVersion": 1}) == 1
    assert snapshot_version({"formatVersion": "bad"}) == 0


def test_newer_snapshot_is_refused():
    with pytest.raises(SnapshotVersionException):
        migrate({"formatVersion": 99})

    store = MemoryStore({STORAGE_KEY: json.dumps({"formatVersion": 99, "teams": [{"id": "x", "name": "X"}]})})
    assert load_state(store) == TournamentState()


def test_loading_prunes_dangling_references():
    state = TournamentState(teams=[Team("t1", "Red")])
    state.bracket(1).matches.append(Match("m1", "t1", "gone", None))
    state.timed().times["gone"] = 3.0
    store = MemoryStore()
    save_state(store, state)

    loaded = load_state(store)

    assert loaded.bracket(1).matches == []
    assert loaded.timed().times == {}


def test_json_file_store(tmp_path):
    store = JsonFileStore(tmp_path / "data")
    assert store.get("key") is None

    store.set("key", '{"a": 1}')

    assert store.get("key") == '{"a": 1}'
    assert store.path_for("key").name == "key.json"
    assert not list((tmp_path / "data").glob("*.tmp"))

    store.delete("key")
    assert store.get("key") is None


def test_json_file_store_sanitizes_keys(tmp_path):
    store = JsonFileStore(tmp_path)
    assert store.path_for("../evil key").parent == tmp_path


def test_tournament_state_survives_json_file_store(tmp_path):
    state = TournamentState(teams=[Team("t1", "Red")])
    save_state(JsonFileStore(tmp_path), state)
    assert load_state(JsonFileStore(tmp_path)) == state


def test_qsettings_store_without_qt(monkeypatch, tmp_path):
    monkeypatch.setattr(store_module, "QT_AVAILABLE", False)
    with pytest.raises(EnvironmentUnavailableException):
        QSettingsStore(tmp_path / "settings.ini")


def test_qsettings_store(tmp_path):
    pytest.importorskip("PyQt6.QtCore")
    store = QSettingsStore(tmp_path / "settings.ini")

    store.set(STORAGE_KEY, '{"formatVersion": 1}')

    assert QSettingsStore(tmp_path / "settings.ini").get(STORAGE_KEY) == '{"formatVersion": 1}'
    assert store.get("missing") is None


def test_unknown_active_view_in_snapshot_reads_back_as_teams():
    raw = TournamentState().to_dict()
    raw["settings"]["activeView"] = "bogus"
    store = MemoryStore({STORAGE_KEY: json.dumps(raw)})

    assert load_state(store).settings["activeView"] == "teams"


def test_failed_replace_leaves_no_temporary_file(tmp_path, monkeypatch):
    def failing_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(store_module.os, "replace", failing_replace)
    store = JsonFileStore(tmp_path)

    with pytest.raises(FileSaveException):
        store.set("key", "{}")

    assert list(tmp_path.iterdir()) == []
