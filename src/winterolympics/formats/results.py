"""Saved results: full export and restore of the scoreboard.

Two layouts carry the same information:

- CSV: one flat table, every row tagged with a ``RecordType``
  (``meta``, ``team``, ``e1_match`` ... ``e5_match``, ``e4_time``,
  ``setting``) and all other columns present but only the relevant ones
  filled.
- XLSX: one sheet per record kind (``Meta``, ``Teams``,
  ``Event{n}_Matches``, ``Event4_Times``, ``Settings``).

Decoding always builds a new :class:`TournamentState`; it never touches the
live one, so a rejected file leaves everything as it was.
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

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

from dateutil import parser as date_parser

from winterolympics.constants import (
    APP_SLUG,
    BRACKET_EVENT_SLOTS,
    COL_A_TEAM_ID,
    COL_B_TEAM_ID,
    COL_GROUP_ID,
    COL_KEY,
    COL_MATCH_ID,
    COL_MEMBERS,
    COL_RECORD_TYPE,
    COL_SECONDS,
    COL_TEAM_ID,
    COL_TEAM_NAME,
    COL_VALUE,
    COL_WINNER_TEAM_ID,
    CSV_EXTENSION,
    MATCH_SHEETS,
    META_APP,
    META_EXPORTED_AT,
    META_FORMAT_VERSION,
    RECORD_TEAM,
    RESULTS_APP_SIGNATURE,
    RESULTS_COLUMNS,
    RESULTS_FORMAT_VERSION,
    RESULTS_SIGNATURE_TYPES,
    RETRY_HINT,
    SETTING_ACTIVE_VIEW,
    SHEET_META,
    SHEET_SETTINGS,
    SHEET_TEAMS,
    SHEET_TIMES,
    TIMED_EVENT_SLOTS,
    XLSX_EXTENSION,
)
from winterolympics.exceptions import FormatMismatchException
from winterolympics.formats.csv_parser import parse_csv, read_csv_file, to_csv, write_csv_file
from winterolympics.formats.roster import ensure_unique_team_names
from winterolympics.formats.workbook import (
    SheetSpec,
    WorkbookSource,
    read_workbook,
    write_workbook,
)
from winterolympics.models.results import (
    MatchRecord,
    MetaRecord,
    ResultRecord,
    SettingRecord,
    TeamRecord,
    TimeRecord,
    normalize_record_type,
    record_from_row,
)
from winterolympics.models.tournament import Match, Team, TournamentState
from winterolympics.type_hints import Rows, Table
from winterolympics.utils import cell_text, setup_logger, timestamp_for_filename

logger = setup_logger(__name__)


@dataclass
class ResultsMeta:
    """Informational header of a results file.

    Attributes
    ----------
    app : str
        Application signature; must equal the app name.
    format_version : int or None
        Results format version the file was written with.
    exported_at : datetime or None
        When the file was exported, if recorded and parseable.
    """

    app: str = ""
    format_version: Optional[int] = None
    exported_at: Optional[datetime] = None

    @classmethod
    def from_pairs(cls, pairs: Dict[str, str]) -> "ResultsMeta":
        """Build from lower-cased meta keys and their values."""
        version_text = pairs.get(META_FORMAT_VERSION.lower(), "")
        try:
            version = int(float(version_text)) if version_text else None
        except ValueError:
            version = None

        exported_at = None
        exported_text = pairs.get(META_EXPORTED_AT.lower(), "")
        if exported_text:
            try:
                exported_at = date_parser.isoparse(exported_text)
            except ValueError:
                logger.debug(f"Unparseable export timestamp: {exported_text!r}")

        return cls(app=pairs.get(META_APP, ""), format_version=version, exported_at=exported_at)


# ========== Filenames ==========


def results_filename(extension: str, when: Optional[datetime] = None) -> str:
    """Export filename, e.g. ``afterwork-winter-olympics_results_2026-02-12_1930.csv``."""
    return f"{APP_SLUG}_results_{timestamp_for_filename(when)}.{extension.lstrip('.')}"


def _iso_now(exported_at: Optional[datetime]) -> str:
    when = exported_at or datetime.now(timezone.utc)
    return when.isoformat()


# ========== Encoding ==========


def encode_records(state: TournamentState, exported_at: Optional[datetime] = None) -> List[ResultRecord]:
    """Flatten the state into typed records, in file order."""
    records: List[ResultRecord] = [
        MetaRecord(META_APP, RESULTS_APP_SIGNATURE),
        MetaRecord(META_FORMAT_VERSION, str(RESULTS_FORMAT_VERSION)),
        MetaRecord(META_EXPORTED_AT, _iso_now(exported_at)),
    ]

    for team in state.teams:
        records.append(TeamRecord(team.id, team.name, tuple(team.members)))

    for slot in BRACKET_EVENT_SLOTS:
        for match in state.bracket(slot).matches:
            records.append(
                MatchRecord(
                    slot=slot,
                    match_id=match.id,
                    a_team_id=match.a_team_id,
                    b_team_id=match.b_team_id,
                    winner_team_id=match.winner_team_id,
                )
            )

    for slot in TIMED_EVENT_SLOTS:
        for team_id, seconds in state.timed(slot).times.items():
            records.append(TimeRecord(team_id=team_id, seconds=seconds, slot=slot))

    for key, value in state.settings.items():
        records.append(SettingRecord(key, "" if value is None else str(value)))

    return records


def encode_rows(state: TournamentState, exported_at: Optional[datetime] = None) -> Table:
    """Canonical column headers and one row per record."""
    rows = [record.to_row() for record in encode_records(state, exported_at)]
    return list(RESULTS_COLUMNS), rows


def encode_csv(state: TournamentState, exported_at: Optional[datetime] = None) -> str:
    """Serialize the state as results CSV text."""
    headers, rows = encode_rows(state, exported_at)
    return to_csv(rows, headers)


def encode_workbook_sheets(
    state: TournamentState, exported_at: Optional[datetime] = None
) -> List[SheetSpec]:
    """Sheets of the results workbook, in workbook order."""
    sheets: List[SheetSpec] = [
        (
            SHEET_META,
            (COL_KEY, COL_VALUE),
            [
                {COL_KEY: META_APP, COL_VALUE: RESULTS_APP_SIGNATURE},
                {COL_KEY: META_FORMAT_VERSION, COL_VALUE: RESULTS_FORMAT_VERSION},
                {COL_KEY: META_EXPORTED_AT, COL_VALUE: _iso_now(exported_at)},
            ],
        ),
        (
            SHEET_TEAMS,
            (COL_TEAM_ID, COL_TEAM_NAME, *COL_MEMBERS),
            [
                {
                    COL_TEAM_ID: team.id,
                    COL_TEAM_NAME: team.name,
                    **{col: member for col, member in zip(COL_MEMBERS, team.members)},
                }
                for team in state.teams
            ],
        ),
    ]

    match_headers = (COL_MATCH_ID, COL_A_TEAM_ID, COL_B_TEAM_ID, COL_WINNER_TEAM_ID)
    for slot in BRACKET_EVENT_SLOTS:
        sheets.append(
            (
                MATCH_SHEETS[slot],
                match_headers,
                [
                    {
                        COL_MATCH_ID: m.id,
                        COL_A_TEAM_ID: m.a_team_id or "",
                        COL_B_TEAM_ID: m.b_team_id or "",
                        COL_WINNER_TEAM_ID: m.winner_team_id or "",
                    }
                    for m in state.bracket(slot).matches
                ],
            )
        )

    sheets.append(
        (
            SHEET_TIMES,
            (COL_TEAM_ID, COL_SECONDS),
            [
                {COL_TEAM_ID: team_id, COL_SECONDS: seconds}
                for team_id, seconds in state.timed().times.items()
            ],
        )
    )
    sheets.append(
        (
            SHEET_SETTINGS,
            (COL_KEY, COL_VALUE),
            [{COL_KEY: k, COL_VALUE: "" if v is None else str(v)} for k, v in state.settings.items()],
        )
    )
    return sheets


def write_results_csv(state: TournamentState, path: Union[str, Path]) -> Path:
    """Write the results CSV to ``path``."""
    headers, rows = encode_rows(state)
    return write_csv_file(path, rows, headers)


def encode_workbook(state: TournamentState, path: Union[str, Path]) -> Path:
    """Write the results workbook to ``path`` (requires openpyxl)."""
    return write_workbook(path, encode_workbook_sheets(state))


# ========== Decoding ==========


def record_types(rows: Rows) -> set:
    return {normalize_record_type(row.get(COL_RECORD_TYPE)) for row in rows} - {""}


def check_results_signature(rows: Rows) -> None:
    """Make sure the rows look like a saved results CSV.

    A results file needs at least one ``team`` record and one record of
    event 1, 2, 4 or 5. Event 3 matches alone do not qualify.

    Raises:
        FormatMismatchException: If the rows are not a results export
    """
    present = record_types(rows)
    if RECORD_TEAM not in present or not present.intersection(RESULTS_SIGNATURE_TYPES):
        raise FormatMismatchException(f"Not a saved results CSV. {RETRY_HINT}")


def read_results_meta(rows: Rows) -> ResultsMeta:
    """Collect the ``meta`` records of a results CSV."""
    pairs: Dict[str, str] = {}
    for row in rows:
        record = record_from_row(row)
        if isinstance(record, MetaRecord):
            pairs[record.key.lower()] = record.value
    return ResultsMeta.from_pairs(pairs)


def state_from_records(records: List[ResultRecord]) -> TournamentState:
    """Assemble a new state from typed records.

    Team references are kept as they are, even if no such team exists; the
    caller decides what to do with dangling references.
    """
    state = TournamentState()
    teams_by_id: Dict[str, Team] = {}

    for record in records:
        if isinstance(record, TeamRecord):
            teams_by_id[record.team_id] = Team(
                id=record.team_id, name=record.team_name, members=list(record.members)
            )
        elif isinstance(record, MatchRecord):
            state.bracket(record.slot).matches.append(
                Match(
                    id=record.match_id,
                    a_team_id=record.a_team_id,
                    b_team_id=record.b_team_id,
                    winner_team_id=record.winner_team_id,
                )
            )
        elif isinstance(record, TimeRecord):
            state.timed(record.slot).times[record.team_id] = record.seconds
        elif isinstance(record, SettingRecord):
            if record.key == SETTING_ACTIVE_VIEW:
                state.active_view = record.value
            else:
                state.settings[record.key] = record.value

    state.teams = ensure_unique_team_names(list(teams_by_id.values()))
    return state


def decode_rows(rows: Rows) -> TournamentState:
    """Decode results CSV records into a new state.

    Raises:
        FormatMismatchException: If the rows are not a results export
    """
    check_results_signature(rows)
    records = [r for r in (record_from_row(row) for row in rows) if r is not None]
    state = state_from_records(records)
    logger.info(
        f"Decoded results: {len(state.teams)} team(s), "
        f"{sum(len(e.matches) for e in state.bracket_events())} match(es), "
        f"{len(state.timed().times)} time(s)"
    )
    return state


def decode_csv(text: str) -> TournamentState:
    """Decode results CSV text into a new state."""
    return decode_rows(parse_csv(text))


def _sheet_team_name(row: Dict[str, str]) -> str:
    for column in (COL_TEAM_NAME, "Team", "Team Name"):
        name = cell_text(row.get(column))
        if name:
            return name
    return ""


def decode_workbook_sheets(sheets: Dict[str, Rows]) -> TournamentState:
    """Decode the sheets of a results workbook into a new state.

    Args:
        sheets: Sheet name -> records, as from :func:`read_workbook`

    Raises:
        FormatMismatchException: If the Meta signature or Teams sheet is missing
    """
    meta_pairs = {
        cell_text(row.get(COL_KEY)).lower(): cell_text(row.get(COL_VALUE))
        for row in sheets.get(SHEET_META, [])
    }
    if meta_pairs.get(META_APP) != RESULTS_APP_SIGNATURE or SHEET_TEAMS not in sheets:
        raise FormatMismatchException(f"Not a saved results workbook. {RETRY_HINT}")

    # Rebuild the flat records so both layouts share one validation path
    records: List[ResultRecord] = []
    for row in sheets[SHEET_TEAMS]:
        flat = dict(row)
        flat[COL_TEAM_NAME] = _sheet_team_name(row)
        record = TeamRecord.from_row(flat)
        if record is not None:
            records.append(record)

    for slot in BRACKET_EVENT_SLOTS:
        for row in sheets.get(MATCH_SHEETS[slot], []):
            flat = dict(row)
            flat[COL_GROUP_ID] = row.get(COL_MATCH_ID, "")
            records.append(MatchRecord.from_row(flat, slot))

    for row in sheets.get(SHEET_TIMES, []):
        record = TimeRecord.from_row(row)
        if record is not None:
            records.append(record)

    for row in sheets.get(SHEET_SETTINGS, []):
        record = SettingRecord.from_row(row)
        if record is not None:
            records.append(record)

    state = state_from_records(records)
    logger.info(f"Decoded results workbook: {len(state.teams)} team(s)")
    return state


def decode_workbook(source: WorkbookSource) -> TournamentState:
    """Decode a results workbook file or bytes (requires openpyxl)."""
    return decode_workbook_sheets(read_workbook(source))


def load_results_file(path: Union[str, Path]) -> TournamentState:
    """Decode a results file, choosing the layout by extension."""
    path = Path(path)
    if path.suffix.lower() == f".{CSV_EXTENSION}":
        return decode_rows(read_csv_file(path))
    if path.suffix.lower() == f".{XLSX_EXTENSION}":
        return decode_workbook(path)
    raise FormatMismatchException(f"Unsupported results file type: {path.name}. {RETRY_HINT}")


def decode_results(source: Union[Rows, str, Path]) -> TournamentState:
    """Decode results from parsed CSV records or from a file path."""
    if isinstance(source, list):
        return decode_rows(source)
    return load_results_file(source)


def encode_results(state: TournamentState, exported_at: Optional[datetime] = None) -> str:
    """Results CSV text for ``state`` (the default save layout)."""
    return encode_csv(state, exported_at)
