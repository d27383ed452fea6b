"""Typed records of the canonical results format.

Every row of a results file carries a ``RecordType`` discriminator. Rows are
turned into one of the record classes below and validated on the way in;
malformed rows are skipped rather than failing the whole file.
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

from dataclasses import dataclass, field
from typing import ClassVar, Dict, Optional, Tuple, Type, Union

from winterolympics.constants import (
    COL_A_TEAM_ID,
    COL_B_TEAM_ID,
    COL_EVENT,
    COL_GROUP_ID,
    COL_KEY,
    COL_MEMBERS,
    COL_RECORD_TYPE,
    COL_SECONDS,
    COL_TEAM_ID,
    COL_TEAM_NAME,
    COL_VALUE,
    COL_WINNER_TEAM_ID,
    MATCH_RECORD_TYPES,
    RECORD_META,
    RECORD_SETTING,
    RECORD_TEAM,
    RECORD_TIME,
    RESULTS_COLUMNS,
    TIMED_EVENT_SLOTS,
)
from winterolympics.type_hints import Row
from winterolympics.utils import (
    cell_text,
    format_seconds,
    new_id,
    parse_maybe_number,
    setup_logger,
)
from winterolympics.utils.validation import clean_members

logger = setup_logger(__name__)


def blank_row() -> Row:
    """A row with every canonical column present and empty."""
    return {column: "" for column in RESULTS_COLUMNS}


def normalize_record_type(value) -> str:
    return cell_text(value).lower()


@dataclass(frozen=True)
class MetaRecord:
    """Informational key/value pair (app signature, version, export time)."""

    key: str
    value: str

    record_type: ClassVar[str] = RECORD_META

    def to_row(self) -> Row:
        row = blank_row()
        row.update({COL_RECORD_TYPE: self.record_type, COL_KEY: self.key, COL_VALUE: self.value})
        return row

    @classmethod
    def from_row(cls, row: Row) -> Optional["MetaRecord"]:
        key = cell_text(row.get(COL_KEY))
        if not key:
            return None
        return cls(key=key, value=cell_text(row.get(COL_VALUE)))


@dataclass(frozen=True)
class TeamRecord:
    """One team with its members."""

    team_id: str
    team_name: str
    members: Tuple[str, ...] = field(default_factory=tuple)

    record_type: ClassVar[str] = RECORD_TEAM

    def to_row(self) -> Row:
        row = blank_row()
        row.update(
            {
                COL_RECORD_TYPE: self.record_type,
                COL_TEAM_ID: self.team_id,
                COL_TEAM_NAME: self.team_name,
            }
        )
        for column, member in zip(COL_MEMBERS, self.members):
            row[column] = member
        return row

    @classmethod
    def from_row(cls, row: Row) -> Optional["TeamRecord"]:
        name = cell_text(row.get(COL_TEAM_NAME))
        if not name:
            return None
        team_id = cell_text(row.get(COL_TEAM_ID)) or new_id("team")
        members = clean_members(row.get(column) for column in COL_MEMBERS)
        return cls(team_id=team_id, team_name=name, members=tuple(members))


@dataclass(frozen=True)
class MatchRecord:
    """One match of a bracket event."""

    slot: int
    match_id: str
    a_team_id: Optional[str] = None
    b_team_id: Optional[str] = None
    winner_team_id: Optional[str] = None

    @property
    def record_type(self) -> str:
        return MATCH_RECORD_TYPES[self.slot]

    def to_row(self) -> Row:
        row = blank_row()
        row.update(
            {
                COL_RECORD_TYPE: self.record_type,
                COL_EVENT: str(self.slot),
                COL_GROUP_ID: self.match_id,
                COL_A_TEAM_ID: self.a_team_id or "",
                COL_B_TEAM_ID: self.b_team_id or "",
                COL_WINNER_TEAM_ID: self.winner_team_id or "",
            }
        )
        return row

    @classmethod
    def from_row(cls, row: Row, slot: int) -> "MatchRecord":
        return cls(
            slot=slot,
            match_id=cell_text(row.get(COL_GROUP_ID)) or new_id(f"match{slot}"),
            a_team_id=cell_text(row.get(COL_A_TEAM_ID)) or None,
            b_team_id=cell_text(row.get(COL_B_TEAM_ID)) or None,
            winner_team_id=cell_text(row.get(COL_WINNER_TEAM_ID)) or None,
        )


@dataclass(frozen=True)
class TimeRecord:
    """A recorded time for one team in the timed event."""

    team_id: str
    seconds: float
    slot: int = TIMED_EVENT_SLOTS[0]

    record_type: ClassVar[str] = RECORD_TIME

    def to_row(self) -> Row:
        row = blank_row()
        row.update(
            {
                COL_RECORD_TYPE: self.record_type,
                COL_EVENT: str(self.slot),
                COL_TEAM_ID: self.team_id,
                COL_SECONDS: format_seconds(self.seconds),
            }
        )
        return row

    @classmethod
    def from_row(cls, row: Row) -> Optional["TimeRecord"]:
        team_id = cell_text(row.get(COL_TEAM_ID))
        seconds = parse_maybe_number(row.get(COL_SECONDS))
        if not team_id or seconds is None or seconds < 0:
            return None
        return cls(team_id=team_id, seconds=seconds)


@dataclass(frozen=True)
class SettingRecord:
    """One settings key/value pair."""

    key: str
    value: str

    record_type: ClassVar[str] = RECORD_SETTING

    def to_row(self) -> Row:
        row = blank_row()
        row.update({COL_RECORD_TYPE: self.record_type, COL_KEY: self.key, COL_VALUE: self.value})
        return row

    @classmethod
    def from_row(cls, row: Row) -> Optional["SettingRecord"]:
        key = cell_text(row.get(COL_KEY))
        if not key:
            return None
        value = row.get(COL_VALUE)
        return cls(key=key, value="" if value is None else str(value))


ResultRecord = Union[MetaRecord, TeamRecord, MatchRecord, TimeRecord, SettingRecord]

_SIMPLE_RECORDS: Dict[str, Type] = {
    RECORD_META: MetaRecord,
    RECORD_TEAM: TeamRecord,
    RECORD_TIME: TimeRecord,
    RECORD_SETTING: SettingRecord,
}
_MATCH_SLOTS = {record_type: slot for slot, record_type in MATCH_RECORD_TYPES.items()}


def record_from_row(row: Row) -> Optional[ResultRecord]:
    """Build the typed record for one row.

    Returns:
        The record, or None for blank/unknown record types and rows that fail
        validation
    """
    record_type = normalize_record_type(row.get(COL_RECORD_TYPE))
    if not record_type:
        return None

    if record_type in _MATCH_SLOTS:
        return MatchRecord.from_row(row, _MATCH_SLOTS[record_type])

    record_cls = _SIMPLE_RECORDS.get(record_type)
    if record_cls is None:
        logger.debug(f"Skipping unknown record type: {record_type!r}")
        return None

    record = record_cls.from_row(row)
    if record is None:
        logger.debug(f"Skipping invalid {record_type} record: {row!r}")
    return record
