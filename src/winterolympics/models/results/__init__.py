"""Records of the canonical results format."""

from winterolympics.models.results.records import (
    MatchRecord,
    MetaRecord,
    ResultRecord,
    SettingRecord,
    TeamRecord,
    TimeRecord,
    blank_row,
    normalize_record_type,
    record_from_row,
)

__all__ = [
    "MatchRecord",
    "MetaRecord",
    "ResultRecord",
    "SettingRecord",
    "TeamRecord",
    "TimeRecord",
    "blank_row",
    "normalize_record_type",
    "record_from_row",
]
