"""File formats: delimited text, workbooks, rosters and saved results."""

from winterolympics.formats.csv_parser import parse_csv, read_csv_file, to_csv
from winterolympics.formats.results import (
    decode_csv,
    decode_results,
    decode_rows,
    decode_workbook,
    encode_csv,
    encode_records,
    encode_results,
    encode_rows,
    encode_workbook,
    results_filename,
)
from winterolympics.formats.roster import (
    RosterImport,
    ensure_unique_team_names,
    import_roster,
)

__all__ = [
    "RosterImport",
    "decode_csv",
    "decode_results",
    "decode_rows",
    "decode_workbook",
    "encode_csv",
    "encode_records",
    "encode_results",
    "encode_rows",
    "encode_workbook",
    "ensure_unique_team_names",
    "import_roster",
    "parse_csv",
    "read_csv_file",
    "results_filename",
    "to_csv",
]
