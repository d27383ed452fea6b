"""Delimited-text reading and writing.

The reader is a small quote-aware parser rather than a full RFC 4180
implementation:

- fields are separated by commas and may be quoted with ``"``; a doubled
  quote inside a quoted field is a literal quote
- newlines inside quotes are kept as part of the field
- ``\\n`` ends a row; a bare ``\\r`` outside quotes is dropped, so both
  ``\\r\\n`` and ``\\n`` line endings work
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

from pathlib import Path
from typing import Iterable, List, Sequence, Union

from winterolympics.exceptions import FileLoadException, FileSaveException
from winterolympics.type_hints import Row, Rows
from winterolympics.utils import setup_logger

logger = setup_logger(__name__)


def split_rows(text: str) -> List[List[str]]:
    """Split text into rows of raw cell strings."""
    rows: List[List[str]] = []
    row: List[str] = []
    cell: List[str] = []
    in_quotes = False
    i = 0
    length = len(text)

    while i < length:
        ch = text[i]

        if in_quotes:
            if ch == '"':
                if i + 1 < length and text[i + 1] == '"':
                    cell.append('"')
                    i += 1
                else:
                    in_quotes = False
            else:
                cell.append(ch)
            i += 1
            continue

        if ch == '"':
            in_quotes = True
        elif ch == ",":
            row.append("".join(cell))
            cell = []
        elif ch == "\n":
            row.append("".join(cell))
            rows.append(row)
            row, cell = [], []
        elif ch != "\r":
            cell.append(ch)
        i += 1

    # Last line without a trailing newline
    if cell or row:
        row.append("".join(cell))
        rows.append(row)

    return rows


def rows_to_records(rows: Sequence[Sequence[str]]) -> Rows:
    """Turn raw rows into header-keyed records.

    The first row is the header. Blank header cells become ``Column n``.
    Rows whose cells are all blank are skipped and short rows are padded with
    empty strings. A repeated header name keeps the value of its last column.
    """
    if not rows:
        return []

    headers = [str(h or "").strip() for h in rows[0]]
    headers = [h or f"Column {i + 1}" for i, h in enumerate(headers)]
    if len(set(headers)) != len(headers):
        logger.debug(f"Duplicate column headers, later columns win: {headers}")

    records: Rows = []
    for raw in rows[1:]:
        if not any(str(cell or "").strip() for cell in raw):
            continue
        record: Row = {}
        for i, header in enumerate(headers):
            record[header] = raw[i] if i < len(raw) and raw[i] is not None else ""
        records.append(record)
    return records


def parse_csv(text: str) -> Rows:
    """Parse delimited text into records keyed by the header row.

    Example:
        >>> parse_csv('Team,Member 1\\nRed,"Ann ""A"" Lee"\\n')
        [{'Team': 'Red', 'Member 1': 'Ann "A" Lee'}]
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    return rows_to_records(split_rows(text))


def read_csv_file(path: Union[str, Path]) -> Rows:
    """Read and parse a CSV file (UTF-8, optional BOM)."""
    try:
        text = Path(path).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise FileLoadException(f"Could not read file {path}: {e}") from e
    return parse_csv(text)


def csv_escape(value) -> str:
    """Quote a cell if it contains a quote, comma or line break."""
    text = "" if value is None else str(value)
    if any(ch in text for ch in '",\n\r'):
        return '"' + text.replace('"', '""') + '"'
    return text


def to_csv(rows: Iterable[Row], headers: Sequence[str]) -> str:
    """Write records as CSV text with the given column order."""
    lines = [",".join(csv_escape(h) for h in headers)]
    for row in rows:
        lines.append(",".join(csv_escape(row.get(h, "")) for h in headers))
    return "\n".join(lines)


def write_csv_file(path: Union[str, Path], rows: Iterable[Row], headers: Sequence[str]) -> Path:
    """Write records to a CSV file and return its path."""
    path = Path(path)
    try:
        path.write_text(to_csv(rows, headers), encoding="utf-8", newline="")
    except OSError as e:
        raise FileSaveException(f"Could not write {path}: {e}") from e
    logger.info(f"Wrote {path}")
    return path
