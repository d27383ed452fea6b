"""Spreadsheet (.xlsx) reading and writing via openpyxl.

Sheets are converted to the same header-keyed string records the CSV parser
produces, so the roster importer and the results codec never see cell types.
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

import io
import zipfile
from datetime import date, datetime
from pathlib import Path
from typing import IO, Any, Dict, List, Sequence, Tuple, Union

try:
    from openpyxl import Workbook, load_workbook
    from openpyxl.utils.exceptions import IllegalCharacterError, InvalidFileException

    OPENPYXL_AVAILABLE = True
except ImportError:
    OPENPYXL_AVAILABLE = False

from winterolympics.constants import CSV_ALTERNATIVE_HINT
from winterolympics.exceptions import (
    EnvironmentUnavailableException,
    FileLoadException,
    FileSaveException,
)
from winterolympics.type_hints import Row, Rows
from winterolympics.utils import setup_logger

logger = setup_logger(__name__)

WorkbookSource = Union[str, Path, bytes, IO[bytes]]
# (sheet name, column headers, rows)
SheetSpec = Tuple[str, Sequence[str], Sequence[Dict[str, Any]]]


def require_openpyxl() -> None:
    """Raise if Excel support is not installed."""
    if not OPENPYXL_AVAILABLE:
        raise EnvironmentUnavailableException(
            f"Excel support is not available (openpyxl is not installed). "
            f"{CSV_ALTERNATIVE_HINT}"
        )


def cell_to_text(value: Any) -> str:
    """Render a worksheet cell value as text.

    Whole floats lose their ``.0`` so ids and counts typed as numbers in
    Excel read back the way they look.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _open(source: WorkbookSource, read_only: bool = True):
    require_openpyxl()
    if isinstance(source, bytes):
        source = io.BytesIO(source)
    try:
        return load_workbook(source, read_only=read_only, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError, ValueError) as e:
        raise FileLoadException(f"Could not read workbook: {e}") from e


def worksheet_records(worksheet) -> Rows:
    """Convert a worksheet to header-keyed records.

    The first row is the header; blank header cells become ``Column n``.
    Blank rows are skipped and missing cells read as ``""``.
    """
    rows = worksheet.iter_rows(values_only=True)
    header_row = next(rows, None)
    if header_row is None:
        return []

    headers = [cell_to_text(h).strip() for h in header_row]
    headers = [h or f"Column {i + 1}" for i, h in enumerate(headers)]

    records: Rows = []
    for values in rows:
        cells = [cell_to_text(v) for v in values]
        if not any(c.strip() for c in cells):
            continue
        record: Row = {}
        for i, header in enumerate(headers):
            record[header] = cells[i] if i < len(cells) else ""
        records.append(record)
    return records


def read_workbook(source: WorkbookSource) -> Dict[str, Rows]:
    """Read every sheet of a workbook.

    Returns:
        Sheet name -> records, in workbook order
    """
    workbook = _open(source)
    try:
        return {ws.title: worksheet_records(ws) for ws in workbook.worksheets}
    finally:
        workbook.close()


def read_first_sheet_records(source: WorkbookSource) -> Rows:
    """Read the records of the first sheet (used for roster files)."""
    workbook = _open(source)
    try:
        if not workbook.worksheets:
            return []
        return worksheet_records(workbook.worksheets[0])
    finally:
        workbook.close()


def _append_text_row(worksheet, values: Sequence[Any]) -> None:
    worksheet.append(list(values))
    # Strings starting with "=" would otherwise be stored as formulas.
    for cell in worksheet[worksheet.max_row]:
        if isinstance(cell.value, str) and cell.data_type != "s":
            cell.data_type = "s"


def build_workbook(sheets: List[SheetSpec]):
    """Build an in-memory workbook with one sheet per SheetSpec.

    Raises:
        FileSaveException: If a value holds characters a worksheet cannot store
    """
    require_openpyxl()
    workbook = Workbook()
    workbook.remove(workbook.active)
    for name, headers, rows in sheets:
        worksheet = workbook.create_sheet(title=name)
        try:
            _append_text_row(worksheet, headers)
            for row in rows:
                _append_text_row(worksheet, [row.get(h, "") for h in headers])
        except IllegalCharacterError as e:
            raise FileSaveException(f"Sheet {name!r} holds a value Excel cannot store: {e}") from e
    return workbook


def write_workbook(path: Union[str, Path], sheets: List[SheetSpec]) -> Path:
    """Write sheets to an .xlsx file and return its path."""
    path = Path(path)
    workbook = build_workbook(sheets)
    try:
        workbook.save(path)
    except OSError as e:
        raise FileSaveException(f"Could not write {path}: {e}") from e
    logger.info(f"Wrote {path} ({len(sheets)} sheets)")
    return path
