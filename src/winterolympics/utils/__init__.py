"""Shared helpers: logging setup, identifiers, and cell normalization."""

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

import logging
import math
import re
import secrets
import time
from datetime import datetime
from typing import Any, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_root_configured = False


def setup_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Get a module logger, attaching the package handler on first use.

    Args:
        name: Logger name, normally ``__name__``
        level: Optional level override for this logger

    Returns:
        Configured logger
    """
    global _root_configured
    if not _root_configured:
        package_logger = logging.getLogger("winterolympics")
        if not package_logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            package_logger.addHandler(handler)
            package_logger.setLevel(logging.WARNING)
        _root_configured = True

    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


def set_log_level(level: str) -> None:
    """Set the level for all package loggers (e.g. "DEBUG", "INFO")."""
    logging.getLogger("winterolympics").setLevel(level.upper())


def new_id(prefix: str = "id") -> str:
    """Generate an opaque identifier such as ``team_9f3a1c..._18c2d``."""
    return f"{prefix}_{secrets.token_hex(6)}_{int(time.time() * 1000):x}"


def normalize_header(header: Any) -> str:
    """Lowercase a header and collapse runs of whitespace to one space."""
    return re.sub(r"\s+", " ", str(header if header is not None else "").strip().lower())


def cell_text(value: Any) -> str:
    """Return a cell value as stripped text, ``""`` for None."""
    if value is None:
        return ""
    return str(value).strip()


def parse_maybe_number(value: Any) -> Optional[float]:
    """Parse a number, accepting a comma decimal separator.

    Returns:
        The float value, or None for blanks and non-finite/unparseable input
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", ".", 1)
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def format_seconds(seconds: float) -> str:
    """Render seconds without a trailing ``.0`` for whole numbers."""
    if float(seconds).is_integer():
        return str(int(seconds))
    return repr(float(seconds))


def timestamp_for_filename(when: Optional[datetime] = None) -> str:
    """Timestamp used in export filenames: ``YYYY-MM-DD_HHMM``."""
    when = when or datetime.now()
    return when.strftime("%Y-%m-%d_%H%M")
