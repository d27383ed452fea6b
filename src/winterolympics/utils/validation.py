"""Validation utilities for the Winter Olympics Scoreboard.

This module provides reusable validation functions with consistent error handling.
"""

import math
from typing import Any, Iterable, List, Optional

from winterolympics.constants import (
    ALL_EVENT_SLOTS,
    BRACKET_EVENT_SLOTS,
    MAX_TEAM_MEMBERS,
)
from winterolympics.exceptions import (
    InvalidEventException,
    InvalidMatchSideException,
    InvalidTeamNameException,
    InvalidTimeException,
)
from winterolympics.type_hints import SIDE_A, SIDE_B
from winterolympics.utils import parse_maybe_number


class ValidationResult:
    """Result of a validation operation.

    Attributes:
        is_valid: Whether the validation passed
        error_message: Human-readable error message if invalid
        sanitized_value: Cleaned/normalized value if valid
    """

    def __init__(
        self,
        is_valid: bool,
        error_message: Optional[str] = None,
        sanitized_value: Any = None,
    ):
        self.is_valid = is_valid
        self.error_message = error_message
        self.sanitized_value = sanitized_value

    def __bool__(self) -> bool:
        """Allow using result in boolean context: if result: ..."""
        return self.is_valid

    def __repr__(self) -> str:
        if self.is_valid:
            return f"ValidationResult(VALID, {self.sanitized_value!r})"
        return f"ValidationResult(INVALID, {self.error_message!r})"


# ========== Team Validation ==========


def validate_team_name(name: Optional[str]) -> ValidationResult:
    """Validate a team name.

    Any non-blank text is accepted; surrounding whitespace is removed.

    Args:
        name: Team name to validate

    Returns:
        ValidationResult with the trimmed name
    """
    if name is None or not str(name).strip():
        return ValidationResult(
            is_valid=False,
            error_message="Team name cannot be empty.",
        )
    return ValidationResult(is_valid=True, sanitized_value=str(name).strip())


def validate_team_name_strict(name: Optional[str]) -> str:
    """Validate a team name and return it trimmed or raise exception.

    Raises:
        InvalidTeamNameException: If the name is blank
    """
    result = validate_team_name(name)
    if not result.is_valid:
        raise InvalidTeamNameException(result.error_message)
    return result.sanitized_value


def clean_members(members: Optional[Iterable[Any]]) -> List[str]:
    """Trim member names, drop blanks and keep at most four."""
    if not members:
        return []
    cleaned = [str(m).strip() for m in members if m is not None]
    return [m for m in cleaned if m][:MAX_TEAM_MEMBERS]


# ========== Time Validation ==========


def validate_seconds(value: Any) -> ValidationResult:
    """Validate an elapsed time in seconds.

    Strings may use a comma as decimal separator.

    Args:
        value: Number or text to validate

    Returns:
        ValidationResult with the float value
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds: Optional[float] = float(value) if math.isfinite(value) else None
    else:
        seconds = parse_maybe_number(value)

    if seconds is None:
        return ValidationResult(
            is_valid=False,
            error_message=f"Time must be a number: {value!r}",
        )
    if seconds < 0:
        return ValidationResult(
            is_valid=False,
            error_message=f"Time cannot be negative: {seconds}",
        )
    return ValidationResult(is_valid=True, sanitized_value=seconds)


def validate_seconds_strict(value: Any) -> float:
    """Validate a time and return seconds or raise exception.

    Raises:
        InvalidTimeException: If the time is not a finite non-negative number
    """
    result = validate_seconds(value)
    if not result.is_valid:
        raise InvalidTimeException(result.error_message)
    return result.sanitized_value


# ========== Event Validation ==========


def validate_event_slot(slot: Any) -> int:
    """Return the slot as int or raise InvalidEventException."""
    try:
        slot_int = int(slot)
    except (TypeError, ValueError):
        raise InvalidEventException(f"Unknown event: {slot!r}")
    if slot_int not in ALL_EVENT_SLOTS:
        raise InvalidEventException(f"Unknown event: {slot!r}")
    return slot_int


def validate_bracket_slot(slot: Any) -> int:
    slot_int = validate_event_slot(slot)
    if slot_int not in BRACKET_EVENT_SLOTS:
        raise InvalidEventException(f"Event {slot_int} is not a match event")
    return slot_int


def validate_match_side(side: Any) -> str:
    """Normalize a match side to 'a' or 'b'."""
    normalized = str(side or "").strip().lower()
    if normalized not in (SIDE_A, SIDE_B):
        raise InvalidMatchSideException(f"Match side must be 'a' or 'b': {side!r}")
    return normalized
