"""Exceptions for use in the Winter Olympics Scoreboard"""

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


# ========== Base Application Exception ==========


class WinterOlympicsException(Exception):
    """Base exception for all scoreboard errors.

    All custom exceptions in the application should inherit from this class.
    This enables catching all application-specific errors with a single except clause.
    """

    pass


# ========== Operation Refused ==========


class OperationRefusedException(WinterOlympicsException):
    """Raised when a state mutation's precondition fails.

    The tournament state is left unchanged.
    """

    pass


class InvalidTeamNameException(OperationRefusedException):
    """Raised when a team name is empty."""

    pass


class TeamNotFoundException(OperationRefusedException):
    """Raised when a requested team does not exist."""

    pass


class MatchNotFoundException(OperationRefusedException):
    """Raised when a requested match does not exist in the event."""

    pass


class InvalidEventException(OperationRefusedException):
    """Raised when an event slot does not exist or has the wrong kind."""

    pass


class InvalidMatchSideException(OperationRefusedException):
    """Raised when a match side is not 'a' or 'b'."""

    pass


class InvalidWinnerException(OperationRefusedException):
    """Raised when a winner is not one of the two match sides."""

    pass


class InvalidTimeException(OperationRefusedException):
    """Raised when a time is not a finite, non-negative number."""

    pass


class NotEnoughTeamsException(OperationRefusedException):
    """Raised when an operation needs more teams than are registered."""

    pass


# ========== Results Format Exceptions ==========


class ResultsFormatException(WinterOlympicsException):
    """Base exception for results file errors."""

    pass


class FormatMismatchException(ResultsFormatException):
    """Raised when a file is not a saved results file.

    Decoding never touches live state, so the caller can simply retry with
    another file.
    """

    pass


# ========== Environment Exceptions ==========


class EnvironmentUnavailableException(WinterOlympicsException):
    """Raised when an optional capability (e.g. Excel support) is missing."""

    pass


# ========== File/Resource Exceptions ==========


class ResourceException(WinterOlympicsException):
    """Base exception for resource-related errors."""

    pass


class FileLoadException(ResourceException):
    """Raised when a file cannot be loaded."""

    pass


class FileSaveException(ResourceException):
    """Raised when a file or snapshot cannot be saved."""

    pass


class SnapshotVersionException(ResourceException):
    """Raised when a stored snapshot is newer than this version understands."""

    pass


# ========== Configuration Exceptions ==========


class ConfigurationException(WinterOlympicsException):
    """Base exception for configuration errors."""

    pass


class InvalidConfigurationException(ConfigurationException):
    """Raised when configuration data is invalid."""

    pass
