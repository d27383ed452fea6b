"""Team roster import from arbitrary spreadsheets.

Roster files are not in any fixed format. Columns are found by header name
(case and spacing do not matter), and participants listed in an "open pool"
column are shuffled into new teams of three or four.
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

import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from winterolympics.constants import (
    MAX_TEAM_MEMBERS,
    MEMBER_HEADER_CANDIDATES,
    OPEN_POOL_HEADERS,
    POOL_TEAM_NAME,
    TEAM_NAME_HEADERS,
)
from winterolympics.models.tournament import Team
from winterolympics.type_hints import Rows
from winterolympics.utils import cell_text, normalize_header, setup_logger

logger = setup_logger(__name__)


@dataclass
class RosterColumns:
    """Columns detected in a roster file.

    Attributes
    ----------
    team : str or None
        Header of the team-name column.
    members : list of str
        Headers of up to four member columns, in priority order.
    open_pool : str or None
        Header of the open-pool column, if any.
    """

    team: Optional[str]
    members: List[str] = field(default_factory=list)
    open_pool: Optional[str] = None


@dataclass
class RosterImport:
    """Outcome of a roster import.

    Attributes
    ----------
    teams : list of Team
        Imported teams, names already made unique.
    warnings : list of str
        Non-fatal problems for the user to review.
    """

    teams: List[Team] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


# ========== Name Uniqueness ==========


def unique_name(name: str, taken: Iterable[str]) -> str:
    """Return ``name`` or ``name (n)`` with the lowest free ``n >= 2``.

    Comparison is case-insensitive. A colliding name takes the spelling of
    the first taken name it matches, so ``red`` next to ``Red`` becomes
    ``Red (2)``.
    """
    first_spelling: Dict[str, str] = {}
    for existing in taken:
        first_spelling.setdefault(existing.lower(), existing)
    name = name.strip()
    if name.lower() not in first_spelling:
        return name
    base = first_spelling[name.lower()]
    suffix = 2
    while f"{base} ({suffix})".lower() in first_spelling:
        suffix += 1
    return f"{base} ({suffix})"


def ensure_unique_team_names(teams: Sequence[Team]) -> List[Team]:
    """Trim names, drop nameless teams and suffix duplicates.

    Earlier teams keep their name; later duplicates become ``Name (2)``,
    ``Name (3)`` and so on. New Team objects are returned; the input is not
    modified.

    Example:
        >>> [t.name for t in ensure_unique_team_names(
        ...     [Team("1", "Red"), Team("2", "red"), Team("3", "Red")])]
        ['Red', 'Red (2)', 'Red (3)']
    """
    seen: List[str] = []
    out: List[Team] = []
    for team in teams:
        name = (team.name or "").strip()
        if not name:
            continue
        final = unique_name(name, seen)
        seen.append(final)
        out.append(Team(id=team.id, name=final, members=list(team.members)))
    return out


# ========== Header Detection ==========


def detect_columns(headers: Sequence[str]) -> RosterColumns:
    """Work out which headers hold team names, members and the open pool."""
    by_normalized: Dict[str, str] = {}
    for header in headers:
        by_normalized[normalize_header(header)] = header

    team_key = next(
        (by_normalized[h] for h in TEAM_NAME_HEADERS if h in by_normalized),
        headers[0] if headers else None,
    )

    member_keys: List[str] = []
    for candidate in MEMBER_HEADER_CANDIDATES:
        key = by_normalized.get(candidate)
        if key and key not in member_keys:
            member_keys.append(key)

    # Unnamed member columns: assume the four after the team column
    if len(member_keys) < MAX_TEAM_MEMBERS and len(headers) >= 5 and team_key in headers:
        start = list(headers).index(team_key) + 1
        for key in headers[start:start + MAX_TEAM_MEMBERS]:
            if key not in member_keys:
                member_keys.append(key)

    pool_key = next(
        (by_normalized[h] for h in OPEN_POOL_HEADERS if h in by_normalized),
        None,
    )

    return RosterColumns(team=team_key, members=member_keys[:MAX_TEAM_MEMBERS], open_pool=pool_key)


# ========== Open Pool ==========


def pool_group_sizes(count: int) -> List[int]:
    """Split ``count`` people into groups of four, taking threes when the
    remainder is three or six.

    Example:
        >>> pool_group_sizes(7)
        [4, 3]
        >>> pool_group_sizes(6)
        [3, 3]
    """
    sizes: List[int] = []
    remaining = count
    while remaining > 0:
        if remaining in (3, 6):
            size = 3
        elif remaining <= 4:
            size = remaining
        else:
            size = 4
        sizes.append(size)
        remaining -= size
    return sizes


def pool_team_name(index: int) -> str:
    """Placeholder name for the ``index``-th (0-based) pool team."""
    return POOL_TEAM_NAME if index == 0 else f"{POOL_TEAM_NAME} {index + 1}"


def build_pool_teams(names: Sequence[str], rng: Optional[random.Random] = None) -> List[Team]:
    """Shuffle open-pool participants into placeholder-named teams."""
    rng = rng or random.Random()
    shuffled = list(names)
    rng.shuffle(shuffled)

    teams: List[Team] = []
    offset = 0
    for index, size in enumerate(pool_group_sizes(len(shuffled))):
        members = shuffled[offset:offset + size]
        teams.append(Team.create(pool_team_name(index), members))
        offset += size
    return teams


# ========== Import ==========


def import_roster(records: Rows, rng: Optional[random.Random] = None) -> RosterImport:
    """Build teams from roster records.

    Args:
        records: Header-keyed rows from :func:`parse_csv` or a workbook sheet
        rng: Random source used to shuffle the open pool

    Returns:
        RosterImport with unique-named teams and any warnings
    """
    if not records:
        return RosterImport(teams=[], warnings=["No rows found."])

    columns = detect_columns(list(records[0].keys()))
    warnings: List[str] = []
    if not columns.team:
        warnings.append("Could not detect team name column.")

    teams: List[Team] = []
    pool_names: List[str] = []

    for row in records:
        name = cell_text(row.get(columns.team)) if columns.team else ""
        if name:
            members = [cell_text(row.get(key)) for key in columns.members]
            teams.append(Team.create(name, [m for m in members if m]))

        if columns.open_pool:
            pool_name = cell_text(row.get(columns.open_pool))
            if pool_name:
                pool_names.append(pool_name)

    if pool_names:
        pool_teams = build_pool_teams(pool_names, rng)
        teams.extend(pool_teams)
        warnings.append(
            f"{len(pool_names)} open pool player(s) randomly assigned to "
            f"{len(pool_teams)} team(s)."
        )

    unique = ensure_unique_team_names(teams)
    if not unique:
        warnings.append("No teams imported. Check your sheet format.")
    if any(kept.name != original.name for kept, original in zip(unique, teams)):
        warnings.append("Duplicate team names were renamed automatically.")

    logger.info(f"Imported {len(unique)} team(s) from {len(records)} row(s)")
    for warning in warnings:
        logger.debug(f"Roster warning: {warning}")
    return RosterImport(teams=unique, warnings=warnings)
