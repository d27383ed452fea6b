"""Match data class for bracket events."""

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
from typing import Any, Dict, Optional

from winterolympics.type_hints import SIDE_A, MatchSide
from winterolympics.utils import new_id


def _optional_id(value: Any) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None


@dataclass
class Match:
    """A head-to-head match between two teams.

    Attributes
    ----------
    id : str
        Match identifier.
    a_team_id : str or None
        Team on side A, or None if not chosen yet.
    b_team_id : str or None
        Team on side B, or None if not chosen yet.
    winner_team_id : str or None
        The winning team. Always one of the two sides when set.
    """

    id: str
    a_team_id: Optional[str] = None
    b_team_id: Optional[str] = None
    winner_team_id: Optional[str] = None

    @classmethod
    def create(
        cls,
        slot: int,
        a_team_id: Optional[str] = None,
        b_team_id: Optional[str] = None,
    ) -> "Match":
        """Create an undecided match with a fresh id."""
        return cls(id=new_id(f"match{slot}"), a_team_id=a_team_id, b_team_id=b_team_id)

    @property
    def has_both_sides(self) -> bool:
        return bool(self.a_team_id and self.b_team_id)

    @property
    def is_decided(self) -> bool:
        """True if both sides are set, differ, and the winner is one of them."""
        return (
            self.has_both_sides
            and self.a_team_id != self.b_team_id
            and self.winner_team_id is not None
            and self.winner_team_id in (self.a_team_id, self.b_team_id)
        )

    def involves(self, team_id: str) -> bool:
        return team_id in (self.a_team_id, self.b_team_id)

    def winner_is_valid(self) -> bool:
        """Whether the current winner is consistent with the sides."""
        if self.winner_team_id is None:
            return True
        if self.a_team_id and self.a_team_id == self.b_team_id:
            return False
        return self.winner_team_id in (self.a_team_id, self.b_team_id)

    def set_side(self, side: MatchSide, team_id: Optional[str]) -> bool:
        """Set one side of the match.

        Clears the winner if it no longer matches a side.

        Returns:
            True if the winner was cleared
        """
        if side == SIDE_A:
            self.a_team_id = team_id
        else:
            self.b_team_id = team_id

        if not self.winner_is_valid():
            self.winner_team_id = None
            return True
        return False

    def to_dict(self) -> Dict[str, Any]:
        """Serialize match to dictionary."""
        return {
            "id": self.id,
            "a_team_id": self.a_team_id,
            "b_team_id": self.b_team_id,
            "winner_team_id": self.winner_team_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Match":
        """Deserialize match from dictionary."""
        return cls(
            id=str(data.get("id") or new_id("match")),
            a_team_id=_optional_id(data.get("a_team_id")),
            b_team_id=_optional_id(data.get("b_team_id")),
            winner_team_id=_optional_id(data.get("winner_team_id")),
        )
