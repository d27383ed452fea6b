"""Team data class."""

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
from typing import Any, Dict, List, Optional

from winterolympics.utils import new_id
from winterolympics.utils.validation import clean_members


@dataclass
class Team:
    """A team taking part in the tournament.

    Attributes
    ----------
    id : str
        Opaque, stable identifier. Matches and times refer to teams by id.
    name : str
        Display name, unique (case-insensitively) within a tournament.
    members : list of str
        Up to four member names, in display order.
    """

    id: str
    name: str
    members: List[str] = field(default_factory=list)

    @classmethod
    def create(cls, name: str, members: Optional[List[str]] = None) -> "Team":
        """Create a team with a freshly generated id."""
        return cls(id=new_id("team"), name=name.strip(), members=clean_members(members))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize team to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "members": list(self.members),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Team":
        """Deserialize team from dictionary."""
        return cls(
            id=str(data.get("id") or new_id("team")),
            name=str(data.get("name") or "").strip(),
            members=clean_members(data.get("members")),
        )
