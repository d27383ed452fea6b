"""Type hints used in the Winter Olympics Scoreboard."""

from typing import Dict, List, Literal, Tuple

# Opaque identifier
TeamId = str

# Which side of a match
MatchSide = Literal["a", "b"]
SIDE_A = "a"
SIDE_B = "b"

# One tabular row: header -> cell text
Row = Dict[str, str]
Rows = List[Row]
# Column headers plus rows, as written to a file
Table = Tuple[List[str], Rows]

Settings = Dict[str, str]
# teamId -> seconds
Times = Dict[TeamId, float]
