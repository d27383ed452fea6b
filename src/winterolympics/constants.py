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

from winterolympics import APP_NAME

# --- Storage ---
STORAGE_KEY = "aw-winter-olympics-v1"
SNAPSHOT_VERSION = 1
SNAPSHOT_FILE_EXTENSION = ".json"

# --- Results export ---
RESULTS_FORMAT_VERSION = 1
RESULTS_APP_SIGNATURE = APP_NAME
APP_SLUG = "afterwork-winter-olympics"
CSV_EXTENSION = "csv"
XLSX_EXTENSION = "xlsx"

# --- Events ---
BRACKET_EVENT_SLOTS = (1, 2, 3, 5)
TIMED_EVENT_SLOTS = (4,)
ALL_EVENT_SLOTS = (1, 2, 3, 4, 5)

EVENT_NAMES = {
    1: "Bobsled",
    2: "Ice hockey",
    3: "Curling",
    4: "Biathlon",
    5: "Skijump",
}

# --- Scoring ---
MATCH_WIN_POINTS = 3
# Timed event points by rank: 1st, 2nd, 3rd, 4th
TIMED_RANK_POINTS = (5, 3, 2, 1)

# --- Teams ---
MAX_TEAM_MEMBERS = 4
POOL_TEAM_NAME = "Enter Team Name"
MIN_TEAMS_FOR_MATCHUPS = 2

# --- Settings ---
SETTING_SCORING_MODE = "scoringMode"
SETTING_ACTIVE_VIEW = "activeView"
VIEW_TEAMS = "teams"
VIEW_POINTS = "points"
VIEW_EVENTS = "events"
VALID_VIEWS = (VIEW_TEAMS, VIEW_POINTS, VIEW_EVENTS)

DEFAULT_SETTINGS = {
    SETTING_SCORING_MODE: "default",
    SETTING_ACTIVE_VIEW: VIEW_TEAMS,
}

# --- Roster header detection (normalized: lowercase, single spaces) ---
TEAM_NAME_HEADERS = ("team", "team name", "teamname")
MEMBER_HEADER_CANDIDATES = (
    "member 1",
    "member 2",
    "member 3",
    "member 4",
    "player 1",
    "player 2",
    "player 3",
    "player 4",
    "name 1",
    "name 2",
    "name 3",
    "name 4",
    "team member 1",
    "team member 2",
    "team member 3",
    "team member 4",
)
OPEN_POOL_HEADERS = ("open team pool", "open pool", "pool")

# --- Canonical results columns ---
COL_RECORD_TYPE = "RecordType"
COL_EVENT = "Event"
COL_GROUP_ID = "GroupId"
COL_SLOT = "Slot"
COL_TEAM_ID = "TeamId"
COL_TEAM_NAME = "TeamName"
COL_MEMBERS = ("Member1", "Member2", "Member3", "Member4")
COL_A_TEAM_ID = "ATeamId"
COL_B_TEAM_ID = "BTeamId"
COL_WINNER_TEAM_ID = "WinnerTeamId"
COL_PLACE = "Place"
COL_SECONDS = "Seconds"
COL_KEY = "Key"
COL_VALUE = "Value"
COL_MATCH_ID = "MatchId"

RESULTS_COLUMNS = (
    COL_RECORD_TYPE,
    COL_EVENT,
    COL_GROUP_ID,
    COL_SLOT,
    COL_TEAM_ID,
    COL_TEAM_NAME,
    *COL_MEMBERS,
    COL_A_TEAM_ID,
    COL_B_TEAM_ID,
    COL_WINNER_TEAM_ID,
    COL_PLACE,
    COL_SECONDS,
    COL_KEY,
    COL_VALUE,
)

# Record type discriminators
RECORD_META = "meta"
RECORD_TEAM = "team"
RECORD_TIME = "e4_time"
RECORD_SETTING = "setting"
MATCH_RECORD_TYPES = {slot: f"e{slot}_match" for slot in BRACKET_EVENT_SLOTS}

# A results file must carry a team record and one of these.
# e3_match is not part of the signature.
RESULTS_SIGNATURE_TYPES = ("e1_match", "e2_match", "e4_time", "e5_match")

META_APP = "app"
META_FORMAT_VERSION = "formatVersion"
META_EXPORTED_AT = "exportedAt"

# --- Workbook sheets ---
SHEET_META = "Meta"
SHEET_TEAMS = "Teams"
SHEET_TIMES = "Event4_Times"
SHEET_SETTINGS = "Settings"
MATCH_SHEETS = {slot: f"Event{slot}_Matches" for slot in BRACKET_EVENT_SLOTS}

# --- Messages ---
RETRY_HINT = (
    "Please pick a file created by Save (.xlsx) or Save (.csv)."
)
CSV_ALTERNATIVE_HINT = (
    "If Excel support is unavailable, export your sheet as CSV and use the "
    ".csv file instead."
)
