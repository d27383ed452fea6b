"""Command-line interface for the scoreboard.

Every command works on the autosaved state, so a sequence of invocations
behaves like one session:

    winterolympics import-roster teams.csv
    winterolympics matchups --seed 7
    winterolympics winner 1 match1_... "Red"
    winterolympics points
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

import argparse
import random
import shlex
import sys
from pathlib import Path
from typing import List, Optional

try:
    from prompt_toolkit import PromptSession
    from prompt_toolkit.completion import WordCompleter
    from prompt_toolkit.history import InMemoryHistory

    PROMPT_TOOLKIT_AVAILABLE = True
except ImportError:
    PROMPT_TOOLKIT_AVAILABLE = False

from winterolympics import APP_NAME, APP_VERSION
from winterolympics.config import AppConfig, build_store
from winterolympics.constants import (
    ALL_EVENT_SLOTS,
    CSV_EXTENSION,
    EVENT_NAMES,
    XLSX_EXTENSION,
)
from winterolympics.controllers.scoring import timed_ranking
from winterolympics.controllers.tournament import Tournament
from winterolympics.exceptions import (
    EnvironmentUnavailableException,
    WinterOlympicsException,
)
from winterolympics.formats.csv_parser import read_csv_file
from winterolympics.formats.results import (
    decode_results,
    encode_workbook,
    read_results_meta,
    results_filename,
    write_results_csv,
)
from winterolympics.formats.workbook import read_first_sheet_records
from winterolympics.models.tournament import BracketEvent
from winterolympics.utils import format_seconds, set_log_level, setup_logger

logger = setup_logger(__name__)

SHELL_EXIT_WORDS = ("exit", "quit", "q")
COMMAND_NAMES = (
    "show",
    "points",
    "import-roster",
    "load",
    "save",
    "add-team",
    "remove-team",
    "matchups",
    "winner",
    "time",
    "reset",
)


# ========== Output ==========


def _team_name(tournament: Tournament, team_id: Optional[str]) -> str:
    if not team_id:
        return "-"
    team = tournament.state.get_team(team_id)
    return team.name if team else f"<{team_id}>"


def cmd_show(tournament: Tournament, args: argparse.Namespace) -> int:
    """Print teams and every event."""
    state = tournament.state
    print(f"Teams ({len(state.teams)}):")
    for team in state.teams:
        members = ", ".join(team.members) if team.members else "-"
        print(f"  {team.name:<24} {members}")

    for slot in ALL_EVENT_SLOTS:
        event = state.events[slot]
        print(f"\nEvent {slot}: {EVENT_NAMES[slot]}")
        if isinstance(event, BracketEvent):
            if not event.matches:
                print("  (no matches)")
            for match in event.matches:
                print(
                    f"  {match.id}: {_team_name(tournament, match.a_team_id)} vs "
                    f"{_team_name(tournament, match.b_team_id)} "
                    f"[winner: {_team_name(tournament, match.winner_team_id)}]"
                )
        else:
            ranking = timed_ranking(state, slot)
            if not ranking:
                print("  (no times)")
            for place, (team_id, seconds) in enumerate(ranking, start=1):
                print(f"  {place}. {_team_name(tournament, team_id):<24} {format_seconds(seconds)} s")
    return 0


def cmd_points(tournament: Tournament, args: argparse.Namespace) -> int:
    """Print the points table."""
    header = "  ".join(f"E{slot}" for slot in ALL_EVENT_SLOTS)
    print(f"{'#':>3}  {'Team':<24} {header}  Total")
    for row in tournament.standings():
        per_event = "  ".join(f"{row.points[slot]:>2}" for slot in ALL_EVENT_SLOTS)
        print(f"{row.rank:>3}  {row.team.name:<24} {per_event}  {row.points.total:>5}")
    return 0


# ========== Files ==========


def cmd_import_roster(tournament: Tournament, args: argparse.Namespace) -> int:
    path = Path(args.file)
    if path.suffix.lower() == f".{CSV_EXTENSION}":
        records = read_csv_file(path)
    else:
        records = read_first_sheet_records(path)

    rng = random.Random(args.seed) if args.seed is not None else None
    result = tournament.load_roster(records, rng)
    message = f"Imported {len(result.teams)} team(s) from \"{path.name}\"."
    if result.warnings:
        message += f" Warnings: {' '.join(result.warnings)}"
    print(message)
    return 0


def cmd_load(tournament: Tournament, args: argparse.Namespace) -> int:
    path = Path(args.file)
    meta = None
    if path.suffix.lower() == f".{CSV_EXTENSION}":
        rows = read_csv_file(path)
        state = decode_results(rows)
        meta = read_results_meta(rows)
    else:
        state = decode_results(path)
    dropped = tournament.load_results(state)

    print(f"Loaded saved results from \"{path.name}\".")
    if meta is not None and meta.exported_at:
        print(f"Exported at {meta.exported_at:%Y-%m-%d %H:%M}.")
    if dropped:
        print(f"Dropped {dropped} reference(s) to unknown teams.")
    return 0


def cmd_save(tournament: Tournament, args: argparse.Namespace) -> int:
    output = Path(args.output) if args.output else Path(results_filename(args.format))
    if args.format == XLSX_EXTENSION:
        encode_workbook(tournament.state, output)
    else:
        write_results_csv(tournament.state, output)
    print(f"Saved results to {output}")
    return 0


# ========== Mutations ==========


def cmd_add_team(tournament: Tournament, args: argparse.Namespace) -> int:
    team = tournament.add_team(args.name, args.members)
    print(f"Added team {team.name} ({team.id})")
    return 0


def cmd_remove_team(tournament: Tournament, args: argparse.Namespace) -> int:
    team = tournament.remove_team(tournament.find_team(args.name).id)
    print(f"Removed team {team.name}")
    return 0


def cmd_matchups(tournament: Tournament, args: argparse.Namespace) -> int:
    rng = random.Random(args.seed) if args.seed is not None else None
    byes = tournament.generate_random_matchups(rng)
    message = "Random matchups created for Events 1, 2, 3 and 5."
    if byes:
        message += " " + " | ".join(bye.message for bye in byes)
    print(message)
    return 0


def cmd_winner(tournament: Tournament, args: argparse.Namespace) -> int:
    team_id = None if args.team == "-" else tournament.find_team(args.team).id
    match = tournament.set_winner(args.event, args.match_id, team_id)
    print(f"Winner of {match.id}: {_team_name(tournament, match.winner_team_id)}")
    return 0


def cmd_time(tournament: Tournament, args: argparse.Namespace) -> int:
    team = tournament.find_team(args.team)
    seconds = tournament.set_time(team.id, None if args.seconds == "-" else args.seconds)
    if seconds is None:
        print(f"Cleared time of {team.name}")
    else:
        print(f"Time of {team.name}: {format_seconds(seconds)} s")
    return 0


def cmd_reset(tournament: Tournament, args: argparse.Namespace) -> int:
    tournament.reset()
    print("Reset complete.")
    return 0


# ========== Interactive shell ==========


def create_completer():
    """Word completer over the command names."""
    if not PROMPT_TOOLKIT_AVAILABLE:
        return None
    return WordCompleter(list(COMMAND_NAMES) + list(SHELL_EXIT_WORDS) + ["help"])


def run_line(tournament: Tournament, parser: argparse.ArgumentParser, line: str) -> int:
    """Run one shell line as if it were a command-line invocation."""
    try:
        argv = shlex.split(line)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if not argv:
        return 0
    if argv[0] == "help":
        parser.print_help()
        return 0

    try:
        args = parser.parse_args(argv)
    except SystemExit:
        # argparse already printed the usage error
        return 1
    func = getattr(args, "func", None)
    if func is None or func is cmd_shell:
        return 0
    return run_command(tournament, args)


def cmd_shell(tournament: Tournament, args: argparse.Namespace) -> int:
    """Interactive loop with command completion."""
    if not PROMPT_TOOLKIT_AVAILABLE:
        raise EnvironmentUnavailableException(
            "The interactive shell requires prompt_toolkit. "
            "Install with: pip install prompt_toolkit"
        )

    parser = create_parser()
    session = PromptSession(completer=create_completer(), history=InMemoryHistory())
    print(f"{APP_NAME} {APP_VERSION}. Type 'help' for commands, 'exit' to leave.")

    while True:
        try:
            line = session.prompt("winterolympics> ").strip()
        except KeyboardInterrupt:
            print("Use 'exit' or 'quit' to leave")
            continue
        except EOFError:
            break

        if line in SHELL_EXIT_WORDS:
            break
        run_line(tournament, parser, line)
    return 0


# ========== Entry point ==========


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="winterolympics",
        description=f"{APP_NAME} scoreboard",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    sub = subparsers.add_parser("show", help="Show teams and events")
    sub.set_defaults(func=cmd_show)

    sub = subparsers.add_parser("points", help="Show the points table")
    sub.set_defaults(func=cmd_points)

    sub = subparsers.add_parser("import-roster", help="Replace teams from a roster CSV/XLSX")
    sub.add_argument("file")
    sub.add_argument("--seed", type=int, help="Seed for open pool shuffling")
    sub.set_defaults(func=cmd_import_roster)

    sub = subparsers.add_parser("load", help="Load saved results (CSV/XLSX)")
    sub.add_argument("file")
    sub.set_defaults(func=cmd_load)

    sub = subparsers.add_parser("save", help="Save results to CSV/XLSX")
    sub.add_argument("--format", choices=[CSV_EXTENSION, XLSX_EXTENSION], default=CSV_EXTENSION)
    sub.add_argument("--output", help="Output path (default: timestamped file name)")
    sub.set_defaults(func=cmd_save)

    sub = subparsers.add_parser("add-team", help="Add a team")
    sub.add_argument("name")
    sub.add_argument("members", nargs="*")
    sub.set_defaults(func=cmd_add_team)

    sub = subparsers.add_parser("remove-team", help="Remove a team and its results")
    sub.add_argument("name", help="Team name or id")
    sub.set_defaults(func=cmd_remove_team)

    sub = subparsers.add_parser("matchups", help="Create random matchups for events 1, 2, 3 and 5")
    sub.add_argument("--seed", type=int)
    sub.set_defaults(func=cmd_matchups)

    sub = subparsers.add_parser("winner", help="Record a match winner ('-' clears)")
    sub.add_argument("event", type=int)
    sub.add_argument("match_id")
    sub.add_argument("team", help="Team name or id, or '-'")
    sub.set_defaults(func=cmd_winner)

    sub = subparsers.add_parser("time", help="Record a timed-event result ('-' clears)")
    sub.add_argument("team", help="Team name or id")
    sub.add_argument("seconds")
    sub.set_defaults(func=cmd_time)

    sub = subparsers.add_parser("reset", help="Remove all teams and results")
    sub.set_defaults(func=cmd_reset)

    sub = subparsers.add_parser("shell", help="Interactive shell")
    sub.set_defaults(func=cmd_shell)

    return parser


def run_command(tournament: Tournament, args: argparse.Namespace) -> int:
    """Dispatch parsed arguments, turning scoreboard errors into exit code 1."""
    try:
        return args.func(tournament, args)
    except WinterOlympicsException as e:
        logger.debug(f"Command {args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main(argv: Optional[List[str]] = None, tournament: Optional[Tournament] = None) -> int:
    """Main entry point for the winterolympics command.

    Args:
        argv: Arguments (default: ``sys.argv[1:]``)
        tournament: Use this tournament instead of opening the configured store

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 0

    try:
        config = AppConfig.from_env()
        set_log_level("DEBUG" if args.verbose else config.log_level)
        if tournament is None:
            tournament = Tournament.open(build_store(config))
    except WinterOlympicsException as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return run_command(tournament, args)


if __name__ == "__main__":
    sys.exit(main())
