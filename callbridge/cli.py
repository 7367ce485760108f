"""Offline scorekeeper command line.

Usage:
    callbridge-score new Alice Bob Carol Dave --winning-score 50
    callbridge-score made 4 3 3 3
    callbridge-score calls 3 4 3 3
    callbridge-score outcomes won lost won won
    callbridge-score show
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from pymongo.errors import PyMongoError
from rich.console import Console
from rich.table import Table

from callbridge.config import settings
from callbridge.constants import DEFAULT_WINNING_SCORE, NUM_PLAYERS
from callbridge.errors import GameError
from callbridge.models.enums import Outcome, Phase
from callbridge.models.scoresheet import Scoresheet
from callbridge.repositories.game_repository import GameRepository
from callbridge.services.local_store import LocalStore
from callbridge.services.scoresheet_service import ScoresheetSession

console = Console()


def render_sheet(sheet: Scoresheet) -> Table:
    """Build the score table for a sheet."""
    if sheet.is_finished():
        title = "Game over"
    else:
        title = f"Round {sheet.round} of {sheet.total_rounds} - {sheet.phase.value}"
    if sheet.tag:
        title = f"{sheet.tag}: {title}"

    table = Table(title=title)
    table.add_column("Player", style="cyan")
    played = min(sheet.round - 1, sheet.total_rounds)
    for i in range(played):
        table.add_column(f"R{i + 1}", justify="right")
    table.add_column("Total", justify="right", style="bold green")

    for index, player in enumerate(sheet.players):
        name = player.name
        if index == sheet.dealer_index and not sheet.is_finished():
            name = f"{name} [dim](dealer)[/dim]"
        cells = []
        for r in range(played):
            score = player.scores[r]
            call = player.calls[r]
            cell = "" if score is None else str(score)
            if call is not None:
                cell = f"{cell} [dim]/{call}[/dim]"
            cells.append(cell)
        table.add_row(name, *cells, str(player.total_score))
    return table


def _show(session: ScoresheetSession) -> None:
    sheet = session.sheet
    if not sheet.is_game_active:
        console.print("[dim]No game in progress. Start one with 'new'.[/dim]")
        return
    console.print(render_sheet(sheet))
    if sheet.is_finished():
        names = ", ".join(p.name for p in sheet.winners())
        console.print(f"[bold green]Winner: {names}[/bold green]")
    elif sheet.phase == Phase.CALLING:
        console.print("Next: enter calls with 'calls C C C C'")
    elif sheet.round == 1:
        console.print("Next: enter tricks made with 'made M M M M'")
    else:
        console.print("Next: enter results with 'outcomes won|lost x4'")


async def _archive(session: ScoresheetSession) -> list[str]:
    repository = GameRepository(settings)
    try:
        await repository.connect()
        session.game_store = repository
        return await session.archive()
    except (ConnectionError, TimeoutError, OSError, PyMongoError):
        console.print(
            f"[yellow]MongoDB not available, {len(session.pending_results)} finished "
            "game(s) kept locally until the next run[/yellow]"
        )
        return []
    finally:
        await repository.disconnect()


async def _history(limit: int) -> list[dict[str, Any]]:
    repository = GameRepository(settings)
    await repository.connect()
    try:
        return await repository.list_results(limit)
    finally:
        await repository.disconnect()


def _print_history(results: list[dict[str, Any]]) -> None:
    table = Table(title="Past games")
    table.add_column("Finished", style="dim")
    table.add_column("Tag")
    table.add_column("Players")
    table.add_column("Winner", style="bold green")
    for result in results:
        players = ", ".join(
            f"{p['name']} ({p.get('totalScore', 0)})" for p in result.get("players", [])
        )
        table.add_row(
            (result.get("finishedAt") or "")[:16],
            result.get("tag") or "",
            players,
            ", ".join(result.get("winners", [])),
        )
    console.print(table)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(prog="callbridge-score", description=__doc__.splitlines()[0])
    parser.add_argument(
        "--store-dir",
        type=Path,
        default=settings.local_store_dir,
        help="Directory holding the saved game",
    )
    parser.add_argument(
        "--no-archive",
        action="store_true",
        help="Keep finished games locally instead of sending them to the shared history",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    new = sub.add_parser("new", help="Start a new game")
    new.add_argument("names", nargs=NUM_PLAYERS, metavar="NAME")
    new.add_argument("--winning-score", type=int, default=DEFAULT_WINNING_SCORE)
    new.add_argument("--tag", default=None, help="Optional label for the game")

    calls = sub.add_parser("calls", help="Enter this round's calls")
    calls.add_argument("values", nargs=NUM_PLAYERS, type=int, metavar="CALL")

    made = sub.add_parser("made", help="Enter tricks made (round 1)")
    made.add_argument("values", nargs=NUM_PLAYERS, type=int, metavar="TRICKS")

    outcomes = sub.add_parser("outcomes", help="Enter won/lost per player (round 2+)")
    outcomes.add_argument(
        "values", nargs=NUM_PLAYERS, choices=[o.value for o in Outcome], metavar="won|lost"
    )

    sub.add_parser("show", help="Show the score sheet")
    sub.add_parser("reset", help="Discard the current game")

    history = sub.add_parser("history", help="List finished games from the shared history")
    history.add_argument("--limit", type=int, default=10)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the scorekeeper."""
    args = build_parser().parse_args(argv)

    if args.command == "history":
        try:
            results = asyncio.run(_history(args.limit))
        except (ConnectionError, TimeoutError, OSError, PyMongoError):
            console.print("[red]MongoDB not available[/red]")
            return 1
        _print_history(results)
        return 0

    session = ScoresheetSession(LocalStore(args.store_dir))
    try:
        if args.command == "new":
            session.start_game(args.names, args.winning_score, args.tag, settings.total_rounds)
        elif args.command == "calls":
            session.submit_calls(args.values)
        elif args.command == "made":
            session.submit_made(args.values)
        elif args.command == "outcomes":
            session.submit_outcomes(args.values)
        elif args.command == "reset":
            session.reset_game()
            console.print("Game reset.")
            return 0
    except GameError as e:
        console.print(f"[red]{e.message}[/red]")
        return 1

    _show(session)
    if session.pending_results and not args.no_archive and settings.use_mongodb:
        for history_id in asyncio.run(_archive(session)):
            console.print(f"[dim]Saved to history as {history_id}[/dim]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
