"""
Santorini CLI - Command-line interface for the engine.

Usage:
    santorini serve [--host H] [--port P]        Run the HTTP/WebSocket server
    santorini selfplay [--players N] [--seed S]  Play a bot-only match
"""

import argparse
import logging
import os
import sys

from .api.service import APIService
from .bots import POLICIES, create_policy
from .engine_core.board import BoardState, Position, WorkerRef, MAX_PLAYERS, MIN_PLAYERS
from .engine_core.game import Snapshot
from .engine_core.move import GamePhase


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Santorini - Tower-building board game engine",
        prog="santorini",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("SANTORINI_LOG_LEVEL", "WARNING"),
        help="Logging level (default: $SANTORINI_LOG_LEVEL or WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")

    # Self-play command
    selfplay_parser = subparsers.add_parser("selfplay", help="Play a match between bots")
    selfplay_parser.add_argument(
        "--players", type=int, default=2, choices=range(MIN_PLAYERS, MAX_PLAYERS + 1),
        help="Number of bot players",
    )
    selfplay_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    selfplay_parser.add_argument(
        "--policy", default="random", choices=sorted(POLICIES), help="Bot policy for every seat",
    )
    selfplay_parser.add_argument("--max-moves", type=int, default=500, help="Stop after this many moves")
    selfplay_parser.add_argument("--quiet", action="store_true", help="Only print the result")

    args = parser.parse_args(argv)
    # Replace any handlers installed before main ran.
    logging.basicConfig(level=args.log_level.upper(), force=True)

    if args.command == "serve":
        return cmd_serve(args)
    if args.command == "selfplay":
        return cmd_selfplay(args)
    parser.print_help()
    return 1


def cmd_serve(args):
    """Run the FastAPI app under uvicorn."""
    import uvicorn

    uvicorn.run(
        "santorini.api.app:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
    )
    return 0


def render_snapshot(snapshot: Snapshot) -> str:
    """ASCII board for a snapshot, using the same layout as BoardState.render."""
    board = BoardState()
    for x, column in enumerate(snapshot.board):
        for y, cell in enumerate(column):
            board.cells[x][y].height = cell.height
    for player in snapshot.players:
        for worker_id, pos in player.workers:
            board.place_worker(Position(*pos), WorkerRef(player.player_id, worker_id))
    return board.render()


def cmd_selfplay(args):
    """Play one match with a bot in every seat and print the outcome."""
    service = APIService()
    snapshot = service.create_session(args.players)
    session_id = snapshot.session_id
    player_ids = [f"p{i + 1}" for i in range(args.players)]

    bots = {}
    for index, player_id in enumerate(player_ids):
        seed = None if args.seed is None else args.seed + index
        bots[player_id] = create_policy(args.policy, seed=seed)
        service.add_player(session_id, player_id)
    for player_id in player_ids:
        snapshot = service.set_ready(session_id, player_id)

    moves_played = 0
    while not snapshot.is_finished and moves_played < args.max_moves:
        player_id = snapshot.current_player_id
        legal = service.legal_moves(session_id, player_id)
        decision = bots[player_id].select_move(snapshot, legal)
        result = service.submit_move(session_id, player_id, decision.move)
        if not result.success:
            print(f"Error: {player_id} played {decision.move}: {result.error}")
            return 1
        snapshot = result.snapshot
        moves_played += 1

        if not args.quiet:
            print(f"[{snapshot.version}] {'; '.join(result.changes)}")
            if snapshot.phase != GamePhase.BUILD:
                print(render_snapshot(snapshot))
                print()

    if not snapshot.is_finished:
        print(f"No result after {moves_played} moves")
        return 2

    print(f"Winner: {snapshot.winner} ({snapshot.win_reason}) after {moves_played} moves")
    return 0


if __name__ == "__main__":
    sys.exit(main())
