"""CLI runner.

Usage examples:
- CPU game: ``python -m quoridor_ai.runner --mode game --p1 minimax --p2 greedy --verbose``
- Analysis: ``python -m quoridor_ai.runner --mode analyze --state "4,0,10;4,8,10;0" --depth 2``
"""
from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from . import engine
from .agents import AGENT_NAMES, MinimaxAgent, build_agent, default_cpu_config
from .board import BOARD_SIZE, WALL_GRID_SIZE, is_blocked
from .game_controller import GameController
from .paths import get_distance_map, get_shortest_path
from .search import SearchStats, format_move, search
from .state_format import export_state, format_state_for_display, import_state
from .types import GameState, Player


@dataclass
class GameSummary:
    winner: Optional[int]
    turns: int
    final_state: str
    search_stats: Dict[int, List[SearchStats]] = field(default_factory=dict)


def format_board(state: GameState) -> str:
    """ASCII board: ``1``/``2`` tokens, ``|`` and ``-`` for walls, row 0 on top."""

    p1, p2 = state.players
    lines: List[str] = ["   " + "   ".join(str(x) for x in range(BOARD_SIZE))]
    for y in range(BOARD_SIZE):
        row = [f"{y}  "]
        for x in range(BOARD_SIZE):
            if (x, y) == p1.position:
                row.append("1")
            elif (x, y) == p2.position:
                row.append("2")
            else:
                row.append(".")
            if x < BOARD_SIZE - 1:
                row.append(" | " if is_blocked(state.walls, x, y, x + 1, y) else "   ")
        lines.append("".join(row).rstrip())
        if y < WALL_GRID_SIZE:
            under = ["   "]
            for x in range(BOARD_SIZE):
                under.append("-" if is_blocked(state.walls, x, y, x, y + 1) else " ")
                if x < BOARD_SIZE - 1:
                    under.append("   ")
            lines.append("".join(under).rstrip())
    return "\n".join(lines)


def play_game(
    controller: GameController,
    max_turns: int,
    emit_moves: bool,
    show_board: bool,
    show_stats: bool,
) -> GameSummary:
    search_stats: Dict[int, List[SearchStats]] = {Player.P1: [], Player.P2: []}
    turns = 0
    while not controller.is_over() and turns < max_turns:
        player = controller.state.current_player
        agent = controller.agents[player]
        move = controller.step_ai()
        turns += 1
        if emit_moves:
            print(f"Turn {turns}: P{player + 1} -> {format_move(move)}")
        if show_board:
            print(format_board(controller.state))
            print()
        if isinstance(agent, MinimaxAgent) and agent.last_stats is not None:
            stats = agent.last_stats
            search_stats[player].append(stats)
            if show_stats:
                print(
                    f"P{player + 1} minimax stats: depth={stats.max_depth} nodes={stats.total_nodes} "
                    f"per_depth={stats.nodes_per_depth} beta_cutoffs={stats.beta_cutoffs} "
                    f"alpha_cutoffs={stats.alpha_cutoffs} elapsed_ms={stats.elapsed_ms:.1f}"
                )
    return GameSummary(
        winner=controller.winner(),
        turns=turns,
        final_state=export_state(controller.state),
        search_stats=search_stats,
    )


def analyze(state: GameState, depth: int, use_locked_distance: Optional[bool]) -> None:
    """Print a position, both players' routes and the search verdict for the side to move."""

    print(format_board(state))
    print(format_state_for_display(state))
    for index, player in enumerate(state.players):
        goal = Player(index).goal_row
        distance = get_distance_map(state.walls, goal)[player.y][player.x]
        path = get_shortest_path(state.walls, player.x, player.y, goal)
        print(f"P{index + 1} distance={distance} path={path}")

    config = replace(default_cpu_config(state.current_player), depth=depth)
    if use_locked_distance is not None:
        config = replace(config, use_locked_distance=use_locked_distance)
    if engine.is_game_over(state):
        print(f"Game over, winner P{engine.winner(state) + 1}")
        return
    result = search(state, config)
    print(
        f"P{state.current_player + 1} best={format_move(result.move)} score={result.score:.1f} "
        f"nodes={result.stats.total_nodes} elapsed_ms={result.stats.elapsed_ms:.1f}"
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Quoridor AI runner")
    parser.add_argument("--mode", choices=["game", "analyze"], required=True)
    parser.add_argument("--p1", choices=AGENT_NAMES, default="minimax")
    parser.add_argument("--p2", choices=AGENT_NAMES, default="greedy")
    parser.add_argument("--p1-depth", type=int, default=None, help="Override player 1 minimax depth")
    parser.add_argument("--p2-depth", type=int, default=None, help="Override player 2 minimax depth")
    parser.add_argument("--first", choices=["p1", "p2"], default="p1")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--max-turns", type=int, default=200)
    parser.add_argument("--state", type=str, default=None, help="Start from an exported state string")
    parser.add_argument("--depth", type=int, default=2, help="Search depth in analyze mode")
    parser.add_argument("--locked", dest="locked", action="store_true", default=None)
    parser.add_argument("--no-locked", dest="locked", action="store_false")
    parser.add_argument("--verbose", action="store_true")
    parser.add_argument("--stats", action="store_true", help="Print minimax search stats each move")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    start_state: Optional[GameState] = None
    if args.state is not None:
        result = import_state(args.state)
        if not result.success:
            print(f"Invalid state: {result.error}")
            raise SystemExit(1)
        start_state = result.state

    try:
        if args.mode == "analyze":
            if start_state is None:
                start_state = engine.new_game()
            analyze(start_state, args.depth, args.locked)
            return

        p1_agent = build_agent(args.p1, Player.P1, seed=args.seed, depth=args.p1_depth)
        p2_agent = build_agent(
            args.p2, Player.P2, seed=None if args.seed is None else args.seed + 1, depth=args.p2_depth
        )
        first = Player.P1 if args.first == "p1" else Player.P2
        controller = GameController(p1_agent, p2_agent, first=first)
        if args.state is not None:
            controller.import_state(args.state)
        summary = play_game(
            controller,
            max_turns=args.max_turns,
            emit_moves=True,
            show_board=args.verbose,
            show_stats=args.stats,
        )
    except ValueError as exc:
        print(f"Invalid configuration: {exc}")
        raise SystemExit(1)

    if summary.winner is None:
        print(f"No winner after {summary.turns} turns")
    else:
        print(f"Game winner: P{summary.winner + 1}")
    print(f"Final state: {summary.final_state}")


if __name__ == "__main__":
    main()
