"""Quoridor-style rules engine and minimax search."""

from .types import Action, GameState, Move, MoveRecord, Player, PlayerState, WallDir, WallMove
from .board import BOARD_SIZE, MAX_WALLS, WALL_GRID_SIZE, can_place_wall_at, is_blocked, is_valid_cell
from .engine import (
    apply_move_to_state,
    can_place_wall,
    can_place_wall_basic,
    execute_move,
    execute_wall_placement,
    get_all_legal_moves,
    get_valid_moves,
    is_game_over,
    new_game,
    winner,
)
from .paths import UNREACHABLE, get_distance_map, get_locked_distance, get_shortest_path, is_distance_locked_at
from .evaluation import DEFAULT_EVAL_PARAMS, EvaluationParams, evaluate
from .search import SearchConfig, SearchResult, SearchStats, search
from .agents import Agent, GreedyAgent, MinimaxAgent, RandomAgent, default_cpu_config
from .state_format import ImportResult, StateFormatError, export_state, import_state

__all__ = [
    "Action",
    "Agent",
    "BOARD_SIZE",
    "DEFAULT_EVAL_PARAMS",
    "EvaluationParams",
    "GameState",
    "GreedyAgent",
    "ImportResult",
    "MAX_WALLS",
    "MinimaxAgent",
    "Move",
    "MoveRecord",
    "Player",
    "PlayerState",
    "RandomAgent",
    "SearchConfig",
    "SearchResult",
    "SearchStats",
    "StateFormatError",
    "UNREACHABLE",
    "WALL_GRID_SIZE",
    "WallDir",
    "WallMove",
    "apply_move_to_state",
    "can_place_wall",
    "can_place_wall_at",
    "can_place_wall_basic",
    "default_cpu_config",
    "evaluate",
    "execute_move",
    "execute_wall_placement",
    "export_state",
    "get_all_legal_moves",
    "get_distance_map",
    "get_locked_distance",
    "get_shortest_path",
    "get_valid_moves",
    "import_state",
    "is_blocked",
    "is_distance_locked_at",
    "is_game_over",
    "is_valid_cell",
    "new_game",
    "search",
    "winner",
]
