"""Depth-limited minimax with alpha-beta pruning over pawn moves and walls.

The search is stateless between calls: configuration arrives in a
:class:`SearchConfig`, counters are collected into a fresh
:class:`SearchStats`, and the previous move of each player is passed in
explicitly for the anti-oscillation rule.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from . import engine
from .evaluation import DEFAULT_EVAL_PARAMS, EvaluationParams, evaluate
from .paths import get_distance_map
from .types import Action, GameState, Move, MoveRecord, Player, WallMove

logger = logging.getLogger(__name__)

# Score subtracted from a move that walks the token straight back.
REVERSAL_PENALTY = 20

GOAL_MOVE_SCORE = 10000
CLOSER_MOVE_SCORE = 1000
CLOSER_STEP_BONUS = 100
LEVEL_MOVE_SCORE = 500
OTHER_MOVE_SCORE = 100
WALL_BASE_SCORE = 250
WALL_DELTA_WEIGHT = 50
WALL_SCORE_CAP = 500


@dataclass(frozen=True)
class SearchConfig:
    """Per-player search settings.

    ``depth`` 0 means "evaluate the position without choosing a move".
    ``prune_threshold`` stops scanning siblings once any child scores at
    least that much in absolute value.
    """

    depth: int = 2
    prune_threshold: float = math.inf
    use_locked_distance: bool = True
    eval_params: EvaluationParams = DEFAULT_EVAL_PARAMS
    order_moves: bool = True
    alpha_beta: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.depth, bool) or not isinstance(self.depth, int):
            raise ValueError(f"depth must be an integer, got {self.depth!r}")
        if self.depth < 0:
            raise ValueError(f"depth must be >= 0, got {self.depth}")
        if not self.prune_threshold > 0:
            raise ValueError(f"prune_threshold must be positive, got {self.prune_threshold!r}")


@dataclass
class SearchStats:
    """Counters gathered during a single search."""

    max_depth: int = 0
    nodes_per_depth: List[int] = field(default_factory=list)
    total_nodes: int = 0
    beta_cutoffs: int = 0
    alpha_cutoffs: int = 0
    threshold_cutoffs: int = 0
    elapsed_ms: float = 0.0

    def count_node(self, depth: int) -> None:
        index = self.max_depth - depth
        while len(self.nodes_per_depth) <= index:
            self.nodes_per_depth.append(0)
        self.nodes_per_depth[index] += 1
        self.total_nodes += 1

    def to_dict(self) -> Dict[str, object]:
        return {
            "maxDepth": self.max_depth,
            "nodesPerDepth": list(self.nodes_per_depth),
            "totalNodes": self.total_nodes,
            "betaCutoffs": self.beta_cutoffs,
            "alphaCutoffs": self.alpha_cutoffs,
            "thresholdCutoffs": self.threshold_cutoffs,
            "elapsedMs": self.elapsed_ms,
        }


@dataclass
class SearchResult:
    move: Optional[Action]
    score: float
    stats: SearchStats
    replaced_reversal: bool = False


def format_move(move: Optional[Action]) -> str:
    if move is None:
        return "none"
    if isinstance(move, WallMove):
        return f"wall ({move.wx}, {move.wy}, {move.direction.tag})"
    return f"{move.kind} ({move.x}, {move.y})"


def order_moves(state: GameState, moves: List[Action]) -> List[Action]:
    """Sort moves so the most promising are searched first.

    Pawn moves rank by progress toward the goal; walls rank by the one-ply
    distance swing they cause. Ties keep generation order.
    """

    mover = Player(state.current_player)
    goal_y = mover.goal_row
    me = state.players[mover]
    distance_map = get_distance_map(state.walls, goal_y)
    current = distance_map[me.y][me.x]

    scored: List[Tuple[float, Action]] = []
    for move in moves:
        if isinstance(move, WallMove):
            delta = engine.evaluate_wall_placement(state, move.wx, move.wy, move.direction)
            if delta is None:
                score = 0
            else:
                score = max(0, min(WALL_SCORE_CAP, WALL_BASE_SCORE + delta * WALL_DELTA_WEIGHT))
        else:
            new_dist = distance_map[move.y][move.x]
            if move.y == goal_y:
                score = GOAL_MOVE_SCORE
            elif new_dist < current:
                score = CLOSER_MOVE_SCORE + (current - new_dist) * CLOSER_STEP_BONUS
            elif new_dist == current:
                score = LEVEL_MOVE_SCORE
            else:
                score = OTHER_MOVE_SCORE
        scored.append((score, move))

    scored.sort(key=lambda item: item[0], reverse=True)
    return [move for _, move in scored]


def minimax(
    state: GameState,
    depth: int,
    alpha: float,
    beta: float,
    maximizing: bool,
    root_player: int,
    config: SearchConfig,
    stats: SearchStats,
) -> Tuple[Optional[Action], float]:
    """Return ``(best_move, score)`` with scores from ``root_player``'s view."""

    if depth == 0 or engine.is_game_over(state):
        return None, evaluate(state, root_player, config.use_locked_distance, config.eval_params)

    stats.count_node(depth)

    moves = engine.get_all_legal_moves(state)
    if not moves:
        return None, evaluate(state, root_player, config.use_locked_distance, config.eval_params)
    if config.order_moves:
        moves = order_moves(state, moves)

    best_move: Optional[Action] = None
    best_score = -math.inf if maximizing else math.inf
    for move in moves:
        child = engine.apply_move_to_state(state, move)
        _, score = minimax(child, depth - 1, alpha, beta, not maximizing, root_player, config, stats)

        if maximizing:
            if score > best_score:
                best_score, best_move = score, move
            alpha = max(alpha, score)
        else:
            if score < best_score:
                best_score, best_move = score, move
            beta = min(beta, score)

        if config.alpha_beta and beta <= alpha:
            if maximizing:
                stats.beta_cutoffs += 1
            else:
                stats.alpha_cutoffs += 1
            break
        if abs(score) >= config.prune_threshold:
            stats.threshold_cutoffs += 1
            break

    return best_move, best_score


def _reversing_record(move: Optional[Action], last: Optional[MoveRecord]) -> bool:
    if not isinstance(move, Move) or move.kind != "move":
        return False
    if last is None or not last.is_step():
        return False
    return (move.x, move.y) == last.from_xy


def _best_alternative(
    state: GameState, player: int, avoid: Tuple[int, int], config: SearchConfig
) -> Tuple[Optional[Action], float]:
    best_move: Optional[Action] = None
    best_score = -math.inf
    for move in engine.get_all_legal_moves(state):
        if isinstance(move, Move) and (move.x, move.y) == avoid:
            continue
        child = engine.apply_move_to_state(state, move)
        score = evaluate(child, player, config.use_locked_distance, config.eval_params)
        if score > best_score:
            best_move, best_score = move, score
    return best_move, best_score


def search(
    state: GameState,
    config: SearchConfig,
    previous_moves: Optional[Mapping[int, MoveRecord]] = None,
) -> SearchResult:
    """Choose a move for the side to act.

    ``previous_moves`` maps a player index to that player's last action. If
    the search would step the token straight back where it came from, the
    best one-ply alternative replaces it whenever it beats the reversal
    score minus :data:`REVERSAL_PENALTY`.
    """

    player = state.current_player
    stats = SearchStats(max_depth=config.depth)
    start = time.monotonic()

    move, score = minimax(state, config.depth, -math.inf, math.inf, True, player, config, stats)

    replaced = False
    last = (previous_moves or {}).get(player)
    if _reversing_record(move, last):
        penalized = score - REVERSAL_PENALTY
        alternative, alt_score = _best_alternative(state, player, last.from_xy, config)
        if alternative is not None and alt_score > penalized:
            logger.debug(
                "P%d: replacing reversal %s (%.1f) with %s (%.1f)",
                player + 1,
                format_move(move),
                score,
                format_move(alternative),
                alt_score,
            )
            move, score, replaced = alternative, alt_score, True

    stats.elapsed_ms = (time.monotonic() - start) * 1000.0
    _log_stats(player, move, score, stats)
    return SearchResult(move=move, score=score, stats=stats, replaced_reversal=replaced)


def _log_stats(player: int, move: Optional[Action], score: float, stats: SearchStats) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug("=== P%d minimax (depth=%d) ===", player + 1, stats.max_depth)
    for index, count in enumerate(stats.nodes_per_depth):
        logger.debug("  depth %d: %d nodes", index + 1, count)
    logger.debug(
        "  total %d nodes, cutoffs beta=%d alpha=%d threshold=%d, %.0fms",
        stats.total_nodes,
        stats.beta_cutoffs,
        stats.alpha_cutoffs,
        stats.threshold_cutoffs,
        stats.elapsed_ms,
    )
    logger.debug("  best %s, score %.1f", format_move(move), score)
