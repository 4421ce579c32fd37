"""Agents that pick actions for the side to move."""

from __future__ import annotations

import math
import random
from dataclasses import replace
from typing import Mapping, Optional

from . import engine
from .evaluation import DEFAULT_EVAL_PARAMS, EvaluationParams, evaluate
from .search import SearchConfig, SearchResult, SearchStats, search
from .types import Action, GameState, MoveRecord, Player

PreviousMoves = Mapping[int, MoveRecord]

AGENT_NAMES = ("random", "greedy", "minimax")


def default_cpu_config(player: int) -> SearchConfig:
    """Stock CPU settings: player 1 searches 2 plies with locked distances,
    player 2 searches 3 plies without them and values walls higher."""

    if Player(player) is Player.P1:
        return SearchConfig(depth=2, use_locked_distance=True)
    return SearchConfig(
        depth=3,
        use_locked_distance=False,
        eval_params=EvaluationParams.from_dict({"wallValue": 0.5}),
    )


class Agent:
    """Base class for agents."""

    name = "agent"

    def choose_move(self, state: GameState, previous_moves: Optional[PreviousMoves] = None) -> Action:
        """Return an action for ``state.current_player``."""

        raise NotImplementedError


class RandomAgent(Agent):
    """Agent that selects a random legal action with reproducible seeding."""

    name = "random"

    def __init__(self, seed: Optional[int] = None, wall_rate: float = 0.2):
        self._rng = random.Random(seed)
        self.wall_rate = wall_rate

    def choose_move(self, state: GameState, previous_moves: Optional[PreviousMoves] = None) -> Action:
        steps = engine.get_valid_moves(state)
        walls = engine.get_legal_walls(state) if not state.is_placement_phase() else []
        if not steps and not walls:
            raise ValueError("No legal moves available")
        # Walls vastly outnumber steps, so pick the category first.
        if walls and (not steps or self._rng.random() < self.wall_rate):
            return self._rng.choice(walls)
        return self._rng.choice(steps)


class GreedyAgent(Agent):
    """One-ply agent: plays the action whose resulting position evaluates best."""

    name = "greedy"

    def __init__(self, use_locked_distance: bool = True, params: EvaluationParams = DEFAULT_EVAL_PARAMS):
        self.use_locked_distance = use_locked_distance
        self.params = params

    def choose_move(self, state: GameState, previous_moves: Optional[PreviousMoves] = None) -> Action:
        player = state.current_player
        best_move: Optional[Action] = None
        best_score = -math.inf
        for move in engine.get_all_legal_moves(state):
            child = engine.apply_move_to_state(state, move)
            score = evaluate(child, player, self.use_locked_distance, self.params)
            if score > best_score:
                best_move, best_score = move, score
        if best_move is None:
            raise ValueError("No legal moves available")
        return best_move


class MinimaxAgent(Agent):
    """Agent backed by :func:`quoridor_ai.search.search`."""

    name = "minimax"

    def __init__(self, config: Optional[SearchConfig] = None):
        self.config = config or SearchConfig()
        self.last_result: Optional[SearchResult] = None

    @property
    def last_stats(self) -> Optional[SearchStats]:
        return None if self.last_result is None else self.last_result.stats

    def choose_move(self, state: GameState, previous_moves: Optional[PreviousMoves] = None) -> Action:
        result = search(state, self.config, previous_moves)
        self.last_result = result
        if result.move is None:
            raise ValueError("Search returned no move")
        return result.move


def build_agent(name: str, player: int, seed: Optional[int] = None, depth: Optional[int] = None) -> Agent:
    """Construct an agent from its CLI name."""

    if name == "random":
        return RandomAgent(seed=seed)
    if name == "greedy":
        return GreedyAgent(use_locked_distance=False)
    if name == "minimax":
        config = default_cpu_config(player)
        if depth is not None:
            config = replace(config, depth=depth)
        return MinimaxAgent(config)
    raise ValueError(f"Unknown agent '{name}'")
