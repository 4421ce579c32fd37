"""Static evaluation of positions from one player's point of view."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Dict, Mapping, Optional

from .board import has_no_walls
from .paths import get_distance_map, get_locked_distance
from .types import GameState, Player

# Row just before the goal, keyed by player index.
GOAL_ADJACENT_ROW = {Player.P1: 7, Player.P2: 1}


@dataclass(frozen=True)
class EvaluationParams:
    """Weights of the static evaluator.

    Names follow the camelCase keys used in configuration dicts, see
    :meth:`from_dict`.
    """

    wall_value: float = 0.3
    wall_power: float = 1
    win_score: float = 1000
    locked_bonus: float = 5.0
    locked_penalty: float = 5.0
    my_reach_bonus: float = 50
    my_pre_reach_bonus: float = 15
    opponent_reach_penalty: float = 100
    opponent_pre_reach_penalty: float = 30
    goal_adjacent_bonus: float = 3.0

    _KEYS = {
        "wallValue": "wall_value",
        "wallPower": "wall_power",
        "winScore": "win_score",
        "lockedBonus": "locked_bonus",
        "lockedPenalty": "locked_penalty",
        "myReachBonus": "my_reach_bonus",
        "myPreReachBonus": "my_pre_reach_bonus",
        "opponentReachPenalty": "opponent_reach_penalty",
        "opponentPreReachPenalty": "opponent_pre_reach_penalty",
        "goalAdjacentBonus": "goal_adjacent_bonus",
    }

    @classmethod
    def from_dict(cls, data: Mapping[str, object], base: Optional["EvaluationParams"] = None) -> "EvaluationParams":
        """Build params from a camelCase or snake_case mapping, overriding ``base``.

        Unknown keys and non-numeric values raise ``ValueError``.
        """

        known = {f.name for f in fields(cls)}
        updates: Dict[str, float] = {}
        for key, value in data.items():
            name = cls._KEYS.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown evaluation parameter '{key}'")
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Evaluation parameter '{key}' must be numeric")
            updates[name] = value
        return replace(base or cls(), **updates)

    def to_dict(self) -> Dict[str, float]:
        values = asdict(self)
        return {camel: values[snake] for camel, snake in self._KEYS.items()}


DEFAULT_EVAL_PARAMS = EvaluationParams()


def _wall_score(walls_left: int, params: EvaluationParams) -> float:
    return (walls_left ** params.wall_power) * params.wall_value


def evaluate(
    state: GameState,
    player: int,
    use_locked_distance: bool = True,
    params: EvaluationParams = DEFAULT_EVAL_PARAMS,
) -> float:
    """Score ``state`` for ``player``; positive favours ``player``.

    Terms, in order: win/loss short-circuit, distance differential, reach
    bonuses at distance 1 and 2, locked-distance bonus/penalty (optional),
    remaining walls, and a goal-adjacent row bonus while the board is empty.
    """

    me = Player(player)
    opp = me.opponent()
    my_state = state.players[me]
    opp_state = state.players[opp]

    my_dist = get_distance_map(state.walls, me.goal_row)[my_state.y][my_state.x]
    opp_dist = get_distance_map(state.walls, opp.goal_row)[opp_state.y][opp_state.x]

    if my_dist == 0:
        return params.win_score
    if opp_dist == 0:
        return -params.win_score

    score = float(opp_dist - my_dist)

    if my_dist == 1:
        score += params.my_reach_bonus
    if my_dist == 2:
        score += params.my_pre_reach_bonus
    if opp_dist == 1:
        score -= params.opponent_reach_penalty
    if opp_dist == 2:
        score -= params.opponent_pre_reach_penalty

    if use_locked_distance:
        if get_locked_distance(state, me) >= 0:
            score += params.locked_bonus
        if get_locked_distance(state, opp) >= 0:
            score -= params.locked_penalty

    score += _wall_score(my_state.walls_left, params) - _wall_score(opp_state.walls_left, params)

    if has_no_walls(state.walls):
        if my_state.y == GOAL_ADJACENT_ROW[me]:
            score += params.goal_adjacent_bonus
        if opp_state.y == GOAL_ADJACENT_ROW[opp]:
            score -= params.goal_adjacent_bonus

    return score
