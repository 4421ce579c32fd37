import pytest

from quoridor_ai import engine
from quoridor_ai.evaluation import DEFAULT_EVAL_PARAMS, EvaluationParams, evaluate
from quoridor_ai.types import WallDir


def test_initial_position_is_balanced():
    state = engine.new_game()

    assert evaluate(state, 0, use_locked_distance=False) == 0.0
    assert evaluate(state, 1, use_locked_distance=False) == 0.0


def test_win_and_loss_short_circuit():
    state = engine.new_game()
    state.players[0].y = 8

    assert evaluate(state, 0) == DEFAULT_EVAL_PARAMS.win_score
    assert evaluate(state, 1) == -DEFAULT_EVAL_PARAMS.win_score


def test_reach_bonus_and_goal_adjacent_row():
    state = engine.new_game()
    state.players[0].y = 7

    # distance 7 ahead, reach bonus 50, goal-adjacent bonus 3
    assert evaluate(state, 0, use_locked_distance=False) == pytest.approx(60.0)
    # mirrored: opponent reach penalty 100, goal-adjacent penalty 3
    assert evaluate(state, 1, use_locked_distance=False) == pytest.approx(-110.0)


def test_pre_reach_terms():
    state = engine.new_game()
    state.players[1].y = 2

    assert evaluate(state, 0, use_locked_distance=False) == pytest.approx(-6 - 30)
    assert evaluate(state, 1, use_locked_distance=False) == pytest.approx(6 + 15)


def test_goal_adjacent_bonus_needs_an_empty_board():
    state = engine.new_game()
    state.players[0].y = 7
    state.walls[0][0] = WallDir.VERTICAL

    assert evaluate(state, 0, use_locked_distance=False) == pytest.approx(57.0)


def test_wall_stock_term_uses_power_and_value():
    state = engine.new_game()
    state.players[0].walls_left = 5

    assert evaluate(state, 0, use_locked_distance=False) == pytest.approx(-1.5)

    squared = EvaluationParams(wall_value=0.1, wall_power=2)
    assert evaluate(state, 0, use_locked_distance=False, params=squared) == pytest.approx(2.5 - 10.0)


def test_locked_distance_bonus():
    state = engine.new_game()
    state.players[1].walls_left = 0

    # Player 1's route is locked, player 2's is not; wall stock 10 vs 0.
    assert evaluate(state, 0, use_locked_distance=True) == pytest.approx(5.0 + 3.0)
    assert evaluate(state, 1, use_locked_distance=True) == pytest.approx(-5.0 - 3.0)


def test_params_from_dict_accepts_camel_and_snake_case():
    params = EvaluationParams.from_dict({"wallValue": 0.5, "win_score": 500})

    assert params.wall_value == 0.5
    assert params.win_score == 500
    assert params.locked_bonus == DEFAULT_EVAL_PARAMS.locked_bonus
    assert params.to_dict()["wallValue"] == 0.5


def test_params_from_dict_overrides_base():
    base = EvaluationParams(wall_value=0.5)

    params = EvaluationParams.from_dict({"lockedBonus": 1}, base)

    assert params.wall_value == 0.5
    assert params.locked_bonus == 1


@pytest.mark.parametrize("data", [{"wallWorth": 1}, {"wallValue": "high"}, {"winScore": True}])
def test_params_from_dict_rejects_bad_entries(data):
    with pytest.raises(ValueError):
        EvaluationParams.from_dict(data)
