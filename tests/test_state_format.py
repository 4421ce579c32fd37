import json
import math

import pytest

from quoridor_ai import engine
from quoridor_ai.evaluation import EvaluationParams
from quoridor_ai.search import SearchConfig
from quoridor_ai.state_format import (
    StateFormatError,
    action_from_dict,
    config_from_dict,
    config_to_dict,
    export_state,
    format_state_for_display,
    import_state,
    move_record_from_dict,
    parse_state,
    state_from_dict,
    state_to_dict,
)
from quoridor_ai.types import Move, MoveRecord, WallDir, WallMove


def test_import_initial_position_matches_new_game():
    text = "4,0,10;4,8,10;0"

    result = import_state(text)

    assert result.success
    assert result.error is None
    assert result.state == engine.new_game()
    assert export_state(result.state) == text


def test_export_lists_walls_in_row_major_order():
    state = engine.new_game()
    state.walls[5][2] = WallDir.HORIZONTAL
    state.walls[1][6] = WallDir.VERTICAL
    state.players[0].walls_left = 8
    state.current_player = 1

    text = export_state(state)

    assert text == "4,0,8;4,8,10;1;6,1,V;2,5,H"
    assert export_state(parse_state(text)) == text


def test_import_skips_empty_parts_and_whitespace():
    result = import_state("  4,0,10;4,8,10;0;;3,3,V;  \n")

    assert result.success
    assert result.state.walls[3][3] == WallDir.VERTICAL


def test_duplicate_intersection_is_a_structured_error():
    result = import_state("4,0,10;4,8,10;0;3,3,V;3,3,H")

    assert not result.success
    assert result.state is None
    assert "already taken" in result.error


@pytest.mark.parametrize(
    "text",
    [
        "",
        "4,0,10;4,8,10",
        "4,0;4,8,10;0",
        "9,0,10;4,8,10;0",
        "4,0,11;4,8,10;0",
        "4,0,-1;4,8,10;0",
        "4,0,10;4,0,10;0",
        "4,0,10;4,8,10;2",
        "a,0,10;4,8,10;0",
        "4,0,10;4,8,10;x",
        "4,0,10;4,8,10;0;3,3",
        "4,0,10;4,8,10;0;8,3,V",
        "4,0,10;4,8,10;0;3,3,D",
        "4,0,10;4,8,10;0;3,3,V;3,4,V",
        "0,0,10;4,8,10;0;1,0,V;0,1,H",
    ],
)
def test_malformed_strings_are_rejected(text):
    result = import_state(text)

    assert not result.success
    assert result.error
    with pytest.raises(StateFormatError):
        parse_state(text)


def test_format_state_for_display_is_json():
    state = engine.new_game()
    state.walls[2][3] = WallDir.HORIZONTAL

    payload = json.loads(format_state_for_display(state))

    assert payload["players"][0] == {"x": 4, "y": 0, "wallsLeft": 10}
    assert payload["currentPlayer"] == 0
    assert payload["walls"] == [{"x": 3, "y": 2, "dir": "H"}]


def test_snapshot_dict_restores_an_equal_state():
    state = engine.new_game(placement_phase=True)
    state.walls[4][4] = WallDir.VERTICAL

    snapshot = state_to_dict(state)
    restored = state_from_dict(json.loads(json.dumps(snapshot)))

    assert restored == state
    assert restored.walls is not state.walls


@pytest.mark.parametrize(
    "mutate",
    [
        lambda d: d.pop("players"),
        lambda d: d["players"].pop(),
        lambda d: d["walls"].pop(),
        lambda d: d.__setitem__("currentPlayer", 3),
        lambda d: d["players"][1].update(x=4, y=0),
        lambda d: d["walls"][0].__setitem__(0, 7),
        lambda d: d.__setitem__("winner", 7),
    ],
)
def test_snapshot_dict_validation(mutate):
    data = state_to_dict(engine.new_game())
    mutate(data)

    with pytest.raises(StateFormatError):
        state_from_dict(data)


def snapshot_with_walls(*walls, p1=(4, 0)):
    data = state_to_dict(engine.new_game())
    data["players"][0].update(x=p1[0], y=p1[1])
    for wx, wy, direction in walls:
        data["walls"][wy][wx] = int(direction)
    return data


@pytest.mark.parametrize(
    "data, message",
    [
        (snapshot_with_walls((3, 3, WallDir.VERTICAL), (3, 4, WallDir.VERTICAL)), "overlaps"),
        (snapshot_with_walls((3, 3, WallDir.HORIZONTAL), (4, 3, WallDir.HORIZONTAL)), "overlaps"),
        (snapshot_with_walls((1, 0, WallDir.VERTICAL), (0, 1, WallDir.HORIZONTAL), p1=(0, 0)), "no route"),
    ],
)
def test_snapshot_dict_checks_walls_and_routes(data, message):
    with pytest.raises(StateFormatError, match=message):
        state_from_dict(data)


def test_snapshot_dict_accepts_crossing_free_walls():
    data = snapshot_with_walls((3, 3, WallDir.VERTICAL), (3, 5, WallDir.VERTICAL), (4, 3, WallDir.HORIZONTAL))

    state = state_from_dict(data)

    assert state.walls[5][3] == WallDir.VERTICAL
    assert export_state(state) == "4,0,10;4,8,10;0;3,3,V;4,3,H;3,5,V"


def test_action_dicts():
    assert action_from_dict({"type": "move", "x": 4, "y": 1}) == Move(4, 1)
    assert action_from_dict({"type": "wall", "wx": 2, "wy": 3, "dir": "H"}) == WallMove(2, 3, WallDir.HORIZONTAL)
    assert action_from_dict({"type": "wall", "wx": 2, "wy": 3, "dir": 1}) == WallMove(2, 3, WallDir.VERTICAL)
    with pytest.raises(StateFormatError):
        action_from_dict({"type": "jump", "x": 1, "y": 1})
    with pytest.raises(StateFormatError):
        action_from_dict({"type": "wall", "wx": 2, "wy": 3, "dir": "Q"})


def test_move_record_dict_keeps_origin():
    record = move_record_from_dict({"type": "move", "x": 4, "y": 2, "fromX": 4, "fromY": 1})

    assert record == MoveRecord(Move(4, 2), (4, 1))
    assert record.is_step()


def test_config_dict_round_trip_and_defaults():
    config = SearchConfig(depth=3, use_locked_distance=False, eval_params=EvaluationParams(wall_value=0.5))

    data = config_to_dict(config)
    assert data["pruneThreshold"] is None
    assert data["eval"]["wallValue"] == 0.5
    assert config_from_dict(data) == config

    partial = config_from_dict({"depth": 1, "eval": {"lockedBonus": 2}})
    assert partial.depth == 1
    assert partial.prune_threshold == math.inf
    assert partial.eval_params.locked_bonus == 2


def test_config_dict_rejects_bad_values():
    with pytest.raises(ValueError):
        config_from_dict({"depth": -2})
    with pytest.raises(ValueError):
        config_from_dict({"eval": {"bogus": 1}})
