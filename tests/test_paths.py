import pytest

from quoridor_ai import engine, paths
from quoridor_ai.board import empty_walls
from quoridor_ai.types import GameState, PlayerState, WallDir


def _walls_with(*entries):
    walls = empty_walls()
    for wx, wy, direction in entries:
        walls[wy][wx] = direction
    return walls


@pytest.mark.parametrize("goal_y", [0, 8])
def test_empty_board_distance_is_row_difference(goal_y):
    distance = paths.get_distance_map(empty_walls(), goal_y)

    for y in range(9):
        for x in range(9):
            assert distance[y][x] == abs(goal_y - y)


def test_wall_lengthens_distance_locally():
    walls = _walls_with((4, 3, WallDir.HORIZONTAL))

    distance = paths.get_distance_map(walls, 8)

    assert distance[3][4] == 6
    assert distance[3][5] == 6
    assert distance[3][3] == 5
    assert distance[0][4] == 9


def test_enclosed_cells_are_unreachable():
    walls = _walls_with((1, 0, WallDir.VERTICAL), (0, 1, WallDir.HORIZONTAL))

    distance = paths.get_distance_map(walls, 8)

    assert distance[0][0] == paths.UNREACHABLE
    assert distance[1][1] == paths.UNREACHABLE
    assert distance[0][2] == 8
    assert paths.get_shortest_path(walls, 0, 0, 8) is None
    assert paths.count_shortest_paths(walls, 0, 0, 8) == 0


def test_shortest_path_on_empty_board_walks_straight_down():
    path = paths.get_shortest_path(empty_walls(), 4, 0, 8)

    assert path == [(4, y) for y in range(9)]
    assert len(path) - 1 == 8


def test_shortest_path_detours_around_wall_in_probe_order():
    walls = _walls_with((4, 3, WallDir.HORIZONTAL))

    path = paths.get_shortest_path(walls, 4, 0, 8)

    assert path[:5] == [(4, 0), (4, 1), (4, 2), (4, 3), (3, 3)]
    assert path[-1] == (3, 8)
    assert len(path) == 10
    for (ax, ay), (bx, by) in zip(path, path[1:]):
        assert abs(ax - bx) + abs(ay - by) == 1


def test_shortest_path_from_goal_row_is_single_cell():
    assert paths.get_shortest_path(empty_walls(), 2, 8, 8) == [(2, 8)]


def test_count_shortest_paths_stops_at_two():
    assert paths.count_shortest_paths(empty_walls(), 4, 0, 8) == 1
    assert paths.count_shortest_paths(empty_walls(), 4, 8, 8) == 1

    walls = _walls_with((4, 3, WallDir.HORIZONTAL))
    assert paths.count_shortest_paths(walls, 4, 0, 8) == 2


def test_count_shortest_paths_treats_long_routes_as_single():
    # Three walled lanes force a 24-step unique route before the open area
    # where the path splits.
    h = WallDir.HORIZONTAL
    walls = _walls_with(
        (0, 0, h), (2, 0, h), (4, 0, h), (6, 0, h),
        (1, 1, h), (3, 1, h), (5, 1, h), (7, 1, h),
        (0, 2, h), (2, 2, h), (4, 2, h),
        (0, 5, h), (2, 5, h), (4, 5, h), (6, 5, h),
    )

    assert paths.get_distance_map(walls, 8)[0][0] == 32
    assert paths.count_shortest_paths(walls, 6, 2, 8) == 2
    assert paths.count_shortest_paths(walls, 0, 2, 8) == 2
    assert paths.count_shortest_paths(walls, 0, 0, 8) == 1
    assert paths.PATH_COUNT_DEPTH_LIMIT == 20


def test_zero_opponent_walls_locks_distance():
    assert paths.is_distance_locked_at(empty_walls(), 4, 7, 8, 0)
    assert paths.distance_to_goal(empty_walls(), 4, 7, 8) == 1


def test_goal_row_is_always_locked():
    assert paths.is_distance_locked_at(empty_walls(), 0, 8, 8, 10)


def test_open_single_path_is_not_locked():
    assert not paths.is_distance_locked_at(empty_walls(), 4, 7, 8, 10)


def test_multiple_paths_are_not_locked():
    walls = _walls_with((4, 3, WallDir.HORIZONTAL))

    assert not paths.is_distance_locked_at(walls, 4, 0, 8, 3)


def test_locked_distance_for_players():
    state = engine.new_game()
    state.players[1].walls_left = 0

    assert paths.get_locked_distance(state, 0) == 8
    assert paths.get_locked_distance(state, 1) == paths.UNREACHABLE
    assert paths.is_distance_locked(state, 0)


def test_locked_distance_map_without_opponent_walls_matches_distance_map():
    state = GameState(
        players=[PlayerState(4, 0, 10), PlayerState(4, 8, 0)],
        walls=_walls_with((2, 2, WallDir.VERTICAL)),
    )

    assert paths.get_locked_distance_map(state, 0) == paths.get_distance_map(state.walls, 8)
