"""Distance oracle: goal distance maps, canonical shortest paths and locked distances.

Distances are computed by a multi-source BFS seeded from every cell of the
goal row, so one map answers "how far is this cell from the goal" for the
whole board. A distance is *locked* when no single wall the opponent could
legally add right now would change it.
"""

from __future__ import annotations

from collections import deque
from typing import List, Optional

from .board import BOARD_SIZE, DIRECTIONS, copy_walls, can_place_wall_at, is_blocked, is_valid_cell, iter_wall_slots
from .types import Coord, GameState, Player, WallGrid

UNREACHABLE = -1
PATH_COUNT_DEPTH_LIMIT = 20

DistanceMap = List[List[int]]


def get_distance_map(walls: WallGrid, goal_y: int) -> DistanceMap:
    """Return ``dist[y][x]``: steps from (x, y) to row ``goal_y``, or ``UNREACHABLE``."""

    distance = [[UNREACHABLE] * BOARD_SIZE for _ in range(BOARD_SIZE)]
    queue = deque()
    for x in range(BOARD_SIZE):
        distance[goal_y][x] = 0
        queue.append((x, goal_y))

    while queue:
        cx, cy = queue.popleft()
        next_dist = distance[cy][cx] + 1
        for dx, dy in DIRECTIONS:
            nx, ny = cx + dx, cy + dy
            if not is_valid_cell(nx, ny):
                continue
            if distance[ny][nx] != UNREACHABLE:
                continue
            if is_blocked(walls, cx, cy, nx, ny):
                continue
            distance[ny][nx] = next_dist
            queue.append((nx, ny))
    return distance


def distance_to_goal(walls: WallGrid, x: int, y: int, goal_y: int) -> int:
    return get_distance_map(walls, goal_y)[y][x]


def get_shortest_path(walls: WallGrid, x: int, y: int, goal_y: int) -> Optional[List[Coord]]:
    """Return the canonical shortest path from (x, y) to the goal row, start included.

    Each step goes to the first neighbour (up, down, left, right) whose
    distance is exactly one less. Returns ``None`` when the goal is unreachable.
    """

    distance_map = get_distance_map(walls, goal_y)
    if distance_map[y][x] == UNREACHABLE:
        return None

    path: List[Coord] = [(x, y)]
    cx, cy = x, y
    while cy != goal_y:
        current = distance_map[cy][cx]
        for dx, dy in DIRECTIONS:
            nx, ny = cx + dx, cy + dy
            if not is_valid_cell(nx, ny):
                continue
            if is_blocked(walls, cx, cy, nx, ny):
                continue
            if distance_map[ny][nx] == current - 1:
                cx, cy = nx, ny
                path.append((cx, cy))
                break
    return path


def count_shortest_paths(walls: WallGrid, x: int, y: int, goal_y: int, distance_map: Optional[DistanceMap] = None) -> int:
    """Count shortest paths from (x, y), stopping as soon as two are found.

    Recursion deeper than ``PATH_COUNT_DEPTH_LIMIT`` counts as a single path.
    """

    if distance_map is None:
        distance_map = get_distance_map(walls, goal_y)
    dist = distance_map[y][x]
    if dist == 0:
        return 1
    if dist == UNREACHABLE:
        return 0
    memo = [[-1] * BOARD_SIZE for _ in range(BOARD_SIZE)]
    return _count_paths(walls, x, y, distance_map, memo, 0)


def _count_paths(walls: WallGrid, x: int, y: int, distance_map: DistanceMap, memo: List[List[int]], depth: int) -> int:
    dist = distance_map[y][x]
    if dist == 0:
        return 1
    if memo[y][x] != -1:
        return memo[y][x]
    if depth > PATH_COUNT_DEPTH_LIMIT:
        return 1

    count = 0
    for dx, dy in DIRECTIONS:
        nx, ny = x + dx, y + dy
        if not is_valid_cell(nx, ny):
            continue
        if is_blocked(walls, x, y, nx, ny):
            continue
        if distance_map[ny][nx] == dist - 1:
            count += _count_paths(walls, nx, ny, distance_map, memo, depth + 1)
            if count >= 2:
                memo[y][x] = count
                return count
    memo[y][x] = count
    return count


def is_distance_locked_at(walls: WallGrid, x: int, y: int, goal_y: int, opponent_walls_left: int) -> bool:
    """Whether the distance from (x, y) to ``goal_y`` survives any single opponent wall.

    Re-runs the distance map for every grid-legal wall candidate, so callers
    should not use it in a per-cell loop outside :func:`get_locked_distance_map`.
    """

    if opponent_walls_left == 0:
        return True

    distance_map = get_distance_map(walls, goal_y)
    current = distance_map[y][x]
    if current == UNREACHABLE:
        return False
    if current == 0:
        return True

    if count_shortest_paths(walls, x, y, goal_y, distance_map) > 1:
        return False

    for wx, wy, direction in iter_wall_slots():
        if not can_place_wall_at(walls, wx, wy, direction):
            continue
        trial = copy_walls(walls)
        trial[wy][wx] = direction
        if get_distance_map(trial, goal_y)[y][x] != current:
            return False
    return True


def is_distance_locked(state: GameState, player: int) -> bool:
    me = state.players[player]
    opponent = state.players[1 - player]
    goal_y = Player(player).goal_row
    return is_distance_locked_at(state.walls, me.x, me.y, goal_y, opponent.walls_left)


def get_locked_distance(state: GameState, player: int) -> int:
    """Return the player's locked distance to goal, or ``UNREACHABLE`` if not locked."""

    if not is_distance_locked(state, player):
        return UNREACHABLE
    me = state.players[player]
    return distance_to_goal(state.walls, me.x, me.y, Player(player).goal_row)


def get_locked_distance_map(state: GameState, player: int) -> DistanceMap:
    """Locked distance for every cell from ``player``'s point of view (``UNREACHABLE`` if not locked)."""

    opponent = state.players[1 - player]
    goal_y = Player(player).goal_row
    distance_map = get_distance_map(state.walls, goal_y)
    locked = [[UNREACHABLE] * BOARD_SIZE for _ in range(BOARD_SIZE)]
    for y in range(BOARD_SIZE):
        for x in range(BOARD_SIZE):
            if distance_map[y][x] < 0:
                continue
            if is_distance_locked_at(state.walls, x, y, goal_y, opponent.walls_left):
                locked[y][x] = distance_map[y][x]
    return locked
