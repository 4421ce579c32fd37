"""Board geometry: cell validity, wall blocking and the wall intersection grid."""

from __future__ import annotations

from typing import Iterator, Tuple

from .types import WallDir, WallGrid

BOARD_SIZE = 9
WALL_GRID_SIZE = 8
MAX_WALLS = 10

# Probe order used by every BFS and path walk: up, down, left, right.
DIRECTIONS: Tuple[Tuple[int, int], ...] = ((0, -1), (0, 1), (-1, 0), (1, 0))
WALL_ORIENTATIONS: Tuple[WallDir, ...] = (WallDir.VERTICAL, WallDir.HORIZONTAL)


def is_valid_cell(x: int, y: int) -> bool:
    return 0 <= x < BOARD_SIZE and 0 <= y < BOARD_SIZE


def is_valid_wall_slot(wx: int, wy: int) -> bool:
    return 0 <= wx < WALL_GRID_SIZE and 0 <= wy < WALL_GRID_SIZE


def empty_walls() -> WallGrid:
    return [[WallDir.NONE for _ in range(WALL_GRID_SIZE)] for _ in range(WALL_GRID_SIZE)]


def copy_walls(walls: WallGrid) -> WallGrid:
    return [row[:] for row in walls]


def has_no_walls(walls: WallGrid) -> bool:
    return all(cell == WallDir.NONE for row in walls for cell in row)


def iter_wall_slots() -> Iterator[Tuple[int, int, WallDir]]:
    """Yield every (wx, wy, direction) candidate in row-major order."""

    for wy in range(WALL_GRID_SIZE):
        for wx in range(WALL_GRID_SIZE):
            for direction in WALL_ORIENTATIONS:
                yield wx, wy, direction


def _blocked_right(walls: WallGrid, x: int, y: int) -> bool:
    # A vertical wall anchored at (x, y-1) or (x, y) covers the edge right of (x, y).
    if x >= WALL_GRID_SIZE:
        return False
    if y > 0 and walls[y - 1][x] == WallDir.VERTICAL:
        return True
    if y < WALL_GRID_SIZE and walls[y][x] == WallDir.VERTICAL:
        return True
    return False


def _blocked_down(walls: WallGrid, x: int, y: int) -> bool:
    # A horizontal wall anchored at (x-1, y) or (x, y) covers the edge below (x, y).
    if y >= WALL_GRID_SIZE:
        return False
    if x > 0 and walls[y][x - 1] == WallDir.HORIZONTAL:
        return True
    if x < WALL_GRID_SIZE and walls[y][x] == WallDir.HORIZONTAL:
        return True
    return False


def is_blocked(walls: WallGrid, x1: int, y1: int, x2: int, y2: int) -> bool:
    """Whether a wall intercepts the single orthogonal step (x1, y1) -> (x2, y2).

    Diagonal or non-adjacent pairs are never reported as blocked.
    """

    dx = x2 - x1
    dy = y2 - y1
    if dx == 1 and dy == 0:
        return _blocked_right(walls, x1, y1)
    if dx == -1 and dy == 0:
        return _blocked_right(walls, x2, y2)
    if dx == 0 and dy == 1:
        return _blocked_down(walls, x1, y1)
    if dx == 0 and dy == -1:
        return _blocked_down(walls, x2, y2)
    return False


def can_place_wall_at(walls: WallGrid, wx: int, wy: int, direction: WallDir) -> bool:
    """Grid-only placement check: range, occupancy and collinear overlap."""

    if not is_valid_wall_slot(wx, wy):
        return False
    if walls[wy][wx] != WallDir.NONE:
        return False
    if direction == WallDir.VERTICAL:
        if wy > 0 and walls[wy - 1][wx] == WallDir.VERTICAL:
            return False
        if wy < WALL_GRID_SIZE - 1 and walls[wy + 1][wx] == WallDir.VERTICAL:
            return False
    elif direction == WallDir.HORIZONTAL:
        if wx > 0 and walls[wy][wx - 1] == WallDir.HORIZONTAL:
            return False
        if wx < WALL_GRID_SIZE - 1 and walls[wy][wx + 1] == WallDir.HORIZONTAL:
            return False
    else:
        return False
    return True
