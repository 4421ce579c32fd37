"""Game engine: move generation, wall legality and state transitions.

Rules:
- Board is 9x9; player 1 starts at (4, 0) aiming for row 8, player 2 starts
  at (4, 8) aiming for row 0. Each player holds 10 walls.
- A turn is either one orthogonal step or one wall placement.
- Stepping onto the opponent jumps straight over it; if the landing cell is
  off the board or walled off, the two side-steps around the opponent are
  offered instead.
- A wall may never leave either player without a route to its goal row.
- Turns 1 and 2 are the placement phase: each player picks a starting column
  on its home row and may not place walls.
"""

from __future__ import annotations

from collections import deque
from typing import List, Optional, Tuple

from .board import (
    BOARD_SIZE,
    DIRECTIONS,
    MAX_WALLS,
    can_place_wall_at,
    copy_walls,
    empty_walls,
    is_blocked,
    is_valid_cell,
    iter_wall_slots,
)
from .paths import UNREACHABLE, get_distance_map
from .types import Action, GameState, Move, Player, PlayerState, WallDir, WallGrid, WallMove

START_P1 = (4, 0)
START_P2 = (4, 8)


def new_game(first_player: int = Player.P1, placement_phase: bool = False) -> GameState:
    """Create a fresh game.

    Without the placement phase tokens start at the centre of their home rows
    and play begins on turn 3.
    """

    players = [
        PlayerState(START_P1[0], START_P1[1], MAX_WALLS),
        PlayerState(START_P2[0], START_P2[1], MAX_WALLS),
    ]
    if placement_phase:
        turn_number, placed = 1, [False, False]
    else:
        turn_number, placed = 3, [True, True]
    return GameState(
        players=players,
        walls=empty_walls(),
        current_player=int(first_player),
        winner=None,
        turn_number=turn_number,
        piece_placed=placed,
        first_player=int(first_player),
    )


def switch_turn(state: GameState) -> None:
    state.current_player = 1 - state.current_player
    state.turn_number += 1


# ----------------------------------------------------------------------------
# Legality
# ----------------------------------------------------------------------------


def _side_steps(dx: int, dy: int) -> Tuple[Tuple[int, int], ...]:
    if dx == 0:
        return ((-1, 0), (1, 0))
    return ((0, -1), (0, 1))


def get_valid_moves(state: GameState) -> List[Move]:
    """Return every legal token move for the player to act."""

    if state.is_placement_phase():
        home_y = Player(state.current_player).home_row
        return [Move(x, home_y, kind="place") for x in range(BOARD_SIZE)]

    me = state.current()
    opp = state.opponent()
    walls = state.walls
    moves: List[Move] = []
    for dx, dy in DIRECTIONS:
        nx, ny = me.x + dx, me.y + dy
        if not is_valid_cell(nx, ny):
            continue
        if is_blocked(walls, me.x, me.y, nx, ny):
            continue
        if (opp.x, opp.y) != (nx, ny):
            moves.append(Move(nx, ny))
            continue

        jx, jy = nx + dx, ny + dy
        if is_valid_cell(jx, jy) and not is_blocked(walls, nx, ny, jx, jy):
            moves.append(Move(jx, jy))
            continue
        for sx, sy in _side_steps(dx, dy):
            tx, ty = nx + sx, ny + sy
            if is_valid_cell(tx, ty) and not is_blocked(walls, nx, ny, tx, ty):
                moves.append(Move(tx, ty))
    return moves


def can_reach_goal_on(walls: WallGrid, x: int, y: int, goal_y: int) -> bool:
    """Breadth-first search from (x, y) until any cell of ``goal_y`` is found."""

    visited = [[False] * BOARD_SIZE for _ in range(BOARD_SIZE)]
    visited[y][x] = True
    queue = deque([(x, y)])
    while queue:
        cx, cy = queue.popleft()
        if cy == goal_y:
            return True
        for dx, dy in DIRECTIONS:
            nx, ny = cx + dx, cy + dy
            if not is_valid_cell(nx, ny) or visited[ny][nx]:
                continue
            if is_blocked(walls, cx, cy, nx, ny):
                continue
            visited[ny][nx] = True
            queue.append((nx, ny))
    return False


def can_reach_goal(state: GameState, player: int) -> bool:
    me = state.players[player]
    return can_reach_goal_on(state.walls, me.x, me.y, Player(player).goal_row)


def can_place_wall_basic(state: GameState, wx: int, wy: int, direction: WallDir) -> bool:
    """Local placement checks: phase, range, stock, occupancy and collinear overlap."""

    if state.is_placement_phase():
        return False
    if state.current().walls_left <= 0:
        return False
    return can_place_wall_at(state.walls, wx, wy, direction)


def can_place_wall(state: GameState, wx: int, wy: int, direction: WallDir) -> bool:
    """Full placement check, including route preservation for both players.

    The candidate is tried on a copy of the wall grid; ``state`` is untouched.
    """

    if not can_place_wall_basic(state, wx, wy, direction):
        return False
    trial = copy_walls(state.walls)
    trial[wy][wx] = direction
    for index, player in enumerate(state.players):
        if not can_reach_goal_on(trial, player.x, player.y, Player(index).goal_row):
            return False
    return True


def get_legal_walls(state: GameState) -> List[WallMove]:
    if state.current().walls_left <= 0:
        return []
    return [
        WallMove(wx, wy, direction)
        for wx, wy, direction in iter_wall_slots()
        if can_place_wall(state, wx, wy, direction)
    ]


def get_all_legal_moves(state: GameState) -> List[Action]:
    """Token moves followed by every legal wall placement."""

    moves: List[Action] = list(get_valid_moves(state))
    moves.extend(get_legal_walls(state))
    return moves


def evaluate_wall_placement(state: GameState, wx: int, wy: int, direction: WallDir) -> Optional[int]:
    """One-ply wall value for the player to act.

    Returns how much the wall lengthens the opponent's route minus how much it
    lengthens the mover's own, or ``None`` if the wall is illegal or would cut
    off a player.
    """

    if state.current().walls_left <= 0:
        return None
    if not can_place_wall_at(state.walls, wx, wy, direction):
        return None

    p0, p1 = state.players
    before0 = get_distance_map(state.walls, Player.P1.goal_row)[p0.y][p0.x]
    before1 = get_distance_map(state.walls, Player.P2.goal_row)[p1.y][p1.x]

    trial = copy_walls(state.walls)
    trial[wy][wx] = direction
    after0 = get_distance_map(trial, Player.P1.goal_row)[p0.y][p0.x]
    after1 = get_distance_map(trial, Player.P2.goal_row)[p1.y][p1.x]
    if after0 == UNREACHABLE or after1 == UNREACHABLE:
        return None

    delta0 = after0 - before0
    delta1 = after1 - before1
    if state.current_player == Player.P1:
        return delta1 - delta0
    return delta0 - delta1


def get_all_wall_evaluations(state: GameState) -> List[Tuple[WallMove, int]]:
    evaluations: List[Tuple[WallMove, int]] = []
    for wx, wy, direction in iter_wall_slots():
        score = evaluate_wall_placement(state, wx, wy, direction)
        if score is not None:
            evaluations.append((WallMove(wx, wy, direction), score))
    return evaluations


# ----------------------------------------------------------------------------
# Transitions
# ----------------------------------------------------------------------------


def check_victory(state: GameState) -> Optional[int]:
    if state.players[Player.P1].y == Player.P1.goal_row:
        return int(Player.P1)
    if state.players[Player.P2].y == Player.P2.goal_row:
        return int(Player.P2)
    return None


def winner(state: GameState) -> Optional[int]:
    """Return the winner if the game is terminal."""

    if state.winner is not None:
        return state.winner
    return check_victory(state)


def is_game_over(state: GameState) -> bool:
    return winner(state) is not None


def execute_move(state: GameState, x: int, y: int) -> None:
    """Move (or place) the current player's token in place.

    The caller must have checked the move against :func:`get_valid_moves`.
    """

    player = state.current()
    if state.is_placement_phase():
        player.x, player.y = x, y
        state.piece_placed[state.current_player] = True
        switch_turn(state)
        return

    player.x, player.y = x, y
    victor = check_victory(state)
    if victor is not None:
        state.winner = victor
        return
    switch_turn(state)


def execute_wall_placement(state: GameState, wx: int, wy: int, direction: WallDir) -> None:
    """Place a wall in place. The caller must have checked :func:`can_place_wall`."""

    state.walls[wy][wx] = WallDir(direction)
    state.current().walls_left -= 1
    switch_turn(state)


def execute_action(state: GameState, action: Action) -> None:
    if isinstance(action, WallMove):
        execute_wall_placement(state, action.wx, action.wy, action.direction)
    else:
        execute_move(state, action.x, action.y)


def apply_move_to_state(state: GameState, action: Action) -> GameState:
    """Apply an action to a copy of ``state`` and return the copy."""

    next_state = state.clone()
    mover = next_state.current_player
    if isinstance(action, WallMove):
        next_state.walls[action.wy][action.wx] = WallDir(action.direction)
        next_state.players[mover].walls_left -= 1
    else:
        next_state.players[mover].x = action.x
        next_state.players[mover].y = action.y
        if action.kind == "place":
            next_state.piece_placed[mover] = True
        victor = check_victory(next_state)
        if victor is not None:
            next_state.winner = victor

    if next_state.winner is None:
        next_state.current_player = 1 - mover
        next_state.turn_number += 1
    return next_state


def is_legal_action(state: GameState, action: Action) -> bool:
    if is_game_over(state):
        return False
    if isinstance(action, WallMove):
        return can_place_wall(state, action.wx, action.wy, action.direction)
    return any(m.x == action.x and m.y == action.y for m in get_valid_moves(state))
