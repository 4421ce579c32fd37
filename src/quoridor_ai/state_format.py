"""State import/export.

Two encodings are supported:

- the compact state string ``"x,y,walls;x,y,walls;current[;wx,wy,V|H...]"``
  used for sharing positions, with walls listed in row-major order;
- plain dict snapshots (``state_to_dict``/``state_from_dict`` and friends)
  used to pass states, actions and search settings across the worker
  boundary without sharing mutable objects.
"""
from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from .board import MAX_WALLS, WALL_GRID_SIZE, can_place_wall_at, empty_walls, is_valid_cell, is_valid_wall_slot
from .engine import can_reach_goal_on
from .evaluation import EvaluationParams
from .search import SearchConfig
from .types import Action, GameState, Move, MoveRecord, Player, PlayerState, WallDir, WallGrid, WallMove


class StateFormatError(ValueError):
    """Raised when a state string or snapshot cannot be decoded."""


@dataclass
class ImportResult:
    success: bool
    state: Optional[GameState] = None
    error: Optional[str] = None


def _parse_int(text: str, what: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        raise StateFormatError(f"{what}: '{text}' is not an integer") from None


def _parse_player(part: str, label: str) -> PlayerState:
    fields = part.split(",")
    if len(fields) != 3:
        raise StateFormatError(f"{label}: expected 'x,y,walls'")
    x, y, walls_left = (_parse_int(value, label) for value in fields)
    if not is_valid_cell(x, y):
        raise StateFormatError(f"{label}: position ({x}, {y}) is off the board")
    if not 0 <= walls_left <= MAX_WALLS:
        raise StateFormatError(f"{label}: wall count {walls_left} is out of range")
    return PlayerState(x, y, walls_left)


def _add_wall(walls: WallGrid, wx: int, wy: int, direction: WallDir, label: str) -> None:
    if walls[wy][wx] != WallDir.NONE:
        raise StateFormatError(f"{label}: intersection ({wx}, {wy}) is already taken")
    if not can_place_wall_at(walls, wx, wy, direction):
        raise StateFormatError(f"{label}: overlaps a neighbouring wall")
    walls[wy][wx] = direction


def _check_routes(players: List[PlayerState], walls: WallGrid) -> None:
    for index, player in enumerate(players):
        if not can_reach_goal_on(walls, player.x, player.y, Player(index).goal_row):
            raise StateFormatError(f"P{index + 1} has no route to its goal row")


def parse_state(text: str) -> GameState:
    """Decode a state string, raising :class:`StateFormatError` on bad input."""

    parts = text.strip().split(";")
    if len(parts) < 3:
        raise StateFormatError("Expected at least 3 ';'-separated parts")

    p1 = _parse_player(parts[0], "P1")
    p2 = _parse_player(parts[1], "P2")
    if p1.position == p2.position:
        raise StateFormatError("Both players occupy the same cell")

    turn = _parse_int(parts[2], "Turn")
    if turn not in (0, 1):
        raise StateFormatError(f"Turn must be 0 or 1, got {turn}")

    walls = empty_walls()
    for index, part in enumerate(parts[3:], start=1):
        if part == "":
            continue
        fields = part.split(",")
        if len(fields) != 3:
            raise StateFormatError(f"Wall {index}: expected 'wx,wy,V|H'")
        wx = _parse_int(fields[0], f"Wall {index}")
        wy = _parse_int(fields[1], f"Wall {index}")
        if not is_valid_wall_slot(wx, wy):
            raise StateFormatError(f"Wall {index}: position ({wx}, {wy}) is out of range")
        try:
            direction = WallDir.from_tag(fields[2].strip())
        except ValueError:
            raise StateFormatError(f"Wall {index}: orientation must be V or H") from None
        _add_wall(walls, wx, wy, direction, f"Wall {index}")

    _check_routes([p1, p2], walls)

    return GameState(players=[p1, p2], walls=walls, current_player=turn)


def import_state(text: str) -> ImportResult:
    """Decode a state string into an :class:`ImportResult`; never raises."""

    try:
        state = parse_state(text)
    except StateFormatError as exc:
        return ImportResult(success=False, error=str(exc))
    return ImportResult(success=True, state=state)


def export_state(state: GameState) -> str:
    parts = [f"{p.x},{p.y},{p.walls_left}" for p in state.players]
    parts.append(str(state.current_player))
    for wy in range(WALL_GRID_SIZE):
        for wx in range(WALL_GRID_SIZE):
            cell = state.walls[wy][wx]
            if cell != WallDir.NONE:
                parts.append(f"{wx},{wy},{cell.tag}")
    return ";".join(parts)


def format_state_for_display(state: GameState) -> str:
    """Indented JSON view of players, turn and walls."""

    payload = {
        "players": [{"x": p.x, "y": p.y, "wallsLeft": p.walls_left} for p in state.players],
        "currentPlayer": state.current_player,
        "walls": [
            {"x": wx, "y": wy, "dir": state.walls[wy][wx].tag}
            for wy in range(WALL_GRID_SIZE)
            for wx in range(WALL_GRID_SIZE)
            if state.walls[wy][wx] != WallDir.NONE
        ],
    }
    return json.dumps(payload, indent=2)


# ----------------------------------------------------------------------------
# Snapshot dicts
# ----------------------------------------------------------------------------


def state_to_dict(state: GameState) -> Dict[str, Any]:
    return {
        "players": [{"x": p.x, "y": p.y, "wallsLeft": p.walls_left} for p in state.players],
        "walls": [[int(cell) for cell in row] for row in state.walls],
        "currentPlayer": state.current_player,
        "winner": state.winner,
        "turnNumber": state.turn_number,
        "piecePlaced": list(state.piece_placed),
        "firstPlayer": state.first_player,
    }


def state_from_dict(data: Mapping[str, Any]) -> GameState:
    """Rebuild a state from :func:`state_to_dict` output, validating its shape."""

    try:
        players = [PlayerState(int(p["x"]), int(p["y"]), int(p["wallsLeft"])) for p in data["players"]]
        rows = data["walls"]
        walls = [[WallDir(int(cell)) for cell in row] for row in rows]
        current = int(data["currentPlayer"])
        winner = data.get("winner")
        state = GameState(
            players=players,
            walls=walls,
            current_player=current,
            winner=None if winner is None else int(winner),
            turn_number=int(data.get("turnNumber", 3)),
            piece_placed=[bool(v) for v in data.get("piecePlaced", [True, True])],
            first_player=int(data.get("firstPlayer", 0)),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise StateFormatError(f"Malformed state snapshot: {exc}") from None

    if len(players) != 2:
        raise StateFormatError("Snapshot must contain exactly two players")
    if len(walls) != WALL_GRID_SIZE or any(len(row) != WALL_GRID_SIZE for row in walls):
        raise StateFormatError(f"Wall grid must be {WALL_GRID_SIZE}x{WALL_GRID_SIZE}")
    for p in players:
        if not is_valid_cell(p.x, p.y) or not 0 <= p.walls_left <= MAX_WALLS:
            raise StateFormatError(f"Player out of range: {p}")
    if players[0].position == players[1].position:
        raise StateFormatError("Both players occupy the same cell")
    if current not in (0, 1):
        raise StateFormatError(f"currentPlayer must be 0 or 1, got {current}")
    if state.winner not in (None, 0, 1):
        raise StateFormatError(f"winner must be 0, 1 or null, got {state.winner}")

    checked = empty_walls()
    for wy in range(WALL_GRID_SIZE):
        for wx in range(WALL_GRID_SIZE):
            if walls[wy][wx] != WallDir.NONE:
                _add_wall(checked, wx, wy, walls[wy][wx], f"Wall ({wx}, {wy})")
    _check_routes(players, walls)
    return state


def action_to_dict(action: Action) -> Dict[str, Any]:
    return action.to_dict()


def action_from_dict(data: Mapping[str, Any]) -> Action:
    try:
        kind = data["type"]
        if kind == "wall":
            direction = data["dir"]
            if isinstance(direction, str):
                direction = WallDir.from_tag(direction)
            return WallMove(int(data["wx"]), int(data["wy"]), WallDir(int(direction)))
        if kind in ("move", "place"):
            return Move(int(data["x"]), int(data["y"]), kind=kind)
    except (KeyError, TypeError, ValueError) as exc:
        raise StateFormatError(f"Malformed action: {exc}") from None
    raise StateFormatError(f"Unknown action type '{kind}'")


def move_record_to_dict(record: MoveRecord) -> Dict[str, Any]:
    payload = action_to_dict(record.action)
    if record.from_xy is not None:
        payload["fromX"], payload["fromY"] = record.from_xy
    return payload


def move_record_from_dict(data: Mapping[str, Any]) -> MoveRecord:
    action = action_from_dict(data)
    if "fromX" in data and "fromY" in data:
        return MoveRecord(action, (int(data["fromX"]), int(data["fromY"])))
    return MoveRecord(action)


def config_to_dict(config: SearchConfig) -> Dict[str, Any]:
    return {
        "depth": config.depth,
        "pruneThreshold": None if math.isinf(config.prune_threshold) else config.prune_threshold,
        "useLockedDistance": config.use_locked_distance,
        "eval": config.eval_params.to_dict(),
        "orderMoves": config.order_moves,
        "alphaBeta": config.alpha_beta,
    }


def config_from_dict(data: Mapping[str, Any], base: Optional[SearchConfig] = None) -> SearchConfig:
    """Build a :class:`SearchConfig` from a camelCase dict; missing keys come from ``base``.

    Invalid values raise ``ValueError``.
    """

    base = base or SearchConfig()
    threshold = data.get("pruneThreshold", base.prune_threshold)
    eval_data = data.get("eval")
    params = base.eval_params if eval_data is None else EvaluationParams.from_dict(eval_data, base.eval_params)
    return SearchConfig(
        depth=data.get("depth", base.depth),
        prune_threshold=math.inf if threshold is None else float(threshold),
        use_locked_distance=bool(data.get("useLockedDistance", base.use_locked_distance)),
        eval_params=params,
        order_moves=bool(data.get("orderMoves", base.order_moves)),
        alpha_beta=bool(data.get("alphaBeta", base.alpha_beta)),
    )
