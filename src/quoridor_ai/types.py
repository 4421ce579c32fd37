"""Core data structures for the wall-placement board game.

Rule reminders:
- Board is 9x9 with coordinates (x, y); y grows toward player 2's side.
- Walls are anchored on the 8x8 grid of intersections, stored as ``walls[wy][wx]``.
- Player 1 (index 0) starts on row 0 and races to row 8; player 2 does the reverse.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Optional, Tuple, Union


Coord = Tuple[int, int]


class WallDir(IntEnum):
    """Contents of a wall intersection."""

    NONE = 0
    VERTICAL = 1
    HORIZONTAL = 2

    @property
    def tag(self) -> str:
        return {WallDir.VERTICAL: "V", WallDir.HORIZONTAL: "H"}.get(self, "-")

    @classmethod
    def from_tag(cls, tag: str) -> "WallDir":
        if tag == "V":
            return cls.VERTICAL
        if tag == "H":
            return cls.HORIZONTAL
        raise ValueError(f"Unknown wall orientation '{tag}'")


WallGrid = List[List[WallDir]]


class Player(IntEnum):
    """Players in the game; the integer value is the player index."""

    P1 = 0
    P2 = 1

    def opponent(self) -> "Player":
        """Return the opposing player."""

        return Player.P2 if self is Player.P1 else Player.P1

    @property
    def goal_row(self) -> int:
        return 8 if self is Player.P1 else 0

    @property
    def home_row(self) -> int:
        return 0 if self is Player.P1 else 8


@dataclass
class PlayerState:
    """Token position and remaining wall stock for one player."""

    x: int
    y: int
    walls_left: int = 10

    @property
    def position(self) -> Coord:
        return (self.x, self.y)


@dataclass(frozen=True)
class Move:
    """A token step (``kind="move"``) or a starting placement (``kind="place"``)."""

    x: int
    y: int
    kind: str = "move"

    def to_dict(self) -> Dict[str, object]:
        return {"type": self.kind, "x": self.x, "y": self.y}


@dataclass(frozen=True)
class WallMove:
    """Placement of a wall at intersection (wx, wy)."""

    wx: int
    wy: int
    direction: WallDir

    kind = "wall"

    def to_dict(self) -> Dict[str, object]:
        return {"type": "wall", "wx": self.wx, "wy": self.wy, "dir": self.direction.tag}


Action = Union[Move, WallMove]


@dataclass(frozen=True)
class MoveRecord:
    """An action a player played, with the cell the token left for steps."""

    action: Action
    from_xy: Optional[Coord] = None

    def is_step(self) -> bool:
        return isinstance(self.action, Move) and self.action.kind == "move" and self.from_xy is not None


@dataclass
class GameState:
    """Complete game state.

    ``walls`` is an 8x8 matrix of :class:`WallDir` indexed ``walls[wy][wx]``.
    Turns 1 and 2 form the placement phase in which each player only picks a
    starting column on their home row.
    """

    players: List[PlayerState]
    walls: WallGrid
    current_player: int = 0
    winner: Optional[int] = None
    turn_number: int = 3
    piece_placed: List[bool] = field(default_factory=lambda: [True, True])
    first_player: int = 0

    def clone(self) -> "GameState":
        """Return a deep copy of the state."""

        return GameState(
            players=[PlayerState(p.x, p.y, p.walls_left) for p in self.players],
            walls=[row[:] for row in self.walls],
            current_player=self.current_player,
            winner=self.winner,
            turn_number=self.turn_number,
            piece_placed=list(self.piece_placed),
            first_player=self.first_player,
        )

    def is_placement_phase(self) -> bool:
        return self.turn_number <= 2

    def current(self) -> PlayerState:
        return self.players[self.current_player]

    def opponent(self) -> PlayerState:
        return self.players[1 - self.current_player]
