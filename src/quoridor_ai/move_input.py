"""Utilities for parsing user-entered move snippets."""
from __future__ import annotations

import re

from .board import is_valid_cell, is_valid_wall_slot
from .types import Action, Move, WallDir, WallMove

_SEP = r"\s*[,\s]\s*"
_MOVE_PATTERN = re.compile(rf"^(?:(?P<kind>MOVE|M|PLACE|P)\s*)?\(?(?P<x>\d+){_SEP}(?P<y>\d+)\)?$")
_WALL_PATTERN = re.compile(
    rf"^(?:WALL|W)\s*\(?(?P<wx>\d+){_SEP}(?P<wy>\d+){_SEP}(?P<dir>[VH])\)?$"
    rf"|^\(?(?P<wx2>\d+){_SEP}(?P<wy2>\d+){_SEP}(?P<dir2>[VH])\)?$"
)


def parse_move_text(raw: str) -> Action:
    """Parse a move string into an action.

    Accepted examples (case-insensitive):
    - "4,1", "4 1", "(4,1)", "move 4 1"   # token step to (4, 1)
    - "place 3,0"                         # starting column during placement
    - "wall 3,3,V", "w 3 3 h", "3,3,H"    # wall at intersection (3, 3)

    Raises:
        ValueError: if the text cannot be parsed or a coordinate is out of range.
    """

    text = raw.strip().upper()
    if not text:
        raise ValueError("Move text is empty")

    match = _WALL_PATTERN.match(text)
    if match:
        wx = int(match.group("wx") or match.group("wx2"))
        wy = int(match.group("wy") or match.group("wy2"))
        direction = WallDir.from_tag(match.group("dir") or match.group("dir2"))
        if not is_valid_wall_slot(wx, wy):
            raise ValueError("Wall coordinates must be between 0 and 7")
        return WallMove(wx, wy, direction)

    match = _MOVE_PATTERN.match(text)
    if not match:
        raise ValueError("Could not parse move; use formats like '4,1' or 'wall 3,3,V'")
    x, y = int(match.group("x")), int(match.group("y"))
    if not is_valid_cell(x, y):
        raise ValueError("Cell coordinates must be between 0 and 8")
    kind = "place" if match.group("kind") in ("PLACE", "P") else "move"
    return Move(x, y, kind=kind)
