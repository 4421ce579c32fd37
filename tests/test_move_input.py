import pytest

from quoridor_ai.move_input import parse_move_text
from quoridor_ai.types import Move, WallDir, WallMove


@pytest.mark.parametrize("text", ["4,1", "4 1", "(4,1)", "move 4 1", " M 4, 1 "])
def test_token_steps(text):
    assert parse_move_text(text) == Move(4, 1)


def test_placement_keyword():
    assert parse_move_text("place 3,0") == Move(3, 0, kind="place")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("wall 3,3,V", WallMove(3, 3, WallDir.VERTICAL)),
        ("w 3 3 h", WallMove(3, 3, WallDir.HORIZONTAL)),
        ("3,3,H", WallMove(3, 3, WallDir.HORIZONTAL)),
        ("(0,7,v)", WallMove(0, 7, WallDir.VERTICAL)),
    ],
)
def test_walls(text, expected):
    assert parse_move_text(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "hello", "4", "9,0", "4,9", "wall 8,0,V", "wall 3,3,D"])
def test_rejects_bad_input(text):
    with pytest.raises(ValueError):
        parse_move_text(text)
