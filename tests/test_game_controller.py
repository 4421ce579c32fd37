import pytest

from quoridor_ai import engine
from quoridor_ai.agents import Agent, GreedyAgent, MinimaxAgent
from quoridor_ai.game_controller import GameController
from quoridor_ai.search import SearchConfig
from quoridor_ai.types import Move, MoveRecord, Player, WallDir, WallMove


class ScriptedAgent(Agent):
    def __init__(self, move):
        self.move = move
        self.seen_previous = None

    def choose_move(self, state, previous_moves=None):
        self.seen_previous = previous_moves
        return self.move


class FailingAgent(Agent):
    def choose_move(self, state, previous_moves=None):
        raise ValueError("no idea")


def test_illegal_human_move_raises_and_keeps_state():
    controller = GameController()
    before = controller.state.clone()

    with pytest.raises(ValueError, match="illegal move"):
        controller.apply_human_move(Move(4, 2))

    assert controller.state == before
    assert controller.history == []


def test_text_moves_and_walls():
    controller = GameController()

    controller.apply_text_move("4,1")
    controller.apply_text_move("wall 3,3,H")

    assert controller.state.players[0].position == (4, 1)
    assert controller.state.walls[3][3] == WallDir.HORIZONTAL
    assert controller.state.players[1].walls_left == 9
    assert controller.state.current_player == Player.P1
    assert controller.move_log() == ["1. P1 move 4,1", "2. P2 wall 3,3,H"]


def test_last_moves_record_origin_of_steps_only():
    controller = GameController()

    controller.apply_human_move(Move(4, 1))
    controller.apply_human_move(WallMove(0, 0, WallDir.VERTICAL))

    assert controller.last_moves[Player.P1] == MoveRecord(Move(4, 1), (4, 0))
    assert controller.last_moves[Player.P2] == MoveRecord(WallMove(0, 0, WallDir.VERTICAL))
    assert not controller.last_moves[Player.P2].is_step()


def test_undo_restores_state_and_last_moves():
    controller = GameController()
    initial = controller.state.clone()
    controller.apply_human_move(Move(4, 1))
    controller.apply_human_move(Move(4, 7))

    record = controller.undo()

    assert record == MoveRecord(Move(4, 7), (4, 8))
    assert controller.state.players[1].position == (4, 8)
    assert controller.state.current_player == Player.P2
    assert Player.P2 not in controller.last_moves

    controller.undo()
    assert controller.state == initial
    assert controller.undo() is None


def test_undo_two_plies_rewinds_human_and_ai_reply():
    agent = MinimaxAgent(SearchConfig(depth=1, use_locked_distance=False))
    controller = GameController(p2_agent=agent)
    controller.apply_human_move(Move(4, 1))
    controller.step_ai()
    before_second = controller.state.clone()
    last_before = dict(controller.last_moves)
    step = next(m for m in controller.legal_moves() if isinstance(m, Move))
    controller.apply_human_move(step)
    controller.step_ai()

    assert not controller.can_undo(5)
    assert controller.undo(5) is None
    assert len(controller.history) == 4

    record = controller.undo(2)

    assert record == MoveRecord(step, (4, 1))
    assert controller.state == before_second
    assert controller.state.current_player == Player.P1
    assert controller.last_moves == last_before
    assert controller.can_undo(2)
    assert not controller.can_undo(0)


def test_placement_phase_by_text():
    controller = GameController(placement_phase=True)

    controller.apply_text_move("2,0")
    controller.apply_text_move("place 6,8")

    assert controller.state.players[0].position == (2, 0)
    assert controller.state.players[1].position == (6, 8)
    assert controller.state.piece_placed == [True, True]
    assert not controller.state.is_placement_phase()
    assert not controller.last_moves[Player.P1].is_step()

    with pytest.raises(ValueError):
        controller.apply_text_move("2,2")


def test_step_ai_uses_agent_and_passes_last_moves():
    agent = MinimaxAgent(SearchConfig(depth=1, use_locked_distance=False))
    controller = GameController(agent, agent)

    move = controller.step_ai()

    assert move == Move(4, 1)
    assert controller.state.current_player == Player.P2
    assert agent.last_stats is not None

    scripted = ScriptedAgent(Move(4, 7))
    controller.agents[Player.P2] = scripted
    controller.step_ai()
    assert scripted.seen_previous == {Player.P1: MoveRecord(Move(4, 1), (4, 0))}


def test_compute_ai_move_falls_back_to_greedy():
    controller = GameController(FailingAgent(), ScriptedAgent(Move(0, 0)))
    expected = GreedyAgent(use_locked_distance=False).choose_move(controller.state.clone())

    assert controller.compute_ai_move() == expected

    controller.step_ai()
    move = controller.compute_ai_move()
    assert engine.is_legal_action(controller.state, move)


def test_compute_ai_move_requires_agent():
    controller = GameController()

    with pytest.raises(ValueError):
        controller.compute_ai_move()


def test_import_failure_keeps_current_game():
    controller = GameController()
    controller.apply_human_move(Move(4, 1))
    before = controller.state.clone()

    result = controller.import_state("4,0,10;4,8,10;0;3,3,V;3,3,H")

    assert not result.success
    assert controller.state == before
    assert len(controller.history) == 1


def test_import_success_resets_history():
    controller = GameController()
    controller.apply_human_move(Move(4, 1))

    result = controller.import_state("2,3,7;6,5,9;1;3,3,V")

    assert result.success
    assert controller.history == []
    assert controller.last_moves == {}
    assert controller.export_state() == "2,3,7;6,5,9;1;3,3,V"


def test_legal_moves_empty_after_win():
    controller = GameController()
    controller.import_state("4,7,10;0,4,10;0")

    controller.apply_human_move(Move(4, 8))

    assert controller.is_over()
    assert controller.winner() == Player.P1
    assert controller.legal_moves() == []
