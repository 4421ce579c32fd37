"""Game controller for interactive or scripted play.

The controller owns the authoritative :class:`GameState`. Agents only ever
see clones of it, and every applied action is recorded so it can be undone.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from . import engine
from .agents import Agent, GreedyAgent
from .move_input import parse_move_text
from .state_format import ImportResult, export_state, import_state
from .types import Action, GameState, Move, MoveRecord, Player, WallMove

logger = logging.getLogger(__name__)


@dataclass
class HistoryEntry:
    """State before an action, plus the action and the per-player last moves at that time."""

    before: GameState
    record: MoveRecord
    player: int
    last_moves: Dict[int, MoveRecord]


class GameController:
    """Manage a single game: agents, the authoritative state, history and undo."""

    def __init__(
        self,
        p1_agent: Optional[Agent] = None,
        p2_agent: Optional[Agent] = None,
        first: Player = Player.P1,
        placement_phase: bool = False,
    ) -> None:
        self.agents: Dict[int, Optional[Agent]] = {Player.P1: p1_agent, Player.P2: p2_agent}
        self._first = first
        self._placement_phase = placement_phase
        self.state: GameState
        self.history: List[HistoryEntry]
        self.last_moves: Dict[int, MoveRecord]
        self.new_game()

    def new_game(self, first: Optional[Player] = None, placement_phase: Optional[bool] = None) -> None:
        """Start a new game, optionally changing who moves first or the placement phase."""

        if first is not None:
            self._first = first
        if placement_phase is not None:
            self._placement_phase = placement_phase
        self.state = engine.new_game(self._first, placement_phase=self._placement_phase)
        self.history = []
        self.last_moves = {}

    def reset(self) -> None:
        self.new_game()

    def winner(self) -> Optional[int]:
        return engine.winner(self.state)

    def is_over(self) -> bool:
        return engine.is_game_over(self.state)

    def legal_moves(self) -> List[Action]:
        if self.is_over():
            return []
        return engine.get_all_legal_moves(self.state)

    def apply_human_move(self, action: Action) -> GameState:
        """Apply ``action`` for the side to move, raising ``ValueError`` if it is illegal."""

        if not engine.is_legal_action(self.state, action):
            raise ValueError("illegal move")
        return self._apply_action(action)

    def apply_text_move(self, raw: str) -> Action:
        """Parse and apply a move string against the current state."""

        parsed = parse_move_text(raw)
        if isinstance(parsed, Move) and self.state.is_placement_phase():
            parsed = Move(parsed.x, parsed.y, kind="place")
        self.apply_human_move(parsed)
        return parsed

    def _apply_action(self, action: Action) -> GameState:
        player = self.state.current_player
        mover = self.state.current()
        from_xy = None
        if isinstance(action, Move) and not self.state.is_placement_phase():
            from_xy = mover.position
        record = MoveRecord(action, from_xy)

        self.history.append(
            HistoryEntry(
                before=self.state.clone(),
                record=record,
                player=player,
                last_moves=dict(self.last_moves),
            )
        )
        engine.execute_action(self.state, action)
        self.last_moves[player] = record
        return self.state

    def can_undo(self, count: int = 1) -> bool:
        return count >= 1 and len(self.history) >= count

    def undo(self, count: int = 1) -> Optional[MoveRecord]:
        """Revert the last ``count`` actions (2 rewinds a human move and the AI reply).

        Returns the earliest reverted action, or ``None`` without changing
        anything when fewer than ``count`` actions were played.
        """

        if not self.can_undo(count):
            return None
        entry = self.history[-count]
        del self.history[-count:]
        self.state = entry.before
        self.last_moves = entry.last_moves
        return entry.record

    def clear_last_moves(self) -> None:
        self.last_moves = {}

    def _current_agent(self) -> Optional[Agent]:
        return self.agents[self.state.current_player]

    def compute_ai_move(self) -> Action:
        if self.is_over():
            raise ValueError("game is over")
        agent = self._current_agent()
        if agent is None:
            raise ValueError("No agent configured for current player")
        snapshot = self.state.clone()
        try:
            move = agent.choose_move(snapshot, previous_moves=dict(self.last_moves))
        except ValueError:
            logger.warning("%s failed to choose a move; using greedy fallback", type(agent).__name__, exc_info=True)
            move = GreedyAgent(use_locked_distance=False).choose_move(self.state.clone())
        if not engine.is_legal_action(self.state, move):
            logger.warning("%s proposed illegal move %s; using greedy fallback", type(agent).__name__, move)
            move = GreedyAgent(use_locked_distance=False).choose_move(self.state.clone())
        return move

    def step_ai(self) -> Action:
        move = self.compute_ai_move()
        self._apply_action(move)
        return move

    def export_state(self) -> str:
        return export_state(self.state)

    def import_state(self, text: str) -> ImportResult:
        """Replace the game with an imported position; on failure the current game is kept."""

        result = import_state(text)
        if result.success and result.state is not None:
            self.state = result.state
            self.history = []
            self.last_moves = {}
        return result

    def move_log(self) -> List[str]:
        """Human-readable list of the actions played so far."""

        lines = []
        for ply, entry in enumerate(self.history, start=1):
            action = entry.record.action
            if isinstance(action, WallMove):
                text = f"wall {action.wx},{action.wy},{action.direction.tag}"
            else:
                text = f"{action.kind} {action.x},{action.y}"
            lines.append(f"{ply}. P{entry.player + 1} {text}")
        return lines
