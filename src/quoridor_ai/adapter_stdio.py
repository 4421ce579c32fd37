"""Stdio adapter for automated opponents.

Line protocol on stdin:

- ``STATE <state string>``: position to play from (see ``state_format``);
- ``CONFIG key=value ...``: ``depth``, ``locked`` (0/1), ``prune`` and any
  evaluation weight such as ``wallValue``;
- ``LAST <player> <x>,<y> <from_x>,<from_y>``: the last token step of player
  1 or 2, used to avoid walking straight back;
- ``CLEAR``: forget remembered last moves;
- ``GO``: answer with ``MOVE x y`` or ``WALL wx wy V|H`` on stdout.

Bad input produces a single ``ERROR <message>`` line and exit code 1.
If the search fails, runs past its budget or proposes an illegal action,
the greedy agent answers instead.

The budget bounds how long a GO waits for its answer, not how long the
process lives: a timed-out search keeps running on its worker thread and
the interpreter waits for it to finish before exiting.
"""

from __future__ import annotations

import argparse
import sys
from concurrent.futures import ThreadPoolExecutor, TimeoutError
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional

from . import engine
from .agents import GreedyAgent, MinimaxAgent, default_cpu_config
from .evaluation import EvaluationParams
from .state_format import StateFormatError, parse_state
from .types import Action, GameState, Move, MoveRecord, Player, WallMove


class AdapterInputError(Exception):
    """Raised when the adapter receives invalid input."""


def _parse_player(token: str) -> int:
    mapping = {"1": Player.P1, "P1": Player.P1, "2": Player.P2, "P2": Player.P2}
    try:
        return int(mapping[token.upper()])
    except KeyError as exc:
        raise AdapterInputError(f"Unknown player '{token}'") from exc


def _parse_xy(token: str) -> tuple:
    parts = token.split(",")
    if len(parts) != 2:
        raise AdapterInputError(f"Expected 'x,y', got '{token}'")
    try:
        return int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise AdapterInputError(f"Coordinates must be integers: '{token}'") from exc


@dataclass
class AdapterContext:
    pending_state: Optional[GameState] = None
    last_moves: Dict[int, MoveRecord] = field(default_factory=dict)


class StdioAdapter:
    """Line-oriented adapter that plays actions via stdin/stdout."""

    def __init__(
        self,
        *,
        agent: Optional[MinimaxAgent] = None,
        fallback_agent=None,
        budget_ms: Optional[int] = None,
        stdin=None,
        stdout=None,
        stderr=None,
        quiet: bool = False,
        config_overrides: Optional[Dict[str, str]] = None,
    ) -> None:
        self.agent = agent
        self.fallback_agent = fallback_agent or GreedyAgent(use_locked_distance=False)
        self.budget_ms = budget_ms
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr
        self.quiet = quiet
        self.ctx = AdapterContext()
        self._config_overrides: Dict[str, str] = dict(config_overrides or {})

    def _log(self, message: str, *, force: bool = False) -> None:
        if self.quiet and not force:
            return
        print(message, file=self.stderr)
        self.stderr.flush()

    def _emit_error_and_exit(self, message: str) -> int:
        self._log(f"ERROR {message}", force=True)
        print(f"ERROR {message}", file=self.stdout)
        self.stdout.flush()
        return 1

    def _agent_for(self, player: int) -> MinimaxAgent:
        if self.agent is not None:
            return self.agent
        config = default_cpu_config(player)
        eval_updates = {}
        try:
            for key, value in self._config_overrides.items():
                if key == "depth":
                    config = replace(config, depth=int(value))
                elif key == "locked":
                    config = replace(config, use_locked_distance=value not in ("0", "false", "no"))
                elif key == "prune":
                    config = replace(config, prune_threshold=float(value))
                else:
                    eval_updates[key] = float(value)
            if eval_updates:
                config = replace(config, eval_params=EvaluationParams.from_dict(eval_updates, config.eval_params))
        except ValueError as exc:
            raise AdapterInputError(f"Invalid CONFIG: {exc}") from exc
        return MinimaxAgent(config)

    def _choose_with_timeout(self, agent: MinimaxAgent, state: GameState):
        result: List[Optional[Action]] = [None]
        error: List[Optional[BaseException]] = [None]

        def _run():
            try:
                result[0] = agent.choose_move(state.clone(), previous_moves=dict(self.ctx.last_moves))
            except Exception as exc:  # noqa: BLE001
                error[0] = exc

        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(_run)
        timeout = None if self.budget_ms is None else self.budget_ms / 1000
        try:
            future.result(timeout=timeout)
        except TimeoutError:
            # The search cannot be interrupted; let it finish in the background.
            executor.shutdown(wait=False, cancel_futures=True)
            return None, TimeoutError("search exceeded its budget")
        else:
            executor.shutdown(wait=True)
        return result[0], error[0]

    def _select_move(self, state: GameState) -> Action:
        if engine.is_game_over(state):
            raise AdapterInputError("Game is already over")
        agent = self._agent_for(state.current_player)
        move, error = self._choose_with_timeout(agent, state)
        if error is not None or move is None or not engine.is_legal_action(state, move):
            reason = "illegal move"
            if isinstance(error, TimeoutError):
                reason = "timeout"
            elif error is not None:
                reason = f"exception ({error})"
            self._log(f"Fallback to greedy due to {reason}")
            move = self.fallback_agent.choose_move(state.clone())
            if not engine.is_legal_action(state, move):
                raise AdapterInputError("Fallback produced illegal move")
        return move

    def _handle_state(self, line: str) -> None:
        parts = line.split(maxsplit=1)
        if len(parts) < 2:
            raise AdapterInputError("STATE requires a state string")
        try:
            self.ctx.pending_state = parse_state(parts[1])
        except StateFormatError as exc:
            raise AdapterInputError(str(exc)) from exc

    def _handle_config(self, tokens: List[str]) -> None:
        for token in tokens[1:]:
            if "=" not in token:
                raise AdapterInputError(f"CONFIG entries must be key=value, got '{token}'")
            key, value = token.split("=", 1)
            self._config_overrides[key] = value
        self._agent_for(Player.P1)

    def _handle_last(self, tokens: List[str]) -> None:
        if len(tokens) != 4:
            raise AdapterInputError("LAST requires player, destination and origin")
        player = _parse_player(tokens[1])
        to_x, to_y = _parse_xy(tokens[2])
        from_x, from_y = _parse_xy(tokens[3])
        self.ctx.last_moves[player] = MoveRecord(Move(to_x, to_y), (from_x, from_y))

    def _handle_go(self) -> Action:
        state = self.ctx.pending_state
        if state is None:
            raise AdapterInputError("GO received before STATE")
        move = self._select_move(state)
        self._log(f"turn=P{state.current_player + 1} move={move}")
        if isinstance(move, WallMove):
            print(f"WALL {move.wx} {move.wy} {move.direction.tag}", file=self.stdout)
        else:
            print(f"MOVE {move.x} {move.y}", file=self.stdout)
        self.stdout.flush()
        return move

    def run(self) -> int:
        try:
            for raw_line in self.stdin:
                line = raw_line.strip()
                if not line:
                    continue
                tokens = line.split()
                cmd = tokens[0].upper()
                if cmd == "STATE":
                    self._handle_state(line)
                elif cmd == "CONFIG":
                    self._handle_config(tokens)
                elif cmd == "LAST":
                    self._handle_last(tokens)
                elif cmd == "CLEAR":
                    self.ctx.last_moves = {}
                elif cmd == "GO":
                    self._handle_go()
                else:
                    raise AdapterInputError(f"Unknown command '{cmd}'")
            return 0
        except AdapterInputError as exc:
            return self._emit_error_and_exit(str(exc))


def main(argv: Optional[Iterable[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Stdio adapter for the Quoridor AI")
    parser.add_argument("--depth", type=int, default=None, help="Search depth (default: per-player preset)")
    parser.add_argument(
        "--budget-ms",
        type=int,
        default=None,
        help=(
            "Answer with the greedy agent if the search takes longer than this; "
            "the abandoned search still finishes before the process exits"
        ),
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress verbose stderr logs (protocol still goes to stdout)",
    )
    args = parser.parse_args(list(argv) if argv is not None else None)

    overrides = {} if args.depth is None else {"depth": str(args.depth)}
    adapter = StdioAdapter(budget_ms=args.budget_ms, quiet=args.quiet, config_overrides=overrides)
    sys.exit(adapter.run())


if __name__ == "__main__":
    main()
