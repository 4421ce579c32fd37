"""Background search worker.

Runs :func:`quoridor_ai.search.search` on a single background thread so an
interactive caller is never blocked. Requests and replies are plain dicts:

- ``{"type": "search", "data": {"state": ..., "config": ..., "lastMove": ...}}``
  is answered with ``{"type": "result", "data": {"move", "score", "stats"}}``
  or ``{"type": "error", "data": {"message"}}``;
- ``{"type": "clearHistory"}`` forgets the remembered last moves.

Only one search may be in flight; there is no cancellation.
"""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Dict, Mapping, Optional

from .search import search
from .state_format import (
    StateFormatError,
    action_to_dict,
    config_from_dict,
    move_record_from_dict,
    state_from_dict,
)
from .types import MoveRecord

logger = logging.getLogger(__name__)

Message = Dict[str, Any]


class WorkerBusyError(RuntimeError):
    """Raised when a search is requested while another one is still running."""


def _error(message: str) -> Message:
    return {"type": "error", "data": {"message": message}}


def run_search_message(data: Mapping[str, Any], previous_moves: Mapping[int, MoveRecord]) -> Message:
    """Decode a search request, run it and encode the reply."""

    try:
        state = state_from_dict(data["state"])
        config = config_from_dict(data.get("config") or {})
    except KeyError:
        return _error("search request is missing 'state'")
    except (StateFormatError, ValueError, TypeError) as exc:
        return _error(str(exc))

    try:
        result = search(state, config, previous_moves)
    except Exception as exc:  # noqa: BLE001
        logger.exception("search failed")
        return _error(f"search failed: {exc}")
    return {
        "type": "result",
        "data": {
            "move": None if result.move is None else action_to_dict(result.move),
            "score": result.score,
            "stats": result.stats.to_dict(),
            "replacedReversal": result.replaced_reversal,
        },
    }


class SearchWorker:
    """Single-thread search executor with per-player last-move memory."""

    def __init__(self) -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="quoridor-search")
        self._pending: Optional[Future] = None
        self._last_moves: Dict[int, MoveRecord] = {}

    @property
    def busy(self) -> bool:
        return self._pending is not None and not self._pending.done()

    @property
    def last_moves(self) -> Dict[int, MoveRecord]:
        return dict(self._last_moves)

    def post(self, message: Mapping[str, Any]) -> Optional[Future]:
        """Send a message; search requests return a future resolving to the reply dict."""

        kind = message.get("type")
        if kind == "clearHistory":
            self._last_moves = {}
            return None
        if kind != "search":
            raise ValueError(f"Unknown worker message type '{kind}'")
        if self.busy:
            raise WorkerBusyError("a search is already in flight")

        data = dict(message.get("data") or {})
        last_move = data.get("lastMove")
        if last_move is not None:
            try:
                player = int(data["state"]["currentPlayer"])
                self._last_moves[player] = move_record_from_dict(last_move)
            except (KeyError, TypeError, ValueError) as exc:
                raise ValueError(f"invalid lastMove: {exc}") from exc

        logger.debug("search request queued")
        self._pending = self._executor.submit(run_search_message, data, dict(self._last_moves))
        return self._pending

    def request(self, message: Mapping[str, Any], timeout: Optional[float] = None) -> Optional[Message]:
        """Post a message and wait for its reply."""

        future = self.post(message)
        if future is None:
            return None
        return future.result(timeout=timeout)

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "SearchWorker":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
