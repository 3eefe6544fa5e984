"""Hint advisor for Lines of Action.

Suggests a move for a player in three ordered tiers; the first tier that
produces a move wins:

1. ``win``: a move that wins on the spot.
2. ``safe``: only considered when the opponent currently has a winning
   reply. A candidate is safe when, after playing it, a fresh enumeration of
   every opponent move finds none that wins. The threat set is recomputed
   after each candidate rather than diffed against the pre-move threats, so
   a candidate that opens a new winning reply is rejected too.
3. ``any``: the move with the best heuristic score.

Tier 2 probes two plies deep with nested transient moves; each inner probe
is released before the outer one.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..board_manager import Board
from ..errors import InvalidStateError
from ..game_engine import GameEngine
from ..models import Hint, HintCategory, Move, Player
from .heuristic_ai import best_scoring_move

logger = logging.getLogger(__name__)

HINT_MESSAGES: Dict[HintCategory, str] = {
    HintCategory.WIN: "You can make a winning move.",
    HintCategory.SAFE: "There is a way out of this.",
    HintCategory.ANY: "There is a move for you.",
}


class HintAdvisor:
    """Three-tier move suggestions for a human player."""

    def suggest(self, board: Board, player: Player) -> Optional[Hint]:
        """Suggest a move for ``player`` or ``None`` if it has no legal move."""
        if board.checkpoint_depth:
            raise InvalidStateError(
                "Hint requested on a board with outstanding transient moves",
                context={"outstanding": board.checkpoint_depth},
            )
        moves = GameEngine.get_all_legal_moves(board, player)
        if not moves:
            logger.info("hint: %s has no legal moves", player.value)
            return None

        winning = self.find_winning_move(board, moves, player)
        if winning is not None:
            return self._hint(winning, HintCategory.WIN, player)

        opponent = player.opponent
        if self.has_winning_move(board, opponent):
            safe = self.find_safe_move(board, moves, player)
            if safe is not None:
                return self._hint(safe, HintCategory.SAFE, player)
            logger.debug("hint: no move for %s stops every winning reply", player.value)

        best, _ = best_scoring_move(board, moves, player)
        return self._hint(best, HintCategory.ANY, player)

    @staticmethod
    def find_winning_move(board: Board, moves: List[Move], player: Player) -> Optional[Move]:
        for move in moves:
            if GameEngine.wins_immediately(board, move, player):
                return move
        return None

    @staticmethod
    def has_winning_move(board: Board, player: Player) -> bool:
        return any(
            GameEngine.wins_immediately(board, move, player)
            for move in GameEngine.get_all_legal_moves(board, player)
        )

    @staticmethod
    def find_safe_move(board: Board, moves: List[Move], player: Player) -> Optional[Move]:
        """First move after which the opponent has no winning reply."""
        opponent = player.opponent
        for move in moves:
            with GameEngine.transient(board, move, player):
                threatened = HintAdvisor.has_winning_move(board, opponent)
            if not threatened:
                return move
        return None

    @staticmethod
    def _hint(move: Move, category: HintCategory, player: Player) -> Hint:
        logger.info("hint for %s: %s (%s)", player.value, move, category.value)
        return Hint(move=move, category=category)
