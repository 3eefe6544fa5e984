"""
Heuristic AI implementation for Lines of Action.

This agent evaluates the flat set of legal moves one ply deep and plays the
best-scoring one. The evaluation rewards the two things a win requires:

- **compactness**: the bounding-box spread of the side's pieces,
  ``(max row - min row) + (max col - min col)``;
- **connectivity**: the number of 8-connected groups.

``score = -WEIGHT_SPREAD * spread - WEIGHT_GROUPS * groups``

With the default weights a group costs five times as much as one unit of
spread. A side with no pieces scores ``-inf`` so such positions lose every
comparison.

Ties are broken by enumeration order (origin row, origin column, then the
engine's fixed direction order): a later move must score strictly higher
to replace the current best.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from ..board_manager import Board
from ..game_engine import GameEngine
from ..models import Move, Player
from .base import BaseAI

logger = logging.getLogger(__name__)

WEIGHT_SPREAD = 1.0
WEIGHT_GROUPS = 5.0


def _spread(board: Board, player: Player) -> Optional[int]:
    rows: List[int] = []
    cols: List[int] = []
    for pos in board.pieces(player):
        rows.append(pos.row)
        cols.append(pos.col)
    if not rows:
        return None
    return (max(rows) - min(rows)) + (max(cols) - min(cols))


def score_position(
    board: Board,
    player: Player,
    weight_spread: float = WEIGHT_SPREAD,
    weight_groups: float = WEIGHT_GROUPS,
) -> float:
    """Score ``board`` for ``player``; higher is better."""
    spread = _spread(board, player)
    if spread is None:
        return float("-inf")
    groups = board.connected_groups(player)
    return -weight_spread * spread - weight_groups * groups


def evaluate_move(
    board: Board,
    move: Move,
    player: Player,
    weight_spread: float = WEIGHT_SPREAD,
    weight_groups: float = WEIGHT_GROUPS,
) -> float:
    """Score the position ``move`` would produce, for ``player``.

    The move is applied with the colour currently on its origin and the
    board is restored before returning.
    """
    mover = board.occupant(move.from_pos)
    with GameEngine.transient(board, move, mover):
        return score_position(board, player, weight_spread, weight_groups)


def best_scoring_move(
    board: Board,
    moves: List[Move],
    player: Player,
    weight_spread: float = WEIGHT_SPREAD,
    weight_groups: float = WEIGHT_GROUPS,
) -> Tuple[Optional[Move], float]:
    """First move with the strictly highest ``evaluate_move`` score.

    Returns ``(None, -inf)`` for an empty move list.
    """
    best_move: Optional[Move] = None
    best_score = float("-inf")
    for move in moves:
        score = evaluate_move(board, move, player, weight_spread, weight_groups)
        if best_move is None or score > best_score:
            best_move = move
            best_score = score
    return best_move, best_score


class HeuristicAI(BaseAI):
    """Greedy one-ply AI driven by :func:`score_position`."""

    WEIGHT_SPREAD = WEIGHT_SPREAD
    WEIGHT_GROUPS = WEIGHT_GROUPS

    def select_move(self, board: Board) -> Optional[Move]:
        """Select the best heuristic move for this AI's side.

        Args:
            board: Current board; must have no outstanding transient moves.

        Returns:
            The best :class:`Move`, or ``None`` if the side has no legal
            move anywhere on the board.
        """
        self.ensure_converged(board)
        valid_moves = self.get_valid_moves(board)
        if not valid_moves:
            logger.warning("%s has no legal moves", self.player.value)
            return None

        selected, score = best_scoring_move(
            board,
            valid_moves,
            self.player,
            self.WEIGHT_SPREAD,
            self.WEIGHT_GROUPS,
        )
        logger.info(
            "AI move: player=%s, candidates=%d, move=%s, score=%.1f",
            self.player.value,
            len(valid_moves),
            selected,
            score,
        )
        self.move_count += 1
        return selected

    choose_move = select_move

    def evaluate_position(self, board: Board) -> float:
        return score_position(board, self.player, self.WEIGHT_SPREAD, self.WEIGHT_GROUPS)

    def get_evaluation_breakdown(self, board: Board) -> Dict[str, float]:
        """Return the spread and group terms behind :meth:`evaluate_position`."""
        spread = _spread(board, self.player)
        if spread is None:
            return {"total": float("-inf"), "spread": 0.0, "groups": 0.0}
        groups = board.connected_groups(self.player)
        return {
            "total": self.evaluate_position(board),
            "spread": float(spread),
            "groups": float(groups),
        }
