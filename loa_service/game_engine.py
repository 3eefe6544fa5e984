"""Core rules engine for the Lines of Action service.

This module hosts the rules that operate directly on a
:class:`~loa_service.board_manager.Board`:

1. **Move generation.** A piece moves in a straight line (orthogonal or
   diagonal) exactly as many squares as there are pieces, of either colour,
   anywhere on the full line through it in that direction. It may land on
   an empty square or on an opponent piece (capturing it), never on one of
   its own pieces.
2. **Move execution.** A committed move overwrites the destination with the
   mover and empties the origin. Search uses transient moves that are
   recorded on the board's checkpoint stack and restored afterwards.
3. **Win detection.** A player wins when all of their pieces form a single
   8-connected group.

The engine does not track turns or validate ownership; that belongs to
:class:`~loa_service.game_session.GameSession`.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

from .board_manager import Board, Checkpoint
from .errors import InvalidStateError
from .models import Move, Player, Position

logger = logging.getLogger(__name__)

# Fixed enumeration order: E, S, SE, N, W, NW, NE, SW. AI tie-breaking
# depends on this order staying stable.
DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (0, 1),
    (1, 0),
    (1, 1),
    (-1, 0),
    (0, -1),
    (-1, -1),
    (-1, 1),
    (1, -1),
)

DEBUG_ENGINE = os.getenv("LOA_DEBUG_ENGINE", "").lower() in {"1", "true", "yes", "on"}


def _debug(msg: str, *args) -> None:
    if DEBUG_ENGINE:
        logger.debug(msg, *args)


class GameEngine:
    """Stateless rules operations over a :class:`Board`."""

    # ------------------------------------------------------------------
    # Move generation
    # ------------------------------------------------------------------

    @staticmethod
    def count_pieces_in_line(board: Board, pos: Position, d_row: int, d_col: int) -> int:
        """Count occupied cells on the full line through ``pos``.

        The backward and forward half-lines are scanned independently to the
        board edge; the origin itself is counted once.
        """
        count = 0
        r, c = pos.row - d_row, pos.col - d_col
        while Board.in_bounds(r, c):
            if board.cell(r, c) is not None:
                count += 1
            r -= d_row
            c -= d_col

        r, c = pos.row, pos.col
        while Board.in_bounds(r, c):
            if board.cell(r, c) is not None:
                count += 1
            r += d_row
            c += d_col
        return count

    @staticmethod
    def get_legal_moves(board: Board, pos: Position) -> List[Position]:
        """Return legal destinations for the piece on ``pos``.

        At most one destination per direction, in :data:`DIRECTIONS` order.
        An empty origin has no moves.
        """
        mover = board.occupant(pos)
        if mover is None:
            return []

        destinations: List[Position] = []
        for d_row, d_col in DIRECTIONS:
            distance = GameEngine.count_pieces_in_line(board, pos, d_row, d_col)
            dest_row = pos.row + d_row * distance
            dest_col = pos.col + d_col * distance
            if not Board.in_bounds(dest_row, dest_col):
                continue
            if board.cell(dest_row, dest_col) == mover:
                continue
            destinations.append(Position(row=dest_row, col=dest_col))
        return destinations

    @staticmethod
    def get_all_legal_moves(board: Board, player: Player) -> List[Move]:
        """Enumerate every legal move for ``player``.

        Order: origin row, then origin column, then direction order.
        """
        moves: List[Move] = []
        for origin in board.pieces(player):
            for dest in GameEngine.get_legal_moves(board, origin):
                moves.append(Move(from_pos=origin, to=dest))
        return moves

    @staticmethod
    def is_legal_move(board: Board, move: Move) -> bool:
        return move.to in GameEngine.get_legal_moves(board, move.from_pos)

    # ------------------------------------------------------------------
    # Move execution
    # ------------------------------------------------------------------

    @staticmethod
    def apply_move(board: Board, move: Move) -> Optional[Player]:
        """Commit ``move`` permanently.

        Returns the captured occupant of the destination, if any. Legality is
        the caller's responsibility.

        Raises:
            InvalidStateError: if transient checkpoints are still outstanding.
        """
        if board.checkpoint_depth:
            raise InvalidStateError(
                "Cannot commit a move while transient moves are outstanding",
                context={"outstanding": board.checkpoint_depth, "move": str(move)},
            )
        mover = board.occupant(move.from_pos)
        captured = board.occupant(move.to)
        board.set_cell(move.to, mover)
        board.set_cell(move.from_pos, None)
        if captured is not None:
            logger.info("%s captures %s at %s", mover.value, captured.value, move.to.to_key())
        return captured

    @staticmethod
    def try_move(board: Board, move: Move, player: Player) -> Checkpoint:
        """Apply ``move`` for ``player`` transiently and return its checkpoint.

        Must be paired with :meth:`undo_move` before the board is trusted
        again; prefer :meth:`transient`, which guarantees the pairing.
        """
        checkpoint = board.push_checkpoint((move.from_pos, move.to))
        board.set_cell(move.to, player)
        board.set_cell(move.from_pos, None)
        _debug("try %s for %s (depth=%d)", move, player.value, checkpoint.depth)
        return checkpoint

    @staticmethod
    def undo_move(board: Board, checkpoint: Checkpoint) -> None:
        """Restore the cells recorded by :meth:`try_move`."""
        board.pop_checkpoint(checkpoint)

    @staticmethod
    @contextmanager
    def transient(board: Board, move: Move, player: Player) -> Iterator[Board]:
        """Context manager probing ``move`` without a permanent change.

        The board is restored on every exit path. Nested uses must unwind in
        reverse order, which ``with`` blocks do naturally.
        """
        checkpoint = GameEngine.try_move(board, move, player)
        try:
            yield board
        finally:
            GameEngine.undo_move(board, checkpoint)

    # ------------------------------------------------------------------
    # Win detection
    # ------------------------------------------------------------------

    @staticmethod
    def has_won(board: Board, player: Player) -> bool:
        """True iff ``player`` has pieces and they form one 8-connected group."""
        if board.count(player) == 0:
            return False
        return board.connected_groups(player) == 1

    @staticmethod
    def check_winner(board: Board) -> Optional[Player]:
        """Return the first player (black, then white) who has won."""
        for player in (Player.BLACK, Player.WHITE):
            if GameEngine.has_won(board, player):
                return player
        return None

    @staticmethod
    def wins_immediately(board: Board, move: Move, player: Player) -> bool:
        """True iff committing ``move`` would make ``player`` win."""
        with GameEngine.transient(board, move, player):
            return GameEngine.has_won(board, player)
