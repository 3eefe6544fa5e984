"""Game session and interaction state machine.

A :class:`GameSession` owns one :class:`Board` and the turn state around it:
whose move it is, the currently selected piece, a move waiting to be
committed (the presentation layer animates it in the meantime), and the
winner once there is one.

Interaction is modelled as a finite state machine::

    awaiting_selection --select_own_piece--> piece_selected
    piece_selected     --select_own_piece--> piece_selected
    piece_selected     --choose_legal_target--> move_pending
    piece_selected     --choose_other_cell--> awaiting_selection
    move_pending       --move_completed--> awaiting_selection
    move_pending       --game_won--> game_over

:func:`next_phase` is the pure transition function; any pair not listed
leaves the phase unchanged, which is how clicks during an animation or
after the game has ended are ignored.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from .ai.heuristic_ai import HeuristicAI
from .ai.hint_advisor import HintAdvisor
from .board_manager import Board
from .errors import InvalidMoveError, RulesViolationError
from .game_engine import GameEngine
from .models import (
    AIConfig,
    GameState,
    GameStatus,
    Hint,
    InteractionEvent,
    InteractionPhase,
    Move,
    Player,
    Position,
)

logger = logging.getLogger(__name__)

_TRANSITIONS: Dict[Tuple[InteractionPhase, InteractionEvent], InteractionPhase] = {
    (InteractionPhase.AWAITING_SELECTION, InteractionEvent.SELECT_OWN_PIECE):
        InteractionPhase.PIECE_SELECTED,
    (InteractionPhase.PIECE_SELECTED, InteractionEvent.SELECT_OWN_PIECE):
        InteractionPhase.PIECE_SELECTED,
    (InteractionPhase.PIECE_SELECTED, InteractionEvent.CHOOSE_LEGAL_TARGET):
        InteractionPhase.MOVE_PENDING,
    (InteractionPhase.PIECE_SELECTED, InteractionEvent.CHOOSE_OTHER_CELL):
        InteractionPhase.AWAITING_SELECTION,
    (InteractionPhase.MOVE_PENDING, InteractionEvent.MOVE_COMPLETED):
        InteractionPhase.AWAITING_SELECTION,
    (InteractionPhase.MOVE_PENDING, InteractionEvent.GAME_WON):
        InteractionPhase.GAME_OVER,
}


def next_phase(phase: InteractionPhase, event: InteractionEvent) -> InteractionPhase:
    """Return the phase reached from ``phase`` on ``event``."""
    return _TRANSITIONS.get((phase, event), phase)


class GameSession:
    """One game between black and white, optionally against the computer."""

    def __init__(
        self,
        board: Optional[Board] = None,
        vs_ai: bool = False,
        ai_player: Player = Player.WHITE,
        game_id: Optional[str] = None,
        current_player: Player = Player.BLACK,
        ai_config: Optional[AIConfig] = None,
    ):
        self.id = game_id or str(uuid.uuid4())
        self.board = board if board is not None else Board.initial()
        self.current_player = current_player
        self.selected: Optional[Position] = None
        self.pending_move: Optional[Move] = None
        self.winner: Optional[Player] = None
        self.phase = InteractionPhase.AWAITING_SELECTION
        self.vs_ai = vs_ai
        self.ai_player = ai_player if vs_ai else None
        self.ai_config = ai_config or AIConfig()
        self.move_number = 0
        self.created_at = datetime.now(timezone.utc)
        self.last_move_at: Optional[datetime] = None
        self._advisor = HintAdvisor()
        self._ai: Optional[HeuristicAI] = (
            HeuristicAI(self.ai_player, self.ai_config) if vs_ai else None
        )

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------

    @property
    def is_over(self) -> bool:
        return self.winner is not None

    @property
    def status(self) -> GameStatus:
        if self.winner is not None:
            return GameStatus.FINISHED
        if not GameEngine.get_all_legal_moves(self.board, self.current_player):
            return GameStatus.STALLED
        return GameStatus.ACTIVE

    def legal_moves(self, pos: Position) -> List[Position]:
        """Destinations for the piece on ``pos`` (empty for an empty cell)."""
        return GameEngine.get_legal_moves(self.board, pos)

    def has_won(self, player: Player) -> bool:
        return GameEngine.has_won(self.board, player)

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def _fire(self, event: InteractionEvent) -> None:
        previous = self.phase
        self.phase = next_phase(self.phase, event)
        logger.debug("game %s: %s --%s--> %s", self.id, previous.value, event.value, self.phase.value)

    def click(self, pos: Position) -> InteractionPhase:
        """Handle a click on ``pos`` and return the resulting phase."""
        if self.phase in (InteractionPhase.GAME_OVER, InteractionPhase.MOVE_PENDING):
            return self.phase

        if self.board.occupant(pos) == self.current_player:
            self.selected = pos
            self._fire(InteractionEvent.SELECT_OWN_PIECE)
            return self.phase

        if self.selected is None:
            return self.phase

        if pos in self.legal_moves(self.selected):
            self.pending_move = Move(from_pos=self.selected, to=pos)
            self._fire(InteractionEvent.CHOOSE_LEGAL_TARGET)
        else:
            self._fire(InteractionEvent.CHOOSE_OTHER_CELL)
        self.selected = None
        return self.phase

    def complete_pending_move(self) -> Optional[Player]:
        """Commit the pending move; return the winner it produced, if any.

        Raises:
            InvalidMoveError: if no move is pending.
        """
        if self.phase != InteractionPhase.MOVE_PENDING or self.pending_move is None:
            raise InvalidMoveError(
                "No move is pending",
                context={"game_id": self.id, "phase": self.phase.value},
            )
        move = self.pending_move
        self.pending_move = None
        mover = self.current_player

        GameEngine.apply_move(self.board, move)
        self.move_number += 1
        self.last_move_at = datetime.now(timezone.utc)
        logger.info("game %s: move %d %s %s", self.id, self.move_number, mover.value, move)

        winner = GameEngine.check_winner(self.board)
        if winner is not None:
            self.winner = winner
            self._fire(InteractionEvent.GAME_WON)
            logger.info("game %s: %s wins after %d moves", self.id, winner.value, self.move_number)
            return winner

        self._fire(InteractionEvent.MOVE_COMPLETED)
        self.current_player = self.current_player.opponent
        if self.status == GameStatus.STALLED:
            logger.warning("game %s: %s has no legal moves", self.id, self.current_player.value)
        return None

    def play(self, move: Move) -> Optional[Player]:
        """Validate and commit ``move`` for the side to move.

        Raises:
            InvalidMoveError: if the game is over or a move is pending.
            RulesViolationError: if the origin is not the mover's piece or
                the destination is not reachable.
        """
        if self.is_over:
            raise InvalidMoveError(
                "Game is already over",
                context={"game_id": self.id, "winner": self.winner.value},
            )
        if self.phase == InteractionPhase.MOVE_PENDING:
            raise InvalidMoveError(
                "Another move is pending",
                context={"game_id": self.id, "pending": str(self.pending_move)},
            )
        if self.board.occupant(move.from_pos) != self.current_player:
            raise RulesViolationError(
                f"No {self.current_player.value} piece at {move.from_pos.to_key()}",
                rule_ref="own-piece",
                context={"game_id": self.id, "move": str(move)},
            )
        if move.to not in self.legal_moves(move.from_pos):
            raise RulesViolationError(
                "Destination is not reachable by a line-of-action move",
                rule_ref="line-of-action",
                context={"game_id": self.id, "move": str(move)},
            )

        self.selected = None
        self.click(move.from_pos)
        self.click(move.to)
        return self.complete_pending_move()

    # ------------------------------------------------------------------
    # AI and hints
    # ------------------------------------------------------------------

    def choose_ai_move(self) -> Optional[Move]:
        """Let the computer pick a move for its side without committing it.

        Raises:
            InvalidMoveError: if the session has no computer side, the game
                is over, a move is pending or it is not the computer's turn.
        """
        ai = self._require_ai()
        if self.is_over:
            raise InvalidMoveError("Game is already over", context={"game_id": self.id})
        if self.phase == InteractionPhase.MOVE_PENDING:
            raise InvalidMoveError(
                "Another move is pending",
                context={"game_id": self.id, "pending": str(self.pending_move)},
            )
        if self.current_player != self.ai_player:
            raise InvalidMoveError(
                "It is not the computer's turn",
                context={"game_id": self.id, "current_player": self.current_player.value},
            )
        return ai.select_move(self.board)

    def evaluate_for_ai(self) -> float:
        return self._require_ai().evaluate_position(self.board)

    def _require_ai(self) -> HeuristicAI:
        if self._ai is None:
            raise InvalidMoveError("Session is not playing against the computer",
                                   context={"game_id": self.id})
        return self._ai

    def suggest(self, player: Optional[Player] = None) -> Optional[Hint]:
        """Hint for ``player`` (default: side to move).

        Returns ``None`` when that player has no legal move.

        Raises:
            InvalidMoveError: if the game is already over.
        """
        if self.is_over:
            raise InvalidMoveError(
                "Game is already over",
                context={"game_id": self.id, "winner": self.winner.value},
            )
        return self._advisor.suggest(self.board, player or self.current_player)

    # ------------------------------------------------------------------
    # Wire
    # ------------------------------------------------------------------

    def to_state(self) -> GameState:
        return GameState(
            id=self.id,
            board=self.board.to_state(),
            current_player=self.current_player,
            selected=self.selected,
            pending_move=self.pending_move,
            winner=self.winner,
            phase=self.phase,
            status=self.status,
            vs_ai=self.vs_ai,
            ai_player=self.ai_player,
            move_number=self.move_number,
            created_at=self.created_at,
            last_move_at=self.last_move_at,
        )
