"""
Base AI Player class for Lines of Action
Abstract base class that all AI implementations inherit from
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict

from ..board_manager import Board
from ..errors import InvalidStateError
from ..game_engine import GameEngine
from ..models import AIConfig, Move, Player


class BaseAI(ABC):
    """Abstract base class for all AI implementations"""

    def __init__(self, player: Player, config: Optional[AIConfig] = None):
        """
        Initialize AI player

        Args:
            player: The side this AI controls
            config: AI configuration settings
        """
        self.player = player
        self.config = config or AIConfig()
        self.move_count = 0

    @abstractmethod
    def select_move(self, board: Board) -> Optional[Move]:
        """
        Select the best move for the current board

        Args:
            board: Current board; must have no outstanding transient moves

        Returns:
            Selected move or None if no valid moves
        """
        pass

    @abstractmethod
    def evaluate_position(self, board: Board) -> float:
        """
        Evaluate the current position from this AI's perspective

        Args:
            board: Current board

        Returns:
            Evaluation score (higher = better for this AI)
        """
        pass

    def get_evaluation_breakdown(self, board: Board) -> Dict[str, float]:
        """
        Get detailed breakdown of position evaluation

        Args:
            board: Current board

        Returns:
            Dictionary with evaluation components
        """
        return {
            "total": self.evaluate_position(board)
        }

    def get_valid_moves(self, board: Board) -> List[Move]:
        """
        Get all legal moves for this AI's side.

        Args:
            board: Current board

        Returns:
            List of legal Move instances in enumeration order
        """
        return GameEngine.get_all_legal_moves(board, self.player)

    def ensure_converged(self, board: Board) -> None:
        """Refuse to search a board with pending transient moves."""
        if board.checkpoint_depth:
            raise InvalidStateError(
                "AI invoked on a board with outstanding transient moves",
                context={"outstanding": board.checkpoint_depth},
            )

    def __repr__(self) -> str:
        """String representation of AI"""
        return f"{self.__class__.__name__}(player={self.player.value})"
