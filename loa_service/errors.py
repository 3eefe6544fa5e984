"""
Lines of Action Error Hierarchy

Unified exception hierarchy for the rules engine and the service layer.
All custom exceptions inherit from LoaError for easy catching and filtering.

Usage:
    from loa_service.errors import RulesViolationError

    try:
        session.play(move)
    except RulesViolationError as e:
        logger.warning(f"Invalid move: {e.message}, rule: {e.rule_ref}")

The core engine reports "no legal moves" and "empty side" as ordinary
return values (``None`` and ``-inf``); these exceptions cover caller misuse
and session-level refusals only.
"""

from typing import Any

__all__ = [
    "GameNotFoundError",
    "InvalidMoveError",
    "InvalidStateError",
    "LoaError",
    "RulesViolationError",
]


class LoaError(Exception):
    """Base exception for all Lines of Action errors.

    Attributes:
        code: Machine-readable error code for categorization
        message: Human-readable error description
        context: Additional context for debugging
    """
    code: str = "LOA_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Game Rules Errors
# =============================================================================


class RulesViolationError(LoaError):
    """Invalid move per game rules.

    Raised when a submitted move moves a piece the mover does not own, or
    lands on a square the line-of-action rule does not reach.

    Attributes:
        rule_ref: Short name of the violated rule (e.g. "own-piece")
    """
    code: str = "RULES_VIOLATION"

    def __init__(
        self,
        message: str,
        rule_ref: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.rule_ref = rule_ref
        if rule_ref:
            self.context["rule_ref"] = rule_ref


class InvalidStateError(LoaError):
    """Board used outside of the checkpoint discipline.

    Raised when transient checkpoints are released out of order, or when a
    permanent commit is attempted while transient mutations are outstanding.
    """
    code: str = "INVALID_STATE"


class InvalidMoveError(LoaError):
    """Move that cannot be applied to the current session.

    Raised when a move is legal on the board but the session refuses it
    (game already won, another move still pending, wrong side for the AI).
    """
    code: str = "INVALID_MOVE"


class GameNotFoundError(LoaError):
    """No live session with the requested id."""
    code: str = "GAME_NOT_FOUND"

    def __init__(self, game_id: str):
        super().__init__(
            f"Game {game_id} not found",
            context={"game_id": game_id},
        )
        self.game_id = game_id

