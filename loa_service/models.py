"""
Pydantic Models for Lines of Action Game State
Wire-level types shared by the rules engine, the AI and the HTTP service
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from enum import Enum
from datetime import datetime


BOARD_SIZE = 8


class Player(str, Enum):
    """Player enumeration. An empty cell is represented by ``None``."""
    BLACK = "black"
    WHITE = "white"

    @property
    def opponent(self) -> "Player":
        return Player.WHITE if self is Player.BLACK else Player.BLACK


class InteractionPhase(str, Enum):
    """Interaction phase of a game session"""
    AWAITING_SELECTION = "awaiting_selection"
    PIECE_SELECTED = "piece_selected"
    MOVE_PENDING = "move_pending"
    GAME_OVER = "game_over"


class InteractionEvent(str, Enum):
    """Input events fed to the interaction state machine"""
    SELECT_OWN_PIECE = "select_own_piece"
    CHOOSE_LEGAL_TARGET = "choose_legal_target"
    CHOOSE_OTHER_CELL = "choose_other_cell"
    MOVE_COMPLETED = "move_completed"
    GAME_WON = "game_won"


class GameStatus(str, Enum):
    """Game status enumeration"""
    ACTIVE = "active"
    FINISHED = "finished"
    STALLED = "stalled"


class HintCategory(str, Enum):
    """Hint tier, in priority order"""
    WIN = "win"
    SAFE = "safe"
    ANY = "any"


class Position(BaseModel):
    """Board position; both coordinates lie in ``[0, 8)``."""
    row: int = Field(ge=0, lt=BOARD_SIZE)
    col: int = Field(ge=0, lt=BOARD_SIZE)

    class Config:
        frozen = True

    def to_key(self) -> str:
        """Convert position to string key"""
        return f"{self.row},{self.col}"


class Move(BaseModel):
    """Move representation.

    The moving player is implicit: it is the occupant of ``from_pos`` when
    the move is generated. Captured pieces are not recorded here; transient
    search records them on the board's checkpoint instead.
    """
    from_pos: Position = Field(alias="from")
    to: Position

    class Config:
        populate_by_name = True
        frozen = True

    def __str__(self) -> str:
        return (
            f"({self.from_pos.row},{self.from_pos.col})"
            f"->({self.to.row},{self.to.col})"
        )


class BoardState(BaseModel):
    """Snapshot of the 8x8 grid; ``None`` marks an empty cell."""
    size: int = BOARD_SIZE
    cells: List[List[Optional[Player]]]


class Hint(BaseModel):
    """Move suggested by the hint advisor together with its tier"""
    move: Move
    category: HintCategory


class AIConfig(BaseModel):
    """AI configuration"""
    think_time: Optional[int] = Field(None, ge=0, alias="thinkTime")

    class Config:
        populate_by_name = True


class GameState(BaseModel):
    """Complete game state as seen by presentation clients"""
    id: str
    board: BoardState
    current_player: Player = Field(alias="currentPlayer")
    selected: Optional[Position] = None
    pending_move: Optional[Move] = Field(None, alias="pendingMove")
    winner: Optional[Player] = None
    phase: InteractionPhase
    status: GameStatus = Field(alias="gameStatus")
    vs_ai: bool = Field(False, alias="vsAi")
    ai_player: Optional[Player] = Field(None, alias="aiPlayer")
    move_number: int = Field(0, alias="moveNumber")
    created_at: datetime = Field(alias="createdAt")
    last_move_at: Optional[datetime] = Field(None, alias="lastMoveAt")

    class Config:
        populate_by_name = True
