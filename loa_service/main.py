"""
Lines of Action Service - FastAPI Application
Exposes legal-move queries, move commits, win checks, computer moves and
hints to presentation clients
"""

import asyncio
import logging
import math
import os
import threading
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field

from . import __version__
from .ai.heuristic_ai import HeuristicAI
from .ai.hint_advisor import HINT_MESSAGES, HintAdvisor
from .board_manager import Board
from .errors import (
    GameNotFoundError,
    InvalidMoveError,
    InvalidStateError,
    LoaError,
    RulesViolationError,
)
from .game_engine import GameEngine
from .game_session import GameSession
from .metrics import (
    ACTIVE_GAMES,
    AI_MOVE_LATENCY,
    AI_MOVE_REQUESTS,
    GAME_OUTCOMES,
    HINT_LATENCY,
    HINT_REQUESTS,
    ILLEGAL_MOVE_ATTEMPTS,
    MOVES_COMMITTED,
)
from .models import (
    AIConfig,
    BoardState,
    GameState,
    HintCategory,
    Move,
    Player,
    Position,
)

# Configure logging
logging.basicConfig(
    level=os.getenv("LOA_LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Lines of Action Service",
    description="Rules engine, computer opponent and hints for Lines of Action",
    version=__version__,
)

# In production, restrict allow_origins to specific domains
cors_origins = os.getenv("CORS_ORIGINS", "*").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

GAME_TTL_SEC = int(os.getenv("LOA_GAME_TTL_SEC", "3600"))
MAX_GAMES = int(os.getenv("LOA_MAX_GAMES", "256"))
AI_THINK_TIME_MS = int(os.getenv("LOA_AI_THINK_TIME_MS", "0"))

NO_LEGAL_MOVES_MESSAGE = "No legal moves available."


# Live game sessions
@dataclass
class CachedGame:
    session: GameSession
    created_at: float
    last_access: float


_games_lock = threading.Lock()
games: Dict[str, CachedGame] = {}


def _prune_games(now: float) -> None:
    """Drop idle sessions and bound the store size."""
    expired = [
        key
        for key, entry in games.items()
        if now - entry.last_access > GAME_TTL_SEC
    ]
    for key in expired:
        games.pop(key, None)
        logger.info("game %s expired", key)

    if len(games) > MAX_GAMES:
        # Evict least-recently-used entries.
        entries_by_age = sorted(games.items(), key=lambda kv: kv[1].last_access)
        overflow = len(games) - MAX_GAMES
        for key, _entry in entries_by_age[:overflow]:
            games.pop(key, None)
            logger.info("game %s evicted", key)

    ACTIVE_GAMES.set(len(games))


def _get_game(game_id: str) -> GameSession:
    now = time.time()
    with _games_lock:
        _prune_games(now)
        entry = games.get(game_id)
        if entry is None:
            raise GameNotFoundError(game_id)
        entry.last_access = now
        return entry.session


def _put_game(session: GameSession) -> None:
    now = time.time()
    with _games_lock:
        games[session.id] = CachedGame(session=session, created_at=now, last_access=now)
        _prune_games(now)


def _http_error(e: LoaError) -> HTTPException:
    """Map a service error onto an HTTP status code."""
    if isinstance(e, GameNotFoundError):
        status = 404
    elif isinstance(e, RulesViolationError):
        status = 422
    elif isinstance(e, (InvalidMoveError, InvalidStateError)):
        status = 409
    else:
        status = 400
    return HTTPException(status_code=status, detail=e.to_dict())


def _finite(value: float) -> Optional[float]:
    """JSON has no infinities; an empty side evaluates to ``None``."""
    return value if math.isfinite(value) else None


def _record_commit(mover: Player, winner: Optional[Player]) -> None:
    MOVES_COMMITTED.labels(mover.value).inc()
    if winner is not None:
        GAME_OUTCOMES.labels(winner.value).inc()


class CreateGameRequest(BaseModel):
    """Request model for starting a game"""
    vs_ai: bool = Field(False, alias="vsAi")
    ai_player: Player = Field(Player.WHITE, alias="aiPlayer")
    current_player: Player = Field(Player.BLACK, alias="currentPlayer")
    board: Optional[BoardState] = None
    ai_config: Optional[AIConfig] = Field(None, alias="aiConfig")

    class Config:
        populate_by_name = True


class LegalMovesResponse(BaseModel):
    position: Position
    moves: List[Position]


class WinnerResponse(BaseModel):
    black: bool
    white: bool
    winner: Optional[Player] = None


class AIMoveResponse(BaseModel):
    """Response model for computer move selection"""
    move: Optional[Move]
    evaluation: Optional[float]
    thinking_time_ms: int
    message: Optional[str] = None
    state: GameState


class HintResponse(BaseModel):
    move: Optional[Move] = None
    category: Optional[HintCategory] = None
    message: str


class BoardPositionRequest(BaseModel):
    board: BoardState
    position: Position


class BoardPlayerRequest(BaseModel):
    board: BoardState
    player: Player


class EvaluationResponse(BaseModel):
    """Response model for position evaluation"""
    score: Optional[float]
    breakdown: Dict[str, Optional[float]]


def _hint_response(hint) -> HintResponse:
    if hint is None:
        HINT_REQUESTS.labels("none").inc()
        return HintResponse(message=NO_LEGAL_MOVES_MESSAGE)
    HINT_REQUESTS.labels(hint.category.value).inc()
    return HintResponse(
        move=hint.move,
        category=hint.category,
        message=HINT_MESSAGES[hint.category],
    )


def _board_from_request(state: BoardState) -> Board:
    try:
        return Board.from_state(state)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@app.get("/")
async def root():
    """Service info endpoint"""
    return {
        "service": "Lines of Action Service",
        "status": "running",
        "version": __version__,
    }


@app.get("/health")
async def health_check():
    """Health check for container orchestration"""
    return {"status": "healthy"}


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint"""
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)


@app.post("/games", response_model=GameState)
async def create_game(request: CreateGameRequest):
    board = _board_from_request(request.board) if request.board is not None else None
    session = GameSession(
        board=board,
        vs_ai=request.vs_ai,
        ai_player=request.ai_player,
        current_player=request.current_player,
        ai_config=request.ai_config,
    )
    _put_game(session)
    logger.info(
        "game %s created (vs_ai=%s, ai_player=%s)",
        session.id,
        session.vs_ai,
        session.ai_player.value if session.ai_player else None,
    )
    return session.to_state()


@app.get("/games/{game_id}", response_model=GameState)
async def get_game(game_id: str):
    try:
        return _get_game(game_id).to_state()
    except LoaError as e:
        raise _http_error(e)


@app.delete("/games/{game_id}")
async def delete_game(game_id: str):
    with _games_lock:
        entry = games.pop(game_id, None)
        ACTIVE_GAMES.set(len(games))
    if entry is None:
        raise _http_error(GameNotFoundError(game_id))
    logger.info("game %s deleted", game_id)
    return {"status": "deleted", "id": game_id}


@app.get("/games/{game_id}/legal_moves", response_model=LegalMovesResponse)
async def get_legal_moves(
    game_id: str,
    row: int = Query(ge=0, lt=8),
    col: int = Query(ge=0, lt=8),
):
    try:
        session = _get_game(game_id)
    except LoaError as e:
        raise _http_error(e)
    position = Position(row=row, col=col)
    return LegalMovesResponse(position=position, moves=session.legal_moves(position))


@app.post("/games/{game_id}/click", response_model=GameState)
async def click_cell(game_id: str, position: Position):
    try:
        session = _get_game(game_id)
    except LoaError as e:
        raise _http_error(e)
    session.click(position)
    return session.to_state()


@app.post("/games/{game_id}/complete", response_model=GameState)
async def complete_move(game_id: str):
    try:
        session = _get_game(game_id)
        mover = session.current_player
        winner = session.complete_pending_move()
    except LoaError as e:
        raise _http_error(e)
    _record_commit(mover, winner)
    return session.to_state()


@app.post("/games/{game_id}/move", response_model=GameState)
async def make_move(game_id: str, move: Move):
    try:
        session = _get_game(game_id)
        mover = session.current_player
        winner = session.play(move)
    except (RulesViolationError, InvalidMoveError) as e:
        ILLEGAL_MOVE_ATTEMPTS.labels(e.code).inc()
        logger.warning("Rejected move %s in game %s: %s", move, game_id, e.message)
        raise _http_error(e)
    except LoaError as e:
        raise _http_error(e)
    _record_commit(mover, winner)
    return session.to_state()


@app.get("/games/{game_id}/winner", response_model=WinnerResponse)
async def get_winner(game_id: str):
    try:
        session = _get_game(game_id)
    except LoaError as e:
        raise _http_error(e)
    return WinnerResponse(
        black=session.has_won(Player.BLACK),
        white=session.has_won(Player.WHITE),
        winner=session.winner,
    )


@app.post("/games/{game_id}/ai/move", response_model=AIMoveResponse)
async def get_ai_move(game_id: str):
    """
    Choose and commit the computer's move.

    When the computer has no legal move the game is left as it is and the
    response carries ``move = null`` with a message; no pass is played.
    """
    start_time = time.time()
    try:
        session = _get_game(game_id)
        mover = session.current_player
        move = session.choose_ai_move()
    except LoaError as e:
        AI_MOVE_REQUESTS.labels("rejected").inc()
        raise _http_error(e)
    except Exception as e:
        AI_MOVE_REQUESTS.labels("error").inc()
        logger.error("Error generating AI move: %s", str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    duration_seconds = time.time() - start_time
    AI_MOVE_LATENCY.observe(duration_seconds)
    thinking_time = int(duration_seconds * 1000)

    if move is None:
        AI_MOVE_REQUESTS.labels("no_moves").inc()
        return AIMoveResponse(
            move=None,
            evaluation=_finite(session.evaluate_for_ai()),
            thinking_time_ms=thinking_time,
            message=f"{mover.value.capitalize()} has no legal moves!",
            state=session.to_state(),
        )

    try:
        winner = session.play(move)
    except LoaError as e:
        AI_MOVE_REQUESTS.labels("rejected").inc()
        raise _http_error(e)
    _record_commit(mover, winner)
    AI_MOVE_REQUESTS.labels("success").inc()

    think_time = session.ai_config.think_time
    if think_time is None:
        think_time = AI_THINK_TIME_MS
    if think_time > 0:
        # Pacing only; the move is already committed.
        await asyncio.sleep(think_time / 1000.0)

    return AIMoveResponse(
        move=move,
        evaluation=_finite(session.evaluate_for_ai()),
        thinking_time_ms=thinking_time,
        state=session.to_state(),
    )


@app.get("/games/{game_id}/hint", response_model=HintResponse)
async def get_hint(game_id: str, player: Optional[Player] = None):
    start_time = time.time()
    try:
        session = _get_game(game_id)
        hint = session.suggest(player)
    except LoaError as e:
        raise _http_error(e)
    HINT_LATENCY.observe(time.time() - start_time)
    return _hint_response(hint)


@app.post("/rules/legal_moves", response_model=LegalMovesResponse)
async def rules_legal_moves(request: BoardPositionRequest):
    board = _board_from_request(request.board)
    return LegalMovesResponse(
        position=request.position,
        moves=GameEngine.get_legal_moves(board, request.position),
    )


@app.post("/rules/evaluate", response_model=EvaluationResponse)
async def rules_evaluate(request: BoardPlayerRequest):
    board = _board_from_request(request.board)
    breakdown = HeuristicAI(request.player).get_evaluation_breakdown(board)
    return EvaluationResponse(
        score=_finite(breakdown["total"]),
        breakdown={k: _finite(v) for k, v in breakdown.items()},
    )


@app.post("/rules/hint", response_model=HintResponse)
async def rules_hint(request: BoardPlayerRequest):
    board = _board_from_request(request.board)
    start_time = time.time()
    hint = HintAdvisor().suggest(board, request.player)
    HINT_LATENCY.observe(time.time() - start_time)
    return _hint_response(hint)


if __name__ == "__main__":
    import uvicorn

    port_str = os.getenv("LOA_SERVICE_PORT", "8001")
    try:
        port = int(port_str)
    except ValueError:
        port = 8001

    uvicorn.run(app, host="0.0.0.0", port=port)
