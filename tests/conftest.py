"""
Shared pytest fixtures for the Lines of Action tests.

Boards are written as eight strings of ``b`` (black), ``w`` (white) and
``.`` (empty), row 0 first. Board fixtures are function-scoped so that
tests mutating a board never leak into each other.
"""

from typing import Callable, Sequence

import pytest

from loa_service.board_manager import Board
from loa_service.models import Move, Position


# =============================================================================
# BOARD LAYOUTS
# =============================================================================

# Black can connect its two pieces with (3,3) -> (2,4); white is split.
WIN_IN_ONE_ROWS = (
    "........",
    "........",
    "........",
    "...b.b..",
    "........",
    "........",
    "........",
    "w......w",
)

# White threatens (1,3) -> (1,1). Black cannot win; (3,5) -> (1,7) lengthens
# row 1 so the threat no longer lands.
THREAT_ROWS = (
    "w.......",
    "w..w....",
    "........",
    ".....b..",
    "........",
    "........",
    "........",
    ".b.....b",
)

# Twelve black pieces in one blob, white split into two groups.
BLACK_BLOB_ROWS = (
    "w.......",
    "........",
    "..bbbb..",
    "..bbbb..",
    "..bbbb..",
    "........",
    "........",
    ".......w",
)

FULL_BLACK_ROWS = ("bbbbbbbb",) * 8


# =============================================================================
# FACTORY FIXTURES
# =============================================================================


@pytest.fixture
def board_factory() -> Callable[[Sequence[str]], Board]:
    """Factory for boards described row by row."""

    def _create_board(rows: Sequence[str]) -> Board:
        return Board.from_rows(rows)

    return _create_board


@pytest.fixture
def move_factory() -> Callable[..., Move]:
    """Factory for moves given as ``(row, col)`` pairs."""

    def _create_move(src: tuple, dst: tuple) -> Move:
        return Move(
            from_pos=Position(row=src[0], col=src[1]),
            to=Position(row=dst[0], col=dst[1]),
        )

    return _create_move


@pytest.fixture
def initial_board() -> Board:
    return Board.initial()


@pytest.fixture
def win_in_one_board() -> Board:
    return Board.from_rows(WIN_IN_ONE_ROWS)


@pytest.fixture
def threat_board() -> Board:
    return Board.from_rows(THREAT_ROWS)


@pytest.fixture
def black_blob_board() -> Board:
    return Board.from_rows(BLACK_BLOB_ROWS)


@pytest.fixture
def full_black_board() -> Board:
    return Board.from_rows(FULL_BLACK_ROWS)
