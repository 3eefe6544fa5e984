"""
Tests for the Board model.

- initial setup and piece counts
- 8-connected group counting
- checkpoint stack discipline
- text and wire round-trips
"""

import pytest
from pydantic import ValidationError

from loa_service.board_manager import Board
from loa_service.errors import InvalidStateError
from loa_service.models import BoardState, Player, Position


class TestSetup:
    def test_twelve_pieces_per_side(self, initial_board):
        assert initial_board.count(Player.BLACK) == 12
        assert initial_board.count(Player.WHITE) == 12

    def test_corners_empty(self, initial_board):
        for row, col in ((0, 0), (0, 7), (7, 0), (7, 7)):
            assert initial_board.occupant(Position(row=row, col=col)) is None

    def test_black_on_rows_white_on_columns(self, initial_board):
        for col in range(1, 7):
            assert initial_board.occupant(Position(row=0, col=col)) == Player.BLACK
            assert initial_board.occupant(Position(row=7, col=col)) == Player.BLACK
        for row in range(1, 7):
            assert initial_board.occupant(Position(row=row, col=0)) == Player.WHITE
            assert initial_board.occupant(Position(row=row, col=7)) == Player.WHITE

    def test_each_side_starts_in_two_groups(self, initial_board):
        assert initial_board.connected_groups(Player.BLACK) == 2
        assert initial_board.connected_groups(Player.WHITE) == 2

    def test_every_cell_holds_a_known_value(self, initial_board):
        for row in range(8):
            for col in range(8):
                assert initial_board.cell(row, col) in (None, Player.BLACK, Player.WHITE)


class TestQueries:
    def test_in_bounds(self):
        assert Board.in_bounds(0, 0)
        assert Board.in_bounds(7, 7)
        assert not Board.in_bounds(-1, 3)
        assert not Board.in_bounds(3, 8)

    def test_position_out_of_range_is_rejected(self):
        with pytest.raises(ValidationError):
            Position(row=8, col=0)
        with pytest.raises(ValidationError):
            Position(row=0, col=-1)

    def test_pieces_are_row_major(self, board_factory):
        board = board_factory([
            "......b.",
            "b.......",
            "........",
            "........",
            "........",
            "........",
            "........",
            "...b....",
        ])
        assert board.pieces(Player.BLACK) == [
            Position(row=0, col=6),
            Position(row=1, col=0),
            Position(row=7, col=3),
        ]

    def test_diagonal_neighbours_connect(self, board_factory):
        board = board_factory([
            "b.......",
            ".b......",
            "..b.....",
            "........",
            "........",
            "........",
            "........",
            "........",
        ])
        assert board.connected_groups(Player.BLACK) == 1

    def test_gap_splits_groups(self, board_factory):
        board = board_factory([
            "b.b.....",
            "........",
            "........",
            "........",
            "........",
            "........",
            "........",
            ".......b",
        ])
        assert board.connected_groups(Player.BLACK) == 3

    def test_other_colour_does_not_bridge(self, board_factory):
        board = board_factory([
            "bwb.....",
            "........",
            "........",
            "........",
            "........",
            "........",
            "........",
            "........",
        ])
        assert board.connected_groups(Player.BLACK) == 2
        assert board.connected_groups(Player.WHITE) == 1

    def test_empty_board_has_no_groups(self):
        board = Board.empty()
        assert board.connected_groups(Player.BLACK) == 0
        assert board.connected_groups(Player.WHITE) == 0

    def test_blob_is_one_group(self, black_blob_board):
        board = black_blob_board
        assert board.count(Player.BLACK) == 12
        assert board.connected_groups(Player.BLACK) == 1
        assert board.connected_groups(Player.WHITE) == 2


class TestCheckpoints:
    def test_restores_recorded_cells(self, initial_board):
        before = initial_board.copy()
        src, dst = Position(row=0, col=1), Position(row=2, col=1)
        cp = initial_board.push_checkpoint([src, dst])
        initial_board.set_cell(dst, Player.BLACK)
        initial_board.set_cell(src, None)
        assert initial_board.checkpoint_depth == 1
        initial_board.pop_checkpoint(cp)
        assert initial_board == before
        assert initial_board.checkpoint_depth == 0

    def test_nested_release_in_reverse_order(self, initial_board):
        before = initial_board.copy()
        outer = initial_board.push_checkpoint([Position(row=0, col=1)])
        initial_board.set_cell(Position(row=0, col=1), None)
        inner = initial_board.push_checkpoint([Position(row=0, col=1)])
        initial_board.set_cell(Position(row=0, col=1), Player.WHITE)
        initial_board.pop_checkpoint(inner)
        assert initial_board.occupant(Position(row=0, col=1)) is None
        initial_board.pop_checkpoint(outer)
        assert initial_board == before

    def test_out_of_order_release_raises(self, initial_board):
        outer = initial_board.push_checkpoint([Position(row=0, col=1)])
        initial_board.push_checkpoint([Position(row=0, col=2)])
        with pytest.raises(InvalidStateError):
            initial_board.pop_checkpoint(outer)

    def test_release_without_checkpoint_raises(self, initial_board):
        other = Board.initial()
        cp = other.push_checkpoint([Position(row=0, col=1)])
        with pytest.raises(InvalidStateError):
            initial_board.pop_checkpoint(cp)


class TestConversions:
    def test_from_rows_matches_render(self, black_blob_board):
        board = black_blob_board
        assert board.render().splitlines()[2] == ". . b b b b . ."
        assert Board.from_rows(board.render().splitlines()) == board

    def test_from_rows_rejects_bad_input(self):
        with pytest.raises(ValueError):
            Board.from_rows(["........"] * 7)
        with pytest.raises(ValueError):
            Board.from_rows(["......."] + ["........"] * 7)
        with pytest.raises(ValueError):
            Board.from_rows(["x......."] + ["........"] * 7)

    def test_state_snapshot(self, initial_board):
        state = initial_board.to_state()
        assert isinstance(state, BoardState)
        assert state.cells[0][1] == Player.BLACK
        assert state.cells[1][0] == Player.WHITE
        assert state.cells[0][0] is None
        assert Board.from_state(state) == initial_board

    def test_snapshot_is_detached(self, initial_board):
        state = initial_board.to_state()
        initial_board.set_cell(Position(row=0, col=1), None)
        assert state.cells[0][1] == Player.BLACK

    def test_from_state_rejects_wrong_shape(self):
        with pytest.raises(ValueError):
            Board.from_state(BoardState(cells=[[None] * 8] * 7))

    def test_copy_is_independent(self, initial_board):
        clone = initial_board.copy()
        clone.set_cell(Position(row=0, col=1), None)
        assert initial_board.occupant(Position(row=0, col=1)) == Player.BLACK
        assert clone != initial_board
