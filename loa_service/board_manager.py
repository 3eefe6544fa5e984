"""Board-level model for the Lines of Action engine.

The :class:`Board` is the single source of truth for piece positions. It
owns the 8x8 grid and offers side-effect-free queries over it (occupancy,
bounds, connected groups). The only writers are :meth:`Board.set_cell`,
used by :class:`~loa_service.game_engine.GameEngine`, and checkpoint
restoration.

Checkpoints record only the cells about to change, so a transient probe
costs O(1) to take and O(1) to restore. They form a stack: every checkpoint
must be released in exactly the reverse order it was taken.

Usage:
    board = Board.initial()
    cp = board.push_checkpoint([src, dst])
    ...  # hypothetical writes through set_cell
    board.pop_checkpoint(cp)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .errors import InvalidStateError
from .models import BOARD_SIZE, BoardState, Player, Position

__all__ = ["Board", "Checkpoint", "NEIGHBOUR_OFFSETS"]

Cell = Optional[Player]

# King-move neighbourhood used by the connectivity analysis.
NEIGHBOUR_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
)

_SYMBOLS = {None: ".", Player.BLACK: "b", Player.WHITE: "w"}
_FROM_SYMBOL = {v: k for k, v in _SYMBOLS.items()}


@dataclass(frozen=True, slots=True)
class Checkpoint:
    """Prior values of the cells a transient mutation is about to change."""

    depth: int
    cells: Tuple[Tuple[int, int, Cell], ...]


class Board:
    """Mutable 8x8 grid with a stack of transient checkpoints."""

    __slots__ = ("size", "_grid", "_checkpoints")

    def __init__(self, grid: Optional[List[List[Cell]]] = None):
        self.size = BOARD_SIZE
        if grid is None:
            grid = [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]
        self._grid: List[List[Cell]] = grid
        self._checkpoints: List[Checkpoint] = []

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def empty(cls) -> "Board":
        return cls()

    @classmethod
    def initial(cls) -> "Board":
        """Standard setup: black on rows 0/7, white on columns 0/7.

        Each side gets 12 pieces and the four corners stay empty.
        """
        board = cls()
        for col in range(1, BOARD_SIZE - 1):
            board._grid[0][col] = Player.BLACK
            board._grid[BOARD_SIZE - 1][col] = Player.BLACK
        for row in range(1, BOARD_SIZE - 1):
            board._grid[row][0] = Player.WHITE
            board._grid[row][BOARD_SIZE - 1] = Player.WHITE
        return board

    @classmethod
    def from_rows(cls, rows: Sequence[str]) -> "Board":
        """Build a board from eight strings of ``b``, ``w`` and ``.``.

        Whitespace inside a row is ignored, so ``"b . . w . . . ."`` and
        ``"b..w...."`` describe the same row.
        """
        if len(rows) != BOARD_SIZE:
            raise ValueError(f"expected {BOARD_SIZE} rows, got {len(rows)}")
        grid: List[List[Cell]] = []
        for r, text in enumerate(rows):
            symbols = "".join(text.split())
            if len(symbols) != BOARD_SIZE:
                raise ValueError(f"row {r} has {len(symbols)} cells: {text!r}")
            try:
                grid.append([_FROM_SYMBOL[ch] for ch in symbols])
            except KeyError as e:
                raise ValueError(f"unknown cell symbol {e.args[0]!r} in row {r}") from e
        return cls(grid)

    @classmethod
    def from_state(cls, state: BoardState) -> "Board":
        """Build a board from a wire snapshot."""
        if len(state.cells) != BOARD_SIZE or any(
            len(row) != BOARD_SIZE for row in state.cells
        ):
            raise ValueError(f"board snapshot must be {BOARD_SIZE}x{BOARD_SIZE}")
        return cls([list(row) for row in state.cells])

    def to_state(self) -> BoardState:
        return BoardState(size=self.size, cells=[list(row) for row in self._grid])

    def copy(self) -> "Board":
        """Independent copy of the grid; outstanding checkpoints are not copied."""
        return Board([list(row) for row in self._grid])

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @staticmethod
    def in_bounds(row: int, col: int) -> bool:
        return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE

    def occupant(self, pos: Position) -> Cell:
        """Return the player on ``pos`` or ``None`` if the cell is empty."""
        return self._grid[pos.row][pos.col]

    def cell(self, row: int, col: int) -> Cell:
        return self._grid[row][col]

    def pieces(self, player: Player) -> List[Position]:
        """Positions occupied by ``player`` in row-major order."""
        return [
            Position(row=r, col=c)
            for r, c in self._coords(player)
        ]

    def count(self, player: Player) -> int:
        return sum(row.count(player) for row in self._grid)

    def connected_groups(self, player: Player) -> int:
        """Count the 8-connected groups formed by ``player``'s pieces."""
        visited = [[False] * BOARD_SIZE for _ in range(BOARD_SIZE)]
        groups = 0
        for r, c in self._coords(player):
            if not visited[r][c]:
                groups += 1
                self._flood_fill(r, c, player, visited)
        return groups

    def _flood_fill(
        self,
        row: int,
        col: int,
        player: Player,
        visited: List[List[bool]],
    ) -> None:
        """Mark every cell of the group containing ``(row, col)``."""
        stack = [(row, col)]
        visited[row][col] = True
        grid = self._grid
        while stack:
            r, c = stack.pop()
            for dr, dc in NEIGHBOUR_OFFSETS:
                nr, nc = r + dr, c + dc
                if (
                    0 <= nr < BOARD_SIZE
                    and 0 <= nc < BOARD_SIZE
                    and not visited[nr][nc]
                    and grid[nr][nc] == player
                ):
                    visited[nr][nc] = True
                    stack.append((nr, nc))

    def _coords(self, player: Player) -> Iterator[Tuple[int, int]]:
        for r, row in enumerate(self._grid):
            for c, value in enumerate(row):
                if value == player:
                    yield r, c

    # ------------------------------------------------------------------
    # Mutation and checkpoints
    # ------------------------------------------------------------------

    def set_cell(self, pos: Position, value: Cell) -> None:
        self._grid[pos.row][pos.col] = value

    @property
    def checkpoint_depth(self) -> int:
        """Number of transient checkpoints not yet released."""
        return len(self._checkpoints)

    def push_checkpoint(self, positions: Iterable[Position]) -> Checkpoint:
        """Record the current value of ``positions`` before they change."""
        checkpoint = Checkpoint(
            depth=len(self._checkpoints),
            cells=tuple(
                (p.row, p.col, self._grid[p.row][p.col]) for p in positions
            ),
        )
        self._checkpoints.append(checkpoint)
        return checkpoint

    def pop_checkpoint(self, checkpoint: Checkpoint) -> None:
        """Restore the cells recorded by ``checkpoint``.

        Raises:
            InvalidStateError: if ``checkpoint`` is not the most recent
                outstanding checkpoint.
        """
        if not self._checkpoints or self._checkpoints[-1] is not checkpoint:
            raise InvalidStateError(
                "Checkpoints must be released in reverse order of acquisition",
                context={
                    "depth": checkpoint.depth,
                    "outstanding": len(self._checkpoints),
                },
            )
        self._checkpoints.pop()
        # Reverse order so a cell listed twice ends at its oldest value.
        for r, c, value in reversed(checkpoint.cells):
            self._grid[r][c] = value

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def render(self) -> str:
        """Text grid, one row per line, using ``b``, ``w`` and ``.``."""
        return "\n".join(
            " ".join(_SYMBOLS[value] for value in row) for row in self._grid
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._grid == other._grid

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return (
            f"Board(black={self.count(Player.BLACK)}, "
            f"white={self.count(Player.WHITE)}, "
            f"checkpoints={len(self._checkpoints)})"
        )
