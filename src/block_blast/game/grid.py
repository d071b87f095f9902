from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .pieces import BLOCK_COLORS
from .rules import ScoringRules
from .shapes import Shape, as_shape


Coordinate = Tuple[int, int]


@dataclass
class ClearResult:
    rows_cleared: int
    cols_cleared: int
    score: int
    rows: Tuple[int, ...] = ()
    cols: Tuple[int, ...] = ()

    @property
    def lines_cleared(self) -> int:
        return self.rows_cleared + self.cols_cleared


def _shape_of(piece) -> Shape:
    # Accepts a Piece, a PieceVariant or a bare shape
    if isinstance(piece, np.ndarray):
        return as_shape(piece)
    return as_shape(getattr(piece, "shape", piece))


class Board:
    """Fixed-size grid of placed blocks.

    Cells hold 0 when empty and the 1-based palette index of the occupying
    color otherwise. Rows are indexed top to bottom, columns left to right.
    """

    def __init__(self, height: int = 8, width: int = 8, rules: Optional[ScoringRules] = None,
                 palette: Sequence[str] = BLOCK_COLORS) -> None:
        if int(height) < 1 or int(width) < 1:
            raise ValueError(f"Board dimensions must be positive, got {height}x{width}")
        self.height = int(height)
        self.width = int(width)
        self.rules = rules or ScoringRules()
        self.palette = tuple(palette)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def reset(self) -> None:
        self.grid.fill(0)

    def is_inside(self, row: int, col: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    def color_code(self, color: Optional[str]) -> int:
        if color is None:
            return 1
        try:
            return self.palette.index(color) + 1
        except ValueError:
            raise ValueError(f"Color {color!r} is not in the palette") from None

    def _cells_at(self, shape: Shape, row: int, col: int) -> Optional[Tuple[np.ndarray, np.ndarray]]:
        """Absolute filled-cell indices, or None if any falls outside the grid."""
        rows, cols = np.nonzero(shape)
        if rows.size == 0:
            return None
        rows = rows + int(row)
        cols = cols + int(col)
        if rows.min() < 0 or cols.min() < 0 or rows.max() >= self.height or cols.max() >= self.width:
            return None
        return rows, cols

    def can_place(self, piece, row: int, col: int) -> bool:
        cells = self._cells_at(_shape_of(piece), row, col)
        if cells is None:
            return False
        return not bool(self.grid[cells].any())

    def place(self, piece, row: int, col: int) -> bool:
        """Write the piece's color into its cells. False, with no change, if it does not fit."""
        if not self.can_place(piece, row, col):
            return False
        code = self.color_code(getattr(piece, "color", None))
        cells = self._cells_at(_shape_of(piece), row, col)
        self.grid[cells] = code
        return True

    def full_lines(self, filled: Optional[np.ndarray] = None) -> Tuple[List[int], List[int]]:
        if filled is None:
            filled = self.grid != 0
        rows = [int(r) for r in np.flatnonzero(filled.all(axis=1))]
        cols = [int(c) for c in np.flatnonzero(filled.all(axis=0))]
        return rows, cols

    def clear_lines(self) -> ClearResult:
        """Clear every full row and column found before any of them is cleared."""
        rows, cols = self.full_lines()
        if not rows and not cols:
            return ClearResult(rows_cleared=0, cols_cleared=0, score=0)
        self.grid[rows, :] = 0
        self.grid[:, cols] = 0
        score = self.rules.score_for_lines(len(rows), len(cols), self.is_empty())
        return ClearResult(
            rows_cleared=len(rows),
            cols_cleared=len(cols),
            score=score,
            rows=tuple(rows),
            cols=tuple(cols),
        )

    def preview_clear(self, piece, row: int, col: int) -> Tuple[List[int], List[int]]:
        """Rows and columns that placing `piece` at (row, col) would complete."""
        cells = self._cells_at(_shape_of(piece), row, col)
        if cells is None or self.grid[cells].any():
            return [], []
        filled = self.grid != 0
        filled[cells] = True
        return self.full_lines(filled)

    def is_empty(self) -> bool:
        return not bool(self.grid.any())

    def valid_placements(self, piece) -> List[Coordinate]:
        return [
            (row, col)
            for row in range(self.height)
            for col in range(self.width)
            if self.can_place(piece, row, col)
        ]

    def can_place_any(self, pieces: Iterable) -> bool:
        """True if at least one of `pieces` fits somewhere on the board."""
        for piece in pieces:
            shape = _shape_of(piece)
            if shape.size == 0 or not shape.any():
                continue
            for row in range(self.height):
                for col in range(self.width):
                    if self.can_place(shape, row, col):
                        return True
        return False

    def cell_colors(self) -> List[List[Optional[str]]]:
        return [
            [self.palette[v - 1] if v else None for v in map(int, row)]
            for row in self.grid
        ]

    def filled_ratio(self) -> float:
        return float(np.count_nonzero(self.grid)) / float(self.height * self.width)

    def copy(self) -> "Board":
        board = Board(self.height, self.width, self.rules, self.palette)
        board.grid = self.grid.copy()
        return board

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()
