from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass
class ScoringRules:
    line_base_points: int = 12
    line_step: float = 0.5
    cross_clear_multiplier: float = 2.0
    empty_board_bonus: int = 200
    cell_points: int = 1

    def score_for_lines(self, rows_cleared: int, cols_cleared: int, board_empty: bool) -> int:
        """Score for one simultaneous clear.

        Lines are indexed rows first, then columns; each is worth
        base * (1 + index * step). Clearing rows and columns together
        multiplies the sum, and an empty board afterwards adds a flat bonus.
        """
        lines = rows_cleared + cols_cleared
        if lines <= 0:
            return 0
        score = 0.0
        for index in range(lines):
            score += self.line_base_points * (1 + index * self.line_step)
        if rows_cleared > 0 and cols_cleared > 0:
            score *= self.cross_clear_multiplier
        if board_empty:
            score += self.empty_board_bonus
        return int(math.floor(score))

    def placement_score(self, num_cells: int) -> int:
        return int(num_cells) * self.cell_points
