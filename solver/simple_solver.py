# solver/simple_solver.py
from __future__ import annotations

import logging
from typing import List

from .utils import (
    BaseSolver,
    Coord,
    SolveOutcome,
    SolveResult,
    center,
    count_flagged_neighbors,
    get_unknown_neighbors,
    numbered_cells,
)

logger = logging.getLogger(__name__)


class SimpleSolver(BaseSolver):
    """
    Stateless local-count solver.

    Each round makes two passes over the open numbered cells:

      For a cell with clue N, U = covered & unflagged neighbors,
      F = flagged neighbors:

      1. N - |U| - F == 0 and F != N -> every cell in U is a mine, flag them.
      2. F - N == 0 and U non-empty -> every cell in U is safe, open them.

    Rounds repeat until neither pass moves or `max_simple_moves` commands
    have been issued. Like the graph solver, it opens the center first on
    an untouched board.
    """

    def solve(self) -> SolveResult:
        if self.board.game_over:
            return SolveResult(SolveOutcome.SKIPPED)

        if not self.board.is_active():
            self.open(*center(self.board))

        while not self._capped():
            flagged = self._apply(self._saturated_cells(), self.flag)
            opened = self._apply(self._satisfied_cells(), self.open)
            if not (flagged or opened) or self.board.game_over:
                break

        outcome = self.final_outcome()
        logger.info("Simple solve finished: %s after %d moves", outcome.value, len(self.moves))
        return SolveResult(outcome, self.moves)

    def _capped(self) -> bool:
        cap = self.config.max_simple_moves
        return cap is not None and len(self.moves) >= cap

    def _apply(self, cells: List[Coord], command) -> bool:
        moved = False
        for row, col in cells:
            for r, c in get_unknown_neighbors(self.board, row, col):
                if self._capped() or self.board.game_over:
                    return moved
                moved = command(r, c) or moved
        return moved

    # ------------------------------------------------------------------ #
    # Local rules
    # ------------------------------------------------------------------ #
    def _saturated_cells(self) -> List[Coord]:
        """Cells whose unknown neighbors must all be mines."""
        cells: List[Coord] = []
        for row, col in numbered_cells(self.board):
            state = self.board.observed_state(row, col)
            flagged = count_flagged_neighbors(self.board, row, col)
            extra = state - len(get_unknown_neighbors(self.board, row, col)) - flagged
            if extra == 0 and flagged != state:
                cells.append((row, col))
        return cells

    def _satisfied_cells(self) -> List[Coord]:
        """Cells whose flags already account for their number."""
        cells: List[Coord] = []
        for row, col in numbered_cells(self.board):
            extra = count_flagged_neighbors(self.board, row, col) - self.board.observed_state(row, col)
            if extra == 0 and get_unknown_neighbors(self.board, row, col):
                cells.append((row, col))
        return cells
