# solver/utils.py
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Literal, Optional, Tuple

from board import COVERED, Board
from config import SolverConfig

logger = logging.getLogger(__name__)

Coord = Tuple[int, int]

# ---------------------------------------------------------------------------
# Core data structures
# ---------------------------------------------------------------------------

ActionType = Literal["open", "flag"]


@dataclass(frozen=True)
class Move:
    """A single solver action on the board."""
    action: ActionType
    row: int
    col: int


class SolveOutcome(Enum):
    """Why a solve call stopped."""
    SKIPPED = "skipped"        # game was already over
    SOLVED = "solved"          # every safe cell is open
    EXHAUSTED = "exhausted"    # nothing left to deduce, board not won
    STALLED = "stalled"        # stall cap reached with constraints pending
    LOST = "lost"              # a mine was opened (only possible with bad flags)


@dataclass
class SolveResult:
    outcome: SolveOutcome
    moves: List[Move] = field(default_factory=list)
    stall_cycles: int = 0


# ---------------------------------------------------------------------------
# Base solver interface
# ---------------------------------------------------------------------------

class BaseSolver(ABC):
    """
    Abstract base class for the deduction solvers.

    A solver borrows the board for one solve() call. It reads only the
    observed state and issues the same reveal / flag commands a player would.

    Typical usage:
        result = SomeSolver(board).solve()
    """

    def __init__(self, board: Board, config: Optional[SolverConfig] = None) -> None:
        self.board = board
        self.config = config or SolverConfig()
        self.moves: List[Move] = []

    @abstractmethod
    def solve(self) -> SolveResult:
        raise NotImplementedError

    def open(self, row: int, col: int) -> bool:
        """Reveal a cell; records the move only if the board accepted it."""
        accepted = self.board.reveal(row, col)
        if accepted:
            self.moves.append(Move("open", row, col))
            logger.debug("open (%d, %d)", row, col)
        return accepted

    def flag(self, row: int, col: int) -> bool:
        """Flag a covered cell; never un-flags."""
        if self.board.is_flagged(row, col):
            return False
        accepted = self.board.toggle_flag(row, col)
        if accepted:
            self.moves.append(Move("flag", row, col))
            logger.debug("flag (%d, %d)", row, col)
        return accepted

    def final_outcome(self) -> SolveOutcome:
        if self.board.game_over:
            return SolveOutcome.SOLVED if self.board.win else SolveOutcome.LOST
        return SolveOutcome.EXHAUSTED


# ---------------------------------------------------------------------------
# Board / neighborhood helpers (observed state only)
# ---------------------------------------------------------------------------

def is_covered(board: Board, row: int, col: int) -> bool:
    return board.observed_state(row, col) == COVERED


def get_unknown_neighbors(board: Board, row: int, col: int) -> List[Coord]:
    """
    Unknown = covered and unflagged neighbors.
    """
    return [
        (r, c) for r, c in board.neighbor_coords(row, col)
        if is_covered(board, r, c) and not board.is_flagged(r, c)
    ]


def count_flagged_neighbors(board: Board, row: int, col: int) -> int:
    return sum(1 for r, c in board.neighbor_coords(row, col) if board.is_flagged(r, c))


def numbered_cells(board: Board) -> List[Coord]:
    """Open cells showing a positive number, in row-major order."""
    return [
        (r, c)
        for r in range(board.height)
        for c in range(board.width)
        if board.observed_state(r, c) > 0
    ]


def center(board: Board) -> Coord:
    return board.height // 2, board.width // 2
