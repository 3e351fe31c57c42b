# solver/game_solver.py
from __future__ import annotations

from typing import Optional

from board import Board
from config import SolverConfig
from .graph_solver import GraphSolver
from .simple_solver import SimpleSolver
from .utils import SolveResult


class Solver:
    """
    Entry point used by the game driver.

    Both commands return nothing; their effect is read back from the board.
    The outcome of the latest call (solved / stalled / ...) is kept in
    `last_result`.
    """

    def __init__(self, board: Board, config: Optional[SolverConfig] = None) -> None:
        self.board = board
        self.config = config or SolverConfig()
        self.last_result: Optional[SolveResult] = None

    def run_graph_solve(self) -> None:
        self.last_result = GraphSolver(self.board, self.config).solve()

    def run_simple_solve(self) -> None:
        self.last_result = SimpleSolver(self.board, self.config).solve()
