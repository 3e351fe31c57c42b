from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Difficulty(Enum):
    """Board presets offered by the terminal driver."""
    EASY = (8, 10, 10, "Easy")
    MEDIUM = (16, 16, 40, "Medium")
    HARD = (16, 30, 99, "Hard")

    def __init__(self, rows: int, cols: int, mines: int, label: str) -> None:
        self.rows = rows
        self.cols = cols
        self.mines = mines
        self.label = label


@dataclass(frozen=True)
class SolverConfig:
    """
    Tuning knobs shared by both solvers.

    max_stall_loops  : consecutive frontier rotations without progress
                       before the graph solver gives up
    max_simple_moves : cap on commands issued by one simple solve
                       (None = until no rule applies)
    """
    max_stall_loops: int = 10
    max_simple_moves: Optional[int] = None

    def __post_init__(self) -> None:
        if self.max_stall_loops <= 0:
            raise ValueError("max_stall_loops must be positive.")
        if self.max_simple_moves is not None and self.max_simple_moves < 0:
            raise ValueError("max_simple_moves must not be negative.")


LOG_LEVEL_ENV = "MINESWEEPER_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Set up root logging from `level` or the MINESWEEPER_LOG_LEVEL variable."""
    name = (level or os.environ.get(LOG_LEVEL_ENV, "WARNING")).upper()
    logging.basicConfig(level=getattr(logging, name, logging.WARNING), format=LOG_FORMAT)
