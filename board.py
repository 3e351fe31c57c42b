from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, FrozenSet, Iterable, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

Coord = Tuple[int, int]

# observed_state() value for a cell that has not been opened
COVERED = -1

# upper bound on relocation scans after the first click
MAX_RELOCATION_PASSES = 16


class InvalidConfiguration(ValueError):
    """Board dimensions / mine count that cannot produce a playable puzzle."""


class CellState(Enum):
    """Possible visible states of a cell."""
    UNOPENED = auto()
    OPEN = auto()
    FLAGGED = auto()


@dataclass
class Cell:
    """Represents a single square on the Minesweeper board."""
    row: int
    col: int
    is_mine: bool = False
    adjacent_mines: int = 0
    state: CellState = CellState.UNOPENED

    @property
    def is_open(self) -> bool:
        return self.state == CellState.OPEN

    @property
    def is_flagged(self) -> bool:
        return self.state == CellState.FLAGGED

    def display_char(self, reveal_mines: bool = False) -> str:
        """
        Character for this cell.

        - 'U' : unopened
        - 'O' : open, 0 adjacent mines
        - '1'..'8' : open, that many adjacent mines
        - 'F' : flagged
        - 'B' : bomb (opened, or reveal_mines=True)
        """
        if reveal_mines and self.is_mine and not self.is_flagged:
            return "B"

        if self.state == CellState.FLAGGED:
            return "F"
        if self.state == CellState.UNOPENED:
            return "U"

        if self.is_mine:
            return "B"

        return "O" if self.adjacent_mines == 0 else str(self.adjacent_mines)


class Board:
    """
    Backend representation of a Minesweeper board.

    Design:
    - Mines are placed up front by initialize(). The first reveal moves any
      mine out of the clicked cell's neighborhood, so the first click always
      lands on a zero.
    - Coordinates are 0-indexed: row in [0, height-1], col in [0, width-1].
    - Solvers only read observed_state() / is_flagged(); everything else
      is ground truth for the game driver and tests.
    """

    def __init__(
        self,
        width: int = 10,
        height: int = 8,
        num_mines: int = 10,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.rng = rng or random.Random()
        self.clock = clock or time.monotonic
        self.initialize(width, height, num_mines)

    @classmethod
    def from_mines(
        cls,
        width: int,
        height: int,
        mines: Iterable[Coord],
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> "Board":
        """Build a board with a fixed mine layout instead of a random one."""
        layout = set(mines)
        board = cls(width, height, 0, rng=rng, clock=clock)
        for row, col in layout:
            board._check_bounds(row, col)
        board.num_mines = len(layout)
        board._lay_mines(layout)
        return board

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------
    def initialize(self, width: int, height: int, num_mines: int) -> None:
        """Reset all state and scatter num_mines mines uniformly at random."""
        if width <= 0 or height <= 0:
            raise InvalidConfiguration("Board dimensions must be positive.")
        if num_mines < 0:
            raise InvalidConfiguration("Number of mines must not be negative.")
        if num_mines > width * height:
            raise InvalidConfiguration(
                f"Cannot place {num_mines} mines on a {width}x{height} board."
            )

        self.width = width
        self.height = height
        self.num_mines = num_mines

        self.first_move_taken: bool = False
        self.start_time: Optional[float] = None
        self.game_over: bool = False
        self.win: bool = False
        self.revealed_count: int = 0

        self.grid: List[List[Cell]] = [
            [Cell(r, c) for c in range(width)] for r in range(height)
        ]

        all_positions = [(r, c) for r in range(height) for c in range(width)]
        self._lay_mines(self.rng.sample(all_positions, num_mines))

    def _lay_mines(self, positions: Iterable[Coord]) -> None:
        for row in self.grid:
            for cell in row:
                cell.is_mine = False
        for r, c in positions:
            self.grid[r][c].is_mine = True
        self._compute_adjacent_mine_counts()

    def _compute_adjacent_mine_counts(self) -> None:
        """Calculate the number of mines around each cell."""
        for row in range(self.height):
            for col in range(self.width):
                self.grid[row][col].adjacent_mines = sum(
                    1 for n in self.neighbors(row, col) if n.is_mine
                )

    # ------------------------------------------------------------------
    # Core board / cell helpers
    # ------------------------------------------------------------------
    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    def _check_bounds(self, row: int, col: int) -> None:
        if not self.in_bounds(row, col):
            raise IndexError(f"Cell ({row}, {col}) is out of bounds.")

    def get_cell(self, row: int, col: int) -> Cell:
        self._check_bounds(row, col)
        return self.grid[row][col]

    def neighbor_coords(self, row: int, col: int) -> List[Coord]:
        """Coordinates of the (up to 8) cells around (row, col)."""
        coords: List[Coord] = []
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                if dr == 0 and dc == 0:
                    continue
                nr, nc = row + dr, col + dc
                if self.in_bounds(nr, nc):
                    coords.append((nr, nc))
        return coords

    def neighbors(self, row: int, col: int) -> Iterable[Cell]:
        """Yield all neighboring cells (up to 8)."""
        for nr, nc in self.neighbor_coords(row, col):
            yield self.grid[nr][nc]

    # ------------------------------------------------------------------
    # First-click relocation
    # ------------------------------------------------------------------
    def _move_mine(self, source: Coord, target: Coord) -> None:
        sr, sc = source
        tr, tc = target
        self.grid[sr][sc].is_mine = False
        for n in self.neighbors(sr, sc):
            n.adjacent_mines -= 1
        self.grid[tr][tc].is_mine = True
        for n in self.neighbors(tr, tc):
            n.adjacent_mines += 1
        logger.debug("Relocated mine %s -> %s", source, target)

    def _relocate_mines(self, row: int, col: int) -> None:
        """
        Clear the mines out of (row, col) and its neighborhood.

        Every mine found in the protected area moves to a random cell that is
        neither mined nor protected. Raises InvalidConfiguration (without
        touching the board) when there are not enough free cells for that.
        """
        protected: Set[Coord] = {(row, col), *self.neighbor_coords(row, col)}
        if self.num_mines > self.width * self.height - len(protected):
            raise InvalidConfiguration(
                f"{self.num_mines} mines leave no room to keep the first click "
                f"at ({row}, {col}) and its neighbors clear."
            )

        for _ in range(MAX_RELOCATION_PASSES):
            intruders = sorted(rc for rc in protected if self.grid[rc[0]][rc[1]].is_mine)
            if not intruders:
                return
            for source in intruders:
                targets = [
                    (r, c)
                    for r in range(self.height)
                    for c in range(self.width)
                    if not self.grid[r][c].is_mine and (r, c) not in protected
                ]
                self._move_mine(source, self.rng.choice(targets))

        raise InvalidConfiguration(
            f"Could not clear the neighborhood of ({row}, {col}) "
            f"after {MAX_RELOCATION_PASSES} passes."
        )

    # ------------------------------------------------------------------
    # Game actions: reveal / flag cells
    # ------------------------------------------------------------------
    def reveal(self, row: int, col: int) -> bool:
        """
        Open the cell at (row, col).

        - Returns False (and changes nothing) if the game is over or the
          cell is flagged or already open.
        - On the first move, mines around the cell are relocated.
        - If the opened cell is a mine, the game is lost.
        - If the opened cell has 0 adjacent mines, a flood-fill is performed.
        """
        self._check_bounds(row, col)
        if self.game_over:
            return False

        cell = self.grid[row][col]
        if cell.is_flagged or cell.is_open:
            return False

        if not self.first_move_taken:
            self._relocate_mines(row, col)
            self.start_time = self.clock()
            self.first_move_taken = True

        if cell.is_mine:
            # Stepped on a mine -> game over
            cell.state = CellState.OPEN
            self.game_over = True
            self.win = False
            logger.info("Mine hit at (%d, %d)", row, col)
            return True

        self._flood_fill_open(row, col)

        if self.is_won():
            self.game_over = True
            self.win = True
            self._flag_remaining_mines()
            logger.info("All safe cells opened")
        return True

    def _flood_fill_open(self, start_row: int, start_col: int) -> None:
        """
        Open a region of safe cells with 0 adjacent mines, plus their
        boundary of numbered cells.
        """
        stack: List[Coord] = [(start_row, start_col)]

        while stack:
            row, col = stack.pop()
            cell = self.grid[row][col]

            if cell.is_open or cell.is_flagged or cell.is_mine:
                continue

            cell.state = CellState.OPEN
            self.revealed_count += 1

            if cell.adjacent_mines == 0:
                for neighbor in self.neighbors(row, col):
                    if not neighbor.is_open and not neighbor.is_flagged:
                        stack.append((neighbor.row, neighbor.col))

    def _flag_remaining_mines(self) -> None:
        for cell in self.iter_cells():
            if cell.is_mine and cell.state == CellState.UNOPENED:
                cell.state = CellState.FLAGGED

    def toggle_flag(self, row: int, col: int) -> bool:
        """
        Toggle a flag on the given cell.
        Flags can only be placed on unopened cells; returns False otherwise.
        """
        self._check_bounds(row, col)
        if self.game_over:
            return False

        cell = self.grid[row][col]
        if cell.is_open:
            return False

        if cell.state == CellState.UNOPENED:
            cell.state = CellState.FLAGGED
        else:
            cell.state = CellState.UNOPENED
        return True

    # ------------------------------------------------------------------
    # Queries (the solver-facing surface)
    # ------------------------------------------------------------------
    def observed_state(self, row: int, col: int) -> int:
        """Adjacent mine count for an open cell, COVERED otherwise."""
        cell = self.get_cell(row, col)
        if cell.is_open:
            return cell.adjacent_mines
        return COVERED

    def is_flagged(self, row: int, col: int) -> bool:
        return self.get_cell(row, col).is_flagged

    def is_active(self) -> bool:
        return self.first_move_taken

    def elapsed_seconds(self) -> int:
        if self.start_time is None:
            return 0
        return int(self.clock() - self.start_time)

    def is_game_lost(self, row: int, col: int) -> bool:
        cell = self.get_cell(row, col)
        return cell.is_open and cell.is_mine

    def is_won(self) -> bool:
        return self.revealed_count == self.width * self.height - self.num_mines

    # ------------------------------------------------------------------
    # Ground-truth views (driver and tests)
    # ------------------------------------------------------------------
    @property
    def mines(self) -> FrozenSet[Coord]:
        return frozenset(
            (cell.row, cell.col) for cell in self.iter_cells() if cell.is_mine
        )

    def iter_cells(self) -> Iterable[Cell]:
        """Iterate over all cells in row-major order."""
        for row in self.grid:
            for cell in row:
                yield cell

    def count_flags(self) -> int:
        """Count how many cells are flagged."""
        return sum(1 for cell in self.iter_cells() if cell.is_flagged)

    def remaining_mines_estimate(self) -> int:
        """
        How many mines *should* remain, assuming every flag is correct.
        Mainly for UI/debugging, not strict rule enforcement.
        """
        return self.num_mines - self.count_flags()

    # ------------------------------------------------------------------
    # Rendering helpers (terminal front-end can just print(board))
    # ------------------------------------------------------------------
    def to_display_grid(self, reveal_mines: bool = False) -> List[List[str]]:
        """2D list of display characters (see Cell.display_char)."""
        return [
            [
                self.grid[r][c].display_char(
                    reveal_mines=reveal_mines or self.game_over
                )
                for c in range(self.width)
            ]
            for r in range(self.height)
        ]

    def __str__(self) -> str:
        return self.render()

    def render(self, reveal_mines: bool = False) -> str:
        """
        Render the board as a multiline string, e.g.:

        ____________________
        [U][U][2][U][O][U]
        [U][U][2][U][U][U]
        ____________________
        """
        grid = self.to_display_grid(reveal_mines=reveal_mines)
        border = "_" * (self.width * 3 + 2)

        lines = [border]
        for r in range(self.height):
            lines.append("".join(f"[{grid[r][c]}]" for c in range(self.width)))
        lines.append(border)
        return "\n".join(lines)
