# tests/test_graph_solver.py

import logging
import random

from board import COVERED, Board, CellState
from config import SolverConfig
from solver.game_solver import Solver
from solver.graph_solver import Frontier, GraphSolver, Node
from solver.utils import Move, SolveOutcome


def propagation_board() -> Board:
    """
    3x6 board, mines at (0,5) and (1,5). Opening the center leaves column 4
    showing 2/2/1 with (2,5) still covered.
    """
    return Board.from_mines(width=6, height=3, mines=[(0, 5), (1, 5)])


def assert_no_wrong_moves(board: Board) -> None:
    for cell in board.iter_cells():
        assert not (cell.is_open and cell.is_mine), f"opened mine at {(cell.row, cell.col)}"
        if cell.is_flagged:
            assert cell.is_mine, f"flagged safe cell at {(cell.row, cell.col)}"


# ---------------------------------------------------------------------------
# Frontier ordering
# ---------------------------------------------------------------------------

def test_frontier_serves_clear_nodes_first_then_smallest():
    frontier = Frontier()
    big = Node((0, 0), remaining=1, unknown={(1, 1), (1, 2), (1, 3)}, activated=True)
    small = Node((0, 1), remaining=1, unknown={(1, 1), (1, 2)}, activated=True)
    clear = Node((0, 2), remaining=0, unknown={(1, 3), (1, 4), (1, 5)}, activated=True)

    frontier.push(big)
    frontier.push(small)
    assert frontier.peek() == (0, 1)

    frontier.push(clear)
    assert frontier.peek() == (0, 2)
    assert len(frontier) == 3

    frontier.remove((0, 2))
    assert (0, 2) not in frontier
    assert frontier.peek() == (0, 1)


def test_frontier_rotation_sends_node_to_the_back():
    frontier = Frontier()
    small = Node((0, 1), remaining=1, unknown={(1, 1), (1, 2)}, activated=True)
    big = Node((0, 0), remaining=1, unknown={(1, 1), (1, 2), (1, 3)}, activated=True)
    frontier.push(small)
    frontier.push(big)

    frontier.rotate(small)
    assert frontier.peek() == (0, 0)
    frontier.rotate(big)
    assert frontier.peek() == (0, 1)
    assert len(frontier) == 2


def test_frontier_refresh_promotes_node_that_became_clear():
    frontier = Frontier()
    node = Node((2, 2), remaining=1, unknown={(1, 1), (1, 2)}, activated=True)
    other = Node((0, 0), remaining=1, unknown={(1, 1)}, activated=True)
    frontier.push(node)
    frontier.push(other)

    node.remaining = 0
    frontier.refresh(node)

    assert frontier.peek() == (2, 2)
    frontier.remove((2, 2))
    frontier.remove((0, 0))
    assert frontier.peek() is None
    assert len(frontier) == 0


# ---------------------------------------------------------------------------
# Solving scenarios
# ---------------------------------------------------------------------------

def test_saturated_node_flags_and_propagates():
    """Flagging around (0,4) drops (1,4) and (2,4) to zero, which opens (2,5)."""
    board = propagation_board()

    result = GraphSolver(board).solve()

    assert result.outcome == SolveOutcome.SOLVED
    assert result.stall_cycles == 0
    assert result.moves == [
        Move("open", 1, 3),
        Move("flag", 0, 5),
        Move("flag", 1, 5),
        Move("open", 2, 5),
    ]
    assert board.win is True
    assert_no_wrong_moves(board)


def test_strip_solved_from_center_with_single_flag():
    """1x5 strip with the mine at column 4."""
    board = Board.from_mines(width=5, height=1, mines=[(0, 4)])

    result = GraphSolver(board).solve()

    assert result.outcome == SolveOutcome.SOLVED
    assert result.stall_cycles == 0
    assert {(c.row, c.col) for c in board.iter_cells() if c.is_flagged} == {(0, 4)}
    assert all(board.observed_state(0, c) >= 0 for c in range(4))


def test_strip_won_by_first_click_leaves_nothing_to_solve():
    """The cascade wins the game; the board itself flags the leftover mine."""
    board = Board.from_mines(width=5, height=1, mines=[(0, 4)])
    board.reveal(0, 0)
    assert board.observed_state(0, 1) == 0

    solver = Solver(board)
    solver.run_graph_solve()

    assert solver.last_result.outcome == SolveOutcome.SKIPPED
    assert solver.last_result.moves == []
    assert board.win is True
    assert {(c.row, c.col) for c in board.iter_cells() if c.is_flagged} == {(0, 4)}
    assert board.revealed_count == 4


def test_ambiguous_pair_stalls_at_the_cap():
    """Two 1s sharing the same two unknowns cannot be decided locally."""
    board = Board.from_mines(width=5, height=2, mines=[(0, 4)])

    result = GraphSolver(board).solve()

    assert result.outcome == SolveOutcome.STALLED
    assert result.stall_cycles == 10
    assert result.moves == [Move("open", 1, 2)]
    assert board.observed_state(0, 4) == COVERED
    assert board.observed_state(1, 4) == COVERED
    assert board.count_flags() == 0


def test_stall_cap_is_configurable():
    board = Board.from_mines(width=5, height=2, mines=[(0, 4)])

    result = GraphSolver(board, SolverConfig(max_stall_loops=3)).solve()

    assert result.outcome == SolveOutcome.STALLED
    assert result.stall_cycles == 3


def test_existing_user_flags_are_respected():
    board = propagation_board()
    board.reveal(1, 3)
    board.toggle_flag(0, 5)

    result = GraphSolver(board).solve()

    assert result.outcome == SolveOutcome.SOLVED
    assert Move("flag", 0, 5) not in result.moves
    assert board.is_flagged(0, 5)
    assert_no_wrong_moves(board)


def test_cells_contradicted_by_user_flags_are_skipped(caplog):
    board = Board.from_mines(width=5, height=2, mines=[(0, 4)])
    board.reveal(1, 2)
    board.toggle_flag(0, 4)
    board.toggle_flag(1, 4)

    with caplog.at_level(logging.WARNING, logger="solver.graph_solver"):
        result = GraphSolver(board).solve()

    assert result.outcome == SolveOutcome.EXHAUSTED
    assert result.moves == []
    assert "2 flagged neighbors contradict its number" in caplog.text


def test_finished_boards_are_left_alone():
    lost = Board.from_mines(width=6, height=6, mines=[(5, 5), (5, 3)])
    lost.reveal(0, 0)
    lost.reveal(5, 5)
    opened = lost.revealed_count

    result = GraphSolver(lost).solve()

    assert result.outcome == SolveOutcome.SKIPPED
    assert result.moves == []
    assert lost.revealed_count == opened

    won = Board.from_mines(width=3, height=3, mines=[(0, 0)])
    won.reveal(2, 2)
    assert GraphSolver(won).solve().outcome == SolveOutcome.SKIPPED


def test_never_opens_a_mine_or_flags_a_safe_cell():
    """Run against many random boards with known ground truth."""
    outcomes = set()
    for width, height, mines in [(9, 9, 10), (16, 16, 40), (30, 16, 99)]:
        for seed in range(30):
            board = Board(width=width, height=height, num_mines=mines, rng=random.Random(seed))

            result = GraphSolver(board).solve()

            outcomes.add(result.outcome)
            assert result.outcome != SolveOutcome.LOST
            assert_no_wrong_moves(board)
            for move in result.moves:
                if move.action == "flag":
                    assert (move.row, move.col) in board.mines
                else:
                    assert (move.row, move.col) not in board.mines
    assert SolveOutcome.SOLVED in outcomes


def test_second_run_after_stall_does_not_repeat_moves():
    board = Board.from_mines(width=5, height=2, mines=[(0, 4)])
    GraphSolver(board).solve()

    result = GraphSolver(board).solve()

    assert result.outcome == SolveOutcome.STALLED
    assert result.moves == []


def test_facade_returns_nothing_and_keeps_result():
    board = propagation_board()
    solver = Solver(board)

    assert solver.last_result is None
    assert solver.run_graph_solve() is None
    assert solver.last_result.outcome == SolveOutcome.SOLVED
    assert board.get_cell(2, 5).state == CellState.OPEN
