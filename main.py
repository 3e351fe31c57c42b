# main.py

from __future__ import annotations

from typing import Tuple

from board import Board
from config import Difficulty, configure_logging
from solver.game_solver import Solver


# ---------------------------------------------------------------------------
# Helper functions for user input
# ---------------------------------------------------------------------------

def ask_yes_no(prompt: str, default: bool = True) -> bool:
    default_str = "Y/n" if default else "y/N"
    while True:
        answer = input(f"{prompt} [{default_str}]: ").strip().lower()
        if not answer:
            return default
        if answer in {"y", "yes"}:
            return True
        if answer in {"n", "no"}:
            return False
        print("Please enter 'y' or 'n'.")


def ask_int(prompt: str, minimum: int, maximum: int, default: int) -> int:
    full_prompt = f"{prompt} (min={minimum}, max={maximum}, default={default}): "
    while True:
        raw = input(full_prompt).strip()
        if not raw:
            return default
        try:
            value = int(raw)
        except ValueError:
            print("Please enter an integer.")
            continue
        if not (minimum <= value <= maximum):
            print(f"Value must be between {minimum} and {maximum}.")
            continue
        return value


def parse_move(user_input: str) -> Tuple[str, int, int]:
    """
    Parse a move string like:
      'o 3 4' or 'open 3 4'  -> open cell (row=3, col=4)
      'f 3 4' or 'flag 3 4'  -> toggle flag
      'g' / 'graph'          -> run the graph solver
      's' / 'simple'         -> run the simple solver

    Returns: (action, row_index, col_index) where row/col are 0-based
    (-1 for commands without coordinates).

    Raises ValueError on bad input.
    """
    tokens = user_input.strip().split()
    if not tokens:
        raise ValueError("Empty input.")

    action_token = tokens[0].lower()
    if action_token in {"q", "quit", "exit"}:
        return ("quit", -1, -1)
    if action_token in {"g", "graph"}:
        return ("graph", -1, -1)
    if action_token in {"s", "simple"}:
        return ("simple", -1, -1)

    if len(tokens) != 3:
        raise ValueError("Format must be: 'o row col', 'f row col', 'g', 's' or 'q'.")

    if action_token in {"o", "open"}:
        action = "open"
    elif action_token in {"f", "flag"}:
        action = "flag"
    else:
        raise ValueError("First token must be 'o'/'open', 'f'/'flag', 'g', 's' or 'q'.")

    try:
        # User enters 1-based coordinates; convert to 0-based
        row = int(tokens[1]) - 1
        col = int(tokens[2]) - 1
    except ValueError:
        raise ValueError("Row and column must be integers.")

    return (action, row, col)


# ---------------------------------------------------------------------------
# Game setup
# ---------------------------------------------------------------------------

def configure_board() -> Board:
    """Ask the user for a preset or a custom board size and mine count."""
    print("=== Minesweeper Configuration ===")
    presets = list(Difficulty)
    for i, preset in enumerate(presets, start=1):
        print(f"  {i}. {preset.label} ({preset.rows}x{preset.cols}, {preset.mines} mines)")
    print(f"  {len(presets) + 1}. Custom")

    choice = ask_int("Choose a board", minimum=1, maximum=len(presets) + 1, default=1)
    if choice <= len(presets):
        preset = presets[choice - 1]
        rows, cols, mines = preset.rows, preset.cols, preset.mines
    else:
        rows = ask_int("Number of rows", minimum=4, maximum=50, default=16)
        cols = ask_int("Number of columns", minimum=4, maximum=50, default=16)

        max_mines = rows * cols - 9  # first click and its neighbors stay clear
        default_mines = min(max_mines, max(1, (rows * cols) // 6))
        mines = ask_int("Number of mines", minimum=1, maximum=max_mines, default=default_mines)

    print(f"\nCreating a {rows}x{cols} board with {mines} mines...\n")
    return Board(width=cols, height=rows, num_mines=mines)


def print_status(board: Board) -> None:
    print(board.render())
    print(f"Mines remaining (estimate): {board.remaining_mines_estimate()}")
    if board.is_active():
        print(f"Time: {board.elapsed_seconds()}s")


def print_solver_report(solver: Solver) -> None:
    result = solver.last_result
    if result is None:
        return
    print(
        f"\nSolver {result.outcome.value}: {len(result.moves)} moves, "
        f"{result.stall_cycles} stalled checks."
    )


# ---------------------------------------------------------------------------
# Human game loop
# ---------------------------------------------------------------------------

def run_human_game(board: Board) -> None:
    print("=== Minesweeper (Human Mode) ===")
    print("Commands:")
    print("  o r c   -> open cell at row r, column c (1-based indices)")
    print("  f r c   -> toggle flag at row r, column c")
    print("  g       -> let the graph solver play what it can deduce")
    print("  s       -> let the simple solver play what it can deduce")
    print("  q       -> quit")
    print()

    solver = Solver(board)
    while True:
        print_status(board)

        if board.game_over:
            if board.win:
                print("\nYou opened all safe cells. You win!")
            else:
                print("\nYou hit a mine. Game over!")
            print("\nFinal board:")
            print(board.render(reveal_mines=True))
            break

        user_input = input("\nEnter your move: ")

        try:
            action, row, col = parse_move(user_input)
        except ValueError as exc:
            print(f"Invalid move: {exc}")
            continue

        if action == "quit":
            print("Goodbye!")
            break
        if action == "graph":
            solver.run_graph_solve()
            print_solver_report(solver)
            continue
        if action == "simple":
            solver.run_simple_solve()
            print_solver_report(solver)
            continue

        if not board.in_bounds(row, col):
            print(f"Cell ({row + 1}, {col + 1}) is out of bounds.")
            continue

        if action == "open":
            accepted = board.reveal(row, col)
        else:
            accepted = board.toggle_flag(row, col)
        if not accepted:
            print("Nothing to do there.")


# ---------------------------------------------------------------------------
# AI game loop
# ---------------------------------------------------------------------------

def run_ai_game(board: Board) -> None:
    print("=== Minesweeper (AI Mode) ===")
    print("The graph solver opens the center and plays; the simple solver mops up.")

    solver = Solver(board)
    solver.run_graph_solve()
    print_solver_report(solver)

    if not board.game_over:
        solver.run_simple_solve()
        print_solver_report(solver)

    if board.game_over:
        if board.win:
            print("\nAI opened all safe cells. AI wins!")
        else:
            print("\nAI hit a mine. Game over!")
    else:
        print("\nNo further move can be deduced without guessing.")
        print_status(board)

    print("\nFinal board (mines revealed):")
    print(board.render(reveal_mines=True))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main() -> None:
    configure_logging()
    board = configure_board()

    use_human = ask_yes_no("Do you want to play the game yourself?", default=True)
    if use_human:
        run_human_game(board)
    else:
        run_ai_game(board)


if __name__ == "__main__":
    main()
