# solver/graph_solver.py
from __future__ import annotations

import heapq
import itertools
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Set

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


@dataclass
class Node:
    """
    Deduction unit overlaying one cell.

    remaining : mines not yet flagged among `unknown`
    unknown   : coordinates of covered, unflagged neighbors
    rotations : times the node went to the back of the frontier
    """
    coord: Coord
    remaining: int = 0
    unknown: Set[Coord] = field(default_factory=set)
    activated: bool = False
    resolved: bool = False
    rotations: int = 0

    @property
    def is_clear(self) -> bool:
        return self.remaining == 0

    @property
    def is_saturated(self) -> bool:
        return self.remaining == len(self.unknown)

    def __str__(self) -> str:
        r, c = self.coord
        return f"{r}, {c} (size={len(self.unknown)}, remaining={self.remaining})"


class Frontier:
    """
    Activated nodes waiting to be examined.

    Two tiers: nodes with nothing left to find (remaining == 0) come out
    first in FIFO order; the rest come out of a heap keyed by
    (rotations, number of unknowns, insertion order). Removal is lazy.
    """

    def __init__(self) -> None:
        self._clear: Deque[Coord] = deque()
        self._clear_members: Set[Coord] = set()
        self._heap: List[list] = []
        self._entries: Dict[Coord, list] = {}
        self._counter = itertools.count()

    def __len__(self) -> int:
        return len(self._clear_members) + len(self._entries)

    def __contains__(self, coord: Coord) -> bool:
        return coord in self._clear_members or coord in self._entries

    def push(self, node: Node) -> None:
        if node.is_clear:
            self._clear.append(node.coord)
            self._clear_members.add(node.coord)
        else:
            entry = [node.rotations, len(node.unknown), next(self._counter), node.coord]
            self._entries[node.coord] = entry
            heapq.heappush(self._heap, entry)

    def remove(self, coord: Coord) -> None:
        self._clear_members.discard(coord)
        entry = self._entries.pop(coord, None)
        if entry is not None:
            entry[-1] = None

    def refresh(self, node: Node) -> None:
        """Re-file a node whose counts changed."""
        if node.coord in self:
            self.remove(node.coord)
            self.push(node)

    def rotate(self, node: Node) -> None:
        node.rotations += 1
        self.remove(node.coord)
        self.push(node)

    def peek(self) -> Optional[Coord]:
        while self._clear and self._clear[0] not in self._clear_members:
            self._clear.popleft()
        if self._clear:
            return self._clear[0]
        while self._heap and self._heap[0][-1] is None:
            heapq.heappop(self._heap)
        if self._heap:
            return self._heap[0][-1]
        return None


class GraphSolver(BaseSolver):
    """
    Constraint-propagation solver.

    Strategy:
      Every open numbered cell with covered neighbors becomes a node whose
      edges point at its unknown neighbors. The top node of the frontier is
      either cleared (remaining == 0 -> open all unknowns), saturated
      (remaining == unknowns -> flag all unknowns, then take each flagged
      cell out of the other nodes and decrement them), or rotated to the
      back. The loop ends when the frontier is empty, the game ends, or
      `max_stall_loops` rotations in a row made no progress.
    """

    def solve(self) -> SolveResult:
        board = self.board
        if board.game_over:
            return SolveResult(SolveOutcome.SKIPPED)

        if not board.is_active():
            self.open(*center(board))

        self._arena: List[List[Node]] = [
            [Node((r, c)) for c in range(board.width)] for r in range(board.height)
        ]
        self._frontier = Frontier()
        self._seen: Set[Coord] = {
            (r, c)
            for r in range(board.height)
            for c in range(board.width)
            if board.observed_state(r, c) >= 0
        }
        for coord in numbered_cells(board):
            self._activate(coord)

        stalls = 0
        stall_cycles = 0
        while len(self._frontier) and not board.game_over:
            if stalls >= self.config.max_stall_loops:
                logger.info("Graph solve stalled with %d nodes pending", len(self._frontier))
                return SolveResult(SolveOutcome.STALLED, self.moves, stall_cycles)

            node = self._node(self._frontier.peek())
            logger.debug("Current node is %s", node)
            if node.is_clear:
                self._clear(node)
            elif node.is_saturated:
                self._saturate(node)
            else:
                self._frontier.rotate(node)
                stalls += 1
                stall_cycles += 1
                continue
            stalls = 0

        outcome = self.final_outcome()
        logger.info("Graph solve finished: %s after %d moves", outcome.value, len(self.moves))
        return SolveResult(outcome, self.moves, stall_cycles)

    # ------------------------------------------------------------------ #
    # Graph maintenance
    # ------------------------------------------------------------------ #
    def _node(self, coord: Coord) -> Node:
        return self._arena[coord[0]][coord[1]]

    def _activate(self, coord: Coord) -> None:
        """Turn an open numbered cell into a frontier node, if it still matters."""
        node = self._node(coord)
        if node.activated or node.resolved:
            return
        row, col = coord
        state = self.board.observed_state(row, col)
        if state <= 0:
            return
        unknown = get_unknown_neighbors(self.board, row, col)
        if not unknown:
            return
        remaining = state - count_flagged_neighbors(self.board, row, col)
        if remaining < 0 or remaining > len(unknown):
            logger.warning(
                "Skipping %s: %d flagged neighbors contradict its number",
                coord, state - remaining,
            )
            return

        node.remaining = remaining
        node.unknown = set(unknown)
        node.activated = True
        self._frontier.push(node)
        logger.debug("%s activated", node)

    def _retire(self, node: Node) -> None:
        node.unknown.clear()
        node.activated = False
        node.resolved = True
        self._frontier.remove(node.coord)

    def _detach(self, node: Node, coord: Coord, mine: bool) -> None:
        """Remove the edge node -> coord; a mine also uses up one of node's mines."""
        if coord not in node.unknown:
            return
        node.unknown.discard(coord)
        if mine:
            node.remaining -= 1
        logger.debug("%s is removing %s", node, coord)
        self._frontier.refresh(node)

    def _absorb(self, start: Coord) -> None:
        """
        Walk the cells opened by a reveal (the cascade spreads through zeros),
        cut them out of neighboring nodes and activate the numbered ones.
        """
        stack = [start]
        while stack:
            row, col = coord = stack.pop()
            if coord in self._seen:
                continue
            state = self.board.observed_state(row, col)
            if state < 0:
                continue
            self._seen.add(coord)
            for nbr in self.board.neighbor_coords(row, col):
                adj = self._node(nbr)
                if adj.activated:
                    self._detach(adj, coord, mine=False)
                if state == 0:
                    stack.append(nbr)
            if state > 0:
                self._activate(coord)

    # ------------------------------------------------------------------ #
    # Deductions
    # ------------------------------------------------------------------ #
    def _clear(self, node: Node) -> None:
        logger.debug("Clicking around %s", node)
        targets = sorted(node.unknown)
        self._retire(node)
        for row, col in targets:
            if self.board.game_over:
                return
            if self.open(row, col):
                self._absorb((row, col))

    def _saturate(self, node: Node) -> None:
        logger.debug("Flagging around %s", node)
        targets = sorted(node.unknown)
        self._retire(node)
        for row, col in targets:
            if not self.flag(row, col):
                continue
            for nbr in self.board.neighbor_coords(row, col):
                adj = self._node(nbr)
                if adj.activated:
                    self._detach(adj, (row, col), mine=True)
                else:
                    self._activate(nbr)
