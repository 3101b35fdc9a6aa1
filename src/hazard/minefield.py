"""
Hazard Chess - Minefield
Hidden mine layer laid over the chess board: placement, reveal, flood fill,
per-side flags and the arm/explode countdown
"""

from collections import deque
import random
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .board import PlayerColor


class Minefield:
    """
    Parallel 8x8 grids describing the mine layer.

    ``mines`` is fixed once generated; ``adjacent_counts`` is derived from it
    and only recomputed by ``generate`` or ``set_state``.
    """

    SIZE = 8
    ARM_DELAY = 2

    def __init__(self):
        shape = (self.SIZE, self.SIZE)
        self.mines = np.zeros(shape, dtype=bool)
        self.revealed = np.zeros(shape, dtype=bool)
        self.exploded = np.zeros(shape, dtype=bool)
        self.flagged_white = np.zeros(shape, dtype=bool)
        self.flagged_black = np.zeros(shape, dtype=bool)
        self.armed_turns = np.zeros(shape, dtype=int)
        self.adjacent_counts = np.zeros(shape, dtype=int)

    def clear(self):
        for grid in (self.mines, self.revealed, self.exploded,
                     self.flagged_white, self.flagged_black):
            grid.fill(False)
        self.armed_turns.fill(0)
        self.adjacent_counts.fill(0)

    def generate(self, mine_count: int, rng: random.Random, reserved=None):
        """
        Place mines uniformly at random, then compute adjacency counts

        Args:
            mine_count: Number of mines wanted; capped at the free cell count
            rng: Random source used for the shuffle
            reserved: Optional 8x8 boolean grid of cells that must stay clear
        """
        self.clear()
        blocked = np.zeros((self.SIZE, self.SIZE), dtype=bool)
        if reserved is not None:
            blocked = np.asarray(reserved, dtype=bool)

        valid_positions = [(row, col)
                           for row in range(self.SIZE)
                           for col in range(self.SIZE)
                           if not blocked[row, col]]

        # Fisher-Yates shuffle, take the first N
        rng.shuffle(valid_positions)
        for row, col in valid_positions[:max(0, min(mine_count, len(valid_positions)))]:
            self.mines[row, col] = True

        self._compute_adjacent_counts()

    def _compute_adjacent_counts(self):
        padded = np.pad(self.mines.astype(int), 1)
        counts = np.zeros((self.SIZE, self.SIZE), dtype=int)
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                if dr == 0 and dc == 0:
                    continue
                counts += padded[1 + dr:1 + dr + self.SIZE, 1 + dc:1 + dc + self.SIZE]
        self.adjacent_counts = counts

    @classmethod
    def is_inside(cls, row: int, col: int) -> bool:
        return 0 <= row < cls.SIZE and 0 <= col < cls.SIZE

    def _check(self, row: int, col: int):
        # numpy would silently wrap negative indices
        if not self.is_inside(row, col):
            raise IndexError(f"Minefield coordinates out of range: ({row}, {col})")

    def neighbors(self, row: int, col: int) -> Iterator[Tuple[int, int]]:
        """Yield the in-bounds cells of the 8-connected ring around a cell"""
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                if dr == 0 and dc == 0:
                    continue
                r, c = row + dr, col + dc
                if self.is_inside(r, c):
                    yield r, c

    def _flags(self, color: PlayerColor) -> np.ndarray:
        return self.flagged_white if color == PlayerColor.WHITE else self.flagged_black

    # Queries

    def has_mine(self, row: int, col: int) -> bool:
        self._check(row, col)
        return bool(self.mines[row, col])

    def is_revealed(self, row: int, col: int) -> bool:
        self._check(row, col)
        return bool(self.revealed[row, col])

    def is_exploded(self, row: int, col: int) -> bool:
        self._check(row, col)
        return bool(self.exploded[row, col])

    def adjacent_mines(self, row: int, col: int) -> int:
        self._check(row, col)
        return int(self.adjacent_counts[row, col])

    def is_flagged(self, row: int, col: int, color: PlayerColor) -> bool:
        self._check(row, col)
        return bool(self._flags(color)[row, col])

    def is_flagged_any(self, row: int, col: int) -> bool:
        self._check(row, col)
        return bool(self.flagged_white[row, col] or self.flagged_black[row, col])

    def is_armed(self, row: int, col: int) -> bool:
        self._check(row, col)
        return bool(self.armed_turns[row, col] > 0)

    def get_armed_turns(self, row: int, col: int) -> int:
        self._check(row, col)
        return int(self.armed_turns[row, col])

    def mine_count(self) -> int:
        return int(np.count_nonzero(self.mines))

    def count_flags_around(self, row: int, col: int, color: PlayerColor) -> int:
        self._check(row, col)
        flags = self._flags(color)
        return sum(1 for r, c in self.neighbors(row, col) if flags[r, c])

    # State transitions

    def _clear_marks(self, row: int, col: int):
        self.flagged_white[row, col] = False
        self.flagged_black[row, col] = False
        self.armed_turns[row, col] = 0

    def reveal(self, row: int, col: int):
        """Reveal a cell, dropping any flags and countdown on it"""
        self._check(row, col)
        self.revealed[row, col] = True
        self._clear_marks(row, col)

    def explode(self, row: int, col: int):
        """Detonate a cell; exploded cells are always revealed"""
        self._check(row, col)
        self.exploded[row, col] = True
        self.revealed[row, col] = True
        self._clear_marks(row, col)

    def arm_mine(self, row: int, col: int):
        """Start the countdown on an unexploded mine that is not already armed"""
        self._check(row, col)
        if not self.mines[row, col] or self.exploded[row, col]:
            return
        if self.armed_turns[row, col] == 0:
            self.armed_turns[row, col] = self.ARM_DELAY

    def tick_armed(self) -> List[Tuple[int, int]]:
        """
        Advance every running countdown by one half-move

        Returns:
            Cells whose countdown reached zero on this tick. Detonating them
            is left to the caller.
        """
        running = self.armed_turns > 0
        self.armed_turns[running] -= 1
        expired = running & (self.armed_turns == 0)
        return [(int(r), int(c)) for r, c in zip(*np.nonzero(expired))]

    def toggle_flag(self, row: int, col: int, color: PlayerColor):
        """Flip ``color``'s flag; known-safe revealed cells cannot be flagged"""
        self._check(row, col)
        if self.revealed[row, col] and not self.exploded[row, col]:
            return
        flags = self._flags(color)
        flags[row, col] = not flags[row, col]

    def reveal_flood(self, start_row: int, start_col: int, color: PlayerColor):
        """
        Breadth-first reveal from a cell.

        Zero-count cells expand to their neighbours; numbered cells are
        revealed but not expanded. Mines are never entered, nor are cells
        flagged by ``color`` other than the start cell. The other side's
        flags do not block the fill.
        """
        self._check(start_row, start_col)
        if self.revealed[start_row, start_col] or self.mines[start_row, start_col]:
            return

        flags = self._flags(color)
        queue = deque([(start_row, start_col)])
        while queue:
            row, col = queue.popleft()
            is_start = row == start_row and col == start_col
            if self.revealed[row, col] or self.mines[row, col] or (not is_start and flags[row, col]):
                continue
            self.reveal(row, col)
            if self.adjacent_counts[row, col] != 0:
                continue
            for r, c in self.neighbors(row, col):
                if not self.revealed[r, c] and not self.mines[r, c] and not flags[r, c]:
                    queue.append((r, c))

    # Copying and restore

    def copy(self) -> 'Minefield':
        clone = Minefield()
        clone.mines = self.mines.copy()
        clone.revealed = self.revealed.copy()
        clone.exploded = self.exploded.copy()
        clone.flagged_white = self.flagged_white.copy()
        clone.flagged_black = self.flagged_black.copy()
        clone.armed_turns = self.armed_turns.copy()
        clone.adjacent_counts = self.adjacent_counts.copy()
        return clone

    @classmethod
    def as_grid(cls, source, dtype) -> Optional[np.ndarray]:
        """Coerce nested lists to an 8x8 array, or None if malformed"""
        if source is None:
            return None
        try:
            grid = np.array(source, dtype=dtype)
        except (TypeError, ValueError):
            return None
        if grid.shape != (cls.SIZE, cls.SIZE):
            return None
        return grid

    def set_state(self, mines, revealed, exploded, flagged_white, flagged_black, armed_turns) -> bool:
        """
        Replace every grid at once and recompute adjacency counts

        Returns:
            False (leaving the field untouched) if any grid is malformed
        """
        grids = [self.as_grid(mines, bool), self.as_grid(revealed, bool),
                 self.as_grid(exploded, bool), self.as_grid(flagged_white, bool),
                 self.as_grid(flagged_black, bool), self.as_grid(armed_turns, int)]
        if any(grid is None for grid in grids):
            return False

        (self.mines, self.revealed, self.exploded,
         self.flagged_white, self.flagged_black, self.armed_turns) = grids
        self._compute_adjacent_counts()
        return True

    def state_key(self) -> str:
        """Canonical text encoding of every grid, used in position hashes"""
        parts = []
        for grid in (self.mines, self.revealed, self.exploded,
                     self.flagged_white, self.flagged_black, self.armed_turns):
            parts.append(''.join(str(int(value)) for value in grid.ravel()))
        return '|'.join(parts)
