from __future__ import annotations

import logging

import numpy as np

from .pieces import Piece


logger = logging.getLogger(__name__)


class GameGrid:
    """Playfield of locked cells.

    The grid uses 0 for empty cells and the locking piece's color value (1..7)
    for filled cells. Row 0 is the top of the field.
    """

    def __init__(self, width: int = 10, height: int = 20) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def reset(self) -> None:
        self.grid.fill(0)

    def collides(self, piece: Piece, x: int, y: int) -> bool:
        for cx, cy in piece.cells_at(x, y):
            if cx < 0 or cx >= self.width or cy >= self.height:
                return True
            # Cells above the field are only bounded horizontally
            if cy >= 0 and self.grid[cy, cx] != 0:
                return True
        return False

    def lock(self, piece: Piece, x: int, y: int) -> None:
        """Write the piece into the grid. Assumes the placement is already validated."""
        for cx, cy in piece.cells_at(x, y):
            if cy >= 0:
                self.grid[cy, cx] = piece.color

    def is_row_full(self, y: int) -> bool:
        return bool(np.all(self.grid[y] != 0))

    def clear_completed_rows(self) -> int:
        full_rows = np.where(np.all(self.grid != 0, axis=1))[0]
        if full_rows.size == 0:
            return 0
        num = int(full_rows.size)
        # Remove full rows and add empty rows at the top
        kept = np.delete(self.grid, full_rows, axis=0)
        new_rows = np.zeros((num, self.width), dtype=np.int8)
        self.grid = np.vstack((new_rows, kept))
        logger.debug("cleared rows %s", full_rows.tolist())
        return num

    def get_max_height(self) -> int:
        # y=0 is top; find first non-empty from top
        non_empty_rows = np.where(np.any(self.grid != 0, axis=1))[0]
        if non_empty_rows.size == 0:
            return 0
        return self.height - int(non_empty_rows[0])

    def count_holes(self) -> int:
        holes = 0
        for x in range(self.width):
            seen_block = False
            for cell in self.grid[:, x]:
                if cell != 0:
                    seen_block = True
                elif seen_block:
                    holes += 1
        return holes

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()
