from __future__ import annotations

import numpy as np

from .pieces import Piece


class GameGrid:
    """Discrete 2D playfield of settled cells.

    The grid uses 0 for empty cells and positive integers for filled cells.
    Integer values are the fill value of the piece that was merged there.
    Row 0 is the top; rows above it (negative y) are off-screen spawn space.
    """

    def __init__(self, width: int, height: int) -> None:
        if int(width) <= 0 or int(height) <= 0:
            raise ValueError(f"grid dimensions must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def reset(self) -> None:
        self.grid.fill(0)

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell(self, x: int, y: int) -> int:
        return int(self.grid[y, x])

    def collides(self, piece: Piece, dx: int = 0, dy: int = 0) -> bool:
        """Would `piece` collide if shifted by (dx, dy)?

        Walls and the floor collide, cells above the top row are ignored.
        """
        for x, y in piece.cells(dx, dy):
            if x < 0 or x >= self.width or y >= self.height:
                return True
            if y < 0:
                continue
            if self.grid[y, x] != 0:
                return True
        return False

    def is_terminal(self, piece: Piece) -> bool:
        """Game over check for a freshly spawned piece."""
        return self.collides(piece, 0, 0)

    def merge(self, piece: Piece) -> None:
        """Write the piece into the grid. Assumes the placement was validated."""
        value = piece.fill_value
        for x, y in piece.cells():
            if self.is_inside(x, y):
                self.grid[y, x] = value

    def is_row_full(self, y: int) -> bool:
        return bool(np.all(self.grid[y, :] != 0))

    def clear_full_rows(self) -> int:
        cleared = 0
        y = self.height - 1
        while y >= 0:
            if self.is_row_full(y):
                self._remove_row(y)
                cleared += 1
                # the row pulled into y may be full as well
            else:
                y -= 1
        return cleared

    def _remove_row(self, y: int) -> None:
        for row in range(y, 0, -1):
            self.grid[row, :] = self.grid[row - 1, :]
        self.grid[0, :] = 0

    def drop_distance(self, piece: Piece) -> int:
        """Rows the piece can fall before it rests."""
        distance = 0
        while not self.collides(piece, 0, distance + 1):
            distance += 1
        return distance

    def get_max_height(self) -> int:
        # y=0 is top; find first non-empty from top
        non_empty_rows = np.where(np.any(self.grid != 0, axis=1))[0]
        if non_empty_rows.size == 0:
            return 0
        top_index = int(non_empty_rows[0])
        return self.height - top_index

    def count_holes(self) -> int:
        holes = 0
        for x in range(self.width):
            column = self.grid[:, x]
            seen_block = False
            for cell in column:
                if cell != 0:
                    seen_block = True
                elif seen_block:
                    holes += 1
        return holes

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()
