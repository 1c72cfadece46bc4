"""
grid.py - Read-only board representation for the c4online client

This module implements the Grid class which wraps the board received from the
server. A Grid is never edited: every snapshot brings a new one, so a partially
updated board can never be observed.
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np

from c4online.debug import debug
from c4online.errors import OutOfBounds
from c4online.utils import COLS, EMPTY_CELL, ROWS, is_valid_position, render_board_ascii

# Largest value the cell array can hold
CELL_MAX = int(np.iinfo(int).max)


class Grid:
    """
    Immutable ``rows x cols`` board.

    Row 0 is the top row and gravity pulls pieces toward the highest row
    index. Cells hold ``EMPTY_CELL`` or the color index of the player who
    owns the piece. Coordinates are ``(x, y)``: x is the column, y the row.
    """

    __slots__ = ("_cells",)

    def __init__(self, cells: np.ndarray):
        array = np.array(cells, dtype=int, copy=True)
        if array.ndim != 2 or array.shape[0] == 0 or array.shape[1] == 0:
            raise ValueError(f"grid must be a non-empty 2-D array, got shape {array.shape}")
        array.setflags(write=False)
        self._cells = array

    @classmethod
    def empty(cls, rows: int = ROWS, cols: int = COLS) -> "Grid":
        """Create a board with every cell empty."""
        return cls(np.full((rows, cols), EMPTY_CELL, dtype=int))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "Grid":
        """
        Build a grid from the nested lists used on the wire.

        Raises:
            ValueError: if the rows are ragged, empty or hold non-integers
        """
        if not isinstance(rows, (list, tuple)) or not rows:
            raise ValueError("grid must be a non-empty list of rows")

        width = None
        for row in rows:
            if not isinstance(row, (list, tuple)):
                raise ValueError("grid rows must be lists")
            if width is None:
                width = len(row)
            elif len(row) != width:
                raise ValueError("grid rows have different lengths")
            for value in row:
                # bool is an int subclass but never a cell value
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ValueError(f"grid cell {value!r} is not an integer")
                if value < EMPTY_CELL or value > CELL_MAX:
                    raise ValueError(f"grid cell {value} is not a color index")

        return cls(np.array(rows, dtype=int))

    @property
    def row_count(self) -> int:
        return int(self._cells.shape[0])

    @property
    def column_count(self) -> int:
        return int(self._cells.shape[1])

    @property
    def shape(self) -> Tuple[int, int]:
        return self.row_count, self.column_count

    def contains(self, x: int, y: int) -> bool:
        return is_valid_position(x, y, self.column_count, self.row_count)

    def cell_at(self, x: int, y: int) -> int:
        """
        Value of the cell in column ``x`` and row ``y``.

        Raises:
            OutOfBounds: if the coordinate is not on the board
        """
        if not self.contains(x, y):
            debug.trace(f"cell_at({x}, {y}) outside {self.column_count}x{self.row_count}", "grid")
            raise OutOfBounds(x, y, self.column_count, self.row_count)
        return int(self._cells[y, x])

    def is_empty(self, x: int, y: int) -> bool:
        return self.cell_at(x, y) == EMPTY_CELL

    def landing_row(self, x: int) -> Optional[int]:
        """
        Row a piece dropped into column ``x`` comes to rest on.

        Returns:
            The lowest empty row index, or None if the column is full
        """
        if not 0 <= x < self.column_count:
            raise OutOfBounds(x, 0, self.column_count, self.row_count)

        empty_rows = np.flatnonzero(self._cells[:, x] == EMPTY_CELL)
        if empty_rows.size == 0:
            return None
        return int(empty_rows[-1])

    def linear_placement_index(self, x: int, y: int) -> int:
        """Row-major index of a cell, as expected by the server."""
        if not self.contains(x, y):
            raise OutOfBounds(x, y, self.column_count, self.row_count)
        return x + y * self.column_count

    def decode_placement_index(self, placement: int) -> Tuple[int, int]:
        """Inverse of linear_placement_index: returns ``(x, y)``."""
        x, y = placement % self.column_count, placement // self.column_count
        if placement < 0 or not self.contains(x, y):
            raise OutOfBounds(x, y, self.column_count, self.row_count)
        return x, y

    def occupied_count(self) -> int:
        return int(np.count_nonzero(self._cells != EMPTY_CELL))

    def is_full(self) -> bool:
        return not np.any(self._cells == EMPTY_CELL)

    def to_array(self) -> np.ndarray:
        """Read-only view of the cells."""
        return self._cells

    def to_rows(self) -> List[List[int]]:
        return self._cells.tolist()

    def render(self, **kwargs) -> str:
        """Render the grid as a string (see ``render_board_ascii``)."""
        return render_board_ascii(self._cells, **kwargs)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return bool(np.array_equal(self._cells, other._cells))

    __hash__ = None

    def __repr__(self) -> str:
        return f"Grid(rows={self.row_count}, cols={self.column_count}, occupied={self.occupied_count()})"

    def __str__(self) -> str:
        return self.render()
