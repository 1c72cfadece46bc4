"""
validator.py - Client-side move legality for the grid-drop game

A move is legal when the target cell is on the board, empty, and rests on
either the floor or another piece. The server checks every move again; this
check only keeps obviously illegal moves off the wire.
"""

from typing import List, Optional, Tuple

from c4online.debug import debug
from c4online.errors import IllegalMove
from c4online.game.grid import Grid
from c4online.utils import EMPTY_CELL


def illegal_reason(grid: Grid, x: int, y: int) -> Optional[str]:
    """
    Explain why a move is illegal.

    Returns:
        None for a legal move, otherwise a short reason string
    """
    if not grid.contains(x, y):
        return "out of bounds"

    if grid.cell_at(x, y) != EMPTY_CELL:
        return "cell is occupied"

    if y < grid.row_count - 1 and grid.cell_at(x, y + 1) == EMPTY_CELL:
        return "nothing underneath"

    return None


def is_legal(grid: Grid, x: int, y: int) -> bool:
    """Check whether a piece may be placed at column ``x``, row ``y``."""
    reason = illegal_reason(grid, x, y)
    if reason is not None:
        debug.debug(f"Move ({x}, {y}) rejected: {reason}", "validator")
        return False
    return True


def require_legal(grid: Grid, x: int, y: int) -> None:
    """
    Raise instead of returning False.

    Raises:
        IllegalMove: if the move fails the legality check
    """
    reason = illegal_reason(grid, x, y)
    if reason is not None:
        raise IllegalMove(x, y, reason)


def legal_placements(grid: Grid) -> List[Tuple[int, int]]:
    """Every legal ``(x, y)``, at most one per column."""
    placements = []
    for x in range(grid.column_count):
        y = grid.landing_row(x)
        if y is not None and is_legal(grid, x, y):
            placements.append((x, y))
    return placements
