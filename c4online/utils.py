"""
utils.py - Constants and small helpers shared across the c4online client

This module holds the wire constants agreed with the game server, the default
connection settings, and the text helpers used by the terminal interface.
"""

from typing import Iterable, Optional, Tuple

import numpy as np

# Board defaults used when the server has not sent a grid yet
ROWS = 6
COLS = 7

# Cell value for an empty slot; occupied cells hold the player's color index
EMPTY_CELL = -1

# Placement sent together with playAgain; never a real cell
PLAY_AGAIN_PLACEMENT = -1

# Player index assigned by the server to viewers without a seat
SPECTATOR_INDEX = -1

# Connection defaults
DEFAULT_SERVER = "ws://localhost:8292"
WS_PATH = "/ws"
GAME_ID_QUERY_KEY = "gameid"
PLAYER_NAME_QUERY_KEY = "name"

# Status text shown by the render sink
CONNECTION_ERROR_MESSAGE = "Error: connection has been terminated."

# Color names by color index, in the order the server hands them out
COLORS = ["red", "yellow", "blue", "pink", "orange", "black"]

COLOR_SYMBOLS = {
    "red": "R",
    "yellow": "Y",
    "blue": "B",
    "pink": "P",
    "orange": "O",
    "black": "K",
}

EMPTY_SYMBOL = "."


def color_name(color_index: int) -> str:
    """Name of the color for an index; indexes past the palette wrap around."""
    if color_index < 0:
        return "grey"
    return COLORS[color_index % len(COLORS)]


def cell_symbol(value: int) -> str:
    """Single character used to draw a cell in the terminal."""
    if value == EMPTY_CELL:
        return EMPTY_SYMBOL
    return COLOR_SYMBOLS[color_name(int(value))]


def is_valid_position(x: int, y: int, cols: int, rows: int) -> bool:
    """
    Check if a coordinate is within the board boundaries.

    Args:
        x: Column index
        y: Row index (0 is the top row)
        cols: Number of columns
        rows: Number of rows

    Returns:
        True if position is valid, False otherwise
    """
    return 0 <= x < cols and 0 <= y < rows


def render_board_ascii(cells: np.ndarray, hover_color: Optional[int] = None,
                       hover_cells: Iterable[Tuple[int, int]] = (),
                       pending: Optional[Tuple[int, int, int]] = None) -> str:
    """
    Render a board as ASCII art.

    Args:
        cells: 2-D array of cell values
        hover_color: Color index drawn in lower case on ``hover_cells``
        hover_cells: (x, y) cells the local player may drop into
        pending: (x, y, color_index) of a sent move not yet confirmed

    Returns:
        ASCII representation of the board with column numbers underneath
    """
    rows, cols = cells.shape
    hover = set(hover_cells) if hover_color is not None and hover_color >= 0 else set()
    lines = ["|" + "-" * (cols * 2 - 1) + "|"]

    for y in range(rows):
        symbols = []
        for x in range(cols):
            value = int(cells[y, x])
            if value == EMPTY_CELL and pending is not None and (x, y) == (pending[0], pending[1]):
                symbols.append(cell_symbol(pending[2]))
            elif value == EMPTY_CELL and (x, y) in hover:
                symbols.append(cell_symbol(hover_color).lower())
            else:
                symbols.append(cell_symbol(value))
        lines.append("|" + " ".join(symbols) + "|")

    lines.append("|" + "-" * (cols * 2 - 1) + "|")
    lines.append("|" + " ".join(str(x % 10) for x in range(cols)) + "|")

    return "\n".join(lines)
