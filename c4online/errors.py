"""
errors.py - Exceptions raised by the c4online client core
"""


class C4OnlineError(Exception):
    """Base class for every error raised by the client core."""

    pass


class OutOfBounds(C4OnlineError, IndexError):
    """Raised when a grid is queried with coordinates outside the board."""

    def __init__(self, x: int, y: int, cols: int, rows: int):
        super().__init__(f"cell ({x}, {y}) is outside a {cols}x{rows} grid")
        self.x = x
        self.y = y


class IllegalMove(C4OnlineError):
    """Raised when a move fails the client-side legality check."""

    def __init__(self, x: int, y: int, reason: str):
        super().__init__(f"illegal move at ({x}, {y}): {reason}")
        self.x = x
        self.y = y
        self.reason = reason


class MalformedMessage(C4OnlineError, ValueError):
    """Raised when an inbound payload does not have the expected shape."""

    pass


class SessionConnectionError(C4OnlineError):
    """Transport failure reported to session listeners."""

    pass


class UnexpectedTermination(SessionConnectionError):
    """The connection closed before the game was over."""

    pass


class SessionAlreadyActive(C4OnlineError):
    """Raised when connect() is called while a session is still live."""

    pass
