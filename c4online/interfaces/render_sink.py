"""
render_sink.py - Interface between the client core and a user interface

The core pushes render commands into a RenderSink. The interface raises user
intents back through GameController.request_move and request_play_again.
"""

from c4online.game.grid import Grid
from c4online.game.projector import ViewState
from c4online.game.snapshot import SessionIdentity


class RenderSink:
    """Base render sink; every command is a no-op."""

    def render(self, view: ViewState, grid: Grid, identity: SessionIdentity) -> None:
        """Draw the board, roster and status for the latest snapshot."""
        pass

    def show_connection_error(self, message: str) -> None:
        pass

    def offer_rematch(self) -> None:
        """Called once when a game this player took part in has ended."""
        pass

    def show_pending_move(self, x: int, y: int, color_index: int) -> None:
        """A legal move was sent; draw it until the next snapshot arrives."""
        pass

    def show_notice(self, text: str) -> None:
        pass
