"""
controller.py - Ties the session, the projector and the interface together

GameController is the high-level entry point for playing a networked game:

    user intent -> legality check -> session sends intent
    snapshot    -> projector      -> render sink

It holds no game state of its own beyond what the session received last.
"""

from typing import Optional

from c4online.debug import debug
from c4online.errors import C4OnlineError, SessionConnectionError, UnexpectedTermination
from c4online.game.grid import Grid
from c4online.game.projector import GameStateProjector, ViewState
from c4online.game.snapshot import GameSnapshot, MoveIntent, SessionIdentity
from c4online.game.validator import is_legal
from c4online.interfaces.render_sink import RenderSink
from c4online.net.session import SessionClient, SessionListener
from c4online.utils import CONNECTION_ERROR_MESSAGE, DEFAULT_SERVER


class GameController(SessionListener):
    """
    High-level manager for one networked game view.

    Args:
        sink: Interface receiving render commands
        server_url: Websocket origin of the game server
        **session_options: Passed on to SessionClient (path, open_timeout,
            connector)
    """

    def __init__(self, sink: Optional[RenderSink] = None,
                 server_url: str = DEFAULT_SERVER, **session_options):
        self.sink = sink or RenderSink()
        self.projector = GameStateProjector()
        self.session = SessionClient(self, server_url=server_url, **session_options)
        self.last_error: Optional[C4OnlineError] = None
        self._leaving = False

    @property
    def snapshot(self) -> Optional[GameSnapshot]:
        return self.session.snapshot

    @property
    def grid(self) -> Optional[Grid]:
        snapshot = self.session.snapshot
        return snapshot.grid if snapshot is not None else None

    @property
    def identity(self) -> Optional[SessionIdentity]:
        return self.session.identity

    @property
    def view(self) -> Optional[ViewState]:
        return self.projector.last_view

    async def join(self, game_id: str, player_name: str) -> None:
        """Connect to a game; failures arrive as connection-error renders."""
        debug.info(f"Joining game '{game_id}' as '{player_name}'", "controller")
        self._leaving = False
        self.last_error = None
        self.projector.reset()
        await self.session.connect(game_id, player_name)

    async def leave(self) -> None:
        """Close the session; leaving is never reported as an error."""
        self._leaving = True
        await self.session.close()

    def can_move(self, x: int, y: int) -> bool:
        """Whether a move at ``(x, y)`` would be sent right now."""
        view = self.view
        grid = self.grid
        if view is None or grid is None or not self.session.is_open:
            return False
        if not view.is_local_players_turn:
            debug.debug(f"Move ({x}, {y}) ignored: not this player's turn", "controller")
            return False
        return is_legal(grid, x, y)

    async def request_move(self, x: int, y: int) -> bool:
        """
        Send a move if it passes the local checks.

        Returns:
            True if the move was sent. Rejected moves are simply not sent and
            leave the board untouched.
        """
        if not self.can_move(x, y):
            return False

        intent = MoveIntent.for_cell(self.grid, x, y)
        if not await self.session.send_move_intent(intent):
            return False

        debug.debug(f"Move ({x}, {y}) sent as placement {intent.placement}", "controller")
        self.sink.show_pending_move(x, y, self.identity.local_player_index)
        return True

    async def request_drop(self, x: int) -> bool:
        """Drop a piece into column ``x`` at the row it would land on."""
        grid = self.grid
        if grid is None or not 0 <= x < grid.column_count:
            return False
        y = grid.landing_row(x)
        if y is None:
            debug.debug(f"Column {x} is full", "controller")
            return False
        return await self.request_move(x, y)

    async def request_play_again(self) -> bool:
        """Ask for a new round; only seated players of a finished game may."""
        view = self.view
        identity = self.identity
        if view is None or not view.is_game_over or identity is None or identity.is_spectator:
            debug.debug("Play again ignored: game is not over for a seated player", "controller")
            return False
        return await self.session.send_play_again_intent()

    # Session events

    def on_snapshot(self, snapshot: GameSnapshot) -> None:
        identity = self.session.identity
        view, offer_rematch = self.projector.project(snapshot, identity)
        self.sink.render(view, snapshot.grid, identity)
        if offer_rematch:
            self.sink.offer_rematch()

    def on_notice(self, text: str) -> None:
        self.sink.show_notice(text)

    def on_error(self, error: SessionConnectionError) -> None:
        debug.error(f"Connection error: {error}", "controller")
        self.last_error = error
        self.sink.show_connection_error(CONNECTION_ERROR_MESSAGE)

    def on_closed(self, was_game_over: bool) -> None:
        if self._leaving or was_game_over:
            debug.info("Connection closed", "controller")
            return
        if self.last_error is not None:
            # on_error already told the user
            return
        self.last_error = UnexpectedTermination("connection closed before the game was over")
        debug.warning(str(self.last_error), "controller")
        self.sink.show_connection_error(CONNECTION_ERROR_MESSAGE)
