"""
session.py - Connection to the authoritative game server

The SessionClient owns the websocket, the latest snapshot and the identity the
server assigned to this client. Inbound frames are handled one at a time by a
single receive task, in arrival order, and reported to a SessionListener.

There is no reconnection and no client-side liveness timeout: a stalled
connection is only noticed when the transport itself reports a close or an
error. Users rejoin by connecting again.
"""

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK, WebSocketException

from c4online.debug import debug
from c4online.errors import MalformedMessage, SessionAlreadyActive, SessionConnectionError
from c4online.game.snapshot import GameSnapshot, MoveIntent, SessionIdentity
from c4online.net.protocol import build_connection_url, decode_frame, encode_move_intent
from c4online.utils import DEFAULT_SERVER, WS_PATH

Connector = Callable[[str], Awaitable[Any]]


class SessionState(Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED_NORMAL = "closed"
    CLOSED_ERROR = "closed_error"

    @property
    def is_closed(self) -> bool:
        return self in (SessionState.CLOSED_NORMAL, SessionState.CLOSED_ERROR)


class SessionListener:
    """Receives session events. Every method is a no-op by default."""

    def on_snapshot(self, snapshot: GameSnapshot) -> None:
        pass

    def on_notice(self, text: str) -> None:
        pass

    def on_error(self, error: SessionConnectionError) -> None:
        pass

    def on_closed(self, was_game_over: bool) -> None:
        pass


class SessionClient:
    """
    One game session over a websocket.

    Args:
        listener: Receives snapshots, notices, errors and the close event
        server_url: ``ws://`` or ``wss://`` origin of the game server
        path: Websocket endpoint on the server
        open_timeout: Handshake timeout handed to the transport
        connector: Coroutine function opening the transport for a URL;
            defaults to ``websockets.connect``
    """

    def __init__(self, listener: SessionListener,
                 server_url: str = DEFAULT_SERVER,
                 path: str = WS_PATH,
                 open_timeout: Optional[float] = 10.0,
                 connector: Optional[Connector] = None):
        self._listener = listener
        self._server_url = server_url
        self._path = path
        self._open_timeout = open_timeout
        self._connector = connector or self._open_websocket

        self._state = SessionState.IDLE
        self._transport = None
        self._reader: Optional[asyncio.Task] = None
        self._snapshot: Optional[GameSnapshot] = None
        self._identity: Optional[SessionIdentity] = None
        self._url: Optional[str] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state == SessionState.OPEN

    @property
    def url(self) -> Optional[str]:
        return self._url

    @property
    def snapshot(self) -> Optional[GameSnapshot]:
        """Latest snapshot received in this session."""
        return self._snapshot

    @property
    def identity(self) -> Optional[SessionIdentity]:
        """Identity assigned by the server, None until the first snapshot."""
        return self._identity

    @property
    def is_game_over(self) -> bool:
        return self._snapshot is not None and self._snapshot.turn.is_game_over

    async def _open_websocket(self, url: str):
        return await websockets.connect(url, open_timeout=self._open_timeout)

    async def connect(self, game_id: str, player_name: str) -> None:
        """
        Join ``game_id`` as ``player_name`` and start receiving snapshots.

        A failed handshake does not raise: the session moves to CLOSED_ERROR
        and the listener gets ``on_error`` followed by ``on_closed``.

        Raises:
            SessionAlreadyActive: if this client is connecting or connected
            ValueError: if the game id or player name is empty
        """
        if self._state in (SessionState.CONNECTING, SessionState.OPEN):
            raise SessionAlreadyActive(f"session is {self._state.value}; close it before connecting again")

        url = build_connection_url(self._server_url, game_id, player_name, self._path)

        self._url = url
        self._snapshot = None
        self._identity = None
        self._state = SessionState.CONNECTING
        debug.info(f"Connecting to {url}", "session")

        try:
            transport = await self._connector(url)
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            debug.error(f"Handshake with {url} failed: {e}", "session")
            self._finish(SessionConnectionError(f"could not connect to {url}: {e}"))
            return

        if self._state != SessionState.CONNECTING:
            # close() ran while the handshake was in flight
            debug.debug("Session closed during handshake, dropping transport", "session")
            await self._close_transport(transport)
            return

        self._transport = transport
        self._state = SessionState.OPEN
        self._reader = asyncio.create_task(self._receive_loop(transport))
        debug.info("Connection open", "session")

    async def _receive_loop(self, transport) -> None:
        error = None
        try:
            async for frame in transport:
                self._handle_frame(frame)
        except ConnectionClosedOK:
            pass
        except ConnectionClosed as e:
            error = SessionConnectionError(f"connection lost: {e}")
        except (OSError, WebSocketException) as e:
            error = SessionConnectionError(f"transport error: {e}")
        except Exception as e:
            debug.error(f"Receive loop failed: {e!r}", "session")
            error = SessionConnectionError(f"receive loop failed: {e!r}")
            await self._close_transport(transport)
        finally:
            # Runs on cancellation too; _finish ignores an already closed session
            if transport is self._transport:
                self._transport = None
            self._finish(error)

    def _handle_frame(self, frame) -> None:
        try:
            snapshot, notice = decode_frame(frame)
        except MalformedMessage as e:
            debug.warning(f"Ignoring malformed message: {e}", "session")
            return

        if notice is not None:
            debug.info(f"Server notice: {notice}", "session")
            self._notify("on_notice", notice)
            return

        if snapshot is None:
            return

        identity = snapshot.identity()
        if self._identity is None:
            self._identity = identity
            debug.info(f"Assigned player index {identity.local_player_index}"
                       f"{' (spectator)' if identity.is_spectator else ''}", "session")
        elif identity != self._identity:
            debug.warning(f"Server sent identity {identity}, keeping {self._identity}", "session")

        self._snapshot = snapshot
        debug.debug(f"Snapshot: turn {snapshot.turn.turn_counter}, "
                    f"over={snapshot.turn.is_game_over}, '{snapshot.status_message}'", "session")
        debug.start_timer("snapshot")
        self._notify("on_snapshot", snapshot)
        debug.end_timer("snapshot", "session")

    def _notify(self, event: str, *args) -> None:
        try:
            getattr(self._listener, event)(*args)
        except Exception as e:
            # A failing listener must not take the connection down with it
            debug.error(f"Listener {event} failed: {e!r}", "session")

    def _finish(self, error: Optional[SessionConnectionError]) -> None:
        if self._state.is_closed:
            return

        self._state = SessionState.CLOSED_ERROR if error else SessionState.CLOSED_NORMAL
        self._reader = None
        was_game_over = self.is_game_over
        debug.info(f"Session {self._state.value} (game over: {was_game_over})", "session")

        if error is not None:
            self._notify("on_error", error)
        self._notify("on_closed", was_game_over)

    async def send_move_intent(self, intent: MoveIntent) -> bool:
        """
        Send an intent at most once, without waiting for any acknowledgement.

        Returns:
            True if the intent was handed to the transport. Intents sent while
            the session is not open are dropped.
        """
        if self._state != SessionState.OPEN or self._transport is None:
            debug.debug(f"Dropping {intent}: session is {self._state.value}", "session")
            return False

        try:
            await self._transport.send(encode_move_intent(intent))
        except (ConnectionClosed, OSError) as e:
            # The receive loop reports the close
            debug.warning(f"Could not send {intent}: {e}", "session")
            return False

        debug.debug(f"Sent {intent}", "session")
        return True

    async def send_play_again_intent(self) -> bool:
        """Ask the server for a new round with the same roster."""
        return await self.send_move_intent(MoveIntent.play_again_request())

    async def close(self) -> None:
        """Release the transport, whatever state the session is in."""
        if self._state == SessionState.IDLE:
            return

        reader, self._reader = self._reader, None
        transport, self._transport = self._transport, None
        was_live = not self._state.is_closed
        if was_live:
            self._state = SessionState.CLOSED_NORMAL

        if reader is not None and reader is not asyncio.current_task():
            reader.cancel()
            await asyncio.gather(reader, return_exceptions=True)

        if transport is not None:
            await self._close_transport(transport)

        if was_live:
            debug.info("Session closed locally", "session")
            self._notify("on_closed", self.is_game_over)

    async def _close_transport(self, transport) -> None:
        try:
            await transport.close()
        except (OSError, WebSocketException) as e:
            debug.warning(f"Error while closing transport: {e}", "session")

    async def wait_closed(self) -> None:
        """Wait until the receive loop has ended."""
        if self._reader is not None:
            await asyncio.gather(self._reader, return_exceptions=True)

    async def __aenter__(self) -> "SessionClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
