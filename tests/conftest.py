"""
Shared fixtures and fakes for the c4online tests.

No test opens a real socket: sessions are given a FakeConnector that hands
out FakeTransport objects behaving like a websockets client connection.
"""

import asyncio
import json

import pytest

from c4online.debug import DebugLevel, debug
from c4online.interfaces.render_sink import RenderSink
from c4online.net.session import SessionListener

EMPTY_6x7 = [[-1] * 7 for _ in range(6)]


def grid_rows(rows=6, cols=7, pieces=None):
    """Build wire rows; ``pieces`` maps (x, y) to a color index."""
    cells = [[-1] * cols for _ in range(rows)]
    for (x, y), color in (pieces or {}).items():
        cells[y][x] = color
    return cells


def server_message(grid=None, turn=0, is_over=False, player_index=0,
                   player_turn=None, message="Your Turn.", players=("alice", "bob"), **extra):
    """A server frame in the shape the game server sends."""
    if player_turn is None:
        player_turn = players and turn % len(players) == player_index and not is_over
    payload = {
        "message": message,
        "playerIndex": player_index,
        "playerTurn": bool(player_turn),
        "game": {
            "grid": grid if grid is not None else grid_rows(),
            "isOver": is_over,
            "turn": turn,
            "players": [{"name": name} for name in players],
        },
    }
    payload.update(extra)
    return json.dumps(payload)


class _End:
    def __init__(self, error=None):
        self.error = error


class FakeTransport:
    """In-memory stand-in for a websockets client connection."""

    def __init__(self):
        self.sent = []
        self.closed = False
        self._frames = asyncio.Queue()

    def push(self, frame):
        self._frames.put_nowait(frame)

    def end(self, error=None):
        """Finish the inbound stream, optionally with a transport error."""
        self._frames.put_nowait(_End(error))

    async def send(self, data):
        self.sent.append(data)

    def sent_json(self):
        return [json.loads(data) for data in self.sent]

    async def close(self):
        self.closed = True
        self._frames.put_nowait(_End())

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._frames.get()
        if isinstance(item, _End):
            if item.error is not None:
                raise item.error
            raise StopAsyncIteration
        return item


class FakeConnector:
    """
    Connector returning fresh FakeTransports, or failing when told to.

    With a ``gate`` event the handshake only completes once the gate is set.
    """

    def __init__(self, error=None, gate=None, transport_factory=None):
        self.error = error
        self.gate = gate
        self.transport_factory = transport_factory or FakeTransport
        self.urls = []
        self.transports = []

    @property
    def transport(self):
        return self.transports[-1]

    async def __call__(self, url):
        self.urls.append(url)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        transport = self.transport_factory()
        self.transports.append(transport)
        return transport


class RecordingListener(SessionListener):
    def __init__(self):
        self.events = []

    def on_snapshot(self, snapshot):
        self.events.append(("snapshot", snapshot))

    def on_notice(self, text):
        self.events.append(("notice", text))

    def on_error(self, error):
        self.events.append(("error", error))

    def on_closed(self, was_game_over):
        self.events.append(("closed", was_game_over))

    def names(self):
        return [event[0] for event in self.events]

    def snapshots(self):
        return [event[1] for event in self.events if event[0] == "snapshot"]


class RecordingSink(RenderSink):
    def __init__(self):
        self.renders = []
        self.errors = []
        self.rematch_offers = 0
        self.pending = []
        self.notices = []

    def render(self, view, grid, identity):
        self.renders.append((view, grid, identity))

    def show_connection_error(self, message):
        self.errors.append(message)

    def offer_rematch(self):
        self.rematch_offers += 1

    def show_pending_move(self, x, y, color_index):
        self.pending.append((x, y, color_index))

    def show_notice(self, text):
        self.notices.append(text)


async def settle(rounds=5):
    """Let the session's receive task handle everything queued so far."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture(autouse=True)
def quiet_debug():
    debug.configure(level=DebugLevel.NONE, components=[])
    yield
    debug.configure(level=DebugLevel.NONE, components=[])


@pytest.fixture
def connector():
    return FakeConnector()


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def sink():
    return RecordingSink()
