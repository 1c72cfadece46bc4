"""
cli.py - Terminal interface for playing a networked game

This module provides a render sink that draws the board, roster and status in
the terminal, and an interactive loop that turns typed commands into moves.
"""

import asyncio
import sys
import threading
from typing import Callable, Dict, List, Optional, TextIO, Tuple

from c4online.debug import debug
from c4online.game.controller import GameController
from c4online.game.grid import Grid
from c4online.game.projector import ViewState
from c4online.game.snapshot import SessionIdentity
from c4online.game.validator import legal_placements
from c4online.interfaces.render_sink import RenderSink
from c4online.net.protocol import server_url_from_page
from c4online.utils import DEFAULT_SERVER, color_name

HELP_TEXT = (
    "Commands: <column> drops a piece, '<x> <y>' places at a cell, "
    "'p' plays again after a game, 'h' shows this help, 'q' quits."
)


class TerminalRenderSink(RenderSink):
    """Draws render commands as text."""

    def __init__(self, out: Optional[TextIO] = None):
        self.out = out or sys.stdout
        self.rematch_offered = False
        self.last_status: Optional[str] = None
        self._view: Optional[ViewState] = None
        self._grid: Optional[Grid] = None
        self._identity: Optional[SessionIdentity] = None
        self._pending: Optional[Tuple[int, int, int]] = None

    def write(self, text: str = "") -> None:
        print(text, file=self.out)

    def render(self, view: ViewState, grid: Grid, identity: SessionIdentity) -> None:
        self._view = view
        self._grid = grid
        self._identity = identity
        self._pending = None
        if not view.is_game_over:
            self.rematch_offered = False
        self._draw()

    def _draw(self) -> None:
        view, grid, identity = self._view, self._grid, self._identity
        if view is None or grid is None:
            return

        hover_color = None
        hover_cells: List[Tuple[int, int]] = []
        if view.is_local_players_turn and self._pending is None:
            hover_color = identity.local_player_index
            hover_cells = legal_placements(grid)

        self.write()
        self.write(grid.render(hover_color=hover_color, hover_cells=hover_cells, pending=self._pending))
        self.write(self.format_roster(view, identity))
        self.write(view.status_message)
        self.last_status = view.status_message

    @staticmethod
    def format_roster(view: ViewState, identity: Optional[SessionIdentity]) -> str:
        """One line per player; ``>`` marks the player to move."""
        lines = []
        for slot in view.roster:
            marker = ">" if slot.index == view.highlighted_player_index and not view.is_game_over else " "
            you = " (you)" if identity is not None and slot.index == identity.local_player_index else ""
            lines.append(f"{marker} {slot.display_name} [{color_name(slot.color_index)}]{you}")
        if identity is not None and identity.is_spectator:
            lines.append("  (watching)")
        return "\n".join(lines)

    def show_connection_error(self, message: str) -> None:
        self.last_status = message
        self.write(message)

    def offer_rematch(self) -> None:
        self.rematch_offered = True
        self.write("Game over. Type 'p' to play again.")

    def show_pending_move(self, x: int, y: int, color_index: int) -> None:
        self._pending = (x, y, color_index)
        self._draw()

    def show_notice(self, text: str) -> None:
        self.last_status = text
        self.write(text)


class CellHandler:
    """Selecting one cell; the coordinates are fixed when the handler is built."""

    __slots__ = ("x", "y", "_controller")

    def __init__(self, x: int, y: int, controller: GameController):
        self.x = x
        self.y = y
        self._controller = controller

    async def select(self) -> bool:
        return await self._controller.request_move(self.x, self.y)

    def __repr__(self) -> str:
        return f"CellHandler({self.x}, {self.y})"


class BoardInput:
    """Maps typed coordinates to the cell handlers of the current board."""

    def __init__(self, controller: GameController):
        self.controller = controller
        self._handlers: Dict[Tuple[int, int], CellHandler] = {}
        self._shape: Optional[Tuple[int, int]] = None

    def handler_for(self, x: int, y: int) -> Optional[CellHandler]:
        grid = self.controller.grid
        if grid is None:
            return None
        if grid.shape != self._shape:
            self._handlers = {
                (cx, cy): CellHandler(cx, cy, self.controller)
                for cy in range(grid.row_count)
                for cx in range(grid.column_count)
            }
            self._shape = grid.shape
        return self._handlers.get((x, y))


def parse_command(line: str) -> Optional[Tuple]:
    """
    Parse one line of user input.

    Returns:
        ("drop", x), ("move", x, y), ("again",), ("help",), ("quit",),
        or None if the line is not a command
    """
    words = line.strip().lower().split()
    if not words:
        return None

    if words[0] in ("q", "quit", "exit"):
        return ("quit",)
    if words[0] in ("p", "play", "again"):
        return ("again",)
    if words[0] in ("h", "help", "?"):
        return ("help",)

    try:
        numbers = [int(word) for word in words]
    except ValueError:
        return None

    if len(numbers) == 1:
        return ("drop", numbers[0])
    if len(numbers) == 2:
        return ("move", numbers[0], numbers[1])
    return None


def resolve_target(target: str, server: Optional[str]) -> Tuple[str, str]:
    """
    Work out the server origin and the game id from the command line.

    ``target`` is either a game id or a full game page address.
    """
    if "://" in target:
        page_server, game_id = server_url_from_page(target)
        return server or page_server, game_id
    return server or DEFAULT_SERVER, target


class OnlineCLI:
    """Interactive terminal client for one game."""

    def __init__(self, controller: GameController, sink: TerminalRenderSink,
                 input_fn: Callable[[str], str] = input):
        self.controller = controller
        self.sink = sink
        self.board_input = BoardInput(controller)
        self._input_fn = input_fn

    @staticmethod
    def ask_player_name(input_fn: Callable[[str], str] = input, out: TextIO = None) -> str:
        """Prompt until a non-blank name is entered."""
        out = out or sys.stdout
        while True:
            name = input_fn("Your name: ").strip()
            if name:
                return name
            print("Please enter a valid username.", file=out)

    async def handle_line(self, line: str) -> bool:
        """
        Act on one line of input.

        Returns:
            False when the user asked to quit
        """
        command = parse_command(line)
        if command is None:
            if line.strip():
                self.sink.write(f"Unknown command '{line.strip()}'. {HELP_TEXT}")
            return True

        kind = command[0]
        if kind == "quit":
            return False
        if kind == "help":
            self.sink.write(HELP_TEXT)
        elif kind == "again":
            if not await self.controller.request_play_again():
                self.sink.write("You can only ask for a rematch after a game you played in.")
        elif kind == "drop":
            if not await self.controller.request_drop(command[1]):
                self.sink.write(f"Can't play column {command[1]} right now.")
        elif kind == "move":
            handler = self.board_input.handler_for(command[1], command[2])
            if handler is None or not await handler.select():
                self.sink.write(f"Can't play ({command[1]}, {command[2]}) right now.")
        return True

    def _start_reader(self, queue: "asyncio.Queue") -> threading.Thread:
        loop = asyncio.get_running_loop()

        def deliver(line: Optional[str]) -> bool:
            # The loop may be gone once run() has returned
            if loop.is_closed():
                return False
            try:
                loop.call_soon_threadsafe(queue.put_nowait, line)
            except RuntimeError:
                return False
            return True

        def read_lines():
            while True:
                try:
                    line = self._input_fn("")
                except EOFError:
                    deliver(None)
                    return
                if not deliver(line):
                    debug.debug("Event loop closed, stopping input reader", "cli")
                    return

        # daemon: a pending input() must not keep the process alive
        reader = threading.Thread(target=read_lines, name="c4online-stdin", daemon=True)
        reader.start()
        return reader

    async def run(self, game_id: str, player_name: str) -> None:
        """Join the game and process input until the session ends or the user quits."""
        self.sink.write(f"Joining game '{game_id}' as {player_name}...")
        await self.controller.join(game_id, player_name)
        if not self.controller.session.is_open:
            return

        self.sink.write(HELP_TEXT)
        lines: asyncio.Queue = asyncio.Queue()
        self._start_reader(lines)
        closed = asyncio.ensure_future(self.controller.session.wait_closed())

        try:
            while True:
                next_line = asyncio.ensure_future(lines.get())
                done, _ = await asyncio.wait({next_line, closed}, return_when=asyncio.FIRST_COMPLETED)
                if next_line not in done:
                    next_line.cancel()
                    break
                line = next_line.result()
                if line is None or not await self.handle_line(line):
                    break
        finally:
            closed.cancel()
            debug.debug("Leaving interactive loop", "cli")
            await self.controller.leave()
