#!/usr/bin/env python3
"""
run.py - Main entry point for the c4online terminal client
"""

import argparse
import asyncio
import sys

from c4online.debug import debug, DebugLevel
from c4online.utils import COLS, ROWS

# --- Utility Functions ---

def configure_debug(args):
    """Configure debug level based on args.debug or args.debug_level."""
    if args.debug:
        debug.configure(level=DebugLevel.DEBUG)
    else:
        debug.configure(level=DebugLevel[args.debug_level.upper()])
    if args.log_file:
        debug.configure(log_file=args.log_file)
    if args.components:
        debug.configure(components=[c.strip() for c in args.components.split(',') if c.strip()])


def parse_position(position, rows, cols):
    """Parse a comma-separated, row-major list of cell values into rows."""
    values = [int(v) for v in position.split(',')]
    if len(values) != rows * cols:
        raise ValueError(f"Position string must have {rows * cols} values, got {len(values)}")
    return [values[r * cols:(r + 1) * cols] for r in range(rows)]

# --- Command Handlers ---

def handle_play(args):
    from c4online.game.controller import GameController
    from c4online.interfaces.cli import OnlineCLI, TerminalRenderSink, resolve_target

    try:
        server, game_id = resolve_target(args.target, args.server)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    name = args.name.strip() if args.name else ""
    if not name:
        try:
            name = OnlineCLI.ask_player_name()
        except (EOFError, KeyboardInterrupt):
            return 1

    sink = TerminalRenderSink()
    controller = GameController(sink, server_url=server, open_timeout=args.open_timeout)
    cli = OnlineCLI(controller, sink)
    try:
        asyncio.run(cli.run(game_id, name))
    except KeyboardInterrupt:
        print("\nQuitting.")
    return 0 if controller.last_error is None else 2


def handle_check(args):
    from c4online.game.grid import Grid
    from c4online.game.validator import illegal_reason, legal_placements

    try:
        grid = Grid.from_rows(parse_position(args.position, args.rows, args.cols)) \
            if args.position else Grid.empty(args.rows, args.cols)
    except ValueError as e:
        print(f"Error parsing position: {e}")
        return 1

    print("Loaded position:")
    print(grid.render())
    print(f"Legal placements (x, y): {legal_placements(grid)}")

    if args.x is not None and args.y is not None:
        reason = illegal_reason(grid, args.x, args.y)
        if reason is None:
            print(f"Move ({args.x}, {args.y}) is legal, placement {grid.linear_placement_index(args.x, args.y)}")
        else:
            print(f"Move ({args.x}, {args.y}) is illegal: {reason}")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description='Terminal client for networked Connect Four games',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py play abc123 --name alice
  python run.py play https://example.com/abc123 --name bob
  python run.py check --x 3 --y 5
  python run.py check --rows 2 --cols 2 --position=-1,-1,0,-1 --x 0 --y 0
""")
    parser.add_argument('--debug', action='store_true',
        help='Enable debug mode (equivalent to --debug_level debug)')
    parser.add_argument('--debug_level',
        choices=[level.name.lower() for level in DebugLevel],
        default='warning',
        help='Set debug level: none (silent), error, warning, info, debug, trace (most verbose)')
    parser.add_argument('--log_file', type=str, default=None,
        help='Also write log messages to this file')
    parser.add_argument('--components', type=str, default=None,
        help='Comma-separated components to log (session, protocol, controller, ...)')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    play_parser = subparsers.add_parser('play', help='Join a game and play it in the terminal')
    play_parser.add_argument('target',
        help='Game id, or the address of the game page (http(s)://host/<game id>)')
    play_parser.add_argument('--name', type=str, default=None,
        help='Display name shown to other players (prompted for if missing)')
    play_parser.add_argument('--server', type=str, default=None,
        help='Websocket origin of the game server, e.g. ws://localhost:8292')
    play_parser.add_argument('--open_timeout', type=float, default=10.0,
        help='Seconds to wait for the websocket handshake (default: 10)')

    check_parser = subparsers.add_parser('check', help='Check move legality on a board position')
    check_parser.add_argument('--position', type=str,
        help='Comma-separated row-major cell values (-1 empty, otherwise a color index)')
    check_parser.add_argument('--rows', type=int, default=ROWS, help=f'Board rows (default: {ROWS})')
    check_parser.add_argument('--cols', type=int, default=COLS, help=f'Board columns (default: {COLS})')
    check_parser.add_argument('--x', type=int, help='Column of the move to check')
    check_parser.add_argument('--y', type=int, help='Row of the move to check (0 is the top)')

    args = parser.parse_args()
    configure_debug(args)

    if args.command == 'play':
        return handle_play(args)
    elif args.command == 'check':
        return handle_check(args)
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
