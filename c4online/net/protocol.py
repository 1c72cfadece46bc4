"""
protocol.py - JSON wire format between the client and the game server

Server messages look like::

    {"message": "Your Turn.", "playerIndex": 0, "playerTurn": true,
     "game": {"grid": [[-1, ...], ...], "isOver": false, "turn": 0,
              "players": [{"name": "alice"}, {"name": "bob"}]}}

Client messages are ``{"placement": p}`` for a move and
``{"placement": -1, "playAgain": true}`` to ask for another round.
"""

import json
from typing import Any, Dict, Optional, Tuple, Union
from urllib.parse import urlencode, urlsplit, urlunsplit

from c4online.debug import debug
from c4online.errors import MalformedMessage
from c4online.game.grid import Grid
from c4online.game.snapshot import GameSnapshot, MoveIntent, PlayerSlot, TurnState
from c4online.utils import GAME_ID_QUERY_KEY, PLAYER_NAME_QUERY_KEY, WS_PATH

Frame = Union[str, bytes]


def build_connection_url(server_url: str, game_id: str, player_name: str,
                         path: str = WS_PATH) -> str:
    """
    Transport target for joining ``game_id`` as ``player_name``.

    Args:
        server_url: ``ws://`` or ``wss://`` origin, optionally with a path prefix
        game_id: Game identifier taken from the page path
        player_name: Display name shown to the other players
        path: Websocket endpoint under the server origin
    """
    if not game_id:
        raise ValueError("game id must not be empty")
    if not player_name or not player_name.strip():
        raise ValueError("player name must not be empty")

    parts = urlsplit(server_url)
    if parts.scheme not in ("ws", "wss"):
        raise ValueError(f"unsupported websocket scheme in {server_url!r}")

    query = urlencode({GAME_ID_QUERY_KEY: game_id, PLAYER_NAME_QUERY_KEY: player_name.strip()})
    full_path = parts.path.rstrip("/") + path
    return urlunsplit((parts.scheme, parts.netloc, full_path, query, ""))


def server_url_from_page(page_url: str) -> Tuple[str, str]:
    """
    Split a game page address into the websocket origin and the game id.

    ``https://host/abc`` becomes ``("wss://host", "abc")``.
    """
    parts = urlsplit(page_url)
    schemes = {"http": "ws", "https": "wss", "ws": "ws", "wss": "wss"}
    if parts.scheme not in schemes or not parts.netloc:
        raise ValueError(f"not a game page address: {page_url!r}")

    game_id = parts.path.strip("/")
    if not game_id:
        raise ValueError(f"page address {page_url!r} has no game id")
    return urlunsplit((schemes[parts.scheme], parts.netloc, "", "", "")), game_id


def encode_move_intent(intent: MoveIntent) -> str:
    payload: Dict[str, Any] = {"placement": int(intent.placement)}
    if intent.play_again:
        payload["playAgain"] = True
    return json.dumps(payload)


def _require(mapping: Dict[str, Any], key: str, kind, where: str):
    if key not in mapping:
        raise MalformedMessage(f"{where} has no {key!r}")
    value = mapping[key]
    # bool passes isinstance(.., int); only accept it where a bool is expected
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise MalformedMessage(f"{where}.{key} has unexpected type {type(value).__name__}")
    return value


def _optional(mapping: Dict[str, Any], key: str, kind, default, where: str):
    if mapping.get(key) is None:
        return default
    return _require(mapping, key, kind, where)


def _decode_players(raw_players) -> Tuple[PlayerSlot, ...]:
    if not isinstance(raw_players, list):
        raise MalformedMessage("game.players is not a list")

    players = []
    for index, entry in enumerate(raw_players):
        if isinstance(entry, dict):
            name = _optional(entry, "name", str, "", f"game.players[{index}]")
        elif isinstance(entry, str):
            name = entry
        else:
            raise MalformedMessage(f"game.players[{index}] is not an object")
        players.append(PlayerSlot(index=index, display_name=name, color_index=index))
    return tuple(players)


def decode_snapshot(payload: Dict[str, Any]) -> GameSnapshot:
    """
    Build a GameSnapshot from a decoded server message.

    Raises:
        MalformedMessage: if a required field is missing or has the wrong type
    """
    if not isinstance(payload, dict):
        raise MalformedMessage("message is not a JSON object")

    status = _require(payload, "message", str, "message")
    game = _require(payload, "game", dict, "message")

    try:
        grid = Grid.from_rows(_require(game, "grid", list, "game"))
    except ValueError as e:
        if isinstance(e, MalformedMessage):
            raise
        raise MalformedMessage(f"game.grid: {e}") from e

    turn_counter = _optional(game, "turn", int, 0, "game")
    if turn_counter < 0:
        raise MalformedMessage(f"game.turn is negative: {turn_counter}")

    return GameSnapshot(
        grid=grid,
        players=_decode_players(game.get("players") or []),
        turn=TurnState(
            turn_counter=turn_counter,
            is_game_over=_optional(game, "isOver", bool, False, "game"),
        ),
        status_message=status,
        player_index=_require(payload, "playerIndex", int, "message"),
        player_turn=_optional(payload, "playerTurn", bool, False, "message"),
        is_spectator=_optional(payload, "isSpectator", bool, False, "message"),
        game_id=_optional(game, "gameId", str, None, "game"),
    )


def decode_frame(frame: Frame) -> Tuple[Optional[GameSnapshot], Optional[str]]:
    """
    Decode one inbound websocket frame.

    Returns:
        ``(snapshot, None)`` for a game message, ``(None, notice)`` for a bare
        text notice such as ``"Game Full."``, and ``(None, None)`` for frames
        with no game content (heartbeats, objects without ``message``).

    Raises:
        MalformedMessage: if the frame is not JSON, or a game message is broken
    """
    if isinstance(frame, bytes):
        try:
            frame = frame.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedMessage("frame is not UTF-8") from e

    if not frame.strip():
        return None, None

    try:
        payload = json.loads(frame)
    except json.JSONDecodeError as e:
        raise MalformedMessage(f"frame is not JSON: {e.msg}") from e
    except RecursionError as e:
        raise MalformedMessage("frame is nested too deeply") from e

    if isinstance(payload, str):
        return None, payload

    if not isinstance(payload, dict) or "message" not in payload:
        debug.trace("Ignoring frame without game content", "protocol")
        return None, None

    return decode_snapshot(payload), None
