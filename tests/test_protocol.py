import json

import pytest

from c4online.errors import MalformedMessage
from c4online.game.grid import Grid
from c4online.game.snapshot import MoveIntent, PlayerSlot
from c4online.net.protocol import (build_connection_url, decode_frame, decode_snapshot,
                                   encode_move_intent, server_url_from_page)
from conftest import grid_rows, server_message


def test_connection_url_carries_game_and_name():
    url = build_connection_url("wss://games.example.com", "abc123", "alice")
    assert url == "wss://games.example.com/ws?gameid=abc123&name=alice"


def test_connection_url_encodes_names():
    url = build_connection_url("ws://localhost:8292/", "g 1", " Bob & Co ")
    assert url == "ws://localhost:8292/ws?gameid=g+1&name=Bob+%26+Co"


@pytest.mark.parametrize("server, game_id, name", [
    ("http://localhost", "g", "a"),
    ("ws://localhost", "", "a"),
    ("ws://localhost", "g", "   "),
])
def test_connection_url_rejects_bad_input(server, game_id, name):
    with pytest.raises(ValueError):
        build_connection_url(server, game_id, name)


def test_server_url_from_page():
    assert server_url_from_page("https://example.com/abc") == ("wss://example.com", "abc")
    assert server_url_from_page("http://localhost:8292/xyz/") == ("ws://localhost:8292", "xyz")
    with pytest.raises(ValueError):
        server_url_from_page("https://example.com/")
    with pytest.raises(ValueError):
        server_url_from_page("example.com/abc")


def test_encode_move_and_play_again():
    assert json.loads(encode_move_intent(MoveIntent(placement=38))) == {"placement": 38}
    assert json.loads(encode_move_intent(MoveIntent.play_again_request())) == {
        "placement": -1, "playAgain": True,
    }


def test_decode_full_message():
    grid = grid_rows(pieces={(3, 5): 0})
    snapshot, notice = decode_frame(server_message(
        grid=grid, turn=1, player_index=1, message="Your Turn.", players=("alice", "bob")))

    assert notice is None
    assert snapshot.grid == Grid.from_rows(grid)
    assert snapshot.turn.turn_counter == 1
    assert snapshot.turn.is_game_over is False
    assert snapshot.status_message == "Your Turn."
    assert snapshot.player_index == 1
    assert snapshot.player_turn is True
    assert snapshot.players == (
        PlayerSlot(index=0, display_name="alice", color_index=0),
        PlayerSlot(index=1, display_name="bob", color_index=1),
    )
    assert snapshot.identity().local_player_index == 1
    assert snapshot.identity().is_spectator is False


def test_decode_spectator_message():
    snapshot, _ = decode_frame(server_message(player_index=-1, message="Watching."))
    assert snapshot.identity().is_spectator
    snapshot, _ = decode_frame(server_message(player_index=0, isSpectator=True))
    assert snapshot.identity().is_spectator


@pytest.mark.parametrize("frame", [
    json.dumps({"game": {"grid": grid_rows()}}),
    json.dumps({"ping": 1}),
    json.dumps([1, 2, 3]),
    json.dumps(None),
    "",
    "   ",
])
def test_frames_without_game_content_are_ignored(frame):
    assert decode_frame(frame) == (None, None)


def test_bare_string_is_a_notice():
    assert decode_frame(json.dumps("Game Full.")) == (None, "Game Full.")


def test_bytes_frames_are_decoded():
    snapshot, _ = decode_frame(server_message().encode("utf-8"))
    assert snapshot.status_message == "Your Turn."


def test_optional_fields_default():
    payload = {"message": "Waiting for Players...", "playerIndex": 0,
               "game": {"grid": grid_rows(), "turn": 0, "gameId": "abc"}}
    snapshot = decode_snapshot(payload)
    assert snapshot.players == ()
    assert snapshot.turn.is_game_over is False
    assert snapshot.player_turn is False
    assert snapshot.game_id == "abc"


@pytest.mark.parametrize("mutate", [
    lambda p: p.pop("game"),
    lambda p: p.pop("playerIndex"),
    lambda p: p.update(playerIndex="0"),
    lambda p: p.update(message=3),
    lambda p: p["game"].pop("grid"),
    lambda p: p["game"].update(grid=[[-1, -1], [-1]]),
    lambda p: p["game"].update(grid="nope"),
    lambda p: p["game"].update(turn=-1),
    lambda p: p["game"].update(turn="1"),
    lambda p: p["game"].update(isOver="yes"),
    lambda p: p["game"].update(players=[1, 2]),
    lambda p: p["game"].update(players="alice"),
    lambda p: p["game"]["grid"][0].__setitem__(0, 2 ** 70),
])
def test_broken_game_messages_raise(mutate):
    payload = json.loads(server_message())
    mutate(payload)
    with pytest.raises(MalformedMessage):
        decode_frame(json.dumps(payload))


def test_non_json_frames_raise():
    with pytest.raises(MalformedMessage):
        decode_frame("{not json")
    with pytest.raises(MalformedMessage):
        decode_frame(b"\xff\xfe")
    with pytest.raises(MalformedMessage):
        decode_frame("[" * 100000 + "]" * 100000)
