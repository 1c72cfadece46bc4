"""
c4online.net - Wire protocol and websocket session for the game server
"""

from c4online.net.protocol import build_connection_url, decode_frame, encode_move_intent
from c4online.net.session import SessionClient, SessionListener, SessionState

__all__ = [
    'SessionClient', 'SessionListener', 'SessionState',
    'build_connection_url', 'decode_frame', 'encode_move_intent',
]
