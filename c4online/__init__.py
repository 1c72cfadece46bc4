"""
c4online - Client core for networked Connect Four style games

This package keeps a connection to an authoritative game server, replaces the
local board with every snapshot the server pushes, checks moves locally before
sending them, and derives what each player's interface should show.
"""

# Version number
__version__ = '0.1.0'
