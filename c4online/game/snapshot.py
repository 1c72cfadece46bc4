"""
snapshot.py - Synchronized game state as received from the server

A GameSnapshot is the unit of synchronization: the server sends a complete
one for every game event and it replaces whatever the client held before.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from c4online.game.grid import Grid
from c4online.utils import PLAY_AGAIN_PLACEMENT, SPECTATOR_INDEX


@dataclass(frozen=True)
class PlayerSlot:
    """One seat in the roster; the order of slots is the turn order."""
    index: int
    display_name: str
    color_index: int


@dataclass(frozen=True)
class TurnState:
    turn_counter: int = 0
    is_game_over: bool = False

    def active_player_index(self, player_count: int) -> int:
        """Index of the player whose turn it is, -1 with an empty roster."""
        if player_count <= 0:
            return -1
        return self.turn_counter % player_count


@dataclass(frozen=True)
class SessionIdentity:
    """
    Who the local client is in this game.

    The server assigns it with the first snapshot of a session and it does not
    change afterwards.
    """
    local_player_index: int = SPECTATOR_INDEX
    is_spectator: bool = True

    @classmethod
    def from_player_index(cls, player_index: int, spectator: bool = False) -> "SessionIdentity":
        return cls(
            local_player_index=player_index,
            is_spectator=spectator or player_index < 0,
        )


@dataclass(frozen=True)
class GameSnapshot:
    grid: Grid
    players: Tuple[PlayerSlot, ...] = ()
    turn: TurnState = field(default_factory=TurnState)
    status_message: str = ""
    # Per-recipient metadata sent alongside the game
    player_index: int = SPECTATOR_INDEX
    player_turn: bool = False
    is_spectator: bool = False
    game_id: Optional[str] = None

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def active_player_index(self) -> int:
        return self.turn.active_player_index(self.player_count)

    def identity(self) -> SessionIdentity:
        """Identity described by this snapshot's metadata."""
        return SessionIdentity.from_player_index(self.player_index, self.is_spectator)


@dataclass(frozen=True)
class MoveIntent:
    """A request sent to the server; the next snapshot is the only reply."""
    placement: int
    play_again: bool = False

    @classmethod
    def play_again_request(cls) -> "MoveIntent":
        return cls(placement=PLAY_AGAIN_PLACEMENT, play_again=True)

    @classmethod
    def for_cell(cls, grid: Grid, x: int, y: int) -> "MoveIntent":
        return cls(placement=grid.linear_placement_index(x, y))
