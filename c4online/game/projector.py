"""
projector.py - View state derived from the latest snapshot

``project`` is a pure function of a snapshot and the local session identity.
``GameStateProjector`` wraps it and additionally reports the moment a game
ends, so the interface can offer a rematch exactly once per finished game.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from c4online.debug import debug
from c4online.game.snapshot import GameSnapshot, PlayerSlot, SessionIdentity


@dataclass(frozen=True)
class ViewState:
    active_player_index: int
    is_local_players_turn: bool
    is_game_over: bool
    status_message: str
    roster: Tuple[PlayerSlot, ...]
    highlighted_player_index: int


def project(snapshot: GameSnapshot, identity: SessionIdentity) -> ViewState:
    """Compute what the interface should show for ``snapshot``."""
    active = snapshot.active_player_index
    is_over = snapshot.turn.is_game_over

    if snapshot.players:
        local_turn = identity.local_player_index == active
    else:
        # Without a roster the turn counter cannot be mapped to a seat;
        # fall back to the server's per-recipient flag.
        local_turn = snapshot.player_turn

    return ViewState(
        active_player_index=active,
        is_local_players_turn=local_turn and not is_over and not identity.is_spectator,
        is_game_over=is_over,
        status_message=snapshot.status_message,
        roster=snapshot.players,
        highlighted_player_index=active,
    )


class GameStateProjector:
    """Projects snapshots and detects the not-over to over transition."""

    def __init__(self):
        self._was_game_over = False
        self._last_view: Optional[ViewState] = None

    @property
    def last_view(self) -> Optional[ViewState]:
        return self._last_view

    def reset(self) -> None:
        """Forget the previous game, e.g. when a new session starts."""
        self._was_game_over = False
        self._last_view = None

    def project(self, snapshot: GameSnapshot, identity: SessionIdentity) -> Tuple[ViewState, bool]:
        """
        Project a snapshot.

        Returns:
            The view state and whether a rematch should be offered now. The
            offer is made once when a game ends for a seated player, and is
            re-armed once a new round is under way.
        """
        view = project(snapshot, identity)
        offer_rematch = (
            view.is_game_over
            and not self._was_game_over
            and not identity.is_spectator
        )
        self._was_game_over = view.is_game_over
        self._last_view = view

        if offer_rematch:
            debug.info("Game over, offering a rematch", "projector")
        return view, offer_rematch
