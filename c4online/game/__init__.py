"""
c4online.game - Board model, move legality and view projection

The controller lives in ``c4online.game.controller`` and is not re-exported
here, since it depends on the interface and network packages.
"""

from c4online.game.grid import Grid
from c4online.game.projector import GameStateProjector, ViewState, project
from c4online.game.snapshot import GameSnapshot, MoveIntent, PlayerSlot, SessionIdentity, TurnState
from c4online.game.validator import is_legal, legal_placements

__all__ = [
    'Grid', 'GameSnapshot', 'MoveIntent', 'PlayerSlot', 'SessionIdentity', 'TurnState',
    'GameStateProjector', 'ViewState', 'project', 'is_legal', 'legal_placements',
]
