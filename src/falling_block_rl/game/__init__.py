"""Game module for Falling Block RL.

Exports the rules engine and supporting classes:
- GameGrid: Playfield, collision queries and row clearing
- Piece: Tetromino piece with rotation and single-step rotation undo
- TetrominoType: Enum of available piece types
- ScoringRules: Line clear scoring table
- TimedLockDelay / FrameLockDelay: Lock delay state machines
- Progression: Score, lock delay and upcoming piece sequence
- FallingBlockGame: Game session driving the pieces above
"""

from .grid import GameGrid
from .pieces import SHAPE_TABLE, SPAWN_X, SPAWN_Y, Piece, RotationDirection, TetrominoType
from .rules import ScoringRules
from .lock_delay import FrameLockDelay, LockState, TimedLockDelay, make_lock_delay
from .progression import Progression, seeded_random
from .core import FallingBlockGame, GameConfig, Action

__all__ = [
    "GameGrid",
    "Piece",
    "RotationDirection",
    "TetrominoType",
    "SHAPE_TABLE",
    "SPAWN_X",
    "SPAWN_Y",
    "ScoringRules",
    "LockState",
    "TimedLockDelay",
    "FrameLockDelay",
    "make_lock_delay",
    "Progression",
    "seeded_random",
    "FallingBlockGame",
    "GameConfig",
    "Action",
]
