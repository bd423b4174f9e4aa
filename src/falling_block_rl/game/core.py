from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple

import numpy as np

from .grid import GameGrid
from .lock_delay import LOCK_DELAY_FRAMES, LOCK_DELAY_MS, LockDelay, make_lock_delay
from .pieces import SPAWN_X, SPAWN_Y, Piece, RotationDirection, TetrominoType
from .progression import Progression, RandomSource, seeded_random
from .rules import ScoringRules


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    ROTATE_CW = 2
    ROTATE_CCW = 3
    SOFT_DROP = 4
    HARD_DROP = 5
    NONE = 6


@dataclass
class GameConfig:
    width: int = 10
    height: int = 20
    random_seed: Optional[int] = None
    spawn_x: int = SPAWN_X
    spawn_y: int = SPAWN_Y
    lock_delay_mode: str = "time"  # "time" (ms timestamps) or "frames"
    lock_delay_ms: float = LOCK_DELAY_MS
    lock_delay_frames: int = LOCK_DELAY_FRAMES


class FallingBlockGame:
    """Drives one grid, piece and progression through a game.

    Every transform is applied to the piece, checked against the grid and
    reverted on collision. Drop ticks report contact to the lock delay;
    `update` advances it and locks the piece when it has rested long enough.
    In time mode the caller passes timestamps to `drop`/`update`/`step`, in
    frame mode the elapsed frame count (default one).
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self._rng = rng
        self.grid = GameGrid(self.config.width, self.config.height)
        self.progression: Progression
        self.lines_cleared_total = 0
        self.pieces_locked = 0
        self.game_over = False
        self.current_piece: Optional[Piece] = None
        self.reset()

    def _new_lock_delay(self) -> LockDelay:
        if self.config.lock_delay_mode == "frames":
            return make_lock_delay("frames", self.config.lock_delay_frames)
        return make_lock_delay(self.config.lock_delay_mode, self.config.lock_delay_ms)

    def _new_progression(self, seed: Optional[int]) -> Progression:
        if seed is not None:
            rng = seeded_random(seed)
        else:
            rng = self._rng
        return Progression(self.rules, self._new_lock_delay(), rng)

    def reset(self, seed: Optional[int] = None) -> None:
        if seed is None:
            seed = self.config.random_seed
        self.grid.reset()
        self.progression = self._new_progression(seed)
        self.lines_cleared_total = 0
        self.pieces_locked = 0
        self.game_over = False
        self._spawn_piece()

    @property
    def score(self) -> int:
        return self.progression.score

    @property
    def next_kind(self) -> TetrominoType:
        return self.progression.peek_next()

    def _spawn_piece(self) -> None:
        kind = self.progression.consume_next()
        self.current_piece = Piece(kind, self.config.spawn_x, self.config.spawn_y)
        if self.grid.is_terminal(self.current_piece):
            self.game_over = True

    def _require_clock(self, value: Optional[float]) -> None:
        if value is None and self.progression.lock_delay.needs_clock:
            raise ValueError("time mode needs the current time; pass `now`")

    def _active_piece(self) -> Optional[Piece]:
        if self.game_over:
            return None
        return self.current_piece

    def _after_shift(self, piece: Piece) -> None:
        # Moving off a ledge starts the lock delay over
        if not self.grid.collides(piece, 0, 1):
            self.progression.on_contact_lost()

    def move(self, dx: int) -> bool:
        piece = self._active_piece()
        if piece is None:
            return False
        piece.translate(dx, 0)
        if self.grid.collides(piece):
            piece.translate(-dx, 0)
            return False
        self._after_shift(piece)
        return True

    def rotate(self, direction: RotationDirection) -> bool:
        piece = self._active_piece()
        if piece is None:
            return False
        piece.rotate(direction)
        if self.grid.collides(piece):
            piece.undo_rotation()
            return False
        self._after_shift(piece)
        return True

    def drop(self, now: Optional[float] = None) -> bool:
        """One gravity or soft drop tick. Returns whether the piece moved."""
        piece = self._active_piece()
        if piece is None:
            return False
        self._require_clock(now)
        piece.translate(0, 1)
        if self.grid.collides(piece):
            piece.translate(0, -1)
            self.progression.on_contact_detected(now)
            return False
        if self.grid.collides(piece, 0, 1):
            self.progression.on_contact_detected(now)
        else:
            self.progression.on_contact_lost()
        return True

    def update(self, value: Optional[float] = None) -> bool:
        """Advance the lock delay; lock and respawn when it expires."""
        if self._active_piece() is None:
            return False
        self._require_clock(value)
        if self.progression.tick_lock_delay(value):
            self.lock_and_spawn()
            return True
        return False

    def hard_drop(self) -> int:
        piece = self._active_piece()
        if piece is None:
            return 0
        piece.translate(0, self.grid.drop_distance(piece))
        return self.lock_and_spawn()

    def lock_and_spawn(self) -> int:
        assert self.current_piece is not None
        self.grid.merge(self.current_piece)
        self.progression.reset_lock_state()
        lines = self.grid.clear_full_rows()
        self.progression.add_score(lines)
        self.lines_cleared_total += lines
        self.pieces_locked += 1
        self._spawn_piece()
        return lines

    def step(self, action: Action, value: Optional[float] = None) -> Tuple[np.ndarray, int, bool, dict]:
        if self.game_over:
            return self.get_state(), 0, True, self._info()

        self._require_clock(value)
        score_before = self.score
        if action == Action.LEFT:
            self.move(-1)
        elif action == Action.RIGHT:
            self.move(1)
        elif action == Action.ROTATE_CW:
            self.rotate(RotationDirection.CW)
        elif action == Action.ROTATE_CCW:
            self.rotate(RotationDirection.CCW)
        elif action == Action.SOFT_DROP:
            self.drop(value)
        elif action == Action.HARD_DROP:
            self.hard_drop()
        elif action == Action.NONE:
            pass

        self.update(value)
        return self.get_state(), self.score - score_before, self.game_over, self._info()

    def _info(self) -> dict:
        return {
            "score": self.score,
            "lines_cleared_total": self.lines_cleared_total,
            "pieces_locked": self.pieces_locked,
            "next": int(self.next_kind),
        }

    def get_state(self) -> np.ndarray:
        # Overlay current piece on a copy of the grid for observation
        state = self.grid.clone_state()
        if self.current_piece is not None and not self.game_over:
            for x, y in self.current_piece.cells():
                if self.grid.is_inside(x, y):
                    # Use negative to indicate falling piece overlay
                    state[y, x] = -self.current_piece.fill_value
        return state
