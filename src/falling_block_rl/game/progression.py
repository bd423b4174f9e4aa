from __future__ import annotations

import math
import random
from typing import Callable, Optional

from .lock_delay import LockDelay, TimedLockDelay
from .pieces import TetrominoType
from .rules import ScoringRules


# Zero-argument callable returning a float in [0, 1)
RandomSource = Callable[[], float]


def seeded_random(seed: int) -> RandomSource:
    """Deterministic LCG source for seeded replays.

    The multiply rounds to double precision, as the JavaScript client does,
    so a seed yields the same piece order in both.
    """
    state = int(seed)

    def _next() -> float:
        nonlocal state
        state = int(float(state) * 1103515245.0 + 12345.0) & 0x7FFFFFFF
        return state / 0x7FFFFFFF

    return _next


class Progression:
    """Score, lock delay and the upcoming piece.

    One piece type is always buffered: `peek_next` reads it, `consume_next`
    hands it out and draws the replacement from the random source right away.
    """

    def __init__(
        self,
        rules: Optional[ScoringRules] = None,
        lock_delay: Optional[LockDelay] = None,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.rules = rules or ScoringRules()
        self.lock_delay = lock_delay or TimedLockDelay()
        self.rng: RandomSource = rng if rng is not None else random.random
        self.score = 0
        self._next_kind = self._random_kind()

    # Scoring
    def score_for_lines(self, lines: int) -> int:
        return self.rules.score_for_lines(lines)

    def add_score(self, lines: int) -> int:
        gained = self.score_for_lines(lines)
        self.score += gained
        return gained

    # Piece sequence
    def _random_kind(self) -> TetrominoType:
        count = len(TetrominoType)
        index = math.floor(self.rng() * count)
        # A source returning exactly 1.0 would index past the table
        return TetrominoType.from_index(min(max(index, 0), count - 1))

    def peek_next(self) -> TetrominoType:
        return self._next_kind

    def consume_next(self) -> TetrominoType:
        kind = self._next_kind
        self._next_kind = self._random_kind()
        return kind

    # Lock delay
    @property
    def is_resting(self) -> bool:
        return self.lock_delay.is_resting

    def on_contact_detected(self, now: Optional[float] = None) -> None:
        self.lock_delay.on_contact_detected(now)

    def on_contact_lost(self) -> None:
        self.lock_delay.on_contact_lost()

    def tick_lock_delay(self, value: Optional[float] = None) -> bool:
        """True once the resting piece has waited out the lock delay.

        `value` is the current time in time mode and the elapsed frame count
        in frame mode. The caller locks the piece and then calls
        `reset_lock_state`.
        """
        return self.lock_delay.tick(value)

    def reset_lock_state(self) -> None:
        self.lock_delay.reset()
