"""
Lock delay state machine.

A piece is AIRBORNE until the caller reports contact with the stack or the
floor, then RESTING. While resting, ticks advance a timer basis and report
when the piece should lock. Losing contact throws the progress away, so a
piece that floats and lands again gets a full window.

Two timer bases exist and a game uses exactly one of them:
- TimedLockDelay: caller supplies timestamps (milliseconds)
- FrameLockDelay: caller supplies elapsed frame counts
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional


LOCK_DELAY_MS = 500
LOCK_DELAY_FRAMES = 30


class LockState(Enum):
    AIRBORNE = "airborne"
    RESTING = "resting"


class LockDelay(ABC):
    """Shared state handling; subclasses define the timer basis."""

    # Whether callers must pass timestamps to contact and tick calls
    needs_clock = False

    def __init__(self) -> None:
        self.state = LockState.AIRBORNE

    @property
    def is_resting(self) -> bool:
        return self.state is LockState.RESTING

    def on_contact_detected(self, now: Optional[float] = None) -> None:
        if self.state is LockState.RESTING:
            return
        self._start(now)
        self.state = LockState.RESTING

    def on_contact_lost(self) -> None:
        self.reset()

    def tick(self, value: Optional[float] = None) -> bool:
        if self.state is LockState.AIRBORNE:
            return False
        return self._advance(value)

    def reset(self) -> None:
        self.state = LockState.AIRBORNE
        self._clear()

    @abstractmethod
    def _start(self, now: Optional[float]) -> None:
        """Begin a rest window at `now`."""

    @abstractmethod
    def _advance(self, value: Optional[float]) -> bool:
        """Advance the timer basis; True once the threshold is reached."""

    @abstractmethod
    def _clear(self) -> None:
        """Drop the timer basis."""


class TimedLockDelay(LockDelay):
    needs_clock = True

    def __init__(self, threshold_ms: float = LOCK_DELAY_MS) -> None:
        if threshold_ms <= 0:
            raise ValueError(f"lock delay must be positive, got {threshold_ms}")
        self.threshold_ms = float(threshold_ms)
        self.rest_started: Optional[float] = None
        super().__init__()

    def _start(self, now: Optional[float]) -> None:
        if now is None:
            raise ValueError("timed lock delay needs the current time on contact")
        self.rest_started = float(now)

    def _advance(self, value: Optional[float]) -> bool:
        if value is None:
            raise ValueError("timed lock delay needs the current time on tick")
        assert self.rest_started is not None
        return float(value) - self.rest_started >= self.threshold_ms

    def _clear(self) -> None:
        self.rest_started = None


class FrameLockDelay(LockDelay):
    def __init__(self, threshold_frames: int = LOCK_DELAY_FRAMES) -> None:
        if threshold_frames <= 0:
            raise ValueError(f"lock delay must be positive, got {threshold_frames}")
        self.threshold_frames = int(threshold_frames)
        self.frames = 0
        super().__init__()

    def _start(self, now: Optional[float]) -> None:
        self.frames = 0

    def _advance(self, value: Optional[float]) -> bool:
        self.frames += 1 if value is None else int(value)
        return self.frames >= self.threshold_frames

    def _clear(self) -> None:
        self.frames = 0


def make_lock_delay(mode: str, threshold: float) -> LockDelay:
    if mode == "time":
        return TimedLockDelay(threshold)
    if mode == "frames":
        return FrameLockDelay(int(threshold))
    raise ValueError(f"unknown lock delay mode: {mode!r}")
