from __future__ import annotations

from enum import IntEnum
from typing import Dict, List, Optional, Tuple

import numpy as np


class TetrominoType(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7

    @classmethod
    def from_index(cls, index: int) -> "TetrominoType":
        """Map a 0-based generator index onto a piece type (I, O, T, S, Z, J, L)."""
        return cls(index + 1)


class RotationDirection(IntEnum):
    CW = 1
    CCW = -1


Shape = np.ndarray
Coordinate = Tuple[int, int]

# Spawn origin of a piece's matrix on the playfield
SPAWN_X = 4
SPAWN_Y = 0


def _rot90(shape: Shape, k: int) -> Shape:
    k = k % 4
    if k == 0:
        return shape
    return np.rot90(shape, k, axes=(1, 0))  # rotate clockwise when k>0


BASE_SHAPES = {
    TetrominoType.I: np.array([[0, 0, 0, 0], [1, 1, 1, 1], [0, 0, 0, 0], [0, 0, 0, 0]], dtype=np.int8),
    TetrominoType.O: np.array([[1, 1], [1, 1]], dtype=np.int8),
    TetrominoType.T: np.array([[0, 1, 0], [1, 1, 1], [0, 0, 0]], dtype=np.int8),
    TetrominoType.S: np.array([[0, 1, 1], [1, 1, 0], [0, 0, 0]], dtype=np.int8),
    TetrominoType.Z: np.array([[1, 1, 0], [0, 1, 1], [0, 0, 0]], dtype=np.int8),
    TetrominoType.J: np.array([[1, 0, 0], [1, 1, 1], [0, 0, 0]], dtype=np.int8),
    TetrominoType.L: np.array([[0, 0, 1], [1, 1, 1], [0, 0, 0]], dtype=np.int8),
}


def _build_shape_table() -> Dict[Tuple[TetrominoType, int], Shape]:
    table: Dict[Tuple[TetrominoType, int], Shape] = {}
    for kind, base in BASE_SHAPES.items():
        for rotation in range(4):
            shape = np.ascontiguousarray(_rot90(base, rotation))
            shape.setflags(write=False)
            table[(kind, rotation)] = shape
    return table


# (kind, rotation) -> occupancy matrix. Static game data, never mutated.
SHAPE_TABLE = _build_shape_table()


class Piece:
    """The piece under player control.

    Holds a kind, the playfield position of its matrix origin and a rotation
    state. Moves are unconditional; whether a placement is legal is answered
    by the grid. Only the most recent rotation can be undone.
    """

    def __init__(self, kind: TetrominoType, x: int = SPAWN_X, y: int = SPAWN_Y, rotation: int = 0) -> None:
        self._kind = TetrominoType(kind)
        self.x = int(x)
        self.y = int(y)
        self.rotation = int(rotation) % 4
        self.last_rotation: Optional[RotationDirection] = None

    @classmethod
    def spawn(cls, kind: TetrominoType) -> "Piece":
        return cls(kind, SPAWN_X, SPAWN_Y)

    @property
    def kind(self) -> TetrominoType:
        return self._kind

    @property
    def fill_value(self) -> int:
        return int(self._kind)

    def translate(self, dx: int, dy: int) -> None:
        self.x += dx
        self.y += dy

    def rotate_cw(self) -> None:
        self._rotate(RotationDirection.CW)

    def rotate_ccw(self) -> None:
        self._rotate(RotationDirection.CCW)

    def rotate(self, direction: RotationDirection) -> None:
        self._rotate(RotationDirection(direction))

    def _rotate(self, direction: RotationDirection) -> None:
        self.rotation = (self.rotation + int(direction)) % 4
        self.last_rotation = direction

    def undo_rotation(self) -> None:
        """Revert the last rotation. A second call in a row does nothing."""
        if self.last_rotation is not None:
            self.rotation = (self.rotation - int(self.last_rotation)) % 4
        self.last_rotation = None

    def shape(self) -> Shape:
        return SHAPE_TABLE[(self._kind, self.rotation)]

    def cells(self, dx: int = 0, dy: int = 0) -> List[Coordinate]:
        """Absolute (x, y) cells covered by the piece, optionally offset."""
        s = self.shape()
        h, w = s.shape
        origin_x = self.x + dx
        origin_y = self.y + dy
        cells: List[Coordinate] = []
        for row in range(h):
            for col in range(w):
                if s[row, col]:
                    cells.append((origin_x + col, origin_y + row))
        return cells

    def __repr__(self) -> str:
        return f"Piece({self._kind.name}, x={self.x}, y={self.y}, rotation={self.rotation})"
