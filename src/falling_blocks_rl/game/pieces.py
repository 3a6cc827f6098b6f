from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Tuple

import numpy as np


class TetrominoType(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7


Shape = np.ndarray


BASE_SHAPES: Dict[TetrominoType, Shape] = {
    TetrominoType.I: np.array([[1, 1, 1, 1]], dtype=np.bool_),
    TetrominoType.O: np.array([[1, 1], [1, 1]], dtype=np.bool_),
    TetrominoType.T: np.array([[0, 1, 0], [1, 1, 1]], dtype=np.bool_),
    TetrominoType.S: np.array([[0, 1, 1], [1, 1, 0]], dtype=np.bool_),
    TetrominoType.Z: np.array([[1, 1, 0], [0, 1, 1]], dtype=np.bool_),
    TetrominoType.J: np.array([[1, 0, 0], [1, 1, 1]], dtype=np.bool_),
    TetrominoType.L: np.array([[0, 0, 1], [1, 1, 1]], dtype=np.bool_),
}

COLOR_NAMES: Dict[TetrominoType, str] = {
    TetrominoType.I: "cyan",
    TetrominoType.O: "yellow",
    TetrominoType.T: "purple",
    TetrominoType.S: "green",
    TetrominoType.Z: "red",
    TetrominoType.J: "blue",
    TetrominoType.L: "orange",
}

COLORS: Dict[TetrominoType, Tuple[int, int, int]] = {
    TetrominoType.I: (0, 240, 240),
    TetrominoType.O: (240, 240, 0),
    TetrominoType.T: (160, 0, 240),
    TetrominoType.S: (0, 240, 0),
    TetrominoType.Z: (240, 0, 0),
    TetrominoType.J: (0, 0, 240),
    TetrominoType.L: (240, 160, 0),
}


def _frozen(shape: Shape) -> Shape:
    out = np.array(shape, dtype=np.bool_)
    out.setflags(write=False)
    return out


@dataclass(frozen=True, eq=False)
class Piece:
    """A tetromino shape in one orientation.

    Rotations return new pieces; the four orientations are derived on demand
    from the spawn shape rather than looked up from a table.
    """

    kind: TetrominoType
    shape: Shape

    def __post_init__(self) -> None:
        object.__setattr__(self, "shape", _frozen(self.shape))

    @classmethod
    def spawn(cls, kind: TetrominoType) -> "Piece":
        return cls(kind, BASE_SHAPES[kind])

    @property
    def color(self) -> int:
        """Cell value written into the grid when this piece locks."""
        return int(self.kind)

    @property
    def height(self) -> int:
        return int(self.shape.shape[0])

    @property
    def width(self) -> int:
        return int(self.shape.shape[1])

    def rotated_left(self) -> "Piece":
        # counter-clockwise: new[i][j] = old[j][w - 1 - i]
        return Piece(self.kind, np.rot90(self.shape, 1))

    def rotated_right(self) -> "Piece":
        # clockwise: new[i][j] = old[h - 1 - j][i]
        return Piece(self.kind, np.rot90(self.shape, -1))

    def cells_at(self, origin_x: int, origin_y: int) -> List[Tuple[int, int]]:
        cells: List[Tuple[int, int]] = []
        for dy, dx in zip(*np.nonzero(self.shape)):
            cells.append((origin_x + int(dx), origin_y + int(dy)))
        return cells

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Piece):
            return NotImplemented
        return self.kind == other.kind and np.array_equal(self.shape, other.shape)

    def __hash__(self) -> int:
        return hash((self.kind, self.shape.shape, self.shape.tobytes()))

    def __repr__(self) -> str:
        rows = ["".join("#" if v else "." for v in row) for row in self.shape]
        return f"Piece({self.kind.name}, {'/'.join(rows)})"
