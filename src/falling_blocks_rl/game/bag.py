from __future__ import annotations

import random
from typing import List, Optional

from .pieces import Piece, TetrominoType


class BagRandomizer:
    """7-bag piece generator.

    Each bag is an independent shuffle of all seven kinds, so every kind is
    dealt exactly once before any kind repeats.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()
        self._bag: List[TetrominoType] = []

    def _refill(self) -> None:
        kinds = list(TetrominoType)
        self.rng.shuffle(kinds)
        self._bag = kinds

    def next_piece(self) -> Piece:
        if not self._bag:
            self._refill()
        return Piece.spawn(self._bag.pop(0))

    def peek_remaining(self) -> int:
        return len(self._bag)

    def reset(self) -> None:
        self._bag = []
