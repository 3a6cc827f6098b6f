from __future__ import annotations

import os

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from falling_blocks_rl.game import FallingBlocksGame, GameConfig, Piece, TetrominoType


@pytest.fixture
def game() -> FallingBlocksGame:
    g = FallingBlocksGame(GameConfig(random_seed=1234))
    g.start()
    return g


def set_active(game: FallingBlocksGame, kind: TetrominoType, x: int, y: int = 0, vertical: bool = False) -> Piece:
    piece = Piece.spawn(kind)
    if vertical:
        piece = piece.rotated_right()
    game.current_piece = piece
    game.current_x = x
    game.current_y = y
    return piece


def fill_row(game: FallingBlocksGame, y: int, gaps=(), value: int = 1) -> None:
    game.grid.grid[y, :] = value
    for x in gaps:
        game.grid.grid[y, x] = 0
