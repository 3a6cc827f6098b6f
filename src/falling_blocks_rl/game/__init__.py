"""Game module for Falling Blocks RL.

Exports the core game engine and supporting classes:
- GameGrid: Playfield collision, locking and row clearing
- Piece: Tetromino shape with on-demand rotation
- TetrominoType: Enum of available piece types
- BagRandomizer: 7-bag piece generator
- ScoringRules: Line bonuses, level thresholds and gravity speed
- FallingBlocksGame: Active piece controller and session state machine
- GameLoop / TickScheduler: Gravity tick scheduling
"""

from .grid import GameGrid
from .pieces import COLORS, COLOR_NAMES, Piece, TetrominoType
from .bag import BagRandomizer
from .rules import ScoringRules
from .core import (
    Command,
    FallingBlocksGame,
    GameConfig,
    GameSnapshot,
    SessionState,
)
from .loop import GameLoop, TickHandle, TickScheduler

__all__ = [
    "GameGrid",
    "COLORS",
    "COLOR_NAMES",
    "Piece",
    "TetrominoType",
    "BagRandomizer",
    "ScoringRules",
    "Command",
    "FallingBlocksGame",
    "GameConfig",
    "GameSnapshot",
    "SessionState",
    "GameLoop",
    "TickHandle",
    "TickScheduler",
]
