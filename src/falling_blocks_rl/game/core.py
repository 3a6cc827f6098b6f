from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Callable, Deque, Dict, List, Optional, Tuple

import numpy as np

from .bag import BagRandomizer
from .grid import GameGrid
from .pieces import Piece
from .rules import ScoringRules


logger = logging.getLogger(__name__)

MIN_NEXT_PIECES = 1
MAX_NEXT_PIECES = 5

DEFAULT_KEY_BINDINGS: Dict[str, str] = {
    "move_left": "left",
    "move_right": "right",
    "soft_drop": "down",
    "hard_drop": "up",
    "rotate_left": "a",
    "rotate_right": "f",
    "hold": "space",
    "toggle_pause": "p",
}


class Command(IntEnum):
    MOVE_LEFT = 0
    MOVE_RIGHT = 1
    SOFT_DROP = 2
    HARD_DROP = 3
    ROTATE_LEFT = 4
    ROTATE_RIGHT = 5
    HOLD = 6
    TOGGLE_PAUSE = 7
    NONE = 8


class SessionState(Enum):
    TITLE = "title"
    PLAYING = "playing"
    PAUSED = "paused"
    GAME_OVER = "game_over"
    SETTINGS = "settings"


def clamp_next_pieces(count: int) -> int:
    return max(MIN_NEXT_PIECES, min(MAX_NEXT_PIECES, int(count)))


@dataclass
class GameConfig:
    width: int = 10
    height: int = 20
    next_pieces_count: int = 5
    # Read by input adapters only; the engine never interprets key names
    key_bindings: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_KEY_BINDINGS))
    random_seed: Optional[int] = None
    spawn_y: int = 0

    def __post_init__(self) -> None:
        clamped = clamp_next_pieces(self.next_pieces_count)
        if clamped != self.next_pieces_count:
            logger.warning(
                "next_pieces_count=%s out of range, using %d", self.next_pieces_count, clamped
            )
            self.next_pieces_count = clamped


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only view of a session handed to renderers and agents."""

    grid: np.ndarray
    current_piece: Optional[Piece]
    position: Tuple[int, int]
    ghost_y: Optional[int]
    held_piece: Optional[Piece]
    queue: Tuple[Piece, ...]
    score: int
    level: int
    lines_cleared_total: int
    pieces_placed: int
    state: SessionState

    @property
    def paused(self) -> bool:
        return self.state is SessionState.PAUSED


Listener = Callable[["FallingBlocksGame"], None]


class FallingBlocksGame:
    def __init__(self, config: Optional[GameConfig] = None, rules: Optional[ScoringRules] = None) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.rng = random.Random(self.config.random_seed)
        self.bag = BagRandomizer(self.rng)
        self.grid = GameGrid(self.config.width, self.config.height)
        self.state = SessionState.TITLE
        self.generation = 0
        self.score = 0
        self.level = 1
        self.lines_cleared_total = 0
        self.pieces_placed = 0
        self.current_piece: Optional[Piece] = None
        self.current_x = 0
        self.current_y = 0
        self.held_piece: Optional[Piece] = None
        self.queue: Deque[Piece] = deque()
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Observers

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ------------------------------------------------------------------
    # Session state machine

    @property
    def game_over(self) -> bool:
        return self.state is SessionState.GAME_OVER

    @property
    def paused(self) -> bool:
        return self.state is SessionState.PAUSED

    def _set_state(self, state: SessionState) -> None:
        logger.debug("session %s -> %s", self.state.value, state.value)
        self.state = state

    def reset(self) -> None:
        """Reinitialize all per-game state without changing the session state."""
        self.grid = GameGrid(self.config.width, self.config.height)
        self.bag.reset()
        self.score = 0
        self.level = 1
        self.lines_cleared_total = 0
        self.pieces_placed = 0
        self.held_piece = None
        self.current_piece = self.bag.next_piece()
        self.queue = deque(self.bag.next_piece() for _ in range(self.config.next_pieces_count))
        self.current_x, self.current_y = self.spawn_position(self.current_piece)

    def start(self) -> bool:
        """Start a new game from the title screen, or retry from pause/game over."""
        if self.state not in (SessionState.TITLE, SessionState.PAUSED, SessionState.GAME_OVER):
            return False
        self.reset()
        self.generation += 1
        self._set_state(SessionState.PLAYING)
        logger.info("game %d started (next_pieces=%d)", self.generation, self.config.next_pieces_count)
        self._notify()
        return True

    def toggle_pause(self) -> bool:
        if self.state is SessionState.PLAYING:
            self._set_state(SessionState.PAUSED)
        elif self.state is SessionState.PAUSED:
            self._set_state(SessionState.PLAYING)
        else:
            return False
        self._notify()
        return True

    def back_to_title(self) -> bool:
        if self.state not in (SessionState.PAUSED, SessionState.GAME_OVER):
            return False
        self._set_state(SessionState.TITLE)
        self._notify()
        return True

    def open_settings(self) -> bool:
        if self.state is not SessionState.TITLE:
            return False
        self._set_state(SessionState.SETTINGS)
        self._notify()
        return True

    def close_settings(self) -> bool:
        if self.state is not SessionState.SETTINGS:
            return False
        self._set_state(SessionState.TITLE)
        self._notify()
        return True

    def set_next_pieces_count(self, count: int) -> bool:
        """Change the lookahead size; only allowed from the settings screen."""
        if self.state is not SessionState.SETTINGS:
            return False
        self.config.next_pieces_count = clamp_next_pieces(count)
        self._notify()
        return True

    # ------------------------------------------------------------------
    # Active piece controller

    def spawn_position(self, piece: Piece) -> Tuple[int, int]:
        return (self.grid.width - piece.width) // 2, self.config.spawn_y

    def _can_act(self) -> bool:
        return self.state is SessionState.PLAYING and self.current_piece is not None

    def _shift(self, dx: int, dy: int) -> bool:
        if not self._can_act():
            return False
        new_x = self.current_x + dx
        new_y = self.current_y + dy
        if self.grid.collides(self.current_piece, new_x, new_y):
            return False
        self.current_x = new_x
        self.current_y = new_y
        self._notify()
        return True

    def _rotate(self, rotated: Callable[[Piece], Piece]) -> bool:
        if not self._can_act():
            return False
        candidate = rotated(self.current_piece)
        # Blocked rotations are rejected outright; there is no kick search
        if self.grid.collides(candidate, self.current_x, self.current_y):
            return False
        self.current_piece = candidate
        self._notify()
        return True

    def move_left(self) -> bool:
        return self._shift(-1, 0)

    def move_right(self) -> bool:
        return self._shift(1, 0)

    def rotate_left(self) -> bool:
        return self._rotate(Piece.rotated_left)

    def rotate_right(self) -> bool:
        return self._rotate(Piece.rotated_right)

    def soft_drop(self) -> bool:
        if not self._can_act():
            return False
        if self._shift(0, 1):
            return True
        self._lock_and_spawn(self.current_x, self.current_y)
        return True

    def hard_drop(self) -> bool:
        if not self._can_act():
            return False
        self._lock_and_spawn(self.current_x, self.ghost_y())
        return True

    def hold(self) -> bool:
        if not self._can_act():
            return False
        if self.held_piece is None:
            self.held_piece = self.current_piece
            self.current_piece = self._advance_queue()
        else:
            self.current_piece, self.held_piece = self.held_piece, self.current_piece
        self.current_x, self.current_y = self.spawn_position(self.current_piece)
        self._notify()
        return True

    def ghost_y(self) -> int:
        assert self.current_piece is not None
        y = self.current_y
        while not self.grid.collides(self.current_piece, self.current_x, y + 1):
            y += 1
        return y

    def _advance_queue(self) -> Piece:
        piece = self.queue.popleft()
        self.queue.append(self.bag.next_piece())
        return piece

    # ------------------------------------------------------------------
    # Lock, line clear and scoring

    def _lock_and_spawn(self, x: int, y: int) -> int:
        assert self.current_piece is not None
        self.grid.lock(self.current_piece, x, y)
        self.pieces_placed += 1
        logger.debug("locked %s at (%d, %d)", self.current_piece.kind.name, x, y)

        next_piece = self._advance_queue()
        spawn_x, spawn_y = self.spawn_position(next_piece)
        self.current_piece = next_piece
        self.current_x, self.current_y = spawn_x, spawn_y
        if self.grid.collides(next_piece, spawn_x, spawn_y):
            self._set_state(SessionState.GAME_OVER)
            logger.info("game over: score=%d level=%d", self.score, self.level)
            self._notify()
            return 0

        lines = self.grid.clear_completed_rows()
        if lines:
            self.lines_cleared_total += lines
            self.score += self.rules.score_for_lines(lines)
            new_level = self.rules.next_level(self.level, self.score)
            if new_level != self.level:
                logger.debug("level %d -> %d at score %d", self.level, new_level, self.score)
                self.level = new_level
        self._notify()
        return lines

    # ------------------------------------------------------------------
    # Command dispatch and views

    def tick(self) -> bool:
        """Apply one gravity step."""
        return self.soft_drop()

    def dispatch(self, command: Command) -> bool:
        try:
            command = Command(command)
        except ValueError:
            raise ValueError(f"Unknown command: {command!r}") from None
        handler = {
            Command.MOVE_LEFT: self.move_left,
            Command.MOVE_RIGHT: self.move_right,
            Command.SOFT_DROP: self.soft_drop,
            Command.HARD_DROP: self.hard_drop,
            Command.ROTATE_LEFT: self.rotate_left,
            Command.ROTATE_RIGHT: self.rotate_right,
            Command.HOLD: self.hold,
            Command.TOGGLE_PAUSE: self.toggle_pause,
        }.get(command)
        if handler is None:
            return False
        return handler()

    def snapshot(self) -> GameSnapshot:
        active = self.current_piece is not None and self.state in (
            SessionState.PLAYING,
            SessionState.PAUSED,
        )
        return GameSnapshot(
            grid=self.grid.clone_state(),
            current_piece=self.current_piece,
            position=(self.current_x, self.current_y),
            ghost_y=self.ghost_y() if active else None,
            held_piece=self.held_piece,
            queue=tuple(self.queue),
            score=self.score,
            level=self.level,
            lines_cleared_total=self.lines_cleared_total,
            pieces_placed=self.pieces_placed,
            state=self.state,
        )

    def get_state(self) -> np.ndarray:
        # Overlay current piece on a copy of the grid for observation
        state = self.grid.clone_state()
        if self.current_piece is not None and self.state is SessionState.PLAYING:
            for x, y in self.current_piece.cells_at(self.current_x, self.current_y):
                if 0 <= y < self.grid.height and 0 <= x < self.grid.width:
                    # Use negative to indicate falling piece overlay
                    state[y, x] = -self.current_piece.color
        return state

    def get_game_stats(self) -> dict:
        return {
            "final_score": self.score,
            "level": self.level,
            "pieces_placed": self.pieces_placed,
            "lines_cleared": self.lines_cleared_total,
            "avg_score_per_piece": self.score / max(1, self.pieces_placed),
            "avg_lines_per_piece": self.lines_cleared_total / max(1, self.pieces_placed),
        }
