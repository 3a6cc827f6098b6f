from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from .core import FallingBlocksGame, SessionState


logger = logging.getLogger(__name__)


@dataclass
class TickHandle:
    due_ms: float
    callback: Callable[[], None] = field(repr=False)
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class TickScheduler:
    """Cooperative timer queue driven by an external clock.

    Nothing runs on its own: the embedding loop calls `advance` with the time
    that has passed and due callbacks fire synchronously, earliest first.
    """

    def __init__(self) -> None:
        self.now_ms = 0.0
        self._heap: List[Tuple[float, int, TickHandle]] = []
        self._counter = itertools.count()

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> TickHandle:
        handle = TickHandle(self.now_ms + float(delay_ms), callback)
        heapq.heappush(self._heap, (handle.due_ms, next(self._counter), handle))
        return handle

    def pending(self) -> int:
        return sum(1 for _, _, h in self._heap if not h.cancelled)

    def advance(self, elapsed_ms: float) -> int:
        """Move the clock forward and run every callback that became due."""
        target = self.now_ms + float(elapsed_ms)
        fired = 0
        while self._heap and self._heap[0][0] <= target:
            due, _, handle = heapq.heappop(self._heap)
            if handle.cancelled:
                continue
            self.now_ms = due
            handle.callback()
            fired += 1
        self.now_ms = target
        return fired


class GameLoop:
    """Schedules gravity ticks for a game at the interval of its current level.

    At most one tick is pending at a time. It is cancelled whenever the game
    leaves PLAYING, changes level, or restarts, and a fresh full interval is
    scheduled when play (re)starts.
    """

    def __init__(self, game: FallingBlocksGame, scheduler: Optional[TickScheduler] = None) -> None:
        self.game = game
        self.scheduler = scheduler or TickScheduler()
        self.ticks_applied = 0
        self._pending: Optional[TickHandle] = None
        self._seen = self._key()
        self._unsubscribe = game.subscribe(self._on_change)
        if game.state is SessionState.PLAYING:
            self._schedule()

    def _key(self) -> Tuple[SessionState, int, int]:
        return self.game.state, self.game.level, self.game.generation

    @property
    def interval_ms(self) -> float:
        return self.game.rules.gravity_interval_ms(self.game.level)

    @property
    def has_pending_tick(self) -> bool:
        return self._pending is not None and not self._pending.cancelled

    def _cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _schedule(self) -> None:
        self._cancel()
        self._pending = self.scheduler.schedule(self.interval_ms, self._fire)

    def _on_change(self, game: FallingBlocksGame) -> None:
        key = self._key()
        if key == self._seen:
            return
        self._seen = key
        if game.state is SessionState.PLAYING:
            logger.debug("gravity every %.1f ms at level %d", self.interval_ms, game.level)
            self._schedule()
        else:
            self._cancel()

    def _fire(self) -> None:
        self._pending = None
        if self.game.state is not SessionState.PLAYING:
            return
        self.game.tick()
        self.ticks_applied += 1
        # A level change during the tick already rescheduled through _on_change
        if self._pending is None and self.game.state is SessionState.PLAYING:
            self._schedule()

    def advance(self, elapsed_ms: float) -> int:
        return self.scheduler.advance(elapsed_ms)

    def close(self) -> None:
        self._cancel()
        self._unsubscribe()
