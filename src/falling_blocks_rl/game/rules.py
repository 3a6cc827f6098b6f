from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass
class ScoringRules:
    line_clear_scores: tuple[int, int, int, int] = (100, 300, 500, 4000)
    first_level_threshold: int = 5000
    level_growth: float = 1.2
    base_interval_ms: float = 1000.0
    interval_decay: float = 0.6
    max_speed_level: int = 14

    def score_for_lines(self, lines: int) -> int:
        if lines <= 0:
            return 0
        return self.line_clear_scores[min(lines, 4) - 1]

    def score_for_next_level(self, level: int) -> int:
        """Cumulative score needed to leave `level`."""
        if level <= 1:
            return self.first_level_threshold
        return math.floor(self.first_level_threshold * self.level_growth ** (level - 2))

    def next_level(self, level: int, score: int) -> int:
        # One step per call even if the score jumped past several thresholds
        if score >= self.score_for_next_level(level):
            return level + 1
        return level

    def gravity_interval_ms(self, level: int) -> float:
        steps = min(max(level, 1) - 1, self.max_speed_level - 1)
        return self.base_interval_ms * self.interval_decay ** steps
