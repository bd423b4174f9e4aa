from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScoringRules:
    line_clear_scores: tuple[int, ...] = (100, 300, 500, 800)

    def score_for_lines(self, lines: int) -> int:
        if lines <= 0:
            return 0
        if lines <= len(self.line_clear_scores):
            return self.line_clear_scores[lines - 1]
        return 0
