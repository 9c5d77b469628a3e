"""Evaluation metrics for reconstruction quality."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from .matcher import EdgeMatcher


@dataclass
class EvaluationResult:
    """Container for reconstruction metrics."""

    position_accuracy: float
    neighbor_accuracy: float
    total_cost: float


class PuzzleEvaluator:
    """Score a solved grid against the scramble order that produced its input.

    `grid[r, c]` is a tile index in the scrambled image and `order[i]` is
    the original position of scrambled tile i.
    """

    def compute_position_accuracy(self, grid: np.ndarray, order: Sequence[int]) -> float:
        """Fraction of tiles restored to their original coordinates."""
        rows, cols = grid.shape
        total = rows * cols
        correct = 0
        for r in range(rows):
            for c in range(cols):
                if int(order[int(grid[r, c])]) == r * cols + c:
                    correct += 1
        return correct / total if total else 0.0

    def compute_neighbor_accuracy(self, grid: np.ndarray, order: Sequence[int]) -> float:
        """Fraction of right/down neighbors matching original adjacency."""
        rows, cols = grid.shape
        correct = 0
        total = 0
        for r in range(rows):
            for c in range(cols):
                cur_row, cur_col = divmod(int(order[int(grid[r, c])]), cols)
                if c + 1 < cols:
                    total += 1
                    if int(order[int(grid[r, c + 1])]) == cur_row * cols + cur_col + 1:
                        correct += 1
                if r + 1 < rows:
                    total += 1
                    if int(order[int(grid[r + 1, c])]) == (cur_row + 1) * cols + cur_col:
                        correct += 1
        return correct / total if total else 0.0

    def evaluate(
        self, grid: np.ndarray, order: Sequence[int], matcher: EdgeMatcher
    ) -> EvaluationResult:
        """Calculate all metrics for a reconstructed image."""
        return EvaluationResult(
            position_accuracy=self.compute_position_accuracy(grid, order),
            neighbor_accuracy=self.compute_neighbor_accuracy(grid, order),
            total_cost=matcher.total_grid_cost(grid),
        )
