"""Accuracy and runtime smoke tests on multiple image types."""

from __future__ import annotations

import time

import numpy as np

from descramble.evaluator import PuzzleEvaluator
from descramble.solver import Descrambler, SolverConfig
from descramble.utils import (
    generate_gradient_image,
    generate_natural_like_image,
    generate_seam_continuous_image,
    scramble_image,
    set_random_seed,
)


def _evaluate_case(image_type: str, image: np.ndarray, side: int = 60):
    scrambled, order = scramble_image(image, side, set_random_seed(42))
    descrambler = Descrambler(scrambled, SolverConfig(side=side))

    t0 = time.perf_counter()
    result = descrambler.solve()
    elapsed = time.perf_counter() - t0

    metrics = PuzzleEvaluator().evaluate(result.grid, order, descrambler.matcher)
    print(
        f"{image_type}: accuracy={metrics.position_accuracy:.4f}, "
        f"neighbor_accuracy={metrics.neighbor_accuracy:.4f}, "
        f"runtime={elapsed:.4f}s, total_cost={metrics.total_cost:.2f}"
    )
    assert 0.0 <= metrics.position_accuracy <= 1.0
    assert 0.0 <= metrics.neighbor_accuracy <= 1.0
    assert metrics.total_cost >= 0.0
    return metrics


def test_gradient_image_metrics() -> None:
    """Report metrics for gradient image case."""
    _evaluate_case("gradient", generate_gradient_image(240, 240))


def test_natural_image_metrics() -> None:
    """Report metrics for natural-like image case."""
    _evaluate_case("natural", generate_natural_like_image(size=240, seed=42))


def test_seam_continuous_image_is_fully_recovered() -> None:
    """Exact seams give perfect accuracy and zero cost."""
    image = generate_seam_continuous_image(side=60, horizontal=4, vertical=4)
    metrics = _evaluate_case("continuous", image)
    assert metrics.position_accuracy == 1.0
    assert metrics.neighbor_accuracy == 1.0
    assert metrics.total_cost == 0.0


def test_evaluator_counts_partial_matches() -> None:
    """A swapped pair of columns keeps vertical neighbors but loses positions."""
    order = list(range(4))
    grid = np.array([[1, 0], [3, 2]])
    evaluator = PuzzleEvaluator()
    assert evaluator.compute_position_accuracy(grid, order) == 0.0
    assert evaluator.compute_neighbor_accuracy(grid, order) == 0.5
