"""Benchmark reconstruction quality and runtime across grid sizes."""

from __future__ import annotations

import argparse
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List

import sys
import numpy as np

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from descramble.evaluator import PuzzleEvaluator
from descramble.solver import Descrambler, SolverConfig
from descramble.utils import generate_natural_like_image, scramble_image, set_random_seed


@dataclass
class BenchmarkRow:
    grid: str
    seeds: int
    pos_acc_mean: float
    pos_acc_min: float
    nbr_acc_mean: float
    nbr_acc_min: float
    total_cost_mean: float
    runtime_mean_sec: float


@dataclass
class CaseResult:
    position_accuracy: float
    neighbor_accuracy: float
    total_cost: float
    runtime_sec: float


def run_case(grid_size: int, side: int, seed: int, workers: int) -> CaseResult:
    image = generate_natural_like_image(size=grid_size * side, seed=seed)
    scrambled, order = scramble_image(image, side, set_random_seed(seed))
    descrambler = Descrambler(scrambled, SolverConfig(side=side, workers=workers))

    t0 = time.perf_counter()
    result = descrambler.solve()
    runtime_sec = time.perf_counter() - t0

    metrics = PuzzleEvaluator().evaluate(result.grid, order, descrambler.matcher)
    return CaseResult(
        position_accuracy=metrics.position_accuracy,
        neighbor_accuracy=metrics.neighbor_accuracy,
        total_cost=metrics.total_cost,
        runtime_sec=runtime_sec,
    )


def run_case_multi_seed(grid_size: int, side: int, seeds: List[int], workers: int) -> BenchmarkRow:
    cases = [run_case(grid_size, side, seed=seed, workers=workers) for seed in seeds]
    pos = np.array([c.position_accuracy for c in cases], dtype=np.float64)
    nbr = np.array([c.neighbor_accuracy for c in cases], dtype=np.float64)
    cst = np.array([c.total_cost for c in cases], dtype=np.float64)
    rt = np.array([c.runtime_sec for c in cases], dtype=np.float64)
    return BenchmarkRow(
        grid=f"{grid_size}x{grid_size}",
        seeds=len(seeds),
        pos_acc_mean=float(np.mean(pos)),
        pos_acc_min=float(np.min(pos)),
        nbr_acc_mean=float(np.mean(nbr)),
        nbr_acc_min=float(np.min(nbr)),
        total_cost_mean=float(np.mean(cst)),
        runtime_mean_sec=float(np.mean(rt)),
    )


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run descrambling benchmark on multiple grid sizes.")
    parser.add_argument(
        "--sizes",
        type=int,
        nargs="+",
        default=[2, 4, 6, 8],
        help="Grid sizes to benchmark (default: 2 4 6 8)",
    )
    parser.add_argument("--side", type=int, default=60, help="Tile side in pixels")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument(
        "--num-seeds",
        type=int,
        default=1,
        help="Number of seeds to evaluate per grid (default: 1)",
    )
    parser.add_argument("--workers", type=int, default=1, help="Worker threads")
    return parser.parse_args()


def print_table(rows: List[BenchmarkRow]) -> None:
    header = (
        f"{'Grid':<8}{'Seeds':>7}{'PosMean':>10}{'PosMin':>10}"
        f"{'NbrMean':>10}{'NbrMin':>10}{'CostMean':>12}{'RtMean(s)':>11}"
    )
    print(header)
    print("-" * len(header))
    for row in rows:
        print(
            f"{row.grid:<8}"
            f"{row.seeds:>7d}"
            f"{row.pos_acc_mean:>10.4f}"
            f"{row.pos_acc_min:>10.4f}"
            f"{row.nbr_acc_mean:>10.4f}"
            f"{row.nbr_acc_min:>10.4f}"
            f"{row.total_cost_mean:>12.2f}"
            f"{row.runtime_mean_sec:>11.4f}"
        )


def main() -> None:
    args = parse_args()
    seeds = [args.seed + i for i in range(args.num_seeds)]
    rows = [
        run_case_multi_seed(size, args.side, seeds=seeds, workers=args.workers)
        for size in args.sizes
    ]
    print_table(rows)


if __name__ == "__main__":
    main()
