"""Demo script: scramble an image, reconstruct it, and show both."""

from __future__ import annotations

import argparse
import logging
import time

import matplotlib.pyplot as plt

from descramble.evaluator import PuzzleEvaluator
from descramble.solver import Descrambler, SolverConfig
from descramble.utils import (
    generate_natural_like_image,
    load_image,
    scramble_image,
    set_random_seed,
)


def run_demo(
    image_path: str | None = None,
    side: int = 60,
    grid_size: int = 4,
    seed: int = 42,
    show: bool = True,
) -> None:
    """Run full pipeline and display original/scrambled/reconstructed images."""
    if image_path:
        image = load_image(image_path)
    else:
        image = generate_natural_like_image(size=side * grid_size, seed=seed)

    scrambled, order = scramble_image(image, side, set_random_seed(seed))
    descrambler = Descrambler(scrambled, SolverConfig(side=side))

    start = time.perf_counter()
    result = descrambler.solve()
    duration = time.perf_counter() - start

    metrics = PuzzleEvaluator().evaluate(result.grid, order, descrambler.matcher)
    reconstructed = result.compose(scrambled)

    print(f"Grid: {descrambler.grid.horizontal}x{descrambler.grid.vertical}")
    print(f"Position accuracy: {metrics.position_accuracy:.4f}")
    print(f"Neighbor accuracy: {metrics.neighbor_accuracy:.4f}")
    print(f"Total seam cost: {metrics.total_cost:.2f}")
    print(f"Solve time: {duration:.4f}s")

    if not show:
        return
    fig, axes = plt.subplots(1, 3, figsize=(15, 5))
    axes[0].imshow(image)
    axes[0].set_title("Original")
    axes[1].imshow(scrambled)
    axes[1].set_title("Scrambled")
    axes[2].imshow(reconstructed)
    axes[2].set_title("Reconstructed")
    for ax in axes:
        ax.axis("off")
    plt.tight_layout()
    plt.show()


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Tile descrambling demo")
    parser.add_argument("--image", type=str, default=None, help="Optional input image path")
    parser.add_argument("--side", type=int, default=60, help="Tile side in pixels, default=60")
    parser.add_argument(
        "--grid-size", type=int, default=4, help="Tiles per side of generated image, default=4"
    )
    parser.add_argument("--seed", type=int, default=42, help="Scramble seed, default=42")
    parser.add_argument("--no-show", action="store_true", help="Print metrics only")
    return parser.parse_args()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    args = parse_args()
    run_demo(
        image_path=args.image,
        side=args.side,
        grid_size=args.grid_size,
        seed=args.seed,
        show=not args.no_show,
    )
