"""Reconstruct a tile-scrambled image and write `<name>-descrambled.<ext>`."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Tuple

from descramble.errors import DescrambleError
from descramble.solver import Descrambler, SolverConfig
from descramble.utils import (
    compose_strips_image,
    descrambled_output_path,
    load_image,
    save_image,
)

logger = logging.getLogger("reconstruct")


def parse_size(value: str) -> Tuple[int, int]:
    """Parse size value in format WIDTHxHEIGHT, e.g. 240x240."""
    text = value.strip().lower()
    if "x" not in text:
        raise argparse.ArgumentTypeError("size must be in format WIDTHxHEIGHT, e.g. 240x240")
    width_text, height_text = text.split("x", maxsplit=1)
    try:
        width = int(width_text)
        height = int(height_text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("size width/height must be integers") from exc
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError("size width/height must be positive")
    return width, height


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(description="Reconstruct a tile-scrambled image.")
    parser.add_argument("image", help="Path to scrambled input image")
    parser.add_argument("--side", type=int, default=60, help="Tile side in pixels (default: 60)")
    parser.add_argument(
        "--expect",
        type=parse_size,
        default=None,
        help="Reject images whose size is not exactly WIDTHxHEIGHT",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Output path (default: <name>-descrambled.<ext> next to the input)",
    )
    parser.add_argument(
        "--workers", type=int, default=1, help="Worker threads for candidate search (default: 1)"
    )
    parser.add_argument(
        "--dump-strips",
        default=None,
        help="Optional path for an image of every candidate strip",
    )
    parser.add_argument(
        "--no-show",
        action="store_true",
        help="Do not display scrambled and reconstructed images",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every candidate")
    return parser


def main(argv=None) -> int:
    """Run reconstruction from scrambled image to descrambled output image."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    image_path = Path(args.image)
    output_path = Path(args.output) if args.output else descrambled_output_path(image_path)

    logger.info("opening %s", image_path)
    try:
        image = load_image(image_path)
        descrambler = Descrambler(
            image,
            SolverConfig(side=args.side, workers=args.workers, expected_size=args.expect),
        )
    except (DescrambleError, ValueError) as exc:
        parser.error(str(exc))

    result = descrambler.solve()
    reconstructed = result.compose(image)

    if args.dump_strips:
        save_image(args.dump_strips, compose_strips_image(image, descrambler.grid, result.strips))
        logger.info("candidate strips written to %s", args.dump_strips)
    save_image(output_path, reconstructed)

    print(f"Input image: {image_path}")
    print(f"Grid: {descrambler.grid.horizontal}x{descrambler.grid.vertical} tiles of {args.side}px")
    print(f"Output image: {output_path.resolve()}")
    print(f"Seam cost: {result.cost:.2f}")
    print("Solved grid indices:")
    print(result.grid)

    if not args.no_show:
        import matplotlib.pyplot as plt

        fig, axes = plt.subplots(1, 2, figsize=(10, 5))
        axes[0].imshow(image)
        axes[0].set_title("Scrambled Input")
        axes[1].imshow(reconstructed)
        axes[1].set_title("Reconstructed")
        for ax in axes:
            ax.axis("off")
        plt.tight_layout()
        plt.show()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
