"""Scrambling, compositing, synthetic images and image file helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence, Tuple, Union

import cv2
import numpy as np

from .errors import PreconditionError
from .grid import TileGrid


def set_random_seed(seed: int = 42) -> np.random.Generator:
    """Create a deterministic numpy random generator."""
    return np.random.default_rng(seed)


def compose_image_from_mapping(
    image: np.ndarray, grid: TileGrid, mapping: Sequence[int]
) -> np.ndarray:
    """Fill destination tile i with source tile `mapping[i]`."""
    if len(mapping) != grid.total:
        raise PreconditionError(f"mapping has {len(mapping)} entries, expected {grid.total}")
    canvas = np.zeros_like(image)
    for dst, src in enumerate(mapping):
        d = grid.tile_rect(dst)
        s = grid.tile_rect(int(src))
        canvas[d.y : d.max_y, d.x : d.max_x, ...] = image[s.y : s.max_y, s.x : s.max_x, ...]
    return canvas


def compose_strips_image(image: np.ndarray, grid: TileGrid, strips) -> np.ndarray:
    """Stack every candidate strip as one row of a tall image."""
    side = grid.side
    shape = (len(strips) * side, grid.width) + image.shape[2:]
    canvas = np.zeros(shape, dtype=image.dtype)
    for row, strip in enumerate(strips):
        for col, tile in enumerate(strip.seq):
            s = grid.tile_rect(int(tile))
            y0 = row * side
            x0 = col * side
            canvas[y0 : y0 + side, x0 : x0 + side, ...] = image[s.y : s.max_y, s.x : s.max_x, ...]
    return canvas


def scramble_image(
    image: np.ndarray, side: int, rng: np.random.Generator
) -> Tuple[np.ndarray, np.ndarray]:
    """Shuffle the tiles of `image`.

    Returns the scrambled buffer and `order`, where scrambled tile i holds
    source tile `order[i]`.
    """
    grid = TileGrid.from_image(image, side)
    order = rng.permutation(grid.total)
    return compose_image_from_mapping(image, grid, order.tolist()), order


def generate_gradient_image(width: int = 240, height: int = 240) -> np.ndarray:
    """Generate a smooth RGB gradient image."""
    x = np.linspace(0, 255, width, dtype=np.float32)
    y = np.linspace(0, 255, height, dtype=np.float32)
    xv, yv = np.meshgrid(x, y)
    img = np.stack([xv, yv, 0.5 * (xv + yv)], axis=2)
    return np.clip(img, 0, 255).astype(np.uint8)


def generate_natural_like_image(size: int = 240, seed: int = 42) -> np.ndarray:
    """Generate a deterministic texture-rich image resembling a natural scene."""
    rng = set_random_seed(seed)
    base = rng.integers(0, 256, size=(size, size, 3), dtype=np.uint8)
    smooth = cv2.GaussianBlur(base, (0, 0), sigmaX=6, sigmaY=6)
    detail = cv2.Canny(smooth, 60, 120)
    detail_rgb = cv2.cvtColor(detail, cv2.COLOR_GRAY2BGR)
    return cv2.addWeighted(smooth, 0.85, detail_rgb, 0.15, 0)


def generate_seam_continuous_image(side: int, horizontal: int, vertical: int) -> np.ndarray:
    """Generate an RGBA image whose touching tile borders are pixel-identical.

    Every correct seam costs exactly zero and every other pairing costs more.
    """
    width = side * horizontal
    height = side * vertical
    xs = np.arange(width)
    ys = np.arange(height)
    # Collapse each seam's two boundary columns/rows onto one coordinate.
    u = xs - xs // side
    v = ys - ys // side
    uu, vv = np.meshgrid(u, v)
    dtype = np.uint8 if max(width, height) <= 256 else np.uint16
    img = np.stack([uu, vv, (uu + vv) // 2, np.full_like(uu, np.iinfo(dtype).max)], axis=2)
    return img.astype(dtype)


def load_image(path: Union[str, Path]) -> np.ndarray:
    """Load an image as an RGB (or RGBA) array at native bit depth."""
    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise ValueError(f"failed to load image from path: {path}")
    if image.ndim == 3 and image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    if image.ndim == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    return image


def save_image(path: Union[str, Path], image: np.ndarray) -> None:
    """Save an RGB (or RGBA) image to disk."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if image.ndim == 3 and image.shape[2] == 4:
        out = cv2.cvtColor(image, cv2.COLOR_RGBA2BGRA)
    elif image.ndim == 3:
        out = cv2.cvtColor(image, cv2.COLOR_RGB2BGR)
    else:
        out = image
    if not cv2.imwrite(str(path), out):
        raise ValueError(f"failed to write image to path: {path}")


def descrambled_output_path(path: Union[str, Path]) -> Path:
    """Return `<stem>-descrambled<suffix>` next to `path`."""
    path = Path(path)
    return path.with_name(f"{path.stem}-descrambled{path.suffix or '.png'}")
