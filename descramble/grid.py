"""Tile addressing for images cut into equal square cells."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .errors import PreconditionError, TileIndexError


@dataclass(frozen=True)
class Rect:
    """Axis-aligned pixel rectangle; `x`/`y` is the top-left corner."""

    x: int
    y: int
    width: int
    height: int

    @property
    def max_x(self) -> int:
        return self.x + self.width

    @property
    def max_y(self) -> int:
        return self.y + self.height


@dataclass(frozen=True)
class TileGrid:
    """Row-major grid of `side x side` tiles covering an image."""

    side: int
    horizontal: int
    vertical: int

    def __post_init__(self) -> None:
        if self.side <= 0:
            raise PreconditionError(f"tile side must be positive, got {self.side}")
        if self.horizontal <= 0 or self.vertical <= 0:
            raise PreconditionError(
                f"grid must have at least one tile, got {self.horizontal}x{self.vertical}"
            )

    @classmethod
    def from_image(
        cls,
        image: np.ndarray,
        side: int,
        expected_size: Optional[Tuple[int, int]] = None,
    ) -> "TileGrid":
        """Derive grid dimensions from an HxW[xC] buffer.

        `expected_size` is an optional `(width, height)` the buffer must match
        exactly.
        """
        if image.ndim not in (2, 3):
            raise PreconditionError(f"image must be HxW or HxWxC, got shape {image.shape}")
        height, width = int(image.shape[0]), int(image.shape[1])
        if height == 0 or width == 0:
            raise PreconditionError("image is empty")
        if expected_size is not None and (width, height) != tuple(expected_size):
            exp_w, exp_h = expected_size
            raise PreconditionError(
                f"incorrect dimensions {width}x{height}: expecting {exp_w}x{exp_h}"
            )
        if side <= 0:
            raise PreconditionError(f"tile side must be positive, got {side}")
        if width % side != 0 or height % side != 0:
            raise PreconditionError(
                f"image size {width}x{height} is not a multiple of tile side {side}"
            )
        return cls(side=side, horizontal=width // side, vertical=height // side)

    @property
    def total(self) -> int:
        return self.horizontal * self.vertical

    @property
    def width(self) -> int:
        return self.horizontal * self.side

    @property
    def height(self) -> int:
        return self.vertical * self.side

    def tile_rect(self, n: int) -> Rect:
        """Return the pixel rectangle of the n-th tile."""
        if n < 0 or n >= self.total:
            raise TileIndexError("tile", n, self.total)
        return Rect(
            x=(n % self.horizontal) * self.side,
            y=(n // self.horizontal) * self.side,
            width=self.side,
            height=self.side,
        )

    def tile_index(self, x: int, y: int) -> int:
        """Return the index of the tile containing pixel (x, y)."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise PreconditionError(
                f"pixel ({x}, {y}) outside {self.width}x{self.height} image"
            )
        return (y // self.side) * self.horizontal + (x // self.side)

    def tile_view(self, image: np.ndarray, n: int) -> np.ndarray:
        """Return a read-only view of the n-th tile's pixels."""
        rect = self.tile_rect(n)
        view = image[rect.y : rect.max_y, rect.x : rect.max_x, ...]
        view.flags.writeable = False
        return view
