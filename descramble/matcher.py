"""Seam distance metric and memoized pairwise tile cost matrices."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

from .edges import Edge, as_float_buffer, edge_pixels
from .errors import LengthMismatchError, TileIndexError
from .grid import TileGrid

logger = logging.getLogger(__name__)


def _as_rows(seq) -> np.ndarray:
    """Coerce a pixel sequence into a `(length, channels)` float array."""
    if hasattr(seq, "to_array"):
        rows = seq.to_array()
    else:
        rows = np.asarray(seq, dtype=np.float64)
    if rows.ndim == 1:
        rows = rows[:, None]
    return rows.astype(np.float64, copy=False)


def color_distance(c1, c2) -> float:
    """Euclidean distance between two colors over all their channels."""
    a = np.atleast_1d(np.asarray(c1, dtype=np.float64))
    b = np.atleast_1d(np.asarray(c2, dtype=np.float64))
    if a.shape != b.shape:
        raise LengthMismatchError(a.size, b.size)
    diff = a - b
    return float(np.sqrt(np.sum(diff * diff)))


def _pixel_distances(diff: np.ndarray) -> np.ndarray:
    # Per-pixel color distance along the last (channel) axis.
    return np.sqrt(np.sum(diff * diff, axis=-1))


def sequence_distance(seq1, seq2) -> float:
    """Square root of the summed squared per-position color distances."""
    a = _as_rows(seq1)
    b = _as_rows(seq2)
    if a.shape[0] != b.shape[0]:
        raise LengthMismatchError(a.shape[0], b.shape[0])
    if a.shape[1] != b.shape[1]:
        raise LengthMismatchError(a.size, b.size)
    per_pixel = _pixel_distances(a - b)
    return float(np.sqrt(np.sum(per_pixel * per_pixel)))


class EdgeMatcher:
    """Compare tile edges of one image laid out on a `TileGrid`."""

    def __init__(self, image: np.ndarray, grid: TileGrid) -> None:
        self.pixels = as_float_buffer(image)
        self.grid = grid
        self._horizontal: Optional[np.ndarray] = None
        self._vertical: Optional[np.ndarray] = None

    def edge(self, tile: int, edge: Edge):
        """Return the boundary pixel sequence of one tile edge."""
        return edge_pixels(self.pixels, self.grid.tile_rect(tile), edge)

    def tile_edge_distance(self, tile_a: int, edge_a: Edge, tile_b: int, edge_b: Edge) -> float:
        """Distance between `edge_a` of `tile_a` and `edge_b` of `tile_b`."""
        return sequence_distance(self.edge(tile_a, edge_a), self.edge(tile_b, edge_b))

    def _stack_edges(self, edge: Edge) -> np.ndarray:
        """Return every tile's `edge` as a `[tile, position, channel]` array."""
        return np.stack(
            [self.edge(n, edge).to_array() for n in range(self.grid.total)], axis=0
        )

    def _pairwise(self, edge_a: Edge, edge_b: Edge) -> np.ndarray:
        src = self._stack_edges(edge_a)
        dst = self._stack_edges(edge_b)
        n = self.grid.total
        cost = np.empty((n, n), dtype=np.float64)
        for a in range(n):
            per_pixel = _pixel_distances(src[a][None, :, :] - dst)
            cost[a] = np.sqrt(np.sum(per_pixel * per_pixel, axis=1))
        return cost

    def horizontal_costs(self) -> np.ndarray:
        """Matrix `[a, b]`: seam cost of placing tile b right of tile a."""
        if self._horizontal is None:
            logger.debug("computing %dx%d right/left seam costs", self.grid.total, self.grid.total)
            self._horizontal = self._pairwise(Edge.RIGHT, Edge.LEFT)
        return self._horizontal

    def vertical_costs(self) -> np.ndarray:
        """Matrix `[a, b]`: seam cost of placing tile b below tile a."""
        if self._vertical is None:
            logger.debug("computing %dx%d bottom/top seam costs", self.grid.total, self.grid.total)
            self._vertical = self._pairwise(Edge.BOTTOM, Edge.TOP)
        return self._vertical

    def strip_distance(self, tiles_a: Sequence[int], tiles_b: Sequence[int]) -> float:
        """Sum of column-wise bottom/top seam costs between two tile rows."""
        if len(tiles_a) != len(tiles_b):
            raise LengthMismatchError(len(tiles_a), len(tiles_b))
        vertical = self.vertical_costs()
        return float(sum(vertical[a, b] for a, b in zip(tiles_a, tiles_b)))

    def total_grid_cost(self, grid: np.ndarray) -> float:
        """Sum of all right and down seam costs in an arrangement of tiles."""
        horizontal = self.horizontal_costs()
        rows, cols = grid.shape
        total = 0.0
        for r in range(rows):
            for c in range(cols):
                cur = int(grid[r, c])
                if cur < 0 or cur >= self.grid.total:
                    raise TileIndexError("tile", cur, self.grid.total)
                if c + 1 < cols:
                    total += float(horizontal[cur, int(grid[r, c + 1])])
            if r + 1 < rows:
                total += self.strip_distance(
                    [int(t) for t in grid[r]], [int(t) for t in grid[r + 1]]
                )
        return total
