"""Edge descriptors and boundary pixel extraction."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Callable, Iterator, Tuple

import numpy as np

from .grid import Rect


def as_float_buffer(image: np.ndarray) -> np.ndarray:
    """Promote a pixel buffer to HxWxC float64 without rescaling samples."""
    buf = np.asarray(image)
    if buf.ndim == 2:
        buf = buf[:, :, None]
    return buf.astype(np.float64, copy=False)


class Edge(Enum):
    """One side of a tile plus the order its pixels are enumerated in.

    RIGHT/LEFT both walk downward from their top corner and BOTTOM/TOP both
    walk rightward from their left corner, so position i on a tile's RIGHT
    edge faces position i on the LEFT edge of the tile placed to its right.
    """

    RIGHT = ("right", lambda r: (r.max_x - 1, r.y), (0, 1))
    BOTTOM = ("bottom", lambda r: (r.x, r.max_y - 1), (1, 0))
    LEFT = ("left", lambda r: (r.x, r.y), (0, 1))
    TOP = ("top", lambda r: (r.x, r.y), (1, 0))

    def __init__(
        self,
        label: str,
        start: Callable[[Rect], Tuple[int, int]],
        increment: Tuple[int, int],
    ) -> None:
        self.label = label
        self.start = start
        self.increment = increment

    def length(self, rect: Rect) -> int:
        """Number of pixels along this edge of `rect`."""
        return rect.height if self.increment == (0, 1) else rect.width

    def point(self, rect: Rect, i: int) -> Tuple[int, int]:
        """Pixel coordinate (x, y) of position i along this edge."""
        x0, y0 = self.start(rect)
        dx, dy = self.increment
        return x0 + i * dx, y0 + i * dy

    @property
    def opposite(self) -> "Edge":
        return _OPPOSITE[self]


_OPPOSITE = {
    Edge.RIGHT: Edge.LEFT,
    Edge.LEFT: Edge.RIGHT,
    Edge.BOTTOM: Edge.TOP,
    Edge.TOP: Edge.BOTTOM,
}


class EdgeSequence(Sequence):
    """Lazy, restartable view over the boundary pixels of one tile edge."""

    def __init__(self, pixels: np.ndarray, rect: Rect, edge: Edge) -> None:
        self._pixels = pixels
        self.rect = rect
        self.edge = edge
        self._length = edge.length(rect)

    def __len__(self) -> int:
        return self._length

    def __getitem__(self, i):
        if isinstance(i, slice):
            return [self[j] for j in range(*i.indices(self._length))]
        if i < 0:
            i += self._length
        if not 0 <= i < self._length:
            raise IndexError(f"edge position {i} out of range [0, {self._length})")
        x, y = self.edge.point(self.rect, i)
        return self._pixels[y, x]

    def __iter__(self) -> Iterator[np.ndarray]:
        for i in range(self._length):
            x, y = self.edge.point(self.rect, i)
            yield self._pixels[y, x]

    def to_array(self) -> np.ndarray:
        """Materialize the edge as a `(length, channels)` array."""
        r = self.rect
        if self.edge is Edge.RIGHT:
            return self._pixels[r.y : r.max_y, r.max_x - 1]
        if self.edge is Edge.LEFT:
            return self._pixels[r.y : r.max_y, r.x]
        if self.edge is Edge.BOTTOM:
            return self._pixels[r.max_y - 1, r.x : r.max_x]
        return self._pixels[r.y, r.x : r.max_x]


def edge_pixels(image: np.ndarray, rect: Rect, edge: Edge) -> EdgeSequence:
    """Return the ordered boundary pixels of `rect` along `edge`."""
    return EdgeSequence(as_float_buffer(image), rect, edge)
