"""Exception types raised by the reconstruction engine."""

from __future__ import annotations


class DescrambleError(Exception):
    """Base class for all engine errors."""


class PreconditionError(DescrambleError, ValueError):
    """Input buffer or grid configuration cannot be tiled."""


class TileIndexError(DescrambleError, IndexError):
    """A tile or strip index is outside its valid domain."""

    def __init__(self, kind: str, index: int, bound: int) -> None:
        super().__init__(f"{kind} index {index} out of range [0, {bound})")
        self.kind = kind
        self.index = index
        self.bound = bound


class LengthMismatchError(DescrambleError, ValueError):
    """Two pixel sequences of different lengths were compared."""

    def __init__(self, len_a: int, len_b: int) -> None:
        super().__init__(f"cannot compare sequences of length {len_a} and {len_b}")
        self.len_a = len_a
        self.len_b = len_b
