"""Reassemble images whose square tiles were shuffled."""

from .edges import Edge, EdgeSequence, edge_pixels
from .errors import DescrambleError, LengthMismatchError, PreconditionError, TileIndexError
from .evaluator import EvaluationResult, PuzzleEvaluator
from .grid import Rect, TileGrid
from .matcher import EdgeMatcher, color_distance, sequence_distance
from .solver import Descrambler, Reconstruction, SolverConfig, Strip, StripSet, descramble
from .utils import compose_image_from_mapping, compose_strips_image, scramble_image

__all__ = [
    "Rect",
    "TileGrid",
    "Edge",
    "EdgeSequence",
    "edge_pixels",
    "color_distance",
    "sequence_distance",
    "EdgeMatcher",
    "SolverConfig",
    "Strip",
    "StripSet",
    "Reconstruction",
    "Descrambler",
    "descramble",
    "EvaluationResult",
    "PuzzleEvaluator",
    "compose_image_from_mapping",
    "compose_strips_image",
    "scramble_image",
    "DescrambleError",
    "PreconditionError",
    "TileIndexError",
    "LengthMismatchError",
]
