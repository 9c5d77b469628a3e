"""Two-level greedy reconstruction: tiles into strips, strips into images."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

import numpy as np

from .errors import DescrambleError, TileIndexError
from .grid import TileGrid
from .matcher import EdgeMatcher
from .utils import compose_image_from_mapping

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class SolverConfig:
    """Configuration for the reconstruction engine."""

    side: int = 60
    workers: int = 1
    expected_size: Optional[Tuple[int, int]] = None


@dataclass(frozen=True)
class Strip:
    """A left-to-right run of `horizontal` distinct tiles."""

    seq: Tuple[int, ...]
    cost: float


@dataclass(frozen=True)
class StripSet:
    """A top-to-bottom run of `vertical` distinct strip indices.

    `cost` covers only the seams between strips; `total_cost` adds the
    internal cost of every member strip.
    """

    seq: Tuple[int, ...]
    cost: float
    total_cost: float


@dataclass
class Reconstruction:
    """Winning arrangement and the candidates it was chosen from."""

    layout: TileGrid
    strips: List[Strip]
    strip_set: StripSet
    seed: int
    candidates: List[StripSet] = field(default_factory=list, repr=False)

    @property
    def cost(self) -> float:
        return self.strip_set.total_cost

    @property
    def grid(self) -> np.ndarray:
        """Source tile index for every destination cell, `[row, col]`."""
        rows = [self.strips[s].seq for s in self.strip_set.seq]
        return np.asarray(rows, dtype=np.int32)

    @property
    def mapping(self) -> List[int]:
        """Destination tile index -> source tile index, row-major."""
        return [int(t) for t in self.grid.ravel()]

    @property
    def is_permutation(self) -> bool:
        return len(set(self.mapping)) == self.layout.total

    def compose(self, image: np.ndarray) -> np.ndarray:
        """Copy every chosen source tile into its destination rectangle."""
        return compose_image_from_mapping(image, self.layout, self.mapping)


class Descrambler:
    """Reorder the tiles of a scrambled image to minimize seam discontinuity."""

    def __init__(self, image: np.ndarray, config: Optional[SolverConfig] = None) -> None:
        self.config = config or SolverConfig()
        self.grid = TileGrid.from_image(
            image, self.config.side, expected_size=self.config.expected_size
        )
        self.matcher = EdgeMatcher(image, self.grid)
        self._strip_costs: Optional[Tuple[Tuple[Tuple[int, ...], ...], np.ndarray]] = None

    def _map(self, fn: Callable[[int], T], count: int) -> List[T]:
        """Apply `fn` to `0..count` and return results in index order."""
        workers = max(1, int(self.config.workers))
        if workers == 1 or count <= 1:
            return [fn(i) for i in range(count)]

        results: List[Optional[T]] = [None] * count
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(fn, i): i for i in range(count)}
            for future, i in futures.items():
                results[i] = future.result()
        return results  # type: ignore[return-value]

    def build_strip(self, seed: int) -> Strip:
        """Greedily chain tiles rightward from `seed`."""
        total = self.grid.total
        if seed < 0 or seed >= total:
            raise TileIndexError("tile", seed, total)

        cost = self.matcher.horizontal_costs()
        seq = [seed]
        unused = set(range(total))
        unused.remove(seed)
        acc = 0.0
        for _ in range(1, self.grid.horizontal):
            if not unused:
                raise DescrambleError(f"ran out of tiles while building strip from {seed}")
            candidates = np.array(sorted(unused), dtype=np.int64)
            scores = cost[seq[-1], candidates]
            pick = int(np.argmin(scores))
            choice = int(candidates[pick])
            seq.append(choice)
            acc += float(scores[pick])
            unused.remove(choice)

        strip = Strip(seq=tuple(seq), cost=acc)
        logger.debug("strip %d: %s cost=%.3f", seed, strip.seq, strip.cost)
        return strip

    def build_strips(self) -> List[Strip]:
        """Build one strip per seed tile, in seed order."""
        self.matcher.horizontal_costs()
        return self._map(self.build_strip, self.grid.total)

    def strip_distance_matrix(self, strips: Sequence[Strip]) -> np.ndarray:
        """Matrix `[a, b]`: column-summed seam cost of placing strip b below strip a."""
        vertical = self.matcher.vertical_costs()
        seqs = np.asarray([s.seq for s in strips], dtype=np.int64)
        n = len(strips)
        dist = np.zeros((n, n), dtype=np.float64)
        for col in range(seqs.shape[1]):
            column = seqs[:, col]
            dist += vertical[np.ix_(column, column)]
        return dist

    def _strip_distances(self, strips: Sequence[Strip]) -> np.ndarray:
        key = tuple(s.seq for s in strips)
        if self._strip_costs is None or self._strip_costs[0] != key:
            self._strip_costs = (key, self.strip_distance_matrix(strips))
        return self._strip_costs[1]

    def build_strip_set(self, seed: int, strips: Sequence[Strip]) -> StripSet:
        """Greedily chain strips downward from strip index `seed`."""
        n = len(strips)
        if seed < 0 or seed >= n:
            raise TileIndexError("strip", seed, n)

        dist = self._strip_distances(strips)
        seq = [seed]
        unused = set(range(n))
        unused.remove(seed)
        acc = 0.0
        for _ in range(1, self.grid.vertical):
            if not unused:
                raise DescrambleError(f"ran out of strips while building strip set from {seed}")
            candidates = np.array(sorted(unused), dtype=np.int64)
            scores = dist[seq[-1], candidates]
            pick = int(np.argmin(scores))
            choice = int(candidates[pick])
            seq.append(choice)
            acc += float(scores[pick])
            unused.remove(choice)

        total_cost = acc + sum(strips[s].cost for s in seq)
        strip_set = StripSet(seq=tuple(seq), cost=acc, total_cost=total_cost)
        logger.debug("strip set %d: %s cost=%.3f", seed, strip_set.seq, strip_set.total_cost)
        return strip_set

    def build_strip_sets(self, strips: Sequence[Strip]) -> List[StripSet]:
        """Build one strip set per seed strip, in seed order."""
        self._strip_distances(strips)
        return self._map(lambda seed: self.build_strip_set(seed, strips), len(strips))

    def solve(self) -> Reconstruction:
        """Run both greedy passes and return the cheapest full arrangement."""
        logger.info(
            "descrambling %dx%d tiles of side %d",
            self.grid.horizontal,
            self.grid.vertical,
            self.grid.side,
        )
        strips = self.build_strips()
        candidates = self.build_strip_sets(strips)

        best_seed = 0
        for seed, candidate in enumerate(candidates):
            if candidate.total_cost < candidates[best_seed].total_cost:
                best_seed = seed

        result = Reconstruction(
            layout=self.grid,
            strips=strips,
            strip_set=candidates[best_seed],
            seed=best_seed,
            candidates=candidates,
        )
        logger.info("best strip set seeded at strip %d, cost=%.3f", best_seed, result.cost)
        if not result.is_permutation:
            logger.warning("best arrangement reuses source tiles: %s", result.mapping)
        return result


def descramble(image: np.ndarray, side: int = 60, workers: int = 1) -> Reconstruction:
    """Convenience wrapper: reconstruct `image` cut into `side`-pixel tiles."""
    return Descrambler(image, SolverConfig(side=side, workers=workers)).solve()
