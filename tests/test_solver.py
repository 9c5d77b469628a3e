"""Strip, strip set and end-to-end reconstruction tests."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from descramble.edges import Edge
from descramble.errors import PreconditionError, TileIndexError
from descramble.solver import Descrambler, SolverConfig, Strip, descramble
from descramble.utils import (
    generate_natural_like_image,
    generate_seam_continuous_image,
    scramble_image,
    set_random_seed,
)


def test_identity_image_reconstructs_identity() -> None:
    """An unscrambled 240x240 image with 60px tiles maps every tile to itself."""
    image = generate_seam_continuous_image(side=60, horizontal=4, vertical=4)
    result = descramble(image, side=60)
    assert result.mapping == list(range(16))
    assert result.cost == 0.0
    assert result.is_permutation
    np.testing.assert_array_equal(result.compose(image), image)


def test_scrambled_2x2_recovers_inverse_permutation() -> None:
    """A scrambled 2x2 grid of distinct tiles is put back exactly."""
    image = generate_seam_continuous_image(side=8, horizontal=2, vertical=2)
    scrambled, order = scramble_image(image, 8, set_random_seed(11))
    result = descramble(scrambled, side=8)
    assert result.mapping == np.argsort(order).tolist()
    np.testing.assert_array_equal(result.compose(scrambled), image)


def test_scrambled_4x4_recovers_original() -> None:
    """The full 240x240 case is restored from an arbitrary shuffle."""
    image = generate_seam_continuous_image(side=60, horizontal=4, vertical=4)
    scrambled, order = scramble_image(image, 60, set_random_seed(42))
    result = descramble(scrambled, side=60)
    assert result.cost == 0.0
    assert result.mapping == np.argsort(order).tolist()
    np.testing.assert_array_equal(result.compose(scrambled), image)


def test_single_row_image() -> None:
    """A one-row grid reduces to a single strip."""
    image = generate_seam_continuous_image(side=4, horizontal=5, vertical=1)
    scrambled, order = scramble_image(image, 4, set_random_seed(1))
    descrambler = Descrambler(scrambled, SolverConfig(side=4))
    result = descrambler.solve()
    assert result.mapping == np.argsort(order).tolist()
    assert all(s.cost == 0.0 for s in result.candidates)
    assert result.strip_set.seq == (result.seed,)


def test_single_column_image() -> None:
    """A one-column grid has trivial strips and chains them vertically."""
    image = generate_seam_continuous_image(side=4, horizontal=1, vertical=5)
    scrambled, order = scramble_image(image, 4, set_random_seed(2))
    descrambler = Descrambler(scrambled, SolverConfig(side=4))
    result = descrambler.solve()
    assert all(s == Strip(seq=(i,), cost=0.0) for i, s in enumerate(result.strips))
    assert result.mapping == np.argsort(order).tolist()
    assert result.cost == 0.0


def test_single_tile_image() -> None:
    """A one-tile image is its own reconstruction."""
    image = np.full((5, 5, 3), 9, dtype=np.uint8)
    result = descramble(image, side=5)
    assert result.mapping == [0]
    assert result.cost == 0.0


def test_build_strip_is_greedy_nearest_neighbor() -> None:
    """Each strip step picks the cheapest unused tile to the right."""
    image = generate_natural_like_image(size=120, seed=3)
    descrambler = Descrambler(image, SolverConfig(side=30))
    matcher = descrambler.matcher
    for seed in range(descrambler.grid.total):
        strip = descrambler.build_strip(seed)
        assert len(strip.seq) == descrambler.grid.horizontal
        assert len(set(strip.seq)) == len(strip.seq)
        assert strip.seq[0] == seed
        used = {seed}
        expected_cost = 0.0
        for prev, nxt in zip(strip.seq, strip.seq[1:]):
            options = {
                t: matcher.tile_edge_distance(prev, Edge.RIGHT, t, Edge.LEFT)
                for t in range(descrambler.grid.total)
                if t not in used
            }
            assert nxt == min(options, key=options.get)
            expected_cost += options[nxt]
            used.add(nxt)
        assert strip.cost == pytest.approx(expected_cost)


def test_strip_set_cost_includes_member_strips() -> None:
    """A strip set's total adds its members' internal costs to its own seams."""
    image = generate_natural_like_image(size=120, seed=4)
    descrambler = Descrambler(image, SolverConfig(side=30))
    strips = descrambler.build_strips()
    strip_sets = descrambler.build_strip_sets(strips)
    assert len(strips) == len(strip_sets) == 16
    for seed, strip_set in enumerate(strip_sets):
        assert strip_set.seq[0] == seed
        assert len(set(strip_set.seq)) == descrambler.grid.vertical
        seams = sum(
            descrambler.matcher.strip_distance(strips[a].seq, strips[b].seq)
            for a, b in zip(strip_set.seq, strip_set.seq[1:])
        )
        assert strip_set.cost == pytest.approx(seams)
        assert strip_set.total_cost == pytest.approx(
            seams + sum(strips[s].cost for s in strip_set.seq)
        )


def test_solve_picks_minimum_candidate() -> None:
    """The winning strip set is the cheapest candidate."""
    image = generate_natural_like_image(size=180, seed=9)
    result = Descrambler(image, SolverConfig(side=60)).solve()
    costs = [c.total_cost for c in result.candidates]
    assert result.seed == int(np.argmin(costs))
    assert result.cost == min(costs)
    assert result.grid.shape == (3, 3)


def test_ties_break_toward_lowest_index() -> None:
    """On a featureless image every choice ties and the lowest index wins."""
    image = np.zeros((4, 4, 3), dtype=np.uint8)
    descrambler = Descrambler(image, SolverConfig(side=2))
    result = descrambler.solve()
    assert [s.seq for s in result.strips] == [(0, 1), (1, 0), (2, 0), (3, 0)]
    assert result.seed == 0
    assert result.strip_set.seq == (0, 1)
    assert result.mapping == [0, 1, 1, 0]
    assert not result.is_permutation


def test_reused_tiles_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    """A non-permutation result is reported as a warning."""
    image = np.zeros((4, 4, 3), dtype=np.uint8)
    with caplog.at_level(logging.WARNING, logger="descramble.solver"):
        descramble(image, side=2)
    assert "reuses source tiles" in caplog.text


def test_solid_tiles_are_deterministic() -> None:
    """Distinct solid tiles give the same answer on every run."""
    colors = [(255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 0)]
    image = np.zeros((8, 8, 3), dtype=np.uint8)
    for n, color in enumerate(colors):
        r, c = divmod(n, 2)
        image[r * 4 : (r + 1) * 4, c * 4 : (c + 1) * 4] = color
    scrambled, _ = scramble_image(image, 4, set_random_seed(5))
    first = descramble(scrambled, side=4)
    second = descramble(scrambled, side=4)
    assert first.mapping == second.mapping
    assert first.cost == second.cost


def test_repeated_runs_are_identical() -> None:
    """Two runs on the same buffer yield bit-identical output."""
    image = generate_natural_like_image(size=240, seed=42)
    scrambled, _ = scramble_image(image, 60, set_random_seed(42))
    first = descramble(scrambled, side=60)
    second = descramble(scrambled, side=60)
    assert first.mapping == second.mapping
    assert first.cost == second.cost


def test_parallel_matches_serial() -> None:
    """Worker threads change nothing about the selected arrangement."""
    image = generate_natural_like_image(size=240, seed=7)
    scrambled, _ = scramble_image(image, 60, set_random_seed(7))
    serial = Descrambler(scrambled, SolverConfig(side=60, workers=1)).solve()
    parallel = Descrambler(scrambled, SolverConfig(side=60, workers=4)).solve()
    assert parallel.strips == serial.strips
    assert parallel.candidates == serial.candidates
    assert parallel.mapping == serial.mapping


def test_out_of_range_seeds_rejected() -> None:
    """Strip and strip set seeds must be valid indices."""
    image = generate_seam_continuous_image(side=4, horizontal=2, vertical=2)
    descrambler = Descrambler(image, SolverConfig(side=4))
    with pytest.raises(TileIndexError):
        descrambler.build_strip(4)
    strips = descrambler.build_strips()
    with pytest.raises(TileIndexError, match="strip index -1"):
        descrambler.build_strip_set(-1, strips)


def test_invalid_dimensions_rejected_before_search() -> None:
    """Images that cannot be tiled fail at construction."""
    with pytest.raises(PreconditionError):
        Descrambler(np.zeros((240, 230, 3), dtype=np.uint8), SolverConfig(side=60))
    with pytest.raises(PreconditionError):
        Descrambler(
            np.zeros((120, 120, 3), dtype=np.uint8),
            SolverConfig(side=60, expected_size=(240, 240)),
        )
