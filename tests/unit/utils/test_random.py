"""Tests for the counter-based random sources."""

import numpy as np

from partsampler.utils.random import partition_rng, row_uniform, row_uniforms, shuffle_indices


class TestRowUniforms:
    """Tests for per-row draws."""

    def test_range(self):
        draws = row_uniforms(7, 0, 10_000)
        assert draws.dtype == np.float64
        assert draws.min() >= 0.0
        assert draws.max() < 1.0

    def test_deterministic(self):
        assert np.array_equal(row_uniforms(42, 100, 50), row_uniforms(42, 100, 50))

    def test_independent_of_range_split(self):
        """A row's draw only depends on the seed and its global index."""
        whole = row_uniforms(3, 0, 1000)
        pieces = np.concatenate([row_uniforms(3, 0, 137), row_uniforms(3, 137, 500), row_uniforms(3, 637, 363)])
        assert np.array_equal(whole, pieces)
        assert row_uniform(3, 500) == whole[500]

    def test_seeds_differ(self):
        a = row_uniforms(1, 0, 100)
        b = row_uniforms(2, 0, 100)
        assert not np.array_equal(a, b)

    def test_next_seed_is_not_a_shifted_stream(self):
        """seed + 1 does not reproduce the draws of the neighbouring row."""
        a = row_uniforms(10, 1, 100)
        b = row_uniforms(11, 0, 100)
        assert not np.array_equal(a, b)

    def test_negative_seed(self):
        draws = row_uniforms(-5, 0, 10)
        assert np.all((draws >= 0.0) & (draws < 1.0))

    def test_roughly_uniform(self):
        draws = row_uniforms(123, 0, 100_000)
        assert abs(draws.mean() - 0.5) < 0.01
        hist, _ = np.histogram(draws, bins=10, range=(0.0, 1.0))
        assert hist.min() > 9_000

    def test_empty(self):
        assert row_uniforms(1, 5, 0).size == 0

class TestPartitionRng:
    """Tests for per-partition streams."""

    def test_deterministic(self):
        a = partition_rng(42, 3).random(5)
        b = partition_rng(42, 3).random(5)
        assert np.array_equal(a, b)

    def test_partitions_differ(self):
        a = partition_rng(42, 0).random(5)
        b = partition_rng(42, 1).random(5)
        assert not np.array_equal(a, b)

    def test_shuffle_indices_is_permutation(self):
        perm = shuffle_indices(50, partition_rng(0, 0))
        assert sorted(perm.tolist()) == list(range(50))
