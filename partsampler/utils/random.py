"""
Deterministic random sources.

Per-row draws come from a counter-based generator: the draw for a row is a
SplitMix64 hash of ``(seed, global row index)``. Any partition can compute
the draws of its own rows without carrying a stream across rows, so results
do not depend on the number of partitions, worker threads or scheduling
order.
"""

import numpy as np

_MASK64 = (1 << 64) - 1
_GOLDEN = 0x9E3779B97F4A7C15
_MIX1 = 0xBF58476D1CE4E5B9
_MIX2 = 0x94D049BB133111EB
_TO_UNIT = 1.0 / (1 << 53)

def _splitmix64(x: int) -> int:
    x = (x + _GOLDEN) & _MASK64
    x = ((x ^ (x >> 30)) * _MIX1) & _MASK64
    x = ((x ^ (x >> 27)) * _MIX2) & _MASK64
    return x ^ (x >> 31)

def _mix(z: np.ndarray) -> np.ndarray:
    z = (z ^ (z >> np.uint64(30))) * np.uint64(_MIX1)
    z = (z ^ (z >> np.uint64(27))) * np.uint64(_MIX2)
    return z ^ (z >> np.uint64(31))

def row_uniforms(seed: int, start: int, length: int) -> np.ndarray:
    """Uniform draws in [0, 1) for the global rows ``start .. start + length - 1``.

    Args:
        seed: Seed of the operation (any Python int, negative values wrap).
        start: Global index of the first row.
        length: Number of rows.

    Returns:
        float64 array of ``length`` draws.

    Example:
        >>> a = row_uniforms(42, 0, 10)
        >>> b = row_uniforms(42, 5, 5)
        >>> bool(np.array_equal(a[5:], b))
        True
    """
    key = np.uint64(_splitmix64(int(seed) & _MASK64))
    rows = np.arange(start, start + length, dtype=np.uint64)
    with np.errstate(over="ignore"):
        z = _mix(rows * np.uint64(_GOLDEN) + key)
    return (z >> np.uint64(11)).astype(np.float64) * _TO_UNIT

def row_uniform(seed: int, row: int) -> float:
    """Single draw of :func:`row_uniforms`."""
    return float(row_uniforms(seed, row, 1)[0])

def partition_rng(seed: int, partition_index: int) -> np.random.Generator:
    """Random stream for one partition of a partition-scoped operation."""
    sequence = np.random.SeedSequence([int(seed) & _MASK64, int(partition_index)])
    return np.random.Generator(np.random.Philox(sequence))

def shuffle_indices(n: int, rng: np.random.Generator) -> np.ndarray:
    """Unbiased (Fisher-Yates) permutation of ``0 .. n - 1``."""
    return rng.permutation(n)
