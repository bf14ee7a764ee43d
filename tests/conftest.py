"""
Pytest configuration for partsampler tests.

Provides small partitioned frames shared across the unit tests.
"""

import numpy as np
import pytest

from partsampler.data import PartitionedFrame


def make_labelled_frame(counts, n_partitions=4, domain=None, interleave=True):
    """Frame with a row id column ``x`` and a categorical label ``y``.

    Args:
        counts: Number of rows per class, in domain order.
        n_partitions: Number of even partitions.
        domain: Class labels, defaults to "A", "B", ...
        interleave: Spread classes over the rows instead of sorting them.
    """
    domain = domain or [chr(ord("A") + i) for i in range(len(counts))]
    labels = np.repeat(np.arange(len(counts)), counts)
    if interleave:
        labels = np.random.RandomState(0).permutation(labels)
    n_rows = len(labels)
    return PartitionedFrame.from_arrays(
        {"x": np.arange(n_rows, dtype=float), "y": [domain[i] for i in labels]},
        categorical=["y"],
        domains={"y": domain},
        n_partitions=n_partitions,
    )

@pytest.fixture
def numeric_frame():
    """1,000 rows of numeric data over 5 partitions."""
    rng = np.random.RandomState(42)
    return PartitionedFrame.from_arrays(
        {"x": np.arange(1000, dtype=float), "v": rng.rand(1000)},
        n_partitions=5,
    )

@pytest.fixture
def imbalanced_frame():
    """900 rows of class A and 100 rows of class B over 4 partitions."""
    return make_labelled_frame([900, 100])

@pytest.fixture
def balanced_frame():
    """100 rows of class A and 100 rows of class B over 3 partitions."""
    return make_labelled_frame([100, 100], n_partitions=3)

@pytest.fixture
def labelled_frame():
    """Factory fixture building frames with ``make_labelled_frame``."""
    return make_labelled_frame
