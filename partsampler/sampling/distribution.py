"""
Distributed class-frequency estimation.

ClassDistribution counts a fixed number of classes (a categorical label or
a small-integer coded numeric column). ValueDistribution counts arbitrary
numeric values. Both skip missing values and merge per-partition partial
results exactly, so the histogram does not depend on the partitioning.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from partsampler.core.exceptions import InvalidInputError
from partsampler.data.column import Column
from partsampler.data.frame import Partition, PartitionedFrame
from partsampler.data.types import ColumnKey
from partsampler.execution import PartitionExecutor, PartitionTask, PartitionWriter


class ClassDistribution(PartitionTask):
    """Histogram of class labels over all partitions.

    The task runs over the label column alone (unweighted counts) or over the
    label and a weight column (weighted counts). Missing weights count as 0.

    Usage 1: label column is categorical
        >>> dist = ClassDistribution.for_column(frame.column("y")).compute(frame, "y")

    Usage 2: label column is numeric and holds class codes
        >>> dist = ClassDistribution(n_classes=3).compute(frame, "code")
    """

    def __init__(self, n_classes: int) -> None:
        if n_classes < 0:
            raise InvalidInputError(f"n_classes must be >= 0, got {n_classes}")
        self.n_classes = n_classes
        self._dist: Optional[np.ndarray] = None

    @classmethod
    def for_column(cls, column: Column) -> ClassDistribution:
        if not column.is_categorical:
            raise InvalidInputError(
                f"Column '{column.name}' is not categorical; pass n_classes explicitly"
            )
        return cls(column.cardinality)

    def map(self, partition: Partition, writer: Optional[PartitionWriter]) -> np.ndarray:
        labels = partition.values(0)
        present = ~np.isnan(labels)
        codes = labels[present].astype(np.int64)
        if codes.size and (codes.min() < 0 or codes.max() >= self.n_classes):
            raise InvalidInputError(
                f"Label codes must lie in [0, {self.n_classes}), got "
                f"[{codes.min()}, {codes.max()}] in partition {partition.index}"
            )
        if partition.n_columns > 1:
            weights = partition.values(1)[present]
            weights = np.where(np.isnan(weights), 0.0, weights)
            return np.bincount(codes, weights=weights, minlength=self.n_classes).astype(np.float64)
        return np.bincount(codes, minlength=self.n_classes).astype(np.float64)

    def reduce(self, left: np.ndarray, right: np.ndarray) -> np.ndarray:
        return left + right

    def compute(
        self,
        frame: PartitionedFrame,
        label: ColumnKey,
        weights: Optional[ColumnKey] = None,
        executor: Optional[PartitionExecutor] = None,
    ) -> np.ndarray:
        """Run the histogram over ``frame``.

        Args:
            frame: Input frame.
            label: Label column.
            weights: Optional weight column.
            executor: Executor to use (sequential by default).

        Returns:
            float64 array of length n_classes.
        """
        columns = [label] if weights is None else [label, weights]
        result = (executor or PartitionExecutor()).run(self, frame, columns).result
        self._dist = result if result is not None else np.zeros(self.n_classes)
        return self._dist.copy()

    def dist(self) -> np.ndarray:
        if self._dist is None:
            raise RuntimeError("compute() has not been called")
        return self._dist.copy()

    def rel_dist(self) -> np.ndarray:
        """Histogram normalised to sum to 1."""
        dist = self.dist()
        return dist / dist.sum()

class ValueDistribution(PartitionTask):
    """Histogram of arbitrary numeric values over all partitions (unweighted).

    Partial results are ``{value: count}`` mappings; merging folds the
    smaller mapping into the larger one.
    """

    def __init__(self) -> None:
        self._dist: Optional[dict[float, int]] = None

    def map(self, partition: Partition, writer: Optional[PartitionWriter]) -> dict[float, int]:
        values = partition.values(0)
        values = values[~np.isnan(values)]
        keys, counts = np.unique(values, return_counts=True)
        return dict(zip(keys.tolist(), counts.tolist()))

    def reduce(self, left: dict[float, int], right: dict[float, int]) -> dict[float, int]:
        if left is right:
            return left
        if len(left) < len(right):
            left, right = right, left
        for value, count in right.items():
            left[value] = left.get(value, 0) + count
        return left

    def compute(
        self,
        frame: PartitionedFrame,
        column: ColumnKey,
        executor: Optional[PartitionExecutor] = None,
    ) -> tuple[np.ndarray, np.ndarray]:
        """Run the histogram over ``frame``.

        Returns:
            (keys, counts): distinct values sorted ascending and their counts.
        """
        result = (executor or PartitionExecutor()).run(self, frame, [column]).result
        self._dist = result if result is not None else {}
        return self.keys(), self.dist()

    def keys(self) -> np.ndarray:
        return np.array(sorted(self._mapping()), dtype=np.float64)

    def dist(self) -> np.ndarray:
        mapping = self._mapping()
        return np.array([mapping[k] for k in sorted(mapping)], dtype=np.float64)

    def _mapping(self) -> dict[float, int]:
        if self._dist is None:
            raise RuntimeError("compute() has not been called")
        return self._dist

def class_distribution(
    frame: PartitionedFrame,
    label: ColumnKey,
    weights: Optional[ColumnKey] = None,
    n_classes: Optional[int] = None,
    executor: Optional[PartitionExecutor] = None,
) -> np.ndarray:
    """Class histogram of ``label``, excluding missing labels.

    Args:
        frame: Input frame.
        label: Label column (categorical unless n_classes is given).
        weights: Optional weight column.
        n_classes: Number of classes of a numeric-coded label column.
        executor: Executor to use.

    Returns:
        float64 histogram indexed by class code.
    """
    if n_classes is None:
        task = ClassDistribution.for_column(frame.column(label))
    else:
        task = ClassDistribution(n_classes)
    return task.compute(frame, label, weights, executor)

def value_distribution(
    frame: PartitionedFrame,
    column: ColumnKey,
    executor: Optional[PartitionExecutor] = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Distinct non-missing values of ``column`` and their counts."""
    return ValueDistribution().compute(frame, column, executor)
