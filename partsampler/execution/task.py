"""
Partition-local tasks and their output buffers.

A PartitionTask is run once per partition by a PartitionExecutor. ``map``
sees a single Partition and may return a partial result and/or emit rows
through a PartitionWriter. Partial results are combined with ``reduce``,
which must be commutative and associative so that the merged result does
not depend on how many partitions there are or in which order they finish.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from partsampler.core.exceptions import InvalidInputError
from partsampler.data.column import Column
from partsampler.data.frame import Partition, PartitionedFrame
from partsampler.data.types import RowIndices


class PartitionWriter:
    """Output buffer of one partition.

    Rows are appended as a unit across all columns, so every output column
    of a partition always has the same length.
    """

    def __init__(self, partition: Partition) -> None:
        self.partition = partition
        self._chunks: list[list[np.ndarray]] = [[] for _ in range(partition.n_columns)]
        self._length = 0

    def __len__(self) -> int:
        return self._length

    def take(self, indices: RowIndices) -> None:
        """Append copies of the rows at the given local indices.

        Repeated indices replicate a row.
        """
        indices = np.asarray(indices, dtype=np.int64)
        if indices.size == 0:
            return
        for j, chunks in enumerate(self._chunks):
            chunks.append(self.partition.values(j)[indices])
        self._length += int(indices.size)

    def append(self, values: Sequence[np.ndarray]) -> None:
        """Append one block of values per column."""
        if len(values) != len(self._chunks):
            raise InvalidInputError(
                f"Expected {len(self._chunks)} column blocks, got {len(values)}"
            )
        blocks = [np.asarray(v, dtype=np.float64) for v in values]
        lengths = {b.size for b in blocks}
        if len(lengths) > 1:
            raise InvalidInputError(f"Column blocks have different lengths: {sorted(lengths)}")
        for chunks, block in zip(self._chunks, blocks):
            chunks.append(block)
        self._length += lengths.pop() if lengths else 0

    def finish(self) -> list[np.ndarray]:
        """Concatenate the buffered blocks, one array per column."""
        return [
            np.concatenate(chunks) if chunks else np.empty(0, dtype=np.float64)
            for chunks in self._chunks
        ]

class PartitionTask(ABC):
    """Base class for partition-local steps.

    Subclasses implement :meth:`map`, and :meth:`reduce` when ``map``
    returns partial results. Tasks that produce output partitions set
    ``emits_rows = True``.
    """

    emits_rows: bool = False

    @abstractmethod
    def map(self, partition: Partition, writer: Optional[PartitionWriter]) -> Any:
        """Process one partition.

        Args:
            partition: The partition to process.
            writer: Output buffer when the task emits rows, else None.

        Returns:
            Partial result for this partition, or None.
        """

    def reduce(self, left: Any, right: Any) -> Any:
        """Merge two partial results."""
        return left

    def output_columns(self, source: PartitionedFrame) -> list[Column]:
        """Template columns (name, type, domain) of the emitted frame."""
        return source.columns

@dataclass
class TaskResult:
    """Result of running a task over every partition of a frame.

    Attributes:
        result: Merged partial result (None when no partition returned one).
        frame: Emitted frame when the task emits rows, else None.
    """

    result: Any = None
    frame: Optional[PartitionedFrame] = None
