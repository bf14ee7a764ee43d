"""
Fork-join execution of partition tasks.

Each partition is processed by an independent unit of work; partial results
are combined by a pairwise tree reduce in partition order; emitted rows are
assembled into a new frame with one output partition per input partition.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

import numpy as np

from partsampler.core.exceptions import InvalidInputError
from partsampler.core.logging import get_logger
from partsampler.data.column import Column
from partsampler.data.frame import Partition, PartitionedFrame
from partsampler.data.types import ColumnKey
from partsampler.execution.task import PartitionTask, PartitionWriter, TaskResult

logger = get_logger(__name__)

MAX_WORKERS = 16

class PartitionExecutor:
    """Run PartitionTasks over the partitions of a frame.

    Args:
        n_jobs: Number of worker threads. 1 runs partitions sequentially on the
            calling thread, -1 uses one thread per CPU (capped at 16).

    Example:
        >>> executor = PartitionExecutor(n_jobs=4)
        >>> dist = executor.run(ClassDistribution(3), frame, ["label"]).result
    """

    def __init__(self, n_jobs: int = 1) -> None:
        if n_jobs == 0 or n_jobs < -1:
            raise InvalidInputError(f"n_jobs must be -1 or >= 1, got {n_jobs}")
        self.n_jobs = n_jobs

    @property
    def max_workers(self) -> int:
        if self.n_jobs == -1:
            return min(os.cpu_count() or 1, MAX_WORKERS)
        return min(self.n_jobs, MAX_WORKERS)

    def run(
        self,
        task: PartitionTask,
        frame: PartitionedFrame,
        columns: Optional[Sequence[ColumnKey]] = None,
    ) -> TaskResult:
        """Run ``task`` on every partition of ``frame``.

        Args:
            task: Task to run.
            frame: Input frame.
            columns: Restrict the task to these columns (in this order).

        Returns:
            TaskResult with the merged partial result and the emitted frame.
        """
        source = frame.select(columns) if columns is not None else frame
        partitions = list(source.partitions())

        def work(partition: Partition) -> tuple[Any, Optional[list[np.ndarray]]]:
            writer = PartitionWriter(partition) if task.emits_rows else None
            partial = task.map(partition, writer)
            return partial, writer.finish() if writer is not None else None

        workers = min(self.max_workers, len(partitions))
        if workers <= 1:
            outputs = [work(p) for p in partitions]
        else:
            # map() keeps partition order
            with ThreadPoolExecutor(max_workers=workers) as pool:
                outputs = list(pool.map(work, partitions))

        result = self._tree_reduce(task, [partial for partial, _ in outputs])
        out_frame = None
        if task.emits_rows:
            out_frame = self._assemble(task.output_columns(source), [rows for _, rows in outputs])
            logger.debug(
                "%s emitted %d rows over %d partitions",
                type(task).__name__, out_frame.n_rows, out_frame.n_partitions,
            )
        return TaskResult(result=result, frame=out_frame)

    @staticmethod
    def _tree_reduce(task: PartitionTask, partials: list[Any]) -> Any:
        partials = [p for p in partials if p is not None]
        if not partials:
            return None
        while len(partials) > 1:
            merged = [task.reduce(partials[i], partials[i + 1]) for i in range(0, len(partials) - 1, 2)]
            if len(partials) % 2:
                merged.append(partials[-1])
            partials = merged
        return partials[0]

    @staticmethod
    def _assemble(templates: list[Column], blocks: list[list[np.ndarray]]) -> PartitionedFrame:
        lengths = [len(b[0]) if b else 0 for b in blocks]
        offsets = np.concatenate([[0], np.cumsum(lengths)]).astype(np.int64)
        columns = []
        for j, template in enumerate(templates):
            values = np.concatenate([b[j] for b in blocks]) if blocks else np.empty(0)
            columns.append(template.with_values(values))
        return PartitionedFrame(columns, offsets)
