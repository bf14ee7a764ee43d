"""
Constant-fill partition step.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from partsampler.data.column import Column
from partsampler.data.frame import Partition, PartitionedFrame
from partsampler.execution import PartitionExecutor, PartitionTask, PartitionWriter


class ReplaceWithConstant(PartitionTask):
    """Replace every value of every column with one constant.

    Output columns are numeric: the constant is a plain value, not a domain code.
    """

    emits_rows = True

    def __init__(self, value: float) -> None:
        self.value = float(value)

    def map(self, partition: Partition, writer: Optional[PartitionWriter]) -> None:
        block = np.full(partition.length, self.value)
        writer.append([block] * partition.n_columns)

    def output_columns(self, source: PartitionedFrame) -> list[Column]:
        return [Column(name, np.empty(0)) for name in source.names]

def fill_constant(
    frame: PartitionedFrame,
    value: float,
    executor: Optional[PartitionExecutor] = None,
) -> PartitionedFrame:
    """Frame of the same shape and partitioning holding ``value`` everywhere."""
    return (executor or PartitionExecutor()).run(ReplaceWithConstant(value), frame).frame
