"""
Row shuffling inside each partition.
"""

from __future__ import annotations

from typing import Optional

from partsampler.data.frame import Partition, PartitionedFrame
from partsampler.execution import PartitionExecutor, PartitionTask, PartitionWriter
from partsampler.utils.random import partition_rng, shuffle_indices


class PartitionShuffle(PartitionTask):
    """Emit the rows of every partition in a random order.

    Rows never cross a partition boundary. The permutation of a partition
    is drawn from a stream seeded by ``(seed, partition index)``.
    """

    emits_rows = True

    def __init__(self, seed: int) -> None:
        self.seed = seed

    def map(self, partition: Partition, writer: Optional[PartitionWriter]) -> None:
        rng = partition_rng(self.seed, partition.index)
        writer.take(shuffle_indices(partition.length, rng))

def shuffle_per_partition(
    frame: PartitionedFrame,
    seed: int,
    executor: Optional[PartitionExecutor] = None,
) -> PartitionedFrame:
    """Row-wise shuffle of a frame (only shuffles rows inside of each partition).

    Args:
        frame: Input frame.
        seed: Seed of the shuffle.
        executor: Executor to use (sequential by default).

    Returns:
        Shuffled frame with the same partition boundaries, types and domains.
    """
    return (executor or PartitionExecutor()).run(PartitionShuffle(seed), frame).frame
