"""
Uniform row sampling to an approximate row budget.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from partsampler.config import SamplingConfig
from partsampler.core.logging import LogContext, get_logger
from partsampler.data.frame import Partition, PartitionedFrame
from partsampler.execution import PartitionExecutor, PartitionTask, PartitionWriter
from partsampler.utils.random import row_uniforms

logger = get_logger(__name__)


class UniformRowSelection(PartitionTask):
    """Keep each row independently with probability ``fraction``.

    The draw of a row depends only on the seed and its global row index. A
    non-empty partition that would keep nothing keeps its last row.
    """

    emits_rows = True

    def __init__(self, fraction: float, seed: int) -> None:
        self.fraction = fraction
        self.seed = seed

    def map(self, partition: Partition, writer: Optional[PartitionWriter]) -> None:
        keep = row_uniforms(self.seed, partition.start, partition.length) < self.fraction
        if partition.length and not keep.any():
            keep[-1] = True
        writer.take(np.flatnonzero(keep))

def sample_rows(
    frame: PartitionedFrame,
    rows: int,
    seed: int,
    config: Optional[SamplingConfig] = None,
    executor: Optional[PartitionExecutor] = None,
) -> PartitionedFrame:
    """Sample approximately ``rows`` rows from ``frame``.

    Can be unlucky for small fractions: an empty result is retried with
    ``seed + 1`` until at least one row is returned (or until
    ``config.max_uniform_retries`` is exhausted).

    Args:
        frame: Input frame.
        rows: Approximate number of rows to keep, across all partitions.
        seed: Seed for the per-row draws.
        config: Sampling configuration.
        executor: Executor to use, defaults to ``config.executor()``.

    Returns:
        The sampled frame, or ``frame`` itself when no sampling is needed.
    """
    config = config or SamplingConfig()
    executor = executor or config.executor()

    fraction = rows / frame.n_rows if rows > 0 and frame.n_rows > 0 else 1.0
    if fraction >= 1.0:
        return frame

    with LogContext("uniform", seed=seed):
        attempt = 0
        current_seed = seed
        while True:
            with LogContext.attempt(attempt, current_seed):
                sampled = executor.run(UniformRowSelection(fraction, current_seed), frame).frame
            if sampled.n_rows > 0:
                return sampled

            logger.warning(
                "You asked for %d rows (out of %d), but you got none (seed=%d).",
                rows, frame.n_rows, current_seed,
            )
            if config.max_uniform_retries is not None and attempt >= config.max_uniform_retries:
                logger.error(
                    "Giving up uniform sampling after %d retries; returning an empty frame.",
                    attempt,
                )
                return sampled
            logger.warning("Let's try again with seed=%d.", current_seed + 1)
            sampled.release()
            attempt += 1
            current_seed += 1
