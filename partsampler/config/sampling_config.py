"""Sampling configuration for partsampler.

Provides a single, typed entry point for retry bounds, seed offsets and
parallelism. Defaults reproduce the reference behaviour of the samplers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from partsampler.core.exceptions import InvalidInputError

if TYPE_CHECKING:
    from partsampler.execution import PartitionExecutor

ReplicationMode = Literal["fractional", "poisson"]

# Offset between the stratification seed and the seed of the final shuffle
SHUFFLE_SEED_OFFSET = 0x580FF13

@dataclass
class SamplingConfig:
    """Configuration for the samplers.

    Attributes:
        max_stratified_retries: Number of times stratified replication is
            re-run with ``seed + 1`` when a class ends up with no rows.
        max_uniform_retries: Cap on uniform sampling retries after an empty
            result. None retries until at least one row is returned.
        shuffle_seed_offset: Added to the stratification seed to seed the
            final per-partition shuffle.
        replication: Per-row replication count distribution. "fractional"
            emits ``floor(r)`` copies plus one with probability ``frac(r)``.
            "poisson" is reserved and raises NotImplementedError.
        n_jobs: Worker threads of the default executor (-1 = all CPUs).
    """

    max_stratified_retries: int = 10
    max_uniform_retries: int | None = None
    shuffle_seed_offset: int = SHUFFLE_SEED_OFFSET
    replication: ReplicationMode = "fractional"
    n_jobs: int = 1

    def __post_init__(self) -> None:
        if self.max_stratified_retries < 0:
            raise InvalidInputError(
                f"max_stratified_retries must be >= 0, got {self.max_stratified_retries}"
            )
        if self.max_uniform_retries is not None and self.max_uniform_retries < 0:
            raise InvalidInputError(
                f"max_uniform_retries must be >= 0 or None, got {self.max_uniform_retries}"
            )
        if self.replication not in ("fractional", "poisson"):
            raise InvalidInputError(f"Unknown replication mode '{self.replication}'")
        if self.n_jobs == 0 or self.n_jobs < -1:
            raise InvalidInputError(f"n_jobs must be -1 or >= 1, got {self.n_jobs}")

    def executor(self) -> PartitionExecutor:
        """Build the default executor for this configuration."""
        from partsampler.execution import PartitionExecutor

        return PartitionExecutor(n_jobs=self.n_jobs)
