"""
Configuration module for partsampler.

Provides the SamplingConfig dataclass for retry bounds, seed offsets and
parallelism settings.
"""

from partsampler.config.sampling_config import SHUFFLE_SEED_OFFSET, SamplingConfig

__all__ = [
    'SamplingConfig',
    'SHUFFLE_SEED_OFFSET',
]
