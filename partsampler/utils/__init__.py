"""
Utility functions for partsampler.
"""

from .random import partition_rng, row_uniform, row_uniforms, shuffle_indices

__all__ = [
    "row_uniforms",
    "row_uniform",
    "partition_rng",
    "shuffle_indices",
]
