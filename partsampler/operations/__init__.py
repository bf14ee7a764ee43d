"""
Partition-local operations that are not samplers.
"""

from .fill import ReplaceWithConstant, fill_constant

__all__ = [
    "ReplaceWithConstant",
    "fill_constant",
]
