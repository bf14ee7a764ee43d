"""
Columnar data model: columns, partitions and partitioned frames.
"""

from .column import Column
from .frame import Partition, PartitionedFrame, even_offsets
from .types import ColumnType

__all__ = [
    "Column",
    "ColumnType",
    "Partition",
    "PartitionedFrame",
    "even_offsets",
]
