"""
Partitioned execution: partition-local tasks, fork-join executor, merge.
"""

from .executor import PartitionExecutor
from .task import PartitionTask, PartitionWriter, TaskResult

__all__ = [
    "PartitionExecutor",
    "PartitionTask",
    "PartitionWriter",
    "TaskResult",
]
