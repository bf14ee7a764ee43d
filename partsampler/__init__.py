"""
partsampler - Distributed statistical resampling over partitioned columnar data.

This package provides uniform row sampling, per-partition shuffling, class
frequency estimation and class-balanced stratified resampling for frames
split into independently processed row ranges.
"""

__version__ = "0.1.0"

from .config import SamplingConfig
from .core.exceptions import FrameReleasedError, InvalidInputError, SamplingError
from .core.logging import configure_logging, get_logger
from .data import Column, ColumnType, Partition, PartitionedFrame, even_offsets
from .execution import PartitionExecutor, PartitionTask, PartitionWriter, TaskResult
from .operations import ReplaceWithConstant, fill_constant
from .sampling import (
    ClassDistribution,
    ValueDistribution,
    class_distribution,
    plan_stratified_sampling,
    sample_rows,
    sample_stratified,
    sample_stratified_with_ratios,
    shuffle_per_partition,
    value_distribution,
)

__all__ = [
    # Data model
    "Column",
    "ColumnType",
    "Partition",
    "PartitionedFrame",
    "even_offsets",

    # Execution
    "PartitionExecutor",
    "PartitionTask",
    "PartitionWriter",
    "TaskResult",

    # Sampling
    "ClassDistribution",
    "ValueDistribution",
    "class_distribution",
    "value_distribution",
    "sample_rows",
    "shuffle_per_partition",
    "plan_stratified_sampling",
    "sample_stratified",
    "sample_stratified_with_ratios",

    # Operations
    "ReplaceWithConstant",
    "fill_constant",

    # Configuration, errors, logging
    "SamplingConfig",
    "SamplingError",
    "InvalidInputError",
    "FrameReleasedError",
    "configure_logging",
    "get_logger",
]
