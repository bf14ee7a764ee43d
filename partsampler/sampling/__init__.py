"""
Distributed resampling over partitioned frames.

- ClassDistribution / ValueDistribution: class and value histograms
- sample_rows: uniform row sampling to a row budget
- shuffle_per_partition: row shuffle inside each partition
- sample_stratified: class-balanced stratified resampling
"""

from .distribution import ClassDistribution, ValueDistribution, class_distribution, value_distribution
from .shuffle import PartitionShuffle, shuffle_per_partition
from .stratified import (
    StratifiedPlan,
    StratifiedReplication,
    plan_stratified_sampling,
    sample_stratified,
    sample_stratified_with_ratios,
)
from .uniform import UniformRowSelection, sample_rows

__all__ = [
    # Histograms
    "ClassDistribution",
    "ValueDistribution",
    "class_distribution",
    "value_distribution",
    # Uniform sampling
    "UniformRowSelection",
    "sample_rows",
    # Shuffling
    "PartitionShuffle",
    "shuffle_per_partition",
    # Stratified sampling
    "StratifiedPlan",
    "StratifiedReplication",
    "plan_stratified_sampling",
    "sample_stratified",
    "sample_stratified_with_ratios",
]
