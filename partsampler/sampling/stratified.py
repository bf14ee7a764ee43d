"""
Stratified sampling for classifiers.

Two phases:

1. Planning (:func:`plan_stratified_sampling`): a single pass over the frame
   computes the class histogram, derives per-class sampling ratios (balanced
   automatically when the caller passes none), applies the oversampling
   policy and caps the expected output at ``max_rows``.
2. Replication (:func:`sample_stratified_with_ratios`): every row with a
   label is emitted ``floor(r)`` times plus once more with probability
   ``frac(r)``, ``r`` being its class ratio. The draw only depends on the
   seed and the global row index. The output histogram is checked and the
   step is re-run with ``seed + 1`` while a class has no rows, up to
   ``SamplingConfig.max_stratified_retries`` times. The result is finally
   shuffled inside each partition so that replicated rows are not clustered.

Weights only feed the class histogram used for planning. Rows are replicated
with uniform probability within a class whether or not weights are given.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

import numpy as np

from partsampler.config import SamplingConfig
from partsampler.core.exceptions import InvalidInputError
from partsampler.core.logging import LogContext, get_logger
from partsampler.data.column import Column
from partsampler.data.frame import Partition, PartitionedFrame
from partsampler.data.types import ColumnKey
from partsampler.execution import PartitionExecutor, PartitionTask, PartitionWriter
from partsampler.sampling.distribution import ClassDistribution
from partsampler.sampling.shuffle import shuffle_per_partition
from partsampler.utils.random import row_uniforms

logger = get_logger(__name__)

_MAX_RATIO = float(2**63)


@dataclass
class StratifiedPlan:
    """Outcome of the planning phase.

    Attributes:
        ratios: Expected number of output rows per input row, per class.
        dist: Class histogram of the input (weighted when weights were given).
        expected_rows: Expected output size before capping.
        target_rows: Expected output size after capping at max_rows.
        max_rows: Effective row budget (at least the number of classes).
    """

    ratios: np.ndarray
    dist: np.ndarray
    expected_rows: float
    target_rows: int
    max_rows: int

class StratifiedReplication(PartitionTask):
    """Emit each labelled row a random number of times given by its class ratio.

    Rows with a missing label are dropped. Copies of a row are emitted
    consecutively.
    """

    emits_rows = True

    def __init__(self, label_index: int, ratios: np.ndarray, seed: int, replication: str = "fractional") -> None:
        self.label_index = label_index
        self.ratios = ratios
        self.seed = seed
        self.replication = replication

    def map(self, partition: Partition, writer: Optional[PartitionWriter]) -> None:
        if self.replication == "poisson":
            raise NotImplementedError("Poisson-distributed replication counts are not implemented")

        labels = partition.values(self.label_index)
        rows = np.flatnonzero(~np.isnan(labels))
        codes = labels[rows].astype(np.int64)
        if codes.size and (codes.min() < 0 or codes.max() >= self.ratios.size):
            raise InvalidInputError(
                f"Label codes must lie in [0, {self.ratios.size}) in partition {partition.index}"
            )

        draws = row_uniforms(self.seed, partition.start, partition.length)[rows]
        ratios = self.ratios[codes]
        whole = np.floor(ratios)
        reps = whole.astype(np.int64) + (draws < ratios - whole)
        writer.take(np.repeat(rows, reps))

def _check_replication(config: SamplingConfig) -> None:
    if config.replication == "poisson":
        raise NotImplementedError("Poisson-distributed replication counts are not implemented")

def _label_column(frame: PartitionedFrame, label: ColumnKey) -> Column:
    column = frame.column(label)
    if not column.is_categorical:
        raise InvalidInputError(f"Label column '{column.name}' must be categorical")
    return column

def _copy_ratios(sampling_ratios: Optional[Sequence[float]], n_classes: int) -> np.ndarray:
    if sampling_ratios is None:
        return np.zeros(n_classes)
    ratios = np.array(sampling_ratios, dtype=np.float64)
    if ratios.ndim != 1 or ratios.size != n_classes:
        raise InvalidInputError(
            f"Expected {n_classes} sampling ratios (one per class), got {ratios.size}"
        )
    if not np.isfinite(ratios).all() or (ratios < 0).any():
        raise InvalidInputError(f"Sampling ratios must be finite non-negative numbers, got {ratios.tolist()}")
    # whole part of a ratio becomes an int64 repeat count
    if (ratios >= _MAX_RATIO).any():
        raise InvalidInputError(f"Sampling ratios must be below {_MAX_RATIO:.0f}, got {ratios.tolist()}")
    return ratios

def plan_stratified_sampling(
    frame: PartitionedFrame,
    label: ColumnKey,
    max_rows: int,
    weights: Optional[ColumnKey] = None,
    sampling_ratios: Optional[Sequence[float]] = None,
    allow_oversampling: bool = True,
    verbose: bool = False,
    executor: Optional[PartitionExecutor] = None,
) -> StratifiedPlan:
    """Compute the per-class sampling ratios of a stratified sample.

    Args:
        frame: Input frame.
        label: Label column (must be categorical).
        max_rows: Maximum number of rows of the sample.
        weights: Optional weight column, only used to estimate class frequencies.
        sampling_ratios: Requested ratios per class, in domain order. None or
            all zeros computes ratios that balance the classes. The caller's
            sequence is never modified.
        allow_oversampling: Allow replicating rows of minority classes.
        verbose: Log per-class details.
        executor: Executor to use.

    Returns:
        StratifiedPlan.

    Raises:
        InvalidInputError: Non-categorical label, wrong number of ratios, or
            an expected row count that is not finite (e.g. an empty class when
            balancing automatically).
    """
    column = _label_column(frame, label)
    domain = column.domain
    n_classes = len(domain)
    if max_rows < n_classes:
        logger.warning(
            "Attempting to do stratified sampling to fewer samples than there are class labels - "
            "automatically increasing to #rows == #labels (%d).", n_classes,
        )
        max_rows = n_classes

    ratios = _copy_ratios(sampling_ratios, n_classes)
    dist = ClassDistribution(n_classes).compute(frame, label, weights, executor)

    logger.info(
        "Doing stratified sampling for data set containing %d rows from %d classes. Oversampling: %s",
        frame.n_rows, n_classes, "on" if allow_oversampling else "off",
    )
    if verbose:
        for name, count in zip(domain, dist):
            prior = count / frame.n_rows if frame.n_rows else float("nan")
            logger.info("Class %s: count: %s prior: %.6g", name, count, prior)

    if n_classes and not ratios.any():
        # inverse prior scaled to a uniform target
        with np.errstate(divide="ignore", invalid="ignore"):
            ratios = (frame.n_rows / n_classes) / dist
        # majority class needs the smallest factor; give it ratio 1.0
        inv_scale = ratios.min()
        if np.isfinite(inv_scale) and inv_scale > 0:
            ratios = ratios / inv_scale

    if not allow_oversampling:
        ratios = np.minimum(ratios, 1.0)

    with np.errstate(invalid="ignore"):
        expected = float(np.sum(ratios * dist))
    if not np.isfinite(expected):
        raise InvalidInputError("Error during sampling - too few points?")

    target = min(max_rows, int(np.floor(expected + 0.5)))
    logger.info(
        "Stratified sampling to a total of %s rows%s",
        f"{target:,}", " (limited by max_rows)." if target < expected else ".",
    )
    if target < expected:
        ratios = ratios * (target / expected)
        if verbose:
            logger.info(
                "Downsampling majority class by %.6g to limit number of rows to %s",
                target / expected, f"{max_rows:,}",
            )
    for name, ratio in zip(domain, ratios):
        logger.info("Class '%s' sampling ratio: %.6g", name, ratio)

    return StratifiedPlan(
        ratios=ratios,
        dist=dist,
        expected_rows=expected,
        target_rows=target,
        max_rows=max_rows,
    )

def sample_stratified(
    frame: PartitionedFrame,
    label: ColumnKey,
    max_rows: int,
    seed: int,
    weights: Optional[ColumnKey] = None,
    sampling_ratios: Optional[Sequence[float]] = None,
    allow_oversampling: bool = True,
    verbose: bool = False,
    config: Optional[SamplingConfig] = None,
    executor: Optional[PartitionExecutor] = None,
) -> PartitionedFrame:
    """Stratified sampling for classifiers.

    Args:
        frame: Input frame.
        label: Label column (must be categorical).
        max_rows: Maximum number of rows of the returned frame.
        seed: RNG seed for sampling.
        weights: Optional weight column. Only used for the class frequencies;
            sampling itself ignores weights.
        sampling_ratios: Requested ratios per class, in domain order. None or
            all zeros balances the classes.
        allow_oversampling: Allow oversampling of minority classes.
        verbose: Log per-class details.
        config: Sampling configuration.
        executor: Executor to use, defaults to ``config.executor()``.

    Returns:
        Sampled frame with approximately the same number of rows per class
        (or as given by the requested ratios), shuffled inside each partition.
    """
    config = config or SamplingConfig()
    executor = executor or config.executor()
    _check_replication(config)
    with LogContext("stratified", seed=seed):
        plan = plan_stratified_sampling(
            frame, label, max_rows,
            weights=weights,
            sampling_ratios=sampling_ratios,
            allow_oversampling=allow_oversampling,
            verbose=verbose,
            executor=executor,
        )
        return sample_stratified_with_ratios(
            frame, label, plan.ratios, seed,
            weights=weights,
            verbose=verbose,
            config=config,
            executor=executor,
        )

def sample_stratified_with_ratios(
    frame: PartitionedFrame,
    label: ColumnKey,
    sampling_ratios: Sequence[float],
    seed: int,
    weights: Optional[ColumnKey] = None,
    verbose: bool = False,
    config: Optional[SamplingConfig] = None,
    executor: Optional[PartitionExecutor] = None,
) -> PartitionedFrame:
    """Stratified sampling with caller-supplied per-class ratios.

    Args:
        frame: Input frame.
        label: Label column (must be categorical).
        sampling_ratios: Expected output rows per input row, per class, in domain order.
        seed: RNG seed.
        weights: Optional weight column, only reported in verbose output.
        verbose: Log the resulting class distribution.
        config: Sampling configuration.
        executor: Executor to use, defaults to ``config.executor()``.

    Returns:
        Stratified frame shuffled inside each partition. When retries are
        exhausted some classes may still have no rows.
    """
    config = config or SamplingConfig()
    executor = executor or config.executor()
    _check_replication(config)
    column = _label_column(frame, label)
    domain = column.domain
    n_classes = len(domain)
    ratios = _copy_ratios(sampling_ratios, n_classes)

    # no training labels, nothing to stratify
    if n_classes == 0:
        return frame

    label_index = frame.find(label)
    with LogContext("replicate", seed=seed):
        attempt = 0
        current_seed = seed
        while True:
            task = StratifiedReplication(label_index, ratios, current_seed, config.replication)
            with LogContext.attempt(attempt, current_seed):
                sampled = executor.run(task, frame).frame
                dist = ClassDistribution(n_classes).compute(sampled, label_index, executor=executor)
                if verbose:
                    _log_outcome(sampled, label_index, weights, domain, ratios, dist, executor)

            if dist.min() > 0 or attempt >= config.max_stratified_retries:
                break
            logger.info("Re-doing stratified sampling because not all classes were represented (unlucky draw).")
            sampled.release()
            attempt += 1
            current_seed += 1

        if dist.min() == 0:
            missing = [domain[i] for i in np.flatnonzero(dist == 0)]
            logger.warning(
                "Classes %s have no rows after %d stratified sampling attempts.", missing, attempt + 1,
            )

        shuffled = shuffle_per_partition(sampled, current_seed + config.shuffle_seed_offset, executor)
        sampled.release()
        return shuffled

def _log_outcome(
    sampled: PartitionedFrame,
    label_index: int,
    weights: Optional[ColumnKey],
    domain: Sequence[str],
    ratios: np.ndarray,
    dist: np.ndarray,
    executor: PartitionExecutor,
) -> None:
    total = dist.sum()
    logger.info("After stratified sampling: %d rows.", total)
    if weights is not None:
        weighted = ClassDistribution(len(domain)).compute(sampled, label_index, weights, executor)
    for i, name in enumerate(domain):
        relative = dist[i] / total * len(domain) if total else float("nan")
        message = f"Class {name}: count: {dist[i]:g} sampling ratio: {ratios[i]:.6g} actual relative frequency: {relative:.6g}"
        if weights is not None:
            message += f" weighted count: {weighted[i]:.6g}"
        logger.info(message)
