"""
Tests for PartitionExecutor and PartitionWriter.
"""

import numpy as np
import pytest

from partsampler.core.exceptions import InvalidInputError
from partsampler.data import PartitionedFrame
from partsampler.execution import PartitionExecutor, PartitionTask, PartitionWriter


class SumTask(PartitionTask):
    """Sum of the first column."""

    def map(self, partition, writer):
        return float(partition.values(0).sum())

    def reduce(self, left, right):
        return left + right

class OrderTask(PartitionTask):
    """List of partition indices, merged by concatenation."""

    def map(self, partition, writer):
        return [partition.index]

    def reduce(self, left, right):
        return left + right

class EvenRowsTask(PartitionTask):
    """Emit rows whose first column is even."""

    emits_rows = True

    def map(self, partition, writer):
        writer.take(np.flatnonzero(partition.values(0) % 2 == 0))

class FailingTask(PartitionTask):
    def map(self, partition, writer):
        if partition.index == 2:
            raise InvalidInputError("bad partition")
        return 1

@pytest.fixture
def frame():
    return PartitionedFrame.from_arrays(
        {"x": np.arange(100, dtype=float), "y": ["a", "b"] * 50},
        categorical=["y"],
        n_partitions=7,
    )

class TestPartitionExecutor:
    """Tests for the fork-join executor."""

    @pytest.mark.parametrize("n_jobs", [1, 4, -1])
    def test_merge(self, frame, n_jobs):
        """Merged result does not depend on the number of workers."""
        result = PartitionExecutor(n_jobs=n_jobs).run(SumTask(), frame)
        assert result.result == float(np.arange(100).sum())
        assert result.frame is None

    def test_tree_reduce_keeps_partition_order(self, frame):
        """Pairwise merges combine neighbouring partitions."""
        assert PartitionExecutor(n_jobs=3).run(OrderTask(), frame).result == list(range(7))

    def test_emitted_frame(self, frame):
        """Emitted rows keep their partition, column order, types and domains."""
        out = PartitionExecutor().run(EvenRowsTask(), frame).frame

        assert out.n_rows == 50
        assert out.n_partitions == frame.n_partitions
        assert out.names == frame.names
        assert out.types() == frame.types()
        assert out.domains() == frame.domains()
        for (start, end), part in zip(frame.partition_bounds(), out.partitions()):
            values = part.values("x")
            assert np.all((values >= start) & (values < end))
            assert np.all(values % 2 == 0)
        # rows are emitted as a unit
        assert out.column("y").labels() == ["a"] * 50

    def test_parallel_matches_sequential(self, frame):
        sequential = PartitionExecutor(n_jobs=1).run(EvenRowsTask(), frame).frame
        parallel = PartitionExecutor(n_jobs=4).run(EvenRowsTask(), frame).frame
        assert sequential.offsets.tolist() == parallel.offsets.tolist()
        assert np.array_equal(sequential.column("x").values, parallel.column("x").values)

    def test_column_selection(self, frame):
        """Only the selected columns are passed to the task."""
        out = PartitionExecutor().run(EvenRowsTask(), frame, columns=["x"]).frame
        assert out.names == ["x"]

    def test_no_partial_results(self, frame):
        assert PartitionExecutor().run(EvenRowsTask(), frame).result is None

    @pytest.mark.parametrize("n_jobs", [1, 4])
    def test_errors_propagate(self, frame, n_jobs):
        with pytest.raises(InvalidInputError):
            PartitionExecutor(n_jobs=n_jobs).run(FailingTask(), frame)

    @pytest.mark.parametrize("n_jobs", [0, -2])
    def test_invalid_n_jobs(self, n_jobs):
        with pytest.raises(InvalidInputError):
            PartitionExecutor(n_jobs=n_jobs)

    def test_empty_frame(self):
        """Empty partitions are still mapped."""
        frame = PartitionedFrame.from_arrays({"x": []}, n_partitions=3)
        result = PartitionExecutor().run(SumTask(), frame)
        assert result.result == 0.0
        out = PartitionExecutor().run(EvenRowsTask(), frame).frame
        assert out.n_rows == 0
        assert out.n_partitions == 3

class TestPartitionWriter:
    """Tests for the per-partition output buffer."""

    def test_take_replicates(self, frame):
        writer = PartitionWriter(frame.partition(0))
        writer.take([0, 0, 2])
        x, y = writer.finish()
        assert len(writer) == 3
        assert x.tolist() == [0.0, 0.0, 2.0]
        assert y.tolist() == [0.0, 0.0, 0.0]

    def test_append_checks_blocks(self, frame):
        writer = PartitionWriter(frame.partition(0))
        with pytest.raises(InvalidInputError):
            writer.append([np.zeros(2)])
        with pytest.raises(InvalidInputError):
            writer.append([np.zeros(2), np.zeros(3)])

    def test_finish_empty(self, frame):
        writer = PartitionWriter(frame.partition(0))
        assert [len(a) for a in writer.finish()] == [0, 0]
