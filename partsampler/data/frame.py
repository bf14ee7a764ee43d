"""
Partitioned columnar frame.

A PartitionedFrame is an ordered collection of named columns sharing one row
count and one partitioning into contiguous row ranges. Partitions are the
unit of parallel work: a partition-local step only ever sees one Partition.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import Any, Optional

import numpy as np
import polars as pl

from partsampler.core.exceptions import FrameReleasedError, InvalidInputError
from partsampler.data.column import Column
from partsampler.data.types import ColumnKey, ColumnType, Domain, Offsets


def even_offsets(n_rows: int, n_partitions: int) -> np.ndarray:
    """Split ``n_rows`` rows into ``n_partitions`` contiguous, near-equal ranges.

    Args:
        n_rows: Total number of rows.
        n_partitions: Number of partitions (at least 1).

    Returns:
        int64 array of ``n_partitions + 1`` boundaries starting at 0 and ending at n_rows.

    Example:
        >>> even_offsets(10, 3).tolist()
        [0, 4, 7, 10]
    """
    if n_partitions < 1:
        raise InvalidInputError(f"n_partitions must be >= 1, got {n_partitions}")
    base, extra = divmod(n_rows, n_partitions)
    sizes = np.full(n_partitions, base, dtype=np.int64)
    sizes[:extra] += 1
    return np.concatenate([[0], np.cumsum(sizes)]).astype(np.int64)

class Partition:
    """A contiguous row range of a frame, processed independently.

    Values are read-only views into the parent frame's columns.

    Attributes:
        index: Position of the partition in the frame.
        start: Global row index of the first row.
        length: Number of rows.
    """

    def __init__(self, frame: PartitionedFrame, index: int, start: int, length: int) -> None:
        self.index = index
        self.start = start
        self.length = length
        self._names = frame.names
        self._values = [c.values[start:start + length] for c in frame.columns]

    def __len__(self) -> int:
        return self.length

    def __repr__(self) -> str:
        return f"Partition(index={self.index}, start={self.start}, length={self.length})"

    @property
    def n_columns(self) -> int:
        return len(self._values)

    def values(self, key: ColumnKey) -> np.ndarray:
        """Get the values of one column for this partition's rows."""
        return self._values[self._position(key)]

    def is_missing(self, key: ColumnKey) -> np.ndarray:
        return np.isnan(self.values(key))

    def global_rows(self) -> np.ndarray:
        """Global row indices covered by the partition."""
        return np.arange(self.start, self.start + self.length, dtype=np.int64)

    def _position(self, key: ColumnKey) -> int:
        if isinstance(key, (int, np.integer)):
            return int(key)
        return self._names.index(key)

class PartitionedFrame:
    """Columns sharing one row count and one set of partition boundaries.

    Example:
        >>> frame = PartitionedFrame.from_arrays(
        ...     {"x": [1.0, 2.0, 3.0], "y": ["a", "b", "a"]},
        ...     categorical=["y"],
        ...     n_partitions=2,
        ... )
        >>> frame.n_rows, frame.n_partitions
        (3, 2)
    """

    def __init__(self, columns: Sequence[Column], offsets: Optional[Offsets] = None) -> None:
        columns = list(columns)
        names = [c.name for c in columns]
        if len(set(names)) != len(names):
            raise InvalidInputError(f"Duplicate column names: {names}")

        n_rows = len(columns[0]) if columns else 0
        for col in columns:
            if len(col) != n_rows:
                raise InvalidInputError(
                    f"Column '{col.name}' has {len(col)} rows, expected {n_rows}"
                )

        if offsets is None:
            offsets = even_offsets(n_rows, 1)
        offsets = np.asarray(offsets, dtype=np.int64)
        if offsets.ndim != 1 or offsets.size < 2:
            raise InvalidInputError("Partition offsets need at least two boundaries")
        if offsets[0] != 0 or offsets[-1] != n_rows:
            raise InvalidInputError(
                f"Partition offsets must start at 0 and end at {n_rows}, got {offsets.tolist()}"
            )
        if np.any(np.diff(offsets) < 0):
            raise InvalidInputError("Partition offsets must be non-decreasing")

        self._columns: Optional[list[Column]] = columns
        self._offsets = offsets
        self._n_rows = n_rows

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_arrays(
        cls,
        data: Mapping[str, Any],
        categorical: Sequence[str] = (),
        domains: Optional[Mapping[str, Sequence[str]]] = None,
        n_partitions: int = 1,
        offsets: Optional[Offsets] = None,
    ) -> PartitionedFrame:
        """Build a frame from a mapping of column name to values.

        Args:
            data: Column name -> sequence of values.
            categorical: Names of columns to encode as categorical.
            domains: Optional explicit domains for categorical columns.
            n_partitions: Number of even partitions (ignored when offsets is given).
            offsets: Explicit partition boundaries.

        Returns:
            PartitionedFrame.
        """
        domains = domains or {}
        columns = []
        for name, values in data.items():
            if name in categorical:
                columns.append(Column.categorical(name, list(values), domains.get(name)))
            else:
                columns.append(Column(name, values))
        n_rows = len(columns[0]) if columns else 0
        if offsets is None:
            offsets = even_offsets(n_rows, n_partitions)
        return cls(columns, offsets)

    @classmethod
    def from_polars(
        cls,
        df: pl.DataFrame,
        n_partitions: int = 1,
        offsets: Optional[Offsets] = None,
    ) -> PartitionedFrame:
        """Build a frame from a polars DataFrame.

        String, Categorical and Enum columns become categorical columns. Enum
        columns keep their category order, the others use sorted labels. Nulls
        become missing values.
        """
        columns = []
        for series in df.get_columns():
            dtype = series.dtype
            if isinstance(dtype, pl.Enum):
                domain = [str(c) for c in dtype.categories.to_list()]
                columns.append(Column.categorical(series.name, series.cast(pl.String).to_list(), domain))
            elif dtype == pl.Categorical or dtype == pl.String:
                columns.append(Column.categorical(series.name, series.cast(pl.String).to_list()))
            elif dtype.is_numeric() or dtype == pl.Boolean:
                values = series.cast(pl.Float64).fill_null(np.nan).to_numpy()
                columns.append(Column(series.name, values))
            else:
                raise InvalidInputError(f"Unsupported dtype {dtype} for column '{series.name}'")
        if offsets is None:
            offsets = even_offsets(df.height, n_partitions)
        return cls(columns, offsets)

    def to_polars(self) -> pl.DataFrame:
        """Convert to a polars DataFrame (categorical columns become Enum)."""
        series = []
        for col in self.columns:
            if col.is_categorical:
                series.append(pl.Series(col.name, col.labels(), dtype=pl.Enum(list(col.domain))))
            else:
                series.append(pl.Series(col.name, col.values, dtype=pl.Float64).fill_nan(None))
        return pl.DataFrame(series)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def columns(self) -> list[Column]:
        if self._columns is None:
            raise FrameReleasedError("Frame has been released")
        return self._columns

    @property
    def is_released(self) -> bool:
        return self._columns is None

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.columns]

    @property
    def n_rows(self) -> int:
        return self._n_rows

    @property
    def n_columns(self) -> int:
        return len(self.columns)

    @property
    def n_partitions(self) -> int:
        return len(self._offsets) - 1

    @property
    def offsets(self) -> np.ndarray:
        return self._offsets.copy()

    def __len__(self) -> int:
        return self._n_rows

    def __repr__(self) -> str:
        state = "released" if self.is_released else f"columns={self.names}"
        return f"PartitionedFrame(rows={self._n_rows}, partitions={self.n_partitions}, {state})"

    def types(self) -> list[ColumnType]:
        return [c.ctype for c in self.columns]

    def domains(self) -> list[Optional[Domain]]:
        return [c.domain for c in self.columns]

    def find(self, key: ColumnKey) -> int:
        """Get the position of a column by name or position."""
        if isinstance(key, (int, np.integer)):
            if not 0 <= key < self.n_columns:
                raise InvalidInputError(f"Column index {key} out of range")
            return int(key)
        try:
            return self.names.index(key)
        except ValueError:
            raise InvalidInputError(f"Unknown column '{key}'") from None

    def column(self, key: ColumnKey) -> Column:
        return self.columns[self.find(key)]

    def value(self, key: ColumnKey, row: int) -> Optional[float]:
        """Read one value, None when missing."""
        v = self.column(key).values[row]
        return None if np.isnan(v) else float(v)

    def select(self, keys: Sequence[ColumnKey]) -> PartitionedFrame:
        """Frame view over a subset of columns with the same partitioning."""
        return PartitionedFrame([self.column(k) for k in keys], self._offsets)

    def partition_bounds(self) -> list[tuple[int, int]]:
        """(start, end) global row range of every partition."""
        return [(int(s), int(e)) for s, e in zip(self._offsets[:-1], self._offsets[1:])]

    def partition(self, index: int) -> Partition:
        start, end = int(self._offsets[index]), int(self._offsets[index + 1])
        return Partition(self, index, start, end - start)

    def partitions(self) -> Iterator[Partition]:
        for i in range(self.n_partitions):
            yield self.partition(i)

    def partition_lengths(self) -> np.ndarray:
        return np.diff(self._offsets)

    def release(self) -> None:
        """Drop the column data. Safe to call more than once."""
        self._columns = None
