from collections.abc import Sequence
from enum import Enum
from typing import Union

import numpy as np


class ColumnType(str, Enum):
    """Storage type of a column."""

    NUMERIC = "numeric"
    CATEGORICAL = "categorical"

ColumnKey = Union[str, int]  # noqa: UP007
Domain = tuple[str, ...]
Offsets = Sequence[int] | np.ndarray
RowIndices = list[int] | np.ndarray
ColumnData = Sequence[float] | np.ndarray
