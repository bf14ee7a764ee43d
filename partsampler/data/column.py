"""
Column storage for partitioned frames.

A column holds one float64 value per row. Missing values are NaN.
Categorical columns store the integer index of the label in their domain.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

import numpy as np

from partsampler.core.exceptions import InvalidInputError
from partsampler.data.types import ColumnData, ColumnType, Domain


class Column:
    """A named column of values with a type and an optional categorical domain.

    Attributes:
        name: Column name.
        values: 1-D float64 array, NaN marks a missing value.
        ctype: ColumnType of the column.
        domain: Ordered labels for categorical columns, None otherwise.
    """

    __slots__ = ("name", "values", "ctype", "domain")

    def __init__(
        self,
        name: str,
        values: ColumnData,
        ctype: ColumnType = ColumnType.NUMERIC,
        domain: Optional[Sequence[str]] = None,
        validate: bool = True,
    ) -> None:
        self.name = name
        self.values = np.asarray(values, dtype=np.float64)
        self.ctype = ColumnType(ctype)
        self.domain: Optional[Domain] = tuple(str(d) for d in domain) if domain is not None else None

        if self.values.ndim != 1:
            raise InvalidInputError(f"Column '{name}' must be 1-D, got shape {self.values.shape}")
        if self.ctype is ColumnType.CATEGORICAL and self.domain is None:
            raise InvalidInputError(f"Categorical column '{name}' requires a domain")
        if self.ctype is ColumnType.NUMERIC and self.domain is not None:
            raise InvalidInputError(f"Numeric column '{name}' cannot have a domain")
        if validate and self.ctype is ColumnType.CATEGORICAL:
            self._check_codes()

    @classmethod
    def categorical(cls, name: str, labels: Sequence, domain: Optional[Sequence[str]] = None) -> Column:
        """Build a categorical column from raw labels.

        Args:
            name: Column name.
            labels: Labels (any hashable, None/NaN for missing).
            domain: Explicit domain; defaults to the sorted distinct labels.

        Returns:
            Categorical Column with labels encoded as domain indices.
        """
        present = [lab for lab in labels if not _is_missing(lab)]
        if domain is None:
            domain = sorted({str(lab) for lab in present})
        lookup = {str(label): i for i, label in enumerate(domain)}
        codes = np.empty(len(labels), dtype=np.float64)
        for i, lab in enumerate(labels):
            if _is_missing(lab):
                codes[i] = np.nan
            elif str(lab) in lookup:
                codes[i] = lookup[str(lab)]
            else:
                raise InvalidInputError(f"Label {lab!r} of column '{name}' is not in its domain")
        return cls(name, codes, ColumnType.CATEGORICAL, domain)

    @property
    def is_categorical(self) -> bool:
        return self.ctype is ColumnType.CATEGORICAL

    @property
    def cardinality(self) -> int:
        """Number of classes of a categorical column (0 for numeric columns)."""
        return len(self.domain) if self.domain is not None else 0

    def __len__(self) -> int:
        return len(self.values)

    def __repr__(self) -> str:
        return f"Column(name={self.name!r}, ctype={self.ctype.value}, rows={len(self.values)})"

    def is_missing(self) -> np.ndarray:
        return np.isnan(self.values)

    def labels(self) -> list[Optional[str]]:
        """Decode a categorical column back to its labels (None for missing)."""
        if self.domain is None:
            raise InvalidInputError(f"Column '{self.name}' is not categorical")
        return [None if np.isnan(v) else self.domain[int(v)] for v in self.values]

    def with_values(self, values: np.ndarray) -> Column:
        """Create a column of the same name, type and domain holding new values."""
        return Column(self.name, values, self.ctype, self.domain, validate=False)

    def _check_codes(self) -> None:
        codes = self.values[~np.isnan(self.values)]
        if codes.size == 0:
            return
        if not np.all(np.mod(codes, 1) == 0):
            raise InvalidInputError(f"Categorical column '{self.name}' holds non-integral codes")
        if codes.min() < 0 or codes.max() >= len(self.domain):
            raise InvalidInputError(
                f"Categorical column '{self.name}' holds codes outside [0, {len(self.domain)})"
            )

def _is_missing(value) -> bool:
    if value is None:
        return True
    return isinstance(value, float) and np.isnan(value)
