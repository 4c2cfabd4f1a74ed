# feature_effects/data/dataset.py
"""Immutable tabular dataset over which feature effects are computed.

A ``Dataset`` wraps a pandas DataFrame that is never modified after
construction. Column overrides produce lightweight views that share the
underlying frame and only remember ``{feature: constant}``; the constant
column is materialised when a model actually needs a batch.
"""

import numbers
from typing import Any, Dict, Iterable, List, Mapping, Optional

import numpy as np
import pandas as pd

from ..utils.logger import get_logger
from ..utils.exceptions import DataValidationError, NotFoundError

logger = get_logger(__name__)

# Inferred dtypes that mix numeric and non-numeric values
_MIXED_DTYPES = {'mixed', 'mixed-integer'}


def _constant_column(value: Any, n_rows: int) -> np.ndarray:
    """Build an array holding ``value`` in every one of ``n_rows`` slots."""
    dtype = None if isinstance(value, (numbers.Number, np.generic)) else object
    return np.full(n_rows, value, dtype=dtype)


class Dataset:
    """Read-only ordered collection of feature rows.

    Example:
        >>> ds = Dataset.from_records([{'x': 1, 'c': 'a'}, {'x': 2, 'c': 'b'}])
        >>> ds.row_count()
        2
        >>> forced = ds.with_column_override('x', 5)
        >>> forced.column('x').tolist()
        [5, 5]
        >>> ds.column('x').tolist()
        [1, 2]
    """

    def __init__(
        self,
        frame: pd.DataFrame,
        overrides: Optional[Mapping[str, Any]] = None,
        validate: bool = True
    ) -> None:
        """Initialize dataset.

        Args:
            frame: Fully preprocessed feature table, one row per instance
            overrides: Constant values replacing whole columns in this view
            validate: Whether to check the frame for schema consistency
        """
        if validate:
            self._validate_frame(frame)
            # Own a private copy so later caller-side edits cannot leak in
            frame = frame.reset_index(drop=True).copy()

        self._frame = frame
        self._overrides: Dict[str, Any] = dict(overrides or {})

    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> 'Dataset':
        """Create a dataset from a DataFrame."""
        if not isinstance(frame, pd.DataFrame):
            raise DataValidationError(
                f"Expected a pandas DataFrame, got {type(frame).__name__}",
                error_code="INVALID_FRAME_TYPE"
            )
        return cls(frame)

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> 'Dataset':
        """Create a dataset from a sequence of ``{feature: value}`` mappings.

        Raises:
            DataValidationError: If rows are empty or disagree on feature names
        """
        records = list(records)
        if not records:
            raise DataValidationError(
                "Cannot build a dataset from zero records",
                error_code="EMPTY_RECORDS"
            )

        columns = list(records[0].keys())
        expected = set(columns)
        for i, record in enumerate(records):
            if set(record.keys()) != expected:
                raise DataValidationError(
                    f"Row {i} has features {sorted(record.keys())}, expected {sorted(expected)}",
                    error_code="INCONSISTENT_FEATURES",
                    context={'row': i}
                )

        return cls(pd.DataFrame.from_records(records, columns=columns))

    @staticmethod
    def _validate_frame(frame: pd.DataFrame) -> None:
        """Check feature names are unique strings and columns are type-consistent."""
        if frame.columns.duplicated().any():
            duplicates = sorted(set(frame.columns[frame.columns.duplicated()]))
            raise DataValidationError(
                f"Duplicate feature names: {duplicates}",
                error_code="DUPLICATE_FEATURES",
                context={'features': duplicates}
            )

        for name in frame.columns:
            if not isinstance(name, str):
                raise DataValidationError(
                    f"Feature names must be strings, got {name!r}",
                    error_code="INVALID_FEATURE_NAME",
                    context={'feature': repr(name)}
                )
            inferred = pd.api.types.infer_dtype(frame[name], skipna=True)
            if inferred in _MIXED_DTYPES:
                raise DataValidationError(
                    f"Feature '{name}' mixes numeric and non-numeric values",
                    error_code="MIXED_FEATURE_TYPES",
                    context={'feature': name, 'inferred_dtype': inferred}
                )

    def _require(self, name: str) -> None:
        if name not in self._frame.columns:
            raise NotFoundError(
                f"Feature '{name}' not found in dataset",
                error_code="FEATURE_NOT_FOUND",
                context={'feature': name, 'available': list(self._frame.columns)}
            )

    def row_count(self) -> int:
        return len(self._frame)

    def feature_names(self) -> List[str]:
        return list(self._frame.columns)

    def dtype(self, name: str) -> Any:
        """Return the dtype of the observed (non-overridden) column."""
        self._require(name)
        return self._frame[name].dtype

    def column(self, name: str) -> np.ndarray:
        """Return the values of one feature for every row.

        Raises:
            NotFoundError: If the feature does not exist
        """
        self._require(name)
        if name in self._overrides:
            return _constant_column(self._overrides[name], self.row_count())
        return self._frame[name].to_numpy()

    def row(self, index: int) -> Dict[str, Any]:
        """Return one row as a ``{feature: value}`` mapping.

        Raises:
            NotFoundError: If the index is out of range
        """
        if not 0 <= index < self.row_count():
            raise NotFoundError(
                f"Row index {index} out of range for {self.row_count()} rows",
                error_code="ROW_NOT_FOUND",
                context={'index': index, 'row_count': self.row_count()}
            )
        values = {name: self._frame[name].iat[index] for name in self._frame.columns}
        values.update(self._overrides)
        return values

    @property
    def overrides(self) -> Dict[str, Any]:
        return dict(self._overrides)

    def with_column_override(self, name: str, value: Any) -> 'Dataset':
        """Return a view where every row has ``name`` forced to ``value``.

        The original dataset is left untouched and the underlying frame
        is shared with the new view.
        """
        return self.with_column_overrides({name: value})

    def with_column_overrides(self, overrides: Mapping[str, Any]) -> 'Dataset':
        """Return a view with several columns forced to constants."""
        for name in overrides:
            self._require(name)
        merged = dict(self._overrides)
        merged.update(overrides)
        return Dataset(self._frame, merged, validate=False)

    def to_frame(self) -> pd.DataFrame:
        """Materialise this view as a DataFrame suitable for a model.

        The returned frame owns its data; writing to it never reaches the
        dataset's own storage. Overridden ``category`` columns keep their
        categories.
        """
        frame = self._frame.copy()
        n_rows = len(frame)
        for name, value in self._overrides.items():
            column = _constant_column(value, n_rows)
            dtype = frame[name].dtype
            if isinstance(dtype, pd.CategoricalDtype) and value in dtype.categories:
                column = pd.Categorical(column, dtype=dtype)
            frame[name] = column
        return frame

    def __len__(self) -> int:
        return self.row_count()

    def __contains__(self, name: object) -> bool:
        return name in self._frame.columns

    def __repr__(self) -> str:
        override_str = f", overrides={self._overrides}" if self._overrides else ""
        return f"Dataset(rows={self.row_count()}, features={self.feature_names()}{override_str})"
