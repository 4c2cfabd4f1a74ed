# tests/test_dataset.py
"""Unit tests for the immutable Dataset container."""

import numpy as np
import pandas as pd
import pytest

from feature_effects.data.dataset import Dataset
from feature_effects.utils.exceptions import DataValidationError, NotFoundError


class TestDatasetConstruction:
    """Test cases for building datasets."""

    def test_from_records(self, small_dataset):
        assert small_dataset.row_count() == 4
        assert len(small_dataset) == 4
        assert small_dataset.feature_names() == ['x', 'z', 'colour']
        assert small_dataset.column('x').tolist() == [1, 2, 2, 3]

    def test_from_frame_copies_input(self):
        frame = pd.DataFrame({'a': [1.0, 2.0], 'b': ['u', 'v']}, index=[10, 20])
        ds = Dataset.from_frame(frame)

        frame.loc[10, 'a'] = 99.0

        assert ds.column('a').tolist() == [1.0, 2.0]
        assert ds.row(0) == {'a': 1.0, 'b': 'u'}

    def test_empty_records_rejected(self):
        with pytest.raises(DataValidationError):
            Dataset.from_records([])

    def test_inconsistent_feature_names_rejected(self):
        with pytest.raises(DataValidationError) as exc_info:
            Dataset.from_records([{'a': 1, 'b': 2}, {'a': 3}])
        assert exc_info.value.context['row'] == 1

    def test_mixed_column_types_rejected(self):
        with pytest.raises(DataValidationError) as exc_info:
            Dataset.from_records([{'a': 1}, {'a': 'one'}])
        assert exc_info.value.error_code == "MIXED_FEATURE_TYPES"

    def test_duplicate_columns_rejected(self):
        frame = pd.DataFrame([[1, 2]], columns=['a', 'a'])
        with pytest.raises(DataValidationError):
            Dataset.from_frame(frame)

    def test_non_frame_rejected(self):
        with pytest.raises(DataValidationError):
            Dataset.from_frame([[1, 2]])


class TestDatasetAccess:
    """Test cases for reading rows and columns."""

    def test_row(self, small_dataset):
        row = small_dataset.row(3)
        assert row == {'x': 3, 'z': 0.0, 'colour': 'green'}

    def test_row_out_of_range(self, small_dataset):
        with pytest.raises(NotFoundError):
            small_dataset.row(4)
        with pytest.raises(NotFoundError):
            small_dataset.row(-1)

    def test_unknown_column(self, small_dataset):
        with pytest.raises(NotFoundError) as exc_info:
            small_dataset.column('missing')
        assert exc_info.value.context['feature'] == 'missing'

    def test_contains(self, small_dataset):
        assert 'x' in small_dataset
        assert 'missing' not in small_dataset


class TestColumnOverride:
    """Test cases for override views."""

    def test_override_replaces_every_row(self, small_dataset):
        forced = small_dataset.with_column_override('x', 7)

        assert forced.column('x').tolist() == [7, 7, 7, 7]
        assert forced.column('z').tolist() == small_dataset.column('z').tolist()
        assert forced.row(1)['x'] == 7

    def test_override_does_not_mutate_original(self, small_dataset):
        small_dataset.with_column_override('x', 7).to_frame()
        assert small_dataset.column('x').tolist() == [1, 2, 2, 3]
        assert small_dataset.overrides == {}

    def test_override_shares_storage(self, small_dataset):
        forced = small_dataset.with_column_override('x', 7)
        assert forced._frame is small_dataset._frame

    def test_override_unknown_feature(self, small_dataset):
        with pytest.raises(NotFoundError):
            small_dataset.with_column_override('missing', 1)

    def test_multiple_overrides(self, small_dataset):
        forced = small_dataset.with_column_overrides({'x': 0, 'colour': 'blue'})
        frame = forced.to_frame()

        assert frame['x'].tolist() == [0, 0, 0, 0]
        assert frame['colour'].tolist() == ['blue'] * 4
        assert frame['z'].tolist() == [0.5, -1.0, 3.0, 0.0]

    def test_chained_overrides_keep_latest(self, small_dataset):
        forced = small_dataset.with_column_override('x', 1).with_column_override('x', 2)
        assert forced.overrides == {'x': 2}

    def test_override_keeps_category_dtype(self):
        ds = Dataset.from_frame(pd.DataFrame({'c': pd.Categorical(['lo', 'hi', 'lo'])}))
        frame = ds.with_column_override('c', 'hi').to_frame()

        assert isinstance(frame['c'].dtype, pd.CategoricalDtype)
        assert list(frame['c'].cat.categories) == ['hi', 'lo']
        assert frame['c'].tolist() == ['hi', 'hi', 'hi']
        assert isinstance(ds.dtype('c'), pd.CategoricalDtype)

    def test_to_frame_is_independent(self, small_dataset):
        frame = small_dataset.with_column_override('x', 5).to_frame()
        frame['z'] = np.nan
        assert not np.isnan(small_dataset.column('z')).any()
