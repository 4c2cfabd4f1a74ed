"""Test configuration for pytest."""
import os
import sys
from typing import Dict, Any

import pytest
import pandas as pd
import numpy as np

# Make the package importable without installation
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from feature_effects.data.dataset import Dataset
from feature_effects.models.adapter import FunctionAdapter, BaseModelAdapter


@pytest.fixture
def small_dataset() -> Dataset:
    """Four rows with x = [1, 2, 2, 3] plus an unrelated feature."""
    return Dataset.from_records([
        {'x': 1, 'z': 0.5, 'colour': 'red'},
        {'x': 2, 'z': -1.0, 'colour': 'blue'},
        {'x': 2, 'z': 3.0, 'colour': 'red'},
        {'x': 3, 'z': 0.0, 'colour': 'green'},
    ])


@pytest.fixture
def plus_ten_adapter() -> FunctionAdapter:
    """Adapter predicting ``x + 10`` for every row."""
    return FunctionAdapter(lambda frame: frame['x'] + 10, name='plus_ten')


@pytest.fixture(scope="session")
def sample_frame() -> pd.DataFrame:
    """Mixed continuous/categorical frame for engine tests."""
    np.random.seed(42)
    n_samples = 200

    frame = pd.DataFrame({
        'temp': np.round(np.random.uniform(-5, 35, n_samples), 1),
        'hum': np.round(np.random.uniform(0.2, 1.0, n_samples), 2),
        'windspeed': np.random.uniform(0, 30, n_samples),
        'season': np.random.choice(['winter', 'spring', 'summer', 'fall'], n_samples),
    })
    return frame


@pytest.fixture
def sample_dataset(sample_frame: pd.DataFrame) -> Dataset:
    return Dataset.from_frame(sample_frame)


class InteractionAdapter(BaseModelAdapter):
    """Nonlinear model with a temp x hum interaction and a season offset."""

    season_offsets: Dict[str, float] = {'winter': -2.0, 'spring': 0.0, 'summer': 1.5, 'fall': 0.5}

    def __init__(self) -> None:
        self.calls = 0

    def predict(self, rows: Dataset) -> np.ndarray:
        self.calls += 1
        temp = rows.column('temp').astype(float)
        hum = rows.column('hum').astype(float)
        season = np.array([self.season_offsets[s] for s in rows.column('season')])
        return 0.3 * temp - 4.0 * hum * temp / 10.0 + season


@pytest.fixture
def interaction_adapter() -> InteractionAdapter:
    return InteractionAdapter()


@pytest.fixture(autouse=True)
def cleanup_environment():
    """Clean up environment variables after each test."""
    original_env = dict(os.environ)

    yield

    os.environ.clear()
    os.environ.update(original_env)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
    config.addinivalue_line(
        "markers", "config: mark test as configuration-related"
    )


def pytest_collection_modifyitems(config, items):
    """Auto-mark tests based on their paths."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)

        if "config" in str(item.fspath):
            item.add_marker(pytest.mark.config)
