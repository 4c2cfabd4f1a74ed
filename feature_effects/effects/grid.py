# feature_effects/effects/grid.py
"""Sweep grid construction for partial dependence and ICE.

Grids are derived deterministically from the values a dataset actually
holds for a feature:

- continuous features use their sorted distinct values, or an evenly spaced
  sequence between the observed min and max when a resolution is requested
  and the feature has more distinct values than that
- categorical features use their distinct labels in first-seen order
- two-feature grids are the Cartesian product of the two 1-D grids
"""

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ..config.effect_config import DEFAULT_MAX_GRID_POINTS
from ..data.dataset import Dataset
from ..utils.logger import get_logger
from ..utils.exceptions import (
    ConfigurationError,
    InsufficientDataError,
    NotFoundError,
    validate_parameter
)

logger = get_logger(__name__)

class FeatureKind(Enum):
    """How a feature's grid is derived."""

    CONTINUOUS = "continuous"
    CATEGORICAL = "categorical"


@dataclass(frozen=True)
class FeatureDescriptor:
    """Name, kind and optional declared domain of one feature."""

    name: str
    kind: FeatureKind
    domain: Optional[Tuple[float, float]] = None


@dataclass(frozen=True, eq=False)
class FeatureGrid:
    """Ordered distinct sweep values for a single feature."""

    feature: str
    kind: FeatureKind
    values: np.ndarray = field(repr=False)

    def __len__(self) -> int:
        return len(self.values)

    def tolist(self) -> List[Any]:
        return self.values.tolist()


@dataclass(frozen=True)
class GridSpec:
    """Sweep grid for one feature, or the product grid for two features."""

    axes: Tuple[FeatureGrid, ...]

    @property
    def features(self) -> Tuple[str, ...]:
        return tuple(axis.feature for axis in self.axes)

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(len(axis) for axis in self.axes)

    @property
    def size(self) -> int:
        return int(np.prod(self.shape))

    def indices(self) -> Iterator[Tuple[int, ...]]:
        """Yield grid positions in row-major order."""
        return itertools.product(*(range(n) for n in self.shape))

    def point(self, index: Tuple[int, ...]) -> Dict[str, Any]:
        """Return ``{feature: value}`` for the grid position ``index``."""
        return {axis.feature: axis.values[i] for axis, i in zip(self.axes, index)}

    def points(self) -> List[Any]:
        """Return grid values (1-D) or value pairs (2-D) in row-major order."""
        if len(self.axes) == 1:
            return self.axes[0].tolist()
        return list(itertools.product(*(axis.tolist() for axis in self.axes)))


def _is_continuous(dtype: Any) -> bool:
    if isinstance(dtype, pd.CategoricalDtype):
        return False
    return pd.api.types.is_numeric_dtype(dtype) and not pd.api.types.is_bool_dtype(dtype)


def describe_feature(
    dataset: Dataset,
    name: str,
    domain: Optional[Tuple[float, float]] = None
) -> FeatureDescriptor:
    """Derive the descriptor of a feature from its stored dtype.

    Declared ``category`` columns are categorical whatever their labels are.

    Raises:
        NotFoundError: If the feature is not in the dataset
    """
    kind = FeatureKind.CONTINUOUS if _is_continuous(dataset.dtype(name)) else FeatureKind.CATEGORICAL
    if kind is FeatureKind.CATEGORICAL:
        domain = None
    return FeatureDescriptor(name=name, kind=kind, domain=domain)


class GridBuilder:
    """Builds deterministic sweep grids from a dataset.

    Example:
        >>> builder = GridBuilder(grid_resolution=20)
        >>> grid = builder.build(dataset, ['age'])
        >>> grid.points()[:3]
        [18.0, 21.3, 24.6]
    """

    def __init__(
        self,
        grid_resolution: Optional[int] = None,
        domains: Optional[Dict[str, Tuple[float, float]]] = None,
        max_grid_points: int = DEFAULT_MAX_GRID_POINTS
    ) -> None:
        """Initialize grid builder.

        Args:
            grid_resolution: Number of evenly spaced points for continuous
                features; None uses every distinct observed value
            domains: Declared ``(min, max)`` ranges used to clip continuous grids
            max_grid_points: Two-feature grid size above which a warning is logged
        """
        validate_parameter("grid_resolution", grid_resolution, min_value=2, max_value=1000)
        validate_parameter("max_grid_points", max_grid_points, min_value=1)

        self.grid_resolution = grid_resolution
        self.domains = dict(domains or {})
        self.max_grid_points = max_grid_points

        for name, bounds in self.domains.items():
            if len(bounds) != 2 or bounds[0] > bounds[1]:
                raise ConfigurationError(
                    f"Domain for '{name}' must be a (min, max) pair with min <= max",
                    error_code="INVALID_DOMAIN",
                    context={'feature': name, 'domain': bounds}
                )

    def validate_features(self, dataset: Dataset, features: Union[str, Sequence[str]]) -> List[str]:
        """Normalise and check a 1- or 2-feature request.

        Raises:
            ConfigurationError: If the feature count is not 1 or 2, or repeats
            NotFoundError: If any feature is absent, checked before any grid work
        """
        if isinstance(features, str):
            features = [features]
        features = list(features)

        if not 1 <= len(features) <= 2:
            raise ConfigurationError(
                f"Effects are computed for 1 or 2 features, got {len(features)}",
                error_code="INVALID_FEATURE_COUNT",
                context={'features': features}
            )
        if len(set(features)) != len(features):
            raise ConfigurationError(
                f"Features must be distinct, got {features}",
                error_code="DUPLICATE_FEATURES",
                context={'features': features}
            )

        missing = [name for name in features if name not in dataset]
        if missing:
            raise NotFoundError(
                f"Feature '{missing[0]}' not found in dataset",
                error_code="FEATURE_NOT_FOUND",
                context={'feature': missing[0], 'available': dataset.feature_names()}
            )
        return features

    def build_feature(self, dataset: Dataset, name: str) -> FeatureGrid:
        """Build the 1-D grid for one feature.

        Raises:
            NotFoundError: If the feature is not in the dataset
            InsufficientDataError: If the feature has no non-missing values
        """
        descriptor = describe_feature(dataset, name, self.domains.get(name))
        values = pd.Series(dataset.column(name)).dropna()

        if values.empty:
            raise InsufficientDataError(
                f"Feature '{name}' has no usable values to build a grid from",
                error_code="EMPTY_GRID",
                context={'feature': name, 'row_count': dataset.row_count()}
            )

        if descriptor.kind is FeatureKind.CONTINUOUS:
            grid_values = self._continuous_grid(values.to_numpy(), descriptor)
        else:
            grid_values = np.asarray(pd.unique(values), dtype=object)

        logger.debug(f"Grid for '{name}' ({descriptor.kind.value}): {len(grid_values)} points")
        return FeatureGrid(feature=name, kind=descriptor.kind, values=grid_values)

    def _continuous_grid(self, values: np.ndarray, descriptor: FeatureDescriptor) -> np.ndarray:
        distinct = np.unique(values)

        if self.grid_resolution is not None and len(distinct) > self.grid_resolution:
            grid_values = np.linspace(distinct[0], distinct[-1], self.grid_resolution)
        else:
            grid_values = distinct

        if descriptor.domain is not None:
            low, high = descriptor.domain
            grid_values = np.unique(np.clip(grid_values, low, high))

        return grid_values

    def build(self, dataset: Dataset, features: Union[str, Sequence[str]]) -> GridSpec:
        """Build the grid for one feature or the product grid for two.

        Every feature is validated before any grid is built.
        """
        features = self.validate_features(dataset, features)
        axes = tuple(self.build_feature(dataset, name) for name in features)
        grid = GridSpec(axes=axes)

        if len(axes) == 2 and grid.size > self.max_grid_points:
            logger.warning(
                f"Grid for {list(grid.features)} has {grid.size} points "
                f"({grid.shape[0]} x {grid.shape[1]}); consider lowering grid_resolution"
            )
        return grid
