# feature_effects/effects/engine.py
"""Partial dependence and ICE computation by marginalization.

For every grid point the engine forces the target feature(s) to that value
in every row, keeps all other features as observed, predicts the whole
batch through the model adapter, then either averages the predictions
(PDP) or keeps one prediction per row (ICE).

Grid points are independent, so they are dispatched as separate tasks
to a fixed-size thread pool. Each task writes into its own pre-allocated
slot of the result array.

Example:
    >>> engine = EffectEngine(EffectConfig(n_jobs=4))
    >>> curve = engine.compute_pdp(dataset, adapter, ['age'])
    >>> curve.pairs()[:2]
    [(18, 0.21), (19, 0.22)]
    >>> surface = engine.compute_ice(dataset, adapter, 'age', center_at=18)
    >>> surface.values.shape
    (1000, 73)
"""

import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .grid import FeatureGrid, FeatureKind, GridBuilder, GridSpec
from ..config.effect_config import EffectConfig, EffectRequest
from ..data.dataset import Dataset
from ..models.adapter import ModelAdapter, check_predictions, get_adapter
from ..utils.logger import get_logger
from ..utils.timer import timer, timed_operation
from ..utils.exceptions import (
    ComputationCancelledError,
    ConfigurationError,
    ContractViolationError,
    FeatureEffectsError,
    InvalidCenterError,
    create_error_context,
    handle_and_reraise
)

logger = get_logger(__name__)


class CancellationToken:
    """Cooperative cancellation signal checked between grid-point tasks.

    Predictions already in flight run to completion; tasks that have not
    started yet raise ``ComputationCancelledError``.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, **context: Any) -> None:
        if self._event.is_set():
            raise ComputationCancelledError(
                "Effect computation cancelled",
                error_code="COMPUTATION_CANCELLED",
                context=create_error_context(**context)
            )


@dataclass(eq=False)
class EffectCurve:
    """Partial dependence result: one averaged prediction per grid point.

    ``values`` has the grid's shape: ``(n,)`` for one feature and
    ``(n1, n2)`` for a feature pair.
    """

    grid: GridSpec
    values: np.ndarray

    @property
    def features(self) -> Tuple[str, ...]:
        return self.grid.features

    def pairs(self) -> List[Tuple[Any, float]]:
        """Return ``[(grid point, value), ...]`` in grid order."""
        return list(zip(self.grid.points(), self.values.ravel().tolist()))

    def to_frame(self) -> pd.DataFrame:
        """Long-format table: one column per feature plus ``partial_dependence``."""
        points = self.grid.points()
        if len(self.features) == 1:
            frame = pd.DataFrame({self.features[0]: points})
        else:
            frame = pd.DataFrame(points, columns=list(self.features))
        frame['partial_dependence'] = self.values.ravel()
        return frame

    def __len__(self) -> int:
        return self.grid.size


def resolve_center(grid: FeatureGrid, center_at: Any, tolerance: Optional[float] = None) -> int:
    """Return the grid position of an ICE centering anchor.

    An exact match is always accepted. With a tolerance, a numeric anchor on
    a continuous grid snaps to the nearest grid value within that distance.

    Raises:
        InvalidCenterError: If the anchor cannot be resolved
    """
    for position, value in enumerate(grid.values):
        if value == center_at:
            return position

    if (
        tolerance is not None
        and grid.kind is FeatureKind.CONTINUOUS
        and isinstance(center_at, (int, float, np.number))
        and not isinstance(center_at, bool)
    ):
        distances = np.abs(grid.values.astype(float) - float(center_at))
        position = int(np.argmin(distances))
        if distances[position] <= tolerance:
            logger.info(
                f"Snapped ICE anchor {center_at} to grid value {grid.values[position]} "
                f"for '{grid.feature}'"
            )
            return position

    raise InvalidCenterError(
        f"Center {center_at!r} is not a grid value of '{grid.feature}'",
        error_code="INVALID_CENTER",
        context=create_error_context(
            feature=grid.feature,
            center_at=center_at,
            tolerance=tolerance,
            grid_size=len(grid)
        )
    )


@dataclass(eq=False)
class EffectSurface:
    """ICE result: one curve per dataset row over a shared grid.

    ``raw_values`` holds the predictions, shape ``(n_rows, n_grid)``.
    When a center is set, ``values`` is the centered view where every row
    is shifted so that it equals zero at the anchor column.
    """

    grid: FeatureGrid
    raw_values: np.ndarray
    center_index: Optional[int] = None

    @property
    def feature(self) -> str:
        return self.grid.feature

    @property
    def n_rows(self) -> int:
        return self.raw_values.shape[0]

    @property
    def center_value(self) -> Optional[Any]:
        if self.center_index is None:
            return None
        return self.grid.values[self.center_index]

    @property
    def values(self) -> np.ndarray:
        if self.center_index is None:
            return self.raw_values
        return self.raw_values - self.raw_values[:, [self.center_index]]

    def center(self, center_at: Any, tolerance: Optional[float] = None) -> 'EffectSurface':
        """Return the same curves centered at another grid value."""
        position = resolve_center(self.grid, center_at, tolerance)
        return EffectSurface(grid=self.grid, raw_values=self.raw_values, center_index=position)

    def average(self) -> EffectCurve:
        """Average the (uncentered) curves into a PDP over the same grid."""
        return EffectCurve(grid=GridSpec(axes=(self.grid,)), values=self.raw_values.mean(axis=0))

    def to_frame(self) -> pd.DataFrame:
        """Long-format table with columns ``row``, the feature and ``prediction``."""
        n_grid = len(self.grid)
        return pd.DataFrame({
            'row': np.repeat(np.arange(self.n_rows), n_grid),
            self.feature: np.tile(self.grid.values, self.n_rows),
            'prediction': self.values.ravel()
        })


@dataclass
class _SweepResult:
    means: np.ndarray
    rows: Optional[np.ndarray] = field(default=None, repr=False)


class EffectEngine:
    """Computes PDP and ICE for any model behind a ``ModelAdapter``.

    The engine is stateless between calls: grids and results are created
    fresh on every computation and returned to the caller.
    """

    def __init__(self, config: Optional[EffectConfig] = None) -> None:
        self.config = config or EffectConfig()
        logger.debug(f"Initialized EffectEngine: {self.config.to_dict()}")

    def _grid_builder(self, grid_builder: Optional[GridBuilder]) -> GridBuilder:
        return grid_builder if grid_builder is not None else self.config.make_grid_builder()

    def _resolve_n_jobs(self, n_tasks: int) -> int:
        n_jobs = self.config.n_jobs
        if n_jobs == -1:
            n_jobs = os.cpu_count() or 1
        return max(1, min(n_jobs, n_tasks))

    def _predict_point(
        self,
        dataset: Dataset,
        adapter: ModelAdapter,
        point: Dict[str, Any]
    ) -> np.ndarray:
        """Predict the whole dataset with the features in ``point`` forced."""
        view = dataset.with_column_overrides(point)
        try:
            raw = adapter.predict(view)
        except FeatureEffectsError:
            raise
        except Exception as e:
            handle_and_reraise(
                e, ContractViolationError,
                f"Adapter failed to predict grid point {point}",
                error_code="ADAPTER_PREDICT_FAILED",
                context=create_error_context(grid_point=point)
            )
        return check_predictions(raw, dataset.row_count(), grid_point=point)

    def _dispatch(self, task: Callable[[int], None], n_tasks: int) -> None:
        n_jobs = self._resolve_n_jobs(n_tasks)

        if n_jobs == 1:
            for slot in range(n_tasks):
                task(slot)
            return

        logger.debug(f"Dispatching {n_tasks} grid-point tasks to {n_jobs} workers")
        with ThreadPoolExecutor(max_workers=n_jobs) as executor:
            futures = [executor.submit(task, slot) for slot in range(n_tasks)]
            try:
                for future in as_completed(futures):
                    future.result()
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

    def _sweep(
        self,
        dataset: Dataset,
        adapter: ModelAdapter,
        grid: GridSpec,
        keep_rows: bool,
        cancellation_token: Optional[CancellationToken]
    ) -> _SweepResult:
        indices = list(grid.indices())
        means = np.empty(len(indices), dtype=float)
        rows = np.empty((len(indices), dataset.row_count()), dtype=float) if keep_rows else None

        def task(slot: int) -> None:
            point = grid.point(indices[slot])
            if cancellation_token is not None:
                cancellation_token.raise_if_cancelled(grid_point=point)
            predictions = self._predict_point(dataset, adapter, point)
            means[slot] = np.mean(predictions)
            if rows is not None:
                rows[slot] = predictions

        try:
            self._dispatch(task, len(indices))
        except ContractViolationError as e:
            logger.error(
                f"Model adapter broke its contract, aborting sweep: {e.message}",
                extra={'context': {'error_code': e.error_code, **e.context}}
            )
            raise

        return _SweepResult(means=means, rows=rows)

    def _single_feature(self, feature: Union[str, Sequence[str]]) -> str:
        if isinstance(feature, str):
            return feature
        feature = list(feature)
        if len(feature) != 1:
            raise ConfigurationError(
                f"ICE is computed for exactly one feature, got {len(feature)}",
                error_code="INVALID_FEATURE_COUNT",
                context={'features': feature}
            )
        return feature[0]

    @timer(name="partial_dependence_computation")
    def compute_pdp(
        self,
        dataset: Dataset,
        adapter: ModelAdapter,
        features: Union[str, Sequence[str]],
        grid_builder: Optional[GridBuilder] = None,
        cancellation_token: Optional[CancellationToken] = None
    ) -> EffectCurve:
        """Compute partial dependence for one feature or a feature pair.

        Args:
            dataset: Rows to marginalize over
            adapter: Batched prediction function
            features: One or two feature names
            grid_builder: Grid strategy; defaults to one built from the config
            cancellation_token: Optional cooperative cancellation signal

        Returns:
            EffectCurve aligned with the grid for ``features``

        Raises:
            NotFoundError: If a feature is missing, before any prediction
            InsufficientDataError: If a feature has no usable values
            ContractViolationError: If the adapter breaks its contract
            ComputationCancelledError: If cancelled before completion
        """
        grid = self._grid_builder(grid_builder).build(dataset, features)
        logger.info(
            f"🔍 Computing partial dependence for {list(grid.features)} "
            f"over {grid.size} grid points x {dataset.row_count()} rows"
        )

        with timed_operation("pd_sweep"):
            result = self._sweep(dataset, adapter, grid, False, cancellation_token)

        logger.info(f"✅ Partial dependence computed for {list(grid.features)}")
        return EffectCurve(grid=grid, values=result.means.reshape(grid.shape))

    def _prepare_ice(
        self,
        dataset: Dataset,
        feature: Union[str, Sequence[str]],
        grid_builder: Optional[GridBuilder],
        center_at: Optional[Any]
    ) -> Tuple[GridSpec, Optional[int]]:
        feature = self._single_feature(feature)
        grid = self._grid_builder(grid_builder).build(dataset, [feature])
        center_index = None
        if center_at is not None:
            center_index = resolve_center(grid.axes[0], center_at, self.config.center_tolerance)
        return grid, center_index

    @timer(name="ice_computation")
    def compute_ice(
        self,
        dataset: Dataset,
        adapter: ModelAdapter,
        feature: Union[str, Sequence[str]],
        grid_builder: Optional[GridBuilder] = None,
        center_at: Optional[Any] = None,
        cancellation_token: Optional[CancellationToken] = None
    ) -> EffectSurface:
        """Compute one ICE curve per dataset row for a single feature.

        Args:
            dataset: Rows to compute curves for
            adapter: Batched prediction function
            feature: Feature to sweep
            grid_builder: Grid strategy; defaults to one built from the config
            center_at: Grid value every curve is shifted to pass through zero at
            cancellation_token: Optional cooperative cancellation signal

        Raises:
            InvalidCenterError: If ``center_at`` is not a grid value (and no
                tolerance allows snapping), before any prediction
        """
        grid, center_index = self._prepare_ice(dataset, feature, grid_builder, center_at)
        logger.info(
            f"🧊 Computing ICE for '{grid.features[0]}' over {grid.size} grid points "
            f"x {dataset.row_count()} rows"
        )

        with timed_operation("ice_sweep"):
            result = self._sweep(dataset, adapter, grid, True, cancellation_token)

        logger.info(f"✅ ICE computed for {dataset.row_count()} instances")
        return EffectSurface(
            grid=grid.axes[0],
            raw_values=np.ascontiguousarray(result.rows.T),
            center_index=center_index
        )

    def compute_pdp_and_ice(
        self,
        dataset: Dataset,
        adapter: ModelAdapter,
        feature: Union[str, Sequence[str]],
        grid_builder: Optional[GridBuilder] = None,
        center_at: Optional[Any] = None,
        cancellation_token: Optional[CancellationToken] = None
    ) -> Tuple[EffectCurve, EffectSurface]:
        """Compute PDP and ICE for one feature from a single sweep.

        Both results share the same grid object, so their x-axes are identical.
        """
        grid, center_index = self._prepare_ice(dataset, feature, grid_builder, center_at)
        logger.info(f"🔍🧊 Computing PDP and ICE for '{grid.features[0]}' over {grid.size} grid points")

        with timed_operation("pd_ice_sweep"):
            result = self._sweep(dataset, adapter, grid, True, cancellation_token)

        curve = EffectCurve(grid=grid, values=result.means)
        surface = EffectSurface(
            grid=grid.axes[0],
            raw_values=np.ascontiguousarray(result.rows.T),
            center_index=center_index
        )
        return curve, surface

    def run(
        self,
        request: EffectRequest,
        dataset: Dataset,
        adapter: ModelAdapter,
        cancellation_token: Optional[CancellationToken] = None
    ) -> Union[EffectCurve, EffectSurface, Tuple[EffectCurve, EffectSurface]]:
        """Execute an ``EffectRequest``."""
        grid_builder = self.config.make_grid_builder(request.grid_resolution)

        if request.kind == "pdp":
            return self.compute_pdp(
                dataset, adapter, request.features, grid_builder, cancellation_token
            )
        if request.kind == "ice":
            return self.compute_ice(
                dataset, adapter, request.features, grid_builder,
                request.center_at, cancellation_token
            )
        return self.compute_pdp_and_ice(
            dataset, adapter, request.features, grid_builder,
            request.center_at, cancellation_token
        )


def _as_dataset(data: Union[Dataset, pd.DataFrame]) -> Dataset:
    return data if isinstance(data, Dataset) else Dataset.from_frame(data)


def partial_dependence(
    model: Any,
    data: Union[Dataset, pd.DataFrame],
    features: Union[str, Sequence[str]],
    **config_kwargs: Any
) -> EffectCurve:
    """Compute partial dependence with a default engine.

    Example:
        >>> curve = partial_dependence(rf, X_test, ['temp', 'hum'], grid_resolution=20)
    """
    engine = EffectEngine(EffectConfig(**config_kwargs))
    return engine.compute_pdp(_as_dataset(data), get_adapter(model), features)


def individual_conditional_expectation(
    model: Any,
    data: Union[Dataset, pd.DataFrame],
    feature: str,
    center_at: Optional[Any] = None,
    **config_kwargs: Any
) -> EffectSurface:
    """Compute ICE curves with a default engine.

    Example:
        >>> surface = individual_conditional_expectation(rf, X_test, 'temp', center_at=-8.0)
    """
    engine = EffectEngine(EffectConfig(**config_kwargs))
    return engine.compute_ice(_as_dataset(data), get_adapter(model), feature, center_at=center_at)
