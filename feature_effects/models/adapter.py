# feature_effects/models/adapter.py
"""Uniform batched-prediction interface over arbitrary trained models.

The engine only ever talks to a ``ModelAdapter``: one ``predict`` call per
dataset view, returning one scalar per row in row order. Any estimator or
plain function is adapted behind that contract; the engine never inspects
model internals.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Protocol, Sequence, runtime_checkable

import numpy as np
import pandas as pd

from ..data.dataset import Dataset
from ..utils.logger import get_logger
from ..utils.exceptions import (
    ConfigurationError,
    ContractViolationError,
    create_error_context
)

logger = get_logger(__name__)


@runtime_checkable
class ModelAdapter(Protocol):
    """Protocol for a batched, side-effect-free prediction function."""

    def predict(self, rows: Dataset) -> Sequence[float]:
        """Predict one scalar per row of ``rows``, preserving row order."""
        ...


class BaseModelAdapter(ABC):
    """Base class for adapters shipped with the package and user adapters."""

    @abstractmethod
    def predict(self, rows: Dataset) -> Sequence[float]:
        raise NotImplementedError()


class FunctionAdapter(BaseModelAdapter):
    """Adapter around a callable taking a DataFrame batch.

    Example:
        >>> adapter = FunctionAdapter(lambda frame: frame['x'] + 10)
        >>> adapter.predict(dataset)
    """

    def __init__(self, fn: Callable[[pd.DataFrame], Any], name: Optional[str] = None) -> None:
        if not callable(fn):
            raise ConfigurationError(
                f"FunctionAdapter needs a callable, got {type(fn).__name__}",
                error_code="ADAPTER_NOT_CALLABLE"
            )
        self.fn = fn
        self.name = name or getattr(fn, '__name__', type(fn).__name__)

    def predict(self, rows: Dataset) -> np.ndarray:
        return np.asarray(self.fn(rows.to_frame()))

    def __repr__(self) -> str:
        return f"FunctionAdapter({self.name})"


class EstimatorAdapter(BaseModelAdapter):
    """Adapter around a fitted estimator exposing ``predict``/``predict_proba``.

    Classifiers are explained through the probability of ``positive_class``
    (a column index into ``predict_proba`` output); regressors through their
    raw predictions.
    """

    def __init__(
        self,
        model: Any,
        use_proba: Optional[bool] = None,
        positive_class: int = 1,
        feature_order: Optional[Sequence[str]] = None
    ) -> None:
        """Initialize estimator adapter.

        Args:
            model: Trained model with predict or predict_proba method
            use_proba: Force probability output on/off; None picks
                predict_proba whenever the model has it
            positive_class: Column of predict_proba output to explain
            feature_order: Column order the model was fitted with; defaults to
                the model's ``feature_names_in_`` or the dataset order
        """
        if not hasattr(model, 'predict') and not hasattr(model, 'predict_proba'):
            raise ConfigurationError(
                "Model must have predict or predict_proba method",
                error_code="INVALID_MODEL",
                context={'model_type': type(model).__name__}
            )

        if use_proba is None:
            use_proba = hasattr(model, 'predict_proba')
        elif use_proba and not hasattr(model, 'predict_proba'):
            raise ConfigurationError(
                "use_proba=True requires a model with predict_proba",
                error_code="INVALID_MODEL",
                context={'model_type': type(model).__name__}
            )

        self.model = model
        self.use_proba = use_proba
        self.positive_class = positive_class

        if feature_order is None and hasattr(model, 'feature_names_in_'):
            feature_order = list(model.feature_names_in_)
        self.feature_order = list(feature_order) if feature_order is not None else None

        logger.debug(
            f"EstimatorAdapter for {type(model).__name__}: "
            f"{'predict_proba' if use_proba else 'predict'} output"
        )

    def _batch(self, rows: Dataset) -> pd.DataFrame:
        frame = rows.to_frame()
        if self.feature_order is None:
            return frame
        missing = [name for name in self.feature_order if name not in frame.columns]
        if missing:
            raise ConfigurationError(
                f"Dataset lacks features the model was fitted with: {missing}",
                error_code="MODEL_FEATURES_MISSING",
                context={'missing': missing}
            )
        return frame[self.feature_order]

    def predict(self, rows: Dataset) -> np.ndarray:
        batch = self._batch(rows)
        if not self.use_proba:
            return np.asarray(self.model.predict(batch))

        proba = np.asarray(self.model.predict_proba(batch))
        if proba.ndim == 1:
            return proba
        if proba.shape[1] == 1:
            return proba[:, 0]
        return proba[:, self.positive_class]

    def __repr__(self) -> str:
        return f"EstimatorAdapter({type(self.model).__name__}, use_proba={self.use_proba})"


def get_adapter(model: Any, **kwargs: Any) -> ModelAdapter:
    """Return a ``ModelAdapter`` for ``model``.

    Existing adapters are returned unchanged, estimators are wrapped in
    ``EstimatorAdapter`` and bare callables in ``FunctionAdapter``.

    Raises:
        ConfigurationError: If the object cannot be adapted
    """
    if isinstance(model, BaseModelAdapter):
        return model
    if hasattr(model, 'predict') or hasattr(model, 'predict_proba'):
        return EstimatorAdapter(model, **kwargs)
    if callable(model):
        return FunctionAdapter(model, **kwargs)

    raise ConfigurationError(
        f"Cannot adapt object of type {type(model).__name__} for prediction",
        error_code="UNSUPPORTED_MODEL",
        context={'model_type': type(model).__name__}
    )


def check_predictions(predictions: Any, n_rows: int, **context: Any) -> np.ndarray:
    """Enforce the adapter contract on one batch of predictions.

    Args:
        predictions: Raw adapter output
        n_rows: Number of rows in the batch that was predicted
        **context: Extra fields (feature, grid value) for the error context

    Returns:
        Predictions as a 1-D float array

    Raises:
        ContractViolationError: On wrong shape, wrong length or non-finite values
    """
    try:
        values = np.asarray(predictions, dtype=float)
    except (TypeError, ValueError) as e:
        raise ContractViolationError(
            "Adapter returned non-numeric predictions",
            error_code="NON_NUMERIC_PREDICTIONS",
            context=create_error_context(original_error=str(e), **context)
        ) from e

    if values.ndim == 2 and values.shape[1] == 1:
        values = values[:, 0]

    if values.ndim != 1 or len(values) != n_rows:
        raise ContractViolationError(
            f"Adapter returned {values.shape} predictions for {n_rows} rows",
            error_code="PREDICTION_LENGTH_MISMATCH",
            context=create_error_context(expected=n_rows, received=values.shape, **context)
        )

    if not np.all(np.isfinite(values)):
        n_bad = int(np.count_nonzero(~np.isfinite(values)))
        raise ContractViolationError(
            f"Adapter returned {n_bad} non-finite predictions",
            error_code="NON_FINITE_PREDICTIONS",
            context=create_error_context(n_non_finite=n_bad, **context)
        )

    return values
