"""Feature Effects - Model Adapter Components.

Wraps any trained model behind one batched ``predict(rows)`` contract.

Example:
    >>> from feature_effects.models import get_adapter
    >>> adapter = get_adapter(fitted_random_forest)
"""

from .adapter import (
    ModelAdapter,
    BaseModelAdapter,
    FunctionAdapter,
    EstimatorAdapter,
    get_adapter,
    check_predictions
)

__all__ = [
    'ModelAdapter',
    'BaseModelAdapter',
    'FunctionAdapter',
    'EstimatorAdapter',
    'get_adapter',
    'check_predictions'
]
