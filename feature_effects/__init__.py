# feature_effects/__init__.py
"""Feature Effects - Model-agnostic Partial Dependence and ICE.

Computes how a black-box model's predictions respond as one or two features
are swept over a grid, holding every other feature at its observed values.

Quick Start:
    >>> import feature_effects as fe
    >>> dataset = fe.Dataset.from_frame(X_test)
    >>> adapter = fe.get_adapter(fitted_model)
    >>> engine = fe.EffectEngine(fe.EffectConfig(grid_resolution=30, n_jobs=4))
    >>>
    >>> curve = engine.compute_pdp(dataset, adapter, ['temp'])
    >>> surface = engine.compute_ice(dataset, adapter, 'temp', center_at=curve.grid.points()[0])
    >>> pair = engine.compute_pdp(dataset, adapter, ['temp', 'hum'])
"""

__version__ = "0.1.0"
__license__ = "MIT"
__description__ = "Model-agnostic partial dependence and ICE computation"

from .utils.logger import configure_logging, get_logger

configure_logging(
    level="INFO",
    format_style="detailed",
    include_console=True
)

logger = get_logger(__name__)
logger.debug(f"Feature Effects v{__version__} initialized")

from .data.dataset import Dataset
from .effects.grid import (
    FeatureKind,
    FeatureDescriptor,
    FeatureGrid,
    GridSpec,
    GridBuilder,
    describe_feature
)
from .effects.engine import (
    CancellationToken,
    EffectCurve,
    EffectSurface,
    EffectEngine,
    partial_dependence,
    individual_conditional_expectation
)
from .models.adapter import (
    ModelAdapter,
    BaseModelAdapter,
    FunctionAdapter,
    EstimatorAdapter,
    get_adapter
)
from .config import EffectConfig, EffectRequest, ConfigLoader, load_config, save_config
from .utils.exceptions import (
    FeatureEffectsError,
    ConfigurationError,
    DataValidationError,
    NotFoundError,
    InsufficientDataError,
    InvalidCenterError,
    ContractViolationError,
    ComputationCancelledError
)

__all__ = [
    # Data
    'Dataset',

    # Grids
    'FeatureKind',
    'FeatureDescriptor',
    'FeatureGrid',
    'GridSpec',
    'GridBuilder',
    'describe_feature',

    # Engine
    'CancellationToken',
    'EffectCurve',
    'EffectSurface',
    'EffectEngine',
    'partial_dependence',
    'individual_conditional_expectation',

    # Adapters
    'ModelAdapter',
    'BaseModelAdapter',
    'FunctionAdapter',
    'EstimatorAdapter',
    'get_adapter',

    # Configuration
    'EffectConfig',
    'EffectRequest',
    'ConfigLoader',
    'load_config',
    'save_config',

    # Errors
    'FeatureEffectsError',
    'ConfigurationError',
    'DataValidationError',
    'NotFoundError',
    'InsufficientDataError',
    'InvalidCenterError',
    'ContractViolationError',
    'ComputationCancelledError',

    # Logging
    'configure_logging',
    'get_logger'
]
