"""Feature Effects - Partial Dependence and ICE Components.

Key Components:
- GridBuilder: deterministic sweep grids for one or two features
- EffectEngine: PDP (averaged) and ICE (per-row) computation
- EffectCurve / EffectSurface: plain result containers for downstream plotting

Example:
    >>> from feature_effects.effects import EffectEngine
    >>> curve = EffectEngine().compute_pdp(dataset, adapter, ['temp'])
"""

from .grid import (
    FeatureKind,
    FeatureDescriptor,
    FeatureGrid,
    GridSpec,
    GridBuilder,
    describe_feature
)
from .engine import (
    CancellationToken,
    EffectCurve,
    EffectSurface,
    EffectEngine,
    resolve_center,
    partial_dependence,
    individual_conditional_expectation
)

__all__ = [
    # Grids
    'FeatureKind',
    'FeatureDescriptor',
    'FeatureGrid',
    'GridSpec',
    'GridBuilder',
    'describe_feature',

    # Engine and results
    'CancellationToken',
    'EffectCurve',
    'EffectSurface',
    'EffectEngine',
    'resolve_center',
    'partial_dependence',
    'individual_conditional_expectation'
]
