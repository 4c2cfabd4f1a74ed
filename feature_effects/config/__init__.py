"""Feature Effects - Configuration Management Components.

Example:
    >>> from feature_effects.config import EffectConfig, load_config
    >>> config = EffectConfig(grid_resolution=20, n_jobs=4)
    >>> config = load_config('config/effects.yaml')
"""

from .effect_config import (
    EffectConfig,
    EffectRequest,
    EFFECT_KINDS
)
from .loader import (
    ConfigLoader,
    load_config,
    save_config
)

__all__ = [
    'EffectConfig',
    'EffectRequest',
    'EFFECT_KINDS',
    'ConfigLoader',
    'load_config',
    'save_config'
]
