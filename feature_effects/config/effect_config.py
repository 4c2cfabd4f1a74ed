# feature_effects/config/effect_config.py
"""Type-safe configuration for effect computations.

``EffectConfig`` holds engine-wide settings (grid resolution, worker count,
centering tolerance, declared feature domains); ``EffectRequest`` describes
one computation (which effect, which features, where to center).
"""

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple, Union

from ..utils.exceptions import ConfigurationError, validate_parameter
from ..utils.logger import get_logger

if TYPE_CHECKING:
    from ..effects.grid import GridBuilder

logger = get_logger(__name__)

EFFECT_KINDS = ["pdp", "ice", "both"]

DEFAULT_MAX_GRID_POINTS = 2500


@dataclass
class EffectConfig:
    """Engine configuration.

    Attributes:
        grid_resolution: Evenly spaced points for continuous features; None
            sweeps every distinct observed value
        n_jobs: Worker threads for the grid sweep (-1 uses all CPUs)
        center_tolerance: Maximum distance for snapping an ICE anchor to the
            nearest grid value; None requires an exact match
        max_grid_points: Two-feature grid size above which a warning is logged
        domains: Declared ``(min, max)`` per continuous feature for clipping grids
    """

    grid_resolution: Optional[int] = None
    n_jobs: int = 1
    center_tolerance: Optional[float] = None
    max_grid_points: int = DEFAULT_MAX_GRID_POINTS
    domains: Dict[str, Tuple[float, float]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        validate_parameter("grid_resolution", self.grid_resolution, min_value=2, max_value=1000)
        validate_parameter("center_tolerance", self.center_tolerance, min_value=0.0)
        validate_parameter("max_grid_points", self.max_grid_points, min_value=1)

        if self.n_jobs != -1:
            validate_parameter("n_jobs", self.n_jobs, min_value=1)

        self.domains = {name: tuple(bounds) for name, bounds in self.domains.items()}

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format, skipping unset values."""
        config_dict = {}
        for field_name, field_value in self.__dict__.items():
            if field_value is None or field_name.startswith("_"):
                continue
            if field_name == "domains":
                field_value = {name: list(bounds) for name, bounds in field_value.items()}
            config_dict[field_name] = field_value
        return config_dict

    def update_from_env(self, prefix: str = "FEATURE_EFFECTS_") -> None:
        """Update scalar settings from environment variables.

        Args:
            prefix: Environment variable prefix, e.g. FEATURE_EFFECTS_N_JOBS
        """
        for field_name in self.__dataclass_fields__:
            env_name = f"{prefix}{field_name.upper()}"
            if env_name not in os.environ:
                continue

            env_value = os.environ[env_name]
            field_type = self.__dataclass_fields__[field_name].type
            try:
                if field_type == int or field_type == Optional[int]:
                    converted_value = int(env_value)
                elif field_type == float or field_type == Optional[float]:
                    converted_value = float(env_value)
                else:
                    logger.warning(f"Cannot set {field_name} from environment; skipping {env_name}")
                    continue
            except (ValueError, TypeError) as e:
                logger.warning(f"Failed to parse environment variable {env_name}: {e}")
                continue

            setattr(self, field_name, converted_value)
            logger.info(f"Updated {field_name} from environment: {converted_value}")

        self.__post_init__()

    def make_grid_builder(self, grid_resolution: Optional[int] = None) -> 'GridBuilder':
        """Create a grid builder, optionally overriding the resolution."""
        from ..effects.grid import GridBuilder

        return GridBuilder(
            grid_resolution=grid_resolution if grid_resolution is not None else self.grid_resolution,
            domains=self.domains,
            max_grid_points=self.max_grid_points
        )


@dataclass
class EffectRequest:
    """One effect computation: what to compute, for which features.

    Example:
        >>> request = EffectRequest(kind="ice", features=["age"], center_at=18)
    """

    features: List[str]
    kind: str = "pdp"
    grid_resolution: Optional[int] = None
    center_at: Optional[Any] = None

    def __post_init__(self) -> None:
        if isinstance(self.features, str):
            self.features = [self.features]
        self.features = list(self.features)

        validate_parameter("kind", self.kind, valid_values=EFFECT_KINDS, required=True)
        validate_parameter("grid_resolution", self.grid_resolution, min_value=2, max_value=1000)

        max_features = 2 if self.kind == "pdp" else 1
        if not 1 <= len(self.features) <= max_features:
            raise ConfigurationError(
                f"A '{self.kind}' request takes 1 to {max_features} features, got {len(self.features)}",
                error_code="INVALID_FEATURE_COUNT",
                context={'kind': self.kind, 'features': self.features}
            )

        if self.center_at is not None and self.kind == "pdp":
            raise ConfigurationError(
                "center_at only applies to ICE requests",
                error_code="CENTER_NOT_APPLICABLE",
                context={'kind': self.kind}
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EffectRequest':
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ConfigurationError(
                f"Unknown request settings: {sorted(unknown)}",
                error_code="UNKNOWN_REQUEST_KEYS",
                context={'keys': sorted(unknown)}
            )
        if 'features' not in data:
            raise ConfigurationError(
                "Request must name its features",
                error_code="PARAM_REQUIRED",
                context={'parameter': 'features'}
            )
        return cls(**data)

    def to_dict(self) -> Dict[str, Union[str, List[str], int, Any]]:
        return {key: value for key, value in self.__dict__.items() if value is not None}
