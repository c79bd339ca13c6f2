"""
Configuration management.

Process settings are loaded with Pydantic settings from environment variables
(prefixed ``BBO_``) and ``.env`` files. Optimization run parameters are a typed,
frozen Pydantic model built by layering partial mappings over the defaults.
"""

import numbers
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.search_space import SearchSpace
from .errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="BBO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str = Field(default="bbo_engine.log", description="Log file path")

    # Optimization
    default_method: str = Field(
        default="resampling_inheritance_memetic_search",
        description="Optimizer used when no method is given"
    )
    max_func_evals_warning: float = Field(
        default=1e8,
        description="Warn when MaxFuncEvals is at least this large"
    )
    max_steps_warning: float = Field(
        default=1e7,
        description="Warn when MaxSteps is at least this large"
    )


# Global settings instance
settings = Settings()


Range = Tuple[float, float]


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _is_range(value: Any) -> bool:
    return (
        isinstance(value, (tuple, list))
        and len(value) == 2
        and all(_is_number(v) for v in value)
    )


class Parameters(BaseModel):
    """
    Recognized options of an optimization run.

    Options can be given by their CamelCase key (``MaxTime``) or by attribute
    name (``max_time``). Instances are frozen; the driver records runtime
    resolved values (the used random seed) on an updated copy.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        frozen=True,
        arbitrary_types_allowed=True
    )

    # Problem definition
    num_dimensions: Optional[int] = Field(default=None, alias="NumDimensions")
    search_range: Union[Range, List[Range]] = Field(default=(-10.0, 10.0), alias="SearchRange")
    search_space: Optional[SearchSpace] = Field(default=None, alias="SearchSpace")

    # Budgets: MaxTime takes precedence over MaxFuncEvals which takes precedence over MaxSteps
    max_time: Optional[float] = Field(default=None, alias="MaxTime")
    max_func_evals: Optional[int] = Field(default=None, alias="MaxFuncEvals")
    max_steps: int = Field(default=10000, alias="MaxSteps")
    min_delta_fitness_tolerance: float = Field(default=1e-50, alias="MinDeltaFitnessTolerance")
    fitness_tolerance: float = Field(default=1e-8, alias="FitnessTolerance")
    max_num_steps_without_func_evals: int = Field(default=100, alias="MaxNumStepsWithoutFuncEvals")

    # Tracing
    show_trace: bool = Field(default=True, alias="ShowTrace")
    trace_interval: float = Field(default=0.5, alias="TraceInterval")

    # Randomness
    randomize_rng_seed: bool = Field(default=True, alias="RandomizeRngSeed")
    rng_seed: int = Field(default=1234, alias="RngSeed")

    # Algorithm specific
    population_size: int = Field(default=50, alias="PopulationSize")
    precision_ratio: float = Field(default=0.40, alias="PrecisionRatio")
    precision_threshold: float = Field(default=1e-6, alias="PrecisionThreshold")
    inheritance_ratio: float = Field(default=0.30, alias="InheritanceRatio")

    @field_validator("search_range", mode="before")
    @classmethod
    def parse_search_range(cls, v):
        """Accept a single (min, max) pair or a non-empty list of pairs."""
        if _is_range(v):
            return (float(v[0]), float(v[1]))
        if isinstance(v, (list, tuple)) and len(v) > 0 and all(_is_range(r) for r in v):
            return [(float(lo), float(hi)) for lo, hi in v]
        raise ValueError(f"Invalid search range specification: {v!r}")

    @field_validator("num_dimensions")
    @classmethod
    def check_num_dimensions(cls, v):
        if v is not None and v < 1:
            raise ValueError("The number of dimensions MUST be a positive number")
        return v

    @field_validator("max_time")
    @classmethod
    def check_max_time(cls, v):
        if v is not None and v <= 0.0:
            raise ValueError("The max_time must be a positive number")
        return v

    @field_validator("max_func_evals")
    @classmethod
    def check_max_func_evals(cls, v):
        if v is not None and v < 1:
            raise ValueError("The number of function evals MUST be a positive number")
        return v

    @field_validator("max_steps")
    @classmethod
    def check_max_steps(cls, v):
        if v < 1:
            raise ValueError("The number of iterations MUST be a positive number")
        return v

    @field_validator("population_size")
    @classmethod
    def check_population_size(cls, v):
        if v < 2:
            raise ValueError("The population size MUST be at least 2")
        return v

    @field_validator("precision_ratio", "precision_threshold")
    @classmethod
    def check_positive(cls, v):
        if v <= 0.0:
            raise ValueError("Precision settings MUST be positive")
        return v

    @field_validator("inheritance_ratio")
    @classmethod
    def check_inheritance_ratio(cls, v):
        if not 0.0 < v <= 1.0:
            raise ValueError("The inheritance ratio MUST be in (0, 1]")
        return v

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary keyed by the CamelCase option names."""
        return self.model_dump(by_alias=True)


# Map CamelCase keys and attribute names to attribute names
_KEY_TO_FIELD: Dict[str, str] = {}
for _name, _field in Parameters.model_fields.items():
    _KEY_TO_FIELD[_name] = _name
    _KEY_TO_FIELD[_field.alias] = _name


def _canonical_key(key: str) -> str:
    try:
        return _KEY_TO_FIELD[key]
    except KeyError:
        raise ConfigurationError(f"Unknown parameter: {key}") from None


def layer_parameters(*layers: Optional[Union[Mapping[str, Any], Parameters]]) -> Parameters:
    """
    Build Parameters from partial layers.

    Layers are applied in order: a later layer overrides an earlier one only
    for the keys it contains. Keys no layer mentions take the defaults.

    Args:
        layers: Mappings (or Parameters, whose explicitly set values are used).
            ``None`` layers are skipped.

    Returns:
        Validated Parameters

    Raises:
        ConfigurationError: If any layer contains an unrecognized key or an
            invalid value
    """
    merged: Dict[str, Any] = {}

    for layer in layers:
        if layer is None:
            continue
        if isinstance(layer, Parameters):
            layer = layer.model_dump(exclude_unset=True)
        for key, value in layer.items():
            merged[_canonical_key(key)] = value

    try:
        return Parameters(**merged)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid parameters: {problems}") from e
