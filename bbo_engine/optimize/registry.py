"""
Registry of optimization methods.

A registry maps method names to optimizer factories and their default
parameters. Registries are immutable; with_method() returns a new one.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, List, Mapping

import numpy as np

from ..config import Parameters
from ..core.evaluator import Evaluator
from ..errors import ConfigurationError
from .optimizer import Optimizer
from .random_search import random_searcher
from .resampling_memetic import (
    RIS_DEFAULT_PARAMETERS,
    RS_DEFAULT_PARAMETERS,
    resampling_inheritance_memetic_searcher,
    resampling_memetic_searcher,
)


OptimizerFactory = Callable[[Evaluator, Parameters, np.random.Generator], Optimizer]


@dataclass(frozen=True)
class MethodSpec:
    """An optimization method: its name, factory and default parameters."""
    name: str
    factory: OptimizerFactory
    defaults: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


class MethodRegistry:
    """Read-only mapping from method names to MethodSpecs."""

    def __init__(self, methods: List[MethodSpec]):
        self._methods = MappingProxyType({m.name: m for m in methods})

    @property
    def names(self) -> List[str]:
        return sorted(self._methods)

    def __contains__(self, name: str) -> bool:
        return name in self._methods

    def get(self, name: str) -> MethodSpec:
        """
        Look up a method by name.

        Raises:
            ConfigurationError: If no method has that name
        """
        if not isinstance(name, str) or name not in self._methods:
            raise ConfigurationError(
                f"The method specified, {name}, is NOT among the valid methods: {self.names}"
            )
        return self._methods[name]

    def with_method(self, spec: MethodSpec) -> "MethodRegistry":
        """New registry with spec added (or replacing a method of the same name)."""
        methods = dict(self._methods)
        methods[spec.name] = spec
        return MethodRegistry(list(methods.values()))


DEFAULT_REGISTRY = MethodRegistry([
    MethodSpec("random_search", random_searcher),
    MethodSpec("resampling_memetic_search", resampling_memetic_searcher, RS_DEFAULT_PARAMETERS),
    MethodSpec(
        "resampling_inheritance_memetic_search",
        resampling_inheritance_memetic_searcher,
        RIS_DEFAULT_PARAMETERS
    ),
])
