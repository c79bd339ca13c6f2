"""Optimizers and the method registry."""

from .optimizer import (
    AskTellOptimizer,
    Optimizer,
    OptimizerKind,
    SteppingOptimizer,
    step_optimizer,
)
from .random_search import RandomSearcher
from .resampling_memetic import Resampling, ResamplingMemeticSearcher
from .registry import DEFAULT_REGISTRY, MethodRegistry, MethodSpec

__all__ = [
    "AskTellOptimizer",
    "Optimizer",
    "OptimizerKind",
    "SteppingOptimizer",
    "step_optimizer",
    "RandomSearcher",
    "Resampling",
    "ResamplingMemeticSearcher",
    "DEFAULT_REGISTRY",
    "MethodRegistry",
    "MethodSpec",
]
