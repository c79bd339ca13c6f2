"""
BBO Engine - black-box (derivative-free) optimization over bounded boxes.

This package provides:
- Search spaces: axis-aligned boxes with sampling and projection
- Evaluation: counted objective calls and a best-so-far archive
- Optimizers: Ask-Tell and Stepping algorithms, incl. RS/RIS memetic search
- Driver: budgeted optimization runs with progress tracing
"""

__version__ = "1.0.0"
__author__ = "BBO Engine Team"

from .errors import ConfigurationError
from .config import Parameters, layer_parameters
from .core.search_space import SearchSpace
from .core.problem import FitnessScheme, FunctionBasedProblem, ProblemFamily
from .core.evaluator import Archive, Evaluator
from .driver import (
    OptimizationResult,
    TerminationReason,
    bboptimize,
    run_optimizer,
    setup_bboptimize,
)

__all__ = [
    "ConfigurationError",
    "Parameters",
    "layer_parameters",
    "SearchSpace",
    "FitnessScheme",
    "FunctionBasedProblem",
    "ProblemFamily",
    "Archive",
    "Evaluator",
    "OptimizationResult",
    "TerminationReason",
    "bboptimize",
    "run_optimizer",
    "setup_bboptimize",
]
