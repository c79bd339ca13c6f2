"""
Optimization problems: objective function, fitness ordering and search space.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

import numpy as np

from .search_space import SearchSpace


Objective = Callable[[np.ndarray], float]


class FitnessScheme(Enum):
    """Ordering of fitness values."""
    MINIMIZING = "minimizing"
    MAXIMIZING = "maximizing"

    def is_better(self, a: float, b: float) -> bool:
        """True if fitness a is strictly better than fitness b."""
        if self is FitnessScheme.MINIMIZING:
            return a < b
        return a > b

    @property
    def worst_fitness(self) -> float:
        return float("inf") if self is FitnessScheme.MINIMIZING else float("-inf")


@dataclass(frozen=True)
class FunctionBasedProblem:
    """A fixed-dimensional problem defined by an objective over a search space."""
    objective: Objective
    search_space: SearchSpace
    fitness_scheme: FitnessScheme = FitnessScheme.MINIMIZING
    name: str = ""
    opt_value: Optional[float] = None  # known optimal fitness, if any

    @property
    def numdims(self) -> int:
        return self.search_space.numdims

    def fitness(self, x: np.ndarray) -> float:
        return self.objective(x)


@dataclass(frozen=True)
class ProblemFamily:
    """
    A problem defined for any number of dimensions.

    The same (min, max) range is used for every dimension of the
    fixed-dimensional problems it produces.
    """
    objective: Objective
    search_range: Tuple[float, float] = (-10.0, 10.0)
    fitness_scheme: FitnessScheme = FitnessScheme.MINIMIZING
    name: str = ""
    opt_value: Optional[float] = None

    def fixed_dim_problem(self, numdims: int) -> FunctionBasedProblem:
        name = f"{self.name} ({numdims}D)" if self.name else ""
        return FunctionBasedProblem(
            objective=self.objective,
            search_space=SearchSpace.symmetric(numdims, self.search_range),
            fitness_scheme=self.fitness_scheme,
            name=name,
            opt_value=self.opt_value
        )
