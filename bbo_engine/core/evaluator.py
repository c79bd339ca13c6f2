"""
Counted evaluation of candidates and the best-so-far archive.
"""

import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from .problem import FitnessScheme, FunctionBasedProblem
from .search_space import SearchSpace


@dataclass
class FitnessImprovement:
    """One improving update of the archive's best fitness."""
    num_evals: int
    elapsed_time: float
    fitness: float


@dataclass
class Archive:
    """
    Best candidate and fitness seen during a run, plus the improvement history.

    The best fitness never gets worse: it is only changed by add_candidate,
    which replaces it when the offered fitness is strictly better.
    """
    fitness_scheme: FitnessScheme = FitnessScheme.MINIMIZING
    best_candidate: Optional[np.ndarray] = None
    best_fitness: Optional[float] = None
    fitness_history: List[FitnessImprovement] = field(default_factory=list)
    start_time: float = field(default_factory=time.time)

    def __post_init__(self):
        if self.best_fitness is None:
            self.best_fitness = self.fitness_scheme.worst_fitness

    def add_candidate(self, candidate: np.ndarray, fitness: float, num_evals: int) -> bool:
        """
        Offer an evaluated candidate to the archive.

        Returns:
            True if it became the new best
        """
        if not self.fitness_scheme.is_better(fitness, self.best_fitness):
            return False

        self.best_candidate = np.array(candidate, dtype=float, copy=True)
        self.best_fitness = fitness
        self.fitness_history.append(
            FitnessImprovement(num_evals, time.time() - self.start_time, fitness)
        )
        return True

    def delta_fitness(self) -> float:
        """Magnitude of the last best-fitness improvement (inf until there were two)."""
        if len(self.fitness_history) < 2:
            return float("inf")
        return abs(self.fitness_history[-1].fitness - self.fitness_history[-2].fitness)

    def history_frame(self) -> pd.DataFrame:
        """Improvement history as a DataFrame, e.g. for CSV export."""
        return pd.DataFrame(
            [(h.num_evals, h.elapsed_time, h.fitness) for h in self.fitness_history],
            columns=["num_evals", "elapsed_time", "fitness"]
        )


class Evaluator:
    """
    Evaluates candidates of a problem and keeps the run's archive.

    Every objective call goes through evaluate(), so num_evals increases by
    exactly one per evaluate() and by two per best_of().
    """

    def __init__(self, problem: FunctionBasedProblem, archive: Optional[Archive] = None):
        self.problem = problem
        self.archive = archive or Archive(fitness_scheme=problem.fitness_scheme)
        self.num_evals = 0
        self.last_fitness: Optional[float] = None

    @property
    def search_space(self) -> SearchSpace:
        return self.problem.search_space

    @property
    def numdims(self) -> int:
        return self.problem.numdims

    @property
    def fitness_scheme(self) -> FitnessScheme:
        return self.problem.fitness_scheme

    @property
    def best_fitness(self) -> float:
        return self.archive.best_fitness

    @property
    def best_candidate(self) -> Optional[np.ndarray]:
        return self.archive.best_candidate

    def evaluate(self, candidate: np.ndarray) -> float:
        """Call the objective once on candidate and record the result."""
        fitness = self.problem.fitness(candidate)
        self.num_evals += 1
        self.last_fitness = fitness
        self.archive.add_candidate(candidate, fitness, self.num_evals)
        return fitness

    def is_better(self, a: float, b: float) -> bool:
        return self.fitness_scheme.is_better(a, b)

    def candidate_is_better(self, candidate: np.ndarray, fitness: float) -> bool:
        """Evaluate candidate and compare it to a known fitness."""
        return self.is_better(self.evaluate(candidate), fitness)

    def best_of(self, candidate1: np.ndarray, candidate2: np.ndarray) -> Tuple[np.ndarray, float]:
        """
        Evaluate two candidates and return the better one with its fitness.

        Ties go to the first candidate.
        """
        f1 = self.evaluate(candidate1)
        f2 = self.evaluate(candidate2)
        if self.is_better(f2, f1):
            return candidate2, f2
        return candidate1, f1

    def delta_fitness(self) -> float:
        return self.archive.delta_fitness()

    def worst_fitness(self) -> float:
        return self.fitness_scheme.worst_fitness

    def fitness_is_within_ftol(self, ftol: float) -> bool:
        """True if the best fitness is within ftol of the problem's known optimum."""
        if self.problem.opt_value is None or self.archive.best_candidate is None:
            return False
        return abs(self.archive.best_fitness - self.problem.opt_value) < ftol
