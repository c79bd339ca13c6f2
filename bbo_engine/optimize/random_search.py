"""
Pure random search, the simplest Ask-Tell optimizer.
"""

from typing import List, Optional, Sequence

import numpy as np

from ..config import Parameters
from ..core.evaluator import Evaluator
from .optimizer import AskTellOptimizer


class RandomSearcher(AskTellOptimizer):
    """Samples one uniformly random candidate per ask() and keeps the best one told."""

    name = "Random Search"

    def __init__(self, evaluator: Evaluator, rng: np.random.Generator):
        super().__init__(evaluator, rng)
        self.best: Optional[np.ndarray] = None
        self.best_fitness = evaluator.worst_fitness()
        self._pending: Optional[List[np.ndarray]] = None

    def ask(self) -> List[np.ndarray]:
        self._pending = [self.search_space.random_individual(self.rng)]
        return self._pending

    def tell(self, candidates: Sequence[np.ndarray], fitnesses: Sequence[float]) -> int:
        if self._pending is None or len(candidates) != len(self._pending) or not all(
            np.array_equal(c, p) for c, p in zip(candidates, self._pending)
        ):
            raise RuntimeError("tell() must be called with the candidates of the last ask()")
        if len(fitnesses) != len(candidates):
            raise ValueError("Expected one fitness value per candidate")

        self._pending = None
        num_better = 0
        for candidate, fitness in zip(candidates, fitnesses):
            if self.evaluator.is_better(fitness, self.best_fitness):
                self.best = candidate
                self.best_fitness = fitness
                num_better += 1
        return num_better


def random_searcher(evaluator: Evaluator, parameters: Parameters, rng: np.random.Generator) -> RandomSearcher:
    return RandomSearcher(evaluator, rng)
