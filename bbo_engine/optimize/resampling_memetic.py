"""
Resampling memetic search: RS and RIS.

The Re-sampling Search (RS) memetic algorithm is described in:

    F. Caraffini, F. Neri, M. Gongora and B. N. Passow, "Re-sampling Search:
    A Seriously Simple Memetic Approach with a High Performance", 2013.

and its sibling Re-sampled Inheritance Search (RIS) in:

    F. Caraffini, F. Neri, B. N. Passow and G. Iacca, "Re-sampled Inheritance
    Search: High Performance Despite the Simplicity", 2013.

Each step draws two random candidates, keeps the better one as elite if it
beats the current elite, and then runs a coordinate-wise local search from
the elite with step sizes that halve whenever a full pass fails to improve.
"""

from enum import Enum
from types import MappingProxyType
from typing import Tuple

import numpy as np
import logging

from ..config import Parameters
from ..core.evaluator import Evaluator
from .optimizer import SteppingOptimizer

logger = logging.getLogger(__name__)


RS_DEFAULT_PARAMETERS = MappingProxyType({
    "PrecisionRatio": 0.40,     # 40% of the diameter is the initial step length
    "PrecisionThreshold": 1e-6  # value used in the papers
})

RIS_DEFAULT_PARAMETERS = MappingProxyType({
    **RS_DEFAULT_PARAMETERS,
    "InheritanceRatio": 0.30    # on average 30% of positions are inherited from the elite
})


class Resampling(Enum):
    RANDOM = "random"
    INHERITANCE = "inheritance"


class ResamplingMemeticSearcher(SteppingOptimizer):
    """
    Memetic searcher with an elite, per-dimension precisions and resampling.

    With Resampling.RANDOM this is RS, with Resampling.INHERITANCE it is RIS.
    """

    def __init__(
        self,
        evaluator: Evaluator,
        parameters: Parameters,
        rng: np.random.Generator,
        resampling: Resampling = Resampling.RANDOM
    ):
        """
        Initialize searcher and evaluate a random initial elite.

        Args:
            evaluator: Evaluator of the problem to optimize
            parameters: Run parameters (PrecisionRatio, PrecisionThreshold, InheritanceRatio)
            rng: Random generator of the run
            resampling: Resampling strategy
        """
        super().__init__(evaluator, rng)
        self.parameters = parameters
        self.resampling = resampling
        if resampling is Resampling.INHERITANCE:
            self.name = "Resampling Inheritance Memetic Search (RIS)"
        else:
            self.name = "Resampling Memetic Search (RS)"

        self.diameters = np.array(self.search_space.dim_delta(), dtype=float)
        self.precisions = parameters.precision_ratio * self.diameters

        self.elite = self.search_space.random_individual(rng)
        self.elite_fitness = evaluator.evaluate(self.elite)
        self.num_elite_updates = 0

    # ------------------------------------------------------------
    # Resampling
    # ------------------------------------------------------------

    def resample(self) -> np.ndarray:
        if self.resampling is Resampling.INHERITANCE:
            return self.random_resample_with_inheritance()
        return self.random_resample()

    def random_resample(self) -> np.ndarray:
        return self.search_space.random_individual(self.rng)

    def random_resample_with_inheritance(self) -> np.ndarray:
        """
        Random candidate that inherits a circular run of the elite's coordinates.

        Starting at a random dimension, coordinates are copied from the elite
        while uniform draws stay below Cr (equation 3 of the RIS paper).
        """
        xt = self.random_resample()
        n = len(xt)
        i = int(self.rng.integers(n))
        cr = 0.5 ** (1.0 / (self.parameters.inheritance_ratio * n))

        k = 0
        while k < n and self.rng.random() < cr:
            xt[i] = self.elite[i]
            i = (i + 1) % n
            k += 1

        return xt

    # ------------------------------------------------------------
    # Search
    # ------------------------------------------------------------

    def step(self) -> int:
        updates_before = self.num_elite_updates

        trial, fitness = self.evaluator.best_of(self.resample(), self.resample())

        # The RS and RIS papers differ on whether the trial replaces the elite
        # before or after local search. The elite is replaced right away; the
        # archive keeps the overall best regardless.
        self.set_as_elite_if_better(trial, fitness)

        self.local_search()
        return self.num_elite_updates - updates_before

    def set_as_elite_if_better(self, candidate: np.ndarray, fitness: float) -> bool:
        if self.evaluator.is_better(fitness, self.elite_fitness):
            self.elite = candidate
            self.elite_fitness = fitness
            self.num_elite_updates += 1
            return True
        return False

    def stop_due_to_low_precision(self, precisions: np.ndarray) -> bool:
        """True when the norm of precision/diameter drops below PrecisionThreshold."""
        ratios = np.divide(
            precisions, self.diameters,
            out=np.zeros_like(precisions),
            where=self.diameters > 0
        )
        return bool(np.linalg.norm(ratios) < self.parameters.precision_threshold)

    def local_search(self) -> Tuple[np.ndarray, float]:
        """
        Coordinate-wise local search from the elite.

        Works on copies of the elite and the initial precisions. Returns the
        final candidate and its fitness, which is never worse than the elite
        fitness on entry.
        """
        ps = self.precisions.copy()
        xt = self.elite.copy()
        tfitness = self.elite_fitness
        mins = self.search_space.dim_min()
        maxs = self.search_space.dim_max()

        while not self.stop_due_to_low_precision(ps):
            xs = xt.copy()
            # Trials are clamped to the box so the search cannot leave it

            for i in range(len(xt)):
                xs[i] = max(xt[i] - ps[i], mins[i])
                if self.evaluator.candidate_is_better(xs, tfitness):
                    xt[i] = xs[i]
                    tfitness = self.evaluator.last_fitness
                    continue

                xs[i] = min(xt[i] + ps[i] / 2, maxs[i])
                if self.evaluator.candidate_is_better(xs, tfitness):
                    xt[i] = xs[i]
                    tfitness = self.evaluator.last_fitness
                else:
                    xs[i] = xt[i]

            if not self.set_as_elite_if_better(xt.copy(), tfitness):
                ps = ps / 2

        logger.debug(f"Local search done: fitness {tfitness}, {self.evaluator.num_evals} evals")
        return xt, tfitness


def resampling_memetic_searcher(
    evaluator: Evaluator, parameters: Parameters, rng: np.random.Generator
) -> ResamplingMemeticSearcher:
    return ResamplingMemeticSearcher(evaluator, parameters, rng, Resampling.RANDOM)


def resampling_inheritance_memetic_searcher(
    evaluator: Evaluator, parameters: Parameters, rng: np.random.Generator
) -> ResamplingMemeticSearcher:
    return ResamplingMemeticSearcher(evaluator, parameters, rng, Resampling.INHERITANCE)
