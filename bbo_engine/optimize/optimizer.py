"""
Optimizer base classes.

Two interaction protocols are supported:
- Ask-Tell: ask() proposes candidates without evaluating them, tell() receives
  their fitness values computed elsewhere
- Stepping: step() performs one self-contained unit of search, including the
  evaluations it needs

Each concrete optimizer declares its protocol through its ``kind`` tag and the
driver dispatches on that tag in step_optimizer().
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Sequence

import numpy as np

from ..core.evaluator import Evaluator


class OptimizerKind(Enum):
    ASK_TELL = "ask_tell"
    STEPPING = "stepping"


class Optimizer(ABC):
    """Abstract base class for optimizers."""

    kind: OptimizerKind
    name: str = "Optimizer"

    def __init__(self, evaluator: Evaluator, rng: np.random.Generator):
        self.evaluator = evaluator
        self.rng = rng

    @property
    def search_space(self):
        return self.evaluator.search_space

    @property
    def has_ask_tell_interface(self) -> bool:
        return self.kind is OptimizerKind.ASK_TELL


class AskTellOptimizer(Optimizer):
    """
    Optimizer that separates candidate proposal from fitness reporting.

    tell() must be called with the candidates returned by the most recent
    ask() (or equal copies of them), in the same order.
    """

    kind = OptimizerKind.ASK_TELL

    @abstractmethod
    def ask(self) -> List[np.ndarray]:
        """Return candidates to evaluate. Must not evaluate them."""
        pass

    @abstractmethod
    def tell(self, candidates: Sequence[np.ndarray], fitnesses: Sequence[float]) -> int:
        """
        Report the fitness of the last asked candidates.

        Returns:
            Number of improvements the candidates brought
        """
        pass


class SteppingOptimizer(Optimizer):
    """Optimizer that evaluates candidates itself during step()."""

    kind = OptimizerKind.STEPPING

    @abstractmethod
    def step(self) -> int:
        """
        Perform one unit of search.

        Returns:
            Number of improvements achieved (0 if not tracked)
        """
        pass


def step_optimizer(optimizer: Optimizer, evaluator: Evaluator) -> int:
    """Run one driver iteration of optimizer and return its improvement count."""
    if optimizer.kind is OptimizerKind.ASK_TELL:
        candidates = optimizer.ask()
        fitnesses = [evaluator.evaluate(c) for c in candidates]
        return optimizer.tell(candidates, fitnesses)
    return optimizer.step()
