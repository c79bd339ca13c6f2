"""Search spaces, problems and evaluation."""

from .search_space import SearchSpace, concatenate
from .problem import FitnessScheme, FunctionBasedProblem, ProblemFamily
from .evaluator import Archive, Evaluator, FitnessImprovement

__all__ = [
    "SearchSpace",
    "concatenate",
    "FitnessScheme",
    "FunctionBasedProblem",
    "ProblemFamily",
    "Archive",
    "Evaluator",
    "FitnessImprovement"
]
