"""Pytest configuration and fixtures."""
import pytest
import numpy as np

from bbo_engine.config import layer_parameters
from bbo_engine.core.evaluator import Evaluator
from bbo_engine.core.problem import FitnessScheme, FunctionBasedProblem
from bbo_engine.core.search_space import SearchSpace


def sphere(x):
    return float(np.sum(np.asarray(x) ** 2))


@pytest.fixture
def rng():
    """Seeded random generator."""
    return np.random.default_rng(42)


@pytest.fixture
def box3():
    """Three unit-wide dimensions at different offsets."""
    return SearchSpace([(0.0, 1.0), (2.0, 3.0), (4.0, 5.0)])


@pytest.fixture
def sphere_problem():
    """2-D sphere over [-10, 10]^2 with known optimum 0."""
    return FunctionBasedProblem(
        objective=sphere,
        search_space=SearchSpace.symmetric(2, (-10.0, 10.0)),
        name="sphere",
        opt_value=0.0
    )


@pytest.fixture
def max_problem():
    """Maximize -sum(x^2) over [-1, 1]^3."""
    return FunctionBasedProblem(
        objective=lambda x: -sphere(x),
        search_space=SearchSpace.symmetric(3, (-1.0, 1.0)),
        fitness_scheme=FitnessScheme.MAXIMIZING
    )


@pytest.fixture
def sphere_evaluator(sphere_problem):
    return Evaluator(sphere_problem)


@pytest.fixture
def quiet_params():
    """Parameters with tracing off and a fixed seed."""
    return layer_parameters({
        'ShowTrace': False,
        'RandomizeRngSeed': False,
        'RngSeed': 7
    })
