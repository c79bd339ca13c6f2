"""Unit tests for RS and RIS memetic search."""
import pytest
import numpy as np

from bbo_engine.config import layer_parameters
from bbo_engine.core.evaluator import Evaluator
from bbo_engine.core.problem import FunctionBasedProblem
from bbo_engine.core.search_space import SearchSpace
from bbo_engine.optimize.optimizer import OptimizerKind
from bbo_engine.optimize.resampling_memetic import (
    Resampling,
    ResamplingMemeticSearcher,
    resampling_inheritance_memetic_searcher,
    resampling_memetic_searcher,
)


@pytest.fixture
def rs(sphere_evaluator, quiet_params, rng):
    return resampling_memetic_searcher(sphere_evaluator, quiet_params, rng)


@pytest.fixture
def ris(sphere_evaluator, quiet_params, rng):
    return resampling_inheritance_memetic_searcher(sphere_evaluator, quiet_params, rng)


def test_initialization(rs, sphere_evaluator):
    """Test initial elite, diameters and precisions."""
    assert rs.kind is OptimizerKind.STEPPING
    assert not rs.has_ask_tell_interface
    assert rs.name == "Resampling Memetic Search (RS)"
    assert sphere_evaluator.num_evals == 1
    assert rs.elite in sphere_evaluator.search_space
    assert rs.elite_fitness == sphere_evaluator.best_fitness
    assert list(rs.diameters) == [20.0, 20.0]
    assert np.allclose(rs.precisions, [8.0, 8.0])


def test_ris_is_inheritance_variant(ris):
    assert ris.resampling is Resampling.INHERITANCE
    assert ris.name == "Resampling Inheritance Memetic Search (RIS)"


def test_random_resample_in_space(rs):
    for _ in range(20):
        assert rs.resample() in rs.search_space


def test_inheritance_copies_circular_run_of_elite(sphere_evaluator, rng):
    """Test that inherited coordinates form a contiguous circular run."""
    problem = FunctionBasedProblem(
        objective=lambda x: float(np.sum(x)),
        search_space=SearchSpace.symmetric(10, (0.0, 1.0))
    )
    params = layer_parameters({'InheritanceRatio': 0.5})
    searcher = ResamplingMemeticSearcher(Evaluator(problem), params, rng, Resampling.INHERITANCE)
    # An elite outside the box makes inherited coordinates recognizable
    searcher.elite = np.full(10, 5.0)

    num_inherited = []
    for _ in range(200):
        x = searcher.resample()
        inherited = x == 5.0
        k = int(inherited.sum())
        num_inherited.append(k)
        assert k <= 10
        if 0 < k < 10:
            # exactly one start of a run when walking the dimensions circularly
            starts = inherited & ~np.roll(inherited, 1)
            assert starts.sum() == 1

    assert 0 < np.mean(num_inherited) < 10


def test_step_counts_and_improves(rs, sphere_evaluator):
    """Test that a step evaluates at least the two resamples and keeps the elite monotone."""
    fitness_before = rs.elite_fitness
    evals_before = sphere_evaluator.num_evals

    improvements = rs.step()

    assert improvements >= 0
    assert sphere_evaluator.num_evals >= evals_before + 2
    assert rs.elite_fitness <= fitness_before
    assert sphere_evaluator.best_fitness <= rs.elite_fitness


def test_trial_better_than_elite_is_adopted(rs):
    """Test the elite update rule."""
    assert rs.set_as_elite_if_better(np.zeros(2), -1.0)
    assert rs.elite_fitness == -1.0
    assert not rs.set_as_elite_if_better(np.ones(2), 0.5)
    assert list(rs.elite) == [0.0, 0.0]


def test_local_search_never_worse_than_entry(rs, sphere_evaluator, rng):
    """Test monotone non-worsening of local search."""
    for _ in range(10):
        rs.elite = sphere_evaluator.search_space.random_individual(rng)
        rs.elite_fitness = sphere_evaluator.evaluate(rs.elite)
        entry_fitness = rs.elite_fitness
        entry_precisions = rs.precisions.copy()

        x, fitness = rs.local_search()

        assert fitness <= entry_fitness
        assert fitness == pytest.approx(float(np.sum(x ** 2)))
        assert np.array_equal(rs.precisions, entry_precisions)


def test_local_search_converges_on_sphere(rs):
    """Test that local search reaches the sphere's optimum closely."""
    rs.elite = np.array([7.0, -3.0])
    rs.elite_fitness = 58.0

    x, fitness = rs.local_search()

    assert fitness < 1e-6
    assert np.allclose(x, 0.0, atol=1e-3)


def test_local_search_stays_in_space(sphere_evaluator, quiet_params, rng):
    """Test that steps are clamped to the bounds."""
    problem = FunctionBasedProblem(
        objective=lambda x: float(np.sum(x)),
        search_space=SearchSpace([(0.0, 1.0), (-2.0, 2.0)])
    )
    searcher = ResamplingMemeticSearcher(Evaluator(problem), quiet_params, rng)

    x, fitness = searcher.local_search()

    assert x in problem.search_space
    assert np.allclose(x, [0.0, -2.0])
    assert fitness == pytest.approx(-2.0)


def test_precision_stopping_criterion(rs):
    """Test the normalized precision threshold and its strict decrease under halving."""
    ps = rs.precisions.copy()
    assert not rs.stop_due_to_low_precision(ps)

    norms = []
    while not rs.stop_due_to_low_precision(ps):
        norms.append(np.linalg.norm(ps / rs.diameters))
        ps = ps / 2
    assert all(a > b for a, b in zip(norms, norms[1:]))
    assert np.linalg.norm(ps / rs.diameters) < 1e-6


def test_zero_width_dimension(quiet_params, rng):
    """Test that a fixed dimension does not block termination."""
    problem = FunctionBasedProblem(
        objective=lambda x: float(np.sum(x ** 2)),
        search_space=SearchSpace([(1.0, 1.0), (-1.0, 1.0)])
    )
    searcher = ResamplingMemeticSearcher(Evaluator(problem), quiet_params, rng)

    x, fitness = searcher.local_search()

    assert x[0] == 1.0
    assert fitness == pytest.approx(1.0, abs=1e-6)
