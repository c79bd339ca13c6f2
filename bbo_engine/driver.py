"""
High-level driver for optimization runs.

This module coordinates:
- Problem setup from a function, a problem family or a ready problem
- Parameter layering and validation, random seed resolution
- Optimizer construction through the method registry
- The budgeted run loop with progress tracing
"""

import math
import numbers
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Tuple, Union
import logging

import numpy as np
import pandas as pd

from .config import Parameters, layer_parameters, settings
from .core.evaluator import Evaluator
from .core.problem import FunctionBasedProblem, ProblemFamily
from .core.search_space import SearchSpace
from .errors import ConfigurationError
from .optimize.optimizer import Optimizer, step_optimizer
from .optimize.registry import DEFAULT_REGISTRY, MethodRegistry

logger = logging.getLogger(__name__)


TraceSink = Callable[[str], None]

# Seeds are drawn from [1, MAX_SEED) when RandomizeRngSeed is set
MAX_SEED = 2**31 - 1


class TerminationReason(str, Enum):
    MAX_TIME = "Max time reached"
    MAX_FUNC_EVALS = "Max number of function evaluations reached"
    NO_FUNC_EVALS = "Too many steps without any function evaluations (probably search has converged)"
    MAX_STEPS = "Max number of steps reached"
    DELTA_FITNESS = "Delta fitness below tolerance"
    FITNESS_TOLERANCE = "Within fitness tolerance of optimum"


@dataclass
class OptimizationResult:
    """
    Result of an optimization run.

    Unpacks as the tuple (best_candidate, best_fitness, termination_reason,
    elapsed_time, parameters, num_evals).
    """
    best_candidate: np.ndarray
    best_fitness: float
    termination_reason: str
    elapsed_time: float
    parameters: Parameters
    num_evals: int
    history: pd.DataFrame = field(default_factory=pd.DataFrame)

    def __iter__(self) -> Iterator[Any]:
        return iter((
            self.best_candidate,
            self.best_fitness,
            self.termination_reason,
            self.elapsed_time,
            self.parameters,
            self.num_evals
        ))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        params = self.parameters.to_dict()
        params.pop("SearchSpace", None)
        return {
            "best_candidate": [float(x) for x in self.best_candidate],
            "best_fitness": float(self.best_fitness),
            "termination_reason": str(self.termination_reason),
            "elapsed_time": self.elapsed_time,
            "num_evals": self.num_evals,
            "parameters": params
        }


@dataclass
class OptimizationSetup:
    """Everything needed to start a run, as produced by setup_bboptimize()."""
    optimizer: Optimizer
    problem: FunctionBasedProblem
    evaluator: Evaluator
    parameters: Parameters
    rng: np.random.Generator


ProblemLike = Union[FunctionBasedProblem, ProblemFamily, Callable[[np.ndarray], float]]


# ---------------------------
# Setup
# ---------------------------

def setup_problem(function_or_problem: ProblemLike, parameters: Parameters) -> FunctionBasedProblem:
    """
    Create a fixed-dimensional problem.

    A FunctionBasedProblem is used as is. A ProblemFamily needs NumDimensions.
    For a plain function the search space is SearchSpace if given, otherwise
    SearchRange: one (min, max) pair used for NumDimensions dimensions, or a
    list with one pair per dimension.

    Raises:
        ConfigurationError: If the dimensionality or search range is missing or invalid
    """
    if isinstance(function_or_problem, FunctionBasedProblem):
        return function_or_problem

    if isinstance(function_or_problem, ProblemFamily):
        if parameters.num_dimensions is None:
            raise ConfigurationError(
                "You MUST specify the number of dimensions in a solution when a problem family is given"
            )
        return function_or_problem.fixed_dim_problem(parameters.num_dimensions)

    if not callable(function_or_problem):
        raise ConfigurationError(f"Cannot optimize object of type {type(function_or_problem).__name__}")

    search_range = parameters.search_range
    if parameters.search_space is not None:
        ss = parameters.search_space
    elif isinstance(search_range, tuple):
        if parameters.num_dimensions is None:
            raise ConfigurationError(
                f"You MUST specify the number of dimensions in a solution when giving a search range {search_range}"
            )
        ss = SearchSpace.symmetric(parameters.num_dimensions, search_range)
    else:
        if parameters.num_dimensions is not None and parameters.num_dimensions != len(search_range):
            raise ConfigurationError(
                f"NumDimensions is {parameters.num_dimensions} but SearchRange has {len(search_range)} ranges"
            )
        ss = SearchSpace(search_range)

    return FunctionBasedProblem(objective=function_or_problem, search_space=ss)


def resolve_rng(parameters: Parameters) -> Tuple[Parameters, np.random.Generator]:
    """
    Create the run's random generator.

    If RandomizeRngSeed is set a fresh seed is drawn and recorded as RngSeed
    in the returned parameters, so the run can be reproduced.
    """
    if parameters.randomize_rng_seed:
        seed = int(np.random.default_rng().integers(1, MAX_SEED))
        parameters = parameters.model_copy(update={"rng_seed": seed})
    return parameters, np.random.default_rng(parameters.rng_seed)


def _warn_on_large_budgets(parameters: Parameters):
    if parameters.max_func_evals is not None and parameters.max_func_evals >= settings.max_func_evals_warning:
        logger.warning(f"Number of allowed function evals is {parameters.max_func_evals}; this can take a LONG time")
    if parameters.max_steps >= settings.max_steps_warning:
        logger.warning(f"Number of allowed iterations is {parameters.max_steps}; this can take a LONG time")


def setup_bboptimize(
    function_or_problem: ProblemLike,
    method: Optional[str] = None,
    parameters: Optional[Mapping[str, Any]] = None,
    registry: MethodRegistry = DEFAULT_REGISTRY,
    **overrides
) -> OptimizationSetup:
    """
    Validate the configuration and create the optimizer for a run.

    Args:
        function_or_problem: Objective function, ProblemFamily or FunctionBasedProblem
        method: Registered method name (default: settings.default_method)
        parameters: Partial parameter mapping
        registry: Method registry to look the method up in
        overrides: Parameter values by attribute name (e.g. max_time=5.0),
            applied over ``parameters``

    Returns:
        OptimizationSetup with the optimizer, problem, evaluator, parameters and rng

    Raises:
        ConfigurationError: On any invalid configuration, or when the objective
            does not return a number
    """
    method = method or settings.default_method
    spec = registry.get(method)

    params = layer_parameters(spec.defaults, parameters, overrides)
    problem = setup_problem(function_or_problem, params)
    params, rng = resolve_rng(params)

    # Probe the objective once; this evaluation is not counted
    ind = problem.search_space.random_individual(rng)
    res = problem.fitness(ind)
    if not isinstance(res, numbers.Real) or isinstance(res, bool):
        raise ConfigurationError(
            f"The supplied function does NOT return a number when called with a potential solution "
            f"(when called with {ind} it returned {res!r}) so we cannot optimize it!"
        )

    _warn_on_large_budgets(params)

    evaluator = Evaluator(problem)
    optimizer = spec.factory(evaluator, params, rng)

    return OptimizationSetup(
        optimizer=optimizer,
        problem=problem,
        evaluator=evaluator,
        parameters=params,
        rng=rng
    )


# ---------------------------
# Run loop
# ---------------------------

def run_optimizer(
    optimizer: Optimizer,
    evaluator: Evaluator,
    parameters: Parameters,
    trace: Optional[TraceSink] = None
) -> OptimizationResult:
    """
    Run optimizer until a termination condition is met.

    Conditions are checked before every step in this order: max time, max
    function evals, too many steps without function evals, max steps, delta
    fitness below tolerance, within fitness tolerance of a known optimum.

    MaxTime, if set, disables the function eval and step budgets. Otherwise
    MaxFuncEvals, if set, disables the step budget.

    Args:
        optimizer: Optimizer to run
        evaluator: Evaluator the optimizer was created with
        parameters: Run parameters
        trace: Sink for progress lines (default: log at INFO level).
            Only used when ShowTrace is set.

    Returns:
        OptimizationResult
    """
    sink = trace or logger.info

    def tr(msg: str):
        if parameters.show_trace:
            sink(msg)

    if parameters.max_time is None:
        max_time = math.inf
        if parameters.max_func_evals is not None:
            max_fevals = parameters.max_func_evals
            max_steps = math.inf
        else:
            max_steps = parameters.max_steps
            max_fevals = math.inf
    else:
        max_steps = math.inf
        max_fevals = math.inf
        max_time = parameters.max_time

    num_better = 0
    num_better_since_last = 0
    tr(f"Starting optimization with optimizer {optimizer.name}")

    termination_reason = None

    last_num_evals = -1
    num_steps_without_evals = 0

    step = 1
    t = last_report_time = start_time = time.time()
    elapsed_time = 0.0

    while True:
        if elapsed_time > max_time:
            termination_reason = TerminationReason.MAX_TIME
            break

        if evaluator.num_evals > max_fevals:
            termination_reason = TerminationReason.MAX_FUNC_EVALS
            break

        if evaluator.num_evals == last_num_evals:
            num_steps_without_evals += 1
            if num_steps_without_evals > parameters.max_num_steps_without_func_evals:
                termination_reason = TerminationReason.NO_FUNC_EVALS
                break
        else:
            num_steps_without_evals = 0
        last_num_evals = evaluator.num_evals

        if step > max_steps:
            termination_reason = TerminationReason.MAX_STEPS
            break

        if evaluator.delta_fitness() < parameters.min_delta_fitness_tolerance:
            termination_reason = TerminationReason.DELTA_FITNESS
            break

        if evaluator.fitness_is_within_ftol(parameters.fitness_tolerance):
            termination_reason = TerminationReason.FITNESS_TOLERANCE
            break

        # Report on progress every now and then
        if (t - last_report_time) > parameters.trace_interval:
            last_report_time = t
            num_better += num_better_since_last

            msg = f"{elapsed_time:.2f} secs, {evaluator.num_evals} evals, {step} steps"
            # Optimizers that do not count improvements report 0
            if num_better_since_last > 0:
                msg += f", improv/step: {num_better / step:.3f} (last = {num_better_since_last / step:.4f})"
                num_better_since_last = 0
            if evaluator.num_evals > 0:
                msg += f", {evaluator.best_fitness:.9f}"
            tr(msg)

        num_better_since_last += step_optimizer(optimizer, evaluator)

        step += 1
        t = time.time()
        elapsed_time = t - start_time

    step -= 1  # one too high after the loop

    tr(f"Optimization stopped after {step} steps and {elapsed_time:.2f} seconds")
    tr(f"Termination reason: {termination_reason.value}")
    if elapsed_time > 0:
        tr(f"Steps per second = {step / elapsed_time:.2f}")
        tr(f"Function evals per second = {evaluator.num_evals / elapsed_time:.2f}")
    if step > 0:
        tr(f"Improvements/step = {(num_better + num_better_since_last) / step:.4f}")
    tr(f"Total function evaluations = {evaluator.num_evals}")
    tr(f"Best candidate found: {evaluator.best_candidate}")
    tr(f"Fitness: {evaluator.best_fitness}")

    return OptimizationResult(
        best_candidate=evaluator.best_candidate,
        best_fitness=evaluator.best_fitness,
        termination_reason=termination_reason.value,
        elapsed_time=elapsed_time,
        parameters=parameters,
        num_evals=evaluator.num_evals,
        history=evaluator.archive.history_frame()
    )


def bboptimize(
    function_or_problem: ProblemLike,
    method: Optional[str] = None,
    parameters: Optional[Mapping[str, Any]] = None,
    registry: MethodRegistry = DEFAULT_REGISTRY,
    trace: Optional[TraceSink] = None,
    **overrides
) -> OptimizationResult:
    """
    Optimize function_or_problem with the given method.

    Example:
        result = bboptimize(lambda x: sum(x**2), SearchRange=(-5.0, 5.0),
                            NumDimensions=3, MaxTime=2.0)

    CamelCase keys are accepted in ``parameters``; keyword overrides use
    attribute names (max_time=2.0) or CamelCase names.
    """
    setup = setup_bboptimize(
        function_or_problem,
        method=method,
        parameters=parameters,
        registry=registry,
        **overrides
    )
    return run_optimizer(setup.optimizer, setup.evaluator, setup.parameters, trace=trace)
