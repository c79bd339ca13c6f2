"""
CLI entry point for BBO Engine.
Provides commands: optimize, methods
"""
import argparse
import importlib
import json
import sys
import logging

from bbo_engine.config import settings
from bbo_engine.driver import bboptimize
from bbo_engine.optimize.registry import DEFAULT_REGISTRY

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(settings.log_file),
            logging.StreamHandler(sys.stdout)
        ]
    )


def load_json_file(filepath: str) -> dict:
    """Load JSON parameters file."""
    try:
        with open(filepath, 'r') as f:
            return json.load(f)
    except FileNotFoundError:
        logger.error(f"File not found: {filepath}")
        sys.exit(1)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {filepath}: {e}")
        sys.exit(1)


def load_objective(path: str):
    """Import an objective function given as 'package.module:function'."""
    module_name, sep, func_name = path.partition(':')
    if not sep or not module_name or not func_name:
        raise ValueError(f"Objective must be given as module:function, got {path!r}")
    module = importlib.import_module(module_name)
    return getattr(module, func_name)


def cmd_optimize(args):
    """Run optimization command."""
    logger.info("Starting optimization...")

    params = load_json_file(args.params) if args.params else {}

    # Command line options override the parameters file
    if args.dimensions is not None:
        params['NumDimensions'] = args.dimensions
    if args.search_range is not None:
        params['SearchRange'] = tuple(args.search_range)
    if args.max_time is not None:
        params['MaxTime'] = args.max_time
    if args.max_evals is not None:
        params['MaxFuncEvals'] = args.max_evals
    if args.max_steps is not None:
        params['MaxSteps'] = args.max_steps
    if args.seed is not None:
        params['RngSeed'] = args.seed
        params['RandomizeRngSeed'] = False

    objective = load_objective(args.objective)
    result = bboptimize(objective, method=args.method, parameters=params)

    logger.info(f"Termination reason: {result.termination_reason}")
    logger.info(f"Best fitness: {result.best_fitness}")
    logger.info(f"Best candidate: {list(result.best_candidate)}")
    logger.info(f"Function evals: {result.num_evals}, elapsed: {result.elapsed_time:.2f}s")
    logger.info(f"Random seed: {result.parameters.rng_seed}")

    if args.output:
        with open(args.output, 'w') as f:
            json.dump(result.to_dict(), f, indent=2)
        logger.info(f"Result written to {args.output}")

    return result


def cmd_methods(args):
    """List registered optimization methods."""
    for name in DEFAULT_REGISTRY.names:
        marker = " (default)" if name == settings.default_method else ""
        print(f"{name}{marker}")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description='BBO Engine - black-box optimization of functions over boxes',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Optimize command
    optimize_parser = subparsers.add_parser('optimize', help='Run optimization')
    optimize_parser.add_argument('--objective', required=True, help='Objective as module:function')
    optimize_parser.add_argument('--method', default=None, choices=DEFAULT_REGISTRY.names,
                                 help=f'Optimization method (default: {settings.default_method})')
    optimize_parser.add_argument('--dimensions', type=int, help='Number of dimensions')
    optimize_parser.add_argument('--search_range', type=float, nargs=2, metavar=('MIN', 'MAX'),
                                 help='Search range used for every dimension')
    optimize_parser.add_argument('--max_time', type=float, help='Max time in seconds')
    optimize_parser.add_argument('--max_evals', type=int, help='Max number of function evaluations')
    optimize_parser.add_argument('--max_steps', type=int, help='Max number of steps')
    optimize_parser.add_argument('--seed', type=int, help='Random seed (disables seed randomization)')
    optimize_parser.add_argument('--params', help='Path to parameters JSON file')
    optimize_parser.add_argument('--output', help='Write the result as JSON to this file')

    # Methods command
    subparsers.add_parser('methods', help='List optimization methods')

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Setup logging
    setup_logging(args.verbose)

    # Execute command
    try:
        if args.command == 'optimize':
            cmd_optimize(args)
        elif args.command == 'methods':
            cmd_methods(args)
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user.")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Error executing {args.command}: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
