"""
Genetic Algorithm Engine Demo

This module provides a command-line interface for running the GA engine on
built-in demonstration objectives.

Objectives (selected by the function index):
- 1: ordering, fitness = sum(|gene[i] - (i + 1)|), 0 for the sorted permutation
- 2: bit count, fitness = number of zero bits
- 3: centering, fitness = sum((gene[i] - 0.5)^2) for real genes

All objectives are minimized.

Usage:
    python main.py --chrom-len 10 --pool-size 50 --max-iter 50
    python main.py --config ga.cfg --export-history
"""

import argparse
from typing import Callable, Dict

from genetic_algorithm import GeneticAlgorithm
from ga_config import GAConfig, load_config_file
from ga_logging import setup_logging
from ga_components.chromosome import Chromosome


def ordering_fitness(chrom: Chromosome) -> float:
    """Distance of a permutation from 1..n in order."""
    return float(sum(abs(g - (i + 1)) for i, g in enumerate(chrom.gene)))


def bit_count_fitness(chrom: Chromosome) -> float:
    """Number of zero bits."""
    return float(sum(1 for g in chrom.gene if not g))


def centering_fitness(chrom: Chromosome) -> float:
    """Squared distance of real genes from 0.5."""
    return sum((g - 0.5) ** 2 for g in chrom.gene)


OBJECTIVES: Dict[int, Callable[[Chromosome], float]] = {
    1: ordering_fitness,
    2: bit_count_fitness,
    3: centering_fitness,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Run the genetic algorithm engine on a demo objective.')

    # Config file
    parser.add_argument('--config', '-c', type=str, help="Keyword configuration file")

    # Basic parameters
    parser.add_argument('--seed', dest='rand_seed', type=int, help="Random seed (default: 1)")
    parser.add_argument('--datatype', choices=['bit', 'int', 'int_perm', 'real'],
                        help="Chromosome representation (default: int_perm)")
    parser.add_argument('--chrom-len', dest='chrom_len', type=int, help="Chromosome length (default: 10)")
    parser.add_argument('--pool-size', dest='pool_size', type=int, help="Pool size (default: 100)")
    parser.add_argument('--max-iter', dest='max_iter', type=int,
                        help="Iteration limit, -1 to run until convergence (default: -1)")
    parser.add_argument('--function-index', dest='function_index', type=int, choices=sorted(OBJECTIVES),
                        help="Demo objective (default: 1, ordering)")

    # Operators
    parser.add_argument('--selection', type=str, help="Selection strategy (default: roulette)")
    parser.add_argument('--crossover', type=str, help="Crossover operator (default: order1)")
    parser.add_argument('--x-rate', dest='x_rate', type=float, help="Crossover rate (default: 1.0)")
    parser.add_argument('--mutation', type=str, help="Mutation operator (default: swap)")
    parser.add_argument('--mu-rate', dest='mu_rate', type=float, help="Mutation rate (default: 0.0)")
    parser.add_argument('--replacement', type=str, help="Replacement strategy (default: append)")
    parser.add_argument('--ga', type=str, choices=['generational', 'steady_state'],
                        help="Scheduler (default: generational)")

    # Reports
    parser.add_argument('--rp-type', dest='rp_type', choices=['none', 'minimal', 'short', 'long'],
                        help="Report type (default: short)")
    parser.add_argument('--rp-interval', dest='rp_interval', type=int, help="Report interval (default: 1)")
    parser.add_argument('--output-dir', '-o', dest='output_dir', type=str,
                        help="Folder for exported results (default: ga_results)")
    parser.add_argument('--export-history', dest='export_history', action='store_true', default=None,
                        help="Export the fitness history CSV and a JSON run summary")

    # Evaluation
    parser.add_argument('--eval-workers', dest='eval_workers', type=int,
                        help="Threads for whole-pool evaluation (default: 1)")

    # Logging
    parser.add_argument('--log-level', dest='log_level', default="INFO",
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help="Log level (default: INFO)")
    parser.add_argument('--log-to-file', dest='log_to_file', action='store_true',
                        help="Also write a timestamped log file")

    return parser


def build_config(args: argparse.Namespace) -> GAConfig:
    """Configuration from the config file, overridden by explicit CLI arguments."""
    if not args.config:
        return GAConfig.from_args(args)

    config = load_config_file(args.config)
    field_names = set(config.to_dict())
    for name, value in vars(args).items():
        if value is not None and name in field_names:
            setattr(config, name, value)
    config.verify()
    return config


def main() -> None:
    """
    Main entry point.

    Parses command-line arguments, builds the configuration, runs the GA on
    the selected objective and logs the best chromosome.
    """
    args = build_parser().parse_args()

    logger = setup_logging(
        level=args.log_level,
        log_to_file=args.log_to_file,
        output_dir="logs",
        console_colors=True
    )

    config = build_config(args)
    objective = OBJECTIVES.get(config.function_index)
    if objective is None:
        raise ValueError(f"Unknown function index: {config.function_index}")

    ga = GeneticAlgorithm(config, evaluate=objective)

    try:
        best = ga.run()
    except Exception as e:
        logger.critical("GA execution failed", exception=e)
        raise

    logger.info(f"GA completed - Best fitness: {best.fitness:g}")
    logger.info(f"Best chromosome: {' '.join(f'{g:g}' for g in best.gene)}")


if __name__ == "__main__":
    main()
