"""
Evaluation Module

Binds the user's fitness function to chromosomes and pools.

Features:
- Fitness validation for every evaluation
- Whole-pool evaluation, sequential or on a thread pool
- In-order write-back of results before statistics are computed
- Memory usage tracking and evaluation statistics
"""

import concurrent.futures
import time
from typing import Any, Callable, Dict, List, Optional

import psutil
from tqdm import tqdm

from ga_exceptions import validate_fitness
from ga_logging import get_logger
from ga_components.chromosome import Chromosome
from ga_components.pool import Pool


class EvaluationEngine:
    """
    Fitness evaluation for chromosomes and pools.

    The evaluation function receives a chromosome and either returns its
    fitness or stores it in `chrom.fitness` and returns None.
    """

    def __init__(self, evaluate: Callable[[Chromosome], Optional[float]],
                 max_workers: int = 1, show_progress: bool = False):
        """
        Initialize evaluation engine.

        Args:
            evaluate: User fitness function
            max_workers: Thread count for whole-pool evaluation; 1 is sequential
            show_progress: Show a progress bar for whole-pool evaluation
        """
        self.evaluate = evaluate
        self.max_workers = max(1, max_workers)
        self.show_progress = show_progress
        self.logger = get_logger("EvaluationEngine")

        self.stats = {
            'evaluations_performed': 0,
            'pool_evaluations': 0,
            'parallel_batches': 0,
            'total_evaluation_time': 0.0,
            'peak_memory_usage': 0.0
        }

    def _fitness_of(self, chrom: Chromosome) -> float:
        result = self.evaluate(chrom)
        if result is None:
            result = chrom.fitness
        return validate_fitness(result, chrom.index)

    def evaluate_chromosome(self, chrom: Chromosome) -> float:
        """
        Evaluate one chromosome and store its fitness.

        Returns:
            The validated fitness

        Raises:
            InvalidFitnessError: If the function yields a non-finite value
        """
        chrom.fitness = self._fitness_of(chrom)
        self.stats['evaluations_performed'] += 1
        return chrom.fitness

    def evaluate_pool(self, pool: Pool) -> List[float]:
        """
        Evaluate every live member of a pool.

        All fitness values are written back before this returns, so pool
        statistics can be computed right after.

        Returns:
            Fitness values in pool order
        """
        start_time = time.time()
        members = list(pool)

        if self.max_workers > 1 and len(members) > 1:
            fitness_results = self._evaluate_parallel(members)
        else:
            fitness_results = self._evaluate_sequential(members)

        for chrom, fitness in zip(members, fitness_results):
            chrom.fitness = fitness

        evaluation_time = time.time() - start_time
        self.stats['pool_evaluations'] += 1
        self.stats['evaluations_performed'] += len(members)
        self.stats['total_evaluation_time'] += evaluation_time
        self._track_memory()

        return fitness_results

    def _evaluate_sequential(self, members: List[Chromosome]) -> List[float]:
        iterator = tqdm(members, desc="Evaluating Pool", disable=not self.show_progress)
        return [self._fitness_of(chrom) for chrom in iterator]

    def _evaluate_parallel(self, members: List[Chromosome]) -> List[float]:
        start_time = time.time()
        self.logger.debug("Starting parallel evaluation",
                          workers=self.max_workers, tasks=len(members))

        executor = concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers)
        try:
            try:
                futures = [executor.submit(self._fitness_of, chrom) for chrom in members]
            except RuntimeError as e:
                self.logger.error("Parallel evaluation failed, falling back to sequential",
                                  exception=e, workers=self.max_workers)
                return self._evaluate_sequential(members)

            fitness_results = [future.result() for future in
                               tqdm(futures, total=len(futures),
                                    desc=f"Evaluating Pool ({self.max_workers} workers)",
                                    disable=not self.show_progress)]
        finally:
            executor.shutdown(wait=True)

        self.stats['parallel_batches'] += 1
        self.logger.log_parallel_processing(self.max_workers, len(members),
                                            time.time() - start_time)
        return fitness_results

    def _track_memory(self):
        try:
            memory_gb = psutil.Process().memory_info().rss / 1024**3
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return
        self.stats['peak_memory_usage'] = max(self.stats['peak_memory_usage'], memory_gb)

    def get_statistics(self) -> Dict[str, Any]:
        """Get evaluation statistics."""
        stats = self.stats.copy()
        if self.stats['pool_evaluations'] > 0:
            stats['avg_pool_evaluation_time'] = (self.stats['total_evaluation_time'] /
                                                 self.stats['pool_evaluations'])
        else:
            stats['avg_pool_evaluation_time'] = 0.0
        return stats

    def reset_statistics(self):
        """Reset all evaluation statistics."""
        self.stats = {
            'evaluations_performed': 0,
            'pool_evaluations': 0,
            'parallel_batches': 0,
            'total_evaluation_time': 0.0,
            'peak_memory_usage': 0.0
        }
