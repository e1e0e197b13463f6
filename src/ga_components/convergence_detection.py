"""
Convergence Detection Module

Tracks fitness progression across reports and answers the stop question
for the schedulers.

A pool is converged when its fitness variance is zero (all members tie).
The detector adds a fitness history so runs can be summarized and their
trend inspected after the fact.
"""

from typing import List, Tuple

import numpy as np

from ga_components.pool import Pool


class ConvergenceDetector:
    """
    Convergence oracle and fitness history for one run.
    """

    def __init__(self, minimize: bool = True, trend_window: int = 10):
        """
        Initialize the detector.

        Args:
            minimize: Objective direction, used to pick the overall best
            trend_window: Number of recent records used for the trend
        """
        self.minimize = minimize
        self.trend_window = trend_window

        self.iterations: List[int] = []
        self.best_history: List[float] = []
        self.average_history: List[float] = []

    def record(self, iteration: int, pool: Pool):
        """Add one history point from the pool's current statistics."""
        best = pool.min if self.minimize else pool.max
        self.iterations.append(iteration)
        self.best_history.append(best)
        self.average_history.append(pool.ave)

    def check_convergence(self, pool: Pool) -> Tuple[bool, str]:
        """
        Check whether the pool has converged.

        Returns:
            Tuple of (converged: bool, reason: str)
        """
        if pool.size == 0:
            return False, "Empty pool"

        if pool.converged:
            return True, f"Zero fitness variance across {pool.size} chromosomes"

        return False, f"Fitness variance {pool.var:g} across {pool.size} chromosomes"

    def _calculate_trend(self) -> float:
        """
        Least-squares slope of the recent best fitness values.

        Returns:
            Negative when minimizing and improving, positive when maximizing
            and improving, 0.0 with fewer than two points
        """
        if len(self.best_history) < 2:
            return 0.0

        recent = np.asarray(self.best_history[-self.trend_window:], dtype=float)
        if recent.size < 2:
            return 0.0

        x = np.arange(recent.size, dtype=float)
        slope, _ = np.polyfit(x, recent, 1)
        return float(slope)

    def get_fitness_statistics(self) -> dict:
        """
        Get statistics about fitness progression.

        Returns:
            Dictionary with fitness statistics
        """
        if not self.best_history:
            return {
                'records': 0,
                'best_overall': None,
                'current_fitness': None,
                'improvement_trend': None
            }

        history = np.asarray(self.best_history, dtype=float)
        best_overall = history.min() if self.minimize else history.max()

        return {
            'records': len(self.best_history),
            'best_overall': float(best_overall),
            'current_fitness': self.best_history[-1],
            'improvement_trend': self._calculate_trend()
        }

    def reset(self):
        """Reset the detector for a new run."""
        self.iterations = []
        self.best_history = []
        self.average_history = []

    def get_statistics(self) -> dict:
        """Get convergence detection statistics."""
        return {
            'records': len(self.best_history),
            'fitness_trend': self._calculate_trend(),
            'trend_window': self.trend_window
        }
