"""
Selection Methods Module

Parent selection strategies. Each strategy picks one member of a pool.

Features:
- Uniform random selection
- Fitness-proportionate (roulette) selection for both objective directions
- Linear rank-biased selection with configurable selection pressure
"""

import math
from typing import Callable, Dict

from ga_constants import PoolConstants
from ga_components.pool import Pool
from ga_components.chromosome import Chromosome


def uniform_random(ctx, pool: Pool) -> Chromosome:
    """Any live member with equal probability."""
    return pool[ctx.rng.randint(0, pool.size - 1)]


def roulette(ctx, pool: Pool) -> Chromosome:
    """
    Fitness-proportionate selection.

    Proportional weights are refreshed first. When minimizing, the wheel
    spins over the inverted weights, which sum to 100. When maximizing,
    it spins over raw fitness if every value is non-negative with a
    positive total, and over the scaled fitness otherwise.
    """
    ctx.scale_factor = pool.update_ptf(ctx.scale_factor)

    if ctx.config.minimize:
        weights = [chrom.ptf for chrom in pool]
        total = PoolConstants.PTF_TOTAL
    else:
        raw = pool.fitness_values()
        if min(raw) >= 0.0 and sum(raw) > 0.0:
            weights = raw
        else:
            weights = [fitness + ctx.scale_factor for fitness in raw]
        total = sum(weights)

    spin = ctx.rng.random() * total

    cumulative = 0.0
    for i, weight in enumerate(weights):
        cumulative += weight
        if cumulative > spin:
            return pool[i]
    return pool[pool.size - 1]


def rank_biased(ctx, pool: Pool) -> Chromosome:
    """
    Linear rank-biased selection.

    The pool is sorted before selecting. With rank-ordered replacement the
    pool stays sorted, so it is sorted only once per run.
    """
    if not ctx.ranked:
        pool.sort()
        if ctx.replacement.current_name() == "by_rank":
            ctx.ranked = True

    bias = ctx.config.bias
    u = ctx.rng.random()
    index = int(pool.size * (bias - math.sqrt(bias * bias - 4.0 * (bias - 1.0) * u))
                / 2.0 / (bias - 1.0))
    return pool[min(index, pool.size - 1)]


SELECTION_OPERATORS: Dict[str, Callable] = {
    'uniform_random': uniform_random,
    'roulette': roulette,
    'rank_biased': rank_biased,
}


def select(ctx, pool: Pool) -> Chromosome:
    """Pick a parent with the active selection strategy."""
    return ctx.selection(ctx, pool)
