"""
Mutation Operators Module

Single-chromosome perturbations applied to children after crossover.

Features:
- Bit flips and random bits
- Position swap (permutation safe)
- Real-valued replacement and perturbation clamped to [0, 1]
- Greedy local search re-evaluating through the run's fitness function
"""

from random import Random
from typing import Callable, Dict

from ga_constants import MutationConstants, clamp
from ga_components.chromosome import Chromosome, compare


def _random_position(rng: Random, chrom: Chromosome) -> int:
    return rng.randint(chrom.idx_min, chrom.length - 1)


def simple_invert(ctx, chrom: Chromosome):
    """Invert one random bit."""
    i = _random_position(ctx.rng, chrom)
    chrom.gene[i] = 0 if chrom.gene[i] else 1


def simple_random(ctx, chrom: Chromosome):
    """Replace one random bit with a random bit."""
    i = _random_position(ctx.rng, chrom)
    chrom.gene[i] = ctx.rng.getrandbits(1)


def swap(ctx, chrom: Chromosome):
    """Swap two random positions; they may coincide."""
    i = _random_position(ctx.rng, chrom)
    j = _random_position(ctx.rng, chrom)
    chrom.gene[i], chrom.gene[j] = chrom.gene[j], chrom.gene[i]


def float_random(ctx, chrom: Chromosome):
    """Replace one random gene with a uniform value in [0, 1)."""
    i = _random_position(ctx.rng, chrom)
    chrom.gene[i] = clamp(ctx.rng.random())


def float_rnd_pert(ctx, chrom: Chromosome):
    """
    Perturb one random gene uniformly within [-pert_range, pert_range].

    The position is drawn from [idx_min, length]; drawing `length` leaves
    the chromosome unchanged.
    """
    i = ctx.rng.randint(chrom.idx_min, chrom.length)
    if i == chrom.length:
        return
    pert = ctx.config.pert_range * (1.0 - 2.0 * ctx.rng.random())
    chrom.gene[i] = clamp(chrom.gene[i] + pert)


def float_gauss_pert(ctx, chrom: Chromosome):
    """Perturb one random gene by an approximately normal amount scaled by pert_range."""
    rng = ctx.rng
    c = MutationConstants.GAUSS_RAND_MAX
    total = rng.randint(0, c) + rng.randint(0, c) + rng.randint(0, c)
    pert = (2 * total - 3 * c) * MutationConstants.GAUSS_SCALE

    i = _random_position(rng, chrom)
    chrom.gene[i] = clamp(chrom.gene[i] + ctx.config.pert_range * pert)


def float_LS(ctx, chrom: Chromosome):
    """
    Greedy local search.

    Sweeps the genes from idx_min, perturbing each by up to LS_STEP and
    keeping the change only if the re-evaluated fitness does not get worse.
    Sweeps repeat while the chromosome improves.
    """
    minimize = ctx.config.minimize
    step = MutationConstants.LS_STEP
    start = chrom.clone()

    while True:
        start.fitness = chrom.fitness

        for i in range(chrom.idx_min, chrom.length):
            prev_fitness = chrom.fitness
            prev_value = chrom.gene[i]

            chrom.gene[i] = clamp(chrom.gene[i] + step * (1.0 - 2.0 * ctx.rng.random()))
            ctx.evaluate(chrom)

            worse = chrom.fitness > prev_fitness if minimize else chrom.fitness < prev_fitness
            if worse:
                chrom.gene[i] = prev_value
                chrom.fitness = prev_fitness

        if compare(chrom, start, minimize) >= 0:
            break


MUTATION_OPERATORS: Dict[str, Callable] = {
    'simple_invert': simple_invert,
    'simple_random': simple_random,
    'swap': swap,
    'float_random': float_random,
    'float_rnd_pert': float_rnd_pert,
    'float_LS': float_LS,
    'float_gauss_pert': float_gauss_pert,
}


def mutate(ctx, chrom: Chromosome) -> bool:
    """
    Apply the active mutation with probability mu_rate.

    Returns:
        True if the chromosome was mutated
    """
    u = ctx.rng.random()
    if ctx.config.mu_rate <= 0.0 or u > ctx.config.mu_rate:
        return False

    ctx.mutation(ctx, chrom)
    ctx.num_mut += 1
    ctx.tot_mut += 1
    return True
