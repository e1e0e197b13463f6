"""
Replacement Methods Module

Strategies inserting a trial's children into the target pool.

Under the generational scheduler the target is the pool being built for
the next generation and only `append` applies. The rank-based strategies
overwrite members of a full pool and belong to the steady-state scheduler.
"""

from typing import Callable, Dict

from ga_exceptions import InvalidUnderGenerational
from ga_components.chromosome import Chromosome, compare
from ga_components.pool import Pool


def _require_steady_state(ctx, name: str):
    if ctx.scheduler.current_name() == "generational":
        raise InvalidUnderGenerational(name)


def pick_best(ctx, parent1: Chromosome, parent2: Chromosome,
              child1: Chromosome, child2: Chromosome):
    """
    Keep the best two of parents and children in the child slots.

    Each parent in turn replaces the worse child if it beats it. The
    children keep their crossover points and both record the parents.
    """
    minimize = ctx.config.minimize

    for parent in (parent1, parent2):
        if compare(child1, child2, minimize) > 0:
            worse = child1
        else:
            worse = child2
        if compare(worse, parent, minimize) > 0:
            xp1, xp2 = worse.xp1, worse.xp2
            worse.copy_from(parent)
            worse.xp1, worse.xp2 = xp1, xp2

    for child in (child1, child2):
        child.parent_1 = parent1.index
        child.parent_2 = parent2.index


def append(ctx, pool: Pool, parent1: Chromosome, parent2: Chromosome,
           child1: Chromosome, child2: Chromosome):
    """Append copies of both children."""
    pool.append(child1)
    pool.append(child2)


def _insert_by_rank(ctx, pool: Pool, chrom: Chromosome):
    minimize = ctx.config.minimize
    last = pool.size - 1

    if compare(pool[last], chrom, minimize) <= 0:
        return

    pool.insert_at(last, chrom)
    for i in range(last, 0, -1):
        if compare(pool[i - 1], pool[i], minimize) <= 0:
            break
        pool.swap(i - 1, i)


def by_rank(ctx, pool: Pool, parent1: Chromosome, parent2: Chromosome,
            child1: Chromosome, child2: Chromosome):
    """
    Replace the last member of a sorted pool and bubble the child into rank.

    A child no better than the last member is discarded.
    """
    _require_steady_state(ctx, "by_rank")
    _insert_by_rank(ctx, pool, child1)
    _insert_by_rank(ctx, pool, child2)


def first_weaker(ctx, pool: Pool, parent1: Chromosome, parent2: Chromosome,
                 child1: Chromosome, child2: Chromosome):
    """Each child overwrites the first member worse than it, if any."""
    _require_steady_state(ctx, "first_weaker")
    minimize = ctx.config.minimize

    for child in (child1, child2):
        for i in range(pool.size):
            if compare(pool[i], child, minimize) > 0:
                pool.insert_at(i, child)
                break


def weakest(ctx, pool: Pool, parent1: Chromosome, parent2: Chromosome,
            child1: Chromosome, child2: Chromosome):
    """Each child overwrites the weakest member (last on ties) unless the child is worse."""
    _require_steady_state(ctx, "weakest")
    minimize = ctx.config.minimize

    for child in (child1, child2):
        index = 0
        for i in range(pool.size):
            if compare(pool[i], pool[index], minimize) >= 0:
                index = i
        if compare(pool[index], child, minimize) >= 0:
            pool.insert_at(index, child)


REPLACEMENT_OPERATORS: Dict[str, Callable] = {
    'append': append,
    'by_rank': by_rank,
    'first_weaker': first_weaker,
    'weakest': weakest,
}


def replace(ctx, pool: Pool, parent1: Chromosome, parent2: Chromosome,
            child1: Chromosome, child2: Chromosome):
    """Insert the children with the active strategy, after elitist filtering."""
    if ctx.config.elitist:
        pick_best(ctx, parent1, parent2, child1, child2)
    ctx.replacement(ctx, pool, parent1, parent2, child1, child2)
