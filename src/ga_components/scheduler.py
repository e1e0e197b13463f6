"""
Scheduler Module

Top-level control loops wiring selection, crossover, mutation, evaluation,
replacement and statistics together.

Schedulers:
- generational: each generation builds a whole new pool from the old one
- steady_state: each iteration is a single trial on one shared pool

A run moves from initialization through repeated trials until it is
converged (zero fitness variance, when convergence is used) or exhausted
(max_iter reached, when max_iter >= 0).
"""

from typing import Callable, Dict

from ga_exceptions import ConfigurationError
from ga_components.chromosome import Chromosome, verify
from ga_components.crossover import crossover
from ga_components.mutation import mutate
from ga_components.pool import Pool
from ga_components.replacement import replace
from ga_components.reporting import ReportSnapshot
from ga_components.selection import select


def init_pool(ctx, pool: Pool):
    """
    Generate, evaluate and summarize the initial pool.

    With the `none` source the pool keeps its current members, either
    seeded by the caller or left from an earlier run.
    """
    pool.minimize = ctx.config.minimize
    ctx.population.generate(pool)

    if pool.size == 0:
        raise ConfigurationError("Initial pool is empty")

    ctx.engine.evaluate_pool(pool)
    pool.compute_stats()
    ctx.converged = pool.converged


def _init_run(ctx, pool: Pool):
    ctx.best = pool.best.clone()
    ctx.num_mut = 0
    ctx.tot_mut = 0

    ctx.iter = -1
    report(ctx, pool)

    length = pool[0].length
    ctx.child1 = Chromosome(length)
    ctx.child2 = Chromosome(length)


def report(ctx, pool: Pool):
    """Emit a periodic report for the current iteration when one is due."""
    config = ctx.config
    if not ctx.reporter.should_report(ctx.iter, config.max_iter, ctx.converged,
                                      config.use_convergence):
        return

    snapshot = ReportSnapshot.capture(ctx.iter, pool, ctx.best, ctx.num_mut, ctx.tot_mut)
    ctx.reporter.report(snapshot, pool, config.max_iter)
    ctx.convergence.record(ctx.iter + 1, pool)
    ctx.logger.log_generation_complete(ctx.iter + 1, ctx.best.fitness, pool.ave, ctx.num_mut)


def final_report(ctx, pool: Pool):
    """Report why the run stopped and the best chromosome found."""
    converged = ctx.config.use_convergence and ctx.converged
    if converged:
        _, reason = ctx.convergence.check_convergence(pool)
        ctx.logger.log_convergence(ctx.iter, reason)
    ctx.reporter.final_report(ctx.iter, converged, ctx.best)


def cum(ctx, child1: Chromosome, child2: Chromosome):
    """Copy strictly better children into the best-so-far chromosome."""
    minimize = ctx.config.minimize
    for child in (child1, child2):
        if minimize:
            better = child.fitness < ctx.best.fitness
        else:
            better = child.fitness > ctx.best.fitness
        if better:
            ctx.best.copy_from(child)


def trial(ctx):
    """
    One reproduction: select two parents from the old pool, recombine,
    mutate, evaluate and insert the children into the new pool.

    Raises:
        InvalidPermutation, InvalidRange, InvalidLength: If a parent or
            child breaks the chromosome invariants
    """
    datatype = ctx.config.datatype
    child1, child2 = ctx.child1, ctx.child2

    parent1 = select(ctx, ctx.old_pool)
    parent2 = select(ctx, ctx.old_pool)

    verify(parent1, datatype)
    verify(parent2, datatype)

    crossover(ctx, parent1, parent2, child1, child2)

    mutate(ctx, child1)
    mutate(ctx, child2)

    ctx.evaluate(child1)
    ctx.evaluate(child2)

    verify(child1, datatype)
    verify(child2, datatype)

    replace(ctx, ctx.new_pool, parent1, parent2, child1, child2)

    cum(ctx, child1, child2)

    ctx.new_pool.compute_stats()
    ctx.converged = ctx.new_pool.converged


def init_trial(ctx):
    """Empty the new pool and, when elitist, seed it with two copies of the old best."""
    ctx.new_pool.size = 0
    ctx.num_mut = 0

    if not ctx.config.elitist:
        return

    best = ctx.old_pool.best
    ctx.new_pool.append(best)
    ctx.new_pool.append(best)


def gap(ctx):
    """Carry a fraction `gap` of selected old members into the new pool unchanged."""
    if ctx.config.gap <= 0.0:
        return

    num_clones = int(ctx.config.pool_size * ctx.config.gap)
    i = 0
    while i < num_clones and ctx.new_pool.size < ctx.old_pool.size:
        ctx.new_pool.append(select(ctx, ctx.old_pool))
        i += 1


def _keep_going(ctx) -> bool:
    max_iter = ctx.config.max_iter
    return max_iter < 0 or ctx.iter < max_iter


def generational(ctx):
    """Generational scheduler."""
    if ctx.old_pool is ctx.new_pool:
        ctx.new_pool = Pool(ctx.config.pool_size, ctx.config.minimize)

    init_pool(ctx, ctx.old_pool)
    old_pool = ctx.old_pool

    # Children come in pairs
    if old_pool.size % 2 != 0:
        old_pool.append(old_pool.best)
        old_pool.compute_stats()

    ctx.new_pool.minimize = ctx.config.minimize
    ctx.new_pool.size = 0
    _init_run(ctx, old_pool)

    ctx.iter = 0
    while _keep_going(ctx):
        if ctx.config.use_convergence and ctx.converged:
            break

        ctx.logger.log_generation_start(ctx.iter + 1, ctx.old_pool.size)
        init_trial(ctx)
        gap(ctx)

        if ctx.new_pool.size >= ctx.old_pool.size:
            ctx.new_pool.compute_stats()
            ctx.converged = ctx.new_pool.converged

        while ctx.new_pool.size < ctx.old_pool.size:
            trial(ctx)

        report(ctx, ctx.new_pool)

        ctx.old_pool, ctx.new_pool = ctx.new_pool, ctx.old_pool
        ctx.iter += 1

    # The last generation built is the live pool
    final_report(ctx, ctx.old_pool)


def steady_state(ctx):
    """Steady-state scheduler."""
    ctx.new_pool = ctx.old_pool
    init_pool(ctx, ctx.old_pool)
    _init_run(ctx, ctx.old_pool)

    ctx.iter = 0
    while _keep_going(ctx):
        if ctx.config.use_convergence and ctx.converged:
            break

        trial(ctx)
        report(ctx, ctx.new_pool)
        ctx.iter += 1

    final_report(ctx, ctx.old_pool)


SCHEDULERS: Dict[str, Callable] = {
    'generational': generational,
    'steady_state': steady_state,
}
