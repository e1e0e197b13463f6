"""
Pool Module

A pool is an owned, indexable population of chromosomes together with its
aggregate fitness statistics.

Features:
- Slot storage that grows in fixed increments and never shrinks on its own
- Copy or ownership-transfer insertion
- Minimize-aware sorting with reindexing
- Single-pass statistics used as the convergence oracle
- Proportional fitness weights for roulette selection
"""

import math
from typing import Iterator, List, Optional

from ga_constants import PoolConstants
from ga_exceptions import DegenerateFitness
from ga_logging import get_logger
from ga_components.chromosome import Chromosome, compare


class Pool:
    """
    Population of chromosomes with statistics.

    Slots beyond `size` may hold chromosomes left over from earlier
    generations; they are reused by copy-appends to avoid reallocation.
    """

    def __init__(self, capacity: int = 0, minimize: bool = True):
        """
        Initialize an empty pool.

        Args:
            capacity: Initial number of slots
            minimize: Objective direction used by sort and statistics
        """
        if capacity < 0:
            raise ValueError(f"Pool capacity ({capacity}) must not be negative")
        self.chrom: List[Optional[Chromosome]] = [None] * capacity
        self.size = 0
        self.minimize = minimize
        self.sorted = False
        self.converged = False
        self._reset_stats()

    @property
    def max_size(self) -> int:
        return len(self.chrom)

    def _reset_stats(self):
        self.min = 0.0
        self.max = 0.0
        self.ave = 0.0
        self.var = 0.0
        self.dev = 0.0
        self.total_fitness = 0.0
        self.min_index = -1
        self.max_index = -1
        self.best_index = -1

    def reset(self):
        """Empty the pool and clear statistics. Capacity is kept."""
        self.chrom = [None] * self.max_size
        self.size = 0
        self.sorted = False
        self.converged = False
        self._reset_stats()

    def resize(self, new_capacity: int):
        """
        Change capacity. Shrinking destroys the chromosomes in excess slots.
        """
        if new_capacity < 0:
            raise ValueError(f"Pool capacity ({new_capacity}) must not be negative")
        if new_capacity < self.max_size:
            del self.chrom[new_capacity:]
            self.size = min(self.size, new_capacity)
        else:
            self.chrom.extend([None] * (new_capacity - self.max_size))

    def __len__(self) -> int:
        return self.size

    def __getitem__(self, index: int) -> Chromosome:
        if not 0 <= index < self.size:
            raise IndexError(f"Pool index {index} out of range [0, {self.size})")
        return self.chrom[index]

    def __iter__(self) -> Iterator[Chromosome]:
        for i in range(self.size):
            yield self.chrom[i]

    @property
    def best(self) -> Optional[Chromosome]:
        """Best chromosome according to the last computed statistics."""
        if self.best_index < 0:
            return None
        return self.chrom[self.best_index]

    def insert_at(self, index: int, chrom: Chromosome, copy: bool = True):
        """
        Place a chromosome into slot `index`, replacing its occupant.

        Args:
            index: Slot index in [0, max_size]; max_size grows the pool
            chrom: Chromosome to place
            copy: Deep copy into the slot if True, otherwise the pool takes
                ownership of `chrom`

        Raises:
            IndexError: If index is outside [0, max_size]
        """
        if not 0 <= index <= self.max_size:
            raise IndexError(f"Pool insert index {index} out of range [0, {self.max_size}]")

        if index == self.max_size:
            self.resize(self.max_size + PoolConstants.PL_ALLOC_SIZE)

        if copy:
            if self.chrom[index] is None:
                self.chrom[index] = Chromosome(chrom.length)
            self.chrom[index].copy_from(chrom)
        else:
            self.chrom[index] = chrom
        self.sorted = False

    def append(self, chrom: Chromosome, copy: bool = True):
        """Place a chromosome after the last live member."""
        self.insert_at(self.size, chrom, copy)
        self.size += 1

    def remove(self, index: int):
        """Destroy the chromosome in slot `index` and empty the slot."""
        if not 0 <= index < self.max_size:
            raise IndexError(f"Pool remove index {index} out of range [0, {self.max_size})")
        self.chrom[index] = None
        self.sorted = False

    def swap(self, i: int, j: int):
        """Exchange two slots."""
        for index in (i, j):
            if not 0 <= index < self.max_size:
                raise IndexError(f"Pool swap index {index} out of range [0, {self.max_size})")
        self.chrom[i], self.chrom[j] = self.chrom[j], self.chrom[i]
        self.sorted = False

    def reindex(self):
        """Set each live chromosome's index to its slot."""
        for i in range(self.size):
            self.chrom[i].index = i

    def sort(self):
        """Sort live members best first and reindex."""
        live = self.chrom[:self.size]
        live.sort(key=lambda c: c.fitness, reverse=not self.minimize)
        self.chrom[:self.size] = live
        self.reindex()
        self.sorted = True

    def compute_stats(self):
        """
        Recompute min/max/average/variance/deviation and the converged flag
        in one pass over the live members.
        """
        self._reset_stats()

        if self.size == 0:
            self.converged = False
            return

        first = self.chrom[0]
        first.index = 0

        if self.size == 1:
            self.min = self.max = self.ave = self.total_fitness = first.fitness
            self.min_index = self.max_index = self.best_index = 0
            self.sorted = True
            self.converged = True
            return

        self.min = self.max = first.fitness
        self.min_index = self.max_index = 0
        total = first.fitness
        sumsq = first.fitness * first.fitness
        no_variance = True
        is_sorted = True

        for i in range(1, self.size):
            chrom = self.chrom[i]
            chrom.index = i
            fitness = chrom.fitness
            previous = self.chrom[i - 1].fitness

            if fitness != previous:
                no_variance = False
            if compare(self.chrom[i - 1], chrom, self.minimize) > 0:
                is_sorted = False

            if fitness < self.min:
                self.min = fitness
                self.min_index = i
            if fitness > self.max:
                self.max = fitness
                self.max_index = i

            total += fitness
            sumsq += fitness * fitness

        self.total_fitness = total
        self.ave = total / self.size
        var = (sumsq - self.ave * total) / (self.size - 1)

        if no_variance or var <= 0.0:
            self.var = 0.0
            self.dev = 0.0
            self.converged = True
        else:
            self.var = var
            self.dev = math.sqrt(var)
            self.converged = False

        self.best_index = self.min_index if self.minimize else self.max_index
        self.sorted = is_sorted

    def update_ptf(self, scale_factor: float = 0.0) -> float:
        """
        Compute each member's proportional fitness weight (ptf).

        The scale factor is raised until every fitness + scale_factor is
        strictly positive, and dropped back to 0 once every raw fitness is
        positive. Weights sum to 100; when minimizing they are inverted so
        low fitness gets a large weight.

        Args:
            scale_factor: Scale factor carried over from earlier calls

        Returns:
            The scale factor to carry into the next call

        Raises:
            DegenerateFitness: If a weight cannot be computed
        """
        original = scale_factor
        all_positive = True

        for chrom in self:
            if chrom.fitness + scale_factor <= 0:
                scale_factor += 1.0 - (chrom.fitness + scale_factor)
            if chrom.fitness <= 0:
                all_positive = False

        if all_positive:
            scale_factor = 0.0

        if scale_factor != original:
            get_logger("Pool").log_scale_factor(scale_factor)

        total = sum(chrom.fitness + scale_factor for chrom in self)
        self.total_fitness = total

        if self.minimize:
            new_total = 0.0
            for chrom in self:
                scaled = chrom.fitness + scale_factor
                if scaled <= 0.0:
                    raise DegenerateFitness("fitness + scale <= 0.0", scale_factor)
                chrom.ptf = total / scaled
                new_total += chrom.ptf

            if self.size and new_total <= 0.0:
                raise DegenerateFitness("total of inverted weights <= 0.0", scale_factor)
            for chrom in self:
                chrom.ptf *= PoolConstants.PTF_TOTAL / new_total
        else:
            if self.size and total <= 0.0:
                raise DegenerateFitness("pool total fitness <= 0.0", scale_factor)
            for chrom in self:
                chrom.ptf = (chrom.fitness + scale_factor) / total * PoolConstants.PTF_TOTAL

        return scale_factor

    def fitness_values(self) -> List[float]:
        return [chrom.fitness for chrom in self]

    def __repr__(self) -> str:
        return f"Pool(size={self.size}, max_size={self.max_size}, minimize={self.minimize})"


def allocate(capacity: int, minimize: bool = True) -> Pool:
    """Allocate an empty pool with the given capacity."""
    return Pool(capacity, minimize)
