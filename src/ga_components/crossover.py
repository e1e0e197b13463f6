"""
Crossover Operators Module

Recombination operators producing two children from two parents.

Bit and integer representations:
- simple: one cut point, tails exchanged
- uniform: per-gene fair coin

Order-based (permutation) representations, after Starkweather et al.:
- order1: segment kept, remainder filled in the other parent's order
- order2: order of key alleles imposed from the other parent
- position: key positions kept, remainder in the other parent's order
- cycle: cycle of positions inherited from one parent
- pmx: partially mapped crossover
- uox: uniform order crossover
- asexual: two-point swap within a single parent (two-opt)

Every permutation operator yields valid permutations for valid parents.
Crossover points are inclusive positions.
"""

from random import Random
from typing import Callable, Dict, List, Sequence, Tuple

from ga_constants import Datatypes
from ga_exceptions import InvalidRange, UnsupportedRepresentation, check_same_length
from ga_components.chromosome import Chromosome


# ---------------------------------------------------------------------------
# Crossover point utilities
# ---------------------------------------------------------------------------

def gen_xp(rng: Random, lo: int, hi: int) -> int:
    """Random crossover point in [lo, hi)."""
    if hi - 1 <= lo:
        return lo
    return rng.randint(lo, hi - 1)


def gen_2_xp(rng: Random, unique: bool, lo: int, hi: int) -> Tuple[int, int]:
    """
    Two sorted crossover points in [lo, hi).

    Raises:
        InvalidRange: If unique points are requested from fewer than two positions
    """
    if unique and hi - lo < 2:
        raise InvalidRange(f"Cannot pick 2 distinct points in [{lo}, {hi})")

    xp1 = gen_xp(rng, lo, hi)
    xp2 = gen_xp(rng, lo, hi)
    if unique:
        while xp2 == xp1:
            xp2 = gen_xp(rng, lo, hi)

    if xp1 > xp2:
        xp1, xp2 = xp2, xp1
    return xp1, xp2


def gen_4_xp(rng: Random, unique: bool, lo: int, hi: int) -> Tuple[int, int, int, int]:
    """
    Four sorted crossover points in [lo, hi).

    Raises:
        InvalidRange: If unique points are requested from fewer than four positions
    """
    if unique and hi - lo < 4:
        raise InvalidRange(f"Cannot pick 4 distinct points in [{lo}, {hi})")

    xp = [gen_xp(rng, lo, hi) for _ in range(4)]
    if unique:
        for k in range(1, 4):
            while xp[k] in xp[:k]:
                xp[k] = gen_xp(rng, lo, hi)

    # Sorting network
    for a, b in ((0, 1), (2, 3), (1, 2), (0, 1), (2, 3)):
        if xp[a] > xp[b]:
            xp[a], xp[b] = xp[b], xp[a]
    return xp[0], xp[1], xp[2], xp[3]


def allele_index(allele, genes: Sequence, lo: int, hi: int) -> int:
    """Index of `allele` in genes[lo..hi] (inclusive), or -1."""
    if lo < 0 or lo > hi or hi >= len(genes):
        raise InvalidRange(f"Bad allele search range [{lo}, {hi}] for length {len(genes)}")
    for i in range(lo, hi + 1):
        if genes[i] == allele:
            return i
    return -1


def init_kids(parent1: Chromosome, parent2: Chromosome,
              child1: Chromosome, child2: Chromosome):
    """Reset both children and record their parents."""
    for child in (child1, child2):
        if child.length != parent1.length:
            child.resize(parent1.length)
        else:
            child.reset()
        child.parent_1 = parent1.index
        child.parent_2 = parent2.index


def _require(ctx, operator: str, permutation: bool):
    datatype = ctx.config.datatype
    if (datatype == Datatypes.INT_PERM) != permutation:
        raise UnsupportedRepresentation(operator, datatype)


# ---------------------------------------------------------------------------
# Bit / integer operators
# ---------------------------------------------------------------------------

def simple_crossover(ctx, parent1: Chromosome, parent2: Chromosome,
                     child1: Chromosome, child2: Chromosome):
    """Single cut point; genes up to and including it stay, the rest are exchanged."""
    _require(ctx, "simple", permutation=False)
    check_same_length(parent1, parent2, "simple")

    xp = gen_xp(ctx.rng, 0, parent1.length - 1)
    child1.xp1 = child2.xp1 = xp

    child1.gene = parent1.gene[:xp + 1] + parent2.gene[xp + 1:]
    child2.gene = parent2.gene[:xp + 1] + parent1.gene[xp + 1:]


def uniform_crossover(ctx, parent1: Chromosome, parent2: Chromosome,
                      child1: Chromosome, child2: Chromosome):
    """Each position is inherited from either parent on a fair coin flip."""
    _require(ctx, "uniform", permutation=False)
    check_same_length(parent1, parent2, "uniform")

    for i in range(parent1.length):
        if ctx.rng.getrandbits(1):
            child1.gene[i] = parent1.gene[i]
            child2.gene[i] = parent2.gene[i]
        else:
            child1.gene[i] = parent2.gene[i]
            child2.gene[i] = parent1.gene[i]


# ---------------------------------------------------------------------------
# Order-based operators
# ---------------------------------------------------------------------------

def order1_crossover(ctx, parent1: Chromosome, parent2: Chromosome,
                     child1: Chromosome, child2: Chromosome):
    """
    Order1 crossover.

    Each child inherits [xp1, xp2] from its own parent. The remaining
    positions, starting after xp2 and wrapping around, are filled with the
    other parent's alleles in the order they appear after xp2, skipping
    alleles already inside the segment.
    """
    _require(ctx, "order1", permutation=True)
    check_same_length(parent1, parent2, "order1")

    length = parent1.length
    xp1, xp2 = gen_2_xp(ctx.rng, False, 0, length)
    child1.xp1 = child2.xp1 = xp1
    child1.xp2 = child2.xp2 = xp2

    for i in range(xp1, xp2 + 1):
        child1.gene[i] = parent1.gene[i]
        child2.gene[i] = parent2.gene[i]

    segment_1 = set(parent1.gene[xp1:xp2 + 1])
    segment_2 = set(parent2.gene[xp1:xp2 + 1])

    p1 = p2 = xp2
    for i in range(length - (xp2 - xp1 + 1)):
        c = (xp2 + 1 + i) % length

        p2 = (p2 + 1) % length
        while parent2.gene[p2] in segment_1:
            p2 = (p2 + 1) % length

        p1 = (p1 + 1) % length
        while parent1.gene[p1] in segment_2:
            p1 = (p1 + 1) % length

        child1.gene[c] = parent2.gene[p2]
        child2.gene[c] = parent1.gene[p1]


def order2_crossover(ctx, parent1: Chromosome, parent2: Chromosome,
                     child1: Chromosome, child2: Chromosome):
    """
    Order2 crossover.

    Four distinct key positions are chosen. Each child starts as a copy of
    its own parent, then its key alleles are rearranged into the order in
    which they appear in the other parent.
    """
    _require(ctx, "order2", permutation=True)
    check_same_length(parent1, parent2, "order2")

    length = parent1.length
    xps = gen_4_xp(ctx.rng, True, 0, length)
    child1.xp1, child1.xp2 = xps[0], xps[1]
    child2.xp1, child2.xp2 = xps[2], xps[3]

    child1.gene = list(parent1.gene)
    child2.gene = list(parent2.gene)

    keys_1 = {parent1.gene[xp] for xp in xps}
    keys_2 = {parent2.gene[xp] for xp in xps}
    order_1 = [i for i in range(length) if parent2.gene[i] in keys_1]
    order_2 = [i for i in range(length) if parent1.gene[i] in keys_2]

    for k, xp in enumerate(xps):
        child1.gene[xp] = parent2.gene[order_1[k]]
        child2.gene[xp] = parent1.gene[order_2[k]]


def position_crossover(ctx, parent1: Chromosome, parent2: Chromosome,
                       child1: Chromosome, child2: Chromosome):
    """
    Position crossover.

    Alleles at the (up to four) key positions are inherited from the
    child's own parent; every other position is filled, left to right,
    with the other parent's remaining alleles in their original order.
    """
    _require(ctx, "position", permutation=True)
    check_same_length(parent1, parent2, "position")

    length = parent1.length
    xps = gen_4_xp(ctx.rng, False, 0, length)
    child1.xp1, child1.xp2 = xps[0], xps[1]
    child2.xp1, child2.xp2 = xps[2], xps[3]
    key_positions = set(xps)

    for xp in key_positions:
        child1.gene[xp] = parent1.gene[xp]
        child2.gene[xp] = parent2.gene[xp]

    keys_1 = {parent1.gene[xp] for xp in key_positions}
    keys_2 = {parent2.gene[xp] for xp in key_positions}

    j1 = j2 = 0
    for i in range(length):
        if parent2.gene[i] not in keys_1:
            while j1 in key_positions:
                j1 += 1
            child1.gene[j1] = parent2.gene[i]
            j1 += 1

        if parent1.gene[i] not in keys_2:
            while j2 in key_positions:
                j2 += 1
            child2.gene[j2] = parent1.gene[i]
            j2 += 1


def cycle_crossover(ctx, parent1: Chromosome, parent2: Chromosome,
                    child1: Chromosome, child2: Chromosome):
    """
    Cycle crossover.

    Starting at a random position, each child follows the cycle of
    positions linking the two parents and inherits those positions from
    its own parent; every other position comes from the other parent.
    """
    _require(ctx, "cycle", permutation=True)
    check_same_length(parent1, parent2, "cycle")

    length = parent1.length
    xp = gen_xp(ctx.rng, 0, length)
    child1.xp1 = child2.xp1 = xp

    child1.gene = list(parent2.gene)
    child2.gene = list(parent1.gene)

    _follow_cycle(xp, parent1, parent2, child1)
    _follow_cycle(xp, parent2, parent1, child2)


def _follow_cycle(start: int, donor: Chromosome, other: Chromosome, child: Chromosome):
    last = donor.length - 1
    i = start
    while True:
        child.gene[i] = donor.gene[i]
        i = allele_index(other.gene[i], donor.gene, 0, last)
        if i == start:
            break


def pmx_crossover(ctx, parent1: Chromosome, parent2: Chromosome,
                  child1: Chromosome, child2: Chromosome):
    """
    Partially mapped crossover.

    The segment [xp1, xp2] is exchanged between the children. Outside the
    segment, an allele that collides with one inside it is replaced by
    following the mapping the exchanged segment induces until no
    collision remains.
    """
    _require(ctx, "pmx", permutation=True)
    check_same_length(parent1, parent2, "pmx")

    length = parent1.length
    xp1, xp2 = gen_2_xp(ctx.rng, False, 0, length)
    child1.xp1 = child2.xp1 = xp1
    child1.xp2 = child2.xp2 = xp2

    for i in range(length):
        if i < xp1 or i > xp2:
            child1.gene[i] = parent1.gene[i]
            child2.gene[i] = parent2.gene[i]
        else:
            child1.gene[i] = parent2.gene[i]
            child2.gene[i] = parent1.gene[i]

    for i in range(length):
        if xp1 <= i <= xp2:
            continue
        _resolve_mapping(i, child1, parent1, xp1, xp2)
        _resolve_mapping(i, child2, parent2, xp1, xp2)


def _resolve_mapping(i: int, child: Chromosome, parent: Chromosome, xp1: int, xp2: int):
    j = allele_index(child.gene[i], child.gene, xp1, xp2)
    while j >= 0:
        child.gene[i] = parent.gene[j]
        j = allele_index(child.gene[i], child.gene, xp1, xp2)


def uox_crossover(ctx, parent1: Chromosome, parent2: Chromosome,
                  child1: Chromosome, child2: Chromosome):
    """
    Uniform order crossover.

    A random mask, shared by both children, keeps the child's own parent
    allele at masked positions. Unmasked positions are filled left to
    right with the other parent's alleles not yet used, in their order.
    """
    _require(ctx, "uox", permutation=True)
    check_same_length(parent1, parent2, "uox")

    length = parent1.length
    mask = [bool(ctx.rng.getrandbits(1)) for _ in range(length)]

    child1.gene = [parent1.gene[i] if mask[i] else -1 for i in range(length)]
    child2.gene = [parent2.gene[i] if mask[i] else -1 for i in range(length)]

    _fill_unmasked(child1, parent2)
    _fill_unmasked(child2, parent1)


def _fill_unmasked(child: Chromosome, other: Chromosome):
    used = {allele for allele in child.gene if allele != -1}
    j = 0
    for i in range(child.length):
        if child.gene[i] != -1:
            continue
        while other.gene[j] in used:
            j += 1
        child.gene[i] = other.gene[j]
        used.add(other.gene[j])


def asexual_crossover(ctx, parent1: Chromosome, parent2: Chromosome,
                      child1: Chromosome, child2: Chromosome):
    """Two independent two-opt swaps, one per parent."""
    _require(ctx, "asexual", permutation=True)
    _two_opt(ctx.rng, parent1, child1)
    _two_opt(ctx.rng, parent2, child2)


def _two_opt(rng: Random, parent: Chromosome, child: Chromosome):
    if child.length != parent.length:
        child.resize(parent.length)
    child.gene = list(parent.gene)
    child.idx_min = parent.idx_min

    if parent.idx_min >= parent.length - 1:
        return

    xp1, xp2 = gen_2_xp(rng, True, parent.idx_min, parent.length)
    child.xp1 = xp1
    child.xp2 = xp2
    child.gene[xp1] = parent.gene[xp2]
    child.gene[xp2] = parent.gene[xp1]


CROSSOVER_OPERATORS: Dict[str, Callable] = {
    'simple': simple_crossover,
    'uniform': uniform_crossover,
    'order1': order1_crossover,
    'order2': order2_crossover,
    'position': position_crossover,
    'cycle': cycle_crossover,
    'pmx': pmx_crossover,
    'uox': uox_crossover,
    'asexual': asexual_crossover,
}

# Shortest chromosome on which each operator finds its distinct cut points
MIN_CHROM_LEN: Dict[str, int] = {
    'order2': 4,
    'asexual': 2,
}


def crossover(ctx, parent1: Chromosome, parent2: Chromosome,
              child1: Chromosome, child2: Chromosome) -> bool:
    """
    Produce two children with the active crossover operator.

    With probability 1 - x_rate the parents are cloned instead.

    Returns:
        True if the crossover operator ran, False if the parents were cloned
    """
    init_kids(parent1, parent2, child1, child2)

    x_rate = ctx.config.x_rate
    if x_rate < 1.0 and ctx.rng.random() > x_rate:
        for child, parent in ((child1, parent1), (child2, parent2)):
            child.copy_from(parent)
            child.parent_1 = parent1.index
            child.parent_2 = parent2.index
        return False

    ctx.crossover(ctx, parent1, parent2, child1, child2)
    return True
