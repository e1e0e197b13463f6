"""
Chromosome Module

A chromosome is one candidate solution: a fixed-length gene list with a
fitness value and bookkeeping used by the operators and reports.

Features:
- Allocation and resizing with full bookkeeping reset
- Deep copy as the only way to duplicate a chromosome
- Minimize-aware comparison
- Verification of index bounds and the permutation invariant
"""

from typing import List, Sequence

from ga_constants import Datatypes
from ga_exceptions import InvalidLength, InvalidPermutation, InvalidRange


class Chromosome:
    """
    Fixed-length candidate solution.

    Attributes:
        gene: Gene values (bits, integers, permutation alleles or reals)
        fitness: Value assigned by the evaluation function
        ptf: Proportional fitness weight used by roulette selection
        index: Position in the owning pool, -1 if none
        idx_min, idx_max: Gene sub-range eligible for mutation and crossover
        parent_1, parent_2: Pool indices of the parents, -1 if none
        xp1, xp2: Last crossover points used, -1 if none
    """

    __slots__ = ('length', 'gene', 'fitness', 'ptf', 'index', 'idx_min', 'idx_max',
                 'parent_1', 'parent_2', 'xp1', 'xp2')

    def __init__(self, length: int):
        if length <= 0:
            raise InvalidLength(length)
        self.length = length
        self.gene: List = [0] * length
        self.reset()

    def reset(self):
        """Zero the genes and reset all bookkeeping."""
        self.gene = [0] * self.length
        self.fitness = 0.0
        self.ptf = 0.0
        self.index = -1
        self.idx_min = 0
        self.idx_max = self.length
        self.parent_1 = -1
        self.parent_2 = -1
        self.xp1 = -1
        self.xp2 = -1

    def resize(self, new_length: int):
        """
        Change the chromosome length.

        Genes are not preserved; every field is reset.

        Raises:
            InvalidLength: If new_length <= 0
        """
        if new_length <= 0:
            raise InvalidLength(new_length)
        self.length = new_length
        self.reset()

    def copy_from(self, src: 'Chromosome'):
        """Deep copy every field of src into this chromosome."""
        if self.length != src.length:
            self.resize(src.length)
        self.gene = list(src.gene)
        self.fitness = src.fitness
        self.ptf = src.ptf
        self.index = src.index
        self.idx_min = src.idx_min
        self.idx_max = src.idx_max
        self.parent_1 = src.parent_1
        self.parent_2 = src.parent_2
        self.xp1 = src.xp1
        self.xp2 = src.xp2

    def clone(self) -> 'Chromosome':
        """Return a new chromosome equal to this one."""
        twin = Chromosome(self.length)
        twin.copy_from(self)
        return twin

    def set_genes(self, genes: Sequence):
        """Replace the genes, resizing when the length differs."""
        if len(genes) != self.length:
            self.resize(len(genes))
        self.gene = list(genes)

    def describe(self) -> str:
        """Multi-line rendering used in long reports and error messages."""
        genes = " ".join(f"{g:g}" for g in self.gene)
        return (f"Chrom: {genes}\n"
                f"fitness = {self.fitness:g}, ptf = {self.ptf:g}, index = {self.index}, "
                f"idx_min = {self.idx_min}, idx_max = {self.idx_max}\n"
                f"parent_1 = {self.parent_1}, parent_2 = {self.parent_2}, "
                f"xp1 = {self.xp1}, xp2 = {self.xp2}")

    def __len__(self) -> int:
        return self.length

    def __repr__(self) -> str:
        return f"Chromosome(length={self.length}, fitness={self.fitness:g}, index={self.index})"


def allocate(length: int) -> Chromosome:
    """Allocate a zero-valued, reset chromosome of the given length."""
    return Chromosome(length)


def copy(src: Chromosome, dst: Chromosome):
    """Deep copy src into dst, resizing dst if needed."""
    dst.copy_from(src)


def compare(a: Chromosome, b: Chromosome, minimize: bool) -> int:
    """
    Order two chromosomes by fitness.

    Returns:
        -1 if a is better, 1 if b is better, 0 if they tie
    """
    if minimize:
        if a.fitness < b.fitness:
            return -1
        if a.fitness > b.fitness:
            return 1
        return 0

    if a.fitness > b.fitness:
        return -1
    if a.fitness < b.fitness:
        return 1
    return 0


def verify(chrom: Chromosome, datatype: str):
    """
    Check chromosome invariants.

    Raises:
        InvalidLength: If the gene list does not match the declared length
        InvalidRange: If idx_min or idx_max are outside [0, length]
        InvalidPermutation: For permutation data, if an allele is out of
            [1, length] or repeats
    """
    if chrom.length <= 0 or len(chrom.gene) != chrom.length:
        raise InvalidLength(len(chrom.gene))

    if not 0 <= chrom.idx_min <= chrom.length:
        raise InvalidRange(f"idx_min out of bounds: {chrom.idx_min}",
                           chrom.idx_min, chrom.idx_max, chrom.length)
    if not 0 <= chrom.idx_max <= chrom.length:
        raise InvalidRange(f"idx_max out of bounds: {chrom.idx_max}",
                           chrom.idx_min, chrom.idx_max, chrom.length)

    if datatype != Datatypes.INT_PERM:
        return

    seen = [False] * chrom.length
    for i, allele in enumerate(chrom.gene):
        if allele < 1 or int(allele) > chrom.length:
            raise InvalidPermutation(f"gene[{i}] = {allele:g} is out of bounds",
                                     gene_index=i, allele=allele, chromosome=chrom.describe())
        slot = int(allele) - 1
        if seen[slot]:
            raise InvalidPermutation(f"gene[{i}] = {allele:g} is a duplicate",
                                     gene_index=i, allele=allele, chromosome=chrom.describe())
        seen[slot] = True
