"""
Population Management Module

Creates the initial pool of a run.

Features:
- Random pools for every representation
- Random pools with real genes in [0, 1)
- Pools read from a data file or typed interactively
- Pre-seeded pools supplied by the caller
"""

import re
import sys
from random import Random
from typing import List, Optional, TextIO

from ga_constants import Datatypes, InitPoolSources
from ga_exceptions import ConfigurationError, InvalidLength
from ga_logging import get_logger
from ga_components.chromosome import Chromosome
from ga_components.pool import Pool


_NUMBER_PREFIX = re.compile(r"\d+(\.\d*)?([eE][-+]?\d+)?")


def random_genes(rng: Random, length: int, datatype: str, unit_interval: bool = False) -> List:
    """
    Random gene values for one chromosome.

    Integers are drawn from [0, length], permutations place 1..length at
    random positions, and reals are drawn from [0, length) or, with
    unit_interval, from [0, 1).
    """
    if datatype == Datatypes.BIT:
        return [rng.getrandbits(1) for _ in range(length)]

    if datatype == Datatypes.INT:
        return [rng.randint(0, length) for _ in range(length)]

    if datatype == Datatypes.INT_PERM:
        genes = [-1] * length
        for allele in range(1, length + 1):
            idx = rng.randint(0, length - 1)
            while genes[idx] != -1:
                idx = rng.randint(0, length - 1)
            genes[idx] = allele
        return genes

    if datatype == Datatypes.REAL:
        if unit_interval:
            return [rng.random() for _ in range(length)]
        return [rng.randint(0, length - 1) + rng.random() for _ in range(length)]

    raise ConfigurationError(f"Invalid datatype: {datatype}")


class NumberReader:
    """
    Reads unsigned numbers from a text stream.

    Characters other than digits are skipped, `#` comments out the rest of
    the line, and `q` or end of input stops reading.
    """

    def __init__(self, stream: TextIO):
        self.stream = stream
        self.logger = get_logger("PoolReader")

    def _getc(self) -> str:
        return self.stream.read(1)

    def next_token(self) -> Optional[str]:
        """Next numeric token, or None on `q` or end of input."""
        while True:
            ch = self._getc()
            if ch == "" or ch in "qQ":
                return None
            if ch.isdigit():
                break
            if ch == "#":
                while ch not in ("\n", ""):
                    ch = self._getc()
                if ch == "":
                    return None

        chars = []
        while ch != "" and not ch.isspace() and ch != "#":
            chars.append(ch)
            ch = self._getc()
        if ch == "#":
            while ch not in ("\n", ""):
                ch = self._getc()
        return "".join(chars)

    def next_number(self) -> Optional[float]:
        """Next number, or None when reading stops."""
        token = self.next_token()
        if token is None:
            return None
        match = _NUMBER_PREFIX.match(token)
        if match.end() != len(token):
            self.logger.warning("Malformed number, using its numeric prefix",
                                token=token, value=match.group(0))
        return float(match.group(0))


def _gene_value(value: float, datatype: str):
    if datatype == Datatypes.REAL:
        return value
    return int(value)


def read_pool(pool: Pool, stream: TextIO, datatype: str = Datatypes.INT_PERM) -> int:
    """
    Read a chromosome length followed by chromosomes into a pool.

    Returns:
        The chromosome length read

    Raises:
        ConfigurationError: If no valid chromosome length is found
    """
    logger = get_logger("PoolReader")
    reader = NumberReader(stream)

    chrom_len = reader.next_number()
    if chrom_len is None:
        raise ConfigurationError("No chrom_len was read")
    chrom_len = int(chrom_len)
    if chrom_len <= 0:
        raise InvalidLength(chrom_len)

    while True:
        genes = []
        for i in range(chrom_len):
            value = reader.next_number()
            if value is None:
                if i != 0:
                    logger.warning("Premature end of input reading chromosome",
                                   genes_read=i, chrom_len=chrom_len)
                return chrom_len
            genes.append(_gene_value(value, datatype))

        chrom = Chromosome(chrom_len)
        chrom.set_genes(genes)
        pool.append(chrom, copy=False)


class PopulationManager:
    """
    Builds the initial pool from the configured source.
    """

    def __init__(self, config, rng: Random, stdin: TextIO = None, stdout: TextIO = None):
        """
        Initialize population manager.

        Args:
            config: GAConfig of the run
            rng: Run random stream
            stdin: Input for the interactive source
            stdout: Prompt output for the interactive source
        """
        self.config = config
        self.rng = rng
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.logger = get_logger("PopulationManager")

        self.stats = {
            'chromosomes_created': 0,
            'pools_generated': 0
        }

    def generate(self, pool: Pool) -> Pool:
        """
        Fill `pool` from the configured source.

        Reading sources also set config.chrom_len to the length read.
        Evaluation and statistics are left to the caller.
        """
        source = self.config.initpool
        if source != InitPoolSources.NONE:
            pool.reset()

        if source == InitPoolSources.RANDOM:
            self.fill_random(pool, unit_interval=False)
        elif source == InitPoolSources.RANDOM01:
            self.fill_random(pool, unit_interval=True)
        elif source == InitPoolSources.FROM_FILE:
            with open(self.config.ip_data, "r") as f:
                self.config.chrom_len = read_pool(pool, f, self.config.datatype)
        elif source == InitPoolSources.INTERACTIVE:
            self.stdout.write("\nEnter chromosome length, then the initial pool (`q' to quit):\n")
            self.stdout.flush()
            self.config.chrom_len = read_pool(pool, self.stdin, self.config.datatype)
        elif source == InitPoolSources.NONE:
            pass
        else:
            raise ConfigurationError(f"Invalid initial pool source: {source}")

        self.stats['pools_generated'] += 1
        self.stats['chromosomes_created'] += pool.size
        self.logger.debug("Initial pool generated", source=source, size=pool.size)
        return pool

    def fill_random(self, pool: Pool, unit_interval: bool = False):
        """Append pool_size random chromosomes."""
        length = self.config.chrom_len
        if self.config.pool_size > pool.max_size:
            pool.resize(self.config.pool_size)

        for _ in range(self.config.pool_size):
            chrom = Chromosome(length)
            chrom.set_genes(random_genes(self.rng, length, self.config.datatype, unit_interval))
            pool.append(chrom, copy=False)

    def get_statistics(self) -> dict:
        """Get population statistics."""
        return self.stats.copy()
