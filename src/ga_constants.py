"""
Configuration Constants for the Genetic Algorithm Engine

Centralizes the magic numbers of the engine: defaults, representation
names, report types and operator constants.
"""

from typing import Tuple


class GAConstants:
    """Default run settings."""

    DEFAULT_RAND_SEED = 1
    DEFAULT_CHROM_LEN = 10
    DEFAULT_POOL_SIZE = 100
    DEFAULT_MAX_ITER = -1            # Run until convergence
    DEFAULT_BIAS = 1.8               # Rank-biased selection pressure
    DEFAULT_GAP = 0.0                # Generation gap fraction
    DEFAULT_X_RATE = 1.0
    DEFAULT_MU_RATE = 0.0
    DEFAULT_PERT_RANGE = 0.1         # Real-valued perturbation range
    DEFAULT_FUNCTION_INDEX = 1

    # Default operators
    DEFAULT_SELECTION = "roulette"
    DEFAULT_CROSSOVER = "order1"
    DEFAULT_MUTATION = "swap"
    DEFAULT_REPLACEMENT = "append"
    DEFAULT_SCHEDULER = "generational"

    # Steady-state presets applied by the "ga" config keyword
    STEADY_STATE_SELECTION = "rank_biased"
    STEADY_STATE_REPLACEMENT = "by_rank"
    STEADY_STATE_RP_INTERVAL = 100


class PoolConstants:
    """Pool storage constants."""

    PL_ALLOC_SIZE = 10               # Capacity growth increment
    PTF_TOTAL = 100.0                # Proportional weights sum to this


class Datatypes:
    """Chromosome representations."""

    BIT = "bit"
    INT = "int"
    INT_PERM = "int_perm"
    REAL = "real"

    ALL: Tuple[str, ...] = (BIT, INT, INT_PERM, REAL)

    LABELS = {
        BIT: "Bit",
        INT: "Integer",
        INT_PERM: "Integer Permutation",
        REAL: "Real",
    }


class InitPoolSources:
    """Initial pool sources."""

    RANDOM = "random"
    RANDOM01 = "random01"
    FROM_FILE = "from_file"
    INTERACTIVE = "interactive"
    NONE = "none"                    # Pool seeded by the caller

    ALL: Tuple[str, ...] = (RANDOM, RANDOM01, FROM_FILE, INTERACTIVE, NONE)

    LABELS = {
        RANDOM: "Randomly",
        RANDOM01: "Randomly in [0,1]",
        FROM_FILE: "From File",
        INTERACTIVE: "Interactively",
        NONE: "Pre-seeded",
    }


class ReportTypes:
    """Report verbosity levels."""

    NONE = "none"
    MINIMAL = "minimal"
    SHORT = "short"
    LONG = "long"

    ALL: Tuple[str, ...] = (NONE, MINIMAL, SHORT, LONG)


class MutationConstants:
    """Constants for real-valued mutation operators."""

    GENE_MIN = 0.0
    GENE_MAX = 1.0
    LS_STEP = 0.1                    # Local search perturbation size

    # Sum of three uniform integers in [0, GAUSS_RAND_MAX] approximates a
    # standard normal after centering and scaling
    GAUSS_RAND_MAX = 10922
    GAUSS_SCALE = 3.05185e-05


def clamp(value: float, low: float = MutationConstants.GENE_MIN,
          high: float = MutationConstants.GENE_MAX) -> float:
    """Clamp a real-valued gene into [low, high]."""
    if value < low:
        return low
    if value > high:
        return high
    return value


def datatype_label(datatype: str) -> str:
    """Human readable datatype name."""
    return Datatypes.LABELS.get(datatype, "Unspecified")
