"""
Custom Exception Classes for the Genetic Algorithm Engine

Provides specific, meaningful exceptions for the structural failure modes
of the engine. All of them are fatal: they signal a programming or
configuration defect and abort the run. Advisory problems (unknown config
keywords, malformed pool file tokens) are logged as warnings instead.
"""

import math


class GAException(Exception):
    """Base exception for all genetic algorithm related errors."""
    pass


class ConfigurationError(GAException):
    """Raised when GA configuration is invalid or inconsistent."""

    def __init__(self, message: str, errors: list = None):
        super().__init__(message)
        self.errors = errors or []


class InvalidLength(GAException):
    """Raised when a chromosome is allocated or resized to a non-positive length."""

    def __init__(self, length: int):
        super().__init__(f"Invalid chromosome length: {length} (must be > 0)")
        self.length = length


class InvalidPermutation(GAException):
    """Raised when a permutation chromosome has an out-of-range or duplicate allele."""

    def __init__(self, message: str, gene_index: int = None, allele=None,
                 chromosome: str = None):
        if chromosome:
            message += f"\n{chromosome}"
        super().__init__(message)
        self.gene_index = gene_index
        self.allele = allele


class InvalidRange(GAException):
    """Raised when idx_min/idx_max fall outside [0, length]."""

    def __init__(self, message: str, idx_min: int = None, idx_max: int = None,
                 length: int = None):
        super().__init__(message)
        self.idx_min = idx_min
        self.idx_max = idx_max
        self.length = length


class UnknownStrategy(GAException):
    """Raised when an operator name matches no registered strategy, or several."""

    def __init__(self, family: str, name: str, candidates: list = None):
        if candidates:
            message = (f"Ambiguous {family} strategy: '{name}' matches "
                       f"{', '.join(candidates)}")
        else:
            message = f"Unknown {family} strategy: '{name}'"
        super().__init__(message)
        self.family = family
        self.name = name
        self.candidates = candidates or []


class TypeMismatch(GAException):
    """Raised when crossover parents have different lengths."""

    def __init__(self, length_1: int, length_2: int, operator: str = None):
        message = f"Parent lengths differ: {length_1} != {length_2}"
        if operator:
            message = f"{operator}: {message}"
        super().__init__(message)
        self.length_1 = length_1
        self.length_2 = length_2
        self.operator = operator


class UnsupportedRepresentation(GAException):
    """Raised when an operator is used with a datatype it cannot handle."""

    def __init__(self, operator: str, datatype: str):
        super().__init__(f"Operator '{operator}' does not support datatype '{datatype}'")
        self.operator = operator
        self.datatype = datatype


class DegenerateFitness(GAException):
    """Raised when proportional fitness weights cannot be computed."""

    def __init__(self, message: str, scale_factor: float = None):
        super().__init__(message)
        self.scale_factor = scale_factor


class InvalidUnderGenerational(GAException):
    """Raised when a steady-state-only replacement is used by the generational scheduler."""

    def __init__(self, replacement: str):
        super().__init__(f"Replacement '{replacement}' is invalid under the generational scheduler")
        self.replacement = replacement


class InvalidFitnessError(GAException):
    """Raised when the evaluation function returns a non-numeric or non-finite value."""

    def __init__(self, fitness_value, chromosome_index: int = None):
        message = f"Invalid fitness value: {fitness_value!r}"
        if chromosome_index is not None:
            message += f" (chromosome {chromosome_index})"
        super().__init__(message)
        self.fitness_value = fitness_value
        self.chromosome_index = chromosome_index


class ReportingError(GAException):
    """Raised when result reporting/saving fails."""

    def __init__(self, message: str, output_dir: str = None,
                 file_type: str = None):
        super().__init__(message)
        self.output_dir = output_dir
        self.file_type = file_type


def validate_fitness(fitness, chromosome_index: int = None) -> float:
    """
    Validate a fitness value returned by the evaluation function.

    Args:
        fitness: Value returned by the evaluation function
        chromosome_index: Pool index of the evaluated chromosome, for context

    Returns:
        Fitness as float

    Raises:
        InvalidFitnessError: If fitness is missing, non-numeric, NaN or infinite
    """
    if fitness is None or isinstance(fitness, bool):
        raise InvalidFitnessError(fitness, chromosome_index)

    try:
        value = float(fitness)
    except (TypeError, ValueError):
        raise InvalidFitnessError(fitness, chromosome_index)

    if math.isnan(value) or math.isinf(value):
        raise InvalidFitnessError(fitness, chromosome_index)

    return value


def check_same_length(parent1, parent2, operator: str = None):
    """
    Ensure two parents can be recombined.

    Raises:
        TypeMismatch: If the parents have different lengths
    """
    if parent1.length != parent2.length:
        raise TypeMismatch(parent1.length, parent2.length, operator)
