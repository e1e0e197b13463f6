"""
GA Components Module

Modular components of the genetic algorithm engine.
Each component handles a specific aspect of the GA process:

- Chromosome / Pool: Candidate solutions and populations with statistics
- OperatorRegistry: Name-based lookup of pluggable strategies
- crossover / mutation / selection / replacement: Operator families
- scheduler: Generational and steady-state control loops
- PopulationManager: Initial pool generation and reading
- EvaluationEngine: Fitness evaluation, optionally on a thread pool
- ConvergenceDetector: Convergence oracle and fitness history
- GAReporter: Periodic, final and exported reports

Usage:
    from ga_components import Chromosome, Pool
    from ga_components.crossover import order1_crossover
"""

# Data model
from .chromosome import Chromosome
from .pool import Pool
from .operator_registry import OperatorRegistry

# Operator tables
from .crossover import CROSSOVER_OPERATORS
from .mutation import MUTATION_OPERATORS
from .selection import SELECTION_OPERATORS
from .replacement import REPLACEMENT_OPERATORS
from .scheduler import SCHEDULERS

# Run services
from .population_management import PopulationManager
from .evaluation import EvaluationEngine
from .convergence_detection import ConvergenceDetector
from .reporting import GAReporter, ReportSnapshot

__all__ = [
    # Data model
    'Chromosome',
    'Pool',
    'OperatorRegistry',

    # Operator tables
    'CROSSOVER_OPERATORS',
    'MUTATION_OPERATORS',
    'SELECTION_OPERATORS',
    'REPLACEMENT_OPERATORS',
    'SCHEDULERS',

    # Run services
    'PopulationManager',
    'EvaluationEngine',
    'ConvergenceDetector',
    'GAReporter',
    'ReportSnapshot'
]

# Version information
__version__ = '1.0.0'
__description__ = 'General-purpose genetic algorithm engine'
