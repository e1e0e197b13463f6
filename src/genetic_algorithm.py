import random
from typing import Any, Callable, Dict, Optional, TextIO

from ga_config import GAConfig, load_config_file
from ga_constants import InitPoolSources
from ga_exceptions import ConfigurationError, UnknownStrategy
from ga_logging import get_logger
from ga_components.chromosome import Chromosome
from ga_components.convergence_detection import ConvergenceDetector
from ga_components.crossover import CROSSOVER_OPERATORS, MIN_CHROM_LEN
from ga_components.evaluation import EvaluationEngine
from ga_components.mutation import MUTATION_OPERATORS
from ga_components.operator_registry import UNSPECIFIED, OperatorRegistry
from ga_components.pool import Pool
from ga_components.population_management import PopulationManager
from ga_components.replacement import REPLACEMENT_OPERATORS
from ga_components.reporting import GAReporter
from ga_components.scheduler import SCHEDULERS
from ga_components.selection import SELECTION_OPERATORS


# Built-in strategies per operator family
BUILTIN_OPERATORS = {
    'selection': SELECTION_OPERATORS,
    'crossover': CROSSOVER_OPERATORS,
    'mutation': MUTATION_OPERATORS,
    'replacement': REPLACEMENT_OPERATORS,
    'scheduler': SCHEDULERS,
}

# Config field holding the strategy name of each operator family
OPERATOR_FAMILIES = {
    'selection': 'selection',
    'crossover': 'crossover',
    'mutation': 'mutation',
    'replacement': 'replacement',
    'scheduler': 'ga',
}


class GeneticAlgorithm:
    """
    Run context of the GA engine.

    Holds the configuration, the run's random stream, the operator
    registries, the pools, the best-so-far chromosome and the counters.
    Every operator receives this object as its first argument.
    """

    def __init__(self, config: GAConfig = None,
                 evaluate: Callable[[Chromosome], Optional[float]] = None,
                 config_path: str = None, report_stream: TextIO = None) -> None:
        """
        Configure a GA.

        Args:
            config: Run settings (defaults if None)
            evaluate: Fitness function, returning the fitness or storing it
                in chrom.fitness
            config_path: Keyword config file applied on top of `config`
            report_stream: Stream for reports when no report file is set
        """
        self.config = config if config is not None else GAConfig()
        if config_path:
            load_config_file(config_path, self.config)

        self.logger = get_logger("GeneticAlgorithm")
        self.report_stream = report_stream

        self._build_registries()

        self.evaluation_function = None
        self.engine: Optional[EvaluationEngine] = None
        if evaluate is not None:
            self.set_evaluation(evaluate)

        self.old_pool = Pool(self.config.pool_size, self.config.minimize)
        self.new_pool = Pool(self.config.pool_size, self.config.minimize)
        self._reset_run_state()

    def _build_registries(self):
        for family, builtins in BUILTIN_OPERATORS.items():
            setattr(self, family, OperatorRegistry(family, builtins))

    def _reset_run_state(self):
        self.rng = random.Random(self.config.rand_seed)
        self.scale_factor = self.config.scale_factor
        self.ranked = False
        self.converged = False
        self.iter = -1
        self.num_mut = 0
        self.tot_mut = 0
        self.best: Optional[Chromosome] = None
        self.child1: Optional[Chromosome] = None
        self.child2: Optional[Chromosome] = None
        self.reporter: Optional[GAReporter] = None
        self.convergence = ConvergenceDetector(minimize=self.config.minimize)
        self.population = PopulationManager(self.config, self.rng)

    def set_evaluation(self, evaluate: Callable[[Chromosome], Optional[float]]):
        """Bind the fitness function."""
        self.evaluation_function = evaluate
        self.engine = EvaluationEngine(evaluate, max_workers=self.config.eval_workers)

    def evaluate(self, chrom: Chromosome) -> float:
        """Evaluate one chromosome and store its fitness."""
        return self.engine.evaluate_chromosome(chrom)

    def register_operator(self, family: str, fn: Callable, name: str = None):
        """
        Install a user-defined strategy and make it active.

        Args:
            family: One of selection, crossover, mutation, replacement, scheduler
            fn: Strategy callable taking this context first
            name: Strategy name; "Unspecified" if None
        """
        if family not in OPERATOR_FAMILIES:
            raise UnknownStrategy("operator family", family)
        name = name or UNSPECIFIED
        getattr(self, family).register_user(name, fn)
        setattr(self.config, OPERATOR_FAMILIES[family], name)

    def seed_pool(self, pool: Pool):
        """
        Use `pool` as the initial pool of the next run.

        Sets the initial pool source to none; the members are evaluated
        when the run starts.
        """
        self.old_pool = pool
        if self.new_pool is pool:
            self.new_pool = Pool(self.config.pool_size, self.config.minimize)
        self.config.initpool = InitPoolSources.NONE
        self.config.pool_size = pool.size
        if pool.size:
            self.config.chrom_len = pool[0].length

    def verify_config(self):
        """
        Check that the run can start.

        Resolves every configured strategy name and activates it.

        Raises:
            ConfigurationError: Listing every problem found
        """
        errors = self.config.validation_errors()

        if self.evaluation_function is None:
            errors.append("No evaluation function specified")

        for family, field_name in OPERATOR_FAMILIES.items():
            name = getattr(self.config, field_name)
            if family == 'mutation' and self.config.mu_rate <= 0.0 and not name:
                continue
            try:
                getattr(self, family).select(name)
            except UnknownStrategy as e:
                errors.append(str(e))

        min_len = MIN_CHROM_LEN.get(self.crossover.current_name())
        length_known = self.config.initpool not in (InitPoolSources.FROM_FILE,
                                                    InitPoolSources.INTERACTIVE)
        if min_len and length_known and self.config.chrom_len < min_len:
            errors.append(f"Crossover {self.crossover.current_name()} needs chromosomes "
                          f"of at least {min_len} genes (chrom_len = {self.config.chrom_len})")

        if self.selection.current_name() == "rank_biased" and self.config.bias <= 1.0:
            errors.append(f"Bias ({self.config.bias}) must be greater than 1.0 for rank_biased selection")

        if self.config.initpool == InitPoolSources.NONE and self.old_pool.size == 0:
            errors.append("Initial pool source is none but no pool was seeded")

        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(f"  • {error}" for error in errors),
                errors=errors
            )

    def operator_names(self) -> Dict[str, str]:
        """Active strategy name per config field."""
        return {field_name: getattr(self, family).current_name()
                for family, field_name in OPERATOR_FAMILIES.items()}

    def run(self) -> Chromosome:
        """
        Verify the configuration, then run the active scheduler.

        Returns:
            The best chromosome found
        """
        self.verify_config()
        self.engine.max_workers = max(1, self.config.eval_workers)

        self._reset_run_state()
        self.reporter = GAReporter(
            rp_type=self.config.rp_type,
            rp_interval=self.config.rp_interval,
            output_dir=self.config.output_dir,
            rp_file=self.config.rp_file,
            rp_file_mode=self.config.rp_file_mode,
            stream=self.report_stream
        )

        self.logger.log_config_summary(self.config)
        self.reporter.config_report(self.config.summary(self.operator_names()))

        try:
            self.scheduler(self)

            if self.config.export_history:
                self.reporter.export_fitness_history()
                self.reporter.save_run_summary(
                    final_result={'best_fitness': self.best.fitness,
                                  'best_genes': list(self.best.gene),
                                  'iterations': self.iter},
                    component_stats=self.get_statistics()
                )
        finally:
            self.reporter.cleanup()

        self.logger.info("GA run complete",
                         iterations=self.iter,
                         best_fitness=f"{self.best.fitness:g}",
                         converged=self.converged)
        return self.best

    def reset(self, config_path: str = None):
        """
        Restore default settings, keeping the evaluation function.

        Args:
            config_path: Keyword config file applied on top of the defaults
        """
        evaluate = self.evaluation_function
        self.config = GAConfig()
        if config_path:
            load_config_file(config_path, self.config)

        self._build_registries()

        self.old_pool = Pool(self.config.pool_size, self.config.minimize)
        self.new_pool = Pool(self.config.pool_size, self.config.minimize)
        self.evaluation_function = None
        self.engine = None
        if evaluate is not None:
            self.set_evaluation(evaluate)
        self._reset_run_state()

    def re_evaluate_pool(self):
        """
        Re-evaluate the live pool, e.g. after the fitness function changed,
        and take the best member as the best so far.
        """
        pool = self.old_pool
        self.engine.evaluate_pool(pool)
        pool.compute_stats()
        self.converged = pool.converged
        if pool.best is not None:
            self.best = pool.best.clone()
        self.logger.debug("Pool re-evaluated", size=pool.size,
                          best_fitness=f"{self.best.fitness:g}" if self.best else "n/a")

    def get_statistics(self) -> Dict[str, Any]:
        """Statistics of every component."""
        stats = {family: getattr(self, family).get_statistics() for family in OPERATOR_FAMILIES}
        stats['evaluation'] = self.engine.get_statistics() if self.engine else {}
        stats['population'] = self.population.get_statistics()
        stats['convergence'] = self.convergence.get_fitness_statistics()
        stats['mutations'] = self.tot_mut
        return stats
