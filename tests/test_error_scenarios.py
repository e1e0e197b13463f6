"""
Error Scenarios and Edge Cases Tests

Tests GA behavior under invalid configurations, misbehaving fitness
functions and boundary conditions.
"""

import math
import unittest

from test_fixtures import TestDataBuilder, TestFixtures

from genetic_algorithm import GeneticAlgorithm
from ga_config import GAConfig
from ga_constants import Datatypes, InitPoolSources
from ga_exceptions import (
    ConfigurationError, InvalidFitnessError, InvalidUnderGenerational,
    UnknownStrategy, UnsupportedRepresentation, validate_fitness
)
from ga_logging import setup_logging


class TestConfigurationErrors(unittest.TestCase):
    """Test that invalid setups are rejected before the run starts."""

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)

    def test_invalid_config_values(self):
        with self.assertRaises(ConfigurationError) as context:
            GAConfig(pool_size=0, chrom_len=-1, x_rate=1.5, datatype="complex")

        errors = context.exception.errors
        self.assertEqual(len(errors), 4)
        self.assertTrue(any("Pool size" in e for e in errors))
        self.assertTrue(any("Crossover rate" in e for e in errors))

    def test_from_file_needs_a_file(self):
        with self.assertRaises(ConfigurationError):
            GAConfig(initpool=InitPoolSources.FROM_FILE)

    def test_missing_evaluation_function(self):
        ga = GeneticAlgorithm(TestFixtures.get_test_config())
        with self.assertRaises(ConfigurationError) as context:
            ga.run()
        self.assertIn("No evaluation function specified", context.exception.errors)

    def test_unknown_operator_names(self):
        with TestDataBuilder() as builder:
            ga = builder.with_config(crossover="nonsense", replacement="zzz").build()
            with self.assertRaises(ConfigurationError) as context:
                ga.run()

            errors = context.exception.errors
            self.assertTrue(any("crossover" in e for e in errors))
            self.assertTrue(any("replacement" in e for e in errors))

    def test_rank_biased_needs_bias_above_one(self):
        with TestDataBuilder() as builder:
            ga = builder.with_config(selection="rank_biased", bias=1.0).build()
            with self.assertRaises(ConfigurationError):
                ga.run()

    def test_crossover_needs_long_enough_chromosomes(self):
        for name, length in (("order2", 3), ("asexual", 1)):
            with self.subTest(crossover=name):
                with TestDataBuilder() as builder:
                    ga = builder.with_config(crossover=name, chrom_len=length).build()
                    with self.assertRaises(ConfigurationError) as context:
                        ga.verify_config()
                    self.assertTrue(any(name in e and "at least" in e
                                        for e in context.exception.errors))

        with TestDataBuilder() as builder:
            ga = builder.with_config(crossover="order2", chrom_len=4, max_iter=2).build()
            TestFixtures.assert_valid_permutation(ga.run().gene, 4)

    def test_ambiguous_operator_name(self):
        with TestDataBuilder() as builder:
            ga = builder.with_config(crossover="order").build()
            with self.assertRaises(ConfigurationError) as context:
                ga.verify_config()
            self.assertTrue(any("Ambiguous crossover strategy" in e
                                for e in context.exception.errors))

    def test_unseeded_pool_without_source(self):
        with TestDataBuilder() as builder:
            ga = builder.with_config(initpool=InitPoolSources.NONE).build()
            with self.assertRaises(ConfigurationError):
                ga.run()

    def test_unused_mutation_may_be_unnamed(self):
        with TestDataBuilder() as builder:
            ga = builder.with_config(mutation="", mu_rate=0.0, max_iter=2).build()
            best = ga.run()
            TestFixtures.assert_valid_permutation(best.gene, 8)

    def test_unknown_operator_family(self):
        with TestDataBuilder() as builder:
            ga = builder.build()
            with self.assertRaises(UnknownStrategy):
                ga.register_operator("migration", lambda ctx: None)


class TestRuntimeErrors(unittest.TestCase):
    """Test structural failures raised while the run is in progress."""

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)

    def test_rank_replacement_under_generational(self):
        with TestDataBuilder() as builder:
            ga = builder.with_config(replacement="weakest").build()
            with self.assertRaises(InvalidUnderGenerational):
                ga.run()

    def test_permutation_operator_on_bits(self):
        with TestDataBuilder() as builder:
            ga = (builder
                  .with_evaluation(lambda chrom: float(sum(chrom.gene)))
                  .with_config(datatype=Datatypes.BIT, crossover="order1")
                  .build())
            with self.assertRaises(UnsupportedRepresentation):
                ga.run()

    def test_non_finite_fitness(self):
        with TestDataBuilder() as builder:
            ga = builder.with_evaluation(lambda chrom: math.nan).build()
            with self.assertRaises(InvalidFitnessError):
                ga.run()

    def test_evaluation_exceptions_propagate(self):
        def failing(chrom):
            raise ValueError("simulated evaluation failure")

        with TestDataBuilder() as builder:
            ga = builder.with_evaluation(failing).build()
            with self.assertRaises(ValueError):
                ga.run()

    def test_validate_fitness(self):
        self.assertEqual(validate_fitness(3), 3.0)
        self.assertEqual(validate_fitness("2.5"), 2.5)

        for bad in (None, True, "abc", math.inf, -math.inf, math.nan):
            with self.subTest(value=bad):
                with self.assertRaises(InvalidFitnessError):
                    validate_fitness(bad, chromosome_index=4)


class TestEdgeCases(unittest.TestCase):
    """Test boundary conditions."""

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)

    def test_zero_crossover_rate(self):
        with TestDataBuilder() as builder:
            ga = builder.with_config(x_rate=0.0, mu_rate=0.3, max_iter=5).build()
            best = ga.run()
            TestFixtures.assert_valid_permutation(best.gene, 8)

    def test_high_mutation_rate(self):
        with TestDataBuilder() as builder:
            ga = builder.with_config(mu_rate=1.0, max_iter=5).build()
            ga.run()
            self.assertGreater(ga.tot_mut, 0)

    def test_single_member_pool(self):
        with TestDataBuilder() as builder:
            ga = builder.with_config(pool_size=1, max_iter=-1).build()
            ga.run()
            self.assertTrue(ga.converged)
            self.assertEqual(ga.iter, 0)

    def test_chromosome_length_one(self):
        with TestDataBuilder() as builder:
            ga = builder.with_config(chrom_len=1, pool_size=4, max_iter=3).build()
            best = ga.run()
            self.assertEqual(best.gene, [1])
            self.assertEqual(best.fitness, 0.0)

    def test_no_elitism(self):
        with TestDataBuilder() as builder:
            ga = builder.with_config(elitist=False, mu_rate=0.2, max_iter=5).build()
            best = ga.run()
            self.assertLessEqual(best.fitness, ga.convergence.best_history[0])

    def test_reset_restores_defaults(self):
        with TestDataBuilder() as builder:
            ga = builder.with_config(pool_size=12, crossover="pmx").build()
            ga.reset()

            self.assertEqual(ga.config.pool_size, GAConfig().pool_size)
            self.assertEqual(ga.config.crossover, GAConfig().crossover)
            self.assertIsNotNone(ga.engine)


if __name__ == '__main__':
    unittest.main()
