"""
Tests for the GA data model: chromosomes, pools and operator registries.
"""

import math
import unittest

from test_fixtures import TestFixtures

from ga_constants import Datatypes, PoolConstants
from ga_exceptions import InvalidLength, InvalidPermutation, InvalidRange, UnknownStrategy
from ga_logging import setup_logging
from ga_components.chromosome import Chromosome, allocate, compare, copy, verify
from ga_components.crossover import CROSSOVER_OPERATORS, order1_crossover, order2_crossover, pmx_crossover
from ga_components.mutation import MUTATION_OPERATORS, simple_invert
from ga_components.operator_registry import UNKNOWN, UNSPECIFIED, OperatorRegistry
from ga_components.pool import Pool
from ga_components.selection import SELECTION_OPERATORS, roulette


class TestChromosome(unittest.TestCase):
    """Test chromosome allocation, copying, comparison and verification."""

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)

    def test_allocate_resets_bookkeeping(self):
        chrom = allocate(5)
        self.assertEqual(chrom.gene, [0] * 5)
        self.assertEqual(chrom.idx_min, 0)
        self.assertEqual(chrom.idx_max, 5)
        self.assertEqual((chrom.parent_1, chrom.parent_2, chrom.xp1, chrom.xp2), (-1, -1, -1, -1))
        self.assertEqual(chrom.index, -1)

    def test_non_positive_length_rejected(self):
        with self.assertRaises(InvalidLength):
            Chromosome(0)
        chrom = Chromosome(3)
        with self.assertRaises(InvalidLength):
            chrom.resize(-1)

    def test_copy_is_deep(self):
        src = TestFixtures.make_chromosome([3, 1, 2], fitness=4.0, index=2)
        dst = Chromosome(7)
        copy(src, dst)

        self.assertEqual(dst.length, 3)
        self.assertEqual(dst.gene, [3, 1, 2])
        self.assertEqual(dst.fitness, 4.0)
        self.assertEqual(dst.index, 2)

        dst.gene[0] = 99
        self.assertEqual(src.gene[0], 3)

    def test_compare_respects_direction(self):
        low = TestFixtures.make_chromosome([1], fitness=1.0)
        high = TestFixtures.make_chromosome([1], fitness=2.0)

        self.assertEqual(compare(low, high, minimize=True), -1)
        self.assertEqual(compare(low, high, minimize=False), 1)
        self.assertEqual(compare(low, low.clone(), minimize=True), 0)

    def test_verify_permutation(self):
        verify(TestFixtures.make_chromosome([2, 3, 1]), Datatypes.INT_PERM)

        with self.assertRaises(InvalidPermutation):
            verify(TestFixtures.make_chromosome([1, 1, 3]), Datatypes.INT_PERM)
        with self.assertRaises(InvalidPermutation):
            verify(TestFixtures.make_chromosome([1, 2, 4]), Datatypes.INT_PERM)

        # Duplicates are fine for other representations
        verify(TestFixtures.make_chromosome([1, 1, 3]), Datatypes.INT)

    def test_verify_index_bounds(self):
        chrom = TestFixtures.make_chromosome([1, 2, 3])
        chrom.idx_min = 4
        with self.assertRaises(InvalidRange):
            verify(chrom, Datatypes.INT)


class TestPool(unittest.TestCase):
    """Test pool storage and statistics."""

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)

    def test_statistics(self):
        pool = TestFixtures.make_pool([3.0, 1.0, 2.0])

        self.assertEqual(pool.min, 1.0)
        self.assertEqual(pool.max, 3.0)
        self.assertEqual(pool.min_index, 1)
        self.assertEqual(pool.max_index, 0)
        self.assertAlmostEqual(pool.ave, 2.0)
        self.assertAlmostEqual(pool.var, 1.0)
        self.assertAlmostEqual(pool.dev, 1.0)
        self.assertEqual(pool.total_fitness, 6.0)
        self.assertFalse(pool.converged)
        self.assertFalse(pool.sorted)
        self.assertIs(pool.best, pool[1])

    def test_best_follows_objective(self):
        pool = TestFixtures.make_pool([3.0, 1.0, 2.0], minimize=False)
        self.assertEqual(pool.best.fitness, 3.0)

    def test_zero_variance_is_converged(self):
        pool = TestFixtures.make_pool([2.5, 2.5, 2.5, 2.5])
        self.assertTrue(pool.converged)
        self.assertEqual(pool.var, 0.0)
        self.assertEqual(pool.dev, 0.0)

    def test_single_member_is_converged(self):
        pool = TestFixtures.make_pool([4.0])
        self.assertTrue(pool.converged)
        self.assertEqual(pool.best_index, 0)

    def test_compute_stats_reindexes(self):
        pool = TestFixtures.make_pool([1.0, 2.0, 3.0])
        pool.swap(0, 2)
        pool.compute_stats()
        self.assertEqual([c.index for c in pool], [0, 1, 2])
        self.assertEqual(pool.fitness_values(), [3.0, 2.0, 1.0])

    def test_sort_best_first(self):
        pool = TestFixtures.make_pool([1.0, 3.0, 2.0], minimize=False)
        pool.sort()
        self.assertEqual(pool.fitness_values(), [3.0, 2.0, 1.0])
        self.assertEqual([c.index for c in pool], [0, 1, 2])
        self.assertTrue(pool.sorted)

        pool.compute_stats()
        self.assertTrue(pool.sorted)

    def test_append_grows_by_increment(self):
        pool = Pool(0)
        pool.append(TestFixtures.make_chromosome([1, 2]))
        self.assertEqual(pool.size, 1)
        self.assertEqual(pool.max_size, PoolConstants.PL_ALLOC_SIZE)

    def test_append_copies_unless_told_otherwise(self):
        pool = Pool(2)
        chrom = TestFixtures.make_chromosome([1, 2], fitness=1.0)

        pool.append(chrom)
        self.assertIsNot(pool[0], chrom)
        chrom.gene[0] = 5
        self.assertEqual(pool[0].gene[0], 1)

        pool.append(chrom, copy=False)
        self.assertIs(pool[1], chrom)

    def test_insert_out_of_range(self):
        pool = Pool(2)
        with self.assertRaises(IndexError):
            pool.insert_at(3, TestFixtures.make_chromosome([1]))
        with self.assertRaises(IndexError):
            pool[0]

    def test_ptf_minimize_inverts_weights(self):
        pool = TestFixtures.make_pool([1.0, 2.0, 4.0])
        scale = pool.update_ptf(0.0)

        self.assertEqual(scale, 0.0)
        weights = [c.ptf for c in pool]
        self.assertAlmostEqual(sum(weights), PoolConstants.PTF_TOTAL)
        self.assertGreater(weights[0], weights[1])
        self.assertGreater(weights[1], weights[2])
        self.assertAlmostEqual(weights[0], 2 * weights[1])

    def test_ptf_maximize_proportional(self):
        pool = TestFixtures.make_pool([1.0, 2.0, 3.0], minimize=False)
        pool.update_ptf(0.0)
        self.assertAlmostEqual(pool[2].ptf, 50.0)
        self.assertAlmostEqual(sum(c.ptf for c in pool), 100.0)

    def test_ptf_scale_factor_raised_for_non_positive_fitness(self):
        pool = TestFixtures.make_pool([-2.0, 0.0, 3.0])
        scale = pool.update_ptf(0.0)

        self.assertEqual(scale, 3.0)
        for chrom in pool:
            self.assertGreater(chrom.fitness + scale, 0.0)
            self.assertTrue(math.isfinite(chrom.ptf))

    def test_ptf_scale_factor_dropped_when_all_positive(self):
        pool = TestFixtures.make_pool([1.0, 2.0])
        self.assertEqual(pool.update_ptf(5.0), 0.0)

    def test_reset_keeps_capacity(self):
        pool = TestFixtures.make_pool([1.0, 2.0, 3.0])
        capacity = pool.max_size
        pool.reset()
        self.assertEqual(pool.size, 0)
        self.assertEqual(pool.max_size, capacity)
        self.assertIsNone(pool.best)


class TestOperatorRegistry(unittest.TestCase):
    """Test name resolution of pluggable strategies."""

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)
        self.registry = OperatorRegistry("crossover", CROSSOVER_OPERATORS)

    def test_exact_name(self):
        self.assertIs(self.registry.select("order2"), order2_crossover)
        self.assertEqual(self.registry.current_name(), "order2")

    def test_common_prefix_match(self):
        self.assertIs(self.registry.resolve("order1_fast"), order1_crossover)
        self.assertIs(self.registry.resolve("pm"), pmx_crossover)

        selection = OperatorRegistry("selection", SELECTION_OPERATORS)
        self.assertIs(selection.resolve("roulette_wheel"), roulette)

    def test_ambiguous_prefix_fails(self):
        with self.assertRaises(UnknownStrategy) as cm:
            self.registry.select("order")
        self.assertEqual(cm.exception.candidates, ["order1", "order2"])
        self.assertIn("Ambiguous", str(cm.exception))
        self.assertIsNone(self.registry.current)

        mutation = OperatorRegistry("mutation", MUTATION_OPERATORS)
        for name in ("simple", "float"):
            with self.assertRaises(UnknownStrategy):
                mutation.select(name)
        self.assertIs(mutation.select("simple_inv"), simple_invert)

    def test_longest_common_prefix_wins(self):
        registry = OperatorRegistry("demo", {'a': len, 'abc': abs})
        self.assertIs(registry.resolve("abx"), len)
        self.assertIs(registry.resolve("ab"), abs)

    def test_unknown_name(self):
        with self.assertRaises(UnknownStrategy):
            self.registry.select("nonsense")
        with self.assertRaises(UnknownStrategy):
            self.registry.select("")

    def test_nothing_selected(self):
        self.assertEqual(self.registry.current_name(), UNKNOWN)
        with self.assertRaises(UnknownStrategy):
            self.registry(None, None, None, None, None)

    def test_user_strategy(self):
        def my_crossover(ctx, p1, p2, c1, c2):
            return "called"

        self.registry.register_user("my_crossover", my_crossover)
        self.assertEqual(self.registry.current_name(), "my_crossover")
        self.assertEqual(self.registry(None, None, None, None, None), "called")
        self.assertIs(self.registry.resolve("my_crossover"), my_crossover)

        self.registry.select("pmx")
        self.assertEqual(self.registry.current_name(), "pmx")

    def test_unnamed_user_strategy(self):
        self.registry.register_user(None, lambda *args: None)
        self.assertEqual(self.registry.current_name(), UNSPECIFIED)


if __name__ == '__main__':
    unittest.main()
