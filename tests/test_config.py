"""
Tests for run configuration: the GAConfig container, the keyword config
file reader and the command-line layer.
"""

import argparse
import os
import unittest

from test_fixtures import TestFixtures

from ga_config import ConfigFileReader, GAConfig, load_config_file, tokenize_config_line
from ga_constants import Datatypes, GAConstants, InitPoolSources, ReportTypes
from ga_logging import setup_logging
from main import OBJECTIVES, build_config, build_parser


class TestGAConfig(unittest.TestCase):
    """Test the configuration container."""

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)

    def test_defaults(self):
        config = GAConfig()
        self.assertEqual(config.datatype, Datatypes.INT_PERM)
        self.assertEqual(config.pool_size, 100)
        self.assertEqual(config.chrom_len, 10)
        self.assertEqual(config.max_iter, -1)
        self.assertEqual(config.selection, "roulette")
        self.assertEqual(config.crossover, "order1")
        self.assertEqual(config.replacement, "append")
        self.assertEqual(config.ga, "generational")
        self.assertTrue(config.minimize)
        self.assertTrue(config.elitist)

    def test_validation_errors_collects_everything(self):
        config = GAConfig()
        config.gap = 2.0
        config.rp_interval = 0
        errors = config.validation_errors()
        self.assertEqual(len(errors), 2)

    def test_update_returns_new_config(self):
        config = GAConfig()
        updated = config.update(pool_size=30)
        self.assertEqual(updated.pool_size, 30)
        self.assertEqual(config.pool_size, 100)

    def test_round_trip_through_dict(self):
        config = GAConfig(pool_size=12, crossover="pmx")
        self.assertEqual(GAConfig.from_dict(config.to_dict()), config)

    def test_summary(self):
        config = GAConfig(selection="rank_biased", mu_rate=0.1, user_data="tsp.dat")
        text = config.summary()

        self.assertIn("GA Configuration Information:", text)
        self.assertIn("User Data         : tsp.dat", text)
        self.assertIn("Data Type         : Integer Permutation", text)
        self.assertIn("Number of Trials  : Run until convergence", text)
        self.assertIn("(Bias = 1.8)", text)
        self.assertIn("Mutation    : swap (Rate = 0.1)", text)

    def test_summary_uses_resolved_names(self):
        text = GAConfig(crossover="pm").summary({'crossover': 'pmx'})
        self.assertIn("Crossover   : pmx (Rate = 1)", text)

    def test_summary_hides_reports_when_disabled(self):
        text = GAConfig(rp_type=ReportTypes.NONE).summary()
        self.assertNotIn("Reports", text)


class TestConfigFileReader(unittest.TestCase):
    """Test the keyword-per-line config file reader."""

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)
        self.reader = ConfigFileReader()

    def _read(self, *lines):
        for line in lines:
            self.reader.read_line(line)
        return self.reader.config

    def test_tokenize_drops_comments(self):
        self.assertEqual(tokenize_config_line("pool_size 30  # larger pool"), ["pool_size", "30"])
        self.assertEqual(tokenize_config_line("   # only a comment"), [])
        self.assertEqual(tokenize_config_line(""), [])

    def test_numeric_settings(self):
        config = self._read("pool_size 30", "chrom_len 12", "x_rate 0.6",
                            "mu_rate 0.05", "bias 1.5", "gap 0.2", "rp_interval 5")
        self.assertEqual(config.pool_size, 30)
        self.assertEqual(config.chrom_len, 12)
        self.assertEqual(config.x_rate, 0.6)
        self.assertEqual(config.mu_rate, 0.05)
        self.assertEqual(config.bias, 1.5)
        self.assertEqual(config.gap, 0.2)
        self.assertEqual(config.rp_interval, 5)
        self.assertEqual(self.reader.warnings, [])

    def test_bad_lines_warn_and_keep_value(self):
        config = self._read("pool_size lots", "frobnicate 3", "datatype complex", "x_rate")
        self.assertEqual(config.pool_size, 100)
        self.assertEqual(config.datatype, Datatypes.INT_PERM)
        self.assertEqual(len(self.reader.warnings), 4)
        self.assertIn("Unknown config command 'frobnicate'", self.reader.warnings)

    def test_operator_names(self):
        config = self._read("selection uniform_random", "crossover pmx",
                            "mutation float_random", "replacement weakest")
        self.assertEqual(config.selection, "uniform_random")
        self.assertEqual(config.crossover, "pmx")
        self.assertEqual(config.mutation, "float_random")
        self.assertEqual(config.replacement, "weakest")

    def test_steady_state_presets(self):
        config = self._read("ga steady_state")
        self.assertEqual(config.ga, "steady_state")
        self.assertEqual(config.selection, GAConstants.STEADY_STATE_SELECTION)
        self.assertEqual(config.replacement, GAConstants.STEADY_STATE_REPLACEMENT)
        self.assertEqual(config.rp_interval, GAConstants.STEADY_STATE_RP_INTERVAL)

        config = self._read("ga generational")
        self.assertEqual(config.selection, "roulette")
        self.assertEqual(config.replacement, "append")
        self.assertEqual(config.rp_interval, 1)

    def test_stop_after(self):
        config = self._read("stop_after 50 ignore_convergence")
        self.assertEqual(config.max_iter, 50)
        self.assertFalse(config.use_convergence)

        config = self._read("stop_after 20")
        self.assertEqual(config.max_iter, 20)
        self.assertTrue(config.use_convergence)

        config = self._read("stop_after convergence")
        self.assertEqual(config.max_iter, -1)

        self._read("stop_after 0")
        self.assertEqual(self.reader.config.max_iter, -1)
        self.assertEqual(len(self.reader.warnings), 1)

    def test_flags_and_files(self):
        config = self._read("objective maximize", "elitism false",
                            "initpool from_file pool.dat", "rp_type long",
                            "rp_file report.txt w", "user_data cities.dat",
                            "datatype real")
        self.assertFalse(config.minimize)
        self.assertFalse(config.elitist)
        self.assertEqual(config.initpool, InitPoolSources.FROM_FILE)
        self.assertEqual(config.ip_data, "pool.dat")
        self.assertEqual(config.rp_type, ReportTypes.LONG)
        self.assertEqual(config.rp_file, "report.txt")
        self.assertEqual(config.rp_file_mode, "w")
        self.assertEqual(config.user_data, "cities.dat")
        self.assertEqual(config.datatype, Datatypes.REAL)

    def test_seed_from_process_id(self):
        config = self._read("rand_seed my_pid")
        self.assertEqual(config.rand_seed, os.getpid())

    def test_load_config_file(self):
        path = TestFixtures.create_temp_test_file("# demo run\npool_size 40\n\ncrossover cycle\n")
        try:
            config = load_config_file(path)
        finally:
            TestFixtures.cleanup_path(path)

        self.assertEqual(config.pool_size, 40)
        self.assertEqual(config.crossover, "cycle")

    def test_missing_config_file(self):
        with self.assertRaises(FileNotFoundError):
            load_config_file("/nonexistent/ga.cfg")


class TestCommandLine(unittest.TestCase):
    """Test the command-line configuration layer."""

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)

    def test_defaults_kept_for_missing_arguments(self):
        args = build_parser().parse_args(["--pool-size", "24", "--seed", "9"])
        config = build_config(args)
        self.assertEqual(config.pool_size, 24)
        self.assertEqual(config.rand_seed, 9)
        self.assertEqual(config.chrom_len, 10)
        self.assertFalse(config.export_history)

    def test_arguments_override_config_file(self):
        path = TestFixtures.create_temp_test_file("pool_size 40\nchrom_len 6\n")
        try:
            args = build_parser().parse_args(["--config", path, "--chrom-len", "8"])
            config = build_config(args)
        finally:
            TestFixtures.cleanup_path(path)

        self.assertEqual(config.pool_size, 40)
        self.assertEqual(config.chrom_len, 8)

    def test_from_args_ignores_unknown_names(self):
        args = argparse.Namespace(pool_size=16, log_level="INFO", config=None, crossover=None)
        config = GAConfig.from_args(args)
        self.assertEqual(config.pool_size, 16)
        self.assertEqual(config.crossover, "order1")

    def test_objectives(self):
        chrom = TestFixtures.make_chromosome([1, 2, 3])
        self.assertEqual(OBJECTIVES[1](chrom), 0.0)
        self.assertEqual(OBJECTIVES[2](TestFixtures.make_chromosome([1, 0, 0])), 2.0)
        self.assertAlmostEqual(OBJECTIVES[3](TestFixtures.make_chromosome([0.5, 1.0])), 0.25)


if __name__ == '__main__':
    unittest.main()
