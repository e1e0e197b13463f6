"""
Tests for report timing, report formats and result exports.
"""

import io
import json
import os
import unittest

import pandas as pd

from test_fixtures import TestFixtures

from ga_constants import ReportTypes
from ga_exceptions import ReportingError
from ga_logging import setup_logging
from ga_components.reporting import GAReporter, ReportSnapshot, format_genes


class TestReportTiming(unittest.TestCase):
    """Test when periodic reports are due."""

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)
        self.reporter = GAReporter(rp_type=ReportTypes.SHORT, rp_interval=5, stream=io.StringIO())

    def test_first_iteration(self):
        self.assertTrue(self.reporter.should_report(0, 100, False))

    def test_interval(self):
        self.assertFalse(self.reporter.should_report(3, 100, False))
        self.assertTrue(self.reporter.should_report(4, 100, False))
        self.assertTrue(self.reporter.should_report(9, 100, False))

    def test_initial_pool_report(self):
        self.assertTrue(self.reporter.should_report(-1, 100, False))

    def test_last_iteration(self):
        self.assertTrue(self.reporter.should_report(11, 12, False))

    def test_convergence(self):
        self.assertTrue(self.reporter.should_report(7, 100, True))
        self.assertFalse(self.reporter.should_report(7, 100, True, use_convergence=False))

    def test_invalid_settings(self):
        with self.assertRaises(ValueError):
            GAReporter(rp_type="verbose")
        with self.assertRaises(ValueError):
            GAReporter(rp_interval=0)


class TestReportFormats(unittest.TestCase):
    """Test the report text."""

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)
        self.stream = io.StringIO()
        self.pool = TestFixtures.make_pool([3.0, 1.0, 2.0])
        self.best = self.pool.best

    def _reporter(self, rp_type):
        return GAReporter(rp_type=rp_type, stream=self.stream)

    def _snapshot(self, iteration):
        return ReportSnapshot.capture(iteration, self.pool, self.best, mutations=2, total_mutations=5)

    def test_capture(self):
        snapshot = self._snapshot(4)
        self.assertEqual(snapshot.iteration, 4)
        self.assertEqual(snapshot.min, 1.0)
        self.assertEqual(snapshot.max, 3.0)
        self.assertEqual(snapshot.total, 6.0)
        self.assertEqual(snapshot.best_fitness, 1.0)
        self.assertEqual(snapshot.best_genes, self.best.gene)

    def test_format_genes_wraps(self):
        text = format_genes([1, 2, 3, 4, 5], 2, "  ")
        self.assertEqual(text, "1 2 \n  3 4 \n  5 ")

    def test_minimal(self):
        self._reporter(ReportTypes.MINIMAL).report(self._snapshot(2), self.pool)
        self.assertEqual(self.stream.getvalue(), "Iteration 3: best = 1\n")

    def test_short_header_on_initial_report(self):
        reporter = self._reporter(ReportTypes.SHORT)
        reporter.report(self._snapshot(-1), self.pool)
        reporter.report(self._snapshot(0), self.pool)

        lines = self.stream.getvalue().splitlines()
        self.assertEqual(lines[1].split(), ["Gener", "Min", "Max", "Ave", "Variance",
                                            "Std", "Dev", "Tot", "Fit", "Best"])
        self.assertEqual(lines[3].split()[0], "0")
        self.assertEqual(lines[4].split()[0], "1")
        self.assertEqual(self.stream.getvalue().count("Gener"), 1)

    def test_short_statistics_at_iteration_limit(self):
        self._reporter(ReportTypes.SHORT).report(self._snapshot(9), self.pool, max_iter=10)
        text = self.stream.getvalue()
        self.assertIn("Min= 1   Max= 3", text)
        self.assertIn("Best: ", text)

    def test_long_lists_pool(self):
        self._reporter(ReportTypes.LONG).report(self._snapshot(0), self.pool)
        text = self.stream.getvalue()
        self.assertIn("Generation 1: Mutations = 2 (5 total)", text)
        self.assertIn(" # Parents  XP   Fitness  String", text)
        self.assertEqual(text.count("( 0, 0)"), 3)

    def test_none_writes_nothing(self):
        reporter = self._reporter(ReportTypes.NONE)
        reporter.config_report("GA Configuration Information:")
        reporter.report(self._snapshot(0), self.pool)
        reporter.final_report(5, True, self.best)

        self.assertEqual(self.stream.getvalue(), "")
        self.assertEqual(len(reporter.snapshots), 1)

    def test_final_report_converged(self):
        self._reporter(ReportTypes.SHORT).final_report(17, True, self.best)
        text = self.stream.getvalue()
        self.assertIn("The GA has converged after 17 iterations.", text)
        self.assertIn("Best: ", text)
        self.assertIn("(1)", text)

    def test_final_report_iteration_limit(self):
        reporter = self._reporter(ReportTypes.SHORT)
        reporter.final_report(40, False, self.best)
        self.assertIn("The specified number of iterations has been reached.", self.stream.getvalue())
        self.assertEqual(reporter.statistics['best_overall_fitness'], 1.0)


class TestReportExports(unittest.TestCase):
    """Test report files and exported results."""

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)
        self.temp_dir = TestFixtures.create_temp_test_dir()
        self.pool = TestFixtures.make_pool([3.0, 1.0, 2.0])

    def tearDown(self):
        TestFixtures.cleanup_path(self.temp_dir)

    def _reporter(self, **kwargs):
        return GAReporter(rp_type=ReportTypes.NONE, output_dir=self.temp_dir,
                          experiment_name="unit", **kwargs)

    def _report_iterations(self, reporter, count):
        for i in range(-1, count - 1):
            reporter.report(ReportSnapshot.capture(i, self.pool, self.pool.best), self.pool)

    def test_dataframe(self):
        reporter = self._reporter()
        self._report_iterations(reporter, 3)

        df = reporter.to_dataframe()
        self.assertEqual(list(df['Iteration']), [0, 1, 2])
        self.assertEqual(list(df['Best_Fitness']), [1.0, 1.0, 1.0])

    def test_empty_dataframe_has_columns(self):
        df = self._reporter().to_dataframe()
        self.assertEqual(len(df), 0)
        self.assertIn('Avg_Fitness', df.columns)

    def test_export_fitness_history(self):
        reporter = self._reporter()
        self._report_iterations(reporter, 4)

        path = reporter.export_fitness_history()

        self.assertEqual(path, os.path.join(self.temp_dir, "unit_fitness_history.csv"))
        history = pd.read_csv(path)
        self.assertEqual(len(history), 4)
        self.assertAlmostEqual(history['Variance'].iloc[0], 1.0)

    def test_save_run_summary(self):
        reporter = self._reporter()
        self._report_iterations(reporter, 2)

        path = reporter.save_run_summary(final_result={'best_fitness': 1.0})

        with open(path) as f:
            summary = json.load(f)
        self.assertEqual(summary['experiment_name'], "unit")
        self.assertEqual(summary['final_result']['best_fitness'], 1.0)
        self.assertEqual(len(summary['reports']), 2)

    def test_report_file(self):
        path = os.path.join(self.temp_dir, "report.txt")
        reporter = GAReporter(rp_type=ReportTypes.MINIMAL, rp_file=path, rp_file_mode="w")
        reporter.report(ReportSnapshot.capture(0, self.pool, self.pool.best), self.pool)
        reporter.cleanup()

        with open(path) as f:
            self.assertEqual(f.read(), "Iteration 1: best = 1\n")
        self.assertIsNone(reporter.stream)

    def test_unwritable_report_file(self):
        with self.assertRaises(ReportingError):
            GAReporter(rp_file=os.path.join(self.temp_dir, "missing", "report.txt"))


if __name__ == '__main__':
    unittest.main()
