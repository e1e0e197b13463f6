"""
Reporting and I/O Module

Periodic, configuration and final reports for genetic algorithm runs, plus
persistence of the collected fitness history.

Features:
- Report timing (first iteration, interval, last iteration, convergence)
- Minimal, short (one table row per report) and long (whole pool) formats
- Fitness history export to CSV
- Run summary export to JSON
"""

import json
import os
import sys
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, TextIO

import pandas as pd

from ga_constants import ReportTypes
from ga_exceptions import ReportingError
from ga_logging import get_logger
from ga_components.chromosome import Chromosome
from ga_components.pool import Pool


RULE = "=" * 78


@dataclass
class ReportSnapshot:
    """Statistics of one reported iteration."""

    iteration: int
    min: float
    max: float
    ave: float
    var: float
    dev: float
    total: float
    best_fitness: float
    best_genes: List[Any] = field(default_factory=list)
    mutations: int = 0
    total_mutations: int = 0

    @classmethod
    def capture(cls, iteration: int, pool: Pool, best: Chromosome,
                mutations: int = 0, total_mutations: int = 0) -> 'ReportSnapshot':
        return cls(iteration=iteration, min=pool.min, max=pool.max, ave=pool.ave,
                   var=pool.var, dev=pool.dev, total=pool.total_fitness,
                   best_fitness=best.fitness, best_genes=list(best.gene),
                   mutations=mutations, total_mutations=total_mutations)


def format_genes(genes, per_line: int, indent: str) -> str:
    """Render genes with %G, wrapping every `per_line` values."""
    parts = []
    for i, g in enumerate(genes):
        parts.append(f"{g:G} ")
        if i % per_line == per_line - 1 and i + 1 < len(genes):
            parts.append("\n" + indent)
    return "".join(parts)


class GAReporter:
    """
    Report sink for one GA run.

    Reports go to `rp_file` when one is set, otherwise to the given stream
    (standard output by default). Every emitted report is also kept as a
    ReportSnapshot; the engine never reads them back.
    """

    def __init__(self, rp_type: str = ReportTypes.SHORT, rp_interval: int = 1,
                 output_dir: str = "ga_results", rp_file: str = "",
                 rp_file_mode: str = "a", stream: Optional[TextIO] = None,
                 experiment_name: str = None):
        """
        Initialize GA reporter.

        Args:
            rp_type: One of none, minimal, short, long
            rp_interval: Report every rp_interval iterations
            output_dir: Directory for exported history and summaries
            rp_file: Report file path; empty for the stream
            rp_file_mode: Open mode for rp_file ("a" or "w")
            stream: Text stream used when rp_file is empty
            experiment_name: Name of the run (auto-generated if None)
        """
        if rp_type not in ReportTypes.ALL:
            raise ValueError(f"Unknown report type: {rp_type}")
        if rp_interval <= 0:
            raise ValueError(f"Report interval ({rp_interval}) must be positive")

        self.rp_type = rp_type
        self.rp_interval = rp_interval
        self.output_dir = output_dir
        self.rp_file = rp_file
        self.experiment_name = experiment_name or f"ga_run_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
        self.logger = get_logger("Reporter")

        self._owns_stream = False
        if rp_file:
            try:
                self.stream = open(rp_file, rp_file_mode)
            except OSError as e:
                raise ReportingError(f"Cannot open report file {rp_file}: {e}",
                                     output_dir=output_dir, file_type="report")
            self._owns_stream = True
        else:
            self.stream = stream if stream is not None else sys.stdout

        self.start_time = time.time()
        self.snapshots: List[ReportSnapshot] = []
        self.statistics = {
            'reports_written': 0,
            'best_overall_fitness': None,
            'stop_reason': None,
            'total_runtime': 0.0
        }

    def should_report(self, iteration: int, max_iter: int,
                      converged: bool, use_convergence: bool = True) -> bool:
        """Is a report due for this iteration?"""
        if iteration == 0:
            return True
        if (iteration + 1) % self.rp_interval == 0:
            return True
        if iteration + 1 == max_iter:
            return True
        return use_convergence and converged

    def _write(self, text: str):
        self.stream.write(text)
        self.stream.flush()

    def config_report(self, summary: str):
        """Write the configuration report."""
        if self.rp_type == ReportTypes.NONE:
            return
        self._write(summary + "\n")

    def report(self, snapshot: ReportSnapshot, pool: Pool, max_iter: int = -1):
        """
        Record a snapshot and write it in the configured format.

        Args:
            snapshot: Statistics of the reported iteration
            pool: Pool the snapshot was taken from (long format lists it)
            max_iter: Iteration limit; the short format closes its table there
        """
        self.snapshots.append(snapshot)
        self.statistics['reports_written'] += 1

        if self.rp_type == ReportTypes.MINIMAL:
            self._write(f"Iteration {snapshot.iteration + 1}: best = {snapshot.best_fitness:G}\n")
        elif self.rp_type == ReportTypes.SHORT:
            self._write(self._short(snapshot, max_iter))
        elif self.rp_type == ReportTypes.LONG:
            self._write(self._long(snapshot, pool))

    def _short(self, s: ReportSnapshot, max_iter: int) -> str:
        lines = []
        if s.iteration < 0:
            lines.append("\nGener    Min      Max      Ave    Variance  Std Dev  Tot Fit    Best \n"
                         "-----  -------  -------  -------  --------  -------  -------  -------\n")
        lines.append(f"{s.iteration + 1:5d}  {s.min:7.6G}  {s.max:7.6G}  {s.ave:7.3G}  "
                     f"{s.var:8.3G}  {s.dev:7.3G}  {s.total:7.6G}  {s.best_fitness:7.6G}\n")
        if s.iteration + 1 == max_iter:
            lines.append(self._statistics_block(s))
        return "".join(lines)

    def _long(self, s: ReportSnapshot, pool: Pool) -> str:
        lines = ["\n", RULE, "\n",
                 f"Generation {s.iteration + 1}: Mutations = {s.mutations} "
                 f"({s.total_mutations} total)\n\n",
                 " # Parents  XP   Fitness  String\n",
                 "-- ------- ----- -------  ------\n"]
        for i, chrom in enumerate(pool):
            lines.append(f"{i + 1:2d} ({chrom.parent_1 + 1:2d},{chrom.parent_2 + 1:2d}) "
                         f"{chrom.xp1 + 1:2d} {chrom.xp2 + 1:2d} {chrom.fitness:7G}  ")
            lines.append(format_genes(chrom.gene, 15, " " * 34))
            lines.append("\n")
        lines.append(self._statistics_block(s))
        return "".join(lines)

    def _statistics_block(self, s: ReportSnapshot) -> str:
        return (f"\nMin= {s.min:G}   Max= {s.max:G}   Ave= {s.ave:.2G}   Tot= {s.total:G}   "
                f"Var= {s.var:.2G}   SD= {s.dev:.2G}\n"
                f"\nBest: {format_genes(s.best_genes, 20, ' ' * 6)}({s.best_fitness:G})\n"
                f"{RULE}\n")

    def final_report(self, iteration: int, converged: bool, best: Chromosome):
        """
        Write the stop reason and the best chromosome.

        Args:
            iteration: Iterations completed
            converged: True when the run stopped on convergence
            best: Best chromosome of the run
        """
        if converged:
            reason = f"The GA has converged after {iteration} iterations."
        else:
            reason = "The specified number of iterations has been reached."

        self.statistics['stop_reason'] = reason
        self.statistics['best_overall_fitness'] = best.fitness
        self.statistics['total_runtime'] = time.time() - self.start_time

        if self.rp_type == ReportTypes.NONE:
            return
        self._write(f"\n{reason}\n\nBest: {format_genes(best.gene, 20, ' ' * 6)} ({best.fitness:g})\n\n")

    def to_dataframe(self) -> pd.DataFrame:
        """Reported statistics as a DataFrame, one row per report."""
        rows = [{
            'Iteration': s.iteration + 1,
            'Min_Fitness': s.min,
            'Max_Fitness': s.max,
            'Avg_Fitness': s.ave,
            'Variance': s.var,
            'Std_Dev': s.dev,
            'Total_Fitness': s.total,
            'Best_Fitness': s.best_fitness,
            'Mutations': s.mutations,
        } for s in self.snapshots]
        return pd.DataFrame(rows, columns=['Iteration', 'Min_Fitness', 'Max_Fitness',
                                           'Avg_Fitness', 'Variance', 'Std_Dev',
                                           'Total_Fitness', 'Best_Fitness', 'Mutations'])

    def export_fitness_history(self, filename: str = None) -> str:
        """
        Export fitness history to CSV.

        Args:
            filename: Output filename (auto-generated if None)

        Returns:
            Path to exported file
        """
        if filename is None:
            os.makedirs(self.output_dir, exist_ok=True)
            filename = os.path.join(self.output_dir, f"{self.experiment_name}_fitness_history.csv")

        try:
            self.to_dataframe().to_csv(filename, index=False)
        except OSError as e:
            raise ReportingError(f"Cannot write fitness history: {e}",
                                 output_dir=self.output_dir, file_type="csv")

        self.logger.info("Fitness history exported", path=filename, rows=len(self.snapshots))
        return filename

    def save_run_summary(self, final_result: Dict[str, Any] = None,
                         component_stats: Dict[str, Any] = None) -> str:
        """
        Save the run summary as JSON.

        Returns:
            Path to the summary file
        """
        os.makedirs(self.output_dir, exist_ok=True)
        summary_filename = os.path.join(self.output_dir, f"{self.experiment_name}_summary.json")

        summary_data = {
            'experiment_name': self.experiment_name,
            'end_time': datetime.now().isoformat(),
            'statistics': self.statistics,
            'final_result': final_result or {},
            'component_statistics': component_stats or {},
            'reports': [asdict(s) for s in self.snapshots]
        }

        try:
            with open(summary_filename, 'w') as f:
                json.dump(summary_data, f, indent=2, default=str)
        except OSError as e:
            raise ReportingError(f"Cannot write run summary: {e}",
                                 output_dir=self.output_dir, file_type="json")

        return summary_filename

    def cleanup(self):
        """Close the report file if this reporter opened it."""
        if self._owns_stream and self.stream is not None:
            self.stream.close()
            self.stream = None
            self._owns_stream = False
