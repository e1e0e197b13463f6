#!/usr/bin/env python3
"""
Fitness Plotter - Visualize the fitness history of GA runs

This tool reads the fitness history CSV files exported by a run
(`--export-history`) and plots, per run:
1. Min, average and max pool fitness per reported iteration
2. Best-so-far fitness per reported iteration

Usage:
    python tools/fitness_plotter.py --results_dir ga_results
    python tools/fitness_plotter.py --input ga_results/ga_run_20240101_120000_fitness_history.csv
"""

import argparse
import glob
import logging
import os
from pathlib import Path
from typing import Dict, List

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

# Setup logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

HISTORY_SUFFIX = "_fitness_history.csv"
REQUIRED_COLUMNS = ['Iteration', 'Min_Fitness', 'Max_Fitness', 'Avg_Fitness', 'Best_Fitness']


class FitnessPlotter:
    """Load exported fitness histories and plot them."""

    def __init__(self, output_dir: str = "analysis_results"):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(exist_ok=True, parents=True)
        self.histories: Dict[str, pd.DataFrame] = {}

    def find_history_files(self, results_dir: str) -> List[str]:
        """All fitness history CSV files in a results directory."""
        return sorted(glob.glob(os.path.join(results_dir, f"*{HISTORY_SUFFIX}")))

    def load_history(self, path: str) -> pd.DataFrame:
        """Load one history file, keyed by its run name."""
        df = pd.read_csv(path)
        missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
        if missing:
            raise ValueError(f"{path} is missing columns: {missing}")

        run_name = os.path.basename(path)[:-len(HISTORY_SUFFIX)]
        self.histories[run_name] = df
        logger.info(f"Loaded {len(df)} records from {path}")
        return df

    def plot_fitness_bands(self, run_name: str) -> Path:
        """Min/average/max pool fitness and best-so-far for one run."""
        df = self.histories[run_name]

        fig, ax = plt.subplots(figsize=(10, 6))
        ax.fill_between(df['Iteration'], df['Min_Fitness'], df['Max_Fitness'],
                        alpha=0.2, label='Min-Max range')
        ax.plot(df['Iteration'], df['Avg_Fitness'], label='Average')
        ax.plot(df['Iteration'], df['Best_Fitness'], linestyle='--', label='Best so far')

        ax.set_title(f'Fitness Evolution - {run_name}')
        ax.set_xlabel('Iteration')
        ax.set_ylabel('Fitness')
        ax.grid(True, alpha=0.3)
        ax.legend()

        output_path = self.output_dir / f"{run_name}_fitness.png"
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        return output_path

    def plot_best_comparison(self) -> Path:
        """Best-so-far fitness of every loaded run on one chart."""
        fig, ax = plt.subplots(figsize=(10, 6))
        colors = plt.cm.tab10(np.linspace(0, 1, max(1, len(self.histories))))

        for color, (run_name, df) in zip(colors, sorted(self.histories.items())):
            ax.plot(df['Iteration'], df['Best_Fitness'], color=color, label=run_name)

        ax.set_title('Best Fitness Comparison')
        ax.set_xlabel('Iteration')
        ax.set_ylabel('Best Fitness')
        ax.grid(True, alpha=0.3)
        ax.legend(fontsize='small')

        output_path = self.output_dir / "best_fitness_comparison.png"
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        return output_path


def main():
    parser = argparse.ArgumentParser(description='Plot GA fitness histories.')
    parser.add_argument('--results_dir', '-r', type=str, help="Directory with exported history CSV files")
    parser.add_argument('--input', '-i', type=str, nargs='*', default=[], help="History CSV files")
    parser.add_argument('--output_dir', '-o', type=str, default="analysis_results",
                        help="Folder for generated plots (default: analysis_results)")
    args = parser.parse_args()

    plotter = FitnessPlotter(args.output_dir)

    paths = list(args.input)
    if args.results_dir:
        paths.extend(plotter.find_history_files(args.results_dir))

    if not paths:
        logger.error("No fitness history files found")
        return

    for path in paths:
        plotter.load_history(path)

    for run_name in plotter.histories:
        logger.info(f"Saved {plotter.plot_fitness_bands(run_name)}")

    if len(plotter.histories) > 1:
        logger.info(f"Saved {plotter.plot_best_comparison()}")


if __name__ == "__main__":
    main()
