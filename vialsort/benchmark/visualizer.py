"""Visualization utilities for benchmark results."""

from __future__ import annotations
import os
from typing import List

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import seaborn as sns
import numpy as np

from .benchmark import BenchmarkResult


class Visualizer:
    """
    Visualization generator for level analysis benchmarks.

    Creates charts of state-space size, winnability, success probability
    and estimated difficulty against the number of colors.
    """

    BAR_COLOR = "#3498db"
    WIN_COLOR = "#2ecc71"
    LOSE_COLOR = "#e74c3c"

    def __init__(self, results: List[BenchmarkResult], output_dir: str = "results"):
        """
        Initialize the visualizer.

        Args:
            results: List of benchmark results.
            output_dir: Directory to save generated charts.
        """
        self.results = [r for r in results if "error" not in r.extra]
        self.output_dir = output_dir
        os.makedirs(output_dir, exist_ok=True)

        sns.set_theme(style="whitegrid")

    def _color_counts(self) -> List[int]:
        return sorted(set(r.num_colors for r in self.results))

    def _save(self, name: str) -> str:
        plt.tight_layout()
        path = os.path.join(self.output_dir, name)
        plt.savefig(path, dpi=150, bbox_inches='tight')
        plt.close()
        return path

    def generate_all(self) -> List[str]:
        """
        Generate all charts.

        Returns:
            List of paths to generated chart files.
        """
        if not self.results:
            return []
        return [
            self.plot_state_space_size(),
            self.plot_winnable_share(),
            self.plot_success_probability(),
            self.plot_difficulty_vs_distance(),
        ]

    def plot_state_space_size(self) -> str:
        """Box plot of reachable states per color count (log scale)."""
        fig, ax = plt.subplots(figsize=(10, 6))

        counts = self._color_counts()
        data = [[r.states for r in self.results if r.num_colors == c] for c in counts]
        sns.boxplot(data=data, ax=ax, color=self.BAR_COLOR)

        ax.set_xticks(range(len(counts)))
        ax.set_xticklabels([str(c) for c in counts])
        ax.set_xlabel('Colors', fontsize=12)
        ax.set_ylabel('Reachable States (Log Scale)', fontsize=12)
        ax.set_title('State Space Size by Number of Colors', fontsize=14, fontweight='bold')
        ax.set_yscale('log')

        return self._save("state_space_size.png")

    def plot_winnable_share(self) -> str:
        """Stacked bars of winnable and unwinnable levels."""
        fig, ax = plt.subplots(figsize=(10, 6))

        counts = self._color_counts()
        wins = np.array([sum(1 for r in self.results if r.num_colors == c and r.winnable) for c in counts])
        losses = np.array([sum(1 for r in self.results if r.num_colors == c and not r.winnable) for c in counts])

        labels = [str(c) for c in counts]
        ax.bar(labels, wins, color=self.WIN_COLOR, edgecolor='black', linewidth=0.5, label='Winnable')
        ax.bar(labels, losses, bottom=wins, color=self.LOSE_COLOR, edgecolor='black',
               linewidth=0.5, label='Unwinnable')

        ax.set_xlabel('Colors', fontsize=12)
        ax.set_ylabel('Levels', fontsize=12)
        ax.set_title('Winnable Levels by Number of Colors', fontsize=14, fontweight='bold')
        ax.legend()

        return self._save("winnable_share.png")

    def plot_success_probability(self) -> str:
        """Strip plot of random-play success probability per color count."""
        fig, ax = plt.subplots(figsize=(10, 6))

        x = [str(r.num_colors) for r in self.results]
        y = [r.success_probability for r in self.results]
        hue = ['Winnable' if r.winnable else 'Unwinnable' for r in self.results]
        sns.stripplot(x=x, y=y, hue=hue, ax=ax, jitter=0.2,
                      palette={'Winnable': self.WIN_COLOR, 'Unwinnable': self.LOSE_COLOR})

        ax.set_xlabel('Colors', fontsize=12)
        ax.set_ylabel('Success Probability', fontsize=12)
        ax.set_title('Success Probability Under Random Play', fontsize=14, fontweight='bold')
        ax.set_ylim(-0.05, 1.05)

        return self._save("success_probability.png")

    def plot_difficulty_vs_distance(self) -> str:
        """Scatter of estimated difficulty against the shortest win distance."""
        fig, ax = plt.subplots(figsize=(10, 6))

        rows = [r for r in self.results if r.difficulty_mean is not None]
        if rows:
            ax.errorbar(
                [r.distance_from_win for r in rows],
                [r.difficulty_mean for r in rows],
                yerr=[r.difficulty_std_error for r in rows],
                fmt='o', color=self.BAR_COLOR, ecolor='gray', alpha=0.8, capsize=3
            )

        ax.set_xlabel('Shortest Win Distance (moves)', fontsize=12)
        ax.set_ylabel('Estimated Difficulty', fontsize=12)
        ax.set_title('Estimated Difficulty vs. Shortest Solution', fontsize=14, fontweight='bold')

        return self._save("difficulty_vs_distance.png")

    def generate_summary_table(self) -> str:
        """Generate a markdown summary table."""
        lines = [
            "# Benchmark Summary\n",
            "| Colors | Levels | Winnable | Avg States | Avg Success P | Avg Difficulty |",
            "|--------|--------|----------|------------|---------------|----------------|"
        ]

        for c in self._color_counts():
            rows = [r for r in self.results if r.num_colors == c]
            winnable = sum(1 for r in rows if r.winnable) / len(rows) * 100
            avg_states = np.mean([r.states for r in rows])
            avg_p = np.mean([r.success_probability for r in rows])
            diffs = [r.difficulty_mean for r in rows if r.difficulty_mean is not None]
            avg_diff = f"{np.mean(diffs):.1f}" if diffs else "-"

            lines.append(
                f"| {c} | {len(rows)} | {winnable:.1f}% | {int(avg_states):,} | {avg_p:.4f} | {avg_diff} |"
            )

        path = os.path.join(self.output_dir, "benchmark_summary.md")
        with open(path, "w") as f:
            f.write("\n".join(lines))

        return path
