"""Benchmarking framework for analysing batches of generated levels."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional
from concurrent.futures import ThreadPoolExecutor, TimeoutError
import json
import os
import threading
import time

import numpy as np
from tqdm import tqdm

from ..analysis import AnalysisSession, DifficultyEstimator
from ..core.errors import StateSpaceTooLarge
from ..generator import Level, LevelGenerator, save_levels


@dataclass
class BenchmarkResult:
    """Results from analysing a single level."""
    level_id: int
    num_colors: int
    states: int
    edges: int
    winnable: bool
    distance_from_win: Optional[int]
    success_probability: Optional[float]
    difficulty_mean: Optional[float]
    difficulty_std_error: Optional[float]
    time_seconds: float
    memory_bytes: int
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "level_id": self.level_id,
            "num_colors": self.num_colors,
            "states": self.states,
            "edges": self.edges,
            "winnable": self.winnable,
            "distance_from_win": self.distance_from_win,
            "success_probability": self.success_probability,
            "difficulty_mean": self.difficulty_mean,
            "difficulty_std_error": self.difficulty_std_error,
            "time_seconds": self.time_seconds,
            "memory_bytes": self.memory_bytes,
            "memory_mb": self.memory_bytes / (1024 * 1024),
            **self.extra
        }


class Benchmark:
    """
    Benchmark framework for the analysis pipeline.

    Generates random levels, crawls each one, solves success probabilities
    and estimates difficulty, collecting per-level metrics.
    """

    def __init__(
        self,
        color_counts: Optional[List[int]] = None,
        levels_per_count: int = 5,
        vial_height: int = 4,
        empty_vials: int = 2,
        timeout_seconds: float = 60.0,
        max_states: Optional[int] = 500000,
        difficulty_tolerance: float = 0.05,
        difficulty_max_samples: int = 2000,
        track_memory: bool = False,
        seed: Optional[int] = None
    ):
        """
        Initialize the benchmark.

        Args:
            color_counts: Numbers of colors to generate levels for (default: 2-5).
            levels_per_count: Number of levels per color count.
            vial_height: Items per vial.
            empty_vials: Empty vials per level.
            timeout_seconds: Maximum analysis time per level.
            max_states: Crawls discovering more states are abandoned.
            difficulty_tolerance: Relative standard error for difficulty sampling.
            difficulty_max_samples: Cap on difficulty samples per level.
            track_memory: Record peak crawl memory with tracemalloc.
            seed: Random seed for reproducibility.
        """
        self.color_counts = color_counts or [2, 3, 4, 5]
        self.levels_per_count = levels_per_count
        self.vial_height = vial_height
        self.empty_vials = empty_vials
        self.timeout_seconds = timeout_seconds
        self.max_states = max_states
        self.difficulty_tolerance = difficulty_tolerance
        self.difficulty_max_samples = difficulty_max_samples
        self.track_memory = track_memory
        self.seed = seed

        self.levels: Dict[int, List[Level]] = {}
        self.results: List[BenchmarkResult] = []

    def generate_levels(self) -> None:
        """Generate all levels for benchmarking."""
        generator = LevelGenerator(self.vial_height, self.empty_vials, seed=self.seed)
        for num_colors in self.color_counts:
            self.levels[num_colors] = generator.generate_batch(self.levels_per_count, num_colors)

    def run(self, show_progress: bool = True) -> List[BenchmarkResult]:
        """
        Run the full benchmark suite.

        Returns:
            List of BenchmarkResult objects.
        """
        if not self.levels:
            self.generate_levels()

        self.results = []
        total = sum(len(levels) for levels in self.levels.values())
        pbar = tqdm(total=total, desc="Analysing", disable=not show_progress)

        for num_colors, levels in self.levels.items():
            for level_id, level in enumerate(levels):
                self.results.append(self._run_single(level, level_id, num_colors))
                pbar.update(1)

        pbar.close()
        return self.results

    def _analyse(self, level: Level, cancel: threading.Event) -> BenchmarkResult:
        """Crawl, solve and estimate one level."""
        state = level.to_state()
        session = AnalysisSession(state, track_memory=self.track_memory)
        stats = session.crawl(cancel=cancel, max_states=self.max_states)

        probability = session.success_probability(state, cancel=cancel)
        difficulty = None
        if stats.start_winnable:
            estimator = DifficultyEstimator(
                tolerance=self.difficulty_tolerance,
                max_samples=self.difficulty_max_samples,
                seed=self.seed,
            )
            difficulty = estimator.estimate(state, cancel=cancel)

        return BenchmarkResult(
            level_id=0,
            num_colors=level.num_colors,
            states=stats.states,
            edges=stats.edges,
            winnable=stats.start_winnable,
            distance_from_win=stats.start_distance_from_win,
            success_probability=probability,
            difficulty_mean=difficulty.mean if difficulty else None,
            difficulty_std_error=difficulty.std_error if difficulty else None,
            time_seconds=stats.time_seconds,
            memory_bytes=stats.memory_bytes,
            extra={
                "level": level.to_string(),
                "difficulty_samples": difficulty.samples if difficulty else 0,
            }
        )

    def _run_single(self, level: Level, level_id: int, num_colors: int) -> BenchmarkResult:
        """Analyse a single level, enforcing the timeout."""
        cancel = threading.Event()
        start_time = time.perf_counter()
        # Use ThreadPoolExecutor to enforce timeout; a timed out worker is
        # cancelled and left to wind down on its own
        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(self._analyse, level, cancel)
        try:
            result = future.result(timeout=self.timeout_seconds)
            result.level_id = level_id
            return result
        except TimeoutError:
            cancel.set()
            return self._failed(level, level_id, num_colors, "Timeout", start_time)
        except StateSpaceTooLarge as e:
            return self._failed(level, level_id, num_colors, str(e), start_time)
        finally:
            executor.shutdown(wait=False)

    def _failed(
        self, level: Level, level_id: int, num_colors: int, error: str, start_time: float
    ) -> BenchmarkResult:
        return BenchmarkResult(
            level_id=level_id,
            num_colors=num_colors,
            states=0,
            edges=0,
            winnable=False,
            distance_from_win=None,
            success_probability=None,
            difficulty_mean=None,
            difficulty_std_error=None,
            time_seconds=time.perf_counter() - start_time,
            memory_bytes=0,
            extra={"level": level.to_string(), "error": error}
        )

    def get_summary(self) -> Dict[str, Any]:
        """Get summary statistics from benchmark results."""
        summary = {
            "total_levels": len(self.results),
            "color_counts": list(self.color_counts),
            "vial_height": self.vial_height,
            "empty_vials": self.empty_vials,
            "results_by_colors": {}
        }

        for num_colors in self.color_counts:
            rows = [r for r in self.results if r.num_colors == num_colors]
            analysed = [r for r in rows if "error" not in r.extra]
            if not rows:
                continue
            winnable = [r for r in analysed if r.winnable]
            difficulties = [r.difficulty_mean for r in winnable if r.difficulty_mean is not None]

            summary["results_by_colors"][str(num_colors)] = {
                "tested": len(rows),
                "analysed": len(analysed),
                "winnable_percent": len(winnable) / len(analysed) * 100 if analysed else 0.0,
                "avg_states": float(np.mean([r.states for r in analysed])) if analysed else 0.0,
                "max_states": max((r.states for r in analysed), default=0),
                "avg_time_seconds": float(np.mean([r.time_seconds for r in rows])),
                "avg_success_probability": float(np.mean(
                    [r.success_probability for r in analysed]
                )) if analysed else 0.0,
                "avg_distance_from_win": float(np.mean(
                    [r.distance_from_win for r in winnable]
                )) if winnable else None,
                "avg_difficulty": float(np.mean(difficulties)) if difficulties else None,
            }

        return summary

    def save_results(self, output_dir: str) -> None:
        """Save benchmark results and generated levels to files."""
        os.makedirs(output_dir, exist_ok=True)

        results_file = os.path.join(output_dir, "benchmark_results.json")
        with open(results_file, "w") as f:
            json.dump([r.to_dict() for r in self.results], f, indent=2)

        summary_file = os.path.join(output_dir, "benchmark_summary.json")
        with open(summary_file, "w") as f:
            json.dump(self.get_summary(), f, indent=2)

        levels_dir = os.path.join(output_dir, "levels")
        os.makedirs(levels_dir, exist_ok=True)
        for num_colors, levels in self.levels.items():
            save_levels(levels, os.path.join(levels_dir, f"colors_{num_colors}.json"))

        print(f"Results and levels saved to {output_dir}")
