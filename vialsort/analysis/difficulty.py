"""Monte Carlo estimate of how many moves a puzzle takes to win."""

from __future__ import annotations
import math
import random
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

from ..core.errors import AnalysisCancelled
from ..core.moves import Move, apply_move, get_valid_moves
from ..core.state import GameState, StateId, win_condition
from .graph import CancelFlag


@dataclass
class DifficultySample:
    """Result of one randomized search."""
    difficulty: float
    success: bool


@dataclass
class _Frame:
    state: GameState
    moves: List[Move]
    next_move: int = 0
    difficulty: float = 1.0


def estimate_difficulty(
    state: GameState,
    rng: Optional[random.Random] = None,
    seen_ids: Optional[Set[StateId]] = None,
    cancel: Optional[CancelFlag] = None,
) -> DifficultySample:
    """
    Run one randomized depth-first search towards the winning state.

    Every expanded state counts 1. Moves are tried in shuffled order and
    the search stops at the first move whose subtree wins. A state that was
    already seen counts 1 and fails. The seen set is shared by the whole
    search and is never pruned on backtrack, so a state abandoned on one
    branch stays abandoned on its siblings.

    Args:
        state: Where the search starts.
        rng: Random source for move shuffling (default: module random).
        seen_ids: Seen set to share between calls; a fresh one by default.
        cancel: Optional flag checked once per search step.

    Returns:
        DifficultySample with the accumulated count and whether a win was found.

    Raises:
        AnalysisCancelled: If ``cancel`` is set during the search.
    """
    if seen_ids is None:
        seen_ids = set()

    stack: List[_Frame] = []
    outcome = _enter(state, seen_ids, stack, rng)

    # Explicit stack instead of recursion: searches can run thousands deep
    while stack:
        if cancel is not None and cancel.is_set():
            raise AnalysisCancelled("Difficulty search cancelled")
        frame = stack[-1]
        if outcome is not None:
            frame.difficulty += outcome.difficulty
            if outcome.success:
                stack.pop()
                outcome = DifficultySample(frame.difficulty, True)
                continue
            outcome = None

        if frame.next_move < len(frame.moves):
            move = frame.moves[frame.next_move]
            frame.next_move += 1
            outcome = _enter(apply_move(frame.state, move), seen_ids, stack, rng)
        else:
            stack.pop()
            outcome = DifficultySample(frame.difficulty, False)

    return outcome


def _enter(
    state: GameState,
    seen_ids: Set[StateId],
    stack: List[_Frame],
    rng: Optional[random.Random],
) -> Optional[DifficultySample]:
    """Resolve a leaf immediately, or push a frame and return None."""
    if win_condition(state):
        return DifficultySample(0.0, True)
    state_id = state.state_id
    if state_id in seen_ids:
        return DifficultySample(1.0, False)
    seen_ids.add(state_id)

    moves = get_valid_moves(state)
    (rng or random).shuffle(moves)
    stack.append(_Frame(state, moves))
    return None


@dataclass
class DifficultyEstimate:
    """Aggregate of repeated difficulty samples."""
    mean: float = 0.0
    std_error: float = math.inf
    samples: int = 0
    successes: int = 0
    converged: bool = False
    time_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mean": self.mean,
            "std_error": self.std_error,
            "samples": self.samples,
            "successes": self.successes,
            "converged": self.converged,
            "time_seconds": self.time_seconds,
        }

    def __str__(self) -> str:
        return f"{self.mean:.4g} +/- {self.std_error:.4g}"


class DifficultyEstimator:
    """
    Repeats ``estimate_difficulty`` until the estimate is tight enough.

    Keeps a running mean and the standard error of the mean, and stops
    once the standard error is within ``tolerance`` of the mean.
    """

    def __init__(
        self,
        tolerance: float = 0.02,
        min_samples: int = 2,
        max_samples: int = 100000,
        seed: Optional[int] = None,
    ):
        """
        Initialize the estimator.

        Args:
            tolerance: Relative standard error to stop at (0.02 = 2%).
            min_samples: Samples to draw before testing convergence (>= 2).
            max_samples: Hard cap on the number of samples.
            seed: Random seed for reproducibility.
        """
        if tolerance <= 0:
            raise ValueError(f"Tolerance must be positive, got {tolerance}")
        self.tolerance = tolerance
        self.min_samples = max(2, min_samples)
        self.max_samples = max(self.min_samples, max_samples)
        self.rng = random.Random(seed)

    def estimate(self, state: GameState, cancel: Optional[CancelFlag] = None) -> DifficultyEstimate:
        """Sample until converged, capped, or cancelled."""
        result = DifficultyEstimate()
        total = 0.0
        sq_total = 0.0
        start_time = time.perf_counter()

        while result.samples < self.max_samples:
            if cancel is not None and cancel.is_set():
                break
            try:
                sample = estimate_difficulty(state, self.rng, cancel=cancel)
            except AnalysisCancelled:
                break
            result.samples += 1
            result.successes += int(sample.success)
            total += sample.difficulty
            sq_total += sample.difficulty ** 2

            n = result.samples
            result.mean = total / n
            if n < 2:
                continue
            variance = max(0.0, sq_total / n - result.mean ** 2)
            result.std_error = math.sqrt(variance / (n - 1))
            if n >= self.min_samples and self.tolerance * result.mean >= result.std_error:
                result.converged = True
                break

        result.time_seconds = time.perf_counter() - start_time
        return result
