"""Vial sort puzzle analysis engine."""

from .core import (
    GameState,
    Move,
    MoveErrorKind,
    MoveResult,
    PuzzleParams,
    StateId,
    apply_move,
    calc_move,
    get_state_id,
    get_valid_moves,
    get_winning_state_id,
    win_condition,
)
from .analysis import (
    AnalysisSession,
    DifficultyEstimator,
    build_reachability_graph,
    decompose_sccs,
    estimate_difficulty,
    solve_success_probabilities,
)

__version__ = "1.0.0"

__all__ = [
    "GameState",
    "Move",
    "MoveErrorKind",
    "MoveResult",
    "PuzzleParams",
    "StateId",
    "apply_move",
    "calc_move",
    "get_state_id",
    "get_valid_moves",
    "get_winning_state_id",
    "win_condition",
    "AnalysisSession",
    "DifficultyEstimator",
    "build_reachability_graph",
    "decompose_sccs",
    "estimate_difficulty",
    "solve_success_probabilities",
]
