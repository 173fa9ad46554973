"""Core module for vial puzzle states and moves."""

from .errors import (
    VialSortError,
    InvariantViolation,
    InvalidMoveError,
    SessionNotCrawled,
    AnalysisCancelled,
    StateSpaceTooLarge,
)
from .state import (
    Item,
    ItemGroup,
    Vial,
    PuzzleParams,
    GameState,
    StateId,
    get_state_id,
    win_condition,
    winning_state,
    get_winning_state_id,
)
from .moves import (
    Move,
    MoveErrorKind,
    MoveResult,
    MovedState,
    get_valid_moves,
    calc_move,
    apply_move,
    get_valid_moved_states,
)

__all__ = [
    "VialSortError",
    "InvariantViolation",
    "InvalidMoveError",
    "SessionNotCrawled",
    "AnalysisCancelled",
    "StateSpaceTooLarge",
    "Item",
    "ItemGroup",
    "Vial",
    "PuzzleParams",
    "GameState",
    "StateId",
    "get_state_id",
    "win_condition",
    "winning_state",
    "get_winning_state_id",
    "Move",
    "MoveErrorKind",
    "MoveResult",
    "MovedState",
    "get_valid_moves",
    "calc_move",
    "apply_move",
    "get_valid_moved_states",
]
