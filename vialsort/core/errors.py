"""Exceptions raised by the vial sort engine."""

from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .moves import Move, MoveErrorKind


class VialSortError(Exception):
    """Base class for all engine errors."""


class InvariantViolation(VialSortError):
    """
    A caller/graph mismatch or other programming error.

    Raised for out-of-range vial indices, StateIds missing from a graph,
    or SCC lists that do not belong to the graph they are solved against.
    """


class InvalidMoveError(VialSortError):
    """Raised by ``apply_move`` when a move is rejected."""

    def __init__(self, move: Move, kind: MoveErrorKind):
        super().__init__(f"{kind.message} (move {move.src} -> {move.dst})")
        self.move = move
        self.kind = kind


class SessionNotCrawled(VialSortError):
    """Raised when an analysis query is made before ``crawl()``."""


class AnalysisCancelled(VialSortError):
    """Raised when a long running analysis observes its cancel flag."""


class StateSpaceTooLarge(VialSortError):
    """Raised when a crawl discovers more states than allowed."""

    def __init__(self, limit: int):
        super().__init__(f"State space exceeds {limit:,} states")
        self.limit = limit
