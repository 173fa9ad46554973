"""Analysis session: one crawl of a start configuration and the queries on it."""

from __future__ import annotations
import time
import tracemalloc
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.errors import InvariantViolation, SessionNotCrawled
from ..core.moves import Move, get_valid_moved_states
from ..core.state import GameState, StateId
from .graph import CancelFlag, ReachabilityGraph, build_reachability_graph
from .probability import solve_success_probabilities
from .scc import decompose_sccs


@dataclass
class AnalysisStats:
    """Statistics from a crawl."""
    time_seconds: float = 0.0
    memory_bytes: int = 0
    states: int = 0
    edges: int = 0
    winnable_states: int = 0
    start_winnable: bool = False
    start_distance_from_win: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "time_seconds": self.time_seconds,
            "memory_bytes": self.memory_bytes,
            "states": self.states,
            "edges": self.edges,
            "winnable_states": self.winnable_states,
            "start_winnable": self.start_winnable,
            "start_distance_from_win": self.start_distance_from_win,
            **self.extra
        }


class AnalysisSession:
    """
    Owns the reachability graph of one start configuration.

    The graph and everything derived from it (components, success
    probabilities) are only valid for the configuration the session was
    created with. Start a new session when the level changes.
    """

    def __init__(self, original_state: GameState, track_memory: bool = False):
        """
        Args:
            original_state: The level's starting configuration.
            track_memory: If True, record peak memory of the crawl with tracemalloc.
        """
        self.original_state = original_state
        self.track_memory = track_memory
        self.stats = AnalysisStats()
        self._graph: Optional[ReachabilityGraph] = None
        self._sccs: Optional[List[List[StateId]]] = None
        self._probabilities: Optional[Dict[StateId, float]] = None

    @property
    def crawled(self) -> bool:
        return self._graph is not None

    @property
    def graph(self) -> ReachabilityGraph:
        if self._graph is None:
            raise SessionNotCrawled("Crawl the puzzle before querying it")
        return self._graph

    def crawl(
        self,
        cancel: Optional[CancelFlag] = None,
        max_states: Optional[int] = None,
    ) -> AnalysisStats:
        """Build the reachability graph, replacing any earlier crawl."""
        self._graph = None
        self._sccs = None
        self._probabilities = None
        self.stats = AnalysisStats()

        if self.track_memory:
            tracemalloc.start()
        start_time = time.perf_counter()
        try:
            graph = build_reachability_graph(self.original_state, cancel, max_states)
        finally:
            self.stats.time_seconds = time.perf_counter() - start_time
            if self.track_memory:
                _, peak = tracemalloc.get_traced_memory()
                tracemalloc.stop()
                self.stats.memory_bytes = peak

        self._graph = graph
        self.stats.states = len(graph)
        self.stats.edges = graph.edge_count
        self.stats.winnable_states = len(graph.winnable_ids())
        self.stats.start_winnable = graph.start_winnable
        self.stats.start_distance_from_win = graph.start.distance_from_win
        return self.stats

    def _node(self, state: GameState):
        node = self.graph.get(state.state_id)
        if node is None:
            raise InvariantViolation(
                "State was not reached from the crawled start configuration"
            )
        return node

    def is_winnable(self, state: GameState) -> bool:
        """True if the winning state can still be reached from ``state``."""
        return self._node(state).winnable

    def distance_from_win(self, state: GameState) -> Optional[int]:
        return self._node(state).distance_from_win

    def winning_moves(self, state: GameState) -> List[Move]:
        """Valid moves that keep the puzzle winnable."""
        graph = self.graph
        return [
            moved.move for moved in get_valid_moved_states(state)
            if graph[moved.state_id].winnable
        ]

    def unique_winning_moves(self, state: GameState) -> List[Move]:
        """Winning moves, keeping one move per distinct resulting state."""
        graph = self.graph
        seen = set()
        moves = []
        for moved in get_valid_moved_states(state):
            if moved.state_id in seen or not graph[moved.state_id].winnable:
                continue
            seen.add(moved.state_id)
            moves.append(moved.move)
        return moves

    def solution_path(self, state: GameState) -> Optional[List[Move]]:
        """
        A shortest move sequence from ``state`` to the winning state.

        Returns:
            The moves in order, or None if ``state`` cannot be won.
        """
        node = self._node(state)
        if not node.winnable:
            return None

        graph = self.graph
        path: List[Move] = []
        while node.distance_from_win > 0:
            # Moves apply to the concrete vial order of the state we hold
            for moved in get_valid_moved_states(state):
                child = graph[moved.state_id]
                if child.distance_from_win == node.distance_from_win - 1:
                    path.append(moved.move)
                    state, node = moved.state, child
                    break
            else:
                raise InvariantViolation(f"No move towards the win from {node.state_id!r}")
        return path

    def sccs(self) -> List[List[StateId]]:
        if self._sccs is None:
            self._sccs = decompose_sccs(self.graph.start_id, self.graph)
        return self._sccs

    def success_probabilities(self, cancel: Optional[CancelFlag] = None) -> Dict[StateId, float]:
        """Probability of winning by random play, for every crawled state."""
        if self._probabilities is None:
            self._probabilities = solve_success_probabilities(
                self.graph, self.sccs(), self.graph.winning_id, cancel
            )
        return self._probabilities

    def success_probability(self, state: GameState, cancel: Optional[CancelFlag] = None) -> float:
        node = self._node(state)
        return self.success_probabilities(cancel)[node.state_id]

    def __repr__(self) -> str:
        return f"AnalysisSession(crawled={self.crawled}, states={self.stats.states})"
