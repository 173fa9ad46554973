"""Forward and backward reachability over the puzzle's state space."""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterator, List, NamedTuple, Optional, Protocol

from ..core.errors import AnalysisCancelled, InvariantViolation, StateSpaceTooLarge
from ..core.moves import Move, get_valid_moved_states
from ..core.state import GameState, StateId, get_winning_state_id


class CancelFlag(Protocol):
    """Anything with ``is_set()``, e.g. ``threading.Event``."""

    def is_set(self) -> bool: ...


class Edge(NamedTuple):
    """A graph edge: the state at the other end and the move that links them."""
    state_id: StateId
    move: Move


@dataclass
class GraphNode:
    """A discovered state and its place in the reachability graph."""
    state_id: StateId
    state: GameState
    distance_from_start: int
    distance_from_win: Optional[int] = None
    parents: List[Edge] = field(default_factory=list)
    children: List[Edge] = field(default_factory=list)

    @property
    def winnable(self) -> bool:
        return self.distance_from_win is not None


class ReachabilityGraph:
    """
    Arena of graph nodes with a StateId lookup table.

    Nodes are appended in BFS discovery order and addressed by an integer
    handle; edges refer to their endpoints by StateId.
    """

    def __init__(self, start_id: StateId, winning_id: StateId):
        self.start_id = start_id
        self.winning_id = winning_id
        self._nodes: List[GraphNode] = []
        self._index: Dict[StateId, int] = {}

    def add(self, node: GraphNode) -> int:
        """Append a node and return its handle."""
        if node.state_id in self._index:
            raise InvariantViolation(f"State {node.state_id!r} is already in the graph")
        handle = len(self._nodes)
        self._nodes.append(node)
        self._index[node.state_id] = handle
        return handle

    def handle(self, state_id: StateId) -> int:
        try:
            return self._index[state_id]
        except KeyError:
            raise InvariantViolation(f"State {state_id!r} is not in the graph") from None

    def node_at(self, handle: int) -> GraphNode:
        return self._nodes[handle]

    def get(self, state_id: StateId) -> Optional[GraphNode]:
        handle = self._index.get(state_id)
        return None if handle is None else self._nodes[handle]

    def __getitem__(self, state_id: StateId) -> GraphNode:
        return self._nodes[self.handle(state_id)]

    def __contains__(self, state_id: object) -> bool:
        return state_id in self._index

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[StateId]:
        return (node.state_id for node in self._nodes)

    def nodes(self) -> Iterator[GraphNode]:
        return iter(self._nodes)

    @property
    def edge_count(self) -> int:
        return sum(len(node.children) for node in self._nodes)

    @property
    def start(self) -> GraphNode:
        return self[self.start_id]

    @property
    def start_winnable(self) -> bool:
        return self.start.winnable

    def winnable_ids(self) -> List[StateId]:
        return [node.state_id for node in self._nodes if node.winnable]

    def __repr__(self) -> str:
        return f"ReachabilityGraph(states={len(self)}, winnable={len(self.winnable_ids())})"


def build_reachability_graph(
    start: GameState,
    cancel: Optional[CancelFlag] = None,
    max_states: Optional[int] = None,
) -> ReachabilityGraph:
    """
    Crawl every state reachable from ``start``.

    The forward pass is a breadth-first search, so the first distance a
    state is discovered at is its shortest distance. Each valid move
    becomes one edge, which means several edges may join the same pair of
    states. The backward pass walks parent edges from the canonical winning
    state; states it never reaches cannot be won.

    Args:
        start: The starting configuration.
        cancel: Optional flag checked once per expanded state.
        max_states: Optional upper bound on discovered states.

    Returns:
        The populated ReachabilityGraph.

    Raises:
        AnalysisCancelled: If ``cancel`` is set during the crawl.
        StateSpaceTooLarge: If more than ``max_states`` states are found.
    """
    graph = ReachabilityGraph(start.state_id, get_winning_state_id(start.params))
    graph.add(GraphNode(start.state_id, start, 0))

    frontier: Deque[GraphNode] = deque([graph.start])
    while frontier:
        if cancel is not None and cancel.is_set():
            raise AnalysisCancelled("Crawl cancelled")
        node = frontier.popleft()

        for moved in get_valid_moved_states(node.state):
            node.children.append(Edge(moved.state_id, moved.move))
            child = graph.get(moved.state_id)
            if child is None:
                if max_states is not None and len(graph) >= max_states:
                    raise StateSpaceTooLarge(max_states)
                child = GraphNode(moved.state_id, moved.state, node.distance_from_start + 1)
                graph.add(child)
                frontier.append(child)
            child.parents.append(Edge(node.state_id, moved.move))

    _mark_win_distances(graph)
    return graph


def _mark_win_distances(graph: ReachabilityGraph) -> None:
    """Backward BFS over parent edges from the winning state."""
    winning = graph.get(graph.winning_id)
    if winning is None:
        return

    winning.distance_from_win = 0
    frontier: Deque[GraphNode] = deque([winning])
    while frontier:
        node = frontier.popleft()
        for edge in node.parents:
            parent = graph[edge.state_id]
            if parent.distance_from_win is None:
                parent.distance_from_win = node.distance_from_win + 1
                frontier.append(parent)
