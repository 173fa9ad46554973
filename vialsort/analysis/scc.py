"""Strongly connected components of a reachability graph."""

from __future__ import annotations
from typing import Dict, List, Set, Tuple

from ..core.errors import InvariantViolation
from ..core.state import StateId
from .graph import ReachabilityGraph


def decompose_sccs(start_id: StateId, graph: ReachabilityGraph) -> List[List[StateId]]:
    """
    Split the graph into strongly connected components.

    Two passes with explicit stacks:
    1. Depth-first search over child edges from the start, recording the
       order in which states finish.
    2. In reverse finish order, collect every unclaimed state reachable
       over parent edges; each collection is one component.

    Components come out in topological order of the child edges: an edge
    leaving a component always points to a later one. Solvers that need
    downstream results first iterate the list from the end.

    Raises:
        InvariantViolation: If ``start_id`` is not in the graph.
    """
    finish_order = _finish_order(start_id, graph)

    claimed: Set[StateId] = set()
    components: List[List[StateId]] = []
    for root in reversed(finish_order):
        if root in claimed:
            continue
        claimed.add(root)

        component: List[StateId] = []
        stack = [root]
        while stack:
            state_id = stack.pop()
            component.append(state_id)
            for edge in graph[state_id].parents:
                if edge.state_id not in claimed:
                    claimed.add(edge.state_id)
                    stack.append(edge.state_id)

        components.append(component)

    return components


def _finish_order(start_id: StateId, graph: ReachabilityGraph) -> List[StateId]:
    """Iterative DFS over child edges, returning states in finish order."""
    if start_id not in graph:
        raise InvariantViolation(f"Start state {start_id!r} is not in the graph")

    visited: Set[StateId] = {start_id}
    finished: List[StateId] = []
    # Frames are (state_id, index of the next child to visit)
    stack: List[Tuple[StateId, int]] = [(start_id, 0)]

    while stack:
        state_id, next_child = stack[-1]
        children = graph[state_id].children
        if next_child < len(children):
            stack[-1] = (state_id, next_child + 1)
            child_id = children[next_child].state_id
            if child_id not in visited:
                visited.add(child_id)
                stack.append((child_id, 0))
        else:
            stack.pop()
            finished.append(state_id)

    return finished


def component_index(sccs: List[List[StateId]]) -> Dict[StateId, int]:
    """Map each StateId to the index of its component."""
    return {state_id: i for i, component in enumerate(sccs) for state_id in component}
