"""Exact success probabilities under uniformly random play."""

from __future__ import annotations
from enum import Enum
from typing import Dict, List, Optional

import numpy as np

from ..core.errors import AnalysisCancelled, InvariantViolation
from ..core.state import StateId
from .graph import CancelFlag, ReachabilityGraph
from .scc import component_index


class SCCKind(Enum):
    """How a component is handled by the solver."""
    WINNING = "winning"
    SINK = "sink"
    INTERNAL = "internal"


def classify_sccs(
    graph: ReachabilityGraph,
    sccs: List[List[StateId]],
    winning_id: StateId,
) -> List[SCCKind]:
    """
    Tag each component as winning, sink or internal.

    A sink component has no child edge leaving it. The winning state has
    no moves, so its component is a singleton sink; it is tagged WINNING
    instead of SINK.
    """
    return _classify(graph, sccs, _checked_index(graph, sccs), winning_id)


def _classify(
    graph: ReachabilityGraph,
    sccs: List[List[StateId]],
    index: Dict[StateId, int],
    winning_id: StateId,
) -> List[SCCKind]:
    kinds = []
    for i, component in enumerate(sccs):
        if winning_id in component:
            kinds.append(SCCKind.WINNING)
            continue
        leaves = any(
            index[edge.state_id] != i
            for state_id in component
            for edge in graph[state_id].children
        )
        kinds.append(SCCKind.INTERNAL if leaves else SCCKind.SINK)
    return kinds


def solve_success_probabilities(
    graph: ReachabilityGraph,
    sccs: List[List[StateId]],
    winning_id: StateId,
    cancel: Optional[CancelFlag] = None,
) -> Dict[StateId, float]:
    """
    Compute the probability of eventually winning from every state.

    At each state the next move is picked uniformly among its valid moves,
    so every child edge carries ``1 / degree``. Components are solved from
    the last to the first, which guarantees every component an edge leaves
    to is already solved. For an internal component with ``m`` states the
    absorption probabilities solve ``(I - Q) p = b``, where ``Q`` holds the
    transition mass between the component's own states and ``b`` the mass
    flowing to solved states weighted by their probability.

    Args:
        graph: Graph returned by ``build_reachability_graph``.
        sccs: Components from ``decompose_sccs`` on the same graph.
        winning_id: StateId of the canonical winning state.
        cancel: Optional flag checked once per component.

    Returns:
        Dict of StateId -> probability in [0, 1].

    Raises:
        AnalysisCancelled: If ``cancel`` is set while solving.
    """
    index = _checked_index(graph, sccs)
    kinds = _classify(graph, sccs, index, winning_id)
    probabilities: Dict[StateId, float] = {}

    for i in range(len(sccs) - 1, -1, -1):
        if cancel is not None and cancel.is_set():
            raise AnalysisCancelled("Probability solve cancelled")
        component = sccs[i]
        kind = kinds[i]

        if kind is SCCKind.WINNING:
            for state_id in component:
                probabilities[state_id] = 1.0
            continue

        if kind is SCCKind.SINK:
            for state_id in component:
                probabilities[state_id] = 0.0
            continue

        m = len(component)
        local = {state_id: k for k, state_id in enumerate(component)}
        q = np.zeros((m, m))
        b = np.zeros(m)

        for row, state_id in enumerate(component):
            children = graph[state_id].children
            if not children:
                continue
            p_edge = 1.0 / len(children)
            for edge in children:
                if index[edge.state_id] == i:
                    q[row, local[edge.state_id]] += p_edge
                else:
                    try:
                        b[row] += p_edge * probabilities[edge.state_id]
                    except KeyError:
                        raise InvariantViolation(
                            f"Component {i} depends on unsolved state {edge.state_id!r}; "
                            "components are not in topological order"
                        ) from None

        p = np.linalg.solve(np.eye(m) - q, b)
        for k, state_id in enumerate(component):
            probabilities[state_id] = float(np.clip(p[k], 0.0, 1.0))

    return probabilities


def _checked_index(graph: ReachabilityGraph, sccs: List[List[StateId]]) -> Dict[StateId, int]:
    index = component_index(sccs)
    if len(index) != len(graph):
        raise InvariantViolation(
            f"Components cover {len(index)} states but the graph has {len(graph)}"
        )
    for state_id in index:
        if state_id not in graph:
            raise InvariantViolation(f"State {state_id!r} is not in the graph")
    return index
