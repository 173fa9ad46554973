"""Analysis module: reachability, components, probabilities and difficulty."""

from .graph import Edge, GraphNode, ReachabilityGraph, build_reachability_graph
from .scc import decompose_sccs
from .probability import SCCKind, classify_sccs, solve_success_probabilities
from .difficulty import (
    DifficultySample,
    DifficultyEstimate,
    DifficultyEstimator,
    estimate_difficulty,
)
from .session import AnalysisSession, AnalysisStats

__all__ = [
    "Edge",
    "GraphNode",
    "ReachabilityGraph",
    "build_reachability_graph",
    "decompose_sccs",
    "SCCKind",
    "classify_sccs",
    "solve_success_probabilities",
    "DifficultySample",
    "DifficultyEstimate",
    "DifficultyEstimator",
    "estimate_difficulty",
    "AnalysisSession",
    "AnalysisStats",
]
