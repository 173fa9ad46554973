"""Unit tests for the reachability graph builder."""

import threading
from collections import deque

import pytest
from vialsort.analysis.graph import build_reachability_graph
from vialsort.core.errors import AnalysisCancelled, InvariantViolation, StateSpaceTooLarge
from vialsort.core.moves import Move
from vialsort.core.state import GameState
from vialsort.generator import LevelGenerator


def make_state(raw_vials, vial_height):
    return GameState.from_raw_vials(raw_vials, vial_height=vial_height)


class TestSmallGraphs:
    """Tests on hand-checked state spaces."""

    def test_merge_two_singles(self):
        """Test the one-move puzzle: two moves reach the same winning state."""
        state = make_state([[0], [0], []], 2)
        graph = build_reachability_graph(state)

        assert len(graph) == 2
        start = graph.start
        assert start.distance_from_start == 0
        assert start.distance_from_win == 1
        assert [edge.move for edge in start.children] == [Move(0, 1), Move(1, 0)]

        win = graph[graph.winning_id]
        assert win.distance_from_start == 1
        assert win.distance_from_win == 0
        assert win.children == []
        assert len(win.parents) == 2
        assert all(edge.state_id == graph.start_id for edge in win.parents)

    def test_already_won(self):
        """Test a sorted start is both start and winning state."""
        state = make_state([[0, 0], [1, 1]], 2)
        graph = build_reachability_graph(state)
        assert len(graph) == 1
        assert graph.start_id == graph.winning_id
        assert graph.start.distance_from_win == 0

    def test_stuck_puzzle_is_unwinnable(self):
        """Test a puzzle with no moves has no win distance."""
        state = make_state([[0, 1], [1, 0]], 2)
        graph = build_reachability_graph(state)
        assert len(graph) == 1
        assert graph.start.distance_from_win is None
        assert not graph.start_winnable
        assert graph.winning_id not in graph
        assert graph.winnable_ids() == []

    def test_two_color_puzzle(self):
        """Test a six state puzzle with two disjoint winning lines."""
        state = make_state([[0, 1], [1, 0], []], 2)
        graph = build_reachability_graph(state)

        assert len(graph) == 6
        assert graph.edge_count == 8
        assert graph.start.distance_from_win == 3
        distances = sorted(node.distance_from_start for node in graph.nodes())
        assert distances == [0, 1, 1, 2, 2, 3]
        assert graph[graph.winning_id].distance_from_start == 3
        assert len(graph.winnable_ids()) == 6

    def test_unknown_state(self):
        """Test lookups of unknown states fail loudly."""
        graph = build_reachability_graph(make_state([[0], [0], []], 2))
        with pytest.raises(InvariantViolation):
            graph["not-a-state"]
        assert graph.get("not-a-state") is None


class TestGraphSoundness:
    """Property tests on a generated level."""

    @pytest.fixture
    def graph(self):
        level = LevelGenerator(vial_height=3, empty_vials=1, seed=11).generate(3)
        return build_reachability_graph(level.to_state())

    def test_states_are_unique(self, graph):
        """Test every discovered state appears exactly once."""
        ids = list(graph)
        assert len(ids) == len(set(ids))
        for state_id in ids:
            assert graph[state_id].state.state_id == state_id

    def test_distance_from_start(self, graph):
        """Test BFS distances are one more than the closest parent."""
        for node in graph.nodes():
            if node.state_id == graph.start_id:
                assert node.distance_from_start == 0
                continue
            closest = min(graph[edge.state_id].distance_from_start for edge in node.parents)
            assert node.distance_from_start == closest + 1

    def test_edges_are_mirrored(self, graph):
        """Test every child edge has a matching parent edge."""
        for node in graph.nodes():
            for edge in node.children:
                child = graph[edge.state_id]
                assert any(
                    p.state_id == node.state_id and p.move == edge.move for p in child.parents
                )

    def test_distance_from_win(self, graph):
        """Test win distances are one more than the closest winnable child."""
        for node in graph.nodes():
            if node.state_id == graph.winning_id:
                assert node.distance_from_win == 0
                continue
            winnable = [graph[e.state_id].distance_from_win for e in node.children
                        if graph[e.state_id].winnable]
            if winnable:
                assert node.distance_from_win == min(winnable) + 1
            else:
                assert node.distance_from_win is None

    def test_all_reachable_states_found(self, graph):
        """Test the graph matches an independent forward search."""
        seen = {graph.start_id}
        queue = deque([graph.start_id])
        while queue:
            for edge in graph[queue.popleft()].children:
                if edge.state_id not in seen:
                    seen.add(edge.state_id)
                    queue.append(edge.state_id)
        assert seen == set(graph)


class TestCrawlLimits:
    """Tests for cancellation and size limits."""

    def test_cancel(self):
        """Test a set cancel flag aborts the crawl."""
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(AnalysisCancelled):
            build_reachability_graph(make_state([[0], [0], []], 2), cancel=cancel)

    def test_max_states(self):
        """Test the crawl stops when it finds too many states."""
        with pytest.raises(StateSpaceTooLarge):
            build_reachability_graph(make_state([[0], [0], []], 2), max_states=1)

    def test_max_states_not_reached(self):
        """Test a generous limit does not interfere."""
        graph = build_reachability_graph(make_state([[0], [0], []], 2), max_states=2)
        assert len(graph) == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
