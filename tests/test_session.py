"""Unit tests for AnalysisSession queries."""

import pytest
from vialsort.analysis import AnalysisSession
from vialsort.core.errors import InvariantViolation, SessionNotCrawled, StateSpaceTooLarge
from vialsort.core.moves import Move, apply_move
from vialsort.core.state import GameState, win_condition
from vialsort.generator import LevelGenerator


def make_session(raw_vials, vial_height, **kwargs):
    session = AnalysisSession(GameState.from_raw_vials(raw_vials, vial_height=vial_height), **kwargs)
    session.crawl()
    return session


class TestCrawl:
    """Tests for crawling and crawl statistics."""

    def test_queries_need_a_crawl(self):
        """Test that querying before crawling fails."""
        session = AnalysisSession(GameState.from_raw_vials([[0], [0], []], vial_height=2))
        assert not session.crawled
        with pytest.raises(SessionNotCrawled):
            session.is_winnable(session.original_state)
        with pytest.raises(SessionNotCrawled):
            session.success_probabilities()

    def test_stats(self):
        """Test crawl statistics for the two-color puzzle."""
        session = make_session([[0, 1], [1, 0], []], 2)
        stats = session.stats
        assert session.crawled
        assert stats.states == 6
        assert stats.edges == 8
        assert stats.winnable_states == 6
        assert stats.start_winnable
        assert stats.start_distance_from_win == 3
        assert stats.time_seconds >= 0
        assert stats.to_dict()["states"] == 6

    def test_track_memory(self):
        """Test peak memory is recorded when requested."""
        session = make_session([[0, 1], [1, 0], []], 2, track_memory=True)
        assert session.stats.memory_bytes > 0

    def test_failed_crawl_leaves_session_empty(self):
        """Test a crawl that hits the state limit leaves no graph behind."""
        session = AnalysisSession(GameState.from_raw_vials([[0, 1], [1, 0], []], vial_height=2))
        with pytest.raises(StateSpaceTooLarge):
            session.crawl(max_states=2)
        assert not session.crawled

    def test_recrawl_resets_caches(self):
        """Test crawling again replaces the earlier results."""
        session = make_session([[0], [0], []], 2)
        first = session.success_probabilities()
        session.crawl()
        assert session.success_probabilities() is not first


class TestQueries:
    """Tests for per-state queries."""

    def test_winning_moves(self):
        """Test both moves of the merge puzzle win but lead to one state."""
        session = make_session([[0], [0], []], 2)
        start = session.original_state
        assert session.winning_moves(start) == [Move(0, 1), Move(1, 0)]
        assert session.unique_winning_moves(start) == [Move(0, 1)]

    def test_distance_from_win(self):
        """Test win distance along a winning line."""
        session = make_session([[0, 1], [1, 0], []], 2)
        state = session.original_state
        assert session.distance_from_win(state) == 3
        state = apply_move(state, Move(0, 2))
        assert session.distance_from_win(state) == 2
        assert session.is_winnable(state)

    def test_solution_path(self):
        """Test the solution path is shortest and wins."""
        session = make_session([[0, 1], [1, 0], []], 2)
        state = session.original_state
        path = session.solution_path(state)
        assert len(path) == 3
        for move in path:
            state = apply_move(state, move)
        assert win_condition(state)

    def test_solution_path_generated(self):
        """Test solution paths on generated levels match the win distance."""
        for seed in range(4):
            level = LevelGenerator(vial_height=3, empty_vials=1, seed=seed).generate(3)
            session = AnalysisSession(level.to_state())
            session.crawl()
            state = session.original_state
            path = session.solution_path(state)
            if not session.is_winnable(state):
                assert path is None
                continue
            assert len(path) == session.distance_from_win(state)
            for move in path:
                state = apply_move(state, move)
            assert win_condition(state)

    def test_unwinnable_start(self):
        """Test queries on a stuck puzzle."""
        session = make_session([[0, 1], [1, 0]], 2)
        start = session.original_state
        assert not session.is_winnable(start)
        assert session.distance_from_win(start) is None
        assert session.solution_path(start) is None
        assert session.winning_moves(start) == []
        assert session.success_probability(start) == 0.0

    def test_unreached_state(self):
        """Test querying a state from another configuration fails."""
        session = make_session([[0], [0], []], 2)
        other = GameState.from_raw_vials([[0, 1], [1, 0], []], vial_height=2)
        with pytest.raises(InvariantViolation):
            session.is_winnable(other)

    def test_success_probability(self):
        """Test probabilities are cached and cover all states."""
        session = make_session([[0, 1], [1, 0], []], 2)
        probabilities = session.success_probabilities()
        assert session.success_probabilities() is probabilities
        assert set(probabilities) == set(session.graph)
        assert session.success_probability(session.original_state) == pytest.approx(1.0)

    def test_vial_order_does_not_matter(self):
        """Test a reordered state is recognized as the same crawled state."""
        session = make_session([[0, 1], [1, 0], []], 2)
        reordered = session.original_state.permuted([2, 1, 0])
        assert session.distance_from_win(reordered) == 3
        path = session.solution_path(reordered)
        for move in path:
            reordered = apply_move(reordered, move)
        assert win_condition(reordered)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
