"""Play session: a level being played, with history and analysis hooks."""

from __future__ import annotations
from typing import List, Optional

from .analysis.session import AnalysisSession
from .core.moves import Move, MoveResult, calc_move
from .core.state import GameState, win_condition
from .generator.levels import Level


class Game:
    """
    A level in play.

    Keeps the move history for undo, and an optional AnalysisSession for the
    level's original configuration. Restart and undo keep the analysis,
    since every state they lead to was part of the crawl; loading another
    level drops it.

    With ``auto`` on, forced moves are played after every player move. The
    flag survives restarts and level loads.
    """

    def __init__(self, level: Level, auto: bool = False):
        self.auto = auto
        self.load_level(level)

    def load_level(self, level: Level) -> None:
        self.level = level
        self.original_state = level.to_state()
        self.state = self.original_state
        self.history: List[GameState] = []
        self.won = win_condition(self.state)
        self.analysis: Optional[AnalysisSession] = None

    def restart(self) -> None:
        self.state = self.original_state
        self.history = []
        self.won = win_condition(self.state)

    def toggle_auto(self) -> bool:
        """
        Switch auto mode and return the new setting.

        Switching it on plays the forced moves from the current state at once.
        """
        self.auto = not self.auto
        if self.auto:
            self.auto_play()
        return self.auto

    def do_move(self, move: Move) -> MoveResult:
        """Play a move; rejected moves leave the game unchanged."""
        result = self._play(move)
        if result.ok and self.auto:
            self.auto_play()
        return result

    def _play(self, move: Move) -> MoveResult:
        result = calc_move(self.state, move)
        if result.ok:
            self.history.append(self.state)
            self.state = result.state
            self.won = win_condition(self.state)
        return result

    def undo(self) -> bool:
        """Revert the last move. Returns False if there is nothing to undo."""
        if not self.history:
            return False
        self.state = self.history.pop()
        self.won = win_condition(self.state)
        return True

    def crawl(self, **kwargs) -> AnalysisSession:
        """Analyse the level's original configuration."""
        session = AnalysisSession(self.original_state)
        session.crawl(**kwargs)
        self.analysis = session
        return session

    def _require_analysis(self) -> AnalysisSession:
        if self.analysis is None:
            return self.crawl()
        return self.analysis

    def auto_play(self) -> List[Move]:
        """
        Play forced moves.

        While exactly one distinct resulting state keeps the puzzle winnable,
        play the move leading to it.

        Returns:
            The moves played.
        """
        session = self._require_analysis()
        played = []
        while not self.won:
            moves = session.unique_winning_moves(self.state)
            if len(moves) != 1:
                break
            self._play(moves[0])
            played.append(moves[0])
        return played

    def solve(self) -> Optional[List[Move]]:
        """Play a shortest winning line from the current state, if any."""
        session = self._require_analysis()
        path = session.solution_path(self.state)
        if path is None:
            return None
        for move in path:
            self._play(move)
        return path
