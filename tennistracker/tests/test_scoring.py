"""
Tests for Tennis Scoring Engine — game, set, tiebreak and match rules.
"""

import pytest
from tennistracker.engine.scoring import ScoringEngine
from tennistracker.models.match import (
    FormatChoice, MatchPhase, MatchState, MatchStatus, format_for_choice,
)
from tennistracker.models.player import PlayerSide

P1 = PlayerSide.PLAYER1
P2 = PlayerSide.PLAYER2


class TestScoringEngine:
    """Test the tennis scoring state machine."""

    def _make_match(self, choice=FormatChoice.BEST_OF_3) -> MatchState:
        self.engine = ScoringEngine()
        match = MatchState(
            match_format=format_for_choice(choice),
            player1_name="Alice",
            player2_name="Bob",
            status=MatchStatus.IN_PROGRESS,
        )
        self.engine.start_new_set(match)
        return match

    def _points(self, match, side, n):
        for _ in range(n):
            self.engine.award_point(match, side)

    def _game(self, match, side, n=1):
        self._points(match, side, 4 * n)

    def _games_to(self, match, p1_games, p2_games):
        """Alternate games until the set reads p1_games-p2_games."""
        while match.current_set.games_player1 < p1_games or match.current_set.games_player2 < p2_games:
            if match.current_set.games_player1 < p1_games:
                self._game(match, P1)
            if match.current_set.games_player2 < p2_games:
                self._game(match, P2)

    # ── Point Scoring ────────────────────────────────────────────────────

    def test_point_progression(self):
        match = self._make_match()
        labels = []
        for _ in range(3):
            self.engine.award_point(match, P1)
            labels.append(match.point_labels()[0])
        assert labels == ["15", "30", "40"]
        assert match.point_labels()[1] == "0"

    def test_game_win(self):
        match = self._make_match()
        self._game(match, P1)
        assert match.current_set.games_player1 == 1
        assert match.points_player1 == 0
        assert match.points_player2 == 0

    def test_game_win_flips_server(self):
        match = self._make_match()
        assert match.server == P1
        self._game(match, P1)
        assert match.server == P2

    def test_deuce(self):
        match = self._make_match()
        for _ in range(3):
            self.engine.award_point(match, P1)
            self.engine.award_point(match, P2)
        assert match.point_labels() == ("40", "40")

    def test_advantage(self):
        match = self._make_match()
        for _ in range(3):
            self.engine.award_point(match, P1)
            self.engine.award_point(match, P2)
        self.engine.award_point(match, P1)
        assert match.point_labels() == ("Ad", "")

    def test_advantage_back_to_deuce(self):
        match = self._make_match()
        for _ in range(3):
            self.engine.award_point(match, P1)
            self.engine.award_point(match, P2)
        self.engine.award_point(match, P1)
        self.engine.award_point(match, P2)
        assert match.point_labels() == ("40", "40")
        assert match.current_set.games_player1 == 0

    def test_advantage_win(self):
        match = self._make_match()
        for _ in range(3):
            self.engine.award_point(match, P1)
            self.engine.award_point(match, P2)
        self.engine.award_point(match, P2)
        transition = self.engine.award_point(match, P2)
        assert transition.game_won
        assert match.current_set.games_player2 == 1

    def test_long_deuce_game(self):
        match = self._make_match()
        for _ in range(10):
            self.engine.award_point(match, P1)
            self.engine.award_point(match, P2)
        assert match.current_set.games_player1 == 0
        assert match.current_set.games_player2 == 0
        self._points(match, P1, 2)
        assert match.current_set.games_player1 == 1

    # ── Sets ─────────────────────────────────────────────────────────────

    def test_set_win(self):
        match = self._make_match()
        self._games_to(match, 5, 4)
        self._game(match, P1)
        assert match.sets[0].is_complete
        assert match.sets[0].winner == P1
        assert (match.sets[0].games_player1, match.sets[0].games_player2) == (6, 4)
        assert match.sets_player1 == 1
        assert len(match.sets) == 2
        assert match.current_set_index == 1

    def test_no_set_at_six_five(self):
        match = self._make_match()
        self._games_to(match, 5, 5)
        self._game(match, P1)
        assert not match.sets[0].is_complete
        self._game(match, P1)
        assert match.sets[0].is_complete
        assert (match.sets[0].games_player1, match.sets[0].games_player2) == (7, 5)

    def test_tiebreak_trigger(self):
        match = self._make_match()
        self._games_to(match, 6, 6)
        assert match.phase == MatchPhase.SET_TIEBREAK
        assert match.in_tiebreak
        assert match.sets[0].tiebreak_played
        assert match.tiebreak_start_server == match.server

    def test_tiebreak_needs_two_point_lead(self):
        match = self._make_match()
        self._games_to(match, 6, 6)
        for _ in range(6):
            self.engine.award_point(match, P1)
            self.engine.award_point(match, P2)
        self.engine.award_point(match, P1)
        assert match.phase == MatchPhase.SET_TIEBREAK
        transition = self.engine.award_point(match, P1)
        assert transition.set_completed
        record = match.sets[0]
        assert (record.games_player1, record.games_player2) == (7, 6)
        assert (record.tiebreak_points_player1, record.tiebreak_points_player2) == (8, 6)

    def test_server_after_tiebreak(self):
        match = self._make_match()
        self._games_to(match, 6, 6)
        start = match.tiebreak_start_server
        self._points(match, P2, 7)
        assert match.server == start.opponent
        assert match.phase == MatchPhase.REGULAR_GAME
        assert match.tiebreak_points_played == 0

    def test_short_sets_tiebreak_at_four_all(self):
        match = self._make_match(FormatChoice.SHORT_SETS_4)
        self._games_to(match, 4, 4)
        assert match.phase == MatchPhase.SET_TIEBREAK

    def test_short_set_win_by_two(self):
        match = self._make_match(FormatChoice.SHORT_SETS_4)
        self._games_to(match, 3, 3)
        self._game(match, P1)
        assert not match.sets[0].is_complete
        self._game(match, P1)
        assert match.sets[0].is_complete
        assert (match.sets[0].games_player1, match.sets[0].games_player2) == (5, 3)

    # ── Match ────────────────────────────────────────────────────────────

    def test_match_completion_best_of_3(self):
        match = self._make_match()
        self._game(match, P1, 12)
        assert match.status == MatchStatus.COMPLETED
        assert match.phase == MatchPhase.MATCH_COMPLETE
        assert match.winner == P1
        assert match.sets_player1 == 2
        assert match.completed_at is not None
        assert match.completed_at.tzinfo is not None

    def test_third_set_played_when_regular(self):
        match = self._make_match()
        self._game(match, P1, 6)
        self._game(match, P2, 6)
        assert match.phase == MatchPhase.REGULAR_GAME
        assert len(match.sets) == 3
        assert match.current_set_index == 2

    def test_match_tiebreak_at_one_set_all(self):
        match = self._make_match(FormatChoice.BEST_OF_3_MATCH_TIEBREAK)
        self._game(match, P1, 6)
        transition = None
        for _ in range(24):
            transition = self.engine.award_point(match, P2)
        assert transition.match_tiebreak_started
        assert match.phase == MatchPhase.MATCH_TIEBREAK
        assert match.tiebreak_start_server is None
        assert len(match.sets) == 2

    def test_match_tiebreak_win(self):
        match = self._make_match(FormatChoice.BEST_OF_3_MATCH_TIEBREAK)
        self._game(match, P1, 6)
        self._game(match, P2, 6)
        for _ in range(9):
            self.engine.award_point(match, P1)
            self.engine.award_point(match, P2)
        self.engine.award_point(match, P1)
        assert match.status == MatchStatus.IN_PROGRESS
        transition = self.engine.award_point(match, P1)
        assert transition.match_completed
        assert match.winner == P1
        decider = match.sets[-1]
        assert decider.is_match_tiebreak
        assert (decider.tiebreak_points_player1, decider.tiebreak_points_player2) == (11, 9)
        assert match.sets_player1 == 2
        assert match.completed_sets == 2
        assert len(match.set_stats_player1) == 3

    def test_score_display(self):
        match = self._make_match()
        self._game(match, P1, 6)
        self.engine.award_point(match, P2)
        assert match.score_display == "6-0 | 0-0 | 0:15"


class TestScoringEdgeCases:
    """Edge cases and error handling."""

    def test_cannot_score_after_match_over(self):
        engine = ScoringEngine()
        match = MatchState(status=MatchStatus.IN_PROGRESS)
        engine.start_new_set(match)
        for _ in range(48):
            engine.award_point(match, P2)
        assert match.status == MatchStatus.COMPLETED
        with pytest.raises(ValueError):
            engine.award_point(match, P2)

    def test_start_new_set_adds_stats_rows(self):
        engine = ScoringEngine()
        match = MatchState()
        engine.start_new_set(match)
        engine.start_new_set(match)
        assert len(match.sets) == 2
        assert len(match.set_stats_player1) == 2
        assert len(match.set_stats_player2) == 2
        assert match.current_set_index == 1
