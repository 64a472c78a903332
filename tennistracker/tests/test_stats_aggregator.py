"""
Tests for Stats Aggregator — per-point statistic attribution.
"""

import pytest
from tennistracker.engine.context import PointContext
from tennistracker.engine.scoring import ScoringEngine
from tennistracker.engine.stats_aggregator import StatsAggregator
from tennistracker.models.events import PointEvents, RallyOutcome, ReturnOutcome, ServeOutcome
from tennistracker.models.match import MatchState
from tennistracker.models.player import PlayerSide, PlayerStatistics

P1 = PlayerSide.PLAYER1
P2 = PlayerSide.PLAYER2


class TestStatsAggregator:
    """Test counter attribution from point events."""

    def setup_method(self):
        self.match = MatchState(player1_name="Alice", player2_name="Bob")
        ScoringEngine().start_new_set(self.match)
        self.agg = StatsAggregator()

    def _record(self, server=P1, context=PointContext(), **events) -> PlayerSide:
        return self.agg.record_point(self.match, PointEvents(**events), server, context)

    def _stats(self, side) -> PlayerStatistics:
        return self.match.match_stats(side)

    # ── Serve ────────────────────────────────────────────────────────────

    def test_ace_first(self):
        winner = self._record(serves=[ServeOutcome.ACE_FIRST])
        s = self._stats(P1)
        assert winner == P1
        assert s.first_serves_attempted == 1
        assert s.first_serves_in == 1
        assert s.aces_first == 1
        assert s.points_won_on_first_serve == 1
        assert s.points_won == 1
        assert self._stats(P2).points_played == 1

    def test_service_winner_second(self):
        winner = self._record(serves=[ServeOutcome.FIRST_FAULT, ServeOutcome.SERVICE_WINNER_SECOND])
        s = self._stats(P1)
        assert winner == P1
        assert s.first_serves_attempted == 1
        assert s.first_serves_in == 0
        assert s.second_serves_in == 1
        assert s.service_winners_second == 1
        assert s.points_won_on_second_serve == 1

    def test_double_fault(self):
        winner = self._record(serves=[ServeOutcome.FIRST_FAULT, ServeOutcome.DOUBLE_FAULT])
        s = self._stats(P1)
        assert winner == P2
        assert s.first_serves_attempted == 1
        assert s.second_serves_attempted == 1
        assert s.second_serves_in == 0
        assert s.double_faults == 1
        # A double fault is not a return point won
        assert self._stats(P2).return_points_won_vs_second == 0
        assert self._stats(P2).points_won == 1

    def test_direct_double_fault_has_no_first_serve(self):
        self._record(serves=[ServeOutcome.DOUBLE_FAULT])
        s = self._stats(P1)
        assert s.first_serves_attempted == 0
        assert s.second_serves_attempted == 1
        assert s.double_faults == 1

    # ── Return ───────────────────────────────────────────────────────────

    def test_return_winner_vs_second(self):
        winner = self._record(
            serves=[ServeOutcome.FIRST_FAULT, ServeOutcome.SECOND_IN],
            return_outcome=ReturnOutcome.RETURN_WINNER,
        )
        assert winner == P2
        assert self._stats(P2).return_winners == 1
        assert self._stats(P2).return_points_won_vs_second == 1

    def test_return_forced_error(self):
        winner = self._record(
            serves=[ServeOutcome.FIRST_IN], return_outcome=ReturnOutcome.RETURN_FORCED_ERROR,
        )
        assert winner == P1
        assert self._stats(P2).return_forced_errors == 1
        assert self._stats(P1).forced_errors_drawn == 1
        assert self._stats(P1).points_won_on_first_serve == 1

    def test_return_unforced_error(self):
        self._record(serves=[ServeOutcome.FIRST_IN], return_outcome=ReturnOutcome.RETURN_UNFORCED_ERROR)
        assert self._stats(P2).return_unforced_errors == 1
        assert self._stats(P1).forced_errors_drawn == 0

    # ── Rally ────────────────────────────────────────────────────────────

    @pytest.mark.parametrize("outcome,winner,owner,counter", [
        (RallyOutcome.SERVER_WINNER, P1, P1, "rally_winners"),
        (RallyOutcome.RETURNER_WINNER, P2, P2, "rally_winners"),
        (RallyOutcome.SERVER_UNFORCED_ERROR, P2, P1, "unforced_errors"),
        (RallyOutcome.RETURNER_UNFORCED_ERROR, P1, P2, "unforced_errors"),
        (RallyOutcome.SERVER_FORCED_ERROR_DRAWN, P2, P2, "forced_errors_drawn"),
        (RallyOutcome.RETURNER_FORCED_ERROR_DRAWN, P1, P1, "forced_errors_drawn"),
    ])
    def test_rally_attribution(self, outcome, winner, owner, counter):
        got = self._record(
            serves=[ServeOutcome.FIRST_IN],
            return_outcome=ReturnOutcome.RETURN_IN,
            rally_outcome=outcome,
        )
        assert got == winner
        assert getattr(self._stats(owner), counter) == 1
        assert getattr(self._stats(owner.opponent), counter) == 0

    def test_returner_wins_rally_vs_first(self):
        self._record(
            server=P2,
            serves=[ServeOutcome.FIRST_IN],
            return_outcome=ReturnOutcome.RETURN_IN,
            rally_outcome=RallyOutcome.SERVER_UNFORCED_ERROR,
        )
        assert self._stats(P1).return_points_won_vs_first == 1
        assert self._stats(P2).points_won_on_first_serve == 0

    # ── Net & pressure ───────────────────────────────────────────────────

    def test_net_point_won(self):
        self._record(
            serves=[ServeOutcome.FIRST_IN],
            return_outcome=ReturnOutcome.RETURN_IN,
            rally_outcome=RallyOutcome.SERVER_WINNER,
            net_player=P1,
        )
        assert self._stats(P1).net_points_total == 1
        assert self._stats(P1).net_points_won == 1

    def test_net_point_lost(self):
        self._record(
            serves=[ServeOutcome.FIRST_IN],
            return_outcome=ReturnOutcome.RETURN_IN,
            rally_outcome=RallyOutcome.RETURNER_WINNER,
            net_player=P1,
        )
        assert self._stats(P1).net_points_total == 1
        assert self._stats(P1).net_points_won == 0
        assert self._stats(P2).net_points_total == 0

    def test_break_point_converted(self):
        self._record(serves=[ServeOutcome.DOUBLE_FAULT], context=PointContext(is_break_point=True))
        assert self._stats(P2).break_points_total == 1
        assert self._stats(P2).break_points_won == 1
        assert self._stats(P1).break_points_total == 0

    def test_break_point_saved(self):
        self._record(serves=[ServeOutcome.ACE_FIRST], context=PointContext(is_break_point=True))
        assert self._stats(P2).break_points_total == 1
        assert self._stats(P2).break_points_won == 0

    # ── Scopes ───────────────────────────────────────────────────────────

    def test_match_and_set_scopes_agree(self):
        self._record(serves=[ServeOutcome.ACE_FIRST])
        self._record(serves=[ServeOutcome.FIRST_IN], return_outcome=ReturnOutcome.RETURN_WINNER)
        for side in PlayerSide:
            assert self.match.match_stats(side) == self.match.set_stats(side, 0)

    def test_undecided_point_rejected(self):
        with pytest.raises(ValueError):
            self._record(serves=[ServeOutcome.FIRST_IN])

    def test_empty_stats_percentages(self):
        s = PlayerStatistics()
        assert s.first_serve_pct is None
        assert s.points_won_pct is None

    def test_total_sums_counters(self):
        a = PlayerStatistics(aces_first=2, points_won=5)
        b = PlayerStatistics(aces_first=1, points_played=3)
        combined = PlayerStatistics.total([a, b])
        assert combined.aces_first == 3
        assert combined.points_won == 5
        assert combined.points_played == 3
        assert combined.aces == 3
