"""
Stats Aggregator — Point-level statistic attribution.

Each resolved point is attributed once, to the match-scope and current-set
records of both players:
- Serve attempts and serve results (aces, service winners, double faults)
- Points won on serve / on return, by serve type
- Return and rally winners, unforced errors, forced errors drawn
- Net points, when the rally outcome carries a net mark
- Break points, when the point was tagged before it was played
"""

from __future__ import annotations

from typing import Iterator

from tennistracker.engine.context import PointContext
from tennistracker.models.events import (
    PointEvents,
    RallyOutcome,
    ReturnOutcome,
    Role,
    ServeOutcome,
    ServeType,
)
from tennistracker.models.match import MatchState
from tennistracker.models.player import PlayerSide, PlayerStatistics


SERVE_ATTEMPT_COUNTERS: dict[ServeOutcome, tuple[str, ...]] = {
    ServeOutcome.FIRST_IN: ("first_serves_attempted", "first_serves_in"),
    ServeOutcome.FIRST_FAULT: ("first_serves_attempted",),
    ServeOutcome.ACE_FIRST: ("first_serves_attempted", "first_serves_in", "aces_first"),
    ServeOutcome.SERVICE_WINNER_FIRST: (
        "first_serves_attempted", "first_serves_in", "service_winners_first",
    ),
    ServeOutcome.SECOND_IN: ("second_serves_attempted", "second_serves_in"),
    ServeOutcome.DOUBLE_FAULT: ("second_serves_attempted", "double_faults"),
    ServeOutcome.ACE_SECOND: ("second_serves_attempted", "second_serves_in", "aces_second"),
    ServeOutcome.SERVICE_WINNER_SECOND: (
        "second_serves_attempted", "second_serves_in", "service_winners_second",
    ),
}

RETURN_COUNTERS: dict[ReturnOutcome, tuple[tuple[Role, str], ...]] = {
    ReturnOutcome.RETURN_WINNER: ((Role.RETURNER, "return_winners"),),
    ReturnOutcome.RETURN_UNFORCED_ERROR: ((Role.RETURNER, "return_unforced_errors"),),
    ReturnOutcome.RETURN_FORCED_ERROR: (
        (Role.RETURNER, "return_forced_errors"),
        (Role.SERVER, "forced_errors_drawn"),
    ),
    ReturnOutcome.RETURN_IN: (),
}

RALLY_COUNTERS: dict[RallyOutcome, tuple[Role, str]] = {
    RallyOutcome.SERVER_WINNER: (Role.SERVER, "rally_winners"),
    RallyOutcome.RETURNER_WINNER: (Role.RETURNER, "rally_winners"),
    RallyOutcome.SERVER_UNFORCED_ERROR: (Role.SERVER, "unforced_errors"),
    RallyOutcome.RETURNER_UNFORCED_ERROR: (Role.RETURNER, "unforced_errors"),
    RallyOutcome.SERVER_FORCED_ERROR_DRAWN: (Role.RETURNER, "forced_errors_drawn"),
    RallyOutcome.RETURNER_FORCED_ERROR_DRAWN: (Role.SERVER, "forced_errors_drawn"),
}

SERVE_POINTS_WON = {
    ServeType.FIRST: "points_won_on_first_serve",
    ServeType.SECOND: "points_won_on_second_serve",
}
RETURN_POINTS_WON = {
    ServeType.FIRST: "return_points_won_vs_first",
    ServeType.SECOND: "return_points_won_vs_second",
}


class StatsAggregator:
    """Maps one resolved point's events onto PlayerStatistics counters."""

    def record_point(
        self,
        match: MatchState,
        events: PointEvents,
        server: PlayerSide,
        context: PointContext,
    ) -> PlayerSide:
        """Attribute the point and return its winner."""
        role = events.winning_role
        if role is None:
            raise ValueError("Cannot attribute an undecided point")
        returner = server.opponent
        winner = server if role is Role.SERVER else returner
        sides = {Role.SERVER: server, Role.RETURNER: returner}

        # Serve attempts and serve results
        for serve in events.serves:
            self._increment(match, server, *SERVE_ATTEMPT_COUNTERS[serve])

        # Return and rally attribution
        if events.return_outcome is not None:
            for who, counter in RETURN_COUNTERS[events.return_outcome]:
                self._increment(match, sides[who], counter)
        if events.rally_outcome is not None:
            who, counter = RALLY_COUNTERS[events.rally_outcome]
            self._increment(match, sides[who], counter)

        # Serve / return points won
        serve_type = events.serve_type
        if winner == server:
            self._increment(match, server, SERVE_POINTS_WON[serve_type])
        elif events.terminal is not ServeOutcome.DOUBLE_FAULT:
            self._increment(match, returner, RETURN_POINTS_WON[serve_type])

        # Ownership
        self._increment(match, winner, "points_won", "points_played")
        self._increment(match, winner.opponent, "points_played")

        # Net
        if events.net_player is not None:
            self._increment(match, events.net_player, "net_points_total")
            if events.net_player == winner:
                self._increment(match, events.net_player, "net_points_won")

        # Break points
        if context.is_break_point:
            self._increment(match, returner, "break_points_total")
            if winner == returner:
                self._increment(match, returner, "break_points_won")

        return winner

    def _scopes(self, match: MatchState, side: PlayerSide) -> Iterator[PlayerStatistics]:
        yield match.match_stats(side)
        yield match.set_stats(side)

    def _increment(self, match: MatchState, side: PlayerSide, *counters: str) -> None:
        for stats in self._scopes(match, side):
            stats.increment(*counters)
