"""
Tennis Scoring Engine — Score state machine for best-of-three matches.

Implements:
- Regular games won at 4+ points with a 2-point lead (deuce/advantage derived)
- Set tiebreak at the configured games-all score, to 7 win-by-2
- Sets to the configured games target with a 2-game lead
- Deciding match tiebreak to 10 in place of a third set, when configured
- Server alternation between games

The engine holds no match of its own: the controller passes the state it owns.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from tennistracker.models.match import (
    DecidingPolicy,
    MatchPhase,
    MatchState,
    MatchStatus,
    SetRecord,
)
from tennistracker.models.player import PlayerSide, PlayerStatistics

logger = logging.getLogger(__name__)


@dataclass
class ScoreTransition:
    """What changed when a point was awarded."""
    game_won: bool = False
    set_completed: bool = False
    set_tiebreak_started: bool = False
    match_tiebreak_started: bool = False
    match_completed: bool = False
    winner: Optional[PlayerSide] = None


class ScoringEngine:
    """
    Score state machine.

    Usage:
        engine = ScoringEngine()
        engine.start_new_set(match)
        engine.award_point(match, PlayerSide.PLAYER1)
        print(match.score_display)
    """

    # ── Set lifecycle ────────────────────────────────────────────────────────

    def start_new_set(self, match: MatchState) -> None:
        match.sets.append(SetRecord())
        match.set_stats_player1.append(PlayerStatistics())
        match.set_stats_player2.append(PlayerStatistics())
        match.current_set_index = len(match.sets) - 1
        match.phase = MatchPhase.REGULAR_GAME
        self._reset_game(match)
        self._reset_tiebreak(match)
        match.tiebreak_start_server = None

    # ── Points ───────────────────────────────────────────────────────────────

    def award_point(self, match: MatchState, winner: PlayerSide) -> ScoreTransition:
        """Award one point and advance game / set / match as the rules require."""
        transition = ScoreTransition(winner=winner)
        if match.phase == MatchPhase.REGULAR_GAME:
            self._award_regular_point(match, winner, transition)
        elif match.phase == MatchPhase.SET_TIEBREAK:
            self._award_set_tiebreak_point(match, winner, transition)
        elif match.phase == MatchPhase.MATCH_TIEBREAK:
            self._award_match_tiebreak_point(match, winner, transition)
        else:
            raise ValueError(f"Cannot award a point in phase {match.phase.value}")
        self._check_invariants(match)
        return transition

    def _award_regular_point(
        self, match: MatchState, winner: PlayerSide, transition: ScoreTransition
    ) -> None:
        won = match.bump("points", winner)
        lost = match.game_points(winner.opponent)
        if won < 4 or won - lost < 2:
            return

        # Game over: flip server for the next game
        transition.game_won = True
        current = match.current_set
        current.add_game(winner)
        self._reset_game(match)
        match.server = match.server.opponent

        fmt = match.match_format
        tb_at = fmt.tiebreak_at_games
        if current.games_player1 == tb_at and current.games_player2 == tb_at:
            self._start_set_tiebreak(match, transition)
            return

        games, opp_games = current.games(winner), current.games(winner.opponent)
        if games >= fmt.games_to_win_set and games - opp_games >= 2:
            self._close_set(match, winner, transition)

    def _award_set_tiebreak_point(
        self, match: MatchState, winner: PlayerSide, transition: ScoreTransition
    ) -> None:
        won = match.bump("tiebreak_points", winner)
        lost = match.tiebreak_points(winner.opponent)
        if won < match.match_format.set_tiebreak_target or won - lost < 2:
            return

        current = match.current_set
        current.tiebreak_points_player1 = match.tiebreak_points_player1
        current.tiebreak_points_player2 = match.tiebreak_points_player2
        current.add_game(winner)
        transition.game_won = True

        # Whoever received first in the tiebreak serves first afterwards
        match.server = match.tiebreak_start_server.opponent
        self._reset_tiebreak(match)
        self._close_set(match, winner, transition)

    def _award_match_tiebreak_point(
        self, match: MatchState, winner: PlayerSide, transition: ScoreTransition
    ) -> None:
        won = match.bump("tiebreak_points", winner)
        lost = match.tiebreak_points(winner.opponent)
        if won < match.match_format.deciding_tiebreak_target or won - lost < 2:
            return

        # Decider row so reports can show the match tiebreak as a set
        last = match.sets[-1]
        match.sets.append(
            SetRecord(
                games_player1=last.games_player1,
                games_player2=last.games_player2,
                is_complete=True,
                tiebreak_played=True,
                tiebreak_points_player1=match.tiebreak_points_player1,
                tiebreak_points_player2=match.tiebreak_points_player2,
                is_match_tiebreak=True,
                winner=winner,
            )
        )
        match.set_stats_player1.append(PlayerStatistics())
        match.set_stats_player2.append(PlayerStatistics())
        match.bump("sets", winner)
        transition.set_completed = True
        logger.info(
            "Match tiebreak won by %s %d-%d",
            match.name_of(winner), match.tiebreak_points(winner), lost,
        )
        self._complete_match(match, winner, transition)

    # ── Set / match transitions ──────────────────────────────────────────────

    def _start_set_tiebreak(self, match: MatchState, transition: ScoreTransition) -> None:
        match.phase = MatchPhase.SET_TIEBREAK
        match.current_set.tiebreak_played = True
        self._reset_tiebreak(match)
        match.tiebreak_start_server = match.server
        transition.set_tiebreak_started = True
        logger.info(
            "Set %d tiebreak, %s to serve first",
            match.current_set_index + 1, match.name_of(match.server),
        )

    def _close_set(self, match: MatchState, winner: PlayerSide, transition: ScoreTransition) -> None:
        current = match.current_set
        current.is_complete = True
        current.winner = winner
        match.bump("sets", winner)
        transition.set_completed = True
        logger.info(
            "Set %d won by %s %d-%d",
            match.current_set_index + 1, match.name_of(winner),
            current.games(winner), current.games(winner.opponent),
        )

        fmt = match.match_format
        if match.sets_won(winner) >= fmt.sets_to_win:
            self._complete_match(match, winner, transition)
        elif (
            fmt.deciding_policy == DecidingPolicy.MATCH_TIEBREAK_10
            and match.completed_sets == 2
            and match.sets_player1 == 1
            and match.sets_player2 == 1
        ):
            match.phase = MatchPhase.MATCH_TIEBREAK
            self._reset_tiebreak(match)
            match.tiebreak_start_server = None  # chosen by the operator
            transition.match_tiebreak_started = True
            logger.info("Sets level at 1-1, match tiebreak to %d", fmt.deciding_tiebreak_target)
        else:
            self.start_new_set(match)

    def _complete_match(self, match: MatchState, winner: PlayerSide, transition: ScoreTransition) -> None:
        match.phase = MatchPhase.MATCH_COMPLETE
        match.status = MatchStatus.COMPLETED
        match.winner = winner
        match.completed_at = datetime.now(timezone.utc)
        transition.match_completed = True
        logger.info(
            "Match won by %s, sets %d-%d",
            match.name_of(winner), match.sets_won(winner), match.sets_won(winner.opponent),
        )

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _reset_game(self, match: MatchState) -> None:
        match.points_player1 = 0
        match.points_player2 = 0

    def _reset_tiebreak(self, match: MatchState) -> None:
        match.tiebreak_points_player1 = 0
        match.tiebreak_points_player2 = 0

    def _check_invariants(self, match: MatchState) -> None:
        fmt = match.match_format
        for record in match.sets:
            if not record.is_complete or record.is_match_tiebreak:
                continue
            w, l = record.games(record.winner), record.games(record.winner.opponent)
            if record.tiebreak_played:
                tw = getattr(record, f"tiebreak_points_{record.winner.value}")
                tl = getattr(record, f"tiebreak_points_{record.winner.opponent.value}")
                assert tw >= fmt.set_tiebreak_target and tw - tl >= 2, "tiebreak closed early"
                assert l == fmt.tiebreak_at_games, "tiebreak played off the trigger score"
            else:
                assert w >= fmt.games_to_win_set and w - l >= 2, "set closed without a 2-game lead"
        assert match.sets_player1 <= fmt.sets_to_win and match.sets_player2 <= fmt.sets_to_win
