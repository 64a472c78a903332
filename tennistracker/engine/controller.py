"""
Match Controller — Point transactions over one owned MatchState.

A point is submitted as a sequence of events:

    serve  ──(fault)──> second serve
      │                     │
      └──(in)──> return ──(in)──> rally

and stops early as soon as an event decides it. Before the first event the
controller snapshots the match for undo and tags the point (break / game /
set / match point). On resolution it attributes statistics, appends the log
entry and advances the score.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, TypeVar, Union

from tennistracker.engine.context import PointContext, classify_point
from tennistracker.engine.errors import (
    MatchNotStartedError,
    MatchOverError,
    PointSequenceError,
)
from tennistracker.engine.history import UndoHistory
from tennistracker.engine.rotation import is_change_of_ends, sync_tiebreak_server
from tennistracker.engine.scoring import ScoringEngine
from tennistracker.engine.stats_aggregator import StatsAggregator
from tennistracker.models.events import (
    SECOND_SERVE_OUTCOMES,
    PointEvents,
    PointRecord,
    PointStage,
    RallyOutcome,
    ReturnOutcome,
    ServeOutcome,
)
from tennistracker.models.match import (
    FormatChoice,
    MatchFormat,
    MatchPhase,
    MatchState,
    MatchStatus,
    Scoreboard,
    SubmissionResult,
    format_for_choice,
)
from tennistracker.models.player import PlayerSide, StatsPair

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


def _coerce(enum_cls: type[E], value, family: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        raise PointSequenceError(f"Expected a {family}, got {value!r}") from None


@dataclass
class _PendingPoint:
    """A point whose events are still arriving."""
    server: PlayerSide
    context: PointContext
    set_index: int
    game_index: int
    in_tiebreak: bool
    point_number: int
    stage: PointStage = PointStage.SERVE
    events: PointEvents = field(default_factory=PointEvents)


class MatchController:
    """
    Owns the match state, its undo history and the point in flight.

    Usage:
        ctl = MatchController()
        ctl.start_match(format_for_choice(1), "Alice", "Bob", "Club", PlayerSide.PLAYER1)
        ctl.submit_serve(ServeOutcome.FIRST_IN)
        ctl.submit_return(ReturnOutcome.RETURN_IN)
        ctl.submit_rally(RallyOutcome.SERVER_WINNER)
        print(ctl.scoreboard())
    """

    def __init__(self, on_change_ends: Optional[Callable[[int], None]] = None):
        self._match: Optional[MatchState] = None
        self.history = UndoHistory()
        self._engine = ScoringEngine()
        self._aggregator = StatsAggregator()
        self._pending: Optional[_PendingPoint] = None
        self._on_change_ends = on_change_ends

    # ── Match lifecycle ──────────────────────────────────────────────────────

    def start_match(
        self,
        match_format: Union[MatchFormat, FormatChoice, int, str, None] = None,
        player1_name: str = "Player 1",
        player2_name: str = "Player 2",
        location: str = "",
        first_server: PlayerSide = PlayerSide.PLAYER1,
    ) -> MatchState:
        """Initialize a new match and its first set."""
        if not isinstance(match_format, MatchFormat):
            match_format = format_for_choice(match_format)
        first_server = PlayerSide(first_server)
        match = MatchState(
            match_format=match_format,
            player1_name=player1_name,
            player2_name=player2_name,
            location=location,
            first_server=first_server,
            server=first_server,
            status=MatchStatus.IN_PROGRESS,
            started_at=datetime.now(timezone.utc),
        )
        self._engine.start_new_set(match)
        self._match = match
        self.history.clear()
        self._pending = None
        logger.info(
            "Match started: %s vs %s (%s), %s serving",
            player1_name, player2_name, match_format.choice.value, match.name_of(first_server),
        )
        return match

    def end_match(self) -> None:
        """Stop scoring now. Undo reopens the match at the previous point."""
        match = self._require_match()
        self.abort_point()
        if match.status == MatchStatus.IN_PROGRESS:
            match.status = MatchStatus.ENDED_EARLY
            logger.info("Match ended early at %s", match.score_display)

    def set_match_tiebreak_server(self, side: PlayerSide) -> None:
        """Choose who serves first in the deciding match tiebreak."""
        match = self._require_open_match()
        if match.phase != MatchPhase.MATCH_TIEBREAK:
            raise PointSequenceError("No match tiebreak in progress")
        if match.tiebreak_points_played > 0 or self._pending is not None:
            raise PointSequenceError("Match tiebreak server can only be chosen before its first point")
        side = PlayerSide(side)
        match.tiebreak_start_server = side
        match.server = side
        logger.info("Match tiebreak: %s to serve first", match.name_of(side))

    # ── Event submission ─────────────────────────────────────────────────────

    def submit_serve(self, outcome: ServeOutcome) -> SubmissionResult:
        outcome = _coerce(ServeOutcome, outcome, "serve outcome")
        pending = self._pending
        if pending is None:
            self._begin_point()
            pending = self._pending
        elif pending.stage != PointStage.SECOND_SERVE:
            raise PointSequenceError(f"Expected {pending.stage.value}, got serve outcome {outcome.value}")
        elif outcome not in SECOND_SERVE_OUTCOMES:
            raise PointSequenceError(f"After a first-serve fault only second_in or double_fault is allowed, got {outcome.value}")

        pending.events.serves.append(outcome)
        if outcome.winning_role is not None:
            return self._resolve()
        pending.stage = PointStage.RETURN if outcome.is_in else PointStage.SECOND_SERVE
        return self._in_progress()

    def submit_return(self, outcome: ReturnOutcome) -> SubmissionResult:
        outcome = _coerce(ReturnOutcome, outcome, "return outcome")
        pending = self._expect(PointStage.RETURN, outcome.value)
        pending.events.return_outcome = outcome
        if outcome.winning_role is not None:
            return self._resolve()
        pending.stage = PointStage.RALLY
        return self._in_progress()

    def submit_rally(
        self, outcome: RallyOutcome, net_player: Optional[PlayerSide] = None
    ) -> SubmissionResult:
        outcome = _coerce(RallyOutcome, outcome, "rally outcome")
        if net_player is not None:
            net_player = _coerce(PlayerSide, net_player, "net player")
        pending = self._expect(PointStage.RALLY, outcome.value)
        pending.events.rally_outcome = outcome
        pending.events.net_player = net_player
        return self._resolve()

    def abort_point(self) -> bool:
        """Back out of the point in flight. Returns False if there was none."""
        if self._pending is None:
            return False
        self.history.discard()
        self._pending = None
        logger.debug("Point aborted before resolution")
        return True

    def undo(self) -> bool:
        """Revert the last resolved point. Returns False when there is nothing to undo."""
        self._require_match()
        self.abort_point()
        snapshot = self.history.pop()
        if snapshot is None:
            logger.warning("Nothing to undo")
            return False
        self._match = snapshot
        logger.info("Undid last point, score now %s", snapshot.score_display)
        return True

    # ── Read accessors ───────────────────────────────────────────────────────

    @property
    def state(self) -> MatchState:
        return self._require_match()

    @property
    def phase(self) -> MatchPhase:
        return self._require_match().phase

    @property
    def awaiting(self) -> Optional[PointStage]:
        """Next expected event, or None when no more points can be played."""
        match = self._match
        if match is None or match.status != MatchStatus.IN_PROGRESS:
            return None
        if self._pending is not None:
            return self._pending.stage
        if match.phase == MatchPhase.MATCH_TIEBREAK and match.tiebreak_start_server is None:
            return PointStage.MATCH_TIEBREAK_SERVER
        return PointStage.SERVE

    @property
    def point_in_progress(self) -> bool:
        return self._pending is not None

    def scoreboard(self) -> Scoreboard:
        return self._require_match().scoreboard()

    def statistics(self, set_index: Optional[int] = None) -> StatsPair:
        """Match totals, or one set's statistics when set_index is given (0-based)."""
        match = self._require_match()
        if set_index is None:
            p1, p2 = match.match_stats_player1, match.match_stats_player2
        else:
            if not 0 <= set_index < len(match.sets):
                raise IndexError(f"No set {set_index + 1}; {len(match.sets)} set(s) played")
            p1 = match.set_stats(PlayerSide.PLAYER1, set_index)
            p2 = match.set_stats(PlayerSide.PLAYER2, set_index)
        return StatsPair(
            player1_name=match.player1_name,
            player2_name=match.player2_name,
            player1=p1.model_copy(),
            player2=p2.model_copy(),
            set_index=set_index,
        )

    def point_log(self) -> list[PointRecord]:
        return list(self._require_match().points_log)

    def is_match_complete(self) -> bool:
        return self._require_match().status == MatchStatus.COMPLETED

    def is_set_tiebreak_active(self) -> bool:
        return self._require_match().phase == MatchPhase.SET_TIEBREAK

    def is_match_tiebreak_active(self) -> bool:
        return self._require_match().phase == MatchPhase.MATCH_TIEBREAK

    # ── Internals ────────────────────────────────────────────────────────────

    def _require_match(self) -> MatchState:
        if self._match is None:
            raise MatchNotStartedError("No match started")
        return self._match

    def _require_open_match(self) -> MatchState:
        match = self._require_match()
        if match.status != MatchStatus.IN_PROGRESS:
            raise MatchOverError(f"Match is {match.status.value}")
        return match

    def _expect(self, stage: PointStage, got: str) -> _PendingPoint:
        self._require_open_match()
        pending = self._pending
        if pending is None:
            raise PointSequenceError(f"No point in progress; a serve outcome must come first, got {got}")
        if pending.stage != stage:
            raise PointSequenceError(f"Expected {pending.stage.value}, got {got}")
        return pending

    def _begin_point(self) -> None:
        match = self._require_open_match()
        if match.phase == MatchPhase.MATCH_TIEBREAK and match.tiebreak_start_server is None:
            raise PointSequenceError("Choose the match tiebreak's first server before its first point")

        self.history.begin(match)
        sync_tiebreak_server(match)
        current = match.current_set
        in_tiebreak = match.in_tiebreak
        if in_tiebreak:
            point_number = match.tiebreak_points_played + 1
        else:
            point_number = match.points_player1 + match.points_player2 + 1
        self._pending = _PendingPoint(
            server=match.server,
            context=classify_point(match),
            set_index=match.current_set_index,
            game_index=current.games_player1 + current.games_player2,
            in_tiebreak=in_tiebreak,
            point_number=point_number,
        )

    def _in_progress(self) -> SubmissionResult:
        return SubmissionResult(
            resolved=False,
            awaiting=self._pending.stage,
            phase=self._match.phase,
        )

    def _resolve(self) -> SubmissionResult:
        match = self._match
        pending = self._pending
        winner = self._aggregator.record_point(match, pending.events, pending.server, pending.context)

        record = PointRecord(
            set_index=pending.set_index,
            game_index=pending.game_index,
            in_tiebreak=pending.in_tiebreak,
            point_number=pending.point_number,
            server=pending.server,
            serve_type=pending.events.serve_type,
            events=pending.events.model_copy(deep=True),
            winner=winner,
            was_break_point=pending.context.is_break_point,
            was_game_point=pending.context.is_game_point,
            was_set_point=pending.context.is_set_point,
            was_match_point=pending.context.is_match_point,
        )
        match.points_log.append(record)
        self._pending = None

        transition = self._engine.award_point(match, winner)
        if match.in_tiebreak and match.tiebreak_start_server is not None:
            sync_tiebreak_server(match)
            played = match.tiebreak_points_played
            if is_change_of_ends(played):
                logger.info("Change ends (tiebreak, after %d points)", played)
                if self._on_change_ends is not None:
                    self._on_change_ends(played)

        assert len(self.history) == len(match.points_log), "undo history out of step with point log"
        logger.debug(
            "Point %d to %s (%s), score %s",
            len(match.points_log), match.name_of(winner),
            record.events.terminal.value, match.score_display,
        )
        return SubmissionResult(
            resolved=True,
            awaiting=self.awaiting,
            phase=match.phase,
            record=record,
            set_completed=transition.set_completed,
        )
